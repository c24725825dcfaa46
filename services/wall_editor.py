"""
Wall editing modes.

WallEditor is the modal state machine behind the floor-plan wall tools:
adding walls one after another, adding a corner to a wall and splitting
a wall. Exactly one mode is active at a time and every gesture ends back
in IDLE, also when the gesture fails.

The editor talks to the canvas through the EditorHost protocol so it can
be driven by the Qt canvas or by a test double.
"""

import logging
from enum import Enum, auto
from typing import Callable, Optional, Protocol

from PyQt6.QtCore import QObject, pyqtSignal

from models.drawing import (
    DrawingModel, DrawingObject, BaseClass, ObjectType, EditState, Point, Rect, NO_OBJECT,
)
from services.graph_repository import GraphRepository
from services.polyline import insert_corner, hit_segment, split_polyline, poly_frame
from services.settings_manager import WallSettings

logger = logging.getLogger(__name__)


GestureHandler = Callable[[int, Point], bool]


class WallEditMode(Enum):
    """Active wall tool."""
    IDLE = auto()
    ADDING_WALLS = auto()
    ADDING_CORNER = auto()
    SPLITTING_WALL = auto()


class DrawEvent(Enum):
    """How an interactive draw ended."""
    RELEASE = auto()   # Mouse released, object completed
    CANCEL = auto()    # Escape or tool change
    ABORT = auto()     # Draw discarded (too small, error)


# Edit modes that leave the active wall tool alone
_PASSIVE_EDIT_STATES = (
    EditState.EDIT,
    EditState.DEFAULT,
    EditState.LINK_CONNECT,
    EditState.LINK_JOIN,
)


class EditorHost(Protocol):
    """Canvas operations the wall editor relies on."""

    def draw_new_object(self, obj: DrawingObject, sticky: bool) -> DrawingObject:
        ...

    def set_edit_mode(self, mode: EditState) -> None:
        ...

    def selected_ids(self) -> list[int]:
        ...

    def select_objects(self, object_ids: list[int]) -> None:
        ...

    def cancel_operation(self) -> None:
        ...

    def reset_object_draw(self) -> None:
        ...

    def visible_ids(self) -> list[int]:
        ...

    def attach_gesture_handler(self, object_id: int, handler: GestureHandler) -> None:
        ...

    def detach_gesture_handlers(self) -> None:
        ...

    def exception_cleanup(self, error: Exception) -> None:
        ...


class WallEditor(QObject):
    """
    Modal state machine for wall, corner and split tools.

    Signals:
        modeChanged(object): Emitted with the new WallEditMode
        wallAdded(object): Emitted with each new wall DrawingObject
        wallChanged(int): Emitted with the id of a wall changed by a gesture
    """

    modeChanged = pyqtSignal(object)
    wallAdded = pyqtSignal(object)
    wallChanged = pyqtSignal(int)

    def __init__(
        self,
        repo: GraphRepository,
        host: EditorHost,
        settings: Optional[WallSettings] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self._repo = repo
        self._host = host
        self._settings = settings or WallSettings()
        self._mode = WallEditMode.IDLE
        self._saved_selection: list[int] = []

    @property
    def mode(self) -> WallEditMode:
        return self._mode

    @property
    def is_adding_walls(self) -> bool:
        return self._mode == WallEditMode.ADDING_WALLS

    def _set_mode(self, mode: WallEditMode):
        if mode == self._mode:
            return
        logger.info(f"Wall editor mode {self._mode.name} -> {mode.name}")
        self._mode = mode
        self.modeChanged.emit(mode)

    # ------------------------------------------------------------------
    # Adding walls
    # ------------------------------------------------------------------

    def start_adding_walls(self) -> bool:
        """Enter ADDING_WALLS and start the first wall. No-op if already adding."""
        if self._mode == WallEditMode.ADDING_WALLS:
            return False
        if self._mode != WallEditMode.IDLE:
            self.cancel()
        self._saved_selection = list(self._host.selected_ids())
        self._set_mode(WallEditMode.ADDING_WALLS)
        self.add_wall()
        return True

    def add_wall(self) -> DrawingObject:
        """Start drawing one wall segment."""
        wall = DrawingObject(
            base_class=BaseClass.LINE,
            object_type=ObjectType.WALL,
            frame=Rect(0, 0, 1, 1),
            points=[Point(0, 0), Point(0, 0)],
            line_width=self._settings.effective_thickness(),
        )
        wall = self._host.draw_new_object(wall, True)
        self._host.set_edit_mode(EditState.EDIT)
        self._host.select_objects(list(self._saved_selection))
        self.wallAdded.emit(wall)
        return wall

    def stop_adding_walls(self):
        """
        Leave ADDING_WALLS and restore the previous selection.

        Outside ADDING_WALLS this cancels whichever tool is active.
        """
        if self._mode == WallEditMode.ADDING_WALLS:
            self._set_mode(WallEditMode.IDLE)
            if self._host.selected_ids():
                self._host.reset_object_draw()
            else:
                self._host.cancel_operation()
            self._host.set_edit_mode(EditState.DEFAULT)
            self._host.select_objects(list(self._saved_selection))
            self._saved_selection = []
        elif self._mode == WallEditMode.ADDING_CORNER:
            self.add_corner_cancel()
        elif self._mode == WallEditMode.SPLITTING_WALL:
            self.split_wall_cancel()
        else:
            self._host.cancel_operation()

    def cancel_object_draw(self):
        self.stop_adding_walls()

    def cancel(self):
        """Return to IDLE from any mode."""
        if self._mode != WallEditMode.IDLE:
            self.stop_adding_walls()

    def post_object_draw(self, event: DrawEvent):
        """Called by the canvas whenever an interactive draw ends."""
        if self._mode != WallEditMode.ADDING_WALLS:
            return
        if event == DrawEvent.RELEASE:
            self.add_wall()
        else:
            self.stop_adding_walls()

    # ------------------------------------------------------------------
    # Corner / split gestures
    # ------------------------------------------------------------------

    def _arm_walls(self, handler: GestureHandler) -> int:
        count = 0
        for object_id in self._host.visible_ids():
            obj = self._repo.resolve(object_id)
            if obj is None or obj.locked or obj.object_type != ObjectType.WALL:
                continue
            self._host.attach_gesture_handler(object_id, handler)
            count += 1
        return count

    def _finish_gesture(self):
        self._host.detach_gesture_handlers()
        self._host.set_edit_mode(EditState.DEFAULT)
        # Objects created by the gesture itself are complete, not pending draws
        self._host.reset_object_draw()
        self._host.cancel_operation()
        self._set_mode(WallEditMode.IDLE)

    def add_corner_start(self) -> int:
        """
        Enter ADDING_CORNER.

        Every visible, unlocked wall gets a one-shot gesture handler.
        Returns the number of walls armed.
        """
        self.cancel()
        self._host.cancel_operation()
        self._host.set_edit_mode(EditState.EDIT)
        armed = self._arm_walls(self.add_corner)
        self._set_mode(WallEditMode.ADDING_CORNER)
        logger.debug(f"Corner tool armed on {armed} walls")
        return armed

    def add_corner(self, target_id: int, hit_point: Point) -> bool:
        """
        Insert a corner into a wall at hit_point.

        Always returns to IDLE. Errors are passed to the host's
        exception_cleanup and raised again.
        """
        try:
            changed = self._insert_corner(target_id, hit_point)
        except Exception as error:
            self._finish_gesture()
            self._host.exception_cleanup(error)
            raise
        self._finish_gesture()
        return changed

    def _insert_corner(self, target_id: int, hit_point: Point) -> bool:
        wall = self._repo.resolve(target_id, for_write=True)
        if wall is None or not wall.points:
            return False
        index = insert_corner(wall, hit_point)
        if index < 0:
            return False
        self._repo.mark_dirty(target_id, True)
        self.wallChanged.emit(target_id)
        return True

    def add_corner_cancel(self):
        self._finish_gesture()

    def split_wall_start(self) -> int:
        """Enter SPLITTING_WALL, arming every visible, unlocked wall."""
        self.cancel()
        self._host.cancel_operation()
        self._host.set_edit_mode(EditState.EDIT)
        armed = self._arm_walls(self.split_wall)
        self._set_mode(WallEditMode.SPLITTING_WALL)
        logger.debug(f"Split tool armed on {armed} walls")
        return armed

    def split_wall(self, target_id: int, hit_point: Point) -> bool:
        """
        Split a wall at the segment under hit_point.

        A closed wall is opened at that segment; an open wall is cut in two
        and the second half is added as a new wall. Always returns to IDLE.
        """
        try:
            changed = self._split(target_id, hit_point)
        except Exception as error:
            self._finish_gesture()
            self._host.exception_cleanup(error)
            raise
        self._finish_gesture()
        return changed

    def _split(self, target_id: int, hit_point: Point) -> bool:
        wall = self._repo.resolve(target_id, for_write=True)
        if wall is None or len(wall.points) < 2:
            return False
        segment = hit_segment(wall.points, wall.closed, hit_point)
        if segment < 0:
            return False

        pieces = split_polyline(wall.points, wall.closed, segment, hit_point)
        wall.points = pieces[0]
        wall.frame = poly_frame(wall.points)
        if wall.closed:
            wall.closed = False
        elif len(pieces) > 1:
            second = DrawingObject(
                base_class=wall.base_class,
                object_type=wall.object_type,
                points=pieces[1],
                frame=poly_frame(pieces[1]),
                line_width=wall.line_width,
            )
            second = self._host.draw_new_object(second, False)
            self.wallAdded.emit(second)

        self._repo.mark_dirty(target_id, True)
        self.wallChanged.emit(target_id)
        return True

    def split_wall_cancel(self):
        self._finish_gesture()

    # ------------------------------------------------------------------
    # Notifications and measuring tools
    # ------------------------------------------------------------------

    def notify_set_edit_mode(self, mode: EditState) -> bool:
        """
        React to an editor-wide edit mode change.

        Returns True if the active tool was cancelled.
        """
        if mode in _PASSIVE_EDIT_STATES:
            return False
        if self._mode == WallEditMode.IDLE:
            return False
        self.cancel()
        return True

    def add_measure_line(self) -> DrawingObject:
        """Start drawing a measuring tape line."""
        self.cancel()
        line = DrawingObject(
            base_class=BaseClass.LINE,
            object_type=ObjectType.MEASURE_LINE,
            frame=Rect(0, 0, 1, 1),
            points=[Point(0, 0), Point(0, 0)],
            line_width=self._settings.measure_line_thickness,
        )
        return self._host.draw_new_object(line, False)

    def add_measure_area(self) -> DrawingObject:
        """Start drawing an area measurement rectangle."""
        self.cancel()
        area = DrawingObject(
            base_class=BaseClass.SHAPE,
            object_type=ObjectType.MEASURE_AREA,
            frame=Rect(0, 0, 1, 1),
        )
        return self._host.draw_new_object(area, False)


def ensure_cubicle_behind_outline(model: DrawingModel, object_id: int) -> bool:
    """
    Keep a closed wall (cubicle) behind the closed wall enclosing it.

    Only the first enclosing outline in z-order is considered. If the
    cubicle is in front of it, the cubicle is moved directly behind the
    outline. Returns True if z-order changed.
    """
    target = model.get_object(object_id)
    if target is None or target.object_type != ObjectType.WALL or not target.closed:
        return False

    for index, other_id in enumerate(model.z_order):
        if other_id == object_id:
            continue
        other = model.get_object(other_id)
        if other is None or other.object_type != ObjectType.WALL or not other.closed:
            continue
        if not other.frame.contains_rect(target.frame):
            continue

        target_index = model.z_order.index(object_id) if object_id in model.z_order else NO_OBJECT
        if target_index < 0 or target_index < index:
            return False
        model.z_order.remove(object_id)
        model.z_order.insert(model.z_order.index(other_id), object_id)
        return True

    return False
