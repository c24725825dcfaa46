"""
Drawing canvas for floor-plan and piping layouts.

Uses Qt's Graphics View Framework to render the drawing objects
(shape frames, connectors, lines and polyline walls) and to drive the
interactive wall tools. DrawingScene implements the EditorHost protocol
used by WallEditor.
"""

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import (
    QPainter, QPen, QBrush, QColor, QPainterPath, QWheelEvent, QMouseEvent, QKeyEvent
)
from PyQt6.QtWidgets import (
    QGraphicsView, QGraphicsScene, QGraphicsItem, QGraphicsPathItem,
    QGraphicsSceneMouseEvent
)

from models.drawing import (
    DrawingModel, DrawingObject, BaseClass, ObjectType, EditState, Point, NO_OBJECT,
)
from services.graph_repository import DrawingRepository
from services.polyline import poly_frame
from services.selection import get_next_select
from services.shift_engine import ShiftOutcome, make_room_on_line
from services.settings_manager import get_settings
from services.wall_editor import WallEditor, DrawEvent, GestureHandler, ensure_cubicle_behind_outline

logger = logging.getLogger(__name__)


COLORS = {
    BaseClass.SHAPE: QColor("#4A90D9"),      # Blue
    BaseClass.CONNECTOR: QColor("#7B68EE"),  # Purple
    BaseClass.LINE: QColor("#6B7280"),       # Gray
    ObjectType.WALL: QColor("#111827"),      # Near black
    ObjectType.MEASURE_LINE: QColor("#F59E0B"),
    ObjectType.MEASURE_AREA: QColor("#06B6D4"),
    "selection": QColor("#3B82F6"),
    "armed": QColor("#10B981"),              # Wall waiting for a corner/split click
    "grid": QColor("#E5E7EB"),
    "background": QColor("#FAFAFA"),
}


class DrawingObjectItem(QGraphicsPathItem):
    """
    Visual representation of one DrawingObject.

    Shapes and connectors draw their frame, lines and walls draw their
    point list (or frame diagonal when they have no points).
    """

    def __init__(self, obj: DrawingObject, parent: Optional[QGraphicsItem] = None):
        super().__init__(parent)
        self.drawing_object = obj
        self._armed = False
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
        self.setAcceptHoverEvents(True)
        self.update_geometry()

    @property
    def object_id(self) -> int:
        return self.drawing_object.id

    def set_armed(self, armed: bool):
        self._armed = armed
        self._update_pen()

    def _update_pen(self):
        obj = self.drawing_object
        color = COLORS.get(obj.object_type, COLORS[obj.base_class])
        if self._armed:
            color = COLORS["armed"]
        width = max(obj.line_width, 1.0) if obj.is_line else 1.5
        pen = QPen(color, width)
        pen.setCapStyle(Qt.PenCapStyle.FlatCap)
        pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
        self.setPen(pen)

    def update_geometry(self):
        """Rebuild the path from the model object."""
        obj = self.drawing_object
        path = QPainterPath()
        frame = obj.frame

        if obj.is_line:
            points = obj.points or [Point(frame.x, frame.y), Point(frame.right, frame.bottom)]
            path.moveTo(points[0].x, points[0].y)
            for p in points[1:]:
                path.lineTo(p.x, p.y)
            if obj.closed:
                path.closeSubpath()
        elif obj.is_connector:
            path.addRoundedRect(QRectF(frame.x, frame.y, frame.width, frame.height), 4, 4)
        else:
            path.addRect(QRectF(frame.x, frame.y, frame.width, frame.height))

        self.setPath(path)
        self._update_pen()
        if obj.object_type == ObjectType.MEASURE_AREA:
            color = QColor(COLORS[ObjectType.MEASURE_AREA])
            color.setAlphaF(get_settings().walls.measure_area_opacity)
            self.setBrush(QBrush(color))
        else:
            self.setBrush(QBrush(Qt.BrushStyle.NoBrush))

    def paint(self, painter: QPainter, option, widget=None):
        if self.isSelected():
            pen = QPen(COLORS["selection"], self.pen().widthF() + 2)
            painter.setPen(pen)
            painter.drawPath(self.path())
        super().paint(painter, option, widget)


class DrawingScene(QGraphicsScene):
    """
    Scene holding every drawing object item.

    Also hosts the wall editor: new objects drawn by dragging, one-shot
    gesture handlers on walls and edit mode broadcasts.
    """

    # Signals
    objectAdded = pyqtSignal(object)      # DrawingObject
    objectRemoved = pyqtSignal(int)       # object id
    objectChanged = pyqtSignal(int)       # object id
    editModeChanged = pyqtSignal(object)  # EditState
    drawFinished = pyqtSignal(object)     # DrawEvent

    def __init__(self, model: DrawingModel, parent=None):
        super().__init__(parent)
        self.model = model
        self.repo = DrawingRepository(model)
        self.wall_editor = WallEditor(self.repo, self, get_settings().walls, self)

        self._items: dict[int, DrawingObjectItem] = {}
        self._edit_mode = EditState.DEFAULT
        self._gesture_handlers: dict[int, GestureHandler] = {}

        # Interactive draw state
        self._drawing: Optional[DrawingObject] = None
        self._draw_sticky = False
        self._draw_started = False

        self.drawFinished.connect(self.wall_editor.post_object_draw)
        self.editModeChanged.connect(self.wall_editor.notify_set_edit_mode)

        self.setBackgroundBrush(COLORS["background"])
        self.setSceneRect(QRectF(-2000, -2000, 4000, 4000))
        self.rebuild()

    @property
    def edit_mode(self) -> EditState:
        return self._edit_mode

    def rebuild(self):
        """Recreate all items from the model in z-order."""
        for item in self._items.values():
            self.removeItem(item)
        self._items.clear()
        for object_id in self.model.z_order:
            obj = self.model.get_object(object_id)
            if obj is not None:
                self._add_item(obj)

    def _add_item(self, obj: DrawingObject) -> DrawingObjectItem:
        item = DrawingObjectItem(obj)
        self.addItem(item)
        self._items[obj.id] = item
        self._restack()
        return item

    def _restack(self):
        for z, object_id in enumerate(self.model.z_order):
            item = self._items.get(object_id)
            if item is not None:
                item.setZValue(z)

    def item_for(self, object_id: int) -> Optional[DrawingObjectItem]:
        return self._items.get(object_id)

    def refresh_dirty(self):
        """Update the items of objects flagged dirty and clear the flags."""
        for object_id, item in self._items.items():
            obj = item.drawing_object
            if obj.dirty:
                item.update_geometry()
                self.repo.mark_dirty(object_id, False)
                self.objectChanged.emit(object_id)

    # ------------------------------------------------------------------
    # EditorHost
    # ------------------------------------------------------------------

    def draw_new_object(self, obj: DrawingObject, sticky: bool) -> DrawingObject:
        """Add obj to the model and let the user drag out its geometry."""
        self.model.add_object(obj)
        self._add_item(obj)
        self._drawing = obj
        self._draw_sticky = sticky
        self._draw_started = False
        self.objectAdded.emit(obj)
        return obj

    def set_edit_mode(self, mode: EditState) -> None:
        if mode == self._edit_mode:
            return
        self._edit_mode = mode
        self.editModeChanged.emit(mode)

    def selected_ids(self) -> list[int]:
        return [item.object_id for item in self.selectedItems() if isinstance(item, DrawingObjectItem)]

    def select_objects(self, object_ids: list[int]) -> None:
        self.clearSelection()
        for object_id in object_ids:
            item = self._items.get(object_id)
            if item is not None:
                item.setSelected(True)
        self.model.selected_ids = [oid for oid in object_ids if oid in self._items]

    def cancel_operation(self) -> None:
        """Discard an object still being drawn."""
        if self._drawing is not None and not self._draw_started:
            self._discard(self._drawing.id)
        self._drawing = None
        self._draw_started = False

    def reset_object_draw(self) -> None:
        """Stop tracking the pending draw, dropping it if it is still a placeholder."""
        obj = self._drawing
        if obj is not None and not self._draw_started and obj.frame.width <= 1 and obj.frame.height <= 1:
            self._discard(obj.id)
        self._drawing = None
        self._draw_sticky = False
        self._draw_started = False

    def visible_ids(self) -> list[int]:
        return [oid for oid in self.model.z_order if oid in self._items and self._items[oid].isVisible()]

    def attach_gesture_handler(self, object_id: int, handler: GestureHandler) -> None:
        self._gesture_handlers[object_id] = handler
        item = self._items.get(object_id)
        if item is not None:
            item.set_armed(True)

    def detach_gesture_handlers(self) -> None:
        for object_id in self._gesture_handlers:
            item = self._items.get(object_id)
            if item is not None:
                item.set_armed(False)
        self._gesture_handlers.clear()

    def exception_cleanup(self, error: Exception) -> None:
        logger.debug(f"Cleaning up after {type(error).__name__}")
        self.reset_object_draw()
        self.refresh_dirty()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _discard(self, object_id: int):
        item = self._items.pop(object_id, None)
        if item is not None:
            self.removeItem(item)
        if self.model.delete_object(object_id) is not None:
            self.objectRemoved.emit(object_id)

    def delete_selected(self) -> int:
        """
        Delete the selected objects and select the next sibling.

        Returns the id that was selected afterwards (or NO_OBJECT).
        """
        selected = self.selected_ids()
        if not selected:
            return NO_OBJECT

        next_id = get_next_select(self.repo, selected[-1])
        if next_id in selected:
            next_id = NO_OBJECT

        for object_id in selected:
            self._discard(object_id)

        self.select_objects([next_id] if next_id >= 0 else [])
        return next_id

    def make_room_on_selected_line(self) -> ShiftOutcome:
        """Push the shapes past the selected line apart and redraw them."""
        line_id = NO_OBJECT
        for object_id in self.selected_ids():
            obj = self.model.get_object(object_id)
            if obj is not None and obj.is_line:
                line_id = object_id
                break
        if line_id < 0:
            return ShiftOutcome.SKIPPED

        outcome = make_room_on_line(self.repo, line_id, settings=get_settings().layout)
        self.refresh_dirty()
        return outcome

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent):
        pos = event.scenePos()
        point = Point(pos.x(), pos.y())

        if event.button() == Qt.MouseButton.LeftButton and self._gesture_handlers:
            for item in self.items(pos):
                if isinstance(item, DrawingObjectItem) and item.object_id in self._gesture_handlers:
                    handler = self._gesture_handlers[item.object_id]
                    try:
                        handler(item.object_id, point)
                    except Exception:
                        logger.exception(f"Wall gesture on {item.object_id} failed")
                    self.refresh_dirty()
                    event.accept()
                    return

        if event.button() == Qt.MouseButton.LeftButton and self._drawing is not None:
            obj = self._drawing
            self._draw_started = True
            if obj.is_line:
                obj.points = [Point(point.x, point.y), Point(point.x, point.y)]
                obj.frame = poly_frame(obj.points)
            else:
                obj.frame.x, obj.frame.y = point.x, point.y
                obj.frame.width = obj.frame.height = 0
            self._items[obj.id].update_geometry()
            event.accept()
            return

        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QGraphicsSceneMouseEvent):
        if self._drawing is not None and self._draw_started:
            obj = self._drawing
            pos = event.scenePos()
            if obj.is_line:
                obj.points[-1] = Point(pos.x(), pos.y())
                obj.frame = poly_frame(obj.points)
            else:
                obj.frame.width = max(pos.x() - obj.frame.x, 0)
                obj.frame.height = max(pos.y() - obj.frame.y, 0)
            self._items[obj.id].update_geometry()
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent):
        if self._drawing is not None and self._draw_started and event.button() == Qt.MouseButton.LeftButton:
            obj = self._drawing
            self._drawing = None
            self._draw_started = False
            if obj.frame.width < 1 and obj.frame.height < 1:
                self._discard(obj.id)
                self.drawFinished.emit(DrawEvent.ABORT)
            else:
                ensure_cubicle_behind_outline(self.model, obj.id)
                self._restack()
                self.drawFinished.emit(DrawEvent.RELEASE)
            event.accept()
            return
        super().mouseReleaseEvent(event)


class DrawingCanvas(QGraphicsView):
    """
    Main canvas widget for viewing and editing a drawing.

    Provides zooming, panning, grid background and keyboard shortcuts
    for the wall tools.
    """

    # Signals
    itemSelected = pyqtSignal(object)  # DrawingObject or None

    def __init__(self, model: Optional[DrawingModel] = None, parent=None):
        super().__init__(parent)

        self.drawing_scene = DrawingScene(model or DrawingModel())
        self.setScene(self.drawing_scene)

        # View settings
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)
        self.setDragMode(QGraphicsView.DragMode.RubberBandDrag)

        # State
        self._zoom_factor = 1.0
        self._is_panning = False
        self._last_pan_pos = QPointF()

        self.drawing_scene.selectionChanged.connect(self._on_selection_changed)

    @property
    def wall_editor(self) -> WallEditor:
        return self.drawing_scene.wall_editor

    def drawBackground(self, painter: QPainter, rect: QRectF):
        """Draw grid background."""
        super().drawBackground(painter, rect)

        ui = get_settings().settings.ui
        if not ui.show_grid:
            return
        grid_size = max(ui.grid_size, 5)

        left = int(rect.left()) - (int(rect.left()) % grid_size)
        top = int(rect.top()) - (int(rect.top()) % grid_size)

        painter.setPen(QPen(COLORS["grid"], 1))

        x = left
        while x < rect.right():
            painter.drawLine(int(x), int(rect.top()), int(x), int(rect.bottom()))
            x += grid_size

        y = top
        while y < rect.bottom():
            painter.drawLine(int(rect.left()), int(y), int(rect.right()), int(y))
            y += grid_size

    def _on_selection_changed(self):
        selected = self.drawing_scene.selectedItems()
        if len(selected) == 1 and isinstance(selected[0], DrawingObjectItem):
            self.itemSelected.emit(selected[0].drawing_object)
        else:
            self.itemSelected.emit(None)

    def wheelEvent(self, event: QWheelEvent):
        """Handle zoom with mouse wheel."""
        factor = 1.15

        if event.angleDelta().y() > 0:
            self._zoom_factor *= factor
            self.scale(factor, factor)
        else:
            self._zoom_factor /= factor
            self.scale(1 / factor, 1 / factor)

        # Clamp zoom
        self._zoom_factor = min(max(self._zoom_factor, 0.1), 5)

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.MiddleButton:
            self._is_panning = True
            self._last_pan_pos = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._is_panning:
            delta = event.position() - self._last_pan_pos
            self._last_pan_pos = event.position()
            self.horizontalScrollBar().setValue(
                self.horizontalScrollBar().value() - int(delta.x())
            )
            self.verticalScrollBar().setValue(
                self.verticalScrollBar().value() - int(delta.y())
            )
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if self._is_panning and event.button() == Qt.MouseButton.MiddleButton:
            self._is_panning = False
            self.unsetCursor()
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def keyPressEvent(self, event: QKeyEvent):
        """Handle keyboard shortcuts."""
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.drawing_scene.delete_selected()
            event.accept()
        elif event.key() == Qt.Key.Key_Escape:
            if self.drawing_scene.edit_mode != EditState.DEFAULT or self.wall_editor.is_adding_walls:
                self.drawing_scene.drawFinished.emit(DrawEvent.CANCEL)
                self.wall_editor.cancel()
            else:
                self.drawing_scene.clearSelection()
            event.accept()
        else:
            super().keyPressEvent(event)

    def fit_contents(self):
        """Fit view to show all items."""
        self.fitInView(self.drawing_scene.itemsBoundingRect().adjusted(-50, -50, 50, 50),
                       Qt.AspectRatioMode.KeepAspectRatio)

    def reset_view(self):
        """Reset to default zoom and position."""
        self.resetTransform()
        self._zoom_factor = 1.0
        self.centerOn(0, 0)
