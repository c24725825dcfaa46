"""
Unit tests for the wall editor state machine.

The editor runs against a recording host double, so no Qt application or
display is needed.
"""

import pytest
from models.drawing import DrawingObject, EditState, ObjectType, Point, NO_OBJECT
from services.graph_repository import DrawingRepository
from services.settings_manager import WallSettings
from services.wall_editor import (
    WallEditor, WallEditMode, DrawEvent, ensure_cubicle_behind_outline,
)


class RecordingHost:
    """EditorHost double that applies draws to a model and records calls."""

    def __init__(self, model):
        self.model = model
        self.selection: list[int] = []
        self.edit_modes: list[EditState] = []
        self.handlers: dict = {}
        self.drawn: list[DrawingObject] = []
        self.cancelled = 0
        self.resets = 0
        self.errors: list[Exception] = []

    def draw_new_object(self, obj, sticky):
        self.model.add_object(obj)
        self.drawn.append(obj)
        return obj

    def set_edit_mode(self, mode):
        self.edit_modes.append(mode)

    def selected_ids(self):
        return list(self.selection)

    def select_objects(self, object_ids):
        self.selection = list(object_ids)

    def cancel_operation(self):
        self.cancelled += 1

    def reset_object_draw(self):
        self.resets += 1

    def visible_ids(self):
        return list(self.model.z_order)

    def attach_gesture_handler(self, object_id, handler):
        self.handlers[object_id] = handler

    def detach_gesture_handlers(self):
        self.handlers.clear()

    def exception_cleanup(self, error):
        self.errors.append(error)


class FailingRepository(DrawingRepository):
    """Repository whose write lookups fail."""

    def resolve(self, object_id, for_write=False):
        if for_write:
            raise RuntimeError("store unavailable")
        return super().resolve(object_id, for_write)


@pytest.fixture
def host(builder):
    return RecordingHost(builder.model)


@pytest.fixture
def editor(builder, host):
    return WallEditor(builder.repo, host, WallSettings(wall_thickness=10.0))


@pytest.fixture
def modes(editor):
    seen = []
    editor.modeChanged.connect(seen.append)
    return seen


class TestAddingWalls:
    """Tests for the ADDING_WALLS mode."""

    def test_start_adds_first_wall(self, editor, host, modes):
        host.selection = [42]
        assert editor.start_adding_walls()

        assert editor.mode == WallEditMode.ADDING_WALLS
        assert modes == [WallEditMode.ADDING_WALLS]
        assert len(host.drawn) == 1
        wall = host.drawn[0]
        assert wall.object_type == ObjectType.WALL
        assert wall.is_line
        assert wall.line_width == 10.0
        assert host.edit_modes[-1] == EditState.EDIT
        assert host.selection == [42]

    def test_start_twice_is_noop(self, editor, host):
        editor.start_adding_walls()
        assert not editor.start_adding_walls()
        assert len(host.drawn) == 1

    def test_release_starts_next_wall(self, editor, host):
        editor.start_adding_walls()
        editor.post_object_draw(DrawEvent.RELEASE)
        editor.post_object_draw(DrawEvent.RELEASE)
        assert len(host.drawn) == 3
        assert editor.is_adding_walls

    def test_other_event_stops_and_restores_selection(self, editor, host, modes):
        host.selection = [7, 8]
        editor.start_adding_walls()
        host.selection = []
        editor.post_object_draw(DrawEvent.CANCEL)

        assert editor.mode == WallEditMode.IDLE
        assert modes == [WallEditMode.ADDING_WALLS, WallEditMode.IDLE]
        assert host.selection == [7, 8]
        assert host.edit_modes[-1] == EditState.DEFAULT
        assert host.cancelled == 1

    def test_post_draw_ignored_when_idle(self, editor, host):
        editor.post_object_draw(DrawEvent.RELEASE)
        assert host.drawn == []
        assert editor.mode == WallEditMode.IDLE

    def test_cancel_object_draw(self, editor):
        editor.start_adding_walls()
        editor.cancel_object_draw()
        assert editor.mode == WallEditMode.IDLE


class TestCornerAndSplit:
    """Tests for ADDING_CORNER and SPLITTING_WALL gestures."""

    def test_corner_start_arms_unlocked_walls(self, builder, editor, host):
        wall = builder.wall([(0, 0), (100, 0)])
        builder.wall([(0, 50), (100, 50)], locked=True)
        builder.shape(200, 200)

        assert editor.add_corner_start() == 1
        assert editor.mode == WallEditMode.ADDING_CORNER
        assert list(host.handlers) == [wall]

    def test_corner_start_leaves_adding_walls(self, builder, editor, host):
        builder.wall([(0, 0), (100, 0)])
        editor.start_adding_walls()
        editor.add_corner_start()
        assert editor.mode == WallEditMode.ADDING_CORNER

    def test_add_corner(self, builder, editor, host, modes):
        wall = builder.wall([(0, 0), (100, 0)])
        editor.add_corner_start()

        assert host.handlers[wall](wall, Point(30, 4))
        assert builder.get(wall).points == [Point(0, 0), Point(30, 0), Point(100, 0)]
        assert builder.get(wall).dirty
        assert editor.mode == WallEditMode.IDLE
        assert host.handlers == {}
        assert modes[-1] == WallEditMode.IDLE

    def test_add_corner_missing_wall_still_resets(self, editor):
        editor.add_corner_start()
        assert not editor.add_corner(99, Point(0, 0))
        assert editor.mode == WallEditMode.IDLE

    def test_add_corner_error_resets_and_reraises(self, builder, host):
        wall = builder.wall([(0, 0), (100, 0)])
        editor = WallEditor(FailingRepository(builder.model), host)
        editor.add_corner_start()

        with pytest.raises(RuntimeError):
            editor.add_corner(wall, Point(50, 0))

        assert editor.mode == WallEditMode.IDLE
        assert len(host.errors) == 1
        assert host.handlers == {}

    def test_add_corner_cancel(self, builder, editor, host):
        builder.wall([(0, 0), (100, 0)])
        editor.add_corner_start()
        editor.add_corner_cancel()
        assert editor.mode == WallEditMode.IDLE
        assert host.handlers == {}

    def test_split_open_wall(self, builder, editor, host):
        wall = builder.wall([(0, 0), (100, 0), (100, 100)])
        assert editor.split_wall_start() == 1
        assert editor.mode == WallEditMode.SPLITTING_WALL

        assert editor.split_wall(wall, Point(98, 60))

        assert builder.get(wall).points == [Point(0, 0), Point(100, 0), Point(100, 60)]
        assert len(host.drawn) == 1
        second = host.drawn[0]
        assert second.object_type == ObjectType.WALL
        assert second.points == [Point(100, 60), Point(100, 100)]
        assert second.id in builder.model.objects
        assert editor.mode == WallEditMode.IDLE

    def test_split_closed_wall_opens_it(self, builder, editor, host):
        wall = builder.wall([(0, 0), (100, 0), (100, 100), (0, 100)], closed=True)
        editor.split_wall_start()
        assert editor.split_wall(wall, Point(50, 2))

        obj = builder.get(wall)
        assert not obj.closed
        assert obj.points[0] == Point(100, 0)
        assert obj.points[-1] == Point(0, 0)
        assert host.drawn == []

    def test_split_error_resets_and_reraises(self, builder, host):
        wall = builder.wall([(0, 0), (100, 0)])
        editor = WallEditor(FailingRepository(builder.model), host)
        editor.split_wall_start()

        with pytest.raises(RuntimeError):
            editor.split_wall(wall, Point(50, 0))

        assert editor.mode == WallEditMode.IDLE
        assert len(host.errors) == 1


class TestEditModeNotifications:

    @pytest.mark.parametrize("mode", [
        EditState.EDIT, EditState.DEFAULT, EditState.LINK_CONNECT, EditState.LINK_JOIN,
    ])
    def test_passive_modes_keep_tool(self, editor, mode):
        editor.start_adding_walls()
        assert not editor.notify_set_edit_mode(mode)
        assert editor.mode == WallEditMode.ADDING_WALLS

    def test_other_mode_forces_idle(self, editor):
        editor.start_adding_walls()
        assert editor.notify_set_edit_mode(EditState.DRAG)
        assert editor.mode == WallEditMode.IDLE

    def test_other_mode_cancels_corner_tool(self, builder, editor, host):
        builder.wall([(0, 0), (100, 0)])
        editor.add_corner_start()
        assert editor.notify_set_edit_mode(EditState.TEXT)
        assert editor.mode == WallEditMode.IDLE
        assert host.handlers == {}

    def test_idle_ignores_notifications(self, editor):
        assert not editor.notify_set_edit_mode(EditState.DRAG)


class TestMeasureTools:

    def test_measure_line_stops_walls(self, editor, host):
        editor.start_adding_walls()
        line = editor.add_measure_line()
        assert editor.mode == WallEditMode.IDLE
        assert line.object_type == ObjectType.MEASURE_LINE
        assert line.is_line

    def test_measure_area(self, editor):
        area = editor.add_measure_area()
        assert area.object_type == ObjectType.MEASURE_AREA
        assert area.is_shape


class TestCubicleOrdering:
    """Tests for ensure_cubicle_behind_outline."""

    def test_cubicle_moved_behind_outline(self, builder):
        outline = builder.wall([(0, 0), (200, 0), (200, 200), (0, 200)], closed=True)
        cubicle = builder.wall([(50, 50), (100, 50), (100, 100), (50, 100)], closed=True)
        assert builder.model.z_order == [outline, cubicle]

        assert ensure_cubicle_behind_outline(builder.model, cubicle)
        assert builder.model.z_order == [cubicle, outline]

    def test_already_behind(self, builder):
        cubicle = builder.wall([(50, 50), (100, 50), (100, 100), (50, 100)], closed=True)
        outline = builder.wall([(0, 0), (200, 0), (200, 200), (0, 200)], closed=True)
        assert not ensure_cubicle_behind_outline(builder.model, cubicle)
        assert builder.model.z_order == [cubicle, outline]

    def test_open_wall_ignored(self, builder):
        builder.wall([(0, 0), (200, 0), (200, 200), (0, 200)], closed=True)
        inner = builder.wall([(50, 50), (100, 50)])
        assert not ensure_cubicle_behind_outline(builder.model, inner)

    def test_missing_object(self, builder):
        assert not ensure_cubicle_behind_outline(builder.model, NO_OBJECT)
