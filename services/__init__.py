"""Services package."""

from .graph_repository import GraphRepository, DrawingRepository
from .connectivity import (
    TreeTopResult,
    ComponentSet,
    find_tree_top,
    get_line_tree,
    get_connector_tree,
    get_parent_connector,
    has_container_parent,
    select_container_parent,
)
from .shift_engine import (
    ShiftOutcome,
    FilterResult,
    filter_chart_shapes,
    shift_connected_shapes,
    line_direction,
    make_room_on_line,
)
from .selection import get_next_select
from .drawing_file import DrawingFileManager
from .polyline import (
    angle_from_points,
    hit_segment,
    insert_corner,
    split_polyline,
    poly_frame,
)
from .settings_manager import (
    SettingsManager,
    AppSettings,
    LayoutSettings,
    WallSettings,
    UISettings,
    get_settings,
    reset_settings_manager,
)
from .wall_editor import (
    WallEditor,
    WallEditMode,
    DrawEvent,
    EditorHost,
    ensure_cubicle_behind_outline,
)

__all__ = [
    "GraphRepository",
    "DrawingRepository",
    "TreeTopResult",
    "ComponentSet",
    "find_tree_top",
    "get_line_tree",
    "get_connector_tree",
    "get_parent_connector",
    "has_container_parent",
    "select_container_parent",
    "ShiftOutcome",
    "FilterResult",
    "filter_chart_shapes",
    "shift_connected_shapes",
    "line_direction",
    "make_room_on_line",
    "get_next_select",
    "DrawingFileManager",
    "angle_from_points",
    "hit_segment",
    "insert_corner",
    "split_polyline",
    "poly_frame",
    "SettingsManager",
    "AppSettings",
    "LayoutSettings",
    "WallSettings",
    "UISettings",
    "get_settings",
    "reset_settings_manager",
    "WallEditor",
    "WallEditMode",
    "DrawEvent",
    "EditorHost",
    "ensure_cubicle_behind_outline",
]
