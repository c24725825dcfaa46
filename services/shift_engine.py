"""
Directional filtering and shifting of connected shapes.

When a shape is inserted on a line, or a line between two shapes is
shortened, every shape beyond the source shape in the direction of the
operation moves together. filter_chart_shapes splits a component into
the moving and remaining shapes; shift_connected_shapes computes the
distance, rejects moves that would collide and applies the offsets.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Optional

from models.drawing import Direction, DrawingObject, Rect, NO_OBJECT
from services.graph_repository import GraphRepository
from services.connectivity import get_line_tree
from services.settings_manager import LayoutSettings

logger = logging.getLogger(__name__)


class ShiftOutcome(Enum):
    """Result of shift_connected_shapes."""
    APPLIED = auto()    # Every moving shape was translated
    REJECTED = auto()   # Collision check failed, nothing was translated
    SKIPPED = auto()    # Source shape missing, nothing to do


@dataclass
class FilterResult:
    """
    Output of filter_chart_shapes.

    Attributes:
        moving: Shape ids beyond the reference edge, in candidate order
        moving_bounds: Union of the moving frames (move operations only)
        remaining_bounds: Union of the remaining frames (move operations only)
    """
    moving: list[int] = field(default_factory=list)
    moving_bounds: Optional[Rect] = None
    remaining_bounds: Optional[Rect] = None


def _is_beyond(frame: Rect, reference: Rect, direction: Direction) -> bool:
    """Strictly beyond the reference edge; touching the edge is not beyond."""
    if direction == Direction.RIGHT:
        return frame.x > reference.right
    if direction == Direction.LEFT:
        return frame.right < reference.x
    if direction == Direction.DOWN:
        return frame.y > reference.bottom
    if direction == Direction.UP:
        return frame.bottom < reference.y
    # Unknown directions move everything
    return True


def filter_chart_shapes(
    repo: GraphRepository,
    reference_id: int,
    direction: Direction,
    candidate_ids: Iterable[int],
    is_insert: bool
) -> FilterResult:
    """
    Partition candidate shapes into moving and remaining.

    The reference shape itself and non-shape objects are ignored. For move
    operations the bounding rectangles of both groups are accumulated too.
    """
    result = FilterResult()
    reference = repo.resolve(reference_id)
    if reference is None:
        return result

    for object_id in candidate_ids:
        if object_id == reference_id:
            continue
        obj = repo.resolve(object_id)
        if obj is None or not obj.is_shape:
            continue

        moving = _is_beyond(obj.frame, reference.frame, direction)
        if moving:
            result.moving.append(object_id)

        if not is_insert:
            if moving:
                result.moving_bounds = (
                    obj.frame.copy() if result.moving_bounds is None
                    else result.moving_bounds.united(obj.frame)
                )
            else:
                result.remaining_bounds = (
                    obj.frame.copy() if result.remaining_bounds is None
                    else result.remaining_bounds.united(obj.frame)
                )

    return result


def _line_span(line: Optional[DrawingObject], horizontal: bool) -> Optional[float]:
    """Distance between a line's endpoints along one axis."""
    if line is None:
        return None
    if len(line.points) >= 2:
        start, end = line.points[0], line.points[-1]
        return abs(end.x - start.x) if horizontal else abs(end.y - start.y)
    return line.frame.width if horizontal else line.frame.height


def _reference_frame(
    repo: GraphRepository,
    source: DrawingObject,
    direction: Direction,
    is_insert: bool,
    reference_id: Optional[int]
) -> Rect:
    """Frame whose size sets the default shift distance."""
    if is_insert and reference_id is not None:
        reference = repo.resolve(reference_id)
        if reference is not None:
            if reference.use_connect:
                # Try the rotation on a copy; the stored shape stays untouched
                candidate = reference.clone()
                if candidate.adjust_auto_insert_frame(direction.is_vertical):
                    return candidate.frame
            return reference.frame
    return source.frame


def shift_connected_shapes(
    repo: GraphRepository,
    source_id: int,
    target_id: int,
    line_id: int,
    direction: Direction,
    is_insert: bool,
    reference_id: Optional[int] = None,
    custom_distance: Optional[float] = None,
    settings: Optional[LayoutSettings] = None
) -> ShiftOutcome:
    """
    Shift the shapes connected to target_id away from (or toward) source_id.

    Args:
        repo: Graph repository
        source_id: Shape the operation is anchored on
        target_id: Shape at the other end of line_id
        line_id: Line being inserted into or shortened; not crossed when
                 collecting the moving shapes
        direction: Direction of the line from source to target
        is_insert: True to push shapes out for an insertion, False to pull
                   them in after a move
        reference_id: Newly inserted shape whose size sets the distance
        custom_distance: Explicit distance overriding the computed one
        settings: Spacing constants (defaults to LayoutSettings())

    Returns:
        ShiftOutcome.APPLIED, or ShiftOutcome.REJECTED when pulling the
        shapes in would bring them closer than the collision gap to the
        rest of the tree. A rejected shift translates nothing.
    """
    layout = settings or LayoutSettings()

    source = repo.resolve(source_id)
    if source is None:
        logger.debug(f"shift skipped, source {source_id} not found")
        return ShiftOutcome.SKIPPED

    component = get_line_tree(repo, target_id, line_id)
    filtered = filter_chart_shapes(repo, source_id, direction, component, is_insert)

    line = repo.resolve(line_id) if line_id != NO_OBJECT else None
    reference = _reference_frame(repo, source, direction, is_insert, reference_id)

    dx = 0.0
    dy = 0.0

    if direction == Direction.RIGHT:
        if custom_distance is not None:
            dx = custom_distance
            min_gap = layout.custom_min_gap
        else:
            dx = reference.width + layout.h_array_width
            min_gap = layout.g_array_width
        span = _line_span(line, True)
        if not is_insert and span is not None and span - dx < min_gap:
            dx = span - min_gap

    elif direction == Direction.LEFT:
        dx = custom_distance if custom_distance is not None else reference.width + layout.h_array_width
        span = _line_span(line, True)
        if not is_insert and span is not None and span - dx < layout.h_array_width:
            dx = span - layout.h_array_width
        dx = -dx

    elif direction == Direction.DOWN:
        if custom_distance is not None:
            dy = custom_distance
            min_gap = layout.custom_min_gap
        else:
            dy = reference.height + layout.v_array_width
            min_gap = layout.v_array_width
        span = _line_span(line, False)
        if not is_insert and span is not None and span - dy < min_gap:
            dy = span - min_gap

    elif direction == Direction.UP:
        dy = custom_distance if custom_distance is not None else reference.height + layout.v_array_width
        span = _line_span(line, False)
        if not is_insert and span is not None and span - dy < layout.v_array_width:
            dy = span - layout.v_array_width
        dy = -dy

    if not is_insert:
        # Moves pull the shapes back toward the source
        dx = -dx
        dy = -dy

        whole_tree = get_line_tree(repo, target_id, NO_OBJECT)
        everything = filter_chart_shapes(repo, source_id, direction, whole_tree, is_insert)

        if everything.remaining_bounds is not None and filtered.moving_bounds is not None:
            moved = filtered.moving_bounds.translated(dx, dy)
            remain = everything.remaining_bounds
            if _collides(moved, remain, direction, layout.collision_gap):
                logger.warning(
                    f"Shift rejected: shapes beyond {source_id} would come within "
                    f"{layout.collision_gap} of the rest of the tree"
                )
                return ShiftOutcome.REJECTED

    for object_id in filtered.moving:
        repo.translate(object_id, dx, dy, 0)

    logger.info(f"Shifted {len(filtered.moving)} shapes by ({dx}, {dy})")
    return ShiftOutcome.APPLIED


def _collides(moved: Rect, remain: Rect, direction: Direction, gap: float) -> bool:
    if direction == Direction.RIGHT:
        return moved.x < remain.right + gap
    if direction == Direction.LEFT:
        return moved.right + gap > remain.x
    if direction == Direction.DOWN:
        return moved.y < remain.bottom + gap
    if direction == Direction.UP:
        return moved.bottom + gap > remain.y
    return False


def line_direction(line: DrawingObject) -> Direction:
    """Dominant axis direction of a line, from its first point to its last."""
    if len(line.points) < 2:
        return Direction.SLOPE
    start, end = line.points[0], line.points[-1]
    dx = end.x - start.x
    dy = end.y - start.y
    if abs(dx) > abs(dy):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    if abs(dy) > abs(dx):
        return Direction.DOWN if dy > 0 else Direction.UP
    return Direction.SLOPE


def make_room_on_line(
    repo: GraphRepository,
    line_id: int,
    reference_id: Optional[int] = None,
    settings: Optional[LayoutSettings] = None
) -> ShiftOutcome:
    """
    Push the shapes past the far end of a line out to make room for an insert.

    The line's first hook is the source and its second hook the target.
    Lines that are not hooked at both ends, or run diagonally, are skipped.
    """
    line = repo.resolve(line_id)
    if line is None or not line.is_line or len(line.hooks) < 2:
        return ShiftOutcome.SKIPPED
    direction = line_direction(line)
    if direction == Direction.SLOPE:
        logger.debug(f"Line {line_id} has no dominant axis, nothing to shift")
        return ShiftOutcome.SKIPPED
    return shift_connected_shapes(
        repo, line.hooks[0].parent_id, line.hooks[1].parent_id, line_id,
        direction, True, reference_id=reference_id, settings=settings
    )
