"""
Connectivity services.

Walks the hook graph of a drawing:
- find_tree_top ascends primary hooks to the root shape/connector
- get_line_tree / get_connector_tree discover the connected component
  reachable from a starting object through hooks, connector array lists
  and child lines
- small parent lookups used by selection and deletion

Traversals only read the drawing. Malformed self-referencing hooks found
during an ascent are repaired after the ascent has finished.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from models.drawing import DrawingObject, ObjectType, Point, NO_OBJECT
from services.graph_repository import GraphRepository

logger = logging.getLogger(__name__)


@dataclass
class TreeTopResult:
    """
    Accumulator for find_tree_top.

    Attributes:
        found_tree: A connector (or a connector hanging off the top shape) was found
        top_connector_id: Root-most connector reached
        top_shape_id: Root-most shape reached
        second_connector_id: Secondary branch connector of the top shape
        level: Number of shapes passed on the way up, None to skip counting
        self_hooked_ids: Objects whose primary hook pointed at themselves
        cycle_detected: The hook chain looped back on itself
    """
    found_tree: bool = False
    top_connector_id: int = NO_OBJECT
    top_shape_id: int = NO_OBJECT
    second_connector_id: int = NO_OBJECT
    level: Optional[int] = None
    self_hooked_ids: list[int] = field(default_factory=list)
    cycle_detected: bool = False


class ComponentSet:
    """
    Insertion-ordered set of object ids collected by a traversal.

    Adding an id twice is a no-op. Also remembers which connectors have
    been expanded so mutually recursive walks stop on cyclic data.
    """

    def __init__(self, ids: Optional[list[int]] = None):
        self._order: list[int] = []
        self._members: set[int] = set()
        self._expanded: set[tuple[int, bool]] = set()
        for object_id in ids or []:
            self.add(object_id)

    def add(self, object_id: int) -> bool:
        """Add an id; returns False if it was already present."""
        if object_id in self._members:
            return False
        self._members.add(object_id)
        self._order.append(object_id)
        return True

    def mark_expanded(self, connector_id: int, with_lines: bool) -> bool:
        """Record a connector expansion; returns False if already done."""
        if (connector_id, with_lines) in self._expanded or (connector_id, True) in self._expanded:
            return False
        self._expanded.add((connector_id, with_lines))
        return True

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._members

    def __iter__(self) -> Iterator[int]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __repr__(self) -> str:
        return f"ComponentSet({self._order})"

    def to_list(self) -> list[int]:
        return list(self._order)

    def as_set(self) -> set[int]:
        return set(self._members)


# =============================================================================
# Tree top
# =============================================================================

def find_tree_top(
    repo: GraphRepository,
    start: Optional[DrawingObject],
    mark_links: bool,
    result: TreeTopResult
) -> bool:
    """
    Ascend the primary hook chain from start to the top of its tree.

    Lines are not part of shape/connector trees and return False at once.
    Connectors record themselves as top_connector_id and mark the tree as
    found; shapes record top_shape_id. When the top is reached without a
    connector, a child connector array of the last object is used instead.

    Args:
        repo: Graph repository
        start: Object to start from (None returns result.found_tree)
        mark_links: Flag every visited top object dirty for redraw
        result: Accumulator, updated in place

    Returns:
        True if a tree was found, False otherwise (including on cycles)
    """
    if start is None:
        return result.found_tree
    if start.is_line:
        return False

    visited: set[int] = set()
    _ascend(repo, start, mark_links, result, visited)

    # Repair self-referencing hooks only once the walk is complete
    for object_id in result.self_hooked_ids:
        repo.prune_primary_hook(object_id)

    if result.cycle_detected:
        result.found_tree = False
        return False
    return result.found_tree


def _ascend(
    repo: GraphRepository,
    obj: DrawingObject,
    mark_links: bool,
    result: TreeTopResult,
    visited: set[int]
) -> bool:
    if obj.is_line:
        return False
    if obj.id in visited:
        result.cycle_detected = True
        logger.warning(f"Hook cycle detected at object {obj.id}")
        return False
    visited.add(obj.id)

    if obj.is_connector:
        result.top_connector_id = obj.id
        result.found_tree = True
    else:
        result.top_shape_id = obj.id
        if result.level is not None:
            result.level += 1
    if mark_links:
        repo.mark_dirty(obj.id, True)

    hook = obj.primary_hook
    if hook is not None:
        if hook.parent_id == obj.id:
            result.self_hooked_ids.append(obj.id)
        else:
            parent = repo.resolve(hook.parent_id)
            if parent is not None:
                _ascend(repo, parent, mark_links, result, visited)
    elif result.found_tree:
        if obj.is_connector:
            child_array = repo.find_child_array(result.top_shape_id, NO_OBJECT)
            if child_array >= 0:
                result.second_connector_id = child_array
    else:
        child_array = repo.find_child_array(obj.id, NO_OBJECT)
        if child_array >= 0:
            result.top_connector_id = child_array
            result.found_tree = True
            if mark_links:
                repo.mark_dirty(child_array, True)

    return result.found_tree


# =============================================================================
# Connected components
# =============================================================================

def get_line_tree(
    repo: GraphRepository,
    start_id: int,
    exclude_line_id: int = NO_OBJECT,
    acc: Optional[ComponentSet] = None
) -> ComponentSet:
    """
    Collect every object connected to start_id.

    Ascends the primary hook, descends into child connectors and follows
    child lines to the shape at their other end. exclude_line_id is the
    line the walk arrived on and is not crossed again.
    """
    if acc is None:
        acc = ComponentSet()
    acc.add(start_id)

    source = repo.resolve(start_id)
    if source is not None and source.hooks and source.hooks[0].parent_id not in acc:
        parent_id = source.hooks[0].parent_id
        parent = repo.resolve(parent_id)
        if parent is not None and parent.is_connector:
            get_connector_tree(repo, parent.id, acc, True)
        elif parent is not None:
            # Timeline and event nodes are transparent in the hook graph
            next_id = start_id
            if parent.object_type == ObjectType.TIMELINE:
                next_id = parent_id
            elif parent.object_type == ObjectType.EVENT and parent.hooks:
                next_id = parent.hooks[0].parent_id
            acc.add(next_id)

    for connector_id in repo.find_child_connectors(start_id):
        if connector_id not in acc:
            get_connector_tree(repo, connector_id, acc, True)

    for line_id in repo.find_child_lines(start_id):
        if line_id == exclude_line_id or line_id in acc:
            continue
        acc.add(line_id)
        line = repo.resolve(line_id)
        if line is None:
            continue
        if len(line.hooks) == 2:
            _follow_line_ends(repo, line, start_id, acc)
        elif line.object_type == ObjectType.EVENT:
            if line.associated_id >= 0:
                acc.add(line.associated_id)

    return acc


def get_connector_tree(
    repo: GraphRepository,
    connector_id: int,
    acc: Optional[ComponentSet] = None,
    include_child_lines: bool = False
) -> ComponentSet:
    """
    Collect a connector and everything attached below it.

    Walks the array list from index 1 (index 0 is the connector's own
    anchor). Each attached object contributes its own child connectors
    and, with include_child_lines, the shapes at the far end of its lines.
    """
    if acc is None:
        acc = ComponentSet()
    acc.add(connector_id)
    if not acc.mark_expanded(connector_id, include_child_lines):
        return acc

    connector = repo.resolve(connector_id)
    if connector is None or connector.array_list is None:
        return acc

    for entry in connector.array_list.hooks[1:]:
        hooked_id = entry.hook_id
        if hooked_id < 0:
            continue

        if acc.add(hooked_id):
            hooked = repo.resolve(hooked_id)
            if hooked is not None and hooked.is_connector:
                get_connector_tree(repo, hooked_id, acc)

        for child_connector_id in repo.find_child_connectors(hooked_id):
            get_connector_tree(repo, child_connector_id, acc, include_child_lines)

        if include_child_lines:
            for line_id in repo.find_child_lines(hooked_id):
                if not acc.add(line_id):
                    continue
                line = repo.resolve(line_id)
                if line is not None and len(line.hooks) == 2:
                    _follow_line_ends(repo, line, hooked_id, acc)

    return acc


def _follow_line_ends(
    repo: GraphRepository,
    line: DrawingObject,
    from_id: int,
    acc: ComponentSet
) -> None:
    """Continue the walk at each shape endpoint of line other than from_id."""
    for hook in line.hooks[:2]:
        end_id = hook.parent_id
        if end_id == from_id:
            continue
        end = repo.resolve(end_id)
        if end is not None and end.is_shape:
            get_line_tree(repo, end_id, line.id, acc)


# =============================================================================
# Parent lookups
# =============================================================================

def get_parent_connector(repo: GraphRepository, object_id: int) -> tuple[int, Optional[Point]]:
    """
    Return the connector an object hangs from and its connect point.

    Returns (NO_OBJECT, None) when the primary parent is not a connector.
    """
    obj = repo.resolve(object_id)
    if obj is None or not obj.hooks:
        return NO_OBJECT, None

    hook = obj.hooks[0]
    if hook.parent_id < 0:
        return NO_OBJECT, None

    parent = repo.resolve(hook.parent_id)
    if parent is not None and parent.is_connector:
        point = Point(hook.connect_point.x, hook.connect_point.y) if hook.connect_point else None
        return hook.parent_id, point
    return NO_OBJECT, None


def has_container_parent(repo: GraphRepository, obj: Optional[DrawingObject]) -> Optional[int]:
    """Id of the container shape obj is hooked into, or None."""
    if obj is None or not obj.hooks:
        return None
    parent_id = obj.hooks[0].parent_id
    parent = repo.resolve(parent_id)
    if parent is not None and parent.is_container:
        return parent_id
    return None


def select_container_parent(repo: GraphRepository, object_id: int) -> int:
    """
    Redirect selection of a container sitting in a cell to its parent.

    A container whose primary hook carries a cell id is selected through
    the object that owns the cell; anything else selects itself.
    """
    obj = repo.resolve(object_id)
    if obj is not None and obj.is_container and obj.hooks and obj.hooks[0].cell_id is not None:
        return obj.hooks[0].parent_id
    return object_id
