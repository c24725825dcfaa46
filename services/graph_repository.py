"""
Graph repository.

Defines the interface every connectivity service uses to reach drawing
objects and their adjacency, and an in-memory implementation backed by a
DrawingModel. Services receive the repository explicitly; nothing here
is a module-level singleton.
"""

import logging
from typing import Protocol, Optional, runtime_checkable

from models.drawing import DrawingModel, DrawingObject, BaseClass, NO_OBJECT

logger = logging.getLogger(__name__)


@runtime_checkable
class GraphRepository(Protocol):
    """
    Access to the drawing object store and its hook adjacency.

    Lookups of missing objects return None (or NO_OBJECT) instead of raising.
    """

    def resolve(self, object_id: int, for_write: bool = False) -> Optional[DrawingObject]:
        """Return the object with this id, or None if it does not exist."""
        ...

    def mark_dirty(self, object_id: int, flag: bool = True) -> None:
        """Flag an object for redraw by the render layer."""
        ...

    def find_child_connectors(self, object_id: int) -> list[int]:
        """Ids of connectors hooked onto this object."""
        ...

    def find_child_lines(self, object_id: int) -> list[int]:
        """Ids of lines hooked onto this object."""
        ...

    def find_child_array(self, object_id: int, exclude_id: int = NO_OBJECT) -> int:
        """First child connector of this object other than exclude_id, or NO_OBJECT."""
        ...

    def translate(self, object_id: int, dx: float, dy: float, flags: int = 0) -> None:
        """Offset an object's geometry."""
        ...

    def prune_primary_hook(self, object_id: int) -> None:
        """Drop an object's primary hook (malformed data repair)."""
        ...


class DrawingRepository:
    """
    In-memory GraphRepository over a DrawingModel.

    Adjacency is derived from hooks: an object is a child of X when any of
    its hooks targets X. Children are reported in model insertion order.

    With record=True every write lookup and translation is kept in
    write_log and translations.
    """

    def __init__(self, model: DrawingModel, record: bool = False):
        self._model = model
        self._record = record
        self._write_log: list[int] = []
        self._translations: list[tuple[int, float, float]] = []

    @property
    def model(self) -> DrawingModel:
        return self._model

    @property
    def write_log(self) -> list[int]:
        """Ids resolved for write, in order (only when recording)."""
        return self._write_log

    @property
    def translations(self) -> list[tuple[int, float, float]]:
        """Every translate() applied while recording, as (id, dx, dy)."""
        return self._translations

    def clear_log(self):
        self._write_log.clear()
        self._translations.clear()

    def resolve(self, object_id: int, for_write: bool = False) -> Optional[DrawingObject]:
        if object_id is None or object_id < 0:
            return None
        obj = self._model.objects.get(object_id)
        if obj is not None and for_write and self._record:
            self._write_log.append(object_id)
        return obj

    def mark_dirty(self, object_id: int, flag: bool = True) -> None:
        obj = self._model.objects.get(object_id)
        if obj is not None:
            obj.dirty = bool(flag)

    def _children(self, object_id: int, base_class: BaseClass) -> list[int]:
        if object_id is None or object_id < 0:
            return []
        children = []
        for obj in self._model.objects.values():
            if obj.base_class != base_class or obj.id == object_id:
                continue
            if any(h.parent_id == object_id for h in obj.hooks):
                children.append(obj.id)
        return children

    def find_child_connectors(self, object_id: int) -> list[int]:
        return self._children(object_id, BaseClass.CONNECTOR)

    def find_child_lines(self, object_id: int) -> list[int]:
        return self._children(object_id, BaseClass.LINE)

    def find_child_array(self, object_id: int, exclude_id: int = NO_OBJECT) -> int:
        for connector_id in self.find_child_connectors(object_id):
            if connector_id != exclude_id:
                return connector_id
        return NO_OBJECT

    def translate(self, object_id: int, dx: float, dy: float, flags: int = 0) -> None:
        obj = self.resolve(object_id, for_write=True)
        if obj is None:
            logger.debug(f"translate skipped, object {object_id} not found")
            return
        obj.frame = obj.frame.translated(dx, dy)
        for point in obj.points:
            point.x += dx
            point.y += dy
        obj.dirty = True
        if self._record:
            self._translations.append((object_id, dx, dy))

    def prune_primary_hook(self, object_id: int) -> None:
        obj = self.resolve(object_id, for_write=True)
        if obj is not None and obj.hooks:
            removed = obj.hooks.pop(0)
            logger.warning(f"Pruned malformed hook {object_id} -> {removed.parent_id}")
