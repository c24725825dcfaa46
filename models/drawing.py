"""
Drawing object data models.

These models represent the objects on a floor-plan/piping drawing
(shapes, connectors and lines) and the hook links between them.
The connectivity services traverse and reposition these objects;
they never create or destroy them.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional
import copy


# Sentinel id meaning "no object" (also marks empty sparse container slots)
NO_OBJECT = -1


class BaseClass(Enum):
    """
    Discriminant of the drawing object union.

    Every object on the drawing is exactly one of these. Lines are
    edges between shapes; connectors are branching backbones that
    shapes hook onto; shapes are everything else.
    """
    SHAPE = auto()
    CONNECTOR = auto()
    LINE = auto()


class ObjectType(Enum):
    """Domain object types used for special-case routing."""
    NONE = auto()
    WALL = auto()                 # Floor-plan wall (line or polyline)
    TIMELINE = auto()             # Pass-through node in the hook graph
    EVENT = auto()                # Timeline event, carries associated_id
    CONTAINER = auto()            # Shape owning a ContainerList
    FLOWCHART_CONNECTOR = auto()  # Connector variant with no sibling navigation
    MEASURE_LINE = auto()
    MEASURE_AREA = auto()


class Direction(Enum):
    """Action arrow directions for insert/move operations."""
    UP = 1
    LEFT = 2
    DOWN = 3
    RIGHT = 4
    SLOPE = 5
    CUSTOM = 6

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LEFT, Direction.RIGHT)

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.UP, Direction.DOWN)


class EditState(Enum):
    """Editor-wide edit modes broadcast to the wall editor."""
    DEFAULT = auto()
    EDIT = auto()
    LINK_CONNECT = auto()
    LINK_JOIN = auto()
    DRAG = auto()
    TEXT = auto()
    STAMP = auto()


@dataclass
class Point:
    """2D point in document coordinates."""
    x: float = 0.0
    y: float = 0.0

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass
class Rect:
    """
    Axis-aligned rectangle.

    All operations return new rectangles; a Rect carries no identity.
    """
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def united(self, other: "Rect") -> "Rect":
        """Smallest rectangle containing both rectangles."""
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return Rect(
            x=x,
            y=y,
            width=max(self.right, other.right) - x,
            height=max(self.bottom, other.bottom) - y,
        )

    def intersected(self, other: "Rect") -> Optional["Rect"]:
        """Overlap of the two rectangles, or None when they only touch or are apart."""
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right - left <= 0.01 or bottom - top <= 0.01:
            return None
        return Rect(left, top, right - left, bottom - top)

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def contains_rect(self, other: "Rect", tolerance: float = 0.0001) -> bool:
        """Check if other lies entirely inside this rectangle."""
        overlap = self.intersected(other)
        if overlap is None:
            return False
        return (
            abs(overlap.x - other.x) <= tolerance and
            abs(overlap.y - other.y) <= tolerance and
            abs(overlap.width - other.width) <= tolerance and
            abs(overlap.height - other.height) <= tolerance
        )

    def copy(self) -> "Rect":
        return Rect(self.x, self.y, self.width, self.height)


@dataclass
class Hook:
    """
    Directed edge from the owning object to a parent object.

    hooks[0] on an object is its primary parent link.
    """
    parent_id: int = NO_OBJECT
    connect_point: Optional[Point] = None
    cell_id: Optional[int] = None


@dataclass
class ArrayHook:
    """One entry in a connector's array list."""
    hook_id: int = NO_OBJECT


@dataclass
class ConnectorArrayList:
    """
    Ordered attachment list owned by a connector.

    Index 0 is the connector's own anchor; indices >= 1 are the
    attached children. Negative ids are detached slots.
    """
    hooks: list[ArrayHook] = field(default_factory=list)
    flowchart: bool = False

    @property
    def child_ids(self) -> list[int]:
        """Live attached ids (index >= 1, non-negative)."""
        return [h.hook_id for h in self.hooks[1:] if h.hook_id >= 0]


@dataclass
class ContainerItem:
    """One slot in a container list."""
    id: int = NO_OBJECT


@dataclass
class ContainerList:
    """Ordered, possibly sparse, list of a container's logical children."""
    items: list[ContainerItem] = field(default_factory=list)
    sparse: bool = False

    def index_of(self, object_id: int) -> int:
        for i, item in enumerate(self.items):
            if item.id == object_id:
                return i
        return NO_OBJECT


@dataclass
class DrawingObject:
    """
    A shape, connector or line on the drawing.

    Attributes:
        id: Stable integer identifier
        base_class: Union discriminant (SHAPE, CONNECTOR, LINE)
        frame: Bounding rectangle in document coordinates
        hooks: Parent links, hooks[0] is the primary one
        object_type: Domain type used for special-case routing

    Variant-specific attributes:
        Connector: array_list
        Container shape: container_list
        Event line: associated_id
        Wall polyline: points, closed, line_width
    """
    id: int = NO_OBJECT
    base_class: BaseClass = BaseClass.SHAPE
    frame: Rect = field(default_factory=Rect)
    hooks: list[Hook] = field(default_factory=list)
    object_type: ObjectType = ObjectType.NONE
    associated_id: int = NO_OBJECT

    array_list: Optional[ConnectorArrayList] = None
    container_list: Optional[ContainerList] = None

    # Auto-insert behaviour: shapes with connect points that rotate
    # when inserted perpendicular to an existing line
    use_connect: bool = False
    rotate_on_perpendicular_insert: bool = False

    # Polyline geometry (walls)
    points: list[Point] = field(default_factory=list)
    closed: bool = False
    line_width: float = 1.0

    locked: bool = False
    dirty: bool = field(default=False, repr=False)
    name: str = ""

    def __post_init__(self):
        if not self.name:
            self.name = f"{self.base_class.name.lower()}_{self.id}"
        if self.base_class == BaseClass.CONNECTOR and self.array_list is None:
            self.array_list = ConnectorArrayList(hooks=[ArrayHook(self.id)])

    @property
    def is_shape(self) -> bool:
        return self.base_class == BaseClass.SHAPE

    @property
    def is_connector(self) -> bool:
        return self.base_class == BaseClass.CONNECTOR

    @property
    def is_line(self) -> bool:
        return self.base_class == BaseClass.LINE

    @property
    def is_container(self) -> bool:
        return self.is_shape and self.container_list is not None

    @property
    def is_flowchart_connector(self) -> bool:
        if not self.is_connector:
            return False
        if self.object_type == ObjectType.FLOWCHART_CONNECTOR:
            return True
        return bool(self.array_list and self.array_list.flowchart)

    @property
    def primary_hook(self) -> Optional[Hook]:
        return self.hooks[0] if self.hooks else None

    def adjust_auto_insert_frame(self, vertical: bool) -> bool:
        """
        Rotate this object's frame for a perpendicular auto-insert.

        Returns True when the frame was rotated (width and height swapped).
        Call on a copy; the stored object must not change.
        """
        if not (self.use_connect and self.rotate_on_perpendicular_insert):
            return False
        landscape = self.frame.width >= self.frame.height
        if vertical != landscape:
            return False
        self.frame = Rect(self.frame.x, self.frame.y, self.frame.height, self.frame.width)
        return True

    def clone(self) -> "DrawingObject":
        """Deep copy of this object."""
        return copy.deepcopy(self)


@dataclass
class DrawingModel:
    """
    Root model containing every object on the drawing.

    Also tracks the z-order of visible objects and the current selection.
    """
    objects: dict[int, DrawingObject] = field(default_factory=dict)
    z_order: list[int] = field(default_factory=list)
    selected_ids: list[int] = field(default_factory=list)

    _next_id: int = field(default=1, repr=False)

    def next_id(self) -> int:
        """Reserve the next free object id."""
        while self._next_id in self.objects:
            self._next_id += 1
        object_id = self._next_id
        self._next_id += 1
        return object_id

    def add_object(self, obj: DrawingObject) -> DrawingObject:
        """Add an object, assigning an id when it has none."""
        if obj.id < 0:
            placeholder = f"{obj.base_class.name.lower()}_{obj.id}"
            obj.id = self.next_id()
            if obj.name == placeholder:
                obj.name = f"{obj.base_class.name.lower()}_{obj.id}"
            if obj.is_connector and obj.array_list and obj.array_list.hooks:
                obj.array_list.hooks[0].hook_id = obj.id
        self.objects[obj.id] = obj
        if obj.id not in self.z_order:
            self.z_order.append(obj.id)
        return obj

    def remove_object(self, object_id: int) -> Optional[DrawingObject]:
        """Remove an object from the store, leaving references to it (see delete_object)."""
        if object_id not in self.objects:
            return None
        if object_id in self.z_order:
            self.z_order.remove(object_id)
        if object_id in self.selected_ids:
            self.selected_ids.remove(object_id)
        return self.objects.pop(object_id)

    def get_object(self, object_id: int) -> Optional[DrawingObject]:
        return self.objects.get(object_id)

    def hook_objects(
        self,
        child_id: int,
        parent_id: int,
        connect_point: Optional[Point] = None,
        cell_id: Optional[int] = None
    ) -> Optional[Hook]:
        """
        Hook child onto parent.

        When the parent is a connector the child is also appended to the
        connector's array list. Lines take up to two hooks (their endpoints).
        """
        child = self.objects.get(child_id)
        parent = self.objects.get(parent_id)
        if child is None or parent is None:
            return None
        if child.is_line and len(child.hooks) >= 2:
            return None

        hook = Hook(parent_id=parent_id, connect_point=connect_point, cell_id=cell_id)
        child.hooks.append(hook)

        if parent.is_connector and not child.is_line:
            if child_id not in [h.hook_id for h in parent.array_list.hooks[1:]]:
                parent.array_list.hooks.append(ArrayHook(child_id))
        return hook

    def unhook_object(self, object_id: int) -> int:
        """
        Drop every reference other objects hold to object_id.

        Connector array-list slots and sparse container slots are set to
        NO_OBJECT so sibling indices stay put; dense container lists lose
        the entry. Hooks targeting the object are removed. Returns the
        number of references dropped.
        """
        dropped = 0
        for obj in self.objects.values():
            if obj.id == object_id:
                continue
            if obj.array_list is not None:
                for slot in obj.array_list.hooks[1:]:
                    if slot.hook_id == object_id:
                        slot.hook_id = NO_OBJECT
                        dropped += 1
            if obj.container_list is not None:
                items = obj.container_list.items
                if obj.container_list.sparse:
                    for item in items:
                        if item.id == object_id:
                            item.id = NO_OBJECT
                            dropped += 1
                else:
                    kept = [item for item in items if item.id != object_id]
                    dropped += len(items) - len(kept)
                    obj.container_list.items = kept
            kept_hooks = [h for h in obj.hooks if h.parent_id != object_id]
            if len(kept_hooks) != len(obj.hooks):
                dropped += len(obj.hooks) - len(kept_hooks)
                obj.hooks = kept_hooks
            if obj.associated_id == object_id:
                obj.associated_id = NO_OBJECT
                dropped += 1
        return dropped

    def delete_object(self, object_id: int) -> Optional[DrawingObject]:
        """Remove an object and every reference to it."""
        obj = self.remove_object(object_id)
        if obj is not None:
            self.unhook_object(object_id)
        return obj

    def clear(self):
        """Clear all objects and selection."""
        self.objects.clear()
        self.z_order.clear()
        self.selected_ids.clear()
        self._next_id = 1

    def to_dict(self) -> dict:
        """Serialize to a dictionary (the drawing file format)."""
        return {
            "objects": {
                oid: {
                    "id": o.id,
                    "name": o.name,
                    "base_class": o.base_class.name,
                    "object_type": o.object_type.name,
                    "frame": {"x": o.frame.x, "y": o.frame.y,
                              "width": o.frame.width, "height": o.frame.height},
                    "hooks": [
                        {
                            "parent_id": h.parent_id,
                            "connect_point": h.connect_point.to_tuple() if h.connect_point else None,
                            "cell_id": h.cell_id,
                        }
                        for h in o.hooks
                    ],
                    "associated_id": o.associated_id,
                    "array_list": (
                        {"hooks": [h.hook_id for h in o.array_list.hooks],
                         "flowchart": o.array_list.flowchart}
                        if o.array_list else None
                    ),
                    "container_list": (
                        {"items": [i.id for i in o.container_list.items],
                         "sparse": o.container_list.sparse}
                        if o.container_list else None
                    ),
                    "points": [p.to_tuple() for p in o.points],
                    "closed": o.closed,
                    "line_width": o.line_width,
                    "use_connect": o.use_connect,
                    "rotate_on_perpendicular_insert": o.rotate_on_perpendicular_insert,
                    "locked": o.locked,
                }
                for oid, o in self.objects.items()
            },
            "z_order": list(self.z_order),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DrawingModel":
        """Rebuild a model from to_dict() output."""
        model = cls()
        for raw in data.get("objects", {}).values():
            frame = raw.get("frame", {})
            array_list = None
            if raw.get("array_list"):
                array_list = ConnectorArrayList(
                    hooks=[ArrayHook(h) for h in raw["array_list"]["hooks"]],
                    flowchart=raw["array_list"].get("flowchart", False),
                )
            container_list = None
            if raw.get("container_list"):
                container_list = ContainerList(
                    items=[ContainerItem(i) for i in raw["container_list"]["items"]],
                    sparse=raw["container_list"].get("sparse", False),
                )
            obj = DrawingObject(
                id=int(raw["id"]),
                name=raw.get("name", ""),
                base_class=BaseClass[raw.get("base_class", "SHAPE")],
                object_type=ObjectType[raw.get("object_type", "NONE")],
                frame=Rect(**frame),
                hooks=[
                    Hook(
                        parent_id=h["parent_id"],
                        connect_point=Point(*h["connect_point"]) if h.get("connect_point") else None,
                        cell_id=h.get("cell_id"),
                    )
                    for h in raw.get("hooks", [])
                ],
                associated_id=raw.get("associated_id", NO_OBJECT),
                array_list=array_list,
                container_list=container_list,
                points=[Point(*p) for p in raw.get("points", [])],
                closed=raw.get("closed", False),
                line_width=raw.get("line_width", 1.0),
                use_connect=raw.get("use_connect", False),
                rotate_on_perpendicular_insert=raw.get("rotate_on_perpendicular_insert", False),
                locked=raw.get("locked", False),
            )
            model.objects[obj.id] = obj
        model.z_order = [oid for oid in data.get("z_order", []) if oid in model.objects]
        for oid in model.objects:
            if oid not in model.z_order:
                model.z_order.append(oid)
        return model
