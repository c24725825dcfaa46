"""
Models package.

Data models for drawing objects and the hook links between them:
- Object union (BaseClass, ObjectType, DrawingObject)
- Geometry (Point, Rect)
- Hook graph (Hook, ConnectorArrayList, ContainerList)
- Drawing store (DrawingModel)
"""

from .drawing import (
    NO_OBJECT,
    BaseClass,
    ObjectType,
    Direction,
    EditState,
    Point,
    Rect,
    Hook,
    ArrayHook,
    ConnectorArrayList,
    ContainerItem,
    ContainerList,
    DrawingObject,
    DrawingModel,
)

__all__ = [
    "NO_OBJECT",
    "BaseClass",
    "ObjectType",
    "Direction",
    "EditState",
    "Point",
    "Rect",
    "Hook",
    "ArrayHook",
    "ConnectorArrayList",
    "ContainerItem",
    "ContainerList",
    "DrawingObject",
    "DrawingModel",
]
