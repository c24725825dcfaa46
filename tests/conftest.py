"""
Pytest configuration and shared fixtures for HVAC Draw tests.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator, Optional

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.drawing import (
    DrawingModel, DrawingObject, BaseClass, ObjectType, Rect, Point,
    ContainerList, ContainerItem, NO_OBJECT,
)
from services.graph_repository import DrawingRepository
from services.settings_manager import SettingsManager, reset_settings_manager


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="hvac_draw_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def settings_manager(temp_dir: Path) -> Generator[SettingsManager, None, None]:
    """Settings manager writing to a temporary file."""
    reset_settings_manager()
    yield SettingsManager(config_override=str(temp_dir / "settings.json"))
    reset_settings_manager()


# ============== Drawing Builder ==============

class DrawingBuilder:
    """Small helper for building hook graphs in tests."""

    def __init__(self, model: Optional[DrawingModel] = None):
        self.model = model or DrawingModel()
        self.repo = DrawingRepository(self.model, record=True)

    def shape(self, x: float, y: float, w: float = 50, h: float = 50, **kwargs) -> int:
        obj = DrawingObject(base_class=BaseClass.SHAPE, frame=Rect(x, y, w, h), **kwargs)
        return self.model.add_object(obj).id

    def connector(self, parent_id: int = NO_OBJECT, x: float = 0, y: float = 0, **kwargs) -> int:
        obj = DrawingObject(base_class=BaseClass.CONNECTOR, frame=Rect(x, y, 10, 100), **kwargs)
        connector_id = self.model.add_object(obj).id
        if parent_id >= 0:
            self.model.hook_objects(connector_id, parent_id)
        return connector_id

    def attach(self, child_id: int, parent_id: int, connect_point: Optional[Point] = None,
               cell_id: Optional[int] = None):
        self.model.hook_objects(child_id, parent_id, connect_point, cell_id)

    def line(self, a_id: int, b_id: int, points: Optional[list[Point]] = None, **kwargs) -> int:
        """Line hooked to both shapes, drawn between their frame centres by default."""
        if points is None:
            a = self.model.get_object(a_id).frame
            b = self.model.get_object(b_id).frame
            points = [
                Point(a.x + a.width / 2, a.y + a.height / 2),
                Point(b.x + b.width / 2, b.y + b.height / 2),
            ]
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        obj = DrawingObject(
            base_class=BaseClass.LINE,
            frame=Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys)),
            points=points,
            **kwargs
        )
        line_id = self.model.add_object(obj).id
        self.model.hook_objects(line_id, a_id)
        self.model.hook_objects(line_id, b_id)
        return line_id

    def container(self, x: float, y: float, item_ids: list[int], sparse: bool = False) -> int:
        """Container shape listing item_ids (NO_OBJECT marks an empty slot)."""
        container_id = self.shape(
            x, y, 200, 200,
            object_type=ObjectType.CONTAINER,
            container_list=ContainerList(items=[ContainerItem(i) for i in item_ids], sparse=sparse),
        )
        for item_id in item_ids:
            if item_id >= 0:
                self.attach(item_id, container_id)
        return container_id

    def wall(self, points: list[tuple[float, float]], closed: bool = False, locked: bool = False) -> int:
        pts = [Point(x, y) for x, y in points]
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        obj = DrawingObject(
            base_class=BaseClass.LINE,
            object_type=ObjectType.WALL,
            frame=Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys)),
            points=pts,
            closed=closed,
            locked=locked,
        )
        return self.model.add_object(obj).id

    def get(self, object_id: int) -> DrawingObject:
        return self.model.get_object(object_id)


@pytest.fixture
def builder() -> DrawingBuilder:
    """Empty drawing builder."""
    return DrawingBuilder()


@pytest.fixture
def chain(builder: DrawingBuilder) -> dict:
    """
    Three shapes in a row joined by lines.

        S(100) --L1-- T(250) --L2-- U(400)

    All shapes are 50x50 at y=100; L1 runs from x=150 to x=250.
    """
    s = builder.shape(100, 100)
    t = builder.shape(250, 100)
    u = builder.shape(400, 100)
    l1 = builder.line(s, t, [Point(150, 125), Point(250, 125)])
    l2 = builder.line(t, u, [Point(300, 125), Point(400, 125)])
    return {"builder": builder, "S": s, "T": t, "U": u, "L1": l1, "L2": l2}


@pytest.fixture
def connector_tree(builder: DrawingBuilder) -> dict:
    """
    Root shape with a connector holding two shapes.

        R
        └── C (connector)
            ├── A
            └── B
    """
    r = builder.shape(0, 0)
    c = builder.connector(r, x=20, y=50)
    a = builder.shape(60, 100)
    b = builder.shape(60, 200)
    builder.attach(a, c)
    builder.attach(b, c)
    return {"builder": builder, "R": r, "C": c, "A": a, "B": b}
