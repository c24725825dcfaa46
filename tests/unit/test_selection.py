"""
Unit tests for next-selection after delete.
"""

from models.drawing import ObjectType, NO_OBJECT
from services.selection import get_next_select


class TestContainerSelection:
    """Container parents: previous item first, then next."""

    def test_previous_item(self, builder):
        a, b, c = (builder.shape(i * 60, 0) for i in range(3))
        builder.container(0, 200, [a, b, c])
        assert get_next_select(builder.repo, b) == a
        assert get_next_select(builder.repo, c) == b

    def test_first_item_selects_next(self, builder):
        a, b = builder.shape(0, 0), builder.shape(60, 0)
        builder.container(0, 200, [a, b])
        assert get_next_select(builder.repo, a) == b

    def test_only_item(self, builder):
        a = builder.shape(0, 0)
        builder.container(0, 200, [a])
        assert get_next_select(builder.repo, a) == NO_OBJECT

    def test_sparse_skips_empty_slots_backward(self, builder):
        a, c = builder.shape(0, 0), builder.shape(120, 0)
        builder.container(0, 200, [a, NO_OBJECT, c], sparse=True)
        assert get_next_select(builder.repo, c) == a

    def test_sparse_falls_forward(self, builder):
        b, d = builder.shape(60, 0), builder.shape(180, 0)
        builder.container(0, 200, [NO_OBJECT, b, NO_OBJECT, d], sparse=True)
        assert get_next_select(builder.repo, b) == d

    def test_sparse_only_empty_neighbours(self, builder):
        b = builder.shape(60, 0)
        builder.container(0, 200, [NO_OBJECT, b, NO_OBJECT], sparse=True)
        assert get_next_select(builder.repo, b) == NO_OBJECT


class TestConnectorSelection:
    """Connector parents walk the array list, skipping the anchor."""

    def test_previous_sibling(self, connector_tree):
        b = connector_tree["builder"]
        assert get_next_select(b.repo, connector_tree["B"]) == connector_tree["A"]

    def test_first_child_selects_next(self, connector_tree):
        b = connector_tree["builder"]
        assert get_next_select(b.repo, connector_tree["A"]) == connector_tree["B"]

    def test_single_child(self, builder):
        c = builder.connector()
        a = builder.shape(0, 0)
        builder.attach(a, c)
        assert get_next_select(builder.repo, a) == NO_OBJECT

    def test_flowchart_connector(self, builder):
        c = builder.connector(object_type=ObjectType.FLOWCHART_CONNECTOR)
        a, b = builder.shape(0, 0), builder.shape(0, 60)
        builder.attach(a, c)
        builder.attach(b, c)
        assert get_next_select(builder.repo, b) == NO_OBJECT


class TestNoSelection:

    def test_invalid_ids(self, builder):
        assert get_next_select(builder.repo, NO_OBJECT) == NO_OBJECT
        assert get_next_select(builder.repo, 99) == NO_OBJECT

    def test_unhooked_object(self, connector_tree):
        b = connector_tree["builder"]
        assert get_next_select(b.repo, connector_tree["R"]) == NO_OBJECT

    def test_plain_shape_parent(self, builder):
        parent = builder.shape(0, 0)
        child = builder.shape(0, 100)
        builder.attach(child, parent)
        assert get_next_select(builder.repo, child) == NO_OBJECT

    def test_dangling_parent(self, builder):
        s = builder.shape(0, 0)
        parent = builder.shape(100, 0)
        builder.attach(s, parent)
        builder.model.remove_object(parent)
        assert get_next_select(builder.repo, s) == NO_OBJECT
