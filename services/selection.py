"""
Selection navigation.

Picks the object to select after the current one goes away (for example
after a delete): the previous sibling in the parent container or
connector, otherwise the next one.
"""

import logging

from models.drawing import DrawingObject, NO_OBJECT
from services.graph_repository import GraphRepository

logger = logging.getLogger(__name__)


def get_next_select(repo: GraphRepository, selected_id: int) -> int:
    """
    Return the id to select next, or NO_OBJECT (-1).

    - Parent is a flow-chart connector: no next selection.
    - Parent is another connector: nearest live sibling in its array list.
    - Parent is a container: previous item, else next item (sparse lists
      skip empty slots).
    - No hook: the child connector array is looked up but yields nothing.
    """
    if selected_id is None or selected_id < 0:
        return NO_OBJECT

    current = repo.resolve(selected_id)
    if current is None:
        return NO_OBJECT

    if current.hooks:
        parent = repo.resolve(current.hooks[0].parent_id)
        if parent is None:
            return NO_OBJECT

        if parent.is_connector:
            if parent.is_flowchart_connector:
                return NO_OBJECT
            return _connector_next_select(parent, selected_id)

        if parent.is_container:
            return _container_next_select(parent, selected_id)

        return NO_OBJECT

    child_array = repo.find_child_array(selected_id, NO_OBJECT)
    if child_array >= 0:
        logger.debug(f"Selection {selected_id} anchors connector {child_array}, no sibling to select")
    return NO_OBJECT


def _container_next_select(container: DrawingObject, selected_id: int) -> int:
    container_list = container.container_list
    items = container_list.items
    index = container_list.index_of(selected_id)

    if container_list.sparse:
        for i in range(index - 1, -1, -1):
            if items[i].id >= 0:
                return items[i].id
        for i in range(index + 1, len(items)):
            if items[i].id >= 0:
                return items[i].id
        return NO_OBJECT

    if index < 0:
        return NO_OBJECT
    if index > 0:
        return items[index - 1].id
    if len(items) > 1:
        return items[index + 1].id
    return NO_OBJECT


def _connector_next_select(connector: DrawingObject, selected_id: int) -> int:
    # Index 0 is the connector's own anchor and never a candidate
    entries = connector.array_list.hooks if connector.array_list else []
    index = NO_OBJECT
    for i in range(1, len(entries)):
        if entries[i].hook_id == selected_id:
            index = i
            break
    if index < 0:
        return NO_OBJECT

    for i in range(index - 1, 0, -1):
        if entries[i].hook_id >= 0:
            return entries[i].hook_id
    for i in range(index + 1, len(entries)):
        if entries[i].hook_id >= 0:
            return entries[i].hook_id
    return NO_OBJECT
