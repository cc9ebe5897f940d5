"""Ordering engine for missions, slides and catalog cases.

Every function returns a new list; items are frozen models and are copied
with their position rewritten. After ``append``, ``move`` or a renumbering
``remove`` the positions of a collection of N items are exactly 1..N.
"""

from enum import Enum
from typing import List, Sequence, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


def index_of(collection: Sequence[T], item_id: str) -> int:
    """Position of the item with ``item_id``, or -1."""
    for index, item in enumerate(collection):
        if item.id == item_id:
            return index
    return -1


def reindex(collection: Sequence[T], field: str = "order") -> List[T]:
    """Rewrite ``field`` of every item to its 1-based position."""
    return [
        item if getattr(item, field) == position else item.model_copy(update={field: position})
        for position, item in enumerate(collection, start=1)
    ]


def append(collection: Sequence[T], item: T, field: str = "order") -> List[T]:
    """Append ``item`` at position ``len(collection) + 1``."""
    return [*collection, item.model_copy(update={field: len(collection) + 1})]


def remove(
    collection: Sequence[T],
    item_id: str,
    field: str = "order",
    renumber: bool = True,
) -> List[T]:
    """Drop the item with ``item_id`` and renumber the survivors.

    With ``renumber=False`` survivors keep their previous positions, which
    leaves a gap; only callers that renumber later should ask for that.
    """
    survivors = [item for item in collection if item.id != item_id]
    return reindex(survivors, field) if renumber else survivors


def move(
    collection: Sequence[T],
    item_id: str,
    direction: Union[Direction, str],
    field: str = "order",
) -> List[T]:
    """Swap the item with its neighbour in ``direction``.

    Moving the first item up, the last item down, or an unknown id leaves
    the collection unchanged.
    """
    direction = Direction(direction)
    items = list(collection)
    index = index_of(items, item_id)
    if index == -1:
        return items

    if direction == Direction.UP and index > 0:
        target = index - 1
    elif direction == Direction.DOWN and index < len(items) - 1:
        target = index + 1
    else:
        return items

    items[index], items[target] = items[target], items[index]
    return reindex(items, field)
