"""
Change Reducers

Pure apply-by-identity functions used for both local optimistic updates and
push events. Each returns a new list; applying the same change twice gives
the same result as applying it once.
"""
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..models.change_event import ChangeEvent, ChangeType

T = TypeVar("T")

KeyFn = Callable[[Any], Any]


def _by_id(item: Any) -> Any:
    return item.id


def upsert(items: List[T], item: T, key: KeyFn = _by_id, prepend: bool = False) -> List[T]:
    """Replace the item with the same key, or add it if absent"""
    item_key = key(item)
    replaced = False
    result = []
    for existing in items:
        if key(existing) == item_key:
            result.append(item)
            replaced = True
        else:
            result.append(existing)
    if not replaced:
        result = [item] + result if prepend else result + [item]
    return result


def remove(items: List[T], item_key: Any, key: KeyFn = _by_id) -> List[T]:
    """Drop the item with the given key if present"""
    return [existing for existing in items if key(existing) != item_key]


def patch(items: List[T], item_key: Any, update: Callable[[T], T], key: KeyFn = _by_id) -> List[T]:
    """Apply update() to the item with the given key, leaving others untouched"""
    return [update(existing) if key(existing) == item_key else existing for existing in items]


def apply_change(
    items: List[T],
    change: ChangeEvent,
    parse: Callable[[dict], T],
    key: KeyFn = _by_id,
    prepend: bool = False,
    record_key: Optional[Callable[[dict], Any]] = None,
) -> List[T]:
    """
    Reduce a change-feed event into a mirror list.

    INSERT / UPDATE: replace if present, add if absent.
    DELETE: remove if present.
    record_key extracts the identity from a raw record (needed for DELETE,
    where only the old row is available).
    """
    if change.type == ChangeType.DELETE:
        old = change.old or {}
        if record_key is not None:
            item_key = record_key(old)
        else:
            item_key = key(parse(old))
        return remove(items, item_key, key)

    if change.new is None:
        return items
    return upsert(items, parse(change.new), key, prepend=prepend)


class ChangeSequence:
    """
    Per-key change counters.

    A handler that re-reads a row takes a ticket before awaiting and applies
    the result only if no later change to the same key arrived meanwhile.
    """

    def __init__(self):
        self._counters: Dict[Any, int] = {}

    def bump(self, item_key: Any) -> int:
        ticket = self._counters.get(item_key, 0) + 1
        self._counters[item_key] = ticket
        return ticket

    def is_current(self, item_key: Any, ticket: int) -> bool:
        return self._counters.get(item_key) == ticket
