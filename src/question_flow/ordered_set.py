# question_flow/ordered_set.py
from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class OrderedSet(Generic[T]):
    """
    Insertion-ordered collection without duplicates.

    Every "merge without duplicates, keep first-seen order" step in the rules
    and the engine goes through this type: question accumulation, the effect
    index and the recover list.
    """

    __slots__ = ("_items", "_seen")

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: list[T] = []
        self._seen: set[T] = set()
        self.update(items)

    def add(self, item: T) -> bool:
        if item in self._seen:
            return False
        self._seen.add(item)
        self._items.append(item)
        return True

    def update(self, items: Iterable[T]) -> None:
        for item in items:
            self.add(item)

    def discard_all(self, items: Iterable[T]) -> None:
        drop = set(items) & self._seen
        if not drop:
            return
        self._items = [item for item in self._items if item not in drop]
        self._seen -= drop

    def intersection(self, other: Iterable[T]) -> tuple[T, ...]:
        other_set = set(other)
        return tuple(item for item in self._items if item in other_set)

    def clear(self) -> None:
        self._items.clear()
        self._seen.clear()

    def as_tuple(self) -> tuple[T, ...]:
        return tuple(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._seen

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"OrderedSet({self._items!r})"
