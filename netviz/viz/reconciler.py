"""Keyed data-join reconciliation.

Given the keys currently rendered and a new ordered dataset, :func:`reconcile` works out
which records need a new element (enter), which reuse the element already bound to
their key (update), and which keys have no data anymore (exit). It renders nothing;
:class:`netviz.viz.elements.ElementLayer` applies the partition.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Hashable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")
Key = Hashable


class DuplicateKeyError(ValueError):
    """Two records of one dataset share a key, so element identity would be ambiguous."""

    def __init__(self, key: Key, first_index: int, second_index: int):
        super().__init__(f"Duplicate key {key!r} at positions {first_index} and {second_index}")
        self.key = key
        self.first_index = first_index
        self.second_index = second_index


@dataclass(frozen=True)
class Partition(Generic[T]):
    enter: Tuple[T, ...]
    update: Tuple[Tuple[Key, T], ...]
    exit: Tuple[Key, ...]

    @property
    def is_empty(self) -> bool:
        return not (self.enter or self.update or self.exit)


def reconcile(previous_keys: Sequence[Key], new_data: Sequence[T], key_fn: Callable[[T], Key]) -> Partition[T]:
    """Partition ``new_data`` against ``previous_keys``.

    - enter: records whose key was not rendered before, in ``new_data`` order
    - update: ``(key, record)`` for keys present before and now, in ``new_data`` order
    - exit: previously rendered keys with no record anymore, in their original order

    Raises :class:`DuplicateKeyError` if two records in ``new_data`` share a key.
    """
    seen = {}
    for index, record in enumerate(new_data):
        key = key_fn(record)
        if key in seen:
            raise DuplicateKeyError(key, seen[key], index)
        seen[key] = index

    previous = set(previous_keys)
    enter: List[T] = []
    update: List[Tuple[Key, T]] = []
    for record in new_data:
        key = key_fn(record)
        if key in previous:
            update.append((key, record))
        else:
            enter.append(record)

    exit_keys: List[Key] = []
    emitted = set()
    for key in previous_keys:
        if key not in seen and key not in emitted:
            exit_keys.append(key)
            emitted.add(key)

    return Partition(enter=tuple(enter), update=tuple(update), exit=tuple(exit_keys))
