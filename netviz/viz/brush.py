from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable, Optional, Sequence, Set


@dataclass(frozen=True)
class BrushRect:
    """Closed pixel rectangle in plot coordinates, normalised so x0<=x1 and y0<=y1."""

    x0: float
    y0: float
    x1: float
    y1: float

    @classmethod
    def from_corners(cls, x0: float, y0: float, x1: float, y1: float) -> "BrushRect":
        return cls(min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))

    @classmethod
    def parse(cls, raw: Optional[Sequence[Any]]) -> Optional["BrushRect"]:
        """Accept ``[x0, y0, x1, y1]`` or ``[[x0, y0], [x1, y1]]``; ``None`` means no brush."""
        if raw is None:
            return None
        values = list(raw)
        if len(values) == 2 and all(isinstance(v, (list, tuple)) for v in values):
            values = [*values[0], *values[1]]
        if len(values) != 4:
            raise ValueError(f"Brush needs four coordinates, got {len(values)}")
        return cls.from_corners(*(float(v) for v in values))

    @property
    def is_empty(self) -> bool:
        return self.x1 <= self.x0 or self.y1 <= self.y0

    def contains(self, x: float, y: float) -> bool:
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1


def hit_test(
    rect: Optional[BrushRect],
    records: Iterable[Any],
    key_fn: Callable[[Any], Hashable],
    x_of: Callable[[Any], float],
    y_of: Callable[[Any], float],
    x_scale: Callable[[float], float],
    y_scale: Callable[[float], float],
) -> Set[Hashable]:
    """Keys whose scaled position lies inside ``rect``.

    A missing or zero-area rectangle (cleared brush, plain click) selects nothing.
    """
    if rect is None or rect.is_empty:
        return set()
    hits: Set[Hashable] = set()
    for record in records:
        if rect.contains(x_scale(x_of(record)), y_scale(y_of(record))):
            hits.add(key_fn(record))
    return hits
