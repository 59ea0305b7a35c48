from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from netviz.viz.selection import SelectionBroadcaster, SelectionChanged
from netviz.viz.transitions import TransitionScheduler


@dataclass(frozen=True)
class Margin:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class Viewport:
    """Logical canvas size; charts draw inside it, minus the margins."""

    width: float
    height: float
    margin: Margin

    @property
    def inner_width(self) -> float:
        return max(0.0, self.width - self.margin.left - self.margin.right)

    @property
    def inner_height(self) -> float:
        return max(0.0, self.height - self.margin.top - self.margin.bottom)


class IChartController(ABC):
    """One chart view: filter state, scales and the elements it owns.

    records: typed records of `dataset` (see netviz.schemas.datasets)
    settings: netviz.config.settings.Settings (or any object with the same fields)
    scheduler: shared TransitionScheduler; views on one page share one

    To add a new chart: create a controller in netviz/viz/strategies/, implement the
    abstract methods and register its key in netviz/viz/__init__.py.
    """

    chart_key: str = ""
    dataset: str = ""
    title: str = ""
    default_viewport: Viewport = Viewport(900, 400, Margin(20, 20, 40, 60))

    def __init__(
        self,
        records: Sequence[Any],
        settings: Any,
        scheduler: Optional[TransitionScheduler] = None,
        viewport: Optional[Viewport] = None,
    ):
        self.records = list(records)
        self.settings = settings
        self.scheduler = scheduler or TransitionScheduler()
        self.viewport = viewport or self.default_viewport
        self.linked: Optional[SelectionChanged] = None

    @property
    def selection(self) -> Optional[SelectionBroadcaster]:
        """Selection owned by this view, if it is interactive."""
        return None

    @abstractmethod
    def visible_subset(self) -> List[Any]:
        ...

    @abstractmethod
    def render(self) -> None:
        """Rebind scales to the visible subset and join every element layer."""

    @abstractmethod
    def apply_filters(self, filters: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def frame(self) -> pd.DataFrame:
        """Current attributes of every element, flattened to plot-area pixels."""

    @abstractmethod
    def to_spec(self) -> Dict[str, Any]:
        ...

    def on_linked_selection(self, event: SelectionChanged) -> None:
        """Subscriber hook for another view's selection."""
        self.linked = event
        self.restyle()

    def is_highlighted(self, key: Any) -> bool:
        return self.linked is None or self.linked.includes(key)

    def restyle(self) -> None:
        pass
