"""Rendered elements and the keyed layers that own them."""
from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, Hashable, Iterator, List, Mapping, Optional, Sequence

from netviz.viz.reconciler import Partition, reconcile
from netviz.viz.transitions import DEFAULT_GROUP, TransitionScheduler

_element_ids = itertools.count(1)

ElementHook = Callable[["Element", Any], None]
ExitHook = Callable[["Element"], None]


class Element:
    """A visual primitive bound to one record key.

    ``id`` is assigned once and never reused, so it identifies the element across
    data refreshes; ``datum`` is replaced on every update.
    """

    def __init__(self, key: Hashable, kind: str, datum: Any = None, attrs: Optional[Mapping[str, Any]] = None):
        self.id = next(_element_ids)
        self.key = key
        self.kind = kind
        self.datum = datum
        self.attrs: Dict[str, Any] = dict(attrs or {})
        self.children: Dict[str, ElementLayer] = {}
        self.exiting = False
        self.removed = False

    def child(self, name: str, kind: str, scheduler: TransitionScheduler) -> "ElementLayer":
        layer = self.children.get(name)
        if layer is None:
            layer = ElementLayer(name, kind, scheduler)
            self.children[name] = layer
        return layer

    def __repr__(self) -> str:
        state = "removed" if self.removed else "exiting" if self.exiting else "live"
        return f"Element(id={self.id}, kind={self.kind!r}, key={self.key!r}, {state})"


class ElementLayer:
    """Keyed group of elements of one kind, joined against successive datasets.

    Elements leaving the data stay in the layer while their exit transition runs. If
    their key returns before removal they are revived instead of recreated.
    """

    def __init__(self, name: str, kind: str, scheduler: TransitionScheduler):
        self.name = name
        self.kind = kind
        self.scheduler = scheduler
        self._live: Dict[Hashable, Element] = {}
        self._exiting: Dict[Hashable, Element] = {}

    def __len__(self) -> int:
        return len(self._live)

    def __iter__(self) -> Iterator[Element]:
        return iter(list(self._live.values()))

    def __contains__(self, key: Hashable) -> bool:
        return key in self._live

    def get(self, key: Hashable) -> Optional[Element]:
        return self._live.get(key)

    def keys(self) -> List[Hashable]:
        return list(self._live)

    def exiting(self) -> List[Element]:
        return list(self._exiting.values())

    def all_elements(self) -> List[Element]:
        """Live elements in data order, then elements still running their exit."""
        return list(self._live.values()) + list(self._exiting.values())

    def join(
        self,
        data: Sequence[Any],
        key_fn: Callable[[Any], Hashable],
        enter: ElementHook,
        update: Optional[ElementHook] = None,
        exit: Optional[ExitHook] = None,
    ) -> Partition:
        """Reconcile the layer with ``data`` and hand each partition to its hook.

        ``enter`` receives a fresh element, ``update`` the element already bound to the
        key (the same instance as before), ``exit`` each departing element. Without an
        ``exit`` hook departing elements are removed at once. Update hooks run for
        revived elements too.
        """
        previous = list(self._live) + [k for k in self._exiting if k not in self._live]
        partition = reconcile(previous, data, key_fn)

        by_key = {key_fn(record): record for record in data}
        ordered: Dict[Hashable, Element] = {}
        for record in data:
            key = key_fn(record)
            element = self._live.get(key)
            if element is None:
                element = self._exiting.pop(key, None)
                if element is not None:
                    self.scheduler.cancel(element, DEFAULT_GROUP)
                    element.exiting = False
            if element is None:
                element = Element(key, self.kind, record)
                ordered[key] = element
                enter(element, record)
            else:
                element.datum = by_key[key]
                ordered[key] = element
                if update is not None:
                    update(element, record)

        for key in partition.exit:
            if key in self._exiting:
                continue
            element = self._live.get(key)
            if element is None:
                continue
            element.exiting = True
            self._exiting[key] = element
            if exit is None:
                self.remove(element)
            else:
                exit(element)

        self._live = ordered
        return partition

    def transition_out(self, element: Element, to_attrs: Mapping[str, Any], duration_ms: float) -> None:
        """Exit transition that removes ``element`` once it completes."""
        self.scheduler.animate(
            element, None, to_attrs, duration_ms, on_complete=lambda: self.remove(element), group=DEFAULT_GROUP
        )

    def remove(self, element: Element) -> None:
        if self._exiting.get(element.key) is element:
            del self._exiting[element.key]
        elif self._live.get(element.key) is element:
            del self._live[element.key]
        self.scheduler.cancel(element)
        for layer in element.children.values():
            layer.clear()
        element.exiting = False
        element.removed = True

    def clear(self) -> None:
        for element in self.all_elements():
            self.remove(element)
