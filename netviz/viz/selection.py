"""Per-view selection state with synchronous publish/subscribe.

Each interactive view owns one :class:`SelectionBroadcaster`. Every mutation notifies
all subscribers with the full new snapshot, so subscribers re-render idempotently
instead of patching. Subscribers are copied before dispatch: one that subscribes
during a notification is first called on the next one.

``active`` separates "nothing selected because no gesture constrains the view"
(brush cleared or never drawn) from "a brush is drawn but covers no keys". Only the
latter dims every key.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, Hashable, Iterable, List, Optional

from netviz.config.observability import log_error, log_event

Key = Hashable

SELECTION_CHANGED = "selection_changed"


@dataclass(frozen=True)
class SelectionChanged:
    source: str
    keys: FrozenSet[Key]
    active: bool
    name: str = SELECTION_CHANGED

    def includes(self, key: Key) -> bool:
        """True when ``key`` should render as selected-or-unfiltered."""
        return not self.active or key in self.keys


SelectionHandler = Callable[[SelectionChanged], None]


@dataclass
class Subscription:
    handler: SelectionHandler
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class SelectionBroadcaster:
    def __init__(self, source: str):
        self.source = source
        self._keys: set = set()
        self._active = False
        self._subs: List[Subscription] = []

    def __contains__(self, key: Key) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def active(self) -> bool:
        return self._active

    def snapshot(self) -> FrozenSet[Key]:
        return frozenset(self._keys)

    def event(self) -> SelectionChanged:
        return SelectionChanged(source=self.source, keys=self.snapshot(), active=self._active)

    def subscribe(self, handler: SelectionHandler) -> Subscription:
        sub = Subscription(handler=handler)
        self._subs.append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        sub.cancel()
        self._subs = [s for s in self._subs if s is not sub]

    def toggle(self, key: Key) -> FrozenSet[Key]:
        if key in self._keys:
            self._keys.discard(key)
        else:
            self._keys.add(key)
        self._active = bool(self._keys)
        return self._publish()

    def clear(self) -> FrozenSet[Key]:
        self._keys.clear()
        self._active = False
        return self._publish()

    def replace(self, keys: Iterable[Key], active: Optional[bool] = None) -> FrozenSet[Key]:
        """Swap in a whole new set (one brush gesture) as a single mutation."""
        self._keys = set(keys)
        self._active = bool(self._keys) if active is None else active
        return self._publish()

    def _publish(self) -> FrozenSet[Key]:
        event = self.event()
        subs = list(self._subs)
        log_event(SELECTION_CHANGED, source=self.source, size=len(event.keys), active=event.active)
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(event)
            except Exception as exc:  # noqa: BLE001
                log_error("selection_handler_failed", str(exc), source=self.source, handler=repr(sub.handler))
        return event.keys
