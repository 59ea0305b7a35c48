"""Tick-driven attribute transitions.

The scheduler never blocks: the host calls :meth:`TransitionScheduler.tick` from its
frame callback (or awaits :meth:`TransitionScheduler.run_until_idle`) and every
in-flight transition advances by wall-clock time. There is at most one running
transition per (element, attribute group); starting another one on the same slot
cancels the old one, whose ``on_complete`` then never fires.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from netviz.viz.interpolate import Interpolator, interpolate

Ease = Callable[[float], float]
Clock = Callable[[], float]

DEFAULT_GROUP = "default"
STYLE_GROUP = "style"

RUNNING = "running"
CANCELLED = "cancelled"
DONE = "done"


def ease_linear(t: float) -> float:
    return t


def ease_cubic_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class ManualClock:
    """Clock advanced by hand, for tests and for rendering a frame at a chosen time."""

    def __init__(self, start_ms: float = 0.0):
        self.now = float(start_ms)

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


class Transition:
    def __init__(
        self,
        element: Any,
        group: str,
        start_attrs: Mapping[str, Any],
        target_attrs: Mapping[str, Any],
        start_ms: float,
        duration_ms: float,
        ease: Ease,
        on_complete: Optional[Callable[[], None]],
    ):
        self.element = element
        self.group = group
        self.start_attrs = dict(start_attrs)
        self.target_attrs = dict(target_attrs)
        self.start_ms = start_ms
        self.duration_ms = max(0.0, float(duration_ms))
        self.ease = ease
        self.on_complete = on_complete
        self.state = RUNNING
        self._interpolators: Dict[str, Interpolator] = {
            name: interpolate(self.start_attrs[name], target) for name, target in self.target_attrs.items()
        }

    def progress(self, now: float) -> float:
        if self.duration_ms == 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.start_ms) / self.duration_ms))

    def values_at(self, now: float) -> Dict[str, Any]:
        t = self.progress(now)
        if t >= 1.0:
            return dict(self.target_attrs)
        eased = self.ease(t)
        return {name: interp(eased) for name, interp in self._interpolators.items()}

    def __repr__(self) -> str:
        return (
            f"Transition(group={self.group!r}, attrs={sorted(self.target_attrs)}, "
            f"duration_ms={self.duration_ms}, state={self.state})"
        )


class TransitionScheduler:
    """Drives transitions on objects exposing a mutable ``attrs`` dict."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock: Clock = clock or monotonic_ms
        self._active: Dict[Tuple[int, str], Transition] = {}

    def now(self) -> float:
        return self._clock()

    @property
    def active_count(self) -> int:
        return len(self._active)

    def is_active(self, element: Any, group: Optional[str] = None) -> bool:
        return any(
            t.element is element and (group is None or t.group == group) for t in self._active.values()
        )

    def animate(
        self,
        element: Any,
        from_attrs: Optional[Mapping[str, Any]],
        to_attrs: Mapping[str, Any],
        duration_ms: float,
        on_complete: Optional[Callable[[], None]] = None,
        *,
        ease: Ease = ease_cubic_in_out,
        group: str = DEFAULT_GROUP,
    ) -> Transition:
        """Start interpolating ``element.attrs`` towards ``to_attrs``.

        If the slot already runs a transition, it is cancelled and the new one starts
        from the current interpolated values; ``from_attrs`` then only seeds attributes
        the cancelled transition did not touch.
        """
        now = self.now()
        slot = (id(element), group)
        previous = self._active.pop(slot, None)
        seed = dict(from_attrs or {})
        if previous is not None:
            previous.state = CANCELLED
            element.attrs.update(previous.values_at(now))
            seed = {k: v for k, v in seed.items() if k not in previous.target_attrs}
        element.attrs.update(seed)
        start = {name: element.attrs.get(name, target) for name, target in to_attrs.items()}
        transition = Transition(element, group, start, to_attrs, now, duration_ms, ease, on_complete)
        self._active[slot] = transition
        return transition

    def cancel(self, element: Any, group: Optional[str] = None) -> int:
        """Stop transitions on ``element`` where they are; their callbacks never fire."""
        now = self.now()
        cancelled = 0
        for slot, transition in list(self._active.items()):
            if transition.element is element and (group is None or transition.group == group):
                del self._active[slot]
                element.attrs.update(transition.values_at(now))
                transition.state = CANCELLED
                cancelled += 1
        return cancelled

    def tick(self, now: Optional[float] = None) -> int:
        """Advance every running transition; returns how many are still running."""
        now = self.now() if now is None else now
        for slot, transition in list(self._active.items()):
            if transition.state != RUNNING:
                continue
            transition.element.attrs.update(transition.values_at(now))
            if transition.progress(now) < 1.0:
                continue
            if self._active.get(slot) is transition:
                del self._active[slot]
            transition.state = DONE
            if transition.on_complete is not None:
                transition.on_complete()
        return len(self._active)

    def flush(self, max_rounds: int = 100) -> None:
        """Jump every transition (and any chained from a completion) to its end state."""
        for _ in range(max_rounds):
            if not self._active:
                return
            self.tick(now=float("inf"))
        raise RuntimeError(f"Transitions still running after {max_rounds} flush rounds")

    async def run_until_idle(self, frame_ms: float = 1000 / 60) -> None:
        while self._active:
            self.tick()
            await asyncio.sleep(frame_ms / 1000)
