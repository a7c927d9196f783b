# sim/kernel.py

import time
from collections import deque
from collections.abc import Callable, Iterable
from typing import Protocol

from .event import BaseEvent
from .hooks import KernelHooks, NoopHooks

Handler = Callable[[BaseEvent], Iterable[BaseEvent] | None]


class TickSystem(Protocol):
    """Advanced once per tick, in registration order."""

    def update(self, now: float, dt: float) -> Iterable[BaseEvent] | None: ...


class Kernel:
    """Fixed-order tick driver with a synchronous event bus.

    Each `step(dt)` advances the clock, then updates the registered systems in
    registration order. Events a system returns are dispatched (FIFO,
    including handler follow-ups) before the next system runs.
    """

    def __init__(self, hooks: KernelHooks | None = None):
        self._t = 0.0
        self._ticks = 0
        self._seq = 0
        self._q: deque[BaseEvent] = deque()
        self._subs: dict[type[BaseEvent], list[Handler]] = {}
        self._systems: list[TickSystem] = []
        self._hooks = hooks or NoopHooks()

    @property
    def now(self) -> float:
        return self._t

    @property
    def ticks(self) -> int:
        return self._ticks

    def on(self, etype: type[BaseEvent], handler: Handler) -> None:
        self._subs.setdefault(etype, []).append(handler)

    def add_system(self, system: TickSystem) -> None:
        self._systems.append(system)

    def emit(self, ev: BaseEvent) -> None:
        if ev.t + 1e-12 < self._t:
            self._hooks.error(ev, reason="emitted_past", now=self._t)
            raise RuntimeError(f"event emitted in the past: {ev.t} < now {self._t}")
        self._q.append(ev)
        self._hooks.schedule(ev, now=self._t, qsize=len(self._q))

    def submit(self, ev: BaseEvent) -> list[BaseEvent]:
        """Emit an inbound command between ticks and dispatch it to completion."""
        self.emit(ev)
        return self._drain()

    def step(self, dt: float) -> list[BaseEvent]:
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt}")
        self._t += dt
        self._ticks += 1
        dispatched: list[BaseEvent] = []
        for system in self._systems:
            for ev in system.update(self._t, dt) or ():
                self.emit(ev)
            dispatched.extend(self._drain())
        return dispatched

    def run(self, duration: float, dt: float, max_ticks: int | None = None) -> int:
        if dt <= 0:
            raise ValueError(f"dt must be > 0, got {dt}")
        t0 = time.perf_counter()
        until = self._t + duration
        self._hooks.run_start(until=until, dt=dt, max_ticks=max_ticks)
        ticks = 0
        while self._t + dt <= until + 1e-9:
            self.step(dt)
            ticks += 1
            if max_ticks and ticks >= max_ticks:
                break
        self._hooks.run_end(
            ticks=ticks,
            last_t=self._t,
            wall_ms=(time.perf_counter() - t0) * 1000,
        )
        return ticks

    def _drain(self) -> list[BaseEvent]:
        done: list[BaseEvent] = []
        while self._q:
            ev = self._q.popleft()
            self._seq += 1
            handlers = self._subs.get(type(ev), ())
            t1 = time.perf_counter()
            self._hooks.dispatch_start(ev, seq=self._seq, qsize=len(self._q), handlers=len(handlers))
            produced = 0
            for h in handlers:
                for nxt in h(ev) or ():
                    self.emit(nxt)
                    produced += 1
            ms = (time.perf_counter() - t1) * 1000
            self._hooks.dispatch_end(ev, produced=produced, qsize=len(self._q), ms=ms)
            done.append(ev)
        return done
