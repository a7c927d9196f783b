# snow_sim/app/controllers/snow.py
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from snow_sim.app.events import StormPhaseChanged
from snow_sim.domain.network import RoadGraph

Tier = Literal["clear", "light", "moderate", "deep"]


@dataclass(frozen=True)
class StormPhase:
    duration_s: float
    intensity: float  # multiplier on the base accumulation rate
    name: str


@dataclass(frozen=True)
class Tiers:
    clear: float = 2.0
    light: float = 5.0
    moderate: float = 8.0
    deep: float = 9.0  # immobilization boundary

    def classify(self, accumulation: float) -> Tier:
        if accumulation <= self.clear:
            return "clear"
        if accumulation <= self.light:
            return "light"
        if accumulation <= self.moderate:
            return "moderate"
        return "deep"


class SnowLayer:
    """Cyclic storm schedule driving accumulation on every non-exempt segment."""

    def __init__(
        self,
        graph: RoadGraph,
        phases: list[StormPhase],
        *,
        base_rate: float = 0.3,
        tiers: Tiers | None = None,
        exempt: Iterable[str] = (),
    ):
        if not phases:
            raise ValueError("storm schedule needs at least one phase")
        self.graph = graph
        self.phases = list(phases)
        self.base_rate = base_rate
        self.tiers = tiers or Tiers()
        self.exempt = frozenset(exempt)
        for sid in self.exempt:
            graph.segment(sid)
        self.phase_index = 0
        self.phase_timer = 0.0

    @property
    def phase(self) -> StormPhase:
        return self.phases[self.phase_index]

    @property
    def phase_name(self) -> str:
        return self.phase.name

    @property
    def intensity(self) -> float:
        return self.phase.intensity

    def update(self, now: float, dt: float) -> list[StormPhaseChanged]:
        out = self._advance_phase(now, dt)
        amount = self.base_rate * self.intensity * dt
        if amount > 0:
            for sid in self.graph.segments:
                if sid not in self.exempt:
                    self.graph.accumulate(sid, amount)
        return out

    def _advance_phase(self, now: float, dt: float) -> list[StormPhaseChanged]:
        self.phase_timer += dt
        if self.phase_timer < self.phase.duration_s:
            return []
        self.phase_timer = 0.0
        self.phase_index = (self.phase_index + 1) % len(self.phases)
        return [
            StormPhaseChanged(
                t=now, name=self.phase_name, intensity=self.intensity, phase_index=self.phase_index
            )
        ]

    def clear(self, segment_id: str, amount: float) -> float:
        return self.graph.clear(segment_id, amount)

    def tier(self, accumulation: float) -> Tier:
        return self.tiers.classify(accumulation)

    def set_accumulation_rate(self, rate: float) -> None:
        if rate < 0:
            raise ValueError(f"accumulation rate must be >= 0, got {rate}")
        self.base_rate = rate
