from typing import Protocol, runtime_checkable

from snow_sim.domain.entities.geography import Route
from snow_sim.domain.network import RoadGraph


# ------------- Mechanics --------------------
@runtime_checkable
class OriginDestinationSampler(Protocol):
    """Pick a spawn origin and a distinct destination, or None if the network has too few."""

    def sample(self) -> tuple[str, str] | None: ...


@runtime_checkable
class RoutePlanner(Protocol):
    """
    Responsibilities:
      • Compute a route between two locations under a cost policy.
      • Signal "no route" with None, never by raising.
    """

    def route(self, graph: RoadGraph, start: str, goal: str, policy) -> Route | None: ...


@runtime_checkable
class SpeedModel(Protocol):
    """
    Effective speed on a segment given the agent's base speed and the
    segment's accumulation. Agents that ignore conditions return `base`.
    """

    def factor(self, accumulation: float) -> float: ...
    def speed(self, base: float, *, accumulation: float = 0.0) -> float: ...


# --------------- Policies -------------------------


@runtime_checkable
class ReroutePolicy(Protocol):
    interval_s: float

    def wants_reroute(self, graph: RoadGraph, segment_id: str, fraction: float) -> bool: ...
    def accepts(self, old_cost: float, new_cost: float) -> bool: ...


@runtime_checkable
class DispatchGate(Protocol):
    @property
    def remaining_s(self) -> float: ...
    def ready(self) -> bool: ...
    def start(self) -> None: ...
    def tick(self, dt: float) -> None: ...
