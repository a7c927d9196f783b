# snow_sim/policy/reroute.py
from snow_sim.app.protocols import ReroutePolicy
from snow_sim.domain.entities.geography import Route
from snow_sim.domain.network import RoadGraph

OBSTRUCTION_PENALTY = 100.0


def remaining_cost(graph: RoadGraph, route: Route) -> float:
    """Coarse route cost used for reroute comparisons (not the planner's edge cost)."""
    cost = 0.0
    for sid in route:
        seg = graph.segment(sid)
        cost += 1.0 + seg.accumulation * 0.5
        if seg.obstructed:
            cost += OBSTRUCTION_PENALTY
    return cost


class HysteresisReroutePolicy(ReroutePolicy):
    """Re-plan only from the start of a bad segment, and only for a clear improvement.

    The 0.1 progress gate and 0.8 ratio are empirically tuned values, kept as
    configuration.
    """

    def __init__(
        self,
        interval_s: float = 1.0,
        threshold: float = 8.0,
        max_progress: float = 0.1,
        hysteresis: float = 0.8,
    ):
        self.interval_s = interval_s
        self.threshold = threshold
        self.max_progress = max_progress
        self.hysteresis = hysteresis

    def wants_reroute(self, graph: RoadGraph, segment_id: str, fraction: float) -> bool:
        if fraction > self.max_progress:
            return False
        seg = graph.segment(segment_id)
        return seg.accumulation > self.threshold or seg.obstructed

    def accepts(self, old_cost: float, new_cost: float) -> bool:
        return new_cost < old_cost * self.hysteresis
