import heapq
import itertools
import math
from dataclasses import dataclass
from typing import ClassVar

from snow_sim.domain.entities.geography import Route, Segment
from snow_sim.domain.network import RoadGraph

ACCUMULATION_WEIGHT = 0.5
ACCUMULATION_CAP = 5.0
ACCUMULATION_SCALE = 10.0


@dataclass(frozen=True)
class RoutePolicy:
    ignore_obstruction: bool = False
    ignore_accumulation: bool = False

    DEFAULT: ClassVar["RoutePolicy"]
    IGNORE_ALL: ClassVar["RoutePolicy"]

    def admits(self, seg: Segment) -> bool:
        return self.ignore_obstruction or not seg.obstructed

    def penalty(self, seg: Segment) -> float:
        if self.ignore_accumulation:
            return 0.0
        return min(seg.accumulation * ACCUMULATION_WEIGHT, ACCUMULATION_CAP) * ACCUMULATION_SCALE


RoutePolicy.DEFAULT = RoutePolicy()
RoutePolicy.IGNORE_ALL = RoutePolicy(ignore_obstruction=True, ignore_accumulation=True)


def edge_cost(graph: RoadGraph, seg: Segment, policy: RoutePolicy) -> float:
    return graph.distance(seg.a, seg.b) + policy.penalty(seg)


def route_cost(graph: RoadGraph, route: Route, policy: RoutePolicy = RoutePolicy.DEFAULT) -> float:
    return sum(edge_cost(graph, graph.segment(sid), policy) for sid in route)


class AStarRoutePlanner:
    """Informed shortest-route search over a RoadGraph.

    Edge cost is Euclidean length plus a capped accumulation penalty, so the
    straight-line heuristic never overestimates. Stateless; safe to call every
    tick. Returns None when the goal is unreachable under the policy.
    """

    def route(
        self,
        graph: RoadGraph,
        start: str,
        goal: str,
        policy: RoutePolicy = RoutePolicy.DEFAULT,
    ) -> Route | None:
        graph.location(start)
        graph.location(goal)
        if start == goal:
            return Route()

        seq = itertools.count()
        # (f, g, insertion order, node): lowest f, then lowest g, then FIFO
        open_heap: list[tuple[float, float, int, str]] = [
            (self._h(graph, start, goal), 0.0, next(seq), start)
        ]
        best_g: dict[str, float] = {start: 0.0}
        parent: dict[str, tuple[str, str]] = {}  # node -> (previous node, segment id)
        closed: set[str] = set()

        while open_heap:
            _, g, _, u = heapq.heappop(open_heap)
            if u in closed or g > best_g.get(u, math.inf):
                continue
            if u == goal:
                return self._reconstruct(parent, goal)
            closed.add(u)

            for sid in graph.adjacency[u]:
                seg = graph.segments[sid]
                if not policy.admits(seg):
                    continue
                v = graph.other_endpoint(sid, u)
                if v in closed:
                    continue
                g_v = g + edge_cost(graph, seg, policy)
                if g_v >= best_g.get(v, math.inf):
                    continue
                best_g[v] = g_v
                parent[v] = (u, sid)
                heapq.heappush(open_heap, (g_v + self._h(graph, v, goal), g_v, next(seq), v))
        return None

    @staticmethod
    def _h(graph: RoadGraph, u: str, goal: str) -> float:
        return graph.distance(u, goal)

    @staticmethod
    def _reconstruct(parent: dict[str, tuple[str, str]], goal: str) -> Route:
        sids: list[str] = []
        node = goal
        while node in parent:
            node, sid = parent[node]
            sids.append(sid)
        return Route.of(reversed(sids))
