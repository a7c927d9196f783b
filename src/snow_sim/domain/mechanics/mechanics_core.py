# snow_sim/domain/mechanics/mechanics_core.py
from dataclasses import dataclass

from snow_sim.app.protocols import OriginDestinationSampler, RoutePlanner, SpeedModel
from snow_sim.domain.entities.geography import Route
from snow_sim.domain.entities.motion import Pose, RouteProgress
from snow_sim.domain.mechanics.mechanics_path_traversers import RouteTraverser
from snow_sim.domain.mechanics.mechanics_routers import RoutePolicy
from snow_sim.domain.network import RoadGraph


@dataclass
class Mechanics:
    """Facade bundling the graph with planning and movement so controllers don't juggle pieces."""

    graph: RoadGraph
    od_sampler: OriginDestinationSampler
    route_planner: RoutePlanner
    car_speed: SpeedModel
    service_speed: SpeedModel
    traverser: RouteTraverser

    def od_pair(self) -> tuple[str, str] | None:
        return self.od_sampler.sample()

    def route(self, a: str, b: str, policy: RoutePolicy = RoutePolicy.DEFAULT) -> Route | None:
        return self.route_planner.route(self.graph, a, b, policy)

    def shortest_approach(self, start: str, segment_id: str, policy: RoutePolicy) -> Route | None:
        """Route with fewer segments from `start` to either end of a segment, then the segment itself.

        Ties go to endpoint `a`.
        """
        seg = self.graph.segment(segment_id)
        best: Route | None = None
        for end in seg.endpoints:
            r = self.route(start, end, policy)
            if r is None:
                continue
            if best is None or len(r) < len(best):
                best = r
        return None if best is None else best.then(segment_id)

    def advance_car(self, progress: RouteProgress, base_speed: float, dt: float) -> bool:
        return self.traverser.step(progress, base_speed, self.car_speed, dt)

    def advance_service(self, progress: RouteProgress, base_speed: float, dt: float) -> bool:
        return self.traverser.step(progress, base_speed, self.service_speed, dt)

    def pose(self, progress: RouteProgress, lateral_offset: float = 0.0) -> Pose:
        return self.traverser.pose(progress, lateral_offset)
