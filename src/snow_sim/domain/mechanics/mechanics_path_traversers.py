from snow_sim.app.protocols import SpeedModel
from snow_sim.domain.entities.motion import Pose, RouteProgress
from snow_sim.domain.network import RoadGraph

MIN_SEGMENT_LENGTH = 1e-9


class RouteTraverser:
    """Progress / rollover mechanics shared by cars and service vehicles."""

    def __init__(self, graph: RoadGraph):
        self.graph = graph

    def step(self, progress: RouteProgress, base_speed: float, speed: SpeedModel, dt: float) -> bool:
        """Advance along the current segment; return True when a segment end was reached.

        Overshoot past the segment end is dropped: the agent starts the next
        segment at 0.
        """
        sid = progress.segment_id
        if sid is None:
            return False
        seg = self.graph.segment(sid)
        v = speed.speed(base_speed, accumulation=seg.accumulation)
        length = max(self.graph.segment_length(sid), MIN_SEGMENT_LENGTH)
        progress.fraction += v * dt / length
        if progress.fraction < 1.0:
            return False
        progress.location = self.graph.other_endpoint(sid, progress.location)
        progress.fraction = 0.0
        progress.index += 1
        return True

    def pose(self, progress: RouteProgress, lateral_offset: float = 0.0) -> Pose:
        if not progress.route:
            p = self.graph.location(progress.location).point
            return Pose(p.x, p.y, 0.0)
        return self.graph.position_along(
            progress.route, progress.index, progress.fraction, progress.origin, lateral_offset
        )

    def position_on_segment(
        self, progress: RouteProgress, other: RouteProgress, *, both_lanes: bool = False
    ) -> float | None:
        """`other`'s fraction along `progress`'s current segment, seen in `progress`'s direction.

        None when `other` is on a different segment. Oncoming agents are in a
        separate lane and also give None unless `both_lanes` is set, in which
        case their fraction is flipped.
        """
        if progress.segment_id is None or other.segment_id != progress.segment_id:
            return None
        if other.location == progress.location:
            return other.fraction
        if both_lanes:
            return 1.0 - other.fraction
        return None
