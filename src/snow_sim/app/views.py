# snow_sim/app/views.py
from dataclasses import dataclass, field

from snow_sim.app.controllers.dispatch import DispatchController
from snow_sim.app.controllers.snow import SnowLayer, Tier
from snow_sim.app.controllers.traffic import TrafficController
from snow_sim.config.models import ScoringModel
from snow_sim.domain.entities.motion import Pose
from snow_sim.domain.entities.service import Plow, TowTruck


@dataclass(frozen=True)
class CarView:
    id: str
    pose: Pose
    immobilized: bool
    yielding: bool


@dataclass(frozen=True)
class ServiceView:
    id: str
    kind: str
    pose: Pose
    returning: bool
    carrying: bool = False
    segment_accumulation: float | None = None  # plows only


@dataclass(frozen=True)
class SegmentView:
    id: str
    accumulation: float
    tier: Tier
    obstructed: bool


@dataclass(frozen=True)
class Snapshot:
    t: float
    storm_phase: str
    storm_intensity: float
    exited: int
    rescued: int
    stuck: int
    plow_cooldown_s: float
    score: int
    clear_segments: int
    cars: list[CarView] = field(default_factory=list)
    services: list[ServiceView] = field(default_factory=list)
    segments: list[SegmentView] = field(default_factory=list)


def take_snapshot(
    now: float,
    snow: SnowLayer,
    traffic: TrafficController,
    dispatch: DispatchController,
    scoring: ScoringModel,
) -> Snapshot:
    graph = snow.graph
    cars = [
        CarView(c.id, traffic.pose(c), c.immobilized, c.yielding) for c in traffic.cars
    ]

    services: list[ServiceView] = []
    for v in [*dispatch.plows, *dispatch.tow_trucks]:
        acc = None
        if isinstance(v, Plow) and v.segment_id is not None:
            acc = graph.segment(v.segment_id).accumulation
        services.append(
            ServiceView(
                id=v.id,
                kind=v.kind.value,
                pose=dispatch.pose(v),
                returning=v.returning,
                carrying=isinstance(v, TowTruck) and v.carrying,
                segment_accumulation=acc,
            )
        )

    segments = [
        SegmentView(s.id, s.accumulation, snow.tier(s.accumulation), s.obstructed)
        for s in graph.segments.values()
    ]
    clear = sum(1 for s in segments if s.tier == "clear" and s.id not in snow.exempt)

    stats = traffic.stats
    return Snapshot(
        t=now,
        storm_phase=snow.phase_name,
        storm_intensity=snow.intensity,
        exited=stats.exited,
        rescued=stats.rescued,
        stuck=traffic.stuck_count,
        plow_cooldown_s=dispatch.cooldown_remaining,
        score=scoring.exit_points * stats.exited + scoring.rescue_points * stats.rescued,
        clear_segments=clear,
        cars=cars,
        services=services,
        segments=segments,
    )
