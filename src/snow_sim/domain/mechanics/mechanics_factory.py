# snow_sim/domain/mechanics/mechanics_factory.py
from snow_sim.config.models import ScenarioModel
from snow_sim.domain.mechanics.mechanics_core import Mechanics
from snow_sim.domain.mechanics.mechanics_od_samplers import TerminusODSampler
from snow_sim.domain.mechanics.mechanics_path_traversers import RouteTraverser
from snow_sim.domain.mechanics.mechanics_routers import AStarRoutePlanner
from snow_sim.domain.mechanics.mechanics_speeds import FixedSpeed
from snow_sim.domain.network import RoadGraph
from snow_sim.runtime.registries import make_speed
from snow_sim.sim.rng import RNGRegistry


def build_mechanics(cfg: ScenarioModel, rng_registry: RNGRegistry, *, graph: RoadGraph) -> Mechanics:
    rng_od = rng_registry.stream("spawn_od")

    return Mechanics(
        graph=graph,
        od_sampler=TerminusODSampler(graph=graph, rng=rng_od),
        route_planner=AStarRoutePlanner(),
        car_speed=make_speed(cfg.traffic.speed),
        service_speed=FixedSpeed(),
        traverser=RouteTraverser(graph),
    )
