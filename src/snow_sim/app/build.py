# snow_sim/app/build.py
from collections.abc import Mapping
from dataclasses import dataclass

from snow_sim.app.controllers.closures import ClosureHandler
from snow_sim.app.controllers.dispatch import DispatchController
from snow_sim.app.controllers.snow import SnowLayer, StormPhase, Tiers
from snow_sim.app.controllers.traffic import TrafficController
from snow_sim.app.events import (
    ClosureChanged,
    ClosureToggleRequested,
    PlowDispatched,
    PlowRequested,
)
from snow_sim.app.views import Snapshot, take_snapshot
from snow_sim.app.wiring import wire
from snow_sim.config.models import ScenarioModel
from snow_sim.domain.mechanics.mechanics_core import Mechanics
from snow_sim.domain.mechanics.mechanics_factory import build_mechanics
from snow_sim.domain.network import RoadGraph
from snow_sim.io.kernel_logging import KernelLogging  # JSON logs
from snow_sim.io.recorder import JsonlSink, Recorder
from snow_sim.runtime.policy_factory import make_dispatch_gate, make_reroute_policy
from snow_sim.runtime.registries import make_network
from snow_sim.sim.clock import SimClock
from snow_sim.sim.hooks import NoopHooks
from snow_sim.sim.kernel import Kernel
from snow_sim.sim.rng import RNGRegistry


@dataclass
class App:
    kernel: Kernel
    clock: SimClock
    rng: RNGRegistry
    model: ScenarioModel
    graph: RoadGraph
    mechanics: Mechanics
    snow: SnowLayer
    traffic: TrafficController
    dispatch: DispatchController
    closures: ClosureHandler

    @property
    def now(self) -> float:
        return self.kernel.now

    def step(self, dt: float | None = None):
        return self.kernel.step(self.model.sim.dt_s if dt is None else dt)

    def run(self, duration_s: float | None = None, dt: float | None = None) -> int:
        return self.kernel.run(
            self.model.sim.duration_s if duration_s is None else duration_s,
            self.model.sim.dt_s if dt is None else dt,
        )

    def request_plow(self, segment_id: str) -> bool:
        done = self.kernel.submit(PlowRequested(t=self.kernel.now, segment_id=segment_id))
        return any(isinstance(ev, PlowDispatched) for ev in done)

    def toggle_closure(self, location_id: str) -> bool:
        done = self.kernel.submit(ClosureToggleRequested(t=self.kernel.now, location_id=location_id))
        return any(isinstance(ev, ClosureChanged) for ev in done)

    def snapshot(self) -> Snapshot:
        return take_snapshot(self.kernel.now, self.snow, self.traffic, self.dispatch, self.model.scoring)


def build(
    cfg: ScenarioModel | Mapping,
    *,
    worker: int = 0,
    use_logging: bool = True,
    recorder: Recorder | None = None,
) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, ScenarioModel) else ScenarioModel.model_validate(cfg)

    # 1) Clock & RNG
    clock = SimClock.utc_epoch(*model.sim.epoch)
    rng_registry = RNGRegistry(model.sim.seed, scenario=model.name, worker=worker)

    # 2) Kernel (with hooks)
    hooks = (
        KernelLogging(
            run_id=model.run_id,
            recorder=recorder or Recorder(JsonlSink()),
            clock=clock,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
        )
        if use_logging
        else NoopHooks()
    )
    kernel = Kernel(hooks=hooks)

    # 3) Network & mechanics
    graph = make_network(model.network)
    mechanics = build_mechanics(model, rng_registry=rng_registry, graph=graph)

    # 4) Controllers (inject deps explicitly)
    tiers = Tiers(**model.snow.tiers.model_dump())
    exempt = model.snow.exempt_segments
    if exempt is None:
        exempt = graph.touching(graph.depot) if graph.depot else []
    snow = SnowLayer(
        graph,
        [StormPhase(duration_s=p.duration_s, intensity=p.intensity, name=p.name) for p in model.snow.phases],
        base_rate=model.snow.base_rate,
        tiers=tiers,
        exempt=exempt,
    )

    t = model.traffic
    traffic = TrafficController(
        mechanics,
        make_reroute_policy(t.reroute),
        rng_registry.stream("car_speed"),
        immobilize_at=tiers.deep,
        spawn_interval_s=t.spawn_interval_s,
        base_speed=t.base_speed,
        speed_jitter=t.speed_jitter,
        stop_distance=t.stop_distance,
        min_separation=t.min_separation,
        lane_offset=t.lane_offset,
    )

    d = model.dispatch
    dispatch = DispatchController(
        mechanics,
        traffic,
        make_dispatch_gate(d),
        plow_speed=d.plow_speed,
        tow_speed=d.tow_speed,
        clear_rate=d.clear_rate,
    )
    closures = ClosureHandler(graph)

    # 5) Wiring
    wire(kernel, snow=snow, traffic=traffic, dispatch=dispatch, closures=closures)

    return App(kernel, clock, rng_registry, model, graph, mechanics, snow, traffic, dispatch, closures)
