# tests/app/conftest.py
import numpy as np
import pytest

from snow_sim.app.controllers.dispatch import DispatchController
from snow_sim.app.controllers.traffic import TrafficController
from snow_sim.domain.mechanics.mechanics_core import Mechanics
from snow_sim.domain.mechanics.mechanics_od_samplers import TerminusODSampler
from snow_sim.domain.mechanics.mechanics_path_traversers import RouteTraverser
from snow_sim.domain.mechanics.mechanics_routers import AStarRoutePlanner
from snow_sim.domain.mechanics.mechanics_speeds import FixedSpeed, SnowPenaltySpeed
from snow_sim.domain.network import build_explicit_network
from snow_sim.policy.dispatch import CooldownGate
from snow_sim.policy.reroute import HysteresisReroutePolicy


def make_mechanics(graph, seed: int = 0) -> Mechanics:
    return Mechanics(
        graph=graph,
        od_sampler=TerminusODSampler(graph=graph, rng=np.random.default_rng(seed)),
        route_planner=AStarRoutePlanner(),
        car_speed=SnowPenaltySpeed(),
        service_speed=FixedSpeed(),
        traverser=RouteTraverser(graph),
    )


def make_traffic(graph, *, reroute=None, **kw) -> TrafficController:
    kw.setdefault("spawn_interval_s", 1e9)  # spawn by hand only
    kw.setdefault("speed_jitter", 0.0)
    return TrafficController(
        make_mechanics(graph),
        reroute or HysteresisReroutePolicy(),
        np.random.default_rng(0),
        **kw,
    )


def make_dispatch(traffic: TrafficController, cooldown_s: float = 2.0) -> DispatchController:
    return DispatchController(traffic.mechanics, traffic, CooldownGate(cooldown_s))


def tick(systems, n: int, dt: float, t0: float = 0.0):
    """Update systems in order for n ticks; returns (events, final time)."""
    events = []
    t = t0
    for _ in range(n):
        t += dt
        for s in systems:
            events.extend(s.update(t, dt))
    return events, t


@pytest.fixture
def straight_road():
    """Two termini 500 units apart joined by one segment."""
    return build_explicit_network(
        [("west", 0, 0, "terminus"), ("east", 500, 0, "terminus")],
        [("road", "west", "east")],
    )


@pytest.fixture
def traffic_for():
    return make_traffic


@pytest.fixture
def dispatch_for():
    return make_dispatch


@pytest.fixture
def run_ticks():
    return tick
