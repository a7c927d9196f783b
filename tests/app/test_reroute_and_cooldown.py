# tests/app/test_reroute_and_cooldown.py
import pytest

from snow_sim.app.protocols import DispatchGate, ReroutePolicy
from snow_sim.config.models import DispatchModel, RerouteModel
from snow_sim.domain.entities.geography import Route
from snow_sim.domain.network import build_grid_network
from snow_sim.policy.reroute import remaining_cost
from snow_sim.runtime.policy_factory import make_dispatch_gate, make_reroute_policy


def test_remaining_cost_counts_hops_snow_and_closures():
    graph = build_grid_network()
    graph.accumulate("ep-north", 4.0)
    graph.set_obstructed("v-nc-cc", True)
    route = Route.of(["ep-north", "v-nc-cc", "v-cc-sc"])
    assert remaining_cost(graph, route) == pytest.approx(3.0 + 2.0 + 100.0)
    assert remaining_cost(graph, route.remaining(2)) == 1.0


def test_reroute_gate_and_hysteresis():
    graph = build_grid_network()
    policy = make_reroute_policy(RerouteModel())
    assert isinstance(policy, ReroutePolicy)

    graph.accumulate("ep-north", 8.0)
    assert not policy.wants_reroute(graph, "ep-north", 0.0)  # not above threshold
    graph.accumulate("ep-north", 0.5)
    assert policy.wants_reroute(graph, "ep-north", 0.1)
    assert not policy.wants_reroute(graph, "ep-north", 0.11)

    graph.set_obstructed("ep-south", True)
    assert policy.wants_reroute(graph, "ep-south", 0.0)

    assert policy.accepts(10.0, 7.9)
    assert not policy.accepts(10.0, 8.0)


def test_cooldown_gate():
    gate = make_dispatch_gate(DispatchModel(cooldown_s=1.0))
    assert isinstance(gate, DispatchGate)
    assert gate.ready()
    gate.start()
    assert not gate.ready() and gate.remaining_s == 1.0
    gate.tick(0.75)
    assert not gate.ready()
    gate.tick(0.75)
    assert gate.ready() and gate.remaining_s == 0.0


def test_factories_reject_foreign_config():
    with pytest.raises(TypeError):
        make_reroute_policy(DispatchModel())
    with pytest.raises(TypeError):
        make_dispatch_gate(RerouteModel())
