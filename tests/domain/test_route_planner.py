# tests/domain/test_route_planner.py
import math

import numpy as np
import pytest

from snow_sim.domain.entities.geography import Route
from snow_sim.domain.mechanics.mechanics_routers import AStarRoutePlanner, RoutePolicy, route_cost
from snow_sim.domain.network import build_explicit_network, build_grid_network


def _exhaustive_best(graph, start, goal, policy):
    """Cheapest simple path by brute force."""
    best = math.inf

    def walk(node, seen, cost):
        nonlocal best
        if cost >= best:
            return
        if node == goal:
            best = cost
            return
        for sid in graph.adjacency[node]:
            seg = graph.segments[sid]
            if not policy.admits(seg):
                continue
            nxt = graph.other_endpoint(sid, node)
            if nxt in seen:
                continue
            walk(nxt, seen | {nxt}, cost + route_cost(graph, Route.of([sid]), policy))

    walk(start, {start}, 0.0)
    return best


def _is_walk(graph, route, start, goal):
    node = start
    for sid in route:
        node = graph.other_endpoint(sid, node)
    return node == goal


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_astar_matches_exhaustive_search(seed):
    graph = build_grid_network()
    rng = np.random.default_rng(seed)
    for sid in graph.segments:
        graph.accumulate(sid, float(rng.uniform(0, 12)))
    planner = AStarRoutePlanner()

    for start, goal in [("north", "south"), ("west", "east"), ("depot", "NW"), ("east", "SW")]:
        route = planner.route(graph, start, goal)
        assert route is not None
        assert _is_walk(graph, route, start, goal)
        assert route_cost(graph, route) == pytest.approx(_exhaustive_best(graph, start, goal, RoutePolicy.DEFAULT))


def test_same_start_and_goal_is_empty_route():
    graph = build_grid_network()
    assert AStarRoutePlanner().route(graph, "CC", "CC") == Route()


def test_obstructed_segments_are_pruned_unless_ignored():
    graph = build_grid_network()
    graph.set_obstructed("ep-north", True)
    planner = AStarRoutePlanner()

    assert planner.route(graph, "south", "north") is None
    ignored = planner.route(graph, "south", "north", RoutePolicy.IGNORE_ALL)
    assert ignored is not None and ignored[-1] == "ep-north"


def test_accumulation_penalty_diverts_unless_ignored():
    graph = build_explicit_network(
        [("a", 0, 0, "terminus"), ("b", 100, 0, "terminus"), ("c", 50, 10, "junction")],
        [("direct", "a", "b"), ("ac", "a", "c"), ("cb", "c", "b")],
    )
    planner = AStarRoutePlanner()
    assert list(planner.route(graph, "a", "b")) == ["direct"]

    graph.accumulate("direct", 10.0)
    assert list(planner.route(graph, "a", "b")) == ["ac", "cb"]
    assert list(planner.route(graph, "a", "b", RoutePolicy.IGNORE_ALL)) == ["direct"]


def test_unreachable_goal_returns_none():
    graph = build_explicit_network(
        [("a", 0, 0, "terminus"), ("b", 10, 0, "junction"), ("c", 50, 50, "terminus")],
        [("ab", "a", "b")],
    )
    assert AStarRoutePlanner().route(graph, "a", "c") is None


def test_unknown_location_raises():
    with pytest.raises(KeyError):
        AStarRoutePlanner().route(build_grid_network(), "north", "atlantis")


def test_policy_presets():
    assert RoutePolicy.DEFAULT == RoutePolicy(False, False)
    assert RoutePolicy.IGNORE_ALL == RoutePolicy(True, True)
