# tests/app/test_build_and_run.py
import json
import logging

import pytest

from snow_sim.app.build import build
from snow_sim.app.events import CarRescued, CarSpawned, DispatchRejected, ServiceReturning, TowDispatched
from snow_sim.io.recorder import JsonlSink, MemorySink, Recorder

CALM = {
    "name": "calm",
    "run_id": "t-1",
    "sim": {"seed": 1, "dt_s": 0.1},
    "snow": {"phases": [{"name": "Calm", "duration_s": 1000, "intensity": 0.0}]},
    "traffic": {"spawn_interval_s": 1e9, "speed_jitter": 0.0},
}


def test_default_scenario_runs():
    app = build({"sim": {"seed": 3, "dt_s": 0.1}}, use_logging=False)
    ticks = app.run(120.0)
    assert ticks == 1200

    snap = app.snapshot()
    assert snap.t == pytest.approx(120.0)
    assert snap.storm_phase == "Lull"  # 60 s light, 30 s heavy, then the lull
    assert snap.exited > 0
    assert snap.score == 10 * snap.exited + 5 * snap.rescued
    assert snap.stuck == sum(1 for c in snap.cars if c.immobilized)
    assert 0 <= snap.clear_segments <= len(snap.segments) - 1
    depot_road = next(s for s in snap.segments if s.id == "depot-road")
    assert depot_road.accumulation == 0.0


def test_same_seed_same_run():
    def final(seed):
        app = build({"sim": {"seed": seed, "dt_s": 0.1}}, use_logging=False)
        app.run(60.0)
        snap = app.snapshot()
        return [(c.id, round(c.pose.x, 6), round(c.pose.y, 6)) for c in snap.cars], snap.exited

    assert final(9) == final(9)


def test_request_plow_honours_cooldown():
    app = build(CALM, use_logging=False)
    assert app.request_plow("h-cw-cc") is True
    assert app.request_plow("h-cw-cc") is False
    assert app.snapshot().plow_cooldown_s == pytest.approx(2.0)

    app.run(2.5, 0.25)
    assert app.request_plow("h-cw-cc") is True
    assert len(app.dispatch.plows) == 2


def test_stuck_car_gets_a_tow_in_the_same_tick():
    app = build(CALM, use_logging=False)
    app.traffic.spawn_car(app.now, "west", "east")
    app.graph.accumulate("ep-west", 9.0)

    dispatched = app.step()

    assert any(isinstance(ev, TowDispatched) for ev in dispatched)
    snap = app.snapshot()
    assert snap.stuck == 1
    assert [s.kind for s in snap.services] == ["tow"]


def test_car_stuck_again_after_release_gets_a_fresh_tow():
    app = build(CALM, use_logging=False)
    app.traffic.spawn_car(app.now, "west", "east")
    app.graph.accumulate("ep-west", 9.0)
    first = [ev for ev in app.step() if isinstance(ev, TowDispatched)]
    assert first

    app.graph.clear("ep-west", 9.0)
    returning = [ev for ev in app.step() if isinstance(ev, ServiceReturning)]
    assert [(ev.vehicle_id, ev.carrying) for ev in returning] == [(first[0].vehicle_id, False)]

    car = app.traffic.car("car-0")
    for _ in range(50):
        if car.segment_id == "h-cw-cc":
            break
        app.step()
    assert car.segment_id == "h-cw-cc"
    app.graph.accumulate("h-cw-cc", 9.0)
    second = [ev for ev in app.step() if isinstance(ev, TowDispatched)]
    assert second and second[0].segment_id == "h-cw-cc"

    rescues = []
    for _ in range(400):
        rescues += [ev for ev in app.step() if isinstance(ev, CarRescued)]
    assert [ev.vehicle_id for ev in rescues] == [second[0].vehicle_id]
    assert app.snapshot().rescued == 1


def test_toggle_closure_closes_then_reopens():
    app = build(CALM, use_logging=False)
    touching = app.graph.touching("CC")

    app.graph.set_obstructed(touching[0], True)
    assert app.toggle_closure("CC") is True
    assert all(app.graph.segment(s).obstructed for s in touching)

    assert app.toggle_closure("CC") is True
    assert not any(app.graph.segment(s).obstructed for s in touching)


def test_recorder_receives_dispatched_events(caplog):
    caplog.set_level(logging.INFO, logger="snow_sim")
    sink = MemorySink()
    app = build({**CALM, "traffic": {"spawn_interval_s": 1.0}}, recorder=Recorder(sink))
    app.run(3.0, 0.25)
    app.request_plow("ep-north")
    app.request_plow("ep-north")

    assert len(sink.of_type(CarSpawned)) == 3
    assert sink.of_type(DispatchRejected)[0].reason == "cooldown"

    spawns = [r.extra for r in caplog.records if r.getMessage() == "CarSpawned"]
    assert spawns and spawns[0]["run_id"] == "t-1" and "wall" in spawns[0]


def test_jsonl_sink_writes_event_name(tmp_path):
    path = tmp_path / "events.jsonl"
    with path.open("w") as fp:
        app = build(CALM, use_logging=True, recorder=Recorder(JsonlSink(fp)))
        app.request_plow("ep-east")
    rows = [json.loads(line) for line in path.read_text().splitlines()]
    assert [r["event"] for r in rows] == ["PlowRequested", "PlowDispatched"]
    assert rows[1]["segment_id"] == "ep-east"
