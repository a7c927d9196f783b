# tests/app/test_config_models.py
import pytest
from pydantic import ValidationError

from snow_sim.config.models import NetworkExplicitModel, ScenarioModel, SpeedFixedModel
from snow_sim.runtime.registries import make_network, make_speed


def test_defaults_describe_the_default_town():
    model = ScenarioModel()
    assert model.network.kind == "grid"
    assert [p.name for p in model.snow.phases] == ["Light Snow", "Heavy Snow", "Lull", "Blizzard"]
    assert model.traffic.reroute.hysteresis == 0.8
    assert model.dispatch.cooldown_s == 2.0
    assert model.snow.exempt_segments is None


def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError):
        ScenarioModel.model_validate({"traffic": {"spawn_every": 2}})


@pytest.mark.parametrize(
    "patch",
    [
        {"snow": {"tiers": {"clear": 5, "light": 4, "moderate": 8, "deep": 9}}},
        {"snow": {"phases": []}},
        {"snow": {"phases": [{"name": "x", "duration_s": 0, "intensity": 1}]}},
        {"traffic": {"stop_distance": 0.05, "min_separation": 0.1}},
        {"traffic": {"stop_distance": 1.5}},
        {"traffic": {"reroute": {"hysteresis": 0}}},
        {"sim": {"dt_s": 0}},
    ],
)
def test_invalid_values_are_rejected(patch):
    with pytest.raises(ValidationError):
        ScenarioModel.model_validate(patch)


def test_explicit_network_is_discriminated_and_checked():
    model = ScenarioModel.model_validate(
        {
            "network": {
                "kind": "explicit",
                "locations": [
                    {"id": "a", "x": 0, "y": 0, "kind": "terminus"},
                    {"id": "b", "x": 10, "y": 0, "kind": "depot"},
                ],
                "segments": [{"id": "ab", "a": "a", "b": "b"}],
            }
        }
    )
    assert isinstance(model.network, NetworkExplicitModel)
    graph = make_network(model.network)
    assert graph.depot == "b"
    assert graph.segment_length("ab") == 10.0

    with pytest.raises(ValidationError):
        NetworkExplicitModel.model_validate(
            {"locations": [{"id": "a", "x": 0, "y": 0}], "segments": [{"id": "s", "a": "a", "b": "zz"}]}
        )


def test_registries_build_from_config():
    assert make_speed(SpeedFixedModel()).speed(120.0, accumulation=20.0) == 120.0
    snowy = make_speed(ScenarioModel().traffic.speed)
    assert snowy.speed(100.0, accumulation=5.0) == pytest.approx(60.0)
