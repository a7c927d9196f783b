# runtime/registries.py
from collections.abc import Callable

from snow_sim.app.protocols import SpeedModel
from snow_sim.config.models import (
    NetworkExplicitModel,
    NetworkGridModel,
    NetworkUnion,
    SpeedFixedModel,
    SpeedSnowPenaltyModel,
    SpeedUnion,
)
from snow_sim.domain.mechanics.mechanics_speeds import FixedSpeed, SnowPenaltySpeed
from snow_sim.domain.network import RoadGraph, build_explicit_network, build_grid_network

SpeedFactory = Callable[[SpeedUnion], SpeedModel]
NetworkFactory = Callable[[NetworkUnion], RoadGraph]

_speed_registry: dict[str, SpeedFactory] = {}
_network_registry: dict[str, NetworkFactory] = {}


# ------------------- Speed models ---------------------------


def register_speed(kind: str):
    def deco(fn: SpeedFactory):
        _speed_registry[kind] = fn
        return fn

    return deco


def make_speed(cfg: SpeedUnion) -> SpeedModel:
    try:
        factory = _speed_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown speed kind {cfg.kind!r}") from None
    return factory(cfg)


@register_speed("snow_penalty")
def _make_snow_penalty(cfg: SpeedSnowPenaltyModel):
    return SnowPenaltySpeed(per_unit=cfg.per_unit, floor=cfg.floor)


@register_speed("fixed")
def _make_fixed(cfg: SpeedFixedModel):
    return FixedSpeed()


# ------------------- Networks ---------------------------


def register_network(kind: str):
    def deco(fn: NetworkFactory):
        _network_registry[kind] = fn
        return fn

    return deco


def make_network(cfg: NetworkUnion) -> RoadGraph:
    try:
        factory = _network_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown network kind {cfg.kind!r}") from None
    return factory(cfg)


@register_network("grid")
def _make_grid(cfg: NetworkGridModel):
    return build_grid_network(
        center=cfg.center,
        spacing=cfg.spacing,
        terminus_offset=cfg.terminus_offset,
        depot_offset=cfg.depot_offset,
    )


@register_network("explicit")
def _make_explicit(cfg: NetworkExplicitModel):
    return build_explicit_network(
        [(loc.id, loc.x, loc.y, loc.kind) for loc in cfg.locations],
        [(seg.id, seg.a, seg.b) for seg in cfg.segments],
    )
