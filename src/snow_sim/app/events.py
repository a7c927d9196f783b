# app/events.py
from dataclasses import dataclass
from typing import Literal

from snow_sim.sim.event import BaseEvent

RemovalReason = Literal["exited", "rescued"]
RejectReason = Literal["cooldown", "no_route", "duplicate", "unknown_car", "not_stuck"]


# Weather
@dataclass(order=True)
class StormPhaseChanged(BaseEvent):
    name: str
    intensity: float
    phase_index: int


# Traffic lifecycle
@dataclass(order=True)
class CarSpawned(BaseEvent):
    car_id: str
    origin: str
    destination: str
    segments: int


@dataclass(order=True)
class CarExited(BaseEvent):
    car_id: str
    destination: str


@dataclass(order=True)
class CarImmobilized(BaseEvent):
    car_id: str
    segment_id: str
    accumulation: float


@dataclass(order=True)
class CarReleased(BaseEvent):
    car_id: str
    segment_id: str
    immobilized_s: float


@dataclass(order=True)
class CarRerouted(BaseEvent):
    car_id: str
    old_cost: float
    new_cost: float


@dataclass(order=True)
class CarRescued(BaseEvent):
    car_id: str
    vehicle_id: str


# Inbound commands
@dataclass(order=True)
class PlowRequested(BaseEvent):
    segment_id: str


@dataclass(order=True)
class ClosureToggleRequested(BaseEvent):
    location_id: str


# Dispatch lifecycle
@dataclass(order=True)
class PlowDispatched(BaseEvent):
    vehicle_id: str
    segment_id: str
    segments: int


@dataclass(order=True)
class TowDispatched(BaseEvent):
    vehicle_id: str
    car_id: str
    segment_id: str
    segments: int


@dataclass(order=True)
class DispatchRejected(BaseEvent):
    kind: Literal["plow", "tow"]
    reason: RejectReason
    target: str


@dataclass(order=True)
class ServiceReturning(BaseEvent):
    vehicle_id: str
    kind: str
    carrying: bool = False


@dataclass(order=True)
class ServiceReturned(BaseEvent):
    vehicle_id: str
    kind: str


@dataclass(order=True)
class ServiceAbandoned(BaseEvent):
    vehicle_id: str
    kind: str
    location_id: str


# Network state
@dataclass(order=True)
class ClosureChanged(BaseEvent):
    location_id: str
    obstructed: bool
    segment_ids: tuple[str, ...] = ()
