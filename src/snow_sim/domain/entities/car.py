# domain/entities/car.py
from dataclasses import dataclass

from snow_sim.domain.entities.motion import RouteProgress


@dataclass
class Car:
    id: str
    destination: str
    speed: float  # base speed, units/s
    progress: RouteProgress
    immobilized: bool = False
    immobilized_s: float = 0.0
    yielding: bool = False  # holding back for a car ahead
    reroute_in_s: float = 1.0

    @property
    def location(self) -> str:
        return self.progress.location

    @property
    def segment_id(self) -> str | None:
        return self.progress.segment_id

    def immobilize(self) -> None:
        self.immobilized = True
        self.yielding = False

    def release(self) -> None:
        self.immobilized = False
        self.immobilized_s = 0.0
