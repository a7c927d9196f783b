# domain/entities/service.py
from dataclasses import dataclass
from enum import Enum

from snow_sim.domain.entities.geography import Route
from snow_sim.domain.entities.motion import RouteProgress


class ServiceKind(str, Enum):
    PLOW = "plow"
    TOW = "tow"


@dataclass
class ServiceVehicle:
    id: str
    progress: RouteProgress
    speed: float
    returning: bool = False

    kind = None  # set by subclasses

    @property
    def location(self) -> str:
        return self.progress.location

    @property
    def segment_id(self) -> str | None:
        return self.progress.segment_id

    def head_home(self, route: Route) -> None:
        self.returning = True
        self.progress.replace_route(route)


@dataclass
class Plow(ServiceVehicle):
    target_segment: str = ""

    kind = ServiceKind.PLOW


@dataclass
class TowTruck(ServiceVehicle):
    target_car: str = ""
    target_segment: str = ""  # where the car was stuck at dispatch
    carrying: bool = False

    kind = ServiceKind.TOW

    @property
    def ends_on_target(self) -> bool:
        route = self.progress.route
        return len(route) > 0 and route[-1] == self.target_segment
