# snow_sim/domain/state.py
from dataclasses import dataclass, field

from snow_sim.domain.entities.car import Car
from snow_sim.domain.entities.service import Plow, ServiceVehicle, TowTruck


@dataclass
class TrafficStats:
    exited: int = 0
    rescued: int = 0


@dataclass
class TrafficState:
    cars: dict[str, Car] = field(default_factory=dict)
    stats: TrafficStats = field(default_factory=TrafficStats)
    next_id: int = 0

    def new_id(self) -> str:
        cid = f"car-{self.next_id}"
        self.next_id += 1
        return cid

    def add_car(self, car: Car) -> None:
        self.cars[car.id] = car

    def remove_car(self, car_id: str, reason: str) -> Car | None:
        car = self.cars.pop(car_id, None)
        if car is None:
            return None
        if reason == "exited":
            self.stats.exited += 1
        elif reason == "rescued":
            self.stats.rescued += 1
        return car

    @property
    def stuck_count(self) -> int:
        return sum(1 for c in self.cars.values() if c.immobilized)


@dataclass
class FleetState:
    plows: dict[str, Plow] = field(default_factory=dict)
    tow_trucks: dict[str, TowTruck] = field(default_factory=dict)
    next_plow_id: int = 0
    next_tow_id: int = 0

    def new_plow_id(self) -> str:
        pid = f"plow-{self.next_plow_id}"
        self.next_plow_id += 1
        return pid

    def new_tow_id(self) -> str:
        tid = f"tow-{self.next_tow_id}"
        self.next_tow_id += 1
        return tid

    def tow_for(self, car_id: str, segment_id: str) -> TowTruck | None:
        """Outbound truck still heading for `car_id` stuck on `segment_id`, if any."""
        for truck in self.tow_trucks.values():
            if truck.returning:
                continue
            if truck.target_car == car_id and truck.target_segment == segment_id:
                return truck
        return None

    def remove(self, vehicle: ServiceVehicle) -> None:
        if isinstance(vehicle, Plow):
            self.plows.pop(vehicle.id, None)
        else:
            self.tow_trucks.pop(vehicle.id, None)
