# snow_sim/app/controllers/dispatch.py
from snow_sim.app.controllers.traffic import TrafficController
from snow_sim.app.events import (
    CarImmobilized,
    CarRescued,
    DispatchRejected,
    PlowDispatched,
    PlowRequested,
    ServiceAbandoned,
    ServiceReturned,
    ServiceReturning,
    TowDispatched,
)
from snow_sim.app.protocols import DispatchGate
from snow_sim.domain.entities.motion import Pose, RouteProgress
from snow_sim.domain.entities.service import Plow, ServiceVehicle, TowTruck
from snow_sim.domain.mechanics.mechanics_core import Mechanics
from snow_sim.domain.mechanics.mechanics_routers import RoutePolicy
from snow_sim.domain.state import FleetState


class DispatchController:
    """Plows and tow trucks: depot -> target -> depot.

    Service vehicles always plan with `RoutePolicy.IGNORE_ALL`; they are the
    ones meant to reach snowed-in or closed roads.
    """

    def __init__(
        self,
        mechanics: Mechanics,
        traffic: TrafficController,
        gate: DispatchGate,
        *,
        plow_speed: float = 150.0,
        tow_speed: float = 120.0,
        clear_rate: float = 15.0,
        state: FleetState | None = None,
    ):
        self.mechanics = mechanics
        self.graph = mechanics.graph
        self.traffic = traffic
        self.gate = gate
        self.plow_speed = plow_speed
        self.tow_speed = tow_speed
        self.clear_rate = clear_rate
        self.state = state or FleetState()

    # ------------ queries --------------

    @property
    def plows(self) -> list[Plow]:
        return list(self.state.plows.values())

    @property
    def tow_trucks(self) -> list[TowTruck]:
        return list(self.state.tow_trucks.values())

    @property
    def cooldown_remaining(self) -> float:
        return self.gate.remaining_s

    def pose(self, vehicle: ServiceVehicle) -> Pose:
        return self.mechanics.pose(vehicle.progress)

    # ------------ commands --------------

    def dispatch_plow(self, now: float, segment_id: str) -> list[object]:
        self.graph.segment(segment_id)
        if not self.gate.ready():
            return [DispatchRejected(t=now, kind="plow", reason="cooldown", target=segment_id)]
        depot = self.graph.depot
        route = self._approach(depot, segment_id)
        if route is None:
            return [DispatchRejected(t=now, kind="plow", reason="no_route", target=segment_id)]

        plow = Plow(
            id=self.state.new_plow_id(),
            progress=RouteProgress.start(route, depot),
            speed=self.plow_speed,
            target_segment=segment_id,
        )
        self.state.plows[plow.id] = plow
        self.gate.start()
        return [PlowDispatched(t=now, vehicle_id=plow.id, segment_id=segment_id, segments=len(route))]

    def dispatch_tow(self, now: float, car_id: str) -> list[object]:
        car = self.traffic.car(car_id)
        if car is None:
            return [DispatchRejected(t=now, kind="tow", reason="unknown_car", target=car_id)]
        if not car.immobilized or car.segment_id is None:
            return [DispatchRejected(t=now, kind="tow", reason="not_stuck", target=car_id)]
        if self.state.tow_for(car_id, car.segment_id) is not None:
            return [DispatchRejected(t=now, kind="tow", reason="duplicate", target=car_id)]

        depot = self.graph.depot
        route = self._approach(depot, car.segment_id)
        if route is None:
            return [DispatchRejected(t=now, kind="tow", reason="no_route", target=car_id)]

        truck = TowTruck(
            id=self.state.new_tow_id(),
            progress=RouteProgress.start(route, depot),
            speed=self.tow_speed,
            target_car=car_id,
            target_segment=car.segment_id,
        )
        self.state.tow_trucks[truck.id] = truck
        return [
            TowDispatched(
                t=now,
                vehicle_id=truck.id,
                car_id=car_id,
                segment_id=car.segment_id,
                segments=len(route),
            )
        ]

    def _approach(self, depot: str | None, segment_id: str):
        if depot is None:
            return None
        return self.mechanics.shortest_approach(depot, segment_id, RoutePolicy.IGNORE_ALL)

    # ------------ handlers --------------

    def on_car_immobilized(self, ev: CarImmobilized):
        return self.dispatch_tow(ev.t, ev.car_id)

    def on_plow_requested(self, ev: PlowRequested):
        return self.dispatch_plow(ev.t, ev.segment_id)

    # ------------ tick --------------

    def update(self, now: float, dt: float) -> list[object]:
        self.gate.tick(dt)
        out: list[object] = []
        for plow in list(self.state.plows.values()):
            out.extend(self._update_plow(plow, now, dt))
        for truck in list(self.state.tow_trucks.values()):
            out.extend(self._update_tow(truck, now, dt))
        return out

    def _update_plow(self, plow: Plow, now: float, dt: float) -> list[object]:
        if plow.progress.exhausted:
            if plow.returning:
                return self._retire(plow, now)
            return self._head_home(plow, now)

        if self._blocked_by_stuck_car(plow):
            return []
        self.graph.clear(plow.segment_id, self.clear_rate * dt)
        self.mechanics.advance_service(plow.progress, plow.speed, dt)
        return []

    def _update_tow(self, truck: TowTruck, now: float, dt: float) -> list[object]:
        if truck.returning:
            if truck.progress.exhausted:
                return self._retire(truck, now)
            self.mechanics.advance_service(truck.progress, truck.speed, dt)
            return []

        car = self.traffic.car(truck.target_car)
        if not self._still_stuck_at_target(truck, car):
            # released, or stuck again somewhere else
            return self._head_home(truck, now)

        if truck.progress.exhausted:
            out: list[object] = []
            if truck.ends_on_target:
                self.traffic.remove_car(car.id, "rescued")
                truck.carrying = True
                out.append(CarRescued(t=now, car_id=car.id, vehicle_id=truck.id))
            out.extend(self._head_home(truck, now))
            return out

        self.mechanics.advance_service(truck.progress, truck.speed, dt)
        return []

    @staticmethod
    def _still_stuck_at_target(truck: TowTruck, car) -> bool:
        return car is not None and car.immobilized and car.segment_id == truck.target_segment

    def _blocked_by_stuck_car(self, plow: Plow) -> bool:
        """A stuck car ahead on the plow's segment, in either lane."""
        traverser = self.mechanics.traverser
        for car in self.traffic.cars_on(plow.segment_id):
            if not car.immobilized:
                continue
            pos = traverser.position_on_segment(plow.progress, car.progress, both_lanes=True)
            if pos is not None and pos > plow.progress.fraction:
                return True
        return False

    def _head_home(self, vehicle: ServiceVehicle, now: float) -> list[object]:
        depot = self.graph.depot
        route = None if depot is None else self.mechanics.route(vehicle.location, depot, RoutePolicy.IGNORE_ALL)
        if route is None:
            self.state.remove(vehicle)
            return [ServiceAbandoned(t=now, vehicle_id=vehicle.id, kind=vehicle.kind.value, location_id=vehicle.location)]
        vehicle.head_home(route)
        carrying = isinstance(vehicle, TowTruck) and vehicle.carrying
        return [ServiceReturning(t=now, vehicle_id=vehicle.id, kind=vehicle.kind.value, carrying=carrying)]

    def _retire(self, vehicle: ServiceVehicle, now: float) -> list[object]:
        self.state.remove(vehicle)
        return [ServiceReturned(t=now, vehicle_id=vehicle.id, kind=vehicle.kind.value)]
