# snow_sim/app/controllers/traffic.py
from snow_sim.app.events import (
    CarExited,
    CarImmobilized,
    CarReleased,
    CarRerouted,
    CarSpawned,
)
from snow_sim.app.protocols import ReroutePolicy
from snow_sim.domain.entities.car import Car
from snow_sim.domain.entities.geography import Segment
from snow_sim.domain.entities.motion import Pose, RouteProgress
from snow_sim.domain.mechanics.mechanics_core import Mechanics
from snow_sim.domain.mechanics.mechanics_routers import RoutePolicy
from snow_sim.domain.state import TrafficState, TrafficStats
from snow_sim.policy.reroute import remaining_cost


class TrafficController:
    def __init__(
        self,
        mechanics: Mechanics,
        reroute: ReroutePolicy,
        rng,
        *,
        immobilize_at: float = 9.0,
        spawn_interval_s: float = 3.0,
        base_speed: float = 100.0,
        speed_jitter: float = 50.0,
        stop_distance: float = 0.12,
        min_separation: float = 0.10,
        lane_offset: float = 0.0,
        state: TrafficState | None = None,
    ):
        self.mechanics = mechanics
        self.graph = mechanics.graph
        self.reroute = reroute
        self.rng = rng
        self.immobilize_at = immobilize_at
        self.spawn_interval_s = spawn_interval_s
        self.base_speed = base_speed
        self.speed_jitter = speed_jitter
        self.stop_distance = stop_distance
        self.min_separation = min_separation
        self.lane_offset = lane_offset
        self.state = state or TrafficState()
        self.spawn_timer = 0.0

    # ------------ queries --------------

    @property
    def cars(self) -> list[Car]:
        return list(self.state.cars.values())

    def car(self, car_id: str) -> Car | None:
        return self.state.cars.get(car_id)

    @property
    def stats(self) -> TrafficStats:
        return self.state.stats

    @property
    def stuck_count(self) -> int:
        return self.state.stuck_count

    def current_segment(self, car: Car) -> Segment | None:
        sid = car.segment_id
        return None if sid is None else self.graph.segment(sid)

    def cars_on(self, segment_id: str) -> list[Car]:
        return [c for c in self.state.cars.values() if c.segment_id == segment_id]

    def pose(self, car: Car) -> Pose:
        return self.mechanics.pose(car.progress, self.lane_offset)

    def remove_car(self, car_id: str, reason: str) -> Car | None:
        return self.state.remove_car(car_id, reason)

    # ------------ spawning --------------

    def spawn_car(
        self, now: float, origin: str | None = None, destination: str | None = None
    ) -> list[object]:
        """Spawn one car; a pair without a route is skipped, not an error."""
        if origin is None or destination is None:
            pair = self.mechanics.od_pair()
            if pair is None:
                return []
            origin, destination = pair
        if origin == destination:
            return []
        route = self.mechanics.route(origin, destination, RoutePolicy.DEFAULT)
        if not route:
            return []

        jitter = float(self.rng.uniform(0.0, self.speed_jitter)) if self.speed_jitter else 0.0
        car = Car(
            id=self.state.new_id(),
            destination=destination,
            speed=self.base_speed + jitter,
            progress=RouteProgress.start(route, origin),
            reroute_in_s=self.reroute.interval_s,
        )
        self.state.add_car(car)
        return [
            CarSpawned(
                t=now, car_id=car.id, origin=origin, destination=destination, segments=len(route)
            )
        ]

    # ------------ tick --------------

    def update(self, now: float, dt: float) -> list[object]:
        out: list[object] = []
        self.spawn_timer += dt
        if self.spawn_timer >= self.spawn_interval_s:
            self.spawn_timer = 0.0
            out.extend(self.spawn_car(now))

        for car in list(self.state.cars.values()):
            out.extend(self._update_car(car, now, dt))
        return out

    def _update_car(self, car: Car, now: float, dt: float) -> list[object]:
        seg = self.current_segment(car)
        if seg is None:
            self.state.remove_car(car.id, "exited")
            return [CarExited(t=now, car_id=car.id, destination=car.destination)]

        out: list[object] = []
        if seg.accumulation >= self.immobilize_at:
            if not car.immobilized:
                car.immobilize()
                out.append(CarImmobilized(t=now, car_id=car.id, segment_id=seg.id, accumulation=seg.accumulation))
        elif car.immobilized:
            # cleared below the boundary before a tow truck got here
            out.append(CarReleased(t=now, car_id=car.id, segment_id=seg.id, immobilized_s=car.immobilized_s))
            car.release()

        if car.immobilized:
            car.immobilized_s += dt
            car.yielding = False
            return out

        if self._blocked_ahead(car):
            car.yielding = True
            return out

        car.yielding = False
        out.extend(self._maybe_reroute(car, now, dt))
        self.mechanics.advance_car(car.progress, car.speed, dt)
        return out

    def _blocked_ahead(self, car: Car) -> bool:
        """Nearest same-lane car ahead is too close, or close and itself halted."""
        nearest: Car | None = None
        gap = 0.0
        for other in self.state.cars.values():
            if other is car:
                continue
            pos = self.mechanics.traverser.position_on_segment(car.progress, other.progress)
            if pos is None or pos <= car.progress.fraction:
                continue
            d = pos - car.progress.fraction
            if nearest is None or d < gap:
                nearest, gap = other, d
        if nearest is None:
            return False
        if gap < self.stop_distance and (nearest.immobilized or nearest.yielding):
            return True
        return gap < self.min_separation

    def _maybe_reroute(self, car: Car, now: float, dt: float) -> list[object]:
        car.reroute_in_s -= dt
        if car.reroute_in_s > 0:
            return []
        car.reroute_in_s = self.reroute.interval_s

        if car.immobilized or car.segment_id is None:
            return []
        if not self.reroute.wants_reroute(self.graph, car.segment_id, car.progress.fraction):
            return []
        candidate = self.mechanics.route(car.location, car.destination, RoutePolicy.DEFAULT)
        if not candidate:
            return []
        old_cost = remaining_cost(self.graph, car.progress.remaining())
        new_cost = remaining_cost(self.graph, candidate)
        if not self.reroute.accepts(old_cost, new_cost):
            return []
        car.progress.replace_route(candidate)
        return [CarRerouted(t=now, car_id=car.id, old_cost=old_cost, new_cost=new_cost)]
