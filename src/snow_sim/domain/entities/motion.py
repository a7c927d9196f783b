from dataclasses import dataclass

from snow_sim.domain.entities.geography import Route


@dataclass(frozen=True)
class Pose:
    x: float
    y: float
    heading: float  # radians, atan2 convention


@dataclass
class RouteProgress:
    """Where an agent is along its route.

    `location` is always the start of the current segment (the endpoint the
    agent last reached); `origin` is where the current route began and is the
    direction hint for its first segment.
    """

    route: Route
    origin: str
    location: str
    index: int = 0
    fraction: float = 0.0

    @classmethod
    def start(cls, route: Route, origin: str) -> "RouteProgress":
        return cls(route=route, origin=origin, location=origin)

    @property
    def exhausted(self) -> bool:
        return self.index >= len(self.route)

    @property
    def segment_id(self) -> str | None:
        if self.exhausted:
            return None
        return self.route[self.index]

    def remaining(self) -> Route:
        return self.route.remaining(self.index)

    def replace_route(self, route: Route) -> None:
        # a new route always starts from the current location
        self.route = route
        self.origin = self.location
        self.index = 0
        self.fraction = 0.0
