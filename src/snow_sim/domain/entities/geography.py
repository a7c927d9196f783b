from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum


# Core geometry types shared by the network and all movement code
@dataclass(frozen=True)
class Point:
    x: float  # world units (screen layout of the default scenario)
    y: float


class LocationKind(str, Enum):
    JUNCTION = "junction"
    TERMINUS = "terminus"  # spawn / despawn point for cars
    DEPOT = "depot"  # origin of service vehicles


@dataclass(frozen=True)
class Location:
    id: str
    point: Point
    kind: LocationKind = LocationKind.JUNCTION


@dataclass
class Segment:
    """Undirected road edge. Topology is fixed; accumulation and obstruction are live state."""

    id: str
    a: str
    b: str
    accumulation: float = 0.0
    obstructed: bool = False

    @property
    def endpoints(self) -> tuple[str, str]:
        return self.a, self.b

    def touches(self, location_id: str) -> bool:
        return location_id == self.a or location_id == self.b


@dataclass(frozen=True)
class Route:
    """Ordered walk through the graph, stored as segment ids only.

    Traversal direction is not stored; it is inferred from the shared endpoint
    with the previous step (see RoadGraph.traversal_start).
    """

    segment_ids: tuple[str, ...] = ()

    @classmethod
    def of(cls, segment_ids: Iterable[str]) -> "Route":
        return cls(tuple(segment_ids))

    def __len__(self) -> int:
        return len(self.segment_ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self.segment_ids)

    def __getitem__(self, i: int) -> str:
        return self.segment_ids[i]

    def then(self, segment_id: str) -> "Route":
        return Route(self.segment_ids + (segment_id,))

    def remaining(self, index: int) -> "Route":
        return Route(self.segment_ids[index:])
