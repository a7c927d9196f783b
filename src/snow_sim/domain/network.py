# domain/network.py
import math
from collections.abc import Iterable

from snow_sim.domain.entities.geography import Location, LocationKind, Point, Route, Segment
from snow_sim.domain.entities.motion import Pose


class RoadGraph:
    """Road network: fixed topology, mutable per-segment state.

    The single shared-mutable object of a simulation. Other components hold a
    reference and change segment state only through accumulate / clear /
    set_obstructed. Unknown ids raise KeyError (a broken invariant, not a
    recoverable condition).
    """

    def __init__(self) -> None:
        self.locations: dict[str, Location] = {}
        self.segments: dict[str, Segment] = {}
        self.adjacency: dict[str, list[str]] = {}  # location id -> segment ids

    # ------------- construction -------------------

    def add_location(self, loc: Location) -> Location:
        if loc.id in self.locations:
            raise ValueError(f"duplicate location {loc.id!r}")
        self.locations[loc.id] = loc
        self.adjacency.setdefault(loc.id, [])
        return loc

    def add_segment(self, segment_id: str, a: str, b: str) -> Segment:
        if segment_id in self.segments:
            raise ValueError(f"duplicate segment {segment_id!r}")
        for end in (a, b):
            if end not in self.locations:
                raise KeyError(f"segment {segment_id!r} references unknown location {end!r}")
        seg = Segment(segment_id, a, b)
        self.segments[segment_id] = seg
        self.adjacency[a].append(segment_id)
        if b != a:
            self.adjacency[b].append(segment_id)
        return seg

    # ------------- lookups -------------------

    def location(self, location_id: str) -> Location:
        try:
            return self.locations[location_id]
        except KeyError:
            raise KeyError(f"unknown location {location_id!r}") from None

    def segment(self, segment_id: str) -> Segment:
        try:
            return self.segments[segment_id]
        except KeyError:
            raise KeyError(f"unknown segment {segment_id!r}") from None

    def touching(self, location_id: str) -> list[str]:
        self.location(location_id)
        return list(self.adjacency[location_id])

    def locations_of_kind(self, kind: LocationKind) -> list[str]:
        return [loc.id for loc in self.locations.values() if loc.kind == kind]

    @property
    def depot(self) -> str | None:
        depots = self.locations_of_kind(LocationKind.DEPOT)
        return depots[0] if depots else None

    def other_endpoint(self, segment_id: str, known: str) -> str:
        seg = self.segment(segment_id)
        if known == seg.a:
            return seg.b
        if known == seg.b:
            return seg.a
        raise KeyError(f"{known!r} is not an endpoint of segment {segment_id!r}")

    def segment_between(self, a: str, b: str) -> Segment | None:
        # first match in a's adjacency; O(degree)
        for sid in self.adjacency.get(a, ()):
            seg = self.segments[sid]
            if seg.touches(b) and (a != b or seg.a == seg.b):
                return seg
        return None

    def distance(self, a: str, b: str) -> float:
        pa, pb = self.location(a).point, self.location(b).point
        return math.hypot(pb.x - pa.x, pb.y - pa.y)

    def segment_length(self, segment_id: str) -> float:
        seg = self.segment(segment_id)
        return self.distance(seg.a, seg.b)

    # ------------- state mutation -------------------

    def accumulate(self, segment_id: str, amount: float) -> float:
        if amount < 0:
            raise ValueError(f"accumulate amount must be >= 0, got {amount}")
        seg = self.segment(segment_id)
        seg.accumulation += amount
        return seg.accumulation

    def clear(self, segment_id: str, amount: float) -> float:
        if amount < 0:
            raise ValueError(f"clear amount must be >= 0, got {amount}")
        seg = self.segment(segment_id)
        seg.accumulation = max(0.0, seg.accumulation - amount)
        return seg.accumulation

    def set_obstructed(self, segment_id: str, obstructed: bool) -> None:
        self.segment(segment_id).obstructed = bool(obstructed)

    # ------------- route geometry -------------------

    def traversal_start(self, route: Route, index: int, start_hint: str | None = None) -> str:
        """Location the route enters segment `index` from."""
        first = self.segment(route[0])
        start = start_hint if start_hint is not None else first.a
        if not first.touches(start):
            raise KeyError(f"start {start!r} is not an endpoint of segment {first.id!r}")
        for i in range(1, index + 1):
            prev, cur = self.segment(route[i - 1]), self.segment(route[i])
            shared = set(prev.endpoints) & set(cur.endpoints)
            if len(shared) == 1 and prev.id != cur.id:
                start = shared.pop()
            else:
                # same segment twice or parallel segments: follow the previous traversal
                start = self.other_endpoint(prev.id, start)
        return start

    def route_end(self, route: Route, start_hint: str | None = None) -> str | None:
        if not route:
            return start_hint
        last = len(route) - 1
        return self.other_endpoint(route[last], self.traversal_start(route, last, start_hint))

    def position_along(
        self,
        route: Route,
        index: int,
        progress: float,
        start_hint: str | None = None,
        lateral_offset: float = 0.0,
    ) -> Pose:
        """World pose of an agent at `progress` (0..1) on segment `index` of `route`.

        Positive `lateral_offset` shifts the pose to the right of the travel
        direction in screen coordinates (y grows downward), which keeps
        opposite directions in separate lanes.
        """
        if index >= len(route):
            end = self.route_end(route, start_hint)
            if end is None:
                raise ValueError("cannot place an empty route without a start location")
            p = self.location(end).point
            return Pose(p.x, p.y, 0.0)

        start = self.traversal_start(route, index, start_hint)
        end = self.other_endpoint(route[index], start)
        p0, p1 = self.location(start).point, self.location(end).point
        heading = math.atan2(p1.y - p0.y, p1.x - p0.x)
        x = p0.x + (p1.x - p0.x) * progress
        y = p0.y + (p1.y - p0.y) * progress
        if lateral_offset:
            x -= math.sin(heading) * lateral_offset
            y += math.cos(heading) * lateral_offset
        return Pose(x, y, heading)


# ---------------- scenario builders ----------------


def build_grid_network(
    *,
    center: tuple[float, float] = (400.0, 280.0),
    spacing: float = 120.0,
    terminus_offset: float = 100.0,
    depot_offset: float = 180.0,
) -> RoadGraph:
    """3x3 town grid with diagonals through the centre, four termini and a depot.

    ::

                   north
                     |
            NW ---- NC ---- NE
             |  \\   |   /  |
      west - CW ---- CC ---- CE - east
             |  /   |   \\  |
            SW ---- SC ---- SE
                     |
                   south
                     |
                   depot
    """
    cx, cy = center
    g = RoadGraph()

    rows = {"N": cy - spacing, "C": cy, "S": cy + spacing}
    cols = {"W": cx - spacing, "C": cx, "E": cx + spacing}
    for r, y in rows.items():
        for c, x in cols.items():
            g.add_location(Location(r + c, Point(x, y)))

    termini = {
        "north": Point(cx, cy - spacing - terminus_offset),
        "south": Point(cx, cy + spacing + terminus_offset),
        "east": Point(cx + spacing + terminus_offset, cy),
        "west": Point(cx - spacing - terminus_offset, cy),
    }
    for name, p in termini.items():
        g.add_location(Location(name, p, LocationKind.TERMINUS))
    g.add_location(Location("depot", Point(cx, cy + spacing + depot_offset), LocationKind.DEPOT))

    for sid, a, b in _GRID_SEGMENTS:
        g.add_segment(sid, a, b)
    return g


_GRID_SEGMENTS = (
    # horizontal
    ("h-nw-nc", "NW", "NC"),
    ("h-nc-ne", "NC", "NE"),
    ("h-cw-cc", "CW", "CC"),
    ("h-cc-ce", "CC", "CE"),
    ("h-sw-sc", "SW", "SC"),
    ("h-sc-se", "SC", "SE"),
    # vertical
    ("v-nw-cw", "NW", "CW"),
    ("v-cw-sw", "CW", "SW"),
    ("v-nc-cc", "NC", "CC"),
    ("v-cc-sc", "CC", "SC"),
    ("v-ne-ce", "NE", "CE"),
    ("v-ce-se", "CE", "SE"),
    # diagonals through the centre
    ("d-nw-cc", "NW", "CC"),
    ("d-ne-cc", "NE", "CC"),
    ("d-sw-cc", "SW", "CC"),
    ("d-se-cc", "SE", "CC"),
    # termini
    ("ep-north", "north", "NC"),
    ("ep-south", "south", "SC"),
    ("ep-east", "east", "CE"),
    ("ep-west", "west", "CW"),
    # depot access
    ("depot-road", "depot", "south"),
)


def build_explicit_network(
    locations: Iterable[tuple[str, float, float, str]],
    segments: Iterable[tuple[str, str, str]],
) -> RoadGraph:
    g = RoadGraph()
    for lid, x, y, kind in locations:
        g.add_location(Location(lid, Point(float(x), float(y)), LocationKind(kind)))
    for sid, a, b in segments:
        g.add_segment(sid, a, b)
    return g
