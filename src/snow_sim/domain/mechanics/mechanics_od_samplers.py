import numpy as np

from snow_sim.app.protocols import OriginDestinationSampler
from snow_sim.domain.entities.geography import LocationKind
from snow_sim.domain.network import RoadGraph


class TerminusODSampler(OriginDestinationSampler):
    """Uniform origin and distinct destination among the network's termini."""

    def __init__(self, *, graph: RoadGraph, rng: np.random.Generator):
        self.termini = graph.locations_of_kind(LocationKind.TERMINUS)
        self.rng = rng

    def sample(self) -> tuple[str, str] | None:
        if len(self.termini) < 2:
            return None
        i, j = self.rng.choice(len(self.termini), size=2, replace=False)
        return self.termini[int(i)], self.termini[int(j)]
