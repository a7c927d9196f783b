# snow_sim/app/controllers/closures.py
from snow_sim.app.events import ClosureChanged, ClosureToggleRequested
from snow_sim.domain.network import RoadGraph


class ClosureHandler:
    def __init__(self, graph: RoadGraph):
        self.graph = graph

    def on_closure_toggle_requested(self, ev: ClosureToggleRequested):
        # any open road at the junction closes all of them; otherwise reopen all
        touching = self.graph.touching(ev.location_id)
        if not touching:
            return []
        close = any(not self.graph.segment(sid).obstructed for sid in touching)
        for sid in touching:
            self.graph.set_obstructed(sid, close)
        return [
            ClosureChanged(
                t=ev.t, location_id=ev.location_id, obstructed=close, segment_ids=tuple(touching)
            )
        ]
