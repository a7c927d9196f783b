# snow_sim/io/kernel_logging.py
import json
import logging
import sys
from dataclasses import asdict, is_dataclass

from snow_sim.io.recorder import Recorder
from snow_sim.sim.hooks import NoopHooks


def _default_json_logger(name="snow_sim", level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)

        class _JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                payload = {
                    "level": record.levelname,
                    "msg": record.getMessage(),
                    "logger": record.name,
                }
                extra = getattr(record, "extra", None)
                if isinstance(extra, dict):
                    payload.update(extra)
                return json.dumps(payload, default=str)

        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
        logger.setLevel(level)
    return logger


class KernelLogging(NoopHooks):
    """
    Structured logs for the tick loop and the domain events it dispatches.
    Every dispatched event is also handed to the recorder.
    """

    BUSINESS = {
        "StormPhaseChanged",
        "CarSpawned",
        "CarExited",
        "CarImmobilized",
        "CarReleased",
        "CarRerouted",
        "CarRescued",
        "PlowDispatched",
        "TowDispatched",
        "DispatchRejected",
        "ServiceReturned",
        "ServiceAbandoned",
        "ClosureChanged",
    }

    def __init__(
        self,
        run_id: str = "local",
        clock=None,
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1000,
        logger: logging.Logger | None = None,
        recorder: Recorder | None = None,
    ):
        self.run_id, self.clock, self.debug, self.sample_every = (
            run_id,
            clock,
            debug,
            max(1, sample_every),
        )
        self.recorder = recorder
        self.log = logger or _default_json_logger(level=level)
        self._processed = 0

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        wall = self.clock.to_wall(extra["t"]) if (self.clock and extra.get("t") is not None) else None
        payload = {"run_id": self.run_id}
        if wall:
            payload["wall"] = wall.isoformat()
        self.log.log(getattr(logging, level), msg, extra={"extra": {**payload, **extra}})

    def _shape_event(self, ev, want_name: bool = False):
        name = type(ev).__name__
        base = {"t": getattr(ev, "t", None)}
        for f in ("car_id", "vehicle_id", "segment_id", "kind", "reason"):
            if hasattr(ev, f):
                base[f] = getattr(ev, f)
        if is_dataclass(ev):
            evd = asdict(ev)
            for k in list(base.keys()):
                evd.pop(k, None)
            if evd:
                base["data"] = evd
        return (name, base) if want_name else base

    # --------------------------------------------------------

    # engine lifecycle

    def run_start(self, *, until: float, dt: float, max_ticks: int | None):
        self._emit("INFO", "run_start", until=until, dt=dt, max_ticks=max_ticks)

    def run_end(self, *, ticks: int, **extra):
        self._emit("INFO", "run_end", ticks=ticks, processed=self._processed, **extra)

    def schedule(self, ev, *, now: float, qsize: int):
        if self.debug and (qsize % self.sample_every) == 0:
            self._emit("DEBUG", "schedule", **self._shape_event(ev), now=now, qsize=qsize)

    def dispatch_start(self, ev, *, seq: int, qsize: int, handlers: int):
        self._processed += 1
        name, extra = self._shape_event(ev, want_name=True)
        level = "INFO" if name in self.BUSINESS else ("DEBUG" if self.debug else None)
        if level:
            self._emit(level, name, **extra, seq=seq, qsize=qsize, handlers=handlers)
        self.biz(ev)

    def dispatch_end(self, ev, *, produced: int, qsize: int, **extra):
        if self.debug and (self._processed % self.sample_every) == 0:
            self._emit("DEBUG", "dispatch_done", produced=produced, qsize=qsize, **extra)

    def error(self, ev, *, reason: str, **extra):
        name, shaped = self._shape_event(ev, want_name=True)
        self._emit("ERROR", "kernel_error", **{**shaped, **extra, "event": name, "error": reason})

    # ------------- Business Event Reporting --------------------------

    def biz(self, ev):
        if self.recorder:
            self.recorder.emit(ev)
