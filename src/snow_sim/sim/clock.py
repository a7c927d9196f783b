# sim/clock.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

MIN = 60.0


def minutes(x: float) -> float:
    return x * MIN


@dataclass(frozen=True)
class SimClock:
    """Maps simulation seconds onto wall time for log stamps."""

    epoch: datetime  # wall time of t=0

    @classmethod
    def utc_epoch(cls, y: int, m: int, d: int, hh=0, mm=0, ss=0) -> SimClock:
        return cls(datetime(y, m, d, hh, mm, ss, tzinfo=UTC))

    def to_sim(self, dt: datetime) -> float:
        delta = dt - self.epoch if dt.tzinfo else (dt.replace(tzinfo=UTC) - self.epoch)
        return delta.total_seconds()

    def to_wall(self, t: float) -> datetime:
        return self.epoch + timedelta(seconds=t)

