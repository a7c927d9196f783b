# snow_sim/policy/dispatch.py
from snow_sim.app.protocols import DispatchGate


class CooldownGate(DispatchGate):
    """Global plow cooldown: one dispatch, then `cooldown_s` of rejections."""

    def __init__(self, cooldown_s: float = 2.0):
        self.cooldown_s = cooldown_s
        self._remaining = 0.0

    @property
    def remaining_s(self) -> float:
        return self._remaining

    def ready(self) -> bool:
        return self._remaining <= 0.0

    def start(self) -> None:
        self._remaining = self.cooldown_s

    def tick(self, dt: float) -> None:
        if self._remaining > 0.0:
            self._remaining = max(0.0, self._remaining - dt)
