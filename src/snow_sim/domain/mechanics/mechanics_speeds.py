from snow_sim.app.protocols import SpeedModel


class SnowPenaltySpeed(SpeedModel):
    """Cars: base speed scaled down linearly with accumulation, never below a floor."""

    def __init__(self, per_unit: float = 0.08, floor: float = 0.2):
        self.per_unit, self.floor = per_unit, floor

    def factor(self, accumulation: float) -> float:
        return max(self.floor, 1.0 - accumulation * self.per_unit)

    def speed(self, base: float, *, accumulation: float = 0.0) -> float:
        return base * self.factor(accumulation)


class FixedSpeed(SpeedModel):
    """Service vehicles: conditions never slow them down."""

    def factor(self, accumulation: float) -> float:
        return 1.0

    def speed(self, base: float, *, accumulation: float = 0.0) -> float:
        return base
