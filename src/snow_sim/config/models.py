from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


class SimModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    epoch: tuple[int, int, int, int, int, int] = (2025, 1, 1, 0, 0, 0)
    seed: int = 0
    dt_s: float = Field(default=1 / 60, gt=0)  # one frame at 60 fps
    duration_s: float = Field(default=300.0, ge=0)


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = 1


# ----------------- NETWORK ---------------------


class NetworkGridModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["grid"] = "grid"
    center: tuple[float, float] = (400.0, 280.0)
    spacing: float = Field(default=120.0, gt=0)
    terminus_offset: float = Field(default=100.0, gt=0)
    depot_offset: float = Field(default=180.0, gt=0)


class LocationModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    x: float
    y: float
    kind: Literal["junction", "terminus", "depot"] = "junction"


class SegmentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    a: str
    b: str


class NetworkExplicitModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["explicit"] = "explicit"
    locations: list[LocationModel]
    segments: list[SegmentModel]

    @model_validator(mode="after")
    def _check_refs(self):
        ids = [loc.id for loc in self.locations]
        if len(set(ids)) != len(ids):
            raise ValueError("location ids must be unique")
        known = set(ids)
        for seg in self.segments:
            for end in (seg.a, seg.b):
                if end not in known:
                    raise ValueError(f"segment {seg.id!r} references unknown location {end!r}")
        if sum(1 for loc in self.locations if loc.kind == "depot") > 1:
            raise ValueError("at most one depot is supported")
        return self


NetworkUnion = Annotated[NetworkGridModel | NetworkExplicitModel, Field(discriminator="kind")]


# ----------------- SNOW ---------------------


class TiersModel(BaseModel):
    """Inclusive upper bounds of the clear/light/moderate tiers; `deep` immobilizes cars."""

    model_config = ConfigDict(extra="forbid")
    clear: float = 2.0
    light: float = 5.0
    moderate: float = 8.0
    deep: float = 9.0

    @model_validator(mode="after")
    def _increasing(self):
        if not (0 <= self.clear < self.light < self.moderate < self.deep):
            raise ValueError("tiers must satisfy 0 <= clear < light < moderate < deep")
        return self


class StormPhaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    duration_s: float = Field(gt=0)
    intensity: float = Field(ge=0)


def _default_storm_cycle() -> list[StormPhaseModel]:
    return [
        StormPhaseModel(name="Light Snow", duration_s=60, intensity=0.5),
        StormPhaseModel(name="Heavy Snow", duration_s=30, intensity=1.5),
        StormPhaseModel(name="Lull", duration_s=45, intensity=0.3),
        StormPhaseModel(name="Blizzard", duration_s=40, intensity=2.0),
    ]


class SnowModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    base_rate: float = Field(default=0.3, ge=0)  # units per second at intensity 1
    tiers: TiersModel = Field(default_factory=TiersModel)
    phases: list[StormPhaseModel] = Field(default_factory=_default_storm_cycle, min_length=1)
    # None => the segments touching the depot
    exempt_segments: list[str] | None = None


# ----------------- TRAFFIC ---------------------


class SpeedSnowPenaltyModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["snow_penalty"] = "snow_penalty"
    per_unit: float = Field(default=0.08, ge=0)
    floor: float = Field(default=0.2, gt=0, le=1)


class SpeedFixedModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["fixed"] = "fixed"


SpeedUnion = Annotated[SpeedSnowPenaltyModel | SpeedFixedModel, Field(discriminator="kind")]


class RerouteModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    interval_s: float = Field(default=1.0, gt=0)
    threshold: float = 8.0  # accumulation above which the current segment is "bad"
    max_progress: float = Field(default=0.1, ge=0, le=1)
    hysteresis: float = Field(default=0.8, gt=0, le=1)


class TrafficModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    spawn_interval_s: float = Field(default=3.0, gt=0)
    base_speed: float = Field(default=100.0, gt=0)
    speed_jitter: float = Field(default=50.0, ge=0)
    speed: SpeedUnion = Field(default_factory=SpeedSnowPenaltyModel)
    reroute: RerouteModel = Field(default_factory=RerouteModel)
    stop_distance: float = 0.12  # fraction of segment
    min_separation: float = 0.10
    lane_offset: float = 6.0

    @field_validator("stop_distance", "min_separation")
    @classmethod
    def _fraction(cls, v: float, info: ValidationInfo) -> float:
        if not 0 <= v <= 1:
            raise ValueError(f"{info.field_name} must be a segment fraction in [0, 1]")
        return v

    @model_validator(mode="after")
    def _separation_inside_stop(self):
        if self.min_separation > self.stop_distance:
            raise ValueError("min_separation must not exceed stop_distance")
        return self


# ----------------- DISPATCH ---------------------


class DispatchModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    plow_speed: float = Field(default=150.0, gt=0)
    tow_speed: float = Field(default=120.0, gt=0)
    clear_rate: float = Field(default=15.0, ge=0)  # units per second
    cooldown_s: float = Field(default=2.0, ge=0)


class ScoringModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    exit_points: int = 10
    rescue_points: int = 5


# ------------------------------------------------------------------


class ScenarioModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "default"
    run_id: str = "local"
    sim: SimModel = Field(default_factory=SimModel)
    log: LogModel = Field(default_factory=LogModel)
    network: NetworkUnion = Field(default_factory=NetworkGridModel)
    snow: SnowModel = Field(default_factory=SnowModel)
    traffic: TrafficModel = Field(default_factory=TrafficModel)
    dispatch: DispatchModel = Field(default_factory=DispatchModel)
    scoring: ScoringModel = Field(default_factory=ScoringModel)
