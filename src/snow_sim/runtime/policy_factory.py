from snow_sim.app.protocols import DispatchGate, ReroutePolicy
from snow_sim.config.models import DispatchModel, RerouteModel
from snow_sim.policy.dispatch import CooldownGate
from snow_sim.policy.reroute import HysteresisReroutePolicy


def make_reroute_policy(cfg: RerouteModel) -> ReroutePolicy:
    if isinstance(cfg, RerouteModel):
        return HysteresisReroutePolicy(
            interval_s=cfg.interval_s,
            threshold=cfg.threshold,
            max_progress=cfg.max_progress,
            hysteresis=cfg.hysteresis,
        )
    else:
        raise TypeError(cfg)


def make_dispatch_gate(cfg: DispatchModel) -> DispatchGate:
    if isinstance(cfg, DispatchModel):
        return CooldownGate(cooldown_s=cfg.cooldown_s)
    else:
        raise TypeError(cfg)
