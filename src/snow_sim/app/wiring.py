# snow_sim/app/wiring.py
from snow_sim.app.controllers.closures import ClosureHandler
from snow_sim.app.controllers.dispatch import DispatchController
from snow_sim.app.controllers.snow import SnowLayer
from snow_sim.app.controllers.traffic import TrafficController
from snow_sim.app.events import CarImmobilized, ClosureToggleRequested, PlowRequested
from snow_sim.sim.kernel import Kernel


def wire(
    kernel: Kernel,
    *,
    snow: SnowLayer,
    traffic: TrafficController,
    dispatch: DispatchController,
    closures: ClosureHandler,
) -> None:
    k = kernel

    # tick order: weather first, then cars react, then service vehicles
    k.add_system(snow)
    k.add_system(traffic)
    k.add_system(dispatch)

    # stuck car -> tow truck in the same tick
    k.on(CarImmobilized, dispatch.on_car_immobilized)

    # inbound commands
    k.on(PlowRequested, dispatch.on_plow_requested)
    k.on(ClosureToggleRequested, closures.on_closure_toggle_requested)
