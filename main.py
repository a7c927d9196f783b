# main.py
import argparse
import json
from pathlib import Path

from snow_sim.app.build import build
from snow_sim.config.models import ScenarioModel
from snow_sim.sim.clock import minutes


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the snow traffic simulation headless")
    parser.add_argument("--config", default=None, help="Scenario JSON file")
    parser.add_argument("--minutes", type=float, default=None, help="Override run length")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--quiet", action="store_true", help="Disable kernel logging")
    return parser.parse_args(argv)


def load_scenario(path: str | None) -> ScenarioModel:
    if path is None:
        return ScenarioModel()
    return ScenarioModel.model_validate(json.loads(Path(path).read_text()))


def run(argv: list[str] | None = None):
    args = _parse_args(argv)
    model = load_scenario(args.config)
    if args.seed is not None:
        model = model.model_copy(update={"sim": model.sim.model_copy(update={"seed": args.seed})})

    app = build(model, use_logging=not args.quiet)
    duration = minutes(args.minutes) if args.minutes is not None else model.sim.duration_s
    app.run(duration)

    snap = app.snapshot()
    print(
        json.dumps(
            {
                "t": snap.t,
                "storm_phase": snap.storm_phase,
                "exited": snap.exited,
                "rescued": snap.rescued,
                "stuck": snap.stuck,
                "score": snap.score,
                "clear_segments": snap.clear_segments,
            }
        )
    )
    return snap


if __name__ == "__main__":
    run()
