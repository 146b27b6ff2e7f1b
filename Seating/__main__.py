# __main__.py
"""
Headless runs from the command line:

    python -m Seating --num-agents 500 --runs 5 --seed 1
"""
import argparse
import logging
import sys

from Seating.config import ConfigManager, PRESETS
from Seating.runner import SimulationRunner

logger = logging.getLogger("Seating")

# flag -> configuration key
PARAMETER_FLAGS = {
    "rows": "ROWS",
    "cols": "COLS",
    "num_blocks": "NUM_BLOCKS",
    "num_agents": "NUM_AGENTS",
    "speed": "SPEED",
    "max_time": "MAX_TIME",
    "social_distance": "SOCIAL_DISTANCE",
    "back_pref": "BACK_PREF",
    "aisle_pref": "AISLE_PREF",
    "assigned_seats": "FEATURE_ASSIGNED_SEATS",
    "color_by_block": "FEATURE_COLOR_BY_BLOCK",
}

HISTORY_COLUMNS = ["run", "time", "seated", "standing", "seated_percent", "seating_speed", "agents", "blocks"]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="seating-sim", description="Conference room seating simulation")

    ap.add_argument("--preset", choices=sorted(PRESETS), default="default")
    ap.add_argument("--config", help="load parameters from a JSON file (overrides --preset)")
    ap.add_argument("--save-config", metavar="FILE", help="write the final parameters to a JSON file")

    ap.add_argument("--rows", type=int)
    ap.add_argument("--cols", type=int)
    ap.add_argument("--num-blocks", type=int)
    ap.add_argument("--num-agents", type=int)
    ap.add_argument("--speed", type=int, help="delay between paced ticks, ms")
    ap.add_argument("--max-time", type=int)
    ap.add_argument("--social-distance", type=int)
    ap.add_argument("--back-pref", type=int)
    ap.add_argument("--aisle-pref", type=int)
    ap.add_argument("--assigned-seats", action=argparse.BooleanOptionalAction, default=None)
    ap.add_argument("--color-by-block", action=argparse.BooleanOptionalAction, default=None)

    ap.add_argument("--seed", type=int, default=None, help="seed of the first run; run i uses seed + i")
    ap.add_argument("--runs", type=int, default=1)
    ap.add_argument("--paced", action="store_true", help="sleep SPEED ms between ticks")
    ap.add_argument("--log-level", default="INFO")
    return ap


def make_config(args: argparse.Namespace) -> ConfigManager:
    config = ConfigManager.load(args.config) if args.config else ConfigManager(**PRESETS[args.preset])

    for flag, key in PARAMETER_FLAGS.items():
        value = getattr(args, flag)
        if value is not None and not config.set(key, value):
            logger.warning("Ignoring out-of-range value %s=%r", key, value)
    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = make_config(args)
    if args.save_config:
        config.save(args.save_config)
        logger.info("Parameters saved to %s", args.save_config)

    runner = SimulationRunner(config, paced=args.paced)
    failures = 0
    for i in range(args.runs):
        runner.seed = None if args.seed is None else args.seed + i
        if not runner.build():
            failures += 1
            print(runner.completion_message)
            break

        result = runner.start()
        if result is None or result.error:
            failures += 1
        print(f"Run {i + 1}: {runner.completion_message}")

    if len(runner.history):
        print()
        print(runner.history.to_frame()[HISTORY_COLUMNS].to_string(index=False))

    runner.close()
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
