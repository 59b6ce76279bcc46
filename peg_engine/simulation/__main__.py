"""Command-line entry point: simulate the peg controller over a random path.

    python -m peg_engine.simulation --steps 2000 --shock-intensity 0.002
"""

import argparse
from datetime import timedelta
from typing import List, Optional

from peg_engine.config.settings import settings
from peg_engine.config.stablecoin import StablecoinConfig
from peg_engine.simulation.engine import PegSimulation
from peg_engine.simulation.paths import PegPathGenerator
from peg_engine.utils.logging import setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate the stablecoin peg controller.")
    parser.add_argument("--steps", type=int, default=1000, help="Number of price observations")
    parser.add_argument("--step-seconds", type=float, default=30.0, help="Seconds between observations")
    parser.add_argument("--seed", type=int, default=settings.random_seed, help="Random seed")
    parser.add_argument("--supply", type=float, default=1_000_000.0, help="Initial supply")
    parser.add_argument("--reserve", type=float, default=200_000.0, help="Initial reserve pool")
    parser.add_argument("--initial-price", type=float, default=None, help="Starting price (peg by default)")
    parser.add_argument("--volatility", type=float, default=0.002, help="Per-step price noise")
    parser.add_argument("--shock-intensity", type=float, default=0.0, help="Expected shocks per step")
    parser.add_argument("--tolerance", type=float, default=0.02, help="Tolerance band")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logger(level=args.log_level)

    config = StablecoinConfig(tolerance_band=args.tolerance)
    path = PegPathGenerator(config.target_price, seed=args.seed).generate(
        args.steps,
        initial_price=args.initial_price,
        volatility=args.volatility,
        jump_intensity=args.shock_intensity,
    )
    simulation = PegSimulation(
        config,
        initial_supply=args.supply,
        initial_reserve=args.reserve,
        step=timedelta(seconds=args.step_seconds),
    )
    result = simulation.run(path)

    for key, value in result.summary().items():
        logger.info("%s: %s", key, value)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
