"""Command-line interface."""
from __future__ import annotations

import argparse
import logging
import time
from typing import Optional, Sequence

from diffusionsim.config import DEFAULT_MIN_TICK_TIME
from diffusionsim.controller.workers import ModelManager, Snapshot
from diffusionsim.errors import ConstructionError
from diffusionsim.logging_config import setup_logging
from diffusionsim.model.state import ModelKind, ModelSettings, build_model

logger = logging.getLogger("diffusionsim.cli")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="diffusionsim",
        description="Run the explicit and theta schemes against the exact solution and log their divergence.",
    )
    defaults = ModelSettings()
    parser.add_argument("--seconds", type=float, default=5.0, help="wall-clock run time")
    parser.add_argument("--min-tick-ms", type=float, default=DEFAULT_MIN_TICK_TIME * 1000, help="minimum tick duration")
    parser.add_argument("--node-count", type=int, default=defaults.node_count, help="grid nodes per model")
    parser.add_argument("--sigma", type=float, default=defaults.sigma, help="implicit weight of the theta scheme")
    parser.add_argument("--parallel", action="store_true", help="step models on a thread pool")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    return parser.parse_args(argv)


def log_snapshot(snapshot: Snapshot) -> None:
    logger.info(f"{snapshot.tick_rate} ticks/s")
    for info in snapshot.models:
        for partner, value in sorted(info.comparisons.items()):
            if info.name < partner:
                logger.info(f"  t={info.elapsed_time:8.1f}  |{info.name} - {partner}| = {value:.6g}")
    for error in snapshot.errors:
        logger.warning(f"  {error}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    settings = ModelSettings(sigma=args.sigma).with_grid(args.node_count)
    try:
        models = {kind: build_model(settings, kind) for kind in (ModelKind.EXPLICIT, ModelKind.THETA)}
        references = {kind: build_model(settings, ModelKind.ANALYTIC) for kind in models}
    except ConstructionError as e:
        logger.error(f"Invalid model settings: {e}")
        return 2

    with ModelManager(min_tick_time=args.min_tick_ms / 1000.0, parallel=args.parallel) as manager:
        for kind, model in models.items():
            manager.add_with_reference(str(kind), model, references[kind])

        deadline = time.monotonic() + args.seconds
        while time.monotonic() < deadline:
            time.sleep(min(1.0, max(0.0, deadline - time.monotonic())))
            log_snapshot(manager.get_snapshot())

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
