"""Command line entry point for nnet training runs."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Iterable

from nnet.training import pipelines


def configure_logging(level: str | None = None) -> None:
    """Set up root logging from ``level`` or ``NNET_LOG_LEVEL``."""

    level_name = (level or os.environ.get("NNET_LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "error": result.error,
        "metrics": result.metrics_path,
        "checkpoint": result.checkpoint_path,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-logistic",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--trainer",
        choices=sorted(pipelines.TRAINERS),
        help="Override the trainer used by the run",
    )
    parser.add_argument("--epochs", type=int, help="Maximum number of epochs")
    parser.add_argument("--threads", type=int, help="Worker threads (parallel_batch)")
    parser.add_argument("--seed", type=int, help="Seed for weight initialisation")
    parser.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write an error curve plot"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument("--log-level", help="Logging level (default: NNET_LOG_LEVEL or WARNING)")
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = pipelines.load_preset(args.preset)
    if args.config:
        override = pipelines.load_config(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = override
        else:
            config = _merge(config, override)

    train_cfg = config.setdefault("train", {})
    if args.trainer:
        train_cfg["trainer"] = args.trainer
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.threads is not None:
        train_cfg["threads"] = int(args.threads)
    if args.run_dir is not None:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.seed is not None:
        config.setdefault("model", {})["seed"] = int(args.seed)

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
