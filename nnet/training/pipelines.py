"""Pipeline assembly: presets, config loading and end-to-end runs."""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Callable, Dict, List, Mapping

from .. import data
from ..core.network import FeedForwardNetwork
from ..core.params import TrainerParameters, network_parameters
from ..core.types import RunResult, TrainingSet
from ..reporting.checkpoint import save_checkpoint
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .parallel import ParallelBatchEpochTrainer
from .trainer import (
    BatchEpochTrainer,
    NeuralNetTrainer,
    SeqEpochTrainer,
    SeqErrorAverageTrainer,
    evaluate,
)

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-logistic": {
        "data": {"name": "xor"},
        "model": {"d_in": 2, "hidden": 8, "d_out": 1, "activation": "logistic", "seed": 0},
        "train": {
            "trainer": "seq_error",
            "target_error": 0.01,
            "epochs": 20000,
            "lr": 0.5,
            "momentum": 0.5,
            "error_function": "mse",
            "run_dir": "runs/xor-logistic",
            "enable_plots": False,
        },
    },
    "xor-tanh": {
        "data": {"name": "xor"},
        "model": {"d_in": 2, "hidden": 4, "d_out": 1, "activation": "tanh", "seed": 1},
        "train": {
            "trainer": "seq_epoch",
            "epochs": 2000,
            "lr": 0.1,
            "momentum": 0.4,
            "run_dir": "runs/xor-tanh",
            "enable_plots": False,
        },
    },
    "xor-parallel": {
        "data": {"name": "xor"},
        "model": {"d_in": 2, "hidden": 8, "d_out": 1, "activation": "logistic", "seed": 0},
        "train": {
            "trainer": "parallel_batch",
            "epochs": 5000,
            "threads": 2,
            "lr": 0.5,
            "momentum": 0.5,
            "run_dir": "runs/xor-parallel",
            "enable_plots": False,
        },
    },
}

TrainerBuilder = Callable[..., NeuralNetTrainer]


def _seq_epoch(network, tset, params, cfg, callbacks) -> NeuralNetTrainer:
    return SeqEpochTrainer(network, tset, params, cfg.get("epochs"), callbacks=callbacks)


def _seq_error(network, tset, params, cfg, callbacks) -> NeuralNetTrainer:
    return SeqErrorAverageTrainer(
        network,
        tset,
        params,
        float(cfg.get("target_error", 0.01)),
        cfg.get("epochs"),
        callbacks=callbacks,
    )


def _batch(network, tset, params, cfg, callbacks) -> NeuralNetTrainer:
    return BatchEpochTrainer(network, tset, params, cfg.get("epochs"), callbacks=callbacks)


def _parallel_batch(network, tset, params, cfg, callbacks) -> NeuralNetTrainer:
    return ParallelBatchEpochTrainer(
        network,
        tset,
        params,
        cfg.get("epochs"),
        threads=cfg.get("threads"),
        lock_timeout=cfg.get("lock_timeout"),
        drop_remainder=bool(cfg.get("drop_remainder", False)),
        callbacks=callbacks,
    )


TRAINERS: Dict[str, TrainerBuilder] = {
    "seq_epoch": _seq_epoch,
    "seq_error": _seq_error,
    "batch": _batch,
    "parallel_batch": _parallel_batch,
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Dict[str, object]:
    if name not in _PRESETS:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}")
    return deepcopy(_PRESETS[name])  # type: ignore[return-value]


def load_config(path: str | Path) -> Dict[str, object]:
    """Read a JSON or YAML config file into a mapping."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in {".json", ".yaml", ".yml"}:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        loaded = yaml.safe_load(text) or {}
    else:
        loaded = json.loads(text or "{}")
    if not isinstance(loaded, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return dict(loaded)


def build_training_set(data_cfg: Mapping[str, object]) -> TrainingSet:
    if "inputs" in data_cfg and "targets" in data_cfg:
        return data.from_arrays(data_cfg["inputs"], data_cfg["targets"])
    return data.get(str(data_cfg.get("name", "xor")))


def build_network(model_cfg: Mapping[str, object]) -> FeedForwardNetwork:
    return FeedForwardNetwork(
        int(model_cfg["d_in"]),
        int(model_cfg["hidden"]),
        int(model_cfg["d_out"]),
        params=network_parameters(str(model_cfg.get("activation", "logistic"))),
        seed=model_cfg.get("seed"),
    )


def build_trainer(
    network: FeedForwardNetwork,
    tset: TrainingSet,
    train_cfg: Mapping[str, object],
    callbacks: List[object] | None = None,
) -> NeuralNetTrainer:
    name = str(train_cfg.get("trainer", "seq_epoch"))
    if name not in TRAINERS:
        available = ", ".join(sorted(TRAINERS))
        raise KeyError(f"Unknown trainer {name!r}. Available trainers: {available}")
    params = TrainerParameters(
        learning_rate=float(train_cfg.get("lr", 0.1)),
        momentum=float(train_cfg.get("momentum", 0.0)),
        error_function=str(train_cfg.get("error_function", "mse")),
    )
    return TRAINERS[name](network, tset, params, train_cfg, list(callbacks or []))


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train a network as described by ``config`` and write run artifacts."""

    data_cfg = dict(config.get("data", {}))  # type: ignore[arg-type]
    model_cfg = dict(config.get("model", {}))  # type: ignore[arg-type]
    train_cfg = dict(config.get("train", {}))  # type: ignore[arg-type]

    tset = build_training_set(data_cfg)
    network = build_network(model_cfg)
    run_dir = Path(str(train_cfg.get("run_dir", "runs/default")))
    run_dir.mkdir(parents=True, exist_ok=True)

    metrics_path = run_dir / "metrics.jsonl"
    trainer_name = str(train_cfg.get("trainer", "seq_epoch"))
    plots = PlotAdapter(
        run_dir,
        enable_plots=bool(train_cfg.get("enable_plots", False)),
        target_error=float(train_cfg.get("target_error", 0.01))
        if trainer_name == "seq_error"
        else None,
    )
    callbacks = [
        JsonlSink(
            metrics_path,
            trainer=trainer_name,
            seed=model_cfg.get("seed"),
        ),
        CsvSink(run_dir / "metrics.csv"),
        plots,
    ]
    trainer = build_trainer(network, tset, train_cfg, callbacks)
    logger.info("running %s on %d examples in %s", network, len(tset), run_dir)
    result = trainer.train()
    plots.close()

    error = evaluate(network, tset, str(train_cfg.get("error_function", "mse")))
    checkpoint_path = save_checkpoint(run_dir / "last.ckpt", network)
    manifest = {
        "config": json.loads(json.dumps(config, default=str)),
        "epochs": result.epochs,
        "error": error,
    }
    (run_dir / "manifest.json").write_text(json.dumps(manifest, indent=2))
    return RunResult(
        epochs=result.epochs,
        error=error,
        metrics_path=str(metrics_path),
        checkpoint_path=str(checkpoint_path),
    )


__all__ = [
    "TRAINERS",
    "build_network",
    "build_trainer",
    "build_training_set",
    "load_config",
    "load_preset",
    "presets",
    "run_pipeline",
]
