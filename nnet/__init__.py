"""nnet public API."""

from .core import activations, params, types  # noqa: F401
from .core.network import FeedForwardNetwork
from .core.params import (
    LogisticNeuralNet,
    NetworkParameters,
    TanhNeuralNet,
    TrainerParameters,
)
from .core.types import Layer, Node, TrainingSetMember
from .training import parallel
from .training.pipelines import load_preset, presets, run_pipeline
from .training.state import TrainerState
from .training.trainer import (
    BatchEpochTrainer,
    SeqEpochTrainer,
    SeqErrorAverageTrainer,
)

__all__ = [
    "BatchEpochTrainer",
    "FeedForwardNetwork",
    "Layer",
    "LogisticNeuralNet",
    "NetworkParameters",
    "Node",
    "SeqEpochTrainer",
    "SeqErrorAverageTrainer",
    "TanhNeuralNet",
    "TrainerParameters",
    "TrainerState",
    "TrainingSetMember",
    "activations",
    "load_preset",
    "parallel",
    "params",
    "presets",
    "run_pipeline",
    "types",
]
