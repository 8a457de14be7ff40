"""Backpropagation engine and trainers."""

from . import backprop, errors, parallel, state, trainer
from .backprop import update_state, update_weights
from .parallel import ParallelBatchEpochTrainer
from .state import TrainerState
from .trainer import (
    BatchEpochTrainer,
    NeuralNetTrainer,
    SeqEpochTrainer,
    SeqErrorAverageTrainer,
    evaluate,
)

__all__ = [
    "BatchEpochTrainer",
    "NeuralNetTrainer",
    "ParallelBatchEpochTrainer",
    "SeqEpochTrainer",
    "SeqErrorAverageTrainer",
    "TrainerState",
    "backprop",
    "errors",
    "evaluate",
    "parallel",
    "state",
    "trainer",
    "update_state",
    "update_weights",
]
