"""Backpropagation trainers.

Every trainer is an iterator: each ``next()`` runs one epoch and yields its
index (or ``(epoch, average_error)`` for :class:`SeqErrorAverageTrainer`), so
callers can watch convergence step by step. ``train()`` drains the iterator.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence, Union

import numpy as np

from ..core.network import FeedForwardNetwork
from ..core.params import TrainerParameters
from ..core.types import TrainingResult, TrainingSet
from .backprop import update_state, update_weights
from .errors import REGISTRY as ERROR_REGISTRY
from .errors import ErrorFn
from .state import TrainerState

logger = logging.getLogger(__name__)


class NeuralNetTrainer:
    """Base class driving epochs until a stopping condition fires."""

    def __init__(
        self,
        network: FeedForwardNetwork,
        tset: TrainingSet,
        params: Optional[TrainerParameters] = None,
        *,
        max_epochs: Optional[int] = None,
        callbacks: Optional[Sequence[object]] = None,
    ) -> None:
        if max_epochs is not None and max_epochs < 0:
            raise ValueError(f"max_epochs must be >= 0, got {max_epochs}")
        _check_training_set(network, tset)
        self.network = network
        self.tset = tset
        self.params = params or TrainerParameters()
        self.state = TrainerState.for_network(network)
        self.max_epochs = max_epochs
        self.callbacks = list(callbacks or [])
        self.epoch = 0
        self.error: Optional[float] = None
        self._finished = False

    def __iter__(self) -> "NeuralNetTrainer":
        return self

    def __next__(self):
        if self._finished or (self.max_epochs is not None and self.epoch >= self.max_epochs):
            self._finished = True
            raise StopIteration
        epoch = self.epoch
        metrics = self._run_epoch()
        self.epoch += 1
        logger.debug("epoch %d finished %s", epoch, dict(metrics))
        self._emit_epoch(epoch, metrics)
        return self._step(epoch, metrics)

    @property
    def finished(self) -> bool:
        return self._finished

    def train(self) -> TrainingResult:
        """Run until the stopping condition fires."""

        logger.info(
            "%s: training %r on %d examples",
            type(self).__name__,
            self.network,
            len(self.tset),
        )
        for _ in self:
            pass
        logger.info(
            "%s: finished after %d epochs (error=%s)",
            type(self).__name__,
            self.epoch,
            self.error,
        )
        return TrainingResult(epochs=self.epoch, error=self.error)

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_epoch(self) -> Mapping[str, float]:
        raise NotImplementedError

    def _step(self, epoch: int, metrics: Mapping[str, float]):
        return epoch

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


class SeqEpochTrainer(NeuralNetTrainer):
    """Updates weights after every example; stops after ``epochs`` epochs.

    ``epochs=None`` trains without bound.
    """

    def __init__(
        self,
        network: FeedForwardNetwork,
        tset: TrainingSet,
        params: Optional[TrainerParameters] = None,
        epochs: Optional[int] = None,
        *,
        callbacks: Optional[Sequence[object]] = None,
    ) -> None:
        super().__init__(network, tset, params, max_epochs=epochs, callbacks=callbacks)

    def _run_epoch(self) -> Mapping[str, float]:
        for member in self.tset:
            update_state(self.network, member, self.state, self.params)
            update_weights(self.network, self.state)
        return {}


class SeqErrorAverageTrainer(NeuralNetTrainer):
    """Updates weights after every example; stops once the epoch's average
    error drops to ``target_error`` (or after ``max_epochs``).

    The error of an example is measured on the prediction made while training
    on it, with ``params.error_function``.
    """

    def __init__(
        self,
        network: FeedForwardNetwork,
        tset: TrainingSet,
        params: Optional[TrainerParameters] = None,
        target_error: float = 0.01,
        max_epochs: Optional[int] = None,
        *,
        callbacks: Optional[Sequence[object]] = None,
    ) -> None:
        if target_error <= 0:
            raise ValueError(f"target error should be greater than 0, got {target_error}")
        super().__init__(network, tset, params, max_epochs=max_epochs, callbacks=callbacks)
        self.target_error = float(target_error)
        self.error_function = ERROR_REGISTRY.resolve(self.params.error_function)

    def _run_epoch(self) -> Mapping[str, float]:
        total = 0.0
        for member in self.tset:
            update_state(self.network, member, self.state, self.params)
            update_weights(self.network, self.state)
            total += self.error_function(self.network.output, member.expected)
        self.error = total / len(self.tset)
        return {"error": self.error}

    def _step(self, epoch: int, metrics: Mapping[str, float]):
        if self.error is not None and self.error <= self.target_error:
            self._finished = True
        return epoch, metrics["error"]


class BatchEpochTrainer(NeuralNetTrainer):
    """Accumulates deltas over the whole set and updates weights once per epoch."""

    def __init__(
        self,
        network: FeedForwardNetwork,
        tset: TrainingSet,
        params: Optional[TrainerParameters] = None,
        epochs: Optional[int] = None,
        *,
        callbacks: Optional[Sequence[object]] = None,
    ) -> None:
        super().__init__(network, tset, params, max_epochs=epochs, callbacks=callbacks)

    def _run_epoch(self) -> Mapping[str, float]:
        for member in self.tset:
            update_state(self.network, member, self.state, self.params)
        update_weights(self.network, self.state)
        return {}


def evaluate(
    network: FeedForwardNetwork,
    tset: TrainingSet,
    error_function: Union[str, ErrorFn] = "mse",
) -> float:
    """Average error of ``network`` over ``tset`` without touching the weights."""

    fn = ERROR_REGISTRY.resolve(error_function)
    total = 0.0
    for member in tset:
        total += fn(network.predict(member.input), member.expected)
    return total / len(tset)


def _check_training_set(network: FeedForwardNetwork, tset: TrainingSet) -> None:
    if len(tset) == 0:
        raise ValueError("training set must not be empty")
    for idx, member in enumerate(tset):
        n_in = np.shape(member.input)[0]
        n_out = np.shape(member.expected)[0]
        if n_in != network.dim_input or n_out != network.dim_output:
            raise ValueError(
                f"training example {idx} has shape ({n_in} -> {n_out}), "
                f"network expects ({network.dim_input} -> {network.dim_output})"
            )


__all__ = [
    "BatchEpochTrainer",
    "NeuralNetTrainer",
    "SeqEpochTrainer",
    "SeqErrorAverageTrainer",
    "evaluate",
]
