"""Thread-parallel batch trainer.

Each epoch the training set is split into contiguous shards, one per worker.
Workers start from a private copy of the shared :class:`TrainerState`, run the
backward pass over their shard against a canonical copy of the network (held
under a lock for one example at a time, since ``predict`` writes activations)
and report the resulting state on a bounded queue. The coordinator waits for
every report, averages them in shard order and applies a single weight update
to the canonical network and to the caller's network.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Mapping, Optional, Sequence, Tuple

from ..core.network import FeedForwardNetwork
from ..core.params import TrainerParameters
from ..core.types import TrainingResult, TrainingSet
from .backprop import update_state, update_weights
from .state import TrainerState
from .trainer import NeuralNetTrainer

logger = logging.getLogger(__name__)

Shard = Tuple[int, int]


def partition(n: int, parts: int, *, drop_remainder: bool = False) -> List[Shard]:
    """Split ``range(n)`` into ``parts`` contiguous ``(start, stop)`` shards.

    The ``n % parts`` leftover examples go one each to the leading shards, or
    are left out entirely with ``drop_remainder``.
    """

    if parts < 1:
        raise ValueError(f"parts must be >= 1, got {parts}")
    base, extra = divmod(n, parts)
    if drop_remainder:
        extra = 0
    if base == 0:
        raise ValueError(f"cannot split {n} examples into {parts} non-empty shards")
    shards: List[Shard] = []
    start = 0
    for idx in range(parts):
        stop = start + base + (1 if idx < extra else 0)
        shards.append((start, stop))
        start = stop
    return shards


class ParallelBatchEpochTrainer(NeuralNetTrainer):
    """Batch trainer whose backward passes run on a thread pool.

    ``threads`` defaults to ``os.cpu_count()`` and is capped at the size of the
    training set. With ``lock_timeout`` set, a worker that cannot lock the
    network in time logs a warning and skips the example; ``skipped`` counts
    those examples over the trainer's lifetime.
    """

    def __init__(
        self,
        network: FeedForwardNetwork,
        tset: TrainingSet,
        params: Optional[TrainerParameters] = None,
        epochs: Optional[int] = None,
        *,
        threads: Optional[int] = None,
        lock_timeout: Optional[float] = None,
        drop_remainder: bool = False,
        callbacks: Optional[Sequence[object]] = None,
    ) -> None:
        super().__init__(network, tset, params, max_epochs=epochs, callbacks=callbacks)
        if threads is None:
            threads = os.cpu_count() or 1
        if threads < 1:
            raise ValueError(f"threads must be >= 1, got {threads}")
        self.threads = min(threads, len(tset))
        self.shards = partition(len(tset), self.threads, drop_remainder=drop_remainder)
        self.lock_timeout = lock_timeout
        self.lock = threading.Lock()
        self.canonical = network.copy()
        self.skipped = 0
        self._pool = ThreadPoolExecutor(
            max_workers=self.threads, thread_name_prefix="nnet-worker"
        )

    def __enter__(self) -> "ParallelBatchEpochTrainer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the worker pool."""

        self._pool.shutdown(wait=True)

    def train(self) -> TrainingResult:
        try:
            return super().train()
        finally:
            self.close()

    # ------------------------------------------------------------------
    # Internal helpers

    def _acquire(self) -> bool:
        if self.lock_timeout is None:
            return self.lock.acquire()
        return self.lock.acquire(timeout=self.lock_timeout)

    def _work(
        self,
        index: int,
        shard: Shard,
        state: TrainerState,
        channel: "queue.Queue[Tuple[int, TrainerState, int]]",
    ) -> None:
        skipped = 0
        start, stop = shard
        for position in range(start, stop):
            if not self._acquire():
                logger.warning(
                    "worker %d: could not lock network, skipping example %d", index, position
                )
                skipped += 1
                continue
            try:
                update_state(self.canonical, self.tset[position], state, self.params)
            finally:
                self.lock.release()
        channel.put((index, state, skipped))

    def _run_epoch(self) -> Mapping[str, float]:
        channel: "queue.Queue[Tuple[int, TrainerState, int]]" = queue.Queue(
            maxsize=len(self.shards)
        )
        futures = [
            self._pool.submit(self._work, index, shard, self.state.copy(), channel)
            for index, shard in enumerate(self.shards)
        ]
        wait(futures)
        for future in futures:
            future.result()

        reports = sorted(
            (channel.get_nowait() for _ in futures), key=lambda report: report[0]
        )
        first, *rest = [state for _, state, _ in reports]
        self.state = first.combine(rest)
        self.skipped += sum(skipped for _, _, skipped in reports)

        if not self._acquire():
            logger.warning(
                "could not lock network, skipping weight update for epoch %d", self.epoch
            )
            return {}
        try:
            update_weights(self.canonical, self.state)
            update_weights(self.network, self.state)
        finally:
            self.lock.release()
        return {}


# Alias mirroring the sequential ``BatchEpochTrainer``.
BatchEpochTrainer = ParallelBatchEpochTrainer

__all__ = ["BatchEpochTrainer", "ParallelBatchEpochTrainer", "partition"]
