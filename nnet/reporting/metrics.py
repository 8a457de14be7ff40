"""Epoch metric sinks usable as trainer callbacks."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping, Optional


class JsonlSink:
    """Append-only JSONL writer for per-epoch metrics."""

    def __init__(
        self,
        path: str | Path,
        *,
        trainer: str = "",
        seed: Optional[int] = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.trainer = trainer
        self.seed = seed

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = {"epoch": int(epoch), "trainer": self.trainer, "seed": self.seed}
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write per-epoch metrics to CSV with a stable schema."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row = {"epoch": int(epoch)}
        row.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    __call__ = on_epoch


__all__ = ["CsvSink", "JsonlSink"]
