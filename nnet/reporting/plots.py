"""Error-curve plotting for training runs (headless)."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional, Tuple


class PlotAdapter:
    """Epoch callback that records the average error and draws it on ``close()``.

    Epochs whose metrics carry no ``"error"`` are ignored. When every recorded
    error is positive the curve is drawn on a log scale; ``target_error`` adds
    the stopping threshold as a dashed line.
    """

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        *,
        target_error: Optional[float] = None,
        filename: str = "error.png",
    ) -> None:
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.target_error = target_error
        self.filename = filename
        self._history: List[Tuple[int, float]] = []

    @property
    def history(self) -> List[Tuple[int, float]]:
        return list(self._history)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots or "error" not in metrics:
            return
        self._history.append((int(epoch), float(metrics["error"])))

    __call__ = on_epoch

    def close(self) -> Optional[Path]:
        """Write the figure and return its path, or ``None`` if nothing was drawn."""

        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        epochs, errors = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(epochs, errors, label="average error")
        if self.target_error is not None:
            ax.axhline(self.target_error, linestyle="--", color="grey", label="target")
            ax.legend()
        if min(errors) > 0:
            ax.set_yscale("log")
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Average error")
        ax.set_title(f"{len(epochs)} epochs, final error {errors[-1]:.4g}")

        self.run_dir.mkdir(parents=True, exist_ok=True)
        plot_path = self.run_dir / self.filename
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


__all__ = ["PlotAdapter"]
