"""Cost-curve figure written at the end of a training session."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional


class PlotAdapter:
    """Record reported cost and learning rate; draw ``loss.png`` on train end.

    Cost is drawn on a log axis since SGD on this task falls by orders of
    magnitude. The learning rate shares the x axis as a step line, which makes
    each decay boundary visible against the cost.
    """

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.steps: List[int] = []
        self.costs: List[float] = []
        self.rates: List[Optional[float]] = []
        self.outcome = "running"
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_step(self, step: int, metrics):
        if not self.enable_plots:
            return
        self.steps.append(int(step))
        self.costs.append(float(metrics["loss"]))
        rate = metrics.get("lr")
        self.rates.append(float(rate) if rate is not None else None)

    def on_train_end(self, result=None) -> None:
        if result is not None:
            if result.failed:
                self.outcome = "failed"
            elif result.cancelled:
                self.outcome = "cancelled"
            else:
                self.outcome = "done"
        self.close()

    def close(self) -> Path | None:
        if not self.enable_plots or not self.steps:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots(figsize=(7, 4))
        ax.plot(self.steps, self.costs, marker="o", markersize=2, color="tab:blue")
        # Non-positive costs cannot be drawn on a log axis.
        if min(self.costs) > 0:
            ax.set_yscale("log")
        ax.set_xlabel("step")
        ax.set_ylabel("mean batch cost", color="tab:blue")

        if all(rate is not None for rate in self.rates):
            lr_ax = ax.twinx()
            lr_ax.step(self.steps, self.rates, where="post", color="tab:orange", alpha=0.6)
            lr_ax.set_ylabel("learning rate", color="tab:orange")

        ax.set_title(f"{self.outcome} at step {self.steps[-1]}: cost {self.costs[-1]:.5f}")
        fig.tight_layout()
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


__all__ = ["PlotAdapter"]
