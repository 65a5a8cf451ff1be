"""Headless stand-in for the color table of the browser demo.

Each row carries an original color given as a literal ``"r,g,b"`` string.
The table shows the original, its analytic complement and the model's
predicted complement, the last refreshed on every reporting step.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from ..core.color import complement, format_color, parse_color
from ..core.types import RGB, Predictor

DEFAULT_COLORS = (
    "255,0,0",
    "0,255,0",
    "0,0,255",
    "255,255,0",
    "10,200,30",
    "128,64,200",
    "40,40,40",
    "255,255,255",
)


@dataclass
class SwatchRow:
    original: RGB
    complement: RGB
    predicted: RGB | None = None

    def as_dict(self) -> dict:
        return {
            "original": format_color(self.original),
            "complement": format_color(self.complement),
            "predicted": format_color(self.predicted) if self.predicted else None,
        }


class SwatchTable:
    """Rows of original / analytic / predicted swatches."""

    def __init__(
        self,
        colors: Iterable[str] = DEFAULT_COLORS,
        *,
        run_dir: str | Path | None = None,
        enable_plots: bool = False,
    ) -> None:
        self.rows: List[SwatchRow] = []
        for text in colors:
            original = parse_color(text)
            self.rows.append(SwatchRow(original=original, complement=complement(original)))
        self.run_dir = Path(run_dir) if run_dir is not None else None
        self.enable_plots = enable_plots
        self.last_step: int | None = None

    def on_report(self, step: int, predict: Predictor) -> None:
        for row in self.rows:
            row.predicted = predict(row.original)
        self.last_step = int(step)

    def on_train_end(self, result=None) -> None:
        if self.run_dir is None:
            return
        self.write_json(self.run_dir / "swatches.json")
        if self.enable_plots:
            self.render(self.run_dir / "swatches.png")

    def as_records(self) -> list[dict]:
        return [row.as_dict() for row in self.rows]

    def write_json(self, path: str | Path) -> str:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"step": self.last_step, "rows": self.as_records()}
        path.write_text(json.dumps(payload, indent=2))
        return str(path)

    def render(self, path: str | Path) -> Path:
        """Draw one row per color with three swatch columns."""

        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt
        from matplotlib.patches import Rectangle

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        n_rows = max(1, len(self.rows))
        fig, ax = plt.subplots(figsize=(6, 0.6 * n_rows + 0.6))
        headers = ("original", "complement", "predicted")
        for col, header in enumerate(headers):
            ax.text(col + 0.5, n_rows + 0.2, header, ha="center", va="bottom")
        for idx, row in enumerate(self.rows):
            y = n_rows - idx - 1
            for col, rgb in enumerate((row.original, row.complement, row.predicted)):
                if rgb is None:
                    continue
                face = tuple(c / 255 for c in rgb)
                ax.add_patch(Rectangle((col + 0.05, y + 0.05), 0.9, 0.9, facecolor=face))
                ax.text(col + 0.5, y + 0.5, format_color(rgb), ha="center", va="center",
                        fontsize=7, color="white" if sum(rgb) < 384 else "black")
        ax.set_xlim(0, 3)
        ax.set_ylim(0, n_rows + 0.6)
        ax.axis("off")
        title = "untrained" if not self.last_step else f"step {self.last_step}"
        ax.set_title(title)
        fig.savefig(path)
        plt.close(fig)
        return path


__all__ = ["DEFAULT_COLORS", "SwatchRow", "SwatchTable"]
