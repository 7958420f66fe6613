from __future__ import annotations

from pathlib import Path
from typing import Optional

HAS_MPL = False
plt = None  # type: ignore[assignment]

try:  # pragma: no cover - optional dependency
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    HAS_MPL = True
except ImportError:  # pragma: no cover - optional dependency missing
    plt = None  # type: ignore[assignment]


def ensure_out_dir(pathlike) -> Path:
    """Ensure the given directory exists and return it as a Path."""
    path = Path(pathlike)
    path.mkdir(parents=True, exist_ok=True)
    return path


def save(fig, path) -> Path:
    """Save *fig* to *path* and close it; without matplotlib only the directory is created."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    if HAS_MPL and fig is not None:
        fig.savefig(str(target), bbox_inches="tight")
        plt.close(fig)
    return target


def wide_grid(rows: int, cols: int):
    """Grid of subplots for dashboard layouts, or ``(None, None)`` without matplotlib."""
    if not HAS_MPL:
        return None, None
    fig, axes = plt.subplots(rows, cols, figsize=(cols * 5.5, rows * 3.5), squeeze=False)
    return fig, axes


def nice_axes(ax, title: str, xlabel: Optional[str] = None, ylabel: Optional[str] = None):
    """Apply the shared title, labels and light grid to an Axes."""
    if ax is None:
        return ax
    ax.set_title(title)
    if xlabel:
        ax.set_xlabel(xlabel)
    if ylabel:
        ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)
    return ax


__all__ = [
    "HAS_MPL",
    "ensure_out_dir",
    "save",
    "wide_grid",
    "nice_axes",
]
