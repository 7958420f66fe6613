from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Dict, Sequence

from textbook_rsa.keygen import split_bit_lengths
from utils.plotting import HAS_MPL, nice_axes, save, wide_grid


def split_histogram(total_bits: int, draws: int = 2000) -> Dict[int, int]:
    """Count how often each p bit length is drawn for a ``total_bits`` key."""
    return dict(Counter(split_bit_lengths(total_bits)[0] for _ in range(draws)))


def make_key_split_dashboard(
    save_path: str | Path,
    *,
    key_sizes: Sequence[int] = (512, 1024, 2048, 4096),
    draws: int = 2000,
) -> Path:
    """Plot the distribution of p's bit length relative to half the key size."""
    target = Path(save_path)
    if not HAS_MPL:
        target.parent.mkdir(parents=True, exist_ok=True)
        return target

    fig, axes = wide_grid(1, len(key_sizes))
    fig.suptitle("p / q bit-length split (±10% around half)", fontsize=16)
    for ax, total in zip(axes[0], key_sizes):
        counts = split_histogram(total, draws)
        half = total // 2
        offsets = sorted(counts)
        nice_axes(ax, f"{total}-bit key", xlabel="p bits - n/2", ylabel="Draws")
        ax.bar([bits - half for bits in offsets], [counts[bits] for bits in offsets], color="#4c72b0")
        ax.axvline(0, color="black", linestyle="--", linewidth=1)

    fig.tight_layout(rect=(0, 0, 1, 0.9))
    return save(fig, target)


__all__ = ["split_histogram", "make_key_split_dashboard"]
