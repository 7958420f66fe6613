"""Measured prime-search cost against the prime number theorem estimate."""
from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from statistics import mean
from typing import List, Optional, Sequence

from textbook_rsa.primality import false_positive_bound
from textbook_rsa.prime_search import PrimeSearch, expected_trials
from utils.plotting import HAS_MPL, nice_axes, save, wide_grid

_TITLE = "Concurrent Prime Search"


@dataclass
class SearchSample:
    bit_length: int
    trials: int
    seconds: float


def collect_samples(
    bit_lengths: Sequence[int] = (32, 64, 128, 256),
    runs: int = 5,
    *,
    workers: Optional[int] = None,
) -> List[SearchSample]:
    """Run ``runs`` single-prime searches per bit length and record their cost."""

    samples: List[SearchSample] = []
    for bits in bit_lengths:
        for _ in range(runs):
            search = PrimeSearch(bits, 1, workers=workers)
            start = time.perf_counter()
            search.run()
            samples.append(SearchSample(bits, search.trials, time.perf_counter() - start))
    return samples


def make_prime_search_dashboard(
    save_path: str | Path,
    *,
    bit_lengths: Sequence[int] = (32, 64, 128, 256),
    runs: int = 5,
    workers: Optional[int] = None,
) -> Path:
    """Render the prime-search dashboard to *save_path* and return the file path."""
    target = Path(save_path)
    if not HAS_MPL:
        target.parent.mkdir(parents=True, exist_ok=True)
        return target

    samples = collect_samples(bit_lengths, runs, workers=workers)
    fig, axes = wide_grid(1, 3)
    fig.suptitle(_TITLE, fontsize=16)

    measured = [mean(s.trials for s in samples if s.bit_length == bits) for bits in bit_lengths]
    estimate = [expected_trials(bits) for bits in bit_lengths]
    ax = nice_axes(axes[0][0], "Candidates per prime", xlabel="Bit length", ylabel="Trials")
    ax.plot(bit_lengths, measured, marker="o", label=f"Measured (mean of {runs})")
    ax.plot(bit_lengths, estimate, linestyle="--", label="PNT estimate (odd candidates)")
    ax.legend()

    ax = nice_axes(axes[0][1], "Search time", xlabel="Bit length", ylabel="Seconds")
    ax.scatter([s.bit_length for s in samples], [s.seconds for s in samples], alpha=0.6)
    ax.set_yscale("log")

    witness_counts = list(range(1, 21))
    ax = nice_axes(
        axes[0][2],
        "Miller–Rabin error bound",
        xlabel="Witnesses",
        ylabel="P(composite accepted)",
    )
    ax.semilogy(witness_counts, [false_positive_bound(k) for k in witness_counts], marker=".")

    fig.tight_layout(rect=(0, 0, 1, 0.94))
    return save(fig, target)


__all__ = ["SearchSample", "collect_samples", "make_prime_search_dashboard"]
