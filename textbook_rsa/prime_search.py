"""Concurrent search for random probable primes of a given bit length.

A pool of worker threads draws random candidates and tests them with
Miller–Rabin.  The first ``count`` accepted values win; once the target is
reached the search is cancelled cooperatively and every worker is joined
before :meth:`PrimeSearch.run` returns.

When several workers accept a candidate at nearly the same moment, which one
is recorded depends on thread scheduling.  There is no tie-break.
"""
from __future__ import annotations

import logging
import math
import os
import threading
from typing import List, Optional

from Crypto import Random

from textbook_rsa.errors import InvalidParameterError
from textbook_rsa.primality import DEFAULT_WITNESSES, is_probably_prime

logger = logging.getLogger(__name__)

MIN_SEARCH_BITS = 32


def default_worker_count() -> int:
    return os.cpu_count() or 1


def expected_trials(bit_length: int) -> float:
    """Prime-number-theorem estimate of odd candidates drawn per prime found."""

    return bit_length * math.log(2) / 2


def validate_bit_length(bit_length: int, *, minimum: int = MIN_SEARCH_BITS, field: str = "bit length") -> None:
    """Reject bit lengths that are not a positive multiple of 8 or below ``minimum``."""

    if not isinstance(bit_length, int) or isinstance(bit_length, bool):
        raise InvalidParameterError(f"{field} must be an integer")
    if bit_length <= 0 or bit_length % 8 != 0:
        raise InvalidParameterError(f"{field} must be a positive multiple of 8 (got {bit_length})")
    if bit_length < minimum:
        raise InvalidParameterError(f"{field} must be at least {minimum} bits (got {bit_length})")


class PrimeSearch:
    """Race a pool of workers to the first ``count`` probable primes.

    The only state shared between workers is the list of accepted primes and
    the cancellation event.  Each worker owns its random source.
    """

    def __init__(
        self,
        bit_length: int,
        count: int = 1,
        *,
        workers: Optional[int] = None,
        witnesses: int = DEFAULT_WITNESSES,
    ) -> None:
        if bit_length < 2:
            raise InvalidParameterError("Prime size must be at least 2 bits")
        if count < 1:
            raise InvalidParameterError("count must be at least 1")
        if workers is not None and workers < 1:
            raise InvalidParameterError("workers must be at least 1")

        self.bit_length = bit_length
        self.count = count
        self.workers = workers if workers is not None else default_worker_count()
        self.witnesses = witnesses
        self.threads: List[threading.Thread] = []

        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._found: List[int] = []
        self._trials = [0] * self.workers
        self._failure: Optional[BaseException] = None

    @property
    def trials(self) -> int:
        """Number of candidates evaluated so far across all workers."""
        return sum(self._trials)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run(self) -> List[int]:
        """Start the workers, wait for all of them, and return the accepted primes."""

        if self.threads:
            raise RuntimeError("PrimeSearch instances are single-use")

        self.threads = [
            threading.Thread(
                target=self._worker,
                args=(index,),
                name=f"prime-search-{self.bit_length}-{index}",
                daemon=True,
            )
            for index in range(self.workers)
        ]
        logger.debug(
            "Searching for %d prime(s) of %d bits with %d worker(s)",
            self.count,
            self.bit_length,
            self.workers,
        )
        for thread in self.threads:
            thread.start()
        for thread in self.threads:
            thread.join()

        if self._failure is not None:
            raise self._failure

        logger.info(
            "Found %d prime(s) of %d bits after %d trial(s)",
            len(self._found),
            self.bit_length,
            self.trials,
        )
        return list(self._found)

    def _candidate(self, rng, num_bytes: int, excess: int) -> int:
        buffer = rng.read(num_bytes)
        candidate = int.from_bytes(buffer, "big") >> excess
        # Pin the top bit for an exact bit length and the low bit for oddness.
        return candidate | (1 << (self.bit_length - 1)) | 1

    def _worker(self, index: int) -> None:
        rng = Random.new()
        num_bytes = (self.bit_length + 7) // 8
        excess = num_bytes * 8 - self.bit_length
        try:
            while not self._cancelled.is_set():
                candidate = self._candidate(rng, num_bytes, excess)
                self._trials[index] += 1
                if is_probably_prime(candidate, self.witnesses):
                    self._accept(candidate)
        except BaseException as exc:
            with self._lock:
                if self._failure is None:
                    self._failure = exc
            self._cancelled.set()
        finally:
            rng.close()
            logger.debug("Worker %d stopped after %d trial(s)", index, self._trials[index])

    def _accept(self, candidate: int) -> None:
        with self._lock:
            if len(self._found) >= self.count or candidate in self._found:
                return
            self._found.append(candidate)
            if len(self._found) == self.count:
                self._cancelled.set()


def search_primes(
    bit_length: int,
    count: int = 1,
    *,
    workers: Optional[int] = None,
    witnesses: int = DEFAULT_WITNESSES,
) -> List[int]:
    """Return ``count`` distinct probable primes of exactly ``bit_length`` bits.

    ``bit_length`` must be a positive multiple of 8 and at least 32.
    """

    validate_bit_length(bit_length)
    if not isinstance(count, int) or count < 1:
        raise InvalidParameterError(f"count must be a positive integer (got {count!r})")
    return PrimeSearch(bit_length, count, workers=workers, witnesses=witnesses).run()


def find_prime(
    bit_length: int,
    *,
    workers: Optional[int] = None,
    witnesses: int = DEFAULT_WITNESSES,
) -> int:
    """Return one probable prime of ``bit_length`` bits (any length >= 2)."""

    return PrimeSearch(bit_length, 1, workers=workers, witnesses=witnesses).run()[0]


__all__ = [
    "MIN_SEARCH_BITS",
    "PrimeSearch",
    "default_worker_count",
    "expected_trials",
    "find_prime",
    "search_primes",
    "validate_bit_length",
]
