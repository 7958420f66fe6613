import threading

import pytest

from textbook_rsa.errors import InvalidParameterError
from textbook_rsa.primality import is_probably_prime
from textbook_rsa.prime_search import (
    PrimeSearch,
    expected_trials,
    find_prime,
    search_primes,
    validate_bit_length,
)


def test_search_32_bit_prime():
    search = PrimeSearch(32, 1, workers=4)
    (prime,) = search.run()

    assert 31 <= prime.bit_length() <= 32
    assert is_probably_prime(prime, witnesses=40)
    # ~11 odd candidates expected; a generous ceiling keeps the test stable.
    assert search.trials < 2000
    assert search.cancelled


def test_search_three_primes_with_eight_workers_joins_every_worker():
    search = PrimeSearch(64, 3, workers=8)
    primes = search.run()

    assert len(primes) == 3
    assert len(set(primes)) == 3
    assert all(p.bit_length() == 64 for p in primes)
    assert len(search.threads) == 8
    assert not any(thread.is_alive() for thread in search.threads)
    assert not any(
        thread.name.startswith("prime-search-64-") for thread in threading.enumerate()
    )


def test_search_primes_public_entry():
    primes = search_primes(48, 2, workers=2)
    assert len(primes) == 2
    assert all(is_probably_prime(p) for p in primes)


@pytest.mark.parametrize("bits", [0, -8, 12, 24, 33, 31])
def test_search_primes_rejects_bad_bit_lengths(bits):
    with pytest.raises(InvalidParameterError):
        search_primes(bits)


@pytest.mark.parametrize("count", [0, -1])
def test_search_primes_rejects_bad_count(count):
    with pytest.raises(InvalidParameterError):
        search_primes(32, count)


def test_validate_bit_length_minimum_is_configurable():
    validate_bit_length(64, minimum=64)
    with pytest.raises(InvalidParameterError):
        validate_bit_length(56, minimum=64, field="key size")


def test_find_prime_accepts_lengths_that_are_not_byte_multiples():
    for bits in (29, 35):
        assert find_prime(bits, workers=2).bit_length() == bits


def test_search_is_single_use():
    search = PrimeSearch(32, workers=1)
    search.run()
    with pytest.raises(RuntimeError):
        search.run()


def test_worker_failure_is_raised_after_join(monkeypatch):
    def broken(value, witnesses=10):
        raise ArithmeticError("boom")

    monkeypatch.setattr("textbook_rsa.prime_search.is_probably_prime", broken)
    search = PrimeSearch(32, workers=3)
    with pytest.raises(ArithmeticError, match="boom"):
        search.run()
    assert not any(thread.is_alive() for thread in search.threads)


def test_expected_trials_follows_prime_number_theorem():
    assert expected_trials(32) == pytest.approx(11.09, abs=0.01)
    assert expected_trials(64) == pytest.approx(2 * expected_trials(32))
