import math
from itertools import chain, repeat

import pytest

from textbook_rsa import keygen
from textbook_rsa.codec import decode_key
from textbook_rsa.errors import InvalidParameterError, KeyGenerationError
from textbook_rsa.keygen import (
    DEFAULT_PUBLIC_EXPONENT,
    RsaPrivateKey,
    RsaPublicKey,
    egcd,
    generate_key,
    inv_mod,
    key_gen,
    split_bit_lengths,
)
from textbook_rsa.primality import is_probably_prime


@pytest.fixture
def recorded_primes(monkeypatch):
    """Record the primes handed to key generation so phi can be checked."""

    found = []
    real_find_prime = keygen.find_prime

    def spy(bits, **kwargs):
        prime = real_find_prime(bits, **kwargs)
        found.append(prime)
        return prime

    monkeypatch.setattr(keygen, "find_prime", spy)
    return found


def _scripted_primes(monkeypatch, values):
    supply = iter(values)
    monkeypatch.setattr(keygen, "find_prime", lambda bits, **kwargs: next(supply))


def test_egcd_returns_bezout_coefficients():
    g, x, y = egcd(240, 46)
    assert g == 2
    assert 240 * x + 46 * y == 2


def test_inv_mod():
    assert inv_mod(17, 3120) == 2753
    assert inv_mod(3, 7) == 5
    with pytest.raises(ValueError):
        inv_mod(6, 9)


@pytest.mark.parametrize("total", [64, 512, 1024, 2048])
def test_split_stays_within_ten_percent_margin(total):
    half = total // 2
    margin = round(half * 0.10)
    for _ in range(200):
        p_bits, q_bits = split_bit_lengths(total)
        assert half - margin <= p_bits <= half + margin
        assert p_bits + q_bits == total


def test_split_covers_both_ends_of_the_margin():
    seen = {split_bit_lengths(64)[0] for _ in range(500)}
    assert seen == set(range(29, 36))


def test_generated_key_satisfies_rsa_identities(recorded_primes):
    pair = generate_key(64, workers=2)
    p, q = recorded_primes[-2:]
    phi = (p - 1) * (q - 1)

    assert p != q
    assert is_probably_prime(p) and is_probably_prime(q)
    assert pair.public.n == pair.private.n == p * q
    assert pair.public.e == DEFAULT_PUBLIC_EXPONENT
    assert 0 <= pair.private.d < phi
    assert (pair.public.e * pair.private.d) % phi == 1
    assert pair.public.n.bit_length() in (63, 64)


def test_key_gen_returns_base64_blobs():
    public_blob, private_blob = key_gen(96, workers=2)
    e, n = decode_key(public_blob)
    d, n2 = decode_key(private_blob)
    assert e == 65537
    assert n == n2
    assert RsaPublicKey.from_blob(public_blob) == RsaPublicKey(n=n, e=e)
    assert RsaPrivateKey.from_blob(private_blob) == RsaPrivateKey(n=n, d=d)


def test_custom_public_exponent():
    pair = generate_key(64, public_exponent=3, max_attempts=60, workers=2)
    assert pair.public.e == 3
    assert pow(pow(42, 3, pair.public.n), pair.private.d, pair.public.n) == 42


def test_non_invertible_exponent_triggers_retry(monkeypatch):
    # e = 3 divides phi for (7, 13) but not for (11, 17).
    _scripted_primes(monkeypatch, [7, 13, 11, 17])
    pair = generate_key(64, public_exponent=3)
    assert pair.public.n == 11 * 17
    assert (3 * pair.private.d) % (10 * 16) == 1


def test_equal_primes_trigger_retry(monkeypatch):
    _scripted_primes(monkeypatch, [101, 101, 101, 103])
    pair = generate_key(64)
    assert pair.public.n == 101 * 103


def test_retry_budget_exhausted_raises(monkeypatch):
    _scripted_primes(monkeypatch, chain.from_iterable(repeat((7, 13))))
    with pytest.raises(KeyGenerationError):
        generate_key(64, public_exponent=3, max_attempts=3)


@pytest.mark.parametrize("bits", [0, 32, 56, 100, -64])
def test_invalid_key_sizes_fail_before_searching(monkeypatch, bits):
    def unexpected(*args, **kwargs):
        raise AssertionError("prime search should not start")

    monkeypatch.setattr(keygen, "find_prime", unexpected)
    with pytest.raises(InvalidParameterError):
        generate_key(bits)


@pytest.mark.parametrize("e", [0, 1, 4, 65536])
def test_invalid_public_exponents(e):
    with pytest.raises(InvalidParameterError):
        generate_key(64, public_exponent=e)


def test_invalid_attempt_budget():
    with pytest.raises(InvalidParameterError):
        generate_key(64, max_attempts=0)


def test_gcd_helper_agrees_with_math_gcd():
    for a, b in [(65537, 3120), (3, 60), (0, 5), (12, 0)]:
        assert egcd(a, b)[0] == math.gcd(a, b)
