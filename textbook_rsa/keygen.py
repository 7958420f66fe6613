"""RSA key-pair generation from freshly searched primes."""
from __future__ import annotations

import logging
import secrets
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

from textbook_rsa.codec import decode_key, encode_key
from textbook_rsa.errors import InvalidParameterError, KeyGenerationError
from textbook_rsa.primality import DEFAULT_WITNESSES
from textbook_rsa.prime_search import find_prime, validate_bit_length

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_EXPONENT = 65537
DEFAULT_MAX_ATTEMPTS = 8
MIN_KEY_BITS = 64
SPLIT_MARGIN = 0.10


@dataclass(frozen=True)
class RsaPublicKey:
    n: int
    e: int

    def to_blob(self) -> str:
        return encode_key(self.e, self.n)

    @classmethod
    def from_blob(cls, blob: str) -> "RsaPublicKey":
        e, n = decode_key(blob)
        return cls(n=n, e=e)


@dataclass(frozen=True)
class RsaPrivateKey:
    n: int
    d: int

    def to_blob(self) -> str:
        return encode_key(self.d, self.n)

    @classmethod
    def from_blob(cls, blob: str) -> "RsaPrivateKey":
        d, n = decode_key(blob)
        return cls(n=n, d=d)


@dataclass(frozen=True)
class RsaKeyPair:
    public: RsaPublicKey
    private: RsaPrivateKey

    def to_blobs(self) -> Tuple[str, str]:
        return self.public.to_blob(), self.private.to_blob()


def egcd(a: int, b: int):
    """Extended Euclidean algorithm without recursion.

    Returns ``(g, x, y)`` with ``a*x + b*y == g == gcd(a, b)``.
    """

    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1

    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t

    return old_r, old_s, old_t


def inv_mod(a: int, m: int) -> int:
    g, x, _ = egcd(a, m)
    if g != 1:
        raise ValueError("No modular inverse")
    return x % m


def split_bit_lengths(total_bits: int) -> Tuple[int, int]:
    """Pick slightly unequal bit lengths for p and q that add up to ``total_bits``.

    p gets a length drawn uniformly from ``half ± round(half * 0.10)``.
    """

    half = total_bits // 2
    margin = round(half * SPLIT_MARGIN)
    p_bits = half - margin + secrets.randbelow(2 * margin + 1)
    return p_bits, total_bits - p_bits


def _validate_exponent(e: int) -> None:
    if not isinstance(e, int) or e <= 1:
        raise InvalidParameterError("Public exponent must be an integer greater than 1")
    if e % 2 == 0:
        raise InvalidParameterError("Public exponent must be odd")


def generate_key(
    total_bits: int,
    *,
    public_exponent: int = DEFAULT_PUBLIC_EXPONENT,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    workers: Optional[int] = None,
    witnesses: int = DEFAULT_WITNESSES,
) -> RsaKeyPair:
    """Generate a key pair whose modulus is close to ``total_bits`` bits.

    p and q are searched concurrently.  A draw is discarded and the whole
    generation repeated when p == q or when ``public_exponent`` is not
    invertible modulo phi(n).  After ``max_attempts`` discarded draws a
    :class:`KeyGenerationError` is raised instead of emitting an unusable key.
    """

    validate_bit_length(total_bits, minimum=MIN_KEY_BITS, field="key size")
    _validate_exponent(public_exponent)
    if max_attempts < 1:
        raise InvalidParameterError("max_attempts must be at least 1")

    e = public_exponent
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="keygen") as executor:
        for attempt in range(1, max_attempts + 1):
            p_bits, q_bits = split_bit_lengths(total_bits)
            logger.info("Attempt %d: searching p (%d bits) and q (%d bits)", attempt, p_bits, q_bits)
            p_future = executor.submit(find_prime, p_bits, workers=workers, witnesses=witnesses)
            q_future = executor.submit(find_prime, q_bits, workers=workers, witnesses=witnesses)
            p = p_future.result()
            q = q_future.result()

            if p == q:
                logger.info("Attempt %d: p == q, retrying", attempt)
                continue

            phi = (p - 1) * (q - 1)
            g, x, _ = egcd(e, phi)
            if g != 1:
                logger.info("Attempt %d: gcd(e, phi) = %d, retrying", attempt, g)
                continue

            n = p * q
            d = x % phi
            logger.info("Generated %d-bit modulus on attempt %d", n.bit_length(), attempt)
            return RsaKeyPair(
                public=RsaPublicKey(n=n, e=e),
                private=RsaPrivateKey(n=n, d=d),
            )

    raise KeyGenerationError(
        f"Could not find primes with gcd(e, phi) = 1 after {max_attempts} attempt(s)"
    )


def key_gen(total_bits: int, **options) -> Tuple[str, str]:
    """Generate a key pair and return ``(public_blob, private_blob)`` in base64."""

    return generate_key(total_bits, **options).to_blobs()


__all__ = [
    "DEFAULT_PUBLIC_EXPONENT",
    "DEFAULT_MAX_ATTEMPTS",
    "MIN_KEY_BITS",
    "RsaPublicKey",
    "RsaPrivateKey",
    "RsaKeyPair",
    "egcd",
    "inv_mod",
    "split_bit_lengths",
    "generate_key",
    "key_gen",
]
