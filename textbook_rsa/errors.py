"""Exception types raised by the textbook RSA toolkit."""
from __future__ import annotations


class RsaToolkitError(Exception):
    """Base class for every error raised by this package."""


class InvalidParameterError(RsaToolkitError, ValueError):
    """Raised when a bit length, count or exponent is rejected before any work starts."""


class KeyGenerationError(RsaToolkitError, RuntimeError):
    """Raised when no usable key could be built within the retry budget."""


class EncodingError(RsaToolkitError, ValueError):
    """Raised when a key blob, envelope or key file cannot be encoded or decoded."""


class PlaintextOverflowError(RsaToolkitError, ValueError):
    """Raised when a plaintext integer is not smaller than the modulus."""


__all__ = [
    "RsaToolkitError",
    "InvalidParameterError",
    "KeyGenerationError",
    "EncodingError",
    "PlaintextOverflowError",
]
