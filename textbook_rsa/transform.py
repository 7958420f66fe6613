"""Raw (textbook) RSA encryption and decryption.

No padding is applied: encryption is deterministic and malleable, and the
scheme is open to chosen-ciphertext and other classical attacks.  Messages are
a single block whose integer value must be smaller than the modulus.
"""
from __future__ import annotations

from textbook_rsa.codec import b64decode, b64encode, decode_key, i2osp, os2ip
from textbook_rsa.errors import PlaintextOverflowError


def encrypt_int(m: int, e: int, n: int) -> int:
    if not (0 <= m < n):
        raise PlaintextOverflowError(
            f"Plaintext integer needs {m.bit_length()} bits; the modulus has {n.bit_length()}"
        )
    return pow(m, e, n)


def decrypt_int(c: int, d: int, n: int) -> int:
    return pow(c, d, n)


def encrypt(plaintext: bytes, e: int, n: int) -> int:
    """Encrypt ``plaintext`` as one block: ``os2ip(plaintext) ** e mod n``."""

    return encrypt_int(os2ip(bytes(plaintext)), e, n)


def decrypt(ciphertext: int, d: int, n: int) -> bytes:
    """Decrypt one block and return the minimal byte representation.

    Leading zero bytes of the original plaintext do not survive the round
    trip because they do not change its integer value.
    """

    return i2osp(decrypt_int(ciphertext, d, n))


def encrypt_message(text: str, public_blob: str) -> str:
    """Encrypt UTF-8 ``text`` under a base64 public key blob; return base64 ciphertext."""

    e, n = decode_key(public_blob)
    return b64encode(i2osp(encrypt(text.encode("utf-8"), e, n)))


def decrypt_message(content: str, private_blob: str) -> str:
    """Inverse of :func:`encrypt_message` using a base64 private key blob."""

    d, n = decode_key(private_blob)
    c = os2ip(b64decode(content, field="content"))
    plaintext = decrypt(c, d, n)
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError:
        return plaintext.decode("utf-8", errors="replace")


__all__ = [
    "encrypt",
    "decrypt",
    "encrypt_int",
    "decrypt_int",
    "encrypt_message",
    "decrypt_message",
]
