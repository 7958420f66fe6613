import secrets

import pytest

from textbook_rsa.codec import b64decode, encode_key, os2ip
from textbook_rsa.errors import PlaintextOverflowError
from textbook_rsa.keygen import generate_key
from textbook_rsa.transform import (
    decrypt,
    decrypt_int,
    decrypt_message,
    encrypt,
    encrypt_int,
    encrypt_message,
)

# p = 61, q = 53
N, E, D = 3233, 17, 2753


def test_textbook_example():
    assert encrypt_int(65, E, N) == 2790
    assert decrypt_int(2790, D, N) == 65


def test_every_message_of_a_small_key_round_trips():
    assert all(decrypt_int(encrypt_int(m, E, N), D, N) == m for m in range(N))


def test_plaintext_not_below_modulus_is_rejected():
    with pytest.raises(PlaintextOverflowError):
        encrypt_int(N, E, N)
    with pytest.raises(PlaintextOverflowError):
        encrypt(b"\xff\xff", E, N)


def test_encryption_is_deterministic():
    assert encrypt(b"\x01\x02", E, N) == encrypt(b"\x01\x02", E, N)


def test_hi_round_trip_with_64_bit_key():
    pair = generate_key(64, workers=2)
    n, e, d = pair.public.n, pair.public.e, pair.private.d

    c = encrypt(b"hi", e, n)
    assert 0 <= c < n
    assert decrypt(c, d, n) == b"hi"


def test_random_messages_round_trip_with_generated_key():
    pair = generate_key(128, workers=2)
    n, e, d = pair.public.n, pair.public.e, pair.private.d
    samples = [0, 1, n - 1] + [secrets.randbelow(n) for _ in range(50)]
    for m in samples:
        assert decrypt_int(encrypt_int(m, e, n), d, n) == m


def test_leading_zero_bytes_are_not_preserved():
    assert decrypt(encrypt(b"\x00A", E, N), D, N) == b"A"
    assert decrypt(encrypt(b"", E, N), D, N) == b""


def test_message_strings_use_base64_ciphertext():
    pair = generate_key(128, workers=2)
    public_blob, private_blob = pair.to_blobs()

    content = encrypt_message("hi there", public_blob)
    c = os2ip(b64decode(content))
    assert c == encrypt(b"hi there", pair.public.e, pair.public.n)
    assert decrypt_message(content, private_blob) == "hi there"


def test_decrypt_message_with_wrong_key_does_not_raise():
    content = encrypt_message("A", encode_key(E, N))
    assert isinstance(decrypt_message(content, encode_key(3, N)), str)
