#!/usr/bin/env python3
"""
Textbook RSA messenger – key generation, key exchange files and raw RSA messages.

Usage:
  python messenger_cli.py keygen 1024
  python messenger_cli.py register alice@example.com
  python messenger_cli.py add-key bob@example.com.key
  python messenger_cli.py encrypt bob@example.com "hello bob" -o to_bob.json
  python messenger_cli.py decrypt from_bob.json
  python messenger_cli.py primes 256 3
  python messenger_cli.py demo --bits 512
  python messenger_cli.py dashboards

Messages are encrypted with unpadded RSA: deterministic, malleable and only
suitable for study.  A message must encode to an integer smaller than n.
"""

from __future__ import annotations

import argparse
import logging
import os
import pathlib
import sys
import textwrap
import time
from typing import Callable, Dict, List, Optional

from textbook_rsa.codec import i2osp, os2ip
from textbook_rsa.errors import RsaToolkitError
from textbook_rsa.key_file_io import Keyring, Message, PublicKeyRecord
from textbook_rsa.keygen import generate_key
from textbook_rsa.prime_search import expected_trials, search_primes
from textbook_rsa.transform import decrypt, encrypt
from utils import console_ui

logger = logging.getLogger("messenger_cli")

KEYRING_ENV = "RSA_KEYRING"

_TEXTBOOK_NOTE = "Textbook RSA: no padding, deterministic and malleable. Do not use for real secrets."


def _preview(value: int) -> str:
    text = hex(value)[2:66]
    return f"0x{text}" + ("…" if value.bit_length() > 256 else "")


def cmd_keygen(args: argparse.Namespace, keyring: Keyring) -> int:
    console_ui.info(f"Searching for two primes totalling {args.bits} bits...")
    start = time.perf_counter()
    pair = generate_key(args.bits, workers=args.workers)
    keyring.save_generated(pair)
    console_ui.kv("Modulus n size", f"{pair.public.n.bit_length()} bits")
    console_ui.kv("Public exponent e", str(pair.public.e))
    console_ui.kv("Public key", str(keyring.public_path))
    console_ui.kv("Private key", str(keyring.private_path))
    console_ui.elapsed("Generated in", time.perf_counter() - start)
    console_ui.success("Successfully created public & private key")
    return 0


def cmd_register(args: argparse.Namespace, keyring: Keyring) -> int:
    record = keyring.register_email(args.email)
    console_ui.success(f"Public key assigned to {record.email}")
    console_ui.bullet(f"Share {keyring.public_path} so others can encrypt to {record.email}")
    return 0


def cmd_add_key(args: argparse.Namespace, keyring: Keyring) -> int:
    path = pathlib.Path(args.file)
    try:
        text = path.read_text()
    except FileNotFoundError:
        console_ui.error(f"File not found: {path}")
        return 1
    record = PublicKeyRecord.from_json(text)
    stored = keyring.store_peer_key(record)
    console_ui.success(f"Stored key for {record.email} at {stored}")
    return 0


def cmd_encrypt(args: argparse.Namespace, keyring: Keyring) -> int:
    message = keyring.encrypt_for(args.email, args.message)
    payload = message.to_json()
    if args.output:
        out = pathlib.Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload + "\n")
        console_ui.success(f"Message for {message.email} written to {out}")
    else:
        print(payload)
    return 0


def cmd_decrypt(args: argparse.Namespace, keyring: Keyring) -> int:
    path = pathlib.Path(args.file)
    try:
        text = path.read_text()
    except FileNotFoundError:
        console_ui.error(f"File not found: {path}")
        return 1
    print(keyring.decrypt(Message.from_json(text)))
    return 0


def cmd_primes(args: argparse.Namespace, keyring: Keyring) -> int:
    start = time.perf_counter()
    primes = search_primes(args.bits, args.count, workers=args.workers)
    for index, prime in enumerate(primes, start=1):
        print(f"{index}: {prime}")
    console_ui.kv("Expected trials per prime", f"{expected_trials(args.bits):.1f}")
    console_ui.elapsed("Time to generate:", time.perf_counter() - start)
    return 0


def cmd_demo(args: argparse.Namespace, keyring: Keyring) -> int:
    console_ui.banner("RSA Messenger")
    console_ui.section("Textbook RSA Round-trip")
    console_ui.warning(_TEXTBOOK_NOTE)
    pair = generate_key(args.bits, workers=args.workers)
    n, e, d = pair.public.n, pair.public.e, pair.private.d
    msg = args.message.encode("utf-8")
    c = encrypt(msg, e, n)
    out = decrypt(c, d, n)
    console_ui.kv("Modulus n size", f"{n.bit_length()} bits")
    console_ui.kv("Modulus n (head)", _preview(n))
    console_ui.kv("Public exponent e", str(e))
    console_ui.kv("Private exponent d (head)", _preview(d))
    console_ui.kv("Plaintext bytes", repr(msg))
    console_ui.kv("Plaintext as integer", f"0x{os2ip(msg):x}")
    console_ui.kv("Ciphertext", f"0x{c:x} ({len(i2osp(c))} bytes)")
    console_ui.kv("Decryption recovered", repr(out))
    console_ui.kv("Deterministic", str(encrypt(msg, e, n) == c))
    if out != msg:
        console_ui.error("RSA round-trip failed.")
        return 1
    console_ui.success("Round-trip OK")
    return 0


def cmd_dashboards(args: argparse.Namespace, keyring: Keyring) -> int:
    from reports.make_all_dashboards import make_all_dashboards

    console_ui.section("Export Dashboards (PNG)")
    results = make_all_dashboards(args.out_dir)
    for result in results:
        if result.status == "saved" and result.output is not None:
            console_ui.success(str(result.output.resolve()))
        else:
            console_ui.warning(f"{result.target} skipped: {result.reason}")
    console_ui.line()
    return 0


_COMMANDS: Dict[str, Callable[[argparse.Namespace, Keyring], int]] = {
    "keygen": cmd_keygen,
    "register": cmd_register,
    "add-key": cmd_add_key,
    "encrypt": cmd_encrypt,
    "decrypt": cmd_decrypt,
    "primes": cmd_primes,
    "demo": cmd_demo,
    "dashboards": cmd_dashboards,
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="rsa-messenger",
        description="Textbook RSA messenger: generate keys and exchange raw RSA messages.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
        Examples:
          rsa-messenger keygen 1024
          rsa-messenger register alice@example.com
          rsa-messenger encrypt bob@example.com "hi" -o to_bob.json
        """),
    )
    ap.add_argument(
        "--keyring",
        default=os.environ.get(KEYRING_ENV, "."),
        help=f"Directory holding key files (default: ${KEYRING_ENV} or the working directory).",
    )
    ap.add_argument("--plain", action="store_true", help="Disable colors/banners; print plain ASCII.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log search and key generation progress.")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("keygen", help="Generate public.key and private.key.")
    p.add_argument("bits", type=int, help="Modulus size in bits (multiple of 8, at least 64).")
    p.add_argument("--workers", type=int, default=None, help="Search threads per prime.")

    p = sub.add_parser("register", help="Assign an email address to the local key pair.")
    p.add_argument("email")

    p = sub.add_parser("add-key", help="Store a peer's public key file as <email>.key.")
    p.add_argument("file")

    p = sub.add_parser("encrypt", help="Encrypt a message for a stored peer key.")
    p.add_argument("email")
    p.add_argument("message")
    p.add_argument("-o", "--output", help="Write the message envelope here instead of stdout.")

    p = sub.add_parser("decrypt", help="Decrypt a message envelope addressed to this keyring.")
    p.add_argument("file")

    p = sub.add_parser("primes", help="Print probable primes of the given size.")
    p.add_argument("bits", type=int, help="Multiple of 8, at least 32.")
    p.add_argument("count", type=int, nargs="?", default=1)
    p.add_argument("--workers", type=int, default=None)

    p = sub.add_parser("demo", help="Generate a throwaway key and run an encrypt/decrypt round-trip.")
    p.add_argument("--bits", type=int, default=512)
    p.add_argument("--message", default="hi rsa from CLI")
    p.add_argument("--workers", type=int, default=None)

    p = sub.add_parser("dashboards", help="Export prime-search and key-split dashboards (PNG).")
    p.add_argument("--out-dir", default="Visualizations")

    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    console_ui.init(plain=args.plain)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    keyring = Keyring(args.keyring)
    try:
        return _COMMANDS[args.command](args, keyring)
    except RsaToolkitError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console_ui.error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
