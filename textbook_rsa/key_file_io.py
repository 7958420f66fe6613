"""Key files, registered identities and message envelopes kept in a keyring directory.

Layout of a keyring::

    public.key      {"email": "<address or empty>", "key": "<base64 (e, n)>"}
    private.key     {"email": ["<address>", ...], "key": "<base64 (d, n)>"}
    <address>.key   peer public keys, same shape as public.key

Envelopes are ``{"email": <recipient>, "content": <base64 ciphertext>}``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from textbook_rsa.codec import decode_key
from textbook_rsa.errors import EncodingError, InvalidParameterError, RsaToolkitError
from textbook_rsa.keygen import RsaKeyPair
from textbook_rsa.transform import decrypt_message, encrypt_message

logger = logging.getLogger(__name__)

PUBLIC_KEY_FILE = "public.key"
PRIVATE_KEY_FILE = "private.key"


class MissingKeyError(RsaToolkitError, FileNotFoundError):
    """Raised when a key file needed for an operation does not exist."""


class NotRecipientError(RsaToolkitError):
    """Raised when an envelope is addressed to an identity this keyring does not hold."""


def _parse_json(text: str, *, what: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise EncodingError(f"{what} is not valid JSON") from exc
    if not isinstance(data, dict):
        raise EncodingError(f"{what} must be a JSON object")
    return data


def _require_str(data: Dict[str, Any], name: str, *, what: str) -> str:
    value = data.get(name)
    if not isinstance(value, str):
        raise EncodingError(f"{what} is missing string field '{name}'")
    return value


@dataclass
class PublicKeyRecord:
    email: str
    key: str

    def to_json(self) -> str:
        return json.dumps({"email": self.email, "key": self.key})

    @classmethod
    def from_json(cls, text: str) -> "PublicKeyRecord":
        data = _parse_json(text, what="Public key")
        record = cls(
            email=_require_str(data, "email", what="Public key"),
            key=_require_str(data, "key", what="Public key"),
        )
        decode_key(record.key)
        return record


@dataclass
class PrivateKeyRecord:
    key: str
    email: List[str] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps({"email": list(self.email), "key": self.key})

    @classmethod
    def from_json(cls, text: str) -> "PrivateKeyRecord":
        data = _parse_json(text, what="Private key")
        emails = data.get("email", [])
        if not isinstance(emails, list) or not all(isinstance(item, str) for item in emails):
            raise EncodingError("Private key field 'email' must be a list of strings")
        record = cls(key=_require_str(data, "key", what="Private key"), email=list(emails))
        decode_key(record.key)
        return record


@dataclass
class Message:
    email: str
    content: str

    def to_json(self) -> str:
        return json.dumps({"email": self.email, "content": self.content})

    @classmethod
    def from_json(cls, text: str) -> "Message":
        data = _parse_json(text, what="Message")
        return cls(
            email=_require_str(data, "email", what="Message"),
            content=_require_str(data, "content", what="Message"),
        )


class Keyring:
    """Directory holding this user's key pair and the public keys of peers."""

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)

    @property
    def public_path(self) -> Path:
        return self.root / PUBLIC_KEY_FILE

    @property
    def private_path(self) -> Path:
        return self.root / PRIVATE_KEY_FILE

    def peer_path(self, email: str) -> Path:
        if not email or any(sep in email for sep in ("/", "\\")) or email in {".", ".."}:
            raise InvalidParameterError(f"Invalid email address for a key file: {email!r}")
        return self.root / f"{email}.key"

    def _read(self, path: Path, *, missing: str) -> str:
        try:
            return path.read_text()
        except FileNotFoundError as exc:
            raise MissingKeyError(f"{missing}: {path}") from exc

    def _write(self, path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n")
        return path

    def save_generated(self, pair: RsaKeyPair) -> None:
        """Write a fresh key pair; the public key starts unassigned, the private key with no identities."""

        public_blob, private_blob = pair.to_blobs()
        self._write(self.public_path, PublicKeyRecord(email="", key=public_blob).to_json())
        self._write(self.private_path, PrivateKeyRecord(key=private_blob).to_json())
        logger.info("Wrote %s and %s", self.public_path, self.private_path)

    def load_public(self) -> PublicKeyRecord:
        return PublicKeyRecord.from_json(self._read(self.public_path, missing="No public key found"))

    def load_private(self) -> PrivateKeyRecord:
        return PrivateKeyRecord.from_json(self._read(self.private_path, missing="No private key found"))

    def register_email(self, email: str) -> PublicKeyRecord:
        """Assign ``email`` to the public key and record it as an identity of the private key."""

        public = self.load_public()
        private = self.load_private()
        public.email = email
        if email not in private.email:
            private.email.append(email)
        self._write(self.public_path, public.to_json())
        self._write(self.private_path, private.to_json())
        logger.info("Registered %s with the local key pair", email)
        return public

    def store_peer_key(self, record: PublicKeyRecord) -> Path:
        if not record.email:
            raise EncodingError("Peer public key has no email address")
        return self._write(self.peer_path(record.email), record.to_json())

    def load_peer_key(self, email: str) -> PublicKeyRecord:
        return PublicKeyRecord.from_json(
            self._read(self.peer_path(email), missing=f"Key does not exist for {email}")
        )

    def encrypt_for(self, email: str, text: str) -> Message:
        record = self.load_peer_key(email)
        return Message(email=email, content=encrypt_message(text, record.key))

    def decrypt(self, message: Message) -> str:
        private = self.load_private()
        if message.email not in private.email:
            raise NotRecipientError(f"Message for {message.email} is not addressed to this keyring")
        return decrypt_message(message.content, private.key)


__all__ = [
    "PUBLIC_KEY_FILE",
    "PRIVATE_KEY_FILE",
    "MissingKeyError",
    "NotRecipientError",
    "PublicKeyRecord",
    "PrivateKeyRecord",
    "Message",
    "Keyring",
]
