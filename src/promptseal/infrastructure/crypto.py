"""AES-256-GCM codec for sealed prompts.

INVARIANT: a fresh 12-byte nonce is drawn from ``os.urandom`` for every
encryption; nonces are never derived, counted, or reused.

INVARIANT: decryption either returns the exact plaintext or raises
:class:`~promptseal.errors.AuthenticationError`; there is no partial or
best-effort result.
"""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from promptseal.domain.payload import IV_LENGTH, TAG_LENGTH, EncryptedPayload
from promptseal.errors import AuthenticationError, InvalidKeyError, PayloadFormatError

KEY_LENGTH = 32


class AeadCodec:
    """Authenticated encryption of UTF-8 text under one 256-bit key."""

    def __init__(self, key: bytes) -> None:
        if not isinstance(key, bytes) or len(key) != KEY_LENGTH:
            length = len(key) if isinstance(key, bytes) else "non-bytes"
            msg = f"Key must be exactly {KEY_LENGTH} bytes for AES-256-GCM (got {length})"
            raise InvalidKeyError(msg)
        self._aead = AESGCM(key)

    def encrypt(self, plaintext: str) -> EncryptedPayload:
        iv = os.urandom(IV_LENGTH)
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), None)
        # AESGCM appends the tag to the ciphertext.
        return EncryptedPayload.from_bytes(iv, sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:])

    def decrypt(self, payload: EncryptedPayload) -> str:
        """Verify and decrypt *payload*.

        Raises:
            AuthenticationError: Wrong key, or tampered nonce, ciphertext or tag.
            PayloadFormatError: The verified plaintext is not valid UTF-8.
        """
        iv, ciphertext, tag = payload.to_bytes()
        try:
            plaintext = self._aead.decrypt(iv, ciphertext + tag, None)
        except InvalidTag as exc:
            msg = "Decryption failed: wrong key, or tampered or corrupted payload"
            raise AuthenticationError(msg) from exc
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = "Decrypted payload is not valid UTF-8 text"
            raise PayloadFormatError(msg) from exc


def encrypt(key: bytes, plaintext: str) -> EncryptedPayload:
    """Encrypt *plaintext* under *key* with a fresh nonce."""
    return AeadCodec(key).encrypt(plaintext)


def decrypt(key: bytes, payload: EncryptedPayload) -> str:
    """Decrypt *payload* under *key*; see :meth:`AeadCodec.decrypt`."""
    return AeadCodec(key).decrypt(payload)


def decode_key(text: str) -> bytes:
    """Decode a base64 key and check its length.

    Raises:
        InvalidKeyError: Not strict base64, or not 32 bytes once decoded.
    """
    try:
        key = base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        msg = "Key is not valid base64"
        raise InvalidKeyError(msg) from exc
    if len(key) != KEY_LENGTH:
        msg = f"Key must decode to exactly {KEY_LENGTH} bytes (got {len(key)})"
        raise InvalidKeyError(msg)
    return key


def generate_key() -> str:
    """Return a new random key, base64-encoded for configuration files."""
    return base64.b64encode(os.urandom(KEY_LENGTH)).decode("ascii")
