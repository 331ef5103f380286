"""EncryptedPayload — the transport form of a sealed prompt.

Wire shape (JSON)::

    {"iv": "<24 hex>", "ciphertext": "<hex>", "authTag": "<32 hex>"}

Older clients send ``encryptedData`` instead of ``ciphertext``; it is
accepted on input and never emitted.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from promptseal.errors import PayloadFormatError

IV_LENGTH = 12
TAG_LENGTH = 16

_HEX_RE = re.compile(r"\A(?:[0-9a-fA-F]{2})*\Z")


def _require_hex(value: str, field_name: str) -> str:
    if not _HEX_RE.match(value):
        msg = f"{field_name} must be an even-length hexadecimal string"
        raise ValueError(msg)
    return value.lower()


class EncryptedPayload(BaseModel):
    """Nonce, ciphertext and authentication tag, each hex-encoded.

    Attributes:
        iv: 12-byte AES-GCM nonce.
        ciphertext: Encrypted UTF-8 prompt text (same length as the plaintext).
        auth_tag: 16-byte GCM authentication tag.
    """

    model_config = {"frozen": True}

    iv: str
    ciphertext: str = Field(validation_alias=AliasChoices("ciphertext", "encryptedData"))
    auth_tag: str = Field(
        validation_alias=AliasChoices("authTag", "auth_tag"),
        serialization_alias="authTag",
    )

    @field_validator("iv")
    @classmethod
    def _check_iv(cls, value: str) -> str:
        value = _require_hex(value, "iv")
        if len(value) != IV_LENGTH * 2:
            msg = f"iv must encode exactly {IV_LENGTH} bytes"
            raise ValueError(msg)
        return value

    @field_validator("ciphertext")
    @classmethod
    def _check_ciphertext(cls, value: str) -> str:
        return _require_hex(value, "ciphertext")

    @field_validator("auth_tag")
    @classmethod
    def _check_tag(cls, value: str) -> str:
        value = _require_hex(value, "authTag")
        if len(value) != TAG_LENGTH * 2:
            msg = f"authTag must encode exactly {TAG_LENGTH} bytes"
            raise ValueError(msg)
        return value

    @classmethod
    def from_bytes(cls, iv: bytes, ciphertext: bytes, auth_tag: bytes) -> EncryptedPayload:
        return cls(iv=iv.hex(), ciphertext=ciphertext.hex(), auth_tag=auth_tag.hex())

    @classmethod
    def from_transport(cls, data: Mapping[str, Any] | EncryptedPayload) -> EncryptedPayload:
        """Validate a transport mapping.

        Raises:
            PayloadFormatError: Missing keys, non-string values, bad hex, or
                wrong nonce/tag length.
        """
        if isinstance(data, EncryptedPayload):
            return data
        if not isinstance(data, Mapping):
            msg = f"Encrypted payload must be an object, got {type(data).__name__}"
            raise PayloadFormatError(msg)
        try:
            return cls.model_validate(dict(data), strict=True)
        except PydanticValidationError as exc:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
            msg = f"Malformed encrypted payload: {', '.join(fields) or 'shape'}"
            raise PayloadFormatError(msg) from exc

    def to_transport(self) -> dict[str, str]:
        """Return the JSON-ready mapping (``iv``, ``ciphertext``, ``authTag``)."""
        return self.model_dump(by_alias=True)

    def to_bytes(self) -> tuple[bytes, bytes, bytes]:
        """Decode ``(iv, ciphertext, auth_tag)`` from hex."""
        return bytes.fromhex(self.iv), bytes.fromhex(self.ciphertext), bytes.fromhex(self.auth_tag)
