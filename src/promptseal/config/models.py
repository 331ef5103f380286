"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, promptseal.toml only contains
overrides.  A working deployment needs only [crypto] key and [model] name,
and both usually come from the environment instead.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr


class TemplatesConfig(BaseModel):
    """[templates] section."""

    model_config = {"frozen": True}

    directory: str = "prompts"
    extension: str = ".prompt"


class CryptoConfig(BaseModel):
    """[crypto] section."""

    model_config = {"frozen": True}

    # Base64 of exactly 32 bytes.  Validated at the point of use.
    key: SecretStr | None = None


class ModelConfig(BaseModel):
    """[model] section."""

    model_config = {"frozen": True}

    name: str | None = None


class BackendConfig(BaseModel):
    """[backend] section."""

    model_config = {"frozen": True}

    base_url: str = "http://127.0.0.1:11434"
    timeout: float = Field(default=120.0, gt=0)


class DeliveryConfig(BaseModel):
    """[delivery] section."""

    model_config = {"frozen": True}

    marker: str = Field(default="_", min_length=1)
    meta_prefix: str = "meta"
    max_generator_length: int = Field(default=256, gt=0)
