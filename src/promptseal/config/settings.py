"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``PROMPTSEAL_*`` prefix, ``__`` between section and key
                    (``PROMPTSEAL_CRYPTO__KEY``, ``PROMPTSEAL_MODEL__NAME``)
  3. TOML file    — ``promptseal.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

The key and model are *not* required here: each orchestrator reports a
missing value at the point of use, so flows that never touch the key keep
working without one.
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from promptseal.config.models import (
    BackendConfig,
    CryptoConfig,
    DeliveryConfig,
    ModelConfig,
    TemplatesConfig,
)
from promptseal.pipeline.context import DeliveryOptions, PipelineConfig

CONFIG_FILENAME = "promptseal.toml"
CONFIG_ENV_VAR = "PROMPTSEAL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Locate the config file for *start* (default: cwd).

    ``PROMPTSEAL_CONFIG`` wins when set (None if it points nowhere);
    otherwise the nearest ``promptseal.toml`` in *start* or its parents.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        explicit = Path(env_path)
        return explicit if explicit.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``promptseal.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class PromptSealSettings(BaseSettings):
    """Unified settings for the promptseal CLI and services.

    Attributes:
        root: Project directory (parent of ``promptseal.toml``, or CWD if
            no config was found).  Relative template directories resolve
            against it.
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "PROMPTSEAL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    crypto: CryptoConfig = Field(default_factory=CryptoConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> PromptSealSettings:
        """Construct settings from a CLI invocation.

        Discovers ``promptseal.toml`` via walk-up (or explicit *config_path*),
        resolves *root* from the config file's parent directory, and merges
        CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(root=resolved_root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

    @property
    def templates_root(self) -> Path:
        directory = Path(self.templates.directory).expanduser()
        if directory.is_absolute():
            return directory
        return self.root / directory

    def pipeline_config(self) -> PipelineConfig:
        """The explicit configuration value handed to the orchestrators."""
        key = self.crypto.key.get_secret_value() if self.crypto.key is not None else None
        return PipelineConfig(
            cipher_key=key or None,
            model=self.model.name or None,
            delivery=DeliveryOptions(
                marker=self.delivery.marker,
                meta_prefix=self.delivery.meta_prefix,
                max_generator_length=self.delivery.max_generator_length,
            ),
        )
