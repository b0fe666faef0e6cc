"""CupsSettings: CLI flags, env vars and cupsmcp.toml merged into one object.

Precedence, highest first:
  1. keyword arguments (CLI flags, test overrides)
  2. ``CUPSMCP_*`` env vars, ``__`` between section and key
     (``CUPSMCP_CUPS__SERVER=print.lan``)
  3. the TOML file picked by :func:`cupsmcp.config.discovery.find_config`
  4. defaults from :mod:`cupsmcp.config.models`

Settings are loaded once per process and frozen; concurrent sessions share
them read-only.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    TomlConfigSettingsSource,
)

from cupsmcp.config.discovery import find_config
from cupsmcp.config.models import (
    CupsConfig,
    NetworkConfig,
    PrintingConfig,
    RenderConfig,
    SecurityConfig,
    UploadConfig,
)

# settings_customise_sources is a classmethod with a fixed signature, so the
# file chosen by from_cli() reaches it through this variable.
_toml_file: ContextVar[Path | None] = ContextVar("cupsmcp_toml_file", default=None)


class CupsSettings(BaseSettings):
    """Effective configuration for one CLI run or server process.

    Attributes:
        config_path: The TOML file the settings were loaded from, if any.
        json_output: CLI results as JSON instead of Rich text.
        verbose: DEBUG logging and extra result fields.
        log_json: JSON log lines instead of the console renderer.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CUPSMCP_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    cups: CupsConfig = Field(default_factory=CupsConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    printing: PrintingConfig = Field(default_factory=PrintingConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        toml_file = _toml_file.get()
        if toml_file is not None:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_file))
        return tuple(sources)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        search_from: Path | None = None,
        **overrides: Any,
    ) -> CupsSettings:
        """Load settings for a CLI or server invocation.

        An explicit *config_path* is used only if it exists; otherwise the
        file is discovered from *search_from* (default: cwd). *overrides*
        take precedence over everything else.

        Raises:
            click.ClickException: the TOML file does not parse.
        """
        if config_path:
            explicit = Path(config_path)
            toml_file = explicit if explicit.is_file() else None
        else:
            toml_file = find_config(search_from)

        token = _toml_file.set(toml_file)
        try:
            return cls(config_path=toml_file, **overrides)
        except tomllib.TOMLDecodeError as exc:
            raise click.ClickException(f"Invalid TOML in {toml_file}: {exc}") from exc
        finally:
            _toml_file.reset(token)
