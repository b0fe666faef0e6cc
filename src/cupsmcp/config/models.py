"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, cupsmcp.toml only contains overrides.
A fresh install needs no config file at all; printing from ~/Documents,
~/Downloads and ~/Desktop to the local CUPS default works out of the box.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

# Roots that are always denied, whatever [security] denied_paths says.
SYSTEM_DENIED_PATHS: tuple[str, ...] = (
    "/etc",
    "/boot",
    "/proc",
    "/sys",
    "/dev",
    "/bin",
    "/sbin",
    "/usr/bin",
    "/usr/sbin",
    "/private/etc",
    "/System",
)

DEFAULT_ALLOWED_PATHS: tuple[str, ...] = ("~/Documents", "~/Downloads", "~/Desktop")

DEFAULT_BLOCKED_EXTENSIONS: frozenset[str] = frozenset(
    {
        "exe",
        "bat",
        "cmd",
        "com",
        "sh",
        "bash",
        "zsh",
        "ps1",
        "msi",
        "app",
        "dll",
        "so",
        "dylib",
        "scr",
        "vbs",
        "jar",
    }
)

DEFAULT_CUPS_PORT = 631


class CupsConfig(BaseModel):
    """[cups] section."""

    model_config = {"frozen": True}

    server: str = ""
    port: int = DEFAULT_CUPS_PORT
    default_printer: str = ""


class SecurityConfig(BaseModel):
    """[security] section.

    ``denied_paths`` lists extra roots on top of :data:`SYSTEM_DENIED_PATHS`;
    the system roots cannot be removed from configuration.
    """

    model_config = {"frozen": True}

    allowed_paths: tuple[Path, ...] = Field(
        default_factory=lambda: tuple(Path(p) for p in DEFAULT_ALLOWED_PATHS)
    )
    denied_paths: tuple[Path, ...] = ()

    @property
    def effective_denied_paths(self) -> tuple[Path, ...]:
        system = tuple(Path(p) for p in SYSTEM_DENIED_PATHS)
        extra = tuple(p for p in self.denied_paths if p not in system)
        return system + extra


class UploadConfig(BaseModel):
    """[upload] section."""

    model_config = {"frozen": True}

    max_size: int = 50 * 1024 * 1024
    blocked_extensions: frozenset[str] = DEFAULT_BLOCKED_EXTENSIONS

    @field_validator("blocked_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(v).strip().lstrip(".").lower() for v in value if str(v).strip())
        return value


class PrintingConfig(BaseModel):
    """[printing] section. ``0`` disables the respective limit."""

    model_config = {"frozen": True}

    max_copies: int = Field(default=10, ge=0)
    confirm_if_over_pages: int = Field(default=10, ge=0)


class CodeRenderConfig(BaseModel):
    """[render.code] section."""

    model_config = {"frozen": True}

    line_numbers: bool = True
    color_scheme: str = "default"
    font_size: str = "10pt"
    line_spacing: str = "1.4"


class RenderConfig(BaseModel):
    """[render] section."""

    model_config = {"frozen": True}

    auto_markdown: bool = True
    auto_code: bool = True
    fallback_on_error: bool = True
    code: CodeRenderConfig = Field(default_factory=CodeRenderConfig)


class NetworkConfig(BaseModel):
    """[network] section: bind address for the SSE transport."""

    model_config = {"frozen": True}

    host: str = "127.0.0.1"
    port: int = 8000
