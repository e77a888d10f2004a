"""User-editable exporter settings.

Settings belong to the host's settings UI and can change between any two
ticks. Each cycle freezes what it needs (``inclusion()``, ``destination()``)
at dispatch time so it never observes a half-edited configuration.
"""

import os
import re
from dataclasses import dataclass, field

from core.config.export import (
    ASSET_PATH,
    DATA_PATH,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
)
from core.exceptions import ConfigurationError
from core.snapshot_builder import InclusionOptions

_TRUTHY = ("1", "true", "yes", "on")
# Path, query, fragment or whitespace would end up inside the request URL
_HOST_FORBIDDEN = re.compile(r"[/?#\s]")


def _env_flag(name: str, default: bool = True) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class Destination:
    """Where and how patiently to deliver one payload."""

    host: str
    port: int
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def data_url(self) -> str:
        return self.base_url + DATA_PATH


@dataclass
class ExportSettings:
    """Master switch, section switches, debug flag and destination."""

    enable_sending: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_SENDING"))
    enable_world: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_WORLD"))
    enable_pawns: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_PAWNS"))
    enable_skills: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_SKILLS"))
    enable_jobs: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_JOBS"))
    enable_needs: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_NEEDS"))
    enable_health: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_HEALTH"))
    enable_portraits: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_PORTRAITS"))
    enable_debug: bool = field(default_factory=lambda: _env_flag("RIMIO_ENABLE_DEBUG", default=False))
    host: str = field(default_factory=lambda: os.getenv("RIMIO_HOST", DEFAULT_HOST))
    port: int = field(default_factory=lambda: _env_int("RIMIO_PORT", DEFAULT_PORT))
    timeout_seconds: float = field(
        default_factory=lambda: _env_float("RIMIO_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
    )

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def data_url(self) -> str:
        return self.base_url + DATA_PATH

    @property
    def asset_url(self) -> str:
        return self.base_url + ASSET_PATH

    def validate(self) -> None:
        """Raise ConfigurationError if the destination cannot be used."""
        host = (self.host or "").strip()
        if not host:
            raise ConfigurationError("host must not be empty")
        if _HOST_FORBIDDEN.search(host):
            raise ConfigurationError(f"host must be a bare name or address, got {self.host!r}")
        if not 1 <= int(self.port) <= 65535:
            raise ConfigurationError(f"port out of range: {self.port}")
        if self.timeout_seconds <= 0:
            raise ConfigurationError(f"timeout must be positive: {self.timeout_seconds}")

    def inclusion(self) -> InclusionOptions:
        return InclusionOptions(
            world=self.enable_world,
            pawns=self.enable_pawns,
            skills=self.enable_skills,
            jobs=self.enable_jobs,
            needs=self.enable_needs,
            health=self.enable_health,
            portraits=self.enable_portraits,
        )

    def destination(self) -> Destination:
        return Destination(host=self.host.strip(), port=int(self.port), timeout=float(self.timeout_seconds))
