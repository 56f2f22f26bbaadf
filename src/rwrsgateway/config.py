"""Gateway configuration.

Settings are resolved in priority order (highest first):

1. Environment variables (``PORT``, ``CACHE_DURATION_SECS``, ...)
2. ``rwrsgateway.toml`` found by walking up from the working directory to
   the ``.git`` root
3. Defaults, so zero-config still works
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "rwrsgateway.toml"

DEFAULT_SERVER_LIST_URL = "http://rwr.runningwithrifles.com/rwr_server_list/get_server_list.php"
DEFAULT_PLAYER_LIST_URL = "http://rwr.runningwithrifles.com/rwr_stats/view_players.php"


class Config(BaseModel):
    """Top-level rwrsgateway configuration."""

    model_config = ConfigDict(extra="ignore")

    host: str = Field(default="127.0.0.1", description="Interface to listen on")
    port: int = Field(default=5800, ge=1, le=65535, description="Port to listen on")
    cache_duration_secs: int = Field(default=3, ge=0, description="Seconds a cached upstream response stays fresh")
    rate_limit_secs: int = Field(default=3, ge=0, description="Minimum seconds between upstream requests")
    maps_config_path: str = Field(default="maps.json", description="Path of the maps JSON file")
    android_repo_url: str | None = Field(default=None, description="GitHub URL of the Android client repository")
    web_repo_url: str | None = Field(default=None, description="GitHub URL of the web client repository")
    static_dir: str = Field(default="static", description="Directory of the frontend's static files")
    server_list_url: str = Field(default=DEFAULT_SERVER_LIST_URL, description="Upstream server list endpoint")
    player_list_url: str = Field(default=DEFAULT_PLAYER_LIST_URL, description="Upstream player list endpoint")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")
    github_token: str | None = Field(default=None, description="Optional token for the GitHub releases API")

    @field_validator("android_repo_url", "web_repo_url", "github_token", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


# -- Environment variables -------------------------------------------------------

# env var -> config field; first match wins for fields listed twice.
ENV_VARS: dict[str, str] = {
    "HOST": "host",
    "PORT": "port",
    "CACHE_DURATION_SECS": "cache_duration_secs",
    "RATE_LIMIT_SECS": "rate_limit_secs",
    "MAPS_CONFIG": "maps_config_path",
    "ANDROID_REPO_URL": "android_repo_url",
    "WEB_REPO_URL": "web_repo_url",
    "STATIC_DIR": "static_dir",
    "SERVER_LIST_URL": "server_list_url",
    "PLAYER_LIST_URL": "player_list_url",
    "LOG_LEVEL": "log_level",
    "GH_TOKEN": "github_token",
    "GITHUB_TOKEN": "github_token",
}

_INT_FIELDS = frozenset({"port", "cache_duration_secs", "rate_limit_secs"})


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect config values from *environ*.

    Integer variables that don't parse are skipped with a warning so the
    file/default value applies.
    """
    overrides: dict[str, Any] = {}
    for var, field in ENV_VARS.items():
        if field in overrides or var not in environ:
            continue
        value = environ[var]
        if field in _INT_FIELDS:
            try:
                overrides[field] = int(value)
            except ValueError:
                logger.warning("Ignoring %s=%r: not an integer", var, value)
            continue
        overrides[field] = value
    return overrides


# -- Config file -----------------------------------------------------------------


def _collect_unknown_keys(data: dict[str, Any]) -> list[str]:
    """Return keys in *data* that are not ``Config`` fields."""
    known = set(Config.model_fields)
    return [key for key in data if key not in known]


def _find_config_file(start: Path) -> Path | None:
    """Walk up from *start* looking for ``rwrsgateway.toml``, stopping at ``.git`` root."""
    current = start.resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        # Stop at filesystem root
        if current.parent == current:
            return None
        # Stop if we just checked a directory that contains .git
        if (current / ".git").exists():
            return None
        current = current.parent


def _read_config_file(config_path: Path) -> dict[str, Any]:
    try:
        raw = config_path.read_text(encoding="utf-8")
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {config_path}: {exc}"
        raise ValueError(msg) from exc

    for key in _collect_unknown_keys(data):
        logger.warning("Unknown config key '%s' in %s", key, config_path)
    return data


def load_config(
    cwd: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[Config, Path | None]:
    """Load configuration from ``rwrsgateway.toml`` and the environment.

    Returns:
        (config, config_path) — the validated config and the file it was read
        from, or ``None`` when running on environment variables and defaults.

    Raises ``ValueError`` on invalid TOML or validation errors so the server
    can refuse to start with a broken config.
    """
    start = Path(cwd) if cwd else Path.cwd()
    env = os.environ if environ is None else environ

    config_path = _find_config_file(start)
    data: dict[str, Any] = {}
    if config_path is None:
        logger.debug("No %s found, using environment and defaults", CONFIG_FILENAME)
    else:
        logger.info("Loading config from %s", config_path)
        data = _read_config_file(config_path)

    data.update(_env_overrides(env))

    try:
        config = Config.model_validate(data)
    except ValidationError as exc:
        source = config_path or "environment"
        msg = f"Invalid config in {source}: {exc}"
        raise ValueError(msg) from exc

    return config, config_path
