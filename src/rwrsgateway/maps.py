"""Loading of the map list served by ``/api/maps``."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from rwrsgateway.models import MapsConfig

logger = logging.getLogger(__name__)


class MapsConfigError(ValueError):
    """Raised when the maps file cannot be read or does not validate."""


def load_maps(file_path: str | Path) -> MapsConfig:
    """Load and validate a maps JSON file (``{"maps": [...]}``).

    Relative paths are resolved against the current working directory.

    Raises:
        MapsConfigError: If the file is unreadable or not a valid maps document.
    """
    path = Path(file_path)
    full_path = path if path.is_absolute() else Path.cwd() / path
    logger.info("Loading maps configuration from %s (full path: %s)", file_path, full_path)

    try:
        raw = full_path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to read maps config file '{full_path}': {exc}"
        raise MapsConfigError(msg) from exc

    try:
        config = MapsConfig.model_validate_json(raw)
    except ValidationError as exc:
        msg = f"Failed to parse maps config file '{full_path}': {exc}"
        raise MapsConfigError(msg) from exc

    logger.info("Loaded %d map entries from %s", len(config.maps), full_path)
    return config


def load_maps_or_empty(file_path: str | Path) -> MapsConfig:
    """Like :func:`load_maps`, but logs the error and returns an empty list."""
    try:
        return load_maps(file_path)
    except MapsConfigError as exc:
        logger.error("%s; serving an empty map list", exc)
        return MapsConfig()
