"""CLI for rwrsgateway — built on cyclopts."""

from __future__ import annotations

import logging
import os
import sys

import cyclopts

app = cyclopts.App(
    name="rwrsgateway",
    help="rwrsgateway — caching gateway for the Running With Rifles server list.",
)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@app.default
def serve() -> None:
    """Run the gateway HTTP server (default command)."""
    import uvicorn  # noqa: PLC0415

    from rwrsgateway.config import load_config  # noqa: PLC0415
    from rwrsgateway.server import create_app  # noqa: PLC0415

    try:
        config, config_path = load_config()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(level=config.log_level, format=_LOG_FORMAT)
    logger = logging.getLogger("rwrsgateway")
    if config_path is not None:
        logger.info("Using config file %s", config_path)
    logger.info("listening at %s:%d", config.host, config.port)

    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)


@app.command(name="check-env")
def check_env() -> None:
    """Print recognized environment variables and validate the configuration."""
    from rwrsgateway.config import ENV_VARS  # noqa: PLC0415

    print("rwrsgateway check-env")
    print("=" * 40)

    present = {k: os.environ[k] for k in ENV_VARS if k in os.environ}
    if not present:
        print("\nNo gateway environment variables set.")
        print("Using config file and defaults.")
    else:
        print(f"\nFound {len(present)} variable(s):\n")
        for key, value in present.items():
            print(f"  {key} = {_mask_value(key, value)}")

    print("\n" + "-" * 40)
    print("Validating configuration...\n")
    try:
        from rwrsgateway.config import load_config  # noqa: PLC0415

        config, config_path = load_config()
    except ValueError as exc:
        print(f"❌ Configuration error: {exc}")
        sys.exit(1)

    print(f"  Config file: {config_path or 'none (environment and defaults)'}")
    _print_config_summary(config)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_MASK_MIN_LENGTH = 4
_TRUNCATE_LENGTH = 80


def _mask_value(key: str, value: str) -> str:
    """Mask sensitive values."""
    sensitive_keywords = ("token", "secret", "key", "password")
    if any(kw in key.lower() for kw in sensitive_keywords):
        if len(value) > _MASK_MIN_LENGTH:
            return value[:2] + "*" * (len(value) - _MASK_MIN_LENGTH) + value[-2:]
        return "****"
    if len(value) > _TRUNCATE_LENGTH:
        return value[: _TRUNCATE_LENGTH - 3] + "..."
    return value


def _print_config_summary(config: object) -> None:
    """Print a human-readable config summary."""
    from rwrsgateway.config import Config  # noqa: PLC0415

    if not isinstance(config, Config):  # pragma: no cover
        return

    print(f"  Listen: {config.host}:{config.port}")
    print(f"  Cache TTL: {config.cache_duration_secs}s, rate limit: {config.rate_limit_secs}s")
    print(f"  Server list upstream: {config.server_list_url}")
    print(f"  Player list upstream: {config.player_list_url}")
    print(f"  Maps file: {config.maps_config_path}")
    print(f"  Static dir: {config.static_dir}")
    print(f"  Android repo: {config.android_repo_url or 'not configured'}")
    print(f"  Web repo: {config.web_repo_url or 'not configured'}")
    print(f"  GitHub token: {'set' if config.github_token else 'not set'}")
    print(f"  Log level: {config.log_level}")
    print()
