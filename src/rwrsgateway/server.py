"""FastAPI application for rwrsgateway.

Routes:

- ``GET /ping`` — liveness check
- ``GET /api/server_list`` and ``GET /api/player_list`` — upstream RWR pages
  behind a ``RateLimitedCache`` each, query string forwarded verbatim.
  Only body and status are cached, so replies always go out as
  ``text/plain; charset=utf-8`` whatever ``Content-Type`` the upstream sent
- ``GET /api/maps`` — map list loaded once at startup
- ``GET /api/version`` — latest client releases from GitHub
- everything else — static frontend files, ``index.html`` for directories

Shared state lives on ``app.state`` and reaches handlers through
dependencies; there are no module-level singletons.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles

from rwrsgateway.cache import GatewayError, RateLimitedCache
from rwrsgateway.config import Config
from rwrsgateway.maps import load_maps_or_empty
from rwrsgateway.middleware import RequestLogMiddleware
from rwrsgateway.models import MapsConfig, VersionInfo
from rwrsgateway.releases import get_version_info

logger = logging.getLogger(__name__)

_UPSTREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_server_list_cache(request: Request) -> RateLimitedCache:
    return request.app.state.server_list_cache


def get_player_list_cache(request: Request) -> RateLimitedCache:
    return request.app.state.player_list_cache


def get_maps(request: Request) -> MapsConfig:
    return request.app.state.maps


def upstream_url(base_url: str, query: str) -> str:
    """Append the caller's raw query string to *base_url*, if there is one."""
    return f"{base_url}?{query}" if query else base_url


async def _proxy(cache: RateLimitedCache, base_url: str, request: Request) -> Response:
    body, status_code = await cache.fetch(upstream_url(base_url, request.url.query))
    return Response(content=body, status_code=status_code, media_type=_UPSTREAM_MEDIA_TYPE)


async def _gateway_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    status_code = exc.status_code if isinstance(exc, GatewayError) else 500
    request_id = getattr(request.state, "request_id", None)
    logger.error("%s %s: %s [request_id=%s]", request.method, request.url.path, exc, request_id)
    return PlainTextResponse(str(exc), status_code=status_code)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def create_app(
    config: Config,
    *,
    server_list_cache: RateLimitedCache | None = None,
    player_list_cache: RateLimitedCache | None = None,
    maps: MapsConfig | None = None,
) -> FastAPI:
    """Build the gateway application.

    Caches and the map list are created from *config* unless passed in.
    There is one single-slot cache per upstream endpoint, not one per
    request URL: query-string variants of an endpoint share its slot and
    are served whatever response it currently holds.
    """
    app = FastAPI(title="rwrsgateway", docs_url=None, redoc_url=None, openapi_url=None)

    app.state.config = config
    app.state.server_list_cache = server_list_cache or RateLimitedCache(
        config.rate_limit_secs, config.cache_duration_secs
    )
    app.state.player_list_cache = player_list_cache or RateLimitedCache(
        config.rate_limit_secs, config.cache_duration_secs
    )
    app.state.maps = maps if maps is not None else load_maps_or_empty(config.maps_config_path)

    app.add_middleware(RequestLogMiddleware)
    app.add_exception_handler(GatewayError, _gateway_error_handler)

    @app.get("/ping", response_class=PlainTextResponse)
    async def ping() -> str:
        return "pong"

    @app.get("/api/server_list")
    async def server_list(
        request: Request,
        cfg: Annotated[Config, Depends(get_config)],
        cache: Annotated[RateLimitedCache, Depends(get_server_list_cache)],
    ) -> Response:
        return await _proxy(cache, cfg.server_list_url, request)

    @app.get("/api/player_list")
    async def player_list(
        request: Request,
        cfg: Annotated[Config, Depends(get_config)],
        cache: Annotated[RateLimitedCache, Depends(get_player_list_cache)],
    ) -> Response:
        return await _proxy(cache, cfg.player_list_url, request)

    @app.get("/api/maps")
    async def maps_list(map_config: Annotated[MapsConfig, Depends(get_maps)]) -> MapsConfig:
        return map_config

    @app.get("/api/version")
    async def version(cfg: Annotated[Config, Depends(get_config)]) -> VersionInfo:
        return await get_version_info(cfg.android_repo_url, cfg.web_repo_url, token=cfg.github_token)

    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found, frontend will not be served", static_dir)

    return app
