"""Latest-release lookup for the client repositories on GitHub.

Used to decorate ``/api/version``: every failure mode (unsupported URL,
network error, non-2xx status, unexpected JSON) collapses to ``None`` so a
broken lookup can never fail the response that embeds it.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from rwrsgateway.models import RepoVersion, VersionInfo

logger = logging.getLogger(__name__)

_GITHUB_HOST = "github.com"
_GITHUB_API_URL = "https://api.github.com"
_USER_AGENT = "rwrs-server"
_TIMEOUT = 10.0
_MIN_URL_SEGMENTS = 5


def parse_repo_url(repo_url: str) -> tuple[str, str] | None:
    """Parse ``https://github.com/owner/repo[/...]`` into ``(owner, repo)``.

    Returns ``None`` for anything that is not a github.com repository URL.
    """
    parts = repo_url.rstrip("/").split("/")
    if len(parts) < _MIN_URL_SEGMENTS or parts[2] != _GITHUB_HOST:
        return None
    owner, repo = parts[3], parts[4]
    if not owner or not repo:
        return None
    return owner, repo


def release_page_url(owner: str, repo: str, tag: str) -> str:
    """Stable github.com release page for *tag*."""
    return f"https://{_GITHUB_HOST}/{owner}/{repo}/releases/tag/{tag}"


def _build_headers(token: str | None) -> dict[str, str]:
    headers = {
        "User-Agent": _USER_AGENT,
        "Accept": "application/vnd.github+json",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def resolve_latest_release(repo_url: str, *, token: str | None = None) -> tuple[str, str] | None:
    """Resolve the latest release of *repo_url*.

    Args:
        repo_url: Repository URL, e.g. ``https://github.com/owner/repo``.
        token: Optional GitHub token, raises the anonymous API rate limit.

    Returns:
        ``(tag, release_url)`` or ``None`` if the URL is unsupported or the
        lookup failed for any reason.
    """
    parsed = parse_repo_url(repo_url)
    if parsed is None:
        logger.debug("Not a GitHub repository URL, skipping release lookup: %s", repo_url)
        return None
    owner, repo = parsed

    api_url = f"{_GITHUB_API_URL}/repos/{owner}/{repo}/releases/latest"
    try:
        # httpx timeouts are per phase; bound the whole lookup as well.
        async with (
            asyncio.timeout(_TIMEOUT),
            httpx.AsyncClient(timeout=_TIMEOUT, headers=_build_headers(token)) as client,
        ):
            resp = await client.get(api_url)
    except httpx.HTTPError as exc:
        logger.error("Failed to fetch release info from %s: %s", api_url, exc)
        return None
    except TimeoutError:
        logger.error("Release lookup %s exceeded %.1fs", api_url, _TIMEOUT)
        return None

    if not resp.is_success:
        logger.warning("Release lookup %s returned %d", api_url, resp.status_code)
        return None

    try:
        data = resp.json()
    except ValueError:
        logger.warning("Release lookup %s returned invalid JSON", api_url, exc_info=True)
        return None

    tag = data.get("tag_name") if isinstance(data, dict) else None
    if not isinstance(tag, str) or not tag:
        logger.warning("Release lookup %s has no tag_name", api_url)
        return None

    return tag, release_page_url(owner, repo, tag)


async def _resolve_repo_version(repo_url: str | None, token: str | None) -> RepoVersion:
    if not repo_url:
        return RepoVersion()
    result = await resolve_latest_release(repo_url, token=token)
    if result is None:
        return RepoVersion()
    tag, url = result
    return RepoVersion(version=tag, url=url)


async def get_version_info(
    android_repo_url: str | None,
    web_repo_url: str | None,
    *,
    token: str | None = None,
) -> VersionInfo:
    """Resolve both client repositories concurrently into a ``VersionInfo``.

    Each configured URL costs one fresh GitHub round trip; nothing is cached.
    """
    android, web = await asyncio.gather(
        _resolve_repo_version(android_repo_url, token),
        _resolve_repo_version(web_repo_url, token),
    )
    return VersionInfo(android=android, web=web)
