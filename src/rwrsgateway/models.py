"""Pydantic models for rwrsgateway."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CachedResponse(BaseModel):
    """The single upstream response held by a ``RateLimitedCache``."""

    model_config = ConfigDict(frozen=True)

    body: str = Field(description="Upstream response body, decoded as text")
    status_code: int = Field(description="Upstream HTTP status code, replayed verbatim")
    fetched_at: float = Field(description="Monotonic clock reading when the response was stored")

    def age(self, now: float) -> float:
        """Seconds elapsed since the response was stored."""
        return now - self.fetched_at

    def is_expired(self, ttl: float, now: float) -> bool:
        """True once the age is strictly greater than *ttl* (the boundary itself is fresh)."""
        return self.age(now) > ttl


class RepoVersion(BaseModel):
    """Latest release of one client repository.

    Both fields are ``None`` when the repository is not configured or the
    lookup failed; callers cannot tell the two apart.
    """

    version: str | None = Field(default=None, description="Release tag name (e.g. 'v1.4.0')")
    url: str | None = Field(default=None, description="Release page URL on github.com")


class VersionInfo(BaseModel):
    """Payload of ``GET /api/version``."""

    android: RepoVersion = Field(default_factory=RepoVersion, description="Android client release")
    web: RepoVersion = Field(default_factory=RepoVersion, description="Web client release")


class MapEntry(BaseModel):
    """A single map shown by the frontend."""

    name: str = Field(description="Human-readable map name")
    path: str = Field(description="Game package path of the map (e.g. 'media/packages/vanilla/maps/map1')")
    image: str = Field(description="Preview image file name or absolute URL")


class MapsConfig(BaseModel):
    """Contents of the maps JSON file."""

    maps: list[MapEntry] = Field(default_factory=list, description="Known maps, in display order")
