"""Tests for pydantic models."""

from __future__ import annotations

import pydantic
import pytest

from rwrsgateway.models import CachedResponse, MapsConfig, RepoVersion, VersionInfo


class TestCachedResponse:
    def test_age(self):
        entry = CachedResponse(body="x", status_code=200, fetched_at=100.0)
        assert entry.age(104.5) == 4.5

    def test_fresh_inside_ttl(self):
        entry = CachedResponse(body="x", status_code=200, fetched_at=100.0)
        assert entry.is_expired(10, 105.0) is False

    def test_boundary_is_fresh(self):
        entry = CachedResponse(body="x", status_code=200, fetched_at=100.0)
        assert entry.is_expired(10, 110.0) is False

    def test_expired_past_ttl(self):
        entry = CachedResponse(body="x", status_code=200, fetched_at=100.0)
        assert entry.is_expired(10, 110.001) is True

    def test_frozen(self):
        entry = CachedResponse(body="x", status_code=200, fetched_at=100.0)
        with pytest.raises(pydantic.ValidationError):
            entry.body = "y"  # type: ignore[misc]


class TestVersionInfo:
    def test_round_trip(self):
        info = VersionInfo(
            android=RepoVersion(version="v2.0.0", url="https://github.com/example/android/releases/tag/v2.0.0"),
        )
        parsed = VersionInfo.model_validate_json(info.model_dump_json())
        assert parsed.android.version == "v2.0.0"
        assert parsed.web.version is None

    def test_empty_shape(self):
        assert VersionInfo().model_dump() == {
            "android": {"version": None, "url": None},
            "web": {"version": None, "url": None},
        }


class TestMapsConfig:
    def test_defaults_to_empty(self):
        assert MapsConfig().maps == []
