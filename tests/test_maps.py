"""Tests for maps file loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

from rwrsgateway.maps import MapsConfigError, load_maps, load_maps_or_empty
from rwrsgateway.models import MapEntry, MapsConfig

VALID_MAPS = """
{
    "maps": [
        {
            "name": "Test Map 1",
            "path": "media/packages/vanilla.desert/maps/map1",
            "image": "map1.png"
        },
        {
            "name": "Test Map 2",
            "path": "media/packages/vanilla.jungle/maps/map2",
            "image": "https://example.com/map2.png"
        }
    ]
}
"""


class TestLoadMaps:
    def test_valid_file(self, tmp_path: Path):
        path = tmp_path / "test_maps.json"
        path.write_text(VALID_MAPS, encoding="utf-8")

        config = load_maps(path)

        assert len(config.maps) == 2
        assert config.maps[0] == MapEntry(
            name="Test Map 1",
            path="media/packages/vanilla.desert/maps/map1",
            image="map1.png",
        )
        assert config.maps[1].image == "https://example.com/map2.png"

    def test_empty_list(self, tmp_path: Path):
        path = tmp_path / "empty_maps.json"
        path.write_text('{"maps": []}', encoding="utf-8")
        assert load_maps(path).maps == []

    def test_relative_path_resolved_against_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "maps.json").write_text(VALID_MAPS, encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert len(load_maps("maps.json").maps) == 2

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(MapsConfigError, match="Failed to read maps config file"):
            load_maps(tmp_path / "nonexistent_file.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MapsConfigError, match="Failed to parse maps config file"):
            load_maps(path)

    def test_missing_fields(self, tmp_path: Path):
        path = tmp_path / "partial.json"
        path.write_text('{"maps": [{"name": "No path"}]}', encoding="utf-8")
        with pytest.raises(MapsConfigError, match="Failed to parse"):
            load_maps(path)

    def test_error_is_value_error(self):
        assert issubclass(MapsConfigError, ValueError)


class TestLoadMapsOrEmpty:
    def test_missing_file_returns_empty(self, tmp_path: Path):
        assert load_maps_or_empty(tmp_path / "missing.json") == MapsConfig()

    def test_valid_file_loaded(self, tmp_path: Path):
        path = tmp_path / "maps.json"
        path.write_text(VALID_MAPS, encoding="utf-8")
        assert len(load_maps_or_empty(path).maps) == 2
