from __future__ import annotations

"""Tests for the CLI glue."""

import json
from unittest.mock import patch

import pytest

import main
from magnet_finder.cache import InMemoryCache, JsonFileCache
from magnet_finder.config import AppConfig, CacheConfig
from magnet_finder.models import Meta, Result
from magnet_finder.rarbg import SearchError

RESULT = Result(
    name="Movie.2020.1080p.WEB",
    quality="1080p",
    info_hash="0" * 40,
    magnet_url="magnet:?xt=urn:btih:" + "0" * 40,
    size=1048576,
    seeders=7,
)


def test_season_requires_episode() -> None:
    with pytest.raises(SystemExit):
        main.parse_args(["tt0944947", "--season", "3"])


def test_collect_overrides() -> None:
    args = main.parse_args(["tt0111161", "--timeout", "2.5", "--no-cache"])
    assert main.collect_overrides(args) == {
        "base_url": None,
        "request_timeout": 2.5,
        "cache_age": None,
        "no_cache": True,
    }


def test_build_cache_picks_store(tmp_path) -> None:
    assert isinstance(main.build_cache(AppConfig()), InMemoryCache)
    config = AppConfig(cache=CacheConfig(path=str(tmp_path / "c.json")))
    assert isinstance(main.build_cache(config), JsonFileCache)


def test_format_result_and_target() -> None:
    line = main.format_result(1, RESULT)
    assert line.startswith("1. [1080p] Movie.2020.1080p.WEB | seeds: 7 | size: 1.0 MB")
    assert RESULT.magnet_url in line
    assert main.describe_target("tt1", Meta(title="Show", year=2011), 3, 1) == "Show (2011) S03E01"
    assert main.describe_target("tt1", None, None, None) == "tt1"


def _config_file(tmp_path) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"rarbg": {"base_url": "http://api.example"}}), encoding="utf-8")
    return str(path)


def test_main_prints_results(tmp_path, capsys) -> None:
    with patch("main.RarbgClient") as client_cls:
        client_cls.return_value.find.return_value = [RESULT]
        main.main(["tt0111161", "--config", _config_file(tmp_path), "--best"])

    out = capsys.readouterr().out
    assert "Movie.2020.1080p.WEB" in out


def test_main_exits_when_nothing_found(tmp_path) -> None:
    with patch("main.RarbgClient") as client_cls:
        client_cls.return_value.find.return_value = [RESULT]
        with pytest.raises(SystemExit):
            main.main(["tt0111161", "--config", _config_file(tmp_path), "--quality", "720p"])


def test_main_exits_on_search_error(tmp_path) -> None:
    with patch("main.RarbgClient") as client_cls:
        client_cls.return_value.find.side_effect = SearchError("Bad GET response: 500")
        with pytest.raises(SystemExit, match="500"):
            main.main(["tt0944947", "--season", "1", "--episode", "2", "--config", _config_file(tmp_path)])


def test_main_best_honours_quality(tmp_path, capsys) -> None:
    uhd = Result(name="Movie.2020.2160p.WEB", quality="2160p", info_hash="1" * 40, magnet_url="magnet:uhd", seeders=3)
    with patch("main.RarbgClient") as client_cls:
        client_cls.return_value.find.return_value = [RESULT, uhd]
        main.main(["tt0111161", "--config", _config_file(tmp_path), "--best", "--quality", "2160p"])

    out = capsys.readouterr().out
    assert "Movie.2020.2160p.WEB" in out
    assert "Movie.2020.1080p.WEB" not in out
    client_cls.return_value.find.assert_called_once_with("tt0111161", None, None)
