from __future__ import annotations

"""Tests for configuration helpers, because even the rodeo clown needs a safety net."""

import json
import tempfile
import unittest
from pathlib import Path

from magnet_finder.config import (
    DEFAULT_BASE_URL,
    AppConfig,
    CacheConfig,
    ConfigError,
    ConfigLoader,
    LoggingConfig,
    RarbgConfig,
)


class ConfigLoaderTests(unittest.TestCase):
    """Exercises ConfigLoader so the crowd doesn't boo when parsing fails."""

    def _write_config(self, data) -> Path:
        temp_dir = tempfile.mkdtemp()
        path = Path(temp_dir) / "config.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_load_valid_config(self) -> None:
        payload = {
            "rarbg": {"base_url": "http://example.com", "app_id": "myapp", "request_timeout": 3, "cache_age": 600},
            "omdb": {"api_key": "KEY"},
            "cache": {"path": "/tmp/magnets.json"},
            "logging": {"level": "debug"},
        }
        config = ConfigLoader(self._write_config(payload)).load()
        self.assertIsInstance(config, AppConfig)
        self.assertEqual(config.rarbg.base_url, "http://example.com")
        self.assertEqual(config.rarbg.app_id, "myapp")
        self.assertEqual(config.rarbg.request_timeout, 3.0)
        self.assertEqual(config.rarbg.cache_age, 600.0)
        self.assertEqual(config.omdb.api_key, "KEY")
        self.assertEqual(config.cache.path, "/tmp/magnets.json")
        self.assertEqual(config.logging.level, "DEBUG")

    def test_defaults_fill_an_empty_section(self) -> None:
        config = ConfigLoader(self._write_config({"rarbg": {}})).load()
        self.assertEqual(config.rarbg.base_url, DEFAULT_BASE_URL)
        self.assertEqual(config.rarbg.request_timeout, 5.0)
        self.assertEqual(config.rarbg.cache_age, 86400.0)
        self.assertEqual(config.rarbg.user_agent, "curl/7.47.0")
        self.assertIsNone(config.omdb)
        self.assertIsNone(config.cache.path)

    def test_missing_section_raises(self) -> None:
        loader = ConfigLoader(self._write_config({"omdb": {"api_key": "KEY"}}))
        with self.assertRaises(ConfigError):
            loader.load()

    def test_omdb_without_key_raises(self) -> None:
        loader = ConfigLoader(self._write_config({"rarbg": {}, "omdb": {"url": "http://omdb"}}))
        with self.assertRaises(ConfigError):
            loader.load()

    def test_bad_numbers_raise(self) -> None:
        for bad in ({"request_timeout": "soon"}, {"cache_age": 0}, {"cache_age": -5}):
            with self.subTest(bad=bad):
                with self.assertRaises(ConfigError):
                    RarbgConfig.from_dict(bad)

    def test_missing_file_and_bad_json(self) -> None:
        with self.assertRaises(ConfigError):
            ConfigLoader("/nonexistent/config.json").load()

        path = Path(tempfile.mkdtemp()) / "config.json"
        path.write_text("{oops", encoding="utf-8")
        with self.assertRaises(ConfigError):
            ConfigLoader(path).load()

    def test_apply_overrides_respects_none_values(self) -> None:
        config = AppConfig(
            rarbg=RarbgConfig(base_url="http://example.com", request_timeout=5.0, cache_age=100.0),
            cache=CacheConfig(path="/tmp/cache.json"),
            logging=LoggingConfig(level="INFO"),
        )

        overrides = {
            "base_url": None,  # should not override the existing URL
            "request_timeout": 9,
            "cache_age": None,  # should keep existing cache age
            "no_cache": True,
        }
        updated = ConfigLoader.apply_overrides(config, overrides)
        self.assertEqual(updated.rarbg.base_url, "http://example.com")
        self.assertEqual(updated.rarbg.request_timeout, 9.0)
        self.assertEqual(updated.rarbg.cache_age, 100.0)
        self.assertIsNone(updated.cache.path)


if __name__ == "__main__":
    unittest.main()
