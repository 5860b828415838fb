from __future__ import annotations

"""
Configuration plumbing for Magnet Finder.

Flips tables if anything looks shady.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_BASE_URL = "https://torrentapi.org"
DEFAULT_APP_ID = "magnet_finder"
DEFAULT_USER_AGENT = "curl/7.47.0"
DEFAULT_REQUEST_TIMEOUT = 5.0
DEFAULT_CACHE_AGE = 24 * 60 * 60.0

DEFAULT_OMDB_URL = "https://www.omdbapi.com/"
DEFAULT_OMDB_TIMEOUT = 10.0


class ConfigError(Exception):
    """Raised when configuration loading faceplants."""


def _positive_float(data: dict[str, Any], key: str, default: float) -> float:
    raw = data.get(key, default)
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid number for {key}: {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


@dataclass
class RarbgConfig:
    """Settings for the torrentapi indexer."""

    base_url: str = DEFAULT_BASE_URL
    app_id: str = DEFAULT_APP_ID
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    cache_age: float = DEFAULT_CACHE_AGE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RarbgConfig":
        """
        Build an instance from raw configuration data.

        Parameters
        ----------
        data : dict[str, Any]
            Chunk of config JSON scoped to the indexer.

        Returns
        -------
        RarbgConfig
            Fully hydrated config object ready for that first HTTP handshake.

        Raises
        ------
        ConfigError
            If a timeout or cache age is not a positive number, or the base URL is blank.
        """

        base_url = str(data.get("base_url", DEFAULT_BASE_URL)).strip()
        if not base_url:
            raise ConfigError("Missing torrentapi setting: base_url")

        return cls(
            base_url=base_url,
            app_id=str(data.get("app_id", DEFAULT_APP_ID)),
            user_agent=str(data.get("user_agent", DEFAULT_USER_AGENT)),
            request_timeout=_positive_float(data, "request_timeout", DEFAULT_REQUEST_TIMEOUT),
            cache_age=_positive_float(data, "cache_age", DEFAULT_CACHE_AGE),
        )


@dataclass
class OMDBConfig:
    """OMDb credentials, used to put a name on an IMDb ID."""

    api_key: str
    url: str = DEFAULT_OMDB_URL
    request_timeout: float = DEFAULT_OMDB_TIMEOUT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OMDBConfig":
        """
        Build an OMDBConfig from a JSON blob.

        Parameters
        ----------
        data : dict[str, Any]
            Configuration chunk dedicated to OMDb.

        Returns
        -------
        OMDBConfig
            The settings OMDBClient expects.

        Raises
        ------
        ConfigError
            If the API key is missing, because OMDb won't talk to strangers.
        """

        try:
            api_key = data["api_key"]
        except KeyError as exc:
            raise ConfigError(f"Missing OMDb setting: {exc.args[0]}") from exc

        return cls(
            api_key=api_key,
            url=data.get("url", DEFAULT_OMDB_URL),
            request_timeout=_positive_float(data, "request_timeout", DEFAULT_OMDB_TIMEOUT),
        )


@dataclass
class CacheConfig:
    """Where search results are kept. No path means memory only."""

    path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "CacheConfig":
        if not data:
            return cls()
        return cls(path=data.get("path") or None)


@dataclass
class LoggingConfig:
    """Lightweight logging configuration for when INFO just isn't loud enough."""

    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "LoggingConfig":
        """
        Create a logging config from a dict.

        Parameters
        ----------
        data : dict[str, Any] | None
            Optional logging section. ``None`` means we stick with INFO like responsible adults.

        Returns
        -------
        LoggingConfig
            The final logging level wrapped in a dataclass hug.
        """

        if data is None:
            return cls()
        return cls(level=str(data.get("level", "INFO")).upper())


@dataclass
class AppConfig:
    """Aggregate configuration: indexer, metadata, cache and logging in one bundle."""

    rarbg: RarbgConfig = field(default_factory=RarbgConfig)
    omdb: Optional[OMDBConfig] = None
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        """
        Stitch together the full configuration set from JSON.

        Parameters
        ----------
        data : dict[str, Any]
            Entire configuration payload.

        Returns
        -------
        AppConfig
            Everything the app needs to know, tied up in a dataclass bow.

        Raises
        ------
        ConfigError
            If the ``rarbg`` section is missing or any section is malformed.
        """

        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a JSON object")

        try:
            rarbg_data = data["rarbg"]
        except KeyError as exc:
            raise ConfigError(f"Missing top-level section: {exc.args[0]}") from exc

        omdb_data = data.get("omdb")

        return cls(
            rarbg=RarbgConfig.from_dict(rarbg_data or {}),
            omdb=OMDBConfig.from_dict(omdb_data) if omdb_data else None,
            cache=CacheConfig.from_dict(data.get("cache")),
            logging=LoggingConfig.from_dict(data.get("logging")),
        )


class ConfigLoader:
    """Loads application configuration from JSON files and delivers it."""

    def __init__(self, path: str | Path):
        """
        Parameters
        ----------
        path : str | Path
            File system path where the config JSON resides, probably fell down the couch.
        """

        self.path = Path(path)

    def load(self) -> AppConfig:
        """
        Read and validate the configuration file.

        Returns
        -------
        AppConfig
            The fully parsed configuration bundle.

        Raises
        ------
        ConfigError
            When the file is missing or invalid.
        """

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigError(f"Configuration file not found: {self.path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON configuration: {exc.msg}") from exc

        return AppConfig.from_dict(payload)

    @staticmethod
    def apply_overrides(config: AppConfig, overrides: dict[str, Any]) -> AppConfig:
        """
        Update the in-memory configuration with CLI overrides.

        Parameters
        ----------
        config : AppConfig
            The baseline configuration, straight from the JSON file.
        overrides : dict[str, Any]
            CLI overrides. ``None`` values leave the setting alone.

        Returns
        -------
        AppConfig
            The same object, adjusted in place just for this whim.

        Raises
        ------
        ConfigError
            If a numeric override is not positive.
        """

        rarbg = config.rarbg

        if overrides.get("base_url"):
            rarbg.base_url = overrides["base_url"]
        if overrides.get("request_timeout") is not None:
            rarbg.request_timeout = _positive_float(overrides, "request_timeout", rarbg.request_timeout)
        if overrides.get("cache_age") is not None:
            rarbg.cache_age = _positive_float(overrides, "cache_age", rarbg.cache_age)
        if overrides.get("no_cache"):
            config.cache.path = None

        return config
