from __future__ import annotations

"""
Convenience imports for the Magnet Finder package.

Reach important stuff so downstream code can grab them
without complaining.
"""

from .cache import Cache, CacheEntry, CacheError, InMemoryCache, JsonFileCache
from .config import AppConfig, ConfigError, ConfigLoader, OMDBConfig, RarbgConfig
from .finder import TorrentFinder
from .meta import MetaError, OMDBClient
from .models import Meta, Result
from .rarbg import RarbgClient, SearchError

__all__ = [
    "AppConfig",
    "Cache",
    "CacheEntry",
    "CacheError",
    "ConfigError",
    "ConfigLoader",
    "InMemoryCache",
    "JsonFileCache",
    "Meta",
    "MetaError",
    "OMDBClient",
    "OMDBConfig",
    "RarbgClient",
    "RarbgConfig",
    "Result",
    "SearchError",
    "TorrentFinder",
]
