from __future__ import annotations

"""
torrentapi (RARBG) client logic.

This module turns an IMDb ID into a pubapi_v2 search, minding the token, the
rate limit and the cache, and returns the magnets worth keeping.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

import requests

from .auth import API_PATH, TokenError, TokenManager
from .cache import Cache, CacheError
from .config import RarbgConfig
from .extract import extract_results
from .models import Result
from .ratelimit import RateLimiter

CACHE_TAG = "RARBG"

LOGGER = logging.getLogger(__name__)


class SearchError(RuntimeError):
    """Raised when the search request itself fails."""


def episode_search_string(season: int, episode: int) -> str:
    """Format ``S##E##``, zero-padded to two digits."""

    return f"S{season:02d}E{episode:02d}"


def episode_query_id(imdb_id: str, season: int, episode: int) -> str:
    """Cache identity for an episode. Raw numbers, no padding."""

    return f"{imdb_id}:{season}:{episode}"


def cache_key(query_id: str) -> str:
    return f"{query_id}-{CACHE_TAG}"


class RarbgClient:
    """Thin wrapper around requests.Session dedicated to the torrentapi endpoint."""

    def __init__(
        self,
        config: RarbgConfig,
        cache: Cache,
        limiter: Optional[RateLimiter] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Parameters
        ----------
        config : RarbgConfig
            Connection details and etiquette for torrentapi.
        cache : Cache
            Where results are looked up and stored.
        limiter : RateLimiter, optional
            Request gate. Each client gets its own unless one is passed in.
        clock : callable, optional
            Wall-clock source for cache freshness and token age.
        """

        self.config = config
        self._cache = cache
        self._clock = clock
        self._limiter = limiter or RateLimiter()
        self._session_local = threading.local()
        self._tokens = TokenManager(config, self._limiter, self._get_session, clock=clock)

    def _make_session(self) -> requests.Session:
        """
        Create a configured requests session.

        Returns
        -------
        requests.Session
            Session seeded with the configured User-Agent and headers.
        """

        session = requests.Session()
        session.headers.update({"User-Agent": self.config.user_agent, "Accept": "*/*"})
        return session

    def _get_session(self) -> requests.Session:
        """
        Return a thread-local session instance.
        """

        session = getattr(self._session_local, "session", None)
        if session is None:
            session = self._make_session()
            self._session_local.session = session
        return session

    def find_movie(self, imdb_id: str) -> List[Result]:
        """
        Look up magnets for a movie.

        Parameters
        ----------
        imdb_id : str
            IMDb ID such as ``tt0111161``.

        Returns
        -------
        list[Result]
            Matching results, seeder-sorted by upstream. Empty when nothing
            matched or no token could be obtained.

        Raises
        ------
        SearchError
            If the search request fails or returns a bad status.
        """

        return self._find(imdb_id, {"search_imdb": imdb_id})

    def find_episode(self, imdb_id: str, season: int, episode: int) -> List[Result]:
        """
        Look up magnets for a single TV episode.

        Parameters
        ----------
        imdb_id : str
            IMDb ID of the show.
        season : int
            Season number.
        episode : int
            Episode number within the season.

        Returns
        -------
        list[Result]
            Same contract as :meth:`find_movie`.

        Raises
        ------
        SearchError
            If the search request fails or returns a bad status.
        """

        query_id = episode_query_id(imdb_id, season, episode)
        params = {"search_imdb": imdb_id, "search_string": episode_search_string(season, episode)}
        return self._find(query_id, params)

    def find(self, imdb_id: str, season: Optional[int] = None, episode: Optional[int] = None) -> List[Result]:
        """Dispatch to :meth:`find_episode` when both numbers are given, else :meth:`find_movie`."""

        if season is not None and episode is not None:
            return self.find_episode(imdb_id, season, episode)
        return self.find_movie(imdb_id)

    def _find(self, query_id: str, query_params: Dict[str, str]) -> List[Result]:
        key = cache_key(query_id)

        cached = self._cached(key)
        if cached is not None:
            LOGGER.debug("Cache hit for %s (%d results)", key, len(cached))
            return cached

        try:
            token = self._tokens.ensure_valid()
        except TokenError as exc:
            LOGGER.error("Couldn't refresh token: %s", exc)
            return []

        url = self.config.base_url.rstrip("/") + API_PATH
        params = self._build_params(token, query_params)

        with self._limiter.slot():
            try:
                response = self._get_session().get(url, params=params, timeout=self.config.request_timeout)
            except requests.RequestException as exc:
                # requests echoes the full URL, token included, in its messages.
                raise SearchError(f"Couldn't GET {url}: {type(exc).__name__}") from exc

        if response.status_code != 200:
            raise SearchError(f"Bad GET response: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise SearchError(f"Couldn't parse response body: {response.text[:200]!r}") from exc

        results = extract_results(payload)
        LOGGER.info("torrentapi returned %d usable results for %s", len(results), query_id)

        try:
            self._cache.set(key, results)
        except CacheError as exc:
            LOGGER.error("Couldn't cache torrents: %s", exc)

        return results

    def _cached(self, key: str) -> Optional[List[Result]]:
        try:
            entry = self._cache.get(key)
        except CacheError as exc:
            LOGGER.warning("Cache read failed for %s: %s", key, exc)
            return None

        if entry is None or not entry.is_fresh(self._clock(), self.config.cache_age):
            return None
        return list(entry.value)

    def _build_params(self, token: str, query_params: Dict[str, str]) -> Dict[str, str]:
        """
        Build the pubapi_v2 search payload.

        Parameters
        ----------
        token : str
            Current session token.
        query_params : dict[str, str]
            ``search_imdb`` and, for episodes, ``search_string``.

        Returns
        -------
        dict[str, str]
            Query parameters ready for sending.
        """

        params = {
            "app_id": self.config.app_id,
            "mode": "search",
            "sort": "seeders",
            "format": "json_extended",
            "ranked": "0",
            "token": token,
        }
        params.update(query_params)
        return params
