from __future__ import annotations

"""
OMDb lookups, so an IMDb ID can be shown with a human name attached.
"""

import logging
from typing import Any, Dict

import requests

from .config import OMDBConfig
from .models import Meta

LOGGER = logging.getLogger(__name__)


class MetaError(RuntimeError):
    """Raised when OMDb can't or won't describe an ID."""


def _lenient_int(value: Any) -> int:
    """OMDb sends numbers as strings and "N/A" for blanks. Both end up as ints."""

    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def _parse_year(value: Any) -> int:
    # Series report ranges like "2011–2019" or "2015–".
    text = str(value or "").replace("–", "-")
    return _lenient_int(text.split("-")[0])


def parse_meta(payload: Dict[str, Any]) -> Meta:
    """
    Convert an OMDb JSON object into :class:`Meta`.

    Parameters
    ----------
    payload : dict[str, Any]
        Decoded response body.

    Returns
    -------
    Meta
        Title, year, season and episode. Missing numbers become 0.
    """

    return Meta(
        title=str(payload.get("Title") or ""),
        year=_parse_year(payload.get("Year")),
        season=_lenient_int(payload.get("Season")),
        episode=_lenient_int(payload.get("Episode")),
    )


class OMDBClient:
    """Minimal OMDb client: one GET per lookup, no caching."""

    def __init__(self, config: OMDBConfig, session: requests.Session | None = None):
        """
        Parameters
        ----------
        config : OMDBConfig
            API key, endpoint and timeout.
        session : requests.Session, optional
            Session to reuse; a fresh one is created otherwise.
        """

        self.config = config
        self._session = session or requests.Session()

    def get_movie(self, imdb_id: str) -> Meta:
        return self._request_meta("movie", imdb_id)

    def get_episode(self, imdb_id: str) -> Meta:
        return self._request_meta("episode", imdb_id)

    def _request_meta(self, kind: str, imdb_id: str) -> Meta:
        """
        Fetch and parse a single OMDb record.

        Parameters
        ----------
        kind : str
            ``movie`` or ``episode``.
        imdb_id : str
            IMDb ID to look up.

        Returns
        -------
        Meta
            Parsed metadata.

        Raises
        ------
        MetaError
            On transport failure, bad status, non-JSON body or an OMDb-level error.
        """

        params = {"i": imdb_id, "type": kind, "apikey": self.config.api_key}
        try:
            response = self._session.get(self.config.url, params=params, timeout=self.config.request_timeout)
        except requests.RequestException as exc:
            raise MetaError(f"OMDb request failed: {exc}") from exc

        if response.status_code != 200:
            raise MetaError(f"Got http error {response.status_code} from OMDb")

        try:
            payload = response.json()
        except ValueError as exc:
            raise MetaError("OMDb response is not JSON") from exc

        if not isinstance(payload, dict):
            raise MetaError("OMDb response is not an object")
        if str(payload.get("Response", "True")).lower() == "false":
            raise MetaError(f"OMDb couldn't find {imdb_id}: {payload.get('Error', 'unknown error')}")

        meta = parse_meta(payload)
        LOGGER.debug("OMDb: %s -> %s (%s)", imdb_id, meta.title, meta.year)
        return meta
