from __future__ import annotations

"""
High-level magnet selection logic.

Asks the indexer for magnets, asks OMDb what we are looking at, and hands the
caller a winner without breaking a sweat.
"""

import logging
from typing import List, Optional

from .meta import MetaError
from .models import MagnetFinder, Meta, MetadataProvider, Result


class TorrentFinder:
    """Wraps a MagnetFinder (and optionally a metadata source) for the CLI."""

    def __init__(self, client: MagnetFinder, metadata: Optional[MetadataProvider] = None):
        """
        Parameters
        ----------
        client : MagnetFinder
            The indexer client doing the actual searching.
        metadata : MetadataProvider, optional
            Used to put a title on the ID. Lookups are skipped without one.
        """

        self._client = client
        self._metadata = metadata

    def find_candidates(self, imdb_id: str, season: Optional[int] = None, episode: Optional[int] = None) -> List[Result]:
        """
        Pull the result list for a movie or an episode.

        Parameters
        ----------
        imdb_id : str
            IMDb ID of the movie or show.
        season : int, optional
            Season number, only together with ``episode``.
        episode : int, optional
            Episode number, only together with ``season``.

        Returns
        -------
        list[Result]
            Whatever the indexer coughed up.
        """

        results = self._client.find(imdb_id, season, episode)
        logging.debug("Finder received %d results", len(results))
        return results

    def describe(self, imdb_id: str, episode: bool = False) -> Optional[Meta]:
        """
        Resolve the title behind an IMDb ID.

        Parameters
        ----------
        imdb_id : str
            ID to resolve.
        episode : bool, optional
            Look the ID up as an episode rather than a movie.

        Returns
        -------
        Meta | None
            The metadata, or ``None`` when no source is configured or the lookup failed.
        """

        if self._metadata is None:
            return None
        try:
            if episode:
                return self._metadata.get_episode(imdb_id)
            return self._metadata.get_movie(imdb_id)
        except MetaError as exc:
            logging.warning("Metadata lookup for %s failed: %s", imdb_id, exc)
            return None

    @staticmethod
    def pick_best(results: List[Result], quality: Optional[str] = None) -> Optional[Result]:
        """
        Select the top result.

        Parameters
        ----------
        results : list[Result]
            Results in upstream order (most seeders first).
        quality : str, optional
            Only consider results of this quality.

        Returns
        -------
        Result | None
            The first eligible result, or ``None`` if there is none.
        """

        for result in results:
            if quality is None or result.quality == quality:
                logging.debug("Best result: %s | seeders=%s", result.name, result.seeders)
                return result
        return None
