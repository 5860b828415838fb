#!/usr/bin/env python3
from __future__ import annotations

"""
Main entry point for the Magnet Finder CLI.

This module keeps the pace brisk: load the config, ask the indexer for
magnets matching an IMDb ID, and print what survived the filters.
"""

import argparse
import logging
from typing import Any, List, Optional

from magnet_finder.cache import Cache, InMemoryCache, JsonFileCache
from magnet_finder.config import AppConfig, ConfigError, ConfigLoader
from magnet_finder.finder import TorrentFinder
from magnet_finder.meta import OMDBClient
from magnet_finder.models import QUALITIES, Meta, Result, format_size
from magnet_finder.rarbg import RarbgClient, SearchError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Build and parse the CLI arguments.

    Parameters
    ----------
    argv : list[str], optional
        Arguments to parse instead of ``sys.argv``.

    Returns
    -------
    argparse.Namespace
        The parsed arguments, ready for a night out with the main routine.
    """

    parser = argparse.ArgumentParser(description="Find magnet links for a movie or TV episode by IMDb ID.")
    parser.add_argument("imdb_id", help="IMDb ID, e.g. tt0111161.")
    parser.add_argument("--season", type=int, help="Season number (requires --episode).")
    parser.add_argument("--episode", type=int, help="Episode number (requires --season).")
    parser.add_argument("--config", default="config.json", help="Path to the JSON configuration file.")

    parser.add_argument("--quality", choices=QUALITIES, help="Only show results of this quality.")
    parser.add_argument("--best", action="store_true", help="Print only the single best result.")
    parser.add_argument("--base-url", help="Override the torrentapi base URL for this run.")
    parser.add_argument("--timeout", type=float, help="Override the HTTP timeout in seconds.")
    parser.add_argument("--cache-age", type=float, help="Override the cache freshness window in seconds.")
    parser.add_argument("--no-cache", action="store_true", help="Keep results in memory only for this run.")

    parser.add_argument("--debug", action="store_true", help="Enable debug logging regardless of config.")
    args = parser.parse_args(argv)

    if (args.season is None) != (args.episode is None):
        parser.error("--season and --episode must be given together")
    return args


def configure_logging(config: AppConfig, debug: bool) -> None:
    """
    Funnel the logging level into place.

    Parameters
    ----------
    config : AppConfig
        Freshly loaded configuration with its chosen verbosity.
    debug : bool
        When ``True`` we skip straight to DEBUG.
    """

    level_name = "DEBUG" if debug else config.logging.level.upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """
    Gather CLI overrides into a single place.

    Parameters
    ----------
    args : argparse.Namespace
        Command-line arguments that may contain last-minute whims.

    Returns
    -------
    dict[str, Any]
        A mapping of override keys to values, ready for the config mixer.
    """

    return {
        "base_url": args.base_url,
        "request_timeout": args.timeout,
        "cache_age": args.cache_age,
        "no_cache": args.no_cache,
    }


def build_cache(config: AppConfig) -> Cache:
    if config.cache.path:
        return JsonFileCache(config.cache.path, max_age=config.rarbg.cache_age)
    return InMemoryCache(max_age=config.rarbg.cache_age)


def format_result(index: int, result: Result) -> str:
    return (
        f"{index}. [{result.quality}] {result.name} | seeds: {result.seeders} | "
        f"size: {format_size(result.size)}\n   {result.magnet_url}"
    )


def describe_target(imdb_id: str, meta: Optional[Meta], season: Optional[int], episode: Optional[int]) -> str:
    label = imdb_id
    if meta and meta.title:
        label = f"{meta.title} ({meta.year})" if meta.year else meta.title
    if season is not None and episode is not None:
        label += f" S{season:02d}E{episode:02d}"
    return label


def main(argv: Optional[List[str]] = None) -> None:
    """
    Run the CLI workflow.

    Steps
    -----
    1. Parse CLI arguments like a polite bartender.
    2. Load config.
    3. Ask the indexer for magnets and print the ones worth having.
    """

    args = parse_args(argv)

    loader = ConfigLoader(args.config)
    try:
        config = loader.load()
        config = ConfigLoader.apply_overrides(config, collect_overrides(args))
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc

    configure_logging(config, args.debug)

    client = RarbgClient(config.rarbg, build_cache(config))
    metadata = OMDBClient(config.omdb) if config.omdb else None
    finder = TorrentFinder(client, metadata)

    meta = finder.describe(args.imdb_id, episode=args.season is not None)
    logging.info("Searching torrentapi for: %s", describe_target(args.imdb_id, meta, args.season, args.episode))

    try:
        results = finder.find_candidates(args.imdb_id, args.season, args.episode)
    except SearchError as exc:
        raise SystemExit(f"ERROR: {exc}") from exc

    if args.best:
        best = finder.pick_best(results, args.quality)
        results = [best] if best else []
    elif args.quality:
        results = [result for result in results if result.quality == args.quality]

    if not results:
        logging.error("No usable results. The title may not be indexed, or try another quality.")
        raise SystemExit("ERROR: No results found.")

    for index, result in enumerate(results, start=1):
        print(format_result(index, result))

    logging.info("Done.")


if __name__ == "__main__":
    main()
