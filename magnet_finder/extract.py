from __future__ import annotations

"""
Turns torrentapi JSON into Result objects.

Upstream is generous with junk: titles without a resolution, magnets with
mangled hashes, missing sizes. Bad entries are dropped one by one, the rest of
the batch carries on.
"""

import json
import logging
import re
from typing import Any, Iterable, List, Optional, Union

from .models import QUALITIES, Result

INFO_HASH_LENGTH = 40

_MAGNET_INFO_HASH = re.compile(r"btih:([0-9A-Fa-f]+)&?")

LOGGER = logging.getLogger(__name__)


def classify_quality(title: str) -> Optional[str]:
    """
    Find the resolution marker in a release title.

    Parameters
    ----------
    title : str
        Release name, e.g. ``Movie.Name.2020.1080p.WEB``.

    Returns
    -------
    str | None
        ``720p``, ``1080p`` or ``2160p`` (checked in that order), or ``None``
        when the title carries none of them.
    """

    for quality in QUALITIES:
        if quality in title:
            return quality
    return None


def extract_info_hash(magnet: str) -> Optional[str]:
    """
    Pull the hex info hash out of a magnet URI.

    Parameters
    ----------
    magnet : str
        Magnet link as returned by the indexer.

    Returns
    -------
    str | None
        Lowercase 40-character hash, or ``None`` if the link has no hex
        ``btih`` or its length is off.
    """

    match = _MAGNET_INFO_HASH.search(magnet or "")
    if not match:
        return None
    info_hash = match.group(1).lower()
    if len(info_hash) != INFO_HASH_LENGTH:
        return None
    return info_hash


def _safe_count(value: Any) -> int:
    """Coerce upstream counters to a non-negative int, 0 when hopeless."""

    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return number if number > 0 else 0


def _torrent_entries(payload: Any) -> Iterable[Any]:
    if not isinstance(payload, dict):
        return []
    entries = payload.get("torrent_results")
    if not isinstance(entries, list):
        return []
    return entries


def extract_results(payload: Union[dict, str, bytes]) -> List[Result]:
    """
    Build the normalized result list from a search response.

    Parameters
    ----------
    payload : dict | str | bytes
        Either the decoded JSON object or the raw response body.

    Returns
    -------
    list[Result]
        Entries with a known quality and a valid info hash, in upstream order.
        Empty when ``torrent_results`` is missing or empty.

    Raises
    ------
    ValueError
        If ``payload`` is text that isn't JSON.
    """

    if isinstance(payload, (str, bytes, bytearray)):
        payload = json.loads(payload)

    results: List[Result] = []
    for entry in _torrent_entries(payload):
        if not isinstance(entry, dict):
            continue

        title = str(entry.get("title") or "")
        quality = classify_quality(title)
        if quality is None:
            LOGGER.debug("Skipping %r: no recognised quality", title)
            continue

        magnet = str(entry.get("download") or "")
        info_hash = extract_info_hash(magnet)
        if info_hash is None:
            LOGGER.debug("Skipping %r: bad info hash in magnet", title)
            continue

        results.append(
            Result(
                name=title,
                quality=quality,
                info_hash=info_hash,
                magnet_url=magnet,
                size=_safe_count(entry.get("size")),
                seeders=_safe_count(entry.get("seeders")),
            )
        )

    return results
