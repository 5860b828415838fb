from __future__ import annotations

"""
Data models for Magnet Finder.

Small immutable values that get passed around, cached and printed. Nothing
in here talks to the network.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

QUALITY_720P = "720p"
QUALITY_1080P = "1080p"
QUALITY_2160P = "2160p"

# Checked in this order, first hit wins.
QUALITIES = (QUALITY_720P, QUALITY_1080P, QUALITY_2160P)

TOKEN_LIFETIME = 14 * 60.0


@dataclass(frozen=True)
class Result:
    """A single magnet hit, normalized and ready to hand out."""

    name: str
    quality: str
    info_hash: str
    magnet_url: str
    size: int = 0
    seeders: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Flatten the result for JSON storage.

        Returns
        -------
        dict[str, Any]
            Plain mapping, keys match the field names.
        """

        return {
            "name": self.name,
            "quality": self.quality,
            "info_hash": self.info_hash,
            "magnet_url": self.magnet_url,
            "size": self.size,
            "seeders": self.seeders,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Result":
        """
        Rebuild a result from :meth:`to_dict` output.

        Parameters
        ----------
        data : dict[str, Any]
            Mapping previously produced by ``to_dict``.

        Returns
        -------
        Result
            The same hit, back from the freezer.

        Raises
        ------
        KeyError
            If a mandatory field is missing.
        """

        return cls(
            name=data["name"],
            quality=data["quality"],
            info_hash=data["info_hash"],
            magnet_url=data["magnet_url"],
            size=int(data.get("size", 0)),
            seeders=int(data.get("seeders", 0)),
        )


@dataclass(frozen=True)
class SessionToken:
    """Upstream auth token plus the moment we received it."""

    value: str
    issued_at: float

    def is_valid(self, now: float, lifetime: float = TOKEN_LIFETIME) -> bool:
        """
        Tell whether the token may still be used at ``now``.

        Parameters
        ----------
        now : float
            Current timestamp, same clock as ``issued_at``.
        lifetime : float, optional
            Usable window in seconds. Defaults to 14 minutes, one below the
            upstream expiry.

        Returns
        -------
        bool
            ``True`` while ``now - issued_at <= lifetime``.
        """

        return bool(self.value) and now - self.issued_at <= lifetime


@dataclass(frozen=True)
class Meta:
    """Title information for a catalog ID."""

    title: str
    year: int = 0
    season: int = 0
    episode: int = 0


class MagnetFinder(Protocol):
    """Anything that can turn a catalog ID into magnet results."""

    def find_movie(self, imdb_id: str) -> List[Result]:
        ...

    def find_episode(self, imdb_id: str, season: int, episode: int) -> List[Result]:
        ...

    def find(self, imdb_id: str, season: Optional[int] = None, episode: Optional[int] = None) -> List[Result]:
        ...


class MetadataProvider(Protocol):
    """Resolves catalog IDs to titles."""

    def get_movie(self, imdb_id: str) -> Meta:
        ...

    def get_episode(self, imdb_id: str) -> Meta:
        ...


def format_size(size: Optional[int]) -> str:
    """Render a byte count the way humans like to read it."""

    if not size:
        return "?"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024.0:
            return f"{value:.1f} {unit}"
        value /= 1024.0
    return f"{value:.1f} TB"
