from __future__ import annotations

"""
Session token handling for the torrentapi endpoint.

The API hands out tokens that die after fifteen minutes. We keep one per
client, treat it as stale a minute early, and fetch a new one through the same
rate-limit gate as the searches.
"""

import logging
import time
from typing import Callable, Optional

import requests

from .config import RarbgConfig
from .models import TOKEN_LIFETIME, SessionToken
from .ratelimit import RateLimiter

API_PATH = "/pubapi_v2.php"

LOGGER = logging.getLogger(__name__)


class TokenError(RuntimeError):
    """Raised when a fresh token cannot be obtained."""


class TokenManager:
    """Keeps a valid token around and refreshes it when asked nicely."""

    def __init__(
        self,
        config: RarbgConfig,
        limiter: RateLimiter,
        get_session: Callable[[], requests.Session],
        clock: Callable[[], float] = time.time,
        lifetime: float = TOKEN_LIFETIME,
    ):
        """
        Parameters
        ----------
        config : RarbgConfig
            Base URL, app id and timeout for the token endpoint.
        limiter : RateLimiter
            The gate shared with the search requests.
        get_session : callable
            Returns the ``requests.Session`` to use for the calling thread.
        clock : callable, optional
            Time source used to stamp and age tokens.
        lifetime : float, optional
            Seconds a token is trusted for.
        """

        self.config = config
        self._limiter = limiter
        self._get_session = get_session
        self._clock = clock
        self._lifetime = lifetime
        self._token: Optional[SessionToken] = None

    @property
    def token(self) -> Optional[SessionToken]:
        return self._token

    def is_valid(self) -> bool:
        token = self._token
        return token is not None and token.is_valid(self._clock(), self._lifetime)

    def ensure_valid(self) -> str:
        """
        Return a usable token value, refreshing it first when needed.

        Returns
        -------
        str
            The current token.

        Raises
        ------
        TokenError
            If the refresh failed. Any earlier token is left in place.
        """

        token = self._token
        if token is not None and token.is_valid(self._clock(), self._lifetime):
            return token.value

        with self._limiter.slot():
            # Someone may have refreshed while we queued for the gate.
            token = self._token
            if token is not None and token.is_valid(self._clock(), self._lifetime):
                return token.value

            value = self._request_token()
            self._token = SessionToken(value=value, issued_at=self._clock())
            LOGGER.debug("Obtained a new torrentapi token")
            return value

    def _request_token(self) -> str:
        """
        Ask the API for a new token. Caller must hold the rate-limit gate.

        Returns
        -------
        str
            Non-empty token string.

        Raises
        ------
        TokenError
            On transport failure, bad status, unreadable JSON or empty token.
        """

        url = self.config.base_url.rstrip("/") + API_PATH
        params = {"app_id": self.config.app_id, "get_token": "get_token"}
        try:
            response = self._get_session().get(url, params=params, timeout=self.config.request_timeout)
        except requests.RequestException as exc:
            raise TokenError(f"Couldn't GET {url}: {exc}") from exc

        if response.status_code != 200:
            raise TokenError(f"Bad token response: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise TokenError("Token response is not JSON") from exc

        token = payload.get("token") if isinstance(payload, dict) else None
        if not token or not isinstance(token, str):
            raise TokenError("Token is empty")
        return token
