"""scholarscope.sources.orcid_auth
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
OAuth2 client-credentials token for the ORCID Public API.

The token is cached until ``expiry - safety_margin``. Concurrent callers that
find it stale share a single in-flight exchange instead of each requesting a
new token.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable, Optional

import requests

from ..config import ORCID_TOKEN_URL
from ..errors import AuthError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600
SAFETY_MARGIN_SECONDS = 300


class TokenProvider:
    """Obtain and cache a bearer token for the registry."""

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        *,
        token_url: str = ORCID_TOKEN_URL,
        safety_margin: float = SAFETY_MARGIN_SECONDS,
        timeout: float = 30,
        clock: Callable[[], float] = time.time,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.safety_margin = safety_margin
        self.timeout = timeout
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._inflight: Optional[Future] = None
        self._lock = threading.Lock()

    def get_access_token(self) -> str:
        """Return a valid token, exchanging credentials when the cached one is stale."""
        with self._lock:
            if self._token and self._clock() < self._expires_at - self.safety_margin:
                return self._token
            owner = self._inflight is None
            if owner:
                self._inflight = Future()
            inflight = self._inflight

        if not owner:
            return inflight.result()

        try:
            token, expires_in = self._exchange_credentials()
        except Exception as exc:
            with self._lock:
                self._inflight = None
            inflight.set_exception(exc)
            raise

        with self._lock:
            self._token = token
            self._expires_at = self._clock() + expires_in
            self._inflight = None
        inflight.set_result(token)
        return token

    def invalidate(self) -> None:
        """Forget the cached token (e.g. after the registry answered 401)."""
        with self._lock:
            self._token = None
            self._expires_at = 0.0

    def _exchange_credentials(self):
        if not self.client_id or not self.client_secret:
            raise AuthError(
                "ORCID credentials not configured. Set ORCID_CLIENT_ID and ORCID_CLIENT_SECRET."
            )

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": "/read-public",
            "grant_type": "client_credentials",
        }

        logger.info("Requesting ORCID access token")
        try:
            response = requests.post(self.token_url, headers=headers, data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise AuthError(f"ORCID authentication failed: {e}") from e

        if response.status_code != 200:
            raise AuthError(f"Failed to get ORCID access token: {response.status_code}")

        try:
            token_data = response.json()
        except ValueError as e:
            raise AuthError("ORCID token endpoint returned invalid JSON") from e

        token = token_data.get("access_token")
        if not token:
            raise AuthError("Failed to obtain access token from ORCID")

        try:
            expires_in = float(token_data.get("expires_in") or DEFAULT_EXPIRES_IN)
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN
        return token, expires_in
