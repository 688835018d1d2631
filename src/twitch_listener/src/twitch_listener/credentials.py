"""OAuth credential ownership: validation, refresh and persistence of the token pair.

The manager is the only writer of the tokens. Every outbound call reads the
current pair through it, so a refresh is picked up by the next request.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import requests
from dotenv import set_key
from pydantic import BaseModel, ConfigDict, ValidationError

VALIDATE_URL = "https://id.twitch.tv/oauth2/validate"
TOKEN_URL = "https://id.twitch.tv/oauth2/token"
ACCESS_TOKEN_KEY = "TWITCH_ACCESS_TOKEN"
REFRESH_TOKEN_KEY = "TWITCH_REFRESH_TOKEN"
DEFAULT_TIMEOUT_SECONDS = 30.0
REVALIDATE_INTERVAL_SECONDS = 3600.0

logger = logging.getLogger("twitch_listener.credentials")


class TokenRefreshError(RuntimeError):
    """Raised when the refresh token can no longer be exchanged; the bot cannot continue."""


class Credentials(BaseModel):
    """Immutable snapshot of the token pair."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    client_id: str


class _TokenResponse(BaseModel):
    access_token: str
    refresh_token: str


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TokenStore:
    """Dotenv-backed store that rewrites only the two token entries."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def save(self, credentials: Credentials) -> None:
        """Write the token pair, leaving every other line untouched."""
        set_key(self.path, ACCESS_TOKEN_KEY, credentials.access_token, quote_mode="never")
        set_key(self.path, REFRESH_TOKEN_KEY, credentials.refresh_token, quote_mode="never")


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------


class CredentialManager:
    """Hold the current token pair and keep it valid."""

    def __init__(
        self,
        credentials: Credentials,
        client_secret: str,
        store: TokenStore | None = None,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._credentials = credentials
        self._client_secret = client_secret
        self._store = store
        self._timeout = timeout_seconds

    @property
    def credentials(self) -> Credentials:
        """Return the latest token pair."""
        return self._credentials

    def helix_headers(self) -> dict[str, str]:
        """Return the auth headers for one Helix request."""
        credentials = self._credentials
        return {
            "Authorization": f"Bearer {credentials.access_token}",
            "Client-Id": credentials.client_id,
        }

    async def validate(self) -> bool:
        """Check the access token; refresh it when the platform rejects it.

        Returns:
            True when the token was valid as-is.

        Raises:
            TokenRefreshError: The token was rejected and could not be refreshed.

        """
        try:
            response = await asyncio.to_thread(self._request_validation)
        except requests.RequestException:
            logger.exception("Token validation request failed; keeping the current token")
            return False
        if response.ok:
            logger.info("OAuth token is valid.")
            return True
        logger.warning("Invalid OAuth token (%s). Attempting to refresh...", response.status_code)
        await self.refresh()
        return False

    async def refresh(self) -> Credentials:
        """Exchange the refresh token for a new pair, then persist it.

        Raises:
            TokenRefreshError: Network error, rejected refresh token or malformed body.

        """
        try:
            credentials = await asyncio.to_thread(self._request_refresh)
        except TokenRefreshError as exc:
            logger.error("Error refreshing the token: %s", exc)  # noqa: TRY400
            raise
        self._credentials = credentials
        logger.info("Token successfully refreshed.")
        self._persist(credentials)
        return credentials

    async def revalidate_forever(self, interval_seconds: float = REVALIDATE_INTERVAL_SECONDS) -> None:
        """Validate the token periodically while the bot runs."""
        while True:
            await asyncio.sleep(interval_seconds)
            await self.validate()

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _request_validation(self) -> requests.Response:
        return requests.get(
            VALIDATE_URL,
            headers={"Authorization": f"OAuth {self._credentials.access_token}"},
            timeout=self._timeout,
        )

    def _request_refresh(self) -> Credentials:
        current = self._credentials
        try:
            response = requests.post(
                TOKEN_URL,
                data={
                    "client_id": current.client_id,
                    "client_secret": self._client_secret,
                    "grant_type": "refresh_token",
                    "refresh_token": current.refresh_token,
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TokenRefreshError(f"refresh request failed: {exc}") from exc  # noqa: TRY003, EM102
        if not response.ok:
            detail = _error_message(response)
            raise TokenRefreshError(f"refresh rejected ({response.status_code}): {detail}")  # noqa: TRY003, EM102
        try:
            tokens = _TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TokenRefreshError("refresh response is malformed") from exc  # noqa: TRY003, EM101
        return current.model_copy(update=tokens.model_dump())

    def _persist(self, credentials: Credentials) -> None:
        if self._store is None:
            return
        try:
            self._store.save(credentials)
        except OSError:
            logger.exception("Refreshed tokens could not be written to %s", self._store.path)
        else:
            logger.info("%s updated.", self._store.path)


def _error_message(response: requests.Response) -> str:
    """Return the platform's error message, falling back to the raw body."""
    try:
        payload: Any = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text
