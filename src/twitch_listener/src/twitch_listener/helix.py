"""Helix REST calls: EventSub subscription, schedule lookup and chat messages.

Requests are blocking and run in a worker thread so the event loop keeps
reading the feed. Failures are logged and turned into a degraded result.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import requests

from command_router.models import CHAT_MESSAGE_EVENT_TYPE

if TYPE_CHECKING:
    from twitch_listener.credentials import CredentialManager

HELIX_BASE_URL = "https://api.twitch.tv/helix"
EVENTSUB_SUBSCRIPTIONS_URL = f"{HELIX_BASE_URL}/eventsub/subscriptions"
SCHEDULE_URL = f"{HELIX_BASE_URL}/schedule"
CHAT_MESSAGES_URL = f"{HELIX_BASE_URL}/chat/messages"
CHAT_MAX_LEN = 500
DEFAULT_TIMEOUT_SECONDS = 30.0

logger = logging.getLogger("twitch_listener.helix")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def chunk_text(text: str, max_len: int = CHAT_MAX_LEN) -> list[str]:
    """Split text into chat-sized parts, preferring newline then space boundaries."""
    text = text.strip()
    if not text:
        return []
    chunks = []
    while text:
        if len(text) <= max_len:
            chunks.append(text)
            break
        split_at = text.rfind("\n", 0, max_len)
        if split_at <= 0:
            split_at = text.rfind(" ", 0, max_len)
        if split_at <= 0:
            split_at = max_len
        chunks.append(text[:split_at].rstrip())
        text = text[split_at:].lstrip()
    return chunks


def subscription_body(session_id: str, broadcaster_id: str, bot_user_id: str) -> dict[str, Any]:
    """Build the chat-message EventSub registration for one websocket session."""
    return {
        "type": CHAT_MESSAGE_EVENT_TYPE,
        "version": "1",
        "condition": {
            "broadcaster_user_id": broadcaster_id,
            "user_id": bot_user_id,
        },
        "transport": {
            "method": "websocket",
            "session_id": session_id,
        },
    }


def _drop_reason(response: requests.Response) -> str | None:
    """Return the drop reason when the platform accepted but did not post the message."""
    try:
        payload = response.json()
    except ValueError:
        return None
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return None
    result = data[0]
    if result.get("is_sent", True):
        return None
    reason = result.get("drop_reason")
    if isinstance(reason, dict):
        return str(reason.get("message") or reason.get("code") or "unknown reason")
    return str(reason or "unknown reason")


# ---------------------------------------------------------------------------
# Subscription manager
# ---------------------------------------------------------------------------


class SubscriptionManager:
    """Register interest in chat messages for the current websocket session."""

    def __init__(
        self,
        credentials: CredentialManager,
        broadcaster_id: str,
        bot_user_id: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._credentials = credentials
        self._broadcaster_id = broadcaster_id
        self._bot_user_id = bot_user_id
        self._timeout = timeout_seconds

    async def subscribe(self, session_id: str) -> bool:
        """Issue one registration call; non-success is logged and not retried."""
        body = subscription_body(session_id, self._broadcaster_id, self._bot_user_id)
        try:
            response = await asyncio.to_thread(
                requests.post,
                EVENTSUB_SUBSCRIPTIONS_URL,
                headers=self._credentials.helix_headers(),
                json=body,
                timeout=self._timeout,
            )
        except requests.RequestException:
            logger.exception("EventSub subscription request failed")
            return False
        if not response.ok:
            logger.error("Error subscribing to EventSub (%s): %s", response.status_code, response.text)
            return False
        logger.info("EventSub subscription successful for session %s.", session_id)
        return True


# ---------------------------------------------------------------------------
# Schedule fetcher
# ---------------------------------------------------------------------------


class ScheduleFetcher:
    """Read the broadcaster's upcoming stream segments."""

    def __init__(
        self,
        credentials: CredentialManager,
        broadcaster_id: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._credentials = credentials
        self._broadcaster_id = broadcaster_id
        self._timeout = timeout_seconds

    async def fetch_segments(self) -> list[dict[str, Any]]:
        """Return the first page of segments; any failure yields an empty list."""
        try:
            response = await asyncio.to_thread(
                requests.get,
                SCHEDULE_URL,
                params={"broadcaster_id": self._broadcaster_id},
                headers=self._credentials.helix_headers(),
                timeout=self._timeout,
            )
        except requests.RequestException:
            logger.exception("Schedule request failed")
            return []
        if not response.ok:
            logger.warning("Schedule unavailable (%s): %s", response.status_code, response.text)
            return []
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Schedule response is not JSON")
            return []
        data = payload.get("data") if isinstance(payload, dict) else None
        segments = data.get("segments") if isinstance(data, dict) else None
        if not isinstance(segments, list):
            return []
        return segments


# ---------------------------------------------------------------------------
# Chat publisher
# ---------------------------------------------------------------------------


class ChatPublisher:
    """Post replies into the channel's chat as the bot."""

    def __init__(
        self,
        credentials: CredentialManager,
        broadcaster_id: str,
        sender_id: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._credentials = credentials
        self._broadcaster_id = broadcaster_id
        self._sender_id = sender_id
        self._timeout = timeout_seconds

    async def send(self, text: str) -> bool:
        """Send ``text``, split into chat-sized messages; stops at the first failure."""
        chunks = chunk_text(text)
        if not chunks:
            logger.warning("Refusing to send an empty chat message")
            return False
        for chunk in chunks:
            if not await self._send_one(chunk):
                return False
        return True

    async def _send_one(self, message: str) -> bool:
        try:
            response = await asyncio.to_thread(
                requests.post,
                CHAT_MESSAGES_URL,
                headers=self._credentials.helix_headers(),
                json={
                    "broadcaster_id": self._broadcaster_id,
                    "sender_id": self._sender_id,
                    "message": message,
                },
                timeout=self._timeout,
            )
        except requests.RequestException:
            logger.exception("Chat message request failed")
            return False
        if not response.ok:
            logger.error("Error sending the message (%s): %s", response.status_code, response.text)
            return False
        reason = _drop_reason(response)
        if reason is not None:
            logger.warning("Chat message dropped by the platform: %s", reason)
            return False
        logger.info("Message sent: %s", message)
        return True
