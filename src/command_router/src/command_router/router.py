"""Command detection and intent classification for chat messages.

Classification is first-match in the order schedule, social media, subscription,
general. Matching is case-insensitive; the trigger prefix itself is not.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from command_router.models import IncomingChatEvent, Intent

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from command_router.strategies import ResponseStrategy

TRIGGER_PREFIX = "!brigadier"

SCHEDULE_KEYWORDS = ("prochain stream", "quand", "heure", "jeu", "planning", "stream", "à quelle heure")
SOCIAL_KEYWORDS = (
    "instagram",
    "youtube",
    "réseaux sociaux",
    "page instagram",
    "page youtube",
    "insta",
    "vod",
    "ytb",
    "chaine",
)
SUBSCRIPTION_PATTERN = re.compile(
    r"(\bpourquoi\b.*\b(s['’]abonner|s['’]abonne|subscribe)\b"
    r"|\b(avantages?|bénéfices?)\b.*\b(s['’]abonnement|sub)\b"
    r"|\b(c['’]est)\b.*\b(un sub|abonné|abonnement)\b)",
    re.IGNORECASE,
)

logger = logging.getLogger("command_router")


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def extract_question(text: str, prefix: str = TRIGGER_PREFIX) -> str | None:
    """Return the trimmed question when ``text`` starts with the trigger prefix, else None."""
    if not text.startswith(prefix):
        return None
    return text.replace(prefix, "", 1).strip()


def is_schedule_question(question: str) -> bool:
    """Check whether the question mentions the stream schedule."""
    lowered = question.lower()
    return any(keyword in lowered for keyword in SCHEDULE_KEYWORDS)


def is_social_media_question(question: str) -> bool:
    """Check whether the question mentions one of the channel's social networks."""
    lowered = question.lower()
    return any(keyword in lowered for keyword in SOCIAL_KEYWORDS)


def is_subscription_question(question: str) -> bool:
    """Check whether the question asks why one should subscribe."""
    return SUBSCRIPTION_PATTERN.search(question) is not None


def classify(question: str, *, subscription_enabled: bool = True) -> Intent:
    """Classify a stripped question into exactly one intent."""
    if is_schedule_question(question):
        return Intent.SCHEDULE
    if is_social_media_question(question):
        return Intent.SOCIAL_MEDIA
    if subscription_enabled and is_subscription_question(question):
        return Intent.SUBSCRIPTION
    return Intent.GENERAL


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class CommandRouter:
    """Route chat events to the response strategy of their intent and publish the reply."""

    def __init__(
        self,
        strategies: Mapping[Intent, ResponseStrategy],
        publish: Callable[[str], Awaitable[bool]],
        *,
        prefix: str = TRIGGER_PREFIX,
    ) -> None:
        self._strategies = dict(strategies)
        self._publish = publish
        self._prefix = prefix

    @property
    def subscription_enabled(self) -> bool:
        """Subscription questions are only recognised when a strategy is registered for them."""
        return Intent.SUBSCRIPTION in self._strategies

    def route(self, event: IncomingChatEvent) -> tuple[Intent, str] | None:
        """Return the intent and stripped question for a command, or None for ordinary chat."""
        question = extract_question(event.message_text, self._prefix)
        if question is None:
            return None
        return classify(question, subscription_enabled=self.subscription_enabled), question

    async def handle(self, event: IncomingChatEvent) -> str | None:
        """Answer one chat event; returns the published reply or None when the event is ignored."""
        routed = self.route(event)
        if routed is None:
            logger.debug("Ignoring chat message from %s (no trigger prefix)", event.sender_login)
            return None
        intent, question = routed
        logger.info("Command from %s classified as %s: %s", event.sender_login, intent.value, question)
        strategy = self._strategies.get(intent) or self._strategies[Intent.GENERAL]
        reply = await strategy.respond(question, event.sender_login)
        await self._publish(reply)
        return reply
