"""Per-intent response strategies.

Each strategy gathers its context, formats one prompt and asks the completion
service for a plain-text answer. Any failure along the way yields ``APOLOGY``.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

import ai_client_api
from command_router import prompts
from command_router.models import Intent, SocialLinks

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ai_client_api import Client

    ScheduleFetcher = Callable[[], Awaitable[list[dict[str, Any]]]]

APOLOGY = "Désolé, je n'ai pas été formé pour répondre à cette question"

logger = logging.getLogger("command_router.strategies")


# ---------------------------------------------------------------------------
# Base strategy
# ---------------------------------------------------------------------------


class ResponseStrategy(ABC):
    """Turn a question into a reply through the completion service."""

    intent: ClassVar[Intent]

    def __init__(self, client: Client | None = None, *, profile: str | None = None) -> None:
        self._client = client
        self._profile = profile

    @abstractmethod
    async def build_prompt(self, question: str, sender: str) -> str:
        """Return the completion prompt for ``question``."""
        raise NotImplementedError

    async def respond(self, question: str, sender: str) -> str:
        """Return the reply text; never raises."""
        try:
            prompt = await self.build_prompt(question, sender)
            reply = await asyncio.to_thread(self._complete, prompt)
        except Exception:
            logger.exception("%s strategy failed for %s", self.intent.value, sender)
            return APOLOGY
        if not reply:
            logger.warning("%s strategy got an empty completion", self.intent.value)
            return APOLOGY
        return reply

    def _complete(self, prompt: str) -> str:
        """Run one blocking completion request and return its text."""
        if self._client is None:
            self._client = ai_client_api.get_client()
        user_message = ai_client_api.message(
            role="user",
            content=[ai_client_api.content_block(block_type="text", text=prompt)],
        )
        reply = self._client.generate_response(messages=[user_message], system=prompts.PLAIN_TEXT_SYSTEM_PROMPT)
        return reply.text()


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class ScheduleStrategy(ResponseStrategy):
    """Answer schedule questions from the broadcaster's upcoming segments."""

    intent = Intent.SCHEDULE

    def __init__(
        self,
        fetch_schedule: ScheduleFetcher,
        client: Client | None = None,
        *,
        profile: str | None = None,
        timezone: str = "GMT+1",
    ) -> None:
        super().__init__(client, profile=profile)
        self._fetch_schedule = fetch_schedule
        self._timezone = timezone

    async def build_prompt(self, question: str, sender: str) -> str:  # noqa: ARG002
        segments = await self._fetch_schedule()
        return prompts.schedule_prompt(question, segments, profile=self._profile, timezone=self._timezone)


class SocialMediaStrategy(ResponseStrategy):
    """Answer questions about the channel's social networks."""

    intent = Intent.SOCIAL_MEDIA

    def __init__(self, links: SocialLinks, client: Client | None = None, *, profile: str | None = None) -> None:
        super().__init__(client, profile=profile)
        self._links = links

    async def build_prompt(self, question: str, sender: str) -> str:  # noqa: ARG002
        return prompts.social_media_prompt(question, self._links, profile=self._profile)


class SubscriptionStrategy(ResponseStrategy):
    """Explain why to subscribe, limited to the fixed benefits."""

    intent = Intent.SUBSCRIPTION

    async def build_prompt(self, question: str, sender: str) -> str:  # noqa: ARG002
        return prompts.subscription_prompt(question, profile=self._profile)


class GeneralStrategy(ResponseStrategy):
    """Answer anything else, framed by the optional persona and constraint blocks."""

    intent = Intent.GENERAL

    def __init__(
        self,
        client: Client | None = None,
        *,
        profile: str | None = None,
        negative: str | None = None,
    ) -> None:
        super().__init__(client, profile=profile)
        self._negative = negative

    async def build_prompt(self, question: str, sender: str) -> str:  # noqa: ARG002
        return prompts.general_prompt(question, profile=self._profile, negative=self._negative)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_strategies(  # noqa: PLR0913
    *,
    fetch_schedule: ScheduleFetcher,
    links: SocialLinks | None = None,
    client: Client | None = None,
    profile: str | None = None,
    negative: str | None = None,
    timezone: str = "GMT+1",
    subscription_enabled: bool = True,
) -> dict[Intent, ResponseStrategy]:
    """Build one strategy per intent; the subscription one only when enabled."""
    strategies: dict[Intent, ResponseStrategy] = {
        Intent.SCHEDULE: ScheduleStrategy(fetch_schedule, client, profile=profile, timezone=timezone),
        Intent.SOCIAL_MEDIA: SocialMediaStrategy(links or SocialLinks(), client, profile=profile),
        Intent.GENERAL: GeneralStrategy(client, profile=profile, negative=negative),
    }
    if subscription_enabled:
        strategies[Intent.SUBSCRIPTION] = SubscriptionStrategy(client, profile=profile)
    return strategies
