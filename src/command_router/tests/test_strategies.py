"""Unit tests for the response strategies and their prompts."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

import ai_client_api
import claude_client_impl  # noqa: F401  # binds ai_client_api.message/content_block
from command_router import (
    APOLOGY,
    GeneralStrategy,
    Intent,
    ScheduleStrategy,
    SocialMediaStrategy,
    SubscriptionStrategy,
    build_strategies,
)
from command_router import prompts
from command_router.models import SocialLinks


class _StubClient(ai_client_api.Client):
    """Completion client recording prompts and replying with fixed text."""

    def __init__(self, reply: str = "Réponse du bot", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def generate_response(self, messages: Any, system: str | None = None) -> ai_client_api.Message:  # noqa: ANN401
        self.calls.append({"messages": [m.to_dict() for m in messages], "system": system})
        if self.error is not None:
            raise self.error
        return ai_client_api.message(
            role="assistant",
            content=[ai_client_api.content_block(block_type="text", text=self.reply)],
        )

    @property
    def prompt(self) -> str:
        return self.calls[-1]["messages"][0]["content"][0]["text"]


@pytest.fixture(autouse=True)
def _inline_to_thread(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_to_thread(fn: Any, *args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        return fn(*args, **kwargs)

    monkeypatch.setattr(asyncio, "to_thread", fake_to_thread)


LINKS = SocialLinks(
    instagram="https://instagram.com/brigade",
    youtube="https://youtube.com/@brigade",
    vod="https://youtube.com/@brigade-vod",
    tiktok="https://tiktok.com/@brigade",
    discord="https://discord.gg/brigade",
    x="https://x.com/brigade",
)


class TestScheduleStrategy:
    """Schedule answers embed the raw segments."""

    @pytest.mark.asyncio
    async def test_prompt_contains_schedule_json_and_question(self) -> None:
        """The segments are embedded as JSON next to the literal question."""
        # ARRANGE
        segments = [{"start_time": "2026-10-20T18:00:00Z", "title": "Élden Ring"}]
        client = _StubClient()
        strategy = ScheduleStrategy(AsyncMock(return_value=segments), client, timezone="GMT+1")

        # ACT
        reply = await strategy.respond("quand est le prochain stream", "viewer")

        # ASSERT
        assert reply == "Réponse du bot"
        assert json.dumps(segments, ensure_ascii=False, separators=(",", ":")) in client.prompt
        assert "quand est le prochain stream" in client.prompt
        assert "GMT+1" in client.prompt
        assert client.calls[-1]["system"] == prompts.PLAIN_TEXT_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_empty_schedule_still_answers(self) -> None:
        """An empty schedule is embedded as an empty list."""
        client = _StubClient()
        strategy = ScheduleStrategy(AsyncMock(return_value=[]), client)

        assert await strategy.respond("planning ?", "viewer") == "Réponse du bot"
        assert "[]" in client.prompt

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_apology(self) -> None:
        """Errors while gathering context are converted to the apology."""
        client = _StubClient()
        strategy = ScheduleStrategy(AsyncMock(side_effect=RuntimeError("boom")), client)

        assert await strategy.respond("planning ?", "viewer") == APOLOGY
        assert client.calls == []


class TestSocialMediaStrategy:
    """Social answers embed every link verbatim."""

    @pytest.mark.asyncio
    async def test_prompt_contains_links(self) -> None:
        """All configured link values appear in the prompt."""
        client = _StubClient()
        strategy = SocialMediaStrategy(LINKS, client, profile="Tu es le Brigadier.")

        await strategy.respond("ton insta ?", "viewer")

        for link in LINKS.model_dump().values():
            assert link in client.prompt
        assert client.prompt.startswith("Tu es le Brigadier.")
        assert client.prompt.endswith("ton insta ?")


class TestSubscriptionStrategy:
    """Subscription answers carry the fixed benefits."""

    @pytest.mark.asyncio
    async def test_prompt_lists_benefits(self) -> None:
        """Each benefit is listed in the prompt."""
        client = _StubClient()

        await SubscriptionStrategy(client).respond("pourquoi s'abonner", "viewer")

        for benefit in prompts.SUBSCRIPTION_BENEFITS:
            assert benefit in client.prompt
        assert "pourquoi s'abonner" in client.prompt


class TestGeneralStrategy:
    """General answers and the shared failure policy."""

    @pytest.mark.asyncio
    async def test_prompt_includes_optional_blocks(self) -> None:
        """Persona and constraint blocks precede the question."""
        client = _StubClient()
        strategy = GeneralStrategy(client, profile="PROFILE", negative="NEGATIVE")

        await strategy.respond("raconte une blague", "viewer")

        assert client.prompt == "PROFILE\nNEGATIVE\nVoici la question du viewer:\nraconte une blague"

    @pytest.mark.asyncio
    async def test_prompt_without_optional_blocks(self) -> None:
        """Missing blocks are left out entirely."""
        client = _StubClient()

        await GeneralStrategy(client).respond("salut", "viewer")

        assert client.prompt == "Voici la question du viewer:\nsalut"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "strategy_factory",
        [
            lambda c: ScheduleStrategy(AsyncMock(return_value=[]), c),
            lambda c: SocialMediaStrategy(LINKS, c),
            lambda c: SubscriptionStrategy(c),
            lambda c: GeneralStrategy(c),
        ],
    )
    async def test_completion_error_returns_apology(self, strategy_factory: Any) -> None:  # noqa: ANN401
        """Every strategy swallows completion errors and apologizes."""
        client = _StubClient(error=RuntimeError("service down"))

        assert await strategy_factory(client).respond("question", "viewer") == APOLOGY

    @pytest.mark.asyncio
    async def test_empty_completion_returns_apology(self) -> None:
        """Blank completions are not published."""
        assert await GeneralStrategy(_StubClient(reply="   ")).respond("question", "viewer") == APOLOGY

    @pytest.mark.asyncio
    async def test_client_resolved_lazily_from_factory(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without an injected client the registered factory is used once."""
        client = _StubClient(reply="depuis la factory")
        factory = Mock(return_value=client)
        monkeypatch.setattr(ai_client_api, "get_client", factory)
        strategy = GeneralStrategy()

        assert await strategy.respond("a", "viewer") == "depuis la factory"
        assert await strategy.respond("b", "viewer") == "depuis la factory"
        factory.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_factory_error_returns_apology(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A missing API key surfaces as the apology, not an exception."""
        monkeypatch.setattr(ai_client_api, "get_client", Mock(side_effect=RuntimeError("ANTHROPIC_API_KEY is required.")))

        assert await GeneralStrategy().respond("a", "viewer") == APOLOGY


def test_build_strategies_respects_subscription_toggle() -> None:
    """The subscription strategy exists only when enabled."""
    fetch = AsyncMock(return_value=[])

    enabled = build_strategies(fetch_schedule=fetch, links=LINKS)
    disabled = build_strategies(fetch_schedule=fetch, links=LINKS, subscription_enabled=False)

    assert set(enabled) == set(Intent)
    assert Intent.SUBSCRIPTION not in disabled
    assert isinstance(enabled[Intent.SCHEDULE], ScheduleStrategy)
    assert all(strategy.intent is intent for intent, strategy in enabled.items())
