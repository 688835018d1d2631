"""Integration tests for ai_client_api + Claude wiring."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

import ai_client_api
from claude_client_impl.claude_impl import ClaudeClient
from claude_client_impl.models_impl import ClaudeContentBlock, ClaudeMessage
from command_router.prompts import PLAIN_TEXT_SYSTEM_PROMPT

pytestmark = pytest.mark.integration


def _stub_sdk(monkeypatch: pytest.MonkeyPatch, captured: dict[str, Any], reply_blocks: list[Any]) -> None:
    class _StubMessages:
        def create(self, **kwargs: Any) -> Any:  # noqa: ANN401
            captured.update(kwargs)
            return SimpleNamespace(content=reply_blocks)

    class _StubAnthropic:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key
            self.messages = _StubMessages()

    monkeypatch.setattr("claude_client_impl.claude_impl.anthropic.Anthropic", _StubAnthropic)


@pytest.mark.circleci
def test_ai_client_factory_returns_claude(monkeypatch: pytest.MonkeyPatch) -> None:
    """ai_client_api.get_client returns ClaudeClient after implementation import."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    client = ai_client_api.get_client()
    assert isinstance(client, ClaudeClient)


@pytest.mark.circleci
def test_abstract_factories_build_claude_models() -> None:
    """message/content_block resolve to the Claude models after registration."""
    block = ai_client_api.content_block(block_type="text", text="salut")
    message = ai_client_api.message(role="user", content=[block])

    assert isinstance(block, ClaudeContentBlock)
    assert isinstance(message, ClaudeMessage)
    assert message.to_dict() == {"role": "user", "content": [{"type": "text", "text": "salut"}]}


@pytest.mark.circleci
def test_generate_response_uses_sdk(monkeypatch: pytest.MonkeyPatch) -> None:
    """ClaudeClient routes calls through the SDK client and returns plain text."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    captured: dict[str, Any] = {}
    _stub_sdk(
        monkeypatch,
        captured,
        [
            SimpleNamespace(type="text", text="Le stream commence "),
            SimpleNamespace(type="thinking", text="ignored"),
            SimpleNamespace(type="text", text="à 20h."),
        ],
    )

    client = ai_client_api.get_client()
    message = ai_client_api.message(
        role="user",
        content=[ai_client_api.content_block(block_type="text", text="quand est le stream ?")],
    )

    result = client.generate_response(messages=[message], system=PLAIN_TEXT_SYSTEM_PROMPT)

    assert isinstance(result, ClaudeMessage)
    assert result.text() == "Le stream commence à 20h."
    assert captured["messages"][0]["role"] == "user"
    assert captured["messages"][0]["content"][0]["text"] == "quand est le stream ?"
    assert captured["system"] == PLAIN_TEXT_SYSTEM_PROMPT.strip()
