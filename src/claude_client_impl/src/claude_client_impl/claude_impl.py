"""Claude Client Implementation.

Concrete ai_client_api.Client backed by Anthropic's Claude Messages API. Resolves the API key
and model from environment variables and converts Anthropic responses into the abstract
ai_client_api models consumed by the response strategies.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

import anthropic

import ai_client_api
from ai_client_api import Client, Message
from claude_client_impl.models_impl import ClaudeContentBlock, ClaudeMessage

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_MAX_TOKENS = 512

# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------


class ClaudeClient(Client):
    """Concrete ai_client_api.Client that forwards completions to Anthropic's Claude Messages API.

    Authentication:
        - ANTHROPIC_API_KEY (required)
        - ANTHROPIC_MODEL (optional, defaults to claude-haiku-4-5-20251001)

    Attributes:
        _client: Anthropic SDK client.
        _model: Model name used for requests.
        _max_tokens: Max tokens for each completion; chat replies are short.

    """

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        """Initialize the Claude client, resolving API key/model defaults from the environment."""
        key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not key:
            raise RuntimeError("ANTHROPIC_API_KEY is required.")  # noqa: TRY003, EM101
        self._client = anthropic.Anthropic(api_key=key)
        self._model = model or os.environ.get("ANTHROPIC_MODEL", DEFAULT_MODEL)
        self._max_tokens = DEFAULT_MAX_TOKENS

    def generate_response(
        self,
        messages: Sequence[Message],
        system: str | None = None,
    ) -> Message:
        """Invoke Claude and return the assistant message.

        Args:
            messages: Conversation to complete, usually a single user prompt.
            system: Optional system prompt to steer the model.

        Returns:
            Provider-agnostic Message holding the text blocks of the reply.

        """
        request_kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": [message.to_dict() for message in messages],
        }
        if system:
            request_kwargs["system"] = system.strip()

        api_response = self._client.messages.create(**request_kwargs)
        return to_message(api_response)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def get_client_impl() -> ClaudeClient:
    """Return a new ClaudeClient using env defaults."""
    return ClaudeClient()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_message(api_response: Any) -> ClaudeMessage:  # noqa: ANN401
    """Convert an Anthropic Messages API response into a ClaudeMessage, keeping text blocks."""
    blocks = [
        ClaudeContentBlock(block_type="text", text=block.text)
        for block in api_response.content
        if block.type == "text"
    ]
    return ClaudeMessage(role="assistant", content=blocks)


# ---------------------------------------------------------------------------
# Factory registration
# ---------------------------------------------------------------------------


def register() -> None:
    """Bind the Claude client factory into ai_client_api.get_client."""
    ai_client_api.get_client = get_client_impl
