"""Claude models implementation colocated with the Claude client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

import ai_client_api
from ai_client_api import models

# ---------------------------------------------------------------------------
# Claude models
# ---------------------------------------------------------------------------


class ClaudeContentBlock(models.ContentBlock):
    """Text content block exchanged with the Messages API."""

    def __init__(self, *, block_type: str, text: str | None = None) -> None:
        """Create a Claude content block payload."""
        self._type = block_type
        self._text = text

    @property
    def type(self) -> str:
        """Get the block type."""
        return self._type

    @property
    def text(self) -> str | None:
        """Get text content for text blocks."""
        return self._text

    def to_dict(self) -> dict[str, Any]:
        """Return this block as a JSON-serializable dict."""
        payload: dict[str, Any] = {"type": self._type}
        if self._text is not None:
            payload["text"] = self._text
        return payload


class ClaudeMessage(models.Message):
    """Chat message composed of Claude content blocks."""

    def __init__(self, role: str, content: Sequence[models.ContentBlock]) -> None:
        """Create a Claude message from content blocks."""
        self._role = role
        self._content: list[models.ContentBlock] = list(content)

    @property
    def role(self) -> str:
        """Get the message role (user or assistant)."""
        return self._role

    @property
    def content(self) -> list[models.ContentBlock]:
        """Get the content blocks for this message."""
        return self._content

    def to_dict(self) -> dict[str, Any]:
        """Return this message as a JSON-serializable dict."""
        return {"role": self._role, "content": [block.to_dict() for block in self._content]}


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def content_block_impl(*, block_type: str, text: str | None = None) -> ClaudeContentBlock:
    """Build a ClaudeContentBlock."""
    return ClaudeContentBlock(block_type=block_type, text=text)


def message_impl(role: str, content: Sequence[models.ContentBlock]) -> ClaudeMessage:
    """Build a ClaudeMessage."""
    return ClaudeMessage(role=role, content=content)


# ---------------------------------------------------------------------------
# Factory registration
# ---------------------------------------------------------------------------


def register() -> None:
    """Register Claude factory helpers with the abstract API."""
    ai_client_api.message = message_impl
    ai_client_api.content_block = content_block_impl
    models.message = message_impl
    models.content_block = content_block_impl
