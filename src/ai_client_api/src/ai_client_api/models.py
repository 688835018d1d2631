"""Abstract schemas for completion requests and replies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "ContentBlock",
    "Message",
    "content_block",
    "message",
]


class ContentBlock(ABC):
    """Abstract content block inside a chat message."""

    @property
    @abstractmethod
    def type(self) -> str:
        """Return the content block type."""
        raise NotImplementedError

    @property
    @abstractmethod
    def text(self) -> str | None:
        """Return the text content, if any."""
        raise NotImplementedError

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the content block."""
        raise NotImplementedError


class Message(ABC):
    """Abstract chat message composed of content blocks."""

    @property
    @abstractmethod
    def role(self) -> str:
        """Return the message role (user or assistant)."""
        raise NotImplementedError

    @property
    @abstractmethod
    def content(self) -> Sequence[ContentBlock]:
        """Return the content blocks for the message."""
        raise NotImplementedError

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the message."""
        raise NotImplementedError

    def text(self) -> str:
        """Return the concatenated, stripped text of all text blocks."""
        return "".join(block.text or "" for block in self.content if block.type == "text").strip()


def message(role: str, content: Sequence[ContentBlock]) -> Message:
    """Construct a concrete Message instance.

    Args:
        role: Message role, typically "user" or "assistant".
        content: Ordered content blocks for the message.

    Returns:
        Concrete Message instance bound by the active implementation.

    """
    raise NotImplementedError


def content_block(*, block_type: str, text: str | None = None) -> ContentBlock:
    """Construct a concrete ContentBlock instance.

    Args:
        block_type: Content block type; completions only use "text".
        text: Text payload for text blocks.

    Returns:
        Concrete ContentBlock instance bound by the active implementation.

    """
    raise NotImplementedError
