"""Abstract interface for text completion services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ai_client_api.models import Message

__all__ = ["Client", "get_client"]


class Client(ABC):
    """The contract for completion services."""

    @abstractmethod
    def generate_response(
        self,
        messages: Sequence[Message],
        system: str | None = None,
    ) -> Message:
        """Generate one completion for the conversation.

        Args:
            messages: Message history; the bot sends a single user message per request.
            system: Optional instruction set (e.g., "Answer in plain text...").

        Returns:
            Message containing the assistant reply as text blocks.

        """
        raise NotImplementedError


def get_client() -> Client:
    """Return the default completion client implementation.

    Returns:
        Client implementation.

    """
    raise NotImplementedError
