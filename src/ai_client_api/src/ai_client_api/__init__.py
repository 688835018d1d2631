"""Provider-agnostic completion contract used by the response strategies.

``get_client``, ``message`` and ``content_block`` are rebound by an
implementation package on import (see ``claude_client_impl``).
"""

from ai_client_api.client import Client, get_client
from ai_client_api.models import ContentBlock, Message, content_block, message

__all__ = [
    "Client",
    "ContentBlock",
    "Message",
    "content_block",
    "get_client",
    "message",
]
