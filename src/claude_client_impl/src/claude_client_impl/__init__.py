"""Claude-backed completion client.

Importing this package binds ``ai_client_api.get_client``, ``message`` and
``content_block`` to the Claude implementations.
"""

from claude_client_impl.claude_impl import ClaudeClient
from claude_client_impl.claude_impl import register as _register_client
from claude_client_impl.models_impl import ClaudeContentBlock, ClaudeMessage
from claude_client_impl.models_impl import register as _register_models

__all__ = ["ClaudeClient", "ClaudeContentBlock", "ClaudeMessage", "register"]


def register() -> None:
    """Bind the Claude client and message factories into ai_client_api."""
    _register_client()
    _register_models()


register()
