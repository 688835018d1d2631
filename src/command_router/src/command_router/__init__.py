"""Public export surface for ``command_router``."""

from command_router.models import IncomingChatEvent, Intent
from command_router.router import TRIGGER_PREFIX, CommandRouter, classify, extract_question
from command_router.strategies import (
    APOLOGY,
    GeneralStrategy,
    ResponseStrategy,
    ScheduleStrategy,
    SocialMediaStrategy,
    SubscriptionStrategy,
    build_strategies,
)

__all__ = [
    "APOLOGY",
    "TRIGGER_PREFIX",
    "CommandRouter",
    "GeneralStrategy",
    "IncomingChatEvent",
    "Intent",
    "ResponseStrategy",
    "ScheduleStrategy",
    "SocialMediaStrategy",
    "SubscriptionStrategy",
    "build_strategies",
    "classify",
    "extract_question",
]
