"""Pydantic schemas shared between the event feed and the command router."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

CHAT_MESSAGE_EVENT_TYPE = "channel.chat.message"


class Intent(str, Enum):
    """Classification bucket of a bot-directed chat command."""

    SCHEDULE = "schedule"
    SOCIAL_MEDIA = "social_media"
    SUBSCRIPTION = "subscription"
    GENERAL = "general"


class IncomingChatEvent(BaseModel):
    """Chat message extracted from a feed notification."""

    sender_login: str
    message_text: str
    event_type: str = CHAT_MESSAGE_EVENT_TYPE


class SocialLinks(BaseModel):
    """Channel links embedded verbatim in social-media answers."""

    instagram: str = ""
    youtube: str = ""
    vod: str = ""
    tiktok: str = ""
    discord: str = ""
    x: str = ""
