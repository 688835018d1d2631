"""Environment-sourced settings for the bot."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from command_router.models import SocialLinks

if TYPE_CHECKING:
    from collections.abc import Mapping

REQUIRED_VARIABLES = (
    "TWITCH_ACCESS_TOKEN",
    "TWITCH_REFRESH_TOKEN",
    "TWITCH_CLIENT_ID",
    "TWITCH_CLIENT_SECRET",
    "TWITCH_BROADCASTER_ID",
    "BOT_USER_ID",
)
DEFAULT_TIMEZONE = "GMT+1"
DEFAULT_ENV_FILE = ".env"


class Settings(BaseModel):
    """Single-channel bot configuration."""

    access_token: str
    refresh_token: str
    client_id: str
    client_secret: str
    broadcaster_id: str
    bot_user_id: str
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    prompt_profile: str | None = None
    prompt_negative: str | None = None
    subscription_intent: bool = True
    timezone: str = DEFAULT_TIMEZONE
    env_file: Path = Path(DEFAULT_ENV_FILE)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the environment, failing fast on missing credentials."""
    env = os.environ if environ is None else environ
    for name in REQUIRED_VARIABLES:
        if not env.get(name):
            raise RuntimeError(f"{name} is required.")  # noqa: TRY003, EM102

    return Settings.model_validate(
        {
            "access_token": env["TWITCH_ACCESS_TOKEN"],
            "refresh_token": env["TWITCH_REFRESH_TOKEN"],
            "client_id": env["TWITCH_CLIENT_ID"],
            "client_secret": env["TWITCH_CLIENT_SECRET"],
            "broadcaster_id": env["TWITCH_BROADCASTER_ID"],
            "bot_user_id": env["BOT_USER_ID"],
            "social_links": {
                "instagram": env.get("INSTAGRAM_URL", ""),
                "youtube": env.get("YOUTUBE_URL", ""),
                "vod": env.get("VOD_URL", ""),
                "tiktok": env.get("TIKTOK_URL", ""),
                "discord": env.get("DISCORD_URL", ""),
                "x": env.get("X_URL", ""),
            },
            "prompt_profile": env.get("PROMPT_PROFILE") or None,
            "prompt_negative": env.get("PROMPT_NEGATIVE") or None,
            "subscription_intent": env.get("BRIGADIER_SUBSCRIPTION_INTENT") or True,
            "timezone": env.get("BRIGADIER_TIMEZONE") or DEFAULT_TIMEZONE,
            "env_file": env.get("BRIGADIER_ENV_FILE") or DEFAULT_ENV_FILE,
        }
    )
