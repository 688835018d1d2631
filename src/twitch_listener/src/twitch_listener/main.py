"""Process entry point: wire credentials, the feed session, the router and the completion client."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

import claude_client_impl  # noqa: F401  # ensure AI implementation registers itself
from command_router import CommandRouter, build_strategies
from twitch_listener.config import DEFAULT_ENV_FILE, Settings, load_settings
from twitch_listener.credentials import CredentialManager, Credentials, TokenRefreshError, TokenStore
from twitch_listener.helix import ChatPublisher, ScheduleFetcher, SubscriptionManager
from twitch_listener.session import EventSubClient

logger = logging.getLogger("twitch_listener")


class BrigadierBot:
    """All components of one running bot, bound to a single channel."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.credentials = CredentialManager(
            Credentials(
                access_token=settings.access_token,
                refresh_token=settings.refresh_token,
                client_id=settings.client_id,
            ),
            settings.client_secret,
            TokenStore(settings.env_file),
        )
        self.subscriptions = SubscriptionManager(self.credentials, settings.broadcaster_id, settings.bot_user_id)
        self.schedule = ScheduleFetcher(self.credentials, settings.broadcaster_id)
        self.publisher = ChatPublisher(self.credentials, settings.broadcaster_id, settings.bot_user_id)
        self.router = CommandRouter(
            build_strategies(
                fetch_schedule=self.schedule.fetch_segments,
                links=settings.social_links,
                profile=settings.prompt_profile,
                negative=settings.prompt_negative,
                timezone=settings.timezone,
                subscription_enabled=settings.subscription_intent,
            ),
            self.publisher.send,
        )
        self.client = EventSubClient(self.subscriptions.subscribe, self.router.handle)

    async def run(self) -> None:
        """Validate the token, then serve the feed and revalidate until stopped."""
        await self.credentials.validate()
        await asyncio.gather(
            self.client.run_forever(),
            self.credentials.revalidate_forever(),
        )


def main() -> None:
    """Run the bot until interrupted; exit with status 1 when the tokens are unrecoverable."""
    # Tokens are read from and written back to the same file in the working directory.
    env_file = Path(os.environ.get("BRIGADIER_ENV_FILE") or DEFAULT_ENV_FILE)
    load_dotenv(env_file)
    logging.basicConfig(level=logging.INFO)
    settings = load_settings().model_copy(update={"env_file": env_file})
    bot = BrigadierBot(settings)
    try:
        asyncio.run(bot.run())
    except TokenRefreshError:
        logger.critical("Unable to refresh the OAuth token, stopping the bot.")
        raise SystemExit(1) from None
    except KeyboardInterrupt:
        logger.info("Bot stopped.")


if __name__ == "__main__":
    main()
