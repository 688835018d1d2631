"""Twitch EventSub listener that answers chat commands through the command router."""
