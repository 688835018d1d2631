"""Prompt templates sent to the completion service.

Only the embedded data is significant: the raw schedule JSON, the link values
and the viewer's question appear verbatim.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from command_router.models import SocialLinks

PLAIN_TEXT_SYSTEM_PROMPT = (
    "Tu réponds dans le chat d'un live Twitch. Réponds en texte brut, sans markdown, "
    "sans liste à puces ni mise en forme."
)

SUBSCRIPTION_BENEFITS = (
    "De nouveaux emojis exclusifs.",
    "Moins de publicités pendant les streams.",
    "Un soutien direct à la chaîne et au créateur de contenu.",
)


def _join(*blocks: str | None) -> str:
    return "\n".join(block for block in blocks if block)


def schedule_prompt(
    question: str,
    segments: Sequence[dict[str, Any]],
    *,
    profile: str | None = None,
    timezone: str = "GMT+1",
) -> str:
    """Ask about the stream schedule, embedding the raw segments."""
    schedule_json = json.dumps(list(segments), ensure_ascii=False, separators=(",", ":"))
    return _join(
        profile,
        f"Voici les horaires de streaming, tu dois convertir les heures en {timezone}:",
        schedule_json,
        "Réponds à cette question à propos du planning en te basant sur ces informations:",
        question,
    )


def social_media_prompt(question: str, links: SocialLinks, *, profile: str | None = None) -> str:
    """Ask about the channel's social networks, embedding every configured link."""
    return _join(
        profile,
        "Voici les liens vers les réseaux sociaux de la chaine:",
        f"Instagram: {links.instagram}",
        f"YouTube: {links.youtube}",
        f"VOD: {links.vod}",
        f"Tiktok: {links.tiktok}",
        f"Discord: {links.discord}",
        f"X et twitter: {links.x}",
        "La question que l'on te pose est la suivante:",
        question,
    )


def subscription_prompt(question: str, *, profile: str | None = None) -> str:
    """Ask for a short persuasive answer limited to the fixed subscription benefits."""
    benefits = "\n".join(f"- {benefit}" for benefit in SUBSCRIPTION_BENEFITS)
    return _join(
        profile,
        "Voici la question à propos de l'abonnement :",
        question,
        "Essaie de convaincre en quelques mots pourquoi s'abonner à la chaîne. "
        "Mentionne les avantages suivants sans en rajouter ni faire de supposition :",
        benefits,
        "Sois persuasif et donne une réponse convaincante !",
    )


def general_prompt(question: str, *, profile: str | None = None, negative: str | None = None) -> str:
    """Ask an open question, optionally framed by the persona and constraint blocks."""
    return _join(profile, negative, "Voici la question du viewer:", question)
