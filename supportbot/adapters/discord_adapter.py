"""Discord channel adapter.

Normalizes the inbound message event forwarded by the gateway relay into a
`SupportEvent` and applies the checks that decide whether the bot answers:
support channel, real content beyond a mention, and a recognized OS role.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from supportbot import config
from supportbot.models.knowledge import OSCategory, SupportEvent

logger = logging.getLogger(__name__)


def _os_role_names() -> Dict[str, OSCategory]:
    return {
        config.WINDOWS_ROLE_NAME.strip().lower(): OSCategory.WINDOWS,
        config.MACOS_ROLE_NAME.strip().lower(): OSCategory.MACOS,
        config.LINUX_ROLE_NAME.strip().lower(): OSCategory.LINUX,
    }


def classify_os(role_names: Iterable[str]) -> Optional[OSCategory]:
    """Map the author's role names to an OS category by exact name.

    When roles map to several categories the first in enum order wins.
    """
    mapping = _os_role_names()
    found = {mapping[name.strip().lower()] for name in role_names if name.strip().lower() in mapping}
    if not found:
        return None
    ordered = [category for category in OSCategory if category in found]
    if len(ordered) > 1:
        logger.warning(f"[DISCORD] Member holds several OS roles {[c.name for c in ordered]}, using {ordered[0].name}")
    return ordered[0]


def strip_mentions(content: str, mention_ids: Iterable[str]) -> str:
    """Remove mentions of the given user ids and surrounding whitespace."""
    text = content or ""
    for user_id in mention_ids:
        text = re.sub(rf"<@!?{re.escape(user_id)}>", "", text)
    return text.strip()


def question_text(event: SupportEvent) -> str:
    """The question asked, without the mentions that summoned the bot."""
    return strip_mentions(event.content, event.mention_ids)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    # Discord sends ISO 8601, sometimes with a trailing Z
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def parse_event(raw: Dict[str, Any]) -> Optional[SupportEvent]:
    """Parse a message-create event into a SupportEvent.

    Return None for payloads that are not actionable (bots, missing ids).
    """
    author = raw.get("author", {}) or {}
    if author.get("bot"):
        return None

    message_id = str(raw.get("id", "") or "")
    channel_id = str(raw.get("channel_id", "") or "")
    if not message_id or not channel_id:
        return None

    member = raw.get("member", {}) or {}
    try:
        timestamp = _parse_timestamp(raw.get("timestamp"))
    except (TypeError, ValueError):
        logger.warning(f"[DISCORD] Unparseable timestamp on message {message_id}")
        return None

    return SupportEvent(
        message_id=message_id,
        channel_id=channel_id,
        channel_name=str(raw.get("channel_name", "") or ""),
        content=str(raw.get("content", "") or ""),
        author_name=str(author.get("username", "")),
        timestamp=timestamp,
        role_names=[str(name) for name in member.get("role_names", []) or []],
        mention_ids=[str(m.get("id")) for m in raw.get("mentions", []) or [] if m.get("id")],
    )


def should_answer(event: SupportEvent) -> Optional[OSCategory]:
    """Return the author's OS category if the bot should answer, else None."""
    if event.channel_name.lower() != config.SUPPORT_CHANNEL_NAME.lower():
        return None
    if not question_text(event):
        return None
    return classify_os(event.role_names)
