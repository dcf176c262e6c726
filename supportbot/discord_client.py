import httpx
import logging
from typing import Optional, Sequence

from . import config
from .models.knowledge import WarningEmbed

logger = logging.getLogger(__name__)


def _headers() -> dict:
    if not config.DISCORD_BOT_TOKEN:
        raise ValueError("DISCORD_BOT_TOKEN is not configured.")
    return {
        "Authorization": f"Bot {config.DISCORD_BOT_TOKEN}",
        "Content-Type": "application/json",
    }


def build_reply_payload(
    content: str,
    reply_to_message_id: str,
    warnings: Optional[Sequence[WarningEmbed]] = None,
) -> dict:
    """Build the create-message body for a threaded reply.

    ``fail_if_not_exists`` is off so the reply still posts when the
    original message was deleted in the meantime.
    """
    return {
        "content": content.strip(),
        "message_reference": {
            "message_id": str(reply_to_message_id),
            "fail_if_not_exists": False,
        },
        "embeds": [warning.to_dict() for warning in (warnings or [])],
    }


async def send_reply(
    channel_id: str,
    reply_to_message_id: str,
    content: str,
    warnings: Optional[Sequence[WarningEmbed]] = None,
) -> dict:
    """Post the generated answer, plus any warning embeds, as a reply."""
    url = f"{config.DISCORD_API_URL}/channels/{channel_id}/messages"
    headers = _headers()
    payload = build_reply_payload(content, reply_to_message_id, warnings)
    logger.info(
        f"[DISCORD] Replying to {reply_to_message_id} in {channel_id} "
        f"({len(payload['content'])} chars, {len(payload['embeds'])} embeds)"
    )
    async with httpx.AsyncClient() as client:
        response = await client.post(url, json=payload, headers=headers)
        logger.info(f"[DISCORD] create message response: {response.status_code}")
        response.raise_for_status()
        return response.json()
