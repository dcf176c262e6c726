"""
Prompt builder for grounded support answers.

Builds the chat completion message list: fixed system instructions, the
top reference Q&A pairs replayed as earlier turns, then the live question.
Every user turn carries the same timestamp prefix so the model sees a
uniform temporal framing.
"""

from datetime import datetime
from typing import List, Optional, Sequence

import pytz

from supportbot.models.knowledge import OSCategory, PromptMessage, RankedCandidate, Role
from .retriever import top_k

INTRO_INSTRUCTION = (
    "Welcome, assistant. As a support bot for the game client's Discord server, "
    "your mission is to provide accurate and helpful responses to all user queries "
    "about the client."
)

OS_INSTRUCTION = (
    "The user is running the {os_label}. When addressing their requests or queries, "
    "aim for clarity, relevance, and precision."
)

SCOPE_INSTRUCTION = (
    "Keep answers focused on installing, configuring, and troubleshooting the client. "
    "If a question falls outside that scope, say so briefly and point the user to the "
    "server staff."
)

GROUNDING_INSTRUCTION = (
    "Prefer the answers from the support database over your own knowledge. If the "
    "reference material does not cover the question, say that you are not sure "
    "rather than guessing."
)

REFERENCE_INTRO = (
    "We've gathered the top three most relevant support questions and answers "
    "from our database:"
)

NEW_QUESTION_INSTRUCTION = (
    "The user has now posed a new, unique question. Using the above reference "
    "material, craft the most effective response you can."
)


def format_timestamp(timestamp: datetime, timezone: Optional[str] = None) -> str:
    """Render a long en-US date and time, e.g.
    ``Monday, October 19, 2026 at 3:04:05 PM UTC``.

    Naive datetimes are taken to be UTC.
    """
    if timezone is None:
        from supportbot import config
        timezone = config.BOT_TIMEZONE

    if timestamp.tzinfo is None:
        timestamp = pytz.utc.localize(timestamp)
    local = timestamp.astimezone(pytz.timezone(timezone))

    hour = local.hour % 12 or 12
    return (
        f"{local:%A, %B} {local.day}, {local.year} at "
        f"{hour}:{local:%M:%S %p} {local.tzname()}"
    )


def _user_turn(time_string: str, text: str) -> PromptMessage:
    return PromptMessage(Role.USER, f"{time_string} User: {text}")


def build_prompt(
    user_query: str,
    ranked: Sequence[RankedCandidate],
    timestamp: datetime,
    os_category: OSCategory,
    timezone: Optional[str] = None,
) -> List[PromptMessage]:
    """Build the ordered completion messages for a support question.

    Args:
        user_query: The live question text.
        ranked: Candidates sorted best first; only the top three are used.
        timestamp: When the question was asked.
        os_category: Operating system the user declared via roles.
        timezone: Optional tz name overriding BOT_TIMEZONE.

    Returns:
        List of PromptMessage in the order they are sent.
    """
    time_string = f"[{format_timestamp(timestamp, timezone)}]"

    messages = [
        PromptMessage(Role.SYSTEM, INTRO_INSTRUCTION),
        PromptMessage(Role.SYSTEM, OS_INSTRUCTION.format(os_label=os_category.label)),
        PromptMessage(Role.SYSTEM, SCOPE_INSTRUCTION),
        PromptMessage(Role.SYSTEM, GROUNDING_INSTRUCTION),
        PromptMessage(Role.SYSTEM, REFERENCE_INTRO),
    ]
    for candidate in top_k(ranked):
        messages.append(_user_turn(time_string, candidate.question))
        messages.append(PromptMessage(Role.ASSISTANT, candidate.answer))

    messages.append(PromptMessage(Role.SYSTEM, NEW_QUESTION_INSTRUCTION))
    messages.append(_user_turn(time_string, user_query))
    return messages
