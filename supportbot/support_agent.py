"""
Support agent: answers one Discord question from the knowledge base.

Pipeline per message:
    1. Embed the user question and load the knowledge sheet concurrently
    2. Resolve row embeddings (sheet cache or fresh, batched requests)
    3. Rank rows by similarity to the question
    4. Build the prompt from the top matches and request a completion
    5. Reply in the channel with the answer and any warnings

Knowledge sheet problems become warnings. Any OpenAI or Discord failure
propagates and no reply is sent.
"""

import asyncio
import logging
from typing import List, Optional

from openai import AsyncOpenAI

from . import config, discord_client
from .adapters.discord_adapter import question_text
from .models.knowledge import OSCategory, PromptMessage, SupportEvent, WarningEmbed
from .rag.embedder import get_openai_client, embed_query
from .rag.embedding_cache import resolve_embeddings
from .rag.knowledge_base import load_knowledge_base
from .rag.prompt_builder import build_prompt
from .rag.retriever import rank_candidates

logger = logging.getLogger(__name__)


async def generate_completion(
    messages: List[PromptMessage],
    client: AsyncOpenAI,
) -> str:
    """Request a deterministic chat completion and return its trimmed text."""
    completion = await client.chat.completions.create(
        model=config.COMPLETION_MODEL,
        messages=[message.to_dict() for message in messages],
        max_tokens=config.COMPLETION_MAX_TOKENS,
        temperature=0,
        top_p=1,
        n=1,
        presence_penalty=0,
        frequency_penalty=0,
    )
    return (completion.choices[0].message.content or "").strip()


async def answer_question(
    event: SupportEvent,
    os_category: OSCategory,
    openai_client: Optional[AsyncOpenAI] = None,
) -> dict:
    """Run the RAG pipeline for one support question and post the reply.

    Args:
        event: The gated Discord message.
        os_category: OS the author declared through their roles.
        openai_client: Optional pre-existing AsyncOpenAI client.

    Returns:
        The created Discord message object.
    """
    if openai_client is None:
        openai_client = get_openai_client()

    user_query = question_text(event)
    logger.info(f"[AGENT] User query from {event.author_name} categorized as tech support ({os_category.name}).")

    warnings: List[WarningEmbed] = []

    query_embedding, kb_result = await asyncio.gather(
        embed_query(user_query, client=openai_client),
        load_knowledge_base(),
    )
    warnings.extend(kb_result.warnings)
    corpus = kb_result.corpus

    embeddings = await resolve_embeddings(corpus, client=openai_client)
    ranked = rank_candidates(corpus.rows, embeddings, query_embedding)

    if ranked:
        logger.info(f'[AGENT] User query from {event.author_name} best match is "{ranked[0].question}" ({ranked[0].similarity:.3f}).')
    else:
        logger.info(f"[AGENT] No reference material available for {event.author_name}.")

    messages = build_prompt(user_query, ranked, event.timestamp, os_category)
    response_text = await generate_completion(messages, openai_client)
    logger.info(f"[AGENT] Generated response: {response_text}")

    message = await discord_client.send_reply(
        event.channel_id,
        event.message_id,
        response_text,
        warnings,
    )
    logger.info("[AGENT] Message sent")
    return message
