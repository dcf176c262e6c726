"""
Embedder module for generating OpenAI embeddings.

Embeds knowledge base questions in token-bounded batches and embeds the
live user query at answer time. Batches are sent one after the other to
stay inside the provider's rate limits.
"""

import logging
import os
from typing import List, Optional, Sequence, Tuple

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSIONS = 1536

# Tokens aren't exactly words, so the budget is kept well below the model
# limit to absorb inputs with unusual characters.
MAX_BATCH_TOKENS = 4096


def _get_embedding_model() -> str:
    from supportbot import config
    return config.EMBEDDING_MODEL


def get_openai_client() -> AsyncOpenAI:
    """Get an AsyncOpenAI client using the configured API key.

    Returns:
        AsyncOpenAI client instance.

    Raises:
        ValueError: If OPENAI_API_KEY is not set.
    """
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        from supportbot import config
        api_key = config.OPENAI_API_KEY

    if not api_key:
        raise ValueError("OPENAI_API_KEY not found in environment or supportbot.config")

    return AsyncOpenAI(api_key=api_key)


def approximate_tokens(text: str) -> int:
    """Approximate the token count of ``text`` as its whitespace word count."""
    return max(1, len(text.split()))


def partition_batches(
    texts: Sequence[str],
    max_tokens: int = MAX_BATCH_TOKENS,
) -> Tuple[Tuple[str, ...], ...]:
    """Split texts into consecutive batches that fit the token budget.

    A batch never exceeds ``max_tokens`` unless it holds a single text that
    is over budget on its own. Order is preserved and nothing is dropped.

    Args:
        texts: Inputs to embed, in order.
        max_tokens: Approximate token budget per request.

    Returns:
        Tuple of batches, each a tuple of texts.
    """
    batches = []
    current: List[str] = []
    current_tokens = 0

    for text in texts:
        tokens = approximate_tokens(text)
        if current and current_tokens + tokens > max_tokens:
            batches.append(tuple(current))
            current = []
            current_tokens = 0
        current.append(text)
        current_tokens += tokens

    if current:
        batches.append(tuple(current))

    return tuple(batches)


async def embed_texts(
    texts: Sequence[str],
    client: Optional[AsyncOpenAI] = None,
    max_tokens: int = MAX_BATCH_TOKENS,
) -> List[List[float]]:
    """Generate embeddings for a list of texts using OpenAI API.

    Args:
        texts: List of text strings to embed.
        client: Optional pre-existing AsyncOpenAI client.
        max_tokens: Approximate token budget per request.

    Returns:
        List of embedding vectors, one per input, in input order.

    Raises:
        ValueError: If the provider returns a different number of vectors.
    """
    if not texts:
        return []

    if client is None:
        client = get_openai_client()

    model = _get_embedding_model()
    batches = partition_batches(texts, max_tokens)
    embeddings: List[List[float]] = []

    for index, batch in enumerate(batches, start=1):
        response = await client.embeddings.create(
            model=model,
            input=list(batch),
        )
        vectors = [item.embedding for item in response.data]
        if len(vectors) != len(batch):
            raise ValueError(
                f"Embedding provider returned {len(vectors)} vectors for {len(batch)} inputs"
            )
        embeddings.extend(vectors)
        logger.info(
            f"[EMBEDDER] Batch {index}/{len(batches)}: {len(vectors)} embeddings ({model})"
        )

    return embeddings


async def embed_query(
    query: str,
    client: Optional[AsyncOpenAI] = None,
) -> List[float]:
    """Generate an embedding for a single query string.

    Args:
        query: The query text to embed.
        client: Optional pre-existing AsyncOpenAI client.

    Returns:
        Embedding vector (list of floats).
    """
    if client is None:
        client = get_openai_client()

    response = await client.embeddings.create(
        model=_get_embedding_model(),
        input=[query],
    )

    return response.data[0].embedding
