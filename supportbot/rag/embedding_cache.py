"""
Embedding cache backed by the knowledge sheet's Embedding column.

Each row may carry its question's vector serialized as a JSON array. When
every row holds a valid vector the cached values are reused and no
embedding request is made. Otherwise all questions are re-embedded, so
indices stay aligned with the rows, and the column is rewritten in one
bulk update when the sheet has it.
"""

import json
import logging
import math
import numbers
from typing import List, Optional, Sequence

from openai import AsyncOpenAI

from supportbot.models.knowledge import EMBEDDING_FIELD, Corpus, KnowledgeRow
from .embedder import EMBEDDING_DIMENSIONS, embed_texts

logger = logging.getLogger(__name__)


def encode_embedding(vector: Sequence[float]) -> str:
    """Serialize a vector for storage in a sheet cell.

    Raises:
        ValueError: If the vector is not EMBEDDING_DIMENSIONS long or holds NaN/Infinity.
    """
    if len(vector) != EMBEDDING_DIMENSIONS:
        raise ValueError(
            f"Refusing to cache embedding of length {len(vector)}, expected {EMBEDDING_DIMENSIONS}"
        )
    return json.dumps([float(x) for x in vector], allow_nan=False)


def _reject_constant(name: str):
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def decode_embedding(text: Optional[str]) -> Optional[List[float]]:
    """Parse a cached cell value, returning None unless it is a full vector."""
    if not text:
        return None
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except (TypeError, ValueError):
        return None

    if not isinstance(value, list) or len(value) != EMBEDDING_DIMENSIONS:
        return None
    # bool is a Number subclass but never a valid component
    if not all(isinstance(x, numbers.Real) and not isinstance(x, bool) for x in value):
        return None
    if not all(math.isfinite(x) for x in value):
        return None

    return [float(x) for x in value]


def partition_cached(corpus: Corpus) -> List[KnowledgeRow]:
    """Attach decoded vectors to rows with a valid cache and return those rows."""
    cached = []
    for row in corpus.rows:
        vector = decode_embedding(row.fields.get(EMBEDDING_FIELD))
        if vector is None:
            continue
        row.embedding = vector
        cached.append(row)
    return cached


async def resolve_embeddings(
    corpus: Corpus,
    client: Optional[AsyncOpenAI] = None,
) -> List[List[float]]:
    """Return one embedding per corpus row, in row order.

    Args:
        corpus: Rows loaded from the knowledge sheet.
        client: Optional pre-existing AsyncOpenAI client.

    Returns:
        List of vectors aligned with ``corpus.rows``.
    """
    if not corpus.rows:
        return []

    cached = partition_cached(corpus)
    if len(cached) == len(corpus.rows):
        logger.info(f"[CACHE] Using cached embeddings for {len(cached)} rows")
        return [row.embedding for row in corpus.rows]

    logger.info(
        f"[CACHE] Generating new embeddings ({len(cached)}/{len(corpus.rows)} rows cached)"
    )
    embeddings = await embed_texts(corpus.questions, client=client)

    for row, vector in zip(corpus.rows, embeddings):
        row.embedding = vector
        row.fields[EMBEDDING_FIELD] = encode_embedding(vector)

    if corpus.has_embedding_column:
        await _write_back(corpus)
    else:
        logger.info("[CACHE] Sheet has no Embedding column, skipping write-back")

    return embeddings


async def _write_back(corpus: Corpus) -> None:
    from supportbot import sheets_client

    await sheets_client.write_column(
        corpus.headers,
        EMBEDDING_FIELD,
        [row.fields[EMBEDDING_FIELD] for row in corpus.rows],
    )
    logger.info(f"[CACHE] Cached {len(corpus.rows)} embeddings in the knowledge sheet")
