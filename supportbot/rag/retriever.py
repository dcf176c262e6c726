"""
Retriever module ranking knowledge rows against the user query.

Every row is scored with cosine similarity and the corpus is sorted by
score, best first. Only the top few candidates reach the prompt.
"""

import logging
from typing import List, Sequence

from supportbot.models.knowledge import KnowledgeRow, RankedCandidate
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)

# Number of reference Q&A pairs injected into the prompt
TOP_K = 3


def rank_candidates(
    rows: Sequence[KnowledgeRow],
    embeddings: Sequence[Sequence[float]],
    query_embedding: Sequence[float],
) -> List[RankedCandidate]:
    """Score rows against the query and sort them by similarity, descending.

    The sort is stable: rows with equal scores keep their sheet order.

    Args:
        rows: Knowledge rows in sheet order.
        embeddings: One vector per row, aligned with ``rows``.
        query_embedding: Vector of the live user question.

    Returns:
        Ranked candidates, most similar first.
    """
    if len(rows) != len(embeddings):
        raise ValueError(f"Got {len(embeddings)} embeddings for {len(rows)} rows")

    candidates = [
        RankedCandidate(
            question=row.question,
            answer=row.answer,
            similarity=cosine_similarity(vector, query_embedding),
        )
        for row, vector in zip(rows, embeddings)
    ]
    return sorted(candidates, key=lambda c: c.similarity, reverse=True)


def top_k(ranked: Sequence[RankedCandidate], k: int = TOP_K) -> List[RankedCandidate]:
    """Return at most ``k`` leading candidates."""
    return list(ranked[:k])
