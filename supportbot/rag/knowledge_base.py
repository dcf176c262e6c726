"""
Knowledge base loader for the Q&A Google Sheet.

Problems with the sheet never abort the pipeline: they become warning
embeds on the reply and the bot answers without reference material.
"""

import logging
from typing import Dict, List

from supportbot.models.knowledge import (
    EMBEDDING_FIELD,
    REQUIRED_FIELDS,
    Corpus,
    KnowledgeBaseResult,
    KnowledgeRow,
    WarningEmbed,
)

logger = logging.getLogger(__name__)

WARNING_PREFIX = "Could not populate knowledge base"
NO_SHEET_MESSAGE = f"{WARNING_PREFIX}: No Google sheet connected"
EMPTY_SHEET_MESSAGE = f"{WARNING_PREFIX}: Google sheet empty"


def missing_fields_message(missing: List[str]) -> str:
    joined = '", "'.join(missing)
    return f'{WARNING_PREFIX}: Google sheet missing fields: "{joined}"'


def build_corpus(headers: List[str], rows: List[Dict[str, str]]) -> Corpus:
    """Build a Corpus from named rows, keeping source order."""
    return Corpus(
        rows=[
            KnowledgeRow(
                question=fields.get("Question", ""),
                answer=fields.get("Answer", ""),
                fields=dict(fields),
            )
            for fields in rows
        ],
        headers=list(headers),
        has_embedding_column=EMBEDDING_FIELD in headers,
    )


def _failed(message: str) -> KnowledgeBaseResult:
    logger.warning(f"[KB] {message}")
    return KnowledgeBaseResult(corpus=Corpus(), warnings=[WarningEmbed(description=message)])


async def load_knowledge_base() -> KnowledgeBaseResult:
    """Fetch the knowledge sheet and validate its schema.

    Returns:
        KnowledgeBaseResult with the corpus and any warnings. On failure
        the corpus is empty and exactly one warning is returned.
    """
    from supportbot import sheets_client

    try:
        headers, rows = await sheets_client.select_rows()
    except Exception as e:
        logger.error(f"[KB] Failed to read knowledge sheet: {e}")
        return _failed(NO_SHEET_MESSAGE)

    if not rows:
        return _failed(EMPTY_SHEET_MESSAGE)

    present = set(rows[0].keys())
    missing = [name for name in REQUIRED_FIELDS if name not in present]
    if missing:
        return _failed(missing_fields_message(missing))

    corpus = build_corpus(headers, rows)
    logger.info(f"[KB] Loaded {len(corpus)} knowledge base rows")
    return KnowledgeBaseResult(corpus=corpus)
