#!/usr/bin/env python3
"""
End-to-end tests for the support pipeline with mocked OpenAI, Sheets and Discord
"""
import asyncio
import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from supportbot import config, support_agent
from supportbot.models.knowledge import OSCategory, Role, SupportEvent
from supportbot.rag.embedder import EMBEDDING_DIMENSIONS
from supportbot.rag.knowledge_base import EMPTY_SHEET_MESSAGE, build_corpus
from supportbot.rag.retriever import rank_candidates

HEADERS = ["Question", "Answer", "Embedding"]
QUERY_VECTOR = [((i % 7) + 1) * 0.01 for i in range(EMBEDDING_DIMENSIONS)]


def _event(content="<@999> How do I install?"):
    return SupportEvent(
        message_id="111",
        channel_id="222",
        channel_name="support",
        content=content,
        author_name="player",
        timestamp=datetime(2026, 10, 19, 15, 4, 5, tzinfo=timezone.utc),
        role_names=["Windows"],
        mention_ids=["999"],
    )


def _openai_client(answer="  Download from site.  "):
    client = MagicMock()

    async def create_embeddings(model, input):
        return SimpleNamespace(data=[SimpleNamespace(embedding=list(QUERY_VECTOR)) for _ in input])

    client.embeddings.create = AsyncMock(side_effect=create_embeddings)
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=answer))]
    ))
    return client


def _single_row_sheet():
    return HEADERS, [{
        "Question": "How do I install?",
        "Answer": "Download from site.",
        "Embedding": json.dumps(QUERY_VECTOR),
    }]


def test_single_row_corpus_ranks_exact_match_first():
    headers, rows = _single_row_sheet()
    corpus = build_corpus(headers, rows)
    embeddings = [json.loads(rows[0]["Embedding"])]

    ranked = rank_candidates(corpus.rows, embeddings, QUERY_VECTOR)

    assert ranked[0].question == "How do I install?"
    assert ranked[0].similarity == pytest.approx(1.0)


def test_answer_question_end_to_end_with_cached_embeddings():
    client = _openai_client()

    with patch("supportbot.sheets_client.select_rows", AsyncMock(return_value=_single_row_sheet())), \
         patch("supportbot.sheets_client.write_column", new_callable=AsyncMock) as write_column, \
         patch("supportbot.discord_client.send_reply", AsyncMock(return_value={"id": "555"})) as send, \
         patch.object(config, "COMPLETION_MODEL", "test-chat"), \
         patch.object(config, "COMPLETION_MAX_TOKENS", 512):
        message = asyncio.run(support_agent.answer_question(_event(), OSCategory.WINDOWS, openai_client=client))

    assert message == {"id": "555"}
    # only the user query is embedded, the row is cached
    client.embeddings.create.assert_awaited_once()
    assert client.embeddings.create.await_args.kwargs["input"] == ["How do I install?"]
    write_column.assert_not_awaited()

    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "test-chat"
    assert kwargs["max_tokens"] == 512
    assert (kwargs["temperature"], kwargs["top_p"], kwargs["n"]) == (0, 1, 1)
    assert kwargs["presence_penalty"] == 0 and kwargs["frequency_penalty"] == 0

    messages = kwargs["messages"]
    assistants = [m for m in messages if m["role"] == Role.ASSISTANT.value]
    users = [m for m in messages if m["role"] == Role.USER.value]
    assert assistants == [{"role": "assistant", "content": "Download from site."}]
    assert len(users) == 2
    assert users[-1]["content"].endswith("User: How do I install?")

    send.assert_awaited_once_with("222", "111", "Download from site.", [])


def test_empty_sheet_still_answers_with_warning():
    client = _openai_client("Try reinstalling.")

    with patch("supportbot.sheets_client.select_rows", AsyncMock(return_value=(HEADERS, []))), \
         patch("supportbot.discord_client.send_reply", AsyncMock(return_value={"id": "556"})) as send:
        asyncio.run(support_agent.answer_question(_event(), OSCategory.LINUX, openai_client=client))

    messages = client.chat.completions.create.await_args.kwargs["messages"]
    assert not [m for m in messages if m["role"] == "assistant"]

    channel_id, reply_to, content, warnings = send.await_args.args
    assert content == "Try reinstalling."
    assert [w.description for w in warnings] == [EMPTY_SHEET_MESSAGE]


def test_cache_miss_embeds_corpus_and_writes_back():
    headers, rows = _single_row_sheet()
    rows[0]["Embedding"] = "not json"
    client = _openai_client()

    with patch("supportbot.sheets_client.select_rows", AsyncMock(return_value=(headers, rows))), \
         patch("supportbot.sheets_client.write_column", new_callable=AsyncMock) as write_column, \
         patch("supportbot.discord_client.send_reply", AsyncMock(return_value={"id": "557"})):
        asyncio.run(support_agent.answer_question(_event(), OSCategory.WINDOWS, openai_client=client))

    assert client.embeddings.create.await_count == 2
    write_column.assert_awaited_once()
    _, field_name, cells = write_column.await_args.args
    assert field_name == "Embedding"
    assert [json.loads(cell) for cell in cells] == [QUERY_VECTOR]


def test_completion_failure_sends_no_reply():
    client = _openai_client()
    client.chat.completions.create = AsyncMock(side_effect=RuntimeError("provider down"))

    with patch("supportbot.sheets_client.select_rows", AsyncMock(return_value=_single_row_sheet())), \
         patch("supportbot.discord_client.send_reply", new_callable=AsyncMock) as send:
        with pytest.raises(RuntimeError):
            asyncio.run(support_agent.answer_question(_event(), OSCategory.WINDOWS, openai_client=client))

    send.assert_not_awaited()
