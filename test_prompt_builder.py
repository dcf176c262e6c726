#!/usr/bin/env python3
"""
Tests for completion prompt assembly
"""
from datetime import datetime, timezone

from supportbot.models.knowledge import OSCategory, RankedCandidate, Role
from supportbot.rag.prompt_builder import build_prompt, format_timestamp

ASKED_AT = datetime(2026, 10, 19, 15, 4, 5, tzinfo=timezone.utc)
STAMP = "[Monday, October 19, 2026 at 3:04:05 PM UTC]"


def _ranked(n):
    return [RankedCandidate(f"question {i}", f"answer {i}", 1 - i / 10) for i in range(n)]


def test_format_timestamp_long_en_us():
    assert format_timestamp(ASKED_AT, "UTC") == "Monday, October 19, 2026 at 3:04:05 PM UTC"
    assert format_timestamp(datetime(2026, 1, 2, 0, 5, 0), "UTC") == "Friday, January 2, 2026 at 12:05:00 AM UTC"


def test_format_timestamp_converts_timezone():
    assert format_timestamp(ASKED_AT, "America/New_York") == "Monday, October 19, 2026 at 11:04:05 AM EDT"


def test_prompt_uses_only_top_three_pairs():
    messages = build_prompt("How do I update?", _ranked(5), ASKED_AT, OSCategory.WINDOWS, timezone="UTC")

    users = [m for m in messages if m.role is Role.USER]
    assistants = [m for m in messages if m.role is Role.ASSISTANT]
    assert len(users) == 4
    assert [m.content for m in assistants] == ["answer 0", "answer 1", "answer 2"]
    assert messages[-1].content == f"{STAMP} User: How do I update?"
    assert all(m.content.startswith(f"{STAMP} User: ") for m in users)


def test_pairs_interleave_after_system_instructions():
    messages = build_prompt("q?", _ranked(2), ASKED_AT, OSCategory.LINUX, timezone="UTC")
    roles = [m.role for m in messages]

    first_user = roles.index(Role.USER)
    assert all(r is Role.SYSTEM for r in roles[:first_user])
    assert roles[first_user:] == [
        Role.USER, Role.ASSISTANT, Role.USER, Role.ASSISTANT, Role.SYSTEM, Role.USER,
    ]
    assert messages[first_user].content == f"{STAMP} User: question 0"


def test_os_label_is_the_only_dynamic_instruction():
    windows = build_prompt("q", [], ASKED_AT, OSCategory.WINDOWS, timezone="UTC")
    mac = build_prompt("q", [], ASKED_AT, OSCategory.MACOS, timezone="UTC")

    differing = [(a.content, b.content) for a, b in zip(windows, mac) if a.content != b.content]
    assert len(differing) == 1
    assert "Windows client" in differing[0][0]
    assert "macOS client" in differing[0][1]


def test_empty_ranking_has_no_reference_pairs():
    messages = build_prompt("q", [], ASKED_AT, OSCategory.WINDOWS, timezone="UTC")
    assert [m.role for m in messages if m.role is not Role.SYSTEM] == [Role.USER]
    assert messages[-1].to_dict() == {"role": "user", "content": f"{STAMP} User: q"}
