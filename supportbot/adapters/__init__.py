"""Adapters package entry.

Inbound platform events are normalized here before reaching the pipeline.
"""
from supportbot.adapters.discord_adapter import classify_os, parse_event, question_text, should_answer, strip_mentions

__all__ = ["classify_os", "parse_event", "question_text", "should_answer", "strip_mentions"]
