"""Conversion of inbound messages into health log entries."""

from __future__ import annotations

from typing import Optional

from hb_cli.core.classify import DEFAULT_RULES, ClassifierRules, classify_message
from hb_cli.core.models import ClassificationResult, HealthLogEntry, Message


def build_health_log(message: Message, result: ClassificationResult) -> Optional[HealthLogEntry]:
    """Combine a message with its classification, or decline.

    Outgoing messages and results without a category (including the status
    command) never produce an entry.
    """
    if not message.is_inbound:
        return None
    if result.category is None:
        return None

    return HealthLogEntry(
        id=message.id,
        timestamp=message.timestamp,
        raw_message=message.content,
        category=result.category,
        processed=result.processed,
        confidence=result.confidence,
    )


def message_to_health_log(
    message: Message,
    rules: ClassifierRules = DEFAULT_RULES,
) -> Optional[HealthLogEntry]:
    """Classify a message and convert it to a health log entry."""
    if not message.is_inbound:
        return None
    return build_health_log(message, classify_message(message.content, rules=rules))
