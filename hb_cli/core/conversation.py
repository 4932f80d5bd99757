"""Message processing and reply pairing."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, List, Optional

from hb_cli.core.classify import DEFAULT_RULES, ClassifierRules, classify_message
from hb_cli.core.constants import LOW_CONFIDENCE_THRESHOLD
from hb_cli.core.health_log import build_health_log, message_to_health_log
from hb_cli.core.models import ClassificationResult, HealthLogEntry, Message
from hb_cli.core.responder import generate_response

REPLY_DELAY = timedelta(minutes=1)


@dataclass(frozen=True)
class ProcessedMessage:
    """A message with its classification, log entry and reply."""

    message: Message
    result: ClassificationResult
    entry: Optional[HealthLogEntry]
    reply: Optional[str]

    @property
    def is_status_request(self) -> bool:
        return self.message.is_inbound and self.result.is_status_request


def process_message(
    message: Message,
    rules: ClassifierRules = DEFAULT_RULES,
    low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD,
) -> ProcessedMessage:
    """Classify one message and build its log entry and reply."""
    result = classify_message(message.content, rules=rules)
    if not message.is_inbound:
        return ProcessedMessage(message=message, result=result, entry=None, reply=None)

    entry = build_health_log(message, result)
    reply = generate_response(
        entry,
        is_status_request=result.is_status_request,
        low_confidence_threshold=low_confidence_threshold,
    )
    return ProcessedMessage(message=message, result=result, entry=entry, reply=reply)


def reply_message(processed: ProcessedMessage) -> Optional[Message]:
    """Outgoing message carrying the reply, one minute after the original."""
    if processed.reply is None:
        return None
    original = processed.message
    return Message(
        id=f"response-{original.id}",
        content=processed.reply,
        timestamp=original.timestamp + REPLY_DELAY,
        direction="outgoing",
        channel=original.channel,
        phone_number=original.phone_number,
    )


def with_system_responses(
    messages: Iterable[Message],
    rules: ClassifierRules = DEFAULT_RULES,
    low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD,
) -> List[Message]:
    """Interleave generated replies with incoming messages, newest first."""
    conversation: List[Message] = []
    for message in messages:
        conversation.append(message)
        reply = reply_message(
            process_message(message, rules=rules, low_confidence_threshold=low_confidence_threshold)
        )
        if reply is not None:
            conversation.append(reply)

    conversation.sort(key=lambda item: item.timestamp, reverse=True)
    return conversation


def entries_from_messages(
    messages: Iterable[Message],
    rules: ClassifierRules = DEFAULT_RULES,
) -> List[HealthLogEntry]:
    """Health log entries for every classifiable inbound message."""
    entries: List[HealthLogEntry] = []
    for message in messages:
        entry = message_to_health_log(message, rules=rules)
        if entry is not None:
            entries.append(entry)
    return entries
