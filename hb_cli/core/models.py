"""Lightweight data models used across commands."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union

from hb_cli.utils.date_ranges import parse_timestamp


@dataclass(frozen=True)
class ExerciseData:
    """Structured fields extracted from an exercise message."""

    duration: Optional[int] = None
    distance: Optional[float] = None
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        fields = {"duration": self.duration, "distance": self.distance, "type": self.type}
        return {"exercise": {key: value for key, value in fields.items() if value is not None}}


@dataclass(frozen=True)
class FoodData:
    """Structured fields extracted from a food message."""

    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.description is None:
            return {"food": {}}
        return {"food": {"description": self.description}}


@dataclass(frozen=True)
class StatusRequest:
    """Marker for the report-request command."""

    def to_dict(self) -> Dict[str, Any]:
        return {"isStatusRequest": True}


@dataclass(frozen=True)
class NoData:
    """Nothing could be extracted."""

    def to_dict(self) -> Dict[str, Any]:
        return {}


ProcessedData = Union[ExerciseData, FoodData, StatusRequest, NoData]


def processed_from_dict(payload: Any) -> ProcessedData:
    """Rebuild processed data from its serialized form."""
    if not isinstance(payload, dict):
        return NoData()
    if payload.get("isStatusRequest"):
        return StatusRequest()

    exercise = payload.get("exercise")
    if isinstance(exercise, dict):
        duration = exercise.get("duration")
        distance = exercise.get("distance")
        return ExerciseData(
            duration=int(duration) if duration is not None else None,
            distance=float(distance) if distance is not None else None,
            type=exercise.get("type"),
        )

    food = payload.get("food")
    if isinstance(food, dict):
        return FoodData(description=food.get("description") or None)
    return NoData()


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one message; not persisted."""

    category: Optional[str]
    processed: ProcessedData
    confidence: float

    @property
    def is_status_request(self) -> bool:
        return isinstance(self.processed, StatusRequest)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "processed": self.processed.to_dict(),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class HealthLogEntry:
    """A classified health update derived from one inbound message."""

    id: str
    timestamp: datetime
    raw_message: str
    category: str
    processed: ProcessedData
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "rawMessage": self.raw_message,
            "category": self.category,
            "processed": self.processed.to_dict(),
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "HealthLogEntry":
        return cls(
            id=str(payload["id"]),
            timestamp=parse_timestamp(payload["timestamp"]),
            raw_message=str(payload.get("rawMessage") or ""),
            category=str(payload["category"]),
            processed=processed_from_dict(payload.get("processed")),
            confidence=float(payload.get("confidence", 0.0)),
        )


@dataclass(frozen=True)
class Message:
    """One message from the messaging channel."""

    id: str
    content: str
    timestamp: datetime
    direction: str = "incoming"
    channel: str = "whatsapp"
    phone_number: Optional[str] = None

    @property
    def is_inbound(self) -> bool:
        return self.direction == "incoming"

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "type": self.direction,
            "channel": self.channel,
        }
        if self.phone_number:
            payload["phoneNumber"] = self.phone_number
        return payload


@dataclass(frozen=True)
class CareTemplate:
    """A user-defined reminder/goal record."""

    id: str
    name: str
    category: str
    frequency: str
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "frequency": self.frequency,
            "active": self.active,
        }
