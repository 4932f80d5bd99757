"""Reply text for classified health updates."""

from __future__ import annotations

import logging
from typing import Optional

from hb_cli.core.constants import (
    GENERIC_REPLY,
    LOW_CONFIDENCE_THRESHOLD,
    STATUS_REPLY,
    UNCLEAR_REPLY,
)
from hb_cli.core.models import ExerciseData, FoodData, HealthLogEntry
from hb_cli.utils.formatting import format_number

logger = logging.getLogger(__name__)


def _exercise_reply(data: ExerciseData) -> str:
    response = "Your exercise has been logged. "
    if data.duration:
        response += f"Great job on your {data.duration}-minute "
    else:
        response += "Great job on your "

    response += data.type or "workout"

    if data.distance:
        unit = "mile" if data.distance == 1 else "miles"
        response += f" covering {format_number(data.distance)} {unit}"

    return response + "!"


def _food_reply(data: FoodData) -> str:
    response = "Your meal has been logged. "
    if data.description:
        formatted = data.description[0].upper() + data.description[1:]
        return response + f"{formatted} sounds nutritious!"
    return response + "Thank you for the update!"


def generate_response(
    entry: Optional[HealthLogEntry],
    is_status_request: bool = False,
    low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD,
) -> str:
    """Build the confirmation sent back for a message."""
    if is_status_request:
        return STATUS_REPLY

    if entry is None:
        return UNCLEAR_REPLY

    if entry.confidence < low_confidence_threshold:
        logger.warning("Low confidence (%.2f) for message: %s", entry.confidence, entry.raw_message)

    if entry.category == "exercise":
        data = entry.processed if isinstance(entry.processed, ExerciseData) else ExerciseData()
        return _exercise_reply(data)

    if entry.category == "food":
        data_food = entry.processed if isinstance(entry.processed, FoodData) else FoodData()
        return _food_reply(data_food)

    return GENERIC_REPLY
