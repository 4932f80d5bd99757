from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from hb_cli.core.constants import GENERIC_REPLY, STATUS_REPLY, UNCLEAR_REPLY
from hb_cli.core.models import ExerciseData, FoodData, HealthLogEntry, NoData, ProcessedData
from hb_cli.core.responder import generate_response


def _entry(category: str, processed: ProcessedData, confidence: float = 0.9) -> HealthLogEntry:
    return HealthLogEntry(
        id="e1",
        timestamp=datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc),
        raw_message="raw",
        category=category,
        processed=processed,
        confidence=confidence,
    )


def test_status_reply_wins() -> None:
    entry = _entry("exercise", ExerciseData(duration=30, type="running"))
    assert generate_response(entry, is_status_request=True) == STATUS_REPLY
    assert generate_response(None, is_status_request=True) == STATUS_REPLY


def test_no_entry_asks_for_clarification() -> None:
    assert generate_response(None) == UNCLEAR_REPLY


def test_exercise_with_duration_and_type() -> None:
    reply = generate_response(_entry("exercise", ExerciseData(duration=30, type="running")))
    assert reply == "Your exercise has been logged. Great job on your 30-minute running!"


def test_exercise_with_distance_only() -> None:
    reply = generate_response(_entry("exercise", ExerciseData(distance=2.0, type="walking"), 0.85))
    assert reply == "Your exercise has been logged. Great job on your walking covering 2 miles!"


def test_exercise_single_mile_and_fractional_distance() -> None:
    one = generate_response(_entry("exercise", ExerciseData(distance=1.0, type="running")))
    assert one.endswith("covering 1 mile!")
    fractional = generate_response(_entry("exercise", ExerciseData(distance=1.5, type="swimming")))
    assert fractional.endswith("covering 1.5 miles!")


def test_exercise_without_type_says_workout() -> None:
    reply = generate_response(_entry("exercise", ExerciseData()))
    assert reply == "Your exercise has been logged. Great job on your workout!"


def test_food_with_description_is_capitalised() -> None:
    reply = generate_response(_entry("food", FoodData(description="salad with grilled chicken"), 0.8))
    assert reply == "Your meal has been logged. Salad with grilled chicken sounds nutritious!"


def test_food_without_description() -> None:
    reply = generate_response(_entry("food", FoodData(), 0.8))
    assert reply == "Your meal has been logged. Thank you for the update!"


def test_other_category_gets_generic_reply() -> None:
    assert generate_response(_entry("sleep", NoData())) == GENERIC_REPLY


def test_low_confidence_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="hb_cli.core.responder")
    generate_response(_entry("exercise", ExerciseData(type="gym"), confidence=0.7))
    assert "Low confidence" in caplog.text


def test_threshold_is_configurable(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="hb_cli.core.responder")
    generate_response(_entry("exercise", ExerciseData(type="gym"), confidence=0.7), low_confidence_threshold=0.5)
    assert "Low confidence" not in caplog.text


def test_exercise_with_duration_type_and_distance() -> None:
    reply = generate_response(_entry("exercise", ExerciseData(duration=45, type="walking", distance=2.0)))
    assert reply == "Your exercise has been logged. Great job on your 45-minute walking covering 2 miles!"


def test_distance_is_printed_unchanged() -> None:
    long_fraction = generate_response(_entry("exercise", ExerciseData(distance=10.123456, type="running")))
    assert long_fraction.endswith("covering 10.123456 miles!")
    large = generate_response(_entry("exercise", ExerciseData(distance=1234567.5, type="running")))
    assert large == "Your exercise has been logged. Great job on your running covering 1234567.5 miles!"


def test_zero_duration_and_distance_are_omitted() -> None:
    reply = generate_response(_entry("exercise", ExerciseData(duration=0, type="cycling", distance=0.0)))
    assert reply == "Your exercise has been logged. Great job on your cycling!"
