"""Message classification utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from hb_cli.core.constants import (
    BASE_CONFIDENCE,
    DISTANCE_BONUS,
    DURATION_BONUS,
    EXERCISE_KEYWORDS,
    EXERCISE_TYPE_RULES,
    FOOD_BONUS,
    FOOD_KEYWORDS,
    KEYWORD_ALIASES,
    MAX_CONFIDENCE,
    STATUS_COMMAND,
    STATUS_CONFIDENCE,
    TYPE_BONUS,
)
from hb_cli.core.models import (
    ClassificationResult,
    ExerciseData,
    FoodData,
    NoData,
    StatusRequest,
)

_DURATION_RE = re.compile(r"(\d+)\s*(minutes|minute|min|hours|hour|hrs|hr)")
_DISTANCE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(miles|mile|kilometers|kilometer|km)")
_LEADING_FILLER_RE = re.compile(r"^(i|had|have|was|my|for)\s+")
_LEADING_ARTICLE_RE = re.compile(r"^(some|a|an)\s+")

_ALIAS_PATTERNS = {
    keyword: [re.compile(rf"\b{re.escape(alias)}\b") for alias in aliases]
    for keyword, aliases in KEYWORD_ALIASES.items()
}


@dataclass(frozen=True)
class ClassifierRules:
    """Keyword sets used for category detection."""

    exercise_keywords: Tuple[str, ...] = EXERCISE_KEYWORDS
    food_keywords: Tuple[str, ...] = FOOD_KEYWORDS


DEFAULT_RULES = ClassifierRules()


def _mentions(text: str, keyword: str) -> bool:
    if keyword in text:
        return True
    return any(pattern.search(text) for pattern in _ALIAS_PATTERNS.get(keyword, ()))


def _first_mentioned(text: str, keywords: Iterable[str]) -> Optional[str]:
    for keyword in keywords:
        if _mentions(text, keyword):
            return keyword
    return None


def _extract_duration(text: str) -> Optional[int]:
    match = _DURATION_RE.search(text)
    if not match:
        return None
    duration = int(match.group(1))
    if match.group(2).startswith(("hour", "hr")):
        duration *= 60
    return duration


def _extract_distance(text: str) -> Optional[float]:
    match = _DISTANCE_RE.search(text)
    if not match:
        return None
    return float(match.group(1))


def _exercise_type(text: str) -> Optional[str]:
    for exercise_type, keywords in EXERCISE_TYPE_RULES:
        if any(_mentions(text, keyword) for keyword in keywords):
            return exercise_type
    return None


def _classify_exercise(text: str, rules: ClassifierRules) -> Tuple[ExerciseData, float]:
    confidence = BASE_CONFIDENCE

    duration = _extract_duration(text)
    if duration is not None:
        confidence += DURATION_BONUS

    distance = _extract_distance(text)
    if distance is not None:
        confidence += DISTANCE_BONUS

    exercise_type = _exercise_type(text)
    if exercise_type is not None:
        confidence += TYPE_BONUS
    else:
        exercise_type = _first_mentioned(text, rules.exercise_keywords)

    return ExerciseData(duration=duration, distance=distance, type=exercise_type), confidence


def _food_description(text: str, rules: ClassifierRules) -> Optional[str]:
    description = text
    for keyword in rules.food_keywords:
        # "for lunch" / "at dinner" go together with the meal word.
        pattern = rf"\b(?:(?:for|at)\s+)?{re.escape(keyword)}(?:ed)?\b\s*"
        description = re.sub(pattern, "", description, count=1)

    description = _LEADING_FILLER_RE.sub("", description, count=1)
    description = _LEADING_ARTICLE_RE.sub("", description, count=1)
    return description.strip() or None


def _cap(confidence: float) -> float:
    return round(min(confidence, MAX_CONFIDENCE), 2)


def classify_message(text: str, rules: ClassifierRules = DEFAULT_RULES) -> ClassificationResult:
    """Classify a free-text message into a health category with extracted fields.

    Exercise keywords are checked first and win over food keywords. A result
    with ``category=None`` is either the status command or text that matched
    neither keyword set; it is never an error.
    """
    normalized = text.lower()

    if normalized.strip() == STATUS_COMMAND:
        return ClassificationResult(
            category=None,
            processed=StatusRequest(),
            confidence=STATUS_CONFIDENCE,
        )

    if _first_mentioned(normalized, rules.exercise_keywords):
        exercise, confidence = _classify_exercise(normalized, rules)
        return ClassificationResult(category="exercise", processed=exercise, confidence=_cap(confidence))

    if any(keyword in normalized for keyword in rules.food_keywords):
        food = FoodData(description=_food_description(normalized, rules))
        return ClassificationResult(
            category="food",
            processed=food,
            confidence=_cap(BASE_CONFIDENCE + FOOD_BONUS),
        )

    return ClassificationResult(category=None, processed=NoData(), confidence=BASE_CONFIDENCE)


def _keyword_list(raw: Any) -> Tuple[str, ...]:
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        return ()
    keywords = [str(item).strip().lower() for item in raw]
    return tuple(keyword for keyword in keywords if keyword)


def classification_rules_from_config(config: Dict[str, Any]) -> ClassifierRules:
    """Build rules from config if extra keywords are provided, otherwise defaults."""
    configured = config.get("classification", {})
    if not isinstance(configured, dict):
        return DEFAULT_RULES

    extra_exercise = _keyword_list(configured.get("extra_exercise_keywords"))
    extra_food = _keyword_list(configured.get("extra_food_keywords"))
    if not extra_exercise and not extra_food:
        return DEFAULT_RULES

    return ClassifierRules(
        exercise_keywords=EXERCISE_KEYWORDS
        + tuple(keyword for keyword in extra_exercise if keyword not in EXERCISE_KEYWORDS),
        food_keywords=FOOD_KEYWORDS
        + tuple(keyword for keyword in extra_food if keyword not in FOOD_KEYWORDS),
    )
