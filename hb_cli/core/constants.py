"""Static constants and mappings for Health Buddie CLI."""

from __future__ import annotations

API_BASE = "https://health-tracker-new-app-7de8aa984308.herokuapp.com/api"

CATEGORIES = ("exercise", "food")
CHANNELS = ("whatsapp", "imessage", "voice", "sms", "twilio-whatsapp")
DIRECTIONS = ("incoming", "outgoing")

EXERCISE_KEYWORDS = (
    "walk",
    "run",
    "jog",
    "yoga",
    "gym",
    "workout",
    "exercise",
    "swim",
    "hike",
    "bike",
    "cycling",
    "pilates",
    "class",
)

FOOD_KEYWORDS = (
    "eat",
    "ate",
    "food",
    "meal",
    "breakfast",
    "lunch",
    "dinner",
    "snack",
)

# Irregular past tenses that count as a mention of the keyword.
KEYWORD_ALIASES = {
    "run": ("ran",),
    "swim": ("swam",),
}

# First match wins; order is significant.
EXERCISE_TYPE_RULES = (
    ("pilates", ("pilates",)),
    ("yoga", ("yoga",)),
    ("running", ("run", "jog")),
    ("walking", ("walk", "hike")),
    ("swimming", ("swim",)),
    ("cycling", ("bike", "cycling")),
)

BASE_CONFIDENCE = 0.7
STATUS_CONFIDENCE = 1.0
MAX_CONFIDENCE = 0.98
DURATION_BONUS = 0.1
DISTANCE_BONUS = 0.05
TYPE_BONUS = 0.1
FOOD_BONUS = 0.1
LOW_CONFIDENCE_THRESHOLD = 0.75

STATUS_COMMAND = "status"

STATUS_REPLY = "Generating your weekly health report. A PDF will be sent to you shortly."
UNCLEAR_REPLY = (
    "I'm not sure I understood that. Could you please clarify if you're logging exercise or food?"
)
GENERIC_REPLY = "Your health update has been logged. Thank you!"

CATEGORY_LABELS = {
    "exercise": "Exercise",
    "food": "Food",
}

DEFAULT_TEMPLATES = (
    {
        "id": "1",
        "name": "Regular Exercise",
        "category": "exercise",
        "frequency": "3 times a week",
        "active": True,
    },
    {
        "id": "2",
        "name": "Daily Food Tracking",
        "category": "food",
        "frequency": "once a day",
        "active": True,
    },
)

SESSION_SCHEMA_VERSION = 1
REPORT_FILENAME = "health-report.pdf"

TWILIO_CHANNELS = ("whatsapp", "sms")
TWILIO_WEBHOOK_URL = "https://your-backend-url.com/twilio-webhook"
EXAMPLE_MESSAGES = (
    '"I ran for 30 minutes today"',
    '"Had a salad for lunch"',
    '"status" - to request a weekly report',
)
