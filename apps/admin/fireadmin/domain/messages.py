"""Message validation rules applied before anything is sent."""

import re

from fireadmin.errors import MessageValidationError
from fireadmin.schemas.messaging import Message

MAX_CONDITION_OPERATORS = 2
MAX_REGISTRATION_IDS = 1000
MAX_TIME_TO_LIVE_SECONDS = 2_419_200
TOPIC_PREFIX = "/topics/"

_OPERATOR_PATTERN = re.compile(r"&&|\|\|")


def count_condition_operators(condition: str) -> int:
    return len(_OPERATOR_PATTERN.findall(condition))


def normalize_topic(topic: str) -> str:
    """Prefix a bare topic name with ``/topics/``."""
    topic = topic.strip()
    if not topic:
        raise MessageValidationError("topic name is required")
    if topic.startswith(TOPIC_PREFIX):
        return topic
    return TOPIC_PREFIX + topic.lstrip("/")


def ensure_valid_message(message: Message) -> None:
    if not message.to and not message.registration_ids and not message.condition:
        raise MessageValidationError("message requires a recipient (to, registration_ids or condition)")

    if message.condition and count_condition_operators(message.condition) > MAX_CONDITION_OPERATORS:
        raise MessageValidationError(
            f"condition supports at most {MAX_CONDITION_OPERATORS} logical operators",
            details={"condition": message.condition},
        )

    if message.registration_ids and len(message.registration_ids) > MAX_REGISTRATION_IDS:
        raise MessageValidationError(
            f"registration_ids supports at most {MAX_REGISTRATION_IDS} recipients",
            details={"count": len(message.registration_ids)},
        )

    if message.time_to_live is not None and not 0 <= message.time_to_live <= MAX_TIME_TO_LIVE_SECONDS:
        raise MessageValidationError(
            f"time_to_live must be between 0 and {MAX_TIME_TO_LIVE_SECONDS} seconds",
            details={"time_to_live": message.time_to_live},
        )
