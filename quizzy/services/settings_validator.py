"""
Settings validation against a static rule table
Collects every violation instead of stopping at the first one
"""
import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


SETTINGS_RULES: Dict[str, Dict[str, Any]] = {
    "quizTimeLimit": {"type": "number", "min": 1, "max": 180},
    "passingScore": {"type": "number", "min": 0, "max": 100},
    "allowRetakes": {"type": "boolean"},
    "showResults": {"type": "boolean"},
    "maxAttempts": {"type": "number", "min": 1, "max": 10},
    "feedbackMode": {
        "type": "string",
        "allowed_values": ["immediate", "afterSubmission", "never"],
    },
    "gradingScheme": {
        "type": "string",
        "allowed_values": ["percentage", "points", "custom"],
    },
}


def _matches_type(value: Any, expected: str) -> bool:
    if expected == "number":
        # bool is an int subclass but never a valid number here
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "string":
        return isinstance(value, str)
    return False


def validate_settings(candidate: Any) -> List[str]:
    """
    Validate a candidate settings object

    Args:
        candidate: Settings mapping (camelCase keys)

    Returns:
        Violation messages in rule-table order; empty means valid
    """
    if not isinstance(candidate, dict):
        return ["Settings must be an object"]

    errors = []

    for field, rule in SETTINGS_RULES.items():
        if field not in candidate or candidate[field] is None:
            errors.append(f"{field} is required")
            continue

        value = candidate[field]
        expected = rule["type"]

        if not _matches_type(value, expected):
            errors.append(f"{field} must be a {expected}")
            continue

        if expected == "number" and not rule["min"] <= value <= rule["max"]:
            errors.append(f"{field} must be between {rule['min']} and {rule['max']}")
        elif "allowed_values" in rule and value not in rule["allowed_values"]:
            errors.append(f"{field} must be one of: {', '.join(rule['allowed_values'])}")

    if errors:
        logger.debug(f"Settings validation failed with {len(errors)} error(s)")

    return errors


# Settings model fields outside the rule table; checked only when present
OPTIONAL_SETTINGS_RULES: Dict[str, Dict[str, Any]] = {
    "maxQuestions": {"type": "number", "min": 1, "max": 100},
    "requireEmailVerification": {"type": "boolean"},
}

# Option groups whose values are all booleans
SETTINGS_OPTION_GROUPS = ("analytics", "accessibility")


def validate_optional_settings(candidate: Any) -> List[str]:
    """
    Type-check the optional settings fields that are present

    Fields missing from the candidate are not reported. Keys that are
    neither rule-table fields nor listed here still pass through.
    """
    if not isinstance(candidate, dict):
        return ["Settings must be an object"]

    errors = []

    for field, rule in OPTIONAL_SETTINGS_RULES.items():
        if field not in candidate:
            continue

        value = candidate[field]
        if not _matches_type(value, rule["type"]):
            errors.append(f"{field} must be a {rule['type']}")
        elif rule["type"] == "number" and not rule["min"] <= value <= rule["max"]:
            errors.append(f"{field} must be between {rule['min']} and {rule['max']}")

    for group in SETTINGS_OPTION_GROUPS:
        if group not in candidate:
            continue

        options = candidate[group]
        if not isinstance(options, dict):
            errors.append(f"{group} must be an object")
            continue

        for key, value in options.items():
            if not isinstance(value, bool):
                errors.append(f"{group}.{key} must be a boolean")

    return errors
