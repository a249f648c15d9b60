"""
Canonical default settings and the seed document for a fresh flat store
"""
import copy
from datetime import datetime, timezone
from typing import Dict, Any

SCHEMA_VERSION = 1

# Single source of defaults for initialization, reset, and backfill
DEFAULT_SETTINGS: Dict[str, Any] = {
    "quizTimeLimit": 30,
    "passingScore": 70,
    "maxQuestions": 20,
    "maxAttempts": 3,
    "allowRetakes": True,
    "showResults": True,
    "requireEmailVerification": False,
    "feedbackMode": "afterSubmission",
    "gradingScheme": "percentage",
    "analytics": {
        "trackTimeSpent": True,
        "trackAttempts": True,
        "enableLeaderboard": False,
    },
    "accessibility": {
        "highContrast": False,
        "largeText": False,
        "screenReaderHints": True,
    },
    "lastUpdated": None,
}

# Top-level collections and their empty value
COLLECTIONS: Dict[str, type] = {
    "questions": list,
    "quizzes": list,
    "results": list,
    "users": list,
    "settings": dict,
    "achievements": list,
    "auditLogs": list,
    "userAchievements": dict,
}


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string"""
    return datetime.now(timezone.utc).isoformat()


def default_settings(stamp: bool = True) -> Dict[str, Any]:
    """Fresh copy of the default settings, optionally stamped with lastUpdated"""
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    if stamp:
        settings["lastUpdated"] = utc_now_iso()
    return settings


def default_document() -> Dict[str, Any]:
    """Document written when no store file exists yet"""
    now = utc_now_iso()
    return {
        "schemaVersion": SCHEMA_VERSION,
        "questions": [
            {
                "id": "q1",
                "text": "What is 2 + 2?",
                "options": ["3", "4", "5", "6"],
                "correctAnswer": "4",
                "difficulty": "easy",
                "category": "math",
                "timeLimit": 30,
                "createdAt": now,
                "updatedAt": now,
            }
        ],
        "quizzes": [
            {
                "id": "quiz-1",
                "title": "Getting Started",
                "description": "A short warm-up quiz",
                "questions": ["q1"],
                "timeLimit": DEFAULT_SETTINGS["quizTimeLimit"],
                "passingScore": DEFAULT_SETTINGS["passingScore"],
                "isPublished": True,
                "createdAt": now,
                "updatedAt": now,
            }
        ],
        "results": [],
        "users": [],
        "settings": default_settings(),
        "achievements": [],
        "auditLogs": [],
        "userAchievements": {},
    }
