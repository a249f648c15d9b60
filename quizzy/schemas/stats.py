"""
Pydantic schemas for statistics endpoints
"""
from pydantic import Field
from typing import Any, Dict, List, Literal

from quizzy.schemas.base import CamelModel


class ActivityItem(CamelModel):
    type: str = "quiz_completion"
    user: Any = None
    score: float
    timestamp: Any = None


class TrendPoint(CamelModel):
    date: str
    score: float


class DashboardStats(CamelModel):
    """Admin dashboard summary"""
    total_quizzes: int
    active_users: int
    average_score: float
    completion_rate: float
    recent_activity: List[ActivityItem]
    performance_trend: List[TrendPoint]
    performance_trend_status: Literal["ok", "degraded"] = "ok"


class ResultStats(CamelModel):
    """Result-level statistics"""
    total_attempts: int
    average_score: float
    highest_score: float
    lowest_score: float
    recent_attempts: List[Dict[str, Any]]
    completion_rate: float


class QuestionStats(CamelModel):
    """Accuracy and timing for one question"""
    id: str
    text: str = ""
    total_attempts: int
    correct_answers: int
    accuracy: float
    average_time: int = Field(..., description="Mean positive timeSpent, rounded")


class StudentStats(CamelModel):
    """Per-student summary"""
    student_name: str
    quizzes_completed: int
    average_score: float
    best_score: float
    passed_quizzes: int
    last_attempt: Any = None
