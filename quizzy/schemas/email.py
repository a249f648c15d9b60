"""
Pydantic schemas for email endpoints
"""
from pydantic import EmailStr, Field
from typing import Any, List

from quizzy.schemas.base import CamelModel


class ReportAnswer(CamelModel):
    question_text: str = ""
    selected_answer: str = ""
    correct_answer: str = ""
    is_correct: bool = False


class QuizReport(CamelModel):
    """Result data rendered into the quiz results email"""
    student_name: str = Field(..., min_length=1)
    timestamp: Any = None
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=0)
    answers: List[ReportAnswer] = Field(default_factory=list)


class QuizResultsEmailRequest(CamelModel):
    email: EmailStr
    result_data: QuizReport


class TokenEmailRequest(CamelModel):
    """Verification and password reset requests"""
    email: EmailStr
    token: str = Field(..., min_length=1)
