"""
Pydantic schemas for quiz requests
"""
from pydantic import Field, field_validator
from typing import Any, Dict, List, Optional, Union

from quizzy.schemas.base import CamelModel, reject_null

# A quiz references stored questions by id or embeds a question object
QuestionRef = Union[str, int, Dict[str, Any]]


class QuizCreate(CamelModel):
    """Schema for creating a quiz"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    questions: List[QuestionRef] = Field(default_factory=list)
    time_limit: Optional[int] = Field(None, ge=1, le=180, description="Minutes; defaults to settings")
    passing_score: Optional[float] = Field(None, ge=0, le=100, description="Percent; defaults to settings")
    is_published: bool = False


class QuizUpdate(CamelModel):
    """Partial quiz update"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    questions: Optional[List[QuestionRef]] = None
    time_limit: Optional[int] = Field(None, ge=1, le=180)
    passing_score: Optional[float] = Field(None, ge=0, le=100)
    is_published: Optional[bool] = None

    @field_validator("title", "questions", "time_limit", "passing_score", "is_published")
    @classmethod
    def required_fields_not_null(cls, value):
        return reject_null(value)
