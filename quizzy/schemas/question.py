"""
Pydantic schemas for question requests
"""
from pydantic import Field, field_validator, model_validator
from typing import List, Optional

from quizzy.schemas.base import CamelModel, reject_null


class QuestionCreate(CamelModel):
    """Schema for authoring a multiple-choice question"""
    text: str = Field(..., min_length=1, description="Question prompt")
    options: List[str] = Field(..., min_length=2, description="Answer options in display order")
    correct_answer: str = Field(..., description="Must match one of the options")
    difficulty: Optional[str] = Field(None, pattern="^(easy|medium|hard)$")
    category: Optional[str] = None
    time_limit: Optional[int] = Field(None, gt=0, description="Seconds allowed for this question")

    @model_validator(mode="after")
    def correct_answer_in_options(self):
        if self.correct_answer not in self.options:
            raise ValueError("correctAnswer must be one of the options")
        return self


class QuestionUpdate(CamelModel):
    """Partial question update; the merged question is re-checked in the router"""
    text: Optional[str] = Field(None, min_length=1)
    options: Optional[List[str]] = Field(None, min_length=2)
    correct_answer: Optional[str] = None
    difficulty: Optional[str] = Field(None, pattern="^(easy|medium|hard)$")
    category: Optional[str] = None
    time_limit: Optional[int] = Field(None, gt=0)

    @field_validator("text", "options", "correct_answer")
    @classmethod
    def required_fields_not_null(cls, value):
        return reject_null(value)
