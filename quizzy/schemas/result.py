"""
Pydantic schemas for quiz result submission
"""
from pydantic import AliasChoices, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union

from quizzy.schemas.base import CamelModel


class ResultAnswer(CamelModel):
    """One answered question within an attempt"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    question_id: Optional[Union[str, int]] = None
    selected_answer: Optional[str] = None
    correct: Optional[bool] = Field(None, validation_alias=AliasChoices("correct", "isCorrect"))
    time_spent: Optional[float] = Field(None, ge=0, description="Seconds spent on the question")


class ResultCreate(CamelModel):
    """Schema for submitting a quiz attempt"""
    student_name: str = Field(..., min_length=1, max_length=100)
    score: int = Field(..., ge=0, description="Number of correct answers")
    total_questions: int = Field(..., gt=0)
    answers: List[Union[ResultAnswer, str]]
    timestamp: int = Field(..., gt=0, description="Submission time in epoch milliseconds")
    quiz_id: Optional[str] = None
    completed: bool = True
    time_remaining: Optional[float] = Field(None, ge=0, description="Seconds left on the timer")

    @model_validator(mode="after")
    def score_within_total(self):
        if self.score > self.total_questions:
            raise ValueError("score cannot exceed totalQuestions")
        return self
