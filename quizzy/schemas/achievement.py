"""
Pydantic schemas for achievements
"""
from pydantic import Field, field_validator
from typing import Dict, Optional

from quizzy.schemas.base import CamelModel, reject_null


class AchievementCreate(CamelModel):
    """Schema for defining an achievement"""
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    icon: str = "award"
    conditions: Dict[str, float] = Field(default_factory=dict)
    is_active: bool = True
    earned_count: int = Field(0, ge=0)


class AchievementUpdate(CamelModel):
    """Partial achievement update"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = None
    conditions: Optional[Dict[str, float]] = None
    is_active: Optional[bool] = None
    earned_count: Optional[int] = Field(None, ge=0)

    @field_validator(
        "name", "description", "icon", "conditions", "is_active", "earned_count"
    )
    @classmethod
    def required_fields_not_null(cls, value):
        return reject_null(value)
