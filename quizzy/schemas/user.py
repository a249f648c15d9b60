"""
Pydantic schemas for user management
"""
from pydantic import EmailStr, Field, model_validator
from typing import Literal, Optional

from quizzy.schemas.base import CamelModel

Role = Literal["student", "teacher", "admin"]
Status = Literal["active", "inactive"]


class UserCreate(CamelModel):
    """Schema for creating a user; only admins carry a password"""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: Role = "student"
    status: Status = "active"
    password: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def admin_requires_password(self):
        if self.role == "admin" and not self.password:
            raise ValueError("password is required for admin users")
        return self


class UserUpdate(CamelModel):
    """Partial user update"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    status: Optional[Status] = None
    password: Optional[str] = Field(None, min_length=1)
