"""Schemas for authentication API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from placement_portal.models.enums import Role


class RegisterRequest(BaseModel):
    """Request to create an account."""

    username: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    role: Role = Role.STUDENT
    department: str | None = Field(default=None, max_length=255)
    current_semester: int | None = Field(default=None, ge=1, le=12)
    skills: list[str] = Field(default_factory=list)
    cgpa: float | None = Field(default=None, ge=0, le=10)


class LoginRequest(BaseModel):
    """Login with email and password."""

    email: str
    password: str


class UserResponse(BaseModel):
    """Public view of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    name: str
    role: Role
    department: str | None
    skills: list[str] | None
    cgpa: float | None
    placement_status: str
    created_at: datetime


class TokenResponse(BaseModel):
    """Issued bearer token."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
