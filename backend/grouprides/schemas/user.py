"""
Pydantic schemas for User entity.
"""
from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from grouprides.models.user import ExperienceLevel, PreferredDistance
from grouprides.schemas.base import CamelModel

# Matches users.email
EMAIL_MAX_LENGTH = 100


def _check_email_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")
    return value


class UserProfile(CamelModel):
    """Editable profile fields."""
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    bio: Optional[str] = None
    location: str = Field(default="", max_length=200)
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    preferred_distance: PreferredDistance = PreferredDistance.MEDIUM
    bike_type: str = Field(default="", max_length=100)


class UserCreate(UserProfile):
    """Schema for user registration."""
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8, max_length=256)

    @field_validator("email")
    @classmethod
    def email_fits_column(cls, v):
        return _check_email_length(v)


class UserUpdate(CamelModel):
    """Schema for profile update."""
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=256)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=200)
    experience_level: Optional[ExperienceLevel] = None
    preferred_distance: Optional[PreferredDistance] = None
    bike_type: Optional[str] = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def email_fits_column(cls, v):
        return _check_email_length(v)


class UserResponse(UserProfile):
    """Schema for user response."""
    id: str
    username: str
    email: str
    joined_at: datetime
    is_active: bool


class UserLogin(CamelModel):
    """Schema for user login. Username is the only login identifier."""
    username: str
    password: str


class Token(CamelModel):
    """Schema for bearer token response."""
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class AuthResponse(Token):
    """Token plus the authenticated user."""
    user: UserResponse
