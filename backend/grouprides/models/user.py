"""
User model for authentication and rider profiles.
"""
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Text, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from grouprides.db.base import BaseModel


class ExperienceLevel(str, enum.Enum):
    """Self-reported riding experience."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class PreferredDistance(str, enum.Enum):
    """Preferred ride length bucket."""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    ULTRA = "ultra"


class User(BaseModel):
    """User model with immutable username."""
    __tablename__ = "users"

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    bio = Column(Text, nullable=True)
    location = Column(String(200), nullable=False, default="")
    experience_level = Column(
        SQLEnum(ExperienceLevel, values_callable=lambda e: [m.value for m in e]),
        default=ExperienceLevel.BEGINNER,
        nullable=False,
    )
    preferred_distance = Column(
        SQLEnum(PreferredDistance, values_callable=lambda e: [m.value for m in e]),
        default=PreferredDistance.MEDIUM,
        nullable=False,
    )
    bike_type = Column(String(100), nullable=False, default="")
    joined_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or self.username
