"""
Ride model for group cycling events.
"""
import enum
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, DateTime, Boolean, Integer, Numeric, ForeignKey,
    UniqueConstraint, Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from grouprides.db.base import BaseModel


class Difficulty(str, enum.Enum):
    """Ride intensity classification."""
    EASY = "easy"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class RecurringType(str, enum.Enum):
    """Repeat cadence for recurring rides."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class Ride(BaseModel):
    """Ride model representing a scheduled group ride."""
    __tablename__ = "rides"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # "HH:MM", 24-hour
    start_location = Column(String(300), nullable=False)
    start_latitude = Column(Numeric(10, 8), nullable=True)
    start_longitude = Column(Numeric(11, 8), nullable=True)
    distance = Column(Numeric(6, 2), nullable=True)  # miles
    duration = Column(Numeric(4, 2), nullable=True)  # hours
    difficulty = Column(
        SQLEnum(Difficulty, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_type = Column(
        SQLEnum(RecurringType, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    max_participants = Column(Integer, nullable=True)
    requires_approval = Column(Boolean, default=False, nullable=False)
    has_route_map = Column(Boolean, default=False, nullable=False)
    organizer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    organizer_name = Column(String(201), nullable=False)  # User.display_name
    # Cached count of ride_participants rows; only written by the storage layer
    participant_count = Column(Integer, default=0, nullable=False)

    # Relationships
    participants = relationship(
        "RideParticipant",
        back_populates="ride",
        order_by="RideParticipant.joined_at.desc()",
    )


class RideParticipant(BaseModel):
    """Join table between rides and the riders who joined them."""
    __tablename__ = "ride_participants"
    __table_args__ = (
        UniqueConstraint("ride_id", "participant_id", name="uq_ride_participant"),
    )

    ride_id = Column(String(36), ForeignKey("rides.id"), nullable=False, index=True)
    participant_id = Column(String(36), nullable=False, index=True)
    participant_name = Column(String(201), nullable=False)  # User.display_name
    joined_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    ride = relationship("Ride", back_populates="participants")
