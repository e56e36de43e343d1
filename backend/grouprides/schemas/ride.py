"""
Pydantic schemas for Ride and RideParticipant entities.
"""
from pydantic import Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from grouprides.models.ride import Difficulty, RecurringType
from grouprides.schemas.base import CamelModel


class RideBase(CamelModel):
    """Base ride schema."""
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_time: str = Field(min_length=1)
    start_location: str = Field(min_length=1, max_length=300)
    start_latitude: Optional[Decimal] = None
    start_longitude: Optional[Decimal] = None
    distance: Optional[Decimal] = None
    duration: Optional[Decimal] = None
    difficulty: Difficulty
    is_recurring: bool = False
    recurring_type: Optional[RecurringType] = None
    max_participants: Optional[int] = None
    requires_approval: bool = False
    has_route_map: bool = False


class RideCreate(RideBase):
    """Schema for ride creation. ``date`` is an ISO date (or datetime) string."""
    date: str = Field(min_length=1)


class RideUpdate(CamelModel):
    """Schema for ride update. Only fields that are sent are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    start_location: Optional[str] = Field(default=None, min_length=1, max_length=300)
    start_latitude: Optional[Decimal] = None
    start_longitude: Optional[Decimal] = None
    distance: Optional[Decimal] = None
    duration: Optional[Decimal] = None
    difficulty: Optional[Difficulty] = None
    is_recurring: Optional[bool] = None
    recurring_type: Optional[RecurringType] = None
    max_participants: Optional[int] = None
    requires_approval: Optional[bool] = None
    has_route_map: Optional[bool] = None


class RideResponse(RideBase):
    """Schema for ride response."""
    id: str
    date: datetime
    organizer_id: str
    organizer_name: str
    participant_count: int
    created_at: datetime


class RideFilters(CamelModel):
    """Optional list filters, combined with AND."""
    difficulty: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    search: Optional[str] = None


class RideParticipantResponse(CamelModel):
    """Schema for ride participant response."""
    id: str
    ride_id: str
    participant_id: str
    participant_name: str
    joined_at: datetime
