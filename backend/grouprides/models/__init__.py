"""Models package - Import all models for SQLAlchemy registration."""
from grouprides.models.user import User, ExperienceLevel, PreferredDistance
from grouprides.models.ride import Ride, RideParticipant, Difficulty, RecurringType
from grouprides.models.auth_session import AuthSession

__all__ = [
    "User",
    "ExperienceLevel",
    "PreferredDistance",
    "Ride",
    "RideParticipant",
    "Difficulty",
    "RecurringType",
    "AuthSession",
]
