"""
Server-side session rows backing bearer tokens.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from grouprides.db.base import BaseModel


class AuthSession(BaseModel):
    """A login session. Tokens are only honoured while the row exists."""
    __tablename__ = "sessions"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="sessions")
