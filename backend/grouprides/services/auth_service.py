"""
Authentication service: registration, credential checks and sessions.

Sessions live in the ``sessions`` table. Clients hold a signed bearer token
that names a session id; the token is honoured only while that row exists
and has not expired, so logout is a server-side delete.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple
from sqlalchemy.orm import Session
from grouprides.core.config import settings
from grouprides.core.exceptions import AuthenticationError
from grouprides.core.security import (
    verify_password, get_password_hash, create_session_token, decode_session_token
)
from grouprides.models.auth_session import AuthSession
from grouprides.models.user import User
from grouprides.services.storage import Storage

logger = logging.getLogger(__name__)


def register(data: Dict[str, Any], storage: Storage, db: Session) -> Tuple[User, AuthSession, str]:
    """Create a user and log them in. Raises ``ValidationError`` if the username is taken."""
    profile = {k: v for k, v in data.items() if k != "password"}
    user = storage.create_user(profile, hashed_password=get_password_hash(data["password"]))
    session, token = create_session(user, db)
    return user, session, token


def authenticate(username: str, password: str, storage: Storage) -> Optional[User]:
    """Return the user for a username/password pair, or None on any mismatch."""
    user = storage.get_user_by_username(username)
    if not user:
        # Burn comparable time so unknown usernames are not distinguishable
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def create_session(user: User, db: Session) -> Tuple[AuthSession, str]:
    """Persist a new session for ``user`` and return it with its bearer token."""
    now = datetime.utcnow()
    purge_expired_sessions(user.id, db, now=now)

    session = AuthSession(
        user_id=user.id,
        created_at=now,
        expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS)
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    token = create_session_token(session.id, user.id, session.expires_at)
    logger.info(f"Opened session {session.id} for user {user.id}")
    return session, token


def resolve_session(token: Optional[str], db: Session) -> Optional[AuthSession]:
    """Return the live session a token refers to, or None."""
    if not token:
        return None
    payload = decode_session_token(token)
    if not payload:
        return None

    session = db.get(AuthSession, payload["sid"])
    if not session or session.user_id != payload["sub"]:
        return None
    if session.expires_at <= datetime.utcnow():
        return None
    return session


def require_session(token: Optional[str], db: Session) -> User:
    """Return the user bound to the token's session or raise ``AuthenticationError``."""
    session = resolve_session(token, db)
    if not session:
        raise AuthenticationError("Not authenticated")
    user = session.user
    if not user or not user.is_active:
        raise AuthenticationError("Not authenticated")
    return user


def destroy_session(session: AuthSession, db: Session) -> None:
    """Delete a session so its token stops working."""
    db.delete(session)
    db.commit()
    logger.info(f"Closed session {session.id} for user {session.user_id}")


def purge_expired_sessions(user_id: str, db: Session, now: Optional[datetime] = None) -> int:
    """Remove a user's expired sessions."""
    now = now or datetime.utcnow()
    removed = db.query(AuthSession).filter(
        AuthSession.user_id == user_id,
        AuthSession.expires_at <= now
    ).delete(synchronize_session=False)
    if removed:
        logger.debug(f"Purged {removed} expired sessions for user {user_id}")
    return removed


_DUMMY_HASH = get_password_hash("not-a-real-password")
