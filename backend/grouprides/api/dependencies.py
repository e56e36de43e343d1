"""
Shared FastAPI dependencies: storage access and session-bound identity.
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from grouprides.core.exceptions import AuthenticationError
from grouprides.db.session import get_db
from grouprides.models.auth_session import AuthSession
from grouprides.models.user import User
from grouprides.services import auth_service
from grouprides.services.storage import Storage, DatabaseStorage

bearer_scheme = HTTPBearer(auto_error=False)


def get_storage(db: Session = Depends(get_db)) -> Storage:
    """Storage bound to the request's database session."""
    return DatabaseStorage(db)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[str]:
    """Extract the bearer token, if any."""
    if not credentials:
        return None
    return credentials.credentials


def get_current_session(
    token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db)
) -> AuthSession:
    """Return the caller's live session or fail with 401."""
    session = auth_service.resolve_session(token, db)
    if not session:
        raise AuthenticationError("Not authenticated")
    return session


def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db)
) -> User:
    """Return the user bound to the caller's session or fail with 401."""
    return auth_service.require_session(token, db)
