"""
Authentication routes for registration, login, logout and session lookup.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from grouprides.db.session import get_db
from grouprides.core.exceptions import AuthenticationError, AuthorizationError
from grouprides.core.utils import format_message
from grouprides.models.auth_session import AuthSession
from grouprides.models.user import User
from grouprides.schemas.user import UserCreate, UserLogin, UserResponse, AuthResponse
from grouprides.services import auth_service
from grouprides.services.storage import Storage
from grouprides.api.dependencies import get_current_user, get_current_session, get_storage

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user: User, session: AuthSession, token: str) -> AuthResponse:
    return AuthResponse(
        access_token=token,
        expires_at=session.expires_at,
        user=UserResponse.model_validate(user)
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    storage: Storage = Depends(get_storage),
    db: Session = Depends(get_db)
):
    """Register a new user and start a session."""
    user, session, token = auth_service.register(user_data.model_dump(), storage, db)
    return _auth_response(user, session, token)


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    storage: Storage = Depends(get_storage),
    db: Session = Depends(get_db)
):
    """Check credentials and start a session."""
    user = auth_service.authenticate(credentials.username, credentials.password, storage)
    if not user:
        raise AuthenticationError("Incorrect username or password")

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    session, token = auth_service.create_session(user, db)
    return _auth_response(user, session, token)


@router.post("/logout")
def logout(
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    """End the current session; its token stops working immediately."""
    auth_service.destroy_session(session, db)
    return format_message("Logged out successfully")


@router.get("/user", response_model=UserResponse)
def get_authenticated_user(current_user: User = Depends(get_current_user)):
    """Return the logged-in user, or 401."""
    return current_user
