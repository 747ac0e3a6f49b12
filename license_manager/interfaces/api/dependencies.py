"""FastAPI dependency utilities."""

from collections.abc import Generator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from license_manager.application.use_cases.notifications import ExpirationNotifier
from license_manager.config import Settings
from license_manager.domain.entities import User
from license_manager.infrastructure.database import session_scope
from license_manager.infrastructure.repositories import UserRepository
from license_manager.infrastructure.scheduling import NotificationScheduler
from license_manager.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

_CREDENTIALS_ERROR = "Could not validate credentials"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a session from the application's session factory."""

    yield from session_scope(request.app.state.session_factory)


def resolve_current_user(token: str, db: Session, settings: Settings) -> User:
    """Resolve the authenticated user for the provided token."""

    try:
        payload = decode_access_token(token, settings=settings)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_CREDENTIALS_ERROR,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    email = payload.get("sub")
    if not isinstance(email, str) or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_CREDENTIALS_ERROR,
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = UserRepository(db).get_by_email(email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> User:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(token, db, settings)


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user is active."""

    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    return current_user


def get_scheduler(request: Request) -> NotificationScheduler | None:
    """Return the running scheduler, ``None`` when scheduling is disabled."""

    return request.app.state.scheduler


def get_notifier(request: Request) -> ExpirationNotifier:
    """Return the notifier or fail when email delivery is not configured."""

    notifier = request.app.state.notifier
    if notifier is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "code": "email_not_configured",
                "message": "Email delivery is not configured on this server",
            },
        )
    return notifier
