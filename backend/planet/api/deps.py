"""Shared API dependencies: identity resolution and error translation."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from planet.db.database import get_db
from planet.db.models import User
from planet.exceptions import PlanetError, UnauthorizedError
from planet.services.auth_service import resolve_user
from planet.utils import get_logger

logger = get_logger(__name__)

# auto_error=False so a missing header becomes our 401 rather than FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Session = Depends(get_db),
) -> User:
    """Get current authenticated user from the bearer token."""
    try:
        return resolve_user(db, credentials.credentials if credentials else None)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Session = Depends(get_db),
) -> User | None:
    """Get current user if authenticated, None otherwise.

    Use this for endpoints that work both authenticated and unauthenticated.
    """
    if not credentials:
        return None
    try:
        return resolve_user(db, credentials.credentials)
    except UnauthorizedError:
        return None


@contextmanager
def http_errors(action: str) -> Generator[None, None, None]:
    """Translate domain errors raised inside the block into HTTP responses.

    PlanetError subclasses map to their own status code; anything else is
    logged and reported as a 500 naming the failed action.

    Usage:
        with http_errors("create node"):
            node = node_gateway.create_node(db, user.id, session_id, body)
    """
    try:
        yield
    except HTTPException:
        raise
    except PlanetError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    except Exception as e:
        logger.exception(f"Failed to {action}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": f"Failed to {action}", "details": str(e)},
        ) from e
