"""Identity resolution: JWT access tokens mapped to user IDs.

Tokens are issued elsewhere (login/signup flows live outside this service);
``create_access_token`` exists for trusted callers such as tests and admin
scripts.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from planet.db.models import User
from planet.exceptions import UnauthorizedError
from planet.repositories.user import user_repository
from planet.settings import settings
from planet.utils import get_logger

logger = get_logger(__name__)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create JWT access token.

    Args:
        data: Payload data to encode (must include 'sub' claim with user ID)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expire_minutes)

    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> str | None:
    """Verify JWT token and return user ID.

    Args:
        token: JWT token string

    Returns:
        User ID if token is valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    return user_id


def resolve_user(db: Session, token: str | None) -> User:
    """Map a bearer token to a stored user.

    Raises:
        UnauthorizedError: If the token is missing, invalid, or names an
            unknown user
    """
    if not token:
        raise UnauthorizedError("Not authenticated")

    user_id = verify_token(token)
    if not user_id:
        raise UnauthorizedError("Could not validate credentials")

    user = user_repository.get_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    return user
