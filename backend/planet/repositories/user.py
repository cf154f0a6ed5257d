"""User repository for database operations."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from planet.db.models import User
from planet.repositories.base import BaseRepository
from planet.utils import generate_id, get_timestamp_ms
from planet.utils.id_generator import USER_PREFIX


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    def __init__(self):
        super().__init__(User)

    def get_by_email(self, db: Session, email: str) -> User | None:
        """Get user by email.

        Args:
            db: Database session
            email: User email

        Returns:
            User or None if not found
        """
        stmt = select(User).where(User.email == email)
        return db.execute(stmt).scalar_one_or_none()

    def get_by_username(self, db: Session, username: str) -> User | None:
        """Get user by username."""
        stmt = select(User).where(User.username == username)
        return db.execute(stmt).scalar_one_or_none()

    def create_user(
        self,
        db: Session,
        username: str,
        email: str,
        user_id: str | None = None,
    ) -> User:
        """Create a new user.

        Args:
            db: Database session
            username: Unique username, also the default planet slug
            email: User email
            user_id: Explicit ID, generated when omitted

        Returns:
            Created user
        """
        now = get_timestamp_ms()
        user_data = {
            "id": user_id or generate_id(USER_PREFIX),
            "username": username,
            "email": email,
            "created_at": now,
            "updated_at": now,
        }
        return self.create(db, user_data)


# Singleton instance
user_repository = UserRepository()
