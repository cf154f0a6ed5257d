"""Editing session repository for database operations."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from planet.db.models import EditingSession
from planet.repositories.base import BaseRepository
from planet.utils import generate_id, get_timestamp_ms
from planet.utils.id_generator import SESSION_PREFIX


def active_slot(user_id: str, planet_id: str) -> str:
    """Value of the unique active_slot column for an active session."""
    return f"{user_id}:{planet_id}"


class EditingSessionRepository(BaseRepository[EditingSession]):
    """Repository for EditingSession entity operations."""

    def __init__(self):
        super().__init__(EditingSession)

    def get_active(self, db: Session, user_id: str, planet_id: str) -> EditingSession | None:
        """Get the active session for a (user, planet) pair."""
        stmt = select(EditingSession).where(
            EditingSession.user_id == user_id,
            EditingSession.planet_id == planet_id,
            EditingSession.is_active == True,  # noqa: E712
        )
        return db.execute(stmt).scalar_one_or_none()

    def get_active_by_id(self, db: Session, session_id: str) -> EditingSession | None:
        """Get a session by ID only if it is still active."""
        session = self.get_by_id(db, session_id)
        if session is None or not session.is_active:
            return None
        return session

    def create_active(self, db: Session, user_id: str, planet_id: str) -> EditingSession:
        """Insert a new active session.

        Raises:
            sqlalchemy.exc.IntegrityError: If another active session holds
                the same active_slot
        """
        session_data = {
            "id": generate_id(SESSION_PREFIX),
            "user_id": user_id,
            "planet_id": planet_id,
            "is_active": True,
            "active_slot": active_slot(user_id, planet_id),
            "started_at": get_timestamp_ms(),
        }
        return self.create(db, session_data)

    def close(self, db: Session, session: EditingSession) -> EditingSession:
        """Mark a session inactive and release its active slot."""
        return self.update(
            db,
            session,
            {"is_active": False, "active_slot": None, "ended_at": get_timestamp_ms()},
        )

    def delete_with_backups(self, db: Session, session: EditingSession) -> int:
        """Delete a session and its backups. Returns the number of backups removed."""
        backups = list(session.backups)
        for backup in backups:
            db.delete(backup)
        db.delete(session)
        db.flush()
        return len(backups)


# Singleton instance
editing_session_repository = EditingSessionRepository()
