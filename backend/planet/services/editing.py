"""Editing session lifecycle.

State machine per (user, planet):

    NONE --start--> ACTIVE --apply--> APPLIED     (backups kept as history)
                           --discard--> DISCARDED (tree restored, session
                                                   and backups removed)

APPLIED and DISCARDED are terminal; a later start opens a new session.

Starting is idempotent: while a session is active, start returns it. The
active_slot unique constraint makes the database the final arbiter when two
starts race; the loser rolls back and returns the winner's session.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from planet.db.database import transaction
from planet.db.models import EditingSession, NodeBackup, Planet
from planet.exceptions import ConflictError, ForbiddenError, NotFoundError
from planet.repositories.editing_session import editing_session_repository
from planet.repositories.node_backup import node_backup_repository
from planet.repositories.planet import planet_repository
from planet.services.restore import restore_session
from planet.utils import get_logger

logger = get_logger(__name__)


def _get_owned_planet(db: Session, user_id: str, planet_id: str) -> Planet:
    planet = planet_repository.get_by_id(db, planet_id)
    if planet is None:
        raise NotFoundError("No workspace found")
    if planet.user_id != user_id:
        raise ForbiddenError("Workspace belongs to another user")
    return planet


def _get_active(db: Session, session_id: str) -> EditingSession:
    session = editing_session_repository.get_active_by_id(db, session_id)
    if session is None:
        raise NotFoundError("No active editing session")
    return session


def start_session(db: Session, user_id: str, planet_id: str) -> EditingSession:
    """Start editing mode, or return the session that is already active.

    Raises:
        NotFoundError: If the planet does not exist
        ForbiddenError: If the planet belongs to another user
        ConflictError: If a racing start won but its session vanished
            before it could be read back
    """
    _get_owned_planet(db, user_id, planet_id)

    existing = editing_session_repository.get_active(db, user_id, planet_id)
    if existing is not None:
        logger.info(f"Reusing active editing session {existing.id} for user={user_id} planet={planet_id}")
        return existing

    try:
        session = editing_session_repository.create_active(db, user_id, planet_id)
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = editing_session_repository.get_active(db, user_id, planet_id)
        if existing is None:
            raise ConflictError("Another editing session is being started")
        logger.info(f"Concurrent start resolved to session {existing.id} for user={user_id} planet={planet_id}")
        return existing

    logger.info(f"Started editing session {session.id} for user={user_id} planet={planet_id}")
    return session


def get_active_session(db: Session, user_id: str, planet_id: str) -> EditingSession | None:
    """Active session for a (user, planet) pair, or None."""
    return editing_session_repository.get_active(db, user_id, planet_id)


def apply_session(db: Session, session_id: str) -> EditingSession:
    """Keep every change made in the session and close it.

    The node store is not touched. Backups stay behind as an audit trail
    but are never replayed.

    Raises:
        NotFoundError: If the session does not exist or is not active
    """
    session = _get_active(db, session_id)
    with transaction(db):
        editing_session_repository.close(db, session)

    logger.info(f"Applied editing session {session_id}")
    return session


def discard_session(db: Session, session_id: str) -> int:
    """Roll the tree back to its pre-session state and remove the session.

    Restoration and removal share one transaction. If anything other than
    an already-resolved inversion fails, everything rolls back and the
    session stays active so the discard can be retried.

    Returns:
        Number of backups replayed

    Raises:
        NotFoundError: If the session does not exist or is not active
    """
    session = _get_active(db, session_id)
    try:
        with transaction(db):
            replayed = restore_session(db, session.id)
            editing_session_repository.delete_with_backups(db, session)
    except Exception as e:
        logger.error(f"Discard of editing session {session_id} failed, session left active: {e}")
        raise

    logger.info(f"Discarded editing session {session_id} ({replayed} backups replayed)")
    return replayed


def list_session_backups(db: Session, session_id: str, user_id: str | None = None) -> list[NodeBackup]:
    """Backups of a session in creation order, for active or applied sessions.

    Raises:
        NotFoundError: If the session does not exist
        ForbiddenError: If ``user_id`` is given and does not own the session
    """
    session = editing_session_repository.get_by_id(db, session_id)
    if session is None:
        raise NotFoundError("Editing session not found")
    if user_id is not None and session.user_id != user_id:
        raise ForbiddenError("Editing session belongs to another user")
    return node_backup_repository.list_for_session(db, session_id)
