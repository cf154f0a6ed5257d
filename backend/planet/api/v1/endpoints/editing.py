"""Editing mode API endpoints.

Editing always targets the caller's own workspace:
- POST /start    enter editing mode (returns the active session if any)
- GET  /status   whether editing mode is on
- POST /apply    keep all changes and leave editing mode
- POST /discard  restore the tree from backups and leave editing mode
- GET  /sessions/{session_id}/backups  audit trail of a session
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from planet.api.deps import get_current_user, get_current_user_optional, http_errors
from planet.db.database import get_db
from planet.db.models import User
from planet.models.schemas import (
    ActionResponse,
    BackupOut,
    SessionOut,
    SessionStartResponse,
    SessionStatusResponse,
)
from planet.services import editing, workspace
from planet.utils import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _require_active_session(db: Session, user: User):
    planet = workspace.require_user_workspace(db, user.id)
    session = editing.get_active_session(db, user.id, planet.id)
    if session is None:
        raise HTTPException(status_code=404, detail="No active editing session")
    return session


@router.post("/start", response_model=SessionStartResponse)
async def start_editing(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SessionStartResponse:
    """Start editing mode for the user's workspace."""
    logger.info(f"POST /editing/start: user={user.id}")
    with http_errors("start editing session"):
        planet = workspace.require_user_workspace(db, user.id)
        session = editing.start_session(db, user.id, planet.id)
        return SessionStartResponse(session=SessionOut.from_model(session))


@router.get("/status", response_model=SessionStatusResponse)
async def editing_status(
    user: User | None = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> SessionStatusResponse:
    """Check if there's an active editing session.

    Anonymous callers and users without a workspace are simply not editing.
    """
    if user is None:
        return SessionStatusResponse(is_active=False)

    with http_errors("check editing status"):
        planet = workspace.get_user_workspace(db, user.id)
        if planet is None:
            return SessionStatusResponse(is_active=False)

        session = editing.get_active_session(db, user.id, planet.id)
        return SessionStatusResponse(
            is_active=session is not None,
            session=SessionOut.from_model(session) if session else None,
        )


@router.post("/apply", response_model=ActionResponse)
async def apply_changes(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ActionResponse:
    """Apply changes and end editing mode. Backups are kept as history."""
    logger.info(f"POST /editing/apply: user={user.id}")
    with http_errors("apply changes"):
        session = _require_active_session(db, user)
        editing.apply_session(db, session.id)
        return ActionResponse(message="Changes applied successfully")


@router.post("/discard", response_model=ActionResponse)
async def discard_changes(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ActionResponse:
    """Discard all changes, restore from backups and end editing mode."""
    logger.info(f"POST /editing/discard: user={user.id}")
    with http_errors("discard changes"):
        session = _require_active_session(db, user)
        editing.discard_session(db, session.id)
        return ActionResponse(message="Changes discarded successfully")


@router.get("/sessions/{session_id}/backups", response_model=list[BackupOut])
async def list_backups(
    session_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[BackupOut]:
    """List a session's backups in creation order."""
    with http_errors("list backups"):
        backups = editing.list_session_backups(db, session_id, user_id=user.id)
        return [BackupOut.from_model(b) for b in backups]
