"""Restore procedure: undo an editing session by replaying its backups backwards.

Each backup records what the live mutation did; restoring applies the
structural inverse:

    create  -> delete the node
    update  -> write the snapshot's mutable fields back
    delete  -> reinsert the node from its snapshot, original ID included

Backups are inverted newest first, so a create-update-delete chain on one
node unwinds as reinsert, restore fields, delete.

The procedure never commits. The caller wraps it in a transaction together
with removing the session, so readers never see a half-restored tree.
Inversions that find their work already done (node gone, node already
present) are skipped, which makes re-running an interrupted restore safe.
"""

from sqlalchemy.orm import Session

from planet.db.models import NodeBackup
from planet.exceptions import AlreadyExistsError, NotFoundError, ValidationError
from planet.repositories.node import node_repository
from planet.repositories.node_backup import node_backup_repository
from planet.utils import get_logger

logger = get_logger(__name__)


def _invert_create(db: Session, backup: NodeBackup) -> None:
    if not node_repository.delete(db, backup.node_id):
        raise NotFoundError(f"Node {backup.node_id} already removed")


def _invert_update(db: Session, backup: NodeBackup) -> None:
    node = node_repository.get_by_id(db, backup.node_id)
    if node is None:
        raise NotFoundError(f"Node {backup.node_id} no longer exists")
    node_repository.restore_snapshot(db, node, backup.snapshot)


def _invert_delete(db: Session, backup: NodeBackup) -> None:
    node_repository.insert_from_snapshot(db, backup.snapshot)


_INVERSES = {
    "create": _invert_create,
    "update": _invert_update,
    "delete": _invert_delete,
}


def invert_backup(db: Session, backup: NodeBackup) -> bool:
    """Apply the inverse of one backup.

    Returns:
        True if the inverse changed the store, False if it was already
        resolved and skipped

    Raises:
        ValidationError: If the backup carries an unknown action
    """
    inverse = _INVERSES.get(backup.action)
    if inverse is None:
        raise ValidationError(f"Unknown backup action: {backup.action!r}")

    try:
        inverse(db, backup)
    except (NotFoundError, AlreadyExistsError) as e:
        logger.debug(f"Skipping backup #{backup.sequence} ({backup.action} {backup.node_id}): {e.message}")
        return False
    return True


def restore_session(db: Session, session_id: str) -> int:
    """Invert every backup of a session, newest first.

    Args:
        db: Database session (not committed here)
        session_id: Editing session whose backups to replay

    Returns:
        Number of backups replayed
    """
    backups = node_backup_repository.list_for_session(db, session_id)
    applied = 0
    for backup in reversed(backups):
        if invert_backup(db, backup):
            applied += 1

    logger.info(f"Restored session {session_id}: {applied}/{len(backups)} inversions applied")
    return len(backups)
