"""Node backup repository: the append-only ledger of a session's mutations."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from planet.db.models import BACKUP_ACTIONS, NodeBackup
from planet.exceptions import ValidationError
from planet.repositories.base import BaseRepository
from planet.utils import generate_id, get_timestamp_ms
from planet.utils.id_generator import BACKUP_PREFIX


def tombstone(node_id: str) -> dict[str, Any]:
    """Snapshot recorded for a creation: no prior state existed."""
    return {"id": node_id, "tombstone": True}


class NodeBackupRepository(BaseRepository[NodeBackup]):
    """Repository for NodeBackup entity operations."""

    def __init__(self):
        super().__init__(NodeBackup)

    def next_sequence(self, db: Session, session_id: str) -> int:
        """Next 1-based sequence number within a session."""
        stmt = select(func.max(NodeBackup.sequence)).where(NodeBackup.session_id == session_id)
        current = db.execute(stmt).scalar_one_or_none()
        return (current or 0) + 1

    def record(
        self,
        db: Session,
        session_id: str,
        node_id: str,
        action: str,
        snapshot: dict[str, Any],
    ) -> NodeBackup:
        """Append a backup to a session's ledger and flush it.

        Args:
            db: Database session
            session_id: Owning editing session
            node_id: Node the mutation targets
            action: What the live mutation did (create/update/delete)
            snapshot: Prior node state, or a tombstone for create

        Returns:
            The flushed backup
        """
        if action not in BACKUP_ACTIONS:
            raise ValidationError(f"Invalid backup action: {action!r}")

        backup_data = {
            "id": generate_id(BACKUP_PREFIX),
            "session_id": session_id,
            "node_id": node_id,
            "action": action,
            "snapshot": snapshot,
            "sequence": self.next_sequence(db, session_id),
            "created_at": get_timestamp_ms(),
        }
        return self.create(db, backup_data)

    def list_for_session(self, db: Session, session_id: str) -> list[NodeBackup]:
        """Backups of a session in creation order (ascending sequence)."""
        stmt = select(NodeBackup).where(NodeBackup.session_id == session_id).order_by(NodeBackup.sequence.asc())
        return list(db.execute(stmt).scalars().all())


# Singleton instance
node_backup_repository = NodeBackupRepository()
