"""Repository layer for database access.

This module provides repository classes that abstract database operations.
Repositories flush but never commit; services own the transaction.

Usage:
    from planet.repositories import node_repository, node_backup_repository

    node = node_repository.get_by_id(db, node_id)
    node_backup_repository.record(db, session.id, node.id, "update", snapshot_node(node))
"""

from planet.repositories.editing_session import (
    EditingSessionRepository,
    editing_session_repository,
)
from planet.repositories.node import NodeRepository, node_repository
from planet.repositories.node_backup import NodeBackupRepository, node_backup_repository
from planet.repositories.planet import PlanetRepository, planet_repository
from planet.repositories.user import UserRepository, user_repository

__all__ = [
    "UserRepository",
    "user_repository",
    "PlanetRepository",
    "planet_repository",
    "NodeRepository",
    "node_repository",
    "EditingSessionRepository",
    "editing_session_repository",
    "NodeBackupRepository",
    "node_backup_repository",
]
