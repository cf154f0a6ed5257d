"""Database module for the Planet backend.

Components:
- models.py: ORM schema (users, planets, nodes, editing sessions, node backups)
- database.py: Engine, session factory and session helpers (SQLite or MySQL)
"""

from planet.db.database import (
    SessionLocal,
    check_connection,
    close_db,
    create_db_engine,
    engine,
    get_db,
    get_db_session,
    init_db,
    transaction,
)
from planet.db.models import (
    Base,
    EditingSession,
    Node,
    NodeBackup,
    Planet,
    User,
)

__all__ = [
    # Connection
    "engine",
    "create_db_engine",
    "SessionLocal",
    "get_db",
    "get_db_session",
    "init_db",
    "close_db",
    "check_connection",
    "transaction",
    # Models
    "Base",
    "User",
    "Planet",
    "Node",
    "EditingSession",
    "NodeBackup",
]
