"""SQLAlchemy ORM models for the Planet workspace.

Entity Hierarchy:
    User -> Planet -> Node
                   -> EditingSession -> NodeBackup

A planet's content tree is stored flat: each node carries its namespace
(slash-joined ancestor slugs) instead of a parent pointer, so subtree reads
are prefix queries rather than recursive ones.
"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship

NODE_TYPES = ("file", "folder")
NODE_TIERS = ("ocean", "sea", "river", "drop")
BACKUP_ACTIONS = ("create", "update", "delete")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class User(Base):
    """User account. Identity issuance happens outside this service."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    username = Column(String(255), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    avatar_url = Column(String(1024), nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=True)

    # Relationships
    planets = relationship("Planet", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


class Planet(Base):
    """Planet - a user's workspace and the root of a content tree."""

    __tablename__ = "planets"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    # Relationships
    user = relationship("User", back_populates="planets")
    nodes = relationship("Node", back_populates="planet", cascade="all, delete-orphan", passive_deletes=True)
    editing_sessions = relationship(
        "EditingSession", back_populates="planet", cascade="all, delete-orphan", passive_deletes=True
    )

    # Indexes
    __table_args__ = (Index("idx_planets_user_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<Planet(id={self.id}, slug={self.slug})>"


class Node(Base):
    """Node - a markdown file or a folder inside a planet.

    depth, file_path and tier are derived from namespace and slug by
    ``planet.repositories.node.node_placement``; never set them by hand.
    """

    __tablename__ = "nodes"

    id = Column(String(64), primary_key=True)
    planet_id = Column(String(64), ForeignKey("planets.id", ondelete="CASCADE"), nullable=False)
    slug = Column(String(255), nullable=False)
    title = Column(String(255), nullable=False)
    namespace = Column(String(400), nullable=False, default="")
    depth = Column(Integer, nullable=False, default=0)
    file_path = Column(String(656), nullable=False)
    type = Column(Enum(*NODE_TYPES, name="node_type"), nullable=False)
    tier = Column(Enum(*NODE_TIERS, name="node_tier"), nullable=False)
    content = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=False, default=dict)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    # Relationships
    planet = relationship("Planet", back_populates="nodes")

    # Indexes
    __table_args__ = (
        UniqueConstraint("planet_id", "namespace", "slug", name="uq_nodes_planet_namespace_slug"),
        Index("idx_nodes_planet_namespace", "planet_id", "namespace"),
        Index("idx_nodes_planet_file_path", "planet_id", "file_path"),
    )

    def __repr__(self) -> str:
        return f"<Node(id={self.id}, file_path={self.file_path}, type={self.type})>"


class EditingSession(Base):
    """EditingSession - one open transactional editing window.

    active_slot is "{user_id}:{planet_id}" while the session is active and
    NULL afterwards. Its unique constraint lets the database reject a second
    concurrent active session for the same pair; NULLs never collide.
    """

    __tablename__ = "editing_sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    planet_id = Column(String(64), ForeignKey("planets.id", ondelete="CASCADE"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    active_slot = Column(String(160), nullable=True, unique=True)
    started_at = Column(BigInteger, nullable=False)
    ended_at = Column(BigInteger, nullable=True)

    # Relationships
    planet = relationship("Planet", back_populates="editing_sessions")
    backups = relationship(
        "NodeBackup",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="NodeBackup.sequence",
    )

    # Indexes
    __table_args__ = (Index("idx_editing_sessions_user_planet", "user_id", "planet_id"),)

    def __repr__(self) -> str:
        return f"<EditingSession(id={self.id}, is_active={self.is_active})>"


class NodeBackup(Base):
    """NodeBackup - inverse information for one mutation inside a session.

    action records what the live mutation did. snapshot holds the node's full
    prior state for update/delete and a tombstone marker for create.
    node_id is deliberately not a foreign key: the node may no longer exist.
    """

    __tablename__ = "node_backups"

    id = Column(String(64), primary_key=True)
    session_id = Column(String(64), ForeignKey("editing_sessions.id", ondelete="CASCADE"), nullable=False)
    node_id = Column(String(64), nullable=False)
    action = Column(Enum(*BACKUP_ACTIONS, name="backup_action"), nullable=False)
    snapshot = Column(JSON, nullable=False)
    sequence = Column(Integer, nullable=False)
    created_at = Column(BigInteger, nullable=False)

    # Relationships
    session = relationship("EditingSession", back_populates="backups")

    # Indexes
    __table_args__ = (
        UniqueConstraint("session_id", "sequence", name="uq_node_backups_session_sequence"),
        Index("idx_node_backups_node_id", "node_id"),
    )

    def __repr__(self) -> str:
        return f"<NodeBackup(id={self.id}, action={self.action}, sequence={self.sequence})>"
