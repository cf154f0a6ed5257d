"""Pydantic request/response models for the HTTP API and service layer.

Required node fields are optional here on purpose: the Mutation Gateway
reports missing slug/title/type as a domain ValidationError (400) instead of
a schema error.
"""

from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field

from planet.db.models import EditingSession, Node, NodeBackup, Planet, User


# Node requests


class NodeCreate(BaseModel):
    slug: str | None = None
    title: str | None = None
    namespace: str = ""
    type: str | None = None  # 'file' | 'folder'
    content: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    order: int = 0


class NodeUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    metadata: dict[str, Any] | None = None
    order: int | None = None


class MarkdownUpload(BaseModel):
    """A markdown file dropped onto a folder in the browser."""

    filename: str
    content: str
    namespace: str = ""


# Node responses


class NodeOut(BaseModel):
    id: str
    planet_id: str
    slug: str
    title: str
    namespace: str
    depth: int
    file_path: str
    type: Literal["file", "folder"]
    tier: Literal["ocean", "sea", "river", "drop"]
    content: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    order: int
    created_at: int
    updated_at: int

    @classmethod
    def from_model(cls, node: Node) -> "NodeOut":
        return cls(
            id=node.id,
            planet_id=node.planet_id,
            slug=node.slug,
            title=node.title,
            namespace=node.namespace,
            depth=node.depth,
            file_path=node.file_path,
            type=node.type,
            tier=node.tier,
            content=node.content,
            metadata=dict(node.meta or {}),
            order=node.order,
            created_at=node.created_at,
            updated_at=node.updated_at,
        )


class NodeDeleteResponse(BaseModel):
    success: bool = True
    deleted: int


# Editing sessions


class SessionOut(BaseModel):
    id: str
    planet_id: str
    started_at: int
    ended_at: int | None = None
    is_active: bool

    @classmethod
    def from_model(cls, session: EditingSession) -> "SessionOut":
        return cls(
            id=session.id,
            planet_id=session.planet_id,
            started_at=session.started_at,
            ended_at=session.ended_at,
            is_active=session.is_active,
        )


class SessionStartResponse(BaseModel):
    success: bool = True
    session: SessionOut


class SessionStatusResponse(BaseModel):
    is_active: bool
    session: SessionOut | None = None


class ActionResponse(BaseModel):
    success: bool = True
    message: str


class BackupOut(BaseModel):
    id: str
    session_id: str
    node_id: str
    action: Literal["create", "update", "delete"]
    sequence: int
    snapshot: dict[str, Any]
    created_at: int

    @classmethod
    def from_model(cls, backup: NodeBackup) -> "BackupOut":
        return cls(
            id=backup.id,
            session_id=backup.session_id,
            node_id=backup.node_id,
            action=backup.action,
            sequence=backup.sequence,
            snapshot=dict(backup.snapshot or {}),
            created_at=backup.created_at,
        )


# Users and workspaces


class PlanetOut(BaseModel):
    id: str
    user_id: str
    slug: str
    name: str
    description: str | None = None
    created_at: int
    updated_at: int

    @classmethod
    def from_model(cls, planet: Planet) -> "PlanetOut":
        return cls(
            id=planet.id,
            user_id=planet.user_id,
            slug=planet.slug,
            name=planet.name,
            description=planet.description,
            created_at=planet.created_at,
            updated_at=planet.updated_at,
        )


class PlanetRename(BaseModel):
    name: str


class UserProfile(BaseModel):
    id: str
    username: str
    email: str
    avatar_url: str | None = None
    bio: str | None = None
    created_at: int
    updated_at: int | None = None

    @classmethod
    def from_model(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            avatar_url=user.avatar_url,
            bio=user.bio,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class ProfileUpdate(BaseModel):
    email: EmailStr | None = None
    avatar_url: str | None = None
    bio: str | None = None
