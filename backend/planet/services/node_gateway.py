"""Mutation Gateway: the only way nodes are created, updated or deleted.

Every mutation:
1. requires an active editing session owned by the caller,
2. checks the target node belongs to the session's planet,
3. records one backup per affected node, flushed before the store write,
4. commits backup and mutation together.

A failed backup write aborts the mutation, so no change can reach the store
without the information needed to revert it.

Metadata precedence, applied in both create and update:
explicit metadata > markdown front-matter > existing metadata.
"""

import re
from typing import Any

from sqlalchemy.orm import Session

from planet.db.database import transaction
from planet.db.models import NODE_TYPES, EditingSession, Node
from planet.exceptions import ConflictError, ForbiddenError, NotFoundError, PermissionDeniedError, ValidationError
from planet.models.schemas import NodeCreate, NodeUpdate
from planet.repositories.editing_session import editing_session_repository
from planet.repositories.node import node_placement, node_repository, snapshot_node
from planet.repositories.node_backup import node_backup_repository, tombstone
from planet.utils import generate_id, get_logger, split_frontmatter
from planet.utils.id_generator import NODE_PREFIX

logger = get_logger(__name__)

_MARKDOWN_EXT = re.compile(r"\.mdx?$", re.IGNORECASE)


def merge_metadata(
    existing: dict[str, Any] | None,
    frontmatter: dict[str, Any] | None,
    explicit: dict[str, Any] | None,
) -> dict[str, Any]:
    """Merge metadata sources; later sources win key by key."""
    return {**(existing or {}), **(frontmatter or {}), **(explicit or {})}


def _frontmatter_of(node_type: str, content: str | None) -> dict[str, Any]:
    if node_type != "file" or not content:
        return {}
    metadata, _ = split_frontmatter(content)
    return metadata


def _require_session(db: Session, user_id: str, session_id: str | None) -> EditingSession:
    session = editing_session_repository.get_active_by_id(db, session_id) if session_id else None
    if session is None or session.user_id != user_id:
        raise PermissionDeniedError()
    return session


def _get_target(db: Session, session: EditingSession, node_id: str) -> Node:
    node = node_repository.get_by_id(db, node_id)
    if node is None:
        raise NotFoundError("Node not found")
    if node.planet_id != session.planet_id:
        raise ForbiddenError("Node belongs to another workspace")
    return node


def create_node(db: Session, user_id: str, session_id: str | None, data: NodeCreate) -> Node:
    """Create a file or folder inside the session's planet.

    Parent folders are not required to exist: uploads may arrive child
    first.

    Raises:
        PermissionDeniedError: If no active session is owned by the caller
        ValidationError: If slug, title or type is missing or invalid
        ConflictError: If a sibling with the same slug exists
    """
    session = _require_session(db, user_id, session_id)

    missing = [field for field in ("slug", "title", "type") if not getattr(data, field)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    if data.type not in NODE_TYPES:
        raise ValidationError(f"Invalid node type: {data.type!r}")

    placement = node_placement(data.namespace, data.slug)
    if node_repository.get_sibling(db, session.planet_id, placement["namespace"], placement["slug"]) is not None:
        raise ConflictError(f"Node '{placement['file_path']}' already exists")

    metadata = merge_metadata({}, _frontmatter_of(data.type, data.content), data.metadata)
    node_id = generate_id(NODE_PREFIX)

    with transaction(db):
        node_backup_repository.record(db, session.id, node_id, "create", tombstone(node_id))
        node = node_repository.insert_node(
            db,
            session.planet_id,
            slug=placement["slug"],
            title=data.title,
            type=data.type,
            namespace=placement["namespace"],
            content=data.content,
            metadata=metadata,
            order=data.order,
            node_id=node_id,
        )

    logger.info(f"Created {node.type} '{node.file_path}' ({node.id}) in session {session.id}")
    return node


def update_node(db: Session, user_id: str, session_id: str | None, node_id: str, data: NodeUpdate) -> Node:
    """Update a node's title, content, metadata or order.

    Raises:
        PermissionDeniedError: If no active session is owned by the caller
        NotFoundError: If the node does not exist
        ForbiddenError: If the node belongs to another planet
        ValidationError: If the title is blank or content is set on a folder
    """
    session = _require_session(db, user_id, session_id)
    node = _get_target(db, session, node_id)

    fields: dict[str, Any] = {}
    if data.title is not None:
        if not data.title.strip():
            raise ValidationError("Title must not be empty")
        fields["title"] = data.title
    if data.content is not None:
        if node.type == "folder":
            raise ValidationError("Folders have no content")
        fields["content"] = data.content
    if data.order is not None:
        fields["order"] = data.order

    frontmatter = _frontmatter_of(node.type, data.content)
    if data.metadata is not None or frontmatter:
        fields["metadata"] = merge_metadata(node.meta, frontmatter, data.metadata)

    with transaction(db):
        node_backup_repository.record(db, session.id, node.id, "update", snapshot_node(node))
        node_repository.update_node(db, node, fields)

    logger.info(f"Updated node '{node.file_path}' ({node.id}) in session {session.id}: {sorted(fields)}")
    return node


def delete_node(db: Session, user_id: str, session_id: str | None, node_id: str) -> int:
    """Delete a node; deleting a folder removes its whole subtree.

    One backup is recorded per removed node, deepest first and the folder
    itself last, so a discard reinserts parents before their children.

    Returns:
        Number of nodes removed

    Raises:
        PermissionDeniedError: If no active session is owned by the caller
        NotFoundError: If the node does not exist
        ForbiddenError: If the node belongs to another planet
    """
    session = _require_session(db, user_id, session_id)
    node = _get_target(db, session, node_id)

    doomed = []
    if node.type == "folder":
        doomed.extend(node_repository.list_descendants(db, node.planet_id, node.file_path))
    doomed.append(node)
    file_path = node.file_path

    with transaction(db):
        for target in doomed:
            node_backup_repository.record(db, session.id, target.id, "delete", snapshot_node(target))
            node_repository.delete(db, target.id)

    logger.info(f"Deleted '{file_path}' ({len(doomed)} nodes) in session {session.id}")
    return len(doomed)


def title_from_slug(slug: str) -> str:
    """'getting-started' -> 'Getting Started'."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), slug.replace("-", " "))


def upload_markdown(
    db: Session,
    user_id: str,
    session_id: str | None,
    filename: str,
    content: str,
    namespace: str = "",
) -> Node:
    """Create a file node from an uploaded markdown file.

    The slug is the filename without its .md/.mdx extension; the title is
    derived from the slug.
    """
    slug = _MARKDOWN_EXT.sub("", (filename or "").strip().rsplit("/", 1)[-1])
    data = NodeCreate(
        slug=slug,
        title=title_from_slug(slug) if slug else None,
        namespace=namespace,
        type="file",
        content=content,
    )
    return create_node(db, user_id, session_id, data)
