"""Node repository: the persistent content tree of a planet.

The tree is stored flat. A node's position is its namespace (slash-joined
ancestor slugs, "" at the root) plus its slug; depth, file_path and tier are
derived from those two values by ``node_placement`` and nowhere else.
"""

from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from planet.db.models import NODE_TIERS, NODE_TYPES, Node
from planet.exceptions import AlreadyExistsError, ValidationError
from planet.repositories.base import BaseRepository
from planet.utils import generate_id, get_timestamp_ms
from planet.utils.id_generator import NODE_PREFIX

# Fields a backup snapshot captures; restoring an update writes these back
SNAPSHOT_FIELDS = (
    "id",
    "planet_id",
    "slug",
    "title",
    "namespace",
    "depth",
    "file_path",
    "type",
    "tier",
    "content",
    "metadata",
    "order",
    "created_at",
    "updated_at",
)
MUTABLE_FIELDS = ("title", "content", "metadata", "order", "updated_at")


def node_tier(depth: int) -> str:
    """Tier label for a depth; saturates at the deepest tier."""
    return NODE_TIERS[min(depth, len(NODE_TIERS) - 1)]


def normalize_namespace(namespace: str | None) -> str:
    """Strip surrounding slashes and whitespace; reject empty inner segments."""
    namespace = (namespace or "").strip().strip("/")
    if not namespace:
        return ""
    segments = namespace.split("/")
    if any(not segment.strip() for segment in segments):
        raise ValidationError(f"Invalid namespace: {namespace!r}")
    return "/".join(segment.strip() for segment in segments)


def node_placement(namespace: str | None, slug: str | None) -> dict[str, Any]:
    """Validate a node position and derive its placement fields.

    Returns:
        Dict with namespace, slug, depth, file_path and tier

    Raises:
        ValidationError: If slug is empty or contains a slash, or the
            namespace has empty segments
    """
    slug = (slug or "").strip()
    if not slug:
        raise ValidationError("Slug must not be empty")
    if "/" in slug:
        raise ValidationError(f"Slug must not contain '/': {slug!r}")

    namespace = normalize_namespace(namespace)
    depth = len(namespace.split("/")) if namespace else 0
    return {
        "namespace": namespace,
        "slug": slug,
        "depth": depth,
        "file_path": f"{namespace}/{slug}" if namespace else slug,
        "tier": node_tier(depth),
    }


def snapshot_node(node: Node) -> dict[str, Any]:
    """Capture the full state of a node as a JSON-storable dict."""
    snapshot = {field: getattr(node, field) for field in SNAPSHOT_FIELDS if field != "metadata"}
    snapshot["metadata"] = dict(node.meta or {})
    return snapshot


class NodeRepository(BaseRepository[Node]):
    """Repository for Node entity operations."""

    def __init__(self):
        super().__init__(Node)

    def get_sibling(self, db: Session, planet_id: str, namespace: str, slug: str) -> Node | None:
        """Get the node occupying (planet, namespace, slug), if any."""
        stmt = select(Node).where(
            Node.planet_id == planet_id,
            Node.namespace == namespace,
            Node.slug == slug,
        )
        return db.execute(stmt).scalar_one_or_none()

    def get_by_path(self, db: Session, planet_id: str, file_path: str) -> Node | None:
        """Get a node by its slash-joined path within a planet."""
        placement_ns, _, slug = file_path.strip("/").rpartition("/")
        return self.get_sibling(db, planet_id, placement_ns, slug)

    def list_children(self, db: Session, planet_id: str, namespace: str = "") -> list[Node]:
        """Direct children of a namespace, in sibling order."""
        stmt = (
            select(Node)
            .where(Node.planet_id == planet_id, Node.namespace == normalize_namespace(namespace))
            .order_by(Node.order.asc(), Node.slug.asc())
        )
        return list(db.execute(stmt).scalars().all())

    def list_by_planet(self, db: Session, planet_id: str) -> list[Node]:
        """Every node of a planet, parents before children."""
        stmt = (
            select(Node)
            .where(Node.planet_id == planet_id)
            .order_by(Node.depth.asc(), Node.namespace.asc(), Node.order.asc(), Node.slug.asc())
        )
        return list(db.execute(stmt).scalars().all())

    def list_descendants(self, db: Session, planet_id: str, file_path: str) -> list[Node]:
        """Every node below ``file_path``, deepest first."""
        stmt = (
            select(Node)
            .where(
                Node.planet_id == planet_id,
                or_(
                    Node.namespace == file_path,
                    Node.namespace.startswith(f"{file_path}/", autoescape=True),
                ),
            )
            .order_by(Node.depth.desc(), Node.file_path.asc())
        )
        return list(db.execute(stmt).scalars().all())

    def insert_node(
        self,
        db: Session,
        planet_id: str,
        *,
        slug: str,
        title: str,
        type: str,
        namespace: str = "",
        content: str | None = None,
        metadata: dict[str, Any] | None = None,
        order: int = 0,
        node_id: str | None = None,
        created_at: int | None = None,
        updated_at: int | None = None,
    ) -> Node:
        """Insert a node after validating its placement.

        Raises:
            ValidationError: If the type or placement is invalid
            AlreadyExistsError: If the ID or the sibling slot is taken
        """
        if type not in NODE_TYPES:
            raise ValidationError(f"Invalid node type: {type!r}")

        placement = node_placement(namespace, slug)
        if node_id is not None and self.exists(db, node_id):
            raise AlreadyExistsError(f"Node {node_id} already exists")
        if self.get_sibling(db, planet_id, placement["namespace"], placement["slug"]) is not None:
            raise AlreadyExistsError(f"Node '{placement['file_path']}' already exists")

        now = get_timestamp_ms()
        node_data = {
            **placement,
            "id": node_id or generate_id(NODE_PREFIX),
            "planet_id": planet_id,
            "title": title,
            "type": type,
            "content": content if type == "file" else None,
            "meta": dict(metadata or {}),
            "order": order,
            "created_at": created_at or now,
            "updated_at": updated_at or now,
        }
        return self.create(db, node_data)

    def insert_from_snapshot(self, db: Session, snapshot: dict[str, Any]) -> Node:
        """Reinsert a deleted node with its original ID and timestamps."""
        return self.insert_node(
            db,
            snapshot["planet_id"],
            slug=snapshot["slug"],
            title=snapshot["title"],
            type=snapshot["type"],
            namespace=snapshot["namespace"],
            content=snapshot.get("content"),
            metadata=snapshot.get("metadata"),
            order=snapshot.get("order") or 0,
            node_id=snapshot["id"],
            created_at=snapshot.get("created_at"),
            updated_at=snapshot.get("updated_at"),
        )

    def update_node(self, db: Session, node: Node, fields: dict[str, Any]) -> Node:
        """Write mutable fields and re-derive placement.

        Only title, content, metadata, order and updated_at are accepted;
        position changes are not supported through updates.
        """
        unknown = set(fields) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        values = {k: v for k, v in fields.items() if k != "metadata"}
        if "metadata" in fields:
            values["meta"] = dict(fields["metadata"] or {})
        values.update(node_placement(node.namespace, node.slug))
        values.setdefault("updated_at", get_timestamp_ms())
        return self.update(db, node, values)

    def restore_snapshot(self, db: Session, node: Node, snapshot: dict[str, Any]) -> Node:
        """Overwrite a node's mutable fields with a snapshot's values."""
        return self.update_node(db, node, {field: snapshot.get(field) for field in MUTABLE_FIELDS})


# Singleton instance
node_repository = NodeRepository()
