"""Node API endpoints.

Reads need only a logged-in owner. Writes go through the Mutation Gateway
and need editing mode to be on for the caller's workspace.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from planet.api.deps import get_current_user, http_errors
from planet.db.database import get_db
from planet.db.models import User
from planet.exceptions import ForbiddenError, NotFoundError
from planet.models.schemas import MarkdownUpload, NodeCreate, NodeDeleteResponse, NodeOut, NodeUpdate
from planet.repositories.node import node_repository
from planet.services import editing, node_gateway, workspace
from planet.utils import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _active_session_id(db: Session, user: User) -> str | None:
    """ID of the caller's active session; None lets the gateway refuse."""
    planet = workspace.require_user_workspace(db, user.id)
    session = editing.get_active_session(db, user.id, planet.id)
    return session.id if session else None


@router.get("", response_model=list[NodeOut])
async def list_nodes(
    namespace: str | None = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[NodeOut]:
    """List the nodes of the caller's workspace.

    With ``namespace`` only that folder's direct children are returned,
    otherwise the whole tree, parents before children.
    """
    with http_errors("list nodes"):
        planet = workspace.require_user_workspace(db, user.id)
        if namespace is None:
            nodes = node_repository.list_by_planet(db, planet.id)
        else:
            nodes = node_repository.list_children(db, planet.id, namespace)
        return [NodeOut.from_model(n) for n in nodes]


@router.get("/{node_id}", response_model=NodeOut)
async def get_node(
    node_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NodeOut:
    """Get a specific node by ID."""
    with http_errors("fetch node"):
        node = node_repository.get_by_id(db, node_id)
        if node is None:
            raise NotFoundError("Node not found")
        if node.planet.user_id != user.id:
            raise ForbiddenError("Forbidden")
        return NodeOut.from_model(node)


@router.post("", response_model=NodeOut, status_code=status.HTTP_201_CREATED)
async def create_node(
    body: NodeCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NodeOut:
    """Create a new node (requires editing mode)."""
    logger.info(f"POST /nodes: user={user.id}, namespace={body.namespace!r}, slug={body.slug!r}, type={body.type}")
    with http_errors("create node"):
        node = node_gateway.create_node(db, user.id, _active_session_id(db, user), body)
        return NodeOut.from_model(node)


@router.post("/upload", response_model=NodeOut, status_code=status.HTTP_201_CREATED)
async def upload_markdown(
    body: MarkdownUpload,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NodeOut:
    """Create a file node from a dropped markdown file (requires editing mode)."""
    logger.info(f"POST /nodes/upload: user={user.id}, namespace={body.namespace!r}, filename={body.filename!r}")
    with http_errors("upload markdown"):
        node = node_gateway.upload_markdown(
            db,
            user.id,
            _active_session_id(db, user),
            filename=body.filename,
            content=body.content,
            namespace=body.namespace,
        )
        return NodeOut.from_model(node)


@router.put("/{node_id}", response_model=NodeOut)
async def update_node(
    node_id: str,
    body: NodeUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NodeOut:
    """Update a node (requires editing mode)."""
    logger.info(f"PUT /nodes/{node_id}: user={user.id}")
    with http_errors("update node"):
        node = node_gateway.update_node(db, user.id, _active_session_id(db, user), node_id, body)
        return NodeOut.from_model(node)


@router.delete("/{node_id}", response_model=NodeDeleteResponse)
async def delete_node(
    node_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NodeDeleteResponse:
    """Delete a node and, for folders, everything below it (requires editing mode)."""
    logger.info(f"DELETE /nodes/{node_id}: user={user.id}")
    with http_errors("delete node"):
        deleted = node_gateway.delete_node(db, user.id, _active_session_id(db, user), node_id)
        return NodeDeleteResponse(deleted=deleted)
