"""User API endpoints: profile, workspace and account deletion."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from planet.api.deps import get_current_user, http_errors
from planet.db.database import get_db
from planet.db.models import User
from planet.models.schemas import ActionResponse, PlanetOut, PlanetRename, ProfileUpdate, UserProfile
from planet.services import workspace
from planet.utils import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/profile", response_model=UserProfile)
async def get_profile(user: User = Depends(get_current_user)) -> UserProfile:
    """Get the current user's profile."""
    return UserProfile.from_model(user)


@router.put("/profile", response_model=UserProfile)
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserProfile:
    """Update the current user's profile."""
    logger.info(f"PUT /user/profile: user={user.id}")
    with http_errors("update profile"):
        updated = workspace.update_profile(
            db,
            user.id,
            email=body.email,
            avatar_url=body.avatar_url,
            bio=body.bio,
        )
        return UserProfile.from_model(updated)


@router.get("/workspace", response_model=PlanetOut)
async def get_workspace(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PlanetOut:
    """Get the current user's workspace."""
    with http_errors("fetch workspace"):
        return PlanetOut.from_model(workspace.require_user_workspace(db, user.id))


@router.post("/workspace", response_model=PlanetOut, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PlanetOut:
    """Create the current user's workspace if it doesn't exist yet."""
    logger.info(f"POST /user/workspace: user={user.id}")
    with http_errors("create workspace"):
        return PlanetOut.from_model(workspace.ensure_user_workspace(db, user))


@router.patch("/workspace", response_model=PlanetOut)
async def rename_workspace(
    body: PlanetRename,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PlanetOut:
    """Rename the current user's workspace."""
    logger.info(f"PATCH /user/workspace: user={user.id}")
    with http_errors("rename workspace"):
        return PlanetOut.from_model(workspace.rename_workspace(db, user.id, body.name))


@router.delete("", response_model=ActionResponse)
async def delete_account(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ActionResponse:
    """Delete the user's account and all associated data. Irreversible."""
    logger.info(f"DELETE /user: user={user.id}")
    with http_errors("delete user"):
        workspace.delete_user(db, user.id)
        return ActionResponse(message="User account and all data deleted successfully")
