"""Workspace (planet) and user profile business logic.

Provides service functions for:
- Workspace lookup, provisioning and renaming
- Profile read/update
- Account deletion (cascades to planet, nodes, sessions and backups)
"""

from sqlalchemy.orm import Session

from planet.db.database import transaction
from planet.db.models import Planet, User
from planet.exceptions import ConflictError, NotFoundError, ValidationError
from planet.repositories.planet import planet_repository
from planet.repositories.user import user_repository
from planet.utils import get_logger, get_timestamp_ms

logger = get_logger(__name__)


def get_user_workspace(db: Session, user_id: str) -> Planet | None:
    """Get the user's workspace, or None if it was never created."""
    return planet_repository.get_by_user(db, user_id)


def require_user_workspace(db: Session, user_id: str) -> Planet:
    """Get the user's workspace.

    Raises:
        NotFoundError: If the user has no workspace yet
    """
    planet = planet_repository.get_by_user(db, user_id)
    if planet is None:
        raise NotFoundError("No workspace found. Please create a workspace first.")
    return planet


def ensure_user_workspace(db: Session, user: User) -> Planet:
    """Return the user's workspace, creating it on first call.

    The slug is derived from the username and suffixed if already taken.
    """
    planet = planet_repository.get_by_user(db, user.id)
    if planet is not None:
        return planet

    with transaction(db):
        planet = planet_repository.create_planet(
            db,
            user_id=user.id,
            name=f"{user.username}'s Planet",
            slug=planet_repository.unique_slug(db, user.username),
        )

    logger.info(f"Created workspace {planet.slug} ({planet.id}) for user {user.id}")
    return planet


def rename_workspace(db: Session, user_id: str, name: str) -> Planet:
    """Change the display name of the user's workspace. The slug is kept."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Workspace name must not be empty")

    planet = require_user_workspace(db, user_id)
    with transaction(db):
        planet_repository.update(db, planet, {"name": name, "updated_at": get_timestamp_ms()})
    return planet


def get_profile(db: Session, user_id: str) -> User:
    """Get a user's profile.

    Raises:
        NotFoundError: If the user does not exist
    """
    user = user_repository.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_profile(
    db: Session,
    user_id: str,
    email: str | None = None,
    avatar_url: str | None = None,
    bio: str | None = None,
) -> User:
    """Update profile fields that were provided.

    The email format is checked by ``ProfileUpdate`` before it gets here.

    Raises:
        ConflictError: If the email is used by another account
    """
    user = get_profile(db, user_id)

    fields = {}
    if email is not None:
        other = user_repository.get_by_email(db, email)
        if other is not None and other.id != user.id:
            raise ConflictError("Email already in use")
        fields["email"] = email
    if avatar_url is not None:
        fields["avatar_url"] = avatar_url
    if bio is not None:
        fields["bio"] = bio
    fields["updated_at"] = get_timestamp_ms()

    with transaction(db):
        user_repository.update(db, user, fields)
    return user


def delete_user(db: Session, user_id: str) -> None:
    """Delete a user and everything they own. Irreversible."""
    user = get_profile(db, user_id)
    with transaction(db):
        db.delete(user)

    logger.info(f"Deleted user {user_id} and all associated data")
