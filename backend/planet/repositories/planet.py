"""Planet (workspace) repository for database operations."""

import re

from sqlalchemy import select
from sqlalchemy.orm import Session

from planet.db.models import Planet
from planet.repositories.base import BaseRepository
from planet.utils import generate_id, get_timestamp_ms
from planet.utils.id_generator import PLANET_PREFIX

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase ``value`` and collapse anything non-alphanumeric into dashes."""
    slug = _SLUG_INVALID.sub("-", value.lower()).strip("-")
    return slug or "planet"


class PlanetRepository(BaseRepository[Planet]):
    """Repository for Planet entity operations."""

    def __init__(self):
        super().__init__(Planet)

    def get_by_user(self, db: Session, user_id: str) -> Planet | None:
        """Get the user's workspace (the oldest one if several exist)."""
        stmt = select(Planet).where(Planet.user_id == user_id).order_by(Planet.created_at.asc()).limit(1)
        return db.execute(stmt).scalar_one_or_none()

    def get_by_slug(self, db: Session, slug: str) -> Planet | None:
        """Get planet by its unique slug."""
        stmt = select(Planet).where(Planet.slug == slug)
        return db.execute(stmt).scalar_one_or_none()

    def unique_slug(self, db: Session, base: str) -> str:
        """Return ``slugify(base)``, suffixed with -2, -3, ... until unused."""
        candidate = slugify(base)
        root = candidate
        suffix = 2
        while self.get_by_slug(db, candidate) is not None:
            candidate = f"{root}-{suffix}"
            suffix += 1
        return candidate

    def create_planet(
        self,
        db: Session,
        user_id: str,
        name: str,
        slug: str | None = None,
        description: str | None = None,
    ) -> Planet:
        """Create a new planet owned by ``user_id``.

        Args:
            db: Database session
            user_id: Owner user ID
            name: Display name
            slug: Unique slug, derived from name when omitted
            description: Optional description

        Returns:
            Created planet
        """
        now = get_timestamp_ms()
        planet_data = {
            "id": generate_id(PLANET_PREFIX),
            "user_id": user_id,
            "slug": slug or self.unique_slug(db, name),
            "name": name,
            "description": description,
            "created_at": now,
            "updated_at": now,
        }
        return self.create(db, planet_data)


# Singleton instance
planet_repository = PlanetRepository()
