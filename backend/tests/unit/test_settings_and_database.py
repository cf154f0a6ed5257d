"""Tests for Settings helpers and database session helpers."""

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from planet.db.database import get_db_session, transaction
from planet.db.models import User
from planet.exceptions import ConflictError
from planet.repositories.user import user_repository
from planet.settings import Settings, settings
from planet.utils import generate_id, get_logger


class TestSettings:
    def test_test_environment_uses_memory_sqlite(self):
        assert settings.is_test()
        assert settings.get_database_url_auto() == "sqlite:///:memory:"

    def test_explicit_database_url_wins(self):
        configured = Settings(environment="test", database_url="sqlite:///./other.db")
        assert configured.get_database_url_auto() == "sqlite:///./other.db"

    def test_mysql_url(self):
        configured = Settings(environment="production", database_type="mysql", mysql_host="db")
        url = configured.get_database_url_auto()
        assert url.startswith("mysql+pymysql://")
        assert "@db:3306/" in url

    def test_logs_root(self):
        logs = settings.get_logs_root()
        assert logs.name == "logs"
        assert logs.parent == settings.get_workspace_root()

    def test_cors_origins_follow_frontend_port(self):
        configured = Settings(frontend_port=5173)
        assert "http://localhost:5173" in configured.cors_origins


class TestDatabaseHelpers:
    def test_transaction_turns_constraint_violation_into_conflict(self, db_session: Session, user):
        with pytest.raises(ConflictError):
            with transaction(db_session):
                user_repository.create_user(db_session, username="alice", email="other@example.com")

        # Rolled back; the session is usable again
        assert db_session.query(User).count() == 1

    def test_transaction_rolls_back_other_errors(self, db_session: Session):
        with pytest.raises(RuntimeError):
            with transaction(db_session):
                user_repository.create_user(db_session, username="bob", email="bob@example.com")
                raise RuntimeError("boom")

        assert user_repository.get_by_username(db_session, "bob") is None

    def test_get_db_session(self):
        with get_db_session() as db:
            assert db.execute(text("SELECT 1")).scalar_one() == 1


class TestUtils:
    def test_generate_id_prefix(self):
        node_id = generate_id("node")
        assert node_id.startswith("node_")
        assert generate_id("node") != node_id

    def test_logger_namespaced(self):
        assert get_logger("planet.services.editing").name == "planet.services.editing"
        assert get_logger("scripts.tool").name == "planet.scripts.tool"
