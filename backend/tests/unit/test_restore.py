"""Tests for restoring a tree from session backups.

The central property: whatever a session did, discarding it leaves the node
store exactly as it was when the session started.
"""

import pytest
from sqlalchemy.orm import Session

from planet.models.schemas import NodeCreate, NodeUpdate
from planet.repositories.node import node_repository, snapshot_node
from planet.repositories.node_backup import node_backup_repository
from planet.services import editing, node_gateway, restore
from planet.services.restore import invert_backup, restore_session


def _tree(db: Session, planet_id: str) -> list[dict]:
    return [snapshot_node(n) for n in node_repository.list_by_planet(db, planet_id)]


def _seed(db: Session, user_id: str, planet_id: str) -> None:
    """Build a small tree in an applied session."""
    session_id = editing.start_session(db, user_id, planet_id).id
    for namespace, slug, node_type, content in [
        ("", "docs", "folder", None),
        ("docs", "intro", "file", "---\nsummary: hello\n---\nWelcome"),
        ("docs", "guides", "folder", None),
        ("docs/guides", "install", "file", "pip install"),
        ("", "readme", "file", "Top level"),
    ]:
        node_gateway.create_node(
            db,
            user_id,
            session_id,
            NodeCreate(slug=slug, title=slug.title(), namespace=namespace, type=node_type, content=content),
        )
    editing.apply_session(db, session_id)


class TestDiscardRestoresTree:
    def test_mixed_session_round_trip(self, db_session: Session, user, planet):
        _seed(db_session, user.id, planet.id)
        before = _tree(db_session, planet.id)

        session_id = editing.start_session(db_session, user.id, planet.id).id
        intro = node_repository.get_by_path(db_session, planet.id, "docs/intro")
        readme = node_repository.get_by_path(db_session, planet.id, "readme")
        guides = node_repository.get_by_path(db_session, planet.id, "docs/guides")

        new = node_gateway.create_node(
            db_session, user.id, session_id, NodeCreate(slug="faq", title="FAQ", namespace="docs", type="file")
        )
        node_gateway.update_node(db_session, user.id, session_id, new.id, NodeUpdate(content="Q and A"))
        node_gateway.update_node(
            db_session, user.id, session_id, intro.id, NodeUpdate(title="Introduction", metadata={"x": 1})
        )
        node_gateway.update_node(db_session, user.id, session_id, intro.id, NodeUpdate(content="Rewritten"))
        node_gateway.delete_node(db_session, user.id, session_id, readme.id)
        node_gateway.delete_node(db_session, user.id, session_id, guides.id)
        assert _tree(db_session, planet.id) != before

        editing.discard_session(db_session, session_id)

        db_session.expire_all()
        assert _tree(db_session, planet.id) == before

    def test_apply_keeps_changes(self, db_session: Session, user, planet):
        _seed(db_session, user.id, planet.id)

        session_id = editing.start_session(db_session, user.id, planet.id).id
        readme = node_repository.get_by_path(db_session, planet.id, "readme")
        node_gateway.update_node(db_session, user.id, session_id, readme.id, NodeUpdate(title="Read Me"))
        after = _tree(db_session, planet.id)

        editing.apply_session(db_session, session_id)

        db_session.expire_all()
        assert _tree(db_session, planet.id) == after
        assert node_repository.get_by_path(db_session, planet.id, "readme").title == "Read Me"

    def test_delete_then_recreate_same_slot(self, db_session: Session, user, planet):
        _seed(db_session, user.id, planet.id)
        before = _tree(db_session, planet.id)

        session_id = editing.start_session(db_session, user.id, planet.id).id
        readme = node_repository.get_by_path(db_session, planet.id, "readme")
        node_gateway.delete_node(db_session, user.id, session_id, readme.id)
        node_gateway.create_node(
            db_session, user.id, session_id, NodeCreate(slug="readme", title="Replacement", type="folder")
        )

        editing.discard_session(db_session, session_id)

        db_session.expire_all()
        assert _tree(db_session, planet.id) == before

    def test_folder_cascade_restored_with_ids(self, db_session: Session, user, planet):
        _seed(db_session, user.id, planet.id)
        before = _tree(db_session, planet.id)
        ids = {n["file_path"]: n["id"] for n in before}

        session_id = editing.start_session(db_session, user.id, planet.id).id
        node_gateway.delete_node(db_session, user.id, session_id, ids["docs"])
        assert [n["file_path"] for n in _tree(db_session, planet.id)] == ["readme"]

        editing.discard_session(db_session, session_id)

        db_session.expire_all()
        restored = _tree(db_session, planet.id)
        assert restored == before
        assert {n["file_path"]: n["id"] for n in restored} == ids

    def test_empty_session(self, db_session: Session, user, planet):
        _seed(db_session, user.id, planet.id)
        before = _tree(db_session, planet.id)

        session_id = editing.start_session(db_session, user.id, planet.id).id
        assert editing.discard_session(db_session, session_id) == 0
        assert _tree(db_session, planet.id) == before

    def test_docs_setup_walkthrough(self, db_session: Session, user, planet):
        """Create a folder and a page, edit the page, then throw it all away."""
        session_id = editing.start_session(db_session, user.id, planet.id).id

        node_gateway.create_node(db_session, user.id, session_id, NodeCreate(slug="docs", title="Docs", type="folder"))
        setup = node_gateway.create_node(
            db_session,
            user.id,
            session_id,
            NodeCreate(slug="setup", title="Setup", namespace="docs", type="file", content="v1"),
        )
        node_gateway.update_node(db_session, user.id, session_id, setup.id, NodeUpdate(content="v2"))

        assert [n.file_path for n in node_repository.list_by_planet(db_session, planet.id)] == ["docs", "docs/setup"]

        assert editing.discard_session(db_session, session_id) == 3
        assert node_repository.list_by_planet(db_session, planet.id) == []
        assert editing.get_active_session(db_session, user.id, planet.id) is None


class TestRestoreIdempotence:
    def test_rerun_after_partial_restore(self, db_session: Session, user, planet):
        _seed(db_session, user.id, planet.id)
        before = _tree(db_session, planet.id)

        session_id = editing.start_session(db_session, user.id, planet.id).id
        readme = node_repository.get_by_path(db_session, planet.id, "readme")
        node_gateway.create_node(db_session, user.id, session_id, NodeCreate(slug="new", title="New", type="file"))
        node_gateway.update_node(db_session, user.id, session_id, readme.id, NodeUpdate(title="Changed"))
        node_gateway.delete_node(db_session, user.id, session_id, readme.id)

        # An interrupted earlier attempt already undid the newest two backups
        backups = node_backup_repository.list_for_session(db_session, session_id)
        for backup in reversed(backups[1:]):
            assert invert_backup(db_session, backup) is True
        db_session.commit()

        editing.discard_session(db_session, session_id)

        db_session.expire_all()
        assert _tree(db_session, planet.id) == before

    def test_restore_twice_is_stable(self, db_session: Session, user, planet):
        _seed(db_session, user.id, planet.id)
        before = _tree(db_session, planet.id)

        session_id = editing.start_session(db_session, user.id, planet.id).id
        intro = node_repository.get_by_path(db_session, planet.id, "docs/intro")
        node_gateway.delete_node(db_session, user.id, session_id, intro.id)
        node_gateway.create_node(db_session, user.id, session_id, NodeCreate(slug="x", title="X", type="file"))

        assert restore_session(db_session, session_id) == 2
        assert restore_session(db_session, session_id) == 2
        db_session.commit()

        assert _tree(db_session, planet.id) == before

    def test_resolved_inversions_are_skipped(self, db_session: Session, user, planet):
        session_id = editing.start_session(db_session, user.id, planet.id).id
        node_gateway.create_node(db_session, user.id, session_id, NodeCreate(slug="a", title="A", type="file"))
        backup = node_backup_repository.list_for_session(db_session, session_id)[0]

        assert invert_backup(db_session, backup) is True
        assert invert_backup(db_session, backup) is False


class TestRestoreFailure:
    def test_unexpected_error_keeps_session_active(self, db_session: Session, user, planet, monkeypatch):
        """A failing inversion rolls the whole discard back."""
        session_id = editing.start_session(db_session, user.id, planet.id).id
        for slug in ("a", "b"):
            node_gateway.create_node(db_session, user.id, session_id, NodeCreate(slug=slug, title=slug, type="file"))
        before = _tree(db_session, planet.id)

        real_invert_create = restore._INVERSES["create"]
        calls = []

        def flaky_invert_create(db, backup):
            calls.append(backup.node_id)
            if len(calls) == 2:
                raise RuntimeError("disk full")
            real_invert_create(db, backup)

        monkeypatch.setitem(restore._INVERSES, "create", flaky_invert_create)

        with pytest.raises(RuntimeError):
            editing.discard_session(db_session, session_id)

        monkeypatch.undo()
        active = editing.get_active_session(db_session, user.id, planet.id)
        assert active is not None
        assert active.id == session_id
        assert _tree(db_session, planet.id) == before
        assert [n["slug"] for n in before] == ["a", "b"]
        assert len(node_backup_repository.list_for_session(db_session, session_id)) == 2
