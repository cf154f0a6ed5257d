"""Integration tests for the node API."""

import pytest

API = "/api/v1"


@pytest.fixture
def headers(auth_headers, user, planet):
    return auth_headers(user.id)


@pytest.fixture
def editing_headers(client, headers):
    """Headers of a user whose editing mode is on."""
    response = client.post(f"{API}/editing/start", headers=headers)
    assert response.status_code == 200
    return headers


def _create(client, headers, **body):
    return client.post(f"{API}/nodes", json=body, headers=headers)


class TestReadNodes:
    def test_list_requires_auth(self, client):
        assert client.get(f"{API}/nodes").status_code == 401

    def test_list_tree_and_children(self, client, editing_headers):
        _create(client, editing_headers, slug="docs", title="Docs", type="folder")
        _create(client, editing_headers, slug="b", title="B", namespace="docs", type="file", order=2)
        _create(client, editing_headers, slug="a", title="A", namespace="docs", type="file", order=1)
        _create(client, editing_headers, slug="readme", title="Readme", type="file")

        tree = client.get(f"{API}/nodes", headers=editing_headers).json()
        assert [n["file_path"] for n in tree] == ["docs", "readme", "docs/a", "docs/b"]

        children = client.get(f"{API}/nodes", params={"namespace": "docs"}, headers=editing_headers).json()
        assert [n["slug"] for n in children] == ["a", "b"]

    def test_get_node(self, client, editing_headers):
        node = _create(client, editing_headers, slug="a", title="A", type="file", content="hello").json()

        response = client.get(f"{API}/nodes/{node['id']}", headers=editing_headers)
        assert response.status_code == 200
        assert response.json()["content"] == "hello"

    def test_get_missing_node(self, client, headers):
        assert client.get(f"{API}/nodes/node_missing", headers=headers).status_code == 404

    def test_get_foreign_node(self, client, editing_headers, auth_headers, make_user, make_planet):
        node = _create(client, editing_headers, slug="a", title="A", type="file").json()
        bob = make_user("bob")
        make_planet(bob)

        assert client.get(f"{API}/nodes/{node['id']}", headers=auth_headers(bob.id)).status_code == 403


class TestWriteNodes:
    def test_create_without_editing_mode(self, client, headers):
        response = _create(client, headers, slug="a", title="A", type="file")
        assert response.status_code == 403
        assert "editing" in response.json()["detail"].lower()
        assert client.get(f"{API}/nodes", headers=headers).json() == []

    def test_create_node(self, client, editing_headers):
        response = _create(
            client,
            editing_headers,
            slug="install",
            title="Install",
            namespace="docs/guides",
            type="file",
            content="---\nsummary: Getting going\n---\nSteps",
        )
        assert response.status_code == 201
        node = response.json()
        assert node["file_path"] == "docs/guides/install"
        assert node["depth"] == 2
        assert node["tier"] == "river"
        assert node["metadata"] == {"summary": "Getting going"}

    def test_create_missing_fields(self, client, editing_headers):
        response = _create(client, editing_headers, slug="a", type="file")
        assert response.status_code == 400
        assert "title" in response.json()["detail"]

    def test_create_duplicate(self, client, editing_headers):
        assert _create(client, editing_headers, slug="a", title="A", type="file").status_code == 201
        assert _create(client, editing_headers, slug="a", title="A", type="file").status_code == 409

    def test_update_node(self, client, editing_headers):
        node = _create(client, editing_headers, slug="a", title="A", type="file").json()

        response = client.put(
            f"{API}/nodes/{node['id']}",
            json={"title": "Alpha", "metadata": {"tags": ["x"]}},
            headers=editing_headers,
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Alpha"
        assert response.json()["metadata"] == {"tags": ["x"]}

    def test_update_folder_content(self, client, editing_headers):
        folder = _create(client, editing_headers, slug="docs", title="Docs", type="folder").json()
        response = client.put(f"{API}/nodes/{folder['id']}", json={"content": "x"}, headers=editing_headers)
        assert response.status_code == 400

    def test_update_missing_node(self, client, editing_headers):
        response = client.put(f"{API}/nodes/node_missing", json={"title": "X"}, headers=editing_headers)
        assert response.status_code == 404

    def test_delete_folder(self, client, editing_headers):
        folder = _create(client, editing_headers, slug="docs", title="Docs", type="folder").json()
        _create(client, editing_headers, slug="a", title="A", namespace="docs", type="file")

        response = client.delete(f"{API}/nodes/{folder['id']}", headers=editing_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "deleted": 2}
        assert client.get(f"{API}/nodes", headers=editing_headers).json() == []

    def test_delete_after_apply(self, client, editing_headers):
        node = _create(client, editing_headers, slug="a", title="A", type="file").json()
        client.post(f"{API}/editing/apply", headers=editing_headers)

        assert client.delete(f"{API}/nodes/{node['id']}", headers=editing_headers).status_code == 403

    def test_upload_markdown(self, client, editing_headers):
        response = client.post(
            f"{API}/nodes/upload",
            json={"filename": "getting-started.md", "content": "# Hi", "namespace": "docs"},
            headers=editing_headers,
        )
        assert response.status_code == 201
        node = response.json()
        assert node["slug"] == "getting-started"
        assert node["title"] == "Getting Started"
        assert node["file_path"] == "docs/getting-started"
