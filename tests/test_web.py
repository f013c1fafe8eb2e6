"""Tests for the HTTP API."""
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from schemascope.config import AppConfig, ChatConfig, SourcesConfig
from schemascope.web import create_app

SSE_REPLY = (
    'data: {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "The posts "}}\n'
    "\n"
    'data: {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "table..."}}\n'
    "\n"
)


@pytest.fixture
def provider_requests():
    return []


@pytest.fixture
def client(app_config, provider_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        provider_requests.append(json.loads(request.content))
        return httpx.Response(200, text=SSE_REPLY)

    app = create_app(app_config, chat_transport=httpx.MockTransport(handler))
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Schema file routes
# =============================================================================

class TestDatabaseRoutes:
    """Test listing and parsing schema files."""

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_list_databases(self, client):
        response = client.get("/api/databases")

        assert response.status_code == 200
        databases = response.json()["databases"]
        assert [d["name"] for d in databases] == ["blog"]
        assert databases[0]["filename"] == "blog.sql"

    def test_list_without_folder(self, tmp_path):
        config = AppConfig(sources=SourcesConfig(directory=str(tmp_path / "missing")))
        with TestClient(create_app(config)) as client:
            response = client.get("/api/databases")

        assert response.json() == {"databases": [], "error": "No database folder found"}

    def test_get_database(self, client):
        data = client.get("/api/databases/blog").json()

        assert data["filename"] == "blog"
        assert data["stats"]["totalTables"] == 4
        assert [t["name"] for t in data["tables"]] == ["profiles", "posts", "messages", "audit_log"]

    def test_get_database_not_found(self, client):
        response = client.get("/api/databases/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Database file not found"

    def test_get_database_too_large(self, schema_dir):
        (schema_dir / "huge.sql").write_text("-- x\n" * 400)
        config = AppConfig(sources=SourcesConfig(directory=str(schema_dir), max_file_bytes=1024))

        with TestClient(create_app(config)) as client:
            response = client.get("/api/databases/huge")

        assert response.status_code == 400
        assert "too large" in response.json()["detail"]

    def test_warnings(self, client):
        data = client.get("/api/databases/blog/warnings").json()

        assert data["filename"] == "blog"
        assert [w["kind"] for w in data["warnings"]] == [
            "missing_primary_key",
            "rls_without_policies",
            "isolated_table",
            "unresolved_reference",
        ]
        assert data["warnings"][0]["type"] == "error"
        assert "chatPrompt" in data["warnings"][0]

    def test_context(self, client):
        data = client.get("/api/databases/blog/context").json()

        assert data["context"].startswith("DATABASE SUMMARY:\n- Total Tables: 4")
        assert "TABLE audit_log (schema: public):" in data["context"]


# =============================================================================
# Chat route
# =============================================================================

class TestChatRoute:
    """Test the streaming chat proxy."""

    def test_streams_reply(self, client, provider_requests):
        response = client.post("/api/chat", json={
            "messages": [{"role": "user", "content": "What is in posts?"}],
            "schema": "TABLE posts (schema: public):\n  id uuid PRIMARY KEY",
            "currentTable": "posts",
        })

        assert response.status_code == 200
        assert response.text == "The posts table..."
        assert response.headers["content-type"].startswith("text/plain")

        sent = provider_requests[0]
        assert sent["messages"] == [{"role": "user", "content": "What is in posts?"}]
        assert "TABLE posts (schema: public)" in sent["system"]
        assert 'currently viewing the "posts" table' in sent["system"]

    def test_context_built_from_database(self, client, provider_requests):
        response = client.post("/api/chat", json={
            "messages": [{"role": "user", "content": "hi"}],
            "database": "blog",
            "mode": "vibe",
        })

        assert response.status_code == 200
        system = provider_requests[0]["system"]
        assert "coding buddy" in system
        assert "TABLE messages (schema: public):" in system

    def test_unknown_database(self, client):
        response = client.post("/api/chat", json={
            "messages": [{"role": "user", "content": "hi"}],
            "database": "missing",
        })
        assert response.status_code == 404

    def test_empty_messages_rejected(self, client):
        response = client.post("/api/chat", json={"messages": []})
        assert response.status_code == 422

    def test_invalid_role_rejected(self, client):
        response = client.post("/api/chat", json={
            "messages": [{"role": "system", "content": "hi"}],
        })
        assert response.status_code == 422

    def test_provider_error_status(self, app_config):
        transport = httpx.MockTransport(lambda request: httpx.Response(429, text="slow down"))
        with TestClient(create_app(app_config, chat_transport=transport)) as client:
            response = client.post("/api/chat", json={
                "messages": [{"role": "user", "content": "hi"}],
            })

        assert response.status_code == 429
        assert response.json()["detail"] == "Failed to get response from chat provider"

    def test_provider_unreachable(self, app_config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with TestClient(create_app(app_config, chat_transport=httpx.MockTransport(handler))) as client:
            response = client.post("/api/chat", json={
                "messages": [{"role": "user", "content": "hi"}],
            })

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to reach chat provider"

    def test_missing_api_key(self, schema_dir):
        config = AppConfig(
            sources=SourcesConfig(directory=str(schema_dir)),
            chat=ChatConfig(api_key=""),
        )
        with TestClient(create_app(config)) as client:
            response = client.post("/api/chat", json={
                "messages": [{"role": "user", "content": "hi"}],
            })

        assert response.status_code == 500
        assert response.json()["detail"] == "Chat API key not configured"
