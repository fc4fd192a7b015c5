"""
End-to-end tests for the FastAPI application.

The app runs its real lifespan against a temporary SQLite database; only
the model client is replaced.
"""

from unittest.mock import patch

import pytest
from conftest import FakeModelClient
from fastapi.testclient import TestClient

import app as app_module
from scholarsync.models import ModelResponse, RawToolCall
from scholarsync.services.orchestrator import SAVED_REPLY, TRANSPORT_ERROR_REPLY
from scholarsync.utils.exceptions import LLMError


@pytest.fixture
def model_client():
    return FakeModelClient()


@pytest.fixture
def client(tmp_path, monkeypatch, model_client):
    """Test client with a temporary database and a scripted model."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SCHOLAR_DB_PATH", str(tmp_path / "research.db"))
    monkeypatch.setenv("SCHOLAR_LOG_TO_FILE", "false")
    monkeypatch.setenv("SCHOLAR_LLM_PROVIDER", "ollama")
    monkeypatch.setenv("SCHOLAR_DEFAULT_AGENT_MODE", "librarian")

    with patch.object(app_module.LLMFactory, "create", return_value=model_client):
        with TestClient(app_module.app) as test_client:
            yield test_client


def create_project(client, title="Coral Reefs", description="") -> int:
    response = client.post("/api/projects", json={"title": title, "description": description})
    assert response.status_code == 200
    return response.json()["id"]


@pytest.mark.integration
class TestMetaEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["model_client"] == "FakeModelClient"

    def test_root(self, client):
        assert client.get("/").json()["name"] == "ScholarSync API"

    def test_agent_modes(self, client):
        modes = client.get("/api/agent-modes").json()

        assert [m["key"] for m in modes] == ["librarian", "analyst", "scribe", "reviewer"]
        assert modes[0]["short_name"] == "Librarian"


@pytest.mark.integration
class TestProjectEndpoints:
    def test_create_and_list(self, client):
        first = create_project(client, "First")
        second = create_project(client, "Second")

        projects = client.get("/api/projects").json()

        assert [p["id"] for p in projects] == [second, first]

    def test_blank_title_rejected(self, client):
        response = client.post("/api/projects", json={"title": "   "})

        assert response.status_code == 422

    def test_delete_cascades(self, client):
        project_id = create_project(client)
        client.post("/api/notes", json={"project_id": project_id, "title": "N", "content": "C"})
        client.post(
            "/api/citations",
            json={"project_id": project_id, "title": "P", "authors": "A", "year": "2020"},
        )

        response = client.delete(f"/api/projects/{project_id}")

        assert response.status_code == 200
        assert client.get(f"/api/projects/{project_id}/notes").json() == []
        assert client.get(f"/api/projects/{project_id}/citations").json() == []
        assert client.get("/api/projects").json() == []

    def test_delete_unknown_project_succeeds(self, client):
        assert client.delete("/api/projects/999").status_code == 200


@pytest.mark.integration
class TestNoteAndCitationEndpoints:
    def test_note_crud(self, client):
        project_id = create_project(client)

        note_id = client.post(
            "/api/notes",
            json={"project_id": project_id, "title": "Outline", "content": "1.", "type": "draft"},
        ).json()["id"]
        notes = client.get(f"/api/projects/{project_id}/notes").json()

        assert notes[0]["id"] == note_id
        assert notes[0]["kind"] == "draft"

        assert client.delete(f"/api/notes/{note_id}").status_code == 200
        assert client.get(f"/api/projects/{project_id}/notes").json() == []

    def test_note_for_unknown_project(self, client):
        response = client.post("/api/notes", json={"project_id": 999, "title": "T", "content": "C"})

        assert response.status_code == 404

    def test_citation_crud(self, client):
        project_id = create_project(client)

        citation_id = client.post(
            "/api/citations",
            json={
                "project_id": project_id,
                "title": "Paper",
                "authors": "A",
                "year": "2021",
                "citationCount": 7,
            },
        ).json()["id"]
        citations = client.get(f"/api/projects/{project_id}/citations").json()

        assert citations[0]["id"] == citation_id
        assert citations[0]["citation_count"] == 7

        assert client.delete(f"/api/citations/{citation_id}").status_code == 200


@pytest.mark.integration
class TestChatEndpoints:
    def test_chat_saves_through_tools(self, client, model_client):
        project_id = create_project(client)
        model_client.responses = [
            ModelResponse(
                tool_calls=[
                    RawToolCall(
                        name="saveCitation",
                        arguments={"title": "Bleaching", "authors": "Hughes", "year": 2017},
                    ),
                    RawToolCall(name="unknownTool", arguments={}),
                ]
            )
        ]

        response = client.post(f"/api/projects/{project_id}/chat", json={"message": "find papers"})

        body = response.json()
        assert response.status_code == 200
        assert body["reply"] == SAVED_REPLY
        assert body["state"] == "done"
        assert [o["status"] for o in body["outcomes"]] == ["succeeded", "ignored"]
        assert body["refreshed"] is True
        citations = client.get(f"/api/projects/{project_id}/citations").json()
        assert citations[0]["year"] == "2017"

    def test_chat_history_and_reset(self, client):
        project_id = create_project(client)
        client.post(f"/api/projects/{project_id}/chat", json={"message": "hello"})

        history = client.get(f"/api/projects/{project_id}/chat").json()

        assert [m["role"] for m in history["messages"]] == ["user", "assistant"]
        assert "**Coral Reefs**" in history["greeting"]
        assert history["busy"] is False

        client.delete(f"/api/projects/{project_id}/chat")

        assert client.get(f"/api/projects/{project_id}/chat").json()["messages"] == []

    def test_agent_mode_switch(self, client, model_client):
        project_id = create_project(client)
        client.post(f"/api/projects/{project_id}/chat", json={"message": "hello"})

        body = client.post(
            f"/api/projects/{project_id}/chat",
            json={"message": "critique my draft", "agent_mode": "reviewer"},
        ).json()

        assert body["agent_mode"] == "reviewer"
        history = client.get(f"/api/projects/{project_id}/chat").json()
        assert len(history["messages"]) == 2
        assert "peer reviewer" in model_client.requests[-1].system_instruction

    def test_unknown_agent_mode_rejected(self, client):
        project_id = create_project(client)

        response = client.post(
            f"/api/projects/{project_id}/chat", json={"message": "hi", "agent_mode": "oracle"}
        )

        assert response.status_code == 422

    def test_blank_message_is_noop(self, client, model_client):
        project_id = create_project(client)

        body = client.post(f"/api/projects/{project_id}/chat", json={"message": "  "}).json()

        assert body["reply"] is None
        assert model_client.requests == []

    def test_blank_message_keeps_agent_mode(self, client, model_client):
        project_id = create_project(client)
        client.post(f"/api/projects/{project_id}/chat", json={"message": "hello"})

        body = client.post(
            f"/api/projects/{project_id}/chat", json={"message": " ", "agent_mode": "reviewer"}
        ).json()

        assert body["reply"] is None
        assert body["agent_mode"] == "librarian"
        history = client.get(f"/api/projects/{project_id}/chat").json()
        assert history["agent_mode"] == "librarian"
        assert len(history["messages"]) == 2
        assert len(model_client.requests) == 1

    def test_model_failure_reply(self, client, model_client):
        project_id = create_project(client)
        model_client.error = LLMError("unreachable")

        body = client.post(f"/api/projects/{project_id}/chat", json={"message": "hi"}).json()

        assert body["reply"] == TRANSPORT_ERROR_REPLY
        assert body["state"] == "failed"
        history = client.get(f"/api/projects/{project_id}/chat").json()
        assert history["messages"][1]["is_error"] is True

    def test_chat_unknown_project(self, client):
        assert client.post("/api/projects/999/chat", json={"message": "hi"}).status_code == 404


@pytest.mark.integration
class TestExportEndpoint:
    def test_export_markdown(self, client):
        project_id = create_project(client, "Coral Reefs")
        client.post(
            "/api/notes",
            json={"project_id": project_id, "title": "Gap", "content": "Deep reefs", "kind": "note"},
        )

        response = client.get(f"/api/projects/{project_id}/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert "Coral_Reefs_export.md" in response.headers["content-disposition"]
        assert response.text.startswith("# Project: Coral Reefs\n")
        assert "### Gap (note)\nDeep reefs" in response.text
