import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from ainotes.main import app
from ainotes.services.notes_store import NotesStore
from ainotes.services.session_service import SessionRegistry


class FakeGenerationClient:
    """Client de génération en mémoire : retourne payload ou lève error"""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else {"blocks": []}
        self.error = error
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def fake_generation():
    return FakeGenerationClient(payload={
        "blocks": [
            {"type": "heading", "content": "Title"},
            {"type": "text", "content": "Body"},
        ]
    })


@pytest.fixture(autouse=True)
def registry(fake_generation):
    """Registre de sessions neuf pour chaque test (avec le faux client)"""
    registry = SessionRegistry(client_factory=lambda: fake_generation)
    app.state.sessions = registry
    yield registry
    app.state.sessions = SessionRegistry()


@pytest.fixture
def client():
    """Client de test FastAPI"""
    return TestClient(app)


@pytest.fixture
def store():
    return NotesStore()


@pytest.fixture
def session_id(client):
    """Crée une session et retourne son id"""
    response = client.post("/notes/sessions")
    return response.json()["session_id"]
