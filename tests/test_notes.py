"""
Tests des endpoints /notes (sessions, blocks, ordre, sélection, prompt).
"""

import asyncio

import httpx
import pytest

from ainotes.main import app
from ainotes.services.generation_client import GenerationError
from ainotes.services.session_service import SessionRegistry


def _add(client, session_id, content, type="text", metadata=None):
    body = {"type": type, "content": content}
    if metadata is not None:
        body["metadata"] = metadata
    response = client.post(f"/notes/sessions/{session_id}/blocks", json=body)
    assert response.status_code == 201
    return response.json()

def _contents(client, session_id):
    return [b["content"] for b in client.get(f"/notes/sessions/{session_id}").json()["blocks"]]

# ========== SESSIONS ==========
def test_create_session(client, registry):
    response = client.post("/notes/sessions")
    assert response.status_code == 201
    session_id = response.json()["session_id"]
    assert registry.get(session_id) is not None

def test_get_empty_state(client, session_id):
    response = client.get(f"/notes/sessions/{session_id}")
    assert response.status_code == 200
    assert response.json() == {"blocks": [], "selected_block_id": None, "is_loading": False}

def test_sessions_are_isolated(client, session_id):
    other = client.post("/notes/sessions").json()["session_id"]
    _add(client, session_id, "only here")
    assert _contents(client, other) == []

def test_close_session(client, session_id):
    assert client.delete(f"/notes/sessions/{session_id}").status_code == 204
    assert client.get(f"/notes/sessions/{session_id}").status_code == 404
    assert client.delete(f"/notes/sessions/{session_id}").status_code == 404

def test_unknown_session(client):
    response = client.post("/notes/sessions/nope/blocks", json={"type": "text", "content": "x"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Session not found"

# ========== CREATE BLOCK ==========
def test_create_block_success(client, session_id):
    data = _add(client, session_id, "Mon premier block")
    assert data["type"] == "text"
    assert data["content"] == "Mon premier block"
    assert data["id"]
    assert data["created_at"] == data["updated_at"]
    assert "metadata" not in data

def test_create_block_with_metadata(client, session_id):
    data = _add(client, session_id, "print(1)", type="code", metadata={"language": "python"})
    assert data["metadata"] == {"language": "python"}

def test_create_heading_without_metadata(client, session_id):
    data = _add(client, session_id, "Titre", type="heading")
    assert data["metadata"] == {"level": None}

def test_create_block_unknown_type(client, session_id):
    response = client.post(f"/notes/sessions/{session_id}/blocks", json={"type": "video", "content": "x"})
    assert response.status_code == 422

def test_create_block_invalid_heading_level(client, session_id):
    response = client.post(
        f"/notes/sessions/{session_id}/blocks",
        json={"type": "heading", "content": "x", "metadata": {"level": 0}},
    )
    assert response.status_code == 422
    assert _contents(client, session_id) == []

@pytest.mark.parametrize("block_type,content", [
    ("text", "Start typing..."),
    ("heading", "New Heading"),
    ("code", "// Enter your code here"),
])
def test_create_default_block(client, session_id, block_type, content):
    response = client.post(f"/notes/sessions/{session_id}/blocks/default/{block_type}")
    assert response.status_code == 201
    assert response.json()["content"] == content

def test_create_default_block_metadata(client, session_id):
    heading = client.post(f"/notes/sessions/{session_id}/blocks/default/heading").json()
    code = client.post(f"/notes/sessions/{session_id}/blocks/default/code").json()
    assert heading["metadata"] == {"level": 1}
    assert code["metadata"] == {"language": "javascript"}

# ========== UPDATE / DELETE ==========
def test_update_block(client, session_id):
    block = _add(client, session_id, "avant")
    other = _add(client, session_id, "autre")

    response = client.patch(f"/notes/sessions/{session_id}/blocks/{block['id']}", json={"content": "après"})

    assert response.status_code == 200
    data = response.json()
    assert data["content"] == "après"
    assert data["updated_at"] != block["updated_at"]
    assert data["created_at"] == block["created_at"]
    assert _contents(client, session_id) == ["après", "autre"]
    assert client.get(f"/notes/sessions/{session_id}").json()["blocks"][1] == other

def test_update_block_not_found(client, session_id):
    response = client.patch(f"/notes/sessions/{session_id}/blocks/missing", json={"content": "x"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Block not found"

def test_delete_block(client, session_id):
    a = _add(client, session_id, "A")
    _add(client, session_id, "B")

    assert client.delete(f"/notes/sessions/{session_id}/blocks/{a['id']}").status_code == 204
    assert _contents(client, session_id) == ["B"]
    assert client.delete(f"/notes/sessions/{session_id}/blocks/{a['id']}").status_code == 404

def test_clear_blocks_twice(client, session_id):
    _add(client, session_id, "A")
    assert client.delete(f"/notes/sessions/{session_id}/blocks").status_code == 204
    assert client.delete(f"/notes/sessions/{session_id}/blocks").status_code == 204
    assert _contents(client, session_id) == []

# ========== REORDER / DRAG ==========
def test_reorder(client, session_id):
    for c in "ABCD":
        _add(client, session_id, c)

    response = client.post(f"/notes/sessions/{session_id}/reorder", json={"from_index": 0, "to_index": 2})

    assert response.status_code == 200
    assert [b["content"] for b in response.json()["blocks"]] == ["B", "C", "A", "D"]

def test_reorder_invalid_index(client, session_id):
    _add(client, session_id, "A")
    response = client.post(f"/notes/sessions/{session_id}/reorder", json={"from_index": 0, "to_index": 5})
    assert response.status_code == 400
    assert "out of range" in response.json()["detail"]

def test_drag(client, session_id):
    a = _add(client, session_id, "A")
    _add(client, session_id, "B")
    c = _add(client, session_id, "C")

    response = client.post(f"/notes/sessions/{session_id}/drag", json={"active_id": c["id"], "over_id": a["id"]})

    assert response.status_code == 200
    data = response.json()
    assert data["moved"] is True
    assert [b["content"] for b in data["state"]["blocks"]] == ["C", "A", "B"]

def test_drag_unknown_id(client, session_id):
    a = _add(client, session_id, "A")
    response = client.post(f"/notes/sessions/{session_id}/drag", json={"active_id": a["id"], "over_id": "gone"})
    assert response.status_code == 200
    assert response.json()["moved"] is False

# ========== SELECTION ==========
def test_select_and_delete_scenario(client, session_id):
    block = _add(client, session_id, "hello")

    state = client.put(f"/notes/sessions/{session_id}/selection", json={"block_id": block["id"]}).json()
    assert state["selected_block_id"] == block["id"]

    client.delete(f"/notes/sessions/{session_id}/blocks/{block['id']}")
    state = client.get(f"/notes/sessions/{session_id}").json()
    assert state["blocks"] == []
    assert state["selected_block_id"] is None

def test_toggle_selection(client, session_id):
    block = _add(client, session_id, "hello")
    url = f"/notes/sessions/{session_id}/selection"

    assert client.put(url, json={"block_id": block["id"], "toggle": True}).json()["selected_block_id"] == block["id"]
    assert client.put(url, json={"block_id": block["id"], "toggle": True}).json()["selected_block_id"] is None

def test_clear_selection(client, session_id):
    block = _add(client, session_id, "hello")
    url = f"/notes/sessions/{session_id}/selection"
    client.put(url, json={"block_id": block["id"]})
    assert client.put(url, json={"block_id": None}).json()["selected_block_id"] is None

# ========== PROMPT ==========
def test_prompt_appends_generated_blocks(client, session_id, fake_generation):
    _add(client, session_id, "existing")

    response = client.post(f"/notes/sessions/{session_id}/prompt", json={"prompt": " Plan de cours "})

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "applied"
    assert [(b["type"], b["content"]) for b in data["blocks"]] == [("heading", "Title"), ("text", "Body")]
    assert fake_generation.prompts == ["Plan de cours"]
    assert _contents(client, session_id) == ["existing", "Title", "Body"]

def test_prompt_empty(client, session_id, fake_generation):
    response = client.post(f"/notes/sessions/{session_id}/prompt", json={"prompt": "   "})
    assert response.status_code == 400
    assert fake_generation.prompts == []

def test_prompt_generation_failure(client, session_id, fake_generation):
    fake_generation.error = GenerationError("Failed to generate content")

    response = client.post(f"/notes/sessions/{session_id}/prompt", json={"prompt": "x"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to generate content"
    state = client.get(f"/notes/sessions/{session_id}").json()
    assert state["blocks"] == []
    assert state["is_loading"] is False

def test_cancel_without_prompt(client, session_id):
    response = client.post(f"/notes/sessions/{session_id}/prompt/cancel")
    assert response.json() == {"cancelled": False}

class SlowGeneration:
    """Les prompts commençant par 'slow' attendent jusqu'à annulation"""

    def __init__(self, payload):
        self.payload = payload

    async def generate(self, prompt):
        if prompt.startswith("slow"):
            await asyncio.Event().wait()
        return self.payload

def _run_concurrent(supersede, scenario):
    """Requêtes simultanées sur la même boucle (TestClient les sérialise)"""
    slow = SlowGeneration(payload={"blocks": [{"type": "text", "content": "fast"}]})
    registry = SessionRegistry(client_factory=lambda: slow, supersede=supersede)
    app.state.sessions = registry

    async def run():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            session_id = (await http.post("/notes/sessions")).json()["session_id"]
            dispatcher = registry.get(session_id).dispatcher
            first = asyncio.ensure_future(
                http.post(f"/notes/sessions/{session_id}/prompt", json={"prompt": "slow one"})
            )
            for _ in range(100):
                if dispatcher.in_flight:
                    break
                await asyncio.sleep(0)
            assert dispatcher.in_flight
            return await scenario(http, session_id, first)

    return asyncio.run(run())

def test_prompt_busy_then_cancelled_over_http():
    async def scenario(http, session_id, first):
        busy = await http.post(f"/notes/sessions/{session_id}/prompt", json={"prompt": "fast"})
        cancel = await http.post(f"/notes/sessions/{session_id}/prompt/cancel")
        state = (await http.get(f"/notes/sessions/{session_id}")).json()
        return busy, cancel, await first, state

    busy, cancel, first, state = _run_concurrent(False, scenario)

    assert busy.status_code == 409
    assert busy.json() == {"detail": "Prompt busy"}
    assert cancel.json() == {"cancelled": True}
    assert first.status_code == 409
    assert first.json() == {"detail": "Prompt cancelled"}
    assert state["blocks"] == []
    assert state["is_loading"] is False

def test_prompt_superseded_over_http():
    async def scenario(http, session_id, first):
        second = await http.post(f"/notes/sessions/{session_id}/prompt", json={"prompt": "fast"})
        state = (await http.get(f"/notes/sessions/{session_id}")).json()
        return second, await first, state

    second, first, state = _run_concurrent(True, scenario)

    assert second.status_code == 201
    assert second.json()["status"] == "applied"
    assert first.status_code == 409
    assert first.json() == {"detail": "Prompt superseded"}
    assert [b["content"] for b in state["blocks"]] == ["fast"]
    assert state["is_loading"] is False

# ========== RENDER / EXPORT ==========
def test_render_empty(client, session_id):
    response = client.get(f"/notes/sessions/{session_id}/render")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Your canvas awaits" in response.text

def test_render_blocks(client, session_id):
    block = _add(client, session_id, "Titre", type="heading", metadata={"level": 2})
    client.put(f"/notes/sessions/{session_id}/selection", json={"block_id": block["id"]})

    html = client.get(f"/notes/sessions/{session_id}/render").text

    assert "<h2>Titre</h2>" in html
    assert "selected" in html

def test_export_markdown(client, session_id):
    _add(client, session_id, "Titre", type="heading", metadata={"level": 2})
    _add(client, session_id, "• un\n• deux", type="list")

    response = client.get(f"/notes/sessions/{session_id}/export")

    assert response.status_code == 200
    assert response.text == "## Titre\n\n- un\n- deux\n"

def test_healthz(client):
    client.post("/notes/sessions")
    assert client.get("/health/z").json() == {"status": "ok", "sessions": 1}

def test_list_block_types(client):
    response = client.get("/notes/block-types")
    assert response.status_code == 200
    assert [t["type"] for t in response.json()] == ["text", "heading", "list", "code", "image"]

def test_markdown_preview(client):
    response = client.post("/notes/markdown/preview", json={"content": "# Titre\n**gras**"})
    assert response.status_code == 200
    data = response.json()
    assert data["html"] == "<h1>Titre</h1><br /><strong>gras</strong>"
    assert data["characters"] == 16
    assert data["lines"] == 2
