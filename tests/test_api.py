from fastapi.testclient import TestClient
from groq import GroqError

from tests.conftest import START_MS


def post_response(client, name, **answers):
    return client.post("/responses", json={"name": name, "responses": answers})


def test_submit_response(client):
    response = post_response(client, "alice", teachLLMs="examples", syntheticStudents="maybe")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert response.headers["access-control-allow-origin"] == "*"


def test_submit_rejects_missing_responses(client):
    response = client.post("/responses", json={"name": "alice"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid response format"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert client.get("/responses").json()["metadata"]["count"] == 0


def test_submit_rejects_non_object_responses(client):
    response = client.post("/responses", json={"name": "alice", "responses": "text"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid response format"}


def test_submit_rejects_non_json_body(client):
    response = client.post(
        "/responses", content=b"not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid response format"}


def test_list_responses_with_keys_and_metadata(client):
    post_response(client, "alice", teachLLMs="a1")
    post_response(client, "bob")

    body = client.get("/responses").json()

    assert body["metadata"] == {
        "limit": 100,
        "offset": 0,
        "count": 2,
        "filters": {"since": 0, "name": None},
    }
    first, second = body["responses"]
    assert first == {
        "name": "alice",
        "timestamp": START_MS,
        "responses": {"teachLLMs": "a1", "syntheticStudents": ""},
        "key": ["responses", START_MS, "alice"],
    }
    assert second["name"] == "bob"
    assert second["timestamp"] > first["timestamp"]


def test_list_filters_and_pagination(client):
    for name in ["a", "b", "a", "a", "b"]:
        post_response(client, name)

    body = client.get("/responses", params={"name": "a", "offset": 1, "limit": 1}).json()

    assert body["metadata"]["count"] == 1
    assert body["metadata"]["filters"] == {"since": 0, "name": "a"}
    assert body["responses"][0]["timestamp"] == START_MS + 2000

    since = client.get("/responses", params={"since": START_MS + 3000}).json()
    assert [r["timestamp"] for r in since["responses"]] == [START_MS + 3000, START_MS + 4000]


def test_list_rejects_bad_query_values(client):
    response = client.get("/responses", params={"limit": "lots"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid query parameters"}
    assert client.get("/responses", params={"offset": -1}).status_code == 400


def test_stats_empty(client):
    response = client.get("/responses/stats")

    assert response.status_code == 200
    assert response.json() == {
        "total": 0,
        "uniqueParticipants": 0,
        "timeRange": {"first": None, "last": None, "durationMs": None},
    }


def test_stats_after_writes(client):
    for name in ["a", "b", "a"]:
        post_response(client, name)

    assert client.get("/responses/stats").json() == {
        "total": 3,
        "uniqueParticipants": 2,
        "timeRange": {"first": START_MS, "last": START_MS + 2000, "durationMs": 2000},
    }


def test_delete_by_name(client):
    for name in ["x", "y", "x"]:
        post_response(client, name)

    response = client.delete("/responses/x")

    assert response.status_code == 200
    assert response.json() == {"success": True, "deleted": 2, "message": "Deleted 2 responses for x"}
    assert client.get("/responses", params={"name": "x"}).json()["responses"] == []
    assert client.get("/responses/stats").json()["total"] == 1


def test_delete_without_name(client):
    response = client.delete("/responses/")

    assert response.status_code == 400
    assert response.json() == {"error": "Name parameter is required"}


def test_delete_without_name_or_slash(client):
    response = client.delete("/responses")

    assert response.status_code == 400
    assert response.json() == {"error": "Name parameter is required"}


def test_routing_errors_use_error_body(client):
    missing = client.get("/nowhere")
    wrong_method = client.put("/responses/stats")

    assert missing.status_code == 404
    assert missing.json() == {"error": "Not Found"}
    assert missing.headers["access-control-allow-origin"] == "*"
    assert wrong_method.status_code == 405
    assert wrong_method.json() == {"error": "Method Not Allowed"}
    assert "allow" in wrong_method.headers


def test_preflight(client):
    response = client.options("/responses")

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, POST, DELETE, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization, Accept"
    assert client.options("/anything/else").status_code == 204


def test_chat_streams_frames(client, fake_groq):
    fake_groq.respond_with("Hel", "lo")

    response = client.post("/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.text == "data: Hel\n\ndata: lo\n\ndata: [DONE]\n\n"
    assert len(fake_groq.completions.calls) == 1


def test_chat_rejects_missing_messages_without_upstream_call(client, fake_groq):
    response = client.post("/chat", json={"prompt": "hi"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid messages format"}
    assert fake_groq.completions.calls == []


def test_chat_rejects_non_json_body(client, fake_groq):
    response = client.post("/chat", content=b"{", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert fake_groq.completions.calls == []


def test_chat_upstream_failure_before_streaming(client, fake_groq):
    fake_groq.completions.open_error = GroqError("invalid api key")

    response = client.post("/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "invalid api key" not in response.text


def test_chat_mid_stream_failure_drops_connection(client, fake_groq):
    fake_groq.respond_with("Hel", error=RuntimeError("connection reset"))
    lenient = TestClient(client.app, raise_server_exceptions=False)

    response = lenient.post("/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 200
    assert response.text.startswith("data: Hel\n\n")
    assert "[DONE]" not in response.text
    assert "Internal server error" not in response.text
    assert fake_groq.completions.streams[0].closed


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"

    ready = client.get("/health/ready").json()
    assert ready["status"] == "ready"
    assert ready["store"] is True
