import httpx
import orjson
import pytest
import respx
from fastapi.testclient import TestClient

import agentgate.config as config
from agentgate.app import create_app


BASE = "https://mx.example.com/maximo"
BOOTSTRAP = {
    "secrets": {
        "aiProvider": "openai",
        "openai_key": "sk-test",
        "maximoUrl": BASE + "/oslc",
        "maximoApiKey": "mx-key",
    },
    "ui": {"theme": "dark"},
}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("APP_CONFIG_JSON", orjson.dumps(BOOTSTRAP).decode())
    monkeypatch.delenv("AGENTGATE_TRACE_ENABLED", raising=False)
    monkeypatch.delenv("AGENTGATE_TRACE_MAX_ITEMS", raising=False)
    config._settings = None
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    config._settings = None


def test_healthz_and_version(client):
    assert client.get("/healthz").json() == {"status": "ok"}
    assert "version" in client.get("/version").json()


def test_open_work_orders_end_to_end(client):
    with respx.mock:
        route = respx.get(url__startswith=f"{BASE}/api/os/mxapiwo").mock(
            return_value=httpx.Response(200, json={"member": [{"wonum": "1001", "status": "WAPPR"}]})
        )
        resp = client.post("/api/chat", json={"mode": "maximo", "text": "Show open work orders"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["maximo"]["member"][0]["wonum"] == "1001"
    assert body["request"]["os"] == "mxapiwo"
    assert route.calls.last.request.headers["maxauth"] == "mx-key"

    traces = client.get("/api/traces", params={"kind": "backend"}).json()["traces"]
    assert len(traces) == 1
    assert traces[0]["ok"] is True
    assert traces[0]["status"] == 200
    assert "durationMs" in traces[0]
    assert client.get("/api/traces", params={"kind": "ai"}).json()["traces"] == []
    assert len(client.get("/api/traces", params={"kind": "maximo"}).json()["traces"]) == 1


def test_missing_api_key_is_reported_without_upstream_call(client):
    client.put("/api/config", json={"secrets": {"openai_key": ""}})
    with respx.mock(assert_all_called=False) as mock:
        route = mock.post("https://api.openai.com/v1/chat/completions")
        resp = client.post(
            "/api/chat",
            json={"mode": "ai", "text": "hello", "settings": {"openai_key": None}},
        )

    assert resp.status_code == 400
    assert "API key" in resp.json()["error"]
    assert not route.called
    traces = client.get("/api/traces").json()["traces"]
    assert [item for item in traces if "status" in item] == []


def test_summarize_without_backend_results(client):
    resp = client.post("/api/chat", json={"text": "summarize the last maximo results"})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("No previous backend results")


def test_chat_uses_request_scoped_settings(client):
    with respx.mock:
        route = respx.post("https://api.anthropic.com/v1/messages").mock(
            return_value=httpx.Response(200, json={"content": [{"type": "text", "text": "Hi"}]})
        )
        resp = client.post(
            "/api/chat",
            json={
                "provider": "anthropic",
                "model": "claude-3-5-haiku-latest",
                "prompt": "hello",
                "settings": {"anthropic_key": "ak-request"},
            },
        )

    assert resp.status_code == 200
    assert resp.json()["reply"] == "Hi"
    assert route.calls.last.request.headers["x-api-key"] == "ak-request"
    stored = client.get("/api/config").json()["secrets"]
    assert "anthropic_key" not in stored


def test_unsupported_provider(client):
    resp = client.post("/api/chat", json={"provider": "cohere", "text": "hi"})
    assert resp.status_code == 400
    assert "cohere" in resp.json()["error"]


def test_upstream_failure_is_reported(client):
    with respx.mock:
        respx.post("https://api.openai.com/v1/chat/completions").mock(
            return_value=httpx.Response(429, json={"error": {"message": "Rate limit reached"}})
        )
        resp = client.post("/api/chat", json={"text": "hello"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Rate limit reached"}
    item = client.get("/api/traces", params={"kind": "ai"}).json()["traces"][0]
    assert item["ok"] is False
    assert item["status"] == 429


def test_config_and_settings_endpoints(client):
    config_body = client.get("/api/config").json()
    assert config_body["secrets"]["backend_base"] == BASE + "/oslc"
    assert config_body["ui"] == {"theme": "dark"}

    resp = client.post(
        "/api/settings", json={"settings": {"secrets": {"aiProvider": "gemini", "gemini_key": "gk"}}}
    )
    assert resp.json()["ok"] is True
    assert resp.json()["settings"]["secrets"]["provider"] == "gemini"
    assert client.get("/api/providers/selected").json() == {"provider": "gemini"}

    updated = client.put("/api/config", json={"avatars": {"bot": "bot.png"}}).json()
    assert updated["avatars"] == {"bot": "bot.png"}
    assert client.get("/api/settings").json()["secrets"]["gemini_key"] == "gk"


def test_models_endpoints(client):
    with respx.mock:
        respx.get("https://api.openai.com/v1/models").mock(
            return_value=httpx.Response(
                200,
                json={"data": [{"id": "gpt-4o"}, {"id": "dall-e-3"}, {"id": "gpt-4.1"}]},
            )
        )
        resp = client.get("/api/models")

    assert resp.json() == {"models": ["gpt-4.1", "gpt-4o"]}

    resp = client.post("/api/models", json={"provider": "anthropic", "settings": {}})
    assert resp.json()["models"][0] == "claude-3-5-sonnet-latest"
    assert client.get("/api/models", params={"provider": "cohere"}).json() == {"models": []}


def test_backend_endpoint(client):
    with respx.mock:
        respx.get(f"{BASE}/api/os/mxapiasset").mock(
            return_value=httpx.Response(200, json={"member": []})
        )
        resp = client.post("/api/maximo", json={"path": "/api/os/mxapiasset"})

    assert resp.status_code == 200
    assert resp.json() == {"data": {"member": []}}


def test_proxy_returns_upstream_status_and_updates_state(client):
    with respx.mock:
        respx.post("https://api.example.com/things").mock(
            return_value=httpx.Response(404, json={"detail": "no such thing"})
        )
        resp = client.post(
            "/api/proxy",
            json={"method": "POST", "url": "https://api.example.com/things", "body": {"a": 1}},
        )

    assert resp.status_code == 200
    assert resp.json() == {"status": 404, "data": {"detail": "no such thing"}}
    state = client.get("/api/trace/state").json()
    assert state["lastResponse"] == {"status": 404, "data": {"detail": "no such thing"}}
    assert state["restBuilderDraft"]["url"] == "https://api.example.com/things"
    item = client.get("/api/traces", params={"kind": "rest"}).json()["traces"][0]
    assert item["status"] == 404


def test_proxy_backend_kind_rejects_foreign_url(client):
    resp = client.post(
        "/api/proxy", json={"kind": "maximo", "url": "https://evil.example.com/api"}
    )
    assert resp.status_code == 400
    assert client.get("/api/traces").json()["traces"] == []


def test_proxy_requires_url(client):
    resp = client.post("/api/proxy", json={"method": "GET"})
    assert resp.status_code == 400


def test_trace_state_and_clear(client):
    state = client.put("/api/trace/state", json={"maxItems": 2, "enabled": True}).json()
    assert state["maxItems"] == 2

    with respx.mock:
        respx.get(url__startswith="https://api.example.com/").mock(
            return_value=httpx.Response(200, text="ok")
        )
        for n in range(3):
            client.post("/api/proxy", json={"url": f"https://api.example.com/{n}"})

    items = client.get("/api/trace").json()["items"]
    assert [item["url"] for item in items] == [
        "https://api.example.com/2",
        "https://api.example.com/1",
    ]

    assert client.put("/api/trace/state", json={"maxItems": "many"}).status_code == 400

    assert client.post("/api/trace/clear").json() == {"ok": True}
    assert client.get("/api/trace").json()["items"] == []

    client.put("/api/trace/state", json={"enabled": False})
    with respx.mock:
        respx.get("https://api.example.com/x").mock(return_value=httpx.Response(200))
        client.post("/api/proxy", json={"url": "https://api.example.com/x"})
    assert client.get("/api/traces").json()["traces"] == []
    assert client.delete("/api/traces").json() == {"ok": True}


def test_bad_secrets_patch_does_not_break_later_requests(client):
    resp = client.put("/api/config", json={"secrets": {"openai_key": {"nested": 1}}})
    assert resp.status_code == 400
    assert "openai_key" in resp.json()["error"]

    assert client.get("/api/config").status_code == 200
    with respx.mock:
        route = respx.post("https://api.openai.com/v1/chat/completions").mock(
            return_value=httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})
        )
        resp = client.post("/api/chat", json={"text": "hello"})

    assert resp.status_code == 200
    assert resp.json()["reply"] == "ok"
    assert route.calls.last.request.headers["Authorization"] == "Bearer sk-test"


def test_non_string_request_settings_are_rejected(client):
    resp = client.post("/api/chat", json={"text": "hello", "settings": {"openai_key": True}})
    assert resp.status_code == 400
    assert "openai_key" in resp.json()["error"]

    resp = client.post("/api/models", json={"provider": "openai", "settings": {"openai_key": True}})
    assert resp.status_code == 400


def test_proxy_rejects_non_ascii_header_values(client):
    resp = client.post(
        "/api/proxy",
        json={"url": "https://api.example.com/things", "headers": {"X-Name": "Pümp"}},
    )
    assert resp.status_code == 400
    assert "ASCII" in resp.json()["error"]
    assert client.get("/api/traces").json()["traces"] == []


def test_trace_state_parses_enabled_strictly(client):
    assert client.put("/api/trace/state", json={"enabled": "false"}).json()["enabled"] is False
    assert client.put("/api/trace/state", json={"enabled": "maybe"}).status_code == 400
    assert client.get("/api/trace/state").json()["enabled"] is False
