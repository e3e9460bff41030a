import httpx
import pytest
import respx
from pydantic import ValidationError

from agentgate.clients import UpstreamClient
from agentgate.errors import ConfigurationError, MalformedInputError
from agentgate.models.api import ProxyRequest
from agentgate.models.secrets import Secrets
from agentgate.services.proxy import (
    GenericProxy,
    inject_credentials,
    normalize_proxy_kind,
    serialize_body,
)
from agentgate.trace import MemoryTraceStore, TraceRecorder


BASE = "https://mx.example.com/maximo"


def test_serialize_body():
    assert serialize_body("GET", {"a": 1}, {}) == (None, {})
    assert serialize_body("POST", None, {}) == (None, {})
    assert serialize_body("POST", "raw", {}) == ("raw", {"content-type": "text/plain"})
    assert serialize_body("PUT", {"a": 1}, {}) == ('{"a":1}', {"content-type": "application/json"})

    content, headers = serialize_body("POST", {"a": 1}, {"Content-Type": "application/x-custom"})
    assert content == '{"a":1}'
    assert headers == {"Content-Type": "application/x-custom"}


@pytest.mark.parametrize(
    "kind,expected",
    [(None, "rest"), ("maximo", "backend"), ("Backend", "backend"), ("ai", "ai"), ("other", "rest")],
)
def test_normalize_proxy_kind(kind, expected):
    assert normalize_proxy_kind(kind) == expected


def test_backend_kind_resolves_relative_urls():
    secrets = Secrets(backend_base=BASE + "/oslc", backend_key="mx")
    out = inject_credentials(
        ProxyRequest(method="GET", url="/api/os/mxapiwo"), secrets, "backend"
    )
    assert out.url == BASE + "/api/os/mxapiwo"
    assert out.headers["maxauth"] == "mx"
    assert out.headers["apikey"] == "mx"


@pytest.mark.parametrize(
    "url",
    ["https://elsewhere.example.com/api", "https://mx.example.com/maximoevil/api"],
)
def test_backend_kind_rejects_foreign_urls(url):
    secrets = Secrets(backend_base=BASE, backend_key="mx")
    with pytest.raises(MalformedInputError):
        inject_credentials(ProxyRequest(url=url), secrets, "backend")


def test_ai_kind_uses_selected_provider_key():
    secrets = Secrets(provider="mistral", mistral_key="mk")
    out = inject_credentials(ProxyRequest(url="https://api.mistral.ai/v1/models"), secrets, "ai")
    assert out.headers["Authorization"] == "Bearer mk"

    with pytest.raises(ConfigurationError):
        inject_credentials(ProxyRequest(url="https://x"), Secrets(), "ai")


def test_rest_kind_is_untouched():
    request = ProxyRequest(url="https://api.example.com", headers={"X-Test": "1"})
    assert inject_credentials(request, Secrets(), "rest") == request


@pytest.mark.asyncio
@respx.mock
async def test_forward_returns_status_and_parsed_body():
    store = MemoryTraceStore()
    client = UpstreamClient(timeout_s=5)
    proxy = GenericProxy(client, TraceRecorder(store))
    route = respx.post("https://api.example.com/things").mock(
        return_value=httpx.Response(201, json={"id": 7})
    )

    result = await proxy.forward(
        ProxyRequest(
            method="post",
            url="https://api.example.com/things",
            headers={"Authorization": "Bearer t"},
            body={"name": "pump"},
        )
    )

    assert result.ok is True
    assert result.status == 201
    assert result.data == {"id": 7}
    assert route.calls.last.request.headers["content-type"] == "application/json"
    item = store.latest("rest")
    assert item.method == "POST"
    assert item.request["headers"]["Authorization"] == "[REDACTED]"
    await client.close()


@pytest.mark.asyncio
@respx.mock
async def test_forward_keeps_error_status_and_text():
    store = MemoryTraceStore()
    client = UpstreamClient(timeout_s=5)
    proxy = GenericProxy(client, TraceRecorder(store))
    respx.get("https://api.example.com/missing").mock(
        return_value=httpx.Response(404, text="not here")
    )

    result = await proxy.forward(ProxyRequest(url="https://api.example.com/missing"))

    assert result.ok is False
    assert result.status == 404
    assert result.data == "not here"
    assert store.latest("rest").error == "HTTP 404 Not Found"
    await client.close()


def test_non_ascii_header_values_are_rejected():
    with pytest.raises(ValidationError):
        ProxyRequest(url="https://api.example.com", headers={"X-Name": "Pümp"})


@pytest.mark.asyncio
async def test_client_reports_unencodable_headers_as_malformed_input():
    client = UpstreamClient(timeout_s=5)
    with pytest.raises(MalformedInputError):
        await client.send("GET", "https://api.example.com/things", headers={"X-Name": "Pümp"})
    await client.close()
