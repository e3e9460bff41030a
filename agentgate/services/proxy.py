from __future__ import annotations

from typing import Any

from agentgate.clients.upstream import UpstreamCallFailed, UpstreamClient
from agentgate.errors import ConfigurationError, MalformedInputError
from agentgate.logging import get_logger
from agentgate.models.api import ProxyRequest, ProxyResponse
from agentgate.models.secrets import Secrets
from agentgate.providers import selected_provider
from agentgate.services.backend import backend_auth_headers, backend_root
from agentgate.services.credentials import resolve_credentials
from agentgate.trace import TraceRecorder, redact_url
from agentgate.utils import json_dumps, try_json_loads


_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def _has_header(headers: dict[str, str], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key in headers)


def serialize_body(
    method: str, body: Any, headers: dict[str, str]
) -> tuple[str | None, dict[str, str]]:
    """Encode a caller body; the caller's own content-type always wins."""
    headers = dict(headers)
    if body is None or method in _BODYLESS_METHODS:
        return None, headers
    if isinstance(body, str):
        if not _has_header(headers, "content-type"):
            headers["content-type"] = "text/plain"
        return body, headers
    if not _has_header(headers, "content-type"):
        headers["content-type"] = "application/json"
    return json_dumps(body), headers


def normalize_proxy_kind(kind: str | None) -> str:
    kind = (kind or "rest").strip().lower()
    if kind in ("backend", "maximo"):
        return "backend"
    if kind == "ai":
        return "ai"
    return "rest"


def inject_credentials(request: ProxyRequest, secrets: Secrets, kind: str) -> ProxyRequest:
    """Add auth for a named backend kind before the request is forwarded."""
    headers = dict(request.headers)
    url = request.url
    if kind == "backend":
        base, api_key = backend_root(secrets)
        if url.startswith("/"):
            url = base + url
        if not (url == base or url.startswith(base + "/") or url.startswith(base + "?")):
            raise MalformedInputError(
                "Backend proxy URL must be relative or within the configured backend base URL."
            )
        if not _has_header(headers, "content-type"):
            headers["Content-Type"] = "application/json"
        headers.update(backend_auth_headers(api_key))
    elif kind == "ai":
        auth = resolve_credentials(secrets, selected_provider(secrets))
        if not auth.api_key:
            raise ConfigurationError("AI API key is not configured.")
        if not _has_header(headers, "authorization"):
            headers["Authorization"] = f"Bearer {auth.api_key}"
        if not _has_header(headers, "content-type"):
            headers["Content-Type"] = "application/json"
    return request.model_copy(update={"url": url, "headers": headers})


class GenericProxy:
    """Forwards an arbitrary request verbatim and traces it."""

    def __init__(self, client: UpstreamClient, recorder: TraceRecorder) -> None:
        self._client = client
        self._recorder = recorder

    async def forward(self, request: ProxyRequest, *, kind: str = "rest") -> ProxyResponse:
        method = (request.method or "GET").upper()
        if not request.url:
            raise MalformedInputError("Proxy request requires a url.")
        content, headers = serialize_body(method, request.body, request.headers)
        trace_request = {"headers": headers, "body": request.body}

        try:
            result = await self._client.send(
                method, request.url, headers=headers, content=content
            )
        except UpstreamCallFailed as exc:
            self._recorder.record_call(
                kind=kind,
                ok=False,
                label="Proxy call",
                method=method,
                url=request.url,
                status=0,
                duration_ms=exc.duration_ms,
                request=trace_request,
                error=exc.message,
            )
            get_logger().warning(
                "Proxy {} {} failed: {}", method, redact_url(request.url), exc.message
            )
            raise

        data = try_json_loads(result.text)
        self._recorder.record_call(
            kind=kind,
            ok=result.ok,
            label="Proxy call",
            method=method,
            url=request.url,
            status=result.status,
            duration_ms=result.duration_ms,
            request=trace_request,
            response=data if data is not None else result.text,
            error=None if result.ok else f"HTTP {result.status} {result.reason}".strip(),
        )
        return ProxyResponse(
            ok=result.ok,
            status=result.status,
            status_text=result.reason,
            headers=result.headers,
            text=result.text,
            json_body=data,
        )
