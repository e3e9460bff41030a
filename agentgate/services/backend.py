from __future__ import annotations

import re
from typing import Any

from agentgate.clients.upstream import UpstreamCallFailed, UpstreamClient
from agentgate.errors import ConfigurationError, UpstreamError
from agentgate.logging import get_logger
from agentgate.models.secrets import BACKEND, Secrets
from agentgate.services.credentials import resolve_credentials
from agentgate.trace import TraceRecorder
from agentgate.utils import json_dumps


_API_SUFFIX = re.compile(r"/(oslc|api)(/.*)?$", re.IGNORECASE)


def normalize_backend_base_url(base_url: str) -> str:
    """Reduce a pasted OSLC/REST URL to the backend root.

    `https://host/maximo/oslc/os/mxapiwo` and `https://host/maximo/api/`
    both become `https://host/maximo`.
    """
    base = base_url.strip()
    if base.endswith("/"):
        base = base[:-1]
    return _API_SUFFIX.sub("", base)


def backend_auth_headers(api_key: str) -> dict[str, str]:
    # Deployments differ on the header name, so both are sent.
    return {"maxauth": api_key, "apikey": api_key}


def backend_root(secrets: Secrets) -> tuple[str, str]:
    auth = resolve_credentials(secrets, BACKEND)
    if not auth.base_url:
        raise ConfigurationError("Backend URL is not configured.")
    if not auth.api_key:
        raise ConfigurationError("Backend API key is not configured.")
    return normalize_backend_base_url(auth.base_url), auth.api_key


class BackendGateway:
    def __init__(self, client: UpstreamClient, recorder: TraceRecorder) -> None:
        self._client = client
        self._recorder = recorder

    async def call(
        self,
        secrets: Secrets,
        path: str,
        method: str = "GET",
        body: Any = None,
    ) -> Any:
        base, api_key = backend_root(secrets)
        method = (method or "GET").upper()
        url = base + (path if path.startswith("/") else f"/{path}")
        headers = {"Content-Type": "application/json", **backend_auth_headers(api_key)}
        content = json_dumps(body) if body is not None else None

        try:
            result = await self._client.send(method, url, headers=headers, content=content)
        except UpstreamCallFailed as exc:
            self._recorder.record_call(
                kind="backend",
                ok=False,
                label="Backend call",
                method=method,
                url=url,
                status=0,
                duration_ms=exc.duration_ms,
                request=body,
                error=exc.message,
            )
            get_logger().warning("Backend {} {} failed: {}", method, url, exc.message)
            raise

        payload = result.data if result.data is not None else result.text
        error = None if result.ok else f"Backend error ({result.status}): {result.text}"
        self._recorder.record_call(
            kind="backend",
            ok=result.ok,
            label="Backend call",
            method=method,
            url=url,
            status=result.status,
            duration_ms=result.duration_ms,
            request=body,
            response=payload,
            error=error,
        )
        if error is not None:
            get_logger().warning("Backend {} {} returned {}", method, url, result.status)
            raise UpstreamError(error, status=result.status)
        return payload
