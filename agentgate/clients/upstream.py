from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from agentgate.errors import MalformedInputError, TransportError
from agentgate.utils import elapsed_ms, try_json_loads


@dataclass
class UpstreamResult:
    status: int
    reason: str
    headers: dict[str, str]
    text: str
    duration_ms: int
    data: Any = field(default=None)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class UpstreamCallFailed(TransportError):
    """Transport failure that remembers how long the attempt took."""

    def __init__(self, message: str, *, duration_ms: int) -> None:
        self.duration_ms = duration_ms
        super().__init__(message)


class UpstreamClient:
    """One shared httpx client for every outbound call.

    Each call is attempted exactly once; the client-wide timeout bounds it.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: str | bytes | None = None,
        json: Any = None,
    ) -> UpstreamResult:
        started = time.perf_counter()
        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                content=content,
                json=json,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamCallFailed(
                f"Upstream request timed out after {self._timeout_s:g}s: {url}",
                duration_ms=elapsed_ms(started),
            ) from exc
        except httpx.RequestError as exc:
            detail = str(exc) or type(exc).__name__
            raise UpstreamCallFailed(
                f"Upstream request failed ({url}): {detail}",
                duration_ms=elapsed_ms(started),
            ) from exc
        except httpx.InvalidURL as exc:
            raise UpstreamCallFailed(
                f"Invalid upstream URL: {url}", duration_ms=elapsed_ms(started)
            ) from exc
        except UnicodeEncodeError as exc:
            # httpx encodes header values as ASCII before anything is sent.
            raise MalformedInputError(
                f"Request headers must contain only ASCII characters: {url}"
            ) from exc
        text = response.text
        return UpstreamResult(
            status=response.status_code,
            reason=response.reason_phrase,
            headers=dict(response.headers),
            text=text,
            duration_ms=elapsed_ms(started),
            data=try_json_loads(text),
        )


def extract_error_message(result: UpstreamResult, *, system: str) -> str:
    data = result.data
    if isinstance(data, dict):
        error = data.get("error", {})
        if isinstance(error, dict):
            message = error.get("message")
            if message:
                return str(message)
        elif isinstance(error, str) and error:
            return error
        if data.get("message"):
            return str(data["message"])
    if result.text:
        return result.text
    return f"{system} error ({result.status})"
