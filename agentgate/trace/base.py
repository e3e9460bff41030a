from __future__ import annotations

from typing import Any, Literal, Mapping, Protocol

from pydantic import BaseModel, ConfigDict, Field


TraceKind = Literal["ai", "backend", "rest", "models"]

TRACE_KINDS: tuple[str, ...] = ("ai", "backend", "rest", "models")


class TraceItem(BaseModel):
    """
    One recorded attempt to call a provider, the backend or a proxied URL.

    Items are frozen: the store only adds and evicts them. Payloads are
    sanitized before they get here (see `agentgate.trace.sanitize`).
    """

    id: str
    timestamp: str
    kind: TraceKind
    provider: str | None = None
    ok: bool | None = None
    label: str | None = None
    method: str | None = None
    url: str | None = None
    status: int | None = None
    duration_ms: int | None = Field(None, alias="durationMs")
    request: Any = None
    response: Any = None
    error: str | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class TraceStore(Protocol):
    def record(self, item: TraceItem | Mapping[str, Any]) -> TraceItem | None: ...

    def list(self, kind: str | None = None, limit: int = 200) -> list[TraceItem]: ...

    def latest(self, kind: str) -> TraceItem | None: ...

    def clear(self) -> None: ...

    def get_state(self) -> dict[str, Any]: ...

    def set_state(self, patch: Mapping[str, Any]) -> dict[str, Any]: ...

    async def close(self) -> None: ...
