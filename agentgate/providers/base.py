from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class ModelInfo:
    id: str
    label: str | None = None


@dataclass
class ChatArgs:
    provider: str
    model: str
    prompt: str
    api_key: str | None = None
    base_url: str | None = None
    temperature: float = 0.2
    system: str | None = None


@dataclass
class ChatResult:
    content: str
    raw: Any = None


@dataclass
class ChatCall:
    """A fully built upstream chat request."""

    url: str
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


def curated(*ids: str | tuple[str, str]) -> tuple[ModelInfo, ...]:
    out: list[ModelInfo] = []
    for entry in ids:
        if isinstance(entry, tuple):
            out.append(ModelInfo(id=entry[0], label=entry[1]))
        else:
            out.append(ModelInfo(id=entry, label=entry))
    return tuple(out)


class ProviderProtocol(Protocol):
    """One upstream chat wire format.

    Implementations only build requests and read replies; the gateway owns
    the network call, error mapping and tracing.
    """

    name: str
    trace_label: str
    default_base_url: str
    curated_models: tuple[ModelInfo, ...]

    def build_chat(self, args: ChatArgs) -> ChatCall: ...

    def parse_reply(self, data: Any) -> str: ...


@runtime_checkable
class ModelListing(Protocol):
    """Providers with a `GET /models`-style endpoint.

    Providers without one only offer their curated list.
    """

    def models_request(
        self, base_url: str | None, api_key: str
    ) -> tuple[str, dict[str, str]]: ...

    def parse_models(self, data: Any) -> list[str]: ...


def join_url(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + path
