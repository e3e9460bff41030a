from __future__ import annotations

import math
from typing import Any

from agentgate.errors import MalformedInputError, NoPreviousResultsError
from agentgate.logging import get_logger
from agentgate.models.api import BackendCall, ChatRequest
from agentgate.models.secrets import Secrets
from agentgate.providers import ChatArgs, selected_provider
from agentgate.routing.heuristics import (
    BackendQuery,
    DirectCall,
    SummarizeLast,
    detect_intent,
    is_summarize_request,
    mentions_backend,
)
from agentgate.services.backend import BackendGateway
from agentgate.services.credentials import resolve_credentials
from agentgate.services.providers import ProviderGateway
from agentgate.trace import TraceStore
from agentgate.utils import drop_none, json_dumps, json_loads


DEFAULT_TEMPERATURE = 0.2
SUMMARY_PAYLOAD_LIMIT = 120_000
TRUNCATION_MARKER = "\n...TRUNCATED"

SUMMARY_SYSTEM_PROMPT = (
    "You are an assistant helping summarize asset-management REST query results. "
    "Provide a clear, business-readable summary with key counts, notable statuses, "
    "and anomalies."
)
SUMMARY_INSTRUCTIONS = (
    "Summarize the following backend results (JSON). Include: total items, "
    "important fields, patterns, outliers, and a short recommended next step.\n\n"
)


def bounded_payload(value: Any, limit: int = SUMMARY_PAYLOAD_LIMIT) -> str:
    if isinstance(value, str):
        payload = value
    else:
        try:
            payload = json_dumps(value)
        except TypeError:
            payload = str(value)
    if len(payload) > limit:
        payload = payload[:limit] + TRUNCATION_MARKER
    return payload


def _temperature(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return DEFAULT_TEMPERATURE
    return value


def _backend_body(call: BackendCall) -> Any:
    body = call.body
    if isinstance(body, str):
        if not body.strip():
            return None
        try:
            return json_loads(body)
        except ValueError as exc:
            raise MalformedInputError(f"Backend request body is not valid JSON: {exc}") from exc
    return body


class ChatRouter:
    """Chooses between an AI chat, a backend query, or a summary of the last
    backend result. Holds no per-session state; every call starts fresh.
    """

    def __init__(
        self,
        *,
        providers: ProviderGateway,
        backend: BackendGateway,
        trace_store: TraceStore,
        default_model: str = "gpt-4o-mini",
    ) -> None:
        self._providers = providers
        self._backend = backend
        self._trace_store = trace_store
        self._default_model = default_model

    async def handle(self, request: ChatRequest, secrets: Secrets) -> dict[str, Any]:
        text = request.text.strip()
        if request.is_backend_mode:
            return await self._handle_backend(request, text, secrets)
        # Outside backend mode only an explicit backend reference summarizes;
        # any other prompt goes to the provider unchanged.
        if is_summarize_request(text) and mentions_backend(text):
            return await self._summarize_last(request, secrets)
        return await self._chat(request, secrets, system=request.system, prompt=request.text)

    async def _handle_backend(
        self, request: ChatRequest, text: str, secrets: Secrets
    ) -> dict[str, Any]:
        logger = get_logger()
        if request.backend is not None and request.backend.path:
            call = request.backend
            data = await self._backend.call(
                secrets, call.path, call.method or "GET", _backend_body(call)
            )
            return {"reply": "Backend response", "maximo": data}

        intent = detect_intent(text, request.object_type)
        if isinstance(intent, DirectCall):
            logger.info("Backend direct call {}", intent.path)
            data = await self._backend.call(secrets, intent.path, "GET")
            return {"reply": json_dumps(data, indent=True), "maximo": data}
        if isinstance(intent, SummarizeLast):
            return await self._summarize_last(request, secrets)

        assert isinstance(intent, BackendQuery)
        logger.info(
            "Backend query {} (pageSize={}, filtered={})",
            intent.object_type,
            intent.page_size,
            bool(intent.where),
        )
        data = await self._backend.call(secrets, intent.to_path(), "GET")
        return {
            "reply": json_dumps(data, indent=True),
            "maximo": data,
            "request": intent.echo(),
        }

    async def _summarize_last(self, request: ChatRequest, secrets: Secrets) -> dict[str, Any]:
        last = self._trace_store.latest("backend")
        if last is None or last.response is None:
            raise NoPreviousResultsError()
        result = await self._chat(
            request,
            secrets,
            system=request.system or SUMMARY_SYSTEM_PROMPT,
            prompt=SUMMARY_INSTRUCTIONS + bounded_payload(last.response),
        )
        return {
            "reply": result["reply"],
            "maximo": last.response,
            "request": {"summaryOf": "last-backend", "traceId": last.id},
        }

    async def _chat(
        self,
        request: ChatRequest,
        secrets: Secrets,
        *,
        system: str | None,
        prompt: str,
    ) -> dict[str, Any]:
        provider = (request.provider or "").strip().lower() or selected_provider(secrets)
        auth = resolve_credentials(secrets, provider)
        model = (request.model or "").strip() or secrets.model or self._default_model
        result = await self._providers.chat(
            ChatArgs(
                provider=provider,
                model=model,
                prompt=prompt,
                api_key=auth.api_key,
                base_url=auth.base_url,
                temperature=_temperature(request.temperature),
                system=system,
            )
        )
        return drop_none({"reply": result.content, "raw": result.raw})
