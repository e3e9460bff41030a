from __future__ import annotations

from agentgate.clients.upstream import (
    UpstreamCallFailed,
    UpstreamClient,
    extract_error_message,
)
from agentgate.errors import ConfigurationError, UpstreamError
from agentgate.logging import get_logger
from agentgate.models.secrets import Secrets
from agentgate.providers import (
    PROVIDERS,
    ChatArgs,
    ChatResult,
    ModelInfo,
    ModelListing,
    get_provider,
)
from agentgate.services.credentials import resolve_credentials
from agentgate.trace import TraceRecorder


class ProviderGateway:
    def __init__(self, client: UpstreamClient, recorder: TraceRecorder) -> None:
        self._client = client
        self._recorder = recorder

    async def list_models(self, secrets: Secrets, provider: str) -> list[ModelInfo]:
        """List chat models, degrading to the curated list on any failure."""
        logger = get_logger()
        name = (provider or "").strip().lower()
        adapter = PROVIDERS.get(name)
        if adapter is None:
            logger.warning("Model listing requested for unknown provider {!r}", provider)
            return []
        fallback = list(adapter.curated_models)
        if not isinstance(adapter, ModelListing):
            return fallback

        auth = resolve_credentials(secrets, name)
        if not auth.api_key:
            return fallback

        url, headers = adapter.models_request(auth.base_url, auth.api_key)
        request = {"url": url, "method": "GET"}
        try:
            result = await self._client.send("GET", url, headers=headers)
        except UpstreamCallFailed as exc:
            self._recorder.record_call(
                kind="models",
                provider=name,
                ok=False,
                label="List models",
                method="GET",
                url=url,
                status=0,
                duration_ms=exc.duration_ms,
                request=request,
                response={"status": 0, "body": exc.message},
                error=exc.message,
            )
            logger.warning("Model listing for {} failed: {}", name, exc.message)
            return fallback

        parsed = result.data is not None
        ok = result.ok and parsed
        self._recorder.record_call(
            kind="models",
            provider=name,
            ok=ok,
            label="List models",
            method="GET",
            url=url,
            status=result.status,
            duration_ms=result.duration_ms,
            request=request,
            response={
                "status": result.status,
                "body": result.data if parsed else result.text,
            },
            error=None if ok else extract_error_message(result, system="Model listing"),
        )
        if not ok:
            logger.warning(
                "Model listing for {} returned {}; using curated list", name, result.status
            )
            return fallback

        ids = adapter.parse_models(result.data)
        if not ids:
            return fallback
        return [ModelInfo(id=model_id, label=model_id) for model_id in ids]

    async def chat(self, args: ChatArgs) -> ChatResult:
        adapter = get_provider(args.provider)
        if not args.api_key:
            raise ConfigurationError(
                f"AI API key is not configured for provider '{adapter.name}'."
            )

        call = adapter.build_chat(args)
        try:
            result = await self._client.send(
                "POST", call.url, headers=call.headers, json=call.body
            )
        except UpstreamCallFailed as exc:
            self._recorder.record_call(
                kind="ai",
                provider=adapter.name,
                ok=False,
                label=adapter.trace_label,
                method="POST",
                url=call.url,
                status=0,
                duration_ms=exc.duration_ms,
                request=call.body,
                error=exc.message,
            )
            get_logger().warning("{} failed: {}", adapter.trace_label, exc.message)
            raise

        error = None
        if not result.ok:
            error = extract_error_message(result, system="AI provider")
        self._recorder.record_call(
            kind="ai",
            provider=adapter.name,
            ok=result.ok,
            label=adapter.trace_label,
            method="POST",
            url=call.url,
            status=result.status,
            duration_ms=result.duration_ms,
            request=call.body,
            response=result.data if result.data is not None else result.text,
            error=error,
        )
        if error is not None:
            get_logger().warning(
                "{} returned {}: {}", adapter.trace_label, result.status, error
            )
            raise UpstreamError(error, status=result.status)
        return ChatResult(content=adapter.parse_reply(result.data), raw=result.data)
