from __future__ import annotations

from typing import Any

from agentgate.logging import get_logger
from agentgate.metrics import observe_upstream
from agentgate.trace.base import TraceItem, TraceStore
from agentgate.trace.sanitize import (
    TraceSanitizeConfig,
    redact_url,
    sanitize_trace_value,
)


class TraceRecorder:
    """Sanitizes upstream call metadata and hands it to a TraceStore.

    Recording is best-effort: a failure here is logged and never reaches the
    caller of the gateway that made the upstream call.
    """

    def __init__(
        self, store: TraceStore, *, sanitize: TraceSanitizeConfig | None = None
    ) -> None:
        self.store = store
        self._sanitize = sanitize or TraceSanitizeConfig()

    def record_call(
        self,
        *,
        kind: str,
        ok: bool,
        duration_ms: int,
        label: str | None = None,
        provider: str | None = None,
        method: str | None = None,
        url: str | None = None,
        status: int | None = None,
        request: Any = None,
        response: Any = None,
        error: str | None = None,
    ) -> TraceItem | None:
        observe_upstream(kind, ok=ok, duration_ms=duration_ms)
        logger = get_logger()
        try:
            item = self.store.record(
                {
                    "kind": kind,
                    "ok": ok,
                    "provider": provider,
                    "label": label,
                    "method": method,
                    "url": redact_url(url),
                    "status": status,
                    "duration_ms": duration_ms,
                    "request": sanitize_trace_value(request, cfg=self._sanitize),
                    "response": sanitize_trace_value(response, cfg=self._sanitize),
                    "error": error,
                }
            )
        except Exception:  # noqa: BLE001
            logger.opt(exception=True).warning("Failed to record {} trace item", kind)
            return None
        if item is not None:
            logger.bind(trace_id=item.id).debug(
                "Recorded {} trace: {} {} -> {}", kind, method or "-", item.url or "-", status
            )
        return item
