from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request

from agentgate import __version__
from agentgate.errors import MalformedInputError
from agentgate.metrics import metrics_response
from agentgate.models.api import (
    BackendCall,
    ChatRequest,
    ModelsRequest,
    ProxyPayload,
    ProxyRequest,
    SettingsUpdate,
)
from agentgate.providers import selected_provider
from agentgate.services.proxy import inject_credentials, normalize_proxy_kind


router = APIRouter()


def _services(request: Request) -> Any:
    return request.app.state


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/version")
async def version() -> dict[str, str]:
    return {"version": __version__}


@router.get("/metrics")
async def metrics():
    return metrics_response()


# Application config (secrets, avatars, ui preferences)


@router.get("/api/config")
@router.get("/api/settings")
async def get_config(request: Request) -> dict[str, Any]:
    return _services(request).config_store.get().public_dict()


@router.put("/api/config")
async def put_config(request: Request, patch: dict[str, Any] | None = Body(None)):
    return _services(request).config_store.update(patch or {}).public_dict()


@router.post("/api/settings")
async def post_settings(request: Request, payload: SettingsUpdate):
    updated = _services(request).config_store.update(payload.patch())
    return {"ok": True, "settings": updated.public_dict()}


@router.get("/api/providers/selected")
async def get_selected_provider(request: Request) -> dict[str, str]:
    secrets = _services(request).config_store.secrets()
    return {"provider": selected_provider(secrets)}


# Models


@router.get("/api/models")
async def list_models(request: Request, provider: str | None = None):
    services = _services(request)
    secrets = services.config_store.secrets()
    name = (provider or "").strip().lower() or selected_provider(secrets)
    models = await services.provider_gateway.list_models(secrets, name)
    return {"models": [model.id for model in models]}


@router.post("/api/models")
async def list_models_with_settings(request: Request, payload: ModelsRequest):
    services = _services(request)
    secrets = services.config_store.secrets(payload.settings)
    name = payload.provider.strip().lower() or selected_provider(secrets)
    models = await services.provider_gateway.list_models(secrets, name)
    return {"models": [model.id for model in models]}


# Chat and backend


@router.post("/api/chat")
async def chat(request: Request, payload: ChatRequest):
    services = _services(request)
    secrets = services.config_store.secrets(payload.settings)
    return await services.chat_router.handle(payload, secrets)


@router.post("/api/backend")
@router.post("/api/maximo")
async def backend_call(request: Request, payload: dict[str, Any] | None = Body(None)):
    services = _services(request)
    payload = payload or {}
    call = BackendCall(
        path=str(payload.get("path") or "/"),
        method=str(payload.get("method") or "GET"),
        body=payload.get("body"),
    )
    secrets = services.config_store.secrets()
    data = await services.backend_gateway.call(secrets, call.path, call.method, call.body)
    return {"data": data}


@router.post("/api/proxy")
async def proxy(request: Request, payload: ProxyPayload):
    services = _services(request)
    kind = normalize_proxy_kind(payload.kind)
    if not payload.url:
        raise MalformedInputError("Proxy request requires a url.")
    outgoing = ProxyRequest(
        method=(payload.method or "GET").upper(),
        url=payload.url,
        headers=payload.headers,
        body=payload.body,
    )
    outgoing = inject_credentials(outgoing, services.config_store.secrets(), kind)
    result = await services.proxy.forward(outgoing, kind=kind)
    last = {"status": result.status, "data": result.data}
    services.trace_store.set_state(
        {
            "restBuilderDraft": payload.model_dump(exclude_none=True),
            "restBuilderLastResponse": last,
            "lastResponse": last,
        }
    )
    return last


# Trace


def _trace_kind(kind: str | None) -> str | None:
    if not kind:
        return None
    kind = kind.strip().lower()
    return "backend" if kind == "maximo" else kind


@router.get("/api/trace")
async def get_trace(request: Request):
    store = _services(request).trace_store
    return {
        "items": [item.to_public() for item in store.list(limit=store.max_items)],
        "state": store.get_state(),
    }


@router.get("/api/trace/state")
async def get_trace_state(request: Request):
    return _services(request).trace_store.get_state()


@router.put("/api/trace/state")
async def put_trace_state(request: Request, patch: dict[str, Any] | None = Body(None)):
    try:
        return _services(request).trace_store.set_state(patch or {})
    except ValueError as exc:
        raise MalformedInputError(str(exc)) from exc


@router.post("/api/trace/clear")
async def clear_trace(request: Request):
    _services(request).trace_store.clear()
    return {"ok": True}


@router.get("/api/traces")
async def list_traces(request: Request, kind: str | None = None, limit: int = 200):
    store = _services(request).trace_store
    items = store.list(_trace_kind(kind), limit)
    return {"traces": [item.to_public() for item in items]}


@router.delete("/api/traces")
async def delete_traces(request: Request):
    _services(request).trace_store.clear()
    return {"ok": True}

