from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agentgate.api import router
from agentgate.clients import UpstreamClient
from agentgate.config import Settings, load_settings
from agentgate.errors import GatewayError
from agentgate.logging import get_logger, setup_logging
from agentgate.metrics import RequestTimer
from agentgate.models.errors import ErrorResponse
from agentgate.routing import ChatRouter
from agentgate.services import BackendGateway, GenericProxy, ProviderGateway
from agentgate.state import MemoryConfigStore, parse_bootstrap
from agentgate.trace import MemoryTraceStore, TraceRecorder, TraceSanitizeConfig
from agentgate.utils import new_id


def _error_json(message: str) -> dict:
    return ErrorResponse(error=message).model_dump()


def _validation_message(exc: RequestValidationError) -> str:
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        msg = err.get("msg") or "Invalid value"
        details.append(f"{loc}: {msg}" if loc else msg)
    return "Invalid request: " + ("; ".join(details) or "malformed body")


def _build_services(app: FastAPI, settings: Settings) -> None:
    trace_store = MemoryTraceStore(
        max_items=settings.agentgate_trace_max_items,
        enabled=settings.agentgate_trace_enabled,
    )
    recorder = TraceRecorder(
        trace_store,
        sanitize=TraceSanitizeConfig(
            content_mode=settings.agentgate_trace_content,
            max_chars=settings.agentgate_trace_max_chars,
        ),
    )
    client = UpstreamClient(timeout_s=settings.agentgate_request_timeout_s)
    provider_gateway = ProviderGateway(client, recorder)
    backend_gateway = BackendGateway(client, recorder)

    app.state.settings = settings
    app.state.trace_store = trace_store
    app.state.config_store = MemoryConfigStore(parse_bootstrap(settings.app_config_json))
    app.state.upstream_client = client
    app.state.provider_gateway = provider_gateway
    app.state.backend_gateway = backend_gateway
    app.state.proxy = GenericProxy(client, recorder)
    app.state.chat_router = ChatRouter(
        providers=provider_gateway,
        backend=backend_gateway,
        trace_store=trace_store,
        default_model=settings.agentgate_default_model,
    )


def create_app() -> FastAPI:
    settings = load_settings()
    setup_logging(
        settings.agentgate_log_level,
        log_file=str(settings.agentgate_log_file) if settings.agentgate_log_file else None,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _build_services(app, settings)
        yield
        await app.state.upstream_client.close()
        await app.state.config_store.close()
        await app.state.trace_store.close()

    app = FastAPI(title="AgentGate", lifespan=lifespan)

    @app.exception_handler(GatewayError)
    async def _gateway_error_handler(request: Request, exc: GatewayError):
        get_logger().info("Request failed: {}", exc.message)
        return JSONResponse(status_code=400, content=_error_json(exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = str(exc.detail) if exc.detail is not None else "HTTP error"
        return JSONResponse(status_code=exc.status_code, content=_error_json(message))

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return JSONResponse(status_code=400, content=_error_json(_validation_message(exc)))

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):  # noqa: BLE001
        logger = get_logger()
        logger.exception("Unhandled exception")
        return JSONResponse(status_code=500, content=_error_json("Internal server error"))

    @app.middleware("http")
    async def request_context_middleware(request, call_next):
        request_id = request.headers.get("x-request-id") or new_id("req")
        request.state.request_id = request_id
        timer = RequestTimer(request.method)
        logger = get_logger()
        with logger.contextualize(request_id=request_id):
            response = await call_next(request)
        response.headers["x-request-id"] = request_id
        route = request.scope.get("route")
        timer.observe(response.status_code, path=getattr(route, "path", "unmatched"))
        return response

    app.include_router(router)
    return app


app = create_app()
