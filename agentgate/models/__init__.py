from agentgate.models.api import (
    BackendCall,
    ChatRequest,
    ModelsRequest,
    ProxyPayload,
    ProxyRequest,
    ProxyResponse,
    SettingsUpdate,
)
from agentgate.models.errors import ErrorResponse
from agentgate.models.secrets import (
    BACKEND,
    PROVIDER_IDS,
    SECRET_ALIASES,
    Secrets,
    normalize_secret_keys,
)

__all__ = [
    "BACKEND",
    "BackendCall",
    "ChatRequest",
    "ErrorResponse",
    "ModelsRequest",
    "PROVIDER_IDS",
    "ProxyPayload",
    "ProxyRequest",
    "ProxyResponse",
    "SECRET_ALIASES",
    "Secrets",
    "SettingsUpdate",
    "normalize_secret_keys",
]
