from agentgate.services.backend import BackendGateway, normalize_backend_base_url
from agentgate.services.credentials import ProviderAuth, resolve_credentials
from agentgate.services.providers import ProviderGateway
from agentgate.services.proxy import (
    GenericProxy,
    inject_credentials,
    normalize_proxy_kind,
    serialize_body,
)

__all__ = [
    "BackendGateway",
    "GenericProxy",
    "ProviderAuth",
    "ProviderGateway",
    "inject_credentials",
    "normalize_backend_base_url",
    "normalize_proxy_kind",
    "resolve_credentials",
    "serialize_body",
]
