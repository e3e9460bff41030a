from agentgate.clients.upstream import (
    UpstreamCallFailed,
    UpstreamClient,
    UpstreamResult,
    extract_error_message,
)

__all__ = [
    "UpstreamCallFailed",
    "UpstreamClient",
    "UpstreamResult",
    "extract_error_message",
]
