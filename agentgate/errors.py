"""Error taxonomy shared by the gateways.

Every error here carries a message that is safe to show to the caller; the
HTTP layer turns all of them into a 400 response.
"""

from __future__ import annotations


class GatewayError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(GatewayError):
    """A credential or base URL needed for the call is missing."""


class UnsupportedProviderError(ConfigurationError):
    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Provider '{provider}' is not supported by this build.")


class UpstreamError(GatewayError):
    def __init__(self, message: str, *, status: int) -> None:
        self.status = status
        super().__init__(message)


class TransportError(GatewayError):
    """The upstream could not be reached or did not answer in time."""


class MalformedInputError(GatewayError):
    pass


class NoPreviousResultsError(GatewayError):
    def __init__(self) -> None:
        super().__init__(
            "No previous backend results found to summarize (Trace is empty)."
        )
