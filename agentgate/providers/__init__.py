from __future__ import annotations

from agentgate.errors import UnsupportedProviderError
from agentgate.models.secrets import Secrets
from agentgate.providers.anthropic import MessagesProvider
from agentgate.providers.base import (
    ChatArgs,
    ChatCall,
    ChatResult,
    ModelInfo,
    ModelListing,
    ProviderProtocol,
    curated,
)
from agentgate.providers.gemini import GenerateContentProvider
from agentgate.providers.openai_compat import (
    ChatCompletionsProvider,
    filter_model_ids,
    natural_sort_key,
)

__all__ = [
    "ChatArgs",
    "ChatCall",
    "ChatResult",
    "DEFAULT_PROVIDER",
    "ModelInfo",
    "ModelListing",
    "PROVIDERS",
    "ProviderProtocol",
    "filter_model_ids",
    "get_provider",
    "natural_sort_key",
    "selected_provider",
]

DEFAULT_PROVIDER = "openai"

# watsonx and deepseek are normally reached through OpenAI-compatible gateways.
PROVIDERS: dict[str, ProviderProtocol] = {
    "openai": ChatCompletionsProvider(
        "openai",
        curated_models=curated("gpt-4o", "gpt-4o-mini", "gpt-4.1", "gpt-4.1-mini"),
        prefer_modern=True,
    ),
    "mistral": ChatCompletionsProvider(
        "mistral",
        curated_models=curated(
            "mistral-large-latest", "mistral-small-latest", "codestral-latest"
        ),
    ),
    "deepseek": ChatCompletionsProvider(
        "deepseek",
        curated_models=curated("deepseek-chat", "deepseek-reasoner"),
    ),
    "watsonx": ChatCompletionsProvider(
        "watsonx",
        curated_models=curated("ibm/granite-20b-multilingual"),
    ),
    "anthropic": MessagesProvider(),
    "gemini": GenerateContentProvider(),
}


def get_provider(name: str) -> ProviderProtocol:
    provider = PROVIDERS.get((name or "").strip().lower())
    if provider is None:
        raise UnsupportedProviderError(name)
    return provider


def selected_provider(secrets: Secrets) -> str:
    name = (secrets.provider or "").strip().lower()
    return name if name in PROVIDERS else DEFAULT_PROVIDER
