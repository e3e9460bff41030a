from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict


PROVIDER_IDS: tuple[str, ...] = (
    "openai",
    "anthropic",
    "gemini",
    "mistral",
    "deepseek",
    "watsonx",
)

BACKEND = "backend"

# canonical field -> legacy spellings, in order of preference
SECRET_ALIASES: dict[str, tuple[str, ...]] = {
    "provider": ("aiProvider",),
    "api_key": ("apiKey", "aiApiKey"),
    "base_url": ("baseUrl", "aiBaseUrl"),
    "model": ("aiModel",),
    "backend_key": ("backendApiKey", "maximoApiKey", "maximo_apikey"),
    "backend_base": ("backendUrl", "backend_baseurl", "maximoUrl", "maximo_url"),
}
for _name in PROVIDER_IDS:
    SECRET_ALIASES[f"{_name}_base"] = (f"{_name}_baseurl",)

_ALIAS_TO_CANONICAL: dict[str, str] = {
    alias: canonical
    for canonical, aliases in SECRET_ALIASES.items()
    for alias in aliases
}


def canonical_secret_key(key: str) -> str:
    return _ALIAS_TO_CANONICAL.get(key, key)


def normalize_secret_keys(raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Map every accepted spelling to its canonical key.

    Within one mapping the canonical spelling beats legacy ones, and earlier
    legacy spellings beat later ones. `None` values are dropped so that a
    patch never erases a value it does not mention.
    """
    if not raw:
        return {}
    out: dict[str, Any] = {}
    rank: dict[str, int] = {}
    for key, value in raw.items():
        if value is None:
            continue
        key = str(key)
        canonical = canonical_secret_key(key)
        if canonical == key:
            priority = 0
        else:
            priority = 1 + SECRET_ALIASES[canonical].index(key)
        if canonical in rank and rank[canonical] <= priority:
            continue
        rank[canonical] = priority
        out[canonical] = value
    return out


class Secrets(BaseModel):
    """Credentials and endpoints for every provider and the backend.

    `provider`/`api_key`/`base_url` are the generic fallback; they only apply
    to the backend or provider that `provider` names.
    """

    provider: str | None = None
    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None

    openai_key: str | None = None
    openai_base: str | None = None
    anthropic_key: str | None = None
    anthropic_base: str | None = None
    gemini_key: str | None = None
    gemini_base: str | None = None
    mistral_key: str | None = None
    mistral_base: str | None = None
    deepseek_key: str | None = None
    deepseek_base: str | None = None
    watsonx_key: str | None = None
    watsonx_base: str | None = None

    backend_key: str | None = None
    backend_base: str | None = None

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "Secrets":
        return cls.model_validate(normalize_secret_keys(raw))

    @classmethod
    def layered(cls, *layers: Mapping[str, Any] | None) -> "Secrets":
        """Merge layers left to right; later layers win per canonical key."""
        merged: dict[str, Any] = {}
        for layer in layers:
            merged.update(normalize_secret_keys(layer))
        return cls.model_validate(merged)

    def field(self, name: str) -> str | None:
        value = getattr(self, name, None)
        if value is None and self.model_extra:
            value = self.model_extra.get(name)
        return value if isinstance(value, str) else None

    def to_mapping(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
