from __future__ import annotations

from dataclasses import dataclass

from agentgate.models.secrets import Secrets


@dataclass(frozen=True)
class ProviderAuth:
    api_key: str | None = None
    base_url: str | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def resolve_credentials(secrets: Secrets, name: str) -> ProviderAuth:
    """Resolve the effective key and base URL for a provider or the backend.

    Specific `<name>_key` / `<name>_base` fields win. The generic
    `api_key` / `base_url` pair is only used when `secrets.provider` names
    this exact backend, so a key configured for one system is never sent to
    another.
    """
    name = (name or "").strip().lower()
    api_key = _clean(secrets.field(f"{name}_key"))
    base_url = _clean(secrets.field(f"{name}_base"))

    selected = (_clean(secrets.provider) or "").lower()
    if selected and selected == name:
        api_key = api_key or _clean(secrets.api_key)
        base_url = base_url or _clean(secrets.base_url)

    return ProviderAuth(api_key=api_key, base_url=base_url)
