from __future__ import annotations

from typing import Any, Mapping

import orjson
from pydantic import ValidationError

from agentgate.errors import MalformedInputError
from agentgate.logging import get_logger
from agentgate.models.secrets import Secrets, normalize_secret_keys
from agentgate.state.base import AppConfig, ConfigStore


def parse_bootstrap(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError:
        get_logger().warning("APP_CONFIG_JSON is not valid JSON; ignoring it")
        return {}
    if not isinstance(data, dict):
        get_logger().warning("APP_CONFIG_JSON must be a JSON object; ignoring it")
        return {}
    return data


def _layered_secrets(*layers: Mapping[str, Any] | None) -> Secrets:
    try:
        return Secrets.layered(*layers)
    except ValidationError as exc:
        fields = ", ".join(
            str(err["loc"][0]) for err in exc.errors() if err.get("loc")
        )
        raise MalformedInputError(
            f"Invalid secrets value for: {fields or 'secrets'}"
        ) from exc


def _section(data: Mapping[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return dict(value) if isinstance(value, Mapping) else {}


class MemoryConfigStore(ConfigStore):
    """Bootstrap config overlaid by in-memory patches (lost on restart)."""

    def __init__(self, bootstrap: Mapping[str, Any] | None = None) -> None:
        bootstrap = bootstrap or {}
        self._bootstrap_secrets = normalize_secret_keys(_section(bootstrap, "secrets"))
        try:
            _layered_secrets(self._bootstrap_secrets)
        except MalformedInputError as exc:
            get_logger().warning("APP_CONFIG_JSON secrets ignored: {}", exc.message)
            self._bootstrap_secrets = {}
        self._bootstrap_avatars = _section(bootstrap, "avatars")
        self._bootstrap_ui = _section(bootstrap, "ui")
        self._secrets: dict[str, Any] = {}
        self._avatars: dict[str, str] = {}
        self._ui: dict[str, Any] = {}

    def get(self) -> AppConfig:
        return AppConfig(
            secrets=_layered_secrets(self._bootstrap_secrets, self._secrets),
            avatars={**self._bootstrap_avatars, **self._avatars},
            ui={**self._bootstrap_ui, **self._ui},
        )

    def secrets(self, overlay: Mapping[str, Any] | None = None) -> Secrets:
        """Stored secrets with an optional request-scoped overlay on top."""
        return _layered_secrets(self._bootstrap_secrets, self._secrets, overlay)

    def update(self, patch: Mapping[str, Any]) -> AppConfig:
        secrets = patch.get("secrets")
        if isinstance(secrets, Mapping):
            merged = {**self._secrets, **normalize_secret_keys(secrets)}
            # Rejected patches leave the stored secrets untouched.
            _layered_secrets(self._bootstrap_secrets, merged)
            self._secrets = merged
        avatars = patch.get("avatars")
        if isinstance(avatars, Mapping):
            self._avatars.update({str(k): str(v) for k, v in avatars.items()})
        ui = patch.get("ui")
        if isinstance(ui, Mapping):
            self._ui.update(ui)
        return self.get()

    async def close(self) -> None:
        return None
