from __future__ import annotations

from typing import Any, Mapping, Protocol

from pydantic import BaseModel, Field

from agentgate.models.secrets import Secrets


class AppConfig(BaseModel):
    secrets: Secrets = Field(default_factory=Secrets)
    avatars: dict[str, str] = Field(default_factory=dict)
    ui: dict[str, Any] = Field(default_factory=dict)

    def public_dict(self) -> dict[str, Any]:
        return {
            "secrets": self.secrets.to_mapping(),
            "avatars": dict(self.avatars),
            "ui": dict(self.ui),
        }


class ConfigStore(Protocol):
    def get(self) -> AppConfig:
        ...

    def secrets(self, overlay: Mapping[str, Any] | None = None) -> Secrets:
        ...

    def update(self, patch: Mapping[str, Any]) -> AppConfig:
        ...

    async def close(self) -> None:
        ...
