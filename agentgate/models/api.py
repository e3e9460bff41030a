from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _dict_or_empty(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


class BackendCall(BaseModel):
    path: str
    method: str = "GET"
    body: Any = None


class ChatRequest(BaseModel):
    mode: str = Field("ai", validation_alias=AliasChoices("mode", "src"))
    provider: str | None = None
    model: str | None = None
    temperature: float | None = None
    system: str | None = None
    text: str = Field("", validation_alias=AliasChoices("text", "prompt"))
    settings: dict[str, Any] = Field(default_factory=dict)
    object_type: str | None = Field(
        None,
        validation_alias=AliasChoices("maximoOS", "maximoOs", "os", "objectType"),
    )
    backend: BackendCall | None = Field(
        None, validation_alias=AliasChoices("backend", "maximo")
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_object(cls, value: Any) -> dict[str, Any]:
        return _dict_or_empty(value)

    @field_validator("system", mode="before")
    @classmethod
    def _system_string(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @property
    def is_backend_mode(self) -> bool:
        return (self.mode or "").strip().lower() in ("maximo", "backend")


class ModelsRequest(BaseModel):
    provider: str = ""
    settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_object(cls, value: Any) -> dict[str, Any]:
        return _dict_or_empty(value)


class ProxyRequest(BaseModel):
    method: str = "GET"
    url: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @field_validator("headers", mode="before")
    @classmethod
    def _string_headers(cls, value: Any) -> dict[str, str]:
        # Non-string header values are dropped rather than coerced.
        headers = {
            str(key): item
            for key, item in _dict_or_empty(value).items()
            if isinstance(item, str)
        }
        for key, item in headers.items():
            if not (key.isascii() and item.isascii()):
                raise ValueError(f"header {key!r} must contain only ASCII characters")
        return headers


class ProxyPayload(ProxyRequest):
    kind: str | None = None


class ProxyResponse(BaseModel):
    ok: bool
    status: int
    status_text: str = Field("", alias="statusText")
    headers: dict[str, str] = Field(default_factory=dict)
    text: str = ""
    json_body: Any = Field(None, alias="json")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def data(self) -> Any:
        return self.json_body if self.json_body is not None else self.text


class SettingsUpdate(BaseModel):
    settings: dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow")

    def patch(self) -> dict[str, Any]:
        if self.settings is not None:
            return self.settings
        return dict(self.model_extra or {})
