from __future__ import annotations

import re
from typing import Any

from agentgate.providers.base import ChatArgs, ChatCall, ModelInfo, join_url


MODERN_MODEL_PATTERN = re.compile(r"^(gpt-|o\d|chatgpt)", re.IGNORECASE)
LEGACY_MODEL_PATTERN = re.compile(
    r"(davinci|curie|babbage|ada|text-|code-|instruct|deprecated)", re.IGNORECASE
)

_DIGITS = re.compile(r"(\d+)")


def natural_sort_key(value: str) -> list[tuple[int, int, str]]:
    key: list[tuple[int, int, str]] = []
    for part in _DIGITS.split(value):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part), ""))
        else:
            key.append((1, 0, part.lower()))
    return key


def filter_model_ids(ids: list[str], *, prefer_modern: bool) -> list[str]:
    unique = list(dict.fromkeys(model_id for model_id in ids if model_id))
    if not prefer_modern:
        return unique
    preferred = [
        model_id
        for model_id in unique
        if MODERN_MODEL_PATTERN.search(model_id)
        and not LEGACY_MODEL_PATTERN.search(model_id)
    ]
    return sorted(preferred or unique, key=natural_sort_key)


class ChatCompletionsProvider:
    """OpenAI-style `/chat/completions` with bearer auth and `GET /models`."""

    trace_label = "Chat completion"
    default_base_url = "https://api.openai.com/v1"

    def __init__(
        self,
        name: str,
        *,
        curated_models: tuple[ModelInfo, ...] = (),
        prefer_modern: bool = False,
    ) -> None:
        self.name = name
        self.curated_models = curated_models
        self.prefer_modern = prefer_modern

    def _base(self, base_url: str | None) -> str:
        return base_url or self.default_base_url

    def models_request(
        self, base_url: str | None, api_key: str
    ) -> tuple[str, dict[str, str]]:
        url = join_url(self._base(base_url), "/models")
        return url, {"Authorization": f"Bearer {api_key.strip()}"}

    def parse_models(self, data: Any) -> list[str]:
        entries = data.get("data") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            return []
        ids = [str(entry.get("id") or "") for entry in entries if isinstance(entry, dict)]
        return filter_model_ids(ids, prefer_modern=self.prefer_modern)

    def build_chat(self, args: ChatArgs) -> ChatCall:
        messages: list[dict[str, str]] = []
        if args.system:
            messages.append({"role": "system", "content": args.system})
        messages.append({"role": "user", "content": args.prompt})
        return ChatCall(
            url=join_url(self._base(args.base_url), "/chat/completions"),
            body={
                "model": args.model,
                "messages": messages,
                "temperature": args.temperature,
            },
            headers={
                "Authorization": f"Bearer {(args.api_key or '').strip()}",
                "Content-Type": "application/json",
            },
        )

    def parse_reply(self, data: Any) -> str:
        if not isinstance(data, dict):
            return ""
        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""
