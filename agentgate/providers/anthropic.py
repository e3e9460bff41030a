from __future__ import annotations

from typing import Any

from agentgate.providers.base import ChatArgs, ChatCall, curated, join_url


ANTHROPIC_VERSION = "2023-06-01"
MAX_TOKENS = 1024


class MessagesProvider:
    """Anthropic Messages API. No model listing endpoint is used."""

    name = "anthropic"
    trace_label = "Anthropic messages"
    default_base_url = "https://api.anthropic.com"
    curated_models = curated(
        ("claude-3-5-sonnet-latest", "Claude 3.5 Sonnet (latest)"),
        ("claude-3-5-haiku-latest", "Claude 3.5 Haiku (latest)"),
        ("claude-3-opus-latest", "Claude 3 Opus (latest)"),
    )

    def build_chat(self, args: ChatArgs) -> ChatCall:
        body: dict[str, Any] = {
            "model": args.model,
            "max_tokens": MAX_TOKENS,
            "temperature": args.temperature,
            "messages": [{"role": "user", "content": args.prompt}],
        }
        if args.system:
            body["system"] = args.system
        return ChatCall(
            url=join_url(args.base_url or self.default_base_url, "/v1/messages"),
            body=body,
            headers={
                "x-api-key": args.api_key or "",
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
        )

    def parse_reply(self, data: Any) -> str:
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            return ""
        return "".join(
            str(block.get("text") or "") for block in blocks if isinstance(block, dict)
        )
