from __future__ import annotations

from typing import Any
from urllib.parse import quote

from agentgate.providers.base import ChatArgs, ChatCall, curated, join_url


class GenerateContentProvider:
    """Google Generative Language `models/{model}:generateContent`.

    The key travels as a query parameter; recorded URLs have it redacted.
    """

    name = "gemini"
    trace_label = "Gemini generateContent"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"
    curated_models = curated(
        ("gemini-1.5-pro", "Gemini 1.5 Pro"),
        ("gemini-1.5-flash", "Gemini 1.5 Flash"),
        ("gemini-2.0-flash", "Gemini 2.0 Flash"),
    )

    def build_chat(self, args: ChatArgs) -> ChatCall:
        text = f"{args.system}\n\n{args.prompt}" if args.system else args.prompt
        path = (
            f"/models/{quote(args.model, safe='')}:generateContent"
            f"?key={quote(args.api_key or '', safe='')}"
        )
        return ChatCall(
            url=join_url(args.base_url or self.default_base_url, path),
            body={
                "contents": [{"role": "user", "parts": [{"text": text}]}],
                "generationConfig": {"temperature": args.temperature},
            },
            headers={"Content-Type": "application/json"},
        )

    def parse_reply(self, data: Any) -> str:
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return ""
        content = candidates[0].get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        return "".join(
            str(part.get("text") or "") for part in parts if isinstance(part, dict)
        )
