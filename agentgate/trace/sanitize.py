from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


_DEFAULT_SECRET_KEYS = frozenset(
    {
        "authorization",
        "x-api-key",
        "apikey",
        "api_key",
        "maxauth",
        "token",
        "access_token",
        "password",
        "secret",
    }
)

_DEFAULT_CONTENT_KEYS = frozenset({"content", "text", "prompt", "system"})

_SECRET_QUERY_PARAMS = frozenset({"key", "apikey", "api_key", "access_token"})

_HARD_STRING_CAP = 1_000_000  # safety: never store arbitrarily large strings


@dataclass(frozen=True)
class TraceSanitizeConfig:
    content_mode: str = "full"  # none|truncate|full
    max_chars: int = 200_000
    redact_secrets: bool = True
    secret_keys: frozenset[str] = _DEFAULT_SECRET_KEYS
    content_keys: frozenset[str] = _DEFAULT_CONTENT_KEYS


def sanitize_trace_value(value: Any, *, cfg: TraceSanitizeConfig) -> Any:
    return _sanitize(value, cfg=cfg, parent_key=None)


def redact_url(url: str | None) -> str | None:
    """Hide credentials passed as query parameters (e.g. `?key=` on Gemini)."""
    if not url or "?" not in url:
        return url
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    if not any(name.lower() in _SECRET_QUERY_PARAMS for name, _ in query):
        return url
    redacted = [
        (name, "[REDACTED]" if name.lower() in _SECRET_QUERY_PARAMS else value)
        for name, value in query
    ]
    return urlunsplit(parts._replace(query=urlencode(redacted, safe="[]")))


def _sanitize(value: Any, *, cfg: TraceSanitizeConfig, parent_key: str | None) -> Any:
    if value is None:
        return None

    if isinstance(value, str):
        return _sanitize_string(value, cfg=cfg, parent_key=parent_key)

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, (list, tuple)):
        return [_sanitize(v, cfg=cfg, parent_key=parent_key) for v in value]

    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            key_lower = key.lower()
            if cfg.redact_secrets and key_lower in cfg.secret_keys:
                out[key] = "[REDACTED]"
                continue
            out[key] = _sanitize(v, cfg=cfg, parent_key=key_lower)
        return out

    # Fallback: stringify unknown objects.
    return _sanitize_string(str(value), cfg=cfg, parent_key=parent_key)


def _sanitize_string(
    s: str, *, cfg: TraceSanitizeConfig, parent_key: str | None
) -> Any:
    if not s:
        return s

    # Safety cap.
    if len(s) > _HARD_STRING_CAP:
        s = s[:_HARD_STRING_CAP] + f"...[TRUNCATED hard_cap={_HARD_STRING_CAP}]"

    is_content = parent_key in cfg.content_keys if parent_key else False

    mode = (cfg.content_mode or "full").strip().lower()
    if is_content and mode == "none":
        digest = hashlib.sha256(s.encode("utf-8")).hexdigest()[:16]
        return {"_redacted": True, "chars": len(s), "sha256_16": digest}

    if (is_content and mode == "truncate") or (
        not is_content and len(s) > cfg.max_chars
    ):
        max_chars = max(0, int(cfg.max_chars))
        if max_chars and len(s) > max_chars:
            return s[:max_chars] + f"...[TRUNCATED {len(s) - max_chars} chars]"
        return s

    # full: keep as-is.
    return s
