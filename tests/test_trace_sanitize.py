from agentgate.trace.memory import MemoryTraceStore
from agentgate.trace.recorder import TraceRecorder
from agentgate.trace.sanitize import TraceSanitizeConfig, redact_url, sanitize_trace_value


def test_secret_headers_are_redacted():
    cfg = TraceSanitizeConfig()
    value = {
        "headers": {
            "Authorization": "Bearer sk-1",
            "maxauth": "mx-key",
            "apikey": "mx-key",
            "x-api-key": "ant-key",
            "Accept": "application/json",
        }
    }

    out = sanitize_trace_value(value, cfg=cfg)

    assert out["headers"]["Authorization"] == "[REDACTED]"
    assert out["headers"]["maxauth"] == "[REDACTED]"
    assert out["headers"]["apikey"] == "[REDACTED]"
    assert out["headers"]["x-api-key"] == "[REDACTED]"
    assert out["headers"]["Accept"] == "application/json"


def test_truncate_mode_caps_content_fields():
    cfg = TraceSanitizeConfig(content_mode="truncate", max_chars=5)
    out = sanitize_trace_value({"content": "abcdefghij", "model": "gpt"}, cfg=cfg)
    assert out["content"].startswith("abcde...[TRUNCATED 5 chars]")
    assert out["model"] == "gpt"


def test_none_mode_hashes_content_fields():
    cfg = TraceSanitizeConfig(content_mode="none")
    out = sanitize_trace_value({"text": "secret prompt"}, cfg=cfg)
    assert out["text"]["_redacted"] is True
    assert out["text"]["chars"] == len("secret prompt")


def test_redact_url_hides_key_query_parameter():
    url = "https://gl.example/v1beta/models/gemini-1.5-pro:generateContent?key=abc123"
    redacted = redact_url(url)
    assert "abc123" not in redacted
    assert "key=[REDACTED]" in redacted
    assert redact_url("https://example.com/a?b=1") == "https://example.com/a?b=1"
    assert redact_url(None) is None


class _BrokenStore(MemoryTraceStore):
    def record(self, item):
        raise RuntimeError("store unavailable")


def test_recorder_swallows_store_failures():
    recorder = TraceRecorder(_BrokenStore())
    item = recorder.record_call(kind="ai", ok=True, duration_ms=3, status=200)
    assert item is None


def test_recorder_sanitizes_before_storing():
    store = MemoryTraceStore()
    recorder = TraceRecorder(store)
    recorder.record_call(
        kind="rest",
        ok=True,
        duration_ms=1,
        url="https://api.example/x?key=k",
        request={"headers": {"authorization": "Bearer t"}},
    )
    item = store.list()[0]
    assert item.request == {"headers": {"authorization": "[REDACTED]"}}
    assert "key=[REDACTED]" in item.url
