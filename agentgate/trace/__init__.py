__all__ = [
    "MemoryTraceStore",
    "TRACE_KINDS",
    "TraceItem",
    "TraceKind",
    "TraceRecorder",
    "TraceSanitizeConfig",
    "TraceStore",
    "redact_url",
    "sanitize_trace_value",
]

from agentgate.trace.base import TRACE_KINDS, TraceItem, TraceKind, TraceStore
from agentgate.trace.memory import MemoryTraceStore
from agentgate.trace.recorder import TraceRecorder
from agentgate.trace.sanitize import (
    TraceSanitizeConfig,
    redact_url,
    sanitize_trace_value,
)
