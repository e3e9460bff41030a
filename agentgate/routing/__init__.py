from agentgate.routing.chat import ChatRouter, bounded_payload
from agentgate.routing.heuristics import (
    BackendQuery,
    DirectCall,
    SummarizeLast,
    classify,
    detect_intent,
)

__all__ = [
    "BackendQuery",
    "ChatRouter",
    "DirectCall",
    "SummarizeLast",
    "bounded_payload",
    "classify",
    "detect_intent",
]
