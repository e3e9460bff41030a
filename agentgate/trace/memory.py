from __future__ import annotations

import threading
from collections import deque
from typing import Any, Mapping

from pydantic import TypeAdapter, ValidationError

from agentgate.trace.base import TraceItem, TraceStore
from agentgate.utils import new_trace_id, now_iso


_BOOL = TypeAdapter(bool)


class MemoryTraceStore(TraceStore):
    """Newest-first, capacity-bounded trace buffer plus a small state blob.

    The lock only matters when handlers run outside the event loop thread;
    every operation is short and holds it for O(max_items) at worst.
    """

    def __init__(self, *, max_items: int = 500, enabled: bool = True) -> None:
        max_items = max(1, int(max_items))
        self._lock = threading.Lock()
        self._items: deque[TraceItem] = deque(maxlen=max_items)
        self._state: dict[str, Any] = {"enabled": bool(enabled), "maxItems": max_items}

    @property
    def enabled(self) -> bool:
        return bool(self._state["enabled"])

    @property
    def max_items(self) -> int:
        return int(self._state["maxItems"])

    def __len__(self) -> int:
        return len(self._items)

    def record(self, item: TraceItem | Mapping[str, Any]) -> TraceItem | None:
        if not self.enabled:
            return None
        if not isinstance(item, TraceItem):
            fields = dict(item)
            if not fields.get("id"):
                fields["id"] = new_trace_id()
            if not fields.get("timestamp"):
                fields["timestamp"] = now_iso()
            item = TraceItem.model_validate(fields)
        with self._lock:
            # appendleft on a bounded deque drops the oldest (rightmost) entry.
            self._items.appendleft(item)
        return item

    def list(self, kind: str | None = None, limit: int = 200) -> list[TraceItem]:
        limit = max(1, min(int(limit), self.max_items))
        with self._lock:
            snapshot = list(self._items)
        if kind:
            snapshot = [item for item in snapshot if item.kind == kind]
        return snapshot[:limit]

    def latest(self, kind: str) -> TraceItem | None:
        items = self.list(kind, limit=1)
        return items[0] if items else None

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def get_state(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._state)

    def set_state(self, patch: Mapping[str, Any]) -> dict[str, Any]:
        updates = dict(patch)
        if "enabled" in updates:
            try:
                updates["enabled"] = _BOOL.validate_python(updates["enabled"])
            except ValidationError:
                raise ValueError("enabled must be a boolean") from None
        if "maxItems" in updates:
            try:
                max_items = max(1, int(updates["maxItems"]))
            except (TypeError, ValueError):
                raise ValueError("maxItems must be a positive integer") from None
            updates["maxItems"] = max_items
        with self._lock:
            self._state.update(updates)
            max_items = int(self._state["maxItems"])
            if max_items != self._items.maxlen:
                self._items = deque(list(self._items)[:max_items], maxlen=max_items)
            return dict(self._state)

    async def close(self) -> None:
        return None
