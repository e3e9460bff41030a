from __future__ import annotations

import itertools
import time
import uuid
from datetime import datetime, timezone
from typing import Any

import orjson


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


_trace_seq = itertools.count()


def new_trace_id() -> str:
    # Millisecond clock plus a process-wide counter: sorts in generation order.
    return f"{time.time_ns() // 1_000_000:013d}-{next(_trace_seq):08d}"


def elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def json_dumps(data: Any, *, indent: bool = False) -> str:
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(data, option=option).decode("utf-8")


def json_loads(text: str | bytes) -> Any:
    return orjson.loads(text)


def try_json_loads(text: str | bytes | None) -> Any | None:
    if not text:
        return None
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError:
        return None


def drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}
