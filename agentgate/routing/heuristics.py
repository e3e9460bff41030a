"""Keyword heuristics that turn a canned prompt into a backend query.

Everything here is pure: no I/O, no settings. Rules are evaluated top to
bottom and the first match wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import quote, urlencode


WORK_ORDERS = "mxapiwo"
ASSETS = "mxapiasset"
SERVICE_REQUESTS = "mxapisr"
INVENTORY = "mxapiinv"
LOCATIONS = "mxapilocation"

DEFAULT_OBJECT_TYPE = WORK_ORDERS
DEFAULT_PAGE_SIZE = 50
LIST_PAGE_SIZE = 100

WORK_ORDER_FIELDS = "wonum,description,status,worktype,siteid,orgid,location,assetnum,reportdate"
SERVICE_REQUEST_FIELDS = (
    "ticketid,description,status,reportedby,reportdate,siteid,orgid,location,assetnum"
)

DEFAULT_FIELDS: dict[str, str] = {
    ASSETS: "assetnum,description,location,parent,assethealth,siteid,assettype",
    WORK_ORDERS: WORK_ORDER_FIELDS,
    SERVICE_REQUESTS: SERVICE_REQUEST_FIELDS,
    INVENTORY: "itemnum,description,location,siteid,curbal,issueunit",
    LOCATIONS: "location,description,parent,siteid,type",
}

CORRECTIVE_WORK_ORDER_FILTER = 'woclass="WORKORDER" and worktype="CORRECTIVE"'

# "Open" is deployment specific. This only excludes the usual terminal
# statuses; treat it as a default policy, not an exact definition.
OPEN_WORK_ORDER_FILTER = (
    'woclass="WORKORDER" and status not in ["CLOSE","CAN","CANCEL","COMP"]'
)

_WORK_ORDER = re.compile(r"work ?orders?|\bwos?\b")
_SERVICE_REQUEST = re.compile(r"service ?requests?|\bsrs?\b")
_SUMMARIZE = re.compile(r"\bsummari[sz]e")
_LAST = re.compile(r"\b(last|previous|latest)\b")
_RESULT_SOURCE = re.compile(r"\b(maximo|backend|results?)\b")
_BACKEND_WORD = re.compile(r"\b(maximo|backend)\b")


@dataclass(frozen=True)
class BackendQuery:
    object_type: str
    where: str | None = None
    select: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE

    def to_path(self) -> str:
        params: dict[str, str] = {"oslc.pageSize": str(self.page_size)}
        if self.select:
            params["oslc.select"] = self.select
        if self.where:
            params["oslc.where"] = self.where
        return f"/api/os/{quote(self.object_type, safe='')}?{urlencode(params)}"

    def echo(self) -> dict[str, Any]:
        return {
            "os": self.object_type,
            "where": self.where or "",
            "select": self.select or "",
            "pageSize": self.page_size,
        }


@dataclass(frozen=True)
class DirectCall:
    path: str


@dataclass(frozen=True)
class SummarizeLast:
    pass


Intent = BackendQuery | DirectCall | SummarizeLast


@dataclass(frozen=True)
class _QueryRule:
    name: str
    matches: Callable[[str], bool]
    where: str | None
    select: str | None
    page_size: int


def is_work_order(text: str) -> bool:
    return bool(_WORK_ORDER.search(text))


def is_service_request(text: str) -> bool:
    return bool(_SERVICE_REQUEST.search(text))


# (keyword predicate, object type), checked in order; default is work orders.
OBJECT_TYPE_RULES: tuple[tuple[Callable[[str], bool], str], ...] = (
    (lambda text: "location" in text, LOCATIONS),
    (lambda text: "asset" in text, ASSETS),
    (is_service_request, SERVICE_REQUESTS),
    (lambda text: "inventory" in text, INVENTORY),
)

QUERY_RULES: tuple[_QueryRule, ...] = (
    _QueryRule(
        "corrective-work-orders",
        lambda text: "corrective" in text and is_work_order(text),
        CORRECTIVE_WORK_ORDER_FILTER,
        WORK_ORDER_FIELDS,
        LIST_PAGE_SIZE,
    ),
    _QueryRule(
        "open-work-orders",
        lambda text: "open" in text and is_work_order(text),
        OPEN_WORK_ORDER_FILTER,
        WORK_ORDER_FIELDS,
        LIST_PAGE_SIZE,
    ),
    _QueryRule(
        "all-service-requests",
        lambda text: "all" in text and is_service_request(text),
        None,
        SERVICE_REQUEST_FIELDS,
        LIST_PAGE_SIZE,
    ),
)


def is_summarize_request(text: str) -> bool:
    lower = text.lower()
    return bool(
        _SUMMARIZE.search(lower) and _LAST.search(lower) and _RESULT_SOURCE.search(lower)
    )


def mentions_backend(text: str) -> bool:
    return bool(_BACKEND_WORD.search(text.lower()))


def is_direct_path(text: str) -> bool:
    return text.strip().startswith("/")


def object_type_for(text: str) -> str:
    lower = text.lower()
    for matches, object_type in OBJECT_TYPE_RULES:
        if matches(lower):
            return object_type
    return DEFAULT_OBJECT_TYPE


def classify(text: str, object_type: str | None = None) -> BackendQuery:
    """Build the backend query for a natural-language prompt.

    `object_type` forces the target collection; the filter rules still apply.
    """
    lower = text.lower()
    target = (object_type or "").strip() or object_type_for(lower)
    where: str | None = None
    select: str | None = None
    page_size = DEFAULT_PAGE_SIZE
    for rule in QUERY_RULES:
        if rule.matches(lower):
            where, select, page_size = rule.where, rule.select, rule.page_size
            break
    if not select:
        select = DEFAULT_FIELDS.get(target.lower())
    return BackendQuery(object_type=target, where=where, select=select, page_size=page_size)


def detect_intent(text: str, object_type: str | None = None) -> Intent:
    stripped = text.strip()
    if is_direct_path(stripped):
        return DirectCall(stripped)
    if is_summarize_request(stripped):
        return SummarizeLast()
    return classify(stripped, object_type)
