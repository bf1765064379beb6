"""Normalized response envelope and the per-resource unwrap adapters."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class Envelope:
    success: bool
    data: Any = None
    message: Optional[str] = None
    pagination: Optional[Dict[str, int]] = None

    @classmethod
    def from_json(cls, body: Any) -> "Envelope":
        if not isinstance(body, Mapping):
            return cls(success=True, data=body)
        return cls(
            success=bool(body.get("success", True)),
            data=body.get("data"),
            message=body.get("message"),
            pagination=body.get("pagination"),
        )


@dataclass(frozen=True)
class Page:
    items: List[Dict[str, Any]]
    pagination: Optional[Dict[str, int]] = None


def _nested(key: Optional[str]) -> Callable[[Envelope], Page]:
    def unwrap(envelope: Envelope) -> Page:
        data = envelope.data
        if key is not None:
            data = data or {}
            return Page(items=list(data.get(key) or []), pagination=data.get("pagination"))
        return Page(items=list(data or []), pagination=envelope.pagination)
    return unwrap


def _item(key: Optional[str]) -> Callable[[Envelope], Dict[str, Any]]:
    def unwrap(envelope: Envelope) -> Dict[str, Any]:
        data = envelope.data or {}
        return data[key] if key is not None else data
    return unwrap


# Where each resource puts its list and its single entity inside ``data``
LIST_ADAPTERS: Dict[str, Callable[[Envelope], Page]] = {
    "achievements": _nested("achievements"),
    "services": _nested(None),
    "projects": _nested(None),
    "team": _nested(None),
    "content": _nested(None),
    "contact": _nested(None),
}

ITEM_ADAPTERS: Dict[str, Callable[[Envelope], Dict[str, Any]]] = {
    "achievements": _item("achievement"),
    "services": _item(None),
    "projects": _item(None),
    "team": _item(None),
    "content": _item(None),
    "contact": _item(None),
    "customizations": _item(None),
}


def unwrap_list(resource: str, envelope: Envelope) -> Page:
    return LIST_ADAPTERS[resource](envelope)


def unwrap_item(resource: str, envelope: Envelope) -> Dict[str, Any]:
    return ITEM_ADAPTERS[resource](envelope)
