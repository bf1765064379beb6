"""Internal domain entities as TypedDicts for type safety at boundaries."""
from __future__ import annotations

from typing import Any, Dict, List, TypedDict


class ImageRef(TypedDict, total=False):
    url: str
    alt: str
    caption: str


class DocumentRef(TypedDict, total=False):
    url: str
    name: str
    type: str


class Pagination(TypedDict):
    page: int
    pages: int
    total: int
    limit: int


class EntityPage(TypedDict):
    items: List[Dict[str, Any]]
    pagination: Pagination
