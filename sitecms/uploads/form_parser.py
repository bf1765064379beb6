"""Reconstruct nested values from a bracket-notation multipart form.

Admin clients flatten entities into multipart bodies:

    features[0]=Fast   features[1]=Secure      -> {"features": ["Fast", "Secure"]}
    socialLinks[github]=https://github.com/x   -> {"socialLinks": {"github": "..."}}
    tags[]=                                    -> {"tags": []}
    title=Hello                                -> {"title": "Hello"}

Indexed entries are ordered by index, not by arrival. Blank list elements
are dropped, so a lone ``field[]=`` clears a list. A key carrying named
sub-keys becomes a mapping even when some sub-keys look numeric.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from starlette.datastructures import UploadFile
from starlette.requests import Request

from sitecms.domain.errors import ValidationError

logger = logging.getLogger(__name__)

_BRACKET_KEY = re.compile(r"^([^\[\]]+)\[([^\[\]]*)\]$")


@dataclass
class UploadedFile:
    """A file part read from the request body."""
    field_name: str
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ParsedForm:
    fields: Dict[str, Any] = field(default_factory=dict)
    files: Dict[str, List[UploadedFile]] = field(default_factory=dict)

    def files_for(self, key: str) -> List[UploadedFile]:
        return self.files.get(key, [])

    @property
    def file_count(self) -> int:
        return sum(len(items) for items in self.files.values())


@dataclass
class _Collected:
    indexed: Dict[int, str] = field(default_factory=dict)
    named: Dict[str, str] = field(default_factory=dict)
    appended: List[str] = field(default_factory=list)

    def build(self) -> Any:
        if self.named:
            merged = {str(index): value for index, value in self.indexed.items()}
            merged.update(self.named)
            return merged
        values = [self.indexed[index] for index in sorted(self.indexed)] + self.appended
        return [value.strip() for value in values if value.strip()]


def parse_bracket_fields(pairs: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    """
    Fold flat ``(key, value)`` pairs into a nested field mapping.

    Args:
        pairs: Form text entries in body order

    Returns:
        Mapping of field name to a string, a list of strings or a dict
    """
    plain: Dict[str, Any] = {}
    collected: Dict[str, _Collected] = {}

    for key, value in pairs:
        match = _BRACKET_KEY.match(key)
        if not match:
            if key in plain:
                # Repeated plain keys arrive as a list
                previous = plain[key]
                plain[key] = (previous if isinstance(previous, list) else [previous]) + [value]
            else:
                plain[key] = value
            continue

        name, inner = match.groups()
        bucket = collected.setdefault(name, _Collected())
        if inner == "":
            bucket.appended.append(value)
        elif inner.isdigit():
            bucket.indexed[int(inner)] = value
        else:
            bucket.named[inner] = value

    result = dict(plain)
    for name, bucket in collected.items():
        result[name] = bucket.build()
    return result


async def read_submission(request: Request) -> ParsedForm:
    """
    Read a create/update submission from either a multipart or a JSON body.

    Raises:
        ValidationError: If a JSON body is not an object
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        body = await request.json()
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return ParsedForm(fields=body)

    if not (content_type.startswith("multipart/form-data")
            or content_type.startswith("application/x-www-form-urlencoded")):
        return ParsedForm()

    form = await request.form()
    text_pairs: List[Tuple[str, str]] = []
    parsed = ParsedForm()
    try:
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                # Browsers send an empty part for an untouched file input
                if not value.filename:
                    continue
                data = await value.read()
                parsed.files.setdefault(key, []).append(UploadedFile(
                    field_name=key,
                    filename=value.filename,
                    content_type=value.content_type or "application/octet-stream",
                    data=data,
                ))
            else:
                text_pairs.append((key, value))
    finally:
        await form.close()

    parsed.fields = parse_bracket_fields(text_pairs)
    logger.debug(f"Parsed form: {len(parsed.fields)} fields, {parsed.file_count} files")
    return parsed
