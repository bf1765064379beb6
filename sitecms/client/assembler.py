"""Turn an entity edit into a multipart submission.

The server rebuilds nested values from bracket-notation keys, so the
assembler flattens an entity as follows:

* ``None`` values are skipped;
* sequences become ``field[0]``, ``field[1]``... after blank strings are
  dropped, so indices stay contiguous;
* mappings become ``field[key]``, with empty values sent as ``""``;
* booleans become ``"true"`` / ``"false"``;
* dates become ISO strings, other scalars ``str(value)``;
* pending uploads are sent under the shared file key, in selection order.

Asset references the server already stores (``images``, ``documents`` and
the file field itself) are never sent back as text. Omitting a field
leaves it untouched on the server; to empty a list, set it to ``CLEAR``.
``CLEAR`` on a mapping field resets it to its defaults.
"""
from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from sitecms.client.errors import InvalidInputError

STORED_ASSET_FIELDS = ("images", "documents")


class _ClearMarker:
    """Field value meaning "empty this list on the server"."""

    def __repr__(self) -> str:
        return "CLEAR"


CLEAR = _ClearMarker()


@dataclass(frozen=True)
class PendingUpload:
    """A selected file that has not been submitted yet."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "PendingUpload":
        path = Path(path)
        guessed = content_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(filename=path.name, content=path.read_bytes(), content_type=guessed)


@dataclass
class SubmissionEnvelope:
    """Ordered text and file entries of one multipart request body."""
    fields: List[Tuple[str, str]] = field(default_factory=list)
    files: List[Tuple[str, PendingUpload]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.fields) + len(self.files)

    def __iter__(self) -> Iterator[Tuple[str, Union[str, PendingUpload]]]:
        yield from self.fields
        yield from self.files

    def keys(self) -> List[str]:
        return [key for key, _ in self]

    def get(self, key: str, default: Any = None) -> Any:
        for entry_key, value in self:
            if entry_key == key:
                return value
        return default

    def getall(self, key: str) -> List[Any]:
        return [value for entry_key, value in self if entry_key == key]

    def to_httpx(self) -> Tuple[Dict[str, str], List[Tuple[str, Tuple[Any, ...]]]]:
        """
        Return ``(data, files)`` arguments for an httpx request.

        Text fields travel as file-less parts, so the body is
        ``multipart/form-data`` even when nothing is uploaded.
        """
        parts: List[Tuple[str, Tuple[Any, ...]]] = [(key, (None, value)) for key, value in self.fields]
        parts.extend(
            (key, (upload.filename, upload.content, upload.content_type))
            for key, upload in self.files
        )
        return {}, parts


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _is_asset_ref(value: Any) -> bool:
    return isinstance(value, Mapping) and "url" in value


def assemble(
    entity: Optional[Mapping[str, Any]],
    files: Optional[Sequence[PendingUpload]] = None,
    file_field_name: str = "images",
) -> SubmissionEnvelope:
    """
    Build the multipart submission for a create or update call.

    Args:
        entity: Field values to submit; every field to keep must be present
        files: Pending uploads, in selection order
        file_field_name: Shared form key of the uploads

    Returns:
        SubmissionEnvelope with one entry per leaf value and per file

    Raises:
        InvalidInputError: If ``entity`` is missing or not a mapping
    """
    if entity is None or not isinstance(entity, Mapping):
        raise InvalidInputError("Cannot submit: missing data")

    envelope = SubmissionEnvelope()

    for name, value in entity.items():
        if value is None:
            continue

        if value is CLEAR:
            envelope.fields.append((f"{name}[]", ""))
            continue

        if name == file_field_name or name in STORED_ASSET_FIELDS:
            # Stored files only travel as uploads
            continue

        if isinstance(value, Mapping):
            for key, item in value.items():
                envelope.fields.append((f"{name}[{key}]", "" if item is None else _scalar(item)))
        elif isinstance(value, (list, tuple)):
            if any(_is_asset_ref(item) for item in value):
                continue
            items = [item.strip() if isinstance(item, str) else item for item in value if item is not None]
            items = [item for item in items if item != ""]
            for index, item in enumerate(items):
                envelope.fields.append((f"{name}[{index}]", _scalar(item)))
        else:
            envelope.fields.append((name, _scalar(value)))

    for upload in files or ():
        envelope.files.append((file_field_name, upload))

    return envelope
