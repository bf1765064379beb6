"""Application service for the content resources edited through the admin forms."""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sitecms.db.repositories.entities import EntityRepository
from sitecms.domain.entities import DocumentRef, EntityPage, ImageRef
from sitecms.domain.errors import NotFoundError, ValidationError
from sitecms.domain.events import (
    event_publisher,
    EntityCreated,
    EntityUpdated,
    EntityDeleted,
    EntityStatusToggled,
)
from sitecms.domain.resources import FieldKind, FieldSpec, ResourceSpec
from sitecms.storage.interface import AssetStorage
from sitecms.uploads.form_parser import UploadedFile
from sitecms.uploads.validation import DOCUMENTS, validate_uploads

logger = logging.getLogger(__name__)

Files = Dict[str, List[UploadedFile]]


def is_clear_marker(value: Any) -> bool:
    """An asset field submitted as ``field[]=`` (parsed to ``[]``) is cleared."""
    return value == [] or value == ""


def asset_urls(value: Any) -> List[str]:
    """Collect stored URLs from an AssetRef, a list of them or None."""
    if not value:
        return []
    refs = value if isinstance(value, list) else [value]
    return [ref["url"] for ref in refs if isinstance(ref, Mapping) and ref.get("url")]


class EntityService:
    """CRUD for one resource, including its uploaded files.

    Stored files are owned by the entity that references them: replacing
    them on update or deleting the entity removes them from storage.
    """

    def __init__(
        self,
        repository: EntityRepository,
        storage: AssetStorage,
        max_upload_size_mb: int = 15,
    ) -> None:
        self._repository = repository
        self._storage = storage
        self._max_upload_size_mb = max_upload_size_mb

    @property
    def spec(self) -> ResourceSpec:
        return self._repository.spec

    # Queries

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> EntityPage:
        """
        List entities, optionally paginated.

        Args:
            filters: Field values to match, e.g. ``{"active": True}``
            page: 1-based page number, used when ``limit`` is set
            limit: Page size (None returns everything)
        """
        page = max(page, 1)
        offset = (page - 1) * limit if limit else 0
        rows, total = self._repository.list(filters, offset=offset, limit=limit)
        page_size = limit or max(total, 1)
        return {
            "items": [self._repository.to_dict(row) for row in rows],
            "pagination": {
                "page": page,
                "pages": math.ceil(total / page_size) if total else 0,
                "total": total,
                "limit": page_size,
            },
        }

    def get(self, entity_id: str) -> Dict[str, Any]:
        return self._repository.to_dict(self._get_row(entity_id))

    def _get_row(self, entity_id: str):
        row = self._repository.get(entity_id)
        if row is None:
            raise NotFoundError(f"{self.spec.label} not found")
        return row

    # Commands

    def create(self, fields: Mapping[str, Any], files: Optional[Files] = None) -> Dict[str, Any]:
        """
        Create an entity from parsed form fields and uploaded files.

        Raises:
            ValidationError: If fields are missing or malformed
            UploadRejectedError: If an upload breaks the type, size or count rules
        """
        values = self.spec.defaults()
        for name, value in self.spec.coerce(fields).items():
            # Submitted sub-keys of a mapping land on top of its defaults
            if isinstance(value, dict) and isinstance(values.get(name), dict):
                value = {**values[name], **value}
            values[name] = value
        uploads = self._check_uploads(files)

        stored = self._store_uploads(uploads, fields, values)
        try:
            values.update(stored)
            row = self._repository.create(values)
        except Exception:
            self._discard(stored)
            raise

        self._enforce_exclusive_flags(row.id, values)
        entity = self._repository.to_dict(row)
        logger.info(f"{self.spec.label} created: {row.id}")

        event_publisher.publish(EntityCreated(
            event_id="",
            timestamp=None,
            aggregate_id=row.id,
            resource=self.spec.name,
            label=str(entity.get(self.spec.title_field) or ""),
            uploaded_files=len(uploads),
        ))
        return entity

    def update(self, entity_id: str, fields: Mapping[str, Any], files: Optional[Files] = None) -> Dict[str, Any]:
        """
        Update the fields present in the submission; omitted fields stay untouched.

        New uploads replace the previously stored files of the field they
        land in. An asset field submitted as an empty list is cleared, and
        a mapping submitted that way goes back to its defaults.
        """
        row = self._get_row(entity_id)
        current = self._repository.to_dict(row)

        values = self.spec.coerce(fields, partial=True)
        for spec in self.spec.fields:
            if spec.kind == FieldKind.MAPPING and spec.name in values and not is_clear_marker(fields[spec.name]):
                values[spec.name] = {**(current.get(spec.name) or {}), **values[spec.name]}

        for spec in self.spec.asset_fields:
            if spec.name in fields and is_clear_marker(fields[spec.name]):
                values[spec.name] = [] if spec.kind == FieldKind.ASSETS else None

        uploads = self._check_uploads(files)
        merged = {**current, **values}
        stored = self._store_uploads(uploads, fields, merged)
        try:
            values.update(stored)
            row = self._repository.update(row, values)
        except Exception:
            self._discard(stored)
            raise

        # Files no longer referenced after the update
        replaced = [
            url
            for spec in self.spec.asset_fields
            if spec.name in values
            for url in asset_urls(current.get(spec.name))
            if url not in asset_urls(values[spec.name])
        ]
        self._delete_files(replaced)

        self._enforce_exclusive_flags(row.id, values)
        logger.info(f"{self.spec.label} updated: {row.id} ({', '.join(sorted(values)) or 'no changes'})")

        event_publisher.publish(EntityUpdated(
            event_id="",
            timestamp=None,
            aggregate_id=row.id,
            resource=self.spec.name,
            changed_fields=sorted(values),
            uploaded_files=len(uploads),
        ))
        return self._repository.to_dict(row)

    def delete(self, entity_id: str) -> None:
        """Delete an entity and every file it references."""
        row = self._get_row(entity_id)
        entity = self._repository.to_dict(row)
        urls = [url for spec in self.spec.asset_fields for url in asset_urls(entity.get(spec.name))]

        self._repository.delete(row)
        removed = self._delete_files(urls)
        logger.info(f"{self.spec.label} deleted: {entity_id}")

        event_publisher.publish(EntityDeleted(
            event_id="",
            timestamp=None,
            aggregate_id=entity_id,
            resource=self.spec.name,
            removed_files=removed,
        ))

    def toggle(self, entity_id: str) -> Dict[str, Any]:
        """Flip the resource's active flag."""
        toggle_field = self.spec.toggle_field
        if toggle_field is None:
            raise ValidationError(f"{self.spec.label} cannot be toggled")

        row = self._get_row(entity_id)
        active = not bool(getattr(row, self.spec.get_field(toggle_field).column))
        row = self._repository.update(row, {toggle_field: active})

        event_publisher.publish(EntityStatusToggled(
            event_id="",
            timestamp=None,
            aggregate_id=entity_id,
            resource=self.spec.name,
            active=active,
        ))
        return self._repository.to_dict(row)

    def reorder(self, orders: List[Mapping[str, Any]]) -> int:
        """
        Apply ``[{"id": ..., "order": n}, ...]`` to the resource's order field.

        Returns:
            Number of entities updated
        """
        if self.spec.get_field("order") is None:
            raise ValidationError(f"{self.spec.label} cannot be reordered")

        rows: List[Tuple[Any, int]] = []
        for item in orders:
            if not isinstance(item, Mapping) or "id" not in item or "order" not in item:
                raise ValidationError("Each entry needs an id and an order")
            try:
                order = int(item["order"])
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid order for {item['id']}") from None
            rows.append((self._get_row(str(item["id"])), order))

        for row, order in rows:
            self._repository.update(row, {"order": order})
        return len(rows)

    # Upload handling

    def _check_uploads(self, files: Optional[Files]) -> List[Tuple[UploadedFile, str]]:
        if not files:
            return []
        accepted = [self.spec.file_field] if self.spec.file_field else []
        return validate_uploads(
            files,
            accepted_keys=accepted,
            max_files=self.spec.max_files,
            max_size_mb=self._max_upload_size_mb,
            allow_documents=self.spec.split_documents,
        )

    def _store_uploads(
        self,
        uploads: List[Tuple[UploadedFile, str]],
        fields: Mapping[str, Any],
        entity: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Save uploads and return the asset field values that reference them."""
        if not uploads:
            return {}

        file_spec = self.spec.get_field(self.spec.file_field)
        images: List[ImageRef] = []
        documents: List[DocumentRef] = []
        try:
            for upload, folder in uploads:
                url = self._storage.save(upload.data, upload.filename, upload.content_type, folder)
                if folder == DOCUMENTS:
                    documents.append({"url": url, "name": upload.filename, "type": upload.content_type})
                else:
                    images.append(self._image_ref(file_spec, url, upload, fields, entity))
        except Exception:
            self._discard({"images": images, "documents": documents})
            raise

        if file_spec.kind == FieldKind.ASSET:
            return {file_spec.name: images[0]}

        stored: Dict[str, Any] = {}
        if images:
            stored[file_spec.name] = images
        if documents:
            stored["documents"] = documents
        return stored

    def _image_ref(
        self,
        spec: FieldSpec,
        url: str,
        upload: UploadedFile,
        fields: Mapping[str, Any],
        entity: Mapping[str, Any],
    ) -> ImageRef:
        if spec.kind == FieldKind.ASSET:
            # Portrait alt text is "<name> - <position>"
            return {"url": url, "alt": f"{entity.get('name') or ''} - {entity.get('position') or ''}"}
        caption = fields.get("caption")
        return {"url": url, "alt": upload.filename, "caption": caption if isinstance(caption, str) else ""}

    def _enforce_exclusive_flags(self, entity_id: str, values: Mapping[str, Any]) -> None:
        for flag in self.spec.exclusive_flags:
            if values.get(flag) is True:
                cleared = self._repository.update_where({flag: False}, exclude_id=entity_id)
                if cleared:
                    logger.info(f"Cleared '{flag}' on {cleared} other {self.spec.name}")

    def _discard(self, stored: Mapping[str, Any]) -> None:
        self._delete_files([url for value in stored.values() for url in asset_urls(value)])

    def _delete_files(self, urls: List[str]) -> int:
        removed = 0
        for url in urls:
            if self._storage.delete(url):
                removed += 1
            else:
                logger.warning(f"Stored file could not be removed: {url}")
        return removed


