"""Service for the single site-wide customization record."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from sitecms.application.entity_service import Files
from sitecms.db.repositories.entities import EntityRepository
from sitecms.domain.errors import ValidationError
from sitecms.domain.events import event_publisher, EntityUpdated
from sitecms.domain.resources import CUSTOMIZATION_ASSET_KEYS, FONTS, FieldKind
from sitecms.storage.interface import AssetStorage
from sitecms.uploads.validation import validate_uploads

logger = logging.getLogger(__name__)

LOGO_ALT = "Company Logo"


class CustomizationService:
    """Reads, updates and resets the site customization.

    There is exactly one record; it is created with defaults the first time
    it is read. Each update bumps ``version`` so clients can detect changes.
    """

    def __init__(self, repository: EntityRepository, storage: AssetStorage, max_upload_size_mb: int = 15) -> None:
        self._repository = repository
        self._storage = storage
        self._max_upload_size_mb = max_upload_size_mb

    def _current(self):
        row = self._repository.find_one()
        if row is None:
            logger.info("Creating default site customization")
            row = self._repository.create(self._repository.spec.defaults())
        return row

    def get(self) -> Dict[str, Any]:
        return self._repository.to_dict(self._current())

    def update(self, fields: Mapping[str, Any], files: Optional[Files] = None) -> Dict[str, Any]:
        """
        Merge submitted settings into the record.

        Mapping settings (``colors``, ``fonts``...) are merged key by key.
        A ``data`` field holding a JSON object is accepted in place of
        bracket-notation fields. Uploaded ``logo``, ``favicon`` and
        ``backgroundImage`` files set the ``url`` of the matching setting.
        """
        fields = self._unpack_json(fields)
        spec = self._repository.spec
        row = self._current()
        current = self._repository.to_dict(row)

        values = spec.coerce(fields, partial=True)
        for field_spec in spec.fields:
            # ``field[]`` resets a setting to its defaults instead of merging
            if field_spec.kind == FieldKind.MAPPING and field_spec.name in values and fields[field_spec.name] != []:
                values[field_spec.name] = {**(current.get(field_spec.name) or {}), **values[field_spec.name]}

        uploads = validate_uploads(
            files or {},
            accepted_keys=CUSTOMIZATION_ASSET_KEYS,
            max_files=1,
            max_size_mb=self._max_upload_size_mb,
        )
        stored: List[str] = []
        try:
            for upload, folder in uploads:
                key = upload.field_name
                url = self._storage.save(upload.data, upload.filename, upload.content_type, folder)
                stored.append(url)
                setting = dict(values.get(key) or current.get(key) or {})
                setting["url"] = url
                if key == "logo":
                    setting["alt"] = LOGO_ALT
                values[key] = setting

            replaced = [
                current[key]["url"]
                for key in CUSTOMIZATION_ASSET_KEYS
                if key in values
                and (current.get(key) or {}).get("url")
                and current[key]["url"] != values[key].get("url")
                and current[key]["url"].startswith(self._storage.url_prefix + "/")
            ]

            row.version = (row.version or 0) + 1
            row = self._repository.update(row, values)
        except Exception:
            # Files saved for a failed update are never referenced
            self._delete_files(stored)
            raise

        self._delete_files(replaced)

        logger.info(f"Site customization updated to version {row.version}")
        event_publisher.publish(EntityUpdated(
            event_id="",
            timestamp=None,
            aggregate_id=row.id,
            resource=spec.name,
            changed_fields=sorted(values),
            uploaded_files=len(uploads),
        ))
        return self._repository.to_dict(row)

    def reset(self) -> Dict[str, Any]:
        """Drop the record and start again from defaults."""
        removed = self._repository.delete_all()
        logger.info(f"Site customization reset ({removed} record(s) removed)")
        return self.get()

    def _delete_files(self, urls: List[str]) -> None:
        for url in urls:
            if not self._storage.delete(url):
                logger.warning(f"Stored file could not be removed: {url}")

    @staticmethod
    def fonts() -> List[Dict[str, str]]:
        return [{"name": font, "value": font, "category": "Sans Serif"} for font in FONTS]

    @staticmethod
    def _unpack_json(fields: Mapping[str, Any]) -> Dict[str, Any]:
        data = fields.get("data")
        if not isinstance(data, str):
            return dict(fields)
        try:
            parsed = json.loads(data)
        except ValueError:
            raise ValidationError("Field 'data' must hold a JSON object") from None
        if not isinstance(parsed, dict):
            raise ValidationError("Field 'data' must hold a JSON object")
        rest = {key: value for key, value in fields.items() if key != "data"}
        return {**rest, **parsed}
