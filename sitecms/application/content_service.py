"""Service for the editable page sections (hero, about, services, home)."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from sitecms.application.entity_service import EntityService, Files
from sitecms.domain.errors import NotFoundError, ValidationError
from sitecms.domain.resources import CONTENT_SECTIONS


class ContentService(EntityService):
    """Page sections are addressed by their section name, not by id."""

    def list_sections(self) -> List[Dict[str, Any]]:
        return self.list()["items"]

    def get_section(self, section: str) -> Dict[str, Any]:
        row = self._find_section(section)
        if row is None:
            raise NotFoundError(f"Content section not found: {section}")
        return self._repository.to_dict(row)

    def upsert_section(self, section: str, fields: Mapping[str, Any], files: Optional[Files] = None) -> Dict[str, Any]:
        """Create the section on first save, update it afterwards."""
        if section not in CONTENT_SECTIONS:
            raise ValidationError(f"Invalid section. Must be one of: {', '.join(CONTENT_SECTIONS)}")

        fields = {**fields, "section": section}
        row = self._find_section(section)
        if row is None:
            return self.create(fields, files)
        return self.update(row.id, fields, files)

    def _find_section(self, section: str):
        return self._repository.find_one(section=section)
