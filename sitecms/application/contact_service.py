"""Service for visitor contact messages."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from sitecms.application.entity_service import EntityService
from sitecms.domain.errors import ValidationError
from sitecms.domain.events import event_publisher, ContactReceived
from sitecms.domain.resources import CONTACT_STATUSES

logger = logging.getLogger(__name__)


class ContactService(EntityService):

    def submit(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Store a message sent through the public contact form.

        Visitors cannot choose the status; every message starts as "new".
        """
        fields = {key: value for key, value in message.items() if key != "status"}
        contact = self.create(fields)

        event_publisher.publish(ContactReceived(
            event_id="",
            timestamp=None,
            aggregate_id=contact["id"],
            email=contact["email"],
            urgency=contact["urgency"],
        ))
        return contact

    def set_status(self, contact_id: str, status: str) -> Dict[str, Any]:
        if status not in CONTACT_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(CONTACT_STATUSES)}")
        return self.update(contact_id, {"status": status})

    def stats(self) -> Dict[str, int]:
        """Message counts overall and per status."""
        counts = {"total": self.list(limit=1)["pagination"]["total"]}
        for status in CONTACT_STATUSES:
            counts[status] = self.list({"status": status}, limit=1)["pagination"]["total"]
        return counts
