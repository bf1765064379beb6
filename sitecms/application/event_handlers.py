"""Event handlers for domain events."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sitecms.domain.events import (
        EntityCreated,
        EntityUpdated,
        EntityDeleted,
        EntityStatusToggled,
        ContactReceived,
    )

logger = logging.getLogger(__name__)


class AuditLogHandler:
    """Logs all domain events for audit trail."""

    def handle_entity_created(self, event: EntityCreated) -> None:
        logger.info(
            f"[AUDIT] {event.resource} created: {event.aggregate_id} - {event.label}"
            f" ({event.uploaded_files} file(s))"
        )

    def handle_entity_updated(self, event: EntityUpdated) -> None:
        fields = ", ".join(event.changed_fields) or "-"
        logger.info(f"[AUDIT] {event.resource} updated: {event.aggregate_id} [{fields}]")

    def handle_entity_deleted(self, event: EntityDeleted) -> None:
        logger.info(
            f"[AUDIT] {event.resource} deleted: {event.aggregate_id}"
            f" ({event.removed_files} file(s) removed)"
        )

    def handle_status_toggled(self, event: EntityStatusToggled) -> None:
        state = "activated" if event.active else "deactivated"
        logger.info(f"[AUDIT] {event.resource} {state}: {event.aggregate_id}")


class NotificationHandler:
    """Flags contact messages that need a quick answer."""

    def handle_contact_received(self, event: ContactReceived) -> None:
        if event.urgency in ("high", "critical"):
            logger.warning(f"[NOTIFICATION] {event.urgency} contact message from {event.email}")
        else:
            logger.info(f"[NOTIFICATION] New contact message from {event.email}")


def register_event_handlers():
    """Register all event handlers with the publisher."""
    from sitecms.domain.events import (
        event_publisher,
        EntityCreated,
        EntityUpdated,
        EntityDeleted,
        EntityStatusToggled,
        ContactReceived,
    )

    audit = AuditLogHandler()
    notification = NotificationHandler()

    event_publisher.clear_subscribers()

    # Audit handlers (all entity events)
    event_publisher.subscribe(EntityCreated, audit.handle_entity_created)
    event_publisher.subscribe(EntityUpdated, audit.handle_entity_updated)
    event_publisher.subscribe(EntityDeleted, audit.handle_entity_deleted)
    event_publisher.subscribe(EntityStatusToggled, audit.handle_status_toggled)

    # Notifications
    event_publisher.subscribe(ContactReceived, notification.handle_contact_received)
