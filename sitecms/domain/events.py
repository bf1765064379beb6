"""Domain events for decoupled side effects and integrations."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for all domain events."""
    event_id: str
    timestamp: datetime
    aggregate_id: str

    def __post_init__(self):
        if not self.event_id:
            self.event_id = str(uuid4())
        if not self.timestamp:
            self.timestamp = datetime.now()


@dataclass
class EntityCreated(DomainEvent):
    """Raised when an entity of any resource is created."""
    resource: str
    label: str
    uploaded_files: int = 0


@dataclass
class EntityUpdated(DomainEvent):
    """Raised when an entity is updated."""
    resource: str
    changed_fields: List[str] = field(default_factory=list)
    uploaded_files: int = 0


@dataclass
class EntityDeleted(DomainEvent):
    """Raised when an entity is deleted."""
    resource: str
    removed_files: int = 0


@dataclass
class EntityStatusToggled(DomainEvent):
    """Raised when an entity's active flag is flipped."""
    resource: str
    active: bool


@dataclass
class ContactReceived(DomainEvent):
    """Raised when a visitor submits the contact form."""
    email: str
    urgency: str


class DomainEventPublisher:
    """Singleton publisher for domain events."""

    _instance: DomainEventPublisher | None = None
    _subscribers: Dict[type, List[Callable[[DomainEvent], None]]]

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._subscribers = {}
        return cls._instance

    def subscribe(self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], None]) -> None:
        """Subscribe a handler to an event type."""
        self._subscribers.setdefault(event_type, []).append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        for handler in self._subscribers.get(type(event), []):
            try:
                handler(event)
            except Exception:
                # Handler failures never fail the main operation
                logger.exception(f"Event handler error for {type(event).__name__}")

    def clear_subscribers(self) -> None:
        """Clear all subscribers (useful for testing)."""
        self._subscribers = {}


# Singleton instance
event_publisher = DomainEventPublisher()
