"""Domain events for decoupled side effects and integrations."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for all domain events."""
    aggregate_id: str
    event_id: str = field(default_factory=lambda: str(uuid4()), kw_only=True)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc), kw_only=True)


@dataclass
class ServiceCreated(DomainEvent):
    """Raised when a service is registered in the catalog."""
    name: str
    owner: str


@dataclass
class ServiceDeleted(DomainEvent):
    """Raised when a service is removed from the catalog."""


@dataclass
class DiagramCreated(DomainEvent):
    """Raised when a new diagram is created."""
    name: str
    diagram_type: str


@dataclass
class DiagramDeleted(DomainEvent):
    """Raised when a diagram is deleted."""


@dataclass
class PipelineCreated(DomainEvent):
    """Raised when a pipeline is defined for a service."""
    service_id: str
    name: str


@dataclass
class ExecutionQueued(DomainEvent):
    """Raised when a pipeline execution record is queued."""
    pipeline_id: str
    build_number: int


@dataclass
class ExecutionCancelled(DomainEvent):
    """Raised when a queued or running execution is cancelled."""
    pipeline_id: str


@dataclass
class ProjectCreated(DomainEvent):
    """Raised when a new project is created."""
    name: str
    owner: str
    template: str | None = None


@dataclass
class ProjectDeleted(DomainEvent):
    """Raised when a project is deleted."""


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
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        event_type = type(event)
        if event_type in self._subscribers:
            for handler in self._subscribers[event_type]:
                try:
                    handler(event)
                except Exception:
                    # Handler failures never fail the main operation
                    logger.exception("Event handler error for %s", event_type.__name__)

    def clear_subscribers(self) -> None:
        """Clear all subscribers (useful for testing)."""
        self._subscribers = {}


# Singleton instance
event_publisher = DomainEventPublisher()
