"""Event type repository interface."""

from typing import Protocol

from eventtasks.core.event_type import EventType


class EventTypeRepository(Protocol):
    """Interface for storing event types in any backend."""

    def create(self) -> EventType:
        """Allocate a new draft event type and return it with its id."""
        ...

    def get(self, event_type_id: int) -> EventType:
        """Fetch one event type by id. Raises NotFound on a miss."""
        ...

    def get_all(self, include_deleted: bool = False) -> list[EventType]:
        """Fetch every event type, drafts included. Deleted ones only on request."""
        ...

    def get_all_active(self) -> list[EventType]:
        """Fetch published, non-deleted event types."""
        ...

    def update(self, event_type: EventType) -> None:
        """Write fields, subtypes and task definitions of an event type."""
        ...

    def mark_finished(self, event_type_id: int) -> None:
        """Publish an event type so it shows up in listings."""
        ...

    def mark_deleted(self, event_type_id: int) -> None:
        """Soft-delete an event type."""
        ...
