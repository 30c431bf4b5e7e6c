"""Event repository interface."""

from typing import Protocol

from eventtasks.core.event import Event


class EventRepository(Protocol):
    """Interface for storing events in any backend."""

    def create(self) -> Event:
        """Allocate a new draft event and return it with its id."""
        ...

    def get(self, event_id: int) -> Event:
        """Fetch one event by id. Raises NotFound on a miss."""
        ...

    def get_all_active(self) -> list[Event]:
        """Fetch published, non-deleted events."""
        ...

    def update(self, event: Event) -> None:
        """Write fields and attached event types of an event."""
        ...

    def mark_finished(self, event_id: int) -> None:
        ...

    def mark_deleted(self, event_id: int) -> None:
        ...
