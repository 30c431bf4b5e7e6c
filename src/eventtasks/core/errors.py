"""Domain errors - raised by the core, handled by callers."""

from typing import Any


class EventTasksError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class CycleDetected(EventTasksError):
    """Adding a subtype edge would make an event type its own subtype."""

    def __init__(self, parent_id: int, subtype_id: int):
        super().__init__(
            f"Adding event type {subtype_id} as a subtype of {parent_id} would create a cycle",
            {"parent_id": parent_id, "subtype_id": subtype_id},
        )


class DuplicateEdge(EventTasksError):
    """The subtype is already attached to the event type."""

    def __init__(self, parent_id: int, subtype_id: int):
        super().__init__(
            f"Event type {parent_id} already has subtype {subtype_id}",
            {"parent_id": parent_id, "subtype_id": subtype_id},
        )


class Duplicate(EventTasksError):
    """The event type is already attached to the event."""

    def __init__(self, event_id: int, event_type_id: int):
        super().__init__(
            f"Event {event_id} already has event type {event_type_id}",
            {"event_id": event_id, "event_type_id": event_type_id},
        )


class ParseError(EventTasksError):
    """Bulk id input contains a non-numeric token."""

    def __init__(self, token: str):
        super().__init__(f"Invalid id: {token!r}", {"token": token})


class DuplicateIds(EventTasksError):
    """Bulk id input repeats an id."""

    def __init__(self, ids: list[int]):
        super().__init__(
            f"Duplicate ids: {', '.join(str(i) for i in ids)}", {"ids": ids}
        )


class NotFound(EventTasksError):
    """Point lookup miss."""

    def __init__(self, kind: str, entity_id: int):
        super().__init__(f"No {kind} with id {entity_id}", {"kind": kind, "id": entity_id})


class ResolutionError(EventTasksError):
    """A stored reference points at an id that does not resolve."""

    def __init__(self, kind: str, entity_id: int, referenced_by: str = ""):
        where = f" (referenced by {referenced_by})" if referenced_by else ""
        super().__init__(
            f"Dangling {kind} reference {entity_id}{where}",
            {"kind": kind, "id": entity_id, "referenced_by": referenced_by},
        )


class IdAlreadyAssigned(EventTasksError):
    """Tried to give a persisted entity a second id."""

    def __init__(self, current_id: int, new_id: int):
        super().__init__(
            f"Id already assigned ({current_id}); cannot reassign to {new_id}",
            {"current_id": current_id, "new_id": new_id},
        )


class ValidationError(EventTasksError):
    """A field value is out of range."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, {"field": field} if field else {})
        self.field = field


class LifecycleError(EventTasksError):
    """Invalid draft/published/deleted transition."""
