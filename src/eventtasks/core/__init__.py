"""Functional core - event type hierarchy and checklist logic with no I/O."""

from .errors import (
    EventTasksError,
    CycleDetected,
    DuplicateEdge,
    Duplicate,
    ParseError,
    DuplicateIds,
    ResolutionError,
    NotFound,
    IdAlreadyAssigned,
    ValidationError,
    LifecycleError,
)
from .lifecycle import EntityState
from .task_definition import TaskDefinition
from .event_type import EventType
from .event import Event
from .checklist import ChecklistItem, build_checklist, format_checklist_line
from .ids import parse_ids, format_ids

__all__ = [
    # Errors
    "EventTasksError",
    "CycleDetected",
    "DuplicateEdge",
    "Duplicate",
    "ParseError",
    "DuplicateIds",
    "ResolutionError",
    "NotFound",
    "IdAlreadyAssigned",
    "ValidationError",
    "LifecycleError",
    # Entities
    "EntityState",
    "TaskDefinition",
    "EventType",
    "Event",
    # Checklist
    "ChecklistItem",
    "build_checklist",
    "format_checklist_line",
    # Ids
    "parse_ids",
    "format_ids",
]
