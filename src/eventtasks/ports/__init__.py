"""Ports - interfaces/protocols for external dependencies."""

from .event_type_repo import EventTypeRepository
from .task_definition_repo import TaskDefinitionRepository
from .event_repo import EventRepository
from .task_tracker import TaskTracker

__all__ = [
    "EventTypeRepository",
    "TaskDefinitionRepository",
    "EventRepository",
    "TaskTracker",
]
