"""Task tracker interface."""

from typing import Protocol

from eventtasks.core.checklist import ChecklistItem
from eventtasks.core.event import Event


class TaskTracker(Protocol):
    """Interface for pushing generated checklists to a task-tracking service."""

    def push_checklist(self, event: Event, items: list[ChecklistItem]) -> list[str]:
        """Create one task per item. Returns the ids the tracker assigned."""
        ...
