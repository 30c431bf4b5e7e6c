"""Checklist scheduling - pure, no I/O."""

from dataclasses import dataclass
from datetime import date, datetime

from .task_definition import TaskDefinition


@dataclass
class ChecklistItem:
    """A concrete task derived from a task definition for one event."""

    task_definition_id: int | None
    title: str
    description: str
    starts_on: date
    due_on: date

    def days_until_due(self, as_of: date | None = None) -> int:
        """Days until due date (negative if overdue)."""
        as_of = as_of or date.today()
        return (self.due_on - as_of).days

    def is_overdue(self, as_of: date | None = None) -> bool:
        return self.days_until_due(as_of) < 0


def build_checklist(
    event_start: date | datetime,
    task_definitions: list[TaskDefinition],
) -> list[ChecklistItem]:
    """
    One checklist item per task definition, dated relative to event_start.

    Sorted by due date, then start date, then title.
    """
    event_date = event_start.date() if isinstance(event_start, datetime) else event_start
    items = [
        ChecklistItem(
            task_definition_id=td.id,
            title=td.title,
            description=td.description,
            starts_on=td.starts_on(event_date),
            due_on=td.due_on(event_date),
        )
        for td in task_definitions
    ]
    return sorted(items, key=lambda i: (i.due_on, i.starts_on, i.title))


def format_checklist_line(item: ChecklistItem, as_of: date | None = None) -> str:
    """Format a checklist item as one line, e.g. '[2025-03-01 -> 2025-03-11] Book venue'."""
    line = f"[{item.starts_on.isoformat()} -> {item.due_on.isoformat()}] {item.title}"
    if as_of and item.is_overdue(as_of):
        line += " (overdue)"
    return line
