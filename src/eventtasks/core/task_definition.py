"""Task definition - one task template with day-offset scheduling."""

from dataclasses import dataclass
from datetime import date, timedelta

from .errors import IdAlreadyAssigned, ValidationError

MAX_TITLE_LENGTH = 55
MAX_DESCRIPTION_LENGTH = 65535


@dataclass
class TaskDefinition:
    """
    A reusable task template.

    Offsets count days *before* the event: a definition with start offset 30
    and finish offset 20 starts a month ahead and is due 20 days ahead.
    """

    title: str
    start_offset_in_days: int
    finish_offset_in_days: int
    description: str = ""
    id: int | None = None

    def __post_init__(self) -> None:
        if len(self.title) > MAX_TITLE_LENGTH:
            raise ValidationError(
                f"Title longer than {MAX_TITLE_LENGTH} characters", field="title"
            )
        if len(self.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Description longer than {MAX_DESCRIPTION_LENGTH} characters",
                field="description",
            )
        for field_name in ("start_offset_in_days", "finish_offset_in_days"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationError(
                    f"{field_name} must be a non-negative integer", field=field_name
                )

    def __setattr__(self, name: str, value) -> None:
        # id is set once by __init__, afterwards only through assign_id()
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("TaskDefinition.id is read-only; use assign_id()")
        super().__setattr__(name, value)

    def has_id(self) -> bool:
        return self.id is not None

    def assign_id(self, new_id: int) -> None:
        """Set the storage id. An id, once assigned, never changes."""
        if self.id is not None:
            raise IdAlreadyAssigned(self.id, new_id)
        object.__setattr__(self, "id", new_id)

    def starts_on(self, event_date: date) -> date:
        return event_date - timedelta(days=self.start_offset_in_days)

    def due_on(self, event_date: date) -> date:
        return event_date - timedelta(days=self.finish_offset_in_days)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "start_offset_in_days": self.start_offset_in_days,
            "finish_offset_in_days": self.finish_offset_in_days,
            "description": self.description,
        }

    @classmethod
    def from_record(cls, data: dict) -> "TaskDefinition":
        """Create TaskDefinition from a stored record."""
        return cls(
            title=data.get("title", ""),
            start_offset_in_days=int(data.get("start_offset_in_days", 0)),
            finish_offset_in_days=int(data.get("finish_offset_in_days", 0)),
            description=data.get("description") or "",
            id=data.get("id"),
        )
