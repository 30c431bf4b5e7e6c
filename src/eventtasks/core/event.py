"""Event - a scheduled occurrence built from one or more event types."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable

from .checklist import ChecklistItem, build_checklist
from .errors import Duplicate, NotFound, ResolutionError, ValidationError
from .event_type import EventType
from .ids import format_ids, parse_ids
from .lifecycle import EntityState, publish, soft_delete
from .task_definition import TaskDefinition

if TYPE_CHECKING:
    from eventtasks.ports import EventTypeRepository


class Event:
    """
    A concrete event referencing event types.

    Attached event types are independent roots, so there is no cycle rule
    here. Redundancy (one attached type subsuming another) is only filtered
    out of get_addable_event_types(); add_event_type() itself only rejects
    exact duplicates.
    """

    def __init__(self, id: int, event_types: "EventTypeRepository | None" = None):
        self._id = id
        self.name = ""
        self.location = ""
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None
        self.state = EntityState.DRAFT
        self._catalogue = event_types

        self._event_type_ids: list[int] = []
        self._event_types: list[EventType] = []
        self._event_types_dirty = True

    @property
    def id(self) -> int:
        return self._id

    @property
    def finished(self) -> bool:
        return self.state.finished

    @property
    def deleted(self) -> bool:
        return self.state.deleted

    def __repr__(self) -> str:
        return f"Event(id={self._id}, name={self.name!r})"

    def publish(self) -> None:
        self.state = publish(self.state)

    def soft_delete(self) -> None:
        self.state = soft_delete(self.state)

    def validate_times(self) -> None:
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValidationError("Event ends before it starts", field="end_time")

    # ============== Event types ==============

    def event_type_ids(self) -> list[int]:
        return list(self._event_type_ids)

    def event_type_ids_csv(self) -> str:
        return format_ids(self._event_type_ids)

    def _resolve(self, event_type_id: int) -> EventType:
        referrer = f"event {self._id}"
        if self._catalogue is None:
            raise ResolutionError("event type", event_type_id, referrer)
        try:
            return self._catalogue.get(event_type_id)
        except NotFound as e:
            raise ResolutionError("event type", event_type_id, referrer) from e

    def event_types(self) -> list[EventType]:
        """
        Attached event types.

        A dangling id is a data-integrity error and raises ResolutionError
        instead of being dropped.
        """
        if self._event_types_dirty:
            self._event_types = [self._resolve(i) for i in self._event_type_ids]
            self._event_types_dirty = False
        return list(self._event_types)

    def add_event_type(self, event_type: EventType) -> None:
        """Attach an event type. Raises Duplicate if it is already attached."""
        if event_type.id in self._event_type_ids:
            raise Duplicate(self._id, event_type.id)

        self._event_type_ids.append(event_type.id)
        if not self._event_types_dirty:
            self._event_types.append(event_type)

    def remove_event_type(self, event_type: EventType | int) -> None:
        """Detach by id. Removing a non-member is a no-op."""
        event_type_id = event_type if isinstance(event_type, int) else event_type.id
        self._event_type_ids = [i for i in self._event_type_ids if i != event_type_id]
        self._event_types = [et for et in self._event_types if et.id != event_type_id]

    def set_event_types_from_ids(self, value: str | Iterable[int | str]) -> None:
        """Replace attached event types. Raises ParseError or DuplicateIds."""
        self._event_type_ids = parse_ids(value)
        self._event_types = []
        self._event_types_dirty = True

    def get_addable_event_types(self) -> list[EventType]:
        """
        Published event types worth suggesting for this event.

        Drops types already attached, types inside an attached type's subtype
        tree, and types whose own tree contains an attached type.
        """
        if self._catalogue is None:
            raise ResolutionError("event type catalogue", self._id, f"event {self._id}")
        attached = self.event_types()
        covered: set[int] = set(self._event_type_ids)
        for event_type in attached:
            covered |= event_type.get_subtype_ids_recursive()

        addable = []
        for candidate in self._catalogue.get_all_active():
            if candidate.id in covered:
                continue
            if any(not candidate.excludes_subtype(et) for et in attached):
                continue
            addable.append(candidate)
        return addable

    # ============== Tasks ==============

    def task_definitions(self) -> list[TaskDefinition]:
        """Task definitions from every attached event type tree, de-duplicated by id."""
        seen: set[int] = set()
        result = []
        for event_type in self.event_types():
            for td in event_type.all_task_definitions():
                if td.id not in seen:
                    seen.add(td.id)
                    result.append(td)
        return result

    def checklist(self) -> list[ChecklistItem]:
        """Dated checklist for this event. Requires a start time."""
        if self.start_time is None:
            raise ValidationError("Event has no start time", field="start_time")
        return build_checklist(self.start_time, self.task_definitions())

    # ============== Records ==============

    def to_record(self) -> dict:
        return {
            "id": self._id,
            "name": self.name,
            "location": self.location,
            "event_types": list(self._event_type_ids),
            "start_time_unix_timestamp": _to_timestamp(self.start_time),
            "end_time_unix_timestamp": _to_timestamp(self.end_time),
            "finished": self.state.finished,
            "deleted": self.state.deleted,
        }

    @classmethod
    def from_record(
        cls, data: dict, event_types: "EventTypeRepository | None" = None
    ) -> "Event":
        """Hydrate from a stored record."""
        event = cls(int(data["id"]), event_types)
        event.name = data.get("name", "")
        event.location = data.get("location", "")
        event._event_type_ids = parse_ids(data.get("event_types", []))
        event.start_time = _from_timestamp(data.get("start_time_unix_timestamp"))
        event.end_time = _from_timestamp(data.get("end_time_unix_timestamp"))
        event.state = EntityState.from_flags(
            bool(data.get("finished")), bool(data.get("deleted"))
        )
        return event


def _to_timestamp(dt: datetime | None) -> int | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def _from_timestamp(ts: int | None) -> datetime | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(int(ts), tz=timezone.utc)
