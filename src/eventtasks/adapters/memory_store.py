"""In-memory storage adapter.

Keeps plain-dict records (copied on every read and write), so entities
handed out are views that only change the store through update().
"""

import copy
import logging

from eventtasks.core.errors import NotFound, ValidationError
from eventtasks.core.event import Event
from eventtasks.core.event_type import EventType
from eventtasks.core.lifecycle import EntityState, publish, soft_delete
from eventtasks.core.task_definition import TaskDefinition

logger = logging.getLogger(__name__)

EVENT_TYPES = "event_types"
TASK_DEFINITIONS = "task_definitions"
EVENTS = "events"
KINDS = (EVENT_TYPES, TASK_DEFINITIONS, EVENTS)

_KIND_LABELS = {
    EVENT_TYPES: "event type",
    TASK_DEFINITIONS: "task definition",
    EVENTS: "event",
}


class MemoryStore:
    """
    Row store for event types, task definitions and events.

    Exposes one repository per entity kind: ``event_types``,
    ``task_definitions`` and ``events``.
    """

    def __init__(self):
        self._tables: dict[str, dict[int, dict]] = {kind: {} for kind in KINDS}
        self._next_ids: dict[str, int] = {kind: 1 for kind in KINDS}
        self.event_types = EventTypeTable(self)
        self.task_definitions = TaskDefinitionTable(self)
        self.events = EventTable(self)

    def _allocate_id(self, kind: str) -> int:
        new_id = self._next_ids[kind]
        self._next_ids[kind] = new_id + 1
        return new_id

    def _read(self, kind: str, entity_id: int) -> dict:
        try:
            return copy.deepcopy(self._tables[kind][entity_id])
        except KeyError:
            raise NotFound(_KIND_LABELS[kind], entity_id) from None

    def _rows(self, kind: str) -> list[dict]:
        return [copy.deepcopy(r) for _, r in sorted(self._tables[kind].items())]

    def _write(self, kind: str, record: dict) -> None:
        self._tables[kind][record["id"]] = copy.deepcopy(record)
        self._next_ids[kind] = max(self._next_ids[kind], record["id"] + 1)
        logger.debug(f"Wrote {_KIND_LABELS[kind]} {record['id']}")
        self._persist(kind)

    def _remove(self, kind: str, entity_id: int) -> None:
        if entity_id not in self._tables[kind]:
            raise NotFound(_KIND_LABELS[kind], entity_id)
        del self._tables[kind][entity_id]
        logger.debug(f"Removed {_KIND_LABELS[kind]} {entity_id}")
        self._persist(kind)

    def _persist(self, kind: str) -> None:
        """Hook for durable subclasses. Memory store keeps nothing."""


class _LifecycleTable:
    """Shared create/get/list/flag logic for event types and events."""

    kind = ""

    def __init__(self, store: MemoryStore):
        self._store = store

    def _hydrate(self, record: dict):
        raise NotImplementedError

    def _blank(self, entity_id: int):
        raise NotImplementedError

    def create(self):
        entity = self._blank(self._store._allocate_id(self.kind))
        self._store._write(self.kind, entity.to_record())
        logger.info(f"Created {_KIND_LABELS[self.kind]} {entity.id}")
        return entity

    def get(self, entity_id: int):
        return self._hydrate(self._store._read(self.kind, entity_id))

    def get_all(self, include_deleted: bool = False) -> list:
        return [
            self._hydrate(r)
            for r in self._store._rows(self.kind)
            if include_deleted or not r.get("deleted")
        ]

    def get_all_active(self) -> list:
        return [
            self._hydrate(r)
            for r in self._store._rows(self.kind)
            if r.get("finished") and not r.get("deleted")
        ]

    def update(self, entity) -> None:
        """Write everything except the lifecycle flags, which have their own calls."""
        stored = self._store._read(self.kind, entity.id)
        record = entity.to_record()
        record["finished"] = stored.get("finished", False)
        record["deleted"] = stored.get("deleted", False)
        self._store._write(self.kind, record)

    def _set_state(self, entity_id: int, transition) -> None:
        record = self._store._read(self.kind, entity_id)
        state = transition(
            EntityState.from_flags(bool(record.get("finished")), bool(record.get("deleted")))
        )
        record["finished"] = state.finished
        record["deleted"] = state.deleted
        self._store._write(self.kind, record)
        logger.info(f"{_KIND_LABELS[self.kind].capitalize()} {entity_id} is now {state.value}")

    def mark_finished(self, entity_id: int) -> None:
        self._set_state(entity_id, publish)

    def mark_deleted(self, entity_id: int) -> None:
        self._set_state(entity_id, soft_delete)


class EventTypeTable(_LifecycleTable):
    """Implements EventTypeRepository protocol."""

    kind = EVENT_TYPES

    def _blank(self, entity_id: int) -> EventType:
        return EventType.create(entity_id, self, self._store.task_definitions)

    def _hydrate(self, record: dict) -> EventType:
        return EventType.from_record(record, self, self._store.task_definitions)


class EventTable(_LifecycleTable):
    """Implements EventRepository protocol."""

    kind = EVENTS

    def _blank(self, entity_id: int) -> Event:
        return Event(entity_id, self._store.event_types)

    def _hydrate(self, record: dict) -> Event:
        return Event.from_record(record, self._store.event_types)


class TaskDefinitionTable:
    """Implements TaskDefinitionRepository protocol."""

    kind = TASK_DEFINITIONS

    def __init__(self, store: MemoryStore):
        self._store = store

    def insert(self, task_definition: TaskDefinition) -> int:
        task_definition.assign_id(self._store._allocate_id(self.kind))
        self._store._write(self.kind, task_definition.to_record())
        logger.info(f"Created task definition {task_definition.id}")
        return task_definition.id

    def get(self, task_definition_id: int) -> TaskDefinition:
        return TaskDefinition.from_record(self._store._read(self.kind, task_definition_id))

    def get_all(self) -> list[TaskDefinition]:
        return [TaskDefinition.from_record(r) for r in self._store._rows(self.kind)]

    def update(self, task_definition: TaskDefinition) -> None:
        if not task_definition.has_id():
            raise ValidationError("Task definition has no id; insert it first", field="id")
        self._store._read(self.kind, task_definition.id)
        self._store._write(self.kind, task_definition.to_record())

    def delete(self, task_definition_id: int) -> None:
        self._store._remove(self.kind, task_definition_id)
