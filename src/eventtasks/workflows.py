"""Shared workflow layer used by the CLI.

Each function loads entities from the store, applies one core mutation and
writes the result back. The core never persists on its own, so the write is
always an explicit second step here. Domain errors propagate unchanged.

There is no version field: two writers updating the same row will clobber
each other. Serialize edits per entity at a higher level if that matters.
"""

import logging
from datetime import datetime

from .adapters.json_store import JsonFileStore
from .adapters.memory_store import MemoryStore
from .config import Config
from .core.checklist import ChecklistItem
from .core.event import Event
from .core.event_type import EventType
from .core.task_definition import TaskDefinition
from .ports import TaskTracker

logger = logging.getLogger(__name__)


def get_store(config: Config) -> JsonFileStore:
    """Resolve the data directory from config."""
    return JsonFileStore(config.resolved_data_dir())


# ============== Event types ==============


def create_event_type(
    store: MemoryStore, display_name: str = "", description: str = ""
) -> EventType:
    """Create a draft event type, optionally naming it right away."""
    event_type = store.event_types.create()
    if display_name or description:
        event_type.display_name = display_name
        event_type.description = description
        store.event_types.update(event_type)
    return event_type


def edit_event_type(
    store: MemoryStore,
    event_type_id: int,
    display_name: str | None = None,
    description: str | None = None,
) -> EventType:
    event_type = store.event_types.get(event_type_id)
    if display_name is not None:
        event_type.display_name = display_name
    if description is not None:
        event_type.description = description
    store.event_types.update(event_type)
    return event_type


def add_subtype(store: MemoryStore, event_type_id: int, subtype_id: int) -> EventType:
    """Attach a subtype. Raises DuplicateEdge or CycleDetected before anything is written."""
    event_type = store.event_types.get(event_type_id)
    subtype = store.event_types.get(subtype_id)
    event_type.add_subtype(subtype)
    store.event_types.update(event_type)
    logger.info(f"Event type {event_type_id}: added subtype {subtype_id}")
    return event_type


def remove_subtype(store: MemoryStore, event_type_id: int, subtype_id: int) -> EventType:
    event_type = store.event_types.get(event_type_id)
    event_type.remove_subtype(subtype_id)
    store.event_types.update(event_type)
    logger.info(f"Event type {event_type_id}: removed subtype {subtype_id}")
    return event_type


def set_subtypes(store: MemoryStore, event_type_id: int, ids: str | list[int]) -> EventType:
    event_type = store.event_types.get(event_type_id)
    event_type.set_subtypes_from_ids(ids)
    store.event_types.update(event_type)
    logger.info(f"Event type {event_type_id}: subtypes set to [{event_type.subtype_ids_csv()}]")
    return event_type


def addable_subtypes(store: MemoryStore, event_type_id: int) -> list[EventType]:
    return store.event_types.get(event_type_id).get_addable_event_types()


def finish_event_type(store: MemoryStore, event_type_id: int) -> EventType:
    """Publish an event type after checking its stored subtype graph is acyclic."""
    store.event_types.get(event_type_id).validate()
    store.event_types.mark_finished(event_type_id)
    return store.event_types.get(event_type_id)


def delete_event_type(store: MemoryStore, event_type_id: int) -> None:
    store.event_types.mark_deleted(event_type_id)


# ============== Task definitions ==============


def add_task_definition(
    store: MemoryStore,
    event_type_id: int,
    title: str,
    start_offset_in_days: int,
    finish_offset_in_days: int,
    description: str = "",
) -> TaskDefinition:
    """Store a new task definition and attach it to an event type."""
    event_type = store.event_types.get(event_type_id)
    task_definition = TaskDefinition(
        title, start_offset_in_days, finish_offset_in_days, description
    )
    store.task_definitions.insert(task_definition)
    event_type.add_task_definition(task_definition)
    store.event_types.update(event_type)
    logger.info(f"Event type {event_type_id}: added task definition {task_definition.id}")
    return task_definition


def edit_task_definition(
    store: MemoryStore,
    task_definition_id: int,
    title: str | None = None,
    start_offset_in_days: int | None = None,
    finish_offset_in_days: int | None = None,
    description: str | None = None,
) -> TaskDefinition:
    current = store.task_definitions.get(task_definition_id)
    updated = TaskDefinition(
        title=current.title if title is None else title,
        start_offset_in_days=(
            current.start_offset_in_days if start_offset_in_days is None else start_offset_in_days
        ),
        finish_offset_in_days=(
            current.finish_offset_in_days
            if finish_offset_in_days is None
            else finish_offset_in_days
        ),
        description=current.description if description is None else description,
        id=task_definition_id,
    )
    store.task_definitions.update(updated)
    return updated


def remove_task_definition(
    store: MemoryStore, event_type_id: int, task_definition_id: int
) -> EventType:
    """Detach a task definition from one event type. The definition itself stays stored."""
    event_type = store.event_types.get(event_type_id)
    event_type.remove_task_definition(task_definition_id)
    store.event_types.update(event_type)
    return event_type


def delete_task_definition(store: MemoryStore, task_definition_id: int) -> list[int]:
    """
    Delete a task definition and detach it everywhere.

    Returns the ids of the event types that referenced it.
    """
    store.task_definitions.get(task_definition_id)
    affected = []
    for event_type in store.event_types.get_all(include_deleted=True):
        if task_definition_id in event_type.task_definition_ids():
            event_type.remove_task_definition(task_definition_id)
            store.event_types.update(event_type)
            affected.append(event_type.id)
    store.task_definitions.delete(task_definition_id)
    logger.info(
        f"Deleted task definition {task_definition_id}, detached from {len(affected)} event types"
    )
    return affected


# ============== Events ==============


def create_event(
    store: MemoryStore,
    name: str = "",
    location: str = "",
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> Event:
    """Create a draft event. Inverted times are rejected before a row is allocated."""
    unsaved = Event(0)
    unsaved.start_time = start_time
    unsaved.end_time = end_time
    unsaved.validate_times()

    event = store.events.create()
    event.name = name
    event.location = location
    event.start_time = start_time
    event.end_time = end_time
    store.events.update(event)
    return event


def edit_event(
    store: MemoryStore,
    event_id: int,
    name: str | None = None,
    location: str | None = None,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> Event:
    event = store.events.get(event_id)
    if name is not None:
        event.name = name
    if location is not None:
        event.location = location
    if start_time is not None:
        event.start_time = start_time
    if end_time is not None:
        event.end_time = end_time
    event.validate_times()
    store.events.update(event)
    return event


def add_event_type_to_event(store: MemoryStore, event_id: int, event_type_id: int) -> Event:
    """Attach an event type. Only exact duplicates are rejected here."""
    event = store.events.get(event_id)
    event.add_event_type(store.event_types.get(event_type_id))
    store.events.update(event)
    logger.info(f"Event {event_id}: added event type {event_type_id}")
    return event


def remove_event_type_from_event(store: MemoryStore, event_id: int, event_type_id: int) -> Event:
    event = store.events.get(event_id)
    event.remove_event_type(event_type_id)
    store.events.update(event)
    return event


def addable_event_types_for_event(store: MemoryStore, event_id: int) -> list[EventType]:
    return store.events.get(event_id).get_addable_event_types()


def event_checklist(store: MemoryStore, event_id: int) -> list[ChecklistItem]:
    return store.events.get(event_id).checklist()


def finish_event(store: MemoryStore, event_id: int) -> Event:
    """Publish an event once every attached event type resolves."""
    store.events.get(event_id).event_types()
    store.events.mark_finished(event_id)
    return store.events.get(event_id)


def delete_event(store: MemoryStore, event_id: int) -> None:
    store.events.mark_deleted(event_id)


def push_event_checklist(store: MemoryStore, event_id: int, tracker: TaskTracker) -> list[str]:
    """Generate an event's checklist and hand it to the task tracker."""
    event = store.events.get(event_id)
    items = event.checklist()
    if not items:
        logger.info(f"Event {event_id} has no tasks to push")
        return []
    return tracker.push_checklist(event, items)
