"""Event type - a reusable template of task definitions and nested subtypes.

Subtype edges form a directed graph that must stay acyclic: an event type may
never (transitively) be its own subtype. Every mutation is in-memory only;
callers persist through the repository afterwards.
"""

from typing import TYPE_CHECKING, Iterable

from . import graph
from .errors import (
    CycleDetected,
    DuplicateEdge,
    NotFound,
    ResolutionError,
    ValidationError,
)
from .ids import format_ids, parse_ids
from .lifecycle import EntityState, publish, soft_delete
from .task_definition import TaskDefinition

if TYPE_CHECKING:
    from eventtasks.ports import EventTypeRepository, TaskDefinitionRepository


def _id_of(entity: "EventType | TaskDefinition | int") -> int:
    return entity if isinstance(entity, int) else entity.id


class EventType:
    """
    A category of event and the tasks it requires.

    The repositories are only used to resolve ids (subtypes, task
    definitions, the catalogue); the event type never writes to them.
    """

    def __init__(
        self,
        id: int,
        event_types: "EventTypeRepository | None" = None,
        task_definitions: "TaskDefinitionRepository | None" = None,
    ):
        self._id = id
        self.display_name = ""
        self.description = ""
        self.state = EntityState.DRAFT
        self._event_types = event_types
        self._task_definition_repo = task_definitions

        self._subtype_ids: list[int] = []
        self._subtypes: list[EventType] = []
        self._subtypes_dirty = True

        self._task_definition_ids: list[int] = []
        self._task_definitions: list[TaskDefinition] = []
        self._task_definitions_dirty = True

    @classmethod
    def create(
        cls,
        id: int,
        event_types: "EventTypeRepository | None" = None,
        task_definitions: "TaskDefinitionRepository | None" = None,
    ) -> "EventType":
        """New event type with empty fields. The id is fixed for its lifetime."""
        return cls(id, event_types, task_definitions)

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
        return f"EventType(id={self._id}, display_name={self.display_name!r})"

    def set_display_name(self, display_name: str) -> None:
        self.display_name = display_name

    def set_description(self, description: str) -> None:
        self.description = description

    def publish(self) -> None:
        self.state = publish(self.state)

    def soft_delete(self) -> None:
        self.state = soft_delete(self.state)

    # ============== Resolution ==============

    def _resolve(self, event_type_id: int) -> "EventType":
        if self._event_types is None:
            raise ResolutionError("event type", event_type_id, f"event type {self._id}")
        try:
            return self._event_types.get(event_type_id)
        except NotFound as e:
            raise ResolutionError("event type", event_type_id, f"event type {self._id}") from e

    def _children(self, *live: "EventType") -> graph.Children:
        """
        Child-id resolver for graph traversal.

        Event types passed in ``live`` use their in-memory subtype ids, which
        may be ahead of the store; everything else is resolved through the
        repository once per traversal.
        """
        known = {et.id: list(et._subtype_ids) for et in (self, *live)}

        def children(node_id: int) -> list[int]:
            if node_id not in known:
                known[node_id] = self._resolve(node_id)._subtype_ids
            return known[node_id]

        return children

    # ============== Subtypes ==============

    def subtype_ids(self) -> list[int]:
        return list(self._subtype_ids)

    def subtype_ids_csv(self) -> str:
        """Comma separated subtype ids, e.g. "1,2,4,5" or "" if none."""
        return format_ids(self._subtype_ids)

    def subtypes(self) -> list["EventType"]:
        """
        Direct subtypes, resolved through the repository.

        Cached until the subtype ids change. Raises ResolutionError when an
        id no longer resolves.
        """
        if self._subtypes_dirty:
            self._subtypes = [self._resolve(i) for i in self._subtype_ids]
            self._subtypes_dirty = False
        return list(self._subtypes)

    def append_causes_cycle(self, candidate: "EventType") -> bool:
        """True if adding candidate as a subtype would create a cycle."""
        if candidate.id == self._id:
            return True
        return graph.reaches(candidate._subtype_ids, self._id, self._children(candidate))

    def get_subtype_ids_recursive(self) -> set[int]:
        """Ids of all subtypes, grandchildren included."""
        return graph.descendants(self._subtype_ids, self._children())

    def excludes_subtype(self, other: "EventType") -> bool:
        """True if other is not anywhere in this event type's subtype tree."""
        return other.id not in self.get_subtype_ids_recursive()

    def get_addable_event_types(self) -> list["EventType"]:
        """
        Published event types that can be added as a subtype.

        Excludes event types already in the subtype tree and those that
        would introduce a cycle (this type and its ancestors).
        """
        if self._event_types is None:
            raise ResolutionError("event type catalogue", self._id, f"event type {self._id}")
        included = self.get_subtype_ids_recursive()
        return [
            candidate
            for candidate in self._event_types.get_all_active()
            if candidate.id not in included and not self.append_causes_cycle(candidate)
        ]

    def add_subtype(self, subtype: "EventType") -> None:
        """Attach subtype. Raises DuplicateEdge or CycleDetected."""
        if subtype.id in self._subtype_ids:
            raise DuplicateEdge(self._id, subtype.id)
        if self.append_causes_cycle(subtype):
            raise CycleDetected(self._id, subtype.id)

        self._subtype_ids.append(subtype.id)
        if not self._subtypes_dirty:
            self._subtypes.append(subtype)

    def remove_subtype(self, subtype: "EventType | int") -> None:
        """Detach by id. Removing a non-member is a no-op."""
        subtype_id = _id_of(subtype)
        self._subtype_ids = [i for i in self._subtype_ids if i != subtype_id]
        self._subtypes = [s for s in self._subtypes if s.id != subtype_id]

    def set_subtypes_from_ids(self, value: str | Iterable[int | str]) -> None:
        """
        Replace all subtypes from "1,2,4,5" or a list of ids.

        Raises ParseError, DuplicateIds, ResolutionError or CycleDetected;
        on failure the current subtypes are left untouched.
        """
        new_ids = parse_ids(value)
        candidates = [self._resolve(i) if i != self._id else self for i in new_ids]
        children = self._children()
        for candidate in candidates:
            if candidate.id == self._id or graph.reaches(
                candidate._subtype_ids, self._id, children
            ):
                raise CycleDetected(self._id, candidate.id)

        self._subtype_ids = new_ids
        self._subtypes = candidates
        self._subtypes_dirty = False

    def validate(self) -> None:
        """Raise CycleDetected if the stored graph below this type already has a cycle."""
        cycle = graph.find_cycle(self._id, self._children())
        if cycle:
            raise CycleDetected(cycle[-2], cycle[-1])

    # ============== Task definitions ==============

    def task_definition_ids(self) -> list[int]:
        return list(self._task_definition_ids)

    def get_task_definition_ids(self) -> list[int]:
        return self.task_definition_ids()

    def task_definition_ids_csv(self) -> str:
        return format_ids(self._task_definition_ids)

    def task_definitions(self) -> list[TaskDefinition]:
        """Direct task definitions. Same caching and resolution policy as subtypes()."""
        if self._task_definitions_dirty:
            self._task_definitions = [
                self._resolve_task_definition(i) for i in self._task_definition_ids
            ]
            self._task_definitions_dirty = False
        return list(self._task_definitions)

    def _resolve_task_definition(self, task_definition_id: int) -> TaskDefinition:
        referrer = f"event type {self._id}"
        if self._task_definition_repo is None:
            raise ResolutionError("task definition", task_definition_id, referrer)
        try:
            return self._task_definition_repo.get(task_definition_id)
        except NotFound as e:
            raise ResolutionError("task definition", task_definition_id, referrer) from e

    def add_task_definition(self, task_definition: TaskDefinition) -> bool:
        """Attach a persisted task definition. Returns False if already attached."""
        if not task_definition.has_id():
            raise ValidationError(
                "Task definition must be stored before it is attached", field="id"
            )
        if task_definition.id in self._task_definition_ids:
            return False

        self._task_definition_ids.append(task_definition.id)
        if not self._task_definitions_dirty:
            self._task_definitions.append(task_definition)
        return True

    def remove_task_definition(self, task_definition: TaskDefinition | int) -> None:
        """Detach by id. Removing a non-member is a no-op."""
        td_id = _id_of(task_definition)
        self._task_definition_ids = [i for i in self._task_definition_ids if i != td_id]
        self._task_definitions = [td for td in self._task_definitions if td.id != td_id]

    def set_task_definitions_from_ids(self, value: str | Iterable[int | str]) -> None:
        """Replace all task definitions. Raises ParseError or DuplicateIds."""
        self._task_definition_ids = parse_ids(value)
        self._task_definitions = []
        self._task_definitions_dirty = True

    def all_task_definitions(self) -> list[TaskDefinition]:
        """
        Task definitions of this type and every subtype below it.

        De-duplicated by id, in depth-first discovery order.
        """
        seen_types: set[int] = set()
        seen_ids: set[int] = set()
        result = []
        stack: list[EventType] = [self]
        while stack:
            event_type = stack.pop()
            if event_type.id in seen_types:
                continue
            seen_types.add(event_type.id)
            for td in event_type.task_definitions():
                if td.id not in seen_ids:
                    seen_ids.add(td.id)
                    result.append(td)
            stack.extend(reversed(event_type.subtypes()))
        return result

    # ============== Records ==============

    def to_record(self) -> dict:
        return {
            "id": self._id,
            "display_name": self.display_name,
            "description": self.description,
            "subtypes": list(self._subtype_ids),
            "task_definitions": list(self._task_definition_ids),
            "finished": self.state.finished,
            "deleted": self.state.deleted,
        }

    @classmethod
    def from_record(
        cls,
        data: dict,
        event_types: "EventTypeRepository | None" = None,
        task_definitions: "TaskDefinitionRepository | None" = None,
    ) -> "EventType":
        """Hydrate from a stored record. Stored edges are trusted, not re-validated."""
        event_type = cls(int(data["id"]), event_types, task_definitions)
        event_type.display_name = data.get("display_name", "")
        event_type.description = data.get("description", "")
        event_type._subtype_ids = parse_ids(data.get("subtypes", []))
        event_type._task_definition_ids = parse_ids(data.get("task_definitions", []))
        event_type.state = EntityState.from_flags(
            bool(data.get("finished")), bool(data.get("deleted"))
        )
        return event_type
