"""Task definition repository interface."""

from typing import Protocol

from eventtasks.core.task_definition import TaskDefinition


class TaskDefinitionRepository(Protocol):
    """Interface for storing task definitions in any backend."""

    def insert(self, task_definition: TaskDefinition) -> int:
        """Store a new task definition, assign its id and return it."""
        ...

    def get(self, task_definition_id: int) -> TaskDefinition:
        """Fetch one task definition by id. Raises NotFound on a miss."""
        ...

    def update(self, task_definition: TaskDefinition) -> None:
        """Overwrite a stored task definition."""
        ...

    def delete(self, task_definition_id: int) -> None:
        """Remove a task definition. Referencing event types are not touched."""
        ...
