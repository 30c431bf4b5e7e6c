"""Draft / published / deleted lifecycle shared by event types and events."""

from enum import Enum

from .errors import LifecycleError


class EntityState(str, Enum):
    """
    Visibility state of a stored entity.

    DRAFT: created, being edited, hidden from listings.
    PUBLISHED: submitted by the admin, visible in listings.
    DELETED: soft-deleted; terminal, still retrievable by id.
    """

    DRAFT = "draft"
    PUBLISHED = "published"
    DELETED = "deleted"

    @property
    def finished(self) -> bool:
        return self is EntityState.PUBLISHED

    @property
    def deleted(self) -> bool:
        return self is EntityState.DELETED

    @classmethod
    def from_flags(cls, finished: bool, deleted: bool) -> "EntityState":
        """Map the stored boolean pair back to a state. Deleted wins."""
        if deleted:
            return cls.DELETED
        if finished:
            return cls.PUBLISHED
        return cls.DRAFT


def publish(state: EntityState) -> EntityState:
    """Draft -> published. Publishing twice is a no-op."""
    if state is EntityState.DELETED:
        raise LifecycleError("Cannot publish a deleted entity")
    return EntityState.PUBLISHED


def soft_delete(state: EntityState) -> EntityState:
    return EntityState.DELETED


def is_listed(state: EntityState) -> bool:
    """Only published entities show up in listing queries."""
    return state is EntityState.PUBLISHED
