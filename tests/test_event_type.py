"""Tests for the event type hierarchy."""

from unittest.mock import MagicMock

import pytest

from eventtasks.adapters.memory_store import MemoryStore
from eventtasks.core.errors import (
    CycleDetected,
    DuplicateEdge,
    DuplicateIds,
    NotFound,
    ParseError,
    ResolutionError,
    ValidationError,
)
from eventtasks.core.event_type import EventType
from eventtasks.core.lifecycle import EntityState
from eventtasks.core.task_definition import TaskDefinition


@pytest.fixture
def store():
    return MemoryStore()


def make_type(store: MemoryStore, name: str = "", published: bool = True) -> EventType:
    """Create, name and optionally publish an event type; return a fresh copy."""
    et = store.event_types.create()
    et.display_name = name or f"Type {et.id}"
    store.event_types.update(et)
    if published:
        store.event_types.mark_finished(et.id)
    return store.event_types.get(et.id)


@pytest.fixture
def chain(store):
    """A -> B -> C, persisted."""
    a, b, c = make_type(store, "A"), make_type(store, "B"), make_type(store, "C")
    b.add_subtype(c)
    store.event_types.update(b)
    a.add_subtype(b)
    store.event_types.update(a)
    return store.event_types.get(a.id), store.event_types.get(b.id), store.event_types.get(c.id)


class TestCreate:
    def test_defaults(self):
        et = EventType.create(5)
        assert et.id == 5
        assert et.display_name == ""
        assert et.description == ""
        assert et.subtype_ids() == []
        assert et.task_definition_ids() == []
        assert et.state is EntityState.DRAFT
        assert et.finished is False
        assert et.deleted is False

    def test_id_is_read_only(self):
        et = EventType.create(5)
        with pytest.raises(AttributeError):
            et.id = 6

    def test_setters(self):
        et = EventType.create(5)
        et.set_display_name("Conference")
        et.set_description("Two-day conference")
        assert et.display_name == "Conference"
        assert et.description == "Two-day conference"

    def test_publish_and_delete(self):
        et = EventType.create(5)
        et.publish()
        assert et.finished is True
        et.soft_delete()
        assert et.deleted is True
        assert et.finished is False


class TestAddSubtype:
    def test_add_then_reverse_edge_is_cyclic(self, store):
        a, b = make_type(store), make_type(store)
        a.add_subtype(b)
        assert b.append_causes_cycle(a) is True

    def test_self_is_always_a_cycle(self, store):
        a = make_type(store)
        with pytest.raises(CycleDetected):
            a.add_subtype(a)
        assert a.subtype_ids() == []

    def test_self_without_repository(self):
        a = EventType.create(1)
        assert a.append_causes_cycle(a) is True
        with pytest.raises(CycleDetected):
            a.add_subtype(EventType.create(1))

    def test_duplicate_edge(self, store):
        a, b = make_type(store), make_type(store)
        a.add_subtype(b)
        with pytest.raises(DuplicateEdge):
            a.add_subtype(b)
        assert a.subtype_ids() == [b.id]

    def test_shortcut_across_chain_is_legal(self, chain):
        a, b, c = chain
        a.add_subtype(c)
        assert a.subtype_ids() == [b.id, c.id]

    def test_closing_chain_is_a_cycle(self, chain):
        a, b, c = chain
        with pytest.raises(CycleDetected):
            c.add_subtype(a)
        assert c.subtype_ids() == []

    def test_cycle_detected_through_live_unsaved_edges(self, store):
        a, b, c = make_type(store), make_type(store), make_type(store)
        b.add_subtype(c)
        a.add_subtype(b)
        # nothing persisted; the candidate's in-memory edges are the first level
        assert c.append_causes_cycle(b) is True
        assert b.append_causes_cycle(a) is True

    def test_adding_updates_populated_cache(self, store):
        a, b = make_type(store), make_type(store)
        assert a.subtypes() == []
        a.add_subtype(b)
        assert [s.id for s in a.subtypes()] == [b.id]


class TestRemoveSubtype:
    def test_remove(self, chain):
        a, b, _ = chain
        a.remove_subtype(b)
        assert a.subtype_ids() == []
        assert a.subtypes() == []

    def test_remove_twice_is_noop(self, chain):
        a, b, _ = chain
        a.remove_subtype(b)
        once = a.subtype_ids()
        a.remove_subtype(b)
        assert a.subtype_ids() == once

    def test_remove_non_member(self, chain):
        a, b, c = chain
        a.remove_subtype(c)
        assert a.subtype_ids() == [b.id]

    def test_remove_by_id(self, chain):
        a, b, _ = chain
        a.remove_subtype(b.id)
        assert a.subtype_ids() == []

    def test_removal_reopens_edge(self, store, chain):
        a, b, c = chain
        b.remove_subtype(c)
        store.event_types.update(b)
        c.add_subtype(a)
        assert c.subtype_ids() == [a.id]


class TestSubtypesCache:
    def test_resolves_once(self):
        repo = MagicMock()
        child = EventType.create(2)
        repo.get.return_value = child
        parent = EventType.from_record({"id": 1, "subtypes": [2]}, repo)

        assert parent.subtypes() == [child]
        assert parent.subtypes() == [child]
        repo.get.assert_called_once_with(2)

    def test_emptied_cache_is_not_re_resolved(self):
        repo = MagicMock()
        repo.get.return_value = EventType.create(2)
        parent = EventType.from_record({"id": 1, "subtypes": [2]}, repo)

        parent.subtypes()
        parent.remove_subtype(2)
        assert parent.subtypes() == []
        assert parent.subtypes() == []
        repo.get.assert_called_once_with(2)

    def test_dangling_id_raises(self, store):
        parent = EventType.from_record({"id": 1, "subtypes": [42]}, store.event_types)
        with pytest.raises(ResolutionError, match="42"):
            parent.subtypes()

    def test_no_repository_raises(self):
        parent = EventType.from_record({"id": 1, "subtypes": [2]})
        with pytest.raises(ResolutionError):
            parent.subtypes()


class TestRecursiveClosure:
    def test_subtype_ids_recursive(self, chain):
        a, b, c = chain
        assert a.get_subtype_ids_recursive() == {b.id, c.id}
        assert c.get_subtype_ids_recursive() == set()

    def test_excludes_subtype(self, chain):
        a, b, c = chain
        assert a.excludes_subtype(c) is False
        assert c.excludes_subtype(a) is True
        assert a.excludes_subtype(a) is True

    def test_diamond(self, store):
        top, left, right, bottom = (make_type(store) for _ in range(4))
        left.add_subtype(bottom)
        right.add_subtype(bottom)
        store.event_types.update(left)
        store.event_types.update(right)
        top.set_subtypes_from_ids([left.id, right.id])
        assert top.get_subtype_ids_recursive() == {left.id, right.id, bottom.id}


class TestAddable:
    def test_unrelated_types_are_mutually_addable(self, store):
        one, two = make_type(store), make_type(store)
        assert [et.id for et in one.get_addable_event_types()] == [two.id]
        assert [et.id for et in two.get_addable_event_types()] == [one.id]

    def test_excludes_tree_and_ancestors(self, store, chain):
        a, b, c = chain
        d = make_type(store, "D")
        assert [et.id for et in a.get_addable_event_types()] == [d.id]
        assert [et.id for et in c.get_addable_event_types()] == [d.id]
        assert [et.id for et in b.get_addable_event_types()] == [d.id]

    def test_drafts_and_deleted_are_not_offered(self, store):
        one = make_type(store)
        make_type(store, published=False)
        gone = make_type(store)
        store.event_types.mark_deleted(gone.id)
        assert one.get_addable_event_types() == []


class TestSetSubtypesFromIds:
    @pytest.fixture
    def six(self, store):
        return [make_type(store) for _ in range(6)]

    def test_round_trip(self, six):
        target = six[5]
        target.set_subtypes_from_ids("1,2,4,5")
        assert target.subtype_ids() == [1, 2, 4, 5]
        assert target.subtype_ids_csv() == "1,2,4,5"
        assert [s.id for s in target.subtypes()] == [1, 2, 4, 5]

    def test_empty_clears(self, six):
        target = six[5]
        target.set_subtypes_from_ids("1,2")
        target.set_subtypes_from_ids("")
        assert target.subtype_ids() == []
        assert target.subtypes() == []

    def test_duplicates(self, six):
        with pytest.raises(DuplicateIds):
            six[5].set_subtypes_from_ids("1,1,2")

    def test_non_numeric(self, six):
        with pytest.raises(ParseError):
            six[5].set_subtypes_from_ids("1,two")

    def test_self_reference(self, six):
        with pytest.raises(CycleDetected):
            six[5].set_subtypes_from_ids("1,6")
        assert six[5].subtype_ids() == []

    def test_ancestor_reference(self, store, six):
        parent, child = six[0], six[1]
        parent.add_subtype(child)
        store.event_types.update(parent)
        with pytest.raises(CycleDetected):
            child.set_subtypes_from_ids([parent.id])

    def test_unknown_id(self, six):
        with pytest.raises(ResolutionError):
            six[5].set_subtypes_from_ids("99")


class TestTaskDefinitions:
    def test_add_and_readd(self, store):
        for _ in range(5):
            make_type(store)
        et = store.event_types.get(5)
        td = TaskDefinition("Book venue", 30, 20, "desc")
        store.task_definitions.insert(td)

        assert et.add_task_definition(td) is True
        assert et.get_task_definition_ids() == [td.id]
        assert et.add_task_definition(td) is False
        assert et.get_task_definition_ids() == [td.id]

    def test_first_position_duplicate_is_detected(self):
        et = EventType.create(1)
        td = TaskDefinition("Book venue", 30, 20, id=1)
        et.add_task_definition(td)
        assert et.add_task_definition(TaskDefinition("Other", 0, 0, id=1)) is False

    def test_unsaved_definition_rejected(self):
        et = EventType.create(1)
        with pytest.raises(ValidationError):
            et.add_task_definition(TaskDefinition("Book venue", 30, 20))

    def test_remove_is_idempotent(self):
        et = EventType.create(1)
        td = TaskDefinition("Book venue", 30, 20, id=3)
        et.add_task_definition(td)
        et.remove_task_definition(td)
        et.remove_task_definition(td)
        assert et.task_definition_ids() == []

    def test_resolve(self, store):
        et = make_type(store)
        td = TaskDefinition("Book venue", 30, 20)
        store.task_definitions.insert(td)
        et.add_task_definition(td)
        store.event_types.update(et)

        fresh = store.event_types.get(et.id)
        assert [t.title for t in fresh.task_definitions()] == ["Book venue"]

    def test_dangling_definition_raises(self, store):
        et = EventType.from_record(
            {"id": 1, "task_definitions": [9]}, store.event_types, store.task_definitions
        )
        with pytest.raises(ResolutionError, match="task definition"):
            et.task_definitions()

    def test_bulk_set(self):
        et = EventType.create(1)
        et.set_task_definitions_from_ids("3,4")
        assert et.task_definition_ids_csv() == "3,4"
        with pytest.raises(DuplicateIds):
            et.set_task_definitions_from_ids("3,3")
        et.set_task_definitions_from_ids("")
        assert et.task_definition_ids() == []

    def test_all_task_definitions_dedupes_across_tree(self, store, chain):
        a, b, c = chain
        shared = TaskDefinition("Book venue", 30, 20)
        own = TaskDefinition("Hire DJ", 20, 10)
        store.task_definitions.insert(shared)
        store.task_definitions.insert(own)
        for et in (a, c):
            et.add_task_definition(shared)
        b.add_task_definition(own)
        for et in (a, b, c):
            store.event_types.update(et)

        fresh = store.event_types.get(a.id)
        assert [td.id for td in fresh.all_task_definitions()] == [shared.id, own.id]


class TestValidate:
    def test_clean_graph(self, chain):
        a, _, _ = chain
        a.validate()

    def test_corrupted_store(self, store):
        a, b = make_type(store), make_type(store)
        store._tables["event_types"][a.id]["subtypes"] = [b.id]
        store._tables["event_types"][b.id]["subtypes"] = [a.id]
        with pytest.raises(CycleDetected):
            store.event_types.get(a.id).validate()


class TestRecords:
    def test_round_trip(self, store, chain):
        a, b, _ = chain
        record = a.to_record()
        assert record["subtypes"] == [b.id]
        assert record["finished"] is True
        restored = EventType.from_record(record)
        assert restored.id == a.id
        assert restored.display_name == "A"
        assert restored.subtype_ids() == [b.id]
        assert restored.state is EntityState.PUBLISHED

    def test_missing_row(self, store):
        with pytest.raises(NotFound):
            store.event_types.get(123)
