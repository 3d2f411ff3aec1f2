"""Tests for create-or-update planning."""

from tome_sync.models import Actor, ActorPayload
from tome_sync.upsert import build_existing_index, plan_upsert


def _payload(name: str) -> ActorPayload:
    return ActorPayload(name=name, folder_id="tome")


class TestBuildExistingIndex:
    """Test the existing-actor index."""

    def test_index_scoped_to_folder(self):
        actors = [
            Actor(id="a1", name="Mira", folder="tome"),
            Actor(id="a2", name="Bran", folder="npcs"),
        ]
        assert build_existing_index(actors, "tome") == {"Mira": "a1"}

    def test_last_duplicate_wins(self):
        actors = [
            Actor(id="a1", name="Mira", folder="tome"),
            Actor(id="a2", name="Mira", folder="tome"),
        ]
        assert build_existing_index(actors, "tome") == {"Mira": "a2"}


class TestPlanUpsert:
    """Test routing of payloads to create or update."""

    def test_partition(self):
        payloads = [_payload("Mira"), _payload("Bran"), _payload("Arya")]
        plan = plan_upsert(payloads, {"Bran": "b1"})

        assert [p.name for p in plan.to_create] == ["Mira", "Arya"]
        assert [(u.actor_id, u.payload.name) for u in plan.to_update] == [("b1", "Bran")]
        assert plan.total == len(payloads)

    def test_exact_name_match_only(self):
        """Upsert matching is case-sensitive, unlike the folder merge."""
        plan = plan_upsert([_payload("mira")], {"Mira": "a1"})
        assert len(plan.to_create) == 1
        assert plan.to_update == []

    def test_every_indexed_name_updates(self):
        index = {"A": "1", "B": "2"}
        plan = plan_upsert([_payload("A"), _payload("B"), _payload("C")], index)
        assert {u.payload.name for u in plan.to_update} == set(index)

    def test_idempotent(self):
        """Planning twice against the same index classifies identically."""
        payloads = [_payload("Mira"), _payload("Bran")]
        index = {"Mira": "a1"}
        assert plan_upsert(payloads, index) == plan_upsert(payloads, index)
        assert index == {"Mira": "a1"}

    def test_duplicate_payloads_both_created(self):
        """The index is not updated while planning."""
        plan = plan_upsert([_payload("Mira"), _payload("Mira")], {})
        assert len(plan.to_create) == 2

    def test_update_delta_carries_id(self):
        plan = plan_upsert([_payload("Bran")], {"Bran": "b1"})
        delta = plan.update_deltas()[0]
        assert delta["_id"] == "b1"
        assert delta["name"] == "Bran"
        assert delta["img"] is None

    def test_empty(self):
        plan = plan_upsert([], {"Mira": "a1"})
        assert plan.total == 0
