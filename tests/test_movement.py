"""Tests for moving mobs between paddocks."""

import json
from datetime import timedelta

import httpx

from farmhand.grazing import movement
from farmhand.grazing.occupancy import get_days_in_paddock, get_grazing_status


def make_mob(mob_id: str = "m1", paddock_id: str | None = "pA") -> dict:
    return {
        "id": mob_id,
        "user_id": "owner-1",
        "name": "Ewes",
        "livestock_type": "sheep",
        "size": 40,
        "current_paddock_id": paddock_id,
        "status": "active",
    }


def open_events(mob_id: str, events: list[dict]) -> list[dict]:
    return [e for e in events if e["mob_id"] == mob_id and e["moved_out_at"] is None]


def assert_consistent(mob: dict, events: list[dict]) -> None:
    """At most one open event, and it matches current_paddock_id."""
    still_open = open_events(mob["id"], events)
    assert len(still_open) <= 1
    if mob["current_paddock_id"] is None:
        assert still_open == []
    else:
        assert len(still_open) == 1
        assert still_open[0]["paddock_id"] == mob["current_paddock_id"]


class TestApplyMove:
    """Tests for in-memory moves."""

    def test_move_scenario(self, now):
        """Mob in A since day 0 moves to B on day 5."""
        day0 = now - timedelta(days=5)
        mob = make_mob("m1", "pA")
        events = [
            {"id": "e1", "mob_id": "m1", "paddock_id": "pA", "moved_in_at": day0.isoformat(), "moved_out_at": None}
        ]

        moved, updated, plan = movement.apply_move(mob, events, "pB", now=now)

        old = next(e for e in updated if e["id"] == "e1")
        assert old["moved_out_at"] == now.isoformat()
        new = open_events("m1", updated)
        assert len(new) == 1
        assert new[0]["paddock_id"] == "pB"
        assert new[0]["moved_in_at"] == now.isoformat()
        assert moved["current_paddock_id"] == "pB"
        assert get_days_in_paddock("m1", updated, now=now) == 0
        assert plan.days_in_previous_paddock == 5

    def test_inputs_not_mutated(self, now):
        """The input mob and events are left untouched."""
        mob = make_mob("m1", "pA")
        events = [
            {"id": "e1", "mob_id": "m1", "paddock_id": "pA", "moved_in_at": now.isoformat(), "moved_out_at": None}
        ]

        movement.apply_move(mob, events, "pB", now=now)

        assert mob["current_paddock_id"] == "pA"
        assert events[0]["moved_out_at"] is None
        assert len(events) == 1

    def test_move_out_leaves_no_open_event(self, now):
        """Moving out closes the event and clears the paddock."""
        mob = make_mob("m1", "pA")
        events = [
            {"id": "e1", "mob_id": "m1", "paddock_id": "pA", "moved_in_at": now.isoformat(), "moved_out_at": None}
        ]

        moved, updated, plan = movement.apply_move(mob, events, None, now=now)

        assert moved["current_paddock_id"] is None
        assert open_events("m1", updated) == []
        assert plan.open_event is None

    def test_first_placement_has_nothing_to_close(self, now):
        """Placing an unplaced mob only opens an event."""
        mob = make_mob("m1", None)

        moved, updated, plan = movement.apply_move(mob, [], "pA", now=now)

        assert plan.close_event_ids == []
        assert plan.days_in_previous_paddock == 0
        assert_consistent(moved, updated)

    def test_repairs_multiple_open_events(self, now):
        """Existing history with two open events ends up with one."""
        mob = make_mob("m1", "pA")
        events = [
            {"id": "e1", "mob_id": "m1", "paddock_id": "pA", "moved_in_at": now.isoformat(), "moved_out_at": None},
            {"id": "e2", "mob_id": "m1", "paddock_id": "pX", "moved_in_at": now.isoformat(), "moved_out_at": None},
        ]

        moved, updated, _ = movement.apply_move(mob, events, "pB", now=now)

        assert_consistent(moved, updated)

    def test_other_mobs_untouched(self, now):
        """Other mobs' open events are not closed."""
        mob = make_mob("m1", "pA")
        events = [
            {"id": "e1", "mob_id": "m1", "paddock_id": "pA", "moved_in_at": now.isoformat(), "moved_out_at": None},
            {"id": "e2", "mob_id": "m2", "paddock_id": "pA", "moved_in_at": now.isoformat(), "moved_out_at": None},
        ]

        _, updated, _ = movement.apply_move(mob, events, "pB", now=now)

        assert next(e for e in updated if e["id"] == "e2")["moved_out_at"] is None

    def test_sequence_keeps_single_open_interval(self, now):
        """Any sequence of moves keeps one open event matching the mob's paddock."""
        mob = make_mob("m1", None)
        events: list[dict] = []
        route = ["pA", "pB", None, "pC", "pC", "pA", None, None, "pB"]

        for day, destination in enumerate(route):
            mob, events, _ = movement.apply_move(mob, events, destination, now=now + timedelta(days=day))
            assert_consistent(mob, events)

        assert len(events) == sum(1 for d in route if d)

    def test_previous_paddock_rests_after_move(self, now):
        """The old paddock reads as resting once the mob leaves."""
        mob = make_mob("m1", "pA")
        events = [
            {
                "id": "e1",
                "mob_id": "m1",
                "paddock_id": "pA",
                "moved_in_at": (now - timedelta(days=10)).isoformat(),
                "moved_out_at": None,
            }
        ]

        moved, updated, _ = movement.apply_move(mob, events, "pB", now=now)

        assert get_grazing_status("pA", [moved], updated, now=now)["status"] == "resting"
        assert get_grazing_status("pB", [moved], updated, now=now)["status"] == "grazing"


class TestMoveMob:
    """Tests for the backend move sequence."""

    async def test_close_open_update(self, mock_backend, now):
        """Closes the old event, opens the new one, then repoints the mob."""
        close = mock_backend.patch("/grazing_events").mock(
            return_value=httpx.Response(200, json=[{"id": "e1", "mob_id": "m1", "paddock_id": "pA"}])
        )
        insert = mock_backend.post("/grazing_events").mock(
            return_value=httpx.Response(201, json=[{"id": "e2", "mob_id": "m1", "paddock_id": "pB"}])
        )
        repoint = mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[{"id": "m1"}]))

        result = await movement.move_mob("m1", "pA", "pB", owner_id="owner-1", now=now)

        assert result is True
        close_request = close.calls[0].request
        assert close_request.url.params["mob_id"] == "eq.m1"
        assert close_request.url.params["moved_out_at"] == "is.null"
        assert json.loads(close_request.content) == {"moved_out_at": now.isoformat()}

        new_event = json.loads(insert.calls[0].request.content)
        assert new_event["paddock_id"] == "pB"
        assert new_event["moved_in_at"] == now.isoformat()
        assert new_event["user_id"] == "owner-1"

        mob_request = repoint.calls[0].request
        assert mob_request.url.params["current_paddock_id"] == "eq.pA"
        assert json.loads(mob_request.content) == {"current_paddock_id": "pB"}

    async def test_first_placement_closes_strays_and_guards_on_null(self, mock_backend, now):
        """An unplaced mob still has stray open events closed before it is placed."""
        close = mock_backend.patch("/grazing_events").mock(return_value=httpx.Response(200, json=[]))
        mock_backend.post("/grazing_events").mock(return_value=httpx.Response(201, json=[{"id": "e2"}]))
        repoint = mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[{"id": "m1"}]))

        result = await movement.move_mob("m1", None, "pB", owner_id="owner-1", now=now)

        assert result is True
        close_params = close.calls[0].request.url.params
        assert close_params["mob_id"] == "eq.m1"
        assert close_params["moved_out_at"] == "is.null"
        assert repoint.calls[0].request.url.params["current_paddock_id"] == "is.null"

    async def test_move_out_does_not_insert(self, mock_backend, now):
        """Moving out writes no new grazing event."""
        mock_backend.patch("/grazing_events").mock(return_value=httpx.Response(200, json=[{"id": "e1"}]))
        insert = mock_backend.post("/grazing_events").mock(return_value=httpx.Response(201, json=[]))
        mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[{"id": "m1"}]))

        result = await movement.move_mob("m1", "pA", None, owner_id="owner-1", now=now)

        assert result is True
        assert not insert.called

    async def test_insert_failure_reopens_closed_event(self, mock_backend, now):
        """A failed insert undoes the close and reports failure."""
        patch_events = mock_backend.patch("/grazing_events").mock(
            side_effect=[
                httpx.Response(200, json=[{"id": "e1"}]),
                httpx.Response(200, json=[{"id": "e1"}]),
            ]
        )
        mock_backend.post("/grazing_events").mock(return_value=httpx.Response(409, json={"message": "conflict"}))
        repoint = mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[]))

        result = await movement.move_mob("m1", "pA", "pB", owner_id="owner-1", now=now)

        assert result is False
        assert not repoint.called
        reopen = patch_events.calls[1].request
        assert reopen.url.params["id"] == "in.(e1)"
        assert json.loads(reopen.content) == {"moved_out_at": None}

    async def test_concurrent_move_is_rolled_back(self, mock_backend, now):
        """If the mob is no longer in the old paddock, the move is undone."""
        patch_events = mock_backend.patch("/grazing_events").mock(
            side_effect=[
                httpx.Response(200, json=[{"id": "e1"}]),
                httpx.Response(200, json=[{"id": "e1"}]),
            ]
        )
        mock_backend.post("/grazing_events").mock(return_value=httpx.Response(201, json=[{"id": "e2"}]))
        mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[]))
        drop = mock_backend.delete("/grazing_events").mock(return_value=httpx.Response(200, json=[{"id": "e2"}]))

        result = await movement.move_mob("m1", "pA", "pB", owner_id="owner-1", now=now)

        assert result is False
        assert drop.calls[0].request.url.params["id"] == "eq.e2"
        assert patch_events.call_count == 2

    async def test_close_failure_returns_false(self, mock_backend, now):
        """A failed close aborts the move."""
        mock_backend.patch("/grazing_events").mock(return_value=httpx.Response(401, json={"message": "JWT expired"}))
        insert = mock_backend.post("/grazing_events")

        result = await movement.move_mob("m1", "pA", "pB", owner_id="owner-1", now=now)

        assert result is False
        assert not insert.called
