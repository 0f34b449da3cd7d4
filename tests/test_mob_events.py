"""Tests for the mob event log."""

import json

import httpx
import pytest

from farmhand.data import mob_events
from farmhand.data.mob_events import InvalidQuantityError


def make_mob(size: int = 20) -> dict:
    return {
        "id": "m1",
        "user_id": "owner-1",
        "name": "Ewes",
        "livestock_type": "sheep",
        "size": size,
        "status": "active",
        "current_paddock_id": "p1",
    }


class TestApplyEventToSize:
    """Tests for the cached size projection."""

    @pytest.mark.parametrize(
        ("event_type", "expected"),
        [
            ("birth", 15),
            ("purchase", 15),
            ("sale", 5),
            ("death", 5),
            ("treatment", 10),
            ("observation", 10),
            ("movement", 10),
        ],
    )
    def test_projection(self, event_type, expected):
        """Births and purchases add head, sales and deaths remove it, notes do nothing."""
        assert mob_events.apply_event_to_size(10, event_type, 5) == expected


class TestValidateQuantity:
    """Tests for quantity guards."""

    def test_sale_over_size_rejected(self):
        """Cannot sell more head than the mob has."""
        with pytest.raises(InvalidQuantityError, match="Only 20 available"):
            mob_events.validate_quantity(make_mob(20), "sale", 21)

    def test_loss_over_size_rejected(self):
        """Cannot lose more head than the mob has."""
        with pytest.raises(InvalidQuantityError):
            mob_events.validate_quantity(make_mob(3), "death", 4)

    def test_negative_rejected(self):
        """Negative quantities are rejected for every event type."""
        with pytest.raises(InvalidQuantityError, match="negative"):
            mob_events.validate_quantity(make_mob(), "birth", -1)

    def test_selling_whole_mob_allowed(self):
        """Selling exactly the whole mob is fine."""
        mob_events.validate_quantity(make_mob(20), "sale", 20)

    def test_is_value_error(self):
        """Callers catching ValueError also catch quantity errors."""
        assert issubclass(InvalidQuantityError, ValueError)


class TestBuildPurchaseNotes:
    """Tests for purchase notes formatting."""

    def test_joins_details(self):
        """Purchase details are joined into one notes line."""
        assert (
            mob_events.build_purchase_notes("From Smith", "2", "45", "good")
            == "From Smith | Age: 2 | Avg Weight: 45kg | Condition: good"
        )

    def test_empty_is_none(self):
        """No details gives no notes."""
        assert mob_events.build_purchase_notes() is None


class TestRecorders:
    """Tests for writing events and refreshing mob size."""

    async def test_birth_appends_event_then_updates_size(self, mock_backend, now):
        """A birth writes the event, then bumps the cached size."""
        insert = mock_backend.post("/mob_events").mock(return_value=httpx.Response(201, json=[{"id": "ev1"}]))
        update = mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[{"id": "m1"}]))

        result = await mob_events.record_birth(make_mob(20), 4, owner_id="owner-1", notes="twins", now=now)

        assert result["size"] == 24
        event = json.loads(insert.calls[0].request.content)
        assert event["event_type"] == "birth"
        assert event["quantity"] == 4
        assert event["event_date"] == now.isoformat()
        assert event["notes"] == "twins"
        assert json.loads(update.calls[0].request.content) == {"size": 24}

    async def test_sale_records_prices(self, mock_backend, now):
        """A sale stores price per head and the total."""
        insert = mock_backend.post("/mob_events").mock(return_value=httpx.Response(201, json=[{"id": "ev1"}]))
        mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[{"id": "m1"}]))

        result = await mob_events.record_sale(
            make_mob(20), 5, owner_id="owner-1", price_per_head=150.0, buyer_name="Saleyards", now=now
        )

        assert result["size"] == 15
        event = json.loads(insert.calls[0].request.content)
        assert event["total_price"] == 750.0
        assert event["buyer_name"] == "Saleyards"

    async def test_oversale_rejected_before_writing(self, mock_backend):
        """An impossible sale never reaches the backend."""
        insert = mock_backend.post("/mob_events")

        with pytest.raises(InvalidQuantityError):
            await mob_events.record_sale(make_mob(3), 5, owner_id="owner-1")

        assert not insert.called

    async def test_loss_records_reason(self, mock_backend, now):
        """A loss is stored as a death with its reason."""
        insert = mock_backend.post("/mob_events").mock(return_value=httpx.Response(201, json=[{"id": "ev1"}]))
        mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[{"id": "m1"}]))

        result = await mob_events.record_loss(make_mob(10), 2, owner_id="owner-1", loss_reason="predator", now=now)

        assert result["size"] == 8
        assert json.loads(insert.calls[0].request.content)["loss_reason"] == "predator"

    async def test_purchase_adds_head(self, mock_backend, now):
        """Bought-in head raise the cached size."""
        insert = mock_backend.post("/mob_events").mock(return_value=httpx.Response(201, json=[{"id": "ev1"}]))
        mock_backend.patch("/mobs").mock(return_value=httpx.Response(200, json=[{"id": "m1"}]))

        result = await mob_events.record_purchase(
            make_mob(10), 6, owner_id="owner-1", price_per_head=90.0, age="1.5", now=now
        )

        assert result["size"] == 16
        event = json.loads(insert.calls[0].request.content)
        assert event["total_price"] == 540.0
        assert event["notes"] == "Age: 1.5"

    async def test_note_does_not_touch_size(self, mock_backend, now):
        """Treatments and observations leave the size alone."""
        mock_backend.post("/mob_events").mock(return_value=httpx.Response(201, json=[{"id": "ev1"}]))
        update = mock_backend.patch("/mobs")

        mob = make_mob(10)
        result = await mob_events.record_note(mob, "treatment", "Drenched", owner_id="owner-1", now=now)

        assert result == mob
        assert not update.called

    async def test_note_rejects_head_count_types(self):
        """Head-count event types cannot be logged as notes."""
        with pytest.raises(ValueError):
            await mob_events.record_note(make_mob(), "birth", "x", owner_id="owner-1")

    async def test_failed_insert_returns_none(self, mock_backend):
        """A rejected event insert returns None."""
        mock_backend.post("/mob_events").mock(return_value=httpx.Response(403, json={"message": "denied"}))
        update = mock_backend.patch("/mobs")

        result = await mob_events.record_birth(make_mob(), 1, owner_id="owner-1")

        assert result is None
        assert not update.called

    async def test_failed_size_update_returns_none(self, mock_backend):
        """A rejected size update returns None."""
        mock_backend.post("/mob_events").mock(return_value=httpx.Response(201, json=[{"id": "ev1"}]))
        mock_backend.patch("/mobs").mock(return_value=httpx.Response(400, json={"message": "bad"}))

        assert await mob_events.record_birth(make_mob(), 1, owner_id="owner-1") is None


class TestGetMobEvents:
    """Tests for reading the log."""

    async def test_orders_oldest_first(self, mock_backend):
        """Events are requested oldest first for this mob only."""
        route = mock_backend.get("/mob_events").mock(return_value=httpx.Response(200, json=[]))

        await mob_events.get_mob_events("m1", owner_id="owner-1")

        params = route.calls[0].request.url.params
        assert params["order"] == "event_date.asc"
        assert params["mob_id"] == "eq.m1"
        assert params["user_id"] == "eq.owner-1"
