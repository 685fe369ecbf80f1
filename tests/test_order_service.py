"""Tests for the order ledger and attribution (claiming)."""

import asyncio

import pytest

from apps.backend.services.errors import ValidationError
from apps.backend.services.rewards.container import build_services
from apps.backend.services.rewards.timeutil import to_iso
from apps.backend.store.memory_store import InMemoryDocumentStore


class ClaimBeforeWriteStore(InMemoryDocumentStore):
    """Runs a one-shot callback right before the next update reaches the store."""

    def __init__(self):
        super().__init__()
        self.before_update = None

    async def update(self, collection, key, fields, *, merge=False, expect=None):
        hook, self.before_update = self.before_update, None
        if hook is not None:
            await hook()
        return await super().update(collection, key, fields, merge=merge, expect=expect)


@pytest.mark.asyncio
class TestCreateOrder:
    async def test_attaches_custom_id_and_created_at(self, services, clock):
        order = await services.orders.create_order({"orderId": "gid://shopify/Order/1", "rewardGrams": 5})

        assert order.id
        assert order.custom_id and order.custom_id != order.id
        assert order.created_at == to_iso(clock.now)
        assert order.user_email is None
        assert "userEmail" not in order.to_dict()

    async def test_keeps_supplied_created_at_and_extra_fields(self, services):
        order = await services.orders.create_order(
            {"orderId": "1", "rewardGrams": 2, "createdAt": "2026-01-01T00:00:00.000Z", "total": "19.99"}
        )

        assert order.created_at == "2026-01-01T00:00:00.000Z"
        assert order.extra == {"total": "19.99"}

    async def test_custom_ids_are_unique(self, services):
        a = await services.orders.create_order({"orderId": "1"})
        b = await services.orders.create_order({"orderId": "1"})

        assert a.custom_id != b.custom_id

    @pytest.mark.parametrize("grams", [-1, "lots", float("nan")])
    async def test_rejects_bad_reward_grams(self, services, grams):
        with pytest.raises(ValidationError):
            await services.orders.create_order({"orderId": "1", "rewardGrams": grams})


@pytest.mark.asyncio
class TestOrderReads:
    async def test_list_orders_filters_on_user_email(self, services):
        await services.orders.create_order({"orderId": "1", "userEmail": "a@b.com"})
        await services.orders.create_order({"orderId": "2", "userEmail": "c@d.com"})
        await services.orders.create_order({"orderId": "3"})

        mine = await services.orders.list_orders("a@b.com")
        everything = await services.orders.list_orders()

        assert [o.order_id for o in mine] == ["1"]
        assert len(everything) == 3

    async def test_list_orders_for_unknown_email_is_empty_list(self, services):
        await services.orders.create_order({"orderId": "1", "userEmail": "a@b.com"})

        assert await services.orders.list_orders("nobody@x.com") == []

    async def test_get_missing_order_returns_none(self, services):
        assert await services.orders.get_order("missing") is None


@pytest.mark.asyncio
class TestUpdateAndDeleteOrder:
    async def test_update_order_merges_fields(self, services):
        order = await services.orders.create_order({"orderId": "1", "rewardGrams": 1})

        updated = await services.orders.update_order(order.id, {"rewardGrams": 3, "note": "adjusted"})

        assert updated.reward_grams == 3
        assert updated.extra["note"] == "adjusted"
        assert updated.custom_id == order.custom_id

    async def test_update_order_cannot_reassign_claimed_order(self, services):
        order = await services.orders.create_order({"orderId": "1"})
        await services.orders.claim_order("1", "a@b.com")

        updated = await services.orders.update_order(order.id, {"userEmail": "thief@x.com", "_customId": "x"})

        assert updated.user_email == "a@b.com"
        assert updated.custom_id == order.custom_id

    async def test_update_missing_order_returns_none(self, services):
        assert await services.orders.update_order("missing", {"rewardGrams": 1}) is None

    async def test_delete_order(self, services):
        order = await services.orders.create_order({"orderId": "1"})

        assert await services.orders.delete_order(order.id) == {"success": True}
        assert await services.orders.get_order(order.id) is None


@pytest.mark.asyncio
class TestClaimOrder:
    async def test_claim_sets_user_email(self, services):
        await services.orders.create_order({"orderId": "X", "rewardGrams": 5})

        claimed = await services.orders.claim_order("X", "a@b.com")

        assert claimed.user_email == "a@b.com"
        assert [o.order_id for o in await services.orders.list_orders("a@b.com")] == ["X"]

    async def test_claim_unknown_order_returns_none(self, services):
        assert await services.orders.claim_order("nope", "a@b.com") is None

    @pytest.mark.parametrize("order_id,email", [("", "a@b.com"), ("X", ""), (None, "a@b.com"), ("X", None)])
    async def test_claim_requires_both_arguments(self, services, order_id, email):
        with pytest.raises(ValidationError):
            await services.orders.claim_order(order_id, email)

    async def test_claim_same_email_twice_is_unchanged(self, services):
        await services.orders.create_order({"orderId": "X", "rewardGrams": 5})
        first = await services.orders.claim_order("X", "a@b.com")

        second = await services.orders.claim_order("X", "a@b.com")

        assert second.to_dict() == first.to_dict()

    async def test_first_claim_wins(self, services):
        await services.orders.create_order({"orderId": "X", "rewardGrams": 5})
        await services.orders.claim_order("X", "a@b.com")

        later = await services.orders.claim_order("X", "other@x.com")

        assert later.user_email == "a@b.com"
        assert await services.orders.list_orders("other@x.com") == []

    async def test_empty_user_email_counts_as_unclaimed(self, services):
        await services.orders.create_order({"orderId": "X", "userEmail": ""})

        claimed = await services.orders.claim_order("X", "a@b.com")

        assert claimed.user_email == "a@b.com"

    async def test_claim_attributes_every_unclaimed_split_shipment(self, services):
        await services.orders.create_order({"orderId": "X", "rewardGrams": 1})
        await services.orders.create_order({"orderId": "X", "rewardGrams": 2, "userEmail": "early@x.com"})
        await services.orders.create_order({"orderId": "X", "rewardGrams": 3})

        await services.orders.claim_order("X", "a@b.com")

        mine = sorted(o.grams for o in await services.orders.list_orders("a@b.com"))
        assert mine == [1.0, 3.0]
        early = await services.orders.list_orders("early@x.com")
        assert [o.grams for o in early] == [2.0]

    async def test_concurrent_claims_leave_exactly_one_owner(self, services):
        order = await services.orders.create_order({"orderId": "X", "rewardGrams": 5})

        a, b = await asyncio.gather(
            services.orders.claim_order("X", "a@b.com"),
            services.orders.claim_order("X", "c@d.com"),
        )

        stored = await services.orders.get_order(order.id)
        assert stored.user_email in ("a@b.com", "c@d.com")
        assert a.user_email == b.user_email == stored.user_email
        owners = [
            len(await services.orders.list_orders("a@b.com")),
            len(await services.orders.list_orders("c@d.com")),
        ]
        assert sorted(owners) == [0, 1]

    async def test_padded_email_claims_under_clean_email(self, services):
        await services.orders.create_order({"orderId": "X", "rewardGrams": 5})

        claimed = await services.orders.claim_order("X", "  a@b.com ")

        assert claimed.user_email == "a@b.com"
        assert len(await services.orders.list_orders("a@b.com")) == 1
        assert len(await services.orders.list_orders(" a@b.com ")) == 1
        summary = await services.dashboard.compute_dashboard("a@b.com", 60)
        assert summary.state.total_grams == 5


@pytest.mark.asyncio
class TestUpdateOrderRacingClaim:
    async def test_claim_landing_before_update_write_keeps_owner(self, clock):
        store = ClaimBeforeWriteStore()
        services = build_services(store, clock=clock)
        order = await services.orders.create_order({"orderId": "X", "rewardGrams": 5})
        store.before_update = lambda: services.orders.claim_order("X", "a@b.com")

        updated = await services.orders.update_order(order.id, {"userEmail": "thief@x.com", "rewardGrams": 7})

        assert updated.user_email == "a@b.com"
        assert updated.reward_grams == 7
        assert await services.orders.list_orders("thief@x.com") == []

    async def test_unclaimed_order_can_still_be_assigned(self, clock):
        store = ClaimBeforeWriteStore()
        services = build_services(store, clock=clock)
        order = await services.orders.create_order({"orderId": "X", "rewardGrams": 5})

        updated = await services.orders.update_order(order.id, {"userEmail": " a@b.com"})

        assert updated.user_email == "a@b.com"
