"""Unit tests for the cart aggregate, its storage and pricing.

Run with: pytest tests/test_cart.py -v
"""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from cart import Cart, CartItem, CartStore, ItemType, JsonFileStorage, MemoryStorage, PricingConfig
from cart.storage import CART_STORAGE_KEY
from webinars.domain import TimeSlot, WebinarGroup

TUNIS = timezone(timedelta(hours=1))
NOW = datetime(2026, 3, 10, 10, 0, tzinfo=TUNIS)


def webinar_item(item_id="w1", group=WebinarGroup.CROP_TUNIS, slots=(TimeSlot.MORNING,), **overrides):
    fields = {
        "type": ItemType.WEBINAR,
        "id": item_id,
        "title": f"Webinaire {item_id}",
        "group": group,
        "price_ht": Decimal("80.000"),
        "slots": slots,
        "date": NOW + timedelta(days=3),
    }
    fields.update(overrides)
    return CartItem(**fields)


def pack_item(item_id="p1", credits=5, price="300.000"):
    return CartItem(
        type=ItemType.PACK,
        id=item_id,
        title=f"Pack {credits} crédits",
        group=WebinarGroup.MASTER_CLASS,
        price_ht=Decimal(price),
        credits=credits,
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def cart(storage) -> Cart:
    return Cart(CartStore(storage), clock=lambda: NOW)


class TestGroupGuard:
    """A cart only ever holds items of one group."""

    def test_rejects_other_group_and_leaves_cart_untouched(self, cart):
        cart.add_item(webinar_item("w1"))
        before = cart.items

        for group in (WebinarGroup.PHARMIA, WebinarGroup.MASTER_CLASS):
            result = cart.add_item(webinar_item("x", group=group, slots=(TimeSlot.PHARMIA_TUESDAY,)))
            assert not result.ok
            assert "commande séparée" in result.message
            assert cart.items == before

        assert cart.group == WebinarGroup.CROP_TUNIS

    def test_pack_cannot_join_crop_cart(self, cart):
        cart.add_item(webinar_item("w1"))

        assert not cart.add_item(pack_item()).ok
        assert len(cart) == 1

    def test_clear_resets_group(self, cart):
        cart.add_item(webinar_item("w1"))
        cart.clear()

        assert cart.group is None
        assert cart.add_item(pack_item()).ok


class TestAddItem:
    def test_same_id_replaces_slots(self, cart):
        cart.add_item(webinar_item("w1", slots=(TimeSlot.MORNING,)))
        result = cart.add_item(webinar_item("w1", slots=(TimeSlot.EVENING,)))

        assert result.ok
        assert len(cart) == 1
        assert cart.items[0].slots == (TimeSlot.EVENING,)

    def test_expired_webinar_is_rejected(self, cart):
        result = cart.add_item(webinar_item("old", date=NOW - timedelta(hours=1)))

        assert not result.ok
        assert len(cart) == 0

    def test_pharmia_replay_window_still_accepted(self, cart):
        """A Tuesday PHARMIA session can still be bought on Thursday."""
        item = webinar_item(
            "ph", group=WebinarGroup.PHARMIA, slots=(TimeSlot.PHARMIA_FRIDAY,), date=NOW - timedelta(days=2)
        )

        assert cart.add_item(item).ok

    def test_naive_dates_are_read_in_clock_timezone(self, cart):
        item = webinar_item("naive", date=datetime(2026, 3, 10, 9, 0))

        assert not cart.add_item(item).ok

    def test_crop_webinar_needs_slots(self, cart):
        assert not cart.add_item(webinar_item("w1", slots=())).ok

    def test_master_class_without_slots_is_accepted(self, cart):
        assert cart.add_item(webinar_item("mc", group=WebinarGroup.MASTER_CLASS, slots=())).ok


class TestMutations:
    def test_update_slots(self, cart):
        cart.add_item(webinar_item("w1"))

        result = cart.update_slots("w1", ["AFTERNOON", "EVENING", "AFTERNOON"])

        assert result.ok
        assert cart.items[0].slots == (TimeSlot.AFTERNOON, TimeSlot.EVENING)

    def test_update_slots_rejects_unknown_slot(self, cart):
        cart.add_item(webinar_item("w1"))

        assert not cart.update_slots("w1", ["NIGHT"]).ok
        assert cart.items[0].slots == (TimeSlot.MORNING,)

    def test_update_slots_on_missing_item(self, cart):
        assert not cart.update_slots("nope", ["MORNING"]).ok

    def test_update_slots_on_pack(self, cart):
        cart.add_item(pack_item())

        assert not cart.update_slots("p1", ["MORNING"]).ok

    def test_remove_item(self, cart):
        cart.add_item(webinar_item("w1"))
        cart.add_item(webinar_item("w2"))

        assert cart.remove_item("w1").ok
        assert [item.id for item in cart.items] == ["w2"]
        assert not cart.remove_item("w1").ok

    def test_failed_save_leaves_cart_untouched(self):
        class BrokenStorage(MemoryStorage):
            def set(self, key, value):
                raise OSError("disk full")

        cart = Cart(CartStore(BrokenStorage()), clock=lambda: NOW)

        result = cart.add_item(webinar_item("w1"))

        assert not result.ok
        assert len(cart) == 0


class TestPersistence:
    def test_every_mutation_is_persisted(self, storage, cart):
        cart.add_item(webinar_item("w1"))
        cart.add_item(webinar_item("w2"))
        cart.remove_item("w1")

        reloaded = Cart(CartStore(storage), clock=lambda: NOW)

        assert [item.id for item in reloaded.items] == ["w2"]
        assert reloaded.items[0].date == NOW + timedelta(days=3)
        assert reloaded.items[0].price_ht == Decimal("80.000")

    def test_clear_removes_key(self, storage, cart):
        cart.add_item(webinar_item("w1"))
        cart.clear()

        assert storage.get(CART_STORAGE_KEY) is None

    def test_legacy_entries_are_migrated_on_read(self, storage):
        storage.set(
            CART_STORAGE_KEY,
            json.dumps(
                [
                    {"webinarId": "w-old", "title": "Ancien", "selectedSlots": ["MORNING"]},
                    "w-bare",
                    {"webinar": {"id": "w-nested", "title": "Imbriqué"}},
                ]
            ),
        )

        items = CartStore(storage).load()

        assert [(i.type, i.id, i.group) for i in items] == [
            (ItemType.WEBINAR, "w-old", WebinarGroup.CROP_TUNIS),
            (ItemType.WEBINAR, "w-bare", WebinarGroup.CROP_TUNIS),
            (ItemType.WEBINAR, "w-nested", WebinarGroup.CROP_TUNIS),
        ]
        assert items[0].slots == (TimeSlot.MORNING,)
        rewritten = json.loads(storage.get(CART_STORAGE_KEY))
        assert all("type" in entry and "group" in entry for entry in rewritten)

    def test_legacy_pack_is_migrated(self, storage):
        storage.set(
            CART_STORAGE_KEY,
            json.dumps([{"packId": "pack-10", "title": "Pack 10", "credits": 10, "price": 500}]),
        )

        [item] = CartStore(storage).load()

        assert (item.type, item.id, item.group) == (ItemType.PACK, "pack-10", WebinarGroup.MASTER_CLASS)
        assert item.credits == 10
        assert item.price_ht == Decimal("500")

    def test_mixed_legacy_groups_keep_first_group_only(self, storage):
        storage.set(CART_STORAGE_KEY, json.dumps([{"packId": "pack-5", "price": "300"}, "webinar-abc"]))

        cart = Cart(CartStore(storage), clock=lambda: NOW)

        assert [item.id for item in cart.items] == ["pack-5"]
        assert cart.group == WebinarGroup.MASTER_CLASS
        assert cart.total_price() == Decimal("358.000")
        rewritten = json.loads(storage.get(CART_STORAGE_KEY))
        assert [entry["id"] for entry in rewritten] == ["pack-5"]

    def test_mixed_groups_in_current_schema_are_dropped(self, storage):
        storage.set(
            CART_STORAGE_KEY,
            json.dumps(
                [
                    {"type": "WEBINAR", "id": "ph", "group": "PHARMIA", "priceHT": "60", "slots": ["PHARMIA_TUESDAY"]},
                    {"type": "WEBINAR", "id": "crop", "group": "CROP_TUNIS", "priceHT": "80", "slots": ["MORNING"]},
                ]
            ),
        )

        items = CartStore(storage).load()

        assert {item.group for item in items} == {WebinarGroup.PHARMIA}

    def test_typed_entry_without_group_gets_default(self, storage):
        storage.set(CART_STORAGE_KEY, json.dumps([{"type": "PACK", "id": "p", "credits": 3}]))

        items = CartStore(storage).load()

        assert items[0].group == WebinarGroup.MASTER_CLASS

    def test_unreadable_payload_gives_empty_cart(self, storage):
        storage.set(CART_STORAGE_KEY, "{not json")

        assert CartStore(storage).load() == []

    def test_malformed_entries_are_dropped(self, storage):
        storage.set(CART_STORAGE_KEY, json.dumps([{"type": "WEBINAR", "group": "CROP_TUNIS"}, 42]))

        assert CartStore(storage).load() == []

    def test_json_file_storage(self, tmp_path):
        path = tmp_path / "state" / "cart.json"
        cart = Cart(CartStore(JsonFileStorage(path)), clock=lambda: NOW)
        cart.add_item(pack_item())

        reloaded = Cart(CartStore(JsonFileStorage(path)), clock=lambda: NOW)

        assert reloaded.items == cart.items

    def test_undecodable_file_gives_empty_cart(self, tmp_path):
        path = tmp_path / "cart.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        cart = Cart(CartStore(JsonFileStorage(path)), clock=lambda: NOW)

        assert len(cart) == 0
        assert cart.add_item(webinar_item("w1")).ok

    def test_unreadable_storage_gives_empty_cart(self):
        class UnreadableStorage(MemoryStorage):
            def get(self, key):
                raise OSError("permission denied")

        cart = Cart(CartStore(UnreadableStorage()), clock=lambda: NOW)

        assert len(cart) == 0

    def test_failed_migration_save_still_loads(self):
        class ReadOnlyStorage(MemoryStorage):
            def set(self, key, value):
                raise OSError("read-only")

        storage = ReadOnlyStorage({CART_STORAGE_KEY: json.dumps(["w-bare"])})

        cart = Cart(CartStore(storage), clock=lambda: NOW)

        assert [item.id for item in cart.items] == ["w-bare"]


class TestPricing:
    def test_crop_items_use_flat_price(self, cart):
        cart.add_item(webinar_item("w1", price_ht=Decimal("10")))
        cart.add_item(webinar_item("w2", price_ht=Decimal("999")))

        assert cart.total_price() == Decimal("160.000")

    def test_master_class_adds_vat_and_one_stamp(self, cart):
        cart.add_item(pack_item("p1", price="100.000"))
        cart.add_item(pack_item("p2", price="50.000"))

        breakdown = cart.price()

        assert breakdown.subtotal_ht == Decimal("150.000")
        assert breakdown.vat == Decimal("28.500")
        assert breakdown.stamp_duty == Decimal("1.000")
        assert breakdown.total == Decimal("179.500")

    def test_pharmia_uses_vat_formula(self, cart):
        cart.add_item(
            webinar_item("ph", group=WebinarGroup.PHARMIA, slots=(TimeSlot.PHARMIA_TUESDAY,), price_ht=Decimal("33.333"))
        )

        assert cart.total_price() == Decimal("40.666")

    def test_custom_config(self, storage):
        cart = Cart(
            CartStore(storage),
            pricing=PricingConfig(crop_unit_price=Decimal("95.000")),
            clock=lambda: NOW,
        )
        cart.add_item(webinar_item("w1"))

        assert cart.total_price() == Decimal("95.000")

    def test_empty_cart_costs_nothing(self, cart):
        assert cart.total_price() == Decimal("0")

    def test_order_lines(self, cart):
        cart.add_item(pack_item("p1", credits=5))

        assert cart.order_lines() == [
            {"type": "PACK", "id": "p1", "group": "MASTER_CLASS", "slots": [], "credits": 5}
        ]
