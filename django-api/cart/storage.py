"""Cart persistence.

A ``KeyValueStorage`` holds raw strings (the browser's localStorage, a file,
memory). ``CartStore`` owns the JSON schema on top of it, including the
migration of entries written by older clients.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from cart.models import CartItem, ItemType
from webinars.domain.enums import TimeSlot, WebinarGroup

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "pharmia_cart"

# Groups assumed for legacy entries that predate the group field.
LEGACY_PACK_GROUP = WebinarGroup.MASTER_CLASS
LEGACY_WEBINAR_GROUP = WebinarGroup.CROP_TUNIS


class KeyValueStorage(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """One JSON object on disk, mapping keys to strings."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable storage file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(self._path)

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


def _decimal(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return amount if amount.is_finite() and amount >= 0 else Decimal("0")


def _group(value: Any, default: WebinarGroup) -> WebinarGroup:
    try:
        return WebinarGroup(value)
    except ValueError:
        return default


def _slots(raw: Any) -> tuple[TimeSlot, ...]:
    if not isinstance(raw, list):
        return ()
    slots = []
    for value in raw:
        try:
            slot = TimeSlot(value)
        except ValueError:
            continue
        if slot not in slots:
            slots.append(slot)
    return tuple(slots)


def _date(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def item_to_dict(item: CartItem) -> dict[str, Any]:
    return {
        "type": item.type.value,
        "id": item.id,
        "title": item.title,
        "group": item.group.value,
        "priceHT": str(item.price_ht),
        "slots": [slot.value for slot in item.slots],
        "credits": item.credits,
        "date": item.date.isoformat() if item.date else None,
    }


def item_from_dict(raw: dict[str, Any]) -> CartItem:
    """Parse a current-schema entry."""
    return CartItem(
        type=ItemType(raw["type"]),
        id=str(raw["id"]),
        title=str(raw.get("title") or ""),
        group=WebinarGroup(raw["group"]),
        price_ht=_decimal(raw.get("priceHT", 0)),
        slots=_slots(raw.get("slots")),
        credits=int(raw.get("credits") or 0),
        date=_date(raw.get("date")),
    )


def migrate_legacy(raw: Any) -> dict[str, Any] | None:
    """Rewrite an entry from an older schema into the current one.

    Older clients stored bare webinar ids, or objects without ``type``; a
    ``packId`` marks a credit pack. Returns None when nothing usable remains.
    """
    if isinstance(raw, str):
        raw = {"webinarId": raw}
    if not isinstance(raw, dict):
        return None
    if "type" in raw:
        if "group" in raw:
            return raw
        default = LEGACY_PACK_GROUP if raw["type"] == ItemType.PACK.value else LEGACY_WEBINAR_GROUP
        return {**raw, "group": default.value}

    webinar = raw.get("webinar") if isinstance(raw.get("webinar"), dict) else {}
    if raw.get("packId"):
        return {
            "type": ItemType.PACK.value,
            "id": str(raw["packId"]),
            "title": raw.get("title") or raw.get("name") or "",
            "group": _group(raw.get("group"), LEGACY_PACK_GROUP).value,
            "priceHT": raw.get("priceHT", raw.get("price", 0)),
            "slots": [],
            "credits": raw.get("credits") or 0,
            "date": None,
        }

    webinar_id = raw.get("webinarId") or raw.get("id") or webinar.get("_id") or webinar.get("id")
    if not webinar_id:
        return None
    return {
        "type": ItemType.WEBINAR.value,
        "id": str(webinar_id),
        "title": raw.get("title") or webinar.get("title") or "",
        "group": _group(raw.get("group") or webinar.get("group"), LEGACY_WEBINAR_GROUP).value,
        "priceHT": raw.get("priceHT", raw.get("price", webinar.get("price", 0))),
        "slots": raw.get("slots") or raw.get("selectedSlots") or [],
        "credits": 0,
        "date": raw.get("date") or webinar.get("date"),
    }


class CartStore:
    """Serializes the cart under one storage key and migrates it on read."""

    def __init__(self, storage: KeyValueStorage, key: str = CART_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    def load(self) -> list[CartItem]:
        """Read the cart, migrating legacy entries and re-saving if anything changed.

        Lines whose group differs from the first line's are dropped, since a
        cart is billed under a single group. Storage failures give an empty
        cart.
        """
        try:
            payload = self._storage.get(self._key)
        except OSError:
            logger.exception("Could not read cart storage")
            return []
        if not payload:
            return []
        try:
            entries = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable cart payload")
            return []
        if not isinstance(entries, list):
            return []

        items: list[CartItem] = []
        migrated = False
        for entry in entries:
            current = migrate_legacy(entry)
            if current is not entry:
                migrated = True
            if current is None:
                continue
            try:
                items.append(item_from_dict(current))
            except (KeyError, TypeError, ValueError):
                logger.warning("Dropping malformed cart entry %r", entry)
                migrated = True

        if items:
            group = items[0].group
            kept = [item for item in items if item.group == group]
            if len(kept) != len(items):
                logger.warning("Dropping %d cart lines outside group %s", len(items) - len(kept), group)
                items = kept
                migrated = True

        if migrated:
            logger.info("Migrated %d legacy cart entries", len(items))
            try:
                self.save(items)
            except (OSError, TypeError, ValueError):
                logger.exception("Could not save migrated cart")
        return items

    def save(self, items: list[CartItem]) -> None:
        if not items:
            self._storage.remove(self._key)
            return
        self._storage.set(self._key, json.dumps([item_to_dict(item) for item in items]))
