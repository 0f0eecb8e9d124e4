"""Cart aggregate.

A cart holds items of a single webinar group, since each group is billed
differently. Every mutation either applies completely and is persisted, or
returns a failed ``CartResult`` and leaves the cart as it was. Nothing here
raises to the caller.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from cart.models import CartItem, CartResult
from cart.pricing import PriceBreakdown, PricingConfig, price_items
from cart.storage import CartStore
from webinars.domain.enums import TimeSlot, WebinarGroup
from webinars.domain.status import is_expired

logger = logging.getLogger(__name__)

_GROUP_LABELS = {
    WebinarGroup.CROP_TUNIS: "CROP Tunis",
    WebinarGroup.PHARMIA: "PharmIA",
    WebinarGroup.MASTER_CLASS: "Master Class",
}


def _local_now() -> datetime:
    return datetime.now().astimezone()


class Cart:
    def __init__(
        self,
        store: CartStore,
        pricing: PricingConfig | None = None,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._store = store
        self._pricing = pricing or PricingConfig()
        self._clock = clock
        self._items: tuple[CartItem, ...] = self._load()

    @property
    def items(self) -> tuple[CartItem, ...]:
        return self._items

    @property
    def group(self) -> WebinarGroup | None:
        return self._items[0].group if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: str) -> bool:
        return self._find(item_id) is not None

    def add_item(self, item: CartItem) -> CartResult:
        """Add an item, or replace the slots of the line with the same id."""
        if self._items and item.group != self.group:
            return self._reject(
                f"Votre panier contient déjà des articles {_GROUP_LABELS[self.group]}. "
                f"Les articles {_GROUP_LABELS[item.group]} doivent faire l'objet d'une commande séparée."
            )
        if item.is_webinar and self._expired(item):
            return self._reject("Ce webinaire est terminé et ne peut plus être ajouté au panier.")
        if item.needs_slots and not item.slots:
            return self._reject("Veuillez sélectionner au moins un créneau.")

        index = self._find(item.id)
        if index is None:
            return self._commit(self._items + (item,), "Article ajouté au panier.")

        items = list(self._items)
        items[index] = replace(items[index], slots=item.slots)
        return self._commit(tuple(items), "Créneaux mis à jour.")

    def update_slots(self, item_id: str, slots: Iterable[str]) -> CartResult:
        index = self._find(item_id)
        if index is None:
            return self._reject("Cet article n'est pas dans votre panier.")
        current = self._items[index]
        if not current.is_webinar:
            return self._reject("Seuls les webinaires ont des créneaux.")
        try:
            parsed = tuple(dict.fromkeys(TimeSlot(slot) for slot in slots or ()))
        except ValueError:
            return self._reject("Créneau horaire inconnu.")
        if current.needs_slots and not parsed:
            return self._reject("Veuillez sélectionner au moins un créneau.")

        items = list(self._items)
        items[index] = replace(current, slots=parsed)
        return self._commit(tuple(items), "Créneaux mis à jour.")

    def remove_item(self, item_id: str) -> CartResult:
        if self._find(item_id) is None:
            return self._reject("Cet article n'est pas dans votre panier.")
        remaining = tuple(item for item in self._items if item.id != item_id)
        return self._commit(remaining, "Article retiré du panier.")

    def clear(self) -> CartResult:
        return self._commit((), "Panier vidé.")

    def price(self) -> PriceBreakdown:
        return price_items(self._items, self._pricing)

    def total_price(self) -> Decimal:
        return self.price().total

    def order_lines(self) -> list[dict[str, Any]]:
        """Lines handed to the checkout service."""
        return [
            {
                "type": item.type.value,
                "id": item.id,
                "group": item.group.value,
                "slots": [slot.value for slot in item.slots],
                "credits": item.credits,
            }
            for item in self._items
        ]

    def _expired(self, item: CartItem) -> bool:
        if item.date is None:
            return False
        now = self._clock()
        date = item.date
        if date.tzinfo is None and now.tzinfo is not None:
            date = date.replace(tzinfo=now.tzinfo)
        return is_expired(date, item.group, now)

    def _find(self, item_id: str) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def _reject(self, message: str) -> CartResult:
        return CartResult(ok=False, message=message, items=self._items)

    def _load(self) -> tuple[CartItem, ...]:
        try:
            return tuple(self._store.load())
        except (OSError, TypeError, ValueError):
            logger.exception("Could not load cart, starting empty")
            return ()

    def _commit(self, items: tuple[CartItem, ...], message: str) -> CartResult:
        try:
            self._store.save(list(items))
        except (OSError, TypeError, ValueError):
            logger.exception("Could not persist cart")
            return self._reject("Impossible d'enregistrer le panier. Veuillez réessayer.")
        self._items = items
        return CartResult(ok=True, message=message, items=items)
