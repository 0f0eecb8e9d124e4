from cart.cart import Cart
from cart.models import CartItem, CartResult, ItemType
from cart.pricing import PriceBreakdown, PricingConfig
from cart.storage import CartStore, JsonFileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "Cart",
    "CartItem",
    "CartResult",
    "CartStore",
    "ItemType",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "PriceBreakdown",
    "PricingConfig",
]
