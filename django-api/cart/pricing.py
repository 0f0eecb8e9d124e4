"""Cart totals.

The formula is picked by the cart's group: CROP_TUNIS sessions are sold at
a flat, tax-included price per item; MASTER_CLASS and PHARMIA items are
summed before tax, then VAT and a single stamp duty are added.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from cart.models import CartItem
from webinars.domain.enums import WebinarGroup

MILLIME = Decimal("0.001")


@dataclass(frozen=True)
class PricingConfig:
    """Tax constants, in TND."""

    crop_unit_price: Decimal = Decimal("80.000")
    vat_rate: Decimal = Decimal("0.19")
    stamp_duty: Decimal = Decimal("1.000")


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal_ht: Decimal
    vat: Decimal
    stamp_duty: Decimal
    total: Decimal


_EMPTY = PriceBreakdown(Decimal("0.000"), Decimal("0.000"), Decimal("0.000"), Decimal("0.000"))


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(MILLIME, rounding=ROUND_HALF_UP)


def price_items(items: Sequence[CartItem], config: PricingConfig) -> PriceBreakdown:
    """Price a single-group list of items."""
    if not items:
        return _EMPTY

    if items[0].group == WebinarGroup.CROP_TUNIS:
        total = _round(config.crop_unit_price * len(items))
        return PriceBreakdown(subtotal_ht=total, vat=Decimal("0.000"), stamp_duty=Decimal("0.000"), total=total)

    subtotal = _round(sum((item.price_ht for item in items), Decimal("0")))
    vat = _round(subtotal * config.vat_rate)
    stamp = _round(config.stamp_duty)
    return PriceBreakdown(subtotal_ht=subtotal, vat=vat, stamp_duty=stamp, total=subtotal + vat + stamp)
