"""
Bundle Pricing Engine
Tiered discount selection, price breakdown and upsell data for a working bundle
"""
from typing import List, Any, Optional, Sequence
import logging
from decimal import Decimal, ROUND_HALF_UP

import settings
from schemas.catalog_schemas import (
    DEFAULT_DISCOUNT_TIERS,
    BundleLineItem,
    CompleteTheLookPrice,
    DiscountTier,
    LineItemVariant,
    PriceBreakdown,
    Variant,
    as_line_item,
    as_product,
    as_tier,
    to_money,
)
from services.feature_flags import engine_flags

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


class BundlePricingEngine:
    """Pure pricing for user-assembled bundles; safe to call on every quantity change"""

    def __init__(self, use_default_tiers: Optional[bool] = None):
        if use_default_tiers is None:
            use_default_tiers = engine_flags.get_flag("pricing.use_default_tiers", True)
        self.use_default_tiers = bool(use_default_tiers)

        # Complete-the-look strip: added item count -> discount rate
        self.look_discount_rates = [
            (2, Decimal("0.15")),
            (1, Decimal("0.10")),
        ]

    def compute_price(self, items: Sequence[Any],
                      tiers: Optional[Sequence[Any]] = None) -> PriceBreakdown:
        """Compute subtotal, best applicable tier, final price and next-tier data.

        tiers=None falls back to DEFAULT_DISCOUNT_TIERS when use_default_tiers
        is on; an empty list means no tiers.
        """
        line_items = [as_line_item(item) for item in items]
        tier_list = self._resolve_tiers(tiers)

        total_items = sum(item.quantity for item in line_items)
        subtotal = sum((to_money(item.price) * item.quantity for item in line_items), Decimal("0"))
        original_total = sum(
            (to_money(item.compare_at_price if item.compare_at_price is not None else item.price)
             * item.quantity for item in line_items),
            Decimal("0"),
        )

        best_discount = self.select_best_discount(tier_list, total_items)
        discount_amount = self.discount_amount(best_discount, subtotal)

        final_price = subtotal - discount_amount
        total_savings = original_total - final_price
        savings_percentage = (
            total_savings / original_total * HUNDRED if original_total > 0 else Decimal("0")
        )

        next_tier = self.select_next_tier(tier_list, total_items)
        items_needed = next_tier.min_items - total_items if next_tier else 0

        logger.debug(
            f"Priced bundle: items={total_items} subtotal={subtotal} "
            f"discount={discount_amount} tier={best_discount.description if best_discount else None}"
        )

        return PriceBreakdown(
            total_items=total_items,
            subtotal=subtotal,
            original_total=original_total,
            discount_amount=discount_amount,
            final_price=final_price,
            total_savings=total_savings,
            savings_percentage=savings_percentage,
            best_discount=best_discount,
            next_tier=next_tier,
            items_needed=items_needed,
        )

    def _resolve_tiers(self, tiers: Optional[Sequence[Any]]) -> List[DiscountTier]:
        if tiers is None:
            if self.use_default_tiers:
                return list(DEFAULT_DISCOUNT_TIERS)
            return []
        return [as_tier(t) for t in tiers]

    @staticmethod
    def select_best_discount(tiers: Sequence[DiscountTier], total_items: int) -> Optional[DiscountTier]:
        """Highest-value applicable tier.

        Equal values keep configuration order (stable sort); which of two equal
        tiers should win is an open product decision.
        """
        if total_items <= 0:
            return None
        applicable = [
            t for t in tiers
            if (not t.min_items or total_items >= t.min_items) and t.value > 0
        ]
        if not applicable:
            return None
        applicable.sort(key=lambda t: t.value, reverse=True)
        return applicable[0]

    @staticmethod
    def discount_amount(tier: Optional[DiscountTier], subtotal: Decimal) -> Decimal:
        if tier is None:
            return Decimal("0")
        value = to_money(tier.value)
        if tier.type == "percentage":
            return subtotal * value / HUNDRED
        if tier.type == "fixed":
            return value
        return Decimal("0")

    @staticmethod
    def select_next_tier(tiers: Sequence[DiscountTier], total_items: int) -> Optional[DiscountTier]:
        upcoming = [t for t in tiers if t.min_items and t.min_items > total_items]
        if not upcoming:
            return None
        upcoming.sort(key=lambda t: t.min_items)
        return upcoming[0]

    def complete_the_look_price(self, current: Any, added: Sequence[Any]) -> CompleteTheLookPrice:
        """Current product plus the cross-sell items the shopper added"""
        current_product = as_product(current)
        added_products = [as_product(p) for p in added]

        total = to_money(current_product.price) + sum(
            (to_money(p.price) for p in added_products), Decimal("0")
        )
        rate = Decimal("0")
        for min_added, look_rate in self.look_discount_rates:
            if len(added_products) >= min_added:
                rate = look_rate
                break
        final_price = total * (Decimal("1") - rate)

        return CompleteTheLookPrice(
            total=total,
            discount_rate=rate,
            final_price=final_price,
            item_count=len(added_products) + 1,
        )


# Global pricing engine instance
bundle_pricing_engine = BundlePricingEngine()


def compute_price(items: Sequence[Any], tiers: Optional[Sequence[Any]] = None) -> PriceBreakdown:
    return bundle_pricing_engine.compute_price(items, tiers)


# -----------------------------------------------------------------------------
# Working bundle helpers (pure: always return a new list)
# -----------------------------------------------------------------------------

def _line_variant(variant: Optional[Any]) -> Optional[LineItemVariant]:
    if variant is None:
        return None
    if isinstance(variant, Variant):
        return LineItemVariant(size=variant.size, color=variant.color)
    if isinstance(variant, LineItemVariant):
        return variant
    return LineItemVariant.model_validate(variant)


def add_line_item(items: Sequence[Any], product: Any, variant: Optional[Any] = None,
                  quantity: int = 1) -> List[BundleLineItem]:
    """Add a product (with its resolved variant) to the bundle.

    A line with the same product and variant is merged by adding quantities.
    """
    record = as_product(product)
    line_variant = _line_variant(variant)
    price = record.price
    if isinstance(variant, Variant) and variant.price is not None:
        price = variant.price

    lines = [as_line_item(item) for item in items]
    for i, line in enumerate(lines):
        if line.product_id == record.id and line.variant == line_variant:
            lines[i] = line.model_copy(update={"quantity": line.quantity + quantity})
            return lines

    lines.append(BundleLineItem(
        product_id=record.id,
        name=record.name,
        price=price,
        compare_at_price=record.compare_at_price,
        category=record.category,
        variant=line_variant,
        quantity=quantity,
    ))
    return lines


def _targets(line: BundleLineItem, product_id: str, variant: Optional[LineItemVariant]) -> bool:
    if line.product_id != str(product_id):
        return False
    return variant is None or line.variant == variant


def set_quantity(items: Sequence[Any], product_id: str, quantity: int,
                 variant: Optional[Any] = None) -> List[BundleLineItem]:
    """Set a line's quantity; a quantity of zero (or less) removes the line.

    Without a variant every line of the product is targeted.
    """
    quantity = max(0, int(quantity))
    line_variant = _line_variant(variant)
    lines: List[BundleLineItem] = []
    for item in items:
        line = as_line_item(item)
        if not _targets(line, product_id, line_variant):
            lines.append(line)
        elif quantity > 0:
            lines.append(line.model_copy(update={"quantity": quantity}))
    return lines


def adjust_quantity(items: Sequence[Any], product_id: str, delta: int,
                    variant: Optional[Any] = None) -> List[BundleLineItem]:
    lines = [as_line_item(item) for item in items]
    line_variant = _line_variant(variant)
    current = next((line for line in lines if _targets(line, product_id, line_variant)), None)
    if current is None:
        return lines
    return set_quantity(lines, product_id, current.quantity + delta, variant=current.variant)


# -----------------------------------------------------------------------------
# Display helpers
# -----------------------------------------------------------------------------

def format_price(amount: Any, currency: Optional[str] = None) -> str:
    symbol = settings.CURRENCY_SYMBOL if currency is None else currency
    value = to_money(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol}{value}"


def compare_at_discount_pct(price: Any, compare_at_price: Optional[Any]) -> int:
    """Strike-through badge percentage, rounded; 0 without a higher compare-at price"""
    if compare_at_price is None:
        return 0
    compare_at = to_money(compare_at_price)
    current = to_money(price)
    if compare_at <= current or compare_at <= 0:
        return 0
    pct = (compare_at - current) / compare_at * HUNDRED
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
