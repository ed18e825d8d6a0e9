"""
Variant Organizer
Partitions a product's variants into category-specific display groups with deterministic ordering
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import logging
import re

from schemas.catalog_schemas import (
    Grouping,
    OrganizedVariant,
    SuitSizeCell,
    Variant,
    VariantGroup,
)
from services.category import CategoryLike, ProductKind, grouping_kind, resolve_kind
from services.feature_flags import engine_flags
from services.obs.trace import TraceHook, emit
from services.variant_normalizer import NO_COLOR, NO_SIZE, VariantNormalizer, variant_normalizer

logger = logging.getLogger(__name__)

SUIT_KEY_PATTERN = re.compile(r"(\d+)([RSL]?)")
SUIT_SIZE_EXACT = re.compile(r"^(\d+)([SRL])$")
LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")

# Short < Regular < Long; a missing length code reads as Regular.
LENGTH_ORDER = {"S": 1, "R": 2, "L": 3, "": 2}

# Aggregate stock above this is a healthy chip, 1..threshold is low.
STOCK_CHIP_THRESHOLDS = {
    ProductKind.TIE: 10,
    ProductKind.SUIT: 10,
    ProductKind.SHIRT: 5,
}

SuitMatrix = Dict[str, Dict[str, SuitSizeCell]]


def parse_leading_number(text: str) -> Optional[float]:
    """Leading numeric value of a size label ('15.5"' -> 15.5), like parseFloat."""
    match = LEADING_NUMBER.match(text.replace('"', ""))
    if not match:
        return None
    return float(match.group(1))


def suit_size_sort_key(size: str) -> Tuple:
    """Chest number ascending, then S < R < L. Unparseable keys go last."""
    match = SUIT_KEY_PATTERN.search(size)
    if not match:
        return (1, 0, 0, size)
    chest, length = match.groups()
    return (0, int(chest), LENGTH_ORDER.get(length, 2), "")


def shirt_size_sort_key(size: str) -> Tuple:
    """Numeric neck size ascending, ignoring the inch mark. Unparseable keys go last."""
    value = parse_leading_number(size)
    if value is None:
        return (1, 0.0, size)
    return (0, value, "")


def stock_status(total_stock: int, healthy_threshold: int) -> str:
    if total_stock > healthy_threshold:
        return "in_stock"
    if total_stock > 0:
        return "low_stock"
    return "out_of_stock"


class VariantOrganizer:
    """Builds the variant grids shown on product admin and detail screens"""

    def __init__(self, normalizer: Optional[VariantNormalizer] = None,
                 trace_enabled: Optional[bool] = None):
        self.normalizer = normalizer or variant_normalizer
        if trace_enabled is None:
            trace_enabled = engine_flags.get_flag("organizer.trace_enabled", True)
        self.trace_enabled = bool(trace_enabled)
        self.sort_keys: Dict[ProductKind, Optional[Callable[[str], Tuple]]] = {
            ProductKind.TIE: None,  # first-seen colour order
            ProductKind.SUIT: suit_size_sort_key,
            ProductKind.SHIRT: shirt_size_sort_key,
        }

    def organize(self, variants: Sequence[Any], category: CategoryLike,
                 trace: Optional[TraceHook] = None) -> Grouping:
        """Partition variants into display groups.

        Every input variant lands in exactly one group (or in the flat list for
        generic products) carrying its original_index.
        """
        kind = resolve_kind(category)
        if not self.trace_enabled:
            trace = None

        organized = [
            OrganizedVariant(original_index=i, variant=self.normalizer.normalize(v, kind))
            for i, v in enumerate(variants)
        ]
        emit(trace, "organize.start", kind=kind.value, variant_count=len(organized))

        if kind is ProductKind.GENERIC:
            grouping = Grouping(kind=grouping_kind(kind), variants=organized)
            emit(trace, "organize.done", kind=kind.value, group_count=0,
                 variant_count=len(organized))
            return grouping

        buckets: Dict[str, List[OrganizedVariant]] = {}
        for item in organized:
            key = self.group_key(item.variant, kind)
            buckets.setdefault(key, []).append(item)

        keys = list(buckets.keys())
        sort_key = self.sort_keys.get(kind)
        if sort_key is not None:
            keys.sort(key=sort_key)

        threshold = STOCK_CHIP_THRESHOLDS[kind]
        groups: Dict[str, VariantGroup] = {}
        for key in keys:
            members = buckets[key]
            total_stock = sum(m.variant.stock for m in members)
            groups[key] = VariantGroup(
                key=key,
                variants=members,
                total_stock=total_stock,
                stock_status=stock_status(total_stock, threshold),
            )
            emit(trace, "organize.group", kind=kind.value, key=key,
                 size=len(members), total_stock=total_stock)

        grouping = Grouping(kind=grouping_kind(kind), groups=groups)
        emit(trace, "organize.done", kind=kind.value, group_count=len(groups),
             variant_count=len(organized))
        logger.debug(f"Organized {len(organized)} variants into {len(groups)} {grouping.kind} groups")
        return grouping

    @staticmethod
    def group_key(variant: Variant, kind: ProductKind) -> str:
        if kind is ProductKind.TIE:
            return variant.color or NO_COLOR
        return variant.size or NO_SIZE


# Global organizer instance
variant_organizer = VariantOrganizer()


def organize(variants: Sequence[Any], category: CategoryLike,
             trace: Optional[TraceHook] = None) -> Grouping:
    return variant_organizer.organize(variants, category, trace=trace)


# -----------------------------------------------------------------------------
# Suit size picker matrix
# -----------------------------------------------------------------------------

def build_suit_size_matrix(variants: Iterable[Variant]) -> SuitMatrix:
    """Chest -> length -> cell for active variants sized like '42R'.

    A later variant with the same chest/length replaces an earlier one.
    """
    matrix: SuitMatrix = {}
    for variant in variants:
        if not variant.size or not variant.is_active:
            continue
        match = SUIT_SIZE_EXACT.match(variant.size)
        if not match:
            continue
        chest, length = match.groups()
        matrix.setdefault(chest, {})[length] = SuitSizeCell(stock=variant.stock, variant=variant)
    return matrix


def suit_size_stock(matrix: SuitMatrix, chest: str, length: str) -> int:
    cell = matrix.get(chest, {}).get(length)
    return cell.stock if cell else 0


def suit_size_available(matrix: SuitMatrix, chest: str, length: str) -> bool:
    return suit_size_stock(matrix, chest, length) > 0


def chest_has_any_length(matrix: SuitMatrix, chest: str, lengths: Iterable[str] = ("S", "R", "L")) -> bool:
    return any(suit_size_available(matrix, chest, length) for length in lengths)
