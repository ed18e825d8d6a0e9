"""
Variant Selector
Resolves a (color, size) pick to a concrete purchasable variant and feeds the colour/size pickers

States: NO_SELECTION -> COLOR_ONLY | SIZE_ONLY -> FULLY_SELECTED. Picks are
commutative. Picking a combination that resolves to an inactive or
out-of-stock variant is not an error: nothing is emitted and the selector stays
in a partial state.
"""
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
from dataclasses import dataclass
from enum import Enum

from schemas.catalog_schemas import Product, Variant, as_product, as_variant
from services.variant_normalizer import variant_normalizer

logger = logging.getLogger(__name__)

APPAREL_SIZE_ORDER = ["XS", "S", "M", "L", "XL", "XXL", "XXXL"]

COLOR_HEX = {
    "Navy": "#000080",
    "Navy Blue": "#000080",
    "Black": "#000000",
    "Charcoal": "#36454F",
    "Grey": "#808080",
    "Light Grey": "#D3D3D3",
    "Brown": "#8B4513",
    "Tan": "#D2B48C",
    "White": "#FFFFFF",
    "Ivory": "#FFFFF0",
    "Blue": "#0000FF",
    "Light Blue": "#ADD8E6",
    "Pink": "#FFC0CB",
    "Red": "#FF0000",
    "Burgundy": "#800020",
    "Green": "#008000",
    "Olive": "#808000",
    "Purple": "#800080",
    "Lavender": "#E6E6FA",
}
DEFAULT_SWATCH_HEX = "#CCCCCC"


class SelectionState(Enum):
    NO_SELECTION = "no_selection"
    COLOR_ONLY = "color_only"
    SIZE_ONLY = "size_only"
    FULLY_SELECTED = "fully_selected"


PARTIAL_STATES = (SelectionState.COLOR_ONLY, SelectionState.SIZE_ONLY)


@dataclass(frozen=True)
class StockLevel:
    level: str  # "out" | "low" | "medium" | "high"
    label: str


def stock_level(stock: int) -> StockLevel:
    if stock <= 0:
        return StockLevel("out", "Out of Stock")
    if stock <= 3:
        return StockLevel("low", f"Only {stock} left")
    if stock <= 10:
        return StockLevel("medium", "Limited Stock")
    return StockLevel("high", "In Stock")


def color_hex(color_name: str) -> str:
    return COLOR_HEX.get(color_name, DEFAULT_SWATCH_HEX)


def _size_sort_key(size: str):
    if size in APPAREL_SIZE_ORDER:
        return (0, APPAREL_SIZE_ORDER.index(size), "")
    try:
        return (1, float(size.replace('"', "")), "")
    except ValueError:
        return (2, 0.0, size)


def sort_sizes(sizes: Sequence[str]) -> List[str]:
    """Apparel letters first (XS..XXXL), then numeric ascending, then alphabetical."""
    return sorted(sizes, key=_size_sort_key)


class VariantSelector:
    """Stateful colour/size picker over one product's variants"""

    def __init__(self, variants: Sequence[Any], selected_variant_id: Optional[str] = None,
                 on_select: Optional[Callable[[Variant], None]] = None):
        self.variants: List[Variant] = [as_variant(v) for v in variants]
        self.on_select = on_select
        self.selected_color: Optional[str] = None
        self.selected_size: Optional[str] = None
        self.selected_variant: Optional[Variant] = None
        self.state = SelectionState.NO_SELECTION

        if selected_variant_id is not None:
            self._seed(str(selected_variant_id))

    @classmethod
    def for_product(cls, product: Any, selected_variant_id: Optional[str] = None,
                    on_select: Optional[Callable[[Variant], None]] = None) -> "VariantSelector":
        """Selector over the product's normalized variants"""
        record: Product = as_product(product)
        variants = variant_normalizer.normalize_all(record.variants, record.category)
        return cls(variants, selected_variant_id=selected_variant_id, on_select=on_select)

    def _seed(self, variant_id: str) -> None:
        seeded = next((v for v in self.variants if v.id == variant_id), None)
        if seeded is None:
            logger.warning(f"Selected variant {variant_id} not found among {len(self.variants)} variants")
            return
        self.selected_color = seeded.color
        self.selected_size = seeded.size
        self.selected_variant = seeded
        self.state = SelectionState.FULLY_SELECTED

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def resolve(self, color: Optional[str], size: Optional[str]) -> Optional[Variant]:
        """First variant in catalog order matching the non-null filters"""
        for variant in self.variants:
            if color and variant.color != color:
                continue
            if size and variant.size != size:
                continue
            return variant
        return None

    def is_available(self, color: Optional[str], size: Optional[str]) -> bool:
        variant = self.resolve(color, size)
        return variant is not None and variant.is_available

    @property
    def colors(self) -> List[str]:
        seen: Dict[str, None] = {}
        for variant in self.variants:
            if variant.color:
                seen.setdefault(variant.color, None)
        return list(seen)

    @property
    def sizes(self) -> List[str]:
        seen: Dict[str, None] = {}
        for variant in self.variants:
            if variant.size:
                seen.setdefault(variant.size, None)
        return sort_sizes(list(seen))

    def color_has_stock(self, color: str) -> bool:
        return any(v.stock > 0 for v in self.variants if v.color == color)

    def size_stock_level(self, size: str) -> Optional[StockLevel]:
        """Stock badge for a size button under the current colour"""
        variant = self.resolve(self.selected_color, size)
        return stock_level(variant.stock) if variant else None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def select_color(self, color: str) -> Optional[Variant]:
        self.selected_color = color
        return self._attempt(self.resolve(color, self.selected_size), SelectionState.COLOR_ONLY)

    def select_size(self, size: str) -> Optional[Variant]:
        self.selected_size = size
        return self._attempt(self.resolve(self.selected_color, size), SelectionState.SIZE_ONLY)

    def clear(self) -> None:
        self.selected_color = None
        self.selected_size = None
        self.selected_variant = None
        self.state = SelectionState.NO_SELECTION

    def _attempt(self, variant: Optional[Variant], picked_state: SelectionState) -> Optional[Variant]:
        if variant is not None and variant.is_available:
            self.selected_variant = variant
            self.state = SelectionState.FULLY_SELECTED
            if self.on_select is not None:
                self.on_select(variant)
            return variant

        self.selected_variant = None
        if self.state not in PARTIAL_STATES:
            self.state = picked_state
        logger.debug(
            f"No available variant for color={self.selected_color} size={self.selected_size}"
        )
        return None
