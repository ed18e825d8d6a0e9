"""
Catalog Record Schemas
======================

Canonical shapes for every record that enters or leaves the variant and
pricing engine.

INBOUND RECORDS (pydantic, immutable):
--------------------------------------
- Variant          - one purchasable size/colour configuration
- Product          - catalog entry owning its variants
- BundleLineItem   - one line of a working bundle
- DiscountTier     - static tier configuration

Inbound models accept the camelCase payloads produced by the storefront REST
client (``isActive``, ``compareAtPrice``, ``pairsWellWith`` ...) as well as
snake_case keyword arguments. Malformed numeric values are coerced rather than
rejected: the engine must keep rendering while the catalog is being fixed.

OUTBOUND RECORDS (dataclasses with to_dict()):
----------------------------------------------
- OrganizedVariant / VariantGroup / Grouping   - variant grids
- PriceBreakdown / CompleteTheLookPrice         - bundle summaries
- ScoredCandidate                               - cross-sell list
- ShirtFit / SuitSizeCell                       - size helpers
"""

from typing import List, Dict, Any, Optional, Mapping, TypedDict, Literal, Union
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
import logging
import math

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class InvalidRecordError(TypeError):
    """Raised when a record is missing entirely or is not a mapping/model."""


# =============================================================================
# COERCION HELPERS
# =============================================================================

def _coerce_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return default


def _coerce_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if not math.isfinite(parsed):
        return default
    return parsed


def _coerce_optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def to_money(value: Any) -> Decimal:
    """Convert a price-like value to Decimal through str() to avoid float noise."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal) -> float:
    """Round half-up to cents for display payloads."""
    return float(value.quantize(CENTS, rounding=ROUND_HALF_UP))


# =============================================================================
# INBOUND RECORDS (pydantic)
# =============================================================================

class Variant(BaseModel):
    """A concrete purchasable configuration of a product."""

    id: Optional[str] = None
    name: str = ""
    sku: str = ""
    size: Optional[str] = None
    color: Optional[str] = None
    stock: int = 0
    price: Optional[float] = None
    is_active: bool = Field(False, alias="isActive")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("name", "sku", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("size", "color", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Optional[str]:
        return _coerce_optional_text(value)

    @field_validator("stock", mode="before")
    @classmethod
    def _non_negative_stock(cls, value: Any) -> int:
        return max(0, _coerce_int(value, 0))

    @field_validator("price", mode="before")
    @classmethod
    def _optional_price(cls, value: Any) -> Optional[float]:
        return _coerce_float(value, None)

    @field_validator("is_active", mode="before")
    @classmethod
    def _truthy_flag(cls, value: Any) -> bool:
        return bool(value)

    @property
    def is_available(self) -> bool:
        return self.is_active and self.stock > 0


class Product(BaseModel):
    """Catalog entry with its variants and declared cross-sell categories."""

    id: str
    name: str = ""
    category: str = ""
    price: float = 0.0
    compare_at_price: Optional[float] = Field(None, alias="compareAtPrice")
    variants: List[Variant] = Field(default_factory=list)
    pairs_well_with: List[str] = Field(default_factory=list, alias="pairsWellWith")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> str:
        if value is None:
            raise ValueError("product id is required")
        return str(value)

    @field_validator("name", "category", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price_or_zero(cls, value: Any) -> float:
        return _coerce_float(value, 0.0)

    @field_validator("compare_at_price", mode="before")
    @classmethod
    def _optional_price(cls, value: Any) -> Optional[float]:
        return _coerce_float(value, None)

    @field_validator("variants", mode="before")
    @classmethod
    def _variant_list(cls, value: Any) -> List[Any]:
        if not isinstance(value, (list, tuple)):
            if value is not None:
                logger.warning(f"Ignoring non-list variants of type {type(value).__name__}")
            return []
        return [v for v in value if isinstance(v, (Mapping, BaseModel))]

    @field_validator("pairs_well_with", mode="before")
    @classmethod
    def _category_list(cls, value: Any) -> List[str]:
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            return []
        return [str(v) for v in value if v is not None]


    @property
    def total_stock(self) -> int:
        return sum(v.stock for v in self.variants)


class LineItemVariant(BaseModel):
    """Size/colour chosen for a bundle line."""

    size: Optional[str] = None
    color: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("size", "color", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Optional[str]:
        return _coerce_optional_text(value)


class BundleLineItem(BaseModel):
    """One line of a user-assembled bundle."""

    product_id: str = Field(..., alias="productId")
    name: str = ""
    price: float = 0.0
    compare_at_price: Optional[float] = Field(None, alias="compareAtPrice")
    category: str = ""
    variant: Optional[LineItemVariant] = None
    quantity: int = 1

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator("product_id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> str:
        if value is None:
            raise ValueError("productId is required")
        return str(value)

    @field_validator("name", "category", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price_or_zero(cls, value: Any) -> float:
        return _coerce_float(value, 0.0)

    @field_validator("compare_at_price", mode="before")
    @classmethod
    def _optional_price(cls, value: Any) -> Optional[float]:
        return _coerce_float(value, None)

    @field_validator("quantity", mode="before")
    @classmethod
    def _non_negative_quantity(cls, value: Any) -> int:
        return max(0, _coerce_int(value, 0))


class DiscountTier(BaseModel):
    """Tiered bundle discount rule. Static configuration."""

    type: str = "percentage"  # "percentage" | "fixed"
    value: float = 0.0
    min_items: Optional[int] = Field(None, alias="minItems")
    description: str = ""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, value: Any) -> str:
        return "" if value is None else str(value).strip().lower()

    @field_validator("value", mode="before")
    @classmethod
    def _value_or_zero(cls, value: Any) -> float:
        return _coerce_float(value, 0.0)

    @field_validator("min_items", mode="before")
    @classmethod
    def _optional_min_items(cls, value: Any) -> Optional[int]:
        return _coerce_int(value, None)

    @field_validator("description", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


DEFAULT_DISCOUNT_TIERS: List[DiscountTier] = [
    DiscountTier(type="percentage", value=10, min_items=2, description="Buy 2+ items, save 10%"),
    DiscountTier(type="percentage", value=15, min_items=3, description="Buy 3+ items, save 15%"),
    DiscountTier(type="percentage", value=20, min_items=4, description="Buy 4+ items, save 20%"),
]


RecordLike = Union[BaseModel, Mapping[str, Any]]


def _as_model(model_cls, record: Any):
    if isinstance(record, model_cls):
        return record
    if record is None:
        raise InvalidRecordError(f"{model_cls.__name__} record is required, got None")
    if isinstance(record, BaseModel):
        record = record.model_dump(by_alias=True)
    if not isinstance(record, Mapping):
        raise InvalidRecordError(
            f"{model_cls.__name__} record must be a mapping, got {type(record).__name__}"
        )
    return model_cls.model_validate(record)


def as_variant(record: Any) -> Variant:
    return _as_model(Variant, record)


def as_product(record: Any) -> Product:
    return _as_model(Product, record)


def as_line_item(record: Any) -> BundleLineItem:
    return _as_model(BundleLineItem, record)


def as_tier(record: Any) -> DiscountTier:
    return _as_model(DiscountTier, record)


# =============================================================================
# OUTBOUND TYPE DEFINITIONS (TypedDict)
# =============================================================================

class OrganizedVariantDict(TypedDict, total=False):
    originalIndex: int
    variant: Dict[str, Any]


class VariantGroupDict(TypedDict, total=False):
    key: str
    totalStock: int
    stockStatus: str
    variants: List[OrganizedVariantDict]


class GroupingDict(TypedDict, total=False):
    kind: Literal["ties", "suits", "shirts", "default"]
    groups: List[VariantGroupDict]
    variants: List[OrganizedVariantDict]
    totalVariants: int


class PriceBreakdownDict(TypedDict, total=False):
    totalItems: int
    subtotal: float
    originalTotal: float
    discountAmount: float
    finalPrice: float
    totalSavings: float
    savingsPercentage: float
    bestDiscount: Optional[Dict[str, Any]]
    nextTier: Optional[Dict[str, Any]]
    itemsNeeded: int


class ScoredCandidateDict(TypedDict, total=False):
    product: Dict[str, Any]
    score: int
    components: Dict[str, int]
    suggestedSize: Optional[str]


# =============================================================================
# OUTBOUND DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class OrganizedVariant:
    """A normalized variant plus its position in the caller's source array.

    Edit/delete callbacks must address the source array through
    original_index, never through the position inside a group.
    """
    original_index: int
    variant: Variant

    def to_dict(self) -> OrganizedVariantDict:
        return {
            "originalIndex": self.original_index,
            "variant": self.variant.model_dump(by_alias=True),
        }


@dataclass
class VariantGroup:
    """Variants sharing one colour (ties) or one size (suits, shirts)."""
    key: str
    variants: List[OrganizedVariant] = field(default_factory=list)
    total_stock: int = 0
    stock_status: str = "out_of_stock"

    def to_dict(self) -> VariantGroupDict:
        return {
            "key": self.key,
            "totalStock": self.total_stock,
            "stockStatus": self.stock_status,
            "variants": [v.to_dict() for v in self.variants],
        }


@dataclass
class Grouping:
    """Result of organizing a product's variants for display.

    ``groups`` is ordered (insertion order is display order) and empty for the
    ``default`` kind, where ``variants`` holds the flat list instead.
    """
    kind: str
    groups: Dict[str, VariantGroup] = field(default_factory=dict)
    variants: List[OrganizedVariant] = field(default_factory=list)

    def flatten(self) -> List[OrganizedVariant]:
        if self.kind == "default":
            return list(self.variants)
        flat: List[OrganizedVariant] = []
        for group in self.groups.values():
            flat.extend(group.variants)
        return flat

    def original_indices(self) -> List[int]:
        return [v.original_index for v in self.flatten()]

    @property
    def total_variants(self) -> int:
        return len(self.flatten())

    @property
    def group_count(self) -> int:
        return len(self.groups)

    def to_dict(self) -> GroupingDict:
        return {
            "kind": self.kind,
            "groups": [g.to_dict() for g in self.groups.values()],
            "variants": [v.to_dict() for v in self.variants],
            "totalVariants": self.total_variants,
        }


@dataclass
class PriceBreakdown:
    """Bundle price summary. All money fields are Decimal."""
    total_items: int = 0
    subtotal: Decimal = Decimal("0")
    original_total: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    final_price: Decimal = Decimal("0")
    total_savings: Decimal = Decimal("0")
    savings_percentage: Decimal = Decimal("0")
    best_discount: Optional[DiscountTier] = None
    next_tier: Optional[DiscountTier] = None
    items_needed: int = 0

    def to_dict(self) -> PriceBreakdownDict:
        return {
            "totalItems": self.total_items,
            "subtotal": quantize_money(self.subtotal),
            "originalTotal": quantize_money(self.original_total),
            "discountAmount": quantize_money(self.discount_amount),
            "finalPrice": quantize_money(self.final_price),
            "totalSavings": quantize_money(self.total_savings),
            "savingsPercentage": quantize_money(self.savings_percentage),
            "bestDiscount": self.best_discount.to_dict() if self.best_discount else None,
            "nextTier": self.next_tier.to_dict() if self.next_tier else None,
            "itemsNeeded": self.items_needed,
        }


@dataclass
class CompleteTheLookPrice:
    """Summary shown under the cross-sell strip."""
    total: Decimal
    discount_rate: Decimal
    final_price: Decimal
    item_count: int

    @property
    def savings(self) -> Decimal:
        return self.total - self.final_price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": quantize_money(self.total),
            "discount": float(self.discount_rate),
            "finalPrice": quantize_money(self.final_price),
            "savings": quantize_money(self.savings),
            "itemCount": self.item_count,
        }


@dataclass
class ScoredCandidate:
    """A product augmented with its derived cross-sell score (never persisted)."""
    product: Product
    score: int = 0
    components: Dict[str, int] = field(default_factory=dict)
    suggested_size: Optional[str] = None

    @property
    def id(self) -> str:
        return self.product.id

    def to_dict(self) -> ScoredCandidateDict:
        return {
            "product": self.product.model_dump(by_alias=True),
            "score": self.score,
            "components": dict(self.components),
            "suggestedSize": self.suggested_size,
        }


@dataclass(frozen=True)
class ShirtFit:
    """Shirt size recommended for a suit size."""
    size: str
    neck: float
    sleeve: str

    def to_dict(self) -> Dict[str, Any]:
        return {"size": self.size, "neck": self.neck, "sleeve": self.sleeve}


@dataclass(frozen=True)
class SuitSizeCell:
    """One chest/length cell of the suit size picker."""
    stock: int
    variant: Variant
