"""
Category Classification
Maps the free-text product category onto the closed set of kinds the engine dispatches on
"""
from typing import Optional, Union
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ProductKind(Enum):
    """Product kinds with category-specific variant handling"""
    TIE = "tie"
    SUIT = "suit"
    SHIRT = "shirt"
    GENERIC = "generic"


# Checked in order: "Suits & Ties" is a tie category.
CATEGORY_TOKENS = (
    ("tie", ProductKind.TIE),
    ("suit", ProductKind.SUIT),
    ("shirt", ProductKind.SHIRT),
)

GROUPING_KINDS = {
    ProductKind.TIE: "ties",
    ProductKind.SUIT: "suits",
    ProductKind.SHIRT: "shirts",
    ProductKind.GENERIC: "default",
}

CategoryLike = Union[str, ProductKind, None]


def classify_category(category: Optional[str]) -> ProductKind:
    """Case-insensitive substring match against the tie/suit/shirt tokens."""
    if not category:
        return ProductKind.GENERIC
    lowered = str(category).lower()
    for token, kind in CATEGORY_TOKENS:
        if token in lowered:
            return kind
    return ProductKind.GENERIC


def resolve_kind(category: CategoryLike) -> ProductKind:
    """Accept either a raw category string or an already classified kind."""
    if isinstance(category, ProductKind):
        return category
    return classify_category(category)


def grouping_kind(kind: ProductKind) -> str:
    return GROUPING_KINDS[kind]
