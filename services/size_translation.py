"""
Size Translation
Static suit -> shirt size tables used to annotate cross-sell candidates with a suggested size
"""
from typing import Dict, Optional, Tuple, Union
import logging
import re

from schemas.catalog_schemas import Product, ShirtFit
from services.category import ProductKind, resolve_kind
from services.variant_organizer import parse_leading_number

logger = logging.getLogger(__name__)

# Suit size -> shirt neck size shown on suit pages
SUIT_TO_SHIRT_NECK: Dict[str, str] = {
    "38R": "15",
    "40R": "15.5",
    "42R": "16",
    "44R": "16.5",
    "46R": "17",
    "48R": "17.5",
}

# Slim fit: full suit size -> (shirt size, neck, sleeve)
SLIM_FIT_MAPPING: Dict[str, Tuple[str, float, int]] = {
    "36R": ("XS", 14, 33),
    "36S": ("XS", 14, 33),
    "38R": ("S", 14.5, 33),
    "38S": ("S", 14.5, 33),
    "40R": ("M", 15.5, 33),
    "40S": ("M", 15.5, 33),
    "40L": ("L", 16, 35),
    "42S": ("L", 16, 35),
    "42R": ("XL", 16.5, 35),
    "42L": ("XL", 16.5, 35),
    "44R": ("XXL", 17.5, 35),
    "44L": ("XXL", 17.5, 35),
    "46R": ("XXL", 17.5, 35),
    "46L": ("XXL", 17.5, 35),
}

# Classic fit: chest -> neck, length -> sleeve range
CLASSIC_FIT_NECK: Dict[str, float] = {
    "36": 14.5, "38": 15, "40": 15.5, "42": 16, "44": 16.5, "46": 17, "48": 17.5,
    "50": 18, "52": 18.5, "54": 19, "56": 19.5, "58": 20, "60": 20.5,
}
CLASSIC_FIT_SLEEVE: Dict[str, str] = {
    "S": "32-33",
    "R": "34-35",
    "L": "36-37",
}

SUIT_SIZE_PARTS = re.compile(r"^(\d+)([SRLT])$")


def _format_neck(neck: Union[int, float]) -> str:
    return f"{neck:g}"


def shirt_neck_for_suit(suit_size: Optional[str]) -> Optional[str]:
    if not suit_size:
        return None
    return SUIT_TO_SHIRT_NECK.get(suit_size)


def recommend_shirt_fit(suit_size: str, fit: str = "slim") -> Optional[ShirtFit]:
    """Shirt size for a suit size; slim uses the fitted table, classic derives neck x sleeve"""
    if fit == "slim" and suit_size in SLIM_FIT_MAPPING:
        size, neck, sleeve = SLIM_FIT_MAPPING[suit_size]
        return ShirtFit(size=size, neck=float(neck), sleeve=str(sleeve))

    match = SUIT_SIZE_PARTS.match(suit_size or "")
    if not match:
        return None
    chest, length = match.groups()
    neck = CLASSIC_FIT_NECK.get(chest)
    sleeve = CLASSIC_FIT_SLEEVE.get(length)
    if neck is None or sleeve is None:
        return None
    return ShirtFit(size=f"{_format_neck(neck)} x {sleeve}", neck=float(neck), sleeve=sleeve)


def _sizes_match(candidate_size: Optional[str], wanted: str) -> bool:
    if not candidate_size:
        return False
    if candidate_size == wanted:
        return True
    candidate_value = parse_leading_number(candidate_size)
    wanted_value = parse_leading_number(wanted)
    return candidate_value is not None and candidate_value == wanted_value


def suggest_size(current: Product, candidate: Product, selected_size: Optional[str]) -> Optional[str]:
    """Size to preselect on a cross-sell card.

    Exact in-stock match first, then the suit -> shirt neck table, then the
    candidate's first in-stock size. Never affects scoring.
    """
    if not candidate.variants:
        return None

    if selected_size:
        exact = next(
            (v for v in candidate.variants if v.size == selected_size and v.stock > 0), None
        )
        if exact is not None:
            return exact.size

        current_kind = resolve_kind(current.category)
        candidate_kind = resolve_kind(candidate.category)
        if current_kind is ProductKind.SUIT and candidate_kind is ProductKind.SHIRT:
            neck = shirt_neck_for_suit(selected_size)
            if neck is not None:
                mapped = next(
                    (v for v in candidate.variants if v.stock > 0 and _sizes_match(v.size, neck)),
                    None,
                )
                if mapped is not None:
                    return mapped.size

    first_in_stock = next((v for v in candidate.variants if v.stock > 0), None)
    return first_in_stock.size if first_in_stock else None
