"""
Variant Normalizer
Derives missing size/colour fields from a variant's free-text name
"""
from typing import Any, Dict, Iterable, List, Optional
import logging
import re

from schemas.catalog_schemas import Variant, as_variant
from services.category import CategoryLike, ProductKind, resolve_kind
from services.feature_flags import engine_flags

logger = logging.getLogger(__name__)

NO_COLOR = "No Color"
NO_SIZE = "No Size"

TIE_COLOR_SEPARATOR = " - "
# "42R", "38S", "46L"
SUIT_SIZE_PATTERN = re.compile(r"\d{2}[RSL]")
# "15", "15.5"
SHIRT_SIZE_PATTERN = re.compile(r"\d+(?:\.\d)?")
INCH_MARK = '"'


class VariantNormalizer:
    """Fills display fields on a copy of the variant; the source record is never touched"""

    def __init__(self, infer_from_name: Optional[bool] = None):
        # Flags are read once here; later flag changes only affect new instances
        if infer_from_name is None:
            infer_from_name = engine_flags.get_flag("normalizer.infer_from_name", True)
        self.infer_from_name = bool(infer_from_name)

    def normalize(self, variant: Any, category: CategoryLike) -> Variant:
        """Return an enriched copy of variant. Idempotent for a given category."""
        record = as_variant(variant)
        kind = resolve_kind(category)
        updates: Dict[str, Any] = {}

        if kind is ProductKind.TIE and not record.color:
            updates["color"] = self.infer_tie_color(record.name) or NO_COLOR
        elif kind is ProductKind.SUIT and not record.size:
            updates["size"] = self.infer_suit_size(record.name) or NO_SIZE
        elif kind is ProductKind.SHIRT and not record.size:
            updates["size"] = self.infer_shirt_size(record.name) or NO_SIZE

        if not updates:
            return record
        return record.model_copy(update=updates)

    def normalize_all(self, variants: Iterable[Any], category: CategoryLike) -> List[Variant]:
        kind = resolve_kind(category)
        return [self.normalize(v, kind) for v in variants]

    def infer_tie_color(self, name: str) -> Optional[str]:
        """Colour is whatever follows the last " - " in the name"""
        if not self.infer_from_name or TIE_COLOR_SEPARATOR not in name:
            return None
        color = name.rsplit(TIE_COLOR_SEPARATOR, 1)[1].strip()
        return color or None

    def infer_suit_size(self, name: str) -> Optional[str]:
        if not self.infer_from_name:
            return None
        match = SUIT_SIZE_PATTERN.search(name)
        return match.group(0) if match else None

    def infer_shirt_size(self, name: str) -> Optional[str]:
        if not self.infer_from_name:
            return None
        match = SHIRT_SIZE_PATTERN.search(name)
        return f"{match.group(0)}{INCH_MARK}" if match else None


# Global normalizer instance
variant_normalizer = VariantNormalizer()


def normalize(variant: Any, category: CategoryLike) -> Variant:
    return variant_normalizer.normalize(variant, category)
