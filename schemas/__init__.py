"""
Catalog Schemas Package
Provides the record shapes consumed and produced by the variant and pricing engine.
"""

from .catalog_schemas import (
    # Errors
    InvalidRecordError,

    # Inbound records
    Variant,
    Product,
    LineItemVariant,
    BundleLineItem,
    DiscountTier,

    # Outbound records
    OrganizedVariant,
    OrganizedVariantDict,
    VariantGroup,
    VariantGroupDict,
    Grouping,
    GroupingDict,
    PriceBreakdown,
    PriceBreakdownDict,
    CompleteTheLookPrice,
    ScoredCandidate,
    ScoredCandidateDict,
    ShirtFit,
    SuitSizeCell,

    # Defaults
    DEFAULT_DISCOUNT_TIERS,

    # Helper functions
    as_variant,
    as_product,
    as_line_item,
    as_tier,
    to_money,
    quantize_money,
)
