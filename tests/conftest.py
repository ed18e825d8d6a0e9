"""
Shared fixtures for the variant and pricing engine tests.
"""
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.feature_flags import engine_flags


@pytest.fixture(autouse=True)
def reset_engine_flags():
    """Flags are process-global; every test starts from the defaults."""
    engine_flags.reset_flags()
    yield
    engine_flags.reset_flags()


# ============================================================================
# Fixtures: Catalog Data
# ============================================================================

@pytest.fixture
def suit_variants() -> list:
    """Suit variants as posted by the storefront client (camelCase)."""
    return [
        {"id": "s1", "name": "Navy Suit - 42R", "sku": "SUIT-NAVY-42R", "color": "Navy", "stock": 3, "isActive": True},
        {"id": "s2", "name": "Navy Suit - 38R", "sku": "SUIT-NAVY-38R", "color": "Navy", "stock": 0, "isActive": True},
        {"id": "s3", "name": "Navy Suit - 40L", "sku": "SUIT-NAVY-40L", "color": "Navy", "stock": 5, "isActive": True},
        {"id": "s4", "name": "Navy Suit - 40S", "sku": "SUIT-NAVY-40S", "color": "Navy", "stock": 2, "isActive": True},
        {"id": "s5", "name": "Navy Suit - 40R", "sku": "SUIT-NAVY-40R", "color": "Navy", "stock": 7, "isActive": True},
        {"id": "s6", "name": "Navy Suit", "sku": "SUIT-NAVY", "color": "Navy", "stock": 1, "isActive": True},
    ]


@pytest.fixture
def tie_variants() -> list:
    return [
        {"id": "t1", "name": "Silk Tie - Burgundy", "sku": "TIE-BUR-1", "stock": 4, "isActive": True},
        {"id": "t2", "name": "Silk Tie - Navy Blue", "sku": "TIE-NAV-1", "stock": 12, "isActive": True},
        {"id": "t3", "name": "Silk Tie - Burgundy", "sku": "TIE-BUR-2", "stock": 3, "isActive": True},
        {"id": "t4", "name": "Silk Tie", "sku": "TIE-PLAIN", "stock": 0, "isActive": True},
    ]


@pytest.fixture
def shirt_variants() -> list:
    return [
        {"id": "d1", "name": "Dress Shirt 16.5", "sku": "DS-165", "stock": 2, "isActive": True},
        {"id": "d2", "name": "Dress Shirt 15", "sku": "DS-15", "stock": 6, "isActive": True},
        {"id": "d3", "name": "Dress Shirt 15.5", "sku": "DS-155", "stock": 0, "isActive": True},
        {"id": "d4", "name": "Dress Shirt", "sku": "DS-X", "stock": 1, "isActive": True},
        {"id": "d5", "name": "Dress Shirt 16", "sku": "DS-16", "stock": 4, "isActive": True},
    ]


@pytest.fixture
def suit_product(suit_variants) -> dict:
    return {
        "id": "suit-1",
        "name": "Navy Suit",
        "category": "Suits",
        "price": 400,
        "variants": suit_variants,
        "pairsWellWith": ["Ties"],
    }
