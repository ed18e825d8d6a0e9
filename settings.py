"""
Centralized configuration for the variant and pricing engine.
"""
from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL: str = (os.getenv("LOG_LEVEL") or "INFO").upper()

# Symbol prepended by format_price() when the caller does not pass one.
CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL") or "$"


def _parse_limit(value: Optional[Any]) -> Optional[int]:
    """Parse a recommendation limit; returns None for unusable values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    if parsed < 0:
        return None
    return parsed


DEFAULT_RECOMMENDATION_LIMIT: int = _parse_limit(os.getenv("DEFAULT_RECOMMENDATION_LIMIT")) or 4


def resolve_max_items(*candidates: Optional[Any]) -> int:
    """
    Pick the first usable (non-negative integer) limit from candidates,
    otherwise fall back to DEFAULT_RECOMMENDATION_LIMIT.
    """
    for candidate in candidates:
        parsed = _parse_limit(candidate)
        if parsed is not None:
            return parsed
    return DEFAULT_RECOMMENDATION_LIMIT
