"""
Engine Flags
Runtime switches for the variant and pricing engine with change history
"""
from typing import Dict, List, Any, Optional
import logging
from datetime import datetime, timezone
from dataclasses import dataclass, asdict
import threading

import settings

logger = logging.getLogger(__name__)


@dataclass
class FlagChange:
    """One recorded flag change"""
    key: str
    value: Any
    previous: Any
    updated_by: str
    updated_at: str


class EngineFlagsManager:
    """Manages the engine's runtime flags"""

    def __init__(self):
        self.default_flags: Dict[str, Any] = {
            # Normalizer
            "normalizer.infer_from_name": True,

            # Organizer
            "organizer.trace_enabled": True,

            # Pricing
            "pricing.use_default_tiers": True,

            # Recommendations
            "recommendations.max_items": settings.DEFAULT_RECOMMENDATION_LIMIT,
            "recommendations.size_suggestions": True,
        }

        self._flag_cache: Dict[str, Any] = self.default_flags.copy()
        self.change_history: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def get_flag(self, flag_key: str, default: Any = None) -> Any:
        """Get flag value, falling back to default for unknown keys"""
        return self._flag_cache.get(flag_key, default)

    def get_all_flags(self) -> Dict[str, Any]:
        return self._flag_cache.copy()

    def set_flag(self, flag_key: str, value: Any, updated_by: str = "system") -> bool:
        """Set flag value. Unknown keys are rejected."""
        if flag_key not in self.default_flags:
            logger.warning(f"Invalid flag key: {flag_key}")
            return False

        with self._lock:
            previous = self._flag_cache.get(flag_key)
            self._flag_cache[flag_key] = value
            self._record_flag_change(flag_key, value, previous, updated_by)

        logger.info(f"Set flag {flag_key}={value} by {updated_by}")
        return True

    def reset_flags(self) -> None:
        """Restore every flag to its default value"""
        with self._lock:
            self._flag_cache = self.default_flags.copy()
            self.change_history.clear()

    def get_flag_diagnostics(self) -> Dict[str, Any]:
        overridden = sorted(
            key for key, value in self._flag_cache.items()
            if self.default_flags.get(key) != value
        )
        return {
            "total_flags": len(self._flag_cache),
            "overridden_flags": overridden,
            "recent_changes": self.change_history[-10:],
        }

    def _record_flag_change(self, flag_key: str, value: Any, previous: Any, updated_by: str):
        change = FlagChange(
            key=flag_key,
            value=value,
            previous=previous,
            updated_by=updated_by,
            updated_at=datetime.now(timezone.utc).isoformat(),
        )
        self.change_history.append(asdict(change))
        # Keep the last 100 changes
        if len(self.change_history) > 100:
            self.change_history = self.change_history[-100:]


# Global engine flags instance
engine_flags = EngineFlagsManager()
