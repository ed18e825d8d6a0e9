"""
Recommendation Scorer
Additive cross-sell scoring: declared pairings, category affinity, colour overlap and price proximity
"""
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple
import logging

import settings
from schemas.catalog_schemas import Product, ScoredCandidate, as_product
from services.category import ProductKind, resolve_kind
from services.feature_flags import engine_flags
from services.size_translation import suggest_size

logger = logging.getLogger(__name__)


class RecommendationScorer:
    """Ranks catalog candidates against the product being viewed"""

    def __init__(self, max_items: Optional[int] = None, size_suggestions: Optional[bool] = None):
        self.max_items = settings.resolve_max_items(
            max_items, engine_flags.get_flag("recommendations.max_items")
        )
        if size_suggestions is None:
            size_suggestions = engine_flags.get_flag("recommendations.size_suggestions", True)
        self.size_suggestions = bool(size_suggestions)

        self.weights: Dict[str, int] = {
            "pairs_well_with": 10,   # candidate category declared as companion
            "color_match": 5,        # shares at least one variant colour
            "price_proximity": 3,    # within the proximity ratio of current price
        }

        # (current kind, candidate kind) -> bonus
        self.category_affinity: Dict[Tuple[ProductKind, ProductKind], int] = {
            (ProductKind.SUIT, ProductKind.SHIRT): 8,
            (ProductKind.SUIT, ProductKind.TIE): 7,
            (ProductKind.SHIRT, ProductKind.TIE): 6,
        }

        self.price_proximity_ratio = 0.5

    def score(self, current: Any, candidates: Sequence[Any], max_items: Optional[int] = None,
              selected_size: Optional[str] = None) -> List[ScoredCandidate]:
        """Score, stable-sort descending and truncate candidates.

        selected_size is the size picked on the current product; when given,
        each result is annotated with a suggested size.
        """
        current_product = as_product(current)
        candidate_products = [as_product(c) for c in candidates]
        limit = self._resolve_limit(max_items)

        current_kind = resolve_kind(current_product.category)
        current_colors = self._colors(current_product)
        annotate = selected_size is not None and self.size_suggestions

        scored: List[ScoredCandidate] = []
        for candidate in candidate_products:
            components = self.score_components(current_product, current_kind, current_colors, candidate)
            scored.append(ScoredCandidate(
                product=candidate,
                score=sum(components.values()),
                components=components,
                suggested_size=(
                    suggest_size(current_product, candidate, selected_size) if annotate else None
                ),
            ))

        # Python's sort is stable: equal scores keep input order.
        scored.sort(key=lambda c: c.score, reverse=True)
        ranked = scored[:limit]

        logger.debug(
            f"Scored {len(candidate_products)} candidates for {current_product.id}, returning {len(ranked)}"
        )
        return ranked

    def score_components(self, current: Product, current_kind: ProductKind,
                         current_colors: Set[str], candidate: Product) -> Dict[str, int]:
        components: Dict[str, int] = {}

        if candidate.category in current.pairs_well_with:
            components["pairs_well_with"] = self.weights["pairs_well_with"]

        affinity = self.category_affinity.get((current_kind, resolve_kind(candidate.category)), 0)
        if affinity:
            components["category_affinity"] = affinity

        if current_colors & self._colors(candidate):
            components["color_match"] = self.weights["color_match"]

        if current.price > 0:
            price_diff = abs(candidate.price - current.price) / current.price
            if price_diff < self.price_proximity_ratio:
                components["price_proximity"] = self.weights["price_proximity"]

        return components

    @staticmethod
    def _colors(product: Product) -> Set[str]:
        return {v.color for v in product.variants if v.color}

    def _resolve_limit(self, max_items: Optional[int]) -> int:
        if max_items is not None:
            try:
                return max(0, int(max_items))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring unusable max_items={max_items!r}")
        return self.max_items


# Global scorer instance
recommendation_scorer = RecommendationScorer()


def score(current: Any, candidates: Sequence[Any], max_items: Optional[int] = None,
          selected_size: Optional[str] = None) -> List[ScoredCandidate]:
    return recommendation_scorer.score(current, candidates, max_items, selected_size)
