"""
Similarity scoring and ranking for the Comparable Property Engine.

An additive weighted model: start at 100, subtract distance penalties,
add exact-match bonuses. Price and square footage dominate; city and type
matches act as bounded tiebreaks.
"""

import math
from typing import Iterable, List, Union

from .models import Property, ReferenceProperty, ScoredCandidate


# =============================================================================
# Scoring Weights
# =============================================================================

BASE_SCORE = 100

PRICE_PENALTY_WEIGHT = 30      # per 100% relative price difference
BEDROOM_PENALTY_WEIGHT = 10    # per bedroom
CITY_MATCH_BONUS = 10
TYPE_MATCH_BONUS = 15
SQFT_PENALTY_WEIGHT = 20       # per 100% relative sqft difference


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 away from zero for positives."""
    return int(math.floor(value + 0.5))


class SimilarityScorer:
    """
    Pure function of (reference, candidate).

    Terms are applied in a fixed order:
    1. Price distance penalty (only when the reference has a price)
    2. Bedroom distance penalty
    3. City match bonus (case-sensitive)
    4. Property type match bonus (two missing types count as a match)
    5. Square footage distance penalty (only when both are known)
    The result is floored at 0 and rounded half up.
    """

    def raw_score(self, reference: ReferenceProperty, candidate: Property) -> float:
        """Unrounded, unclamped score."""
        score = float(BASE_SCORE)

        if reference.has_price:
            price_diff = abs(candidate.price - reference.price) / reference.price
            score -= PRICE_PENALTY_WEIGHT * price_diff

        score -= BEDROOM_PENALTY_WEIGHT * abs(candidate.bedrooms - reference.bedrooms)

        if candidate.city == reference.city:
            score += CITY_MATCH_BONUS

        if candidate.property_type == reference.property_type:
            score += TYPE_MATCH_BONUS

        if reference.has_known_sqft and candidate.has_known_sqft:
            sqft_diff = abs(candidate.square_feet - reference.square_feet) / reference.square_feet
            score -= SQFT_PENALTY_WEIGHT * sqft_diff

        return score

    def score(self, reference: ReferenceProperty, candidate: Property) -> int:
        """Final similarity score, an integer >= 0."""
        return max(0, round_half_up(self.raw_score(reference, candidate)))

    def score_all(
        self,
        reference: ReferenceProperty,
        candidates: Iterable[Property],
    ) -> List[ScoredCandidate]:
        """Score each candidate, preserving input order."""
        return [
            ScoredCandidate(property=c, similarity_score=self.score(reference, c))
            for c in candidates
        ]


def rank_and_truncate(
    scored: Iterable[ScoredCandidate],
    limit: Union[int, None],
) -> List[ScoredCandidate]:
    """
    Sort by score descending, then price ascending, and keep the top limit.

    Sorting is stable, so fully tied candidates keep their input order.
    """
    ranked = sorted(scored, key=lambda c: (-c.similarity_score, c.price))
    if limit is None:
        return ranked
    return ranked[:max(0, limit)]
