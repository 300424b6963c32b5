"""
Valuation Estimator for CMA reports.

A fixed-formula estimate, NOT an automated valuation model:
- Base value = square footage x configured rate per sqft
- Pool and waterfront add fixed amounts
- Excellent / poor condition scale the result
- Low / mid / high band at 95% / 100% / 108%

No regression against sold comparables is performed. Comparables only
drive the confidence label and are normalised for side-by-side display.
"""

from typing import Iterable, List

from .errors import InvalidSearchError
from .models import Condition, Confidence, ReferenceProperty, ScoredCandidate, ValuationResult
from .scoring import round_half_up


# =============================================================================
# Configuration Constants
# =============================================================================

DEFAULT_BASE_RATE_PER_SQFT = 250

POOL_ADJUSTMENT = 25_000
WATERFRONT_ADJUSTMENT = 100_000

CONDITION_MULTIPLIERS = {
    Condition.EXCELLENT: 1.10,
    Condition.POOR: 0.85,
}

LOW_BAND_FACTOR = 0.95
HIGH_BAND_FACTOR = 1.08

# Comparables needed for a "high" confidence label
MIN_COMPS_FOR_HIGH_CONFIDENCE = 3

# Dollars per square foot of size difference when normalising comparables
SQFT_PRICE_ADJUSTMENT = 100

VALUATION_DISCLAIMER = (
    "This estimate is derived from a fixed per-square-foot rate with standard "
    "adjustments. It is not an appraisal or an automated valuation model."
)

# Static placeholders until market data is wired in
MARKET_INSIGHTS = {
    "avg_days_on_market": 28,
    "price_trend": 4.5,
    "inventory_level": "Low",
    "buyer_demand": "High",
}


class ValuationEstimator:
    """
    Derives a valuation band for a CMA subject.

    Args:
        base_rate_per_sqft: Dollars per square foot before adjustments
    """

    def __init__(self, base_rate_per_sqft: float = DEFAULT_BASE_RATE_PER_SQFT):
        if base_rate_per_sqft <= 0:
            raise ValueError("base_rate_per_sqft must be positive")
        self._base_rate = base_rate_per_sqft

    @property
    def base_rate_per_sqft(self) -> float:
        return self._base_rate

    def adjusted_value(self, subject: ReferenceProperty) -> float:
        """
        Subject value after amenity and condition adjustments (unrounded).

        Pool and waterfront are additive and independent of condition;
        the condition multiplier applies to the adjusted total.
        """
        if not subject.has_known_sqft:
            raise InvalidSearchError("Subject property must have a positive square footage")

        value = subject.square_feet * self._base_rate
        if subject.pool:
            value += POOL_ADJUSTMENT
        if subject.waterfront:
            value += WATERFRONT_ADJUSTMENT

        value *= CONDITION_MULTIPLIERS.get(subject.condition, 1.0)
        return value

    def estimate(self, subject: ReferenceProperty, comparable_count: int) -> ValuationResult:
        """
        Compute the valuation band and confidence label.

        Args:
            subject: Property being valued
            comparable_count: Size of the comparable pool

        Returns:
            ValuationResult with low <= mid <= high
        """
        value = self.adjusted_value(subject)
        return ValuationResult(
            low=round_half_up(value * LOW_BAND_FACTOR),
            mid=round_half_up(value),
            high=round_half_up(value * HIGH_BAND_FACTOR),
            confidence=confidence_for(comparable_count),
        )

    def normalise_comparables(
        self,
        subject: ReferenceProperty,
        comparables: Iterable[ScoredCandidate],
    ) -> List[ScoredCandidate]:
        """
        Fill adjusted_price and price_per_sqft on each comparable.

        adjusted_price = price + (subject sqft - comp sqft) x 100. Both stay
        None when the comparable's square footage is unknown.
        """
        result = []
        for comp in comparables:
            prop = comp.property
            if prop.has_known_sqft and subject.has_known_sqft:
                comp.adjusted_price = prop.price + (subject.square_feet - prop.square_feet) * SQFT_PRICE_ADJUSTMENT
                comp.price_per_sqft = round_half_up(prop.price / prop.square_feet)
            result.append(comp)
        return result


def confidence_for(comparable_count: int) -> Confidence:
    """High with at least three comparables, otherwise medium."""
    if comparable_count >= MIN_COMPS_FOR_HIGH_CONFIDENCE:
        return Confidence.HIGH
    return Confidence.MEDIUM
