"""
CMA Generator - Comparative Market Analysis reports

Combines the Comparable Property Engine (CMA policy) with the fixed-formula
Valuation Estimator. The subject may be an ad-hoc property that is not
stored anywhere.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from core.storage.base import PropertyStore

from .comp_engine import (
    ComparablePropertyEngine,
    ReferenceProperty,
    ScoredCandidate,
    ValuationEstimator,
    ValuationResult,
    cma_policy,
)
from .comp_engine.valuation import (
    DEFAULT_BASE_RATE_PER_SQFT,
    MARKET_INSIGHTS,
    MIN_COMPS_FOR_HIGH_CONFIDENCE,
    VALUATION_DISCLAIMER,
)


logger = logging.getLogger(__name__)

DEFAULT_CMA_LIMIT = 10


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CMAReport:
    """A generated comparative market analysis."""
    subject: ReferenceProperty
    comparables: List[ScoredCandidate]
    valuation: ValuationResult
    generated_at: datetime

    # Distinct comparables found before truncation; drives confidence
    pool_size: int = 0
    base_rate_per_sqft: float = DEFAULT_BASE_RATE_PER_SQFT
    market_insights: dict = field(default_factory=lambda: dict(MARKET_INSIGHTS))
    disclaimer: str = VALUATION_DISCLAIMER

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "subject_property": self.subject.to_subject_dict(),
            "comparables": [c.to_comparable_dict() for c in self.comparables],
            "valuation": self.valuation.to_dict(),
            "market_insights": dict(self.market_insights),
            "generated_at": self.generated_at.isoformat(),
            "disclaimer": self.disclaimer,
        }


class CMAGenerator:
    """
    Generates CMA reports from stored comparables.

    Args:
        store: Property store to draw comparables from
        base_rate_per_sqft: Valuation base rate
        include_sold: Whether sold properties are eligible comparables
        clock: Source of generated_at timestamps
    """

    def __init__(
        self,
        store: PropertyStore,
        base_rate_per_sqft: float = DEFAULT_BASE_RATE_PER_SQFT,
        include_sold: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._engine = ComparablePropertyEngine(store, policy=cma_policy(include_sold))
        self._estimator = ValuationEstimator(base_rate_per_sqft)
        self._clock = clock or utc_now

    def generate(self, subject: ReferenceProperty, limit: int = DEFAULT_CMA_LIMIT) -> CMAReport:
        """
        Build a CMA report for a subject property.

        The comparable pool is queried with at least three slots so the
        confidence label is not narrowed by a small caller limit.

        Raises:
            InvalidSearchError: If the subject lacks city, bedrooms or sqft
            StorageError: If the comparable query fails
        """
        selection = self._engine.select(
            subject,
            limit,
            min_pool=MIN_COMPS_FOR_HIGH_CONFIDENCE,
        )
        comparables = self._estimator.normalise_comparables(subject, selection.candidates)
        valuation = self._estimator.estimate(subject, selection.pool_size)

        logger.info(
            "CMA for %s, %s: %d comparables, confidence %s",
            subject.address or "(no address)",
            subject.city,
            len(comparables),
            valuation.confidence.value,
        )

        return CMAReport(
            subject=subject,
            comparables=comparables,
            valuation=valuation,
            generated_at=self._clock(),
            pool_size=selection.pool_size,
            base_rate_per_sqft=self._estimator.base_rate_per_sqft,
        )
