"""
Tests for CMA generation

Covers:
- Valuation formula (base rate, amenities, condition, band)
- Confidence threshold at three comparables
- Comparable normalisation (adjusted price, price per sqft)
- Report assembly and serialisation
"""

import pytest
from datetime import datetime, timezone
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.cma import CMAGenerator
from core.comp_engine import (
    Condition,
    Confidence,
    InvalidSearchError,
    ListingStatus,
    Property,
    ReferenceProperty,
    ScoredCandidate,
    ValuationEstimator,
)
from core.comp_engine.valuation import MARKET_INSIGHTS, confidence_for
from core.storage import InMemoryPropertyStore


FIXED_TIME = datetime(2024, 6, 1, 12, 30, 0, tzinfo=timezone.utc)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def estimator():
    return ValuationEstimator(base_rate_per_sqft=250)


@pytest.fixture
def create_subject():
    """Factory fixture for ad-hoc CMA subjects."""
    def _create(
        square_feet: int = 2000,
        pool: bool = False,
        waterfront: bool = False,
        condition: Condition = Condition.AVERAGE,
        bedrooms: int = 3,
    ) -> ReferenceProperty:
        return ReferenceProperty(
            city="Naples",
            bedrooms=bedrooms,
            square_feet=square_feet,
            address="123 Palm Ave",
            state="FL",
            pool=pool,
            waterfront=waterfront,
            condition=condition,
        )
    return _create


@pytest.fixture
def comparable_store():
    """Four Naples comparables inside the 20% sqft band, one sold."""
    return InMemoryPropertyStore([
        Property(id="c1", city="Naples", price=520000, bedrooms=3, square_feet=2100),
        Property(id="c2", city="Naples", price=480000, bedrooms=3, square_feet=1900),
        Property(id="c3", city="Naples", price=610000, bedrooms=4, square_feet=2300,
                 status=ListingStatus.SOLD, sold_price=600000),
        Property(id="c4", city="Naples", price=455000, bedrooms=2, square_feet=1700,
                 status=ListingStatus.PENDING),
    ])


# =============================================================================
# Test: Valuation Formula
# =============================================================================

class TestValuationFormula:
    """Tests for the fixed-formula estimate."""

    def test_pool_and_excellent_condition(self, estimator, create_subject):
        """2000 sqft x 250 + 25,000 pool, x 1.10 excellent."""
        subject = create_subject(pool=True, condition=Condition.EXCELLENT)

        result = estimator.estimate(subject, 5)

        assert result.mid == 577500
        assert result.low == 548625
        assert result.high == 623700

    def test_plain_subject(self, estimator, create_subject):
        result = estimator.estimate(create_subject(), 5)

        assert result.mid == 500000
        assert result.low == 475000
        assert result.high == 540000

    def test_waterfront_adds_100k(self, estimator, create_subject):
        result = estimator.estimate(create_subject(waterfront=True), 5)

        assert result.mid == 600000

    def test_poor_condition(self, estimator, create_subject):
        result = estimator.estimate(create_subject(condition=Condition.POOR), 5)

        assert result.mid == 425000

    @pytest.mark.parametrize("condition", [Condition.GOOD, Condition.AVERAGE, Condition.FAIR])
    def test_neutral_conditions(self, estimator, create_subject, condition):
        result = estimator.estimate(create_subject(condition=condition), 5)

        assert result.mid == 500000

    def test_band_ordering(self, estimator, create_subject):
        result = estimator.estimate(create_subject(square_feet=1337, pool=True), 1)

        assert result.low <= result.mid <= result.high

    def test_larger_subject_never_cheaper(self, estimator, create_subject):
        small = estimator.estimate(create_subject(square_feet=1800), 3)
        large = estimator.estimate(create_subject(square_feet=1801), 3)

        assert large.mid >= small.mid

    def test_missing_sqft_rejected(self, estimator, create_subject):
        with pytest.raises(InvalidSearchError):
            estimator.estimate(create_subject(square_feet=None), 3)

    def test_base_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            ValuationEstimator(base_rate_per_sqft=0)

    def test_custom_base_rate(self, create_subject):
        result = ValuationEstimator(base_rate_per_sqft=300).estimate(create_subject(), 3)

        assert result.mid == 600000


# =============================================================================
# Test: Confidence
# =============================================================================

class TestConfidence:
    """Confidence label depends only on the comparable count."""

    @pytest.mark.parametrize("count,expected", [
        (0, Confidence.MEDIUM),
        (2, Confidence.MEDIUM),
        (3, Confidence.HIGH),
        (10, Confidence.HIGH),
    ])
    def test_threshold(self, count, expected):
        assert confidence_for(count) == expected


# =============================================================================
# Test: Comparable Normalisation
# =============================================================================

class TestNormaliseComparables:

    def test_adjusted_price_and_price_per_sqft(self, estimator, create_subject):
        comp = ScoredCandidate(
            property=Property(id="c", city="Naples", price=480000, bedrooms=3, square_feet=1900),
            similarity_score=100,
        )

        [result] = estimator.normalise_comparables(create_subject(), [comp])

        assert result.adjusted_price == 480000 + 100 * 100
        assert result.price_per_sqft == 253

    def test_unknown_sqft_left_blank(self, estimator, create_subject):
        comp = ScoredCandidate(
            property=Property(id="c", city="Naples", price=480000, bedrooms=3),
            similarity_score=100,
        )

        [result] = estimator.normalise_comparables(create_subject(), [comp])

        assert result.adjusted_price is None
        assert result.price_per_sqft is None


# =============================================================================
# Test: CMA Generator
# =============================================================================

class TestCMAGenerator:
    """Report assembly over an in-memory store."""

    def test_report_contents(self, comparable_store, create_subject):
        generator = CMAGenerator(comparable_store, clock=lambda: FIXED_TIME)

        report = generator.generate(create_subject(pool=True, condition=Condition.EXCELLENT))
        data = report.to_dict()

        assert data["valuation"] == {
            "low": 548625, "mid": 577500, "high": 623700, "confidence": "high",
        }
        assert data["generated_at"] == "2024-06-01T12:30:00+00:00"
        assert data["market_insights"] == MARKET_INSIGHTS
        assert data["subject_property"]["condition"] == "excellent"
        assert {c["id"] for c in data["comparables"]} == {"c1", "c2", "c3", "c4"}
        assert all("adjusted_price" in c for c in data["comparables"])
        assert data["disclaimer"]

    def test_sold_excluded_when_disabled(self, comparable_store, create_subject):
        generator = CMAGenerator(comparable_store, include_sold=False, clock=lambda: FIXED_TIME)

        report = generator.generate(create_subject())

        # Equal scores, so cheaper first
        assert [c.id for c in report.comparables] == ["c2", "c1"]

    def test_confidence_uses_pool_not_limit(self, comparable_store, create_subject):
        """A limit of one still reports high confidence with four comps available."""
        generator = CMAGenerator(comparable_store, clock=lambda: FIXED_TIME)

        report = generator.generate(create_subject(), limit=1)

        assert len(report.comparables) == 1
        assert report.valuation.confidence == Confidence.HIGH
        assert report.pool_size == 3

    def test_few_comparables_medium_confidence(self, create_subject):
        store = InMemoryPropertyStore([
            Property(id="only", city="Naples", price=500000, bedrooms=3, square_feet=2000),
        ])

        report = CMAGenerator(store, clock=lambda: FIXED_TIME).generate(create_subject())

        assert report.valuation.confidence == Confidence.MEDIUM
        assert len(report.comparables) == 1

    def test_no_comparables_still_values(self, create_subject):
        report = CMAGenerator(InMemoryPropertyStore(), clock=lambda: FIXED_TIME).generate(create_subject())

        assert report.comparables == []
        assert report.valuation.mid == 500000
        assert report.valuation.confidence == Confidence.MEDIUM

    def test_subject_without_sqft_rejected(self, comparable_store, create_subject):
        with pytest.raises(InvalidSearchError):
            CMAGenerator(comparable_store).generate(create_subject(square_feet=None))
