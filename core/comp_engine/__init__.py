"""
Comparable Property Engine

Comparable selection, similarity scoring and fixed-formula CMA valuation
over stored property records.
"""

from .models import (
    Property,
    ReferenceProperty,
    ScoredCandidate,
    CandidateSelection,
    ValuationResult,
    PropertyType,
    ListingStatus,
    Condition,
    Confidence,
)
from .errors import (
    CompEngineError,
    InvalidSearchError,
    PropertyNotFoundError,
    StorageError,
)
from .filters import (
    SelectionPolicy,
    SIMILAR_LISTINGS_POLICY,
    cma_policy,
    CandidateFilter,
    FallbackExpander,
)
from .scoring import SimilarityScorer, rank_and_truncate
from .valuation import ValuationEstimator
from .engine import ComparablePropertyEngine

__all__ = [
    # Models
    "Property",
    "ReferenceProperty",
    "ScoredCandidate",
    "CandidateSelection",
    "ValuationResult",
    "PropertyType",
    "ListingStatus",
    "Condition",
    "Confidence",
    # Errors
    "CompEngineError",
    "InvalidSearchError",
    "PropertyNotFoundError",
    "StorageError",
    # Engine
    "SelectionPolicy",
    "SIMILAR_LISTINGS_POLICY",
    "cma_policy",
    "CandidateFilter",
    "FallbackExpander",
    "SimilarityScorer",
    "rank_and_truncate",
    "ValuationEstimator",
    "ComparablePropertyEngine",
]

__version__ = "1.0"
