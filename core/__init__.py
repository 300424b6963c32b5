"""
Comparable Property Engine - Core Business Logic

This module provides the comparable property pipeline:
1. Storage access (PropertyStore, schema-checked rows)
2. Candidate Filter (city, price band, bedroom band)
3. Fallback Expander (drops the city constraint, best-effort)
4. Similarity Scorer (additive weighted model)
5. Rank & Truncate
6. Valuation Estimator (CMA only, fixed formula)
"""

from .comp_engine import (
    Property,
    ReferenceProperty,
    ScoredCandidate,
    CandidateSelection,
    ValuationResult,
    PropertyType,
    ListingStatus,
    Condition,
    Confidence,
    CompEngineError,
    InvalidSearchError,
    PropertyNotFoundError,
    StorageError,
    SelectionPolicy,
    SIMILAR_LISTINGS_POLICY,
    cma_policy,
    SimilarityScorer,
    ValuationEstimator,
    ComparablePropertyEngine,
)
from .storage import (
    PropertyQuery,
    PropertyStore,
    InMemoryPropertyStore,
    create_property_store,
)
from .cma import CMAGenerator, CMAReport

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
    "SimilarityScorer",
    "ValuationEstimator",
    "ComparablePropertyEngine",
    # Storage
    "PropertyQuery",
    "PropertyStore",
    "InMemoryPropertyStore",
    "create_property_store",
    # CMA
    "CMAGenerator",
    "CMAReport",
]
