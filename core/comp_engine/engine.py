"""
Comparable Property Engine

Single selection pipeline shared by the similar-listings feature and CMA
generation:
1. FILTER - same-city candidates within the policy bands
2. EXPAND - top up from other cities when short (best-effort)
3. SCORE - similarity to the reference
4. RANK - score descending, price ascending, truncate to limit
"""

import logging
from typing import Optional, Tuple

from core.storage.base import PropertyStore

from .errors import InvalidSearchError, PropertyNotFoundError
from .filters import (
    CandidateFilter,
    FallbackExpander,
    SelectionPolicy,
    SIMILAR_LISTINGS_POLICY,
    merge_unique,
)
from .models import CandidateSelection, ReferenceProperty
from .scoring import SimilarityScorer, rank_and_truncate


logger = logging.getLogger(__name__)


class ComparablePropertyEngine:
    """
    Finds and ranks comparable properties for a reference property.

    The store is injected so each request can use its own handle; the
    engine itself holds no mutable state.
    """

    def __init__(
        self,
        store: PropertyStore,
        policy: SelectionPolicy = SIMILAR_LISTINGS_POLICY,
        scorer: Optional[SimilarityScorer] = None,
    ):
        self._store = store
        self._policy = policy
        self._filter = CandidateFilter(store, policy)
        self._expander = FallbackExpander(store, policy)
        self._scorer = scorer or SimilarityScorer()

    @property
    def policy(self) -> SelectionPolicy:
        return self._policy

    def select(
        self,
        reference: ReferenceProperty,
        limit: int,
        min_pool: int = 0,
    ) -> CandidateSelection:
        """
        Run the full selection pipeline.

        Args:
            reference: Property to find comparables for
            limit: Maximum candidates returned
            min_pool: Query at least this many candidates even when limit is
                smaller, so pool_size can reflect a minimum comp count

        Returns:
            CandidateSelection with ranked candidates (len <= limit)

        Raises:
            InvalidSearchError: If the reference or limit is unusable
            StorageError: If the primary candidate query fails
        """
        if limit < 1:
            raise InvalidSearchError("limit must be a positive integer")

        query_limit = max(limit, min_pool)

        found = self._filter.find(reference, query_limit)
        extra, expansion_failed = [], False
        if len(found) < query_limit:
            extra, expansion_failed = self._expander.expand(reference, found, query_limit)

        merged = [p for p in merge_unique(found, extra) if p.id != reference.id]
        scored = self._scorer.score_all(reference, merged)
        ranked = rank_and_truncate(scored, limit)

        logger.debug(
            "Selected %d of %d candidates (filter=%d, expanded=%d)",
            len(ranked), len(merged), len(found), len(extra),
        )

        return CandidateSelection(
            candidates=ranked,
            pool_size=len(merged),
            filter_count=len(found),
            expanded_count=len(extra),
            expansion_failed=expansion_failed,
        )

    def find_similar(
        self,
        property_id: str,
        limit: int,
    ) -> Tuple[ReferenceProperty, CandidateSelection]:
        """
        Similar listings for a stored property.

        Raises:
            InvalidSearchError: If property_id is blank or the stored
                property has no usable price
            PropertyNotFoundError: If the property does not exist
            StorageError: If storage fails
        """
        if not property_id or not property_id.strip():
            raise InvalidSearchError("property_id required")

        prop = self._store.get(property_id)
        if prop is None:
            raise PropertyNotFoundError(property_id)

        reference = ReferenceProperty.from_property(prop)
        return reference, self.select(reference, limit)
