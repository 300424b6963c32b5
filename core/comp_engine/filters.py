"""
Candidate selection for the Comparable Property Engine.

Implements the two storage-facing stages:
- Candidate Filter: same city, price band, bedroom band (eligible statuses)
- Fallback Expander: same bands without the city constraint, best-effort
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from core.storage.base import PropertyQuery, PropertyStore

from .errors import InvalidSearchError, StorageError
from .models import ListingStatus, Property, ReferenceProperty


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Constants
# =============================================================================

# Price band around the reference price (fraction either side)
PRICE_BAND = 0.25

# Bedroom band around the reference bedroom count
BEDROOM_BAND = 1

# Square footage band used when the subject has no price (CMA)
CMA_SQFT_BAND = 0.20

CMA_STATUSES_WITH_SOLD = (ListingStatus.SOLD, ListingStatus.ACTIVE, ListingStatus.PENDING)


@dataclass(frozen=True)
class SelectionPolicy:
    """
    Which properties may be comparables for a call site.

    statuses=None applies no status filter at all.
    """
    statuses: Optional[Tuple[ListingStatus, ...]]
    price_band: Optional[float] = PRICE_BAND
    bedroom_band: int = BEDROOM_BAND
    sqft_band: Optional[float] = None
    expand_beyond_city: bool = True


# Interactive "similar listings": active listings, priced like the reference
SIMILAR_LISTINGS_POLICY = SelectionPolicy(statuses=(ListingStatus.ACTIVE,))


def cma_policy(include_sold: bool = True) -> SelectionPolicy:
    """
    Selection policy for CMA reports.

    An ad-hoc subject has no price, so the price band is replaced by a
    square footage band. Sold properties are eligible only when
    include_sold is set.
    """
    statuses = CMA_STATUSES_WITH_SOLD if include_sold else (ListingStatus.ACTIVE,)
    return SelectionPolicy(
        statuses=statuses,
        price_band=None,
        sqft_band=CMA_SQFT_BAND,
    )


def validate_reference(reference: ReferenceProperty, policy: SelectionPolicy) -> None:
    """
    Reject references that cannot anchor the policy's bands.

    Raises:
        InvalidSearchError: If a required reference attribute is missing
    """
    if not reference.city or not reference.city.strip():
        raise InvalidSearchError("Reference property must have a city")
    if reference.bedrooms is None or reference.bedrooms < 0:
        raise InvalidSearchError("Reference property must have a non-negative bedroom count")
    if policy.price_band is not None and not reference.has_price:
        raise InvalidSearchError("Reference property must have a positive price")
    if policy.sqft_band is not None and not reference.has_known_sqft:
        raise InvalidSearchError("Reference property must have a positive square footage")


def band_query(
    reference: ReferenceProperty,
    policy: SelectionPolicy,
    city: Optional[str] = None,
    exclude_ids: frozenset = frozenset(),
    limit: Optional[int] = None,
) -> PropertyQuery:
    """Build the status/price/bedroom/sqft band query shared by both stages."""
    min_price = max_price = None
    if policy.price_band is not None:
        min_price = reference.price * (1 - policy.price_band)
        max_price = reference.price * (1 + policy.price_band)

    min_sqft = max_sqft = None
    if policy.sqft_band is not None:
        min_sqft = reference.square_feet * (1 - policy.sqft_band)
        max_sqft = reference.square_feet * (1 + policy.sqft_band)

    if reference.id is not None:
        exclude_ids = exclude_ids | {reference.id}

    return PropertyQuery(
        statuses=policy.statuses,
        city=city,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=max(0, reference.bedrooms - policy.bedroom_band),
        max_bedrooms=reference.bedrooms + policy.bedroom_band,
        min_sqft=min_sqft,
        max_sqft=max_sqft,
        exclude_ids=frozenset(exclude_ids),
        order_by="price",
        limit=limit,
    )


class CandidateFilter:
    """
    Primary comparable query: hard constraints including the reference city.

    Storage failures propagate; without a primary result there is nothing
    to return.
    """

    def __init__(self, store: PropertyStore, policy: SelectionPolicy):
        self._store = store
        self._policy = policy

    def find(self, reference: ReferenceProperty, limit: int) -> List[Property]:
        """
        Find same-city candidates.

        Args:
            reference: Property the search is anchored on
            limit: Maximum candidates to return

        Returns:
            Candidates ordered by price ascending, at most limit long
        """
        validate_reference(reference, self._policy)
        if limit < 1:
            raise InvalidSearchError("limit must be a positive integer")

        query = band_query(reference, self._policy, city=reference.city, limit=limit)
        found = self._store.query(query)
        logger.debug("Candidate filter found %d in %s", len(found), reference.city)
        return found[:limit]


class FallbackExpander:
    """
    Secondary comparable query that drops the city constraint.

    Best-effort: a storage failure here yields no extra candidates rather
    than failing the search.
    """

    def __init__(self, store: PropertyStore, policy: SelectionPolicy):
        self._store = store
        self._policy = policy

    def expand(
        self,
        reference: ReferenceProperty,
        found: List[Property],
        limit: int,
    ) -> Tuple[List[Property], bool]:
        """
        Top up a short candidate list from outside the reference city.

        Args:
            reference: Property the search is anchored on
            found: Candidates already returned by the Candidate Filter
            limit: Overall candidate limit

        Returns:
            Tuple of:
            - Additional candidates (never overlapping found)
            - Whether the expansion query failed
        """
        remaining = limit - len(found)
        if remaining <= 0 or not self._policy.expand_beyond_city:
            return [], False

        seen = frozenset(p.id for p in found)
        query = band_query(reference, self._policy, exclude_ids=seen, limit=remaining)

        try:
            extra = self._store.query(query)
        except StorageError as e:
            logger.warning("Fallback expansion failed, keeping %d candidates: %s", len(found), e)
            return [], True

        extra = [p for p in extra if p.id not in seen and p.id != reference.id]
        logger.debug("Fallback expander added %d candidates", len(extra[:remaining]))
        return extra[:remaining], False


def merge_unique(primary: List[Property], extra: List[Property]) -> List[Property]:
    """Concatenate keeping the first occurrence of each id."""
    merged = []
    seen = set()
    for prop in list(primary) + list(extra):
        if prop.id in seen:
            continue
        seen.add(prop.id)
        merged.append(prop)
    return merged
