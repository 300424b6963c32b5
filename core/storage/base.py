"""
Property store interface.

The comparable engine reads properties only through this interface so the
persistence service can be swapped (Supabase in production, in-memory for
development and tests) and injected per request.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from core.comp_engine.models import ListingStatus, Property


ORDERABLE_COLUMNS = ("price", "created_at", "id")


@dataclass(frozen=True)
class PropertyQuery:
    """
    Predicate set for a property table query.

    None means "no constraint". Ranges are inclusive.
    """
    statuses: Optional[Tuple[ListingStatus, ...]] = None
    city: Optional[str] = None
    city_contains: Optional[str] = None
    property_type: Optional[str] = None

    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_bedrooms: Optional[int] = None
    max_bedrooms: Optional[int] = None
    min_sqft: Optional[float] = None
    max_sqft: Optional[float] = None

    exclude_ids: FrozenSet[str] = field(default_factory=frozenset)

    order_by: str = "price"
    descending: bool = False
    limit: Optional[int] = None

    def __post_init__(self):
        if self.order_by not in ORDERABLE_COLUMNS:
            raise ValueError(f"Cannot order by {self.order_by!r}")
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be non-negative")

    def matches(self, prop: Property) -> bool:
        """Evaluate the predicates against one property."""
        if self.statuses is not None and prop.status not in self.statuses:
            return False
        if prop.id in self.exclude_ids:
            return False
        if self.city is not None and prop.city != self.city:
            return False
        if self.city_contains and self.city_contains.lower() not in prop.city.lower():
            return False
        if self.property_type is not None and prop.property_type != self.property_type:
            return False

        if not _in_range(prop.price, self.min_price, self.max_price):
            return False
        if not _in_range(prop.bedrooms, self.min_bedrooms, self.max_bedrooms):
            return False

        if self.min_sqft is not None or self.max_sqft is not None:
            # Unknown square footage never satisfies a square footage band
            if prop.square_feet is None:
                return False
            if not _in_range(prop.square_feet, self.min_sqft, self.max_sqft):
                return False

        return True


def _in_range(value, low, high) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


class PropertyStore(ABC):
    """Read-only access to stored property records."""

    @abstractmethod
    def get(self, property_id: str) -> Optional[Property]:
        """
        Fetch a single property.

        Args:
            property_id: Property identifier

        Returns:
            Property if found, None otherwise

        Raises:
            StorageError: If the persistence service fails
        """
        pass

    @abstractmethod
    def query(self, query: PropertyQuery) -> List[Property]:
        """
        Run a filtered, ordered, limited query.

        Args:
            query: Predicates, ordering and limit

        Returns:
            Matching properties in the requested order

        Raises:
            StorageError: If the persistence service fails
        """
        pass
