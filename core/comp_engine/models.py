"""
Data models for the Comparable Property Engine.

Defines typed property records, the reference property a search is anchored
on, scored candidates and valuation results.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class PropertyType(Enum):
    """
    Property type classification.

    Exact match earns the type bonus when scoring; unknown types are kept
    as raw strings so stored data never fails on an unfamiliar label.
    """
    SINGLE_FAMILY = "single_family"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    MULTI_FAMILY = "multi_family"
    LAND = "land"
    MOBILE = "mobile"

    @classmethod
    def from_string(cls, value: str) -> Optional["PropertyType"]:
        """Convert string to PropertyType, case-insensitive."""
        normalised = value.lower().strip().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.value == normalised:
                return member
        return None

    @classmethod
    def normalise(cls, value: Optional[str]) -> Optional[str]:
        """Canonical value for known types, stripped input otherwise."""
        if value is None or not value.strip():
            return None
        member = cls.from_string(value)
        return member.value if member else value.strip()


class ListingStatus(Enum):
    """Lifecycle status of a stored property."""
    ACTIVE = "active"
    PENDING = "pending"
    SOLD = "sold"
    OFF_MARKET = "off_market"

    @classmethod
    def from_string(cls, value: str) -> Optional["ListingStatus"]:
        """Convert string to ListingStatus, case-insensitive."""
        normalised = value.lower().strip().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.value == normalised:
                return member
        return None


class Condition(Enum):
    """
    Subject property condition for CMA requests.

    Only EXCELLENT and POOR move the valuation.
    """
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    FAIR = "fair"
    POOR = "poor"


class Confidence(Enum):
    """
    Confidence label for a CMA valuation.

    High: >= 3 comparables in the candidate pool
    Medium: fewer than 3
    """
    HIGH = "high"
    MEDIUM = "medium"


@dataclass
class Property:
    """
    A property record as held by the persistence service.

    Prices are whole dollars. Square footage may be unknown.
    """
    id: str
    city: str
    price: int
    bedrooms: int

    address: str = ""
    state: str = ""
    zip_code: str = ""
    bathrooms: float = 0.0
    square_feet: Optional[int] = None
    property_type: Optional[str] = None
    status: ListingStatus = ListingStatus.ACTIVE
    year_built: Optional[int] = None

    # Amenities
    pool: bool = False
    waterfront: bool = False

    photos: List[str] = field(default_factory=list)

    # Sale history (surfaced on CMA comparables)
    sold_price: Optional[int] = None
    sold_date: Optional[date] = None

    created_at: Optional[datetime] = None

    @property
    def has_known_sqft(self) -> bool:
        """Whether square footage is usable in ratios."""
        return self.square_feet is not None and self.square_feet > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "price": self.price,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "square_feet": self.square_feet,
            "property_type": self.property_type,
            "status": self.status.value,
            "year_built": self.year_built,
            "pool": self.pool,
            "waterfront": self.waterfront,
            "photos": list(self.photos),
            "sold_price": self.sold_price,
            "sold_date": self.sold_date.isoformat() if self.sold_date else None,
        }


@dataclass
class ReferenceProperty:
    """
    The property comparables are found for.

    Either a stored Property (id set) or an ad-hoc subject supplied by a
    CMA request, which may not be listed anywhere.
    """
    city: str
    bedrooms: int
    square_feet: Optional[int]

    id: Optional[str] = None
    price: Optional[int] = None
    property_type: Optional[str] = None

    address: str = ""
    state: str = ""
    bathrooms: Optional[float] = None
    year_built: Optional[int] = None
    condition: Condition = Condition.AVERAGE
    pool: bool = False
    waterfront: bool = False

    @classmethod
    def from_property(cls, prop: Property) -> "ReferenceProperty":
        """Anchor a search on a stored property."""
        return cls(
            id=prop.id,
            city=prop.city,
            bedrooms=prop.bedrooms,
            square_feet=prop.square_feet,
            price=prop.price,
            property_type=prop.property_type,
            address=prop.address,
            state=prop.state,
            bathrooms=prop.bathrooms,
            year_built=prop.year_built,
            pool=prop.pool,
            waterfront=prop.waterfront,
        )

    @property
    def has_price(self) -> bool:
        return self.price is not None and self.price > 0

    @property
    def has_known_sqft(self) -> bool:
        return self.square_feet is not None and self.square_feet > 0

    def to_summary(self) -> dict:
        """Short form echoed back in similar-properties responses."""
        return {
            "id": self.id,
            "address": self.address,
            "price": self.price,
            "bedrooms": self.bedrooms,
            "property_type": self.property_type,
        }

    def to_subject_dict(self) -> dict:
        """Subject block of a CMA report."""
        return {
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "square_feet": self.square_feet,
            "year_built": self.year_built,
            "property_type": self.property_type,
            "condition": self.condition.value,
            "pool": self.pool,
            "waterfront": self.waterfront,
        }


@dataclass
class ScoredCandidate:
    """
    A candidate property with its similarity to the reference.

    adjusted_price and price_per_sqft are only filled on the CMA path.
    """
    property: Property
    similarity_score: int
    adjusted_price: Optional[int] = None
    price_per_sqft: Optional[int] = None

    @property
    def id(self) -> str:
        return self.property.id

    @property
    def price(self) -> int:
        return self.property.price

    def to_dict(self) -> dict:
        """Property fields plus derived scores."""
        data = self.property.to_dict()
        data["similarity_score"] = self.similarity_score
        return data

    def to_comparable_dict(self) -> dict:
        """CMA comparable row."""
        data = self.to_dict()
        data["adjusted_price"] = self.adjusted_price
        data["price_per_sqft"] = self.price_per_sqft
        return data


@dataclass
class CandidateSelection:
    """
    Result of comparable selection.

    pool_size counts every distinct candidate found before truncation.
    """
    candidates: List[ScoredCandidate]
    pool_size: int

    # Selection metadata
    filter_count: int = 0
    expanded_count: int = 0
    expansion_failed: bool = False

    @property
    def fallback_used(self) -> bool:
        """Whether candidates outside the reference city were merged in."""
        return self.expanded_count > 0


@dataclass
class ValuationResult:
    """
    Fixed-formula CMA valuation band.

    Not a calibrated AVM: derived from square footage and a configured
    per-square-foot rate only.
    """
    low: int
    mid: int
    high: int
    confidence: Confidence

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "low": self.low,
            "mid": self.mid,
            "high": self.high,
            "confidence": self.confidence.value,
        }
