"""
Row validation at the storage boundary.

Raw table rows are checked against PropertyRecord before the engine sees
them, so scoring and valuation always work on typed Property values.
"""

from datetime import date, datetime, timezone
from typing import Any, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.comp_engine.errors import StorageError
from core.comp_engine.models import ListingStatus, Property, PropertyType


class PropertyRecord(BaseModel):
    """Schema of a row in the properties table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    address: str = ""
    city: str = Field(min_length=1)
    state: str = ""
    zip_code: str = Field(default="", validation_alias=AliasChoices("zip_code", "zip"))

    price: int = Field(ge=0)
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: float = Field(default=0.0, ge=0)
    square_feet: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("square_feet", "sqft")
    )

    property_type: Optional[str] = None
    status: ListingStatus = ListingStatus.ACTIVE
    year_built: Optional[int] = None

    pool: bool = False
    waterfront: bool = False
    photos: List[str] = Field(default_factory=list)

    sold_price: Optional[int] = None
    sold_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, (int, UUID)):
            return str(value)
        return value

    @field_validator("address", "state", "zip_code", mode="before")
    @classmethod
    def _blank_strings(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("price", "square_feet", "sold_price", mode="before")
    @classmethod
    def _round_money_and_area(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(round(value))
        return value

    @field_validator("bedrooms", "bathrooms", mode="before")
    @classmethod
    def _missing_rooms(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("pool", "waterfront", mode="before")
    @classmethod
    def _missing_flags(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("photos", mode="before")
    @classmethod
    def _missing_photos(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("property_type", mode="before")
    @classmethod
    def _normalise_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return PropertyType.normalise(value)
        return value

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> Any:
        if value is None:
            return ListingStatus.ACTIVE
        if isinstance(value, str):
            status = ListingStatus.from_string(value)
            if status is None:
                raise ValueError(f"unknown status {value!r}")
            return status
        return value

    def to_property(self) -> Property:
        return Property(
            id=self.id,
            address=self.address,
            city=self.city,
            state=self.state,
            zip_code=self.zip_code,
            price=self.price,
            bedrooms=self.bedrooms,
            bathrooms=self.bathrooms,
            square_feet=self.square_feet,
            property_type=self.property_type,
            status=self.status,
            year_built=self.year_built,
            pool=self.pool,
            waterfront=self.waterfront,
            photos=list(self.photos),
            sold_price=self.sold_price,
            sold_date=self.sold_date,
            created_at=self.created_at,
        )


def parse_property_row(row: dict) -> Property:
    """
    Validate one raw row into a Property.

    Raises:
        StorageError: If the row does not match the properties schema
    """
    try:
        return PropertyRecord.model_validate(row).to_property()
    except ValidationError as e:
        row_id = row.get("id") if isinstance(row, dict) else None
        raise StorageError(f"Malformed property record {row_id!r}: {e}") from e
