"""
Property Routes - similar listings and read-only property browsing
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.comp_engine import (
    ComparablePropertyEngine,
    InvalidSearchError,
    ListingStatus,
    PropertyNotFoundError,
    PropertyType,
)
from core.storage import PropertyQuery, PropertyStore
from utils.config import Config
from web.deps import get_config, get_store, run_bounded


MAX_LIMIT = 50


router = APIRouter(tags=["properties"])


@router.get("/similar-properties")
async def similar_properties(
    property_id: Optional[str] = Query(None, description="Reference property id"),
    limit: Optional[int] = Query(None, ge=1, le=MAX_LIMIT),
    store: PropertyStore = Depends(get_store),
    config: Config = Depends(get_config),
):
    """
    Active listings most similar to a stored property.

    Returns the reference summary plus up to `limit` scored listings,
    ranked by similarity score then price.
    """
    engine = ComparablePropertyEngine(store)
    reference, selection = await run_bounded(
        engine.find_similar,
        property_id or "",
        limit or config.similar_default_limit,
        timeout=config.request_timeout,
    )

    return {
        "reference_property": reference.to_summary(),
        "similar_properties": [c.to_dict() for c in selection.candidates],
    }


@router.get("/properties")
async def list_properties(
    status: str = Query(ListingStatus.ACTIVE.value),
    property_type: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    bedrooms: Optional[int] = Query(None, ge=0, description="Minimum bedrooms"),
    limit: Optional[int] = Query(None, ge=1, le=200),
    store: PropertyStore = Depends(get_store),
    config: Config = Depends(get_config),
):
    """Browse stored properties, newest first."""
    listing_status = ListingStatus.from_string(status)
    if listing_status is None:
        raise InvalidSearchError(f"Unknown status {status!r}")

    query = PropertyQuery(
        statuses=(listing_status,),
        property_type=PropertyType.normalise(property_type),
        city_contains=city.strip() if city else None,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=bedrooms,
        order_by="created_at",
        descending=True,
        limit=limit,
    )
    properties = await run_bounded(store.query, query, timeout=config.request_timeout)
    return {"properties": [p.to_dict() for p in properties]}


@router.get("/properties/{property_id}")
async def get_property(
    property_id: str,
    store: PropertyStore = Depends(get_store),
    config: Config = Depends(get_config),
):
    """Single stored property."""
    prop = await run_bounded(store.get, property_id, timeout=config.request_timeout)
    if prop is None:
        raise PropertyNotFoundError(property_id)
    return {"property": prop.to_dict()}
