"""
Supabase Property Store

Reads the `properties` table through the supabase-py client. Row-level
access control is enforced by the database, not here.
"""

import logging
from typing import List, Optional

from supabase import Client, create_client

from core.comp_engine.errors import StorageError
from core.comp_engine.models import Property
from core.storage.base import PropertyQuery, PropertyStore
from core.storage.records import parse_property_row


logger = logging.getLogger(__name__)

PROPERTIES_TABLE = "properties"


class SupabasePropertyStore(PropertyStore):
    """PropertyStore over a Supabase (PostgREST) table."""

    def __init__(self, client: Client, table: str = PROPERTIES_TABLE):
        self._client = client
        self._table = table

    @classmethod
    def connect(cls, url: str, key: str) -> "SupabasePropertyStore":
        """Create a store with a fresh client."""
        if not url or not key:
            raise StorageError("SUPABASE_URL and SUPABASE_KEY are required")
        return cls(create_client(url, key))

    def get(self, property_id: str) -> Optional[Property]:
        try:
            response = (
                self._client.table(self._table)
                .select("*")
                .eq("id", property_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Property lookup %s failed: %s", property_id, e)
            raise StorageError(f"Property lookup failed: {e}") from e

        rows = response.data or []
        if not rows:
            return None
        return parse_property_row(rows[0])

    def query(self, query: PropertyQuery) -> List[Property]:
        try:
            response = self._build(query).execute()
        except Exception as e:
            logger.error("Property query failed: %s", e)
            raise StorageError(f"Property query failed: {e}") from e

        return [parse_property_row(row) for row in response.data or []]

    def _build(self, query: PropertyQuery):
        """Translate a PropertyQuery into a postgrest request."""
        builder = self._client.table(self._table).select("*")

        if query.statuses is not None:
            builder = builder.in_("status", [s.value for s in query.statuses])
        if query.city is not None:
            builder = builder.eq("city", query.city)
        if query.city_contains:
            builder = builder.ilike("city", f"%{query.city_contains}%")
        if query.property_type is not None:
            builder = builder.eq("property_type", query.property_type)

        if query.min_price is not None:
            builder = builder.gte("price", query.min_price)
        if query.max_price is not None:
            builder = builder.lte("price", query.max_price)
        if query.min_bedrooms is not None:
            builder = builder.gte("bedrooms", query.min_bedrooms)
        if query.max_bedrooms is not None:
            builder = builder.lte("bedrooms", query.max_bedrooms)
        if query.min_sqft is not None:
            builder = builder.gte("square_feet", query.min_sqft)
        if query.max_sqft is not None:
            builder = builder.lte("square_feet", query.max_sqft)

        if query.exclude_ids:
            builder = builder.not_.in_("id", sorted(query.exclude_ids))

        builder = builder.order(query.order_by, desc=query.descending)
        if query.limit is not None:
            builder = builder.limit(query.limit)
        return builder
