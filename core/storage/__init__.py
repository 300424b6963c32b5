"""
Property storage access.

The engine depends only on PropertyStore; create_property_store picks the
backend named in configuration.
"""

from .base import PropertyQuery, PropertyStore
from .memory import InMemoryPropertyStore
from .records import PropertyRecord, parse_property_row

__all__ = [
    "PropertyQuery",
    "PropertyStore",
    "InMemoryPropertyStore",
    "PropertyRecord",
    "parse_property_row",
    "create_property_store",
]


def create_property_store(config) -> PropertyStore:
    """
    Build the configured property store.

    Args:
        config: utils.config.Config

    Returns:
        SupabasePropertyStore when STORAGE_BACKEND=supabase, otherwise an
        InMemoryPropertyStore (seeded from DATA_FILE when set)
    """
    if config.storage_backend == "supabase":
        from .supabase_store import SupabasePropertyStore

        return SupabasePropertyStore.connect(config.supabase_url, config.supabase_key)

    if config.data_file:
        return InMemoryPropertyStore.from_json_file(config.data_file)
    return InMemoryPropertyStore()
