"""
Error types for the Comparable Property Engine.

Each error maps onto one class of HTTP response at the web layer:
- InvalidSearchError -> 400 (caller error, not retried)
- PropertyNotFoundError -> 404
- StorageError -> 500 (transient, safe to retry)
"""


class CompEngineError(Exception):
    """Base class for all comparable engine errors."""


class InvalidSearchError(CompEngineError):
    """The reference property or search parameters cannot be used."""


class PropertyNotFoundError(CompEngineError):
    """The requested property does not exist in storage."""

    def __init__(self, property_id: str):
        self.property_id = property_id
        super().__init__(f"Property {property_id} not found")


class StorageError(CompEngineError):
    """The persistence service failed or returned an unusable record."""
