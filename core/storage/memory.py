"""
In-Memory Property Store

Development and test implementation of PropertyStore. Can be seeded from a
JSON file of raw property rows (the same shape the properties table returns).
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from core.comp_engine.errors import StorageError
from core.comp_engine.models import Property
from core.storage.base import PropertyQuery, PropertyStore
from core.storage.records import parse_property_row


logger = logging.getLogger(__name__)


class InMemoryPropertyStore(PropertyStore):
    """
    Property store backed by a dict keyed on property id.

    Query semantics mirror the table store: predicates, then ordering, then
    limit.
    """

    def __init__(self, properties: Iterable[Property] = ()):
        self._properties: dict[str, Property] = {}
        for prop in properties:
            self.add(prop)

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryPropertyStore":
        """
        Load a store from a JSON file.

        Accepts either a list of rows or {"properties": [rows]}.

        Raises:
            StorageError: If the file is unreadable or a row is malformed
        """
        file_path = Path(path)
        try:
            data = json.loads(file_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not load properties from {file_path}: {e}") from e

        rows = data.get("properties", []) if isinstance(data, dict) else data
        store = cls(parse_property_row(row) for row in rows)
        logger.info("Loaded %d properties from %s", len(store), file_path)
        return store

    def __len__(self) -> int:
        return len(self._properties)

    def add(self, prop: Property) -> None:
        """Insert or replace a property."""
        self._properties[prop.id] = prop

    def get(self, property_id: str) -> Optional[Property]:
        return self._properties.get(property_id)

    def query(self, query: PropertyQuery) -> List[Property]:
        matches = [p for p in self._properties.values() if query.matches(p)]
        ordered = _order(matches, query.order_by, query.descending)
        if query.limit is not None:
            ordered = ordered[:query.limit]
        return ordered


def _order(props: List[Property], column: str, descending: bool) -> List[Property]:
    """Sort on column, ties by id, rows with no value last."""
    known = [p for p in props if getattr(p, column) is not None]
    unknown = [p for p in props if getattr(p, column) is None]

    known.sort(key=lambda p: p.id)
    known.sort(key=lambda p: _sort_value(getattr(p, column)), reverse=descending)
    unknown.sort(key=lambda p: p.id)
    return known + unknown


def _sort_value(value):
    """Naive timestamps compare as UTC."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
