"""
Utility modules for the comparable engine.
"""

from .formatting import format_currency, format_percent, format_sqft
from .config import Config

__all__ = ["format_currency", "format_percent", "format_sqft", "Config"]
