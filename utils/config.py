"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", "false"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    allowed_origins: List[str] = field(
        default_factory=lambda: [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
    )

    # Storage
    storage_backend: str = field(default_factory=lambda: os.getenv("STORAGE_BACKEND", "memory"))
    data_file: Optional[str] = field(default_factory=lambda: os.getenv("DATA_FILE") or None)
    supabase_url: Optional[str] = field(default_factory=lambda: os.getenv("SUPABASE_URL"))
    supabase_key: Optional[str] = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_KEY")
    )

    # Requests
    request_timeout: float = field(default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "8")))
    similar_default_limit: int = field(default_factory=lambda: int(os.getenv("SIMILAR_DEFAULT_LIMIT", "6")))

    # CMA
    cma_default_limit: int = field(default_factory=lambda: int(os.getenv("CMA_DEFAULT_LIMIT", "10")))
    cma_base_rate_per_sqft: float = field(
        default_factory=lambda: float(os.getenv("CMA_BASE_RATE_PER_SQFT", "250"))
    )
    cma_include_sold: bool = field(default_factory=lambda: _env_bool("CMA_INCLUDE_SOLD", "true"))

    # Reports
    reports_dir: str = field(default_factory=lambda: os.getenv("REPORTS_DIR", "./reports"))

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_dict(self) -> dict:
        """Convert config to dictionary (secrets omitted)."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "storage_backend": self.storage_backend,
            "data_file": self.data_file,
            "request_timeout": self.request_timeout,
            "similar_default_limit": self.similar_default_limit,
            "cma_default_limit": self.cma_default_limit,
            "cma_base_rate_per_sqft": self.cma_base_rate_per_sqft,
            "cma_include_sold": self.cma_include_sold,
            "reports_dir": self.reports_dir,
        }
