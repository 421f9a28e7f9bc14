"""RUIAN client - klient pro API českého adresního registru (ruian.fnx.io)."""

from .api import (
    AddressHierarchy,
    Municipality,
    Place,
    Region,
    RuianClient,
    RuianConfig,
    Street,
    ValidatedPlace,
    ValidateResult,
    ValidateStatus,
    ValidationWithPlaces,
)
from .cache import CacheStorage, MemoryCache, SQLiteCache
from .exceptions import (
    RuianAPIError,
    RuianAuthError,
    RuianConnectionError,
    RuianError,
    RuianRateLimitError,
    RuianValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "RuianClient",
    "RuianConfig",
    "CacheStorage",
    "MemoryCache",
    "SQLiteCache",
    "AddressHierarchy",
    "Municipality",
    "Place",
    "Region",
    "Street",
    "ValidatedPlace",
    "ValidateResult",
    "ValidateStatus",
    "ValidationWithPlaces",
    "RuianError",
    "RuianAPIError",
    "RuianAuthError",
    "RuianConnectionError",
    "RuianRateLimitError",
    "RuianValidationError",
]
