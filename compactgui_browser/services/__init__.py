"""Service layer: data loading, caching, catalog queries and ambient services."""

from .cache import CacheEnvelope, DatasetCacheService
from .catalog import (
    PageControl,
    PageControlKind,
    QueryResult,
    derive_all,
    pagination_controls,
    query,
)
from .catalog_service import CatalogService, LoadOrigin, LoadOutcome
from .config import ConfigurationService, ValidationResult
from .debounce import Debouncer
from .errors import (
    AggregatedFetchError,
    AppError,
    ConfigurationError,
    DatasetFormatError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    NetworkError,
    StorageError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .http_client import HttpClientService
from .loader import DatasetLoaderService, FetchResult
from .storage import LocalStorageService
from .view_state import ViewStateController, build_location, parse_location

__all__ = [
    "AggregatedFetchError",
    "AppError",
    "CacheEnvelope",
    "CatalogService",
    "ConfigurationError",
    "ConfigurationService",
    "DatasetCacheService",
    "DatasetFormatError",
    "DatasetLoaderService",
    "Debouncer",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "FetchResult",
    "HttpClientService",
    "LoadOrigin",
    "LoadOutcome",
    "LocalStorageService",
    "NetworkError",
    "PageControl",
    "PageControlKind",
    "QueryResult",
    "StorageError",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "ViewStateController",
    "build_location",
    "derive_all",
    "get_error_service",
    "handle_error",
    "pagination_controls",
    "parse_location",
    "query",
]
