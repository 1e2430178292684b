"""Data models for the CompactGUI catalog browser."""

from .config import (
    FALLBACK_DATABASE_URL,
    PAGE_SIZE_OPTIONS,
    PRIMARY_DATABASE_URL,
    AppConfig,
)
from .game import (
    AlgorithmResult,
    CompressionAlgorithm,
    CompressionResult,
    Dataset,
    DerivedGameRecord,
    RawGameRecord,
    dataset_to_payload,
    parse_dataset,
)
from .view_state import SortKey, ViewMode, ViewState

__all__ = [
    "AlgorithmResult",
    "AppConfig",
    "CompressionAlgorithm",
    "CompressionResult",
    "Dataset",
    "DerivedGameRecord",
    "FALLBACK_DATABASE_URL",
    "PAGE_SIZE_OPTIONS",
    "PRIMARY_DATABASE_URL",
    "RawGameRecord",
    "SortKey",
    "ViewMode",
    "ViewState",
    "dataset_to_payload",
    "parse_dataset",
]
