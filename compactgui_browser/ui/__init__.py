"""User interface components using Textual framework."""

from .app import AppState, CatalogApp, apply_load_outcome, describe_outcome
from .screens import (
    BaseScreen,
    CatalogScreen,
    GameDetailsScreen,
    get_screen_by_name,
)

__all__ = [
    "AppState",
    "BaseScreen",
    "CatalogApp",
    "CatalogScreen",
    "GameDetailsScreen",
    "apply_load_outcome",
    "describe_outcome",
    "get_screen_by_name",
]
