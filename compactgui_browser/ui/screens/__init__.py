"""Screen components for the TUI application."""

from typing import Any

from .base import BaseScreen
from .catalog import CatalogScreen
from .details import GameDetailsScreen

# Screen registry for navigation
_SCREEN_REGISTRY: dict[str, type[BaseScreen]] = {
    "catalog": CatalogScreen,
    "details": GameDetailsScreen,
}


def get_screen_by_name(name: str, **kwargs: Any) -> BaseScreen | None:
    """Get a screen instance by its registered name.

    Args:
        name: The registered name of the screen
        **kwargs: Arguments for the screen constructor

    Returns:
        A new instance of the screen, or None if not found
    """
    screen_class = _SCREEN_REGISTRY.get(name)
    if screen_class:
        return screen_class(**kwargs)
    return None


__all__ = [
    "BaseScreen",
    "CatalogScreen",
    "GameDetailsScreen",
    "get_screen_by_name",
]
