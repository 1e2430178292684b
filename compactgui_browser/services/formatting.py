"""Formatting helpers for sizes, percentages and Steam asset URLs."""

import math

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")
_STEAM_CDN = "https://steamcdn-a.akamaihd.net/steam/apps"
_STEAM_STORE = "https://store.steampowered.com/app"


def format_bytes(size: int | float | None, decimals: int = 2) -> str:
    """Format a byte count using binary units.

    Trailing zeros are dropped, so 1536 formats as "1.5 KB" and 1024 as "1 KB".
    Empty, zero and negative sizes format as "0 Bytes".

    Args:
        size: Number of bytes
        decimals: Maximum number of decimal places

    Returns:
        Human-readable size string
    """
    if not size or size <= 0:
        return "0 Bytes"

    decimals = max(decimals, 0)
    index = min(max(int(math.floor(math.log(size, 1024))), 0), len(_SIZE_UNITS) - 1)
    # Guard against log() rounding just below an exact power of 1024
    if index + 1 < len(_SIZE_UNITS) and size >= 1024 ** (index + 1):
        index += 1
    value = round(size / 1024 ** index, decimals)

    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[index]}"


def format_savings(savings: float, decimals: int = 2) -> str:
    """Format a savings percentage, e.g. "42.50%"."""
    return f"{savings:.{decimals}f}%"


def cover_url(steam_id: str) -> str:
    """Portrait library artwork for a game."""
    return f"{_STEAM_CDN}/{steam_id}/library_600x900_2x.jpg"


def fallback_cover_url(steam_id: str) -> str:
    """Landscape capsule used when the portrait artwork is missing."""
    return f"{_STEAM_CDN}/{steam_id}/capsule_616x353.jpg"


def thumb_url(steam_id: str) -> str:
    """Small capsule thumbnail used by the compact table."""
    return f"{_STEAM_CDN}/{steam_id}/capsule_231x87.jpg"


def store_url(steam_id: str) -> str:
    return f"{_STEAM_STORE}/{steam_id}"
