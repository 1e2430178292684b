"""Tests for size, percentage and Steam URL formatting."""

import pytest
from hypothesis import given, strategies as st

from compactgui_browser.services.formatting import (
    cover_url,
    fallback_cover_url,
    format_bytes,
    format_savings,
    store_url,
    thumb_url,
)


class TestFormatBytes:
    """Test cases for format_bytes."""

    @pytest.mark.parametrize("size", [None, 0, -1, -2048])
    def test_empty_sizes(self, size: int | None) -> None:
        assert format_bytes(size) == "0 Bytes"

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (1, "1 Bytes"),
            (500, "500 Bytes"),
            (1023, "1023 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (1024 ** 2, "1 MB"),
            (int(2.25 * 1024 ** 3), "2.25 GB"),
            (1024 ** 4, "1 TB"),
        ],
    )
    def test_known_sizes(self, size: int, expected: str) -> None:
        assert format_bytes(size) == expected

    def test_sizes_beyond_largest_unit_stay_in_terabytes(self) -> None:
        assert format_bytes(2048 * 1024 ** 4) == "2048 TB"

    def test_decimals(self) -> None:
        assert format_bytes(1234567, decimals=1) == "1.2 MB"
        assert format_bytes(1234567, decimals=0) == "1 MB"

    @given(st.integers(min_value=1, max_value=1024 ** 5))
    def test_positive_sizes_have_a_unit(self, size: int) -> None:
        value, unit = format_bytes(size).split(" ")
        assert unit in ("Bytes", "KB", "MB", "GB", "TB")
        assert float(value) > 0
        assert not value.endswith(".")


def test_format_savings() -> None:
    assert format_savings(50) == "50.00%"
    assert format_savings(12.345, decimals=1) == "12.3%"
    assert format_savings(0) == "0.00%"


def test_steam_urls() -> None:
    assert store_url("620") == "https://store.steampowered.com/app/620"
    assert cover_url("620") == "https://steamcdn-a.akamaihd.net/steam/apps/620/library_600x900_2x.jpg"
    assert fallback_cover_url("620") == "https://steamcdn-a.akamaihd.net/steam/apps/620/capsule_616x353.jpg"
    assert thumb_url("620") == "https://steamcdn-a.akamaihd.net/steam/apps/620/capsule_231x87.jpg"
