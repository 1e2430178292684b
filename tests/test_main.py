"""Tests for the command line entry point and query mode."""

import io
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from compactgui_browser.main import ApplicationContext, create_view_state, parse_arguments, run_query
from compactgui_browser.models import CompressionResult, RawGameRecord
from compactgui_browser.services.catalog_service import CatalogService, LoadOrigin, LoadOutcome
from compactgui_browser.services.errors import NetworkError
from compactgui_browser.services.storage import LocalStorageService

DATASET = [
    RawGameRecord(
        steam_id=str(i),
        game_name=f"Game {i:02d}",
        compression_results=(CompressionResult(comp_type=3, before_bytes=1000 * i, after_bytes=500 * i),),
    )
    for i in range(1, 31)
]


def _context(tmp_path: Path, outcome: LoadOutcome) -> tuple[ApplicationContext, AsyncMock]:
    context = ApplicationContext(config_path=tmp_path / "config.json")
    context._storage = LocalStorageService(tmp_path)
    service = AsyncMock(spec=CatalogService)
    service.load.return_value = outcome
    context._catalog_service = service
    return context, service


def _console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


class TestArgumentParsing:
    """Test cases for parse_arguments."""

    def test_defaults(self) -> None:
        args = parse_arguments([])

        assert args.config is None
        assert args.log_level == ""
        assert args.location == ""
        assert not args.refresh
        assert not args.no_tui
        assert args.search is None
        assert args.page_size is None

    def test_query_options(self) -> None:
        args = parse_arguments([
            "--no-tui",
            "--search", "portal",
            "--sort", "lzx_ratio_desc",
            "--page", "2",
            "--page-size", "48",
            "--refresh",
            "--location", "?search=half&page=3",
        ])

        assert args.no_tui
        assert args.search == "portal"
        assert args.sort == "lzx_ratio_desc"
        assert args.page == 2
        assert args.page_size == 48
        assert args.refresh
        assert args.location == "?search=half&page=3"

    @pytest.mark.parametrize(
        "argv",
        [["--page", "0"], ["--page-size", "10"], ["--sort", "popularity"], ["--log-level", "LOUD"]],
    )
    def test_invalid_options_exit(self, argv: list[str]) -> None:
        with pytest.raises(SystemExit):
            parse_arguments(argv)


def test_command_line_overrides_location(tmp_path: Path) -> None:
    context = ApplicationContext(config_path=tmp_path / "config.json")
    context._storage = LocalStorageService(tmp_path)
    args = parse_arguments(["--location", "?search=half&page=3", "--search", "portal"])

    controller = create_view_state(context, args)

    assert controller.state.search == "portal"
    assert controller.state.page == 1
    assert controller.state.page_size == 24


class TestQueryMode:
    """Test cases for run_query."""

    @pytest.mark.asyncio
    async def test_prints_requested_page(self, tmp_path: Path) -> None:
        context, service = _context(tmp_path, LoadOutcome(dataset=DATASET, origin=LoadOrigin.CACHE))
        console = _console()
        args = parse_arguments(["--no-tui", "--sort", "name_desc", "--page", "3", "--page-size", "12"])

        exit_code = await run_query(context, args, console=console)

        output = console.file.getvalue()  # type: ignore[attr-defined]
        assert exit_code == 0
        service.load.assert_awaited_once_with(force=False)
        assert "Game 06" in output
        assert "Game 30" not in output
        assert "30 matches, page 3 of 3" in output

    @pytest.mark.asyncio
    async def test_page_is_clamped(self, tmp_path: Path) -> None:
        context, _ = _context(tmp_path, LoadOutcome(dataset=DATASET, origin=LoadOrigin.PRIMARY))
        console = _console()

        exit_code = await run_query(context, parse_arguments(["--no-tui", "--page", "99"]), console=console)

        assert exit_code == 0
        assert "30 matches, page 2 of 2" in console.file.getvalue()  # type: ignore[attr-defined]

    @pytest.mark.asyncio
    async def test_refresh_forces_fetch(self, tmp_path: Path) -> None:
        context, service = _context(tmp_path, LoadOutcome(dataset=DATASET, origin=LoadOrigin.PRIMARY))

        await run_query(context, parse_arguments(["--no-tui", "--refresh"]), console=_console())

        service.load.assert_awaited_once_with(force=True)

    @pytest.mark.asyncio
    async def test_no_matches(self, tmp_path: Path) -> None:
        context, _ = _context(tmp_path, LoadOutcome(dataset=DATASET, origin=LoadOrigin.CACHE))
        console = _console()

        exit_code = await run_query(context, parse_arguments(["--no-tui", "--search", "zelda"]), console=console)

        assert exit_code == 0
        assert "No games match your search." in console.file.getvalue()  # type: ignore[attr-defined]

    @pytest.mark.asyncio
    async def test_no_data_exits_with_error(self, tmp_path: Path) -> None:
        error = NetworkError("Failed to fetch database from both primary and fallback sources.").to_user_friendly()
        context, _ = _context(tmp_path, LoadOutcome(dataset=None, origin=LoadOrigin.NONE, error=error))
        console = _console()

        exit_code = await run_query(context, parse_arguments(["--no-tui"]), console=console)

        output = console.file.getvalue()  # type: ignore[attr-defined]
        assert exit_code == 1
        assert "Failed to fetch database" in output
        assert "No data available." in output
