"""Main entry point for the CompactGUI catalog browser.

This module provides the application entry point with:
- Command-line argument parsing
- Application initialization and dependency injection
- A non-interactive query mode printing one page of results
"""

import argparse
import asyncio
import locale
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

import structlog

from compactgui_browser.models import AppConfig, DerivedGameRecord, SortKey
from compactgui_browser.models.config import PAGE_SIZE_OPTIONS
from compactgui_browser.services.cache import DatasetCacheService
from compactgui_browser.services.catalog import derive_all, query
from compactgui_browser.services.catalog_service import CatalogService, LoadOrigin
from compactgui_browser.services.config import VALID_LOG_LEVELS, ConfigurationService
from compactgui_browser.services.errors import get_error_service
from compactgui_browser.services.http_client import HttpClientService
from compactgui_browser.services.loader import DatasetLoaderService
from compactgui_browser.services.logging import setup_logging
from compactgui_browser.services.storage import LocalStorageService
from compactgui_browser.services.view_state import ViewStateController

__version__ = "0.1.0"

log = structlog.stdlib.get_logger()


class ApplicationContext:
    """Container for application services and state.

    This class manages the lifecycle of all application services
    and provides dependency injection for the UI components.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize the application context.

        Args:
            config_path: Path to configuration file
        """
        self._config_path: Path | None = config_path

        # Services (initialized lazily)
        self._config_service: ConfigurationService | None = None
        self._http_client: HttpClientService | None = None
        self._storage: LocalStorageService | None = None
        self._cache: DatasetCacheService | None = None
        self._loader: DatasetLoaderService | None = None
        self._catalog_service: CatalogService | None = None

        self._config: AppConfig | None = None

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        """Get the current application configuration."""
        if self._config is None:
            self._config = self.config_service.load_config()
        return self._config

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService(timeout=self.config.request_timeout)
        return self._http_client

    @property
    def storage(self) -> LocalStorageService:
        if self._storage is None:
            self._storage = LocalStorageService(self.config.storage_path)
        return self._storage

    @property
    def cache(self) -> DatasetCacheService:
        if self._cache is None:
            self._cache = DatasetCacheService(
                storage=self.storage,
                ttl_ms=int(self.config.cache_ttl_hours * 60 * 60 * 1000),
            )
        return self._cache

    @property
    def loader(self) -> DatasetLoaderService:
        if self._loader is None:
            self._loader = DatasetLoaderService(
                http_client=self.http_client,
                primary_url=self.config.primary_url,
                fallback_url=self.config.fallback_url,
            )
        return self._loader

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(loader=self.loader, cache=self.cache)
        return self._catalog_service

    async def cleanup(self) -> None:
        """Close network connections."""
        log.info("Cleaning up application resources")
        if self._http_client is not None:
            await self._http_client.close()
        log.info("Application cleanup complete")


class ParsedArgs:
    """Type-safe container for parsed command-line arguments."""

    def __init__(
        self,
        config: Path | None,
        log_level: str,
        log_dir: Path | None,
        location: str,
        refresh: bool,
        no_tui: bool,
        search: str | None,
        sort: str | None,
        page: int | None,
        page_size: int | None,
    ) -> None:
        self.config: Path | None = config
        self.log_level: str = log_level
        self.log_dir: Path | None = log_dir
        self.location: str = location
        self.refresh: bool = refresh
        self.no_tui: bool = no_tui
        self.search: str | None = search
        self.sort: str | None = sort
        self.page: int | None = page
        self.page_size: int | None = page_size


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compactgui-browser",
        description="Browse the CompactGUI database of Steam game compression results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  compactgui-browser                                 Start the TUI application
  compactgui-browser --location "?search=portal"     Start with a search applied
  compactgui-browser --no-tui --search halo --sort lzx_ratio_desc
  compactgui-browser --refresh --log-level DEBUG     Ignore the cache and log verbosely
        """
    )

    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/compactgui-browser/config.json)"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=list(VALID_LOG_LEVELS),
        default=None,
        help="Set the logging level (default: from configuration, INFO)"
    )
    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: ./logs in TUI mode, console only otherwise)"
    )
    _ = parser.add_argument(
        "--location",
        default="",
        help='Initial location query string, e.g. "?search=portal&page=2"'
    )
    _ = parser.add_argument(
        "--refresh",
        action="store_true",
        help="Fetch the database even if the cached copy is fresh"
    )
    _ = parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Print one page of results instead of starting the TUI"
    )
    _ = parser.add_argument("--search", default=None, help="Search term (query mode)")
    _ = parser.add_argument(
        "--sort",
        choices=[key.value for key in SortKey],
        default=None,
        help="Sort order (default: name_asc)"
    )
    _ = parser.add_argument("--page", type=_positive_int, default=None, help="Page number (query mode)")
    _ = parser.add_argument(
        "--page-size",
        type=int,
        choices=PAGE_SIZE_OPTIONS,
        default=None,
        help="Games per page (default: from configuration)"
    )
    return parser


def parse_arguments(argv: list[str] | None = None) -> ParsedArgs:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse (default: sys.argv)

    Returns:
        Parsed arguments container
    """
    ns = build_parser().parse_args(argv)

    return ParsedArgs(
        config=ns.config,
        log_level=ns.log_level or "",
        log_dir=ns.log_dir,
        location=str(ns.location or ""),
        refresh=bool(ns.refresh),
        no_tui=bool(ns.no_tui),
        search=ns.search,
        sort=ns.sort,
        page=ns.page,
        page_size=ns.page_size,
    )


def create_view_state(context: ApplicationContext, args: ParsedArgs) -> ViewStateController:
    """Create the view-state controller from the configuration and the command line.

    Explicit --search and --page take precedence over the --location values.
    """
    controller = ViewStateController.from_startup(
        storage=context.storage,
        location=args.location,
        page_size=args.page_size or context.config.page_size,
        sort_key=args.sort or SortKey.NAME_ASC.value,
    )
    if args.search is not None:
        _ = controller.set_search(args.search)
    if args.page is not None:
        _ = controller.go_to_page(args.page)
    return controller


async def run_tui(context: ApplicationContext, args: ParsedArgs) -> int:
    """Run the TUI application.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    from compactgui_browser.ui.app import CatalogApp

    log.info("Starting TUI application")

    try:
        app = CatalogApp(
            catalog_service=context.catalog_service,
            view_state=create_view_state(context, args),
            config=context.config,
            force_refresh=args.refresh,
        )
        await app.run_async()

        log.info("TUI application exited normally")
        return 0

    except Exception as e:
        log.error("TUI application error", error=str(e), exc_info=True)
        return 1
    finally:
        await context.cleanup()


def render_results_table(
    records: list[DerivedGameRecord],
    total_games: int,
    result_page: int,
    total_pages: int,
) -> Table:
    """Build the Rich table printed in query mode."""
    from compactgui_browser.ui.screens.catalog import compact_columns, compact_row

    table = Table(
        title=f"CompactGUI database - page {result_page}/{total_pages}",
        caption=f"{total_games} games",
    )
    for index, column in enumerate(compact_columns()):
        table.add_column(column, justify="left" if index < 2 else "right", no_wrap=index > 0)
    for record in records:
        table.add_row(*compact_row(record))
    return table


async def run_query(context: ApplicationContext, args: ParsedArgs, console: Console | None = None) -> int:
    """Load the catalog and print one page of query results.

    Returns:
        0 when data was shown, 1 when no dataset could be loaded
    """
    console = console or Console()
    view_state = create_view_state(context, args)

    try:
        outcome = await context.catalog_service.load(force=args.refresh)
    finally:
        await context.cleanup()

    if outcome.error is not None:
        console.print(
            get_error_service().create_user_message(outcome.error),
            style="yellow",
            markup=False,
            highlight=False,
        )
    if outcome.dataset is None:
        console.print("[red]No data available.[/red]")
        return 1

    if outcome.origin is LoadOrigin.STALE_CACHE:
        console.print("[yellow]Showing cached data.[/yellow]")

    records = derive_all(outcome.dataset)
    state = view_state.state
    result = query(
        records,
        search_term=state.search,
        sort_key=state.sort_key,
        page_size=state.page_size,
        page=state.page,
    )
    _ = view_state.clamp_page(result.clamped_page)

    if result.page_items:
        console.print(render_results_table(result.page_items, len(records), result.clamped_page, result.total_pages))
    else:
        console.print("No games match your search.")
    console.print(
        f"{result.total_matches} matches, page {result.clamped_page} of {result.total_pages}",
        highlight=False,
    )
    log.info(
        "Query printed",
        matches=result.total_matches,
        page=result.clamped_page,
        location=view_state.location,
    )
    return 0


def main() -> None:
    """Main entry point for the application."""
    args = parse_arguments()

    log_dir = args.log_dir
    if log_dir is None and not args.no_tui:
        log_dir = Path("logs")

    logging_service = setup_logging(
        log_level=args.log_level or "INFO",
        log_dir=log_dir,
        tui_mode=not args.no_tui,
    )

    context = ApplicationContext(config_path=args.config)
    if not args.log_level and context.config.log_level != logging_service.log_level:
        # No level on the command line: the configured one applies
        logging_service = setup_logging(
            log_level=context.config.log_level,
            log_dir=log_dir,
            tui_mode=not args.no_tui,
        )

    try:
        _ = locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        log.warning("Locale collation unavailable, sorting by code point", error=str(e))

    log.info(
        "Starting CompactGUI browser",
        version=__version__,
        config_path=str(context.config_service.config_path),
        mode="query" if args.no_tui else "tui",
        log_level=logging_service.log_level,
    )

    try:
        if args.no_tui:
            exit_code = asyncio.run(run_query(context, args))
        else:
            exit_code = asyncio.run(run_tui(context, args))

    except KeyboardInterrupt:
        log.info("Application interrupted by user")
        exit_code = 130

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        exit_code = 1

    log.info("Application exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
