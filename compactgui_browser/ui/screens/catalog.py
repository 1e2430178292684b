"""Catalog screen for searching, sorting and paging through the database."""

from typing import ClassVar

from typing_extensions import override

from textual.app import ComposeResult
from textual.binding import Binding, BindingType
from textual.containers import Container, Grid, Horizontal, VerticalScroll
from textual.message import Message
from textual.widgets import Button, DataTable, Input, Select, Static
from textual.worker import Worker, WorkerState

import structlog

from compactgui_browser.models.config import PAGE_SIZE_OPTIONS
from compactgui_browser.models.game import CompressionAlgorithm, DerivedGameRecord
from compactgui_browser.models.view_state import SortKey, ViewMode
from compactgui_browser.services.catalog import QueryResult, query
from compactgui_browser.services.catalog_service import LoadOutcome
from compactgui_browser.services.debounce import Debouncer
from compactgui_browser.services.formatting import format_bytes
from compactgui_browser.ui.widgets import GameCard, PaginationBar

from .base import BaseScreen

log = structlog.stdlib.get_logger()

SEARCH_DEBOUNCE_SECONDS = 0.3


def compact_columns() -> list[str]:
    """Column headers of the compact table."""
    return ["Game", "Steam ID", "Original"] + [algorithm.label for algorithm in CompressionAlgorithm]


def compact_row(record: DerivedGameRecord) -> list[str]:
    """Cells of one compact table row.

    Each algorithm cell shows the compressed size and savings, or "-" when the
    game was not tested with that algorithm.
    """
    cells = [record.game_name, record.steam_id, format_bytes(record.original_size)]
    for algorithm in CompressionAlgorithm:
        result = record.result_for(algorithm)
        if result is None:
            cells.append("-")
        else:
            cells.append(f"{format_bytes(result.after_bytes)} ({result.savings:.1f}%)")
    return cells


def results_summary(result: QueryResult, total_games: int) -> str:
    return (
        f"Showing {len(result.page_items)} of {result.total_matches} matches "
        f"({total_games} games) - page {result.clamped_page}/{result.total_pages}"
    )


class CatalogScreen(BaseScreen):
    """Main catalog browser.

    This screen provides:
    - Debounced live search by game name
    - Sort order and page size selectors
    - Grid, list and compact table layouts
    - Pagination controls
    - Database refresh
    """

    SCREEN_TITLE: ClassVar[str] = "CompactGUI Database"
    SCREEN_NAME: ClassVar[str] = "catalog"

    CSS: ClassVar[str] = """
    #catalog-container {
        width: 100%;
        height: 100%;
        padding: 0 1;
    }

    #controls-row {
        height: 3;
    }

    #search-input {
        width: 2fr;
    }

    #sort-select {
        width: 1fr;
        margin-left: 1;
    }

    #show-select {
        width: 16;
        margin-left: 1;
    }

    #view-buttons {
        height: 3;
        width: auto;
        margin-left: 1;
    }

    #view-buttons Button {
        min-width: 9;
    }

    #view-buttons Button.active {
        background: $accent;
        text-style: bold;
    }

    #refresh-btn.loading {
        text-style: italic;
    }

    #status-row {
        height: 1;
        margin: 1 0 0 0;
    }

    #status-line {
        width: 1fr;
        color: $text-muted;
    }

    #status-line.error {
        color: $error;
    }

    #summary-line {
        width: auto;
        color: $text-muted;
    }

    #results-scroll {
        height: 1fr;
        margin-top: 1;
    }

    #results-grid {
        grid-size: 3;
        grid-gutter: 1 2;
        grid-rows: 9;
        height: auto;
    }

    #results-grid.list-view {
        grid-size: 1;
    }

    #results-table {
        height: 1fr;
        margin-top: 1;
    }

    #no-results {
        text-align: center;
        color: $text-muted;
        padding: 2;
    }

    #pagination {
        margin-top: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("slash", "focus_search", "Search", show=True),
        Binding("r", "refresh_data", "Refresh", show=True),
        Binding("g", "view_grid", "Grid", show=True),
        Binding("l", "view_list", "List", show=True),
        Binding("c", "view_compact", "Compact", show=True),
        Binding("left_square_bracket", "previous_page", "Prev", show=True),
        Binding("right_square_bracket", "next_page", "Next", show=True),
    ]

    class CatalogLoaded(Message):
        """Posted by the loader worker when a load has finished."""

        def __init__(self, outcome: LoadOutcome) -> None:
            super().__init__()
            self.outcome = outcome

    _page_items: list[DerivedGameRecord]
    _last_result: QueryResult | None
    _search_debouncer: Debouncer | None
    _loader_worker: Worker[None] | None

    def __init__(self) -> None:
        super().__init__()
        self._page_items = []
        self._last_result = None
        self._search_debouncer = None
        self._loader_worker = None

    @override
    def compose(self) -> ComposeResult:
        state = self.catalog_app.view_state.state
        sort_options = [(key.label, key.value) for key in SortKey]
        sort_value = state.sort_key if state.sort_key in {key.value for key in SortKey} else SortKey.NAME_ASC.value
        page_size = state.page_size if state.page_size in PAGE_SIZE_OPTIONS else PAGE_SIZE_OPTIONS[0]

        with Container(id="catalog-container"):
            with Horizontal(id="controls-row"):
                yield Input(value=state.search, placeholder="Search games...", id="search-input")
                yield Select(sort_options, value=sort_value, allow_blank=False, id="sort-select")
                yield Select(
                    [(f"Show {size}", size) for size in PAGE_SIZE_OPTIONS],
                    value=page_size,
                    allow_blank=False,
                    id="show-select",
                )
                with Horizontal(id="view-buttons"):
                    yield Button("Grid", id="view-grid")
                    yield Button("List", id="view-list")
                    yield Button("Compact", id="view-compact")
                yield Button("Refresh", id="refresh-btn", variant="primary")

            with Horizontal(id="status-row"):
                yield Static("", id="status-line")
                yield Static("", id="summary-line")

            with VerticalScroll(id="results-scroll"):
                yield Grid(id="results-grid")
            yield DataTable(id="results-table", cursor_type="row", zebra_stripes=True)
            yield Static("No games found.", id="no-results")
            yield PaginationBar(id="pagination")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        table = self.query_one("#results-table", DataTable)
        table.add_columns(*compact_columns())

        debounce_ms = self.catalog_app.config.search_debounce_ms if self.catalog_app.config else None
        delay = debounce_ms / 1000 if debounce_ms is not None else SEARCH_DEBOUNCE_SECONDS
        self._search_debouncer = Debouncer(delay, self._apply_search)

        self._apply_view_mode_classes(self.catalog_app.view_state.state.view_mode)
        await self._render_results()
        self._start_load(force=self.catalog_app.force_refresh)

    async def on_unmount(self) -> None:
        if self._search_debouncer is not None:
            self._search_debouncer.cancel()

    # Loading

    def _start_load(self, force: bool = False) -> None:
        """Start loading the catalog in a worker, replacing any load in flight."""
        service = self.catalog_app.catalog_service
        if service is None:
            self.notify_error("Catalog service not available")
            return

        self.catalog_app.begin_loading()
        if force or not self.catalog_app.app_state.records:
            self._set_status("Fetching latest data...")
        refresh_btn = self.query_one("#refresh-btn", Button)
        _ = refresh_btn.add_class("loading")

        self._loader_worker = self.run_worker(
            self._run_load(force),
            name="catalog_loader",
            group="catalog_loader",
            exclusive=True,
            exit_on_error=False,
        )

    async def _run_load(self, force: bool) -> None:
        """Load the catalog (executed in worker)."""
        service = self.catalog_app.catalog_service
        if service is None:
            return
        outcome = await service.load(force=force)
        self.post_message(self.CatalogLoaded(outcome))

    async def on_catalog_screen_catalog_loaded(self, event: CatalogLoaded) -> None:
        outcome = event.outcome
        if outcome.superseded:
            log.debug("Ignoring superseded catalog load", generation=outcome.generation)
            return

        self.catalog_app.apply_outcome(outcome)
        _ = self.query_one("#refresh-btn", Button).remove_class("loading")

        state = self.catalog_app.app_state
        self._set_status(state.status_message, is_error=outcome.error is not None)
        if outcome.error is not None:
            self.show_error(outcome.error)

        await self._render_results()

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.worker.name != "catalog_loader":
            return
        log.debug("Catalog loader state changed", state=event.state.name)
        if event.state == WorkerState.ERROR:
            _ = self.query_one("#refresh-btn", Button).remove_class("loading")
            error = event.worker.error
            if isinstance(error, Exception):
                self.handle_exception(error, operation="load_catalog")
            self._set_status("Failed to fetch new data.", is_error=True)

    # Rendering

    def _set_status(self, message: str, is_error: bool = False) -> None:
        status = self.query_one("#status-line", Static)
        status.update(message)
        status.set_class(is_error, "error")

    def _apply_view_mode_classes(self, mode: ViewMode) -> None:
        for view_mode in ViewMode:
            button = self.query_one(f"#view-{view_mode.value}", Button)
            button.set_class(view_mode is mode, "active")
        self.query_one("#results-grid", Grid).set_class(mode is ViewMode.LIST, "list-view")

    async def _render_results(self) -> None:
        """Run the query for the current view state and redraw the results."""
        controller = self.catalog_app.view_state
        app_state = self.catalog_app.app_state
        state = controller.state

        result = query(
            app_state.records,
            search_term=state.search,
            sort_key=state.sort_key,
            page_size=state.page_size,
            page=state.page,
        )
        self._last_result = result
        self._page_items = result.page_items
        if result.clamped_page != state.page and app_state.records:
            controller.clamp_page(result.clamped_page)
        self.catalog_app.update_location(controller.location)

        compact = state.view_mode is ViewMode.COMPACT
        scroll = self.query_one("#results-scroll", VerticalScroll)
        table = self.query_one("#results-table", DataTable)
        no_results = self.query_one("#no-results", Static)

        has_items = bool(result.page_items)
        scroll.display = has_items and not compact
        table.display = has_items and compact
        no_results.display = not has_items
        if not has_items:
            if app_state.loading and not app_state.records:
                no_results.update("Loading database...")
            elif not app_state.records:
                no_results.update("No data loaded. Press r to fetch the database.")
            else:
                no_results.update("No games match your search.")

        if compact:
            table.clear()
            for index, record in enumerate(result.page_items):
                table.add_row(*compact_row(record), key=str(index))
        else:
            grid = self.query_one("#results-grid", Grid)
            await grid.remove_children()
            if result.page_items:
                await grid.mount_all(
                    GameCard(record, classes="game-card") for record in result.page_items
                )
            scroll.scroll_home(animate=False)

        self.query_one("#summary-line", Static).update(
            results_summary(result, len(app_state.records)) if app_state.records else ""
        )
        await self.query_one("#pagination", PaginationBar).update_pages(result.total_pages, result.clamped_page)

    # Events

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input" and self._search_debouncer is not None:
            self._search_debouncer.trigger()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search-input" and self._search_debouncer is not None:
            self._search_debouncer.flush()

    def _apply_search(self) -> None:
        """Debounced search handler."""
        value = self.query_one("#search-input", Input).value
        if value == self.catalog_app.view_state.state.search:
            return
        self.catalog_app.view_state.set_search(value)
        self.call_later(self._render_results)

    async def on_select_changed(self, event: Select.Changed) -> None:
        controller = self.catalog_app.view_state
        if event.value is Select.BLANK:
            return
        if event.select.id == "sort-select":
            if event.value == controller.state.sort_key:
                return
            controller.set_sort(str(event.value))
        elif event.select.id == "show-select":
            if event.value == controller.state.page_size:
                return
            controller.set_page_size(int(event.value))  # type: ignore[arg-type]
        else:
            return
        await self._render_results()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "refresh-btn":
            self.action_refresh_data()
        elif button_id == "view-grid":
            await self._set_view_mode(ViewMode.GRID)
        elif button_id == "view-list":
            await self._set_view_mode(ViewMode.LIST)
        elif button_id == "view-compact":
            await self._set_view_mode(ViewMode.COMPACT)

    async def on_pagination_bar_page_selected(self, event: PaginationBar.PageSelected) -> None:
        await self._go_to_page(event.page)

    async def on_game_card_selected(self, event: GameCard.Selected) -> None:
        await self._open_details(event.record)

    async def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value is None:
            return
        index = int(event.row_key.value)
        if 0 <= index < len(self._page_items):
            await self._open_details(self._page_items[index])
        else:
            log.warning("Selected row not found", row_key=event.row_key.value)

    async def _open_details(self, record: DerivedGameRecord) -> None:
        await self.catalog_app.push_screen_with_tracking("details", record=record)

    async def _set_view_mode(self, mode: ViewMode) -> None:
        controller = self.catalog_app.view_state
        if controller.state.view_mode is mode:
            return
        controller.set_view_mode(mode)
        self._apply_view_mode_classes(mode)
        await self._render_results()

    async def _go_to_page(self, page: int) -> None:
        controller = self.catalog_app.view_state
        total_pages = self._last_result.total_pages if self._last_result else 1
        if page < 1 or page > total_pages or page == controller.state.page:
            return
        controller.go_to_page(page)
        await self._render_results()

    # Actions

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()

    def action_refresh_data(self) -> None:
        self._start_load(force=True)

    async def action_view_grid(self) -> None:
        await self._set_view_mode(ViewMode.GRID)

    async def action_view_list(self) -> None:
        await self._set_view_mode(ViewMode.LIST)

    async def action_view_compact(self) -> None:
        await self._set_view_mode(ViewMode.COMPACT)

    async def action_previous_page(self) -> None:
        await self._go_to_page(self.catalog_app.view_state.state.page - 1)

    async def action_next_page(self) -> None:
        await self._go_to_page(self.catalog_app.view_state.state.page + 1)

    async def action_go_back(self) -> None:
        """The catalog is the root screen, so back quits."""
        self.catalog_app.exit()
