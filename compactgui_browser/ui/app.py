"""Main Textual application with screen management and catalog state."""

from dataclasses import dataclass, field
from typing import Any, ClassVar

from typing_extensions import override

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.reactive import reactive
from textual.widgets import Footer, Header

from rich.markup import escape
import structlog

from compactgui_browser.models.config import AppConfig
from compactgui_browser.models.game import Dataset, DerivedGameRecord
from compactgui_browser.services.catalog import derive_all
from compactgui_browser.services.catalog_service import CatalogService, LoadOrigin, LoadOutcome
from compactgui_browser.services.errors import AppError, get_error_service
from compactgui_browser.services.view_state import ViewStateController


log = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class AppState:
    """Catalog data currently shown by the application.

    The state is replaced wholesale, never mutated: pure functions take the
    current state and return the next one.
    """

    dataset: Dataset = field(default_factory=list)
    records: list[DerivedGameRecord] = field(default_factory=list)
    origin: LoadOrigin = LoadOrigin.NONE
    loading: bool = False
    status_message: str = ""


def describe_outcome(outcome: LoadOutcome) -> str:
    """Status line text for a finished load."""
    count = len(outcome.dataset) if outcome.dataset is not None else 0
    if outcome.origin is LoadOrigin.CACHE:
        return f"Loaded {count} games from cache."
    if outcome.origin is LoadOrigin.PRIMARY:
        return f"Loaded {count} games."
    if outcome.origin is LoadOrigin.FALLBACK:
        return f"Loaded {count} games from the fallback mirror."
    if outcome.origin is LoadOrigin.STALE_CACHE:
        return f"Failed to fetch new data. Showing {count} cached games."
    return "Failed to fetch new data."


def apply_load_outcome(state: AppState, outcome: LoadOutcome) -> AppState:
    """Fold a load result into the application state.

    A load that produced no dataset keeps whatever was already displayed.
    """
    if outcome.dataset is None:
        return AppState(
            dataset=state.dataset,
            records=state.records,
            origin=state.origin,
            loading=False,
            status_message=describe_outcome(outcome),
        )
    return AppState(
        dataset=outcome.dataset,
        records=derive_all(outcome.dataset),
        origin=outcome.origin,
        loading=False,
        status_message=describe_outcome(outcome),
    )


def recent_errors_summary(errors: list[AppError]) -> str:
    """Notification text listing errors newest first."""
    if not errors:
        return "No errors this session."
    lines = [f"Recent errors ({len(errors)}):"]
    lines.extend(f"- [{error.category.value}] {error.message}" for error in reversed(errors))
    return "\n".join(lines)


def mark_loading(state: AppState, message: str = "Fetching latest data...") -> AppState:
    return AppState(
        dataset=state.dataset,
        records=state.records,
        origin=state.origin,
        loading=True,
        status_message=message,
    )


class CatalogApp(App[None]):
    """TUI for browsing the CompactGUI compression database.

    The root application owns the catalog state and the view-state controller
    and manages the screen stack.
    """

    CSS: ClassVar[str] = """
    Screen {
        background: $surface;
    }

    .title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True, priority=True),
        Binding("?", "show_help", "Help", show=True),
        Binding("e", "show_errors", "Errors", show=True),
    ]

    app_state: reactive[AppState] = reactive(AppState, init=False)

    _catalog_service: CatalogService | None
    _view_state: ViewStateController
    _config: AppConfig | None
    _navigation_stack: list[str]

    def __init__(
        self,
        catalog_service: CatalogService | None = None,
        view_state: ViewStateController | None = None,
        config: AppConfig | None = None,
        force_refresh: bool = False,
    ) -> None:
        """Initialize the application with optional service injection.

        Args:
            catalog_service: Service loading the catalog from cache or network
            view_state: Controller holding search, sort, page and display mode
            config: Application configuration
            force_refresh: Skip the cache on the first load
        """
        super().__init__()
        self.title = "CompactGUI Browser"  # type: ignore[assignment]
        self.sub_title = "Compression results for Steam games"  # type: ignore[assignment]
        self._catalog_service = catalog_service
        self._view_state = view_state or ViewStateController()
        self._config = config
        self._force_refresh = force_refresh
        self._navigation_stack = []
        self.app_state = AppState()

        log.info("CatalogApp initialized")

    @property
    def catalog_service(self) -> CatalogService | None:
        return self._catalog_service

    @property
    def view_state(self) -> ViewStateController:
        return self._view_state

    @property
    def config(self) -> AppConfig | None:
        return self._config

    @property
    def force_refresh(self) -> bool:
        """Whether the first load should bypass the cache."""
        return self._force_refresh

    @property
    def navigation_stack(self) -> list[str]:
        return self._navigation_stack.copy()

    @override
    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()

    async def on_mount(self) -> None:
        await self.push_screen_with_tracking("catalog")

    async def push_screen_with_tracking(self, screen_name: str, **kwargs: Any) -> None:
        """Push a screen and track it in the navigation stack.

        Args:
            screen_name: Name of the screen to push
            **kwargs: Arguments passed to the screen constructor
        """
        from compactgui_browser.ui.screens import get_screen_by_name

        screen = get_screen_by_name(screen_name, **kwargs)
        if screen:
            self._navigation_stack.append(screen_name)
            await self.push_screen(screen)
            log.info("Screen pushed", screen=screen_name, stack_depth=len(self._navigation_stack))
        else:
            log.warning("Unknown screen requested", screen=screen_name)

    async def action_go_back(self) -> None:
        """Navigate back to the previous screen."""
        if len(self._navigation_stack) > 1:
            current = self._navigation_stack.pop()
            log.info("Navigating back", from_screen=current, stack_depth=len(self._navigation_stack))
            _ = self.pop_screen()
        else:
            log.debug("Already at root screen, cannot go back")

    async def action_show_help(self) -> None:
        self.notify(
            "/ search, r refresh, g/l/c grid/list/compact, [ ] previous/next page, "
            "enter open game, e recent errors, escape back, q quit"
        )

    async def action_show_errors(self) -> None:
        errors = get_error_service().get_recent_errors(5)
        self.notify(escape(recent_errors_summary(errors)), severity="warning" if errors else "information")

    def update_location(self, location: str) -> None:
        """Show the current location in the header."""
        self.sub_title = location or "Compression results for Steam games"  # type: ignore[assignment]

    def begin_loading(self) -> None:
        self.app_state = mark_loading(self.app_state)

    def apply_outcome(self, outcome: LoadOutcome) -> None:
        """Replace the catalog state with the result of a load."""
        self.app_state = apply_load_outcome(self.app_state, outcome)
        log.info(
            "Catalog state updated",
            origin=outcome.origin.value,
            games=len(self.app_state.records),
        )
