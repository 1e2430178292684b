"""View-state controller and location (query string) synchronisation."""

import httpx
import structlog

from compactgui_browser.models.view_state import SortKey, ViewMode, ViewState

from .errors import StorageError, handle_error
from .storage import LocalStorageService

log = structlog.stdlib.get_logger()

VIEW_MODE_KEY = "compactGuiViewMode"


def parse_location(location: str) -> tuple[str, int]:
    """Read the search term and page from a location query string.

    Accepts either a bare query ("search=x&page=2"), one starting with "?",
    or a full URL. Missing or invalid values fall back to no search and page 1.

    Returns:
        Tuple of (search term, page)
    """
    query = location.split("?", 1)[1] if "?" in location else location
    params = httpx.QueryParams(query)

    search = params.get("search") or ""

    page = 1
    raw_page = params.get("page")
    if raw_page:
        try:
            parsed = int(raw_page)
        except ValueError:
            log.debug("Ignoring invalid page in location", page=raw_page)
        else:
            if parsed > 0:
                page = parsed

    return search, page


def build_location(state: ViewState) -> str:
    """Serialise the addressable part of the view state.

    Only a non-blank search term and a page beyond the first are written, so
    the default view has an empty location.
    """
    params: dict[str, str] = {}
    search = state.search.strip()
    if search:
        params["search"] = search
    if state.page > 1:
        params["page"] = str(state.page)
    if not params:
        return ""
    return f"?{httpx.QueryParams(params)}"


class ViewStateController:
    """Owns the view state and applies user actions to it.

    Changing the search term, the sort order or the page size returns to the
    first page; moving between pages does not count as such a change. The
    display mode is persisted in local storage, while search and page only
    live in the location.
    """

    def __init__(
        self,
        storage: LocalStorageService | None = None,
        initial: ViewState | None = None,
    ) -> None:
        self._storage = storage
        self._state = initial or ViewState()
        self._location = build_location(self._state)

    @classmethod
    def from_startup(
        cls,
        storage: LocalStorageService | None,
        location: str = "",
        page_size: int = 24,
        sort_key: str = SortKey.NAME_ASC.value,
    ) -> "ViewStateController":
        """Create a controller seeded from the startup location and stored mode."""
        search, page = parse_location(location)
        controller = cls(storage=storage)
        controller._state = ViewState(
            search=search,
            sort_key=sort_key,
            page_size=page_size,
            page=page,
            view_mode=controller.load_view_mode(),
        )
        controller._location = build_location(controller._state)
        log.info(
            "View state initialised",
            search=search,
            page=page,
            view_mode=controller._state.view_mode.value,
        )
        return controller

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def location(self) -> str:
        """Current location query string, empty for the default view."""
        return self._location

    def set_search(self, search: str) -> ViewState:
        return self._update(search=search, page=1)

    def set_sort(self, sort_key: SortKey | str) -> ViewState:
        value = sort_key.value if isinstance(sort_key, SortKey) else sort_key
        return self._update(sort_key=value, page=1)

    def set_page_size(self, page_size: int) -> ViewState:
        return self._update(page_size=max(int(page_size), 1), page=1)

    def go_to_page(self, page: int) -> ViewState:
        """Move to a page explicitly (pagination controls)."""
        return self._update(page=max(int(page), 1))

    def clamp_page(self, page: int) -> ViewState:
        """Record the page actually shown after the query stage clamped it."""
        if page == self._state.page:
            return self._state
        return self._update(page=page)

    def set_view_mode(self, mode: ViewMode) -> ViewState:
        """Switch the display mode and remember it for future sessions."""
        self._state = self._state.with_changes(view_mode=mode)
        if self._storage is not None:
            try:
                self._storage.set_item(VIEW_MODE_KEY, mode.value)
            except StorageError as e:
                # The mode still applies to this session
                handle_error(e, operation="save_view_mode", component="view_state")
        log.info("View mode changed", view_mode=mode.value)
        return self._state

    def load_view_mode(self) -> ViewMode:
        """Read the stored display mode, grid when absent or unrecognised."""
        if self._storage is None:
            return ViewMode.GRID
        stored = self._storage.get_item(VIEW_MODE_KEY)
        if not stored:
            return ViewMode.GRID
        try:
            return ViewMode(stored)
        except ValueError:
            log.warning("Unknown stored view mode, using grid", stored=stored)
            return ViewMode.GRID

    def _update(self, **changes: object) -> ViewState:
        self._state = self._state.with_changes(**changes)
        location = build_location(self._state)
        if location != self._location:
            self._location = location
            log.debug("Location updated", location=location)
        return self._state
