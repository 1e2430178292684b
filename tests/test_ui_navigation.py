"""Property-based tests for UI navigation and application state."""

from hypothesis import given, settings, strategies as st

from compactgui_browser.models import RawGameRecord
from compactgui_browser.services.catalog import derive_record
from compactgui_browser.services.catalog_service import LoadOrigin, LoadOutcome
from compactgui_browser.services.errors import NetworkError, StorageError
from compactgui_browser.ui.app import (
    AppState,
    CatalogApp,
    apply_load_outcome,
    describe_outcome,
    recent_errors_summary,
)
from compactgui_browser.ui.screens import (
    BaseScreen,
    CatalogScreen,
    GameDetailsScreen,
    get_screen_by_name,
)

DATASET = [
    RawGameRecord(steam_id="620", game_name="Portal 2"),
    RawGameRecord(steam_id="400", game_name="Portal"),
]


class TestScreenRegistry:
    """Tests for screen registry functionality."""

    def test_catalog_is_registered(self) -> None:
        screen = get_screen_by_name("catalog")
        assert screen is not None
        assert isinstance(screen, CatalogScreen)

    def test_details_screen_receives_record(self) -> None:
        record = derive_record(DATASET[0])

        screen = get_screen_by_name("details", record=record)

        assert isinstance(screen, GameDetailsScreen)
        assert screen.record is record

    def test_unknown_screen_returns_none(self) -> None:
        assert get_screen_by_name("nonexistent_screen") is None


class TestNavigationStack:
    """Tests for navigation stack management."""

    def test_app_starts_with_empty_navigation_stack(self) -> None:
        app = CatalogApp()
        assert app.navigation_stack == []

    def test_navigation_stack_is_copy(self) -> None:
        app = CatalogApp()
        stack1 = app.navigation_stack
        stack2 = app.navigation_stack

        assert stack1 == stack2

        stack1.append("test")
        assert "test" not in app.navigation_stack

    @given(st.lists(st.sampled_from(["catalog", "details"]), min_size=2, max_size=10))
    @settings(max_examples=50)
    def test_back_navigation_preserves_order(self, screens: list[str]) -> None:
        """Popping screens one by one leaves the earlier screens in order."""
        app = CatalogApp()
        for screen in screens:
            app._navigation_stack.append(screen)

        remaining = screens.copy()
        while len(app._navigation_stack) > 1:
            popped = app._navigation_stack.pop()
            expected_popped = remaining.pop()

            assert popped == expected_popped
            assert app._navigation_stack == remaining


class TestAppState:
    """Tests for application state management."""

    def test_app_state_defaults(self) -> None:
        state = AppState()
        assert state.dataset == []
        assert state.records == []
        assert state.origin is LoadOrigin.NONE
        assert state.loading is False

    def test_app_initializes_with_state(self) -> None:
        app = CatalogApp()
        assert isinstance(app.app_state, AppState)
        assert app.app_state.records == []
        assert app.catalog_service is None
        assert app.view_state.state.page == 1
        assert app.force_refresh is False

    def test_successful_load_replaces_records(self) -> None:
        outcome = LoadOutcome(dataset=DATASET, origin=LoadOrigin.PRIMARY)

        state = apply_load_outcome(AppState(loading=True), outcome)

        assert state.dataset == DATASET
        assert [r.game_name for r in state.records] == ["Portal 2", "Portal"]
        assert state.origin is LoadOrigin.PRIMARY
        assert state.loading is False
        assert state.status_message == "Loaded 2 games."

    def test_failed_load_keeps_previous_records(self) -> None:
        previous = apply_load_outcome(AppState(), LoadOutcome(dataset=DATASET, origin=LoadOrigin.CACHE))
        error = NetworkError("Failed to fetch").to_user_friendly()

        state = apply_load_outcome(previous, LoadOutcome(dataset=None, origin=LoadOrigin.NONE, error=error))

        assert state.records == previous.records
        assert state.origin is LoadOrigin.CACHE
        assert state.status_message == "Failed to fetch new data."

    def test_describe_outcome(self) -> None:
        assert describe_outcome(LoadOutcome(dataset=DATASET, origin=LoadOrigin.CACHE)) == "Loaded 2 games from cache."
        assert describe_outcome(LoadOutcome(dataset=DATASET, origin=LoadOrigin.FALLBACK)) == (
            "Loaded 2 games from the fallback mirror."
        )
        assert describe_outcome(LoadOutcome(dataset=DATASET, origin=LoadOrigin.STALE_CACHE)) == (
            "Failed to fetch new data. Showing 2 cached games."
        )

    def test_recent_errors_summary_lists_newest_first(self) -> None:
        errors = [NetworkError("Mirror unreachable"), StorageError("Disk full")]

        assert recent_errors_summary(errors) == (
            "Recent errors (2):\n- [storage] Disk full\n- [network] Mirror unreachable"
        )

    def test_recent_errors_summary_without_errors(self) -> None:
        assert recent_errors_summary([]) == "No errors this session."


class TestBaseScreen:
    """Tests for BaseScreen functionality."""

    def test_base_screen_has_correct_defaults(self) -> None:
        assert BaseScreen.SCREEN_TITLE == "Screen"
        assert BaseScreen.SCREEN_NAME == "base"

    def test_screen_metadata(self) -> None:
        assert CatalogScreen.SCREEN_NAME == "catalog"
        assert GameDetailsScreen.SCREEN_NAME == "details"
