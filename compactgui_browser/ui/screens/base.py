"""Base screen class with common functionality for all screens."""

from typing import TYPE_CHECKING, ClassVar

from textual.binding import Binding, BindingType
from textual.screen import Screen
from textual.widgets import Static

import structlog

from compactgui_browser.services.errors import (
    ErrorSeverity,
    UserFriendlyError,
    get_error_service,
    handle_error,
)

if TYPE_CHECKING:
    from compactgui_browser.ui.app import CatalogApp

log = structlog.stdlib.get_logger()


class BaseScreen(Screen[None]):
    """Base screen class providing common functionality for application screens.

    This class provides:
    - Common key bindings (escape for back navigation)
    - Access to the parent application and its services
    - Notification helpers that also log what the user was shown
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "go_back", "Back", show=True),
    ]

    SCREEN_TITLE: ClassVar[str] = "Screen"
    SCREEN_NAME: ClassVar[str] = "base"

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name=name or self.SCREEN_NAME)

    @property
    def catalog_app(self) -> "CatalogApp":
        """Get the parent CatalogApp instance.

        Raises:
            RuntimeError: If the screen is not attached to a CatalogApp
        """
        from compactgui_browser.ui.app import CatalogApp

        if isinstance(self.app, CatalogApp):
            return self.app
        raise RuntimeError("Screen is not attached to a CatalogApp")

    async def on_mount(self) -> None:
        log.debug("Screen mounted", screen=self.SCREEN_NAME)

    async def action_go_back(self) -> None:
        """Navigate back to the previous screen."""
        await self.catalog_app.action_go_back()

    def create_title_widget(self, title: str | None = None) -> Static:
        return Static(title or self.SCREEN_TITLE, classes="title")

    def notify_error(self, message: str) -> None:
        self.notify(message, severity="error")
        log.error("User notification", message=message, screen=self.SCREEN_NAME)

    def notify_success(self, message: str) -> None:
        self.notify(message, severity="information")
        log.info("User notification", message=message, screen=self.SCREEN_NAME)

    def notify_warning(self, message: str) -> None:
        self.notify(message, severity="warning")
        log.warning("User notification", message=message, screen=self.SCREEN_NAME)

    def show_error(self, error: UserFriendlyError, include_suggestions: bool = False) -> None:
        """Display an already handled error as a notification."""
        message = get_error_service().create_user_message(error, include_suggestions=include_suggestions)
        if error.severity == ErrorSeverity.WARNING:
            self.notify_warning(message)
        else:
            self.notify_error(message)

    def handle_exception(
        self,
        error: Exception,
        operation: str,
        context: dict[str, str | int | float | bool] | None = None,
    ) -> UserFriendlyError:
        """Convert, log and display an exception.

        Args:
            error: The exception that occurred
            operation: Description of the operation that failed
            context: Additional context information

        Returns:
            UserFriendlyError with message and suggested actions
        """
        user_error = handle_error(
            error=error,
            operation=operation,
            component=self.SCREEN_NAME,
            context=context,
        )
        self.show_error(user_error)
        return user_error
