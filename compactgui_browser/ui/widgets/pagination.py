"""Pagination bar widget."""

from typing import ClassVar

from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button, Static

import structlog

from compactgui_browser.services.catalog import PageControlKind, pagination_controls

log = structlog.stdlib.get_logger()


class PageButton(Button):
    """Button that jumps to a fixed page."""

    def __init__(self, label: str, page: int, **kwargs: object) -> None:
        super().__init__(label, **kwargs)  # type: ignore[arg-type]
        self.page = page


class PaginationBar(Horizontal):
    """Prev / page numbers / Next controls for the catalog."""

    DEFAULT_CSS: ClassVar[str] = """
    PaginationBar {
        height: auto;
        align: center middle;
    }

    PaginationBar Button {
        min-width: 5;
        margin: 0 1;
    }

    PaginationBar Button.active {
        background: $accent;
        text-style: bold;
    }

    PaginationBar .ellipsis {
        width: 3;
        content-align: center middle;
        color: $text-muted;
    }
    """

    class PageSelected(Message):
        """Posted when a pagination button is pressed."""

        def __init__(self, page: int) -> None:
            super().__init__()
            self.page = page

    async def update_pages(self, total_pages: int, current_page: int) -> None:
        """Rebuild the controls for a new position."""
        await self.remove_children()

        widgets: list[PageButton | Static] = []
        for index, control in enumerate(pagination_controls(total_pages, current_page)):
            if control.kind is PageControlKind.ELLIPSIS:
                widgets.append(Static(control.label, classes="ellipsis"))
                continue
            button = PageButton(
                control.label,
                page=control.page or 1,
                id=f"page-btn-{index}",
                classes="page-btn active" if control.active else "page-btn",
                disabled=control.disabled,
            )
            widgets.append(button)

        if widgets:
            await self.mount_all(widgets)
        self.display = bool(widgets)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if not isinstance(event.button, PageButton):
            return
        event.stop()
        log.debug("Page selected", page=event.button.page)
        self.post_message(self.PageSelected(event.button.page))
