"""Details screen for a single game."""

from typing import ClassVar

from typing_extensions import override

from textual.app import ComposeResult
from textual.binding import Binding, BindingType
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Static

import structlog

from compactgui_browser.models.game import CompressionAlgorithm, DerivedGameRecord
from compactgui_browser.services.formatting import (
    cover_url,
    fallback_cover_url,
    format_bytes,
    format_savings,
    store_url,
    thumb_url,
)

from .base import BaseScreen

log = structlog.stdlib.get_logger()


def game_details(record: DerivedGameRecord) -> dict[str, str]:
    """Get display information for a game.

    Args:
        record: The game to describe

    Returns:
        Dictionary with the name, Steam id, original size and Steam links
    """
    return {
        "name": record.game_name,
        "steam_id": record.steam_id,
        "original_size": format_bytes(record.original_size),
        "store_url": store_url(record.steam_id),
        "cover_url": cover_url(record.steam_id),
        "fallback_cover_url": fallback_cover_url(record.steam_id),
        "thumb_url": thumb_url(record.steam_id),
    }


def result_rows(record: DerivedGameRecord) -> list[tuple[str, str, str, str]]:
    """Rows of the results table: algorithm, before, after and savings."""
    rows = []
    for algorithm in CompressionAlgorithm:
        result = record.result_for(algorithm)
        if result is None:
            rows.append((algorithm.label, "-", "-", "-"))
        else:
            rows.append((
                algorithm.label,
                format_bytes(result.before_bytes),
                format_bytes(result.after_bytes),
                format_savings(result.savings),
            ))
    return rows


class GameDetailsScreen(BaseScreen):
    """Compression results for one game with links to its Steam pages."""

    SCREEN_TITLE: ClassVar[str] = "Game Details"
    SCREEN_NAME: ClassVar[str] = "details"

    CSS: ClassVar[str] = """
    #details-container {
        width: 100%;
        height: 100%;
        padding: 1 2;
    }

    #details-info {
        height: auto;
        border: solid $primary;
        padding: 1;
    }

    .detail-row {
        height: 1;
    }

    .detail-label {
        width: 16;
        color: $text-muted;
    }

    .detail-value {
        width: 1fr;
    }

    #results-table {
        height: auto;
        margin-top: 1;
    }

    #details-actions {
        height: 3;
        margin-top: 1;
    }

    #details-actions Button {
        margin-right: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("o", "open_store", "Open in Steam", show=True),
    ]

    def __init__(self, record: DerivedGameRecord) -> None:
        super().__init__()
        self.record = record

    @override
    def compose(self) -> ComposeResult:
        info = game_details(self.record)

        with Container(id="details-container"):
            yield self.create_title_widget(info["name"])

            with Vertical(id="details-info"):
                for label, key in (
                    ("Steam ID:", "steam_id"),
                    ("Original Size:", "original_size"),
                    ("Store:", "store_url"),
                    ("Cover:", "cover_url"),
                    ("Cover (alt):", "fallback_cover_url"),
                    ("Thumbnail:", "thumb_url"),
                ):
                    with Horizontal(classes="detail-row"):
                        yield Static(label, classes="detail-label")
                        yield Static(info[key], classes="detail-value", markup=False)

            yield DataTable(id="results-table", cursor_type="row", zebra_stripes=True)

            with Horizontal(id="details-actions"):
                yield Button("Open in Steam", id="btn-open-store", variant="primary")
                yield Button("Back", id="btn-back")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        table = self.query_one("#results-table", DataTable)
        table.add_columns("Algorithm", "Before", "After", "Saved")
        for row in result_rows(self.record):
            table.add_row(*row)
        log.debug("Game details shown", steam_id=self.record.steam_id, game=self.record.game_name)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-open-store":
            self.action_open_store()
        elif event.button.id == "btn-back":
            await self.action_go_back()

    def action_open_store(self) -> None:
        url = store_url(self.record.steam_id)
        log.info("Opening store page", url=url)
        self.app.open_url(url)
