"""Card widget showing one game and its compression results."""

from typing import ClassVar

from rich.console import Group
from rich.table import Table
from rich.text import Text
from textual import events
from textual.message import Message
from textual.widgets import Static

from compactgui_browser.models.game import CompressionAlgorithm, DerivedGameRecord
from compactgui_browser.services.formatting import format_bytes, format_savings


def card_rows(record: DerivedGameRecord) -> list[tuple[str, str, str]]:
    """Rows of the per-algorithm table on a game card.

    Algorithms the game was not tested with are skipped; a game without any
    results gets a single N/A row.

    Returns:
        List of (algorithm, size after compression, savings) tuples
    """
    rows = []
    for algorithm in CompressionAlgorithm:
        result = record.result_for(algorithm)
        if result is not None:
            rows.append((algorithm.label, format_bytes(result.after_bytes), format_savings(result.savings)))
    if not rows:
        rows.append(("N/A", "", ""))
    return rows


class GameCard(Static):
    """Clickable card for one game."""

    DEFAULT_CSS: ClassVar[str] = """
    GameCard {
        height: auto;
        padding: 0 1;
        border: round $primary-darken-2;
        background: $panel;
    }

    GameCard:hover {
        border: round $accent;
    }

    GameCard:focus {
        border: round $accent;
    }
    """

    can_focus = True

    class Selected(Message):
        """Posted when the user opens a card."""

        def __init__(self, record: DerivedGameRecord) -> None:
            super().__init__()
            self.record = record

    def __init__(self, record: DerivedGameRecord, id: str | None = None, classes: str | None = None) -> None:
        super().__init__(self._build_renderable(record), id=id, classes=classes)
        self.record = record

    @staticmethod
    def _build_renderable(record: DerivedGameRecord) -> Group:
        title = Text(record.game_name, style="bold", overflow="ellipsis", no_wrap=True)
        meta = Text.assemble(("Original Size: ", "dim"), (format_bytes(record.original_size), "bold"))

        table = Table(expand=True, box=None, pad_edge=False, show_edge=False)
        table.add_column("Algorithm")
        table.add_column("After", justify="right")
        table.add_column("Saved", justify="right", style="green")
        for row in card_rows(record):
            table.add_row(*row)

        return Group(title, meta, table)

    def on_click(self, event: events.Click) -> None:
        self.post_message(self.Selected(self.record))

    def key_enter(self) -> None:
        self.post_message(self.Selected(self.record))
