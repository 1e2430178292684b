"""Custom widgets for the catalog browser."""

from .game_card import GameCard, card_rows
from .pagination import PaginationBar

__all__ = [
    "GameCard",
    "PaginationBar",
    "card_rows",
]
