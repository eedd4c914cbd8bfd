"""
Terminal rendering for Connect-4 boards and search diagnostics.

All functions return rich renderables; printing is left to the caller.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional

from rich import box
from rich.table import Table
from rich.text import Text

from connect4_ai.core.board import Board
from connect4_ai.core.constants import Piece, ROWS, COLS, PIECE_SYMBOLS, PIECE_STYLES

if TYPE_CHECKING:
    from connect4_ai.mcts.search import SearchResult


def render_cell(piece: Piece) -> Text:
    symbol = PIECE_SYMBOLS[piece] if piece is not Piece.EMPTY else "."
    return Text(symbol, style=PIECE_STYLES[piece])


def render_board(board: Board, last_move: Optional[int] = None) -> Table:
    """
    Render a board as a table with 1-based column headers.

    Args:
        board: Board to render
        last_move: Column of the last move, highlighted in the header

    Returns:
        rich Table
    """
    table = Table(box=box.ROUNDED, show_lines=False, padding=(0, 1))
    for c in range(COLS):
        style = "bold green" if c == last_move else "bold"
        table.add_column(str(c + 1), justify="center", header_style=style)

    for r in range(ROWS):
        table.add_row(*(render_cell(board.cell(r, c)) for c in range(COLS)))

    return table


def render_search_result(result: 'SearchResult', title: str = "MCTS Debug") -> Table:
    """
    Render per-move search statistics.

    The chosen move is marked and highlighted.

    Args:
        result: Search result to render
        title: Table title

    Returns:
        rich Table
    """
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Col", justify="right")
    table.add_column("Visits", justify="right")
    table.add_column("Avg score", justify="right")
    table.add_column("Win %", justify="right")
    table.add_column("")

    for child in result.children:
        chosen = child.move == result.move
        table.add_row(
            str(child.move + 1),
            str(child.visits),
            f"{child.average_score:.2f}",
            f"{child.win_rate:.1f}%",
            "*" if chosen else "",
            style="bold green" if chosen else None,
        )

    return table
