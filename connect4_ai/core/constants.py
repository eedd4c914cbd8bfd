"""
Constants for the Connect-4 game.

This module defines the board geometry, piece values and the default search
parameters used throughout the Connect-4 implementation.
"""
from enum import IntEnum
from typing import Dict, Final


class Piece(IntEnum):
    """
    Enum representing the content of a board cell.

    The values are chosen so that a winning piece doubles as the signed
    playout outcome: X wins score +1, O wins score -1, a draw scores 0.
    """
    EMPTY = 0
    X = 1
    O = -1

    @property
    def opponent(self) -> 'Piece':
        """Get the other player (EMPTY has no opponent)."""
        if self is Piece.EMPTY:
            raise ValueError("EMPTY has no opponent")
        return Piece(-self.value)


# Board geometry
ROWS: Final[int] = 6
COLS: Final[int] = 7
CONNECT: Final[int] = 4  # Pieces in a row needed to win

# Symbols for terminal display
PIECE_SYMBOLS: Final[Dict[Piece, str]] = {
    Piece.EMPTY: " ",
    Piece.X: "X",
    Piece.O: "O",
}

# Colours used by the rich renderer
PIECE_STYLES: Final[Dict[Piece, str]] = {
    Piece.EMPTY: "dim",
    Piece.X: "bold red",
    Piece.O: "bold yellow",
}

# Playout outcomes from X's point of view
X_WIN: Final[float] = 1.0
O_WIN: Final[float] = -1.0
DRAW: Final[float] = 0.0

# AI and simulation settings
DEFAULT_SIMULATION_COUNT: Final[int] = 10000
DEFAULT_EXPLORATION_WEIGHT: Final[float] = 1.414  # UCB1 exploration parameter (~sqrt(2))
