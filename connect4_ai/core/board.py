"""
Board representation and rules for Connect-4.

This module defines the Board class which holds the grid and the player to
move, together with the pure rule queries the search engine relies on:
- legal move generation
- move application (gravity drop + player flip)
- win and draw detection
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence

import numpy as np

from connect4_ai.core.constants import (
    Piece, ROWS, COLS, CONNECT, PIECE_SYMBOLS
)


class IllegalMoveError(ValueError):
    """Raised when a move targets a column that is out of range or full."""


# Characters accepted by Board.from_rows
_CELL_CHARS: Dict[str, Piece] = {
    "X": Piece.X,
    "O": Piece.O,
    ".": Piece.EMPTY,
    " ": Piece.EMPTY,
    "-": Piece.EMPTY,
}


# (row step, column step) for horizontal, vertical, diagonal, anti-diagonal
_DIRECTIONS = ((0, 1), (1, 0), (1, 1), (1, -1))


def _empty_grid() -> np.ndarray:
    return np.zeros((ROWS, COLS), dtype=np.int8)


@dataclass(eq=False)
class Board:
    """
    A Connect-4 position.

    The grid is a ROWS x COLS int8 array holding Piece values. Row 0 is the
    top row; pieces fall towards row ROWS - 1. Boards are values: use clone()
    before handing one to code that may mutate it.
    """
    grid: np.ndarray = field(default_factory=_empty_grid)
    current_player: Piece = Piece.X

    def __post_init__(self):
        """Validate the grid shape and normalise the player type."""
        if self.grid.shape != (ROWS, COLS):
            raise ValueError(f"Board grid must have shape {(ROWS, COLS)}, got {self.grid.shape}")
        self.current_player = Piece(self.current_player)
        if self.current_player is Piece.EMPTY:
            raise ValueError("current_player must be X or O")

    @classmethod
    def initial(cls) -> 'Board':
        """
        Get the starting position: an empty grid with X to move.

        Returns:
            New Board
        """
        return cls()

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[str],
        current_player: Optional[Piece] = None
    ) -> 'Board':
        """
        Build a board from text rows, top row first.

        Each row holds COLS characters: 'X', 'O', or '.'/'-'/' ' for empty.
        When current_player is omitted it is inferred from the piece counts
        (X moves first, so equal counts mean X to move).

        Args:
            rows: ROWS strings describing the grid
            current_player: Player to move, or None to infer it

        Returns:
            New Board
        """
        if len(rows) != ROWS:
            raise ValueError(f"Expected {ROWS} rows, got {len(rows)}")

        grid = _empty_grid()
        for r, row in enumerate(rows):
            if len(row) != COLS:
                raise ValueError(f"Row {r} must have {COLS} cells, got {len(row)}: {row!r}")
            for c, char in enumerate(row.upper()):
                if char not in _CELL_CHARS:
                    raise ValueError(f"Unknown cell character {char!r} in row {r}")
                grid[r, c] = _CELL_CHARS[char]

        # Every piece must rest on another piece or on the bottom row
        for c in range(COLS):
            occupied = grid[:, c] != Piece.EMPTY
            first = int(np.argmax(occupied)) if occupied.any() else ROWS
            if not occupied[first:].all():
                raise ValueError(f"Column {c} has a floating piece")

        if current_player is None:
            x_count = int(np.count_nonzero(grid == Piece.X))
            o_count = int(np.count_nonzero(grid == Piece.O))
            if x_count == o_count:
                current_player = Piece.X
            elif x_count == o_count + 1:
                current_player = Piece.O
            else:
                raise ValueError(
                    f"Cannot infer player to move from {x_count} X and {o_count} O pieces"
                )

        return cls(grid=grid, current_player=current_player)

    @property
    def move_count(self) -> int:
        """Number of pieces on the board."""
        return int(np.count_nonzero(self.grid))

    def cell(self, row: int, col: int) -> Piece:
        """Get the piece at a cell."""
        return Piece(int(self.grid[row, col]))

    def legal_moves(self) -> List[int]:
        """
        Get the columns that can still receive a piece, left to right.

        Returns:
            List of column indices (empty if the board is full)
        """
        return [int(c) for c in np.flatnonzero(self.grid[0] == Piece.EMPTY)]

    def is_full(self) -> bool:
        """Check whether every column is filled to the top."""
        return not (self.grid[0] == Piece.EMPTY).any()

    def apply_move(self, column: int) -> int:
        """
        Drop the current player's piece into a column and pass the turn.

        The board is modified in place.

        Args:
            column: 0-based column index

        Returns:
            Row index the piece landed in

        Raises:
            IllegalMoveError: If the column is out of range or full
        """
        if not 0 <= column < COLS:
            raise IllegalMoveError(f"Column {column} is out of range (0-{COLS - 1})")

        empty_rows = np.flatnonzero(self.grid[:, column] == Piece.EMPTY)
        if empty_rows.size == 0:
            raise IllegalMoveError(f"Column {column} is full")

        row = int(empty_rows[-1])
        self.grid[row, column] = self.current_player
        self.current_player = self.current_player.opponent
        return row

    def _line_sums(self) -> Iterator[np.ndarray]:
        """
        Yield the sum of every CONNECT-long window, one array per orientation.

        A window summing to CONNECT * X is four X pieces; to CONNECT * O, four O.
        """
        g = self.grid
        span_r = ROWS - CONNECT + 1
        span_c = COLS - CONNECT + 1

        # Horizontal
        yield sum(g[:, k:span_c + k] for k in range(CONNECT))
        # Vertical
        yield sum(g[k:span_r + k, :] for k in range(CONNECT))
        # Diagonal (down-right)
        yield sum(g[k:span_r + k, k:span_c + k] for k in range(CONNECT))
        # Anti-diagonal (down-left)
        yield sum(
            g[k:span_r + k, CONNECT - 1 - k:span_c + CONNECT - 1 - k]
            for k in range(CONNECT)
        )

    def winner(self) -> Optional[Piece]:
        """
        Get the player with four in a row, if any.

        All windows in all four orientations are checked before answering.

        Returns:
            Piece.X, Piece.O, or None
        """
        x_wins = False
        o_wins = False
        for sums in self._line_sums():
            x_wins = x_wins or bool((sums == CONNECT * Piece.X).any())
            o_wins = o_wins or bool((sums == CONNECT * Piece.O).any())

        if x_wins:
            return Piece.X
        if o_wins:
            return Piece.O
        return None

    def connects_at(self, row: int, col: int) -> bool:
        """
        Check whether the piece at a cell is part of CONNECT in a row.

        Only the four lines through the cell are walked, so this is the
        check to run right after apply_move() instead of winner().

        Args:
            row: Row index of the cell
            col: Column index of the cell

        Returns:
            True if the cell's piece completes a line
        """
        g = self.grid
        piece = g[row, col]
        if piece == Piece.EMPTY:
            return False

        for dr, dc in _DIRECTIONS:
            run = 1
            for sign in (1, -1):
                r, c = row + sign * dr, col + sign * dc
                while 0 <= r < ROWS and 0 <= c < COLS and g[r, c] == piece:
                    run += 1
                    r += sign * dr
                    c += sign * dc
            if run >= CONNECT:
                return True
        return False

    def is_terminal(self) -> bool:
        """Check whether the game is over (a win or a full board)."""
        return self.winner() is not None or self.is_full()

    def clone(self) -> 'Board':
        """
        Create an independent copy of the board.

        Returns:
            New Board with its own grid
        """
        return Board(grid=self.grid.copy(), current_player=self.current_player)

    def to_rows(self) -> List[str]:
        """Get the grid as text rows, top row first ('.' for empty)."""
        symbols = {Piece.X: "X", Piece.O: "O", Piece.EMPTY: "."}
        return [
            "".join(symbols[Piece(int(v))] for v in self.grid[r])
            for r in range(ROWS)
        ]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the board to a dictionary for serialization.

        Returns:
            Dictionary representation
        """
        return {
            "rows": self.to_rows(),
            "current_player": self.current_player.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Board':
        """
        Create a board from a dictionary produced by to_dict().

        Args:
            data: Dictionary representation

        Returns:
            Board
        """
        return cls.from_rows(data["rows"], Piece[data["current_player"]])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (self.current_player == other.current_player
                and np.array_equal(self.grid, other.grid))

    def __str__(self) -> str:
        """
        Get a plain-text rendering of the board with 1-based column labels.

        Returns:
            String representation
        """
        lines = []
        for r in range(ROWS):
            lines.append("".join(f" {PIECE_SYMBOLS[Piece(int(v))]} " for v in self.grid[r]))
        lines.append("".join(f" {c + 1} " for c in range(COLS)))
        return "\n".join(lines)


def create_board() -> Board:
    """Create a new empty board with X to move."""
    return Board.initial()
