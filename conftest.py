"""
Pytest configuration and shared fixtures for the Connect-4 tests.
"""
import random

import pytest

from connect4_ai.core.board import Board
from connect4_ai.core.constants import Piece

TEST_SEED = 42


@pytest.fixture
def rng():
    """Seeded random generator (fresh per test)."""
    return random.Random(TEST_SEED)


@pytest.fixture
def near_win_board():
    """X to move with three in a row on the bottom row; column 3 wins."""
    return Board.from_rows([
        ".......",
        ".......",
        ".......",
        ".......",
        "OOO....",
        "XXX....",
    ])


@pytest.fixture
def drawn_board():
    """Full board without four in a row anywhere."""
    return Board.from_rows([
        "XOXOXOX",
        "XOXOXOX",
        "OXOXOXO",
        "OXOXOXO",
        "XOXOXOX",
        "XOXOXOX",
    ], current_player=Piece.X)
