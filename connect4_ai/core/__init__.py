"""
Connect-4 AI Core Package

This package contains the core game logic for Connect-4, including:
- Board representation and rules
- Game flow management
- Constants and enums

All core components can be imported directly from this package.
"""

# Board and rules
from connect4_ai.core.board import Board, IllegalMoveError, create_board

# Game flow
from connect4_ai.core.game import Game, GameResult, simulate_random_game

# Constants
from connect4_ai.core.constants import (
    Piece, ROWS, COLS, CONNECT,
    DEFAULT_SIMULATION_COUNT, DEFAULT_EXPLORATION_WEIGHT
)

__all__ = [
    # Board
    'Board', 'IllegalMoveError', 'create_board',

    # Game
    'Game', 'GameResult', 'simulate_random_game',

    # Constants
    'Piece', 'ROWS', 'COLS', 'CONNECT',
    'DEFAULT_SIMULATION_COUNT', 'DEFAULT_EXPLORATION_WEIGHT'
]
