"""
Connect-4 AI - A Monte Carlo Tree Search player for Connect-4.

This package provides a complete implementation of the Connect-4 rules,
an MCTS agent that plays from random playouts, and terminal front-ends for
playing against it or pitting agents against each other.
"""

__version__ = "0.1.0"
__author__ = "Connect-4 AI Team"

# Make key components available at package level
from connect4_ai.core.board import Board, IllegalMoveError
from connect4_ai.core.game import Game, GameResult
from connect4_ai.core.constants import Piece
from connect4_ai.mcts.search import mcts_search, choose_move

# Version info as a tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split('.')))
