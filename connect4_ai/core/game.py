"""
Game flow management for Connect-4.

This module defines the driver that sits between players and the rules:
- GameResult: outcome of a game
- Game: alternates turns between registered agents or externally supplied moves
- simulate_random_game: plays a full game with uniformly random moves
"""
from __future__ import annotations
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Tuple
import random

from connect4_ai.core.board import Board
from connect4_ai.core.constants import Piece, ROWS, COLS


# An agent callback receives a copy of the current board and returns a column
AgentCallback = Callable[[Board], int]


class GameResult(Enum):
    """Enum representing possible game results."""
    IN_PROGRESS = auto()
    WINNER = auto()  # Game has a winner
    DRAW = auto()  # Board filled up without four in a row


class Game:
    """
    Manager for the flow of a Connect-4 game.

    Moves are either passed to step() directly (e.g. from a human at the
    terminal) or produced by agent callbacks registered per player.
    """

    def __init__(self, board: Optional[Board] = None):
        """
        Initialize a game.

        Args:
            board: Starting position (defaults to the empty board)
        """
        self._start = board.clone() if board is not None else Board.initial()
        self.agents: Dict[Piece, AgentCallback] = {}
        self.board = self._start.clone()
        self.history: List[Tuple[Piece, int]] = []  # (player, column)

    def reset(self) -> Board:
        """
        Reset the game to its starting position.

        Registered agents are kept.

        Returns:
            The fresh board
        """
        self.board = self._start.clone()
        self.history = []
        return self.board

    def register_agent(self, player: Piece, agent_callback: AgentCallback) -> None:
        """
        Register an agent callback for a player.

        Args:
            player: Piece.X or Piece.O
            agent_callback: Function mapping a board to a column
        """
        if player is Piece.EMPTY:
            raise ValueError("Agents can only be registered for X or O")
        self.agents[player] = agent_callback

    @property
    def current_player(self) -> Piece:
        """Get the player to move."""
        return self.board.current_player

    def is_over(self) -> bool:
        """Check whether the game has finished."""
        return self.board.is_terminal()

    def step(self, column: Optional[int] = None) -> Tuple[Board, bool]:
        """
        Play one move.

        If no column is given, the registered agent of the player to move is
        asked for one.

        Args:
            column: Column to play, or None to ask the registered agent

        Returns:
            Tuple of (board after the move, whether the game is over)

        Raises:
            ValueError: If the game is over or no move source is available
            IllegalMoveError: If the column cannot be played
        """
        if self.is_over():
            raise ValueError("Game is already over")

        player = self.board.current_player
        if column is None:
            agent = self.agents.get(player)
            if agent is None:
                raise ValueError(f"No move provided and no agent registered for player {player.name}")
            column = agent(self.board.clone())

        self.board.apply_move(column)
        self.history.append((player, column))

        return self.board, self.is_over()

    def run_game(self, max_turns: int = ROWS * COLS) -> Board:
        """
        Run the game to completion using registered agents.

        Args:
            max_turns: Maximum number of moves to play

        Returns:
            Final board
        """
        for player in (Piece.X, Piece.O):
            if player not in self.agents:
                raise ValueError(f"No agent callback registered for player {player.name}")

        turns = 0
        while not self.is_over() and turns < max_turns:
            self.step()
            turns += 1

        return self.board

    def get_winner(self) -> Optional[Piece]:
        """Get the winner, or None if there is none (yet)."""
        return self.board.winner()

    def get_result(self) -> GameResult:
        """
        Get the current result of the game.

        Returns:
            GameResult
        """
        if self.board.winner() is not None:
            return GameResult.WINNER
        if self.board.is_full():
            return GameResult.DRAW
        return GameResult.IN_PROGRESS

    def __str__(self) -> str:
        result = self.get_result()
        if result == GameResult.WINNER:
            status = f"{self.get_winner().name} wins"
        elif result == GameResult.DRAW:
            status = "Draw"
        else:
            status = f"{self.current_player.name} to move"
        return f"{self.board}\n{status} after {len(self.history)} moves"


def simulate_random_game(rng: Optional[random.Random] = None) -> Game:
    """
    Play a complete game with uniformly random moves.

    Args:
        rng: Random generator (a fresh unseeded one if None)

    Returns:
        The finished Game
    """
    rng = rng or random.Random()
    game = Game()
    while not game.is_over():
        game.step(rng.choice(game.board.legal_moves()))
    return game
