"""
Monte Carlo Tree Search Agent for Connect-4.

This module provides the MCTSAgent class, which is a ready-to-use AI player
that uses Monte Carlo Tree Search to select moves. The agent keeps the
statistics of its searches so callers can inspect or export them.
"""
from typing import Any, Dict, List, Optional, Tuple
import json
import random

from rich.console import Console

from connect4_ai.core.board import Board
from connect4_ai.core.game import AgentCallback, Game
from connect4_ai.core.constants import Piece
from connect4_ai.display import render_search_result
from connect4_ai.mcts.config import MCTSConfig
from connect4_ai.mcts.search import SearchResult, mcts_search


class MCTSAgent:
    """
    Monte Carlo Tree Search agent for playing Connect-4.

    Each agent owns one random generator, seeded from config.seed, which is
    shared by all of its searches.
    """

    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        name: str = "MCTS Agent",
        verbose: bool = False,
        console: Optional[Console] = None
    ):
        """
        Initialize an MCTS agent.

        Args:
            config: MCTS configuration parameters
            name: Name of the agent
            verbose: Whether to print search statistics after each move
            console: Console used for verbose output
        """
        self.config = config or MCTSConfig()
        self.name = name
        self.verbose = verbose
        self.console = console or Console()
        self.rng = random.Random(self.config.seed)

        # Result of the most recent search
        self.last_result: Optional[SearchResult] = None

        # History of all moves and their search results
        self.move_history: List[Tuple[int, SearchResult]] = []

    def select_move(self, board: Board) -> int:
        """
        Select a move using Monte Carlo Tree Search.

        Args:
            board: Current position (not modified)

        Returns:
            Selected column
        """
        result = mcts_search(board, self.config, self.rng)

        self.last_result = result
        self.move_history.append((result.move, result))

        if self.verbose:
            self._print_search_info(result)

        return result.move

    def _print_search_info(self, result: SearchResult) -> None:
        self.console.print(render_search_result(result, title=f"{self.name} search"))
        self.console.print(
            f"Iterations: {result.iterations}  "
            f"Nodes: {result.node_count}  "
            f"Time: {result.time_elapsed:.3f}s ({result.iterations_per_second:.1f} it/s)"
        )
        if result.used_fallback:
            self.console.print("[yellow]Search produced no children; played a random move[/yellow]")

    def get_action_callback(self) -> AgentCallback:
        """
        Get a callback function for selecting moves.

        This is useful for registering the agent with a Game object.

        Returns:
            Callback function that takes a board and returns a column
        """
        return self.select_move

    def register_with_game(self, game: Game, player: Piece) -> None:
        """
        Register this agent with a game.

        Args:
            game: Game object
            player: Piece the agent plays
        """
        game.register_agent(player, self.get_action_callback())

    def get_last_statistics(self) -> Dict[str, Any]:
        """
        Get statistics from the most recent search.

        Returns:
            Dictionary of search statistics (empty before the first search)
        """
        return self.last_result.to_dict() if self.last_result else {}

    def reset_statistics(self) -> None:
        """Reset all statistics."""
        self.last_result = None
        self.move_history = []

    def save_statistics(self, filename: str) -> None:
        """
        Save statistics to a JSON file.

        Args:
            filename: Name of the file to save to
        """
        data = {
            "agent_name": self.name,
            "config": self.config.to_dict(),
            "history": [
                {"move": move, "stats": result.to_dict()}
                for move, result in self.move_history
            ],
            "total_moves": len(self.move_history),
        }

        with open(filename, 'w') as f:
            json.dump(data, f, indent=2)

    def __str__(self) -> str:
        return f"{self.name} (MCTS, {self.config.iterations} iterations)"


class MCTSAgentFactory:
    """Factory for creating MCTS agents with preset configurations."""

    @staticmethod
    def create_fast(seed: Optional[int] = None) -> MCTSAgent:
        config = MCTSConfig.fast()
        config.seed = seed
        return MCTSAgent(config=config, name="Fast MCTS")

    @staticmethod
    def create_standard(seed: Optional[int] = None) -> MCTSAgent:
        config = MCTSConfig.default()
        config.seed = seed
        return MCTSAgent(config=config, name="Standard MCTS")

    @staticmethod
    def create_strong(seed: Optional[int] = None) -> MCTSAgent:
        config = MCTSConfig.deep()
        config.seed = seed
        return MCTSAgent(config=config, name="Strong MCTS")

    @staticmethod
    def create_custom(
        iterations: int = 1000,
        seed: Optional[int] = None,
        name: str = "Custom MCTS",
        verbose: bool = False
    ) -> MCTSAgent:
        """
        Create a custom MCTS agent.

        Args:
            iterations: Number of MCTS iterations
            seed: Seed for the agent's random generator
            name: Name of the agent
            verbose: Whether to print search statistics

        Returns:
            MCTSAgent
        """
        config = MCTSConfig(iterations=iterations, seed=seed)
        return MCTSAgent(config=config, name=name, verbose=verbose)
