"""
Monte Carlo Tree Search (MCTS) implementation for Connect-4.

This package provides a complete MCTS agent that plays Connect-4 from
random playouts alone. Each iteration of the algorithm:

1. Selection: Starting from the root node, select child nodes using UCB1 while
   the current node is fully expanded and not terminal.
2. Expansion: Create a new child node by taking a random untried move.
3. Simulation: From the new node, play random moves to the end of the game.
4. Backpropagation: Update the statistics of all nodes on the path with the result.

After a fixed number of iterations the most visited root child is played.
"""

from connect4_ai.mcts.node import MCTSNode, SearchTree, EmptySearchError
from connect4_ai.mcts.agent import MCTSAgent, MCTSAgentFactory
from connect4_ai.mcts.search import (
    mcts_search,
    choose_move,
    run_iteration,
    select_node,
    expand_node,
    simulate_game,
    backpropagate,
    ChildStatistics,
    SearchResult
)
from connect4_ai.mcts.config import MCTSConfig

# Default configuration
DEFAULT_CONFIG = MCTSConfig()

__all__ = [
    'MCTSAgent',
    'MCTSAgentFactory',
    'MCTSNode',
    'SearchTree',
    'EmptySearchError',
    'MCTSConfig',
    'mcts_search',
    'choose_move',
    'run_iteration',
    'select_node',
    'expand_node',
    'simulate_game',
    'backpropagate',
    'ChildStatistics',
    'SearchResult',
    'DEFAULT_CONFIG'
]
