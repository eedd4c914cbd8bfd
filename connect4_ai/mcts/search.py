"""
Monte Carlo Tree Search (MCTS) algorithm for Connect-4.

This module implements the core MCTS algorithm with the four standard phases:
1. Selection: Descend the tree with UCB1 while nodes are fully expanded
2. Expansion: Add one child for a random untried move
3. Simulation: Play random moves to the end of the game
4. Backpropagation: Update statistics from the new node up to the root

The search returns a SearchResult with the chosen move and per-child
statistics; printing them is left to the caller.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple
import random
import time

from connect4_ai.core.board import Board
from connect4_ai.core.constants import Piece, X_WIN, O_WIN, DRAW, DEFAULT_SIMULATION_COUNT
from connect4_ai.mcts.node import SearchTree, EmptySearchError
from connect4_ai.mcts.config import MCTSConfig


@dataclass
class ChildStatistics:
    """Search statistics for one move from the root."""
    move: int
    visits: int
    total_score: float
    wins: int
    average_score: float
    win_rate: float  # Percentage


@dataclass
class SearchResult:
    """Outcome of one move decision."""
    move: int
    iterations: int = 0
    node_count: int = 0
    max_depth: int = 0
    average_playout_length: float = 0.0
    time_elapsed: float = 0.0
    iterations_per_second: float = 0.0
    used_fallback: bool = False
    children: List[ChildStatistics] = field(default_factory=list)
    principal_variation: List[int] = field(default_factory=list)

    def child_for(self, move: int) -> Optional[ChildStatistics]:
        """Get the statistics of the root child for a column, if expanded."""
        for child in self.children:
            if child.move == move:
                return child
        return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def mcts_search(
    board: Board,
    config: Optional[MCTSConfig] = None,
    rng: Optional[random.Random] = None
) -> SearchResult:
    """
    Run Monte Carlo Tree Search to find the best move.

    This function runs the full MCTS algorithm:
    1. Create a fresh tree rooted at the board
    2. Run exactly config.iterations iterations
    3. Return the most visited root child (robust child)

    If the root ended up with no children, a random legal move is returned
    instead and the result is flagged with used_fallback.

    Args:
        board: Position to move from (not modified)
        config: MCTS configuration parameters
        rng: Random generator (defaults to one seeded from config.seed)

    Returns:
        SearchResult for the decision

    Raises:
        ValueError: If the board is terminal
    """
    if config is None:
        config = MCTSConfig()
    if rng is None:
        rng = random.Random(config.seed)

    if board.is_terminal():
        raise ValueError("Cannot search from a terminal position")

    tree = SearchTree(board, exploration_weight=config.exploration_weight)

    start_time = time.time()
    total_playout_length = 0

    for _ in range(config.iterations):
        total_playout_length += run_iteration(tree, rng)

    time_elapsed = time.time() - start_time

    result = SearchResult(
        move=-1,
        iterations=tree[tree.root].visits,
        node_count=len(tree),
        max_depth=tree.max_depth(),
        average_playout_length=total_playout_length / config.iterations,
        time_elapsed=time_elapsed,
        iterations_per_second=config.iterations / max(0.001, time_elapsed),
        children=get_action_statistics(tree),
        principal_variation=tree.principal_variation(),
    )

    try:
        result.move = tree[tree.robust_child()].move
    except EmptySearchError:
        # Fallback to a random legal move if the search built no children
        result.move = rng.choice(board.legal_moves())
        result.used_fallback = True

    tree.clear()
    return result


def run_iteration(tree: SearchTree, rng: random.Random) -> int:
    """
    Run one selection/expansion/simulation/backpropagation cycle.

    Args:
        tree: Tree being searched
        rng: Random generator

    Returns:
        Number of moves played in the playout
    """
    # 1. Selection
    handle = select_node(tree)

    # 2. Expansion
    node = tree[handle]
    if not node.terminal and node.has_untried_moves():
        handle = expand_node(tree, handle, rng)

    # 3. Simulation
    result, steps = simulate_game(tree[handle].board, rng)

    # 4. Backpropagation
    backpropagate(tree, handle, result)

    return steps


def select_node(tree: SearchTree) -> int:
    """
    Descend from the root while nodes are fully expanded and non-terminal.

    Args:
        tree: Tree being searched

    Returns:
        Handle of the node where selection stopped
    """
    handle = tree.root
    node = tree[handle]
    while node.is_fully_expanded() and node.children and not node.terminal:
        handle = tree.select_child(handle)
        node = tree[handle]
    return handle


def expand_node(tree: SearchTree, handle: int, rng: random.Random) -> Optional[int]:
    """
    Expand a node by adding a child.

    This is a wrapper around SearchTree.expand.

    Returns:
        New child handle, or None if expansion is not possible
    """
    return tree.expand(handle, rng)


def simulate_game(board: Board, rng: random.Random) -> Tuple[float, int]:
    """
    Play uniformly random moves from a board until the game ends.

    The board is copied first; the caller's board is never modified. The
    starting position gets one full scan; after that only the lines through
    each newly dropped piece are checked, since only the mover can complete
    a line.

    Args:
        board: Starting position
        rng: Random generator

    Returns:
        Tuple of (outcome from X's point of view, number of moves played)
    """
    state = board.clone()

    winner = state.winner()
    if winner is not None:
        return score_winner(winner), 0

    steps = 0
    moves = state.legal_moves()
    while moves:
        player = state.current_player
        column = rng.choice(moves)
        row = state.apply_move(column)
        steps += 1
        if state.connects_at(row, column):
            return score_winner(player), steps
        moves = state.legal_moves()

    return DRAW, steps


def score_winner(winner: Optional[Piece]) -> float:
    """Map a winner to a playout score: +1.0 for X, -1.0 for O, 0.0 for none."""
    if winner is Piece.X:
        return X_WIN
    if winner is Piece.O:
        return O_WIN
    return DRAW


def backpropagate(tree: SearchTree, handle: int, result: float) -> None:
    """
    Update statistics up the tree.

    This is a wrapper around SearchTree.backpropagate.
    """
    tree.backpropagate(handle, result)


def get_action_statistics(tree: SearchTree) -> List[ChildStatistics]:
    """
    Get statistics for every expanded move from the root.

    Args:
        tree: Tree being searched

    Returns:
        List of ChildStatistics in child-creation order
    """
    return [
        ChildStatistics(
            move=child.move,
            visits=child.visits,
            total_score=child.total_score,
            wins=child.wins,
            average_score=child.average_score,
            win_rate=child.win_rate,
        )
        for child in tree.children_of(tree.root)
    ]


def choose_move(
    board: Board,
    simulation_budget: int = DEFAULT_SIMULATION_COUNT,
    rng: Optional[random.Random] = None
) -> int:
    """
    Pick a column for the player to move.

    Args:
        board: Non-terminal position
        simulation_budget: Number of MCTS iterations
        rng: Random generator (unseeded if None)

    Returns:
        0-based column index
    """
    return mcts_search(board, MCTSConfig(iterations=simulation_budget), rng).move
