"""
Monte Carlo Tree Search tree for Connect-4.

This module defines the MCTSNode record and the SearchTree that owns every
node of one search. Nodes live in a flat arena (a list) and refer to each
other by integer handle: each node stores its parent's handle and the
handles of its children. Dropping the arena releases the whole tree at once.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import math
import random

from connect4_ai.core.board import Board
from connect4_ai.core.constants import Piece, DEFAULT_EXPLORATION_WEIGHT


class EmptySearchError(RuntimeError):
    """Raised when a move is requested from a root that has no children."""


@dataclass
class MCTSNode:
    """
    A node in the Monte Carlo Tree Search.

    Each node represents one reachable board and tracks statistics about
    the simulations that passed through it. The score is always expressed
    from the point of view of the player who made the move into this node.
    """
    board: Board
    parent: Optional[int]
    move: Optional[int]  # Column that led here (None for the root)
    player_just_moved: Piece
    untried_moves: List[int]
    terminal: bool
    children: List[int] = field(default_factory=list)

    # Node statistics
    visits: int = 0
    total_score: float = 0.0
    wins: int = 0

    @property
    def average_score(self) -> float:
        """Mean score per visit (0.0 for an unvisited node)."""
        return self.total_score / self.visits if self.visits > 0 else 0.0

    @property
    def win_rate(self) -> float:
        """Percentage of visits that ended in a win for player_just_moved."""
        return 100.0 * self.wins / self.visits if self.visits > 0 else 0.0

    def has_untried_moves(self) -> bool:
        return bool(self.untried_moves)

    def is_fully_expanded(self) -> bool:
        return not self.untried_moves

    def __str__(self) -> str:
        return (f"MCTSNode(move={self.move}, "
                f"player={self.player_just_moved.name}, "
                f"visits={self.visits}, "
                f"score={self.total_score:.2f}, "
                f"children={len(self.children)}, "
                f"untried={len(self.untried_moves)})")


class SearchTree:
    """
    Arena owning all nodes of a single search.

    The root is always handle 0. Nodes are only ever appended, never
    removed, until clear() drops the whole arena.
    """

    def __init__(
        self,
        board: Board,
        exploration_weight: float = DEFAULT_EXPLORATION_WEIGHT,
    ):
        """
        Initialize a tree rooted at a board.

        Args:
            board: Position to search from (copied, never mutated)
            exploration_weight: UCB1 exploration constant
        """
        self.exploration_weight = exploration_weight
        self.nodes: List[MCTSNode] = []
        self.root = self.create_node(board.clone(), parent=None, move=None)

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, handle: int) -> MCTSNode:
        return self.nodes[handle]

    def create_node(self, board: Board, parent: Optional[int], move: Optional[int]) -> int:
        """
        Add a node for a board to the arena.

        The node's untried moves are the board's legal moves, and the player
        who just moved is the opponent of the board's player to move.

        Args:
            board: Board snapshot owned by the new node
            parent: Handle of the parent node (None for the root)
            move: Column played from the parent to reach this board

        Returns:
            Handle of the new node
        """
        node = MCTSNode(
            board=board,
            parent=parent,
            move=move,
            player_just_moved=board.current_player.opponent,
            untried_moves=board.legal_moves(),
            terminal=board.is_terminal(),
        )
        self.nodes.append(node)
        return len(self.nodes) - 1

    def ucb_score(self, parent: int, child: int) -> float:
        """
        Calculate the UCB1 score of a child.

        UCB1 = average_score + C * sqrt(ln(parent_visits) / child_visits)

        Args:
            parent: Handle of the node being selected from
            child: Handle of the child to score

        Returns:
            UCB1 score (infinite for an unvisited child)
        """
        child_node = self.nodes[child]
        if child_node.visits == 0:
            return float('inf')

        exploitation = child_node.total_score / child_node.visits
        exploration = math.sqrt(math.log(self.nodes[parent].visits) / child_node.visits)
        return exploitation + self.exploration_weight * exploration

    def select_child(self, handle: int) -> int:
        """
        Select a child of a node using the UCB1 formula.

        An unvisited child is returned as soon as it is found. Otherwise the
        first child (in creation order) with the highest score wins.

        Args:
            handle: Node to select from

        Returns:
            Handle of the selected child
        """
        node = self.nodes[handle]
        if not node.children:
            raise ValueError("Cannot select child from node with no children")

        best_child = node.children[0]
        best_score = -math.inf
        for child in node.children:
            if self.nodes[child].visits == 0:
                return child
            score = self.ucb_score(handle, child)
            if score > best_score:
                best_score = score
                best_child = child
        return best_child

    def expand(self, handle: int, rng: random.Random) -> Optional[int]:
        """
        Expand a node by turning one random untried move into a child.

        Args:
            handle: Node to expand
            rng: Random generator used to pick the move

        Returns:
            Handle of the new child, or None if no expansion is possible
        """
        node = self.nodes[handle]
        if not node.untried_moves:
            return None

        move = node.untried_moves.pop(rng.randrange(len(node.untried_moves)))

        board = node.board.clone()
        board.apply_move(move)

        child = self.create_node(board, parent=handle, move=move)
        node.children.append(child)
        return child

    def backpropagate(self, handle: int, result: float) -> None:
        """
        Update statistics from a node up to the root, inclusive.

        Args:
            handle: Node the simulation started from
            result: Playout outcome from X's point of view (+1, -1 or 0)
        """
        current: Optional[int] = handle
        while current is not None:
            node = self.nodes[current]
            node.visits += 1

            # Flip to the perspective of the player who moved into this node
            score = result if node.player_just_moved is Piece.X else -result
            node.total_score += score
            if score > 0:
                node.wins += 1

            current = node.parent

    def robust_child(self) -> int:
        """
        Get the root's most visited child.

        Ties go to the child created first.

        Returns:
            Handle of the most visited child

        Raises:
            EmptySearchError: If the root has no children
        """
        children = self.nodes[self.root].children
        if not children:
            raise EmptySearchError("Root node has no children to choose from")
        return max(children, key=lambda c: self.nodes[c].visits)

    def children_of(self, handle: int) -> List[MCTSNode]:
        """Get the child nodes of a node in creation order."""
        return [self.nodes[c] for c in self.nodes[handle].children]

    def principal_variation(self, max_depth: int = 10) -> List[int]:
        """
        Get the most visited path of moves from the root.

        Args:
            max_depth: Maximum number of moves to follow

        Returns:
            List of columns
        """
        moves = []
        current = self.root
        while self.nodes[current].children and len(moves) < max_depth:
            current = max(self.nodes[current].children, key=lambda c: self.nodes[c].visits)
            moves.append(self.nodes[current].move)
        return moves

    def max_depth(self) -> int:
        """Get the depth of the deepest node (the root has depth 0)."""
        depths = [0] * len(self.nodes)
        # Children are always appended after their parent
        for handle, node in enumerate(self.nodes):
            if node.parent is not None:
                depths[handle] = depths[node.parent] + 1
        return max(depths)

    def clear(self) -> None:
        """Release every node of the tree."""
        self.nodes.clear()
