"""
Tests for the Monte Carlo Tree Search engine and agent.
"""
import io
import json
import math
import random

import pytest
from rich.console import Console

from connect4_ai.core.board import Board
from connect4_ai.core.constants import (
    Piece, COLS, DEFAULT_SIMULATION_COUNT, DEFAULT_EXPLORATION_WEIGHT
)
from connect4_ai.core.game import simulate_random_game
from connect4_ai.mcts import search, DEFAULT_CONFIG
from connect4_ai.mcts.agent import MCTSAgent, MCTSAgentFactory
from connect4_ai.mcts.config import MCTSConfig
from connect4_ai.mcts.node import SearchTree, EmptySearchError
from connect4_ai.mcts.search import (
    mcts_search, choose_move, run_iteration, select_node, simulate_game
)


def assert_tree_invariants(tree: SearchTree) -> None:
    """Check the untried/expanded partition and parent links of every node."""
    for handle, node in enumerate(tree.nodes):
        expanded = [tree[c].move for c in node.children]
        assert not set(node.untried_moves) & set(expanded)
        assert sorted(node.untried_moves + expanded) == node.board.legal_moves()
        # Only the root may be expanded before its first visit
        if handle != tree.root and node.visits == 0:
            assert not node.children
        for child in node.children:
            assert tree[child].parent == handle


def expand_all(tree: SearchTree, handle: int, rng: random.Random) -> list:
    while tree.expand(handle, rng) is not None:
        pass
    return list(tree[handle].children)


class TestConfig:

    def test_defaults(self):
        config = MCTSConfig()

        assert config.iterations == 10000
        assert config.exploration_weight == pytest.approx(1.414)
        assert config.seed is None

    @pytest.mark.parametrize("kwargs", [
        {"iterations": 0},
        {"iterations": -5},
        {"exploration_weight": 0.0},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            MCTSConfig(**kwargs)

    def test_from_dict_ignores_unknown_keys(self):
        config = MCTSConfig.from_dict({"iterations": 50, "seed": 3, "time_limit": 1.0})

        assert config.iterations == 50
        assert config.seed == 3
        assert config.to_dict() == {"iterations": 50, "exploration_weight": 1.414, "seed": 3}

    def test_presets(self):
        assert MCTSConfig.fast().iterations < MCTSConfig.default().iterations < MCTSConfig.deep().iterations

    def test_package_default_config_uses_constants(self):
        assert DEFAULT_CONFIG.iterations == DEFAULT_SIMULATION_COUNT
        assert DEFAULT_CONFIG.exploration_weight == DEFAULT_EXPLORATION_WEIGHT


class TestSearchTree:

    def test_root_node(self):
        tree = SearchTree(Board.initial())
        root = tree[tree.root]

        assert len(tree) == 1
        assert root.parent is None
        assert root.move is None
        assert root.player_just_moved == Piece.O
        assert root.untried_moves == list(range(COLS))
        assert root.visits == 0
        assert not root.terminal

    def test_root_board_is_a_copy(self):
        board = Board.initial()
        tree = SearchTree(board)
        tree[tree.root].board.apply_move(0)

        assert board.move_count == 0

    def test_expand_creates_one_child_per_move(self, rng):
        board = Board.initial()
        tree = SearchTree(board)

        child = tree.expand(tree.root, rng)
        child_node = tree[child]

        assert child_node.parent == tree.root
        assert child_node.move not in tree[tree.root].untried_moves
        assert child_node.player_just_moved == Piece.X
        assert child_node.board.current_player == Piece.O
        assert child_node.board.cell(5, child_node.move) == Piece.X
        assert tree[tree.root].board.move_count == 0
        assert_tree_invariants(tree)

        children = expand_all(tree, tree.root, rng)
        assert sorted(tree[c].move for c in children) == list(range(COLS))
        assert tree.expand(tree.root, rng) is None
        assert_tree_invariants(tree)

    def test_select_child_prefers_unvisited(self, rng):
        tree = SearchTree(Board.initial())
        children = expand_all(tree, tree.root, rng)
        tree[tree.root].visits = 20
        for c in children[:-1]:
            tree[c].visits = 3
            tree[c].total_score = 3.0

        assert tree.select_child(tree.root) == children[-1]

    def test_select_child_tie_goes_to_first_child(self, rng):
        tree = SearchTree(Board.initial())
        children = expand_all(tree, tree.root, rng)
        tree[tree.root].visits = 14
        for c in children:
            tree[c].visits = 2

        assert tree.select_child(tree.root) == children[0]

    def test_select_child_uses_ucb1(self, rng):
        tree = SearchTree(Board.initial())
        children = expand_all(tree, tree.root, rng)
        tree[tree.root].visits = 10
        for c in children:
            tree[c].visits = 1
        tree[children[0]].visits = 4
        tree[children[0]].total_score = 4.0
        tree[children[3]].total_score = 1.0

        expected = 1.0 + 1.414 * math.sqrt(math.log(10) / 1)
        assert tree.ucb_score(tree.root, children[3]) == pytest.approx(expected)
        # A well-explored strong child loses to a less explored one with the same mean
        assert tree.select_child(tree.root) == children[3]

    def test_select_child_without_children(self):
        tree = SearchTree(Board.initial())

        with pytest.raises(ValueError):
            tree.select_child(tree.root)

    def test_backpropagate_flips_perspective(self, rng):
        tree = SearchTree(Board.initial())
        child = tree.expand(tree.root, rng)
        grandchild = tree.expand(child, rng)

        tree.backpropagate(grandchild, 1.0)

        root, child_node, grandchild_node = tree[tree.root], tree[child], tree[grandchild]
        assert [root.visits, child_node.visits, grandchild_node.visits] == [1, 1, 1]
        # X won: good for the node X moved into, bad for the nodes O moved into
        assert child_node.total_score == 1.0
        assert child_node.wins == 1
        assert grandchild_node.total_score == -1.0
        assert grandchild_node.wins == 0
        assert root.total_score == -1.0

        tree.backpropagate(grandchild, 0.0)
        assert child_node.visits == 2
        assert child_node.total_score == 1.0
        assert child_node.wins == 1
        assert child_node.win_rate == pytest.approx(50.0)

    def test_robust_child(self, rng):
        tree = SearchTree(Board.initial())

        with pytest.raises(EmptySearchError):
            tree.robust_child()

        children = expand_all(tree, tree.root, rng)
        for c in children:
            tree[c].visits = 5
        tree[children[2]].visits = 9
        tree[children[4]].visits = 9

        assert tree.robust_child() == children[2]

    def test_clear_releases_all_nodes(self, rng):
        tree = SearchTree(Board.initial())
        for _ in range(20):
            run_iteration(tree, rng)

        tree.clear()
        assert len(tree) == 0


class TestSimulation:

    def test_playout_does_not_modify_board(self, rng):
        board = Board.initial()
        board.apply_move(3)
        before = board.clone()

        for _ in range(10):
            result, steps = simulate_game(board, rng)
            assert result in (-1.0, 0.0, 1.0)
            assert 1 <= steps <= 41

        assert board == before

    def test_terminal_boards_score_immediately(self, rng, near_win_board, drawn_board):
        near_win_board.apply_move(3)

        assert simulate_game(near_win_board, rng) == (1.0, 0)
        assert simulate_game(drawn_board, rng) == (0.0, 0)

    def test_playout_matches_random_game_with_same_seed(self):
        for seed in range(10):
            result, steps = simulate_game(Board.initial(), random.Random(seed))
            game = simulate_random_game(random.Random(seed))

            assert steps == len(game.history)
            assert result == float(game.get_winner() or 0)

    def test_o_win_scores_negative(self, rng):
        board = Board.from_rows([
            ".......",
            ".......",
            "O......",
            "O......",
            "OX.....",
            "OXX.X..",
        ])

        assert simulate_game(board, rng) == (-1.0, 0)


class TestSearch:

    def test_tree_invariants_hold_during_search(self, rng):
        tree = SearchTree(Board.initial())

        for i in range(300):
            run_iteration(tree, rng)
            root = tree[tree.root]
            assert root.visits == i + 1
            assert sum(child.visits for child in tree.children_of(tree.root)) == root.visits

        assert_tree_invariants(tree)

    def test_selection_stops_at_node_with_untried_moves(self, rng):
        tree = SearchTree(Board.initial())
        assert select_node(tree) == tree.root

        for _ in range(COLS):
            run_iteration(tree, rng)
        # Root is now fully expanded, so selection must descend
        assert select_node(tree) != tree.root

    def test_search_result(self):
        board = Board.initial()
        result = mcts_search(board, MCTSConfig(iterations=500, seed=1))

        assert result.move in board.legal_moves()
        assert result.iterations == 500
        assert len(result.children) == COLS
        assert sum(child.visits for child in result.children) == 500
        assert 1 + COLS <= result.node_count <= 501
        assert result.max_depth >= 1
        assert not result.used_fallback
        assert result.principal_variation[0] == result.move
        # Robust child: the chosen move has the most visits
        assert result.child_for(result.move).visits == max(c.visits for c in result.children)
        assert board.move_count == 0

    def test_seeded_search_is_reproducible(self):
        board = Board.initial()
        board.apply_move(3)

        first = mcts_search(board, MCTSConfig(iterations=300), random.Random(7))
        second = mcts_search(board, MCTSConfig(iterations=300), random.Random(7))

        assert first.move == second.move
        assert [(c.move, c.visits) for c in first.children] == \
            [(c.move, c.visits) for c in second.children]

    def test_finds_immediate_win(self, near_win_board):
        for seed in range(5):
            result = mcts_search(near_win_board, MCTSConfig(iterations=1000), random.Random(seed))

            assert result.move == 3
            assert result.child_for(3).average_score == pytest.approx(1.0)
            assert result.child_for(3).win_rate == pytest.approx(100.0)

    def test_edge_columns_are_explored_symmetrically(self):
        board = Board.initial()
        left = right = 0

        for seed in range(4):
            result = mcts_search(board, MCTSConfig(iterations=1500), random.Random(seed))
            assert result.move in board.legal_moves()
            left += result.child_for(0).visits
            right += result.child_for(COLS - 1).visits

        assert 0.5 < left / right < 2.0

    def test_terminal_board_is_rejected(self, drawn_board, near_win_board):
        assert drawn_board.is_terminal()
        with pytest.raises(ValueError, match="terminal"):
            mcts_search(drawn_board, MCTSConfig(iterations=10))

        near_win_board.apply_move(3)
        with pytest.raises(ValueError, match="terminal"):
            choose_move(near_win_board, 10)

    def test_empty_search_falls_back_to_random_move(self, monkeypatch, rng):
        monkeypatch.setattr(search, "run_iteration", lambda tree, rng: 0)
        board = Board.initial()
        for _ in range(6):
            board.apply_move(0)

        result = mcts_search(board, MCTSConfig(iterations=5), rng)

        assert result.used_fallback
        assert result.children == []
        assert result.move in board.legal_moves()

    def test_choose_move(self, rng):
        board = Board.initial()

        move = choose_move(board, 200, rng)

        assert isinstance(move, int)
        assert move in board.legal_moves()


class TestAgent:

    def test_select_move_records_statistics(self):
        agent = MCTSAgentFactory.create_custom(iterations=100, seed=3)
        board = Board.initial()

        move = agent.select_move(board)

        assert move in board.legal_moves()
        assert agent.last_result.move == move
        assert agent.move_history[0][0] == move
        assert agent.get_last_statistics()["iterations"] == 100

        agent.reset_statistics()
        assert agent.get_last_statistics() == {}

    def test_verbose_agent_prints_table(self):
        output = io.StringIO()
        agent = MCTSAgent(MCTSConfig(iterations=50, seed=1), name="Tester",
                          verbose=True, console=Console(file=output, width=100))

        agent.select_move(Board.initial())

        text = output.getvalue()
        assert "Tester search" in text
        assert "Visits" in text

    def test_save_statistics(self, tmp_path):
        agent = MCTSAgent(MCTSConfig(iterations=50, seed=1))
        agent.select_move(Board.initial())

        path = tmp_path / "stats.json"
        agent.save_statistics(str(path))

        data = json.loads(path.read_text())
        assert data["total_moves"] == 1
        assert data["config"]["iterations"] == 50
        assert len(data["history"][0]["stats"]["children"]) == COLS

    def test_str(self):
        assert str(MCTSAgentFactory.create_fast()) == "Fast MCTS (MCTS, 1000 iterations)"
