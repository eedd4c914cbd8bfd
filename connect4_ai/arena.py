"""
Agent-vs-agent matches for Connect-4.

This module pits two agents against each other over a series of games,
alternating who plays X, and reports win/draw counts. It is used to check
that the MCTS agent plays sensibly against a random baseline.

Example usage:
    connect4-arena --games 20 --iterations 500
    connect4-arena --games 10 --opponent mcts --opponent-iterations 200
"""
import argparse
import random
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from tqdm import tqdm

from connect4_ai.core.board import Board
from connect4_ai.core.constants import Piece, ROWS, COLS
from connect4_ai.core.game import AgentCallback, Game, GameResult
from connect4_ai.mcts.agent import MCTSAgent
from connect4_ai.mcts.config import MCTSConfig


class RandomAgent:
    """Agent that plays a uniformly random legal move."""

    def __init__(self, name: str = "Random Agent", seed: Optional[int] = None):
        self.name = name
        self.rng = random.Random(seed)

    def select_move(self, board: Board) -> int:
        moves = board.legal_moves()
        if not moves:
            raise ValueError("No legal moves available")
        return self.rng.choice(moves)

    def get_action_callback(self) -> AgentCallback:
        return self.select_move

    def __str__(self) -> str:
        return self.name


def play_match(agent_x, agent_o, max_turns: int = ROWS * COLS) -> Game:
    """
    Play one game between two agents.

    Args:
        agent_x: Agent playing X (moves first)
        agent_o: Agent playing O
        max_turns: Move cap; a game that hits it is left in progress

    Returns:
        The game after play stopped
    """
    game = Game()
    game.register_agent(Piece.X, agent_x.get_action_callback())
    game.register_agent(Piece.O, agent_o.get_action_callback())
    game.run_game(max_turns=max_turns)
    return game


def run_arena(
    agent_a,
    agent_b,
    num_games: int = 10,
    alternate: bool = True,
    show_progress: bool = True,
    max_turns: int = ROWS * COLS
) -> Dict[str, Any]:
    """
    Play a series of games between two agents.

    Games cut off by max_turns are counted as unfinished, not as wins.

    Args:
        agent_a: First agent (plays X in even-numbered games)
        agent_b: Second agent
        num_games: Number of games to play
        alternate: Whether to swap colours every game
        show_progress: Whether to show a progress bar
        max_turns: Move cap per game

    Returns:
        Dictionary of match statistics
    """
    if num_games <= 0:
        raise ValueError("num_games must be positive")

    stats: Dict[str, Any] = {
        "games": num_games,
        "a_wins": 0,
        "b_wins": 0,
        "draws": 0,
        "unfinished": 0,
        "moves": [],
    }

    pbar = tqdm(total=num_games, desc="Games", disable=not show_progress)
    for i in range(num_games):
        a_is_x = not alternate or i % 2 == 0
        agent_x, agent_o = (agent_a, agent_b) if a_is_x else (agent_b, agent_a)

        game = play_match(agent_x, agent_o, max_turns=max_turns)
        stats["moves"].append(len(game.history))

        result = game.get_result()
        if result == GameResult.IN_PROGRESS:
            stats["unfinished"] += 1
        elif result == GameResult.DRAW:
            stats["draws"] += 1
        elif (game.get_winner() == Piece.X) == a_is_x:
            stats["a_wins"] += 1
        else:
            stats["b_wins"] += 1

        pbar.update(1)
        pbar.set_postfix(a=stats["a_wins"], b=stats["b_wins"], draws=stats["draws"])
    pbar.close()

    stats["a_win_rate"] = stats["a_wins"] / num_games
    stats["average_moves"] = sum(stats["moves"]) / num_games
    return stats


def render_summary(agent_a, agent_b, stats: Dict[str, Any]) -> Table:
    """Render arena statistics as a rich table."""
    table = Table(title=f"{agent_a} vs {agent_b} ({stats['games']} games)")
    table.add_column("Agent")
    table.add_column("Wins", justify="right")
    table.add_column("Win %", justify="right")

    for agent, wins in ((agent_a, stats["a_wins"]), (agent_b, stats["b_wins"])):
        table.add_row(str(agent), str(wins), f"{100.0 * wins / stats['games']:.1f}%")
    table.add_row("Draws", str(stats["draws"]), f"{100.0 * stats['draws'] / stats['games']:.1f}%")
    if stats["unfinished"]:
        table.add_row("Unfinished", str(stats["unfinished"]),
                      f"{100.0 * stats['unfinished'] / stats['games']:.1f}%")
    table.caption = f"Average game length: {stats['average_moves']:.1f} moves"
    return table


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the arena."""
    parser = argparse.ArgumentParser(description="Play MCTS agents against other agents")

    parser.add_argument("--games", type=int, default=10,
                        help="Number of games to play")
    parser.add_argument("--iterations", type=int, default=1000,
                        help="MCTS iterations per move for the main agent")
    parser.add_argument("--opponent", type=str, default="random",
                        choices=["random", "mcts"],
                        help="Type of opponent")
    parser.add_argument("--opponent-iterations", type=int, default=100,
                        help="MCTS iterations per move for an MCTS opponent")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for reproducibility")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Main function."""
    args = parse_args(argv)
    console = Console()

    agent = MCTSAgent(MCTSConfig(iterations=args.iterations, seed=args.seed),
                      name=f"MCTS-{args.iterations}")
    opponent_seed = None if args.seed is None else args.seed + 1
    if args.opponent == "mcts":
        opponent = MCTSAgent(MCTSConfig(iterations=args.opponent_iterations, seed=opponent_seed),
                             name=f"MCTS-{args.opponent_iterations}")
    else:
        opponent = RandomAgent(name="Random", seed=opponent_seed)

    stats = run_arena(agent, opponent, num_games=args.games)
    console.print(render_summary(agent, opponent, stats))


if __name__ == "__main__":
    main()
