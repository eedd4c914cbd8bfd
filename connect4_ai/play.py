"""
Interactive Connect-4 game against the MCTS agent.

Example usage:
    # Play as X (moving first) against a 10000-iteration search
    connect4-play

    # Let the AI open, show its search statistics after every move
    connect4-play --ai-first --debug

    # Weaker, reproducible opponent
    connect4-play --iterations 1000 --seed 7
"""
import argparse
import sys
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel

from connect4_ai.core.board import IllegalMoveError
from connect4_ai.core.constants import Piece, COLS, DEFAULT_SIMULATION_COUNT
from connect4_ai.core.game import Game, GameResult
from connect4_ai.display import render_board
from connect4_ai.mcts.agent import MCTSAgent
from connect4_ai.mcts.config import MCTSConfig


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for game configuration."""
    parser = argparse.ArgumentParser(description="Play Connect-4 against an MCTS agent")

    parser.add_argument("--iterations", type=int, default=DEFAULT_SIMULATION_COUNT,
                        help="Number of MCTS iterations per AI move")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the AI's random generator")
    parser.add_argument("--ai-first", action="store_true",
                        help="AI plays X and moves first")
    parser.add_argument("--debug", action="store_true",
                        help="Show search statistics after each AI move")

    return parser.parse_args(argv)


def create_opponent(args: argparse.Namespace, console: Console) -> MCTSAgent:
    """Create the AI opponent from command-line arguments."""
    config = MCTSConfig(iterations=args.iterations, seed=args.seed)
    return MCTSAgent(config=config, name="MCTS AI", verbose=args.debug, console=console)


def display_game_state(game: Game, console: Console) -> None:
    """Display the board and whose turn it is."""
    last_move = game.history[-1][1] if game.history else None
    console.print(render_board(game.board, last_move=last_move))


def play_human_turn(game: Game, console: Console) -> int:
    """
    Read a column from the human and play it.

    Non-numeric input and illegal columns are rejected and the human is
    asked again.

    Returns:
        Column played (0-based)
    """
    while True:
        raw = console.input(f"Enter column (1-{COLS}): ").strip()
        try:
            column = int(raw) - 1
        except ValueError:
            console.print(f"[red]Invalid input. Please enter a number between 1 and {COLS}.[/red]")
            continue

        try:
            game.step(column)
        except IllegalMoveError:
            console.print(f"[red]Column {raw} cannot be played. Choose another column.[/red]")
            continue

        return column


def play_game(args: argparse.Namespace, console: Console) -> GameResult:
    """Play one game of Connect-4 against the AI."""
    game = Game()
    opponent = create_opponent(args, console)

    ai_player = Piece.X if args.ai_first else Piece.O
    human_player = ai_player.opponent
    opponent.register_with_game(game, ai_player)

    console.print(f"You are [bold]{human_player.name}[/bold]. Playing against: {opponent}")

    while not game.is_over():
        display_game_state(game, console)

        if game.current_player == human_player:
            play_human_turn(game, console)
        else:
            console.print(f"{opponent.name} is thinking...")
            game.step()
            console.print(f"{opponent.name} plays column {game.history[-1][1] + 1}")

    display_game_state(game, console)

    result = game.get_result()
    if result == GameResult.WINNER:
        if game.get_winner() == human_player:
            message = "[bold green]You win![/bold green]"
        else:
            message = f"[bold red]{opponent.name} wins![/bold red]"
    else:
        message = "[bold yellow]Draw.[/bold yellow]"
    console.print(Panel(message, title="GAME OVER", expand=False))

    return result


def main(argv: Optional[List[str]] = None) -> None:
    """Main function."""
    args = parse_args(argv)
    console = Console()

    console.print("[bold yellow]Welcome to Connect-4![/bold yellow]")
    console.print("Drop pieces into columns and connect four to win.")

    try:
        play_game(args, console)

        while True:
            play_again = console.input("\nPlay again? (y/n): ").strip().lower()
            if play_again in ['y', 'yes']:
                play_game(args, console)
            elif play_again in ['n', 'no']:
                console.print("Thanks for playing!")
                break
            else:
                console.print("Please enter 'y' or 'n'.")
    except (KeyboardInterrupt, EOFError):
        console.print("\nGame interrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
