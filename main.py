"""
Main entry point for TicTacToe against the computer.

This script ties together:
- Engine (board, minimax, move selection, game session)
- UI (Tkinter window) or a console game with --no-ui

Run this script to play TicTacToe against the computer!
"""

import argparse
import logging
import random
import sys
import time
from typing import Callable, Optional

from engine.board import Board, Player
from engine.config import Difficulty, EngineConfig, FastPathPolicy, MistakePolicy
from engine.game_session import GameSession, SessionState
from engine.scheduler import ManualScheduler

logger = logging.getLogger(__name__)

DIFFICULTY_KEYS = {
    "e": Difficulty.EASY,
    "m": Difficulty.MEDIUM,
    "h": Difficulty.HARD,
}


class TicTacToeConsole:
    """
    Console game against the computer.

    Game flow:
    1. Pick a difficulty
    2. Type a cell number (1-9) to place X
    3. The computer thinks for a moment and places O
    4. Repeat until someone wins or it's a draw
    """

    def __init__(
        self,
        session: GameSession,
        scheduler: ManualScheduler,
        input_func: Optional[Callable[[str], str]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the console game.

        Args:
            session: Session to drive. Must use the given scheduler.
            scheduler: Manual scheduler holding the computer's reply.
            input_func: Reads a line from the player.
            sleep: Waits out the thinking delay.
        """
        self.session = session
        self.scheduler = scheduler
        self.input = input_func or input
        self.sleep = sleep
        self.is_running = False

    def start(self):
        """Start the game."""
        print("\nTicTacToe - you are X, the computer is O")
        print("Cells are numbered 1-9, left to right, top to bottom.")
        print("Commands: r = restart, d = change difficulty, q = quit\n")

        self.is_running = True
        try:
            self._game_loop()
        except EOFError:
            print()
        finally:
            self.session.close()
            self.is_running = False

    def _game_loop(self):
        """Main game loop."""
        while self.is_running:
            state = self.session.state

            if state == SessionState.AWAITING_DIFFICULTY:
                self._choose_difficulty()
            elif state == SessionState.IN_PROGRESS:
                self._print_board()
                self._human_turn()
            else:
                self._print_board()
                self._show_game_result()
                self._after_game()

    def _choose_difficulty(self):
        answer = self.input("Choose difficulty - [e]asy, [m]edium, [h]ard (q to quit): ").strip().lower()
        if answer in ("q", "quit"):
            self.is_running = False
            return

        level = DIFFICULTY_KEYS.get(answer[:1]) if answer else None
        if level is None:
            print("Please type e, m or h.")
            return
        self.session.choose_difficulty(level)
        print(f"\nDifficulty: {level.label}")

    def _human_turn(self):
        answer = self.input("Your move (1-9): ").strip().lower()
        if self._handle_command(answer):
            return

        try:
            index = int(answer) - 1
        except ValueError:
            print("Please type a number 1-9.")
            return

        if not self.session.human_move(index):
            print("Illegal move. Try again.")
            return

        if self.session.has_pending_computer_move:
            self._computer_turn()

    def _computer_turn(self):
        """Wait out the thinking pause, then let the computer play."""
        print("\nComputer is thinking...")
        self.sleep(self.scheduler.next_delay)
        self.scheduler.run_pending()

        decision = self.session.last_decision
        if decision is not None:
            print(f"Computer plays {decision.index + 1}")

    def _after_game(self):
        answer = self.input("Play again? [r]estart, [d]ifficulty, [q]uit: ").strip().lower()
        if not self._handle_command(answer):
            print("Please type r, d or q.")

    def _handle_command(self, answer: str) -> bool:
        """Run r/d/q commands. Returns True if the answer was a command."""
        if answer in ("q", "quit"):
            self.is_running = False
        elif answer in ("r", "restart"):
            self.session.restart()
            print("\nNew game!")
        elif answer in ("d", "difficulty"):
            self.session.change_difficulty()
        else:
            return False
        return True

    def _print_board(self):
        print()
        print(Board.from_cells(self.session.board))
        print()

    def _show_game_result(self):
        """Show the final game result."""
        outcome = self.session.outcome
        if outcome.winner == Player.HUMAN:
            print("Congratulations! You won!")
        elif outcome.winner == Player.COMPUTER:
            print("Computer wins! Better luck next time!")
        else:
            print("It's a draw! Good game!")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TicTacToe against the computer")
    parser.add_argument(
        "--no-ui",
        action="store_true",
        help="Run without UI (console mode)"
    )
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        help="Start right away on this difficulty"
    )
    parser.add_argument(
        "--fast-path",
        choices=[p.value for p in FastPathPolicy],
        default=EngineConfig.DEFAULT_FAST_PATH.value,
        help="Tactical shortcuts before searching (default: %(default)s)"
    )
    parser.add_argument(
        "--mistakes",
        choices=[p.value for p in MistakePolicy],
        default=EngineConfig.DEFAULT_MISTAKE_POLICY.value,
        help="When the computer may play a worse move (default: %(default)s)"
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=EngineConfig.THINKING_DELAY_S,
        help="Computer thinking pause in seconds (default: %(default)s)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the computer's random choices"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: %(default)s)"
    )
    return parser


def make_session(args: argparse.Namespace, scheduler=None) -> GameSession:
    """Create a GameSession from parsed command line arguments."""
    session = GameSession(
        scheduler=scheduler,
        thinking_delay=max(args.delay, 0.0),
        fast_path=FastPathPolicy(args.fast_path),
        mistake_policy=MistakePolicy(args.mistakes),
        rng=random.Random(args.seed),
    )
    if args.difficulty:
        session.choose_difficulty(Difficulty(args.difficulty))
    return session


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Arguments: %s", args)

    # Launch UI by default
    if not args.no_ui:
        from ui import TicTacToeUI
        ui = TicTacToeUI(args)
        ui.run()
        return 0

    scheduler = ManualScheduler()
    game = TicTacToeConsole(make_session(args, scheduler), scheduler)

    try:
        game.start()
    except KeyboardInterrupt:
        print("\n\nGame interrupted by user.")
    finally:
        print("Goodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
