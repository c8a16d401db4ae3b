"""
Computer move selection for TicTacToe.
Uses minimax search plus a difficulty-dependent chance of deliberate
mistakes, with optional tactical shortcuts for wins and blocks.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .board import Board, LINES, Player
from .config import Difficulty, EngineConfig, FastPathPolicy, MistakePolicy
from .search import best_scored_move, score_moves

logger = logging.getLogger(__name__)


@dataclass
class MistakeState:
    """
    Per-game bookkeeping for the mistake policies.
    Owned by the GameSession and reset on restart or difficulty change.
    """
    game_started_at: Optional[float] = None
    has_made_mistake: bool = False
    mistakes_made: int = 0

    def reset(self, now: Optional[float] = None):
        self.game_started_at = now
        self.has_made_mistake = False
        self.mistakes_made = 0


@dataclass(frozen=True)
class MoveDecision:
    """
    A move chosen by the selector.

    reason is one of "win", "block", "best" or "mistake"; score is None
    for fast-path moves that skipped the search.
    """
    index: int
    reason: str
    score: Optional[int] = None

    def describe(self) -> str:
        text = f"cell {self.index + 1} ({self.reason}"
        if self.score is not None:
            text += f", score {self.score}"
        return text + ")"


def find_completing_cell(board: Board, player: Player) -> Optional[int]:
    """
    Find a line where the player owns two cells and the third is empty.

    Args:
        board: Board to scan.
        player: Whose two-in-a-row to look for.

    Returns:
        Index of the empty third cell, or None.
    """
    for line in LINES:
        cells = [board.grid[i] for i in line]
        if cells.count(player) == 2 and cells.count(None) == 1:
            return line[cells.index(None)]
    return None


class MoveSelector:
    """
    Picks the computer's move each turn.

    1. Optional fast path (finish a win and/or block the human).
    2. Minimax score for every empty cell.
    3. Maybe swap the best move for a strictly worse one, depending on
       the difficulty and the mistake policy.
    """

    def __init__(
        self,
        fast_path: Optional[FastPathPolicy] = None,
        mistake_policy: Optional[MistakePolicy] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize the move selector.

        Args:
            fast_path: Tactical shortcut policy (default: win, then block).
            mistake_policy: When mistakes may happen (default: per move).
            rng: Random source, seed it for reproducible games.
            clock: Returns seconds, used by the time-gated policy.
            config: Engine configuration. Uses defaults if not provided.
        """
        self.config = config or EngineConfig()
        self.fast_path = fast_path or self.config.DEFAULT_FAST_PATH
        self.mistake_policy = mistake_policy or self.config.DEFAULT_MISTAKE_POLICY
        self.rng = rng or random.Random()
        self.clock = clock

    def select_move(
        self,
        board: Board,
        difficulty: Difficulty,
        mistake_state: Optional[MistakeState] = None,
    ) -> MoveDecision:
        """
        Choose the computer's move.

        Args:
            board: Current position, computer to move. Not modified.
            difficulty: Difficulty of the current session.
            mistake_state: Per-game mistake bookkeeping (updated in place).

        Returns:
            The chosen MoveDecision.

        Raises:
            ValueError: If the game is already over.
        """
        if board.is_terminal():
            raise ValueError("Cannot select a move on a finished board")
        if mistake_state is None:
            mistake_state = MistakeState()

        decision = self._fast_path_move(board)
        if decision is None:
            scored = score_moves(board)
            best_index, best_score = best_scored_move(scored)
            decision = MoveDecision(best_index, "best", best_score)

            mistake = self._maybe_mistake(scored, best_score, difficulty, mistake_state)
            if mistake is not None:
                decision = mistake

        # Guard: never hand back an occupied cell
        if not board.is_empty(decision.index):
            raise RuntimeError(f"Move selector chose occupied cell {decision.index}")

        logger.debug("Computer chose %s", decision.describe())
        return decision

    def select_computer_move(
        self,
        board: Board,
        difficulty: Difficulty,
        mistake_state: Optional[MistakeState] = None,
    ) -> int:
        """Same as select_move, returning only the cell index."""
        return self.select_move(board, difficulty, mistake_state).index

    def _fast_path_move(self, board: Board) -> Optional[MoveDecision]:
        if self.fast_path == FastPathPolicy.NONE:
            return None

        winning_cell = find_completing_cell(board, Player.COMPUTER)
        if winning_cell is not None:
            if self.fast_path == FastPathPolicy.WIN_AND_BLOCK:
                return MoveDecision(winning_cell, "win")
            # Block-only leaves an available win to the search
            return None

        index = find_completing_cell(board, Player.HUMAN)
        if index is not None:
            return MoveDecision(index, "block")
        return None

    def _maybe_mistake(
        self,
        scored: List[Tuple[int, int]],
        best_score: int,
        difficulty: Difficulty,
        state: MistakeState,
    ) -> Optional[MoveDecision]:
        worse = [(index, score) for index, score in scored if score < best_score]
        if not worse:
            return None

        if self.mistake_policy == MistakePolicy.TIME_GATED:
            if state.has_made_mistake:
                return None
            now = self.clock()
            if state.game_started_at is None:
                state.game_started_at = now
            delay = self.config.MISTAKE_DELAY_S[difficulty]
            if now - state.game_started_at < delay:
                return None
        else:
            chance = self.config.MISTAKE_PROBABILITY[difficulty]
            if self.rng.random() >= chance:
                return None

        index, score = self.rng.choice(worse)
        state.has_made_mistake = True
        state.mistakes_made += 1
        logger.info(
            "Deliberate mistake on %s: cell %d (score %d, best %d)",
            difficulty.label, index + 1, score, best_score,
        )
        return MoveDecision(index, "mistake", score)
