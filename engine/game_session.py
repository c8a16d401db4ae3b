"""
Game session for TicTacToe.
Tracks the board, whose turn it is, the chosen difficulty and the
pending computer move, and exposes the transitions the UI calls.
"""

import logging
import random
import threading
import time
from enum import Enum
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

from .board import Board, Cell, GameOutcome, GameStatus, Player
from .config import Difficulty, EngineConfig, FastPathPolicy, MistakePolicy
from .move_selector import MistakeState, MoveDecision, MoveSelector
from .move_validator import MoveValidator
from .scheduler import ThreadingScheduler

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a session."""
    AWAITING_DIFFICULTY = "awaiting_difficulty"
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAWN = "drawn"


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything a presentation layer needs to render the game."""
    cells: Tuple[Cell, ...]
    outcome: GameOutcome
    turn: Player
    difficulty: Optional[Difficulty]
    state: SessionState
    winning_line: Optional[Tuple[int, int, int]] = None
    last_decision: Optional[MoveDecision] = None
    computer_thinking: bool = False


Listener = Callable[[SessionSnapshot], Any]


class GameSession:
    """
    One game against the computer.

    Game flow:
    1. choose_difficulty() starts a game, human moves first
    2. human_move() places X and schedules the computer's reply
    3. After the thinking delay the computer places O
    4. Repeat until someone wins or it's a draw
    5. restart() plays again, change_difficulty() goes back to step 1

    Invalid calls are ignored and return False.
    """

    def __init__(
        self,
        selector: Optional[MoveSelector] = None,
        scheduler=None,
        thinking_delay: Optional[float] = None,
        fast_path: Optional[FastPathPolicy] = None,
        mistake_policy: Optional[MistakePolicy] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize the session.

        Args:
            selector: Move selector. Built from fast_path, mistake_policy,
                rng and clock if not provided.
            scheduler: Runs the delayed computer move (default: threading).
            thinking_delay: Seconds before the computer answers.
            fast_path: Tactical shortcut policy for a new selector.
            mistake_policy: Mistake policy for a new selector.
            rng: Random source for a new selector.
            clock: Returns seconds, marks the start of each game.
            config: Engine configuration. Uses defaults if not provided.
        """
        self.config = config or EngineConfig()
        self.clock = clock
        self.selector = selector or MoveSelector(
            fast_path=fast_path,
            mistake_policy=mistake_policy,
            rng=rng,
            clock=clock,
            config=self.config,
        )
        self.scheduler = scheduler or ThreadingScheduler()
        self.thinking_delay = (
            self.config.THINKING_DELAY_S if thinking_delay is None else thinking_delay
        )
        self.validator = MoveValidator()

        self._board = Board()
        self._turn = Player.HUMAN
        self._difficulty: Optional[Difficulty] = None
        self.mistake_state = MistakeState()
        self.last_decision: Optional[MoveDecision] = None

        # Pending computer move; the generation makes late timers harmless
        self._pending = None
        self._generation = 0

        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

    # ==================== OBSERVABLE STATE ====================

    @property
    def board(self) -> Tuple[Cell, ...]:
        return self._board.cells

    @property
    def outcome(self) -> GameOutcome:
        return self._board.outcome()

    @property
    def turn(self) -> Player:
        return self._turn

    @property
    def difficulty(self) -> Optional[Difficulty]:
        return self._difficulty

    @property
    def state(self) -> SessionState:
        if self._difficulty is None:
            return SessionState.AWAITING_DIFFICULTY
        status = self._board.outcome().status
        if status == GameStatus.WON:
            return SessionState.WON
        if status == GameStatus.DRAWN:
            return SessionState.DRAWN
        return SessionState.IN_PROGRESS

    @property
    def has_pending_computer_move(self) -> bool:
        return self._pending is not None

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                cells=self._board.cells,
                outcome=self._board.outcome(),
                turn=self._turn,
                difficulty=self._difficulty,
                state=self.state,
                winning_line=self._board.winning_line(),
                last_decision=self.last_decision,
                computer_thinking=self._pending is not None,
            )

    def add_listener(self, listener: Listener):
        """Call listener with a fresh snapshot after every accepted change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self):
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # ==================== TRANSITIONS ====================

    def choose_difficulty(self, level: Union[Difficulty, str]) -> bool:
        """
        Pick the difficulty and start a game.

        Args:
            level: A Difficulty or its name.

        Returns:
            True if a game started, False if a difficulty was already set.
        """
        with self._lock:
            if self._difficulty is not None:
                logger.debug("Difficulty already chosen (%s), ignoring", self._difficulty.label)
                return False
            if not isinstance(level, Difficulty):
                try:
                    level = Difficulty.parse(str(level))
                except ValueError as e:
                    logger.debug("%s", e)
                    return False

            self._difficulty = level
            self._new_game()
            logger.info("New game on %s", level.label)
        self._notify()
        return True

    def human_move(self, index: int) -> bool:
        """
        Place the human's mark.

        Args:
            index: Cell 0-8.

        Returns:
            True if the move was accepted.
        """
        with self._lock:
            board = self._board if self._difficulty is not None else None
            result = self.validator.validate_move(board, self._turn, index)
            if not result.is_valid:
                logger.debug("Rejected human move %r: %s", index, result.error_message)
                return False

            self._board.place(index, Player.HUMAN)
            self._turn = Player.COMPUTER
            logger.info("Human played cell %d", index + 1)

            if self._board.is_terminal():
                logger.info("Game over: %s", self._board.outcome())
            else:
                self._schedule_computer_move()
        self._notify()
        return True

    def computer_move(self) -> bool:
        """
        Let the computer play now.
        Normally called by the scheduler after the thinking delay.

        Returns:
            True if the computer moved.
        """
        return self._play_computer()

    def restart(self) -> bool:
        """
        Start a new game with the same difficulty.

        Returns:
            False if no difficulty has been chosen yet.
        """
        with self._lock:
            if self._difficulty is None:
                logger.debug("Restart ignored, no difficulty chosen")
                return False
            self._new_game()
            logger.info("Game restarted on %s", self._difficulty.label)
        self._notify()
        return True

    def change_difficulty(self) -> bool:
        """
        Drop the current game and go back to difficulty selection.

        Returns:
            False if already waiting for a difficulty.
        """
        with self._lock:
            if self._difficulty is None:
                return False
            self._cancel_pending()
            self._difficulty = None
            self._board.reset()
            self._turn = Player.HUMAN
            self.mistake_state.reset()
            self.last_decision = None
            logger.info("Back to difficulty selection")
        self._notify()
        return True

    def close(self):
        """Cancel any pending computer move (call on shutdown)."""
        with self._lock:
            self._cancel_pending()

    # ==================== INTERNALS ====================

    def _new_game(self):
        self._cancel_pending()
        self._board.reset()
        self._turn = Player.HUMAN
        self.mistake_state.reset(self.clock())
        self.last_decision = None

    def _schedule_computer_move(self):
        generation = self._generation
        self._pending = self.scheduler.schedule(
            self.thinking_delay,
            lambda: self._play_computer(generation),
        )

    def _play_computer(self, generation: Optional[int] = None) -> bool:
        """Computer move; a scheduled call passes the generation it was made in."""
        with self._lock:
            if generation is not None:
                if generation != self._generation:
                    logger.debug("Discarding stale computer move (generation %d)", generation)
                    return False
                self._pending = None

            if self.state != SessionState.IN_PROGRESS or self._turn != Player.COMPUTER:
                logger.debug("Computer move ignored (state=%s, turn=%s)", self.state.value, self._turn.name)
                return False

            # Called directly while a timer is still pending
            self._cancel_pending()

            decision = self.selector.select_move(self._board, self._difficulty, self.mistake_state)
            self._board.place(decision.index, Player.COMPUTER)
            self.last_decision = decision
            self._turn = Player.HUMAN
            logger.info("Computer played %s", decision.describe())

            if self._board.is_terminal():
                logger.info("Game over: %s", self._board.outcome())
        self._notify()
        return True

    def _cancel_pending(self):
        if self._pending is not None:
            self.scheduler.cancel(self._pending)
            self._pending = None
        self._generation += 1
