"""
Engine configuration for TicTacToe.
Difficulty levels, scoring constants and timing settings.
"""

from enum import Enum


class Difficulty(Enum):
    """Computer difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, text: str) -> "Difficulty":
        """
        Look up a difficulty by name, case-insensitively.

        Args:
            text: "easy", "Medium", "HARD", ...

        Returns:
            The matching Difficulty.

        Raises:
            ValueError: If the name is unknown.
        """
        try:
            return cls(text.strip().lower())
        except ValueError:
            names = ", ".join(d.value for d in cls)
            raise ValueError(f"Unknown difficulty '{text}'. Choose one of: {names}") from None


class FastPathPolicy(Enum):
    """Which tactical shortcuts the move selector takes before searching."""
    NONE = "none"
    BLOCK_ONLY = "block"
    WIN_AND_BLOCK = "win-block"


class MistakePolicy(Enum):
    """When the move selector is allowed to play a worse move."""
    PER_MOVE = "per-move"       # independent roll on every move
    TIME_GATED = "time-gated"   # at most one per game, after a delay


class EngineConfig:
    """
    Configuration for the game engine.
    Change these values to tune the computer opponent.
    """

    # ==================== BOARD ====================
    BOARD_SIZE = 3
    CELL_COUNT = BOARD_SIZE * BOARD_SIZE

    # Player marks
    HUMAN_MARK = "X"
    COMPUTER_MARK = "O"

    # ==================== SEARCH ====================
    # A win at depth d scores WIN_SCORE - d, a loss d - WIN_SCORE
    WIN_SCORE = 10

    # ==================== DIFFICULTY ====================
    # Higher skill = lower mistake chance
    MISTAKE_PROBABILITY = {
        Difficulty.EASY: 0.3,
        Difficulty.MEDIUM: 0.2,
        Difficulty.HARD: 0.1,
    }

    # Seconds since game start before the single allowed mistake
    MISTAKE_DELAY_S = {
        Difficulty.EASY: 8.0,
        Difficulty.MEDIUM: 15.0,
        Difficulty.HARD: 30.0,
    }

    DEFAULT_FAST_PATH = FastPathPolicy.WIN_AND_BLOCK
    DEFAULT_MISTAKE_POLICY = MistakePolicy.PER_MOVE

    # ==================== TIMING ====================
    # Cosmetic pause before the computer answers (seconds)
    THINKING_DELAY_S = 0.5
