"""
Engine module for TicTacToe.
Handles the board, minimax search, computer move selection and the game session.
"""

__version__ = "1.0.0"

from .config import Difficulty, EngineConfig, FastPathPolicy, MistakePolicy
from .board import Board, GameOutcome, GameStatus, Player, LINES
from .search import minimax, score_moves
from .move_selector import MistakeState, MoveDecision, MoveSelector
from .move_validator import MoveValidator, ValidationResult
from .scheduler import ManualScheduler, ThreadingScheduler
from .game_session import GameSession, SessionSnapshot, SessionState
