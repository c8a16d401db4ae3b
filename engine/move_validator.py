"""
Move validator for TicTacToe.
Validates that a human move is allowed right now.
"""

from typing import Optional
from dataclasses import dataclass

from .board import Board, Player
from .config import EngineConfig


@dataclass
class ValidationResult:
    """Result of move validation."""
    is_valid: bool
    error_message: Optional[str] = None


class MoveValidator:
    """
    Validates human moves.

    Rules:
    1. A difficulty must have been chosen
    2. Game must not be over
    3. It must be the human's turn
    4. Can only place on an empty cell 0-8
    """

    def validate_move(
        self,
        board: Optional[Board],
        turn: Player,
        index,
    ) -> ValidationResult:
        """
        Validate a human move.

        Args:
            board: Current board, or None before a difficulty is chosen.
            turn: Whose turn it is.
            index: Cell the human wants to play.

        Returns:
            ValidationResult with is_valid and error_message.
        """
        if board is None:
            return ValidationResult(
                is_valid=False,
                error_message="Choose a difficulty first!"
            )

        if board.is_terminal():
            return ValidationResult(
                is_valid=False,
                error_message="Game is already over!"
            )

        if turn != Player.HUMAN:
            return ValidationResult(
                is_valid=False,
                error_message="It's the computer's turn!"
            )

        # bool is an int subclass but never a cell
        if not isinstance(index, int) or isinstance(index, bool) \
           or not 0 <= index < EngineConfig.CELL_COUNT:
            return ValidationResult(
                is_valid=False,
                error_message=f"Invalid cell {index!r}. Must be 0-{EngineConfig.CELL_COUNT - 1}."
            )

        if not board.is_empty(index):
            return ValidationResult(
                is_valid=False,
                error_message=f"Cell {index} is already occupied by {board.grid[index].name}"
            )

        return ValidationResult(is_valid=True)
