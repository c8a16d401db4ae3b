"""
Board for TicTacToe.
Holds the 3x3 grid and answers win/draw questions about it.
"""

from enum import Enum
from typing import Iterable, List, Optional, Tuple
from dataclasses import dataclass, field

from .config import EngineConfig


class Player(Enum):
    """The two players in the game."""
    HUMAN = EngineConfig.HUMAN_MARK
    COMPUTER = EngineConfig.COMPUTER_MARK

    @property
    def mark(self) -> str:
        return self.value

    def opposite(self) -> "Player":
        """Get the opposite player."""
        return Player.COMPUTER if self == Player.HUMAN else Player.HUMAN


# A cell is None (empty) or the player occupying it
Cell = Optional[Player]

# All possible winning lines (as index triples)
LINES: Tuple[Tuple[int, int, int], ...] = (
    # Rows
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    # Columns
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    # Diagonals
    (0, 4, 8),
    (2, 4, 6),
)


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAWN = "drawn"


@dataclass(frozen=True)
class GameOutcome:
    """
    Result of a board position: in progress, won by a player, or drawn.
    Always computed from a Board, never stored on its own.
    """
    status: GameStatus
    winner: Optional[Player] = None

    @property
    def is_over(self) -> bool:
        return self.status != GameStatus.IN_PROGRESS

    def __str__(self) -> str:
        if self.status == GameStatus.WON:
            return f"{self.winner.name.capitalize()} wins"
        if self.status == GameStatus.DRAWN:
            return "Draw"
        return "In progress"


IN_PROGRESS = GameOutcome(GameStatus.IN_PROGRESS)
DRAW = GameOutcome(GameStatus.DRAWN)


def _check_index(index: int):
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < EngineConfig.CELL_COUNT:
        raise IndexError(f"Invalid cell index {index!r}. Must be 0-{EngineConfig.CELL_COUNT - 1}.")


@dataclass
class Board:
    """
    The 3x3 TicTacToe board.

    Cells are indexed 0-8, row = index // 3, column = index % 3.
    None means empty, otherwise the Player who owns the cell.
    """

    grid: List[Cell] = field(
        default_factory=lambda: [None] * EngineConfig.CELL_COUNT
    )

    def __post_init__(self):
        if len(self.grid) != EngineConfig.CELL_COUNT:
            raise ValueError(f"A board has {EngineConfig.CELL_COUNT} cells, got {len(self.grid)}")

    @classmethod
    def from_cells(cls, cells: Iterable[Cell]) -> "Board":
        return cls(list(cells))

    @classmethod
    def from_string(cls, text: str) -> "Board":
        """
        Build a board from a compact string such as "XX_OO____".

        Args:
            text: 9 characters, X = human, O = computer, anything else
                empty. Whitespace and "|" separators are ignored.

        Returns:
            The new Board.
        """
        chars = [c for c in text if not c.isspace() and c != "|"]
        lookup = {p.mark: p for p in Player}
        return cls([lookup.get(c.upper()) for c in chars])

    @property
    def cells(self) -> Tuple[Cell, ...]:
        """Immutable snapshot of the 9 cells."""
        return tuple(self.grid)

    def __getitem__(self, index: int) -> Cell:
        _check_index(index)
        return self.grid[index]

    def is_empty(self, index: int) -> bool:
        """True if the index is on the board and nobody owns it."""
        if not isinstance(index, int) or not 0 <= index < EngineConfig.CELL_COUNT:
            return False
        return self.grid[index] is None

    def empty_cells(self) -> List[int]:
        """
        Get all empty cells on the board.

        Returns:
            List of indexes in ascending order.
        """
        return [i for i, cell in enumerate(self.grid) if cell is None]

    def is_full(self) -> bool:
        return all(cell is not None for cell in self.grid)

    def place(self, index: int, player: Player):
        """
        Put a player's mark on an empty cell.

        Raises:
            IndexError: If the index is outside 0-8.
            ValueError: If the cell is already occupied.
        """
        _check_index(index)
        if self.grid[index] is not None:
            raise ValueError(f"Cell {index} is already occupied by {self.grid[index].name}")
        self.grid[index] = player

    def clear(self, index: int):
        """Empty a cell again (used when backtracking a hypothetical move)."""
        _check_index(index)
        self.grid[index] = None

    def reset(self):
        self.grid = [None] * EngineConfig.CELL_COUNT

    def copy(self) -> "Board":
        """Create an independent copy of the board."""
        return Board(list(self.grid))

    def count(self, player: Player) -> int:
        return sum(1 for cell in self.grid if cell == player)

    # ==================== TERMINAL STATE ====================

    def _line_owner(self, line: Tuple[int, int, int]) -> Optional[Player]:
        a, b, c = line
        first = self.grid[a]
        if first is not None and first == self.grid[b] == self.grid[c]:
            return first
        return None

    def winner(self) -> Optional[Player]:
        """
        Check if there's a winner.

        Returns:
            The winning Player, or None if no line is complete.
        """
        for line in LINES:
            owner = self._line_owner(line)
            if owner is not None:
                return owner
        return None

    def winning_line(self) -> Optional[Tuple[int, int, int]]:
        """
        Get the winning line if there is one.

        Returns:
            The completed line as an index triple, or None.
        """
        for line in LINES:
            if self._line_owner(line) is not None:
                return line
        return None

    def is_draw(self) -> bool:
        """
        Check if the game is a draw.
        A full board only counts as a draw if nobody completed a line.
        """
        if self.winner() is not None:
            return False
        return self.is_full()

    def is_terminal(self) -> bool:
        return self.winner() is not None or self.is_full()

    def outcome(self) -> GameOutcome:
        """Derive the game outcome from the current cells."""
        winner = self.winner()
        if winner is not None:
            return GameOutcome(GameStatus.WON, winner)
        if self.is_full():
            return DRAW
        return IN_PROGRESS

    def __str__(self) -> str:
        rows = []
        for row in range(EngineConfig.BOARD_SIZE):
            start = row * EngineConfig.BOARD_SIZE
            marks = []
            for index in range(start, start + EngineConfig.BOARD_SIZE):
                cell = self.grid[index]
                marks.append(cell.mark if cell is not None else str(index + 1))
            rows.append(" " + " | ".join(marks))
        return "\n---+---+---\n".join(rows)


# Module-level helpers mirroring the Board methods

def winner(board: Board) -> Optional[Player]:
    return board.winner()


def is_draw(board: Board) -> bool:
    return board.is_draw()


def is_terminal(board: Board) -> bool:
    return board.is_terminal()
