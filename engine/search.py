"""
Minimax search for TicTacToe.
Scores positions from the computer's point of view by exploring every
reachable game to the end.
"""

import logging
from typing import List, Tuple

from .board import Board, Player
from .config import EngineConfig

logger = logging.getLogger(__name__)


def minimax(board: Board, depth: int = 0, maximizing: bool = False) -> int:
    """
    Full-depth minimax (no pruning).

    Args:
        board: Position to evaluate. Left exactly as it was on return.
        depth: Plies already played below the root move.
        maximizing: True if the computer moves next.

    Returns:
        10 - depth for a computer win, depth - 10 for a human win,
        0 for a draw. Always in [-10, 10].
    """
    winner = board.winner()
    if winner == Player.COMPUTER:
        return EngineConfig.WIN_SCORE - depth
    if winner == Player.HUMAN:
        return depth - EngineConfig.WIN_SCORE
    if board.is_full():
        return 0

    mover = Player.COMPUTER if maximizing else Player.HUMAN
    best = None
    for index in board.empty_cells():
        board.place(index, mover)
        try:
            score = minimax(board, depth + 1, not maximizing)
        finally:
            board.clear(index)

        if best is None:
            best = score
        elif maximizing:
            best = max(best, score)
        else:
            best = min(best, score)
    return best


def score_moves(board: Board) -> List[Tuple[int, int]]:
    """
    Score every move available to the computer.

    The search runs on a private copy, so the caller's board is never
    touched.

    Args:
        board: Current position, computer to move.

    Returns:
        (index, score) pairs in index order.
    """
    work = board.copy()
    scored = []
    for index in work.empty_cells():
        work.place(index, Player.COMPUTER)
        try:
            # After the computer's move it is the human's turn
            scored.append((index, minimax(work, 0, False)))
        finally:
            work.clear(index)

    logger.debug("Scored %d moves: %s", len(scored), scored)
    return scored


def best_scored_move(scored: List[Tuple[int, int]]) -> Tuple[int, int]:
    """
    Pick the highest scoring move; the lowest index wins ties.

    Raises:
        ValueError: If there are no moves.
    """
    if not scored:
        raise ValueError("No moves to choose from")
    best_index, best_score = scored[0]
    for index, score in scored[1:]:
        if score > best_score:
            best_index, best_score = index, score
    return best_index, best_score


# Quick test
if __name__ == "__main__":
    print("Testing minimax...")

    # Human has 0 and 1, computer must block at 2
    board = Board.from_string("XX_ _O_ ___")
    print(board)
    scores = score_moves(board)
    print(f"Scores: {scores}")
    print(f"Best: {best_scored_move(scores)}")
