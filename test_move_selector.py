"""
Tests for computer move selection: fast paths, mistakes and guards.
"""

import random

import pytest

from engine.board import Board, Player
from engine.config import Difficulty, EngineConfig, FastPathPolicy, MistakePolicy
from engine.move_selector import MistakeState, MoveDecision, MoveSelector, find_completing_cell
from engine.search import score_moves


class FixedRandom(random.Random):
    """random() always returns the same value."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_selector(fast_path=FastPathPolicy.NONE, mistake_policy=MistakePolicy.PER_MOVE,
                  rng=None, clock=None):
    return MoveSelector(
        fast_path=fast_path,
        mistake_policy=mistake_policy,
        rng=rng or FixedRandom(0.99),
        clock=clock or FakeClock(),
    )


# Computer can win at 2; every other move is strictly worse
WIN_AVAILABLE = "OO_ XX_ X__"


# ==================== FAST PATH ====================

def test_find_completing_cell():
    board = Board.from_string("XX_ OO_ ___")
    assert find_completing_cell(board, Player.HUMAN) == 2
    assert find_completing_cell(board, Player.COMPUTER) == 5
    assert find_completing_cell(Board(), Player.HUMAN) is None


def test_find_completing_cell_ignores_blocked_lines():
    board = Board.from_string("XXO ___ ___")
    assert find_completing_cell(board, Player.HUMAN) is None


def test_block_only_leaves_an_available_win_to_search():
    selector = make_selector(fast_path=FastPathPolicy.BLOCK_ONLY)
    decision = selector.select_move(Board.from_string("XX_ OO_ ___"), Difficulty.HARD)
    assert decision == MoveDecision(5, "best", 10)


@pytest.mark.parametrize("fast_path", list(FastPathPolicy))
def test_win_taken_over_a_block_on_an_earlier_line(fast_path):
    # Human threatens 6 (bottom row) and 5 (right column), computer wins at 5
    selector = make_selector(fast_path=fast_path)
    board = Board.from_string("XOX OO_ _XX")
    assert find_completing_cell(board, Player.HUMAN) == 6
    assert selector.select_computer_move(board, Difficulty.HARD) == 5


def test_win_and_block_finishes_the_win_first():
    selector = make_selector(fast_path=FastPathPolicy.WIN_AND_BLOCK)
    decision = selector.select_move(Board.from_string("XX_ OO_ ___"), Difficulty.HARD)
    assert decision == MoveDecision(5, "win")


def test_win_and_block_still_blocks():
    selector = make_selector(fast_path=FastPathPolicy.WIN_AND_BLOCK)
    decision = selector.select_move(Board.from_string("XX_ _O_ ___"), Difficulty.HARD)
    assert decision == MoveDecision(2, "block")


def test_without_fast_path_search_finds_the_win():
    selector = make_selector(fast_path=FastPathPolicy.NONE)
    decision = selector.select_move(Board.from_string("XX_ OO_ ___"), Difficulty.HARD)
    assert decision.index == 5
    assert decision.reason == "best"
    assert decision.score == 10


def test_without_fast_path_search_finds_the_block():
    selector = make_selector(fast_path=FastPathPolicy.NONE)
    assert selector.select_computer_move(Board.from_string("XX_ _O_ ___"), Difficulty.HARD) == 2


def test_fast_path_moves_are_never_mistakes():
    selector = make_selector(fast_path=FastPathPolicy.BLOCK_ONLY, rng=FixedRandom(0.0))
    state = MistakeState()
    decision = selector.select_move(Board.from_string("XX_ _O_ ___"), Difficulty.EASY, state)
    assert decision.reason == "block"
    assert state.mistakes_made == 0


def test_default_policies():
    selector = MoveSelector()
    assert selector.fast_path == FastPathPolicy.WIN_AND_BLOCK
    assert selector.mistake_policy == MistakePolicy.PER_MOVE


def test_corner_reply_to_center_with_no_mistakes():
    selector = make_selector()
    board = Board.from_string("___ _X_ ___")
    decision = selector.select_move(board, Difficulty.HARD)
    assert decision.index in (0, 2, 6, 8)
    assert decision.index == 0  # first of the equally good corners


def test_selected_score_is_the_maximum():
    selector = make_selector()
    board = Board.from_string("X__ _O_ __X")
    decision = selector.select_move(board, Difficulty.HARD)
    assert decision.score == max(score for _i, score in score_moves(board))


# ==================== PER-MOVE MISTAKES ====================

@pytest.mark.parametrize("difficulty, roll, expect_mistake", [
    (Difficulty.EASY, 0.29, True),
    (Difficulty.EASY, 0.30, False),
    (Difficulty.MEDIUM, 0.15, True),
    (Difficulty.MEDIUM, 0.20, False),
    (Difficulty.HARD, 0.05, True),
    (Difficulty.HARD, 0.15, False),
])
def test_per_move_mistake_threshold(difficulty, roll, expect_mistake):
    selector = make_selector(rng=FixedRandom(roll))
    state = MistakeState()
    decision = selector.select_move(Board.from_string(WIN_AVAILABLE), difficulty, state)

    if expect_mistake:
        assert decision.reason == "mistake"
        assert decision.index != 2
        assert decision.score < 10
        assert state.mistakes_made == 1
    else:
        assert decision == MoveDecision(2, "best", 10)
        assert state.mistakes_made == 0


def test_per_move_mistakes_have_no_latch():
    selector = make_selector(rng=FixedRandom(0.0))
    state = MistakeState()
    for _ in range(3):
        decision = selector.select_move(Board.from_string(WIN_AVAILABLE), Difficulty.HARD, state)
        assert decision.reason == "mistake"
    assert state.mistakes_made == 3


def test_no_mistake_when_every_move_is_equally_good():
    # One empty cell left: there is nothing worse to pick
    selector = make_selector(rng=FixedRandom(0.0))
    board = Board.from_string("XOX OOX XX_")
    decision = selector.select_move(board, Difficulty.EASY)
    assert decision.index == 8
    assert decision.reason == "best"


def test_mistakes_only_pick_strictly_worse_moves():
    selector = make_selector(rng=FixedRandom(0.0))
    board = Board.from_string("___ _X_ ___")
    worse = {1, 3, 5, 7}   # corners all score 0, edges lose
    for _ in range(3):
        decision = selector.select_move(board, Difficulty.EASY)
        assert decision.reason == "mistake"
        assert decision.index in worse


def test_easy_mistake_rate_matches_probability():
    selector = make_selector(rng=random.Random(2024))
    board = Board.from_string(WIN_AVAILABLE)
    state = MistakeState()

    trials = 1000
    mistakes = 0
    for _ in range(trials):
        decision = selector.select_move(board, Difficulty.EASY, state)
        if decision.index != 2:
            mistakes += 1

    rate = mistakes / trials
    # standard error is about 0.0145, allow four of them
    assert abs(rate - 0.3) < 0.06
    assert state.mistakes_made == mistakes


def test_mistake_chance_comes_from_the_selector_config():
    class AlwaysWrong(EngineConfig):
        MISTAKE_PROBABILITY = {d: 1.0 for d in Difficulty}

    selector = MoveSelector(
        fast_path=FastPathPolicy.NONE,
        rng=FixedRandom(0.99),
        config=AlwaysWrong(),
    )
    decision = selector.select_move(Board.from_string(WIN_AVAILABLE), Difficulty.HARD)
    assert decision.reason == "mistake"


# ==================== TIME-GATED MISTAKES ====================

def test_time_gated_waits_for_the_delay():
    clock = FakeClock(100.0)
    selector = make_selector(mistake_policy=MistakePolicy.TIME_GATED, rng=FixedRandom(0.99), clock=clock)
    state = MistakeState(game_started_at=100.0)
    board = Board.from_string(WIN_AVAILABLE)

    clock.now = 107.9
    assert selector.select_move(board, Difficulty.EASY, state).reason == "best"

    clock.now = 108.0
    decision = selector.select_move(board, Difficulty.EASY, state)
    assert decision.reason == "mistake"
    assert state.has_made_mistake


def test_time_gated_makes_one_mistake_per_game():
    clock = FakeClock(50.0)
    selector = make_selector(mistake_policy=MistakePolicy.TIME_GATED, clock=clock)
    state = MistakeState(game_started_at=0.0)
    board = Board.from_string(WIN_AVAILABLE)

    assert selector.select_move(board, Difficulty.HARD, state).reason == "mistake"
    assert selector.select_move(board, Difficulty.HARD, state).reason == "best"
    assert state.mistakes_made == 1

    # A new game clears the latch
    state.reset(now=50.0)
    clock.now = 80.0
    assert selector.select_move(board, Difficulty.HARD, state).reason == "mistake"


@pytest.mark.parametrize("difficulty, delay", [
    (Difficulty.EASY, 8.0),
    (Difficulty.MEDIUM, 15.0),
    (Difficulty.HARD, 30.0),
])
def test_time_gated_delay_per_difficulty(difficulty, delay):
    clock = FakeClock()
    selector = make_selector(mistake_policy=MistakePolicy.TIME_GATED, clock=clock)
    board = Board.from_string(WIN_AVAILABLE)

    state = MistakeState(game_started_at=0.0)
    clock.now = delay - 0.5
    assert selector.select_move(board, difficulty, state).reason == "best"
    clock.now = delay
    assert selector.select_move(board, difficulty, state).reason == "mistake"


def test_time_gated_starts_the_clock_if_unset():
    clock = FakeClock(500.0)
    selector = make_selector(mistake_policy=MistakePolicy.TIME_GATED, clock=clock)
    state = MistakeState()

    assert selector.select_move(Board.from_string(WIN_AVAILABLE), Difficulty.EASY, state).reason == "best"
    assert state.game_started_at == 500.0


# ==================== GUARDS ====================

def test_finished_board_rejected():
    selector = make_selector()
    with pytest.raises(ValueError):
        selector.select_move(Board.from_string("XXX OO_ ___"), Difficulty.HARD)
    with pytest.raises(ValueError):
        selector.select_move(Board.from_string("XOX XOO OXX"), Difficulty.HARD)


def test_occupied_result_raises(monkeypatch):
    selector = make_selector()
    monkeypatch.setattr(selector, "_fast_path_move", lambda board: MoveDecision(4, "block"))
    with pytest.raises(RuntimeError):
        selector.select_move(Board.from_string("X__ _O_ ___"), Difficulty.HARD)


def test_selection_does_not_modify_board():
    selector = make_selector(rng=FixedRandom(0.0))
    board = Board.from_string("X__ _O_ __X")
    before = board.cells
    selector.select_move(board, Difficulty.EASY)
    assert board.cells == before


def test_decision_describe():
    assert MoveDecision(4, "best", 0).describe() == "cell 5 (best, score 0)"
    assert MoveDecision(2, "block").describe() == "cell 3 (block)"
