import random

import pytest

from core import DIRECTION, MoveOutcome, count_tiles
from session import GameSession, UndoHistory

START = [[2, 0, 0, 0], [0, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
CHECKERED = [[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]]


@pytest.fixture
def session():
    return GameSession(START, rng=random.Random(42))


class TestMove:

    def test_changed_move_spawns_one_tile(self, session):
        result = session.move(DIRECTION.LEFT)

        assert result.outcome is MoveOutcome.MERGE
        assert result.changed
        assert result.merged == [[2, 0, 0, 0], [2, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
        assert count_tiles(result.spawned) == count_tiles(result.merged) + 1
        assert session.board == result.spawned

        spawned = [
            result.spawned[r][c] for r in range(4) for c in range(4)
            if result.merged[r][c] == 0 and result.spawned[r][c] != 0
        ]
        assert len(spawned) == 1
        assert spawned[0] in (2, 4)

    def test_invalid_move_leaves_board_and_history(self):
        session = GameSession(CHECKERED, rng=random.Random(1))
        result = session.move(DIRECTION.UP)

        assert result.outcome is MoveOutcome.INVALID
        assert result.spawned is None
        assert result.merged == CHECKERED
        assert session.board == CHECKERED
        assert not session.history

    def test_score_accumulates(self):
        session = GameSession([[2, 2, 4, 4], [0] * 4, [0] * 4, [0] * 4], rng=random.Random(0))
        result = session.move(DIRECTION.LEFT)
        assert result.score_gained == 12
        assert session.score == 12

    def test_session_does_not_alias_input(self):
        board = [row[:] for row in START]
        session = GameSession(board, rng=random.Random(0))
        session.move(DIRECTION.RIGHT)
        assert board == START

    def test_rejects_bad_board(self):
        with pytest.raises(ValueError):
            GameSession([[3, 0, 0, 0], [0] * 4, [0] * 4, [0] * 4])

    def test_same_seed_same_game(self):
        moves = [DIRECTION.LEFT, DIRECTION.DOWN, DIRECTION.RIGHT, DIRECTION.UP]
        boards = []
        for _ in range(2):
            s = GameSession(START, rng=random.Random(123))
            for d in moves:
                s.move(d)
            boards.append(s.board)
        assert boards[0] == boards[1]


class TestUndo:

    def test_restores_board_before_last_move(self, session):
        session.move(DIRECTION.LEFT)
        restored = session.undo()
        assert restored == START
        assert session.board == START

    def test_restores_score(self):
        session = GameSession([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4], rng=random.Random(0))
        session.move(DIRECTION.LEFT)
        assert session.score == 4
        session.undo()
        assert session.score == 0

    def test_only_one_level(self, session):
        session.move(DIRECTION.LEFT)
        after_first = [row[:] for row in session.board]
        session.move(DIRECTION.RIGHT)

        assert session.undo() == after_first
        assert session.undo() is None
        assert session.board == after_first

    def test_nothing_to_undo(self, session):
        assert session.undo() is None
        assert session.board == START

    def test_invalid_move_keeps_snapshot(self, session):
        session.move(DIRECTION.LEFT)
        session.board = [row[:] for row in CHECKERED]
        assert not session.move(DIRECTION.UP).changed
        assert session.undo() == START


class TestUndoHistory:

    def test_empty(self):
        history = UndoHistory()
        assert not history
        assert history.pop() is None

    def test_remember_overwrites(self):
        history = UndoHistory()
        history.remember(START, 0)
        history.remember(CHECKERED, 8)
        assert history
        assert history.pop() == (CHECKERED, 8)
        assert not history

    def test_snapshot_is_a_copy(self):
        history = UndoHistory()
        board = [row[:] for row in START]
        history.remember(board)
        board[0][0] = 1024
        snapshot, _ = history.pop()
        assert snapshot == START
