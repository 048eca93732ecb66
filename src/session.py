# session.py
# In-memory game session: owns the board, the one-slot undo history and the score.

import logging
import random
from typing import Optional

from core import (
    DEFAULT_FOUR_PROBABILITY,
    DIRECTION,
    Board,
    GameProgressState,
    MoveOutcome,
    add_random_tile,
    copy_board,
    determine_game_status,
    process_move,
    validate_board,
)

logger = logging.getLogger(__name__)


class UndoHistory:
    """Holds the board from just before the last successful move, and nothing older."""

    def __init__(self):
        self._board: Optional[Board] = None
        self._score = 0

    def __bool__(self) -> bool:
        return self._board is not None

    def remember(self, board: Board, score: int = 0) -> None:
        self._board = copy_board(board)
        self._score = score

    def pop(self) -> Optional[tuple]:
        """Returns ``(board, score)`` and empties the slot, or None if nothing is stored."""
        if self._board is None:
            return None
        snapshot = (self._board, self._score)
        self._board = None
        self._score = 0
        return snapshot


class MoveResult:
    """What a single move did to the board."""

    def __init__(
        self,
        outcome: MoveOutcome,
        merged: Board,
        spawned: Optional[Board] = None,
        score_gained: int = 0,
    ):
        self.outcome = outcome
        self.merged = merged
        self.spawned = spawned
        self.score_gained = score_gained

    @property
    def changed(self) -> bool:
        return self.outcome is MoveOutcome.MERGE

    def __repr__(self):
        return f"MoveResult(outcome={self.outcome.name}, score_gained={self.score_gained})"


class GameSession:
    board: Board
    score: int
    history: UndoHistory

    def __init__(
        self,
        board: Board,
        rng: Optional[random.Random] = None,
        four_probability: float = DEFAULT_FOUR_PROBABILITY,
    ):
        validate_board(board)
        self.board = copy_board(board)
        self.score = 0
        self.history = UndoHistory()
        self.rng = rng if rng is not None else random.Random()
        self.four_probability = four_probability

    def move(self, direction: DIRECTION) -> MoveResult:
        """
        Resolves a move and, if anything changed, spawns one new tile.
        Args:
            direction (DIRECTION): The direction to move.
        Returns:
            MoveResult: INVALID with the untouched board, or MERGE with the
                        post-resolve and post-spawn boards.
        """
        merged, score_gained, changed = process_move(self.board, direction)

        if not changed:
            logger.debug("Move %s had no effect", direction.name)
            return MoveResult(MoveOutcome.INVALID, copy_board(self.board))

        self.history.remember(self.board, self.score)
        self.score += score_gained

        # A changed move always frees or keeps at least one empty cell
        spawned, _ = add_random_tile(merged, self.rng, self.four_probability)
        self.board = spawned
        logger.debug("Move %s gained %d points", direction.name, score_gained)

        return MoveResult(
            MoveOutcome.MERGE,
            copy_board(merged),
            copy_board(spawned),
            score_gained,
        )

    def undo(self) -> Optional[Board]:
        """
        Restores the board from before the last successful move.
        Returns:
            Optional[Board]: The restored board, or None when there is nothing to undo.
        """
        snapshot = self.history.pop()
        if snapshot is None:
            logger.debug("Undo requested with empty history")
            return None

        self.board, self.score = snapshot
        logger.debug("Board restored from history")
        return copy_board(self.board)

    def status(self, win_tile: int = 2048) -> GameProgressState:
        return determine_game_status(self.board, win_tile)
