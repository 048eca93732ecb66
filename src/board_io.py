# board_io.py
# CSV boundary adapter: reads the starting board, writes the stage log and
# reads a stage log back (read_stage_log) for anyone inspecting a finished run.

import logging
import re
from enum import Enum
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from core import BOARD_SIZE, Board, empty_board, flatten_board, is_tile_value, unflatten_cells

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

CELL_COUNT = BOARD_SIZE * BOARD_SIZE


class BoardFormatError(ValueError):
    """A board or stage record could not be parsed."""


class Stage(str, Enum):
    """Names of the events recorded in the stage log."""
    INITIAL = "initial"
    MERGE = "merge"
    SPAWN = "spawn"
    INVALID = "invalid"
    UNDO = "undo"


class StageRecord(BaseModel):
    """One line of the stage log: the event and the board right after it."""
    stage: Stage = Field(..., description="Which event produced this snapshot.")
    cells: List[int] = Field(
        ...,
        min_length=CELL_COUNT,
        max_length=CELL_COUNT,
        description="The 16 board cells in row-major order."
    )

    @field_validator("cells")
    @classmethod
    def _cells_are_tiles(cls, cells: List[int]) -> List[int]:
        for val in cells:
            if val != 0 and not is_tile_value(val):
                raise ValueError(f"invalid tile value {val}")
        return cells

    @classmethod
    def from_board(cls, stage: Stage, board: Board) -> "StageRecord":
        return cls(stage=stage, cells=flatten_board(board))

    @classmethod
    def from_csv_row(cls, line: str) -> "StageRecord":
        """
        Parses ``<stage>,<v0>,...,<v15>``.
        Raises:
            BoardFormatError: If the line is not a valid record.
        """
        parts = [part.strip() for part in line.strip().split(",")]
        if len(parts) != CELL_COUNT + 1:
            raise BoardFormatError(f"Expected {CELL_COUNT + 1} fields, got {len(parts)}.")
        try:
            return cls(stage=parts[0], cells=[int(p) for p in parts[1:]])
        except (ValueError, ValidationError) as e:
            raise BoardFormatError(f"Malformed stage record {line.strip()!r}: {e}") from e

    @property
    def board(self) -> Board:
        return unflatten_cells(self.cells)

    def to_csv_row(self) -> str:
        return ",".join([self.stage.value] + [str(v) for v in self.cells])

# --- Input board ---

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

def _parse_cell(text: str, row: int, col: int) -> int:
    """
    Reads the leading integer of a cell, so "4.0" and "8 tiles" give 4 and 8.
    Cells with no leading integer, and values that are not tiles, become 0.
    """
    match = _LEADING_INT.match(text)
    if match is None:
        logger.warning("Cell (%d, %d) is not an integer: %r; using 0", row, col, text)
        return 0
    value = int(match.group(1))
    if value != 0 and not is_tile_value(value):
        logger.warning("Cell (%d, %d) is not a valid tile: %d; using 0", row, col, value)
        return 0
    return value

def read_board_csv(path: PathLike) -> Board:
    """
    Reads a 4x4 board, one comma-separated row per line.
    Missing rows or cells are left empty and unparsable values become 0,
    including bytes that are not valid UTF-8.
    Args:
        path (PathLike): The CSV file to read.
    Returns:
        Board: The board read from the file.
    Raises:
        OSError: If the file cannot be opened.
    """
    board = empty_board()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for r, line in enumerate(f):
            if r >= BOARD_SIZE:
                break
            for c, cell in enumerate(line.rstrip("\r\n").split(",")):
                if c >= BOARD_SIZE:
                    break
                board[r][c] = _parse_cell(cell, r, c)
    return board

def write_board_csv(path: PathLike, board: Board) -> None:
    """Writes a board in the format read by `read_board_csv`."""
    with open(path, "w", encoding="utf-8") as f:
        for row in board:
            f.write(",".join(map(str, row)) + "\n")

# --- Stage log ---

class StageLogger:
    """
    Appends stage records to a CSV file.
    The first record of a run truncates the file, so each run starts a fresh log.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self._started = False

    def record(self, stage: Stage, board: Board) -> StageRecord:
        entry = StageRecord.from_board(stage, board)
        mode = "a" if self._started else "w"
        with open(self.path, mode, encoding="utf-8") as f:
            f.write(entry.to_csv_row() + "\n")
        self._started = True
        logger.debug("Logged %s stage", entry.stage.value)
        return entry

def read_stage_log(path: PathLike) -> List[StageRecord]:
    """
    Reads a stage log back. Lines too short to hold a board are skipped.
    Raises:
        BoardFormatError: If a full-length line holds an unknown stage or bad cells.
    """
    records = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            if len(line.strip().split(",")) < CELL_COUNT + 1:
                continue
            records.append(StageRecord.from_csv_row(line))
    return records
