# core.py
# Stateless board logic for the 4x4 game: move resolution, spawning and status checks.

import logging
import random
from enum import Enum
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

BOARD_SIZE = 4
DEFAULT_FOUR_PROBABILITY = 0.1

Board = List[List[int]]
Line = List[Tuple[int, int]]


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3


class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4


class MoveOutcome(Enum):
    """Classifies a move attempt."""
    MERGE = "merge"      # board changed
    INVALID = "invalid"  # nothing slid, nothing merged

# --- Board Helper Functions ---

def is_tile_value(value: int) -> bool:
    """True for 2, 4, 8, ...; the values a tile can hold."""
    return value >= 2 and value & (value - 1) == 0

def get_board_size(board: Board) -> int:
    """
    Gets the size (N) of an N x N board.
    Args:
        board (Board): The game board.
    Returns:
        int: The dimension of the board.
    Raises:
        ValueError: If the board is not square or empty.
    """
    if not board or not all(len(row) == len(board) for row in board):
        raise ValueError("Board must be a non-empty square matrix.")
    return len(board)

def validate_board(board: Board) -> None:
    """
    Checks that a board is 4x4 and holds only zeros and powers of two.
    Raises:
        ValueError: On the first violation found.
    """
    if get_board_size(board) != BOARD_SIZE:
        raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}.")
    for r, row in enumerate(board):
        for c, val in enumerate(row):
            if val != 0 and not is_tile_value(val):
                raise ValueError(f"Invalid tile value {val} at ({r}, {c}).")

def copy_board(board: Board) -> Board:
    return [list(row) for row in board]

def empty_board() -> Board:
    return [[0] * BOARD_SIZE for _ in range(BOARD_SIZE)]

def flatten_board(board: Board) -> List[int]:
    """Row-major list of the 16 cells."""
    return [val for row in board for val in row]

def unflatten_cells(cells: List[int]) -> Board:
    if len(cells) != BOARD_SIZE * BOARD_SIZE:
        raise ValueError(f"Expected {BOARD_SIZE * BOARD_SIZE} cells, got {len(cells)}.")
    return [list(cells[r * BOARD_SIZE:(r + 1) * BOARD_SIZE]) for r in range(BOARD_SIZE)]

def get_empty_cells(board: Board) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty (0-value) cells in the given board.
    Args:
        board (Board): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    n = get_board_size(board)
    empty_cells = []
    for row in range(n):
        for col in range(n):
            if board[row][col] == 0:
                empty_cells.append((row, col))
    return empty_cells

def count_tiles(board: Board) -> int:
    return sum(1 for row in board for val in row if val != 0)

def compute_score(board: Board) -> int:
    """Sum of every tile on the board, as shown above the grid."""
    return sum(sum(row) for row in board)

# --- Spawning ---

def add_random_tile(
    board: Board,
    rng: Optional[random.Random] = None,
    four_probability: float = DEFAULT_FOUR_PROBABILITY,
) -> Tuple[Board, bool]:
    """
    Adds a new tile (2, or 4 with `four_probability`) to an empty cell on a copy of the board.
    Args:
        board (Board): The current game board.
        rng (Optional[random.Random]): Source of randomness. Defaults to the `random` module.
        four_probability (float): Chance that the new tile is a 4.
    Returns:
        Tuple[Board, bool]: A new board with the added tile and a boolean
                            indicating if a tile was successfully added.
                            If no empty cells, returns a copy of the board and False.
    """
    if rng is None:
        rng = random
    empty_cells = get_empty_cells(board)
    if not empty_cells:
        return copy_board(board), False # Return a copy, no tile added

    new_board = copy_board(board) # Work on a copy
    row, col = rng.choice(empty_cells)
    new_board[row][col] = 4 if rng.random() < four_probability else 2
    logger.debug("Spawned %d at (%d, %d)", new_board[row][col], row, col)
    return new_board, True

def initialize_board(
    rng: Optional[random.Random] = None,
    four_probability: float = DEFAULT_FOUR_PROBABILITY,
) -> Board:
    """
    Initializes a new 4x4 board with two random tiles.
    Returns:
        Board: The initial board.
    """
    current_board = empty_board()

    # Add two initial tiles
    current_board, _ = add_random_tile(current_board, rng, four_probability)
    current_board, _ = add_random_tile(current_board, rng, four_probability)

    return current_board

# --- Line Manipulation (Core Move Logic Helpers) ---

def _build_lines() -> Dict[DIRECTION, List[Line]]:
    # Each line starts at the edge the tiles slide toward.
    span = range(BOARD_SIZE)
    return {
        DIRECTION.LEFT: [[(r, c) for c in span] for r in span],
        DIRECTION.RIGHT: [[(r, c) for c in reversed(span)] for r in span],
        DIRECTION.UP: [[(r, c) for r in span] for c in span],
        DIRECTION.DOWN: [[(r, c) for r in reversed(span)] for c in span],
    }

_LINES = _build_lines()

def _compress_line(line: List[int]) -> List[int]:
    """
    Compresses a single line to the left (moves all non-zero tiles to the "start").
    Args:
        line (List[int]): The line to compress.
    Returns:
        List[int]: The compressed line, zero padded to the original length.
    """
    n = len(line)
    new_line_compressed = [i for i in line if i != 0]
    new_line_compressed += [0] * (n - len(new_line_compressed))
    return new_line_compressed

def _merge_line(line: List[int]) -> Tuple[List[int], int]:
    """
    Merges adjacent identical numbers in a line (assumed to be moving left / towards index 0).
    The line must already be compressed. A merged tile is never looked at again,
    so [2, 2, 2, 2] becomes [4, 4, 0, 0].
    Args:
        line (List[int]): The compressed line to be merged.
    Returns:
        Tuple[List[int], int]: Merged line and score increase from merges.
    """
    n = len(line)
    score_increase = 0
    new_line_merged = [0] * n
    write_idx = 0
    read_idx = 0

    while read_idx < n:
        current_val = line[read_idx]
        if current_val == 0: # only padding is left
            break

        if read_idx + 1 < n and current_val == line[read_idx + 1]:
            merged_value = current_val * 2
            new_line_merged[write_idx] = merged_value
            score_increase += merged_value
            read_idx += 2 # Skip current and next tile (which was merged)
        else:
            new_line_merged[write_idx] = current_val
            read_idx += 1
        write_idx += 1

    return new_line_merged, score_increase

def _process_single_line_leftwise(line: List[int]) -> Tuple[List[int], int]:
    """
    Applies compress then merge to a single line, moving left.
    Args:
        line (List[int]): The line to process.
    Returns:
        Tuple[List[int], int]: The processed line and score increase.
    """
    compressed_line = _compress_line(line)
    return _merge_line(compressed_line)

# --- Core Game Move Processing ---

def process_move(board: Board, direction: DIRECTION) -> Tuple[Board, int, bool]:
    """
    Processes a move in the specified direction on a copy of the board.
    Args:
        board (Board): The current game board.
        direction (DIRECTION): The direction to move.
    Returns:
        Tuple[Board, int, bool]:
            - The new board state after the move.
            - The score gained from this move.
            - A boolean indicating if the board changed as a result of the move.
    Raises:
        ValueError: If an invalid direction is specified or the board is not 4x4.
    """
    try:
        lines = _LINES[direction]
    except KeyError:
        raise ValueError("Invalid direction specified for process_move.") from None
    if get_board_size(board) != BOARD_SIZE:
        raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}.")

    board_to_operate_on = copy_board(board) # Work on a copy
    score_gained = 0

    for coords in lines:
        values = [board_to_operate_on[r][c] for r, c in coords]
        final_line, score_from_line = _process_single_line_leftwise(values)
        score_gained += score_from_line
        for (r, c), val in zip(coords, final_line):
            board_to_operate_on[r][c] = val

    move_changed_board = board_to_operate_on != board
    return board_to_operate_on, score_gained, move_changed_board

# --- Game State Checks ---

def check_for_win(board: Board, win_tile: int = 2048) -> bool:
    """
    Check if the game is won (a tile with at least win_tile value exists).
    Args:
        board (Board): The game board.
        win_tile (int): The tile value that signifies a win. Default is 2048.
    Returns:
        bool: True if the game is won, False otherwise.
    """
    return any(val >= win_tile for row in board for val in row)

def is_move_possible_in_direction(board: Board, direction: DIRECTION) -> bool:
    """
    Check if any tile can move or merge in the given specific direction.
    Args:
        board (Board): The game board.
        direction (DIRECTION): The direction to check.
    Returns:
       bool: True if at least one tile can move or merge in that direction, False otherwise.
    """
    for coords in _LINES[direction]:
        # walking away from the target edge, a tile moves if the cell ahead is free or equal
        for (r0, c0), (r1, c1) in zip(coords, coords[1:]):
            ahead, tile = board[r0][c0], board[r1][c1]
            if tile != 0 and (ahead == 0 or ahead == tile):
                return True
    return False

def is_any_move_possible(board: Board) -> bool:
    """
    Checks if any move is possible in any direction on the board.
    Args:
        board (Board): The game board.
    Returns:
        bool: True if any move can be made, False otherwise.
    """
    return any(is_move_possible_in_direction(board, d) for d in DIRECTION)

def determine_game_status(board: Board, win_tile: int = 2048) -> GameProgressState:
    """
    Determines the current progress state of the game based on the board.
    Args:
        board (Board): The current game board.
        win_tile (int): The tile value that signifies a win. Default is 2048.
    Returns:
        GameProgressState: The current state (IN_PROGRESS, GAME_WON, GAME_OVER).
    """
    if check_for_win(board, win_tile):
        return GameProgressState.GAME_WON

    if not is_any_move_possible(board):
        # No tile can slide into a gap or merge in any direction
        return GameProgressState.GAME_OVER

    return GameProgressState.IN_PROGRESS
