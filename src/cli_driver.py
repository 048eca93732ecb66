# cli_driver.py
# This file is intended to be run to play the 2048 game on the CLI.
# Every board transition is also written to a CSV stage log for inspection.

import argparse
import logging
import random
import sys
from typing import List, Optional, TextIO

from pydantic import ValidationError

from board_io import Stage, StageLogger, read_board_csv, write_board_csv
from core import (
    DIRECTION,
    Board,
    GameProgressState,
    compute_score,
    initialize_board,
)
from session import GameSession
from settings import DEFAULT_INPUT_PATH, DEFAULT_OUTPUT_PATH, DEFAULT_SEED, GameSettings

logger = logging.getLogger(__name__)

PROMPT = "Move (w=up, a=left, s=down, d=right), u=undo, q=quit: "

DIRECTION_MAP = {'W': DIRECTION.UP, 'A': DIRECTION.LEFT, 'S': DIRECTION.DOWN, 'D': DIRECTION.RIGHT}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csv2048",
        description="2048 in your terminal, with the board loaded from and logged to CSV files.",
    )
    parser.add_argument('-i', '--input', dest='input_path', default=DEFAULT_INPUT_PATH,
                        help='starting board, four comma-separated rows (default: %(default)s)')
    parser.add_argument('-o', '--output', dest='output_path', default=DEFAULT_OUTPUT_PATH,
                        help='stage log written during play (default: %(default)s)')
    parser.add_argument('--save', dest='save_path', default=None,
                        help='write the final board here when the game ends')
    parser.add_argument('--seed', type=int, default=DEFAULT_SEED,
                        help='seed for tile spawning (default: %(default)s)')
    parser.add_argument('--random-seed', dest='seed', action='store_const', const=None,
                        help='seed tile spawning from the OS instead')
    parser.add_argument('--four-probability', type=float, default=None,
                        help='chance that a spawned tile is a 4 (default: 0.1)')
    parser.add_argument('--win-tile', type=int, default=None,
                        help='tile value that counts as a win (default: 2048)')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='log diagnostics to stderr (-vv for debug)')
    return parser


def settings_from_args(args: argparse.Namespace) -> GameSettings:
    """Builds GameSettings, leaving unset options at their model defaults."""
    values = {
        'input_path': args.input_path,
        'output_path': args.output_path,
        'seed': args.seed,
        'log_level': ('WARNING', 'INFO', 'DEBUG')[min(args.verbose, 2)],
    }
    if args.four_probability is not None:
        values['four_probability'] = args.four_probability
    if args.win_tile is not None:
        values['win_tile'] = args.win_tile
    return GameSettings(**values)


def load_initial_board(settings: GameSettings, rng: random.Random) -> Board:
    """Reads the starting board, or deals a fresh one when the file can't be read."""
    try:
        return read_board_csv(settings.input_path)
    except OSError as e:
        logger.warning("Could not read %s (%s); starting a new board", settings.input_path, e)
        return initialize_board(rng, settings.four_probability)


# --- Display Function ---
def display_board_state(board: Board, progress: GameProgressState, out: TextIO) -> None:
    """Prints the score and board; empty cells are shown as dots."""
    print(f"Score: {compute_score(board)}", file=out)
    for row in board:
        print("".join(f"{val}\t" if val else ".\t" for val in row), file=out)

    status_message = {
        GameProgressState.GAME_WON: "YOU WON!",
        GameProgressState.GAME_OVER: "GAME OVER! No more moves possible.",
    }
    if progress in status_message:
        print(status_message[progress], file=out)


def _next_command(commands: TextIO) -> Optional[str]:
    # One character at a time; whitespace only separates commands.
    while True:
        char = commands.read(1)
        if not char:
            return None
        if not char.isspace():
            return char.upper()


def run_game(
    session: GameSession,
    commands: TextIO,
    stage_logger: StageLogger,
    out: Optional[TextIO] = None,
    win_tile: int = 2048,
) -> None:
    """
    Runs the read-eval-print loop until 'q' or end of input.
    Args:
        session (GameSession): The game to play.
        commands (TextIO): Source of single-character commands.
        stage_logger (StageLogger): Receives one record per board transition.
        out (Optional[TextIO]): Where the board and prompts are printed. Defaults to stdout.
        win_tile (int): Tile value reported as a win.
    """
    if out is None:
        out = sys.stdout
    stage_logger.record(Stage.INITIAL, session.board)

    while True:
        display_board_state(session.board, session.status(win_tile), out)
        print(PROMPT, end="", file=out)
        out.flush()

        command = _next_command(commands)
        if command is None:
            logger.info("End of input")
            break

        if command == 'Q':
            print("Quitting game.", file=out)
            break

        if command == 'U':
            restored = session.undo()
            if restored is None:
                print("Nothing to undo.", file=out)
            else:
                stage_logger.record(Stage.UNDO, restored)
            continue

        chosen_direction = DIRECTION_MAP.get(command)
        if chosen_direction is None:
            print("Invalid input. Use W, A, S, D, U or Q.", file=out)
            continue

        result = session.move(chosen_direction)
        if result.changed:
            # Board after merge but before spawn, then after spawn
            stage_logger.record(Stage.MERGE, result.merged)
            stage_logger.record(Stage.SPAWN, result.spawned)
        else:
            stage_logger.record(Stage.INVALID, result.merged)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = settings_from_args(args)
    except ValidationError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    rng = random.Random(settings.seed)
    board = load_initial_board(settings, rng)
    session = GameSession(board, rng=rng, four_probability=settings.four_probability)
    stage_logger = StageLogger(settings.output_path)

    run_game(session, sys.stdin, stage_logger, sys.stdout, settings.win_tile)

    if args.save_path:
        write_board_csv(args.save_path, session.board)
        logger.info("Final board saved to %s", args.save_path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
