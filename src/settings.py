# settings.py
# Run configuration for the game, validated with pydantic.

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from core import DEFAULT_FOUR_PROBABILITY, is_tile_value

DEFAULT_INPUT_PATH = "game_input.csv"
DEFAULT_OUTPUT_PATH = "game_output.csv"
DEFAULT_SEED = 42


class GameSettings(BaseModel):
    """Settings for a single game run."""
    input_path: Path = Field(
        default=Path(DEFAULT_INPUT_PATH),
        description="CSV file holding the starting board, one row per line."
    )
    output_path: Path = Field(
        default=Path(DEFAULT_OUTPUT_PATH),
        description="CSV file the stage log is written to (truncated at start)."
    )
    seed: Optional[int] = Field(
        default=DEFAULT_SEED,
        description="Seed for spawn randomness. None draws from the OS."
    )
    four_probability: float = Field(
        default=DEFAULT_FOUR_PROBABILITY,
        ge=0.0,
        le=1.0,
        description="Chance that a spawned tile is a 4 rather than a 2."
    )
    win_tile: int = Field(
        default=2048,
        gt=0,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )
    log_level: str = Field(
        default="WARNING",
        description="Name of the logging level for diagnostics on stderr."
    )

    @field_validator("win_tile")
    @classmethod
    def _win_tile_is_tile_value(cls, value: int) -> int:
        if not is_tile_value(value):
            raise ValueError("win_tile must be a tile value (2, 4, 8, ...)")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level
