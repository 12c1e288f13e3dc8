from __future__ import annotations

import os

# Board sizing. The engine accepts any positive size; the UI clamps to this range.
MIN_BOARD_SIZE = 4
MAX_BOARD_SIZE = 16
DEFAULT_BOARD_SIZE = 8

MAX_SQUARE_SIZE = 80  # px
TIMER_PERIOD_MS = 1000

# 500 millis per 1200 pixels
QUEEN_VELOCITY = 500 / 1200

# Celebration effects
ROCKET_COUNT = 10
FIREWORK_COUNT = 50
GRAVITY_PER_SECOND = 2000
FIREWORK_GRAVITY_PER_SECOND = 500
BASE_FIREWORK_VELOCITY = 800
RANDOM_FIREWORK_VELOCITY = 200
FIREWORK_DURATION = 1200
FIREWORK_FADE_DURATION = 500
FIREWORK_DRAG = 0.95

DEFAULT_DB = os.getenv("NQUEENS_DB", os.path.join("data", "nqueens.db"))


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def log_level() -> str:
    return os.getenv("NQUEENS_LOG_LEVEL", "INFO").upper()


def clamp_size(size: int) -> int:
    """Clamps a requested board size into the supported UI range."""
    return max(MIN_BOARD_SIZE, min(MAX_BOARD_SIZE, int(size)))
