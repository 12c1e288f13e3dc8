from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from .board import Coord, Point


class Direction(Enum):
    """Compass directions of a queen's attack rays, with their (row, col) step."""
    NORTH = (-1, 0)
    NORTH_EAST = (-1, 1)
    EAST = (0, 1)
    SOUTH_EAST = (1, 1)
    SOUTH = (1, 0)
    SOUTH_WEST = (1, -1)
    WEST = (0, -1)
    NORTH_WEST = (-1, -1)

    @property
    def step(self) -> Tuple[int, int]:
        return self.value

    @property
    def opposite(self) -> 'Direction':
        dr, dc = self.value
        return Direction((-dr, -dc))


# Order in which each queen's rays are scanned; fixes the order of collision direction lists.
SCAN_ORDER: Tuple[Direction, ...] = (
    Direction.WEST,
    Direction.EAST,
    Direction.NORTH,
    Direction.SOUTH,
    Direction.NORTH_WEST,
    Direction.NORTH_EAST,
    Direction.SOUTH_EAST,
    Direction.SOUTH_WEST,
)


class Phase(Enum):
    IDLE = "idle"
    SETUP = "setup"
    PLAYING = "playing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class AttackMarker:
    """An attack ray of one queen passing through a square."""
    direction: Direction
    collision: bool
    queen_id: int


@dataclass(frozen=True)
class Queen:
    """A queen either on the shelf (square is None) or placed on the board."""
    id: int
    square: Optional[Coord] = None
    pixel: Point = (0.0, 0.0)  # offset from the shelf origin

    @property
    def placed(self) -> bool:
        return self.square is not None

    def at(self, square: Optional[Coord]) -> 'Queen':
        return replace(self, square=square)

    def moved_by(self, dx: float, dy: float) -> 'Queen':
        return replace(self, pixel=(self.pixel[0] + dx, self.pixel[1] + dy))


def shelf(size: int) -> Tuple[Queen, ...]:
    """Creates the full set of unplaced queens for a board of the given size."""
    return tuple(Queen(id=i) for i in range(size))
