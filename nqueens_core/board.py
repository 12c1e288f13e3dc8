from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Mapping, Optional, Set, Tuple

Coord = Tuple[int, int]
Point = Tuple[float, float]
Size = Tuple[float, float]


class InvalidSizeError(ValueError):
    """Raised when a board is (re)sized to a non-positive dimension."""

    def __init__(self, size: int) -> None:
        super().__init__(f"board size must be positive, got {size}")
        self.size = size


def is_light(row: int, col: int) -> bool:
    return (row + col) % 2 == 0


@dataclass(frozen=True)
class Square:
    """A single board square, optionally holding a queen and carrying its on-screen rectangle."""
    row: int
    col: int
    light: bool
    occupant: Optional[int] = None
    position: Point = (0.0, 0.0)
    size: Size = (0.0, 0.0)

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def contains(self, px: float, py: float) -> bool:
        """Strict interior test against the square's screen rectangle."""
        x, y = self.position
        w, h = self.size
        return x < px < x + w and y < py < y + h


@dataclass(frozen=True)
class Board:
    """Immutable N x N grid of squares. Updates return a new Board."""
    size: int
    grid: Tuple[Tuple[Square, ...], ...]  # grid[row][col]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def square_at(self, row: int, col: int) -> Optional[Square]:
        """Gets the square at (row, col), or None when out of bounds."""
        if not self.in_bounds(row, col):
            return None
        return self.grid[row][col]

    def has_occupant(self, row: int, col: int) -> bool:
        sq = self.square_at(row, col)
        return sq is not None and sq.occupant is not None

    def coords(self) -> Iterable[Coord]:
        """Iterates over all coordinates on the board."""
        for r in range(self.size):
            for c in range(self.size):
                yield (r, c)

    def squares(self) -> Iterator[Square]:
        for row in self.grid:
            yield from row

    def square_under_point(self, px: float, py: float) -> Optional[Square]:
        """Returns the square whose screen rectangle contains the point, if any."""
        for sq in self.squares():
            if sq.contains(px, py):
                return sq
        return None

    def _with_square(self, square: Square) -> 'Board':
        row = self.grid[square.row]
        new_row = row[:square.col] + (square,) + row[square.col + 1:]
        grid = self.grid[:square.row] + (new_row,) + self.grid[square.row + 1:]
        return Board(size=self.size, grid=grid)

    def with_occupant(self, row: int, col: int, queen_id: Optional[int]) -> 'Board':
        """Replaces the occupant of one square. Out-of-range coordinates return this board unchanged."""
        sq = self.square_at(row, col)
        if sq is None or sq.occupant == queen_id:
            return self
        return self._with_square(replace(sq, occupant=queen_id))

    def with_geometry(self, row: int, col: int, position: Point, size: Size) -> 'Board':
        sq = self.square_at(row, col)
        if sq is None:
            return self
        position = (float(position[0]), float(position[1]))
        size = (float(size[0]), float(size[1]))
        if sq.position == position and sq.size == size:
            return self
        return self._with_square(replace(sq, position=position, size=size))

    def occupied(self) -> Tuple[Coord, ...]:
        return tuple(sq.coord for sq in self.squares() if sq.occupant is not None)

    def pretty(
        self,
        collisions: Optional[Set[Coord]] = None,
        attacked: Optional[Set[Coord]] = None,
    ) -> str:
        """Generates a human-readable string representation of the board."""
        cset = collisions or set()
        aset = attacked or set()
        lines = []
        for r in range(self.size):
            row = []
            for c in range(self.size):
                sq = self.grid[r][c]
                if sq.occupant is not None:
                    row.append("X" if (r, c) in cset else "Q")
                elif (r, c) in aset:
                    row.append("*")
                else:
                    row.append("." if sq.light else ":")
            lines.append(" ".join(row))
        return "\n".join(lines)


def create_board(size: int, occupants: Optional[Mapping[Coord, int]] = None) -> Board:
    """Creates a fresh size x size board, optionally pre-seeded with queen occupants."""
    if size <= 0:
        raise InvalidSizeError(size)
    occ = occupants or {}
    grid = tuple(
        tuple(
            Square(row=r, col=c, light=is_light(r, c), occupant=occ.get((r, c)))
            for c in range(size)
        )
        for r in range(size)
    )
    return Board(size=size, grid=grid)
