from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .board import Board, Coord
from .state import SCAN_ORDER, AttackMarker, Direction, Queen

Markers = Tuple[Tuple[Tuple[AttackMarker, ...], ...], ...]
CollisionSet = Dict[Coord, Tuple[Direction, ...]]


@dataclass(frozen=True)
class PathResult:
    """Attack coverage and conflicts computed for one board/queens snapshot."""
    markers: Markers  # markers[row][col]
    collisions: CollisionSet
    available_queens: int

    def markers_at(self, row: int, col: int) -> Tuple[AttackMarker, ...]:
        if 0 <= row < len(self.markers) and 0 <= col < len(self.markers):
            return self.markers[row][col]
        return ()

    def in_collision(self, row: int, col: int) -> bool:
        return bool(self.collisions.get((row, col)))

    def attacked(self) -> List[Coord]:
        size = len(self.markers)
        return [(r, c) for r in range(size) for c in range(size) if self.markers[r][c]]


def empty_paths(size: int, available_queens: Optional[int] = None) -> PathResult:
    markers = tuple(tuple(() for _ in range(size)) for _ in range(size))
    return PathResult(
        markers=markers,
        collisions={},
        available_queens=size if available_queens is None else available_queens,
    )


def scan_ray(board: Board, origin: Coord, direction: Direction) -> Tuple[List[Coord], bool]:
    """
    Walks from origin (exclusive) towards the board edge.
    Returns the squares passed over and whether an occupied square stopped the walk.
    The blocking square itself is not part of the span.
    """
    dr, dc = direction.step
    r, c = origin[0] + dr, origin[1] + dc
    span: List[Coord] = []
    while board.in_bounds(r, c):
        if board.has_occupant(r, c):
            return span, True
        span.append((r, c))
        r += dr
        c += dc
    return span, False


def compute_paths(board: Board, queens: Sequence[Queen], drag_id: Optional[int] = None) -> PathResult:
    """
    Computes, for every placed queen and each of the 8 directions, the attack markers on the
    squares its ray crosses and whether that ray ends on another queen. A ray that ends on a
    queen records a collision against the scanning queen's own square.
    Pure: neither board nor queens is modified.
    """
    size = board.size
    grid: List[List[List[AttackMarker]]] = [[[] for _ in range(size)] for _ in range(size)]
    collisions: Dict[Coord, List[Direction]] = {}

    for queen in queens:
        if queen.square is None:
            continue
        for direction in SCAN_ORDER:
            span, collision = scan_ray(board, queen.square, direction)
            marker = AttackMarker(direction=direction, collision=collision, queen_id=queen.id)
            for r, c in span:
                grid[r][c].append(marker)
            if collision:
                collisions.setdefault(queen.square, []).append(direction)

    available = sum(1 for q in queens if not q.placed and q.id != drag_id)
    return PathResult(
        markers=tuple(tuple(tuple(cell) for cell in row) for row in grid),
        collisions={k: tuple(v) for k, v in collisions.items()},
        available_queens=available,
    )
