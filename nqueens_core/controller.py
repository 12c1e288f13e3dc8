from __future__ import annotations

from typing import Optional

from .board import Coord
from .session import PuzzleSession


class InteractionController:
    """Translates taps, drags and layout callbacks from the UI into session commands."""

    def __init__(self, session: PuzzleSession) -> None:
        self.session = session

    def on_tap_square(self, row: int, col: int) -> Optional[int]:
        """Tapping an empty square places a queen; tapping a queen returns it to the shelf."""
        board = self.session.current().board
        if board is None:
            return None
        square = board.square_at(row, col)
        if square is None:
            return None
        if square.occupant is not None:
            return square.occupant if self.session.remove_queen(square.occupant) else None
        return self.session.place_queen(row, col)

    def on_tap_point(self, px: float, py: float) -> Optional[int]:
        board = self.session.current().board
        square = board.square_under_point(px, py) if board is not None else None
        if square is None:
            return None
        return self.on_tap_square(square.row, square.col)

    def on_drag_start(self, queen_id: int) -> bool:
        return self.session.drag_start(queen_id)

    def on_drag(self, queen_id: int, dx: float, dy: float) -> Optional[Coord]:
        return self.session.drag_move(queen_id, dx, dy)

    def on_drag_end(self, queen_id: int) -> bool:
        return self.session.drag_end(queen_id)

    def on_layout(self, width: float, height: float) -> int:
        return self.session.layout_ready(width, height)

    def on_square_positioned(self, row: int, col: int, x: float, y: float, width: float, height: float) -> bool:
        return self.session.square_geometry_changed(row, col, (x, y), (width, height))

    def on_shelf_positioned(self, x: float, y: float) -> bool:
        return self.session.shelf_positioned(x, y)
