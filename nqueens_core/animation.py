from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, Tuple

from .board import Point
from .config import QUEEN_VELOCITY


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


@dataclass(frozen=True)
class QueenAnimation:
    """Linear move of a queen token from src to dst."""
    src: Point
    dst: Point
    duration_ms: float
    elapsed_ms: float = 0.0

    @classmethod
    def between(cls, src: Point, dst: Point) -> 'QueenAnimation':
        return cls(src=src, dst=dst, duration_ms=distance(src, dst) * QUEEN_VELOCITY)

    @property
    def done(self) -> bool:
        return self.elapsed_ms >= self.duration_ms

    def position(self) -> Point:
        if self.done:
            return self.dst
        return lerp(self.src, self.dst, self.elapsed_ms / self.duration_ms)

    def advanced(self, dt_ms: float) -> 'QueenAnimation':
        return replace(self, elapsed_ms=self.elapsed_ms + dt_ms)


def step_animations(
    animations: Dict[int, QueenAnimation], dt_ms: float
) -> Tuple[Dict[int, QueenAnimation], Dict[int, Point]]:
    """
    Advances every running animation by dt_ms.
    Returns the animations still running and the new pixel position of every animated queen.
    """
    running: Dict[int, QueenAnimation] = {}
    positions: Dict[int, Point] = {}
    for queen_id, anim in animations.items():
        nxt = anim.advanced(dt_ms)
        positions[queen_id] = nxt.position()
        if not nxt.done:
            running[queen_id] = nxt
    return running, positions
