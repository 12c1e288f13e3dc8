from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence

from .board import Point
from .config import (
    BASE_FIREWORK_VELOCITY,
    FIREWORK_COUNT,
    FIREWORK_DRAG,
    FIREWORK_DURATION,
    FIREWORK_FADE_DURATION,
    FIREWORK_GRAVITY_PER_SECOND,
    GRAVITY_PER_SECOND,
    RANDOM_FIREWORK_VELOCITY,
    ROCKET_COUNT,
)


class ProjectileType(Enum):
    ROCKET = "rocket"
    FIREWORK = "firework"


class ProjectileColor(Enum):
    RED = "#ff3322"
    ORANGE = "#ff8800"
    YELLOW = "#ffff00"
    GREEN = "#00ff00"
    BLUE = "#0000ff"
    PURPLE = "#9900ff"
    SILVER = "#998877"
    WHITE = "#f1f1f1"

    @classmethod
    def pick(cls, value: float) -> 'ProjectileColor':
        """Maps a value in [0, 1) onto a color; anything outside falls back to white."""
        colors = list(cls)
        idx = int(value * len(colors))
        return colors[idx] if 0 <= idx < len(colors) else cls.WHITE


@dataclass(frozen=True)
class Projectile:
    type: ProjectileType
    color: ProjectileColor
    duration_ms: float
    velocity_x: float
    velocity_y: float
    velocity_z: float = 0.0
    fade_ms: float = 0.0
    offset: Point = (0.0, 0.0)
    elapsed_ms: float = 0.0
    delay_ms: float = 0.0  # rockets wait this long before launching

    @property
    def expired(self) -> bool:
        return self.elapsed_ms > self.duration_ms + self.fade_ms


def burst(
    offset: Point,
    rng: random.Random,
    color: Optional[ProjectileColor] = None,
    count: int = FIREWORK_COUNT,
) -> List[Projectile]:
    """Spawns count fireworks flying out of offset in uniformly random 3D directions."""
    out: List[Projectile] = []
    for _ in range(count):
        theta = rng.random() * 2 * math.pi
        phi = math.acos(rng.random() * 2 - 1)
        radius = rng.random() * BASE_FIREWORK_VELOCITY + RANDOM_FIREWORK_VELOCITY
        out.append(Projectile(
            type=ProjectileType.FIREWORK,
            color=color or ProjectileColor.pick(rng.random()),
            duration_ms=FIREWORK_DURATION,
            fade_ms=FIREWORK_FADE_DURATION,
            velocity_x=radius * math.sin(phi) * math.cos(theta),
            velocity_y=radius * math.sin(phi) * math.sin(theta),
            velocity_z=radius * math.cos(phi),
            offset=offset,
        ))
    return out


def launch_rockets(rng: random.Random, count: int = ROCKET_COUNT) -> List[Projectile]:
    """Rockets launched from the origin, each staggered 200-400ms after the previous one."""
    out: List[Projectile] = []
    delay = 0.0
    for _ in range(count):
        out.append(Projectile(
            type=ProjectileType.ROCKET,
            color=ProjectileColor.pick(rng.random()),
            duration_ms=rng.random() * 500 + 1500,
            velocity_x=rng.random() * 800 - 400,
            velocity_y=rng.random() * 1300 + 1800,
            delay_ms=delay,
        ))
        delay += rng.random() * 200 + 200
    return out


def _step_one(p: Projectile, dt_ms: float) -> Projectile:
    dt = dt_ms / 1000.0
    x = p.offset[0] + p.velocity_x * dt
    # screen y grows downwards
    y = p.offset[1] - p.velocity_y * dt
    if p.type is ProjectileType.FIREWORK:
        vy = (p.velocity_y - dt * FIREWORK_GRAVITY_PER_SECOND) * FIREWORK_DRAG
        return replace(
            p,
            offset=(x, y),
            elapsed_ms=p.elapsed_ms + dt_ms,
            velocity_x=p.velocity_x * FIREWORK_DRAG,
            velocity_y=vy,
            velocity_z=p.velocity_z * FIREWORK_DRAG,
        )
    return replace(
        p,
        offset=(x, y),
        elapsed_ms=p.elapsed_ms + dt_ms,
        velocity_y=p.velocity_y - dt * GRAVITY_PER_SECOND,
    )


def step_projectiles(projectiles: Sequence[Projectile], dt_ms: float, rng: random.Random) -> List[Projectile]:
    """
    Advances all projectiles by dt_ms. Expired projectiles are dropped; an expired rocket
    is replaced by a burst of fireworks in its own color.
    """
    out: List[Projectile] = []
    spawned: List[Projectile] = []
    for p in projectiles:
        if p.delay_ms > 0:
            remaining = p.delay_ms - dt_ms
            if remaining > 0:
                out.append(replace(p, delay_ms=remaining))
                continue
            p = replace(p, delay_ms=0.0)
            dt = -remaining
        else:
            dt = dt_ms
        nxt = _step_one(p, dt)
        if nxt.expired:
            if nxt.type is ProjectileType.ROCKET:
                spawned.extend(burst(nxt.offset, rng, nxt.color))
            continue
        out.append(nxt)
    out.extend(spawned)
    return out
