from __future__ import annotations

# Facade module that re-exports the N-Queens core.
# Used by the Flask app and the tests; single-responsibility modules live under nqueens_core/*.

from nqueens_core.board import (  # noqa: F401
    Board,
    Coord,
    Square,
    InvalidSizeError,
    create_board,
    is_light,
)
from nqueens_core.state import (  # noqa: F401
    AttackMarker,
    Direction,
    Phase,
    Queen,
    SCAN_ORDER,
    shelf,
)
from nqueens_core.paths import (  # noqa: F401
    PathResult,
    compute_paths,
    empty_paths,
    scan_ray,
)
from nqueens_core.session import (  # noqa: F401
    PuzzleSession,
    SessionSnapshot,
    create_session,
)
from nqueens_core.controller import InteractionController  # noqa: F401
from nqueens_core.animation import QueenAnimation  # noqa: F401
from nqueens_core.fireworks import (  # noqa: F401
    Projectile,
    ProjectileColor,
    ProjectileType,
    burst,
    launch_rockets,
    step_projectiles,
)
from nqueens_core.db import SqlitePreferenceStore  # noqa: F401
from nqueens_core.timer import PeriodicTask, start_periodic  # noqa: F401


def main() -> None:
    # CLI driver delegated to nqueens_core.cli
    from nqueens_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
