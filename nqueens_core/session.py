from __future__ import annotations

import logging
import random
import threading
from concurrent.futures import Executor
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .animation import QueenAnimation, step_animations
from .board import Board, Coord, InvalidSizeError, Point, Size, create_board
from .config import DEFAULT_BOARD_SIZE, MAX_SQUARE_SIZE, TIMER_PERIOD_MS, clamp_size
from .fireworks import Projectile, launch_rockets, step_projectiles
from .paths import PathResult, compute_paths, empty_paths
from .state import Phase, Queen, shelf
from .timer import PeriodicTask, TimerFactory, start_periodic

logger = logging.getLogger(__name__)

Observer = Callable[['SessionSnapshot'], None]

HOME: Point = (0.0, 0.0)


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a puzzle session. A new snapshot replaces the old one on every update."""
    phase: Phase = Phase.IDLE
    size: int = 0
    board: Optional[Board] = None
    queens: Tuple[Queen, ...] = ()
    paths: PathResult = field(default_factory=lambda: empty_paths(0))
    show_moves: bool = False
    elapsed_ms: int = 0
    best_times: Mapping[int, int] = field(default_factory=dict)
    previous_best_ms: Optional[int] = None
    new_best: bool = False
    square_size: int = 0
    square_px: float = 0.0
    shelf_origin: Point = (0.0, 0.0)
    drag_id: Optional[int] = None
    hovered: Optional[Coord] = None
    animations: Mapping[int, QueenAnimation] = field(default_factory=dict)
    projectiles: Tuple[Projectile, ...] = ()
    version: int = 0  # bumped whenever queen placement changes

    @property
    def complete(self) -> bool:
        return self.phase is Phase.COMPLETE

    @property
    def placed_count(self) -> int:
        return sum(1 for q in self.queens if q.placed)

    @property
    def best_ms(self) -> Optional[int]:
        return self.best_times.get(self.size)

    def queen(self, queen_id: int) -> Optional[Queen]:
        if 0 <= queen_id < len(self.queens):
            return self.queens[queen_id]
        return None


def _replace_queen(queens: Sequence[Queen], queen: Queen) -> Tuple[Queen, ...]:
    out = list(queens)
    out[queen.id] = queen
    return tuple(out)


def _offset(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


class PuzzleSession:
    """
    Owns the board, the queens and the play clock of one N-Queens puzzle.

    Every public mutator is serialized through one re-entrant lock and replaces the current
    SessionSnapshot wholesale. After any change to queen placement the attack paths are
    recomputed, inline or on the given executor; a result computed from a snapshot that has
    since been superseded is dropped, since the newer mutation scheduled its own recomputation.
    The completion rule is evaluated only when a fresh result is applied.
    """

    def __init__(
        self,
        store: Any = None,
        executor: Optional[Executor] = None,
        timer_factory: Optional[TimerFactory] = None,
        rng: Optional[random.Random] = None,
        show_moves: bool = False,
        best_times: Optional[Mapping[int, int]] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._store = store
        self._executor = executor
        self._timer_factory = timer_factory or start_periodic
        self._rng = rng or random.Random()
        self._timer: Optional[PeriodicTask] = None
        self._timer_gen = 0
        self._layout: Optional[Size] = None
        self._observers: List[Observer] = []
        self._state = SessionSnapshot(show_moves=show_moves, best_times=dict(best_times or {}))

    # ---------- observation ----------

    def current(self) -> SessionSnapshot:
        return self._state

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self._state
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(snapshot)
            except Exception:
                logger.exception("session observer failed")

    # ---------- internals ----------

    def _set(self, bump: bool = False, **changes: Any) -> None:
        if bump:
            changes["version"] = self._state.version + 1
        self._state = replace(self._state, **changes)

    def _persist(self, method: str, *args: Any) -> None:
        if self._store is None:
            return
        try:
            getattr(self._store, method)(*args)
        except Exception:
            logger.warning("persistence call %s failed; continuing", method, exc_info=True)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._timer_gen += 1

    def _restart_timer(self) -> None:
        self._cancel_timer()
        gen = self._timer_gen
        self._timer = self._timer_factory(TIMER_PERIOD_MS, lambda: self._on_timer(gen))

    def _on_timer(self, gen: int) -> None:
        with self._lock:
            # A tick from a cancelled timer may still arrive once.
            if gen != self._timer_gen:
                return
            changed = self._tick(TIMER_PERIOD_MS)
        if changed:
            self._notify()

    def _tick(self, ms: int) -> bool:
        if self._state.phase is not Phase.PLAYING:
            return False
        self._set(elapsed_ms=self._state.elapsed_ms + ms)
        return True

    def _start_playing(self) -> None:
        if self._state.phase is Phase.SETUP:
            self._set(phase=Phase.PLAYING, elapsed_ms=0)
            self._restart_timer()

    def _interactive(self) -> bool:
        return self._state.phase in (Phase.SETUP, Phase.PLAYING)

    def _schedule_paths(self) -> None:
        s = self._state
        if s.board is None:
            return
        if self._executor is None:
            self._apply_paths(compute_paths(s.board, s.queens, s.drag_id), s.version)
            return
        self._executor.submit(self._run_paths, s.board, s.queens, s.drag_id, s.version)

    def _run_paths(self, board: Board, queens: Tuple[Queen, ...], drag_id: Optional[int], version: int) -> None:
        try:
            result = compute_paths(board, queens, drag_id)
        except Exception:
            logger.exception("path computation failed for version %d", version)
            return
        with self._lock:
            applied = self._apply_paths(result, version)
        if applied:
            self._notify()

    def _apply_paths(self, result: PathResult, version: int) -> bool:
        if version != self._state.version:
            logger.debug("dropping stale paths for version %d (current %d)", version, self._state.version)
            return False
        self._set(paths=result)
        self._check_complete()
        return True

    def _check_complete(self) -> None:
        s = self._state
        if s.phase is not Phase.PLAYING or s.drag_id is not None:
            return
        if s.paths.collisions or s.paths.available_queens != 0:
            return

        self._cancel_timer()
        prev = s.best_times.get(s.size)
        improved = prev is None or s.elapsed_ms < prev
        best_times = dict(s.best_times)
        if improved:
            best_times[s.size] = s.elapsed_ms
        self._set(
            phase=Phase.COMPLETE,
            best_times=best_times,
            new_best=improved,
            previous_best_ms=prev if improved else None,
            projectiles=s.projectiles + tuple(launch_rockets(self._rng)),
        )
        logger.info("puzzle %dx%d solved in %d ms%s", s.size, s.size, s.elapsed_ms,
                    " (new best)" if improved else "")
        if improved:
            self._persist("set_best_times", best_times)

    # ---------- sizing, settings and layout ----------

    def select_size(self, size: int, persist: bool = True) -> SessionSnapshot:
        """Resets board and queens to size x size and re-enters SETUP. Raises InvalidSizeError for size <= 0."""
        if size <= 0:
            raise InvalidSizeError(size)
        with self._lock:
            self._cancel_timer()
            s = self._state
            self._state = SessionSnapshot(
                phase=Phase.SETUP,
                size=size,
                board=create_board(size),
                queens=shelf(size),
                paths=empty_paths(size),
                show_moves=s.show_moves,
                best_times=s.best_times,
                square_size=self._square_size(size),
                shelf_origin=s.shelf_origin,
                version=s.version + 1,
            )
            logger.info("board resized to %dx%d", size, size)
            if persist:
                self._persist("set_board_size", size)
        self._notify()
        return self._state

    def _square_size(self, size: int) -> int:
        if self._layout is None or size <= 0:
            return 0
        w, h = self._layout
        return min(int(min(w, h) // size), MAX_SQUARE_SIZE)

    def layout_ready(self, width: float, height: float) -> int:
        """Records the available layout area and returns the resulting square size in pixels."""
        with self._lock:
            self._layout = (width, height)
            square_size = self._square_size(self._state.size)
            self._set(square_size=square_size)
        self._notify()
        return square_size

    def square_geometry_changed(self, row: int, col: int, position: Point, size: Size) -> bool:
        with self._lock:
            s = self._state
            if s.board is None:
                return False
            board = s.board.with_geometry(row, col, position, size)
            if board is s.board:
                return False
            self._set(board=board, square_px=float(size[0]))
        self._notify()
        return True

    def shelf_positioned(self, x: float, y: float) -> bool:
        with self._lock:
            origin = (float(x), float(y))
            if origin == self._state.shelf_origin:
                return False
            self._set(shelf_origin=origin)
        self._notify()
        return True

    def set_show_moves(self, show: bool, persist: bool = True) -> None:
        with self._lock:
            self._set(show_moves=bool(show))
            if persist:
                self._persist("set_show_moves", bool(show))
        self._notify()

    # ---------- placement ----------

    def place_queen(self, row: int, col: int) -> Optional[int]:
        """
        Binds the last shelved queen to (row, col) and animates it there.
        Returns the queen id, or None when the square is missing or occupied, no queen is
        left on the shelf, or the puzzle does not accept moves.
        """
        with self._lock:
            s = self._state
            if not self._interactive() or s.board is None:
                return None
            square = s.board.square_at(row, col)
            if square is None or square.occupant is not None:
                return None
            queen = next((q for q in reversed(s.queens) if q.square is None and q.id != s.drag_id), None)
            if queen is None:
                return None
            animations = dict(s.animations)
            animations[queen.id] = QueenAnimation.between(queen.pixel, _offset(square.position, s.shelf_origin))
            self._set(
                bump=True,
                board=s.board.with_occupant(row, col, queen.id),
                queens=_replace_queen(s.queens, queen.at((row, col))),
                animations=animations,
            )
            self._start_playing()
            self._schedule_paths()
        self._notify()
        return queen.id

    def remove_queen(self, queen_id: int) -> bool:
        """Returns a placed queen to the shelf. Missing or shelved queens are ignored."""
        with self._lock:
            s = self._state
            queen = s.queen(queen_id)
            if not self._interactive() or queen is None or queen.square is None or queen_id == s.drag_id:
                return False
            animations = dict(s.animations)
            animations[queen.id] = QueenAnimation.between(queen.pixel, HOME)
            self._set(
                bump=True,
                board=s.board.with_occupant(queen.square[0], queen.square[1], None),
                queens=_replace_queen(s.queens, queen.at(None)),
                animations=animations,
            )
            self._schedule_paths()
        self._notify()
        return True

    def drag_start(self, queen_id: int) -> bool:
        with self._lock:
            s = self._state
            queen = s.queen(queen_id)
            if not self._interactive() or queen is None or s.drag_id is not None:
                return False
            animations = dict(s.animations)
            animations.pop(queen_id, None)
            self._set(bump=True, drag_id=queen_id, hovered=queen.square, animations=animations)
            self._start_playing()
            self._schedule_paths()
        self._notify()
        return True

    def drag_move(self, queen_id: int, dx: float, dy: float) -> Optional[Coord]:
        """
        Moves the dragged queen by (dx, dy) pixels and re-evaluates the square under the
        centre of its token. Hovering an empty square binds the queen there tentatively;
        leaving it releases it again. Returns the hovered square, if any.
        """
        with self._lock:
            s = self._state
            if s.drag_id != queen_id or s.board is None:
                return None
            queen = s.queens[queen_id].moved_by(dx, dy)
            half = s.square_px / 2
            over = s.board.square_under_point(
                s.shelf_origin[0] + half + queen.pixel[0],
                s.shelf_origin[1] + half + queen.pixel[1],
            )
            board = s.board
            square = queen.square
            if square is not None and (over is None or over.coord != square):
                board = board.with_occupant(square[0], square[1], None)
                square = None
            if over is not None and over.coord != queen.square and not board.has_occupant(over.row, over.col):
                board = board.with_occupant(over.row, over.col, queen_id)
                square = over.coord
            moved = square != queen.square
            hovered = over.coord if over is not None else None
            self._set(
                bump=moved,
                board=board,
                queens=_replace_queen(s.queens, queen.at(square)),
                hovered=hovered,
            )
            if moved:
                self._schedule_paths()
        self._notify()
        return hovered

    def drag_end(self, queen_id: int) -> bool:
        """Drops the dragged queen: it stays on the square it is bound to, otherwise it returns to the shelf."""
        with self._lock:
            s = self._state
            if s.drag_id != queen_id or s.board is None:
                return False
            queen = s.queens[queen_id]
            dst = HOME
            if queen.square is not None:
                square = s.board.square_at(*queen.square)
                dst = _offset(square.position, s.shelf_origin)
            animations = dict(s.animations)
            animations[queen_id] = QueenAnimation.between(queen.pixel, dst)
            self._set(bump=True, drag_id=None, hovered=None, animations=animations)
            self._schedule_paths()
        self._notify()
        return True

    def restart(self) -> None:
        """Returns every placed queen to the shelf, clears completion and restarts the clock at zero."""
        with self._lock:
            s = self._state
            if s.board is None:
                return
            board = s.board
            queens = list(s.queens)
            animations = dict(s.animations)
            for queen in s.queens:
                if queen.placed:
                    board = board.with_occupant(queen.square[0], queen.square[1], None)
                    queens[queen.id] = queen.at(None)
                elif queen.pixel == HOME and queen.id not in animations:
                    continue
                # Shelved queens caught mid-drag or mid-transition also head home.
                animations[queen.id] = QueenAnimation.between(queen.pixel, HOME)
            self._set(
                bump=True,
                phase=Phase.PLAYING,
                board=board,
                queens=tuple(queens),
                animations=animations,
                elapsed_ms=0,
                drag_id=None,
                hovered=None,
                new_best=False,
                previous_best_ms=None,
                projectiles=(),
            )
            logger.info("puzzle %dx%d restarted", s.size, s.size)
            self._restart_timer()
            self._schedule_paths()
        self._notify()

    # ---------- clock and animation ----------

    def tick(self, ms: int = TIMER_PERIOD_MS) -> int:
        """Advances the play clock while PLAYING. Returns the elapsed time."""
        with self._lock:
            changed = self._tick(ms)
            elapsed = self._state.elapsed_ms
        if changed:
            self._notify()
        return elapsed

    def advance(self, dt_ms: float) -> bool:
        """Steps queen transitions and celebration projectiles. Returns True while anything is still moving."""
        with self._lock:
            s = self._state
            if not s.animations and not s.projectiles:
                return False
            animations, positions = step_animations(dict(s.animations), dt_ms)
            queens = list(s.queens)
            for queen_id, pixel in positions.items():
                if 0 <= queen_id < len(queens) and queen_id != s.drag_id:
                    queens[queen_id] = replace(queens[queen_id], pixel=pixel)
            projectiles = tuple(step_projectiles(s.projectiles, dt_ms, self._rng))
            self._set(queens=tuple(queens), animations=animations, projectiles=projectiles)
            moving = bool(animations or projectiles)
        self._notify()
        return moving

    def close(self) -> None:
        with self._lock:
            self._cancel_timer()


def create_session(
    store: Any = None,
    size: Optional[int] = None,
    executor: Optional[Executor] = None,
    timer_factory: Optional[TimerFactory] = None,
    rng: Optional[random.Random] = None,
) -> PuzzleSession:
    """
    Builds a session seeded from the preference store (board size, show-moves flag, best times).
    Store failures fall back to defaults. An explicit size overrides the stored one.
    """
    def _load(method: str, default: Any) -> Any:
        if store is None:
            return default
        try:
            return getattr(store, method)()
        except Exception:
            logger.warning("could not load %s from store; using default", method, exc_info=True)
            return default

    best_times: Dict[int, int] = dict(_load("get_best_times", {}))
    session = PuzzleSession(
        store=store,
        executor=executor,
        timer_factory=timer_factory,
        rng=rng,
        show_moves=bool(_load("get_show_moves", False)),
        best_times=best_times,
    )
    if size is None:
        size = clamp_size(_load("get_board_size", DEFAULT_BOARD_SIZE))
    session.select_size(size, persist=False)
    return session
