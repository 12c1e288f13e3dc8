from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from nqueens_core.board import Board, InvalidSizeError
from nqueens_core.config import DEFAULT_DB, clamp_size, env_flag, log_level
from nqueens_core.controller import InteractionController
from nqueens_core.db import SqlitePreferenceStore
from nqueens_core.fireworks import Projectile
from nqueens_core.paths import PathResult
from nqueens_core.session import PuzzleSession, SessionSnapshot, create_session
from nqueens_core.state import Queen

logger = logging.getLogger(__name__)

app = Flask(__name__)

_session: Optional[PuzzleSession] = None
_controller: Optional[InteractionController] = None
_session_lock = threading.Lock()


def _build_session() -> PuzzleSession:
    executor = ThreadPoolExecutor(max_workers=1) if env_flag("NQUEENS_BACKGROUND_PATHS") else None
    return create_session(store=SqlitePreferenceStore(DEFAULT_DB), executor=executor)


def get_controller() -> InteractionController:
    global _session, _controller
    with _session_lock:
        if _controller is None:
            _session = _build_session()
            _controller = InteractionController(_session)
        return _controller


def reset_session(session: Optional[PuzzleSession] = None) -> None:
    """Replaces the served session (closing the old one). None builds a fresh one lazily."""
    global _session, _controller
    with _session_lock:
        if _session is not None:
            _session.close()
        _session = session
        _controller = InteractionController(session) if session is not None else None


# ---------- JSON codec ----------

def board_to_json(b: Board) -> Dict[str, Any]:
    return {
        "size": int(b.size),
        "squares": [
            [
                {
                    "row": sq.row,
                    "col": sq.col,
                    "light": sq.light,
                    "occupant": sq.occupant,
                    "position": [sq.position[0], sq.position[1]],
                    "size": [sq.size[0], sq.size[1]],
                }
                for sq in row
            ]
            for row in b.grid
        ],
    }


def queen_to_json(q: Queen) -> Dict[str, Any]:
    return {
        "id": q.id,
        "square": [q.square[0], q.square[1]] if q.square is not None else None,
        "pixel": [q.pixel[0], q.pixel[1]],
    }


def paths_to_json(p: PathResult) -> Dict[str, Any]:
    return {
        "markers": [
            [
                [{"direction": m.direction.name, "collision": m.collision, "queen": m.queen_id} for m in cell]
                for cell in row
            ]
            for row in p.markers
        ],
        "collisions": [
            {"square": [r, c], "directions": [d.name for d in dirs]}
            for (r, c), dirs in sorted(p.collisions.items())
        ],
        "availableQueens": p.available_queens,
    }


def projectile_to_json(p: Projectile) -> Dict[str, Any]:
    return {
        "type": p.type.value,
        "color": p.color.value,
        "offset": [p.offset[0], p.offset[1]],
        "velocity": [p.velocity_x, p.velocity_y, p.velocity_z],
        "elapsed": p.elapsed_ms,
        "duration": p.duration_ms,
        "fade": p.fade_ms,
        "delay": p.delay_ms,
    }


def snapshot_to_json(s: SessionSnapshot) -> Dict[str, Any]:
    return {
        "phase": s.phase.value,
        "size": s.size,
        "complete": s.complete,
        "board": board_to_json(s.board) if s.board is not None else None,
        "queens": [queen_to_json(q) for q in s.queens],
        "paths": paths_to_json(s.paths),
        "showMoves": s.show_moves,
        "elapsedMs": s.elapsed_ms,
        "bestMs": s.best_ms,
        "bestTimes": {str(k): v for k, v in sorted(s.best_times.items())},
        "previousBestMs": s.previous_best_ms,
        "newBest": s.new_best,
        "squareSize": s.square_size,
        "shelfOrigin": [s.shelf_origin[0], s.shelf_origin[1]],
        "dragId": s.drag_id,
        "hovered": [s.hovered[0], s.hovered[1]] if s.hovered is not None else None,
        "animating": sorted(s.animations),
        "projectiles": [projectile_to_json(p) for p in s.projectiles],
        "version": s.version,
    }


def _ok(**extra: Any) -> Any:
    ctl = get_controller()
    body = {"ok": True, "state": snapshot_to_json(ctl.session.current())}
    body.update(extra)
    return jsonify(body)


def _body() -> Dict[str, Any]:
    body = request.get_json(force=True, silent=True)
    return body if isinstance(body, dict) else {}


@app.errorhandler(InvalidSizeError)
def _invalid_size(e: InvalidSizeError) -> Any:
    return jsonify({"ok": False, "error": str(e)}), 400


@app.errorhandler(KeyError)
@app.errorhandler(TypeError)
@app.errorhandler(ValueError)
def _bad_request(e: Exception) -> Any:
    logger.debug("rejected request: %s", e)
    return jsonify({"ok": False, "error": f"bad request: {e}"}), 400


# ---------- Game API ----------

@app.get("/api/state")
def api_state() -> Any:
    return _ok()


@app.post("/api/new")
def api_new() -> Any:
    body = _body()
    ctl = get_controller()
    size = int(body.get("size", ctl.session.current().size))
    # Non-positive sizes still raise InvalidSizeError; the rest is held to the playable range.
    ctl.session.select_size(clamp_size(size) if size > 0 else size)
    return _ok()


@app.post("/api/layout")
def api_layout() -> Any:
    body = _body()
    square_size = get_controller().on_layout(float(body["width"]), float(body["height"]))
    return _ok(squareSize=square_size)


@app.post("/api/square")
def api_square() -> Any:
    body = _body()
    x, y = body["position"]
    w, h = body["size"]
    changed = get_controller().on_square_positioned(
        int(body["row"]), int(body["col"]), float(x), float(y), float(w), float(h)
    )
    return _ok(changed=changed)


@app.post("/api/shelf")
def api_shelf() -> Any:
    body = _body()
    x, y = body["position"]
    get_controller().on_shelf_positioned(float(x), float(y))
    return _ok()


@app.post("/api/tap")
def api_tap() -> Any:
    body = _body()
    ctl = get_controller()
    if "point" in body:
        px, py = body["point"]
        queen = ctl.on_tap_point(float(px), float(py))
    else:
        queen = ctl.on_tap_square(int(body["row"]), int(body["col"]))
    return _ok(queen=queen)


@app.post("/api/remove")
def api_remove() -> Any:
    body = _body()
    removed = get_controller().session.remove_queen(int(body["queen"]))
    return _ok(removed=removed)


@app.post("/api/drag/start")
def api_drag_start() -> Any:
    body = _body()
    started = get_controller().on_drag_start(int(body["queen"]))
    return _ok(started=started)


@app.post("/api/drag/move")
def api_drag_move() -> Any:
    body = _body()
    dx, dy = body["delta"]
    hovered = get_controller().on_drag(int(body["queen"]), float(dx), float(dy))
    return _ok(hovered=list(hovered) if hovered is not None else None)


@app.post("/api/drag/end")
def api_drag_end() -> Any:
    body = _body()
    ended = get_controller().on_drag_end(int(body["queen"]))
    return _ok(ended=ended)


@app.post("/api/restart")
def api_restart() -> Any:
    get_controller().session.restart()
    return _ok()


@app.post("/api/show_moves")
def api_show_moves() -> Any:
    body = _body()
    get_controller().session.set_show_moves(bool(body.get("show", True)))
    return _ok()


@app.post("/api/advance")
def api_advance() -> Any:
    body = _body()
    moving = get_controller().session.advance(float(body.get("dt", 16)))
    return _ok(moving=moving)


# Entrypoint for "python app.py"
if __name__ == "__main__":
    logging.basicConfig(level=log_level())
    debug = env_flag("FLASK_DEBUG", os.getenv("DEBUG", "0"))
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug)
