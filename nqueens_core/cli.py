from __future__ import annotations

import argparse
import logging
from typing import Optional

from .board import InvalidSizeError
from .config import DEFAULT_DB, MAX_BOARD_SIZE, MIN_BOARD_SIZE, clamp_size, log_level
from .controller import InteractionController
from .db import SqlitePreferenceStore
from .session import PuzzleSession, SessionSnapshot, create_session

HELP = """Commands:
  r c        place a queen on row r, column c (or remove the queen there)
  moves      toggle the attack path overlay
  size N     start a new N x N puzzle
  restart    clear the board and restart the clock
  quit       leave"""


def _fmt_ms(ms: Optional[int]) -> str:
    if ms is None:
        return "--"
    secs = ms // 1000
    return f"{secs // 60}:{secs % 60:02d}"


def render(snapshot: SessionSnapshot) -> str:
    if snapshot.board is None:
        return "(no board)"
    collisions = set(snapshot.paths.collisions)
    attacked = set(snapshot.paths.attacked()) if snapshot.show_moves else set()
    lines = [snapshot.board.pretty(collisions, attacked)]
    lines.append(
        f"queens left: {snapshot.paths.available_queens}  "
        f"conflicts: {len(collisions)}  "
        f"time: {_fmt_ms(snapshot.elapsed_ms)}  best: {_fmt_ms(snapshot.best_ms)}"
    )
    return "\n".join(lines)


def handle_command(session: PuzzleSession, controller: InteractionController, text: str) -> Optional[str]:
    """Applies one command line to the session. Returns a message for the user, or None to quit."""
    parts = text.replace(",", " ").split()
    if not parts:
        return ""
    cmd = parts[0].lower()
    if cmd in ("q", "quit", "exit"):
        return None
    if cmd in ("h", "help", "?"):
        return HELP
    if cmd == "restart":
        session.restart()
        return render(session.current())
    if cmd == "moves":
        session.set_show_moves(not session.current().show_moves)
        return render(session.current())
    if cmd == "size":
        try:
            session.select_size(clamp_size(int(parts[1])))
        except (IndexError, ValueError, InvalidSizeError):
            return f"usage: size N  ({MIN_BOARD_SIZE}-{MAX_BOARD_SIZE})"
        return render(session.current())
    try:
        r, c = int(parts[0]), int(parts[1])
    except (IndexError, ValueError):
        return "Could not parse. Type 'help' for commands."
    if controller.on_tap_square(r, c) is None:
        return "Nothing to do there."
    snap = session.current()
    out = render(snap)
    if snap.complete:
        out += f"\nSolved in {_fmt_ms(snap.elapsed_ms)}!"
        if snap.new_best:
            out += " New best time."
    return out


def main() -> None:
    parser = argparse.ArgumentParser(description='N-Queens puzzle in the terminal')
    parser.add_argument('--size', type=int, default=None, help=f'Board size ({MIN_BOARD_SIZE}-{MAX_BOARD_SIZE})')
    parser.add_argument('--db', default=DEFAULT_DB, help='SQLite preferences file path')
    parser.add_argument('--show-moves', action='store_true', help='Show attack paths of placed queens')
    args = parser.parse_args()

    logging.basicConfig(level=log_level())

    store = SqlitePreferenceStore(args.db)
    size = clamp_size(args.size) if args.size is not None else None
    session = create_session(store=store, size=size)
    if args.show_moves:
        session.set_show_moves(True)
    controller = InteractionController(session)

    print(render(session.current()))
    print(HELP)
    try:
        while True:
            try:
                text = input('> ')
            except EOFError:
                break
            msg = handle_command(session, controller, text)
            if msg is None:
                break
            if msg:
                print(msg)
    finally:
        session.close()


if __name__ == '__main__':
    main()
