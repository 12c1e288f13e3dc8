"""
N-Queens core Python package.

Pure-logic pieces of the N-Queens puzzle, kept free of any UI so they can be driven
from the Flask app, the terminal CLI or tests alike.
Modules:
- board.py: Board, Square, create_board, InvalidSizeError
- state.py: Queen, Direction, AttackMarker, Phase
- paths.py: compute_paths (attack markers, collisions, queens left)
- session.py: PuzzleSession state machine, create_session
- controller.py: gesture -> session command translation
- animation.py, fireworks.py: queen transitions and the completion celebration
- db.py: SQLite preference store
- timer.py: cancellable periodic task
"""
