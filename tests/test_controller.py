import unittest

from game import InteractionController, create_session


class _StillTimer:
    def __init__(self, interval_ms, callback):
        self.callback = callback

    def cancel(self):
        pass


class TestInteractionController(unittest.TestCase):
    def setUp(self):
        self.session = create_session(size=4, timer_factory=_StillTimer)
        self.ctl = InteractionController(self.session)

    def test_given_empty_square_when_tapped_twice_then_placed_then_removed(self):
        self.assertEqual(self.ctl.on_tap_square(1, 0), 3)
        self.assertEqual(self.session.current().board.square_at(1, 0).occupant, 3)
        self.assertEqual(self.ctl.on_tap_square(1, 0), 3)
        self.assertFalse(self.session.current().board.has_occupant(1, 0))
        self.assertIsNone(self.session.current().queen(3).square)

    def test_given_out_of_bounds_tap_then_nothing_happens(self):
        self.assertIsNone(self.ctl.on_tap_square(4, 0))
        self.assertIsNone(self.ctl.on_tap_square(-1, 2))
        self.assertEqual(self.session.current().placed_count, 0)

    def test_given_square_geometry_when_tapping_point_then_square_under_it_toggles(self):
        for r in range(4):
            for c in range(4):
                self.assertTrue(self.ctl.on_square_positioned(r, c, c * 40, r * 40, 40, 40))
        self.assertEqual(self.ctl.on_tap_point(45, 85), 3)
        self.assertTrue(self.session.current().board.has_occupant(2, 1))
        self.assertIsNone(self.ctl.on_tap_point(500, 500))
        # Re-reporting the same geometry changes nothing
        self.assertFalse(self.ctl.on_square_positioned(0, 0, 0, 0, 40, 40))

    def test_given_solved_board_when_tapping_queen_then_not_removed(self):
        for r, c in [(1, 0), (3, 1), (2, 3), (0, 2)]:
            self.ctl.on_tap_square(r, c)
        self.assertTrue(self.session.current().complete)
        self.assertIsNone(self.ctl.on_tap_square(1, 0))
        self.assertEqual(self.session.current().placed_count, 4)

    def test_given_layout_and_shelf_callbacks_then_forwarded_to_session(self):
        self.assertEqual(self.ctl.on_layout(200, 320), 50)
        self.assertTrue(self.ctl.on_shelf_positioned(10, 20))
        self.assertFalse(self.ctl.on_shelf_positioned(10, 20))
        self.assertEqual(self.session.current().shelf_origin, (10.0, 20.0))

    def test_given_drag_callbacks_then_forwarded_to_session(self):
        self.assertTrue(self.ctl.on_drag_start(0))
        self.assertEqual(self.session.current().drag_id, 0)
        self.assertIsNone(self.ctl.on_drag(0, 5, 5))  # no geometry reported yet
        self.assertTrue(self.ctl.on_drag_end(0))
        self.assertIsNone(self.session.current().drag_id)


if __name__ == '__main__':
    unittest.main(verbosity=2)
