import unittest

from game import Board, InvalidSizeError, create_board


class TestBoard(unittest.TestCase):
    def _laid_out(self, size, px=10):
        board = create_board(size)
        for r, c in board.coords():
            board = board.with_geometry(r, c, (c * px, r * px), (px, px))
        return board

    def test_given_size_when_creating_board_then_grid_and_parity_correct(self):
        board = create_board(4)
        self.assertEqual(board.size, 4)
        self.assertEqual(len(list(board.squares())), 16)
        self.assertTrue(board.square_at(0, 0).light)
        self.assertFalse(board.square_at(0, 1).light)
        self.assertFalse(board.square_at(1, 0).light)
        self.assertTrue(board.square_at(3, 3).light)
        self.assertEqual(board.occupied(), ())

    def test_given_non_positive_size_when_creating_board_then_invalid_size_error(self):
        for bad in (0, -1, -8):
            with self.assertRaises(InvalidSizeError):
                create_board(bad)
        # Still a ValueError for callers that only know the builtin
        with self.assertRaises(ValueError):
            create_board(0)

    def test_given_out_of_bounds_coords_when_querying_then_none_not_error(self):
        board = create_board(3)
        self.assertIsNone(board.square_at(-1, 0))
        self.assertIsNone(board.square_at(0, 3))
        self.assertIsNone(board.square_at(3, 3))
        self.assertFalse(board.has_occupant(5, 5))
        self.assertEqual(board.square_at(2, 1).coord, (2, 1))

    def test_given_board_when_setting_occupant_then_copy_on_write(self):
        board = create_board(4)
        placed = board.with_occupant(1, 2, 3)
        self.assertIsNot(placed, board)
        self.assertTrue(placed.has_occupant(1, 2))
        self.assertEqual(placed.square_at(1, 2).occupant, 3)
        self.assertFalse(board.has_occupant(1, 2))  # original untouched
        cleared = placed.with_occupant(1, 2, None)
        self.assertFalse(cleared.has_occupant(1, 2))
        self.assertEqual(placed.occupied(), ((1, 2),))

    def test_given_out_of_range_occupant_update_when_applied_then_same_board_returned(self):
        board = create_board(4)
        self.assertIs(board.with_occupant(4, 0, 1), board)
        self.assertIs(board.with_occupant(-1, -1, 1), board)
        self.assertIs(board.with_geometry(9, 9, (1, 1), (5, 5)), board)

    def test_given_unchanged_geometry_when_updating_then_same_board(self):
        board = self._laid_out(2)
        self.assertIs(board.with_geometry(0, 0, (0, 0), (10, 10)), board)

    def test_given_square_geometry_when_hit_testing_then_interior_points_match(self):
        board = self._laid_out(3)
        self.assertEqual(board.square_under_point(5, 5).coord, (0, 0))
        self.assertEqual(board.square_under_point(25, 15).coord, (1, 2))
        self.assertIsNone(board.square_under_point(35, 5))
        self.assertIsNone(board.square_under_point(-1, 5))
        # Shared edges belong to neither square
        self.assertIsNone(board.square_under_point(10, 5))

    def test_given_board_without_geometry_when_hit_testing_then_none(self):
        self.assertIsNone(create_board(4).square_under_point(0, 0))

    def test_given_board_when_pretty_then_symbols_rendered(self):
        board = create_board(3).with_occupant(0, 0, 0).with_occupant(2, 2, 1)
        txt = board.pretty(collisions={(0, 0)}, attacked={(1, 1)})
        lines = txt.splitlines()
        self.assertEqual(len(lines), 3)
        self.assertEqual(lines[0].split()[0], 'X')
        self.assertEqual(lines[1].split()[1], '*')
        self.assertEqual(lines[2].split()[2], 'Q')
        self.assertEqual(lines[0].split()[1], ':')
        self.assertIsInstance(board, Board)


if __name__ == '__main__':
    unittest.main(verbosity=2)
