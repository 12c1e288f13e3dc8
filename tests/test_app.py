import unittest

from app import app as flask_app
import app as app_mod
from game import create_session


class _StillTimer:
    def __init__(self, interval_ms, callback):
        self.callback = callback

    def cancel(self):
        pass


class TestFlaskAPI(unittest.TestCase):
    def setUp(self):
        # Serve an in-memory 4x4 session so no preferences file is touched
        app_mod.reset_session(create_session(size=4, timer_factory=_StillTimer))
        self.client = flask_app.test_client()

    def tearDown(self):
        app_mod.reset_session(None)

    def post(self, url, payload=None):
        if payload is None:
            return self.client.post(url)
        return self.client.post(url, json=payload)

    def lay_out(self, px=50, top=100):
        for r in range(4):
            for c in range(4):
                r_ = self.post("/api/square", {"row": r, "col": c, "position": [c * px, top + r * px], "size": [px, px]})
                self.assertEqual(r_.status_code, 200)

    def test_given_fresh_session_when_state_requested_then_setup_board(self):
        r = self.client.get("/api/state")
        self.assertEqual(r.status_code, 200)
        data = r.get_json()
        self.assertTrue(data["ok"])
        state = data["state"]
        self.assertEqual(state["phase"], "setup")
        self.assertEqual(state["size"], 4)
        self.assertFalse(state["complete"])
        self.assertEqual(len(state["board"]["squares"]), 4)
        self.assertTrue(state["board"]["squares"][0][0]["light"])
        self.assertEqual([q["id"] for q in state["queens"]], [0, 1, 2, 3])
        self.assertEqual(state["paths"]["availableQueens"], 4)
        self.assertEqual(state["paths"]["collisions"], [])
        self.assertIsNone(state["bestMs"])

    def test_given_new_game_when_posted_then_resized_or_rejected(self):
        r = self.post("/api/new", {"size": 6})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json()["state"]["size"], 6)
        self.assertEqual(len(r.get_json()["state"]["queens"]), 6)

        r = self.post("/api/new", {"size": 0})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.get_json()["ok"])
        r = self.post("/api/new", {"size": "six"})
        self.assertEqual(r.status_code, 400)
        # Rejected sizes leave the session alone
        self.assertEqual(self.client.get("/api/state").get_json()["state"]["size"], 6)

    def test_given_size_outside_playable_range_when_new_game_posted_then_clamped(self):
        r = self.post("/api/new", {"size": 60})
        self.assertEqual(r.status_code, 200)
        state = r.get_json()["state"]
        self.assertEqual(state["size"], 16)
        self.assertEqual(len(state["board"]["squares"]), 16)
        r = self.post("/api/new", {"size": 2})
        self.assertEqual(r.get_json()["state"]["size"], 4)
        r = self.post("/api/new", {"size": -3})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(self.client.get("/api/state").get_json()["state"]["size"], 4)

    def test_given_solution_taps_when_last_queen_placed_then_complete_with_fireworks(self):
        ids = []
        for r, c in [(1, 0), (3, 1), (2, 3), (0, 2)]:
            resp = self.post("/api/tap", {"row": r, "col": c})
            self.assertEqual(resp.status_code, 200)
            ids.append(resp.get_json()["queen"])
        self.assertEqual(ids, [3, 2, 1, 0])
        state = resp.get_json()["state"]
        self.assertTrue(state["complete"])
        self.assertEqual(state["phase"], "complete")
        self.assertTrue(state["newBest"])
        self.assertEqual(state["bestMs"], 0)
        self.assertEqual(state["bestTimes"], {"4": 0})
        self.assertEqual(len(state["projectiles"]), 10)
        self.assertEqual({p["type"] for p in state["projectiles"]}, {"rocket"})

        # Solved board refuses further edits until restart
        resp = self.post("/api/remove", {"queen": 3})
        self.assertFalse(resp.get_json()["removed"])
        state = self.post("/api/restart").get_json()["state"]
        self.assertEqual(state["phase"], "playing")
        self.assertEqual(state["paths"]["availableQueens"], 4)

    def test_given_column_conflict_when_tapped_then_collisions_reported(self):
        self.post("/api/tap", {"row": 1, "col": 0})
        state = self.post("/api/tap", {"row": 2, "col": 0}).get_json()["state"]
        self.assertEqual(state["phase"], "playing")
        self.assertEqual(state["paths"]["collisions"], [
            {"square": [1, 0], "directions": ["SOUTH"]},
            {"square": [2, 0], "directions": ["NORTH"]},
        ])
        markers = state["paths"]["markers"][3][0]
        self.assertEqual(markers, [{"direction": "SOUTH", "collision": False, "queen": 2}])

    def test_given_geometry_when_dragging_queen_then_lands_on_hovered_square(self):
        self.lay_out()
        r = self.post("/api/drag/start", {"queen": 3})
        self.assertTrue(r.get_json()["started"])
        self.assertEqual(r.get_json()["state"]["dragId"], 3)
        r = self.post("/api/drag/move", {"queen": 3, "delta": [0, 150]})
        self.assertEqual(r.get_json()["hovered"], [1, 0])
        r = self.post("/api/drag/end", {"queen": 3})
        self.assertTrue(r.get_json()["ended"])
        state = r.get_json()["state"]
        self.assertIsNone(state["dragId"])
        self.assertEqual(state["queens"][3]["square"], [1, 0])
        self.assertEqual(state["board"]["squares"][1][0]["occupant"], 3)

        r = self.post("/api/drag/start", {"queen": 99})
        self.assertFalse(r.get_json()["started"])

    def test_given_geometry_when_tapping_point_then_square_under_point_used(self):
        self.lay_out()
        r = self.post("/api/tap", {"point": [25, 175]})
        self.assertEqual(r.get_json()["queen"], 3)
        self.assertEqual(r.get_json()["state"]["queens"][3]["square"], [1, 0])
        r = self.post("/api/tap", {"point": [999, 999]})
        self.assertIsNone(r.get_json()["queen"])

    def test_given_layout_and_shelf_when_posted_then_square_size_and_origin(self):
        r = self.post("/api/layout", {"width": 400, "height": 300})
        self.assertEqual(r.get_json()["squareSize"], 75)
        self.assertEqual(r.get_json()["state"]["squareSize"], 75)
        r = self.post("/api/shelf", {"position": [10, 20]})
        self.assertEqual(r.get_json()["state"]["shelfOrigin"], [10.0, 20.0])

    def test_given_placed_queen_when_removed_then_back_on_shelf(self):
        queen = self.post("/api/tap", {"row": 0, "col": 0}).get_json()["queen"]
        r = self.post("/api/remove", {"queen": queen})
        self.assertTrue(r.get_json()["removed"])
        self.assertIsNone(r.get_json()["state"]["queens"][queen]["square"])
        r = self.post("/api/remove", {"queen": queen})
        self.assertFalse(r.get_json()["removed"])

    def test_given_show_moves_and_animation_when_advanced_then_queen_settles(self):
        r = self.post("/api/show_moves", {"show": True})
        self.assertTrue(r.get_json()["state"]["showMoves"])
        self.lay_out()
        state = self.post("/api/tap", {"row": 1, "col": 0}).get_json()["state"]
        self.assertEqual(state["animating"], [3])
        r = self.post("/api/advance", {"dt": 1000})
        self.assertFalse(r.get_json()["moving"])
        state = r.get_json()["state"]
        self.assertEqual(state["animating"], [])
        self.assertEqual(state["queens"][3]["pixel"], [0.0, 150.0])

    def test_given_missing_fields_when_posted_then_bad_request(self):
        for url, payload in [
            ("/api/remove", None),
            ("/api/drag/move", {"queen": 0}),
            ("/api/layout", {"width": 100}),
            ("/api/tap", {"row": "a", "col": 0}),
            ("/api/square", {"row": 0, "col": 0, "position": 5, "size": [1, 1]}),
        ]:
            r = self.post(url, payload)
            self.assertEqual(r.status_code, 400, url)
            self.assertFalse(r.get_json()["ok"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
