import pytest

from engine import StepperState
from main import SESSIONS_KEY, create_app


def run(client, **body):
    return client.post("/api/run", json=body)


class TestAlgorithms:
    def test_lists_registry(self, client):
        resp = client.get("/api/algorithms")
        assert resp.status_code == 200
        cards = resp.get_json()["algorithms"]
        assert len(cards) == 10
        assert {"key", "label", "pseudocode", "complexity_time"} <= set(cards[0])

    def test_filter_by_family(self, client):
        cards = client.get("/api/algorithms?family=divide_conquer").get_json()["algorithms"]
        assert len(cards) == 7
        assert all(c["family"] == "divide_conquer" for c in cards)

    def test_unknown_family(self, client):
        resp = client.get("/api/algorithms?family=greedy")
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "family"


class TestRun:
    def test_nqueens_starts_playing(self, client):
        resp = run(client, algorithm="nqueens", board_size=4)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["state"]["status"] == "running"
        assert data["state"]["current_index"] == 0
        assert data["metrics"]["solutions_found"] == 2
        assert data["algorithm"]["key"] == "nqueens"

    def test_strassen_with_matrices(self, client):
        resp = run(client, algorithm="strassen", a=[[1, 2], [3, 4]], b=[[5, 6], [7, 8]])
        assert resp.status_code == 200
        assert resp.get_json()["result"] == [[19, 22], [43, 50]]

    @pytest.mark.parametrize("body", [
        {"algorithm": "graph_coloring", "num_nodes": 4, "seed": 3},
        {"algorithm": "subset_sum", "size": 5, "seed": 1},
        {"algorithm": "binary_search", "size": 10, "seed": 2},
        {"algorithm": "majority_element", "size": 9, "seed": 4, "ensure_majority": True},
        {"algorithm": "order_statistics", "values": [5, 1, 4], "k": 2},
        {"algorithm": "quick_sort", "seed": 5},
        {"algorithm": "strassen", "size": 4, "seed": 6},
    ])
    def test_generated_inputs(self, client, body):
        resp = run(client, **body)
        assert resp.status_code == 200, resp.get_json()
        assert resp.get_json()["state"]["total_steps"] > 0

    def test_subset_sum_generated_problem_is_solvable(self, client):
        data = run(client, algorithm="subset_sum", size=6, seed=11).get_json()
        assert data["metrics"]["solutions_found"] >= 1

    @pytest.mark.parametrize("body, field", [
        ({"algorithm": "bogosort"}, "algorithm"),
        ({}, "algorithm"),
        ({"algorithm": "nqueens", "board_size": 11}, "board_size"),
        ({"algorithm": "nqueens", "board_size": "4"}, "board_size"),
        ({"algorithm": "graph_coloring", "num_nodes": 11}, "num_nodes"),
        ({"algorithm": "graph_coloring", "num_nodes": 3, "edges": [[0, 9]]}, "edges"),
        ({"algorithm": "merge_sort", "values": list(range(65))}, "values"),
        ({"algorithm": "merge_sort", "values": "1,2,3"}, "values"),
        ({"algorithm": "subset_sum", "values": [1, 2], "target": 0}, "target"),
        ({"algorithm": "order_statistics", "values": [1, 2], "k": 3}, "k"),
        ({"algorithm": "strassen", "a": [[1, 2, 3]], "b": [[1]]}, "a"),
        ({"algorithm": "strassen", "a": [[1] * 16] * 16, "b": [[1] * 16] * 16}, "a"),
        ({"algorithm": "strassen", "a": [[1, 0], [0, 1]], "b": [[1] * 16] * 16}, "b"),
        ({"algorithm": "majority_element", "values": [1, 1, 2], "ensure_majority": "false"}, "ensure_majority"),
        ({"algorithm": "majority_element", "values": [1, 1, 2], "ensure_majority": 1}, "ensure_majority"),
    ])
    def test_rejects_bad_parameters(self, client, body, field):
        resp = run(client, **body)
        assert resp.status_code == 400
        assert resp.get_json()["field"] == field

    @pytest.mark.parametrize("url", ["/api/run", "/api/step/goto", "/api/speed"])
    def test_rejects_non_object_body(self, client, url):
        resp = client.post(url, json=["nqueens", 4])
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "body"

    def test_failed_run_keeps_previous_session(self, client):
        run(client, algorithm="nqueens", board_size=4)
        run(client, algorithm="nqueens", board_size=99)
        state = client.get("/api/state").get_json()["state"]
        assert state["status"] == "running"
        assert state["current_step"]["problem_state"]["kind"] == "board"


class TestPlayback:
    def test_state_polls_the_timer(self, client, clock):
        run(client, algorithm="merge_sort", values=[4, 3, 2, 1])
        assert client.get("/api/state").get_json()["state"]["current_index"] == 0
        clock.advance(2.0)
        assert client.get("/api/state").get_json()["state"]["current_index"] == 2

    def test_pause_step_and_resume(self, client, clock):
        run(client, algorithm="merge_sort", values=[4, 3, 2, 1])
        assert client.post("/api/pause").get_json()["state"]["status"] == "paused"
        clock.advance(5.0)
        data = client.post("/api/step/next").get_json()
        assert data["state"]["current_index"] == 1
        data = client.post("/api/step/prev").get_json()
        assert data["state"]["current_index"] == 0
        assert client.post("/api/resume").get_json()["state"]["status"] == "running"

    def test_play_toggles(self, client):
        run(client, algorithm="merge_sort", values=[2, 1])
        assert client.post("/api/play").get_json()["state"]["status"] == "paused"
        assert client.post("/api/play").get_json()["state"]["status"] == "running"

    def test_goto_end_completes_when_paused(self, client):
        run(client, algorithm="merge_sort", values=[2, 1])
        client.post("/api/pause")
        data = client.post("/api/step/goto", json={"index": 1000}).get_json()
        assert data["state"]["status"] == "complete"
        assert data["state"]["current_step"]["is_final"] is True
        assert client.post("/api/play").get_json()["ok"] is False

    def test_goto_requires_integer(self, client):
        run(client, algorithm="merge_sort", values=[2, 1])
        resp = client.post("/api/step/goto", json={"index": "last"})
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "index"

    def test_speed(self, client):
        data = client.post("/api/speed", json={"preset": "fast"}).get_json()
        assert data["state"]["speed_multiplier"] == 2.5
        data = client.post("/api/speed", json={"multiplier": -1}).get_json()
        assert data["ok"] is False
        assert data["state"]["speed_multiplier"] == 2.5

    def test_speed_change_applies_due_ticks_first(self, client, clock):
        run(client, algorithm="nqueens", board_size=4)
        clock.advance(3.5)
        data = client.post("/api/speed", json={"multiplier": 2}).get_json()
        assert data["state"]["current_index"] == 3
        clock.advance(0.5)
        assert client.get("/api/state").get_json()["state"]["current_index"] == 4

    def test_step_next_counts_from_the_live_index(self, client, clock):
        run(client, algorithm="nqueens", board_size=4)
        clock.advance(2.5)
        data = client.post("/api/step/next").get_json()
        assert data["state"]["current_index"] == 3

    def test_goto_is_not_overridden_by_stale_ticks(self, client, clock):
        run(client, algorithm="nqueens", board_size=4)
        clock.advance(3.0)
        assert client.post("/api/step/goto", json={"index": 1}).get_json()["state"]["current_index"] == 1
        assert client.get("/api/state").get_json()["state"]["current_index"] == 1

    def test_step_prev_after_ticks(self, client, clock):
        run(client, algorithm="nqueens", board_size=4)
        clock.advance(2.5)
        client.post("/api/step/prev")
        assert client.get("/api/state").get_json()["state"]["current_index"] == 1

    def test_resume_reports_the_live_index(self, client, clock):
        run(client, algorithm="nqueens", board_size=4)
        clock.advance(2.0)
        data = client.post("/api/resume").get_json()
        assert data["ok"] is False
        assert data["state"]["current_index"] == 2

    def test_reset(self, client):
        run(client, algorithm="nqueens", board_size=4)
        data = client.post("/api/reset").get_json()
        assert data["state"]["status"] == "idle"
        assert data["state"]["total_steps"] == 0


class TestViews:
    def test_tree(self, client):
        run(client, algorithm="merge_sort", values=[4, 3, 2, 1])
        data = client.get("/api/tree").get_json()
        assert len(data["nodes"]) == 10
        assert data["levels"] == [0, 0.5, 1, 1.5, 2]
        assert data["nodes"][0]["id"] == "root"

    def test_tree_empty_for_backtracking(self, client):
        run(client, algorithm="nqueens", board_size=4)
        assert client.get("/api/tree").get_json()["nodes"] == []

    def test_solutions_grow_with_playback(self, client):
        run(client, algorithm="nqueens", board_size=4)
        assert client.get("/api/solutions").get_json()["count"] == 0
        client.post("/api/pause")
        client.post("/api/step/goto", json={"index": 10 ** 6})
        data = client.get("/api/solutions").get_json()
        assert data["count"] == 2
        assert all(s["kind"] == "board" for s in data["solutions"])

    def test_trace(self, client):
        assert client.get("/api/trace").get_json()["trace"] is None
        run(client, algorithm="count_inversions", values=[2, 4, 1, 3, 5])
        trace = client.get("/api/trace").get_json()["trace"]
        assert trace["result"] == 3
        assert len(trace["steps"]) == trace["total_steps"]

    def test_sessions_are_per_client(self, app, client):
        run(client, algorithm="nqueens", board_size=4)
        other = app.test_client()
        assert other.get("/api/state").get_json()["state"]["status"] == "idle"


class TestSessionRegistry:
    @pytest.fixture
    def small_app(self, clock):
        return create_app({"TESTING": True, "CLOCK": clock, "MAX_SESSIONS": 3})

    def test_registry_is_bounded(self, small_app):
        for _ in range(5):
            small_app.test_client().get("/api/state")
        assert len(small_app.extensions[SESSIONS_KEY]) == 3

    def test_evicted_session_stops_its_timer(self, small_app):
        first = small_app.test_client()
        run(first, algorithm="nqueens", board_size=4)
        evicted = next(iter(small_app.extensions[SESSIONS_KEY].values()))
        assert evicted.stepper.has_timer

        for _ in range(3):
            small_app.test_client().get("/api/state")

        assert evicted not in small_app.extensions[SESSIONS_KEY].values()
        assert evicted.stepper.status is StepperState.IDLE
        assert not evicted.stepper.has_timer
        assert first.get("/api/state").get_json()["state"]["status"] == "idle"

    def test_recently_used_sessions_survive(self, small_app):
        a, b, c = (small_app.test_client() for _ in range(3))
        run(a, algorithm="nqueens", board_size=4)
        b.get("/api/state")
        c.get("/api/state")
        a.get("/api/state")
        small_app.test_client().get("/api/state")
        assert a.get("/api/state").get_json()["state"]["status"] == "running"
        assert b.get("/api/state").get_json()["state"]["status"] == "idle"
        assert len(small_app.extensions[SESSIONS_KEY]) == 3
