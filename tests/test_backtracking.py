import pytest

from algorithms.backtracking import GraphColoring, NQueens, SubsetSum
from algorithms.backtracking.nqueens import is_safe
from algorithms.errors import ConfigurationError
from algorithms.inputs import subset_sum_problem
from algorithms.step import BoardState, ColoringState, SubsetState


def assert_well_formed(trace):
    assert trace.steps, "trace must not be empty"
    assert [s.step_number for s in trace.steps] == list(range(len(trace.steps)))
    assert trace.steps[-1].is_final
    assert not any(s.is_final for s in trace.steps[:-1])
    assert trace.statistics.solutions_found == len(trace.solutions)


# ---------------------------------------------------------------------------
# N-Queens
# ---------------------------------------------------------------------------
class TestNQueens:
    @pytest.mark.parametrize("n, expected", [(1, 1), (4, 2), (5, 10), (6, 4), (8, 92)])
    def test_solution_counts(self, n, expected):
        trace = NQueens().generate(board_size=n)
        assert_well_formed(trace)
        assert len(trace.solutions) == expected

    @pytest.mark.parametrize("n", [2, 3])
    def test_unsolvable_boards_end_with_no_solutions(self, n):
        trace = NQueens().generate(board_size=n)
        assert_well_formed(trace)
        assert trace.solutions == ()
        assert "No solutions found" in trace.final_step.description

    def test_solutions_are_non_attacking(self):
        trace = NQueens().generate(board_size=6)
        for solution in trace.solutions:
            assert isinstance(solution, BoardState)
            queens = solution.queens
            assert len(queens) == 6
            assert len({r for r, _ in queens}) == 6
            assert len({c for _, c in queens}) == 6
            assert len({r - c for r, c in queens}) == 6
            assert len({r + c for r, c in queens}) == 6

    def test_solution_steps_keep_their_board_after_backtracking(self):
        trace = NQueens().generate(board_size=4)
        solution_steps = [s for s in trace.steps if s.description.startswith("Solution #")]
        assert len(solution_steps) == 2
        for step in solution_steps:
            assert len(step.problem_state.queens) == 4
        assert len(solution_steps[0].all_solutions) == 1
        assert len(solution_steps[1].all_solutions) == 2

    def test_counters(self):
        stats = NQueens().generate(board_size=4).statistics
        assert stats.states_explored > 0
        assert stats.backtracks > 0
        assert stats.solutions_found == 2

    def test_is_safe(self):
        board = [[0, 1, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
        assert not is_safe(board, 1, 1)
        assert not is_safe(board, 1, 0)
        assert not is_safe(board, 1, 2)
        assert is_safe(board, 1, 3)

    @pytest.mark.parametrize("bad", [0, -1, "8", 2.5, True, None])
    def test_rejects_bad_board_size(self, bad):
        with pytest.raises(ConfigurationError) as exc:
            NQueens().generate(board_size=bad)
        assert exc.value.field == "board_size"


# ---------------------------------------------------------------------------
# Graph Coloring
# ---------------------------------------------------------------------------
TRIANGLE = [(0, 1), (1, 2), (0, 2)]


class TestGraphColoring:
    def test_triangle_with_three_colors(self):
        trace = GraphColoring().generate(num_nodes=3, edges=TRIANGLE, max_colors=3)
        assert_well_formed(trace)
        assert len(trace.solutions) == 6

    def test_triangle_with_two_colors_has_no_solution(self):
        trace = GraphColoring().generate(num_nodes=3, edges=TRIANGLE, max_colors=2)
        assert_well_formed(trace)
        assert trace.solutions == ()
        assert "No valid coloring" in trace.final_step.description

    def test_path_with_two_colors(self):
        trace = GraphColoring().generate(num_nodes=3, edges=[(0, 1), (1, 2)], max_colors=2)
        assert sorted(s.colors for s in trace.solutions) == [(1, 2, 1), (2, 1, 2)]

    def test_solutions_are_proper_colorings(self):
        edges = [(0, 1), (1, 2), (2, 3), (3, 0), (0, 2)]
        trace = GraphColoring().generate(num_nodes=4, edges=edges, max_colors=3)
        assert trace.solutions
        for solution in trace.solutions:
            assert isinstance(solution, ColoringState)
            assert all(1 <= c <= 3 for c in solution.colors)
            for u, v in edges:
                assert solution.colors[u] != solution.colors[v]

    def test_edges_accept_wire_shape(self):
        trace = GraphColoring().generate(
            num_nodes=2, edges=[{"from": 0, "to": 1}], max_colors=2,
        )
        assert len(trace.solutions) == 2

    def test_edgeless_graph(self):
        trace = GraphColoring().generate(num_nodes=2, edges=[], max_colors=2)
        assert len(trace.solutions) == 4

    @pytest.mark.parametrize("edges", [[(0, 5)], [(1, 1)], [("a", 1)], [(0,)]])
    def test_rejects_bad_edges(self, edges):
        with pytest.raises(ConfigurationError) as exc:
            GraphColoring().generate(num_nodes=3, edges=edges)
        assert exc.value.field == "edges"

    def test_rejects_bad_counts(self):
        with pytest.raises(ConfigurationError) as exc:
            GraphColoring().generate(num_nodes=0)
        assert exc.value.field == "num_nodes"
        with pytest.raises(ConfigurationError) as exc:
            GraphColoring().generate(num_nodes=3, max_colors=0)
        assert exc.value.field == "max_colors"


# ---------------------------------------------------------------------------
# Subset Sum
# ---------------------------------------------------------------------------
class TestSubsetSum:
    def test_classic_instance(self):
        values = [3, 34, 4, 12, 5, 2]
        trace = SubsetSum().generate(values=values, target=9)
        assert_well_formed(trace)
        found = sorted(s.included_indices for s in trace.solutions)
        assert found == [(0, 2, 5), (2, 4)]
        for solution in trace.solutions:
            assert isinstance(solution, SubsetState)
            assert sum(values[i] for i in solution.included_indices) == 9
            assert sum(solution.current_subset) == 9

    def test_no_subset(self):
        trace = SubsetSum().generate(values=[2, 4, 6], target=5)
        assert trace.solutions == ()
        assert "No subset sums to 5" in trace.final_step.description

    def test_single_value(self):
        trace = SubsetSum().generate(values=[5], target=5)
        assert [s.included_indices for s in trace.solutions] == [(0,)]

    def test_backtracks_counted(self):
        stats = SubsetSum().generate(values=[1, 2, 3], target=3).statistics
        assert stats.backtracks > 0
        assert stats.states_explored > stats.solutions_found

    def test_generated_problem_is_solvable(self, rng):
        values, target = subset_sum_problem(8, rng)
        trace = SubsetSum().generate(values=values, target=target)
        assert trace.solutions

    @pytest.mark.parametrize("values", [[], [1, -2], [1, 0], [True], ["a"], None])
    def test_rejects_bad_values(self, values):
        with pytest.raises(ConfigurationError) as exc:
            SubsetSum().generate(values=values, target=3)
        assert exc.value.field == "values"

    @pytest.mark.parametrize("target", [0, -4, 1.5, None])
    def test_rejects_bad_target(self, target):
        with pytest.raises(ConfigurationError) as exc:
            SubsetSum().generate(values=[1, 2], target=target)
        assert exc.value.field == "target"


# ---------------------------------------------------------------------------
# Narration order and counters
# ---------------------------------------------------------------------------
def narration(trace, count=None):
    steps = trace.steps if count is None else trace.steps[:count]
    return [(s.description, s.highlighted_lines) for s in steps]


class TestStepSequences:
    def test_nqueens_opening_steps(self):
        trace = NQueens().generate(board_size=4)
        assert narration(trace, 9) == [
            ("Starting to solve N-Queens for a 4×4 board.", (0, 1, 2)),
            ("Trying to place a queen at row 0, column 0.", (5, 6)),
            ("Placed a queen at row 0, column 0. Moving to row 1.", (7, 8)),
            ("Trying to place a queen at row 1, column 0.", (5, 6)),
            ("Cannot place a queen at row 1, column 0 due to conflicts.", (6,)),
            ("Trying to place a queen at row 1, column 1.", (5, 6)),
            ("Cannot place a queen at row 1, column 1 due to conflicts.", (6,)),
            ("Trying to place a queen at row 1, column 2.", (5, 6)),
            ("Placed a queen at row 1, column 2. Moving to row 2.", (7, 8)),
        ]
        assert narration(trace)[-1] == ("N-Queens complete! Found 2 solution(s).", (10,))

    @pytest.mark.parametrize("n, explored, backtracks, solutions", [
        (1, 1, 1, 1),
        (2, 6, 2, 0),
        (4, 60, 16, 2),
    ])
    def test_nqueens_exact_counters(self, n, explored, backtracks, solutions):
        stats = NQueens().generate(board_size=n).statistics
        assert (stats.states_explored, stats.backtracks, stats.solutions_found) == (
            explored, backtracks, solutions,
        )

    def test_coloring_tries_colors_in_order(self):
        trace = GraphColoring().generate(num_nodes=2, edges=[(0, 1)], max_colors=2)
        assert narration(trace) == [
            ("Starting to solve Graph Coloring for 2 nodes with maximum 2 colors.", (0, 1, 2)),
            ("Trying to color node 0 with color 1.", (5, 6)),
            ("Node 0 colored with color 1. Moving to the next node.", (7, 8)),
            ("Trying to color node 1 with color 1.", (5, 6)),
            ("Cannot color node 1 with color 1 due to conflicts with adjacent nodes.", (6,)),
            ("Trying to color node 1 with color 2.", (5, 6)),
            ("Node 1 colored with color 2. Moving to the next node.", (7, 8)),
            ("Solution #1 found! All nodes colored without conflicts.", (4,)),
            ("Backtracking from node 1 with color 2.", (9,)),
            ("Backtracking from node 0 with color 1.", (9,)),
            ("Trying to color node 0 with color 2.", (5, 6)),
            ("Node 0 colored with color 2. Moving to the next node.", (7, 8)),
            ("Trying to color node 1 with color 1.", (5, 6)),
            ("Node 1 colored with color 1. Moving to the next node.", (7, 8)),
            ("Solution #2 found! All nodes colored without conflicts.", (4,)),
            ("Backtracking from node 1 with color 1.", (9,)),
            ("Trying to color node 1 with color 2.", (5, 6)),
            ("Cannot color node 1 with color 2 due to conflicts with adjacent nodes.", (6,)),
            ("Backtracking from node 0 with color 2.", (9,)),
            ("Graph Coloring complete! Found 2 solution(s).", (10,)),
        ]
        stats = trace.statistics
        assert (stats.states_explored, stats.backtracks, stats.solutions_found) == (6, 4, 2)

    def test_subset_sum_includes_before_excluding(self):
        trace = SubsetSum().generate(values=[1, 2], target=3)
        end = "Reached the end of the set without hitting the target. Backtracking."
        assert narration(trace) == [
            ("Starting to find subsets of [1, 2] that sum to 3.", (0, 1)),
            ("Including element 1 at index 0. Current sum: 1.", (5, 6)),
            ("Including element 2 at index 1. Current sum: 3.", (5, 6)),
            ("Solution #1 found! Subset [1, 2] sums to 3.", (3,)),
            ("Excluding element 2 at index 1. Current sum: 1.", (7, 8)),
            (end, (4,)),
            ("Excluding element 1 at index 0. Current sum: 0.", (7, 8)),
            ("Including element 2 at index 1. Current sum: 2.", (5, 6)),
            (end, (4,)),
            ("Excluding element 2 at index 1. Current sum: 0.", (7, 8)),
            (end, (4,)),
            ("Subset Sum complete! Found 1 subset(s) that sum to 3.", (3,)),
        ]
        stats = trace.statistics
        assert (stats.states_explored, stats.backtracks, stats.solutions_found) == (7, 3, 1)

    def test_subset_sum_overshoot_message(self):
        gen = SubsetSum()
        descriptions = gen.describe_steps(gen.generate(values=[5], target=3))
        assert "Current sum 5 exceeds target 3. Backtracking." in descriptions


class TestFinalStep:
    @pytest.mark.parametrize("make", [
        lambda: NQueens().generate(board_size=6),
        lambda: GraphColoring().generate(num_nodes=3, edges=[(0, 1), (1, 2)], max_colors=3),
        lambda: SubsetSum().generate(values=[3, 34, 4, 12, 5, 2], target=9),
    ])
    def test_shows_first_solution(self, make):
        trace = make()
        assert len(trace.solutions) > 1
        assert trace.final_step.problem_state == trace.solutions[0]
        assert trace.final_step.problem_state.solution_number == 1
