"""
nqueens.py — N-Queens
=======================
Places queens row by row, trying columns left to right, and explores the
whole decision tree so every solution and every pruned branch appears in
the trace.

Yields a Step at:
  1. Attempt a square                 (row, col)
  2. Square safe   →  queen placed
  3. Square attacked  →  rejected
  4. Queen removed after recursion  →  BACKTRACK
  5. All N rows filled  →  SOLUTION (search continues)
"""

import logging
from typing import Iterator, List

from algorithms.backtracking.base import BacktrackingGenerator
from algorithms.base import AlgorithmKind, require_int
from algorithms.stats import StatsCollector
from algorithms.step import BoardState, Step, StepBuilder, Trace

logger = logging.getLogger(__name__)

EMPTY = 0
QUEEN = 1


# ---------------------------------------------------------------------------
# Pseudocode
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def solve_n_queens(n):",                        # 0
    "    board ← n × n empty squares",               # 1
    "    place(board, row=0)",                       # 2
    "def place(board, row):",                        # 3
    "    if row == n: record solution; return",      # 4
    "    for col in 0 … n-1:",                       # 5
    "        if is_safe(board, row, col):",          # 6
    "            board[row][col] ← queen",           # 7
    "            place(board, row + 1)",             # 8
    "            board[row][col] ← empty",           # 9
    "    return   # keep searching",                 # 10
]


# ---------------------------------------------------------------------------
# Feasibility
# ---------------------------------------------------------------------------
def is_safe(board: List[List[int]], row: int, col: int) -> bool:
    """No queen above in the same column or on either upper diagonal."""
    n = len(board)
    for i in range(row):
        if board[i][col] == QUEEN:
            return False
    i, j = row, col
    while i >= 0 and j >= 0:
        if board[i][j] == QUEEN:
            return False
        i, j = i - 1, j - 1
    i, j = row, col
    while i >= 0 and j < n:
        if board[i][j] == QUEEN:
            return False
        i, j = i - 1, j + 1
    return True


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
class NQueens(BacktrackingGenerator):
    kind       = AlgorithmKind.NQUEENS
    label      = "N-Queens"
    pseudocode = PSEUDOCODE

    def generate(self, board_size: int) -> Trace:
        n = require_int(board_size, "board_size", minimum=1)
        logger.info("Solving N-Queens for a %dx%d board", n, n)

        stats = StatsCollector()
        solutions: List[BoardState] = []
        board = [[EMPTY] * n for _ in range(n)]
        empty = BoardState.capture(board)

        sb = StepBuilder()
        sb.description = f"Starting to solve N-Queens for a {n}×{n} board."
        sb.problem_state = empty
        sb.highlight(0, 1, 2)
        intro = sb.build()

        def final() -> Step:
            sb_fin = StepBuilder()
            if solutions:
                sb_fin.description = (
                    f"N-Queens complete! Found {len(solutions)} solution(s)."
                )
                sb_fin.problem_state = solutions[0]
                sb_fin.attach_solutions(solutions)
            else:
                sb_fin.description = "N-Queens complete! No solutions found."
                sb_fin.problem_state = empty
            sb_fin.highlight(10)
            return sb_fin.build(is_final=True)

        return self._assemble(intro, self._place(board, 0, stats, solutions), stats, solutions, final)

    def _place(
        self,
        board: List[List[int]],
        row: int,
        stats: StatsCollector,
        solutions: List[BoardState],
    ) -> Iterator[Step]:
        n = len(board)

        # -- every row holds a queen --
        if row >= n:
            number = stats.solution()
            solution = BoardState.capture(board, solution_number=number, is_valid=True)
            solutions.append(solution)

            sb = StepBuilder()
            sb.description = f"Solution #{number} found! Placed {n} queens without conflicts."
            sb.problem_state = solution
            sb.highlight(4)
            sb.attach_solutions(solutions)
            yield sb.build()
            return

        for col in range(n):
            stats.explore()

            sb = StepBuilder()
            sb.description = f"Trying to place a queen at row {row}, column {col}."
            sb.problem_state = BoardState.capture(board, current_row=row, current_col=col)
            sb.highlight(5, 6)
            yield sb.build()

            if not is_safe(board, row, col):
                sb_r = StepBuilder()
                sb_r.description = f"Cannot place a queen at row {row}, column {col} due to conflicts."
                sb_r.problem_state = BoardState.capture(
                    board, current_row=row, current_col=col, is_valid=False
                )
                sb_r.highlight(6)
                yield sb_r.build()
                continue

            board[row][col] = QUEEN
            sb_a = StepBuilder()
            sb_a.description = (
                f"Placed a queen at row {row}, column {col}. Moving to row {row + 1}."
            )
            sb_a.problem_state = BoardState.capture(
                board, current_row=row, current_col=col, is_valid=True
            )
            sb_a.highlight(7, 8)
            yield sb_a.build()

            yield from self._place(board, row + 1, stats, solutions)

            board[row][col] = EMPTY
            stats.backtrack()
            sb_b = StepBuilder()
            sb_b.description = f"Backtracking: removing the queen from row {row}, column {col}."
            sb_b.problem_state = BoardState.capture(
                board, current_row=row, current_col=col, is_valid=False
            )
            sb_b.highlight(9)
            yield sb_b.build()
