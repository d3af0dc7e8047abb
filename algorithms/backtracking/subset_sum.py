"""
subset_sum.py — Subset Sum
============================
Finds every subset (by index) of a list of positive integers whose
elements add up to the target.  Each element is first included, then
excluded, so the include branch is always explored first.

Yields a Step at:
  1. Element included                →  recurse
  2. Sum overshoots / input exhausted  →  dead end
  3. Element popped                  →  BACKTRACK, try without it
  4. Sum hits the target             →  SOLUTION (search continues)

A branch stops as soon as its sum equals the target: values are positive,
so no extension of that subset can match as well.
"""

import logging
from typing import Iterator, List, Sequence

from algorithms.backtracking.base import BacktrackingGenerator
from algorithms.base import AlgorithmKind, require_int
from algorithms.errors import ConfigurationError
from algorithms.stats import StatsCollector
from algorithms.step import Step, StepBuilder, SubsetState, Trace

logger = logging.getLogger(__name__)


PSEUDOCODE: List[str] = [
    "def subset_sum(values, target):",                       # 0
    "    search(index=0, sum=0, subset=[])",                 # 1
    "def search(index, sum, subset):",                       # 2
    "    if sum == target: record subset; return",           # 3
    "    if sum > target or index == len(values): return",   # 4
    "    subset.append(values[index])",                      # 5
    "    search(index + 1, sum + values[index], subset)",    # 6
    "    subset.pop()",                                      # 7
    "    search(index + 1, sum, subset)",                    # 8
]


def validate_values(values: Sequence[int]) -> List[int]:
    if values is None or isinstance(values, (str, bytes)):
        raise ConfigurationError("values must be a list of integers", field="values")
    items = list(values)
    if not items:
        raise ConfigurationError("values must not be empty", field="values")
    for v in items:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ConfigurationError(f"values must be integers, got {v!r}", field="values")
        if v <= 0:
            raise ConfigurationError(f"values must be positive, got {v}", field="values")
    return items


class SubsetSum(BacktrackingGenerator):
    kind       = AlgorithmKind.SUBSET_SUM
    label      = "Subset Sum"
    pseudocode = PSEUDOCODE

    def generate(self, values: Sequence[int], target: int) -> Trace:
        items = validate_values(values)
        target = require_int(target, "target", minimum=1)
        logger.info("Searching subsets of %d values for sum %d", len(items), target)

        stats = StatsCollector()
        solutions: List[SubsetState] = []
        frozen_values = tuple(items)

        def snapshot(index: int, current_sum: int, chosen: List[int], **kwargs) -> SubsetState:
            return SubsetState(
                values=frozen_values,
                target=target,
                current_sum=current_sum,
                current_index=index,
                included_indices=tuple(chosen),
                current_subset=tuple(items[i] for i in chosen),
                **kwargs,
            )

        start = snapshot(0, 0, [])
        sb = StepBuilder()
        sb.description = (
            f"Starting to find subsets of [{', '.join(map(str, items))}] that sum to {target}."
        )
        sb.problem_state = start
        sb.highlight(0, 1)
        intro = sb.build()

        def final() -> Step:
            sb_fin = StepBuilder()
            if solutions:
                sb_fin.description = (
                    f"Subset Sum complete! Found {len(solutions)} subset(s) that sum to {target}."
                )
                sb_fin.problem_state = solutions[0]
                sb_fin.attach_solutions(solutions)
            else:
                sb_fin.description = f"Subset Sum complete! No subset sums to {target}."
                sb_fin.problem_state = start
            sb_fin.highlight(3)
            return sb_fin.build(is_final=True)

        search = self._search(items, target, 0, 0, [], stats, solutions, snapshot)
        return self._assemble(intro, search, stats, solutions, final)

    def _search(
        self,
        items: List[int],
        target: int,
        index: int,
        current_sum: int,
        chosen: List[int],
        stats: StatsCollector,
        solutions: List[SubsetState],
        snapshot,
    ) -> Iterator[Step]:
        stats.explore()

        if current_sum == target:
            number = stats.solution()
            solution = snapshot(index, current_sum, chosen, solution_number=number)
            solutions.append(solution)

            sb = StepBuilder()
            sb.description = (
                f"Solution #{number} found! Subset "
                f"[{', '.join(map(str, solution.current_subset))}] sums to {target}."
            )
            sb.problem_state = solution
            sb.highlight(3)
            sb.attach_solutions(solutions)
            yield sb.build()
            return

        if current_sum > target or index >= len(items):
            sb_r = StepBuilder()
            if current_sum > target:
                sb_r.description = f"Current sum {current_sum} exceeds target {target}. Backtracking."
            else:
                sb_r.description = "Reached the end of the set without hitting the target. Backtracking."
            sb_r.problem_state = snapshot(index, current_sum, chosen)
            sb_r.highlight(4)
            yield sb_r.build()
            return

        value = items[index]
        chosen.append(index)
        sb_i = StepBuilder()
        sb_i.description = (
            f"Including element {value} at index {index}. "
            f"Current sum: {current_sum + value}."
        )
        sb_i.problem_state = snapshot(index, current_sum + value, chosen)
        sb_i.highlight(5, 6)
        yield sb_i.build()

        yield from self._search(
            items, target, index + 1, current_sum + value, chosen, stats, solutions, snapshot
        )

        chosen.pop()
        stats.backtrack()
        sb_e = StepBuilder()
        sb_e.description = (
            f"Excluding element {value} at index {index}. Current sum: {current_sum}."
        )
        sb_e.problem_state = snapshot(index, current_sum, chosen)
        sb_e.highlight(7, 8)
        yield sb_e.build()

        yield from self._search(
            items, target, index + 1, current_sum, chosen, stats, solutions, snapshot
        )
