"""
solutions.py — Solution Aggregator
====================================
Running, de-duplicated set of the solutions revealed during playback.

Every Step carries its own independent copies of the solutions found so
far, so identity comparison is useless: two solutions are the same iff
their `solution_key()` (canonical JSON of the configuration) matches.

Folding the same Step twice (step back, step forward again) adds nothing.
Insertion order is the order in which solutions were first revealed.
"""

import logging
from collections import OrderedDict
from typing import Iterable, Optional, Tuple

from algorithms.step import ProblemState, Step, solution_key

logger = logging.getLogger(__name__)


class SolutionAggregator:

    def __init__(self):
        self._by_key: "OrderedDict[str, ProblemState]" = OrderedDict()

    def merge(self, solutions: Optional[Iterable[ProblemState]]) -> int:
        """Add every solution not already present.  Returns how many were new."""
        if not solutions:
            return 0
        added = 0
        for solution in solutions:
            key = solution_key(solution)
            if key not in self._by_key:
                self._by_key[key] = solution
                added += 1
        if added:
            logger.debug("Aggregated %d new solution(s), %d total", added, len(self._by_key))
        return added

    def fold(self, step: Optional[Step]) -> int:
        if step is None:
            return 0
        return self.merge(step.all_solutions)

    def reset(self) -> None:
        self._by_key.clear()

    @property
    def solutions(self) -> Tuple[ProblemState, ...]:
        return tuple(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, solution: ProblemState) -> bool:
        return solution_key(solution) in self._by_key

    def __repr__(self) -> str:
        return f"SolutionAggregator(solutions={len(self._by_key)})"
