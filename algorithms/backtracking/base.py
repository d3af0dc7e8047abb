"""
backtracking/base.py — Shared plumbing for backtracking generators
====================================================================
Each backtracking generator is an exhaustive, instrumented search written
as a recursive Python generator that yields Steps at every decision point:

    attempt → accepted | rejected
    accepted → (recurse) → backtrack
    complete assignment → solution   (search keeps going afterwards)

`BacktrackingGenerator` drains that search eagerly, brackets it with an
intro and a terminal Step, stamps step numbers and freezes the stats.
"""

import logging
from typing import Iterable, List

from algorithms.base import Family, TraceGenerator
from algorithms.stats import StatsCollector
from algorithms.step import ProblemState, Step, Trace, number_steps

logger = logging.getLogger(__name__)


class BacktrackingGenerator(TraceGenerator):
    family = Family.BACKTRACKING

    def _assemble(
        self,
        intro: Step,
        search: Iterable[Step],
        stats: StatsCollector,
        solutions: List[ProblemState],
        final,
    ) -> Trace:
        """
        Run `search` to completion between `intro` and the terminal step.

        `final` is called after the search with no arguments and returns the
        terminal Step, so it can narrate the finished counters.
        """
        steps = [intro]
        stats.start()
        steps.extend(search)
        stats.stop()
        steps.append(final())
        statistics = stats.freeze()

        logger.info(
            "%s: %d steps, %d states explored, %d backtracks, %d solution(s)",
            self.kind.value,
            len(steps),
            statistics.states_explored,
            statistics.backtracks,
            statistics.solutions_found,
        )
        return Trace(
            algorithm=self.kind.value,
            steps=number_steps(steps),
            statistics=statistics,
            solutions=tuple(solutions),
            initial_state=intro.problem_state,
        )
