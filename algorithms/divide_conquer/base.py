"""
divide_conquer/base.py — Shared driver for divide-and-conquer generators
==========================================================================
Every divide-and-conquer generator keeps two independent representations:

  1. Ground truth — `solve()` runs the real recursive algorithm once,
     counts each call, and records the call tree through a
     RecursionTreeBuilder.
  2. Presentation — `derive()` rebuilds the stage table (tagged array or
     matrix frames) from the initial state alone.

`update_state(initial, stage)` reads from the stage table, which is a
pure function of the frozen initial state and is memoised on it (with
each value's type in the key, so [1] and [1.0] never share frames), so
seeking to stage 17 never replays stages 0–16 and two seeks to the same
stage return identical frames.
"""

import inspect
import logging
import random
from abc import abstractmethod
from dataclasses import dataclass, fields, is_dataclass, replace
from functools import lru_cache
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from algorithms.base import Family, TraceGenerator, clamp_stage
from algorithms.divide_conquer.tree import RecursionTreeBuilder
from algorithms.errors import ConfigurationError
from algorithms.stats import StatsCollector
from algorithms.step import (
    ArrayElement,
    ArrayState,
    ElementStatus,
    Number,
    ProblemState,
    Step,
    Trace,
    number_steps,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """One presentation frame plus the pseudocode lines it illustrates."""

    state: ProblemState
    lines: Tuple[int, ...] = ()


# ---------------------------------------------------------------------------
# Helpers shared by the array-based generators
# ---------------------------------------------------------------------------
def require_values(values: Any, field: str = "values") -> List[Number]:
    if values is None or isinstance(values, (str, bytes)):
        raise ConfigurationError(f"{field} must be a list of numbers", field=field)
    items = list(values)
    if not items:
        raise ConfigurationError(f"{field} must not be empty", field=field)
    for v in items:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ConfigurationError(f"{field} must contain numbers, got {v!r}", field=field)
    return items


def ordinal(n: int) -> str:
    """1 → '1st', 2 → '2nd', 11 → '11th', 23 → '23rd'."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def fmt(values: Iterable[Number]) -> str:
    return "[" + ", ".join(str(v) for v in values) + "]"


def paint(size: int, *groups) -> List[ElementStatus]:
    """
    Build a status list.  Each group is `(indices, status)`; later groups
    override earlier ones, everything else stays NORMAL.
    """
    statuses = [ElementStatus.NORMAL] * size
    for indices, status in groups:
        for i in indices:
            if 0 <= i < size:
                statuses[i] = status
    return statuses


def frame(
    values:      Sequence[Number],
    statuses:    Sequence[ElementStatus],
    description: str,
    lines:       Tuple[int, ...] = (),
    **markers,
) -> Stage:
    """Snapshot `values` (copied) with per-element tags into a Stage."""
    state = ArrayState(
        elements=tuple(ArrayElement(v, s) for v, s in zip(values, statuses)),
        description=description,
        **markers,
    )
    return Stage(state=state, lines=tuple(lines))


# ---------------------------------------------------------------------------
# Memoised stage table
# ---------------------------------------------------------------------------
def _typed(value: Any) -> Any:
    """Mirror of `value` with each leaf tagged by its type, so 1 and 1.0 key apart."""
    if isinstance(value, tuple):
        return tuple(_typed(v) for v in value)
    if is_dataclass(value):
        return (type(value), tuple(_typed(getattr(value, f.name)) for f in fields(value)))
    return (type(value), value)


@lru_cache(maxsize=128)
def _stage_table(algorithm_cls, key: Any, initial: ProblemState) -> Tuple[Stage, ...]:
    stages = list(algorithm_cls().derive(initial))
    return tuple(
        replace(s, state=replace(s.state, stage=i)) for i, s in enumerate(stages)
    )


class DivideConquerAlgorithm(TraceGenerator):
    """
    Subclasses implement:
        prepare(values, rng, **options) → initial state   (validation lives here)
        solve(initial, tree, stats)     → ground-truth result
        derive(initial)                 → Iterable[Stage]  (presentation)
    and may override `reconcile()` to cross-check the two.  Options a
    subclass's `prepare` does not name are rejected before it runs.
    """

    family = Family.DIVIDE_CONQUER

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    @abstractmethod
    def prepare(self, values, rng: random.Random, **options) -> ProblemState:
        ...

    @abstractmethod
    def solve(self, initial: ProblemState, tree: RecursionTreeBuilder, stats: StatsCollector) -> Any:
        ...

    @abstractmethod
    def derive(self, initial: ProblemState) -> Iterable[Stage]:
        ...

    def reconcile(self, result: Any, final: ProblemState) -> bool:
        return True

    def has_result(self, result: Any) -> bool:
        return result is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(self, values=None, rng: Optional[random.Random] = None, **options) -> Trace:
        rng = rng or random.Random()
        self._check_options(options)
        initial = self.prepare(values, rng, **options)
        logger.info("Generating %s trace", self.kind.value)

        stats = StatsCollector()
        builder = RecursionTreeBuilder()
        stats.start()
        result = self.solve(initial, builder, stats)
        stats.stop()
        if self.has_result(result):
            stats.solution()
        statistics = stats.freeze()
        tree = builder.build()

        stages = self.stages(initial)
        if not self.reconcile(result, stages[-1].state):
            logger.error(
                "%s: presentation disagrees with the computed result %r",
                self.kind.value, result,
            )

        steps = number_steps(
            Step(
                description=s.state.description,
                problem_state=s.state,
                highlighted_lines=s.lines,
            )
            for s in stages
        )
        logger.info(
            "%s: %d stages, %d recursive calls, %d tree nodes",
            self.kind.value, len(steps), statistics.states_explored, len(tree),
        )
        return Trace(
            algorithm=self.kind.value,
            steps=steps,
            statistics=statistics,
            recursion_tree=tree.calls,
            initial_state=initial,
            result=result,
        )

    def _check_options(self, options: dict) -> None:
        accepted = inspect.signature(self.prepare).parameters
        for name in options:
            if name not in accepted:
                raise ConfigurationError(
                    f"{self.kind.value} does not take option {name!r}", field=name,
                )

    def stages(self, initial: ProblemState) -> Tuple[Stage, ...]:
        return _stage_table(type(self), _typed(initial), initial)

    def update_state(self, initial: ProblemState, stage: int) -> ProblemState:
        """Presentation state at `stage`; out-of-range stages clamp to the ends."""
        table = self.stages(initial)
        return table[clamp_stage(stage, len(table))].state

    def state_at(self, trace: Trace, stage: int) -> ProblemState:
        return self.update_state(trace.initial_state, stage)

