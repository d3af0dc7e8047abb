"""
base.py — Trace Generator Interface
=====================================
Every algorithm family implements the same small capability surface:

    generate(**params)      → Trace           (eager, run-to-completion)
    state_at(trace, stage)  → ProblemState    (pure, clamps the stage)
    describe_steps(trace)   → List[str]       (narration per step)

The registry selects an implementation by `AlgorithmKind`, so the
engine and the HTTP layer never branch on algorithm names.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from algorithms.errors import ConfigurationError
from algorithms.step import ProblemState, Trace


class AlgorithmKind(str, Enum):
    NQUEENS          = "nqueens"
    GRAPH_COLORING   = "graph_coloring"
    SUBSET_SUM       = "subset_sum"
    MERGE_SORT       = "merge_sort"
    QUICK_SORT       = "quick_sort"
    BINARY_SEARCH    = "binary_search"
    MAJORITY_ELEMENT = "majority_element"
    COUNT_INVERSIONS = "count_inversions"
    STRASSEN         = "strassen"
    ORDER_STATISTICS = "order_statistics"


class Family(str, Enum):
    BACKTRACKING   = "backtracking"
    DIVIDE_CONQUER = "divide_conquer"


def require_int(value, name: str, minimum: Optional[int] = None) -> int:
    """Reject non-integers (and bools) and values below `minimum`."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", field=name)
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}", field=name)
    return value


def clamp_stage(stage: int, total: int) -> int:
    if total <= 0:
        return 0
    return max(0, min(stage, total - 1))


class TraceGenerator(ABC):
    kind:       AlgorithmKind
    label:      str
    family:     Family
    pseudocode: List[str] = []

    @abstractmethod
    def generate(self, **params) -> Trace:
        """Validate parameters, run the instrumented algorithm, return its trace."""

    def state_at(self, trace: Trace, stage: int) -> ProblemState:
        step = trace.steps[clamp_stage(stage, len(trace.steps))]
        return step.problem_state

    def describe_steps(self, trace: Trace) -> List[str]:
        return [s.description for s in trace.steps]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind.value}>"
