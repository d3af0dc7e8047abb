"""
step.py — Algorithm Step Snapshot
==================================
Every trace generator produces an ordered list of Step objects.
A Step is a frozen-in-time picture of everything a renderer needs to
draw one frame:

    • The algorithm-specific problem state (board, coloring, subset,
      tagged array, matrices)
    • Every solution discovered so far (multi-solution algorithms)
    • Which lines of reference pseudocode are executing
    • A plain-English narration of what just happened

Design decisions:
  - Step and every snapshot are frozen dataclasses whose containers are
    tuples.  A snapshot is a deep, independent copy of the working data
    at the instant it was emitted; later backtracking can never reach
    back and alter it.
  - `problem_state` is a tagged union: exactly one snapshot type, each
    carrying a `kind` tag for renderers and serialisation.
  - Solutions compare structurally.  `solution_key()` serialises the
    configuration and is the dedup key used by the aggregator.
  - RecursiveCall lives here too: it is the flattened, addressable record
    of one divide-and-conquer frame (see divide_conquer/tree.py).
"""

import json
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from algorithms.stats import Statistics

Number = Union[int, float]
Matrix = Tuple[Tuple[Number, ...], ...]


def _grid(rows: Iterable[Iterable[Number]]) -> Matrix:
    return tuple(tuple(r) for r in rows)


# ---------------------------------------------------------------------------
# Element tags for array presentations
# ---------------------------------------------------------------------------
class ElementStatus(str, Enum):
    NORMAL    = "normal"
    COMPARING = "comparing"
    PIVOT     = "pivot"
    LEFT      = "left"
    RIGHT     = "right"
    SORTED    = "sorted"
    CURRENT   = "current"


# ---------------------------------------------------------------------------
# Backtracking snapshots
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class BoardState:
    """N-Queens board.  `squares[r][c]` is 1 where a queen stands."""

    kind: ClassVar[str] = "board"

    size:            int
    squares:         Matrix
    current_row:     Optional[int]  = None
    current_col:     Optional[int]  = None
    is_valid:        Optional[bool] = None
    solution_number: Optional[int]  = None

    @classmethod
    def capture(cls, board: Sequence[Sequence[int]], **kwargs) -> "BoardState":
        return cls(size=len(board), squares=_grid(board), **kwargs)

    @property
    def queens(self) -> List[Tuple[int, int]]:
        return [(r, c) for r, row in enumerate(self.squares) for c, v in enumerate(row) if v]

    def canonical(self) -> Any:
        return [list(row) for row in self.squares]


@dataclass(frozen=True)
class ColoringState:
    """Graph coloring assignment.  Color 0 means uncolored."""

    kind: ClassVar[str] = "coloring"

    nodes:           int
    edges:           Tuple[Tuple[int, int], ...]
    colors:          Tuple[int, ...]
    max_colors:      int
    current_node:    Optional[int] = None
    solution_number: Optional[int] = None

    def canonical(self) -> Any:
        return list(self.colors)


@dataclass(frozen=True)
class SubsetState:
    kind: ClassVar[str] = "subset"

    values:           Tuple[int, ...]
    target:           int
    current_sum:      int
    current_index:    int
    included_indices: Tuple[int, ...] = ()
    current_subset:   Tuple[int, ...] = ()
    solution_number:  Optional[int]   = None

    def canonical(self) -> Any:
        return list(self.included_indices)


# ---------------------------------------------------------------------------
# Divide & conquer snapshots
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ArrayElement:
    value:  Number
    status: ElementStatus = ElementStatus.NORMAL


@dataclass(frozen=True)
class ArrayState:
    """
    Attributes:
        elements       : (value, status) per position.
        stage          : Index of this frame in the presentation table.
        description    : Narration for this stage.
        active_indices : Positions the renderer should emphasise.
        pivot_index / left_pointer / right_pointer / mid_point
                       : Optional markers for quick sort / binary search.
        overlay        : Free-form (key, value) pairs, e.g. the running
                         inversion count or the search target.
    """

    kind: ClassVar[str] = "array"

    elements:       Tuple[ArrayElement, ...]
    stage:          int                         = 0
    description:    str                         = ""
    active_indices: Tuple[int, ...]             = ()
    pivot_index:    Optional[int]               = None
    left_pointer:   Optional[int]               = None
    right_pointer:  Optional[int]               = None
    mid_point:      Optional[int]               = None
    overlay:        Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def from_values(cls, values: Iterable[Number], **kwargs) -> "ArrayState":
        return cls(elements=tuple(ArrayElement(v) for v in values), **kwargs)

    @property
    def values(self) -> List[Number]:
        return [e.value for e in self.elements]

    @property
    def statuses(self) -> List[ElementStatus]:
        return [e.status for e in self.elements]

    def annotation(self, key: str, default: Any = None) -> Any:
        for k, v in self.overlay:
            if k == key:
                return v
        return default

    def canonical(self) -> Any:
        return {"values": self.values, "statuses": [s.value for s in self.statuses]}


@dataclass(frozen=True)
class MatrixState:
    """Strassen multiplication frame: operands, products so far, result."""

    kind: ClassVar[str] = "matrix"

    a:             Matrix
    b:             Matrix
    products:      Tuple[Tuple[str, Matrix], ...] = ()
    result:        Optional[Matrix]               = None
    active:        Optional[str]                  = None
    stage:         int                            = 0
    description:   str                            = ""
    quadrant_size: int                            = 0

    @property
    def size(self) -> int:
        return len(self.a)

    def product(self, name: str) -> Optional[Matrix]:
        for k, m in self.products:
            if k == name:
                return m
        return None

    def canonical(self) -> Any:
        return {
            "a":      [list(r) for r in self.a],
            "b":      [list(r) for r in self.b],
            "result": [list(r) for r in self.result] if self.result is not None else None,
        }


ProblemState = Union[BoardState, ColoringState, SubsetState, ArrayState, MatrixState]


def solution_key(state: ProblemState) -> str:
    """Canonical serialised configuration; equal keys mean equal solutions."""
    return json.dumps(
        {"kind": state.kind, "config": state.canonical()},
        sort_keys=True,
        separators=(",", ":"),
    )


# ---------------------------------------------------------------------------
# Recursion tree record
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class RecursiveCall:
    """
    One divide-and-conquer invocation, flattened into an arena record.

    Attributes:
        id          : Path-derived id ("root", "root-left", "root-merge", …).
        parent_id   : Id of the caller; None only for the root.
        level       : Depth.  Pseudo-nodes (merge / partition) sit at +0.5.
        range_start : First index of the subproblem (inclusive).
        range_end   : Last index of the subproblem (inclusive).
        array       : The subproblem's data slice.
        pivot       : Pivot value (quick sort / quick select).
        result      : Values this call hands back to its parent.
        value       : Scalar return (inversion count, index, candidate, kth).
        role        : "call", "merge", "partition", "compare", "found", "product".
    """

    id:          str
    parent_id:   Optional[str]
    level:       float
    range_start: int
    range_end:   int
    array:       Tuple[Number, ...]           = ()
    pivot:       Optional[Number]             = None
    result:      Optional[Tuple[Number, ...]] = None
    value:       Optional[Number]             = None
    role:        str                          = "call"


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Step:
    """
    Attributes:
        step_number       : 0-based index of this step in the trace.
        description       : Human-readable narration of what just happened.
        problem_state     : Exactly one algorithm-specific snapshot.
        all_solutions     : Every solution found up to and including this step
                            (None when the step carries no solution payload).
        highlighted_lines : 0-based indices into the generator's PSEUDOCODE.
        is_final          : True on the terminal step of the trace.
    """

    step_number:       int                                   = 0
    description:       str                                   = ""
    problem_state:     Optional[ProblemState]                = None
    all_solutions:     Optional[Tuple[ProblemState, ...]]    = None
    highlighted_lines: Tuple[int, ...]                       = ()
    is_final:          bool                                  = False


# ---------------------------------------------------------------------------
# Convenience builder so generators don't have to spell out every kwarg
# ---------------------------------------------------------------------------
class StepBuilder:
    """
    Mutable scratch-pad that generators use to construct Steps cleanly.

    Usage inside a generator:
        sb = StepBuilder()
        sb.description = "Trying to place a queen at row 0, column 1."
        sb.problem_state = BoardState.capture(board, current_row=0, current_col=1)
        sb.highlight(5, 6)
        yield sb.build()
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.description:       str                          = ""
        self.problem_state:     Optional[ProblemState]       = None
        self.highlighted_lines: List[int]                    = []
        self.all_solutions:     Optional[List[ProblemState]] = None

    def highlight(self, *lines: int) -> "StepBuilder":
        self.highlighted_lines.extend(lines)
        return self

    def attach_solutions(self, solutions: Iterable[ProblemState]) -> "StepBuilder":
        self.all_solutions = list(solutions)
        return self

    def build(self, step_number: int = 0, is_final: bool = False) -> Step:
        return Step(
            step_number=step_number,
            description=self.description,
            problem_state=self.problem_state,
            all_solutions=tuple(self.all_solutions) if self.all_solutions is not None else None,
            highlighted_lines=tuple(self.highlighted_lines),
            is_final=is_final,
        )


def number_steps(steps: Iterable[Step]) -> Tuple[Step, ...]:
    """Stamp sequential step numbers and mark the last step final."""
    ordered = list(steps)
    last = len(ordered) - 1
    return tuple(
        replace(s, step_number=i, is_final=s.is_final or i == last)
        for i, s in enumerate(ordered)
    )


# ---------------------------------------------------------------------------
# Trace — the output of one generation run
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Trace:
    """
    Attributes:
        algorithm      : Registry key of the generator that produced this trace.
        steps          : The ordered, immutable Step list.
        statistics     : Frozen counters for the run.
        solutions      : Distinct solutions discovered (backtracking).
        recursion_tree : Flattened RecursiveCall arena (divide & conquer).
        initial_state  : Stage-0 presentation state (divide & conquer).
        result         : Ground-truth result of the computation.
    """

    algorithm:      str
    steps:          Tuple[Step, ...]
    statistics:     Statistics                 = field(default_factory=Statistics)
    solutions:      Tuple[ProblemState, ...]   = ()
    recursion_tree: Tuple[RecursiveCall, ...]  = ()
    initial_state:  Optional[ProblemState]     = None
    result:         Any                        = None

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def final_step(self) -> Optional[Step]:
        return self.steps[-1] if self.steps else None


# ---------------------------------------------------------------------------
# Serialisation (JSON-ready dicts for the HTTP layer)
# ---------------------------------------------------------------------------
def state_to_dict(state: Optional[ProblemState]) -> Optional[Dict[str, Any]]:
    if state is None:
        return None
    data = asdict(state)
    data["kind"] = state.kind
    if isinstance(state, ArrayState):
        data["elements"] = [{"value": e.value, "status": e.status.value} for e in state.elements]
        data["overlay"] = {k: v for k, v in state.overlay}
    elif isinstance(state, MatrixState):
        data["products"] = {k: [list(r) for r in m] for k, m in state.products}
    return data


def step_to_dict(step: Step) -> Dict[str, Any]:
    return {
        "step_number":       step.step_number,
        "description":       step.description,
        "problem_state":     state_to_dict(step.problem_state),
        "all_solutions":     (
            [state_to_dict(s) for s in step.all_solutions]
            if step.all_solutions is not None else None
        ),
        "highlighted_lines": list(step.highlighted_lines),
        "is_final":          step.is_final,
    }


def call_to_dict(call: RecursiveCall) -> Dict[str, Any]:
    return asdict(call)


def trace_to_dict(trace: Trace, include_steps: bool = True) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "algorithm":      trace.algorithm,
        "total_steps":    trace.total_steps,
        "statistics":     asdict(trace.statistics),
        "solutions":      [state_to_dict(s) for s in trace.solutions],
        "recursion_tree": [call_to_dict(c) for c in trace.recursion_tree],
        "initial_state":  state_to_dict(trace.initial_state),
        "result":         _jsonable(trace.result),
    }
    if include_steps:
        data["steps"] = [step_to_dict(s) for s in trace.steps]
    return data


def _jsonable(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_jsonable(v) for v in value]
    return value
