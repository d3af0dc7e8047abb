"""
majority_element.py — Majority Element
========================================
Finds the value occurring more than n/2 times, if any.  A majority of a
range must be the majority of at least one half, so each call combines
the two half-candidates by counting them over its own range.

`ensure_majority=True` rewrites random positions of the input (with the
supplied rng) until one value holds a strict majority.
"""

from typing import Generator, List, Optional, Sequence

from algorithms.base import AlgorithmKind
from algorithms.divide_conquer.base import (
    DivideConquerAlgorithm,
    Stage,
    fmt,
    frame,
    paint,
    require_values,
)
from algorithms.divide_conquer.tree import ROOT_ID
from algorithms.inputs import force_majority
from algorithms.step import ArrayState, ElementStatus, Number

PSEUDOCODE: List[str] = [
    "def majority(a, lo, hi):",                                  # 0
    "    if lo == hi: return a[lo]",                             # 1
    "    mid ← (lo + hi) // 2",                                  # 2
    "    left ← majority(a, lo, mid)",                           # 3
    "    right ← majority(a, mid + 1, hi)",                      # 4
    "    if left == right: return left",                         # 5
    "    count left and right over a[lo..hi]",                   # 6
    "    return whichever occurs > (hi - lo + 1) / 2, else none",# 7
]


def combine(values: Sequence[Number], lo: int, hi: int,
            left: Optional[Number], right: Optional[Number]) -> Optional[Number]:
    if left == right:
        return left
    half = (hi - lo + 1) // 2
    segment = values[lo:hi + 1]
    for candidate in (left, right):
        if candidate is not None and segment.count(candidate) > half:
            return candidate
    return None


class MajorityElement(DivideConquerAlgorithm):
    kind       = AlgorithmKind.MAJORITY_ELEMENT
    label      = "Majority Element"
    pseudocode = PSEUDOCODE

    def prepare(self, values, rng, ensure_majority: bool = False) -> ArrayState:
        items = require_values(values)
        if ensure_majority:
            items = force_majority(items, rng)
        return ArrayState.from_values(items)

    def solve(self, initial, tree, stats) -> Optional[Number]:
        values = initial.values
        tree.root(values)
        tree.subdivide(values, 0, len(values) - 1, 0, ROOT_ID)

        def majority(lo: int, hi: int, call_id: str) -> Optional[Number]:
            stats.explore()
            if lo == hi:
                candidate = values[lo]
            else:
                mid = (lo + hi) // 2
                left = majority(lo, mid, f"{call_id}-left")
                right = majority(mid + 1, hi, f"{call_id}-right")
                candidate = combine(values, lo, hi, left, right)
                if candidate is not None:
                    tree.set_result(f"{call_id}-merge", value=candidate)
            if candidate is not None:
                tree.set_result(call_id, value=candidate)
            return candidate

        return majority(0, len(values) - 1, ROOT_ID)

    def derive(self, initial: ArrayState):
        values = initial.values
        n = len(values)
        yield frame(values, paint(n), f"Looking for a majority element in {fmt(values)}", (0,))
        winner = yield from self._walk(values, 0, n - 1)
        if winner is None:
            yield frame(
                values, paint(n), "No majority element: no value occurs more than n/2 times.",
                (7,), overlay=(("candidate", None),),
            )
            return
        hits = [i for i, v in enumerate(values) if v == winner]
        yield frame(
            values,
            paint(n, (hits, ElementStatus.SORTED)),
            f"Majority element is {winner} ({len(hits)} of {n}).",
            (5, 7),
            active_indices=tuple(hits),
            overlay=(("candidate", winner),),
        )

    def _walk(self, values: Sequence[Number], lo: int, hi: int) -> Generator[Stage, None, Optional[Number]]:
        if lo == hi:
            return values[lo]
        n = len(values)
        mid = (lo + hi) // 2
        yield frame(
            values,
            paint(n, (range(lo, mid + 1), ElementStatus.LEFT), (range(mid + 1, hi + 1), ElementStatus.RIGHT)),
            f"Dividing {fmt(values[lo:hi + 1])} at index {mid}.",
            (2, 3, 4),
            active_indices=tuple(range(lo, hi + 1)),
            mid_point=mid,
        )
        left = yield from self._walk(values, lo, mid)
        right = yield from self._walk(values, mid + 1, hi)
        candidate = combine(values, lo, hi, left, right)
        outcome = f"majority {candidate}" if candidate is not None else "no majority"
        hits = [i for i in range(lo, hi + 1) if candidate is not None and values[i] == candidate]
        yield frame(
            values,
            paint(n, (range(lo, mid + 1), ElementStatus.LEFT), (range(mid + 1, hi + 1), ElementStatus.RIGHT),
                  (hits, ElementStatus.CURRENT)),
            f"Combining {fmt(values[lo:hi + 1])}: left candidate {left}, "
            f"right candidate {right} → {outcome}.",
            (5, 6, 7),
            active_indices=tuple(range(lo, hi + 1)),
            overlay=(("candidate", candidate),),
        )
        return candidate

    def reconcile(self, result, final) -> bool:
        return final.annotation("candidate") == result
