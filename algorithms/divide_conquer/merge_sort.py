"""
merge_sort.py — Merge Sort
============================
Top-down merge sort.  Ties are taken from the left run, so the sort is
stable.

Stage table:
  • initial array
  • one "divide" frame per internal call   (LEFT / RIGHT halves, mid marker)
  • one "merge" frame per internal call    (merged range tagged SORTED)
  • final frame, everything SORTED
"""

from typing import Iterator, List, Sequence

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
from algorithms.step import ArrayState, ElementStatus, Number

PSEUDOCODE: List[str] = [
    "def merge_sort(a, lo, hi):",                          # 0
    "    if lo >= hi: return",                             # 1
    "    mid ← (lo + hi) // 2",                            # 2
    "    merge_sort(a, lo, mid)",                          # 3
    "    merge_sort(a, mid + 1, hi)",                      # 4
    "    merge(a, lo, mid, hi)",                           # 5
    "def merge(a, lo, mid, hi):",                          # 6
    "    take the smaller head, left run on ties",         # 7
    "    copy whatever remains of either run",             # 8
]


def merge_runs(left: Sequence[Number], right: Sequence[Number]) -> List[Number]:
    merged: List[Number] = []
    i = j = 0
    while i < len(left) and j < len(right):
        if left[i] <= right[j]:
            merged.append(left[i])
            i += 1
        else:
            merged.append(right[j])
            j += 1
    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged


class MergeSort(DivideConquerAlgorithm):
    kind       = AlgorithmKind.MERGE_SORT
    label      = "Merge Sort"
    pseudocode = PSEUDOCODE

    def prepare(self, values, rng) -> ArrayState:
        return ArrayState.from_values(require_values(values))

    # ------------------------------------------------------------------
    # Ground truth
    # ------------------------------------------------------------------
    def solve(self, initial, tree, stats):
        values = initial.values
        tree.root(values)
        tree.subdivide(values, 0, len(values) - 1, 0, ROOT_ID)

        def sort(lo: int, hi: int, call_id: str) -> List[Number]:
            stats.explore()
            if lo >= hi:
                out = values[lo:hi + 1]
            else:
                mid = (lo + hi) // 2
                out = merge_runs(
                    sort(lo, mid, f"{call_id}-left"),
                    sort(mid + 1, hi, f"{call_id}-right"),
                )
                tree.set_result(f"{call_id}-merge", result=out)
            tree.set_result(call_id, result=out)
            return out

        return tuple(sort(0, len(values) - 1, ROOT_ID))

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def derive(self, initial: ArrayState) -> Iterator[Stage]:
        work = list(initial.values)
        n = len(work)
        yield frame(work, paint(n), f"Initial array: {fmt(work)}", (0,))
        yield from self._split(work, 0, n - 1)
        yield frame(
            work,
            paint(n, (range(n), ElementStatus.SORTED)),
            f"Array sorted: {fmt(work)}",
            (5,),
        )

    def _split(self, work: List[Number], lo: int, hi: int) -> Iterator[Stage]:
        if lo >= hi:
            return
        n = len(work)
        mid = (lo + hi) // 2
        span = tuple(range(lo, hi + 1))
        yield frame(
            work,
            paint(n, (range(lo, mid + 1), ElementStatus.LEFT), (range(mid + 1, hi + 1), ElementStatus.RIGHT)),
            f"Dividing {fmt(work[lo:hi + 1])} into {fmt(work[lo:mid + 1])} and {fmt(work[mid + 1:hi + 1])}.",
            (1, 2, 3, 4),
            active_indices=span,
            mid_point=mid,
        )
        yield from self._split(work, lo, mid)
        yield from self._split(work, mid + 1, hi)

        left, right = work[lo:mid + 1], work[mid + 1:hi + 1]
        work[lo:hi + 1] = merge_runs(left, right)
        yield frame(
            work,
            paint(n, (span, ElementStatus.SORTED)),
            f"Merged {fmt(left)} and {fmt(right)} into {fmt(work[lo:hi + 1])}.",
            (5, 6, 7, 8),
            active_indices=span,
        )

    def reconcile(self, result, final) -> bool:
        return list(result) == final.values
