"""
quick_sort.py — Quick Sort (Lomuto partition)
===============================================
The pivot is always the last element of the active subrange.  Each
partition is recorded as a pseudo-node half a level below its call, with
one child per non-empty side.

Stage table:
  • initial array
  • per partition: a start frame, one frame per comparison against the
    pivot, and a frame placing the pivot at its final index
  • final frame, everything SORTED

Positions whose value is final (placed pivots, single-element ranges)
stay tagged SORTED in every later frame.
"""

from typing import Iterator, List, Set

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
    "def quick_sort(a, lo, hi):",                          # 0
    "    if lo >= hi: return",                             # 1
    "    p ← partition(a, lo, hi)",                        # 2
    "    quick_sort(a, lo, p - 1)",                        # 3
    "    quick_sort(a, p + 1, hi)",                        # 4
    "def partition(a, lo, hi):",                           # 5
    "    pivot ← a[hi];  i ← lo - 1",                      # 6
    "    for j in lo … hi - 1:",                           # 7
    "        if a[j] <= pivot: i += 1; swap a[i], a[j]",   # 8
    "    swap a[i + 1], a[hi];  return i + 1",             # 9
]


def lomuto_partition(work: List[Number], lo: int, hi: int) -> int:
    """Partition work[lo..hi] in place around work[hi]; return the pivot's index."""
    pivot = work[hi]
    i = lo - 1
    for j in range(lo, hi):
        if work[j] <= pivot:
            i += 1
            work[i], work[j] = work[j], work[i]
    work[i + 1], work[hi] = work[hi], work[i + 1]
    return i + 1


class QuickSort(DivideConquerAlgorithm):
    kind       = AlgorithmKind.QUICK_SORT
    label      = "Quick Sort"
    pseudocode = PSEUDOCODE

    def prepare(self, values, rng) -> ArrayState:
        return ArrayState.from_values(require_values(values))

    # ------------------------------------------------------------------
    # Ground truth
    # ------------------------------------------------------------------
    def solve(self, initial, tree, stats):
        work = list(initial.values)
        tree.root(work, pivot=work[-1] if len(work) > 1 else None)

        def sort(lo: int, hi: int, call_id: str, level: float) -> None:
            stats.explore()
            if lo < hi:
                pivot = work[hi]
                p = lomuto_partition(work, lo, hi)
                tree.add(
                    f"{call_id}-partition", call_id, level + 0.5,
                    lo, hi, work[lo:hi + 1], pivot=pivot, role="partition",
                )
                if lo <= p - 1:
                    child = f"{call_id}-left"
                    tree.add(child, call_id, level + 1, lo, p - 1, work[lo:p],
                             pivot=work[p - 1] if p - 1 > lo else None)
                    sort(lo, p - 1, child, level + 1)
                if p + 1 <= hi:
                    child = f"{call_id}-right"
                    tree.add(child, call_id, level + 1, p + 1, hi, work[p + 1:hi + 1],
                             pivot=work[hi] if hi > p + 1 else None)
                    sort(p + 1, hi, child, level + 1)
            tree.set_result(call_id, result=work[lo:hi + 1])

        sort(0, len(work) - 1, ROOT_ID, 0)
        return tuple(work)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def derive(self, initial: ArrayState) -> Iterator[Stage]:
        work = list(initial.values)
        n = len(work)
        settled: Set[int] = set()
        yield frame(work, paint(n), f"Initial array: {fmt(work)}", (0,))
        yield from self._sort(work, 0, n - 1, settled)
        yield frame(
            work,
            paint(n, (range(n), ElementStatus.SORTED)),
            f"Array sorted: {fmt(work)}",
            (0,),
        )

    def _sort(self, work: List[Number], lo: int, hi: int, settled: Set[int]) -> Iterator[Stage]:
        if lo > hi:
            return
        if lo == hi:
            settled.add(lo)
            return

        n = len(work)
        pivot = work[hi]
        yield frame(
            work,
            paint(n, (settled, ElementStatus.SORTED), (range(lo, hi + 1), ElementStatus.CURRENT),
                  ([hi], ElementStatus.PIVOT)),
            f"Partitioning {fmt(work[lo:hi + 1])} around pivot {pivot}.",
            (2, 5, 6),
            active_indices=tuple(range(lo, hi + 1)),
            pivot_index=hi,
            left_pointer=lo,
            right_pointer=hi,
        )

        boundary = lo - 1
        for j in range(lo, hi):
            if work[j] <= pivot:
                boundary += 1
                work[boundary], work[j] = work[j], work[boundary]
                focus = boundary
                text = f"{work[boundary]} <= pivot {pivot}: moved into the left partition."
            else:
                focus = j
                text = f"{work[j]} > pivot {pivot}: stays in the right partition."
            yield frame(
                work,
                paint(n, (settled, ElementStatus.SORTED),
                      (range(lo, boundary + 1), ElementStatus.LEFT),
                      (range(boundary + 1, j + 1), ElementStatus.RIGHT),
                      ([focus], ElementStatus.COMPARING),
                      ([hi], ElementStatus.PIVOT)),
                text,
                (7, 8),
                active_indices=(focus, hi),
                pivot_index=hi,
                left_pointer=boundary + 1,
                right_pointer=j,
            )

        p = boundary + 1
        work[p], work[hi] = work[hi], work[p]
        settled.add(p)
        yield frame(
            work,
            paint(n, (settled, ElementStatus.SORTED),
                  (range(lo, p), ElementStatus.LEFT),
                  (range(p + 1, hi + 1), ElementStatus.RIGHT),
                  ([p], ElementStatus.PIVOT)),
            f"Pivot {pivot} placed at index {p}.",
            (9,),
            active_indices=(p,),
            pivot_index=p,
        )
        yield from self._sort(work, lo, p - 1, settled)
        yield from self._sort(work, p + 1, hi, settled)

    def reconcile(self, result, final) -> bool:
        return list(result) == final.values
