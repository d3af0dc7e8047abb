"""
count_inversions.py — Counting Inversions
===========================================
Counts pairs i < j with a[i] > a[j] by piggy-backing on merge sort:
whenever the right run's head is strictly smaller than the left run's
head, it forms an inversion with every element still left in the left run.

The running total is carried in each frame's overlay under "inversions".
"""

from typing import Generator, List, Sequence, Tuple

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
    "def count(a, lo, hi):",                                   # 0
    "    if lo >= hi: return 0",                               # 1
    "    mid ← (lo + hi) // 2",                                # 2
    "    inv ← count(a, lo, mid) + count(a, mid + 1, hi)",     # 3
    "    return inv + merge_count(a, lo, mid, hi)",            # 4
    "def merge_count(a, lo, mid, hi):",                        # 5
    "    if right[j] < left[i]:",                              # 6
    "        inv += len(left) - i   # all remaining left > right[j]", # 7
    "    merge as in merge sort; return inv",                  # 8
]


def merge_count(left: Sequence[Number], right: Sequence[Number]) -> Tuple[List[Number], int]:
    merged: List[Number] = []
    inversions = 0
    i = j = 0
    while i < len(left) and j < len(right):
        if right[j] < left[i]:
            inversions += len(left) - i
            merged.append(right[j])
            j += 1
        else:
            merged.append(left[i])
            i += 1
    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged, inversions


def brute_force_inversions(values: Sequence[Number]) -> int:
    n = len(values)
    return sum(1 for i in range(n) for j in range(i + 1, n) if values[i] > values[j])


class CountInversions(DivideConquerAlgorithm):
    kind       = AlgorithmKind.COUNT_INVERSIONS
    label      = "Count Inversions"
    pseudocode = PSEUDOCODE

    def prepare(self, values, rng) -> ArrayState:
        return ArrayState.from_values(require_values(values), overlay=(("inversions", 0),))

    def solve(self, initial, tree, stats) -> int:
        values = initial.values
        tree.root(values)
        tree.subdivide(values, 0, len(values) - 1, 0, ROOT_ID)

        def count(lo: int, hi: int, call_id: str) -> Tuple[List[Number], int]:
            stats.explore()
            if lo >= hi:
                out, total = values[lo:hi + 1], 0
            else:
                mid = (lo + hi) // 2
                left, left_inv = count(lo, mid, f"{call_id}-left")
                right, right_inv = count(mid + 1, hi, f"{call_id}-right")
                out, split_inv = merge_count(left, right)
                total = left_inv + right_inv + split_inv
                tree.set_result(f"{call_id}-merge", result=out, value=split_inv)
            tree.set_result(call_id, result=out, value=total)
            return out, total

        _, total = count(0, len(values) - 1, ROOT_ID)
        return total

    def derive(self, initial: ArrayState):
        work = list(initial.values)
        n = len(work)
        yield frame(
            work, paint(n), f"Counting inversions in {fmt(work)}", (0,),
            overlay=(("inversions", 0),),
        )
        total = yield from self._split(work, 0, n - 1, 0)
        yield frame(
            work,
            paint(n, (range(n), ElementStatus.SORTED)),
            f"Total inversions: {total}",
            (4,),
            overlay=(("inversions", total),),
        )

    def _split(self, work: List[Number], lo: int, hi: int, running: int) -> Generator[Stage, None, int]:
        """Yields frames; returns the running total after this range is merged."""
        if lo >= hi:
            return running
        n = len(work)
        mid = (lo + hi) // 2
        span = tuple(range(lo, hi + 1))
        yield frame(
            work,
            paint(n, (range(lo, mid + 1), ElementStatus.LEFT), (range(mid + 1, hi + 1), ElementStatus.RIGHT)),
            f"Dividing {fmt(work[lo:hi + 1])} at index {mid}.",
            (1, 2, 3),
            active_indices=span,
            mid_point=mid,
            overlay=(("inversions", running),),
        )
        running = yield from self._split(work, lo, mid, running)
        running = yield from self._split(work, mid + 1, hi, running)

        left, right = work[lo:mid + 1], work[mid + 1:hi + 1]
        merged, split_inv = merge_count(left, right)
        work[lo:hi + 1] = merged
        running += split_inv
        yield frame(
            work,
            paint(n, (span, ElementStatus.SORTED)),
            f"Merged {fmt(left)} and {fmt(right)}: {split_inv} split inversion(s), "
            f"{running} so far.",
            (5, 6, 7, 8),
            active_indices=span,
            overlay=(("inversions", running),),
        )
        return running

    def reconcile(self, result, final) -> bool:
        return final.annotation("inversions") == result
