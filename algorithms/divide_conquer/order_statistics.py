"""
order_statistics.py — k-th Smallest (QuickSelect)
===================================================
Selects the k-th smallest element (k is 1-based) by partitioning around
the last element and recursing only into the side that holds index k-1.
"""

import logging
from typing import Iterator, List

from algorithms.base import AlgorithmKind, require_int
from algorithms.divide_conquer.base import (
    DivideConquerAlgorithm,
    Stage,
    fmt,
    frame,
    ordinal,
    paint,
    require_values,
)
from algorithms.divide_conquer.quick_sort import lomuto_partition
from algorithms.divide_conquer.tree import ROOT_ID
from algorithms.errors import ConfigurationError
from algorithms.step import ArrayState, ElementStatus, Number

logger = logging.getLogger(__name__)

PSEUDOCODE: List[str] = [
    "def select(a, lo, hi, k):",                           # 0
    "    if lo == hi: return a[lo]",                       # 1
    "    p ← partition(a, lo, hi)   # pivot = a[hi]",      # 2
    "    if k == p: return a[p]",                          # 3
    "    if k < p: return select(a, lo, p - 1, k)",        # 4
    "    return select(a, p + 1, hi, k)",                  # 5
]


class OrderStatistics(DivideConquerAlgorithm):
    kind       = AlgorithmKind.ORDER_STATISTICS
    label      = "Order Statistics (QuickSelect)"
    pseudocode = PSEUDOCODE

    def prepare(self, values, rng, k=None) -> ArrayState:
        items = require_values(values)
        if k is None:
            k = rng.randint(1, len(items))
            logger.debug("Drew k=%d for %d values", k, len(items))
        else:
            k = require_int(k, "k", minimum=1)
            if k > len(items):
                raise ConfigurationError(f"k must be at most {len(items)}, got {k}", field="k")
        return ArrayState.from_values(items, overlay=(("k", k),))

    # ------------------------------------------------------------------
    # Ground truth
    # ------------------------------------------------------------------
    def solve(self, initial, tree, stats) -> Number:
        work = list(initial.values)
        target = initial.annotation("k") - 1
        tree.root(work)

        def select(lo: int, hi: int, call_id: str, level: float) -> Number:
            stats.explore()
            if lo == hi:
                tree.set_result(call_id, value=work[lo], role="found")
                return work[lo]
            pivot = work[hi]
            p = lomuto_partition(work, lo, hi)
            tree.add(
                f"{call_id}-partition", call_id, level + 0.5,
                lo, hi, work[lo:hi + 1], pivot=pivot, role="partition",
            )
            if target == p:
                tree.set_result(call_id, value=work[p], role="found")
                return work[p]
            if target < p:
                child, c_lo, c_hi = f"{call_id}-left", lo, p - 1
            else:
                child, c_lo, c_hi = f"{call_id}-right", p + 1, hi
            tree.add(child, call_id, level + 1, c_lo, c_hi, work[c_lo:c_hi + 1])
            value = select(c_lo, c_hi, child, level + 1)
            tree.set_result(call_id, value=value)
            return value

        return select(0, len(work) - 1, ROOT_ID, 0)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def derive(self, initial: ArrayState) -> Iterator[Stage]:
        work = list(initial.values)
        n = len(work)
        k = initial.annotation("k")
        target = k - 1
        overlay = (("k", k),)

        yield frame(
            work, paint(n), f"Finding the {ordinal(k)} smallest element of {fmt(work)}",
            (0,), overlay=overlay,
        )

        lo, hi = 0, n - 1
        while lo < hi:
            pivot = work[hi]
            yield frame(
                work,
                paint(n, (range(lo, hi + 1), ElementStatus.CURRENT), ([hi], ElementStatus.PIVOT)),
                f"Partitioning {fmt(work[lo:hi + 1])} around pivot {pivot}.",
                (2,),
                active_indices=tuple(range(lo, hi + 1)),
                pivot_index=hi,
                left_pointer=lo,
                right_pointer=hi,
                overlay=overlay,
            )

            boundary = lo
            for j in range(lo, hi):
                if work[j] <= pivot:
                    work[boundary], work[j] = work[j], work[boundary]
                    boundary += 1
            work[boundary], work[hi] = work[hi], work[boundary]
            p = boundary

            if target == p:
                break
            if target < p:
                text = f"Pivot {pivot} lands at index {p}; index {target} is to its left."
                lines, next_range = (3, 4), (lo, p - 1)
            else:
                text = f"Pivot {pivot} lands at index {p}; index {target} is to its right."
                lines, next_range = (3, 5), (p + 1, hi)
            yield frame(
                work,
                paint(n, (range(lo, p), ElementStatus.LEFT), (range(p + 1, hi + 1), ElementStatus.RIGHT),
                      ([p], ElementStatus.PIVOT)),
                text,
                lines,
                active_indices=tuple(range(next_range[0], next_range[1] + 1)),
                pivot_index=p,
                overlay=overlay,
            )
            lo, hi = next_range

        answer = work[target]
        yield frame(
            work,
            paint(n, ([target], ElementStatus.SORTED)),
            f"The {ordinal(k)} smallest element is {answer}.",
            (1, 3),
            active_indices=(target,),
            pivot_index=target,
            overlay=overlay + (("kth", answer),),
        )

    def reconcile(self, result, final) -> bool:
        return final.annotation("kth") == result
