"""
binary_search.py — Binary Search
==================================
The input is sorted first.  The target is either supplied explicitly or
drawn uniformly from the sorted values with the caller's `random.Random`;
an explicit target that is absent ends in a "not found" frame.

With duplicates the first probe that hits the target wins, so the search
always terminates with one valid index.

Overlay keys: "target" on every frame, "found_index" on the last one
(None when the target is absent).
"""

import logging
from typing import Iterator, List, Optional

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
from algorithms.errors import ConfigurationError
from algorithms.step import ArrayState, ElementStatus

logger = logging.getLogger(__name__)

PSEUDOCODE: List[str] = [
    "def binary_search(a, target, lo, hi):",               # 0
    "    if lo > hi: return NOT_FOUND",                    # 1
    "    mid ← (lo + hi) // 2",                            # 2
    "    if a[mid] == target: return mid",                 # 3
    "    if a[mid] < target:",                             # 4
    "        return binary_search(a, target, mid + 1, hi)",# 5
    "    return binary_search(a, target, lo, mid - 1)",    # 6
]


class BinarySearch(DivideConquerAlgorithm):
    kind       = AlgorithmKind.BINARY_SEARCH
    label      = "Binary Search"
    pseudocode = PSEUDOCODE

    def prepare(self, values, rng, target=None) -> ArrayState:
        items = sorted(require_values(values))
        if target is None:
            target = rng.choice(items)
            logger.debug("Drew target %r from %d values", target, len(items))
        elif isinstance(target, bool) or not isinstance(target, (int, float)):
            raise ConfigurationError(f"target must be a number, got {target!r}", field="target")
        return ArrayState.from_values(items, overlay=(("target", target),))

    # ------------------------------------------------------------------
    # Ground truth
    # ------------------------------------------------------------------
    def solve(self, initial, tree, stats) -> Optional[int]:
        values = initial.values
        target = initial.annotation("target")
        last = len(values) - 1
        tree.root(values, pivot=values[last // 2], role="compare")

        def search(lo: int, hi: int, call_id: str, level: float) -> Optional[int]:
            stats.explore()
            mid = (lo + hi) // 2
            if values[mid] == target:
                tree.set_result(call_id, value=mid, role="found")
                return mid
            if values[mid] < target:
                side, c_lo, c_hi = "right", mid + 1, hi
            else:
                side, c_lo, c_hi = "left", lo, mid - 1
            if c_lo > c_hi:
                tree.set_result(call_id, role="missing")
                return None
            child = f"{call_id}-{side}"
            tree.add(
                child, call_id, level + 1, c_lo, c_hi, values[c_lo:c_hi + 1],
                pivot=values[(c_lo + c_hi) // 2], role="compare",
            )
            found = search(c_lo, c_hi, child, level + 1)
            if found is not None:
                tree.set_result(call_id, value=found)
            return found

        return search(0, last, ROOT_ID, 0)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def derive(self, initial: ArrayState) -> Iterator[Stage]:
        values = initial.values
        n = len(values)
        target = initial.annotation("target")
        overlay = (("target", target),)

        yield frame(values, paint(n), f"Searching for {target} in {fmt(values)}", (0,), overlay=overlay)

        lo, hi = 0, n - 1
        while lo <= hi:
            mid = (lo + hi) // 2
            probe = values[mid]
            yield frame(
                values,
                paint(n, (range(lo, hi + 1), ElementStatus.CURRENT), ([mid], ElementStatus.COMPARING)),
                f"Checking middle index {mid}: {probe}.",
                (2, 3),
                active_indices=(mid,),
                left_pointer=lo,
                right_pointer=hi,
                mid_point=mid,
                overlay=overlay,
            )
            if probe == target:
                yield frame(
                    values,
                    paint(n, ([mid], ElementStatus.SORTED)),
                    f"Found {target} at index {mid}.",
                    (3,),
                    active_indices=(mid,),
                    mid_point=mid,
                    overlay=overlay + (("found_index", mid),),
                )
                return
            if probe < target:
                lo = mid + 1
                text = f"{probe} < {target}: discard the left half"
                status, lines = ElementStatus.RIGHT, (4, 5)
            else:
                hi = mid - 1
                text = f"{probe} > {target}: discard the right half"
                status, lines = ElementStatus.LEFT, (6,)
            text += f" and search indices {lo}..{hi}." if lo <= hi else "; no candidates remain."
            yield frame(
                values,
                paint(n, (range(lo, hi + 1), status)),
                text,
                lines,
                active_indices=tuple(range(lo, hi + 1)),
                left_pointer=lo,
                right_pointer=hi,
                overlay=overlay,
            )

        yield frame(
            values,
            paint(n),
            f"{target} is not in the array.",
            (1,),
            overlay=overlay + (("found_index", None),),
        )

    def reconcile(self, result, final) -> bool:
        return final.annotation("found_index") == result
