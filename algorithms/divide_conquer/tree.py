"""
tree.py — Recursion Tree Builder
==================================
Materialises a divide-and-conquer call tree as a flat arena of
RecursiveCall records linked by `parent_id`, instead of live nested
objects.  The tree is built once, eagerly, while the ground-truth
algorithm runs; afterwards it is an immutable value that renderers
query by id or by level.

Node ids are derived from the parent path, so the shape for a given
input size is fully deterministic:

    root
    ├── root-left
    │   ├── root-left-left
    │   ├── root-left-right
    │   └── root-left-merge      (level 1.5)
    ├── root-right
    └── root-merge               (level 0.5)

Invariant enforced by `build()`: every non-root node's parent appears
earlier in the list.
"""

from collections import OrderedDict
from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from algorithms.step import Number, RecursiveCall

ROOT_ID = "root"


class RecursionTree:
    """Read-only, ordered view over a built arena."""

    def __init__(self, calls: Sequence[RecursiveCall]):
        self._calls: Tuple[RecursiveCall, ...] = tuple(calls)
        self._by_id: Dict[str, RecursiveCall] = {c.id: c for c in self._calls}

    def get(self, call_id: str) -> Optional[RecursiveCall]:
        return self._by_id.get(call_id)

    def children(self, call_id: str) -> List[RecursiveCall]:
        return [c for c in self._calls if c.parent_id == call_id]

    @property
    def roots(self) -> List[RecursiveCall]:
        return [c for c in self._calls if c.parent_id is None]

    def levels(self) -> Dict[float, List[RecursiveCall]]:
        """Group nodes by level, levels ascending, insertion order within a level."""
        grouped: Dict[float, List[RecursiveCall]] = {}
        for call in sorted(self._calls, key=lambda c: c.level):
            grouped.setdefault(call.level, []).append(call)
        return grouped

    @property
    def calls(self) -> Tuple[RecursiveCall, ...]:
        return self._calls

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self) -> Iterator[RecursiveCall]:
        return iter(self._calls)

    def __repr__(self) -> str:
        return f"RecursionTree(nodes={len(self._calls)})"


class RecursionTreeBuilder:
    """
    Mutable arena used during one generation run.

    Usage:
        builder = RecursionTreeBuilder()
        builder.root(values)
        builder.subdivide(values, 0, len(values) - 1, 0, ROOT_ID)
        ...
        builder.set_result("root-left", result=(1, 4, 7))
        tree = builder.build()
    """

    def __init__(self):
        self._calls: "OrderedDict[str, RecursiveCall]" = OrderedDict()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def add(
        self,
        call_id:   str,
        parent_id: Optional[str],
        level:     float,
        start:     int,
        end:       int,
        array:     Sequence[Number] = (),
        pivot:     Optional[Number] = None,
        role:      str = "call",
    ) -> RecursiveCall:
        if call_id in self._calls:
            raise ValueError(f"duplicate recursion node id {call_id!r}")
        if parent_id is not None and parent_id not in self._calls:
            raise ValueError(f"parent {parent_id!r} must be registered before {call_id!r}")
        call = RecursiveCall(
            id=call_id,
            parent_id=parent_id,
            level=level,
            range_start=start,
            range_end=end,
            array=tuple(array),
            pivot=pivot,
            role=role,
        )
        self._calls[call_id] = call
        return call

    def root(
        self,
        array: Sequence[Number],
        pivot: Optional[Number] = None,
        role:  str = "call",
    ) -> RecursiveCall:
        return self.add(ROOT_ID, None, 0, 0, len(array) - 1, array, pivot=pivot, role=role)

    def subdivide(
        self,
        array:     Sequence[Number],
        start:     int,
        end:       int,
        level:     float,
        parent_id: str,
        merge:     bool = True,
    ) -> None:
        """Register halving children (and merge pseudo-nodes) until start >= end."""
        if start >= end:
            return
        mid = (start + end) // 2
        left_id = f"{parent_id}-left"
        right_id = f"{parent_id}-right"
        self.add(left_id, parent_id, level + 1, start, mid, array[start:mid + 1])
        self.add(right_id, parent_id, level + 1, mid + 1, end, array[mid + 1:end + 1])
        if merge:
            self.add(
                f"{parent_id}-merge", parent_id, level + 0.5,
                start, end, array[start:end + 1], role="merge",
            )
        self.subdivide(array, start, mid, level + 1, left_id, merge)
        self.subdivide(array, mid + 1, end, level + 1, right_id, merge)

    # ------------------------------------------------------------------
    # Annotation
    # ------------------------------------------------------------------
    def set_result(
        self,
        call_id: str,
        result:  Optional[Sequence[Number]] = None,
        value:   Optional[Number] = None,
        role:    Optional[str] = None,
    ) -> RecursiveCall:
        try:
            call = self._calls[call_id]
        except KeyError:
            raise KeyError(f"unknown recursion node {call_id!r}") from None
        changes = {}
        if result is not None:
            changes["result"] = tuple(result)
        if value is not None:
            changes["value"] = value
        if role is not None:
            changes["role"] = role
        updated = replace(call, **changes)
        self._calls[call_id] = updated
        return updated

    def __contains__(self, call_id: str) -> bool:
        return call_id in self._calls

    def __len__(self) -> int:
        return len(self._calls)

    # ------------------------------------------------------------------
    def build(self) -> RecursionTree:
        seen = set()
        for call in self._calls.values():
            if call.parent_id is not None and call.parent_id not in seen:
                raise ValueError(f"node {call.id!r} appears before its parent {call.parent_id!r}")
            seen.add(call.id)
        return RecursionTree(list(self._calls.values()))
