"""
edge.py — Undirected Edge
==========================
Connects two integer node ids.  Endpoints are stored normalised
(smaller id first) so `Edge(2, 0) == Edge(0, 2)` and an edge set
never holds the same connection twice.

Accepts both tuple and mapping input, since callers hand over either
`(u, v)` pairs or the `{"from": u, "to": v}` shape used on the wire.
"""

from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True, order=True)
class Edge:
    source: int
    target: int

    def __init__(self, source: int, target: int):
        a, b = (source, target) if source <= target else (target, source)
        object.__setattr__(self, "source", a)
        object.__setattr__(self, "target", b)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def as_tuple(self) -> Tuple[int, int]:
        return (self.source, self.target)

    @classmethod
    def coerce(cls, raw: Any) -> "Edge":
        """Build an Edge from `(u, v)`, `{"from": u, "to": v}` or an Edge."""
        if isinstance(raw, Edge):
            return raw
        if isinstance(raw, dict):
            try:
                u, v = raw["from"], raw["to"]
            except KeyError as exc:
                raise ValueError(f"edge mapping needs 'from' and 'to': {raw!r}") from exc
        else:
            try:
                u, v = raw
            except (TypeError, ValueError) as exc:
                raise ValueError(f"edge must be a pair of node ids: {raw!r}") from exc
        for node in (u, v):
            if isinstance(node, bool) or not isinstance(node, int):
                raise ValueError(f"node ids must be integers, got {node!r}")
        return cls(u, v)

    def __repr__(self) -> str:
        return f"Edge({self.source} ↔ {self.target})"
