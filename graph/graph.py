"""
graph.py — Graph Container & Generator
=======================================
Input model for graph coloring: an undirected graph over the integer
nodes 0 … n-1.

Responsibilities:
  1. Edge insertion with validation         (range checks, no self-loops)
  2. Adjacency queries                      (neighbours, has_edge)
  3. Random generation                      (seeded, 30–50 % edge density)

Design decisions:
  - Node ids are plain ints; the coloring assignment is a list indexed
    by node id, so no Node objects are needed.
  - A separate adjacency dict `_adj[node] → [neighbour, …]` is maintained
    incrementally so neighbour queries are O(degree), not O(E).
  - Edges are kept in insertion order; duplicates are ignored.
"""

import random
from typing import Any, Dict, Iterable, List, Optional, Tuple

from graph.edge import Edge


class Graph:
    """
    Attributes:
        num_nodes : Node count; valid ids are 0 … num_nodes-1.
        edges     : Distinct undirected edges, insertion order.
        _adj      : {node: [neighbour, …]}
    """

    def __init__(self, num_nodes: int):
        if num_nodes < 0:
            raise ValueError(f"num_nodes must be non-negative, got {num_nodes}")
        self.num_nodes: int                  = num_nodes
        self.edges:     List[Edge]           = []
        self._adj:      Dict[int, List[int]] = {n: [] for n in range(num_nodes)}

    # ==================================================================
    # EDGES
    # ==================================================================
    def add_edge(self, source: int, target: int) -> Optional[Edge]:
        """Insert an undirected edge.  Returns None if it already exists."""
        for node in (source, target):
            if isinstance(node, bool) or not isinstance(node, int):
                raise ValueError(f"node ids must be integers, got {node!r}")
            if not 0 <= node < self.num_nodes:
                raise ValueError(f"node {node} out of range 0..{self.num_nodes - 1}")
        if source == target:
            raise ValueError(f"self-loop on node {source} is not allowed")
        if self.has_edge(source, target):
            return None
        edge = Edge(source, target)
        self.edges.append(edge)
        self._adj[edge.source].append(edge.target)
        self._adj[edge.target].append(edge.source)
        return edge

    @classmethod
    def from_edges(cls, num_nodes: int, edges: Iterable[Any]) -> "Graph":
        g = cls(num_nodes)
        for raw in edges:
            e = Edge.coerce(raw)
            g.add_edge(e.source, e.target)
        return g

    # ==================================================================
    # ADJACENCY QUERIES
    # ==================================================================
    def neighbours(self, node: int) -> List[int]:
        return list(self._adj.get(node, []))

    def has_edge(self, a: int, b: int) -> bool:
        return b in self._adj.get(a, [])

    def edge_list(self) -> List[Tuple[int, int]]:
        return [e.as_tuple() for e in self.edges]

    # ==================================================================
    # GENERATOR
    # ==================================================================
    @classmethod
    def generate_random(
        cls,
        num_nodes: int = 5,
        edge_probability: Optional[float] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> "Graph":
        """
        Random simple graph.

        With `edge_probability` each possible edge is kept independently
        (Erdős–Rényi).  Without it, exactly floor(max_edges × d) distinct
        edges are drawn with d uniform in [0.3, 0.5).
        """
        rng = rng or random.Random(seed)
        g = cls(num_nodes)
        if num_nodes < 2:
            return g

        if edge_probability is not None:
            for i in range(num_nodes):
                for j in range(i + 1, num_nodes):
                    if rng.random() < edge_probability:
                        g.add_edge(i, j)
            return g

        max_edges = num_nodes * (num_nodes - 1) // 2
        wanted = int(max_edges * (0.3 + rng.random() * 0.2))
        while len(g.edges) < wanted:
            u = rng.randrange(num_nodes)
            v = rng.randrange(num_nodes)
            if u != v:
                g.add_edge(u, v)
        return g

    # ==================================================================
    # DUNDER
    # ==================================================================
    def __len__(self) -> int:
        return self.num_nodes

    def __repr__(self) -> str:
        return f"Graph(nodes={self.num_nodes}, edges={len(self.edges)})"
