"""
graph_coloring.py — m-Coloring
================================
Assigns colors 1 … m to nodes in index order so that no edge joins two
nodes of the same color.  Every valid coloring is enumerated; color 0
marks a node that has not been colored yet.

Yields a Step at:
  1. Attempt (node, color)
  2. No adjacent node shares the color  →  colored, move on
  3. Conflict with a neighbour          →  rejected
  4. Color removed after recursion      →  BACKTRACK
  5. Every node colored                 →  SOLUTION (search continues)
"""

import logging
from typing import Any, Iterable, Iterator, List, Tuple

from algorithms.backtracking.base import BacktrackingGenerator
from algorithms.base import AlgorithmKind, require_int
from algorithms.errors import ConfigurationError
from algorithms.stats import StatsCollector
from algorithms.step import ColoringState, Step, StepBuilder, Trace
from graph import Graph

logger = logging.getLogger(__name__)

UNCOLORED = 0


PSEUDOCODE: List[str] = [
    "def color_graph(graph, m):",                          # 0
    "    colors ← [0] * n",                                # 1
    "    assign(node=0)",                                  # 2
    "def assign(node):",                                   # 3
    "    if node == n: record solution; return",           # 4
    "    for c in 1 … m:",                                 # 5
    "        if no neighbour of node has color c:",        # 6
    "            colors[node] ← c",                        # 7
    "            assign(node + 1)",                        # 8
    "            colors[node] ← 0",                        # 9
    "    return   # keep searching",                       # 10
]


def is_safe_color(graph: Graph, colors: List[int], node: int, color: int) -> bool:
    return all(colors[nb] != color for nb in graph.neighbours(node))


def build_graph(num_nodes: int, edges: Iterable[Any]) -> Graph:
    """Validate the node count and edge list, turning bad input into ConfigurationError."""
    n = require_int(num_nodes, "num_nodes", minimum=1)
    try:
        return Graph.from_edges(n, edges or [])
    except ValueError as exc:
        raise ConfigurationError(str(exc), field="edges") from exc


class GraphColoring(BacktrackingGenerator):
    kind       = AlgorithmKind.GRAPH_COLORING
    label      = "Graph Coloring"
    pseudocode = PSEUDOCODE

    def generate(self, num_nodes: int, edges: Iterable[Any] = (), max_colors: int = 3) -> Trace:
        graph = build_graph(num_nodes, edges)
        m = require_int(max_colors, "max_colors", minimum=1)
        logger.info(
            "Coloring %d nodes / %d edges with at most %d colors",
            graph.num_nodes, len(graph.edges), m,
        )

        edge_tuple: Tuple[Tuple[int, int], ...] = tuple(graph.edge_list())
        colors = [UNCOLORED] * graph.num_nodes
        stats = StatsCollector()
        solutions: List[ColoringState] = []

        def snapshot(**kwargs) -> ColoringState:
            return ColoringState(
                nodes=graph.num_nodes,
                edges=edge_tuple,
                colors=tuple(colors),
                max_colors=m,
                **kwargs,
            )

        blank = snapshot()
        sb = StepBuilder()
        sb.description = (
            f"Starting to solve Graph Coloring for {graph.num_nodes} nodes "
            f"with maximum {m} colors."
        )
        sb.problem_state = blank
        sb.highlight(0, 1, 2)
        intro = sb.build()

        def final() -> Step:
            sb_fin = StepBuilder()
            if solutions:
                sb_fin.description = (
                    f"Graph Coloring complete! Found {len(solutions)} solution(s)."
                )
                sb_fin.problem_state = solutions[0]
                sb_fin.attach_solutions(solutions)
            else:
                sb_fin.description = (
                    f"Graph Coloring complete! No valid coloring found with {m} colors."
                )
                sb_fin.problem_state = blank
            sb_fin.highlight(10)
            return sb_fin.build(is_final=True)

        search = self._assign(graph, colors, 0, m, stats, solutions, snapshot)
        return self._assemble(intro, search, stats, solutions, final)

    def _assign(
        self,
        graph: Graph,
        colors: List[int],
        node: int,
        m: int,
        stats: StatsCollector,
        solutions: List[ColoringState],
        snapshot,
    ) -> Iterator[Step]:
        if node >= graph.num_nodes:
            number = stats.solution()
            solution = snapshot(solution_number=number)
            solutions.append(solution)

            sb = StepBuilder()
            sb.description = f"Solution #{number} found! All nodes colored without conflicts."
            sb.problem_state = solution
            sb.highlight(4)
            sb.attach_solutions(solutions)
            yield sb.build()
            return

        for color in range(1, m + 1):
            stats.explore()

            sb = StepBuilder()
            sb.description = f"Trying to color node {node} with color {color}."
            sb.problem_state = snapshot(current_node=node)
            sb.highlight(5, 6)
            yield sb.build()

            if not is_safe_color(graph, colors, node, color):
                sb_r = StepBuilder()
                sb_r.description = (
                    f"Cannot color node {node} with color {color} "
                    f"due to conflicts with adjacent nodes."
                )
                sb_r.problem_state = snapshot(current_node=node)
                sb_r.highlight(6)
                yield sb_r.build()
                continue

            colors[node] = color
            sb_a = StepBuilder()
            sb_a.description = f"Node {node} colored with color {color}. Moving to the next node."
            sb_a.problem_state = snapshot(current_node=node)
            sb_a.highlight(7, 8)
            yield sb_a.build()

            yield from self._assign(graph, colors, node + 1, m, stats, solutions, snapshot)

            colors[node] = UNCOLORED
            stats.backtrack()
            sb_b = StepBuilder()
            sb_b.description = f"Backtracking from node {node} with color {color}."
            sb_b.problem_state = snapshot(current_node=node)
            sb_b.highlight(9)
            yield sb_b.build()
