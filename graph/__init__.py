"""
graph/
-----
Input model for graph coloring.  Public API:

    from graph import Graph, Edge
"""

from graph.edge  import Edge
from graph.graph import Graph

__all__ = [
    "Edge",
    "Graph",
]
