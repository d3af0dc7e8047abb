from algorithms.backtracking.graph_coloring import GraphColoring
from algorithms.backtracking.nqueens import NQueens
from algorithms.backtracking.subset_sum import SubsetSum

__all__ = ["NQueens", "GraphColoring", "SubsetSum"]
