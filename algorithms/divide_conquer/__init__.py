from algorithms.divide_conquer.binary_search import BinarySearch
from algorithms.divide_conquer.count_inversions import CountInversions
from algorithms.divide_conquer.majority_element import MajorityElement
from algorithms.divide_conquer.merge_sort import MergeSort
from algorithms.divide_conquer.order_statistics import OrderStatistics
from algorithms.divide_conquer.quick_sort import QuickSort
from algorithms.divide_conquer.strassen import Strassen
from algorithms.divide_conquer.tree import ROOT_ID, RecursionTree, RecursionTreeBuilder

__all__ = [
    "MergeSort",
    "QuickSort",
    "BinarySearch",
    "MajorityElement",
    "CountInversions",
    "Strassen",
    "OrderStatistics",
    "RecursionTree",
    "RecursionTreeBuilder",
    "ROOT_ID",
]
