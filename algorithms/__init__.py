"""
algorithms/__init__.py — Algorithm Registry
=============================================
Single source of truth for every algorithm the replayer knows about.

    from algorithms import REGISTRY, get_algorithm

REGISTRY is a dict:
    {
        "nqueens": AlgoInfo(key, label, generator, pseudocode, family, tags, …),
        …
    }

Keys are `AlgorithmKind` values.  The engine and the HTTP layer select a
generator through this table and never branch on algorithm names, so
adding an algorithm is: write the generator, add one entry here.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from algorithms.backtracking import GraphColoring, NQueens, SubsetSum
from algorithms.base import AlgorithmKind, Family, TraceGenerator
from algorithms.divide_conquer import (
    BinarySearch,
    CountInversions,
    MajorityElement,
    MergeSort,
    OrderStatistics,
    QuickSort,
    Strassen,
)


# ---------------------------------------------------------------------------
# AlgoInfo — metadata card for each algorithm
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    key:              str                    # registry key, e.g. "nqueens"
    label:            str                    # human label, e.g. "N-Queens"
    generator:        TraceGenerator         # the trace generator instance
    pseudocode:       List[str]              # lines highlighted by Step.highlighted_lines
    family:           Family
    tags:             List[str] = field(default_factory=list)
    complexity_time:  str       = ""         # e.g. "O(n log n)"
    complexity_space: str       = ""         # e.g. "O(n)"
    description:      str       = ""         # one-liner for the UI card
    stable:           Optional[bool] = None  # sorting algorithms only

    def to_dict(self) -> dict:
        return {
            "key":              self.key,
            "label":            self.label,
            "family":           self.family.value,
            "pseudocode":       list(self.pseudocode),
            "tags":             list(self.tags),
            "complexity_time":  self.complexity_time,
            "complexity_space": self.complexity_space,
            "description":      self.description,
            "stable":           self.stable,
        }


def _card(generator: TraceGenerator, **kwargs) -> AlgoInfo:
    return AlgoInfo(
        key=generator.kind.value,
        label=generator.label,
        generator=generator,
        pseudocode=generator.pseudocode,
        family=generator.family,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, AlgoInfo] = {info.key: info for info in (

    # -- backtracking --
    _card(
        NQueens(),
        tags=["backtracking", "constraint-satisfaction", "multi-solution"],
        complexity_time="O(N!)", complexity_space="O(N²)",
        description="Place N queens so that none attack each other. Every solution is enumerated.",
    ),
    _card(
        GraphColoring(),
        tags=["backtracking", "constraint-satisfaction", "graph", "multi-solution"],
        complexity_time="O(m^V)", complexity_space="O(V)",
        description="Color every node with at most m colors so adjacent nodes differ.",
    ),
    _card(
        SubsetSum(),
        tags=["backtracking", "np-complete", "multi-solution"],
        complexity_time="O(2^n)", complexity_space="O(n)",
        description="Find every subset of positive integers that adds up to the target.",
    ),

    # -- divide & conquer --
    _card(
        MergeSort(),
        tags=["divide-conquer", "sorting"], stable=True,
        complexity_time="O(n log n)", complexity_space="O(n)",
        description="Split in half, sort each half, merge. Guaranteed n log n.",
    ),
    _card(
        QuickSort(),
        tags=["divide-conquer", "sorting", "in-place"], stable=False,
        complexity_time="O(n log n) avg, O(n²) worst", complexity_space="O(log n)",
        description="Partition around the last element, then sort both sides in place.",
    ),
    _card(
        BinarySearch(),
        tags=["divide-conquer", "searching"],
        complexity_time="O(log n)", complexity_space="O(log n)",
        description="Halve the sorted search range until the target is found or the range is empty.",
    ),
    _card(
        MajorityElement(),
        tags=["divide-conquer", "counting"],
        complexity_time="O(n log n)", complexity_space="O(log n)",
        description="Find the value that occurs more than n/2 times by combining half-candidates.",
    ),
    _card(
        CountInversions(),
        tags=["divide-conquer", "counting", "merge-based"], stable=True,
        complexity_time="O(n log n)", complexity_space="O(n)",
        description="Count out-of-order pairs while merge sorting.",
    ),
    _card(
        Strassen(),
        tags=["divide-conquer", "matrix"],
        complexity_time="O(n^2.81)", complexity_space="O(n²)",
        description="Multiply matrices with seven recursive products per level instead of eight.",
    ),
    _card(
        OrderStatistics(),
        tags=["divide-conquer", "selection"],
        complexity_time="O(n) avg, O(n²) worst", complexity_space="O(log n)",
        description="Find the k-th smallest element by partitioning and recursing into one side.",
    ),
)}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_algorithm(key: Union[str, AlgorithmKind]) -> Optional[AlgoInfo]:
    """Return AlgoInfo by key, or None."""
    if isinstance(key, AlgorithmKind):
        key = key.value
    return REGISTRY.get(key)


def list_algorithms() -> List[AlgoInfo]:
    """Return all registered algorithms in insertion order."""
    return list(REGISTRY.values())


def algorithms_by_family(family: Union[str, Family]) -> List[AlgoInfo]:
    family = Family(family)
    return [a for a in REGISTRY.values() if a.family is family]


def algorithms_by_tag(tag: str) -> List[AlgoInfo]:
    """Filter registry by tag."""
    return [a for a in REGISTRY.values() if tag in a.tags]


__all__ = [
    "AlgoInfo",
    "AlgorithmKind",
    "Family",
    "REGISTRY",
    "get_algorithm",
    "list_algorithms",
    "algorithms_by_family",
    "algorithms_by_tag",
]
