"""
inputs.py — Seeded Problem Inputs
===================================
Random inputs for callers that don't supply their own.  Every function
takes a `random.Random` so runs are reproducible from a seed.
"""

import random
from typing import List, Tuple


def random_array(size: int, rng: random.Random, low: int = 1, high: int = 99) -> List[int]:
    return [rng.randint(low, high) for _ in range(size)]


def sorted_random_array(size: int, rng: random.Random) -> List[int]:
    """Strictly increasing values: slot i holds 2i or 2i + 1."""
    return sorted(i * 2 + rng.randint(0, 1) for i in range(size))


def force_majority(values: List, rng: random.Random) -> List:
    """Copy of `values` in which a randomly chosen value fills more than half the slots."""
    values = list(values)
    winner = values[rng.randrange(len(values))]
    required = len(values) // 2 + 1
    count = values.count(winner)
    while count < required:
        i = rng.randrange(len(values))
        if values[i] != winner:
            values[i] = winner
            count += 1
    return values


def majority_array(size: int, rng: random.Random) -> List[int]:
    return force_majority([rng.randint(0, 9) for _ in range(size)], rng)


def subset_sum_problem(size: int, rng: random.Random, high: int = 20) -> Tuple[List[int], int]:
    """
    Positive values plus a target equal to the sum of a random non-empty
    subset of them, so at least one solution exists.
    """
    values = [rng.randint(1, high) for _ in range(size)]
    picked = rng.sample(range(size), rng.randint(1, size))
    return values, sum(values[i] for i in picked)
