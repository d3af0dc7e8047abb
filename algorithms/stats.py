"""
stats.py — Run Statistics
==========================
Counters accumulated while a trace generator runs:

    • states_explored – candidate attempts (backtracking) or real
                        recursive calls (divide & conquer)
    • backtracks      – undo operations
    • solutions_found – complete, valid solutions discovered
    • time_elapsed    – wall-clock seconds spent generating

The collector only ever counts up.  Once `freeze()` is called the run is
over and the resulting `Statistics` value is what playback and the UI read.
"""

import time
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Statistics:
    states_explored:      int   = 0
    backtracks:           int   = 0
    solutions_found:      int   = 0
    time_elapsed_seconds: float = 0.0


class StatsCollector:
    """Mutable tally owned by exactly one generation run."""

    def __init__(self):
        self.states_explored: int = 0
        self.backtracks:      int = 0
        self.solutions_found: int = 0
        self._started_at:     Optional[float] = None
        self._elapsed:        float = 0.0
        self._frozen:         Optional[Statistics] = None

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------
    def start(self) -> None:
        self._started_at = time.perf_counter()

    def stop(self) -> None:
        if self._started_at is not None:
            self._elapsed += time.perf_counter() - self._started_at
            self._started_at = None

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------
    def explore(self) -> None:
        self._check_open()
        self.states_explored += 1

    def backtrack(self) -> None:
        self._check_open()
        self.backtracks += 1

    def solution(self) -> int:
        """Count a solution and return its 1-based number."""
        self._check_open()
        self.solutions_found += 1
        return self.solutions_found

    # ------------------------------------------------------------------
    def freeze(self) -> Statistics:
        if self._frozen is None:
            self.stop()
            self._frozen = Statistics(
                states_explored=self.states_explored,
                backtracks=self.backtracks,
                solutions_found=self.solutions_found,
                time_elapsed_seconds=self._elapsed,
            )
        return self._frozen

    @property
    def is_frozen(self) -> bool:
        return self._frozen is not None

    def _check_open(self) -> None:
        if self._frozen is not None:
            raise RuntimeError("statistics are frozen once generation completes")
