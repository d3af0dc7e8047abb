"""
recorder.py — Run Recorder & Analytics
========================================
Runs one algorithm to completion through the registry, then computes
the analytics card the UI shows next to the playback.

Usage:
    rec = Recorder()
    trace = rec.run("nqueens", board_size=6)   # eager, run-to-completion
    metrics = rec.get_metrics()                # the analytics card
    rec.export()                               # JSON-ready snapshot

Unknown algorithm keys and invalid parameters raise ConfigurationError
before anything runs.
"""

import logging
import sys
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from algorithms import AlgoInfo, get_algorithm
from algorithms.errors import ConfigurationError
from algorithms.step import Trace, trace_to_dict

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# RunMetrics — the analytics card for one run
# ---------------------------------------------------------------------------
@dataclass
class RunMetrics:
    algo_key:             str   = ""
    algo_label:           str   = ""
    family:               str   = ""
    total_steps:          int   = 0      # number of Steps generated
    states_explored:      int   = 0
    backtracks:           int   = 0
    solutions_found:      int   = 0
    time_elapsed_seconds: float = 0.0    # measured inside the generator
    wall_time_ms:         float = 0.0    # wall-clock time around generate()
    tree_size:            int   = 0      # recursion-tree nodes (divide & conquer)
    memory_bytes:         int   = 0      # approx size of the step buffer (sys.getsizeof)


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class Recorder:
    """
    Attributes:
        trace   : The Trace of the last run.
        metrics : Computed RunMetrics (available after run()).
        params  : Parameters the last run was called with.
    """

    def __init__(self):
        self.trace:   Optional[Trace]      = None
        self.metrics: Optional[RunMetrics] = None
        self.params:  Dict[str, Any]       = {}

        self._algo_info: Optional[AlgoInfo] = None

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------
    def run(self, algo_key: str, **params) -> Trace:
        info = get_algorithm(algo_key)
        if info is None:
            raise ConfigurationError(f"Unknown algorithm: {algo_key}", field="algorithm")

        self._algo_info = info
        self.params     = dict(params)
        self.trace      = None
        self.metrics    = None

        started = time.monotonic()
        trace = info.generator.generate(**params)
        wall_ms = (time.monotonic() - started) * 1000

        self.trace = trace
        self.metrics = self._compute_metrics(wall_ms)
        logger.info(
            "Recorded %s: %d steps in %.2f ms",
            info.key, self.metrics.total_steps, self.metrics.wall_time_ms,
        )
        return trace

    def get_metrics(self) -> Optional[RunMetrics]:
        return self.metrics

    @property
    def algo_info(self) -> Optional[AlgoInfo]:
        return self._algo_info

    # ------------------------------------------------------------------
    # Export (serialisable snapshot)
    # ------------------------------------------------------------------
    def export(self, include_steps: bool = True) -> Dict[str, Any]:
        return {
            "algo_key": self._algo_info.key if self._algo_info else "",
            "params":   {k: v for k, v in self.params.items() if k != "rng"},
            "metrics":  asdict(self.metrics) if self.metrics else {},
            "trace":    trace_to_dict(self.trace, include_steps) if self.trace else None,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _compute_metrics(self, wall_ms: float) -> RunMetrics:
        info = self._algo_info
        trace = self.trace
        stats = trace.statistics

        # approximate memory: sizeof the steps buffer
        mem = sys.getsizeof(trace.steps)
        for s in trace.steps:
            mem += sys.getsizeof(s)

        return RunMetrics(
            algo_key=info.key,
            algo_label=info.label,
            family=info.family.value,
            total_steps=trace.total_steps,
            states_explored=stats.states_explored,
            backtracks=stats.backtracks,
            solutions_found=stats.solutions_found,
            time_elapsed_seconds=stats.time_elapsed_seconds,
            wall_time_ms=round(wall_ms, 2),
            tree_size=len(trace.recursion_tree),
            memory_bytes=mem,
        )
