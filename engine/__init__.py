"""
engine/
-------
Playback & recording layer.

    from engine import Stepper, Recorder, SolutionAggregator
"""

from engine.recorder  import Recorder, RunMetrics
from engine.scheduler import PollingScheduler, TimerHandle
from engine.solutions import SolutionAggregator
from engine.stepper   import (
    BASE_INTERVAL,
    SPEED_PRESETS,
    PlaybackSession,
    Stepper,
    StepperState,
)

__all__ = [
    "Stepper",
    "StepperState",
    "PlaybackSession",
    "SPEED_PRESETS",
    "BASE_INTERVAL",
    "PollingScheduler",
    "TimerHandle",
    "SolutionAggregator",
    "Recorder",
    "RunMetrics",
]
