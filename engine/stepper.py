"""
stepper.py — Playback Controller
==================================
The Stepper is the ONLY object a UI interacts with during playback.
It is handed an already-generated, immutable Step list and drives an
index through it on a timer or on discrete commands.

State machine:
    IDLE     →  start(trace)      →  RUNNING   (non-empty step list)
    RUNNING  →  tick              →  RUNNING   (index + 1)
    RUNNING  →  tick reaches end  →  COMPLETE  (timer cancelled)
    RUNNING  →  pause()           →  PAUSED    (timer cancelled, index kept)
    PAUSED   →  resume()          →  RUNNING   (new timer from current index)
    PAUSED   →  seek to last      →  COMPLETE
    COMPLETE →  seek back         →  PAUSED
    any      →  reset()           →  IDLE

Timer ownership:
  Exactly one TimerHandle exists per session.  Every transition that
  stops playback cancels it; a tick whose handle is no longer the
  current one is ignored, so a timer from a replaced session can never
  advance the new one.

Thread safety:
  This class is NOT thread-safe.  The host calls poll() and the commands
  from a single thread; PollingScheduler runs due ticks on that thread.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

from algorithms.stats import Statistics
from algorithms.step import Step, Trace, state_to_dict, step_to_dict
from engine.scheduler import PollingScheduler, TimerHandle
from engine.solutions import SolutionAggregator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class StepperState(str, Enum):
    IDLE     = "idle"
    RUNNING  = "running"
    PAUSED   = "paused"
    COMPLETE = "complete"


# ---------------------------------------------------------------------------
# Speed presets (multipliers on BASE_INTERVAL)
# ---------------------------------------------------------------------------
BASE_INTERVAL = 1.0     # seconds per step at 1×

SPEED_PRESETS = {
    "slow":   0.5,    # teaching mode
    "medium": 1.0,
    "fast":   2.5,    # demo mode
    "turbo":  10.0,
}


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
@dataclass
class PlaybackSession:
    """
    Attributes:
        steps            : The generated Step list (read-only).
        current_index    : 0 ≤ index < len(steps) while steps exist.
        status           : StepperState.
        speed_multiplier : > 0; interval = base_interval / speed_multiplier.
        statistics       : Frozen run counters.
        trace            : The Trace the steps came from, when there is one.
    """

    steps:            Tuple[Step, ...]     = ()
    current_index:    int                  = 0
    status:           StepperState         = StepperState.IDLE
    speed_multiplier: float                = 1.0
    statistics:       Optional[Statistics] = None
    trace:            Optional[Trace]      = None

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1


# ---------------------------------------------------------------------------
# Stepper
# ---------------------------------------------------------------------------
class Stepper:
    """
    Attributes:
        scheduler     : PollingScheduler that owns the playback timer.
        base_interval : Seconds per step at speed 1×.
        aggregator    : SolutionAggregator fed with every revealed step.
        on_step       : Optional callback(Step) fired every time the current
                        step changes.  A UI hooks its re-render here.
    """

    def __init__(
        self,
        scheduler:     Optional[PollingScheduler] = None,
        base_interval: float = BASE_INTERVAL,
        on_step:       Optional[Callable[[Step], None]] = None,
        aggregator:    Optional[SolutionAggregator] = None,
    ):
        self.scheduler:     PollingScheduler       = scheduler or PollingScheduler()
        self.base_interval: float                  = base_interval
        self.on_step:       Optional[Callable[[Step], None]] = on_step
        self.aggregator:    SolutionAggregator     = aggregator or SolutionAggregator()

        self._session:  PlaybackSession       = PlaybackSession()
        self._speed:    float                 = SPEED_PRESETS["medium"]
        self._timer:    Optional[TimerHandle] = None
        self._revealed: int                   = -1

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, source: Union[Trace, Sequence[Step]]) -> bool:
        """
        Replace any current session with a new one and start playing it.
        Returns False (and stays IDLE) for an empty step list.
        """
        self.reset()

        trace = source if isinstance(source, Trace) else None
        steps = tuple(trace.steps if trace is not None else source)
        if not steps:
            logger.warning("start() called with an empty step list; staying idle")
            return False

        self._session = PlaybackSession(
            steps=steps,
            current_index=0,
            status=StepperState.RUNNING,
            speed_multiplier=self._speed,
            statistics=trace.statistics if trace is not None else None,
            trace=trace,
        )
        logger.debug("Playback started: %d steps at %.2fx", len(steps), self._speed)
        self._moved()

        if self._session.last_index == 0:
            self._complete()
        else:
            self._schedule()
        return True

    def reset(self) -> None:
        """Back to IDLE.  The timer is cancelled before the session is dropped."""
        self._cancel_timer()
        self._session = PlaybackSession(speed_multiplier=self._speed)
        self._revealed = -1
        self.aggregator.reset()

    # ------------------------------------------------------------------
    # Play / Pause
    # ------------------------------------------------------------------
    def pause(self) -> bool:
        if self.status is not StepperState.RUNNING:
            logger.warning("pause() ignored in state %s", self.status.value)
            return False
        self._cancel_timer()
        self._session.status = StepperState.PAUSED
        logger.debug("Paused at step %d", self.current_index)
        return True

    def resume(self) -> bool:
        if self.status is not StepperState.PAUSED:
            logger.warning("resume() ignored in state %s", self.status.value)
            return False
        self._session.status = StepperState.RUNNING
        self._schedule()
        logger.debug("Resumed from step %d", self.current_index)
        return True

    def toggle_play(self) -> bool:
        if self.status is StepperState.RUNNING:
            return self.pause()
        return self.resume()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def seek(self, index: int) -> bool:
        """
        Jump to `index`, clamped into range.  Returns True if the current
        index changed.  Never starts or stops the timer.
        """
        session = self._session
        if not session.steps:
            logger.warning("seek(%s) ignored: no steps loaded", index)
            return False

        target = max(0, min(int(index), session.last_index))
        if target != index:
            logger.debug("seek(%s) clamped to %d", index, target)
        changed = target != session.current_index
        session.current_index = target
        if changed:
            self._moved()

        if session.status is StepperState.PAUSED and target == session.last_index:
            session.status = StepperState.COMPLETE
        elif session.status is StepperState.COMPLETE and target < session.last_index:
            session.status = StepperState.PAUSED
        return changed

    def step_forward(self) -> bool:
        return self.seek(self.current_index + 1)

    def step_backward(self) -> bool:
        return self.seek(self.current_index - 1)

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------
    def set_speed(self, multiplier: float) -> bool:
        if isinstance(multiplier, bool) or not isinstance(multiplier, (int, float)) or multiplier <= 0:
            logger.warning("set_speed(%r) ignored: multiplier must be a positive number", multiplier)
            return False
        self._speed = float(multiplier)
        self._session.speed_multiplier = self._speed
        if self.status is StepperState.RUNNING:
            self._cancel_timer()
            self._schedule()
        logger.debug("Speed set to %.2fx (interval %.3fs)", self._speed, self.interval)
        return True

    def set_speed_preset(self, preset: str) -> bool:
        if preset not in SPEED_PRESETS:
            logger.warning("Unknown speed preset %r", preset)
            return False
        return self.set_speed(SPEED_PRESETS[preset])

    @property
    def interval(self) -> float:
        return self.base_interval / self._speed

    # ------------------------------------------------------------------
    # Tick  (the host drives this through poll())
    # ------------------------------------------------------------------
    def poll(self) -> int:
        """Run any due timer ticks.  Returns the number of ticks fired."""
        return self.scheduler.poll()

    def _on_tick(self, handle: TimerHandle) -> None:
        if handle is not self._timer or self.status is not StepperState.RUNNING:
            logger.debug("Ignoring stale timer tick")
            handle.cancel()
            return
        session = self._session
        if session.current_index < session.last_index:
            session.current_index += 1
            self._moved()
        if session.current_index >= session.last_index:
            self._complete()

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def session(self) -> PlaybackSession:
        return self._session

    @property
    def status(self) -> StepperState:
        return self._session.status

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._session.steps

    @property
    def current_index(self) -> int:
        return self._session.current_index

    @property
    def current_step(self) -> Optional[Step]:
        session = self._session
        if 0 <= session.current_index < len(session.steps):
            return session.steps[session.current_index]
        return None

    @property
    def statistics(self) -> Optional[Statistics]:
        return self._session.statistics

    @property
    def solutions(self):
        return self.aggregator.solutions

    @property
    def speed_multiplier(self) -> float:
        return self._speed

    @property
    def is_running(self) -> bool:
        return self.status is StepperState.RUNNING

    @property
    def is_complete(self) -> bool:
        return self.status is StepperState.COMPLETE

    @property
    def has_timer(self) -> bool:
        return self._timer is not None and self._timer.active

    def to_dict(self, include_step: bool = True) -> Dict[str, Any]:
        session = self._session
        step = self.current_step
        data: Dict[str, Any] = {
            "status":           session.status.value,
            "current_index":    session.current_index,
            "total_steps":      len(session.steps),
            "speed_multiplier": self._speed,
            "interval":         self.interval,
            "statistics":       asdict(session.statistics) if session.statistics else None,
            "solutions":        [state_to_dict(s) for s in self.aggregator.solutions],
        }
        if include_step:
            data["current_step"] = step_to_dict(step) if step is not None else None
        return data

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _schedule(self) -> None:
        self._cancel_timer()
        self._timer = self.scheduler.schedule_repeating(self.interval, self._on_tick)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _complete(self) -> None:
        self._cancel_timer()
        self._session.status = StepperState.COMPLETE
        logger.debug("Playback complete at step %d", self.current_index)

    def _moved(self) -> None:
        """Fold every newly revealed step into the aggregator, then notify."""
        session = self._session
        index = session.current_index
        for i in range(self._revealed + 1, index + 1):
            self.aggregator.fold(session.steps[i])
        self._revealed = max(self._revealed, index)
        self._notify(session.steps[index])

    def _notify(self, step: Optional[Step]) -> None:
        if self.on_step and step is not None:
            self.on_step(step)
