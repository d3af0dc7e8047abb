import pytest

from algorithms.errors import ConfigurationError
from algorithms.step import BoardState, Step, number_steps
from engine import (
    SPEED_PRESETS,
    PollingScheduler,
    Recorder,
    SolutionAggregator,
    Stepper,
    StepperState,
)


def make_steps(count):
    return number_steps(Step(description=f"step {i}") for i in range(count))


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------
class TestPollingScheduler:
    def test_fires_when_due_and_catches_up(self, clock):
        scheduler = PollingScheduler(clock=clock)
        ticks = []
        scheduler.schedule_repeating(1.0, ticks.append)
        assert scheduler.poll() == 0
        clock.advance(1.0)
        assert scheduler.poll() == 1
        clock.advance(3.0)
        assert scheduler.poll() == 3
        assert len(ticks) == 4

    def test_cancelled_handles_never_fire(self, clock):
        scheduler = PollingScheduler(clock=clock)
        handle = scheduler.schedule_repeating(1.0, lambda h: pytest.fail("fired"))
        handle.cancel()
        clock.advance(5.0)
        assert scheduler.poll() == 0
        assert scheduler.pending == 0
        assert not handle.active

    def test_cancel_all(self, clock):
        scheduler = PollingScheduler(clock=clock)
        scheduler.schedule_repeating(1.0, lambda h: None)
        scheduler.schedule_repeating(2.0, lambda h: None)
        assert scheduler.pending == 2
        scheduler.cancel_all()
        assert scheduler.pending == 0

    def test_rejects_non_positive_interval(self, clock):
        with pytest.raises(ValueError):
            PollingScheduler(clock=clock).schedule_repeating(0, lambda h: None)


# ---------------------------------------------------------------------------
# Stepper
# ---------------------------------------------------------------------------
class TestStepperLifecycle:
    def test_start_runs_from_zero(self, stepper):
        assert stepper.status is StepperState.IDLE
        assert stepper.start(make_steps(5))
        assert stepper.status is StepperState.RUNNING
        assert stepper.current_index == 0
        assert stepper.has_timer

    def test_empty_list_stays_idle(self, stepper):
        assert not stepper.start([])
        assert stepper.status is StepperState.IDLE
        assert stepper.current_step is None

    def test_single_step_completes_immediately(self, stepper, scheduler):
        stepper.start(make_steps(1))
        assert stepper.status is StepperState.COMPLETE
        assert not stepper.has_timer
        assert scheduler.pending == 0

    def test_ticks_advance_then_complete(self, stepper, clock):
        stepper.start(make_steps(5))
        clock.advance(1.0)
        stepper.poll()
        assert stepper.current_index == 1
        clock.advance(10.0)
        stepper.poll()
        assert stepper.current_index == 4
        assert stepper.status is StepperState.COMPLETE
        assert not stepper.has_timer

    def test_index_never_decreases_while_running(self, stepper, clock):
        stepper.start(make_steps(6))
        seen = []
        for _ in range(8):
            clock.advance(0.5)
            stepper.poll()
            seen.append(stepper.current_index)
        assert seen == sorted(seen)
        assert seen[-1] == 4

    def test_reset(self, stepper, scheduler):
        stepper.start(make_steps(3))
        stepper.reset()
        assert stepper.status is StepperState.IDLE
        assert stepper.steps == ()
        assert scheduler.pending == 0

    def test_new_session_cancels_old_timer(self, stepper, scheduler, clock):
        stepper.start(make_steps(10))
        clock.advance(0.5)
        stepper.start(make_steps(3))
        assert scheduler.pending == 1
        clock.advance(1.0)
        stepper.poll()
        assert stepper.current_index == 1
        assert len(stepper.steps) == 3

    def test_on_step_callback(self, scheduler, clock):
        seen = []
        stepper = Stepper(scheduler, base_interval=1.0, on_step=lambda s: seen.append(s.step_number))
        stepper.start(make_steps(3))
        clock.advance(1.0)
        stepper.poll()
        stepper.step_backward()
        assert seen == [0, 1, 0]


class TestStepperPlayback:
    def test_pause_and_resume(self, stepper, clock):
        stepper.start(make_steps(5))
        assert stepper.pause()
        assert stepper.status is StepperState.PAUSED
        assert not stepper.has_timer
        clock.advance(5.0)
        stepper.poll()
        assert stepper.current_index == 0

        assert stepper.resume()
        clock.advance(1.0)
        stepper.poll()
        assert stepper.current_index == 1

    def test_misuse_is_a_no_op(self, stepper):
        assert not stepper.pause()
        assert not stepper.resume()
        stepper.start(make_steps(3))
        assert not stepper.resume()
        assert stepper.status is StepperState.RUNNING

    def test_toggle_play(self, stepper):
        stepper.start(make_steps(3))
        stepper.toggle_play()
        assert stepper.status is StepperState.PAUSED
        stepper.toggle_play()
        assert stepper.status is StepperState.RUNNING

    def test_toggle_from_complete_does_nothing(self, stepper):
        stepper.start(make_steps(1))
        assert not stepper.toggle_play()
        assert stepper.status is StepperState.COMPLETE


class TestStepperSeek:
    def test_clamps(self, stepper):
        stepper.start(make_steps(5))
        stepper.pause()
        stepper.seek(-3)
        assert stepper.current_index == 0
        stepper.seek(2)
        assert stepper.current_index == 2
        stepper.seek(99)
        assert stepper.current_index == 4

    def test_paused_seek_to_end_completes_and_back_pauses(self, stepper):
        stepper.start(make_steps(4))
        stepper.pause()
        stepper.seek(3)
        assert stepper.status is StepperState.COMPLETE
        stepper.step_backward()
        assert stepper.status is StepperState.PAUSED
        assert stepper.current_index == 2

    def test_seek_while_running_keeps_timer(self, stepper, clock):
        stepper.start(make_steps(4))
        stepper.seek(3)
        assert stepper.status is StepperState.RUNNING
        assert stepper.has_timer
        clock.advance(1.0)
        stepper.poll()
        assert stepper.status is StepperState.COMPLETE

    def test_step_forward_and_back(self, stepper):
        stepper.start(make_steps(3))
        stepper.pause()
        assert stepper.step_forward()
        assert stepper.current_step.description == "step 1"
        assert stepper.step_backward()
        assert not stepper.step_backward()
        assert stepper.current_index == 0

    def test_seek_without_steps(self, stepper):
        assert not stepper.seek(3)


class TestStepperSpeed:
    def test_interval_follows_multiplier(self, stepper):
        assert stepper.interval == pytest.approx(1.0)
        stepper.set_speed(4.0)
        assert stepper.interval == pytest.approx(0.25)

    def test_speed_change_reschedules(self, stepper, clock):
        stepper.start(make_steps(10))
        clock.advance(0.9)
        stepper.set_speed(2.0)
        clock.advance(0.5)
        stepper.poll()
        assert stepper.current_index == 1
        assert stepper.status is StepperState.RUNNING

    @pytest.mark.parametrize("bad", [0, -1, True, "fast", None])
    def test_rejects_bad_speed(self, stepper, bad):
        assert not stepper.set_speed(bad)
        assert stepper.speed_multiplier == 1.0

    def test_presets(self, stepper):
        assert stepper.set_speed_preset("turbo")
        assert stepper.speed_multiplier == SPEED_PRESETS["turbo"]
        assert not stepper.set_speed_preset("ludicrous")

    def test_speed_survives_new_session(self, stepper):
        stepper.set_speed(2.5)
        stepper.start(make_steps(3))
        assert stepper.session.speed_multiplier == 2.5


# ---------------------------------------------------------------------------
# Solution aggregation
# ---------------------------------------------------------------------------
def board(*rows):
    return BoardState.capture([list(r) for r in rows])


class TestSolutionAggregator:
    def test_dedups_structurally(self):
        agg = SolutionAggregator()
        assert agg.merge([board((0, 1), (1, 0))]) == 1
        assert agg.merge([board((0, 1), (1, 0)), board((1, 0), (0, 1))]) == 1
        assert len(agg) == 2
        assert board((1, 0), (0, 1)) in agg

    def test_fold_ignores_steps_without_solutions(self):
        agg = SolutionAggregator()
        assert agg.fold(Step()) == 0
        assert agg.fold(None) == 0

    def test_stepper_aggregates_revealed_solutions_once(self, stepper):
        a, b = board((0, 1), (1, 0)), board((1, 0), (0, 1))
        steps = number_steps([
            Step(description="intro"),
            Step(description="first", all_solutions=(a,)),
            Step(description="second", all_solutions=(board((0, 1), (1, 0)), b)),
            Step(description="done", all_solutions=(a, b)),
        ])
        stepper.start(steps)
        stepper.pause()
        stepper.seek(1)
        assert len(stepper.solutions) == 1
        stepper.seek(2)
        stepper.seek(1)
        stepper.seek(3)
        assert len(stepper.solutions) == 2
        stepper.reset()
        assert stepper.solutions == ()


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class TestRecorder:
    def test_run_and_metrics(self):
        rec = Recorder()
        trace = rec.run("nqueens", board_size=4)
        metrics = rec.get_metrics()
        assert metrics.algo_key == "nqueens"
        assert metrics.family == "backtracking"
        assert metrics.total_steps == trace.total_steps
        assert metrics.solutions_found == 2
        assert metrics.tree_size == 0
        assert metrics.memory_bytes > 0

    def test_divide_conquer_metrics(self):
        rec = Recorder()
        trace = rec.run("merge_sort", values=[3, 1, 2])
        assert rec.metrics.tree_size == len(trace.recursion_tree) > 0
        assert rec.algo_info.label == "Merge Sort"

    def test_unknown_algorithm(self):
        with pytest.raises(ConfigurationError) as exc:
            Recorder().run("bogosort")
        assert exc.value.field == "algorithm"

    def test_export_drops_rng(self, rng):
        rec = Recorder()
        rec.run("binary_search", values=[1, 2, 3], target=2, rng=rng)
        data = rec.export(include_steps=False)
        assert data["params"] == {"values": [1, 2, 3], "target": 2}
        assert data["trace"]["result"] == 1
        assert "steps" not in data["trace"]

    def test_plays_back_through_stepper(self, stepper, clock):
        trace = Recorder().run("subset_sum", values=[1, 2, 3], target=3)
        stepper.start(trace)
        stepper.set_speed_preset("turbo")
        clock.advance(1000.0)
        stepper.poll()
        assert stepper.is_complete
        assert len(stepper.solutions) == len(trace.solutions) == 2
        assert stepper.statistics == trace.statistics
