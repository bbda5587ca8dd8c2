"""Tests for engine/scoring.py: score accumulation and the scoring cadence."""

import numpy as np
import pytest

from pitch_scorer.engine.analyzer import TunerReading
from pitch_scorer.engine.scoring import ScoreState, ScoringLoop


class TestTicks:
    def test_in_tune_scenario(self):
        loop = ScoringLoop()
        loop.start(now=0.0)
        for _ in range(10):
            loop.tick(0.5, 0.0)
        assert loop.state.accumulated == pytest.approx(500.0)

        assert loop.stop() == 50000
        loop.tick(0.5, 0.0)
        assert loop.state.accumulated == pytest.approx(500.0)
        assert loop.ticks == 10

    def test_detune_lowers_the_weight(self):
        loop = ScoringLoop()
        loop.start(now=0.0)
        loop.tick(1.0, 25.0)
        assert loop.state.accumulated == pytest.approx(75.0)

    def test_idle_loop_ignores_ticks(self):
        loop = ScoringLoop()
        loop.tick(1.0, 0.0)
        assert loop.state == ScoreState(accumulated=0.0, running=False)

    def test_monotonic_while_running(self):
        rng = np.random.default_rng(3)
        loop = ScoringLoop()
        loop.start(now=0.0)
        previous = loop.state.accumulated
        for amplitude, detune in zip(rng.uniform(0, 1, 200), rng.uniform(0, 100, 200)):
            loop.tick(float(amplitude), float(detune))
            assert loop.state.accumulated >= previous
            previous = loop.state.accumulated

    def test_final_score_truncates(self):
        loop = ScoringLoop()
        loop.start(now=0.0)
        loop.tick(0.012345, 0.0)  # 1.2345 accumulated
        assert loop.final_score == 123


class TestStartStop:
    def test_start_resets(self):
        loop = ScoringLoop()
        loop.start(now=0.0)
        loop.tick(0.5, 0.0)
        loop.start(now=1.0)
        assert loop.state == ScoreState(accumulated=0.0, running=True)
        assert loop.ticks == 0

    def test_restart_does_not_stack_cadences(self):
        loop = ScoringLoop(interval=1.0)
        loop.start(now=0.0)
        loop.start(now=0.5)
        reading = TunerReading(amplitude=1.0)
        assert not loop.poll(reading, now=1.0)
        assert loop.poll(reading, now=1.5)
        assert loop.ticks == 1

    def test_stop_while_idle_is_a_noop(self):
        loop = ScoringLoop()
        assert loop.stop() == 0
        assert not loop.running

    def test_stop_twice_returns_frozen_score(self):
        loop = ScoringLoop()
        loop.start(now=0.0)
        loop.tick(0.5, 10.0)
        first = loop.stop()
        assert loop.stop() == first == 4500


class TestPoll:
    def test_fires_on_cadence(self):
        loop = ScoringLoop(interval=1.0)
        reading = TunerReading(amplitude=0.5, detune_percent=0.0)
        loop.start(now=0.0)

        assert not loop.poll(reading, now=0.5)
        assert loop.poll(reading, now=1.0)
        assert not loop.poll(reading, now=1.5)
        assert loop.poll(reading, now=2.0)
        assert loop.state.accumulated == pytest.approx(100.0)

    def test_missed_cadences_are_skipped(self):
        loop = ScoringLoop(interval=1.0)
        reading = TunerReading(amplitude=0.5)
        loop.start(now=0.0)

        assert loop.poll(reading, now=10.0)
        assert not loop.poll(reading, now=10.0)
        assert not loop.poll(reading, now=10.5)
        assert loop.poll(reading, now=11.0)
        assert loop.ticks == 2

    def test_no_tick_after_stop(self):
        loop = ScoringLoop(interval=1.0)
        reading = TunerReading(amplitude=0.5)
        loop.start(now=0.0)
        loop.poll(reading, now=1.0)
        score = loop.stop()

        assert not loop.poll(reading, now=2.0)
        assert loop.final_score == score

    def test_idle_loop_never_fires(self):
        loop = ScoringLoop(interval=1.0)
        assert not loop.poll(TunerReading(amplitude=1.0), now=100.0)
