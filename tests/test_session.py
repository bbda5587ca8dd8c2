"""Tests for engine/session.py: analysis ticks, scoring cadence and command handling on one loop."""

import numpy as np
import pytest

from pitch_scorer.engine.debug_monitor import TunerMonitor
from pitch_scorer.engine.scoring import ScoringLoop
from pitch_scorer.engine.session import TunerSession


@pytest.fixture
def session(source, clock):
    return TunerSession(source, scoring=ScoringLoop(interval=1.0), clock=clock)


class TestStep:
    def test_step_publishes_a_reading(self, session, source):
        reading = session.step()
        assert source.polls == 1
        assert session.latest is reading
        assert reading.note.name == "A"

    def test_analysis_runs_faster_than_scoring(self, session, clock):
        session.start_scoring()
        for _ in range(10):
            clock.advance(0.25)
            session.step()
        # ten analysis ticks over 2.5 s, one scoring tick per second
        assert session.scoring.ticks == 2

    def test_scoring_reads_latest_reading(self, session, source, clock):
        session.start_scoring()
        clock.advance(0.5)
        session.step()

        source.samples = np.zeros(2048, dtype=np.float32)
        clock.advance(0.5)
        session.step()  # silent window scored at t=1.0

        assert session.scoring.ticks == 1
        assert session.scoring.state.accumulated == 0.0

    def test_no_scoring_before_start(self, session, clock):
        for _ in range(5):
            clock.advance(1.0)
            session.step()
        assert session.scoring.ticks == 0
        assert session.scoring.final_score == 0


class TestScoringControl:
    def test_stop_freezes_score(self, session, clock):
        session.start_scoring()
        clock.advance(1.0)
        session.step()
        score = session.stop_scoring()
        assert score > 0

        for _ in range(3):
            clock.advance(1.0)
            session.step()
        assert session.scoring.final_score == score

    def test_score_matches_weight_formula(self, session, clock):
        session.start_scoring()
        clock.advance(1.0)
        reading = session.step()
        expected = reading.amplitude * (100 - reading.detune_percent)
        assert session.scoring.state.accumulated == pytest.approx(expected)

    def test_stop_while_idle(self, session):
        assert session.stop_scoring() == 0


class TestHandleCommand:
    def test_start_and_stop(self, session, clock):
        assert session.handle_command({"command": "start"}) is None
        assert session.scoring.running

        clock.advance(1.0)
        session.step()
        score = session.handle_command({"command": "stop"})
        assert score == session.scoring.final_score
        assert score > 0
        assert not session.scoring.running

    def test_parameter_update(self, session):
        session.handle_command({"silence_rms": 0.9})
        assert session.analyzer.params["silence_rms"] == 0.9
        assert session.step().pitch_hz is None

    def test_commands_are_counted_by_monitor(self, source, clock):
        monitor = TunerMonitor(clock=clock)
        session = TunerSession(source, monitor=monitor, clock=clock)
        session.handle_command({"command": "start"})
        session.handle_command({"noise_threshold": 0.1})
        assert monitor.command_count == 2


class TestIndependentSessions:
    def test_sessions_do_not_share_state(self, make_sine, make_source, clock):
        low = TunerSession(make_source(make_sine(220.0)), clock=clock)
        high = TunerSession(make_source(make_sine(880.0)), clock=clock)
        low.step()
        high.step()
        assert low.latest.note.octave == 3
        assert high.latest.note.octave == 5
