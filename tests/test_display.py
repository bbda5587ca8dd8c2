"""Tests for display/: receiver state merging and the CLI detune meter."""

import json

import pytest

from pitch_scorer.display.cli import detune_bar_widths, format_reading, make_detune_bar
from pitch_scorer.display.receiver import TunerReceiver


@pytest.fixture
def receiver():
    rx = TunerReceiver()
    yield rx
    rx.close()


def _packet(msg: dict) -> bytes:
    return json.dumps(msg).encode("utf-8")


class TestReceiver:
    def test_reading_packet_updates_state(self, receiver):
        msg = {"amplitude": 0.2, "pitch": 441.0, "note": "A", "octave": 4, "cents": 3.9, "detune": 3.9, "recording": True}
        assert receiver.apply_packet(_packet(msg))
        assert receiver.latest_data == msg

    def test_score_packet_sets_final_score(self, receiver):
        assert receiver.apply_packet(_packet({"score": 1234, "recording": False}))
        assert receiver.final_score == 1234
        assert "score" not in receiver.latest_data

        receiver.apply_packet(_packet({"amplitude": 0.1, "detune": 0.0, "recording": True}))
        assert receiver.final_score is None

    def test_malformed_packets_are_ignored(self, receiver):
        before = dict(receiver.latest_data)
        assert not receiver.apply_packet(b"\xff\xfe")
        assert not receiver.apply_packet(b"{not json")
        assert not receiver.apply_packet(_packet({"bpm": 120.0}))
        assert receiver.latest_data == before


class TestDetuneBar:
    def test_flat_shrinks_left(self):
        assert detune_bar_widths(-20.0) == (20.0, 50.0)

    def test_sharp_shrinks_right(self):
        assert detune_bar_widths(30.0) == (50.0, 30.0)

    def test_in_tune_is_full(self):
        assert detune_bar_widths(0.0) == (50.0, 50.0)
        assert make_detune_bar(0.0) == "=" * 10 + "I" + "=" * 10

    def test_out_of_range_is_clamped(self):
        assert detune_bar_widths(-75.0) == (50.0, 50.0)

    def test_bar_width_is_constant(self):
        for cents in (-50.0, -12.0, 0.0, 7.5, 50.0):
            assert len(make_detune_bar(cents)) == 21


class TestFormatReading:
    def test_detected(self):
        line = format_reading(
            {"amplitude": 0.2, "pitch": 441.0, "note": "A", "octave": 4, "cents": 3.9, "detune": 3.9, "recording": True}
        )
        assert "[ REC ]" in line
        assert "A4" in line
        assert "441.00 Hz" in line
        assert "+3.9c" in line

    def test_no_pitch_with_score(self):
        line = format_reading({"amplitude": 0.0, "pitch": None, "note": None, "recording": False}, final_score=42)
        assert "--" in line
        assert "Your score is 42." in line
