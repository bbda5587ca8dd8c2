"""
Shared fixtures for the test suite.

Signals are synthesized with numpy so no audio device is needed, and time is
driven by a manual clock so cadence tests are deterministic.
"""

import numpy as np
import pytest

SAMPLE_RATE = 44100
BUFFER_SIZE = 2048


def sine(frequency: float, amplitude: float = 0.5, size: int = BUFFER_SIZE, rate: int = SAMPLE_RATE) -> np.ndarray:
    t = np.arange(size) / rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """Buffer source serving a fixed window until replaced."""

    def __init__(self, samples: np.ndarray, rate: float = SAMPLE_RATE):
        self.samples = samples
        self.rate = rate
        self.polls = 0

    def poll_buffer(self):
        self.polls += 1
        return self.samples.copy(), float(self.rate)


@pytest.fixture
def make_sine():
    return sine


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def source():
    return FakeSource(sine(440.0))
