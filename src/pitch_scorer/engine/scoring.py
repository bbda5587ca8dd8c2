import math
from dataclasses import dataclass

from pitch_scorer.config import SCORE_INTERVAL, SCORE_MULTIPLIER
from pitch_scorer.engine.analyzer import TunerReading


@dataclass
class ScoreState:
    accumulated: float = 0.0
    running: bool = False


class ScoringLoop:
    def __init__(self, interval: float = SCORE_INTERVAL):
        """Accumulates a singing score on its own cadence while recording.

        Every scoring tick adds amplitude * (100 - detune percent), so loud and
        in-tune singing scores fastest. Amplitude is the raw RMS of the
        window, so scores are only comparable between runs on the same
        microphone and gain.

        Args:
            interval: Seconds between two scoring ticks.
        """
        self.interval = interval
        self.state = ScoreState()
        self.ticks = 0
        self._next_due = None  # None while idle, the cadence is disabled

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def final_score(self) -> int:
        return math.floor(self.state.accumulated * SCORE_MULTIPLIER)

    def start(self, now: float) -> None:
        """Resets the score and starts the cadence. Restarting never stacks cadences."""
        self.state = ScoreState(accumulated=0.0, running=True)
        self.ticks = 0
        self._next_due = now + self.interval

    def stop(self) -> int:
        """Halts the cadence and returns the final score. No-op while idle."""
        self._next_due = None
        self.state.running = False
        return self.final_score

    def tick(self, amplitude: float, detune_percent: float) -> None:
        if not self.state.running:
            return
        self.state.accumulated += amplitude * (100 - detune_percent)
        self.ticks += 1

    def poll(self, reading: TunerReading, now: float) -> bool:
        """Fires one scoring tick from the latest reading if the cadence is due.

        Missed cadences are skipped rather than replayed, so a stalled loop
        never scores a burst of ticks from one stale reading.

        Returns:
            True if a tick was scored.
        """
        if self._next_due is None or now < self._next_due:
            return False

        self.tick(reading.amplitude, reading.detune_percent)

        self._next_due += self.interval
        if self._next_due <= now:
            self._next_due = now + self.interval
        return True
