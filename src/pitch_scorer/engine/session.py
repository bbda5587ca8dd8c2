import time

from pitch_scorer.engine.analyzer import PitchAnalyzer, TunerReading
from pitch_scorer.engine.scoring import ScoringLoop


class TunerSession:
    def __init__(self, source, analyzer=None, scoring=None, monitor=None, clock=time.monotonic):
        """Runs the analysis tick and the scoring cadence on one thread.

        Args:
            source: Anything with poll_buffer() -> (samples, sample_rate).
            analyzer: Analysis context, a fresh PitchAnalyzer by default.
            scoring: Scoring loop, a fresh ScoringLoop by default.
            monitor: Optional TunerMonitor fed after every tick.
            clock: Returns the current time in seconds.
        """
        self.source = source
        self.clock = clock
        self.analyzer = analyzer if analyzer is not None else PitchAnalyzer(clock=clock)
        self.scoring = scoring if scoring is not None else ScoringLoop()
        self.monitor = monitor

    @property
    def latest(self) -> TunerReading:
        return self.analyzer.latest

    def step(self) -> TunerReading:
        """One analysis tick, followed by a scoring tick if the cadence is due."""
        samples, sample_rate = self.source.poll_buffer()

        t_start = time.perf_counter()
        reading = self.analyzer.process(samples, sample_rate)
        frame_time_ms = (time.perf_counter() - t_start) * 1000.0

        scored = self.scoring.poll(self.analyzer.latest, self.clock())

        if self.monitor is not None:
            self.monitor.update(frame_time_ms, reading, self.scoring.final_score, self.scoring.running, scored)
        return reading

    def start_scoring(self) -> None:
        self.scoring.start(self.clock())
        if self.monitor is not None:
            self.monitor.log_event("START", "score reset")

    def stop_scoring(self) -> int:
        was_running = self.scoring.running
        score = self.scoring.stop()
        if self.monitor is not None and was_running:
            self.monitor.log_event("STOP", f"final score {score}")
        return score

    def handle_command(self, update: dict) -> int | None:
        """Applies one validated control message.

        Returns:
            The final score if the message stopped the scoring loop, else None.
        """
        score = None
        for key, value in update.items():
            if self.monitor is not None:
                self.monitor.log_command(key, value)
            if key != "command":
                self.analyzer.update_parameter(key, value)
            elif value == "start":
                self.start_scoring()
            elif value == "stop":
                score = self.stop_scoring()
        return score
