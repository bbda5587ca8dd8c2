"""
Debug monitoring and performance tracking for the tuner engine.

Tracks loop rate, analysis latency, input level, detection rate and score state,
printing summaries every 2 seconds and logging discrete events.
"""

import time
from collections import deque

import numpy as np

from pitch_scorer.engine.analyzer import TunerReading


class TunerMonitor:
    """
    Real-time monitor for tuner engine performance and pitch quality.

    Prints a summary line every N seconds with the following metrics:
    - Ticks: Analysis ticks per second (should be close to 1 / POLL_INTERVAL).
    - Latency: Average analysis time in ms, with peak in this window.
    - Input: Input signal level in dB (detect clipping or silence).
    - Pitch: Percentage of ticks in this window with a detected pitch.
    - Note: Last detected note and its cents offset.
    - Score: Scoring ticks in this window and the running score.

    Discrete events (START, STOP, CMD, SILENCE) are logged when enable_event_logging=True.
    """

    def __init__(self, summary_interval: float = 2.0, enable_event_logging: bool = False, clock=time.time):
        """
        Initializes the debug monitor.

        Args:
            summary_interval: Seconds between printing summary statistics.
            enable_event_logging: Whether to log discrete events (START, STOP, CMD, etc).
            clock: Returns the current time in seconds.
        """
        self.summary_interval = summary_interval
        self.enable_event_logging = enable_event_logging
        self.clock = clock
        self.start_time = clock()
        self.last_summary_time = self.start_time

        # Performance tracking
        self.frame_times = deque(maxlen=256)  # Rolling buffer of analysis times in ms
        self.tick_count = 0

        # Pitch quality
        self.detected_count = 0
        self.last_note = None
        self.last_cents = 0.0
        self.was_silent = True

        # Scoring
        self.score_ticks = 0
        self.score = 0
        self.recording = False

        # Logging
        self.command_count = 0

    def update(self, frame_time_ms: float, reading: TunerReading, score: int, recording: bool, scored: bool) -> None:
        """
        Updates monitor with the results from one analysis tick.

        Args:
            frame_time_ms: Time to analyze this tick in milliseconds.
            reading: The reading published by this tick.
            score: Current score (floor of accumulated * 100).
            recording: Whether the scoring loop is running.
            scored: Whether a scoring tick fired during this analysis tick.
        """
        self.tick_count += 1
        self.frame_times.append(frame_time_ms)
        self.score = score
        self.recording = recording
        if scored:
            self.score_ticks += 1

        if reading.note is not None:
            self.detected_count += 1
            self.last_note = f"{reading.note.name}{reading.note.octave}"
            self.last_cents = reading.note.cents_offset

        # Silence transitions (only logged on change to keep the log readable)
        silent = not reading.detected
        if silent and not self.was_silent:
            self.log_event("SILENCE", f"lost pitch, amplitude {reading.amplitude:.3f}")
        self.was_silent = silent

        now = self.clock()
        if now - self.last_summary_time >= self.summary_interval:
            self._print_summary(reading.amplitude, now)
            self.last_summary_time = now

    def log_event(self, event_type: str, message: str) -> None:
        """
        Logs a discrete event (only if enabled).

        Args:
            event_type: Category of event (e.g., "START", "STOP", "SILENCE", "CMD").
            message: Event details.
        """
        if not self.enable_event_logging:
            return
        elapsed = self.clock() - self.start_time
        print(f"[{elapsed:05.1f}s] {event_type:8s} | {message}")

    def log_command(self, key: str, value) -> None:
        """Logs a command or parameter update."""
        self.command_count += 1
        self.log_event("CMD", f"{key}={value}")

    def _print_summary(self, amplitude: float, now: float) -> None:
        """Prints a summary of performance and pitch metrics."""
        elapsed_total = now - self.start_time
        minutes = int(elapsed_total // 60)
        seconds = int(elapsed_total % 60)
        time_str = f"{minutes:02d}:{seconds:02d}"

        window = now - self.last_summary_time
        tick_rate = self.tick_count / window if window > 0 else 0.0

        if self.frame_times:
            avg_latency = np.mean(self.frame_times)
            max_latency = np.max(self.frame_times)
        else:
            avg_latency = 0.0
            max_latency = 0.0

        detect_rate = self.detected_count / self.tick_count * 100 if self.tick_count else 0.0
        input_db = 20 * np.log10(max(amplitude, 1e-10))

        status = "OK"
        if input_db > -3:
            status = "⚠ CLIP"
        elif input_db < -40:
            status = "⚠ SILENCE"

        note_str = f"{self.last_note} {self.last_cents:+5.1f}c" if self.last_note else "--"
        rec_str = "REC" if self.recording else "idle"

        summary = (
            f"[{time_str}] Ticks: {tick_rate:6.1f}/s | "
            f"Latency: {avg_latency:5.2f}ms (max {max_latency:5.2f}ms) | "
            f"Input: {input_db:6.1f}dB | "
            f"Pitch: {detect_rate:5.1f}% | "
            f"Note: {note_str} | "
            f"Score: {self.score} ({rec_str}, {self.score_ticks} ticks) | "
            f"Cmds: {self.command_count} | "
            f"Status: {status}"
        )

        print(summary)

        # Reset counters for next interval
        self.tick_count = 0
        self.detected_count = 0
        self.score_ticks = 0
        self.command_count = 0
