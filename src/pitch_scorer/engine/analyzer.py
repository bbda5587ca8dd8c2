import time
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
from scipy.signal import correlate

from pitch_scorer.config import MIN_SAMPLES, MIN_TRIM_FRACTION, NOISE_THRESHOLD, PEAK_FRACTION, SILENCE_RMS
from pitch_scorer.engine.notes import NoteInfo, detune_percent, note_from_pitch


def rms_amplitude(samples: npt.ArrayLike) -> float:
    """Root Mean Square (volume) of the analysis window."""
    samples = np.asarray(samples, dtype=np.float64)
    return float(np.sqrt(np.mean(samples**2)))


def trim_to_signal(samples: np.ndarray, threshold: float = NOISE_THRESHOLD) -> np.ndarray:
    """Cuts the near-zero lead-in and tail off the window.

    Keeps the span between the first and the last sample louder than the
    threshold. Falls back to the full window when nothing is that loud or
    when the span would be shorter than MIN_TRIM_FRACTION of the window.
    """
    loud = np.flatnonzero(np.abs(samples) > threshold)
    if loud.size == 0:
        return samples

    trimmed = samples[loud[0] : loud[-1] + 1]
    if trimmed.size < MIN_TRIM_FRACTION * samples.size:
        return samples
    return trimmed


def find_period(correlation: np.ndarray) -> float | None:
    """Finds the fundamental period, in samples, of an autocorrelation sequence.

    Skips the zero-lag lobe by walking down to the first dip, takes the
    first local maximum after it that reaches PEAK_FRACTION of the strongest
    correlation and refines it with parabolic interpolation over
    its two neighbours.

    Args:
        correlation: Autocorrelation values for lags 0..n-1.
    Returns:
        The period as a fractional lag, or None if no usable peak exists.
    """
    n = correlation.size
    if n < MIN_SAMPLES:
        return None

    # 1. Walk down the zero-lag lobe
    dip = 0
    while dip < n - 1 and correlation[dip] > correlation[dip + 1]:
        dip += 1
    if dip >= n - 1:
        return None  # monotonic, no periodicity

    # 2. First local maximum close to the strongest correlation after the dip
    ceiling = correlation[dip:].max()
    if ceiling <= 0:
        return None
    lags = np.arange(dip + 1, n - 1)
    values = correlation[lags]
    is_peak = (
        (values > correlation[lags - 1])
        & (values >= correlation[lags + 1])
        & (values >= PEAK_FRACTION * ceiling)
    )
    candidates = lags[is_peak]
    if candidates.size == 0:
        return None
    peak = int(candidates[0])

    # 3. Parabolic interpolation around the peak
    x1, x2, x3 = correlation[peak - 1], correlation[peak], correlation[peak + 1]
    a = (x1 + x3 - 2 * x2) / 2
    b = (x3 - x1) / 2
    period = float(peak)
    if a:
        period -= b / (2 * a)

    return period if period > 0 else None


def estimate_pitch(
    samples: npt.ArrayLike,
    sample_rate: float,
    silence_rms: float = SILENCE_RMS,
    noise_threshold: float = NOISE_THRESHOLD,
) -> float | None:
    """Estimates the fundamental frequency of a window with autocorrelation.

    Args:
        samples: Time-domain samples normalized to [-1, 1].
        sample_rate: Sample rate of the window in Hz.
        silence_rms: Windows quieter than this report no pitch.
        noise_threshold: Sample magnitude used to trim the window edges.
    Returns:
        The frequency in Hz, or None when no confident pitch was found.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size < MIN_SAMPLES or rms_amplitude(samples) < silence_rms:
        return None

    trimmed = trim_to_signal(samples, noise_threshold)
    if trimmed.size < MIN_SAMPLES:
        return None

    # c[lag] = sum_i buf[i] * buf[i + lag], lags 0..n-1
    correlation = correlate(trimmed, trimmed, mode="full")[trimmed.size - 1 :]

    period = find_period(correlation)
    if period is None:
        return None
    return float(sample_rate / period)


@dataclass(frozen=True)
class TunerReading:
    """Everything one analysis tick publishes, replaced as a whole every tick."""

    amplitude: float = 0.0
    pitch_hz: float | None = None
    note: NoteInfo | None = None
    detune_percent: float = 0.0
    timestamp: float = 0.0

    @property
    def detected(self) -> bool:
        return self.pitch_hz is not None

    def to_message(self) -> dict:
        """JSON-ready dict following pitch_scorer.protocol."""
        return {
            "amplitude": self.amplitude,
            "pitch": self.pitch_hz,
            "note": self.note.name if self.note else None,
            "octave": self.note.octave if self.note else None,
            "cents": self.note.cents_offset if self.note else None,
            "detune": self.detune_percent,
        }


class PitchAnalyzer:
    def __init__(self, clock=time.monotonic):
        """Analysis context owning the latest published reading.

        Each instance is independent, so several sources can be analyzed side
        by side and tests can run without an audio device.

        Args:
            clock: Returns the current time in seconds, used to stamp readings.
        """
        self.clock = clock
        self.latest = TunerReading()

        # Parameters (Adjustable via CommandListener)
        self.params = {
            "silence_rms": SILENCE_RMS,
            "noise_threshold": NOISE_THRESHOLD,
        }

    def update_parameter(self, key, value):
        if key in self.params:
            self.params[key] = float(value)

    def process(self, samples: npt.ArrayLike, sample_rate: float) -> TunerReading:
        """Runs one analysis tick and publishes its reading.

        When no pitch is detected the detune of the last detected note is
        kept, so the score keeps weighting by the most recent tuning.
        """
        amplitude = rms_amplitude(samples)
        pitch = estimate_pitch(
            samples,
            sample_rate,
            silence_rms=self.params["silence_rms"],
            noise_threshold=self.params["noise_threshold"],
        )

        if pitch is not None:
            note = note_from_pitch(pitch)
            detune = detune_percent(note.cents_offset)
        else:
            note = None
            detune = self.latest.detune_percent

        reading = TunerReading(
            amplitude=amplitude,
            pitch_hz=pitch,
            note=note,
            detune_percent=detune,
            timestamp=self.clock(),
        )
        self.latest = reading  # single assignment, readers never see a half-built tick
        return reading
