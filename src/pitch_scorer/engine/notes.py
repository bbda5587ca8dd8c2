from dataclasses import dataclass

import librosa
import numpy as np

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

MAX_DETUNE = 50.0  # Half a semitone, the furthest any pitch can be from its nearest note


@dataclass(frozen=True)
class NoteInfo:
    """Nearest equal-tempered note to a detected pitch."""

    midi_number: int
    name: str
    octave: int
    cents_offset: float


def frequency_of(midi_number: int) -> float:
    """Frequency in Hz of an equal-tempered MIDI note (A4 = 69 = 440 Hz)."""
    return float(librosa.midi_to_hz(midi_number))


def note_from_pitch(frequency_hz: float) -> NoteInfo:
    """Maps a detected frequency to its nearest note and the deviation in cents.

    The note number is rounded half up, so the cents offset always lies in
    [-50, 50]. The clip only absorbs float error right at the half-semitone
    boundary.

    Args:
        frequency_hz: A detected fundamental frequency, must be positive and finite.
    Returns:
        The NoteInfo of the nearest note.
    Raises:
        ValueError: if the frequency is not a positive finite number.
    """
    if not np.isfinite(frequency_hz) or frequency_hz <= 0:
        raise ValueError(f"note_from_pitch: frequency must be positive and finite, got {frequency_hz}")

    midi_float = float(librosa.hz_to_midi(frequency_hz))
    midi_number = int(np.floor(midi_float + 0.5))

    cents = 1200.0 * np.log2(frequency_hz / frequency_of(midi_number))
    cents = float(np.clip(cents, -MAX_DETUNE, MAX_DETUNE))

    return NoteInfo(
        midi_number=midi_number,
        name=NOTE_NAMES[midi_number % 12],
        octave=midi_number // 12 - 1,
        cents_offset=cents,
    )


def detune_percent(cents: float) -> float:
    """Magnitude of mistuning, independent of direction, clamped to [0, 50]."""
    return min(MAX_DETUNE, abs(float(cents)))
