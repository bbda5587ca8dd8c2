"""
Protocol for UDP messages exchanged between engine <-> display / recording control.

Engine -> display fields (all optional in a single JSON object; packet may contain any subset):
- amplitude: float
    - Description: RMS amplitude of the current analysis window.
    - Range: 0.0 .. 1.0 (float32 audio normalized to [-1, 1])
- pitch: float | null
    - Description: Detected fundamental frequency in Hz, null when no pitch was detected.
    - Range: > 0.0
- note: str | null
    - Description: Pitch class of the nearest equal-tempered note ("C", "C#", ... "B").
- octave: int | null
    - Description: Scientific pitch notation octave (A4 = 440 Hz).
- cents: float | null
    - Description: Deviation from the nearest note in cents.
    - Range: -50.0 .. 50.0
- detune: float
    - Description: Magnitude of mistuning used for scoring and the detune bar.
    - Range: 0.0 .. 50.0
- score: int
    - Description: Final score, sent once when recording stops.
    - Range: >= 0
- recording: bool
    - Description: Whether the scoring loop is running.

Control -> engine fields:
- command: "start" | "stop"
- silence_rms, noise_threshold: float (analyzer parameter updates)

Validation functions are intentionally minimal and cheap (type checks and simple range checks).
They raise on violations so protocol drift is noticed immediately.
"""

from pitch_scorer.engine.notes import NOTE_NAMES

AMPLITUDE_MIN = 0.0
AMPLITUDE_MAX = 1.0

CENTS_MIN = -50.0
CENTS_MAX = 50.0

DETUNE_MIN = 0.0
DETUNE_MAX = 50.0

COMMANDS = ("start", "stop")
PARAMETER_KEYS = {"silence_rms", "noise_threshold"}

_READING_KEYS = {"amplitude", "pitch", "note", "octave", "cents", "detune", "score", "recording"}
_CONTROL_KEYS = {"command"} | PARAMETER_KEYS


def _is_number(x):
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _is_int(x):
    return isinstance(x, int) and not isinstance(x, bool)


def is_structurally_valid(msg: dict) -> bool:
    """Fast boolean structural check of an engine -> display message (no exceptions)."""
    if not isinstance(msg, dict):
        return False
    for k in msg.keys():
        if k not in _READING_KEYS:
            return False
    for k in ("amplitude", "detune"):
        if k in msg and not _is_number(msg[k]):
            return False
    for k in ("pitch", "cents"):
        if k in msg and msg[k] is not None and not _is_number(msg[k]):
            return False
    if "octave" in msg and msg["octave"] is not None and not _is_int(msg["octave"]):
        return False
    if "note" in msg and msg["note"] is not None and msg["note"] not in NOTE_NAMES:
        return False
    if "score" in msg and not _is_int(msg["score"]):
        return False
    if "recording" in msg and not isinstance(msg["recording"], bool):
        return False
    return True


def validate_message_or_raise(msg: dict) -> None:
    """Validate an engine -> display message and raise on any structural or range violation.

    Raises:
        TypeError: if a field has the wrong type
        ValueError: if a field's value is out of the allowed range or unexpected keys are present
    """
    if not isinstance(msg, dict):
        raise TypeError("protocol: message must be a dict (JSON object)")

    for k in msg.keys():
        if k not in _READING_KEYS:
            raise ValueError(f"protocol: unexpected key '{k}'")

    if "amplitude" in msg:
        a = msg["amplitude"]
        if not _is_number(a):
            raise TypeError("protocol: 'amplitude' must be numeric")
        a = float(a)
        if not (AMPLITUDE_MIN <= a <= AMPLITUDE_MAX):
            raise ValueError(f"protocol: 'amplitude' out of range ({AMPLITUDE_MIN}..{AMPLITUDE_MAX}): {a}")

    if "pitch" in msg and msg["pitch"] is not None:
        p = msg["pitch"]
        if not _is_number(p):
            raise TypeError("protocol: 'pitch' must be numeric or null")
        if float(p) <= 0.0:
            raise ValueError(f"protocol: 'pitch' must be positive: {p}")

    if "note" in msg and msg["note"] is not None:
        if msg["note"] not in NOTE_NAMES:
            raise ValueError(f"protocol: 'note' must be one of {NOTE_NAMES}: {msg['note']!r}")

    if "octave" in msg and msg["octave"] is not None:
        if not _is_int(msg["octave"]):
            raise TypeError("protocol: 'octave' must be an integer or null")

    if "cents" in msg and msg["cents"] is not None:
        c = msg["cents"]
        if not _is_number(c):
            raise TypeError("protocol: 'cents' must be numeric or null")
        c = float(c)
        if not (CENTS_MIN <= c <= CENTS_MAX):
            raise ValueError(f"protocol: 'cents' out of range ({CENTS_MIN}..{CENTS_MAX}): {c}")

    if "detune" in msg:
        d = msg["detune"]
        if not _is_number(d):
            raise TypeError("protocol: 'detune' must be numeric")
        d = float(d)
        if not (DETUNE_MIN <= d <= DETUNE_MAX):
            raise ValueError(f"protocol: 'detune' out of range ({DETUNE_MIN}..{DETUNE_MAX}): {d}")

    if "score" in msg:
        s = msg["score"]
        if not _is_int(s):
            raise TypeError("protocol: 'score' must be an integer")
        if s < 0:
            raise ValueError(f"protocol: 'score' must be non-negative: {s}")

    if "recording" in msg and not isinstance(msg["recording"], bool):
        raise TypeError("protocol: 'recording' must be a boolean")


def validate_command_or_raise(msg: dict) -> None:
    """Validate a control -> engine message.

    Raises:
        TypeError: if a field has the wrong type
        ValueError: if the command is unknown or unexpected keys are present
    """
    if not isinstance(msg, dict):
        raise TypeError("protocol: command must be a dict (JSON object)")

    for k in msg.keys():
        if k not in _CONTROL_KEYS:
            raise ValueError(f"protocol: unexpected key '{k}'")

    if "command" in msg and msg["command"] not in COMMANDS:
        raise ValueError(f"protocol: unknown command {msg['command']!r}")

    for k in PARAMETER_KEYS & msg.keys():
        v = msg[k]
        if not _is_number(v):
            raise TypeError(f"protocol: '{k}' must be numeric")
        if float(v) < 0.0:
            raise ValueError(f"protocol: '{k}' must be non-negative: {v}")
