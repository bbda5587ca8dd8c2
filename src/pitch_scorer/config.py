# ============================================================================
# AUDIO BUFFER CONFIGURATION
# ============================================================================

RATE = 44100
"""
Sample rate in Hz (samples per second) requested from the capture device.

Standard Options:
  - 44100 Hz: CD quality, default of most laptop microphones
  - 48000 Hz: Professional interfaces and USB headsets

Watch Out For:
  - The analyzer always uses the rate reported alongside each buffer,
    so a mismatch only costs latency, not pitch accuracy
"""

CHUNK = 512
"""
Number of samples delivered per capture callback.

Latency (ms) = CHUNK / RATE * 1000
  - 512 @ 44.1kHz = 11.6ms between buffer refreshes
  - 1024 @ 44.1kHz = 23.2ms (smoother, but the display lags behind the voice)
"""

BUFFER_SIZE = 2048
"""
Length of the analysis window in samples (must be a power of two).

Impact on Pitch Range:
  - The autocorrelation needs a few full periods inside the window
  - 2048 @ 44.1kHz = 46ms, enough for ~110 Hz (A2) with 4 periods
  - 4096 reaches down to bass voices but doubles the correlation cost

Watch Out For:
  - Larger windows smear fast glides between notes
"""

# ============================================================================
# PITCH DETECTION THRESHOLDS
# ============================================================================

SILENCE_RMS = 0.01
"""
RMS level (on a [-1, 1] signal) below which no pitch is reported.

- 0.01 ~= -40 dBFS, quiet room noise stays below it
- Raise it for noisy rooms, lower it for quiet singers far from the mic
"""

NOISE_THRESHOLD = 0.2
"""
Sample magnitude used to trim near-zero samples from both ends of the
window before correlating.
"""

MIN_TRIM_FRACTION = 0.5
"""
If trimming keeps less than this fraction of the window, the full window
is correlated instead.
"""

MIN_SAMPLES = 4
"""
Shortest window the autocorrelation runs on. Anything shorter cannot hold
a dip, a peak and its two neighbours.
"""

PEAK_FRACTION = 0.9
"""
The period is the first correlation peak after the zero-lag lobe reaching
this fraction of the strongest one.

- Short periods (high notes) put later multiples of the period closer to an
  integer lag, so the strongest peak can sit one or more octaves too low
"""

# ============================================================================
# CADENCE CONFIGURATION
# ============================================================================

POLL_INTERVAL = 0.001
"""
Seconds between two analysis ticks of the engine loop.

The analysis tick refreshes amplitude, pitch, note and detune. It runs
much faster than the scoring cadence, so scoring always reads a value at
most one poll interval old.
"""

SCORE_INTERVAL = 0.05
"""
Seconds between two scoring ticks while recording.

Each tick adds amplitude * (100 - detune percent) to the score, so the
final score scales with both singing time and loudness.
"""

SCORE_MULTIPLIER = 100
"""
The accumulated score is reported as floor(accumulated * SCORE_MULTIPLIER),
keeping two implicit decimal digits.
"""

# ============================================================================
# NETWORK CONFIGURATION
# ============================================================================

UDP_IP = "127.0.0.1"
"""
IP address the engine sends readings to and listens for commands on.

Default: 127.0.0.1 (engine and display on the same machine)
"""

UDP_PORT_ENGINE = 5005
"""
Port where the engine sends tuner readings (Engine -> Display).

Data sent: one JSON object per analysis tick (see protocol.py)
"""

UDP_PORT_COMMANDS = 5006
"""
Port where the recording control sends commands (Control -> Engine).

Commands sent: {"command": "start"} / {"command": "stop"} or parameter
updates such as {"silence_rms": 0.02}
"""
