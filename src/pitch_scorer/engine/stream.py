import threading

import numpy as np
import numpy.typing as npt
import pyaudio

from pitch_scorer.config import BUFFER_SIZE, CHUNK, RATE


class AudioStream:
    def __init__(self, rate: int = RATE, buffer_size: int = BUFFER_SIZE):
        """Microphone input kept as a continuously refreshed analysis window.

        PortAudio delivers CHUNK samples per callback on its own thread; the
        callback shifts them into the window. poll_buffer() only copies the
        window, so the engine loop never waits on the device.
        """
        self.rate = rate
        self.audio_buffer = np.zeros(buffer_size, dtype=np.float32)
        self._lock = threading.Lock()

        self.p = pyaudio.PyAudio()
        self.stream = self.p.open(
            format=pyaudio.paFloat32,
            channels=1,
            rate=rate,
            input=True,
            frames_per_buffer=CHUNK,
            stream_callback=self._on_audio,
        )

    def _on_audio(self, in_data, frame_count, time_info, status):
        new_samples = np.frombuffer(in_data, dtype=np.float32)
        with self._lock:
            self.audio_buffer = np.roll(self.audio_buffer, -new_samples.size)
            self.audio_buffer[-new_samples.size :] = new_samples
        return None, pyaudio.paContinue

    def poll_buffer(self) -> tuple[npt.NDArray[np.float32], float]:
        """Returns a snapshot of the latest window and its sample rate."""
        with self._lock:
            samples = self.audio_buffer.copy()
        return samples, float(self.rate)

    def close(self):
        self.stream.stop_stream()
        self.stream.close()
        self.p.terminate()
