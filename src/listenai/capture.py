"""
Microphone capture with sounddevice.

MicrophoneInput wraps a sounddevice InputStream delivering mono float32
frames at 16kHz. The PortAudio callback thread only copies the frame into a
queue and reports an RMS level; the recogniser consumes frames() on its own
worker thread.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Iterator

import numpy as np

from listenai.errors import AudioSessionError, PermissionDeniedError

SAMPLE_RATE = 16000
FRAME_SEC = 0.1


class MicrophoneInput:
    """Live microphone audio source.

    Args:
        device: sounddevice input device index or name (None for the default).
        level_callback: Called with the RMS level of every frame. Runs on the
            PortAudio thread, so it must be cheap and thread-safe.
    """

    def __init__(
        self,
        device: int | str | None = None,
        level_callback: Callable[[float], None] | None = None,
    ) -> None:
        self.device = device
        self.level_callback = level_callback
        self._stream = None
        self._frames: queue.Queue[np.ndarray] = queue.Queue()

    def open(self) -> None:
        """Open and start the input stream.

        Raises:
            PermissionDeniedError: No usable input device is accessible.
            AudioSessionError: The stream could not be configured or started.
        """
        import sounddevice as sd

        try:
            info = sd.query_devices(self.device, kind="input")
        except (sd.PortAudioError, ValueError) as e:
            raise PermissionDeniedError(f"Microphone access is unavailable: {e}") from e
        if int(info.get("max_input_channels", 0)) < 1:
            raise PermissionDeniedError(f"Input device '{info.get('name')}' has no input channels")

        self._frames = queue.Queue()
        try:
            self._stream = sd.InputStream(
                device=self.device,
                channels=1,
                samplerate=SAMPLE_RATE,
                dtype="float32",
                blocksize=int(SAMPLE_RATE * FRAME_SEC),
                callback=self._audio_callback,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            self._stream = None
            raise AudioSessionError(f"Could not configure the audio session: {e}") from e
        print(f"Microphone stream started: {info.get('name')}")

    def _audio_callback(self, indata, frames, time_info, status) -> None:  # noqa: ARG002
        if status:
            print(f"Microphone status: {status}")
        chunk = indata[:, 0].copy()
        if self.level_callback is not None:
            self.level_callback(float(np.sqrt(np.mean(chunk**2))) if chunk.size else 0.0)
        self._frames.put(chunk)

    def frames(self, stop_event: threading.Event) -> Iterator[np.ndarray]:
        """Yield captured frames until stop_event is set, then drain what is left."""
        while not stop_event.is_set():
            try:
                yield self._frames.get(timeout=0.1)
            except queue.Empty:
                continue
        # Only what was captured before the stop; the stream keeps running until close()
        for _ in range(self._frames.qsize()):
            try:
                yield self._frames.get_nowait()
            except queue.Empty:
                return

    def close(self) -> None:
        if self._stream is None:
            return
        self._stream.stop()
        self._stream.close()
        self._stream = None
        print("Microphone stream stopped")
