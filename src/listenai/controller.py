"""
Recording controller: capture -> recognition -> transcript -> publish.

SpeechController owns one TranscriptAccumulator and one SyncPublisher and
drives recording sessions:

    start_recording()
        open audio source          (PermissionDeniedError / AudioSessionError
                                    -> error_message, nothing started)
        commit pending live text
        worker thread: recogniser.recognize(audio frames)
            every event ──call_soon_threadsafe──► accumulator (event loop)
    stop_recording()
        stop frames, wait for the final event, speak the transcript

The worker thread never touches the accumulator directly; every recogniser
event is marshalled onto the owning event loop first, so partial and final
results cannot interleave with commits.

A recognition failure ends the session as a final result would: the live
text is committed, the audio source is released, and committed segments are
kept. The failure is surfaced in error_message.

Published state (for UI surfaces): transcript, is_recording, error_message,
level, and publisher.status.
"""

from __future__ import annotations

import asyncio
import os
import threading
from collections.abc import Iterator
from typing import Protocol

import numpy as np

from listenai.backends import get_recognizer_backend, get_synthesizer_backend
from listenai.backends.base import SpeechRecognizer, SpeechSynthesizer
from listenai.backends.types import RecognitionEvent, Utterance
from listenai.errors import CaptureError, RecognitionError
from listenai.mt import locale_for
from listenai.state import Observable
from listenai.sync import SyncPublisher
from listenai.transcript import TranscriptAccumulator

SOURCE_LANG = os.getenv("SOURCE_LANG", "en")
TARGET_LANG = os.getenv("TARGET_LANG", "pl")
SPEECH_RATE = float(os.getenv("SPEECH_RATE", "0.5"))


class AudioSource(Protocol):
    def open(self) -> None: ...

    def frames(self, stop_event: threading.Event) -> Iterator[np.ndarray]: ...

    def close(self) -> None: ...


class SpeechController:
    """Runs recording sessions and keeps the relay store in sync with the transcript."""

    def __init__(
        self,
        publisher: SyncPublisher,
        audio_source: AudioSource,
        recognizer: SpeechRecognizer | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        source_lang: str = SOURCE_LANG,
        target_lang: str = TARGET_LANG,
        auto_speak: bool = True,
    ) -> None:
        self.publisher = publisher
        self.audio_source = audio_source
        self.recognizer = recognizer or get_recognizer_backend()
        self.synthesizer = synthesizer or get_synthesizer_backend()
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.auto_speak = auto_speak

        self.accumulator = TranscriptAccumulator()
        self.is_recording: Observable[bool] = Observable(False)
        self.error_message: Observable[str | None] = Observable(None)
        self.level: Observable[float] = Observable(0.0)

        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None
        self._session_done: asyncio.Event | None = None
        self._stop_requested = False
        self.event_count = 0

        self.accumulator.transcript.subscribe(self._on_transcript)

    @property
    def transcript(self) -> str:
        return self.accumulator.text

    def set_languages(self, source_lang: str, target_lang: str) -> None:
        """Change the language pair and push it to the relay with the current transcript."""
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.publisher.publish(self.transcript, self.source_lang, self.target_lang)

    def start_recording(self) -> bool:
        """Start a recording session. Returns False if capture could not start."""
        if self.is_recording.value:
            return True

        self._loop = asyncio.get_running_loop()
        try:
            self.audio_source.open()
        except CaptureError as e:
            print(f"Capture failed to start: {e}")
            self.error_message.set(str(e))
            return False

        self.accumulator.start_new_session()
        self._stop_event.clear()
        self._stop_requested = False
        self._session_done = asyncio.Event()
        self.error_message.set(None)
        self.is_recording.set(True)

        self._worker = threading.Thread(target=self._recognition_worker, daemon=True)
        self._worker.start()
        print(f"Recording started ({self.source_lang}->{self.target_lang})")
        return True

    async def stop_recording(self) -> None:
        """Stop capture and wait until the final result has been committed."""
        if not self.is_recording.value or self._session_done is None:
            return
        self._stop_requested = True
        self._stop_event.set()
        await self._session_done.wait()

    async def wait_for_session(self) -> None:
        """Wait for the current session to end on its own (stream end or failure)."""
        if self._session_done is not None:
            await self._session_done.wait()

    def speak(self, text: str) -> None:
        if not text.strip():
            return
        self.synthesizer.speak(
            Utterance(text=text, voice_locale=locale_for(self.source_lang), rate=SPEECH_RATE)
        )

    def reset(self) -> None:
        """Clear the transcript locally and on the relay."""
        self.accumulator.reset()
        self.publisher.publish("", self.source_lang, self.target_lang)

    def report_level(self, level: float) -> None:
        """Input level callback for the audio source. Safe to call from any thread."""
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self.level.set, round(level, 3))

    def _on_transcript(self, text: str) -> None:
        self.publisher.publish(text, self.source_lang, self.target_lang)

    def _recognition_worker(self) -> None:
        loop = self._loop
        error: str | None = None
        try:
            try:
                frames = self.audio_source.frames(self._stop_event)
                for event in self.recognizer.recognize(frames, language=self.source_lang):
                    loop.call_soon_threadsafe(self._on_event, event)
            except RecognitionError as e:
                error = str(e)
            except Exception as e:  # noqa: BLE001
                # Model load or audio failures end the session like a recognition error
                error = f"{type(e).__name__}: {e}"
            finally:
                self.audio_source.close()
        finally:
            loop.call_soon_threadsafe(self._on_session_end, error)

    def _on_event(self, event: RecognitionEvent) -> None:
        self.event_count += 1
        if event.is_final:
            self.accumulator.on_final_result(event.text)
        else:
            self.accumulator.on_partial_result(event.text)

    def _on_session_end(self, error: str | None) -> None:
        self.accumulator.commit()
        self.is_recording.set(False)
        if error:
            print(f"Recognition failed: {error}")
            self.error_message.set(f"Recognition failed: {error}")
        elif self._stop_requested and self.auto_speak:
            self.speak(self.transcript)
        print(f"Recording stopped after {self.event_count} recognition events")
        if self._session_done is not None:
            self._session_done.set()
