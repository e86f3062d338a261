"""Abstract base classes for the pluggable platform backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator

import numpy as np

from listenai.backends.types import RecognitionEvent, Utterance


class SpeechRecognizer(ABC):
    """Abstract interface for speech-to-text engines."""

    @abstractmethod
    def load_model(self) -> None:
        """Load or download the model."""

    @abstractmethod
    def recognize(
        self,
        frames: Iterable[np.ndarray],
        *,
        language: str | None = None,
    ) -> Iterator[RecognitionEvent]:
        """Recognise speech from a live audio stream.

        Args:
            frames: Float32 mono frames at 16kHz. The iterable ends when
                capture is stopped.
            language: ISO 639-1 language hint (None for auto-detect).

        Yields:
            RecognitionEvent for every partial result, then one final event
            once the stream ends.

        Raises:
            RecognitionError: The engine failed mid-session.
        """

    def warmup(self) -> None:  # noqa: B027
        """Prime the engine before the first session. Default: no-op."""


class TranslationBackend(ABC):
    """Abstract interface for translation lookups."""

    @abstractmethod
    async def translate(self, text: str, src_lang: str, tgt_lang: str) -> str:
        """Translate one piece of text.

        Raises:
            TranslationError: The lookup failed. retryable is set for rate
                limits, server errors and transport failures.
        """

    async def aclose(self) -> None:  # noqa: B027
        """Release network resources. Default: no-op."""


class SpeechSynthesizer(ABC):
    """Abstract interface for text-to-speech engines."""

    @abstractmethod
    def speak(self, utterance: Utterance) -> None:
        """Start speaking. Fire-and-forget: returns before playback finishes."""
