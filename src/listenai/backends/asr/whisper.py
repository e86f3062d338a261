"""On-device speech recognition with faster-whisper (CTranslate2).

Whisper is not a streaming model, so partial results are produced by
re-decoding the whole utterance buffer every PARTIAL_INTERVAL_SEC of new
audio. Each decode yields the cumulative best guess for the utterance, which
is exactly the shape TranscriptAccumulator expects from partial callbacks.

Utterances are capped at MAX_UTTERANCE_SEC (Whisper's window is 30s). When
the cap is hit the utterance is finalised and a new one starts.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator

import numpy as np

from listenai.backends.base import SpeechRecognizer
from listenai.backends.types import RecognitionEvent
from listenai.errors import RecognitionError

ASR_MODEL = os.getenv("ASR_MODEL", "small")
ASR_DEVICE = os.getenv("ASR_DEVICE", "cpu")
ASR_COMPUTE_TYPE = os.getenv("ASR_COMPUTE_TYPE", "int8")
PARTIAL_INTERVAL_SEC = float(os.getenv("PARTIAL_INTERVAL_SEC", "0.5"))
MAX_UTTERANCE_SEC = float(os.getenv("MAX_UTTERANCE_SEC", "28.0"))

SAMPLE_RATE = 16000


class WhisperRecognizer(SpeechRecognizer):
    """faster-whisper recogniser emitting cumulative partial results."""

    # Phrases Whisper produces on silence or noise
    _hallucination_phrases: frozenset[str] = frozenset(
        [
            "thank you",
            "thanks for watching",
            "thank you for watching",
            "please subscribe",
            "subtitles by the amara.org community",
            "see you next time",
            "dziękuję za uwagę",
            "napisy stworzone przez społeczność amara.org",
            "untertitel im auftrag des zdf",
            "sous-titrage st' 501",
            "subtítulos realizados por la comunidad de amara.org",
        ]
    )

    def __init__(self) -> None:
        self._model = None

    def load_model(self) -> None:
        if self._model is not None:
            return
        from faster_whisper import WhisperModel

        print(f"  Loading WhisperModel: {ASR_MODEL}")
        print(f"  Device: {ASR_DEVICE}, Compute type: {ASR_COMPUTE_TYPE}")
        self._model = WhisperModel(
            ASR_MODEL,
            device=ASR_DEVICE,
            compute_type=ASR_COMPUTE_TYPE,
        )
        print("  WhisperModel loaded")

    def warmup(self) -> None:
        self.load_model()
        silence = np.zeros(SAMPLE_RATE, dtype=np.float32)
        self._decode(silence, None)
        print("  ASR warmup complete")

    def recognize(
        self,
        frames: Iterable[np.ndarray],
        *,
        language: str | None = None,
    ) -> Iterator[RecognitionEvent]:
        self.load_model()

        partial_every = int(PARTIAL_INTERVAL_SEC * SAMPLE_RATE)
        max_samples = int(MAX_UTTERANCE_SEC * SAMPLE_RATE)

        chunks: list[np.ndarray] = []
        total = 0
        since_decode = 0
        last_text = ""

        for frame in frames:
            samples = np.asarray(frame, dtype=np.float32).reshape(-1)
            if samples.size == 0:
                continue
            chunks.append(samples)
            total += samples.size
            since_decode += samples.size

            if total >= max_samples:
                text = self._decode(np.concatenate(chunks), language) or last_text
                if text:
                    yield RecognitionEvent(text=text, is_final=True)
                chunks, total, since_decode, last_text = [], 0, 0, ""
                continue

            if since_decode >= partial_every:
                since_decode = 0
                text = self._decode(np.concatenate(chunks), language)
                if text and text != last_text:
                    last_text = text
                    yield RecognitionEvent(text=text, is_final=False)

        # Stream ended: one last decode over everything is authoritative
        if chunks:
            text = self._decode(np.concatenate(chunks), language) or last_text
        else:
            text = last_text
        yield RecognitionEvent(text=text, is_final=True)

    def _decode(self, audio: np.ndarray, language: str | None) -> str:
        try:
            segments, _info = self._model.transcribe(
                audio,
                language=language,
                beam_size=1,
                vad_filter=True,
                condition_on_previous_text=False,
                no_speech_threshold=0.3,
            )
            texts = [seg.text.strip() for seg in segments]
        except Exception as e:
            raise RecognitionError(f"Whisper decode failed: {e}") from e

        return " ".join(text for text in texts if text and not self._is_hallucination(text))

    @classmethod
    def _is_hallucination(cls, text: str) -> bool:
        normalized = text.strip().lower().rstrip(".!?…")
        return normalized in cls._hallucination_phrases or text.strip() in ("...", "…")
