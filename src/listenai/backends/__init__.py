"""Pluggable backend factory functions.

Each factory returns a singleton backend instance based on environment variables.
Only the selected backend is imported (lazy), so missing dependencies for other
backends don't cause ImportError.

Environment variables:
    ASR_BACKEND: "whisper" (default)
    MT_BACKEND: "mymemory" (default)
    TTS_BACKEND: "console" (default)
"""

from __future__ import annotations

import os
from functools import lru_cache

from listenai.backends.base import SpeechRecognizer, SpeechSynthesizer, TranslationBackend


@lru_cache(maxsize=1)
def get_recognizer_backend() -> SpeechRecognizer:
    """Get the configured speech recognition backend singleton."""
    name = os.getenv("ASR_BACKEND", "whisper")
    if name == "whisper":
        from listenai.backends.asr.whisper import WhisperRecognizer

        return WhisperRecognizer()
    raise ValueError(f"Unknown ASR backend: {name}")


@lru_cache(maxsize=1)
def get_translation_backend() -> TranslationBackend:
    """Get the configured translation backend singleton."""
    name = os.getenv("MT_BACKEND", "mymemory")
    if name == "mymemory":
        from listenai.backends.translation.mymemory import MyMemoryBackend

        return MyMemoryBackend()
    raise ValueError(f"Unknown translation backend: {name}")


@lru_cache(maxsize=1)
def get_synthesizer_backend() -> SpeechSynthesizer:
    """Get the configured speech playback backend singleton."""
    name = os.getenv("TTS_BACKEND", "console")
    if name == "console":
        from listenai.backends.tts.console import ConsoleSynthesizer

        return ConsoleSynthesizer()
    raise ValueError(f"Unknown TTS backend: {name}")
