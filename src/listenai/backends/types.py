"""Shared data types for backend interfaces."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RecognitionEvent:
    """One recogniser callback.

    text is the cumulative best guess for the current utterance, not a delta.
    """

    text: str
    is_final: bool = False


@dataclass(frozen=True)
class Utterance:
    """Text plus voice parameters for speech playback."""

    text: str
    voice_locale: str = "en-US"
    pitch: float = 1.0
    rate: float = 0.5
    volume: float = 1.0
