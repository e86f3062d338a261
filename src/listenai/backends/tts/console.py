"""Console speech playback backend.

Prints the utterance and its voice parameters instead of producing audio.
Used where no platform speech engine is configured.
"""

from __future__ import annotations

from listenai.backends.base import SpeechSynthesizer
from listenai.backends.types import Utterance


class ConsoleSynthesizer(SpeechSynthesizer):
    def __init__(self) -> None:
        self.spoken: list[Utterance] = []

    def speak(self, utterance: Utterance) -> None:
        self.spoken.append(utterance)
        print(
            f"TTS [{utterance.voice_locale} pitch={utterance.pitch} rate={utterance.rate} "
            f"volume={utterance.volume}]: {utterance.text}"
        )
