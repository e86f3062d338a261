"""
Error types for the capture and translation pipelines.

Nothing in this taxonomy is fatal to the process:
    - capture errors are surfaced through SpeechController.error_message
    - translation errors end up as a missing translation or a placeholder
    - store errors are reflected in SyncPublisher.status only
"""

from __future__ import annotations


class CaptureError(Exception):
    """Base class for errors raised while starting or running speech capture."""


class PermissionDeniedError(CaptureError):
    """Microphone or speech recognition access is denied, restricted or undetermined."""


class AudioSessionError(CaptureError):
    """The audio input could not be configured or started for this attempt."""


class RecognitionError(CaptureError):
    """The recogniser failed in the middle of a session."""


class TranslationError(Exception):
    """A translation lookup failed.

    Attributes:
        retryable: True for rate limits, server errors and transport failures,
            which are worth another attempt after a backoff.
    """

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable
