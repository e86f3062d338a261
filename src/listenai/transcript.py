"""
Segmented transcript built from overlapping recognition results.

The recogniser reports a cumulative best guess for the utterance on every
partial callback, not a delta. The accumulator therefore keeps two things:

    - committed segments: one immutable string per completed recognition
      session, only ever appended or cleared wholesale
    - live text: the in-flight partial result, replaced on every callback

The transcript is derived from both on every change:

    transcript = SEPARATOR.join(committed + [live])   # live only if non-empty

Because live text replaces instead of appending, a commit followed by a new
partial can never double the committed text.

Threading model:
    All mutations must happen on the owning event loop. Recogniser callbacks
    arriving on worker threads are marshalled with loop.call_soon_threadsafe
    before they reach the accumulator (see controller.py).
"""

from __future__ import annotations

from listenai.state import Observable

SEPARATOR = "\n\n"


def join_blocks(blocks: list[str]) -> str:
    return SEPARATOR.join(blocks)


def split_blocks(text: str) -> list[str]:
    """Split text into paragraph blocks on the blank-line separator, dropping empty ones."""
    return [block for block in text.split(SEPARATOR) if block]


class TranscriptAccumulator:
    """Committed segments plus the live partial result."""

    def __init__(self) -> None:
        self._segments: list[str] = []
        self._live = ""
        self.transcript: Observable[str] = Observable("")

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self._segments)

    @property
    def live_text(self) -> str:
        return self._live

    @property
    def text(self) -> str:
        return self.transcript.value

    def on_partial_result(self, text: str) -> None:
        """Replace the live text with the recogniser's latest cumulative guess."""
        self._live = text
        self._recompute()

    def on_final_result(self, text: str | None = None) -> None:
        """Take the final text for the session (if given) and commit it."""
        if text is not None:
            self._live = text
        self.commit()

    def commit(self) -> None:
        """Move the live text into the committed segments."""
        if self._live:
            self._segments.append(self._live)
        self._live = ""
        self._recompute()

    def start_new_session(self) -> None:
        """Begin a new recognition session, committing any pending live text first."""
        if self._live:
            self.commit()

    def reset(self) -> None:
        self._segments.clear()
        self._live = ""
        self._recompute()

    def _recompute(self) -> None:
        parts = list(self._segments)
        if self._live:
            parts.append(self._live)
        self.transcript.set(join_blocks(parts))
