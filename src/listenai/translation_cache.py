"""Per-block cache of the last successful translation."""

from __future__ import annotations

from listenai.transcript import SEPARATOR


class TranslationCache:
    """Maps block index -> last translated text.

    Entries never expire on their own; only the viewer invalidates them, when
    a block's source text or the target language changes.
    """

    def __init__(self) -> None:
        self._entries: dict[int, str] = {}

    def get(self, index: int) -> str | None:
        return self._entries.get(index)

    def set(self, index: int, text: str) -> None:
        self._entries[index] = text

    def invalidate(self, index: int) -> None:
        self._entries.pop(index, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, index: int) -> bool:
        return index in self._entries

    def aggregate(self) -> str:
        """All cached translations in block order, joined like the source transcript."""
        return SEPARATOR.join(self._entries[index] for index in sorted(self._entries))
