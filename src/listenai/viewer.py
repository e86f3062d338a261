"""
Viewer-side reconciliation of the polled transcript.

The viewer polls the relay every POLL_SEC and renders the transcript block by
block (blocks are paragraphs separated by a blank line), together with a
translation of each block and a fullscreen aggregate of all translations.

Per poll cycle:
    1. Fetch the record. A language change updates the badges and forces
       every block to be re-translated.
    2. Empty text after non-empty text is a hard reset: all rendered blocks
       and the translation cache are cleared.
    3. Otherwise split into blocks and compare each with what was rendered
       at the same index:
           equal             -> nothing
           new starts with old -> APPEND, only the suffix is rendered
           anything else     -> REPLACE, the block is rendered in full
       Any change invalidates the block's cached translation and queues it
       for re-translation.
    4. Blocks past the end of the new split are pruned.
    5. Queued blocks are translated concurrently; the fullscreen aggregate is
       re-emitted once their translations land.

The loop is strictly sequential. The next poll is scheduled only after the
current cycle, translations included, has settled, so at most one fetch is
in flight.

Deletions and other non-prefix edits are never diffed character by
character; they are always a full block replace.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from dataclasses import dataclass
from enum import Enum

import httpx

from listenai.backends.base import TranslationBackend
from listenai.mt import translate_block
from listenai.remote import RemoteState, RemoteStoreClient
from listenai.transcript import split_blocks
from listenai.translation_cache import TranslationCache

POLL_SEC = float(os.getenv("POLL_SEC", "0.5"))

TRANSLATION_PLACEHOLDER = "[translation unavailable]"


class BlockChange(Enum):
    UNCHANGED = "unchanged"
    APPENDED = "appended"
    REPLACED = "replaced"


def diff_block(old: str, new: str) -> tuple[BlockChange, str]:
    """Classify a block update. Returns the change and the text to render for it.

    For APPENDED the text is only the new suffix; for REPLACED it is the whole block.
    """
    if new == old:
        return BlockChange.UNCHANGED, ""
    if new.startswith(old):
        return BlockChange.APPENDED, new[len(old) :]
    return BlockChange.REPLACED, new


@dataclass
class RenderedBlock:
    """A paragraph as currently shown by the viewer."""

    index: int
    source_text: str = ""
    translated_text: str | None = None


class Renderer:
    """Receives render instructions from the reconciler. Default: ignore everything."""

    def on_languages(self, source_lang: str, target_lang: str) -> None:
        pass

    def on_block_append(self, index: int, suffix: str) -> None:
        pass

    def on_block_replace(self, index: int, text: str) -> None:
        pass

    def on_block_removed(self, index: int) -> None:
        pass

    def on_block_translation(self, index: int, text: str) -> None:
        pass

    def on_fullscreen(self, text: str) -> None:
        pass

    def on_reset(self) -> None:
        pass


class ViewerReconciler:
    """Polls the relay and keeps rendered blocks and translations in sync."""

    def __init__(
        self,
        client: RemoteStoreClient,
        renderer: Renderer | None = None,
        translator: TranslationBackend | None = None,
        poll_sec: float = POLL_SEC,
    ) -> None:
        self.client = client
        self.renderer = renderer or Renderer()
        self.translator = translator
        self.poll_sec = poll_sec
        self.blocks: list[RenderedBlock] = []
        self.cache = TranslationCache()
        default = RemoteState()
        self.source_lang = default.source_lang
        self.target_lang = default.target_lang
        self.last_text = ""
        self.poll_count = 0

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until `stop` is set. The next poll is scheduled after the current one settles."""
        stop = stop or asyncio.Event()
        self.renderer.on_languages(self.source_lang, self.target_lang)
        while not stop.is_set():
            await self.poll_once()
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=self.poll_sec)

    async def poll_once(self) -> bool:
        """Run one fetch-and-render cycle. Returns False if the fetch failed."""
        self.poll_count += 1
        try:
            state = await self.client.read()
        except (httpx.HTTPError, ValueError) as e:
            if self.poll_count <= 3 or self.poll_count % 20 == 0:
                print(f"Viewer poll #{self.poll_count} failed: {e}")
            return False

        await self.apply(state)
        return True

    async def apply(self, state: RemoteState) -> None:
        """Reconcile the rendered view against a fetched state."""
        languages_changed = self._update_languages(state)

        if not state.text:
            if self.last_text:
                self._hard_reset()
            self.last_text = ""
            return

        self.last_text = state.text
        changed = self._reconcile_blocks(split_blocks(state.text))

        if languages_changed:
            for block in self.blocks:
                self.cache.invalidate(block.index)
                # A translation in the old language is never kept on screen
                block.translated_text = None
            changed = [block.index for block in self.blocks]

        if changed:
            await self._translate_blocks(changed)

    @property
    def fullscreen_text(self) -> str:
        return self.cache.aggregate()

    def _update_languages(self, state: RemoteState) -> bool:
        if state.source_lang == self.source_lang and state.target_lang == self.target_lang:
            return False
        print(
            f"Viewer languages: {self.source_lang}->{self.target_lang} "
            f"changed to {state.source_lang}->{state.target_lang}"
        )
        self.source_lang = state.source_lang
        self.target_lang = state.target_lang
        self.renderer.on_languages(self.source_lang, self.target_lang)
        return True

    def _hard_reset(self) -> None:
        print(f"Viewer reset: clearing {len(self.blocks)} blocks")
        self.blocks.clear()
        self.cache.clear()
        self.renderer.on_reset()
        self.renderer.on_fullscreen("")

    def _reconcile_blocks(self, new_blocks: list[str]) -> list[int]:
        changed: list[int] = []

        for index, text in enumerate(new_blocks):
            if index >= len(self.blocks):
                self.blocks.append(RenderedBlock(index=index))
            block = self.blocks[index]

            change, rendered = diff_block(block.source_text, text)
            if change is BlockChange.UNCHANGED:
                continue

            block.source_text = text
            if change is BlockChange.APPENDED:
                self.renderer.on_block_append(index, rendered)
            else:
                self.renderer.on_block_replace(index, rendered)
            self.cache.invalidate(index)
            changed.append(index)

        self._prune(len(new_blocks))
        return changed

    def _prune(self, count: int) -> None:
        """Drop rendered blocks that no longer exist in the fetched text."""
        if len(self.blocks) <= count:
            return
        for block in reversed(self.blocks[count:]):
            self.cache.invalidate(block.index)
            self.renderer.on_block_removed(block.index)
        del self.blocks[count:]
        self.renderer.on_fullscreen(self.cache.aggregate())

    async def _translate_blocks(self, indices: list[int]) -> None:
        results = await asyncio.gather(*(self._translate_block(index) for index in indices))
        if any(results):
            self.renderer.on_fullscreen(self.cache.aggregate())

    async def _translate_block(self, index: int) -> bool:
        block = self.blocks[index]
        translation = await translate_block(
            block.source_text,
            self.source_lang,
            self.target_lang,
            backend=self.translator,
        )

        if translation is None:
            # Keep showing the previous translation if there is one
            if block.translated_text is None:
                self.renderer.on_block_translation(index, TRANSLATION_PLACEHOLDER)
            return False

        self.cache.set(index, translation)
        block.translated_text = translation
        self.renderer.on_block_translation(index, translation)
        return True
