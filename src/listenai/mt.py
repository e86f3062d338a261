"""
Machine translation helpers: language codes, chunking, and block translation.

Blocks longer than TRANSLATE_CHUNK_CHARS are split on word boundaries and the
chunks are translated concurrently. Results are joined with single spaces in
chunk order, whatever order the lookups complete in.

Retry policy (the lookup API rate-limits without notice):
    - retryable failures (HTTP 429, 5xx, transport errors, timeouts) are
      retried up to TRANSLATE_RETRIES times
    - the delay starts at TRANSLATE_BACKOFF_SEC and doubles per attempt
    - non-retryable failures and exhausted retries return None, leaving the
      block untranslated
"""

from __future__ import annotations

import asyncio
import os

from listenai.backends import get_translation_backend
from listenai.backends.base import TranslationBackend
from listenai.errors import TranslationError

TRANSLATE_CHUNK_CHARS = int(os.getenv("TRANSLATE_CHUNK_CHARS", "500"))
TRANSLATE_RETRIES = int(os.getenv("TRANSLATE_RETRIES", "2"))
TRANSLATE_BACKOFF_SEC = float(os.getenv("TRANSLATE_BACKOFF_SEC", "0.5"))

# Supported language codes: code -> (full_name, locale)
LANG_INFO = {
    "en": ("English", "en-US"),
    "pl": ("Polish", "pl-PL"),
    "de": ("German", "de-DE"),
    "es": ("Spanish", "es-ES"),
    "fr": ("French", "fr-FR"),
}

LANG_NAMES = {k: v[0] for k, v in LANG_INFO.items()}

DEFAULT_LOCALE = "en-US"


def locale_for(lang_code: str) -> str:
    """Map a two-letter language code to a voice locale. Unknown codes fall back to en-US."""
    info = LANG_INFO.get(lang_code)
    return info[1] if info else DEFAULT_LOCALE


def split_to_chunks(text: str, limit: int) -> list[str]:
    """Split text into chunks of at most `limit` characters without splitting words.

    A single word longer than `limit` becomes a chunk of its own.
    " ".join(chunks) reproduces the words of `text` in order.
    """
    chunks: list[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= limit:
            current = f"{current} {word}"
        else:
            chunks.append(current)
            current = word
    if current:
        chunks.append(current)
    return chunks


async def translate_with_retry(
    backend: TranslationBackend,
    text: str,
    src_lang: str,
    tgt_lang: str,
    retries: int | None = None,
    backoff_sec: float | None = None,
) -> str | None:
    """Translate one chunk, retrying retryable failures. Returns None on failure."""
    if retries is None:
        retries = TRANSLATE_RETRIES
    delay = TRANSLATE_BACKOFF_SEC if backoff_sec is None else backoff_sec
    for attempt in range(retries + 1):
        try:
            return await backend.translate(text, src_lang, tgt_lang)
        except TranslationError as e:
            if not e.retryable or attempt == retries:
                print(f"Translation failed ({src_lang}->{tgt_lang}, attempt {attempt + 1}): {e}")
                return None
            print(f"Translation retry in {delay:.2f}s: {e}")
            await asyncio.sleep(delay)
            delay *= 2
    return None


async def translate_block(
    text: str,
    src_lang: str,
    tgt_lang: str,
    backend: TranslationBackend | None = None,
    limit: int | None = None,
) -> str | None:
    """Translate a whole paragraph block. Returns None if any chunk fails."""
    if not text.strip():
        return ""
    if backend is None:
        backend = get_translation_backend()
    if limit is None:
        limit = TRANSLATE_CHUNK_CHARS

    chunks = split_to_chunks(text, limit) if len(text) > limit else [text]
    results = await asyncio.gather(
        *(translate_with_retry(backend, chunk, src_lang, tgt_lang) for chunk in chunks)
    )
    if any(result is None for result in results):
        return None
    return " ".join(results)
