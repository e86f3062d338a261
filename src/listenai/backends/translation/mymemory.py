"""MyMemory translation backend over its public HTTP API.

Request:  GET {MT_API_URL}?q=<text>&langpair=<src>|<tgt>
Response: {"responseData": {"translatedText": "..."}, "responseStatus": 200, ...}

No authentication. The service applies its own rate limits and reports some
failures with HTTP 200 and a non-200 responseStatus in the body, so both the
transport status and the body status are checked.
"""

from __future__ import annotations

import os

import httpx

from listenai.backends.base import TranslationBackend
from listenai.errors import TranslationError

MT_API_URL = os.getenv("MT_API_URL", "https://api.mymemory.translated.net/get")
TRANSLATE_TIMEOUT_SEC = float(os.getenv("TRANSLATE_TIMEOUT_SEC", "10.0"))
MT_CONTACT_EMAIL = os.getenv("MT_CONTACT_EMAIL", "")


def _is_retryable_status(status: int) -> bool:
    return status == 429 or status >= 500


class MyMemoryBackend(TranslationBackend):
    """Translation lookups against the MyMemory API."""

    def __init__(
        self,
        api_url: str = MT_API_URL,
        timeout: float = TRANSLATE_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def translate(self, text: str, src_lang: str, tgt_lang: str) -> str:
        if not text.strip():
            return ""

        params = {"q": text, "langpair": f"{src_lang}|{tgt_lang}"}
        if MT_CONTACT_EMAIL:
            # Registered contact address raises the daily quota
            params["de"] = MT_CONTACT_EMAIL

        try:
            response = await self._client.get(self.api_url, params=params)
        except httpx.HTTPError as e:
            raise TranslationError(f"MyMemory request failed: {e}", retryable=True) from e

        if not response.is_success:
            raise TranslationError(
                f"MyMemory returned HTTP {response.status_code}",
                retryable=_is_retryable_status(response.status_code),
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TranslationError("MyMemory returned invalid JSON") from e
        if not isinstance(data, dict):
            raise TranslationError(f"MyMemory returned {type(data).__name__}, expected an object")

        body_status = data.get("responseStatus", 200)
        try:
            body_status = int(body_status)
        except (TypeError, ValueError):
            body_status = 200
        if body_status != 200:
            raise TranslationError(
                f"MyMemory responseStatus {body_status}: {data.get('responseDetails', '')}",
                retryable=_is_retryable_status(body_status),
            )

        response_data = data.get("responseData")
        if not isinstance(response_data, dict):
            raise TranslationError("MyMemory response has no responseData object")
        translated = response_data.get("translatedText")
        if not isinstance(translated, str):
            raise TranslationError("MyMemory response has no translatedText")
        return translated

    async def aclose(self) -> None:
        await self._client.aclose()
