"""
HTTP client for the transcript relay store.

Wire format (see main.py for the server side):
    POST /              {"text": ..., "sourceLang": ..., "targetLang": ...}
    GET  /?action=fetch last posted object, or the default state
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

STORE_URL = os.getenv("STORE_URL", "http://localhost:8000/")
STORE_TIMEOUT_SEC = float(os.getenv("STORE_TIMEOUT_SEC", "5.0"))


@dataclass(frozen=True)
class RemoteState:
    """The single record held by the store: transcript plus language pair."""

    text: str = ""
    source_lang: str = "en"
    target_lang: str = "pl"

    def to_payload(self) -> dict[str, str]:
        return {
            "text": self.text,
            "sourceLang": self.source_lang,
            "targetLang": self.target_lang,
        }

    @classmethod
    def from_payload(cls, data: Any) -> RemoteState:
        """Build a state from a fetched JSON object, falling back to defaults per field."""
        if not isinstance(data, dict):
            return cls()
        default = cls()
        text = data.get("text")
        source_lang = data.get("sourceLang")
        target_lang = data.get("targetLang")
        return cls(
            text=text if isinstance(text, str) else default.text,
            source_lang=source_lang if isinstance(source_lang, str) and source_lang else default.source_lang,
            target_lang=target_lang if isinstance(target_lang, str) and target_lang else default.target_lang,
        )


class WriteOutcome(Enum):
    SUCCESS = "success"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class WriteResult:
    outcome: WriteOutcome
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is WriteOutcome.SUCCESS


class RemoteStoreClient:
    """Async client for the relay store.

    write() never raises: transport failures and timeouts are reported as
    NETWORK_ERROR, non-2xx responses as SERVER_ERROR. read() raises
    httpx.HTTPError or ValueError and leaves handling to the caller.
    """

    def __init__(
        self,
        base_url: str = STORE_URL,
        timeout: float = STORE_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def write(self, state: RemoteState) -> WriteResult:
        try:
            response = await self._client.post(self.base_url, json=state.to_payload())
        except httpx.HTTPError as e:
            print(f"Store write failed ({type(e).__name__}): {e}")
            return WriteResult(WriteOutcome.NETWORK_ERROR)

        if response.is_success:
            return WriteResult(WriteOutcome.SUCCESS, response.status_code)
        print(f"Store rejected write: HTTP {response.status_code}")
        return WriteResult(WriteOutcome.SERVER_ERROR, response.status_code)

    async def read(self) -> RemoteState:
        response = await self._client.get(self.base_url, params={"action": "fetch"})
        response.raise_for_status()
        return RemoteState.from_payload(response.json())

    async def aclose(self) -> None:
        await self._client.aclose()
