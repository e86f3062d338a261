"""
Debounced publishing of the transcript to the relay store.

Partial results arrive several times per second. Writing on every one would
flood the store and, downstream, the translation API of every viewer, so
writes are debounced:

    publish() ──► cancel pending handle ──► call_later(DEBOUNCE_SEC, fire)
                                                        │
                                                        ▼
                               status: SENDING ──► SENT | NETWORK_ERROR | SERVER_ERROR

Only the payload of the last publish() inside the window is written.

Cancellation is best-effort: a handle that has not fired yet is cancelled
completely, a write that is already in flight always runs to completion.
Failed writes are not retried; the next transcript change publishes again.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from enum import Enum

from listenai.remote import RemoteState, RemoteStoreClient, WriteOutcome
from listenai.state import Observable

DEBOUNCE_SEC = float(os.getenv("DEBOUNCE_SEC", "0.5"))


class ConnectionStatus(Enum):
    IDLE = "idle"
    SENDING = "sending"
    SENT = "sent"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"


_STATUS_BY_OUTCOME = {
    WriteOutcome.SUCCESS: ConnectionStatus.SENT,
    WriteOutcome.NETWORK_ERROR: ConnectionStatus.NETWORK_ERROR,
    WriteOutcome.SERVER_ERROR: ConnectionStatus.SERVER_ERROR,
}


@dataclass
class SyncState:
    """Publisher bookkeeping. At most one pending handle exists at a time."""

    last_published: RemoteState | None = None
    pending: asyncio.TimerHandle | None = None
    pending_state: RemoteState | None = None
    in_flight: set[asyncio.Task] = field(default_factory=set)

    @property
    def last_published_text(self) -> str:
        return self.last_published.text if self.last_published else ""


class SyncPublisher:
    """Debounces transcript updates and writes them to the relay store.

    Must be used from the event loop that owns the transcript.
    """

    def __init__(self, client: RemoteStoreClient, debounce_sec: float = DEBOUNCE_SEC) -> None:
        self.client = client
        self.debounce_sec = debounce_sec
        self.state = SyncState()
        self.status: Observable[ConnectionStatus] = Observable(ConnectionStatus.IDLE)
        self.write_count = 0

    def publish(self, transcript: str, source_lang: str, target_lang: str) -> None:
        """Schedule a write of the given state, superseding any pending one."""
        remote_state = RemoteState(text=transcript, source_lang=source_lang, target_lang=target_lang)
        self._cancel_pending()

        # Nothing to do if the store already holds exactly this state
        if remote_state == self.state.last_published and not self.state.in_flight:
            return

        loop = asyncio.get_running_loop()
        self.state.pending_state = remote_state
        self.state.pending = loop.call_later(self.debounce_sec, self._fire, remote_state)

    @property
    def has_pending(self) -> bool:
        return self.state.pending is not None

    async def flush(self) -> None:
        """Write a pending state immediately and wait for in-flight writes."""
        pending_state = self.state.pending_state
        self._cancel_pending()
        # Older writes complete before the flushed state is sent
        if self.state.in_flight:
            await asyncio.gather(*self.state.in_flight)
        if pending_state is not None:
            await self._send(pending_state)

    async def aclose(self) -> None:
        """Drop any pending write and let in-flight writes finish."""
        self._cancel_pending()
        if self.state.in_flight:
            await asyncio.gather(*self.state.in_flight)

    def _cancel_pending(self) -> None:
        if self.state.pending is not None:
            self.state.pending.cancel()
        self.state.pending = None
        self.state.pending_state = None

    def _fire(self, remote_state: RemoteState) -> None:
        self.state.pending = None
        self.state.pending_state = None
        task = asyncio.get_running_loop().create_task(self._send(remote_state))
        self.state.in_flight.add(task)
        task.add_done_callback(self.state.in_flight.discard)

    async def _send(self, remote_state: RemoteState) -> None:
        self.status.set(ConnectionStatus.SENDING)
        self.write_count += 1
        result = await self.client.write(remote_state)
        if result.ok:
            self.state.last_published = remote_state
        self.status.set(_STATUS_BY_OUTCOME[result.outcome])
        if self.write_count <= 3 or self.write_count % 50 == 0:
            print(
                f"Publish #{self.write_count}: {len(remote_state.text)} chars "
                f"({remote_state.source_lang}->{remote_state.target_lang}) -> {self.status.value.value}"
            )
