"""
Unread message counter and its polling synchronizer.

UnreadCounter is a plain owned object that is handed to every consumer that
needs the count. UnreadSynchronizer keeps it in line with the message
collection while an operator session is active:

    IDLE / STOPPED --(authenticated, not loading)--> POLLING
    POLLING --(logged out, or close())--> STOPPED   (count reset to 0)

While polling, one cycle runs immediately and then one per interval, all
inside a single asyncio task.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from folio.content.gateway import ContentGateway
from folio.content.models import ContentKind
from folio.core.auth import AuthSignal, AuthState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30.0

CountListener = Callable[[int], None]


class UnreadCounter:
    """Shared unread-message count, never negative."""

    def __init__(self, count: int = 0):
        self._count = max(0, count)
        self._listeners: list[CountListener] = []

    @property
    def count(self) -> int:
        return self._count

    def subscribe(self, listener: CountListener) -> Callable[[], None]:
        """Call listener(count) after every change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, value: int) -> None:
        value = max(0, int(value))
        if value == self._count:
            return
        self._count = value
        for listener in list(self._listeners):
            listener(value)

    def increment(self) -> None:
        self.set(self._count + 1)

    def decrement_floor0(self) -> None:
        """One message was read."""
        self.set(self._count - 1)

    def reset_to_zero(self) -> None:
        self.set(0)


class SyncState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    STOPPED = "stopped"


class UnreadSynchronizer:
    """Polls the message collection and keeps an UnreadCounter current."""

    def __init__(
        self,
        gateway: ContentGateway,
        counter: UnreadCounter,
        auth: AuthSignal,
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """Initialize the synchronizer.

        Args:
            gateway: Source of the message collection
            counter: Counter to keep in sync (shared with other consumers)
            auth: Authentication signal that starts and stops polling
            interval: Seconds between polling cycles
        """
        self.gateway = gateway
        self.counter = counter
        self.auth = auth
        self.interval = interval

        self.state = SyncState.IDLE
        self._task: asyncio.Task | None = None
        self._in_flight = False
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def attach(self) -> None:
        """Start following the auth signal, applying its current state now.

        Must be called from inside a running event loop.
        """
        if self._unsubscribe is None:
            self._unsubscribe = self.auth.subscribe(self._on_auth_change)
        self._on_auth_change(self.auth.state)

    def _on_auth_change(self, state: AuthState) -> None:
        if not state.is_authenticated:
            self.stop()
        elif state.is_ready:
            self.start()

    def start(self) -> None:
        """Begin polling; a no-op while already polling."""
        if self.state is SyncState.POLLING:
            return
        logger.debug("Unread synchronizer: %s -> polling", self.state.value)
        self.state = SyncState.POLLING
        self._task = asyncio.get_running_loop().create_task(self._poll())

    def stop(self) -> None:
        """Cancel polling and zero the counter."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if self.state is SyncState.POLLING:
            logger.debug("Unread synchronizer: polling -> stopped")
            self.state = SyncState.STOPPED
        self.counter.reset_to_zero()

    async def close(self) -> None:
        """Tear down: detach from the auth signal and wait for the task to end."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        task = self._task
        self.stop()
        self.state = SyncState.STOPPED
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _poll(self) -> None:
        while True:
            await self.sync_once()
            await asyncio.sleep(self.interval)

    async def sync_once(self) -> bool:
        """Run one fetch-and-set cycle.

        Returns:
            True if the counter was updated from the API
        """
        if not self.auth.is_authenticated:
            self.counter.reset_to_zero()
            return False

        if self._in_flight:
            logger.debug("Unread sync skipped: previous cycle still in flight")
            return False

        self._in_flight = True
        try:
            response = await self.gateway.fetch_kind(ContentKind.MESSAGE)
        except Exception as e:
            logger.warning("Error fetching unread count: %s", e)
            return False
        finally:
            self._in_flight = False

        if not response.success:
            logger.warning(
                "Error fetching unread count: %s", response.error or "API reported failure"
            )
            return False

        # Session ended while the fetch was pending
        if not self.auth.is_authenticated:
            self.counter.reset_to_zero()
            return False

        unread = sum(
            1 for message in response.data
            if isinstance(message, dict) and not message.get("read", False)
        )
        self.counter.set(unread)
        return True
