"""PathwayChannel — a pathway's data-delivery endpoint.

A channel is an ordered FIFO of byte payloads.  The router writes into it;
consumers read, drain, iterate, or subscribe for push delivery.  Channels
can be bounded: when a bounded channel is full the configured
``OverflowPolicy`` decides which payload is dropped, so a slow consumer
never blocks routing.
"""

from __future__ import annotations

import collections
import logging
from collections.abc import Callable, Iterator
from typing import Any

from udpgroup.models.config import OverflowPolicy

logger = logging.getLogger(__name__)


class PathwayChannel:
    """Bounded (or unbounded) payload queue bound to one pathway key.

    Parameters
    ----------
    key:
        The registry key this channel was created under.  Immutable.
    maxsize:
        Maximum number of queued payloads.  ``0`` means unbounded.
    overflow:
        Policy applied when a bounded channel is full.
    """

    def __init__(
        self,
        key: str,
        *,
        maxsize: int = 0,
        overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
    ) -> None:
        if maxsize < 0:
            raise ValueError(f"maxsize must be >= 0, got {maxsize}")
        self._key = key
        self._maxsize = maxsize
        self._overflow = OverflowPolicy(overflow)
        self._queue: collections.deque[bytearray] = collections.deque()
        self._subscribers: list[Callable[[bytearray], Any]] = []
        self._closed = False
        self.dropped = 0
        self.received = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def key(self) -> str:
        return self._key

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def overflow(self) -> OverflowPolicy:
        return self._overflow

    @property
    def pending(self) -> int:
        """Number of payloads waiting to be read."""
        return len(self._queue)

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def write(self, payload: bytearray) -> bool:
        """Queue *payload*.

        Returns ``False`` when the payload was not queued (channel closed,
        or full under ``DROP_NEWEST``).
        """
        if self._closed:
            logger.debug("Channel %s closed; payload discarded", self._key)
            return False

        if self._maxsize and len(self._queue) >= self._maxsize:
            self.dropped += 1
            if self._overflow is OverflowPolicy.DROP_NEWEST:
                logger.warning(
                    "Channel %s full (maxsize=%d); dropped incoming payload",
                    self._key,
                    self._maxsize,
                )
                return False
            self._queue.popleft()
            logger.warning(
                "Channel %s full (maxsize=%d); dropped oldest payload",
                self._key,
                self._maxsize,
            )

        self._queue.append(payload)
        self.received += 1

        for callback in list(self._subscribers):
            try:
                callback(payload)
            except Exception:  # noqa: BLE001
                logger.exception("Channel %s subscriber %r failed", self._key, callback)

        return True

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def read(self) -> bytearray | None:
        """Pop the oldest payload, or ``None`` if the channel is empty."""
        if self._queue:
            return self._queue.popleft()
        return None

    def drain(self, *, max_messages: int | None = None) -> list[bytearray]:
        """Pop up to *max_messages* payloads (all of them by default)."""
        messages: list[bytearray] = []
        while self._queue and (max_messages is None or len(messages) < max_messages):
            messages.append(self._queue.popleft())
        return messages

    def subscribe(self, callback: Callable[[bytearray], Any]) -> None:
        """Call *callback* with every payload as it is queued."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[bytearray], Any]) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def close(self) -> None:
        """Refuse further writes.  Queued payloads stay readable."""
        self._closed = True
        self._subscribers.clear()

    def __iter__(self) -> Iterator[bytearray]:
        while self._queue:
            yield self._queue.popleft()

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return (
            f"PathwayChannel(key={self._key!r}, pending={len(self._queue)}, "
            f"maxsize={self._maxsize}, overflow={self._overflow.value})"
        )
