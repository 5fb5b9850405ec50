"""EventEmitter — observer registration keyed by event kind.

Handlers run synchronously in subscription order.  A handler that raises
is logged and does not prevent delivery to the remaining handlers.  An
``error`` event with no subscribers is logged with its traceback rather
than dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from udpgroup.models.events import GroupEvent

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class EventEmitter:
    """Publish/subscribe hub for ``GroupEvent`` notifications.

    Usage
    -----
    >>> emitter = EventEmitter()
    >>> seen = []
    >>> emitter.on(GroupEvent.INFO, seen.append)
    >>> emitter.emit(GroupEvent.INFO, "hello")
    1
    >>> seen
    ['hello']
    """

    def __init__(self) -> None:
        self._handlers: dict[GroupEvent, list[tuple[Handler, bool]]] = {
            kind: [] for kind in GroupEvent
        }

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def on(self, event: GroupEvent | str, handler: Handler) -> None:
        """Subscribe *handler* to every future *event*."""
        self._handlers[GroupEvent(event)].append((handler, False))

    def once(self, event: GroupEvent | str, handler: Handler) -> None:
        """Subscribe *handler* to the next *event* only."""
        self._handlers[GroupEvent(event)].append((handler, True))

    def off(self, event: GroupEvent | str, handler: Handler) -> None:
        """Remove the first subscription of *handler* for *event*."""
        entries = self._handlers[GroupEvent(event)]
        for index, (registered, _) in enumerate(entries):
            if registered == handler:
                del entries[index]
                return

    def listener_count(self, event: GroupEvent | str) -> int:
        return len(self._handlers[GroupEvent(event)])

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def emit(self, event: GroupEvent | str, *args: Any) -> int:
        """Call every handler for *event* with *args*.

        Returns the number of handlers invoked.
        """
        kind = GroupEvent(event)
        entries = self._handlers[kind]

        if not entries:
            if kind is GroupEvent.ERROR:
                exc = args[0] if args else None
                logger.error(
                    "Unhandled error event: %s",
                    exc,
                    exc_info=exc if isinstance(exc, BaseException) else None,
                )
            return 0

        # Snapshot so handlers may subscribe/unsubscribe while we iterate.
        snapshot = list(entries)
        self._handlers[kind] = [entry for entry in entries if not entry[1]]

        for handler, _ in snapshot:
            try:
                handler(*args)
            except Exception:  # noqa: BLE001
                logger.exception("Handler %r failed for %s event", handler, kind.value)

        return len(snapshot)
