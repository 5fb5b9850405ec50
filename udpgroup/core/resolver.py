"""SendResolver — turns a send request into a concrete socket send.

Positional sends are first handed to the socket unchanged.  Only when the
socket rejects the port argument with ``BadPortError`` does the resolver
treat that argument as a pathway identifier, look it up, and re-issue the
send to the pathway's concrete address and port.  Tagged requests
(``SendToAddress`` / ``SendToPathway``) skip the guesswork.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from udpgroup.core.address_key import parse_port, split_key
from udpgroup.core.emitter import EventEmitter
from udpgroup.core.errors import (
    BadPortError,
    MissingPortError,
    SendFailure,
    UdpGroupError,
    UnknownPathwayError,
)
from udpgroup.core.registry import PathwayRegistry
from udpgroup.models.events import GroupEvent
from udpgroup.models.send import SendRequest, SendToAddress, SendToPathway
from udpgroup.transport import DatagramSocket

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and parse_port(value) is not None


def recover_identifier(
    args: tuple[Any, ...],
) -> tuple[Any, tuple[Any, ...], Callback | None]:
    """Recover ``(identifier, offset_and_length, callback)`` from send args.

    * ``(identifier, callback?)`` — the argument after the payload is a
      non-numeric string.
    * ``(offset, length, identifier, callback?)`` — the argument after the
      payload is numeric; the identifier follows offset and length.

    The identifier is ``None`` when neither shape matches.
    """
    if not args:
        return None, (), None

    first = args[0]
    if isinstance(first, str) and not _is_numeric(first):
        callback = args[1] if len(args) > 1 and callable(args[1]) else None
        return first, (), callback

    if _is_numeric(first) and len(args) >= 3:
        callback = args[3] if len(args) > 3 and callable(args[3]) else None
        return args[2], (args[0], args[1]), callback

    return None, (), None


class SendResolver:
    """Resolves pathway identifiers for outbound sends.

    Parameters
    ----------
    registry:
        The owning group's registry.
    sock:
        The owning group's socket primitive.
    emitter:
        Receives ``error`` notifications for failed resolved sends.
    """

    def __init__(
        self,
        registry: PathwayRegistry,
        sock: DatagramSocket,
        emitter: EventEmitter,
    ) -> None:
        self._registry = registry
        self._socket = sock
        self._emitter = emitter

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_destination(self, identifier: Any) -> tuple[str, int]:
        """Return the concrete ``(address, port)`` for a key or nickname.

        Raises
        ------
        UnknownPathwayError
            If *identifier* is neither a registered key nor a nickname.
        MissingPortError
            If the pathway was registered without a port.
        """
        key = self._registry.resolve(identifier) if isinstance(identifier, str) else None
        if key is None:
            raise UnknownPathwayError(identifier)

        address, port_segment = split_key(key)
        port = parse_port(port_segment)
        if port is None:
            raise MissingPortError(key)
        return address, port

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def send(self, data: Any, *args: Any) -> None:
        """Send with the positional convention, falling back to lookup.

        Accepts ``(port, address, callback?)`` or
        ``([offset, length,] identifier, callback?)``.
        """
        try:
            self._socket.send(data, *args)
            return
        except BadPortError:
            identifier, window, callback = recover_identifier(args)
            if identifier is None:
                raise
            logger.debug("Port argument %r is not numeric; resolving as pathway", identifier)

        address, port = self.resolve_destination(identifier)
        self._send_resolved(data, window, identifier, address, port, callback)

    def send_to(self, request: SendRequest, callback: Callback | None = None) -> None:
        """Send a tagged request."""
        if isinstance(request, SendToAddress):
            self._socket.send(
                request.payload, *request.sliced_args(), request.port, request.address, callback
            )
        elif isinstance(request, SendToPathway):
            address, port = self.resolve_destination(request.pathway)
            self._send_resolved(
                request.payload, request.sliced_args(), request.pathway, address, port, callback
            )
        else:
            raise TypeError(f"Unsupported send request: {type(request).__name__}")

    def _send_resolved(
        self,
        data: Any,
        window: tuple[Any, ...],
        identifier: Any,
        address: str,
        port: int,
        callback: Callback | None,
    ) -> None:
        logger.debug("Sending to pathway %s at %s:%d", identifier, address, port)

        def _fail(exc: BaseException) -> None:
            if isinstance(exc, SendFailure):
                failure = exc
            else:
                failure = SendFailure(
                    f"Send to pathway {identifier!r} at {address}:{port} failed: {exc}",
                    (address, port),
                )
                failure.__cause__ = exc
            self._emitter.emit(GroupEvent.ERROR, failure)
            if callback is not None:
                callback(failure, 0)

        # Transport errors arrive here instead of the socket error event.
        def _report(error: BaseException | None, sent: int) -> None:
            if error is not None:
                _fail(error)
            elif callback is not None:
                callback(None, sent)

        try:
            self._socket.send(data, *window, port, address, _report)
        except (UdpGroupError, OSError, TypeError, ValueError) as exc:
            _fail(exc)
