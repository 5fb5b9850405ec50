"""UdpSocket — stdlib ``socket`` + ``selectors`` datagram primitive.

The socket is non-blocking.  ``poll()`` waits for read readiness and
publishes one ``message`` event per datagram; ``serve_forever()`` repeats
that until the socket is closed or unreferenced.  Sends are synchronous
``sendto`` calls whose outcome is reported to the caller's callback (or the
``error`` event), never raised, apart from argument errors.
"""

from __future__ import annotations

import logging
import selectors
import socket
from collections.abc import Callable
from typing import Any

from udpgroup.core.address_key import parse_port
from udpgroup.core.emitter import EventEmitter
from udpgroup.core.errors import BadPortError, SendFailure, SocketClosedError
from udpgroup.models.config import UdpVersion
from udpgroup.models.events import GroupEvent, SenderInfo, SocketAddress

logger = logging.getLogger(__name__)

MAX_DATAGRAM_SIZE = 65535

_FAMILIES = {
    UdpVersion.UDP4: (socket.AF_INET, "0.0.0.0", "127.0.0.1", "IPv4"),
    UdpVersion.UDP6: (socket.AF_INET6, "::", "::1", "IPv6"),
}


def _is_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_send_args(
    args: tuple[Any, ...],
) -> tuple[int | None, int | None, Any, str | None, Callable[..., Any] | None]:
    """Split the variadic send arguments.

    Accepts ``(port, address?, callback?)`` or
    ``(offset, length, port, address?, callback?)`` and returns
    ``(offset, length, port, address, callback)``.  A callable in the
    address position is taken as the callback.
    """
    offset = length = None
    rest = list(args)
    if len(rest) >= 2 and _is_number(rest[0]) and _is_number(rest[1]):
        offset, length = rest[0], rest[1]
        rest = rest[2:]

    port = rest[0] if rest else None
    address = rest[1] if len(rest) > 1 else None
    callback = rest[2] if len(rest) > 2 else None

    if callable(address):
        address, callback = None, address
    if callback is not None and not callable(callback):
        raise TypeError(f"callback must be callable, got {type(callback).__name__}")

    return offset, length, port, address, callback


def _as_buffer(data: Any) -> memoryview:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return memoryview(data)


class UdpSocket:
    """A single UDP socket with event notifications.

    Parameters
    ----------
    udp_version:
        ``udp4`` (default) or ``udp6``.
    emitter:
        Event hub for ``listening``, ``connect``, ``message``, ``error`` and
        ``close``.  A private emitter is created when omitted.
    """

    def __init__(
        self,
        udp_version: UdpVersion | str = UdpVersion.UDP4,
        *,
        emitter: EventEmitter | None = None,
    ) -> None:
        self._version = UdpVersion(udp_version)
        family, self._wildcard, self._loopback, self._family_name = _FAMILIES[self._version]
        self._emitter = emitter if emitter is not None else EventEmitter()
        self._sock = socket.socket(family, socket.SOCK_DGRAM)
        self._sock.setblocking(False)
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._sock, selectors.EVENT_READ)
        self._bound = False
        self._closed = False
        self._referenced = True
        self._remote: tuple[str, int] | None = None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: GroupEvent | str, handler: Callable[..., Any]) -> None:
        self._emitter.on(event, handler)

    def once(self, event: GroupEvent | str, handler: Callable[..., Any]) -> None:
        self._emitter.once(event, handler)

    def off(self, event: GroupEvent | str, handler: Callable[..., Any]) -> None:
        self._emitter.off(event, handler)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def referenced(self) -> bool:
        return self._referenced

    def fileno(self) -> int:
        return self._sock.fileno()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def bind(self, port: int = 0, host: str | None = None) -> None:
        """Bind to *port* on *host* (the family's wildcard by default)."""
        self._check_open()
        if parse_port(port) is None:
            raise BadPortError(port)
        self._sock.bind((host or self._wildcard, int(port)))
        self._bound = True
        bound = self.address()
        logger.info("UdpSocket listening on %s:%d (%s)", bound.address, bound.port, self._version.value)
        self._emitter.emit(GroupEvent.LISTENING)

    def connect(self, port: int, address: str | None = None) -> None:
        """Associate the socket with one remote endpoint."""
        self._check_open()
        resolved = parse_port(port)
        if resolved is None:
            raise BadPortError(port)
        remote = (address or self._loopback, resolved)
        try:
            self._sock.connect(remote)
        except OSError as exc:
            self._emitter.emit(GroupEvent.ERROR, exc)
            return
        self._remote = remote
        logger.info("UdpSocket connected to %s:%d", *remote)
        self._emitter.emit(GroupEvent.CONNECT)

    def close(self, callback: Callable[[], Any] | None = None) -> None:
        """Close the socket; idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            self._selector.unregister(self._sock)
        except (KeyError, ValueError):
            pass
        self._selector.close()
        self._sock.close()
        logger.info("UdpSocket closed")
        if callback is not None:
            self._emitter.once(GroupEvent.CLOSE, callback)
        self._emitter.emit(GroupEvent.CLOSE)

    def ref(self) -> UdpSocket:
        """Keep ``serve_forever`` running while the socket is open."""
        self._referenced = True
        return self

    def unref(self) -> UdpSocket:
        """Let ``serve_forever`` return at its next wake-up."""
        self._referenced = False
        return self

    # ------------------------------------------------------------------
    # Introspection and tuning
    # ------------------------------------------------------------------

    def address(self) -> SocketAddress:
        self._check_open()
        host, port = self._sock.getsockname()[:2]
        return SocketAddress(address=host, port=port, family=self._family_name)

    def get_recv_buffer_size(self) -> int:
        self._check_open()
        return self._sock.getsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF)

    def set_recv_buffer_size(self, size: int) -> None:
        self._check_open()
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, size)

    def get_send_buffer_size(self) -> int:
        self._check_open()
        return self._sock.getsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF)

    def set_send_buffer_size(self, size: int) -> None:
        self._check_open()
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, size)

    # ------------------------------------------------------------------
    # Send
    # ------------------------------------------------------------------

    def send(self, data: Any, *args: Any) -> None:
        """Send one datagram.

        Raises
        ------
        BadPortError
            If the port argument is not a port number (and the socket is
            not connected with the port omitted).
        SocketClosedError
            If the socket was closed.
        """
        offset, length, port, address, callback = parse_send_args(args)
        self._check_open()

        buffer = _as_buffer(data)
        if offset is not None:
            buffer = buffer[offset:offset + length]

        if port is None and self._remote is not None:
            destination = self._remote
        else:
            resolved = parse_port(port)
            if resolved is None:
                raise BadPortError(port)
            destination = (address or self._loopback, resolved)

        try:
            if self._remote is not None:
                sent = self._sock.send(buffer)
            else:
                sent = self._sock.sendto(buffer, destination)
        except OSError as exc:
            failure = SendFailure(
                f"Send to {destination[0]}:{destination[1]} failed: {exc}", destination
            )
            failure.__cause__ = exc
            if callback is not None:
                callback(failure, 0)
            else:
                self._emitter.emit(GroupEvent.ERROR, failure)
            return

        logger.debug("UdpSocket sent %d bytes to %s:%d", sent, *destination)
        if callback is not None:
            callback(None, sent)

    # ------------------------------------------------------------------
    # Receive loop
    # ------------------------------------------------------------------

    def poll(self, timeout: float | None = 0.0) -> int:
        """Wait up to *timeout* seconds and publish every ready datagram.

        Returns the number of datagrams published.
        """
        if self._closed:
            return 0
        count = 0
        for _ in self._selector.select(timeout):
            while not self._closed:
                try:
                    data, peer = self._sock.recvfrom(MAX_DATAGRAM_SIZE)
                except BlockingIOError:
                    break
                except OSError as exc:
                    self._emitter.emit(GroupEvent.ERROR, exc)
                    break
                sender = SenderInfo(
                    address=peer[0], port=peer[1], family=self._family_name, size=len(data)
                )
                self._emitter.emit(GroupEvent.MESSAGE, data, sender)
                count += 1
        return count

    def serve_forever(self, poll_interval: float = 0.5) -> None:
        """Poll until the socket is closed or unreferenced."""
        while not self._closed and self._referenced:
            self.poll(poll_interval)

    def _check_open(self) -> None:
        if self._closed:
            raise SocketClosedError("Socket is closed")

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("bound" if self._bound else "unbound")
        return f"UdpSocket(version={self._version.value}, state={state})"
