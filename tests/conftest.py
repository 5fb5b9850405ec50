"""Shared test fixtures for udpgroup."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

import pytest

from udpgroup.core.address_key import parse_port
from udpgroup.core.emitter import EventEmitter
from udpgroup.core.errors import BadPortError, SendFailure, SocketClosedError
from udpgroup.core.registry import PathwayRegistry
from udpgroup.group import UdpGroup
from udpgroup.models.events import GroupEvent, SenderInfo, SocketAddress
from udpgroup.transport import parse_send_args


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeSocket:
    """In-memory ``DatagramSocket`` that records sends instead of transmitting.

    Set ``send_error`` to an ``OSError`` to have every send report it as a
    ``SendFailure`` to its callback (or the ``error`` event), as
    ``UdpSocket`` does.  ``raise_on_send`` raises synchronously and only
    accepts the errors the primitive itself raises.
    """

    def __init__(self) -> None:
        self.emitter = EventEmitter()
        self.bound: tuple[str | None, int] | None = None
        self.remote: tuple[str, int] | None = None
        self.closed = False
        self.referenced = True
        self.recv_buffer_size = 212992
        self.send_buffer_size = 212992
        self.send_calls: list[tuple[Any, ...]] = []
        self.sent: list[tuple[bytes, tuple[str, int]]] = []
        self.send_error: OSError | None = None
        self.raise_on_send: SocketClosedError | BadPortError | TypeError | None = None
        self.inbox: list[tuple[bytes, SenderInfo]] = []

    def on(self, event: GroupEvent | str, handler: Callable[..., Any]) -> None:
        self.emitter.on(event, handler)

    def bind(self, port: int, host: str | None = None) -> None:
        self.bound = (host, port)
        self.emitter.emit(GroupEvent.LISTENING)

    def connect(self, port: int, address: str | None = None) -> None:
        self.remote = (address or "127.0.0.1", port)
        self.emitter.emit(GroupEvent.CONNECT)

    def send(self, data: Any, *args: Any) -> None:
        self.send_calls.append(args)
        offset, length, port, address, callback = parse_send_args(args)
        if self.closed:
            raise SocketClosedError("Socket is closed")
        resolved = parse_port(port)
        if resolved is None:
            raise BadPortError(port)
        if self.raise_on_send is not None:
            raise self.raise_on_send
        payload = bytes(data)
        if offset is not None:
            payload = payload[offset:offset + length]
        destination = (address or "127.0.0.1", resolved)
        if self.send_error is not None:
            failure = SendFailure(
                f"Send to {destination[0]}:{destination[1]} failed: {self.send_error}", destination
            )
            failure.__cause__ = self.send_error
            if callback is not None:
                callback(failure, 0)
            else:
                self.emitter.emit(GroupEvent.ERROR, failure)
            return
        self.sent.append((payload, destination))
        if callback is not None:
            callback(None, len(payload))

    def address(self) -> SocketAddress:
        host, port = self.bound or (None, 0)
        return SocketAddress(address=host or "0.0.0.0", port=port)

    def close(self, callback: Callable[[], Any] | None = None) -> None:
        if self.closed:
            return
        self.closed = True
        if callback is not None:
            self.emitter.once(GroupEvent.CLOSE, callback)
        self.emitter.emit(GroupEvent.CLOSE)

    def get_recv_buffer_size(self) -> int:
        return self.recv_buffer_size

    def set_recv_buffer_size(self, size: int) -> None:
        self.recv_buffer_size = size

    def get_send_buffer_size(self) -> int:
        return self.send_buffer_size

    def set_send_buffer_size(self, size: int) -> None:
        self.send_buffer_size = size

    def ref(self) -> FakeSocket:
        self.referenced = True
        return self

    def unref(self) -> FakeSocket:
        self.referenced = False
        return self

    def poll(self, timeout: float | None = 0.0) -> int:
        count = len(self.inbox)
        while self.inbox:
            data, sender = self.inbox.pop(0)
            self.emitter.emit(GroupEvent.MESSAGE, data, sender)
        return count

    def serve_forever(self, poll_interval: float = 0.5) -> None:
        while not self.closed and self.referenced and self.inbox:
            self.poll(poll_interval)

    # -- test helpers ----------------------------------------------------

    def deliver(self, data: bytes, address: str, port: int) -> None:
        """Simulate a datagram arriving from ``address:port``."""
        sender = SenderInfo(address=address, port=port, size=len(data))
        self.emitter.emit(GroupEvent.MESSAGE, data, sender)


class EventRecorder:
    """Subscribes to every ``GroupEvent`` and records the arguments."""

    def __init__(self, emitter: EventEmitter) -> None:
        self.events: list[tuple[GroupEvent, tuple[Any, ...]]] = []
        for kind in GroupEvent:
            emitter.on(kind, functools.partial(self._record, kind))

    def _record(self, kind: GroupEvent, *args: Any) -> None:
        self.events.append((kind, args))

    def of(self, kind: GroupEvent) -> list[tuple[Any, ...]]:
        return [args for recorded, args in self.events if recorded is kind]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def emitter() -> EventEmitter:
    """Provide a fresh EventEmitter."""
    return EventEmitter()


@pytest.fixture
def recorder(emitter: EventEmitter) -> EventRecorder:
    """Provide a recorder subscribed to every event on ``emitter``."""
    return EventRecorder(emitter)


@pytest.fixture
def registry(emitter: EventEmitter) -> PathwayRegistry:
    """Provide an unbounded PathwayRegistry publishing on ``emitter``."""
    return PathwayRegistry(emitter)


@pytest.fixture
def fake_socket() -> FakeSocket:
    """Provide an in-memory socket primitive."""
    return FakeSocket()


@pytest.fixture
def group(fake_socket: FakeSocket, emitter: EventEmitter, recorder: EventRecorder) -> UdpGroup:
    """Provide a UdpGroup on port 9000 wired to the fake socket."""
    return UdpGroup({"listen_port": 9000}, socket=fake_socket, emitter=emitter)


@pytest.fixture
def make_descriptor() -> Callable[..., dict[str, Any]]:
    """Factory fixture: build a pathway descriptor mapping."""

    def _factory(
        remote_address: str = "10.0.0.5",
        remote_port: Any = None,
        remote_name: str | None = None,
    ) -> dict[str, Any]:
        descriptor: dict[str, Any] = {"remote_address": remote_address}
        if remote_port is not None:
            descriptor["remote_port"] = remote_port
        if remote_name is not None:
            descriptor["remote_name"] = remote_name
        return descriptor

    return _factory
