"""Socket primitive protocol for udpgroup.

The group talks to its socket only through the ``DatagramSocket``
protocol, so hosts and tests can supply their own implementation.
``UdpSocket`` is the stdlib-backed default.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from udpgroup.models.events import GroupEvent


@runtime_checkable
class DatagramSocket(Protocol):
    """Protocol every socket primitive handed to a ``UdpGroup`` must follow.

    ``send`` accepts ``(data, port, address=None, callback=None)`` or
    ``(data, offset, length, port, address=None, callback=None)`` and must
    raise ``BadPortError`` synchronously when the port argument is not a
    valid port number.  Transport failures are reported to the callback,
    or to the ``error`` event when no callback was given.
    """

    def on(self, event: GroupEvent | str, handler: Callable[..., Any]) -> None:
        ...

    def bind(self, port: int, host: str | None = None) -> None:
        ...

    def send(self, data: Any, *args: Any) -> None:
        ...

    def connect(self, port: int, address: str | None = None) -> None:
        ...

    def address(self) -> Any:
        ...

    def close(self, callback: Callable[[], Any] | None = None) -> None:
        ...

    def get_recv_buffer_size(self) -> int:
        ...

    def set_recv_buffer_size(self, size: int) -> None:
        ...

    def get_send_buffer_size(self) -> int:
        ...

    def set_send_buffer_size(self, size: int) -> None:
        ...

    def ref(self) -> Any:
        ...

    def unref(self) -> Any:
        ...

    def poll(self, timeout: float | None = 0.0) -> int:
        ...

    def serve_forever(self, poll_interval: float = 0.5) -> None:
        ...


from udpgroup.transport.udp_socket import UdpSocket, parse_send_args  # noqa: E402

__all__ = ["DatagramSocket", "UdpSocket", "parse_send_args"]
