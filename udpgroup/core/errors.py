"""Error taxonomy for udpgroup.

Configuration and resolution errors are raised synchronously to the caller.
Transport-time failures are wrapped in ``SendFailure`` and reported through
the group's ``error`` event instead of being thrown.
"""

from __future__ import annotations

from typing import Any


class UdpGroupError(Exception):
    """Base class for every error raised by udpgroup."""


class ConfigError(UdpGroupError, ValueError):
    """Raised when a pathway descriptor or group config is malformed."""


class UnknownPathwayError(UdpGroupError, LookupError):
    """Raised when a send identifier has no registry entry."""

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        super().__init__(
            f"The pathway named {identifier!r} has not been defined for this group"
        )


class MissingPortError(UdpGroupError, ValueError):
    """Raised when a resolved pathway key carries no usable port."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"A port is required in order to send (pathway key {key!r} is address-only)"
        )


class BadPortError(UdpGroupError, ValueError):
    """Raised by the socket primitive for a structurally invalid port."""

    code = "ERR_SOCKET_BAD_PORT"

    def __init__(self, port: Any) -> None:
        self.port = port
        super().__init__(f"Port should be an integer in 0..65535, got {port!r}")


class SocketClosedError(UdpGroupError):
    """Raised when a control operation or send hits a closed socket."""


class SendFailure(UdpGroupError):
    """A transport failure during send.

    Never raised out of ``UdpGroup.send``; delivered to the send callback
    and the ``error`` event.  The underlying exception is chained as
    ``__cause__``.
    """

    def __init__(self, message: str, destination: tuple[str, int] | None = None) -> None:
        self.destination = destination
        super().__init__(message)
