"""Event kinds and inbound datagram metadata."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class GroupEvent(str, Enum):
    """Observable notifications published by a group and its socket."""

    MESSAGE = "message"
    PATHWAYS = "pathways"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CLOSE = "close"
    CONNECT = "connect"
    LISTENING = "listening"


# Socket lifecycle events that the group re-publishes unchanged.
SOCKET_EVENTS: tuple[GroupEvent, ...] = (
    GroupEvent.CLOSE,
    GroupEvent.CONNECT,
    GroupEvent.ERROR,
    GroupEvent.LISTENING,
)


class SocketAddress(BaseModel):
    """The local address a socket is bound to."""

    model_config = ConfigDict(frozen=True)

    address: str
    port: int
    family: str = "IPv4"


class SenderInfo(BaseModel):
    """Where an inbound datagram came from."""

    model_config = ConfigDict(frozen=True)

    address: str
    port: int
    family: str = "IPv4"
    size: int = 0
