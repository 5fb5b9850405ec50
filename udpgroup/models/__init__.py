"""udpgroup data models — Pydantic v2, frozen."""

from udpgroup.models.config import GroupConfig, OverflowPolicy, UdpVersion
from udpgroup.models.events import SOCKET_EVENTS, GroupEvent, SenderInfo, SocketAddress
from udpgroup.models.pathways import PathwayDescriptor
from udpgroup.models.send import SendRequest, SendToAddress, SendToPathway

__all__ = [
    # config
    "GroupConfig",
    "OverflowPolicy",
    "UdpVersion",
    # events
    "GroupEvent",
    "SenderInfo",
    "SOCKET_EVENTS",
    "SocketAddress",
    # pathways
    "PathwayDescriptor",
    # send
    "SendRequest",
    "SendToAddress",
    "SendToPathway",
]
