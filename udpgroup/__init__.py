"""udpgroup: one UDP socket, many pathways.

Multiplexes a single bound UDP socket across logical peer conversations.
Inbound datagrams are classified by sender address/port and copied to every
matching pathway channel; outbound sends resolve a pathway key or nickname
back into a concrete address and port.
"""

__version__ = "0.2.0"
__description__ = "Multiplex one UDP socket across many addressed pathways"

from udpgroup.core.channel import PathwayChannel
from udpgroup.core.emitter import EventEmitter
from udpgroup.core.errors import (
    BadPortError,
    ConfigError,
    MissingPortError,
    SendFailure,
    SocketClosedError,
    UdpGroupError,
    UnknownPathwayError,
)
from udpgroup.group import UdpGroup
from udpgroup.models import (
    GroupConfig,
    GroupEvent,
    OverflowPolicy,
    PathwayDescriptor,
    SenderInfo,
    SendToAddress,
    SendToPathway,
    UdpVersion,
)
from udpgroup.transport import DatagramSocket, UdpSocket

__all__ = [
    "UdpGroup",
    "PathwayChannel",
    "EventEmitter",
    "DatagramSocket",
    "UdpSocket",
    # models
    "GroupConfig",
    "GroupEvent",
    "OverflowPolicy",
    "PathwayDescriptor",
    "SenderInfo",
    "SendToAddress",
    "SendToPathway",
    "UdpVersion",
    # errors
    "UdpGroupError",
    "ConfigError",
    "UnknownPathwayError",
    "MissingPortError",
    "BadPortError",
    "SendFailure",
    "SocketClosedError",
    "__version__",
]
