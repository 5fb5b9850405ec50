"""MessageRouter — fans one inbound datagram out to matching channels.

Every sender is checked under two keys: its address alone and its
address joined to its port.  Channels registered under the address-only key
come first, then those under the address+port key, each list in
registration order.  Each channel receives its own copy of the payload.
"""

from __future__ import annotations

import logging

from udpgroup.core.address_key import format_key, is_wildcard_port, normalize_address
from udpgroup.core.channel import PathwayChannel
from udpgroup.core.registry import PathwayRegistry

logger = logging.getLogger(__name__)


class MessageRouter:
    """Stateless-per-call dispatch over a group's registry."""

    def __init__(self, registry: PathwayRegistry) -> None:
        self._registry = registry

    def route(self, sender_address: str, sender_port: int) -> list[PathwayChannel]:
        """Return every channel that should receive a datagram from the sender.

        A sender port of 0 matches address-only pathways once.
        """
        address = normalize_address(sender_address)
        address_only = self._registry.channels_for(format_key(address))
        if is_wildcard_port(sender_port):
            return address_only
        address_and_port = self._registry.channels_for(format_key(address, sender_port))
        return address_only + address_and_port

    def deliver(self, payload: bytes | bytearray | memoryview, channels: list[PathwayChannel]) -> int:
        """Write an independent copy of *payload* to each channel.

        Returns the number of channels that queued their copy.
        """
        accepted = 0
        for channel in channels:
            if channel.write(bytearray(payload)):
                accepted += 1
        return accepted

    def dispatch(
        self, payload: bytes | bytearray | memoryview, sender_address: str, sender_port: int
    ) -> list[PathwayChannel]:
        """Route and deliver one datagram; returns the matched channels."""
        channels = self.route(sender_address, sender_port)
        if not channels:
            logger.debug(
                "No pathway for datagram from %s:%s (%d bytes)",
                sender_address,
                sender_port,
                len(payload),
            )
            return channels

        accepted = self.deliver(payload, channels)
        logger.debug(
            "Routed %d bytes from %s:%s to %d/%d channels",
            len(payload),
            sender_address,
            sender_port,
            accepted,
            len(channels),
        )
        return channels
