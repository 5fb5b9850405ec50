"""UdpGroup — one bound UDP socket shared by many pathways.

The group owns its socket, registry, router, resolver and event hub.
Inbound datagrams are routed to every matching pathway channel and then
re-published as ``message`` events; the socket's lifecycle events are
re-published unchanged; socket controls are exposed as delegating methods.

Usage
-----
>>> group = UdpGroup({"listen_port": 9000})                     # doctest: +SKIP
>>> channel, name = group.create_pathway(
...     {"remote_address": "10.0.0.5", "remote_port": 4000, "remote_name": "peerA"}
... )                                                            # doctest: +SKIP
>>> group.send(b"hello", "peerA")                               # doctest: +SKIP
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from udpgroup.core.channel import PathwayChannel
from udpgroup.core.emitter import EventEmitter
from udpgroup.core.errors import ConfigError
from udpgroup.core.registry import PathwayRegistry
from udpgroup.core.resolver import SendResolver
from udpgroup.core.router import MessageRouter
from udpgroup.models.config import GroupConfig
from udpgroup.models.events import SOCKET_EVENTS, GroupEvent, SenderInfo
from udpgroup.models.pathways import PathwayDescriptor
from udpgroup.models.send import SendRequest
from udpgroup.transport import DatagramSocket, UdpSocket

logger = logging.getLogger(__name__)

PathwayCallback = Callable[[Exception | None, PathwayChannel | None, str | None], Any]


def _coerce_config(config: GroupConfig | Mapping[str, Any]) -> GroupConfig:
    if isinstance(config, GroupConfig):
        return config
    if not isinstance(config, Mapping):
        raise ConfigError("Group config must be a mapping with a listen_port entry")
    try:
        return GroupConfig.model_validate(dict(config))
    except ValidationError as exc:
        raise ConfigError(f"Invalid group config: {exc}") from exc


def _sender_of(rinfo: Any, size: int) -> SenderInfo:
    if isinstance(rinfo, SenderInfo):
        return rinfo
    if isinstance(rinfo, Mapping):
        return SenderInfo.model_validate({"size": size, **rinfo})
    address, port = rinfo[:2]
    return SenderInfo(address=address, port=port, size=size)


class UdpGroup:
    """Multiplexes one UDP socket across many logical pathways.

    Parameters
    ----------
    config:
        A ``GroupConfig`` or a mapping with ``listen_port`` (required),
        ``udp_version``, ``host``, ``channel_maxsize`` and ``overflow``.
    *initial_pathways:
        Pathway descriptors created at construction.  Their
        ``(channel, name)`` results are published once as a ``pathways``
        event and kept on ``initial_pathways``.
    socket:
        A ``DatagramSocket`` to use instead of a new ``UdpSocket``.
    emitter:
        Event hub to publish on.  Pass a pre-subscribed emitter to observe
        events raised during construction.

    Raises
    ------
    ConfigError
        If *config* or any initial pathway descriptor is malformed.
    """

    def __init__(
        self,
        config: GroupConfig | Mapping[str, Any],
        *initial_pathways: PathwayDescriptor | Mapping[str, Any],
        socket: DatagramSocket | None = None,
        emitter: EventEmitter | None = None,
    ) -> None:
        self._config = _coerce_config(config)
        self._emitter = emitter if emitter is not None else EventEmitter()
        self._registry = PathwayRegistry(
            self._emitter,
            channel_maxsize=self._config.channel_maxsize,
            overflow=self._config.overflow,
        )
        self._router = MessageRouter(self._registry)
        self._socket = socket if socket is not None else UdpSocket(self._config.udp_version)
        self._resolver = SendResolver(self._registry, self._socket, self._emitter)

        self._socket.on(GroupEvent.MESSAGE, self.handle_message)
        for event in SOCKET_EVENTS:
            self._socket.on(event, functools.partial(self._emitter.emit, event))

        try:
            self._socket.bind(self._config.listen_port, self._config.host)
            self.initial_pathways = [
                self.create_pathway(descriptor) for descriptor in initial_pathways
            ]
        except Exception:
            self._socket.close()
            raise

        self._emitter.emit(GroupEvent.PATHWAYS, list(self.initial_pathways))

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def config(self) -> GroupConfig:
        return self._config

    @property
    def registry(self) -> PathwayRegistry:
        return self._registry

    @property
    def router(self) -> MessageRouter:
        return self._router

    @property
    def socket(self) -> DatagramSocket:
        return self._socket

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
    # Pathways
    # ------------------------------------------------------------------

    def create_pathway(
        self, descriptor: PathwayDescriptor | Mapping[str, Any]
    ) -> tuple[PathwayChannel, str]:
        """Register a pathway; returns ``(channel, display_name)``."""
        return self._registry.create(descriptor)

    def add_pathway(
        self, descriptor: PathwayDescriptor | Mapping[str, Any], callback: PathwayCallback
    ) -> None:
        """Callback form of ``create_pathway``.

        *callback* receives ``(None, channel, name)`` on success or
        ``(error, None, None)`` when the descriptor is rejected.
        """
        try:
            channel, name = self.create_pathway(descriptor)
        except ConfigError as exc:
            callback(exc, None, None)
            return
        callback(None, channel, name)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def handle_message(self, data: bytes, rinfo: Any) -> None:
        """Route one inbound datagram, then publish it as ``message``."""
        sender = _sender_of(rinfo, len(data))
        self._router.dispatch(data, sender.address, sender.port)
        self._emitter.emit(GroupEvent.MESSAGE, data, sender)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def send(self, data: Any, *args: Any) -> None:
        """Send to ``(port, address)`` or to a pathway key or nickname.

        ``send(data, port, address, callback=None)`` sends directly.
        ``send(data, [offset, length,] pathway, callback=None)`` resolves
        the pathway first.

        Raises
        ------
        UnknownPathwayError
            If the pathway is not registered.
        MissingPortError
            If the pathway has no port to send to.
        """
        self._resolver.send(data, *args)

    def send_to(self, request: SendRequest, callback: Callable[..., Any] | None = None) -> None:
        """Send a ``SendToAddress`` or ``SendToPathway`` request."""
        self._resolver.send_to(request, callback)

    def resolve(self, identifier: str) -> tuple[str, int]:
        """Concrete ``(address, port)`` for a pathway key or nickname."""
        return self._resolver.resolve_destination(identifier)

    # ------------------------------------------------------------------
    # Socket passthrough
    # ------------------------------------------------------------------

    def address(self) -> Any:
        return self._socket.address()

    def close(self, callback: Callable[[], Any] | None = None) -> None:
        self._socket.close(callback)

    def connect(self, port: int, address: str | None = None) -> None:
        self._socket.connect(port, address)

    def get_recv_buffer_size(self) -> int:
        return self._socket.get_recv_buffer_size()

    def set_recv_buffer_size(self, size: int) -> None:
        self._socket.set_recv_buffer_size(size)

    def get_send_buffer_size(self) -> int:
        return self._socket.get_send_buffer_size()

    def set_send_buffer_size(self, size: int) -> None:
        self._socket.set_send_buffer_size(size)

    def ref(self) -> UdpGroup:
        self._socket.ref()
        return self

    def unref(self) -> UdpGroup:
        self._socket.unref()
        return self

    def poll(self, timeout: float | None = 0.0) -> int:
        """Process datagrams that are ready within *timeout* seconds."""
        return self._socket.poll(timeout)

    def serve_forever(self, poll_interval: float = 0.5) -> None:
        self._socket.serve_forever(poll_interval)

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> UdpGroup:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"UdpGroup(listen_port={self._config.listen_port}, "
            f"udp_version={self._config.udp_version.value}, "
            f"pathways={len(self._registry)})"
        )
