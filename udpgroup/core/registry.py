"""PathwayRegistry — key → channels storage plus nickname aliasing.

Several pathways may deliberately listen on the same source, so a key maps
to a list of channels.  Registering under a key that already has channels
appends and publishes a ``warning``; it never replaces.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from udpgroup.core.channel import PathwayChannel
from udpgroup.core.emitter import EventEmitter
from udpgroup.core.errors import ConfigError
from udpgroup.models.config import OverflowPolicy
from udpgroup.models.events import GroupEvent
from udpgroup.models.pathways import PathwayDescriptor

logger = logging.getLogger(__name__)


def coerce_descriptor(descriptor: Any) -> PathwayDescriptor:
    """Validate *descriptor* into a ``PathwayDescriptor``.

    Raises
    ------
    ConfigError
        If *descriptor* is not a structured record or lacks
        ``remote_address``.
    """
    if isinstance(descriptor, PathwayDescriptor):
        return descriptor
    if not isinstance(descriptor, Mapping) or not descriptor.get("remote_address"):
        raise ConfigError(
            "Pathway must be added using a mapping with a remote_address entry"
        )
    try:
        return PathwayDescriptor.model_validate(dict(descriptor))
    except ValidationError as exc:
        raise ConfigError(f"Invalid pathway descriptor: {exc}") from exc


class PathwayRegistry:
    """Owns every pathway of one group.

    Parameters
    ----------
    emitter:
        Receives ``info`` and ``warning`` notifications.  A private emitter
        is created when omitted.
    channel_maxsize, overflow:
        Bounds applied to every channel this registry creates.
    """

    def __init__(
        self,
        emitter: EventEmitter | None = None,
        *,
        channel_maxsize: int = 0,
        overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
    ) -> None:
        self._emitter = emitter if emitter is not None else EventEmitter()
        self._channel_maxsize = channel_maxsize
        self._overflow = overflow
        self._pathways: dict[str, list[PathwayChannel]] = {}
        self._nicknames: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def create(self, descriptor: PathwayDescriptor | Mapping[str, Any]) -> tuple[PathwayChannel, str]:
        """Register a new pathway and return ``(channel, display_name)``."""
        desc = coerce_descriptor(descriptor)
        key = desc.key
        display_name = desc.display_name

        if desc.remote_name:
            previous = self._nicknames.get(desc.remote_name)
            if previous is not None and previous != key:
                logger.info(
                    "Nickname %s moved from %s to %s", desc.remote_name, previous, key
                )
            self._nicknames[desc.remote_name] = key

        message = (
            f"Creating a pathway {display_name} listening for messages "
            f"from {desc.display_target}"
        )
        logger.info("%s", message)
        self._emitter.emit(GroupEvent.INFO, message)

        channel = PathwayChannel(
            key, maxsize=self._channel_maxsize, overflow=self._overflow
        )

        existing = self._pathways.get(key)
        if existing is None:
            self._pathways[key] = [channel]
        else:
            warning = (
                f"There are multiple pathways listening for messages "
                f"from {desc.display_target}"
            )
            logger.warning("%s", warning)
            self._emitter.emit(GroupEvent.WARNING, warning)
            existing.append(channel)

        return channel, display_name

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def channels_for(self, key: str) -> list[PathwayChannel]:
        """Channels registered under *key*, in registration order."""
        return list(self._pathways.get(key, ()))

    def resolve(self, identifier: str) -> str | None:
        """Map a key or nickname to a registered key.

        A known key wins over a nickname of the same spelling.
        """
        if identifier in self._pathways:
            return identifier
        return self._nicknames.get(identifier)

    @property
    def keys(self) -> list[str]:
        return list(self._pathways)

    @property
    def nicknames(self) -> dict[str, str]:
        """Copy of the nickname → key map."""
        return dict(self._nicknames)

    def __contains__(self, key: object) -> bool:
        return key in self._pathways

    def __len__(self) -> int:
        return sum(len(channels) for channels in self._pathways.values())

    def __repr__(self) -> str:
        return (
            f"PathwayRegistry(keys={len(self._pathways)}, channels={len(self)}, "
            f"nicknames={len(self._nicknames)})"
        )
