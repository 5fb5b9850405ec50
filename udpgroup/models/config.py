"""Group configuration models."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from udpgroup.config import GroupSettings


class UdpVersion(str, Enum):
    """Socket family selector."""

    UDP4 = "udp4"
    UDP6 = "udp6"


class OverflowPolicy(str, Enum):
    """What a bounded channel does with a payload when it is full.

    * ``drop_oldest`` — evict the oldest queued payload, keep the new one.
    * ``drop_newest`` — discard the incoming payload.
    """

    DROP_OLDEST = "drop_oldest"
    DROP_NEWEST = "drop_newest"


class GroupConfig(BaseModel):
    """Construction-time configuration for a ``UdpGroup``."""

    model_config = ConfigDict(frozen=True)

    listen_port: int = Field(ge=0, le=65535)
    udp_version: UdpVersion = UdpVersion.UDP4
    host: str | None = None  # None binds the family's wildcard address
    channel_maxsize: int = Field(default=0, ge=0)  # 0 = unbounded
    overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST

    @classmethod
    def from_settings(cls, settings: GroupSettings) -> GroupConfig:
        """Build a config from environment-driven settings."""
        return cls(
            listen_port=settings.listen_port,
            udp_version=settings.udp_version,
            host=settings.host,
            channel_maxsize=settings.channel_maxsize,
            overflow=settings.overflow,
        )
