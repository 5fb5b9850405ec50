"""Runtime configuration — env-driven via pydantic-settings.

Reads ``UDPGROUP_*`` environment variables and an optional ``.env`` file.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from udpgroup.models.config import OverflowPolicy, UdpVersion


class GroupSettings(BaseSettings):
    """Settings for groups started from the CLI or host processes.

    Examples
    --------
    Override via environment::

        export UDPGROUP_LISTEN_PORT=9000
        export UDPGROUP_UDP_VERSION=udp6
        export UDPGROUP_CHANNEL_MAXSIZE=256
        export UDPGROUP_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="UDPGROUP_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Socket
    host: str | None = None
    listen_port: int = Field(default=0, ge=0, le=65535)
    udp_version: UdpVersion = UdpVersion.UDP4
    poll_interval: float = Field(default=0.5, gt=0)

    # Channels
    channel_maxsize: int = Field(default=0, ge=0)
    overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Module-level singleton; import as `from udpgroup.config import settings`
settings = GroupSettings()
