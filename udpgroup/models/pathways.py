"""Pathway descriptor model."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from udpgroup.core.address_key import MAX_PORT, format_key, is_wildcard_port


class PathwayDescriptor(BaseModel):
    """Caller-supplied description of one pathway.

    ``remote_port`` may be omitted or set to ``"*"`` to accept datagrams
    from any port of ``remote_address``.  Such a pathway cannot be used as
    a send target.

    Examples
    --------
    >>> d = PathwayDescriptor(remote_address="localhost", remote_port=4000)
    >>> d.key
    '127.0.0.1_4000'
    >>> d.display_name
    '127.0.0.1_4000'
    """

    model_config = ConfigDict(frozen=True)

    remote_address: str = Field(min_length=1)
    remote_port: int | Literal["*"] | None = None
    remote_name: str | None = None

    @field_validator("remote_port", mode="before")
    @classmethod
    def _blank_port_is_wildcard(cls, value: object) -> object:
        if value == "":
            return None
        return value

    @field_validator("remote_port")
    @classmethod
    def _check_port_range(cls, value: int | str | None) -> int | str | None:
        if isinstance(value, int) and not 0 <= value <= MAX_PORT:
            raise ValueError(f"remote_port must be in 0..{MAX_PORT}, got {value}")
        return value

    @property
    def key(self) -> str:
        """The registry key this descriptor maps to."""
        return format_key(self.remote_address, self.remote_port)

    @property
    def display_name(self) -> str:
        return self.remote_name or self.key

    @property
    def display_target(self) -> str:
        """Human-readable source description used in log and event text."""
        if is_wildcard_port(self.remote_port):
            return f"remote address {self.remote_address}"
        return f"remote address {self.remote_address} and remote port {self.remote_port}"
