"""Tagged send requests.

Callers state whether they send to a concrete address or to a registered
pathway instead of relying on the positional form of ``UdpGroup.send``.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class _SendRequestBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    payload: bytes
    offset: int | None = Field(default=None, ge=0)
    length: int | None = Field(default=None, ge=0)

    def sliced_args(self) -> tuple[int, ...]:
        """``(offset, length)`` when a slice was requested, else ``()``."""
        if self.offset is None and self.length is None:
            return ()
        offset = self.offset or 0
        length = self.length if self.length is not None else len(self.payload) - offset
        return (offset, length)


class SendToAddress(_SendRequestBase):
    """Send to an explicit ``(address, port)``."""

    port: int = Field(ge=0, le=65535)
    address: str | None = None  # None lets the socket pick its loopback


class SendToPathway(_SendRequestBase):
    """Send to a pathway key or nickname."""

    pathway: str = Field(min_length=1)


SendRequest = Union[SendToAddress, SendToPathway]
