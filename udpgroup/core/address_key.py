"""Address keys — canonical lookup strings for pathways.

A key is either the normalized address alone (``10.0.0.5``) or the
normalized address joined to a port (``10.0.0.5_4000``).  The same
functions build keys on registration and on lookup, so loopback aliases
collapse identically on the inbound and outbound paths.
"""

from __future__ import annotations

from typing import Any

STANDARD_LOCAL = "127.0.0.1"
LOOPBACK_ALIASES = frozenset({STANDARD_LOCAL, "0.0.0.0", "localhost"})

KEY_DELIMITER = "_"
WILDCARD_PORT = "*"

MAX_PORT = 65535


def normalize_address(address: str) -> str:
    """Collapse loopback aliases to ``127.0.0.1``.

    >>> normalize_address("localhost")
    '127.0.0.1'
    >>> normalize_address("10.0.0.5")
    '10.0.0.5'
    """
    if address in LOOPBACK_ALIASES:
        return STANDARD_LOCAL
    return address


def is_wildcard_port(port: Any) -> bool:
    """``True`` for an absent port: ``None``, ``""``, ``"*"`` or ``0``."""
    return port in (None, "", WILDCARD_PORT, 0)


def format_key(address: str, port: Any = None) -> str:
    """Build the registry key for *address* and optional *port*.

    >>> format_key("localhost")
    '127.0.0.1'
    >>> format_key("10.0.0.5", 4000)
    '10.0.0.5_4000'
    >>> format_key("10.0.0.5", "*")
    '10.0.0.5'
    """
    normalized = normalize_address(address)
    if is_wildcard_port(port):
        return normalized
    return f"{normalized}{KEY_DELIMITER}{port}"


def split_key(key: str) -> tuple[str, str | None]:
    """Split a key into ``(address, port_segment)``.

    The port segment is ``None`` for address-only keys.
    """
    address, sep, port = key.rpartition(KEY_DELIMITER)
    if not sep:
        return key, None
    return address, port


def parse_port(value: Any) -> int | None:
    """Return *value* as a port number, or ``None`` if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        port = value
    elif isinstance(value, str) and value.strip().isdigit():
        port = int(value)
    else:
        return None
    if 0 <= port <= MAX_PORT:
        return port
    return None
