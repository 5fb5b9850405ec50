"""``udpgroup listen`` — bind a port and print datagrams routed to pathways.

Pathways are given as ``ADDRESS[:PORT][=NAME]``; bracket IPv6 addresses
that carry a port (``[::1]:4000``).
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from udpgroup.config import settings
from udpgroup.core.errors import ConfigError
from udpgroup.group import UdpGroup
from udpgroup.models.config import GroupConfig, UdpVersion
from udpgroup.models.events import GroupEvent, SenderInfo
from udpgroup.models.pathways import PathwayDescriptor

console = Console()


def parse_pathway_option(option: str) -> PathwayDescriptor:
    """Parse ``ADDRESS[:PORT][=NAME]`` into a descriptor.

    >>> parse_pathway_option("10.0.0.5:4000=peerA").key
    '10.0.0.5_4000'
    >>> parse_pathway_option("[::1]:53").remote_port
    53
    >>> parse_pathway_option("localhost").key
    '127.0.0.1'
    """
    target, _, name = option.partition("=")
    port: str | None = None

    if target.startswith("["):
        address, _, rest = target[1:].partition("]")
        if rest.startswith(":"):
            port = rest[1:]
    elif target.count(":") == 1:
        address, _, port = target.partition(":")
    else:
        address = target

    try:
        return PathwayDescriptor(
            remote_address=address,
            remote_port=port or None,
            remote_name=name or None,
        )
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid pathway {option!r}: {exc}") from exc


def listen_cmd(
    pathway: list[str] = typer.Option(
        [],
        "--pathway",
        "-p",
        help="Pathway as ADDRESS[:PORT][=NAME]. Repeatable.",
    ),
    port: int = typer.Option(
        settings.listen_port,
        "--port",
        "-P",
        help="Local port to listen on.",
    ),
    host: str = typer.Option(
        settings.host or "",
        "--host",
        help="Local address to bind (default: all interfaces).",
    ),
    udp_version: UdpVersion = typer.Option(
        settings.udp_version,
        "--udp-version",
        help="Socket family.",
    ),
    count: int = typer.Option(
        0,
        "--count",
        "-n",
        help="Exit after this many datagrams (0 = run until Ctrl+C).",
    ),
) -> None:
    """Listen on one port and report which pathways receive each datagram."""
    descriptors = [parse_pathway_option(option) for option in pathway]
    config = GroupConfig(
        listen_port=port,
        udp_version=udp_version,
        host=host or None,
        channel_maxsize=settings.channel_maxsize,
        overflow=settings.overflow,
    )

    try:
        group = UdpGroup(config, *descriptors)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    names = {id(channel): name for channel, name in group.initial_pathways}
    seen = 0

    def _report(data: bytes, sender: SenderInfo) -> None:
        nonlocal seen
        seen += 1
        matched = [
            names.get(id(channel), channel.key)
            for channel in group.router.route(sender.address, sender.port)
        ]
        for channel, _ in group.initial_pathways:
            channel.drain()
        target = ", ".join(matched) if matched else "[dim]no pathway[/dim]"
        console.print(
            f"[cyan]{sender.address}:{sender.port}[/cyan] "
            f"{sender.size} bytes -> {target}"
        )
        if count and seen >= count:
            group.unref()

    group.on(GroupEvent.MESSAGE, _report)

    bound = group.address()
    lines = [f"[bold]Listening on:[/bold] {bound.address}:{bound.port} ({bound.family})"]
    lines += [f"  [green]{name}[/green]" for _, name in group.initial_pathways]
    console.print(Panel("\n".join(lines), title="[bold]udpgroup[/bold]", border_style="green"))

    try:
        group.serve_forever(settings.poll_interval)
    except KeyboardInterrupt:
        console.print("[dim]Interrupted.[/dim]")
    finally:
        group.close()
