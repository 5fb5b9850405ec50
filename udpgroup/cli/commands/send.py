"""``udpgroup send`` — send one datagram from an ephemeral group."""

from __future__ import annotations

import typer
from rich.console import Console

from udpgroup.config import settings
from udpgroup.group import UdpGroup
from udpgroup.models.config import GroupConfig
from udpgroup.models.send import SendToAddress

console = Console()


def send_cmd(
    message: str = typer.Argument(..., help="Text payload to send (UTF-8)."),
    port: int = typer.Option(..., "--to-port", "-t", help="Destination port."),
    address: str = typer.Option("127.0.0.1", "--to-address", "-a", help="Destination address."),
    listen_port: int = typer.Option(0, "--port", "-P", help="Local port to send from."),
) -> None:
    """Send MESSAGE to ADDRESS:PORT."""
    outcome: dict[str, object] = {}

    def _done(error: Exception | None, sent: int) -> None:
        outcome["error"] = error
        outcome["sent"] = sent

    config = GroupConfig(listen_port=listen_port, udp_version=settings.udp_version)
    with UdpGroup(config) as group:
        group.send_to(
            SendToAddress(payload=message.encode("utf-8"), port=port, address=address),
            _done,
        )

    if outcome.get("error") is not None:
        console.print(f"[bold red]Send failed:[/bold red] {outcome['error']}")
        raise typer.Exit(code=1)
    console.print(f"[green]Sent {outcome.get('sent', 0)} bytes to {address}:{port}[/green]")
