"""``udpgroup key ADDRESS`` — show the pathway keys an address maps to."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from udpgroup.core.address_key import format_key, normalize_address

console = Console()


def key_cmd(
    address: str = typer.Argument(..., help="Remote address as seen on the wire."),
    port: str = typer.Option("", "--port", "-p", help="Remote port, or '*' for any."),
) -> None:
    """Print the address-only and address+port keys for ADDRESS."""
    table = Table(title="Pathway keys")
    table.add_column("Form", style="cyan")
    table.add_column("Key", style="green")

    table.add_row("normalized address", normalize_address(address))
    table.add_row("address-only key", format_key(address))
    table.add_row("address+port key", format_key(address, port or None))

    console.print(table)
