"""Main Typer application — imports and registers all CLI commands.

Entry point: ``udpgroup`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from udpgroup.cli.commands.key import key_cmd
from udpgroup.cli.commands.listen import listen_cmd
from udpgroup.cli.commands.send import send_cmd
from udpgroup.config import settings

app = typer.Typer(
    name="udpgroup",
    help="udpgroup: multiplex one UDP port across many addressed pathways.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="listen", help="Listen on a port and route datagrams to pathways.")(listen_cmd)
app.command(name="send", help="Send one datagram to an address and port.")(send_cmd)
app.command(name="key", help="Show the pathway keys for an address.")(key_cmd)


def configure_logging(level: str) -> None:
    """Route library logging through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=settings.debug)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        settings.log_level,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """udpgroup command-line interface."""
    configure_logging(log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
