"""udpgroup CLI — Typer-based command-line interface.

Provides the ``udpgroup`` command with subcommands for listening on a
shared port with named pathways, sending single datagrams, and inspecting
how addresses map to pathway keys.

All output uses Rich for formatted terminal display.
"""
