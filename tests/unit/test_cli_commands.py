"""Unit tests for the CLI — Typer command registration and basic behavior."""

from __future__ import annotations

import pytest
import typer
from typer.testing import CliRunner

from udpgroup.cli.app import app
from udpgroup.cli.commands.listen import parse_pathway_option

runner = CliRunner()


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "listen" in result.output
        assert "send" in result.output
        assert "key" in result.output

    @pytest.mark.parametrize("command", ["listen", "send", "key"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0

    def test_key_command(self):
        result = runner.invoke(app, ["key", "localhost", "--port", "4000"])
        assert result.exit_code == 0
        assert "127.0.0.1_4000" in result.output

    def test_key_command_wildcard(self):
        result = runner.invoke(app, ["key", "10.0.0.5", "--port", "*"])
        assert result.exit_code == 0
        assert "10.0.0.5_" not in result.output

    def test_send_command(self):
        result = runner.invoke(app, ["send", "hello", "--to-port", "9", "--to-address", "127.0.0.1"])
        assert result.exit_code == 0
        assert "Sent 5 bytes" in result.output


class TestParsePathwayOption:
    def test_full(self):
        d = parse_pathway_option("10.0.0.5:4000=peerA")
        assert (d.remote_address, d.remote_port, d.remote_name) == ("10.0.0.5", 4000, "peerA")

    def test_address_only(self):
        d = parse_pathway_option("10.0.0.5")
        assert d.remote_port is None
        assert d.remote_name is None

    def test_wildcard(self):
        assert parse_pathway_option("10.0.0.5:*=any").key == "10.0.0.5"

    def test_bare_ipv6(self):
        assert parse_pathway_option("::1").remote_address == "::1"

    def test_bracketed_ipv6(self):
        d = parse_pathway_option("[::1]:53=dns")
        assert (d.remote_address, d.remote_port, d.remote_name) == ("::1", 53, "dns")

    def test_invalid_port(self):
        with pytest.raises(typer.BadParameter):
            parse_pathway_option("10.0.0.5:notaport")
