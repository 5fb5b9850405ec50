"""End-to-end integration tests — real loopback sockets through UdpGroup.

These tests exercise UdpSocket, PathwayRegistry, MessageRouter and
SendResolver together over 127.0.0.1 on ephemeral ports.
"""

from __future__ import annotations

import pytest

from udpgroup.core.errors import SendFailure
from udpgroup.group import UdpGroup
from udpgroup.models.events import GroupEvent
from udpgroup.models.send import SendToPathway
from udpgroup.transport import UdpSocket


@pytest.fixture
def peer() -> UdpSocket:
    sock = UdpSocket()
    sock.bind(0, "127.0.0.1")
    yield sock
    sock.close()


@pytest.fixture
def live_group() -> UdpGroup:
    group = UdpGroup({"listen_port": 0, "host": "127.0.0.1"})
    yield group
    group.close()


def _receive(sock: UdpSocket) -> list[bytes]:
    got: list[bytes] = []
    sock.on(GroupEvent.MESSAGE, lambda data, sender: got.append(data))
    return got


class TestInbound:
    def test_datagram_reaches_port_and_address_pathways(self, live_group, peer):
        peer_port = peer.address().port
        exact, _ = live_group.create_pathway(
            {"remote_address": "127.0.0.1", "remote_port": peer_port, "remote_name": "peer"}
        )
        broad, _ = live_group.create_pathway({"remote_address": "localhost"})
        other, _ = live_group.create_pathway({"remote_address": "127.0.0.1", "remote_port": 1})

        peer.send(b"hello", live_group.address().port, "127.0.0.1")
        assert live_group.poll(1.0) == 1

        assert bytes(exact.read()) == b"hello"
        assert bytes(broad.read()) == b"hello"
        assert other.pending == 0

    def test_message_event_carries_sender(self, live_group, peer):
        seen = []
        live_group.on("message", lambda data, sender: seen.append((data, sender)))

        peer.send(b"ping", live_group.address().port, "127.0.0.1")
        live_group.poll(1.0)

        data, sender = seen[0]
        assert data == b"ping"
        assert sender.address == "127.0.0.1"
        assert sender.port == peer.address().port

    def test_unmatched_datagram_still_published(self, live_group, peer):
        seen = []
        live_group.on("message", lambda data, sender: seen.append(data))
        peer.send(b"stray", live_group.address().port, "127.0.0.1")
        live_group.poll(1.0)
        assert seen == [b"stray"]


class TestOutbound:
    def test_send_by_nickname(self, live_group, peer):
        got = _receive(peer)
        live_group.create_pathway(
            {"remote_address": "localhost", "remote_port": peer.address().port, "remote_name": "peer"}
        )

        results = []
        live_group.send(b"reply", "peer", lambda err, n: results.append((err, n)))

        assert results == [(None, 5)]
        assert peer.poll(1.0) == 1
        assert got == [b"reply"]

    def test_send_by_key_with_window(self, live_group, peer):
        got = _receive(peer)
        port = peer.address().port
        live_group.create_pathway({"remote_address": "127.0.0.1", "remote_port": port})

        live_group.send(b"xxpayloadxx", 2, 7, f"127.0.0.1_{port}")
        peer.poll(1.0)
        assert got == [b"payload"]

    def test_send_to_pathway_request(self, live_group, peer):
        got = _receive(peer)
        live_group.create_pathway(
            {"remote_address": "127.0.0.1", "remote_port": peer.address().port, "remote_name": "peer"}
        )
        live_group.send_to(SendToPathway(payload=b"tagged", pathway="peer"))
        peer.poll(1.0)
        assert got == [b"tagged"]

    def test_plain_port_address_send(self, live_group, peer):
        got = _receive(peer)
        live_group.send(b"direct", peer.address().port, "127.0.0.1")
        peer.poll(1.0)
        assert got == [b"direct"]

    @pytest.mark.parametrize("with_callback", [False, True])
    def test_oversized_send_by_nickname_emits_one_error(self, live_group, peer, with_callback):
        errors = []
        live_group.on("error", errors.append)
        live_group.create_pathway(
            {"remote_address": "127.0.0.1", "remote_port": peer.address().port, "remote_name": "peer"}
        )

        results = []
        if with_callback:
            live_group.send(b"x" * 70000, "peer", lambda err, n: results.append((err, n)))
        else:
            live_group.send(b"x" * 70000, "peer")

        assert len(errors) == 1
        assert isinstance(errors[0], SendFailure)
        assert isinstance(errors[0].__cause__, OSError)
        assert results == ([(errors[0], 0)] if with_callback else [])


class TestConversation:
    def test_two_groups_talk_by_nickname(self):
        with UdpGroup({"listen_port": 0, "host": "127.0.0.1"}) as alice, \
                UdpGroup({"listen_port": 0, "host": "127.0.0.1"}) as bob:
            bob_in, _ = alice.create_pathway(
                {"remote_address": "127.0.0.1", "remote_port": bob.address().port, "remote_name": "bob"}
            )
            alice_in, _ = bob.create_pathway(
                {"remote_address": "127.0.0.1", "remote_port": alice.address().port, "remote_name": "alice"}
            )

            alice.send(b"hi bob", "bob")
            bob.poll(1.0)
            assert bytes(alice_in.read()) == b"hi bob"

            bob.send(b"hi alice", "alice")
            alice.poll(1.0)
            assert bytes(bob_in.read()) == b"hi alice"


class TestLifecycle:
    def test_close_event_forwarded(self):
        closes = []
        group = UdpGroup({"listen_port": 0, "host": "127.0.0.1"})
        group.on("close", lambda: closes.append(1))
        group.close()
        assert closes == [1]
        assert group.poll(0) == 0

    def test_unref_stops_serve_forever(self, live_group, peer):
        channel, _ = live_group.create_pathway({"remote_address": "127.0.0.1"})

        def _stop_after_first(payload):
            live_group.unref()

        channel.subscribe(_stop_after_first)
        peer.send(b"one", live_group.address().port, "127.0.0.1")
        live_group.serve_forever(0.05)
        assert channel.received == 1
