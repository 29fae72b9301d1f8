"""Tests for Packet and PacketType value types."""

from __future__ import annotations

import pytest

from source_rcon.errors import RconEncodingError, RconFramingError
from source_rcon.packet import Packet, PacketType


class TestPacketType:
    """Tests for PacketType wire codes."""

    def test_wire_values(self):
        """Test enum has the protocol's type codes."""
        assert PacketType.AUTH == 3
        assert PacketType.EXEC_COMMAND_OR_AUTH_RESPONSE == 2
        assert PacketType.RESPONSE_VALUE == 0
        assert PacketType.AUTH_FAILED == -1

    def test_enumeration_is_closed(self):
        """Test there are exactly four members."""
        assert len(PacketType) == 4

    @pytest.mark.parametrize("code", [3, 2, 0, -1])
    def test_from_wire_known(self, code: int):
        """Test known codes map to members."""
        assert PacketType.from_wire(code) == code

    @pytest.mark.parametrize("code", [1, 4, -2, 255, 2**31 - 1])
    def test_from_wire_unknown(self, code: int):
        """Test unknown codes are framing errors, not a fallback member."""
        with pytest.raises(RconFramingError, match="Invalid packet type"):
            PacketType.from_wire(code)


class TestPacket:
    """Tests for Packet construction."""

    def test_create_from_text(self):
        packet = Packet.create(0, PacketType.AUTH, "passwrd")
        assert packet.id == 0
        assert packet.type is PacketType.AUTH
        assert packet.body == b"passwrd"

    def test_empty_body_is_valid(self):
        packet = Packet(-1, PacketType.EXEC_COMMAND_OR_AUTH_RESPONSE)
        assert packet.body == b""
        assert packet.size == 10

    def test_size_counts_both_terminators(self):
        """Test size is id + type + body + NUL + empty string."""
        assert Packet.create(7, PacketType.RESPONSE_VALUE, "abc").size == 4 + 4 + 3 + 1 + 1

    @pytest.mark.parametrize("body", ["text", bytearray(b"raw"), None])
    def test_non_bytes_body_rejected(self, body):
        with pytest.raises(RconEncodingError, match="bytes"):
            Packet(1, PacketType.AUTH, body)

    def test_body_with_nul_rejected(self):
        with pytest.raises(RconEncodingError, match="NUL"):
            Packet(1, PacketType.EXEC_COMMAND_OR_AUTH_RESPONSE, b"say\0hi")

    def test_create_with_nul_rejected(self):
        with pytest.raises(RconEncodingError):
            Packet.create(1, PacketType.EXEC_COMMAND_OR_AUTH_RESPONSE, "a\0b")

    def test_create_non_ascii_rejected(self):
        """Test text outside the chosen encoding is an encoding error."""
        with pytest.raises(RconEncodingError, match="ascii"):
            Packet.create(1, PacketType.EXEC_COMMAND_OR_AUTH_RESPONSE, "say héllo")

    def test_create_with_utf8(self):
        packet = Packet.create(
            1, PacketType.EXEC_COMMAND_OR_AUTH_RESPONSE, "say héllo", encoding="utf-8"
        )
        assert packet.text() == "say héllo"

    @pytest.mark.parametrize("packet_id", [2**31, -(2**31) - 1])
    def test_id_out_of_range(self, packet_id: int):
        with pytest.raises(RconEncodingError, match="int32"):
            Packet(packet_id, PacketType.AUTH)

    def test_plain_int_type_is_coerced(self):
        packet = Packet(1, 0, b"ok")  # type: ignore[arg-type]
        assert packet.type is PacketType.RESPONSE_VALUE

    def test_text_replaces_invalid_bytes(self):
        packet = Packet(1, PacketType.RESPONSE_VALUE, b"ok \xff")
        assert packet.text() == "ok \ufffd"

    def test_packet_is_frozen(self):
        """Test that packets are immutable."""
        packet = Packet(1, PacketType.RESPONSE_VALUE, b"x")
        with pytest.raises(AttributeError):
            packet.body = b"y"  # type: ignore[misc]
