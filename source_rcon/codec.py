"""Wire codec for Source RCON packets.

Layout, all integers little-endian::

    | size:i32 | id:i32 | type:i32 | body NUL-terminated | 0x00 |

``size`` counts every byte after itself. The trailing ``0x00`` is the second,
always empty, string of the packet and is checked on its own.
"""

from __future__ import annotations

import logging
import struct

from .errors import RconFramingError
from .packet import MAX_BODY_LENGTH, Packet, PacketType
from .transport.stream import BufferExactReader, ExactReader

_LOGGER = logging.getLogger(__name__)

_INT32 = struct.Struct("<i")
_HEADER = struct.Struct("<iii")

# id + type + empty trailing string
_SIZE_OVERHEAD = 4 + 4 + 1


def encode_packet(packet: Packet) -> bytes:
    """Serialize a packet into its complete wire representation."""
    return _HEADER.pack(packet.size, packet.id, int(packet.type)) + packet.body + b"\0\0"


encode_to_bytes = encode_packet


async def _read_int32(reader: ExactReader) -> int:
    (value,) = _INT32.unpack(await reader.read_exact(4))
    return value


async def _read_empty_string(reader: ExactReader) -> None:
    terminator = await reader.read_exact(1)
    if terminator != b"\0":
        raise RconFramingError("Broken packet: expected empty string")


async def decode_packet(reader: ExactReader) -> Packet:
    """Decode one packet, trusting the declared size.

    The body length is validated before anything past the header is read, and
    no more than ``size`` bytes are consumed after the size field.

    Raises:
        RconFramingError: On any framing violation
        RconConnectionError: If the underlying stream fails
    """
    size = await _read_int32(reader)
    body_length = size - _SIZE_OVERHEAD
    if body_length <= 0 or body_length > MAX_BODY_LENGTH:
        raise RconFramingError(f"Broken packet: invalid size {size}")

    packet_id = await _read_int32(reader)
    packet_type = PacketType.from_wire(await _read_int32(reader))

    _LOGGER.debug("Reading body of %d bytes", body_length)
    body = await reader.read_exact(body_length)
    if body[-1] != 0:
        raise RconFramingError("Broken packet: body is not NUL-terminated")
    if b"\0" in body[:-1]:
        raise RconFramingError("Broken packet: body contains an interior NUL")

    await _read_empty_string(reader)
    return Packet(packet_id, packet_type, body[:-1])


async def decode_packet_any_size(reader: ExactReader) -> Packet:
    """Decode one packet, scanning for the body terminator.

    Interoperates with servers whose size field does not match the payload.
    The declared size is read and ignored; the body is read byte by byte up to
    its NUL, bounded by ``MAX_BODY_LENGTH``.

    Raises:
        RconFramingError: On an overlong body or missing empty string
        RconConnectionError: If the underlying stream fails
    """
    size = await _read_int32(reader)
    _LOGGER.debug("Ignoring declared packet size %d", size)

    packet_id = await _read_int32(reader)
    packet_type = PacketType.from_wire(await _read_int32(reader))

    body = bytearray()
    while True:
        byte = await reader.read_exact(1)
        if byte == b"\0":
            break
        body += byte
        if len(body) >= MAX_BODY_LENGTH:
            raise RconFramingError("Broken packet: body too long")

    await _read_empty_string(reader)
    return Packet(packet_id, packet_type, bytes(body))


async def decode_from_bytes(data: bytes, *, any_size: bool = False) -> Packet:
    """Decode exactly one packet from an in-memory buffer.

    Raises:
        RconFramingError: If bytes remain after the packet
    """
    reader = BufferExactReader(data)
    if any_size:
        packet = await decode_packet_any_size(reader)
    else:
        packet = await decode_packet(reader)
    if reader.remaining:
        raise RconFramingError(
            f"Broken packet: {reader.remaining} trailing bytes after packet"
        )
    return packet
