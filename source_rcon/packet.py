"""Packet value types for the Source RCON protocol.

See https://developer.valvesoftware.com/wiki/Source_RCON_Protocol
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .errors import RconEncodingError, RconFramingError

MAX_BODY_LENGTH = 4096
"""Largest accepted body, terminating NUL included."""

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class PacketType(IntEnum):
    """Packet type codes as they appear on the wire."""

    AUTH = 3
    EXEC_COMMAND_OR_AUTH_RESPONSE = 2
    RESPONSE_VALUE = 0
    AUTH_FAILED = -1

    @classmethod
    def from_wire(cls, value: int) -> PacketType:
        """Map a decoded type code to a member.

        Raises:
            RconFramingError: If the code is not a known packet type
        """
        try:
            return cls(value)
        except ValueError as err:
            raise RconFramingError(f"Invalid packet type: {value}") from err


@dataclass(frozen=True, slots=True)
class Packet:
    """A single RCON packet.

    Attributes:
        id: Client-chosen correlation id, echoed back by the server.
        type: Packet type.
        body: Payload without its terminating NUL.
    """

    id: int
    type: PacketType
    body: bytes = b""

    def __post_init__(self) -> None:
        if not INT32_MIN <= self.id <= INT32_MAX:
            raise RconEncodingError(f"Packet id out of int32 range: {self.id}")
        if not isinstance(self.type, PacketType):
            object.__setattr__(self, "type", PacketType.from_wire(self.type))
        if not isinstance(self.body, bytes):
            raise RconEncodingError(
                f"Packet body must be bytes, got {type(self.body).__name__}"
            )
        if b"\0" in self.body:
            raise RconEncodingError("Packet body contains a NUL byte")

    @classmethod
    def create(
        cls,
        packet_id: int,
        packet_type: PacketType,
        body: str = "",
        *,
        encoding: str = "ascii",
    ) -> Packet:
        """Build a packet from text.

        Raises:
            RconEncodingError: If the text cannot be encoded or contains NUL
        """
        try:
            raw = body.encode(encoding)
        except UnicodeEncodeError as err:
            raise RconEncodingError(f"Body is not valid {encoding}") from err
        return cls(packet_id, packet_type, raw)

    @property
    def size(self) -> int:
        """Value of the size field for this packet."""
        return 4 + 4 + len(self.body) + 1 + 1

    def text(self, encoding: str = "utf-8", errors: str = "replace") -> str:
        """Decode the body into a string."""
        return self.body.decode(encoding, errors)
