"""Asyncio client for the Source RCON protocol."""

__version__ = "0.1.0"

from .codec import (
    decode_from_bytes,
    decode_packet,
    decode_packet_any_size,
    encode_packet,
    encode_to_bytes,
)
from .config import RconSettings, load_servers, resolve_settings
from .connection import RconConnection
from .errors import (
    RconAuthError,
    RconClientError,
    RconConfigError,
    RconConnectionError,
    RconEncodingError,
    RconFramingError,
    RconIncompleteReadError,
    RconSessionStateError,
    RconTimeout,
)
from .packet import MAX_BODY_LENGTH, Packet, PacketType
from .session import RconSession, SessionState, run_command

__all__ = [
    "MAX_BODY_LENGTH",
    "Packet",
    "PacketType",
    "RconAuthError",
    "RconClientError",
    "RconConfigError",
    "RconConnection",
    "RconConnectionError",
    "RconEncodingError",
    "RconFramingError",
    "RconIncompleteReadError",
    "RconSession",
    "RconSessionStateError",
    "RconSettings",
    "RconTimeout",
    "SessionState",
    "__version__",
    "decode_from_bytes",
    "decode_packet",
    "decode_packet_any_size",
    "encode_packet",
    "encode_to_bytes",
    "load_servers",
    "resolve_settings",
    "run_command",
]
