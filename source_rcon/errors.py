"""Client error types for Source RCON interactions."""

from __future__ import annotations


class RconClientError(Exception):
    """Base error for Source RCON client failures."""


class RconConfigError(RconClientError):
    """Client configuration is missing or malformed."""


class RconConnectionError(RconClientError):
    """Network connection to the server failed or is no longer usable."""


class RconIncompleteReadError(RconConnectionError):
    """The peer closed the stream before an exact read was satisfied."""

    def __init__(self, expected: int, outstanding: int) -> None:
        super().__init__(
            f"Stream ended with {outstanding} of {expected} bytes outstanding"
        )
        self.expected = expected
        self.outstanding = outstanding


class RconTimeout(RconConnectionError):
    """Timeout while establishing the connection."""


class RconFramingError(RconClientError):
    """A packet on the wire violates the framing rules.

    The stream offset of the next packet is unknown after this error, so the
    connection that produced it cannot be used again.
    """


class RconEncodingError(RconClientError):
    """A packet cannot be represented on the wire."""


class RconAuthError(RconClientError):
    """The server rejected the password."""

    def __init__(self, packet_id: int, message: str = "Authentication rejected") -> None:
        super().__init__(message)
        self.packet_id = packet_id


class RconSessionStateError(RconClientError):
    """Session operation is not valid in the current state."""
