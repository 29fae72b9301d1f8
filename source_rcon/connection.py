"""Duplex RCON connection over a single TCP socket."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

from .codec import decode_packet, decode_packet_any_size, encode_packet
from .errors import RconConnectionError, RconFramingError
from .packet import Packet
from .transport.stream import ExactReader, ExactWriter
from .transport.tcp import open_tcp

_LOGGER = logging.getLogger(__name__)


class RconConnection:
    """Owns one TCP connection split into independently locked halves.

    ``send`` and ``receive`` may run concurrently from different tasks. Two
    concurrent sends (or two concurrent receives) are serialized so packet
    bytes never interleave.

    Usage:
        async with await RconConnection.connect("127.0.0.1:27015") as conn:
            await conn.send(Packet.create(0, PacketType.AUTH, "secret"))
            reply = await conn.receive()
    """

    def __init__(
        self,
        reader: ExactReader,
        writer: ExactWriter,
        *,
        endpoint: str = "<stream>",
        lenient: bool = False,
    ) -> None:
        """Initialize connection.

        Args:
            reader: Read half of the socket
            writer: Write half of the socket
            endpoint: Peer label used in log messages
            lenient: Decode with the size-ignoring decoder by default
        """
        self.endpoint = endpoint
        self.lenient = lenient

        self._reader = reader
        self._writer = writer
        self._read_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

        self._broken_reason: str | None = None
        self._closed = False

    @classmethod
    async def connect(
        cls,
        endpoint: str,
        *,
        timeout: float = 10.0,
        lenient: bool = False,
    ) -> RconConnection:
        """Open a TCP connection to ``endpoint`` ("host:port")."""
        _LOGGER.debug("[%s] Connecting", endpoint)
        reader, writer = await open_tcp(endpoint, timeout=timeout)
        _LOGGER.info("[%s] Connected", endpoint)
        return cls(reader, writer, endpoint=endpoint, lenient=lenient)

    async def __aenter__(self) -> RconConnection:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_usable(self) -> bool:
        """True while the connection is open and framing is intact."""
        return not self._closed and self._broken_reason is None

    async def send(self, packet: Packet) -> None:
        """Write one packet.

        The packet is fully encoded before the write lock is taken.

        Raises:
            RconConnectionError: If the connection is unusable or the write fails
        """
        data = encode_packet(packet)
        self._ensure_usable()
        async with self._write_lock:
            self._ensure_usable()
            try:
                await self._writer.write_exact(data)
            except RconConnectionError as err:
                self._mark_broken(str(err))
                raise
        _LOGGER.debug(
            "[%s] Sent packet id=%d type=%s (%d bytes)",
            self.endpoint,
            packet.id,
            packet.type.name,
            len(data),
        )

    async def receive(self) -> Packet:
        """Read one packet using the connection's decode mode.

        Raises:
            RconFramingError: On a malformed packet; the connection is then broken
            RconConnectionError: If the connection is unusable or the read fails

        A receive that is cancelled (for example by ``asyncio.wait_for``) also
        leaves the connection broken.
        """
        return await self._receive(any_size=self.lenient)

    async def receive_any_size(self) -> Packet:
        """Read one packet ignoring its declared size."""
        return await self._receive(any_size=True)

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._writer.close()
        _LOGGER.debug("[%s] Connection closed", self.endpoint)

    async def _receive(self, *, any_size: bool) -> Packet:
        self._ensure_usable()
        async with self._read_lock:
            self._ensure_usable()
            try:
                if any_size:
                    packet = await decode_packet_any_size(self._reader)
                else:
                    packet = await decode_packet(self._reader)
            except RconFramingError as err:
                _LOGGER.warning(
                    "[%s] Discarding connection after framing error: %s",
                    self.endpoint,
                    err,
                )
                self._mark_broken(str(err))
                raise
            except RconConnectionError as err:
                self._mark_broken(str(err))
                raise
            except BaseException:
                # Bytes of a partial packet may already be consumed.
                self._mark_broken("receive interrupted mid-packet")
                raise
        _LOGGER.debug(
            "[%s] Received packet id=%d type=%s (%d body bytes)",
            self.endpoint,
            packet.id,
            packet.type.name,
            len(packet.body),
        )
        return packet

    def _ensure_usable(self) -> None:
        if self._closed:
            raise RconConnectionError("Connection is closed")
        if self._broken_reason is not None:
            raise RconConnectionError(
                f"Connection is broken: {self._broken_reason}"
            )

    def _mark_broken(self, reason: str) -> None:
        if self._broken_reason is None:
            self._broken_reason = reason
