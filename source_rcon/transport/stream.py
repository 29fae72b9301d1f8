"""Exact read/write adapters for RCON byte streams."""

from __future__ import annotations

import asyncio
from typing import Protocol

from ..errors import RconConnectionError, RconIncompleteReadError


class ExactReader(Protocol):
    """Source of bytes that never returns a short read."""

    async def read_exact(self, n: int) -> bytes: ...


class ExactWriter(Protocol):
    """Sink of bytes that never performs a short write."""

    async def write_exact(self, data: bytes) -> None: ...

    async def close(self) -> None: ...


class StreamExactReader:
    """ExactReader over an asyncio StreamReader."""

    def __init__(self, reader: asyncio.StreamReader) -> None:
        self._reader = reader

    async def read_exact(self, n: int) -> bytes:
        """Read exactly n bytes.

        Raises:
            RconIncompleteReadError: If the stream ends first
            RconConnectionError: On socket failure
        """
        try:
            return await self._reader.readexactly(n)
        except asyncio.IncompleteReadError as err:
            raise RconIncompleteReadError(n, n - len(err.partial)) from err
        except OSError as err:
            raise RconConnectionError(f"Read failed: {err}") from err


class StreamExactWriter:
    """ExactWriter over an asyncio StreamWriter."""

    def __init__(self, writer: asyncio.StreamWriter) -> None:
        self._writer = writer

    async def write_exact(self, data: bytes) -> None:
        """Write the complete buffer and wait for it to drain.

        Raises:
            RconConnectionError: On socket failure
        """
        if self._writer.is_closing():
            raise RconConnectionError("Write failed: transport is closing")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as err:
            raise RconConnectionError(f"Write failed: {err}") from err

    async def close(self) -> None:
        """Close the underlying transport."""
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError:
            # Peer already reset the socket; nothing left to flush.
            pass


class BufferExactReader:
    """ExactReader over an in-memory buffer."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._offset = 0

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self._offset

    async def read_exact(self, n: int) -> bytes:
        if n > self.remaining:
            raise RconIncompleteReadError(n, n - self.remaining)
        chunk = self._data[self._offset : self._offset + n].tobytes()
        self._offset += n
        return chunk


class BufferExactWriter:
    """ExactWriter collecting bytes in memory."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self.closed = False

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    async def write_exact(self, data: bytes) -> None:
        if self.closed:
            raise RconConnectionError("Write failed: buffer is closed")
        self._buffer += data

    async def close(self) -> None:
        self.closed = True
