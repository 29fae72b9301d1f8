"""Pytest configuration and fixtures for source_rcon tests."""

from __future__ import annotations

import asyncio
import struct
from collections.abc import AsyncIterator, Awaitable, Callable

import pytest_asyncio

from source_rcon.codec import decode_packet, encode_packet
from source_rcon.errors import RconClientError
from source_rcon.packet import Packet
from source_rcon.transport.stream import StreamExactReader


class ScriptedPeer:
    """Server side of a loopback RCON connection driven by a test script."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.reader = reader
        self.writer = writer
        self._exact = StreamExactReader(reader)

    async def receive(self) -> Packet:
        return await decode_packet(self._exact)

    async def send(self, packet: Packet) -> None:
        await self.send_raw(encode_packet(packet))

    async def send_raw(self, data: bytes) -> None:
        self.writer.write(data)
        await self.writer.drain()


PeerScript = Callable[[ScriptedPeer], Awaitable[None]]


def raw_packet(
    size: int, packet_id: int, packet_type: int, body: bytes, tail: bytes = b"\0"
) -> bytes:
    """Build wire bytes without any validation."""
    return struct.pack("<iii", size, packet_id, packet_type) + body + tail


@pytest_asyncio.fixture
async def rcon_server() -> AsyncIterator[Callable[[PeerScript], Awaitable[str]]]:
    """Start loopback servers running a peer script per connection.

    Returns:
        Async factory taking a script and returning the "host:port" endpoint
    """
    servers: list[asyncio.Server] = []

    async def start(script: PeerScript) -> str:
        async def handle(
            reader: asyncio.StreamReader, writer: asyncio.StreamWriter
        ) -> None:
            try:
                await script(ScriptedPeer(reader, writer))
            except (RconClientError, ConnectionError):
                # Client hung up first; nothing left to script.
                pass
            finally:
                writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        servers.append(server)
        port = server.sockets[0].getsockname()[1]
        return f"127.0.0.1:{port}"

    yield start

    for server in servers:
        server.close()
        await server.wait_closed()


@pytest_asyncio.fixture
async def echo_endpoint(
    rcon_server: Callable[[PeerScript], Awaitable[str]],
) -> str:
    """Endpoint of a peer that echoes every byte back unchanged."""

    async def echo(peer: ScriptedPeer) -> None:
        while data := await peer.reader.read(1024):
            await peer.send_raw(data)

    return await rcon_server(echo)
