"""Transport layer for Source RCON.

This package contains all socket IO for the client.

Components:
- stream: exact read/write adapters over asyncio streams and memory buffers
- tcp: endpoint parsing and TCP connection establishment
"""

from .stream import (
    BufferExactReader,
    BufferExactWriter,
    ExactReader,
    ExactWriter,
    StreamExactReader,
    StreamExactWriter,
)
from .tcp import open_tcp, parse_endpoint

__all__ = [
    "BufferExactReader",
    "BufferExactWriter",
    "ExactReader",
    "ExactWriter",
    "StreamExactReader",
    "StreamExactWriter",
    "open_tcp",
    "parse_endpoint",
]
