"""TCP helpers for Source RCON transport."""

from __future__ import annotations

import asyncio

from ..errors import RconConfigError, RconConnectionError, RconTimeout
from .stream import StreamExactReader, StreamExactWriter


def parse_endpoint(endpoint: str) -> tuple[str, int]:
    """Split a "host:port" endpoint.

    IPv6 hosts must be bracketed, e.g. "[::1]:27015".

    Raises:
        RconConfigError: If the endpoint is malformed
    """
    host, sep, port_str = endpoint.strip().rpartition(":")
    if not sep or not host or not port_str:
        raise RconConfigError(f"Endpoint must be host:port, got {endpoint!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise RconConfigError(f"IPv6 endpoint must be bracketed: {endpoint!r}")
    try:
        port = int(port_str)
    except ValueError as err:
        raise RconConfigError(f"Invalid port in endpoint {endpoint!r}") from err
    if not 0 < port < 65536:
        raise RconConfigError(f"Port out of range in endpoint {endpoint!r}")
    return host, port


async def open_tcp(
    endpoint: str,
    *,
    timeout: float = 10.0,
) -> tuple[StreamExactReader, StreamExactWriter]:
    """Open a TCP connection to an RCON endpoint.

    Args:
        endpoint: Target "host:port"
        timeout: Connection timeout in seconds

    Returns:
        Exact reader and writer halves of the connection
    """
    host, port = parse_endpoint(endpoint)
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise RconTimeout(f"Connection to {endpoint} timed out") from err
    except OSError as err:
        raise RconConnectionError(f"Connection to {endpoint} failed: {err}") from err
    return StreamExactReader(reader), StreamExactWriter(writer)
