"""Authenticated command session on top of an RCON connection.

This module sequences the RCON exchange:
- Connection establishment
- Password authentication
- Command execution with response correlation

Servers may interleave unrelated packets with the expected reply. Those are
read and dropped; the first packet matching the awaited id and type ends the
wait.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from types import TracebackType
from typing import Any

from .connection import RconConnection
from .errors import RconAuthError, RconClientError, RconSessionStateError
from .packet import INT32_MAX, Packet, PacketType

_LOGGER = logging.getLogger(__name__)

AUTH_PACKET_ID = 0
COMMAND_PACKET_ID = 1


class SessionState(Enum):
    """Session lifecycle states."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    EXECUTING = "executing"
    DONE = "done"
    FAILED = "failed"


class RconSession:
    """Handshake and command state machine for one RCON server.

    Usage:
        async with RconSession("127.0.0.1:27015", "secret") as session:
            await session.authenticate()
            output = await session.execute("status")
    """

    def __init__(
        self,
        endpoint: str,
        password: str,
        *,
        timeout: float = 10.0,
        lenient: bool = False,
        auth_id: int = AUTH_PACKET_ID,
        command_id: int = COMMAND_PACKET_ID,
        encoding: str = "ascii",
    ) -> None:
        """Initialize session.

        Args:
            endpoint: Server "host:port"
            password: RCON password
            timeout: Connection timeout (seconds)
            lenient: Ignore declared packet sizes when decoding
            auth_id: Correlation id of the auth request
            command_id: Correlation id of the first command request; later
                commands take the following ids, wrapping within int32 and
                skipping auth_id
            encoding: Text encoding for password and command bodies
        """
        if auth_id == command_id:
            raise ValueError("auth_id and command_id must differ")

        self.endpoint = endpoint
        self.password = password

        self._timeout = timeout
        self._lenient = lenient
        self._auth_id = auth_id
        self._next_command_id = command_id
        self._encoding = encoding

        self._connection: RconConnection | None = None
        self._state = SessionState.DISCONNECTED
        self._state_callback: Callable[[SessionState], None] | None = None

    @classmethod
    def from_connection(
        cls,
        connection: RconConnection,
        password: str,
        **kwargs: Any,
    ) -> RconSession:
        """Create a session over an already established connection."""
        session = cls(connection.endpoint, password, **kwargs)
        session._connection = connection
        session._state = SessionState.CONNECTED
        return session

    async def __aenter__(self) -> RconSession:
        if self._state is SessionState.DISCONNECTED:
            await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state in (SessionState.AUTHENTICATED, SessionState.DONE)

    def on_state_changed(self, callback: Callable[[SessionState], None]) -> None:
        """Register callback for session state changes."""
        self._state_callback = callback

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the TCP connection."""
        self._require(SessionState.DISCONNECTED)
        try:
            self._connection = await RconConnection.connect(
                self.endpoint,
                timeout=self._timeout,
                lenient=self._lenient,
            )
        except RconClientError:
            self._set_state(SessionState.FAILED)
            raise
        self._set_state(SessionState.CONNECTED)

    async def authenticate(self) -> None:
        """Send the password and wait for the auth response.

        Raises:
            RconAuthError: If the server rejects the password
        """
        self._require(SessionState.CONNECTED)
        connection = self._active_connection()
        try:
            self._set_state(SessionState.AUTHENTICATING)
            await connection.send(
                Packet.create(
                    self._auth_id,
                    PacketType.AUTH,
                    self.password,
                    encoding=self._encoding,
                )
            )
            _LOGGER.debug("[%s] Auth sent", self.endpoint)

            response = await self._await_auth_response(connection)
            if (
                response.type is PacketType.AUTH_FAILED
                or response.id != self._auth_id
            ):
                _LOGGER.error(
                    "[%s] Authentication rejected (id=%d)", self.endpoint, response.id
                )
                raise RconAuthError(response.id)
        except BaseException:
            self._set_state(SessionState.FAILED)
            raise

        self._set_state(SessionState.AUTHENTICATED)
        _LOGGER.info("[%s] Authenticated", self.endpoint)

    async def execute(self, command: str) -> str:
        """Run a command and return its textual output.

        Each call uses a fresh correlation id, so trailing packets of an
        earlier multi-packet response are skipped rather than returned.
        """
        self._require(SessionState.AUTHENTICATED, SessionState.DONE)
        connection = self._active_connection()
        command_id = self._take_command_id()
        try:
            self._set_state(SessionState.EXECUTING)
            await connection.send(
                Packet.create(
                    command_id,
                    PacketType.EXEC_COMMAND_OR_AUTH_RESPONSE,
                    command,
                    encoding=self._encoding,
                )
            )
            _LOGGER.debug("[%s] Command sent: %s", self.endpoint, command)

            while True:
                packet = await connection.receive()
                if (
                    packet.id == command_id
                    and packet.type is PacketType.RESPONSE_VALUE
                ):
                    break
                _LOGGER.debug(
                    "[%s] Ignoring packet id=%d type=%s while executing",
                    self.endpoint,
                    packet.id,
                    packet.type.name,
                )
        except BaseException:
            self._set_state(SessionState.FAILED)
            raise

        self._set_state(SessionState.DONE)
        return packet.text()

    async def close(self) -> None:
        """Close the underlying connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
        if self._state not in (SessionState.FAILED, SessionState.DONE):
            self._set_state(SessionState.DISCONNECTED)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    async def _await_auth_response(self, connection: RconConnection) -> Packet:
        while True:
            packet = await connection.receive()
            if packet.type in (
                PacketType.EXEC_COMMAND_OR_AUTH_RESPONSE,
                PacketType.AUTH_FAILED,
            ):
                return packet
            _LOGGER.debug(
                "[%s] Ignoring packet id=%d type=%s while authenticating",
                self.endpoint,
                packet.id,
                packet.type.name,
            )

    def _take_command_id(self) -> int:
        """Return the id for the next command and advance the counter."""
        packet_id = self._next_command_id
        following = packet_id + 1 if packet_id < INT32_MAX else 0
        if following == self._auth_id:
            following = following + 1 if following < INT32_MAX else 0
        self._next_command_id = following
        return packet_id

    def _active_connection(self) -> RconConnection:
        if self._connection is None:
            raise RconSessionStateError("Session has no connection")
        return self._connection

    def _require(self, *states: SessionState) -> None:
        if self._state not in states:
            expected = ", ".join(state.value for state in states)
            raise RconSessionStateError(
                f"Operation requires state {expected}, session is {self._state.value}"
            )

    def _set_state(self, state: SessionState) -> None:
        """Update session state and notify callback."""
        if self._state != state:
            _LOGGER.debug(
                "[%s] State: %s → %s", self.endpoint, self._state.value, state.value
            )
            self._state = state
            if self._state_callback:
                self._state_callback(state)


async def run_command(
    endpoint: str,
    password: str,
    command: str,
    **kwargs: Any,
) -> str:
    """Connect, authenticate, run one command and close."""
    async with RconSession(endpoint, password, **kwargs) as session:
        await session.authenticate()
        return await session.execute(command)
