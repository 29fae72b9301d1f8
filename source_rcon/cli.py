"""Command line entry point: run one RCON command and print its output."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence

from .config import ENV_COMMAND, RconSettings, resolve_settings
from .errors import (
    RconAuthError,
    RconClientError,
    RconConfigError,
    RconConnectionError,
    RconFramingError,
)
from .session import RconSession

_LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_AUTH = 3
EXIT_FRAMING = 4
EXIT_CONNECTION = 5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rcon",
        description="Run a command on a Source RCON server.",
    )
    parser.add_argument("-e", "--endpoint", help="server host:port (env RCON_ENDPOINT)")
    parser.add_argument("-p", "--password", help="RCON password (env RCON_PASSWORD)")
    parser.add_argument("-c", "--config", help="YAML server file (env RCON_CONFIG)")
    parser.add_argument("-s", "--server", help="server name inside the config file")
    parser.add_argument("--timeout", type=float, help="connect timeout in seconds")
    parser.add_argument(
        "--lenient",
        action="store_true",
        default=None,
        help="ignore declared packet sizes from non-conformant servers",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("command", nargs="*", help="command to run (env RCON_COMMAND)")
    return parser


async def _run(settings: RconSettings, command: str) -> str:
    async with RconSession(
        settings.endpoint,
        settings.password,
        timeout=settings.timeout,
        lenient=settings.lenient,
    ) as session:
        await session.authenticate()
        return await session.execute(command)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    command = " ".join(args.command) or os.environ.get(ENV_COMMAND, "")
    try:
        if not command:
            raise RconConfigError(f"Command is required (argument or {ENV_COMMAND})")
        settings = resolve_settings(
            endpoint=args.endpoint,
            password=args.password,
            timeout=args.timeout,
            lenient=args.lenient,
            config_path=args.config,
            server=args.server,
        )
        output = asyncio.run(_run(settings, command))
    except RconConfigError as err:
        _LOGGER.error("Configuration error: %s", err)
        return EXIT_CONFIG
    except RconAuthError as err:
        _LOGGER.error("Authentication failed: %s", err)
        return EXIT_AUTH
    except RconFramingError as err:
        _LOGGER.error("Malformed packet from server: %s", err)
        return EXIT_FRAMING
    except RconConnectionError as err:
        _LOGGER.error("Connection error: %s", err)
        return EXIT_CONNECTION
    except RconClientError as err:
        _LOGGER.error("RCON error: %s", err)
        return EXIT_ERROR

    print(output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
