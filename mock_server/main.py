"""
Mock Server - Canned HTTP/HTTPS responses for client integration tests.

Startup order:
1. Load the route table from the JSON config (fatal if missing/malformed)
2. Write the PID file so the test harness can kill us later
3. Start the plain HTTP listener
4. Load the TLS key/cert and start the HTTPS listener

Both listeners share one FastAPI app and run in the same event loop until
the process is signalled.

Usage:
    mock-server CONFIG_JSON TLS_KEY TLS_CERT PLAIN_PORT TLS_PORT
"""

import os
import ssl
import sys
import asyncio
import logging
import argparse
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from .app import create_app
from .errors import MockServerError, TlsMaterialError
from .models import RouteTable, ServerSettings
from .pidfile import write_pid_file

logger = logging.getLogger(__name__)

_STARTUP_POLL_INTERVAL = 0.05  # seconds


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None) -> ServerSettings:
    parser = argparse.ArgumentParser(
        prog="mock-server",
        description="Serve canned GET responses and echo POST /echo over HTTP and HTTPS.",
    )
    parser.add_argument("config_path", type=Path, help="JSON object mapping route path -> response text")
    parser.add_argument("tls_key_path", type=Path, help="PEM private key for the HTTPS listener")
    parser.add_argument("tls_cert_path", type=Path, help="PEM certificate for the HTTPS listener")
    parser.add_argument("plain_port", type=int, help="HTTP port")
    parser.add_argument("tls_port", type=int, help="HTTPS port")
    args = parser.parse_args(argv)

    try:
        return ServerSettings(**vars(args))
    except ValidationError as e:
        parser.error(str(e))


# ---------------------------------------------------------------------------
# Listeners
# ---------------------------------------------------------------------------

def load_tls_material(key_path: Path, cert_path: Path) -> None:
    """Check the key/cert pair loads before handing it to the TLS listener."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    try:
        context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))
    except OSError as e:
        raise TlsMaterialError(f"Could not load TLS key {key_path} / cert {cert_path}: {e}") from e


def build_listener(app: FastAPI, settings: ServerSettings, tls: bool) -> uvicorn.Server:
    ssl_kwargs = {}
    if tls:
        ssl_kwargs = {
            "ssl_keyfile": str(settings.tls_key_path),
            "ssl_certfile": str(settings.tls_cert_path),
        }
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.tls_port if tls else settings.plain_port,
        log_level=settings.log_level.lower(),
        **ssl_kwargs,
    )
    return uvicorn.Server(config)


async def _run_listener(server: uvicorn.Server) -> None:
    """Serve until told to exit.

    uvicorn reports a failed bind with ``sys.exit``; that is turned into a
    ``MockServerError`` so it stays inside the listener task.
    """
    try:
        await server.serve()
    except SystemExit as e:
        raise MockServerError(
            f"Listener on port {server.config.port} failed (uvicorn exit code {e.code})"
        ) from e


async def _wait_started(server: uvicorn.Server, task: asyncio.Task) -> None:
    """Block until *server* is bound, surfacing startup failures."""
    while not server.started:
        if task.done():
            task.result()
            raise MockServerError(f"Listener on port {server.config.port} stopped during startup")
        await asyncio.sleep(_STARTUP_POLL_INTERVAL)


async def serve(app: FastAPI, settings: ServerSettings) -> None:
    """Run the plain and TLS listeners until either one stops."""
    pid = os.getpid()

    plain = build_listener(app, settings, tls=False)
    plain_task = asyncio.create_task(_run_listener(plain))
    await _wait_started(plain, plain_task)
    logger.info(f"Mock server is running on http://localhost:{settings.plain_port} with PID:{pid}")

    try:
        load_tls_material(settings.tls_key_path, settings.tls_cert_path)
        secure = build_listener(app, settings, tls=True)
        secure_task = asyncio.create_task(_run_listener(secure))
        await _wait_started(secure, secure_task)
    except MockServerError:
        plain.should_exit = True
        await plain_task
        raise
    logger.info(f"Mock server is running on https://localhost:{settings.tls_port} with PID:{pid}")

    done, pending = await asyncio.wait(
        {plain_task, secure_task}, return_when=asyncio.FIRST_COMPLETED
    )
    # One listener going down takes the other with it
    plain.should_exit = True
    secure.should_exit = True
    if pending:
        await asyncio.gather(*pending)
    for task in done:
        task.result()
    logger.info("Mock server stopped")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> None:
    settings = parse_args(argv)

    try:
        route_table = RouteTable.from_file(settings.config_path)
        logger.info(f"Loaded {len(route_table)} route(s) from {settings.config_path}")

        pid_path = write_pid_file(settings.pid_dir)
        logger.info(f"PID {os.getpid()} written to {pid_path}")

        asyncio.run(serve(create_app(route_table), settings))
    except MockServerError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
