"""End-to-end tests running the real uvicorn listener pair.

Uses a throwaway self-signed certificate made with openssl, like the e2e
echo server does.
"""

import asyncio
import shutil
import socket
import subprocess
from unittest.mock import patch

import httpx
import pytest

from mock_server.errors import MockServerError
from mock_server.main import build_listener, main, serve
from mock_server.models import ServerSettings

pytestmark = pytest.mark.skipif(shutil.which("openssl") is None, reason="openssl not installed")


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def tls_files(tmp_path):
    key = tmp_path / "server.key"
    cert = tmp_path / "server.crt"
    subprocess.run(
        [
            "openssl", "req", "-x509", "-newkey", "rsa:2048",
            "-keyout", str(key), "-out", str(cert),
            "-days", "1", "-nodes", "-subj", "/CN=localhost",
        ],
        check=True,
        capture_output=True,
    )
    return key, cert


@pytest.fixture
def busy_port():
    """A port with something already listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("0.0.0.0", 0))
        s.listen(1)
        yield s.getsockname()[1]


def _settings(tmp_path, tls_files, plain_port, tls_port):
    key, cert = tls_files
    return ServerSettings(
        config_path=tmp_path / "endpoints.json",
        tls_key_path=key,
        tls_cert_path=cert,
        plain_port=plain_port,
        tls_port=tls_port,
        host="127.0.0.1",
        pid_dir=tmp_path,
    )


class TestListenerPair:
    """Both ports serve the same routes."""

    async def test_routes_and_echo_on_both_listeners(self, app, tmp_path, tls_files):
        settings = _settings(tmp_path, tls_files, _free_port(), _free_port())
        servers = []

        def record_listener(a, s, tls):
            server = build_listener(a, s, tls)
            servers.append(server)
            return server

        with patch("mock_server.main.build_listener", side_effect=record_listener):
            task = asyncio.create_task(serve(app, settings))
            try:
                for _ in range(200):
                    if len(servers) == 2 and all(s.started for s in servers):
                        break
                    await asyncio.sleep(0.05)
                assert len(servers) == 2 and all(s.started for s in servers)

                async with httpx.AsyncClient(verify=False) as client:
                    for base in (
                        f"http://127.0.0.1:{settings.plain_port}",
                        f"https://127.0.0.1:{settings.tls_port}",
                    ):
                        response = await client.get(f"{base}/status")
                        assert response.status_code == 200
                        assert response.text == "ok"

                        response = await client.post(
                            f"{base}/echo", content=b"hello", headers={"X-Test": "1"}
                        )
                        assert response.status_code == 200
                        assert response.content == b"hello"
                        assert response.headers["x-test"] == "1"

                        response = await client.get(f"{base}/missing")
                        assert response.status_code == 404
            finally:
                for server in servers:
                    server.should_exit = True
                await asyncio.wait_for(task, timeout=10.0)

    async def test_busy_plain_port(self, app, tmp_path, tls_files, busy_port):
        settings = _settings(tmp_path, tls_files, busy_port, _free_port())
        settings = settings.model_copy(update={"host": "0.0.0.0"})
        with pytest.raises(MockServerError, match=f"port {busy_port}"):
            await asyncio.wait_for(serve(app, settings), timeout=10.0)


class TestBindFailureExit:

    def test_busy_port_exits_with_one(self, config_file, tmp_path, tls_files, busy_port):
        """A taken port is logged and exits 1 like every other startup failure."""
        key, cert = tls_files
        with patch("mock_server.main.write_pid_file", return_value=tmp_path / "pid"), \
                patch("mock_server.main.logger") as mock_logger:
            with pytest.raises(SystemExit) as exc_info:
                main([str(config_file), str(key), str(cert), str(busy_port), str(_free_port())])
        assert exc_info.value.code == 1
        mock_logger.error.assert_called_once()
        assert str(busy_port) in mock_logger.error.call_args[0][0]
