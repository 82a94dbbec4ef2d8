"""Starts a real server process and interrupts it mid-request."""

import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]

pytestmark = pytest.mark.integration


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _wait_until_ready(base_url: str, process: subprocess.Popen, deadline: float) -> None:
    while time.monotonic() < deadline:
        if process.poll() is not None:
            pytest.fail(f"server exited early with {process.returncode}")
        try:
            if httpx.get(f"{base_url}/categories", timeout=0.5).status_code == 200:
                return
        except httpx.TransportError:
            pass
        time.sleep(0.1)
    pytest.fail("server did not become ready")


def _connection_refused(port: int, deadline: float) -> bool:
    while time.monotonic() < deadline:
        try:
            with socket.create_connection(("127.0.0.1", port), timeout=0.2):
                pass
        except OSError:
            return True
        time.sleep(0.05)
    return False


@pytest.fixture
def server(tmp_path: Path):
    port = _free_port()
    env = {
        **os.environ,
        "BOOKSHELF_CONFIG": str(PROJECT_ROOT / "config.yaml"),
        "DATABASE_URL": f"sqlite:///{tmp_path / 'bookshelf.db'}",
        "APP_ENVIRONMENT": "test",
        "LOG_FILE": "",
    }
    process = subprocess.Popen(
        [
            sys.executable,
            "-m",
            "bookshelf",
            "serve",
            "-graceful-timeout=5s",
            "--host",
            "127.0.0.1",
            "--port",
            str(port),
        ],
        cwd=tmp_path,
        env=env,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    try:
        _wait_until_ready(f"http://127.0.0.1:{port}", process, time.monotonic() + 20)
        yield process, port
    finally:
        if process.poll() is None:
            process.kill()
            process.wait()


def test_in_flight_request_completes_after_sigint(server):
    process, port = server
    body = b'{"name": "fiction"}'

    # Hold a request open by sending only part of its body
    client = socket.create_connection(("127.0.0.1", port), timeout=10)
    client.sendall(
        b"POST /categories HTTP/1.1\r\n"
        b"Host: 127.0.0.1\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: " + str(len(body)).encode() + b"\r\n\r\n" + body[:5]
    )
    time.sleep(0.3)

    process.send_signal(signal.SIGINT)
    interrupted_at = time.monotonic()

    assert _connection_refused(port, interrupted_at + 2)

    client.sendall(body[5:])
    response = b""
    while chunk := client.recv(4096):
        response += chunk
    client.close()

    assert response.startswith(b"HTTP/1.1 200")
    assert b'"name":"fiction"' in response

    assert process.wait(timeout=5) == 0
    assert time.monotonic() - interrupted_at < 5
