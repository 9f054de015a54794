"""Integration tests for real HTTP behavior and CLI execution.

These tests run the harness over real sockets against a local server
that serves the in-memory FakeBackend. They need no running backend.
"""

import json
import socket
import subprocess
import sys
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path

import httpx
import pytest

from tracker_harness.cli import EXIT_ERROR, EXIT_OK, main

from fake_backend import error_response

PROJECT_ROOT = Path(__file__).parent.parent


class FakeBackendHandler(BaseHTTPRequestHandler):
    """Forwards each HTTP request to the server's FakeBackend."""

    def log_message(self, format, *args):
        """Suppress logging."""
        pass

    def _forward(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length else b""
        request = httpx.Request(
            self.command,
            f"http://{self.headers.get('Host', 'localhost')}{self.path}",
            headers=dict(self.headers.items()),
            content=body,
        )
        response = self.server.backend(request)

        self.send_response(response.status_code)
        for name, value in response.headers.items():
            if name.lower() not in ("content-length", "transfer-encoding"):
                self.send_header(name, value)
        self.send_header("Content-Length", str(len(response.content)))
        self.end_headers()
        if response.content:
            self.wfile.write(response.content)

    do_GET = _forward
    do_POST = _forward
    do_PATCH = _forward
    do_DELETE = _forward


@pytest.fixture
def server_url(backend):
    """Serve the FakeBackend on a random local port."""
    server = HTTPServer(("127.0.0.1", 0), FakeBackendHandler)
    server.backend = backend
    port = server.server_address[1]
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    yield f"http://127.0.0.1:{port}"
    server.shutdown()
    server.server_close()


@pytest.fixture
def refused_url():
    """A local URL with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}"


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run without a tracker.json or TRACKER_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in ("TRACKER_BASE_URL", "TRACKER_TIMEOUT", "TRACKER_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


class TestFullRunOverHttp:
    """The whole CLI pass against a local server."""

    def test_run_exits_zero(self, server_url, backend):
        assert main(["-q", "-u", server_url, "-t", "5"]) == EXIT_OK

        methods = [m for m, _ in backend.calls()]
        assert methods[:4] == ["POST", "POST", "GET", "GET"]
        assert backend.calls()[-1][0] == "DELETE"

    def test_json_output_all_passed(self, server_url, tmp_path):
        output = tmp_path / "results.json"

        exit_code = main(["-q", "-u", server_url, "-j", str(output), "--strict"])

        assert exit_code == EXIT_OK
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["base_url"] == server_url
        assert data["summary"]["all_passed"] is True
        assert data["summary"]["passed"] == 22

    def test_category_delete_over_http(self, server_url, backend):
        main(["-q", "-u", server_url, "-r", "category"])

        assert backend.categories["Mindfulness"] == {}

    def test_progress_output(self, server_url, capsys):
        main(["-u", server_url, "-r", "water"])

        out = capsys.readouterr().out
        assert "[TIME] POST /register (201)" in out
        assert "[PASS] Waters Delete" in out
        assert "All tests completed" in out


class TestServerUnreachable:
    """A refused connection aborts the run."""

    def test_exits_two(self, refused_url, capsys):
        assert main(["-q", "-u", refused_url, "-t", "2"]) == EXIT_ERROR

        out = capsys.readouterr().out
        assert "[FATAL] Failed to connect" in out
        assert "/register" in out

    def test_json_output_records_fatal(self, refused_url, tmp_path):
        output = tmp_path / "results.json"

        main(["-q", "-u", refused_url, "-t", "2", "-j", str(output)])

        data = json.loads(output.read_text(encoding="utf-8"))
        assert "Failed to connect" in data["fatal"]


class TestAuthenticationAbort:
    """A rejected registration aborts the run but keeps its reason."""

    def test_json_output_records_register_failure(self, server_url, backend, tmp_path):
        backend.override("POST", "/register", error_response(400, "Missing fields"))
        output = tmp_path / "results.json"

        exit_code = main(["-q", "-u", server_url, "-j", str(output)])

        assert exit_code == EXIT_ERROR
        data = json.loads(output.read_text(encoding="utf-8"))
        assert "Missing fields" in data["fatal"]
        assert data["sections"][0]["name"] == "Authentication"
        register = data["sections"][0]["steps"][0]
        assert register["name"] == "Register"
        assert register["status"] == "fail"
        assert "HTTP 400: Missing fields" in register["message"]
        assert backend.calls() == [("POST", "/register")]

    def test_quiet_console_shows_reason(self, server_url, backend, capsys):
        backend.override("POST", "/register", error_response(400, "Missing fields"))

        main(["-q", "-u", server_url])

        assert "[FATAL] Failed to register: HTTP 400: Missing fields" in capsys.readouterr().out


class TestCLIIntegration:
    """Test full CLI execution paths."""

    def test_cli_help_works(self):
        """Verify CLI help runs without error."""
        result = subprocess.run(
            [sys.executable, "-m", "tracker_harness", "--help"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

        assert result.returncode == 0
        assert "tracker-harness" in result.stdout

    def test_cli_missing_config_returns_error_code(self):
        """Verify CLI returns exit code 2 when an explicit config is missing."""
        result = subprocess.run(
            [sys.executable, "-m", "tracker_harness", "-c", "nonexistent.json"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

        assert result.returncode == 2
        assert "Configuration error" in result.stderr
