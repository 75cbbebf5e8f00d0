import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

import pytest

SERVICE_TOKEN = "private_token"
USER_TOKEN = "0123456789abcdef"

SESSION_JSON = {
    "id": 2,
    "username": "username",
    "email": "user@example.com",
    "name": "User Name",
    "private_token": USER_TOKEN,
    "state": "active"
}

SERVICE_USER_JSON = {
    "id": 1,
    "username": "root",
    "email": "admin@example.com",
    "private_token": SERVICE_TOKEN
}


class StubGitLabHandler(BaseHTTPRequestHandler):
    """Answers the v3 user and session endpoints like a GitLab server."""

    def log_message(self, format, *args):
        pass

    def _send_json(self, status, payload=None):
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        stub = self.server.stub
        if stub.delay:
            time.sleep(stub.delay)

        url = urlsplit(self.path)
        token = parse_qs(url.query).get("private_token", [""])[0]
        stub.requests.append({"method": "GET", "path": url.path, "token": token})

        if url.path == "/api/v3/user" and token == SERVICE_TOKEN:
            self._send_json(200, SERVICE_USER_JSON)
        elif url.path == "/api/v3/user" and token == USER_TOKEN:
            self._send_json(200, SESSION_JSON)
        else:
            self._send_json(401, {"message": "401 Unauthorized"})

    def do_POST(self):
        stub = self.server.stub
        if stub.delay:
            time.sleep(stub.delay)

        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length).decode("utf-8")
        stub.requests.append({
            "method": "POST",
            "path": self.path,
            "body": body,
            "content_type": self.headers.get("Content-Type", "")
        })

        if self.path == "/api/v3/session" and "login=username" in body and "password=password" in body:
            self._send_json(201, stub.session_json)
        else:
            self._send_json(401, {"message": "401 Unauthorized"})


class StubGitLabServer(ThreadingHTTPServer):
    daemon_threads = True

    def handle_error(self, request, client_address):
        # clients that time out close the socket before the reply is written
        pass


class StubGitLab:
    """Local GitLab stand-in recording every request it receives."""

    def __init__(self):
        self.requests = []
        self.delay = 0
        self.session_json = SESSION_JSON
        self.server = StubGitLabServer(("127.0.0.1", 0), StubGitLabHandler)
        self.server.stub = self
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)

    @property
    def url(self):
        host, port = self.server.server_address
        return f"http://{host}:{port}"

    def start(self):
        self.thread.start()

    def stop(self):
        self.server.shutdown()
        self.server.server_close()


@pytest.fixture
def gitlab_server():
    stub = StubGitLab()
    stub.start()
    yield stub
    stub.stop()
