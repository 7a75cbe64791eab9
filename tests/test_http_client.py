from __future__ import annotations

import asyncio
import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from adapters.http_client import UrllibHttpClient
from core.errors import FetchError, RemoteAPIError
from core.timeline import parse_posts

NOT_FOUND_BODY = json.dumps({"meta": {"status": 404, "msg": "Not Found"}, "response": []}).encode("utf-8")
OK_BODY = json.dumps({"meta": {"status": 200, "msg": "OK"}, "response": {"posts": []}}).encode("utf-8")


class _TumblrStub(BaseHTTPRequestHandler):
    def do_GET(self) -> None:
        status, body = (200, OK_BODY) if self.path.startswith("/ok") else (404, NOT_FOUND_BODY)
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args) -> None:
        pass


@pytest.fixture
def stub_url():
    server = HTTPServer(("127.0.0.1", 0), _TumblrStub)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


def test_success_body_is_returned(stub_url) -> None:
    body = asyncio.run(UrllibHttpClient(timeout=5).get(f"{stub_url}/ok"))

    assert body == OK_BODY
    assert parse_posts(body) == []


def test_error_status_body_reaches_decoder(stub_url) -> None:
    body = asyncio.run(UrllibHttpClient(timeout=5).get(f"{stub_url}/v2/blog/missing.tumblr.com/posts"))

    with pytest.raises(RemoteAPIError) as excinfo:
        parse_posts(body)

    assert excinfo.value.status == 404


def test_unreachable_host_is_fetch_error() -> None:
    with pytest.raises(FetchError):
        asyncio.run(UrllibHttpClient(timeout=5).get("http://127.0.0.1:1/posts"))
