import asyncio
import logging

import pytest
from starlette.responses import PlainTextResponse

from url_shortener.redirect.handler import map_handler


class RecordingFallback:
    def __init__(self, body: str = "fallback", status_code: int = 404):
        self.body = body
        self.status_code = status_code
        self.calls = []

    async def __call__(self, scope, receive, send):
        self.calls.append(scope.get("path", scope["type"]))
        if scope["type"] != "http":
            return
        response = PlainTextResponse(self.body, status_code=self.status_code)
        await response(scope, receive, send)


def _scope(path: str) -> dict:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [(b"x-request-id", b"req-1")],
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 12345),
    }


def _call(app, scope: dict) -> list:
    messages = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        messages.append(message)

    asyncio.run(app(scope, receive, send))
    return messages


def _start(messages: list) -> dict:
    starts = [m for m in messages if m["type"] == "http.response.start"]
    assert len(starts) == 1
    return starts[0]


def _header(start: dict, name: bytes) -> bytes | None:
    for key, value in start["headers"]:
        if key.lower() == name:
            return value
    return None


def test_matched_path_redirects_permanently():
    fallback = RecordingFallback()
    app = map_handler({"/dogs": "https://example.com/dogs"}, fallback)

    messages = _call(app, _scope("/dogs"))

    start = _start(messages)
    assert start["status"] == 308
    assert _header(start, b"location") == b"https://example.com/dogs"


def test_unmatched_path_goes_to_fallback():
    fallback = RecordingFallback(body="not here")
    app = map_handler({"/dogs": "https://example.com/dogs"}, fallback)

    messages = _call(app, _scope("/cats"))

    start = _start(messages)
    assert start["status"] == 404
    assert _header(start, b"location") is None
    assert fallback.calls == ["/cats"]
    bodies = b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")
    assert bodies == b"not here"


def test_fallback_still_runs_after_redirect_and_its_writes_are_dropped(caplog):
    fallback = RecordingFallback(body="should not be sent", status_code=200)
    app = map_handler({"/dogs": "https://example.com/dogs"}, fallback)

    with caplog.at_level(logging.WARNING, logger="url_shortener.redirect.handler"):
        messages = _call(app, _scope("/dogs"))

    assert fallback.calls == ["/dogs"]
    assert _start(messages)["status"] == 308
    assert all(b"should not be sent" not in m.get("body", b"") for m in messages)
    assert "Superfluous response write dropped" in caplog.text


def test_non_http_scope_is_passed_to_fallback():
    fallback = RecordingFallback()
    app = map_handler({"/dogs": "https://example.com/dogs"}, fallback)

    _call(app, {"type": "lifespan", "asgi": {"version": "3.0"}})

    assert fallback.calls == ["lifespan"]


def test_table_is_copied_and_read_only():
    source = {"/a": "https://example.com/a"}
    app = map_handler(source, RecordingFallback())
    source["/b"] = "https://example.com/b"

    assert "/b" not in app.table
    with pytest.raises(TypeError):
        app.table["/c"] = "https://example.com/c"  # type: ignore[index]


def test_empty_path_and_empty_target_are_served():
    app = map_handler({"/empty": ""}, RecordingFallback())

    start = _start(_call(app, _scope("/empty")))
    assert start["status"] == 308
    assert _header(start, b"location") == b""
