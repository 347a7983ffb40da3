import logging
import uuid
from types import MappingProxyType
from typing import Mapping

from starlette.datastructures import Headers
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

PERMANENT_REDIRECT = 308


def _request_id(scope: Scope) -> str:
    value = Headers(scope=scope).get("X-Request-Id")
    return value or str(uuid.uuid4())[:8]


class _CommitOnceSend:
    """
    Wrap an ASGI ``send`` so that a response can only be committed once.

    Once the first response body is complete, later messages are dropped
    instead of reaching the server.
    """

    def __init__(self, send: Send, path: str, request_id: str) -> None:
        self._send = send
        self._path = path
        self._request_id = request_id
        self.completed = False

    async def __call__(self, message: Message) -> None:
        if self.completed:
            logger.warning(
                "Superfluous response write dropped",
                extra={"request_id": self._request_id, "path": self._path},
            )
            return
        await self._send(message)
        if message["type"] == "http.response.body" and not message.get("more_body", False):
            self.completed = True


class MapHandler:
    """
    ASGI app redirecting paths found in ``table`` and delegating to ``fallback``.

    A matched path gets a 308 redirect and the fallback is still invoked
    afterwards; whatever the fallback writes after the redirect is dropped.
    Unmatched paths and non-HTTP scopes go to the fallback untouched.
    """

    def __init__(self, table: Mapping[str, str], fallback: ASGIApp) -> None:
        self.table: Mapping[str, str] = MappingProxyType(dict(table))
        self.fallback = fallback

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.fallback(scope, receive, send)
            return

        path = scope["path"]
        target = self.table.get(path)
        if target is None:
            await self.fallback(scope, receive, send)
            return

        request_id = _request_id(scope)
        logger.info(
            "Redirect issued",
            extra={
                "request_id": request_id,
                "path": path,
                "target": target,
                "status_code": PERMANENT_REDIRECT,
            },
        )
        guarded_send = _CommitOnceSend(send, path, request_id)
        response = RedirectResponse(target, status_code=PERMANENT_REDIRECT)
        await response(scope, receive, guarded_send)
        # pass-through: the fallback runs even after a redirect
        await self.fallback(scope, receive, guarded_send)


def map_handler(table: Mapping[str, str], fallback: ASGIApp) -> MapHandler:
    """Build an ASGI app that redirects paths in ``table`` and otherwise calls ``fallback``."""
    return MapHandler(table, fallback)
