"""Plain HTTP responses served on the same port as the websocket."""

from __future__ import annotations

import json
from typing import Any, Callable, Optional

from websockets.datastructures import Headers
from websockets.http11 import Response

from .config import HEALTHZ_PATH, INDEX_PATH, ROOT_PATH, SESSION_API_PATH

_HTML = "text/html; charset=utf-8"
_JSON = "application/json"
_TEXT = "text/plain; charset=utf-8"

SessionPayloadFn = Callable[[], Optional[dict[str, Any]]]


class HttpRoutes:
    """Maps request paths to responses for the UI page, health check and session snapshot."""

    def __init__(self, index_html: bytes, session_payload: SessionPayloadFn):
        self._index_html = index_html
        self._session_payload = session_payload

    def resolve(self, path: str) -> Response:
        if path in (ROOT_PATH, INDEX_PATH):
            return build_response(200, "OK", self._index_html, _HTML)
        if path == HEALTHZ_PATH:
            return build_response(200, "OK", b"ok\n", _TEXT)
        if path == SESSION_API_PATH:
            return self._session_snapshot()
        return build_response(404, "Not Found", b"not found\n", _TEXT)

    def _session_snapshot(self) -> Response:
        payload = self._session_payload()
        if payload is None:
            body = json.dumps({"error": "no session published yet"}).encode("utf-8")
            return build_response(503, "Service Unavailable", body, _JSON)
        return build_response(200, "OK", json.dumps(payload).encode("utf-8"), _JSON)


def build_response(
    status_code: int,
    reason_phrase: str,
    body: bytes,
    content_type: str,
) -> Response:
    headers = Headers()
    headers["Content-Type"] = content_type
    headers["Content-Length"] = str(len(body))
    headers["Cache-Control"] = "no-store"
    return Response(status_code, reason_phrase, headers, body)
