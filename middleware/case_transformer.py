"""
Gateway middleware translating JSON payload keys between the camelCase frontend
and the snake_case backend services.

Inbound JSON request bodies are converted camelCase -> snake_case before they reach
the downstream app; outbound JSON responses are converted snake_case -> camelCase.
A payload that cannot be converted is forwarded untouched and the failure logged,
so a request never fails because of this layer.
"""
from __future__ import annotations

import json
import uuid
from typing import Any

from loguru import logger
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from utils.case import CircularReferenceError, dict_keys_to_camel, dict_keys_to_snake

# Standard response envelope: only "data" and "meta" carry backend records
API_ENVELOPE_KEYS = ("success", "data", "error", "meta")
_ENVELOPE_MARKERS = ("success", "data", "error")
REQUEST_ID_HEADER = "X-Gateway-Request-ID"


def _is_json(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def _encode(data: Any) -> bytes:
    return json.dumps(data, ensure_ascii=False, allow_nan=False, separators=(",", ":")).encode("utf-8")


def _is_envelope(data: Any) -> bool:
    return isinstance(data, dict) and any(k in data for k in _ENVELOPE_MARKERS)


def transform_request_payload(data: Any, request_id: str | None = None) -> Any:
    """Convert an inbound payload to snake_case. Returns data unchanged if it cannot be converted."""
    log = logger.bind(request_id=request_id or "-")
    if not isinstance(data, (dict, list)):
        log.debug("Request payload not processable ({})", type(data).__name__)
        return data
    try:
        transformed = dict_keys_to_snake(data)
    except (CircularReferenceError, RecursionError) as e:
        log.error("Request payload forwarded untransformed: {}", e)
        return data
    log.debug("Request payload converted to snake_case")
    return transformed


def transform_response_payload(data: Any, request_id: str | None = None) -> Any:
    """
    Convert an outbound payload to camelCase.

    For the standard envelope ({success, data, error, meta}) only "data" and "meta"
    are converted; "success", "error" and any other top-level member are kept as-is.
    """
    log = logger.bind(request_id=request_id or "-")
    if not isinstance(data, (dict, list)):
        log.debug("Response payload not processable ({})", type(data).__name__)
        return data
    try:
        if _is_envelope(data):
            transformed = dict(data)
            for key in ("data", "meta"):
                if key in data:
                    transformed[key] = dict_keys_to_camel(data[key])
        else:
            transformed = dict_keys_to_camel(data)
    except (CircularReferenceError, RecursionError) as e:
        log.error("Response payload returned untransformed: {}", e)
        return data
    log.debug("Response payload converted to camelCase")
    return transformed


def _replay(first: Message, receive: Receive) -> Receive:
    """Return a receive callable that yields first, then defers to receive."""
    pending = [first]

    async def replay() -> Message:
        if pending:
            return pending.pop()
        return await receive()

    return replay


class _CamelCaseSender:
    """Wraps send: buffers a JSON response body and rewrites its keys before sending."""

    def __init__(self, send: Send, request_id: str):
        self._send = send
        self._request_id = request_id
        self._start: Message | None = None
        self._chunks: list[bytes] = []

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            headers = Headers(raw=message.get("headers", []))
            if _is_json(headers.get("content-type")) and "content-encoding" not in headers:
                self._start = message
                return
            await self._send(message)
            return

        if message["type"] != "http.response.body" or self._start is None:
            await self._send(message)
            return

        self._chunks.append(message.get("body", b""))
        if message.get("more_body", False):
            return

        start, self._start = self._start, None
        body = b"".join(self._chunks)
        self._chunks = []
        # HEAD responses carry no body but advertise the GET length
        new_body = self._transform(body) if body else body
        if new_body is not body:
            headers = MutableHeaders(raw=list(start.get("headers", [])))
            headers["content-length"] = str(len(new_body))
            start = {**start, "headers": headers.raw}

        await self._send(start)
        await self._send({"type": "http.response.body", "body": new_body, "more_body": False})

    def _transform(self, body: bytes) -> bytes:
        try:
            payload = json.loads(body)
            transformed = transform_response_payload(payload, self._request_id)
            if transformed is payload:
                return body
            return _encode(transformed)
        except ValueError as e:
            logger.bind(request_id=self._request_id).error("Response body sent as-is, not valid JSON: {}", e)
            return body


class CaseTransformerMiddleware:
    """
    ASGI middleware converting JSON keys at the gateway boundary.

    Only HTTP requests whose path is under path_prefix are touched ("" means every
    path). Request bodies are buffered only when the request is JSON, responses only
    when the response is JSON; everything else streams through.
    """

    def __init__(
        self,
        app: ASGIApp,
        path_prefix: str = "/api",
        enabled: bool = True,
        request_id_header: str = REQUEST_ID_HEADER,
    ) -> None:
        self.app = app
        self.path_prefix = path_prefix.rstrip("/")
        self.enabled = enabled
        self.request_id_header = request_id_header

    def applies_to(self, path: str) -> bool:
        if not self.path_prefix:
            return True
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.enabled or not self.applies_to(scope["path"]):
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        request_id = headers.get(self.request_id_header) or f"req_{uuid.uuid4().hex[:12]}"

        if _is_json(headers.get("content-type")):
            scope, receive = await self._transform_request(scope, receive, request_id)

        await self.app(scope, receive, _CamelCaseSender(send, request_id))

    async def _transform_request(self, scope: Scope, receive: Receive, request_id: str) -> tuple[Scope, Receive]:
        log = logger.bind(request_id=request_id)
        chunks: list[bytes] = []
        while True:
            message = await receive()
            if message["type"] != "http.request":
                # Client went away mid-body; let the app see the disconnect
                return scope, _replay(message, receive)
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break

        body = b"".join(chunks)
        new_body = body
        if body:
            try:
                payload = json.loads(body)
                transformed = transform_request_payload(payload, request_id)
                if transformed is not payload:
                    new_body = _encode(transformed)
            except ValueError as e:
                log.error("Request body forwarded as-is, not valid JSON: {}", e)

        if new_body is not body:
            scope = dict(scope)
            MutableHeaders(scope=scope)["content-length"] = str(len(new_body))
            log.debug("Request body rewritten for {} {}", scope["method"], scope["path"])

        return scope, _replay({"type": "http.request", "body": new_body, "more_body": False}, receive)
