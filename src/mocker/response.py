"""ASGI response objects."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from mocker.errors import SerializationError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mocker._types import RawHeaders, Send


def status_allows_body(status_code: int) -> bool:
    """Informational, 204 and 304 responses must not carry a body."""
    return not (status_code < 200 or status_code in (204, 304))


class Response:
    """A fully buffered HTTP response, sent at most once."""

    __slots__ = ("_sent", "body", "headers", "status_code")

    media_type: str | None = None

    def __init__(
        self,
        body: bytes = b"",
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.headers: dict[str, str] = dict(headers or {})
        if self.media_type is not None:
            self.headers.setdefault("content-type", self.media_type)
        self._sent = False

    def raw_headers(self) -> RawHeaders:
        raw = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in self.headers.items()]
        if status_allows_body(self.status_code):
            raw.append((b"content-length", str(len(self.body)).encode("latin-1")))
        return raw

    async def send(self, send: Send) -> None:
        """Write the status line, headers and body through *send*."""
        if self._sent:
            msg = "Response has already been sent"
            raise RuntimeError(msg)
        self._sent = True

        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers(),
            }
        )
        body = self.body if status_allows_body(self.status_code) else b""
        await send({"type": "http.response.body", "body": body})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code})"


class JSONResponse(Response):
    """Response whose body is *content* encoded as compact JSON.

    Raises :class:`SerializationError` when *content* is not representable
    in strict JSON (including ``NaN`` and ``Infinity``).
    """

    __slots__ = ()

    media_type = "application/json"

    def __init__(
        self,
        content: Any,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(render_json(content), status_code=status_code, headers=headers)


def render_json(content: Any) -> bytes:
    try:
        text = json.dumps(content, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        msg = f"Cannot encode response body as JSON: {exc}"
        raise SerializationError(msg) from exc
    return text.encode("utf-8")
