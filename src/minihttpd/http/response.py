"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to the exact wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                        ← status line            │
    │  Content-Type: application/octet-stream\r\n ← headers (any order)    │
    │  Content-Length: 11\r\n                     ← always len(body)       │
    │  \r\n                                       ← blank line             │
    │  hello world                                ← body, no terminator    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
BUILD, FINALIZE, SERIALIZE
=============================================================================

    handler                 ResponseBuilder          HTTPResponse (frozen)
    ───────                 ───────────────          ─────────────────────
    .status(201)      ──►   mutable state     ──►   build()
    .body(b"...")                                      │
                                                       ▼
                                                   finalize()   pure: adds
                                                       │        Content-Type
                                                       ▼        Content-Length
                                                   to_bytes()

A handler never exposes a half-built response: the builder is private to
the handler until build() freezes it. finalize() returns a NEW response:

    - Content-Type defaults to "text/plain" when the handler set none.
    - Content-Length is ALWAYS recomputed from len(body). An explicit value
      from the handler is replaced, so the framing on the wire is correct.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Mapping, Union

from .request import WIRE_ENCODING, WIRE_ERRORS
from .status_codes import HTTPStatus, reason_phrase


DEFAULT_CONTENT_TYPE = "text/plain"
OCTET_STREAM = "application/octet-stream"


def _without(headers: Mapping[str, str], name: str) -> Dict[str, str]:
    """Copy of headers minus every spelling of `name`."""
    lowered = name.lower()
    return {k: v for k, v in headers.items() if k.lower() != lowered}


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    lowered = name.lower()
    return any(k.lower() == lowered for k in headers)


@dataclass(frozen=True)
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    The status is a plain int so that codes outside the status registry
    can still be sent (they get the "Unknown" reason phrase).
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE

        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {int(self.status)} {reason_phrase(self.status)}"

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def finalize(self) -> "HTTPResponse":
        """
        Return a copy with the default framing headers applied.

        Never mutates self. Safe to call more than once.
        """
        headers = _without(self.headers, "Content-Length")
        if not _has_header(headers, "Content-Type"):
            headers["Content-Type"] = DEFAULT_CONTENT_TYPE
        headers["Content-Length"] = str(len(self.body))
        return replace(self, headers=headers)

    def to_bytes(self) -> bytes:
        """
        Serialize the finalized response.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\\r\\n
            Content-Type: text/plain\\r\\n
            Content-Length: 3\\r\\n
            \\r\\n
            abc

        =====================================================================

        Returns:
            Complete response bytes, ready for a single write.
        """
        final = self.finalize()

        lines = [final.status_line]
        for name, value in final.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode(WIRE_ENCODING, WIRE_ERRORS) + b"\r\n"
        return header_bytes + final.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Each method returns self, so calls chain:

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .octet_stream(data)
            .build())

    The builder is the only mutable piece; build() hands back a frozen
    HTTPResponse with its own copy of the headers.
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: int) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Set a single header, replacing any earlier value."""
        self._headers[name] = value
        return self

    def headers(self, headers: Mapping[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the raw body. Strings are encoded as UTF-8; surrogate-escaped
        request bytes come back out unchanged.

        Leaves Content-Type alone, so finalize() supplies text/plain unless
        the handler sets something else.
        """
        if isinstance(body, str):
            self._body = body.encode(WIRE_ENCODING, WIRE_ERRORS)
        else:
            self._body = bytes(body)
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Plain text body with an explicit text/plain Content-Type."""
        self.body(text)
        return self.content_type(DEFAULT_CONTENT_TYPE)

    def octet_stream(self, content: bytes) -> "ResponseBuilder":
        """Opaque binary body (file downloads)."""
        self.body(content)
        return self.content_type(OCTET_STREAM)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the responses the route handlers produce. All of them have
# empty bodies unless given one.
#
#     return ok(b"hello")
#     return not_found()
#     return method_not_allowed(["GET", "POST"])
#
# =============================================================================

def ok(body: Union[str, bytes] = b"") -> HTTPResponse:
    """200 OK."""
    return ResponseBuilder().status(HTTPStatus.OK).body(body).build()


def created() -> HTTPResponse:
    """201 Created, empty body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).build()


def not_found() -> HTTPResponse:
    """404 Not Found, empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def method_not_allowed(allowed_methods: Iterable[str]) -> HTTPResponse:
    """
    405 Method Not Allowed.

    RFC 7231 requires the Allow header listing the methods the target
    resource does support.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .build())


def internal_error() -> HTTPResponse:
    """500 Internal Server Error, empty body."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).build()
