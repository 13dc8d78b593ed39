"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The protocol core of the server: everything that knows what HTTP/1.1
looks like on the wire.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   stream ──► HTTPRequest(method, path, headers, body)               │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE BUILDER (response.py)                                      │
    │   ResponseBuilder ──► HTTPResponse ──► finalize() ──► to_bytes()    │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │   HTTPRequest ──► first matching route ──► HTTPResponse             │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   200 ──► "OK", unknown codes ──► "Unknown"                         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    MalformedRequest,
    TruncatedBody,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,
    created,
    not_found,
    method_not_allowed,
    internal_error,
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus, reason_phrase

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "MalformedRequest",
    "TruncatedBody",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
    "reason_phrase",
]
