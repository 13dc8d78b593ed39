"""
Route handlers that need nothing but the request.

    /echo/<text>   → 200, body is <text> verbatim
    /user-agent    → 200, body is the User-Agent header (empty if absent)
    /              → 200, empty body (liveness check)
"""

from typing import Dict

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


def echo(request: HTTPRequest, params: Dict[str, str]) -> HTTPResponse:
    """
    Reflect the rest of the path back to the client.

    "/echo/abc/def" answers "abc/def". The text is neither decoded nor
    validated.
    """
    return ok(params.get("text", ""))


def user_agent(request: HTTPRequest, params: Dict[str, str]) -> HTTPResponse:
    # Missing header is not an error, just an empty body
    return ok(request.user_agent)


def root(request: HTTPRequest, params: Dict[str, str]) -> HTTPResponse:
    """Liveness probe: if we can answer, we are alive."""
    return ok()
