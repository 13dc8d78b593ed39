"""
=============================================================================
HTTP STATUS CODES (RFC 7231)
=============================================================================

The status registry: a fixed table mapping numeric status codes to the
reason phrase that follows them on the status line.

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── Reason phrase (looked up here)
              └───────── Status code (sent verbatim)

The table is built once at import time and exposed read-only through a
MappingProxyType, so worker threads can share it without any locking.

Codes that are not in the table are still legal on the wire; they are
serialized with the reason phrase "Unknown":

    >>> reason_phrase(200)
    'OK'
    >>> reason_phrase(299)
    'Unknown'

=============================================================================
"""

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping


UNKNOWN_PHRASE = "Unknown"


class HTTPStatus(IntEnum):
    """
    Status codes this server knows a reason phrase for.

    IntEnum members compare equal to plain ints, so handlers may pass
    either HTTPStatus.CREATED or 201 to the response builder.
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    NO_CONTENT = 204

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    SERVICE_UNAVAILABLE = 503


# =============================================================================
# REASON PHRASES
# =============================================================================
#
# Keys are plain ints so lookups work for any integer status, whether or not
# it has an HTTPStatus member.
#
STATUS_PHRASES: Mapping[int, str] = MappingProxyType({
    200: "OK",
    201: "Created",
    204: "No Content",
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    408: "Request Timeout",
    413: "Payload Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    503: "Service Unavailable",
})


def reason_phrase(status: int) -> str:
    """
    Look up the reason phrase for a status code.

    Args:
        status: Any integer status code.

    Returns:
        The registered phrase, or "Unknown" for unregistered codes.
    """
    return STATUS_PHRASES.get(int(status), UNKNOWN_PHRASE)
