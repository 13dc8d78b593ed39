"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request off a buffered binary stream and turns it into
an immutable HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  POST /files/report.txt HTTP/1.1\r\n        ← request line          │
    │  ─┬── ──────────┬────── ────┬───                                     │
    │  Method    Request-target  Version (ignored)                         │
    │                                                                      │
    │  Host: localhost:4221\r\n                   ← header lines           │
    │  Content-Length: 11\r\n                                              │
    │  \r\n                                       ← end of headers         │
    │                                                                      │
    │  hello world                                ← exactly 11 body bytes  │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY READ FROM A STREAM?
=============================================================================

TCP is a byte stream, not a message protocol. Rather than buffering the
whole request and searching for \r\n\r\n, the parser pulls one line at a
time from a buffered reader (socket.makefile("rb")) and then exactly
Content-Length bytes for the body. It never reads past the declared body,
so nothing is consumed speculatively.

=============================================================================
PARSING RULES
=============================================================================

1. LINE ENDINGS: lines end with \n; a preceding \r is tolerated. The
   max_line_size limit counts line content only, not the terminator.

   Lines are decoded as UTF-8 with "surrogateescape": bytes that are not
   valid UTF-8 survive as lone surrogates and encode back to the exact
   original bytes (see WIRE_ENCODING / WIRE_ERRORS).

       b"/echo/caf\xe9"  ──►  "/echo/caf\udce9"  ──►  b"/echo/caf\xe9"

2. REQUEST LINE: split on single spaces. Method and target are required,
   the version is optional and anything after it is ignored.

3. HEADERS: split on the FIRST colon only, value trimmed. Names are stored
   lowercased so lookups are case-insensitive ("User-Agent" finds a header
   sent as "user-agent"). A repeated header replaces the earlier value.
   A header line with no colon is a malformed request.

4. PREMATURE EOF: if the client closes before the blank line that ends the
   headers, the request is still accepted, with an empty body.

5. BODY: only read when Content-Length is present. Anything other than
   plain ASCII digits counts as 0. The body is read in chunks of at most
   READ_CHUNK_SIZE bytes, so a huge declared length costs nothing until
   the bytes actually arrive. Fewer bytes than declared is a TruncatedBody.

Chunked transfer encoding is not supported.

=============================================================================
"""

import io
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional

logger = logging.getLogger(__name__)


# Text codec for request lines and response headers/text bodies.
WIRE_ENCODING = "utf-8"
WIRE_ERRORS = "surrogateescape"

READ_CHUNK_SIZE = 64 * 1024


class HTTPParseError(Exception):
    """
    Raised when a request cannot be read off the wire.

    The connection handler drops the connection without writing a response
    when it sees one of these.
    """


class MalformedRequest(HTTPParseError):
    """The request line or a header line could not be parsed."""


class TruncatedBody(HTTPParseError):
    """The stream ended before Content-Length body bytes arrived."""

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"Incomplete body: expected {expected} bytes, got {received}"
        )
        self.expected = expected
        self.received = received


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Request method exactly as sent ("GET", "POST", ...).
                        Not validated against a fixed set.

        path:           Raw request-target including the leading "/".
                        No query-string splitting or percent-decoding.

        version:        Third request-line token ("HTTP/1.1"), or "" when
                        the client omitted it.

        headers:        Header name → trimmed value, names LOWERCASED.

        body:           Raw body bytes; empty unless Content-Length was sent.

        client_address: (ip, port) of the peer, for logging.

    Frozen: the router and handlers only ever read a request.
    =========================================================================
    """

    method: str
    path: str
    version: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    client_address: tuple[str, int] = ("", 0)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive lookup).

        Example:
            request.get_header("User-Agent")   # also matches "user-agent"
        """
        return self.headers.get(name.lower(), default)

    @property
    def user_agent(self) -> str:
        """User-Agent header value, empty string when absent."""
        return self.get_header("User-Agent")

    @property
    def content_length(self) -> int:
        """
        Declared body length.

        Returns 0 when the header is missing or is not a run of ASCII
        digits ("-4", "+5", "1_0" and "ten" all count as 0).
        """
        value = self.get_header("Content-Length", "0")
        if not (value.isascii() and value.isdigit()):
            return 0
        return int(value)


class RequestParser:
    """
    Parses one HTTP request from a buffered binary stream.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        stream.readline()  ──►  request line   ──►  method, path, version
        stream.readline()  ──►  header line    ──►  headers[name] = value
             ...                 (until blank line or EOF)
        stream.read(n)     ──►  body            (only if Content-Length)

    ==========================================================================
    """

    def __init__(self, max_line_size: int = 64 * 1024):
        """
        Args:
            max_line_size: Longest request or header line accepted, in
                           bytes. Longer lines are malformed requests.
        """
        self.max_line_size = max_line_size

    def parse(
        self,
        stream: BinaryIO,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Read and parse exactly one request from the stream.

        Args:
            stream: Buffered binary reader (socket.makefile("rb") or BytesIO).
            client_address: Peer (ip, port), stored on the request.

        Returns:
            Parsed HTTPRequest.

        Raises:
            MalformedRequest: Bad request line, header line without a colon,
                              or a line longer than max_line_size.
            TruncatedBody: Stream closed before the declared body arrived.
        """
        # ─────────────────────────────────────────────────────────────────
        # REQUEST LINE
        # ─────────────────────────────────────────────────────────────────
        line = self._read_line(stream)
        if line is None:
            raise MalformedRequest("Connection closed before request line")

        method, path, version = self._parse_request_line(line)

        # ─────────────────────────────────────────────────────────────────
        # HEADERS
        # ─────────────────────────────────────────────────────────────────
        headers: Dict[str, str] = {}
        while True:
            line = self._read_line(stream)
            if line is None:
                # Client hung up without the blank line. Accept what we have.
                logger.debug("EOF while reading headers for %s %s", method, path)
                return HTTPRequest(
                    method=method,
                    path=path,
                    version=version,
                    headers=headers,
                    client_address=client_address,
                )
            if line == "":
                break
            name, value = self._parse_header(line)
            headers[name] = value

        request = HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            client_address=client_address,
        )

        # ─────────────────────────────────────────────────────────────────
        # BODY
        # ─────────────────────────────────────────────────────────────────
        if "content-length" not in headers:
            return request

        length = request.content_length
        body = self._read_exactly(stream, length)
        if len(body) < length:
            raise TruncatedBody(length, len(body))

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _read_line(self, stream: BinaryIO) -> Optional[str]:
        """
        Read one line and strip its terminator.

        Returns:
            The decoded line without "\\r\\n" / "\\n", or None when the stream
            ended before a newline was seen (a partial trailing line is
            discarded).

        Raises:
            MalformedRequest: More than max_line_size bytes before the
                              terminator.
        """
        # Room for the content plus "\r\n"
        limit = self.max_line_size + 2
        raw = stream.readline(limit)
        if not raw.endswith(b"\n"):
            if len(raw) >= limit:
                raise MalformedRequest(f"Line exceeds {self.max_line_size} bytes")
            return None

        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        if len(raw) > self.max_line_size:
            raise MalformedRequest(f"Line exceeds {self.max_line_size} bytes")
        return raw.decode(WIRE_ENCODING, errors=WIRE_ERRORS)

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD SP TARGET [SP VERSION ...]" into its parts.

        Raises:
            MalformedRequest: Fewer than two tokens, or an empty method or
                              target (e.g. doubled spaces).
        """
        parts = line.split(" ")
        if len(parts) < 2:
            raise MalformedRequest(f"Invalid request line: {line!r}")

        method, path = parts[0], parts[1]
        if not method or not path:
            raise MalformedRequest(f"Invalid request line: {line!r}")

        version = parts[2] if len(parts) > 2 else ""
        return method, path, version

    def _parse_header(self, line: str) -> tuple[str, str]:
        """
        Split "Name: value" on the first colon.

        Returns:
            (lowercased name, trimmed value)
        """
        name, sep, value = line.partition(":")
        if not sep:
            raise MalformedRequest(f"Header line without colon: {line!r}")
        return name.strip().lower(), value.strip()

    @staticmethod
    def _read_exactly(stream: BinaryIO, length: int) -> bytes:
        """
        Read up to `length` bytes, blocking until they arrive or EOF.

        A single read() on a raw socket file may return short, so loop
        until we have everything or the peer closed. Each read asks for at
        most READ_CHUNK_SIZE bytes; memory grows with the bytes received,
        never with the length the client declared.
        """
        chunks = []
        remaining = length
        while remaining > 0:
            chunk = stream.read(min(remaining, READ_CHUNK_SIZE))
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_line_size: int = 64 * 1024,
) -> HTTPRequest:
    """
    Parse a request held entirely in memory.

    Wraps the bytes in a BytesIO and runs the stream parser. Handy in tests
    and tooling; the server itself parses straight from the socket.
    """
    parser = RequestParser(max_line_size=max_line_size)
    return parser.parse(io.BytesIO(data), client_address)
