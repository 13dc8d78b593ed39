"""
=============================================================================
FILE HANDLER
=============================================================================

Serves GET and POST for /files/<name> out of a ByteStore.

    GET  /files/report.txt   ──►  store.read("report.txt")
                                   ok       → 200, application/octet-stream
                                   missing  → 404, empty body
                                   failure  → 500, empty body

    POST /files/report.txt   ──►  store.write("report.txt", request.body)
                                   ok       → 201, empty body
                                   failure  → 500, empty body

Any other method on /files/<name> is answered with 405 by the router,
because only GET and POST routes exist for the pattern.

The name is everything after "/files/", passed to the store untouched.
Keeping files inside the storage directory is the store's job.

=============================================================================
"""

import logging
from typing import Dict

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    ResponseBuilder,
    created,
    internal_error,
    not_found,
)
from ..storage import ByteStore, StorageIOError, StorageNotFound

logger = logging.getLogger(__name__)


class FileHandler:
    """
    Route handlers for /files/*name bound to one store.

    Usage:
        files = FileHandler(FileStore("/tmp/data"))
        router.get("/files/*name")(files.get)
        router.post("/files/*name")(files.post)
    """

    def __init__(self, store: ByteStore):
        self.store = store

    def get(self, request: HTTPRequest, params: Dict[str, str]) -> HTTPResponse:
        """Return the stored bytes for the file name."""
        name = params.get("name", "")

        try:
            content = self.store.read(name)
        except StorageNotFound:
            return not_found()
        except StorageIOError as e:
            logger.warning(f"Read failed for {name!r}: {e}")
            return internal_error()

        return ResponseBuilder().octet_stream(content).build()

    def post(self, request: HTTPRequest, params: Dict[str, str]) -> HTTPResponse:
        """Store the request body under the file name, overwriting."""
        name = params.get("name", "")

        try:
            self.store.write(name, request.body)
        except StorageIOError as e:
            logger.warning(f"Write failed for {name!r}: {e}")
            return internal_error()

        return created()
