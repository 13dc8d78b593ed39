"""
=============================================================================
ROUTE HANDLERS
=============================================================================

The server's fixed route table, in priority order (first match wins):

    ┌───┬──────────┬──────────────────┬────────────────────────────────────┐
    │ # │ Method   │ Pattern          │ Handler                            │
    ├───┼──────────┼──────────────────┼────────────────────────────────────┤
    │ 1 │ any      │ /echo/*text      │ basic.echo                         │
    │ 2 │ any      │ /user-agent      │ basic.user_agent                   │
    │ 3 │ GET      │ /files/*name     │ FileHandler.get   (store only)     │
    │ 3 │ POST     │ /files/*name     │ FileHandler.post  (store only)     │
    │ 4 │ any      │ /                │ basic.root                         │
    │ 5 │ -        │ anything else    │ 404 from the router                │
    └───┴──────────┴──────────────────┴────────────────────────────────────┘

The /files/ routes are only registered when a store is configured.
Without one, /files/... requests fall through to the 404 of row 5.

=============================================================================
USAGE
=============================================================================

    from minihttpd.handlers import build_router
    from minihttpd.storage import FileStore

    router = build_router(FileStore("/tmp/data"))
    response = router.handle(request)

=============================================================================
"""

from typing import Optional

from ..http.router import Router
from ..storage import ByteStore
from .basic import echo, root, user_agent
from .files import FileHandler


def build_router(store: Optional[ByteStore] = None) -> Router:
    """
    Create the router with every route registered in priority order.

    Args:
        store: Byte store for /files/*. None disables the file routes.
    """
    router = Router()

    router.add_route("/echo/*text", echo)
    router.add_route("/user-agent", user_agent)

    if store is not None:
        files = FileHandler(store)
        router.add_route("/files/*name", files.get, method="GET", name="files.get")
        router.add_route("/files/*name", files.post, method="POST", name="files.post")

    router.add_route("/", root)

    return router


__all__ = [
    "build_router",
    "FileHandler",
    "echo",
    "user_agent",
    "root",
]
