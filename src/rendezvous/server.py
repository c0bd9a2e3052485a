"""HTTP dispatcher for the rendezvous relay.

Single aiohttp server handling all routes:
- POST /host  - Publish a host description, returns its id
- GET  /host  - Fetch an unpaired host by id
- POST /guest - Attach a guest description to a host
- GET  /guest - Poll for the guest description (one-shot)
- GET  /debug - Dump live sessions
- GET  /health - Health check

Endpoints match on the last path segment, so /api/host works the same
as /host. Every failure is reported with the same generic body.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from aiohttp import web

from rendezvous.errors import InvalidArgumentError, RelayError
from rendezvous.store import PairingStore

logger = logging.getLogger(__name__)

GENERIC_ERROR = {"error": "that's an error"}
ERROR_STATUS = 404

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _error_response() -> web.Response:
    return web.json_response(GENERIC_ERROR, status=ERROR_STATUS)


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Convert every failure into the generic error response.

    The specific cause is only logged.
    """
    try:
        return await handler(request)
    except RelayError as e:
        logger.warning(f"{request.method} {request.path}: {e}")
    except web.HTTPException as e:
        logger.warning(
            f"unhandled endpoint: {request.method} {request.path} ({e.status})"
        )
    except Exception:
        logger.exception(f"Unexpected error handling {request.method} {request.path}")
    return _error_response()


def _string_field(payload: dict[str, Any], name: str) -> str:
    """Extract a string field, treating missing and null as empty."""
    value = payload.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidArgumentError(f"field {name} must be a string")
    return value


async def _read_json_object(request: web.Request) -> dict[str, Any]:
    """Read the whole body and decode it as a JSON object."""
    try:
        payload = await request.json()
    except ValueError as e:
        raise InvalidArgumentError(f"malformed JSON body: {e}") from e
    if not isinstance(payload, dict):
        raise InvalidArgumentError("JSON body must be an object")
    return payload


class RelayServer:
    """HTTP front end for a PairingStore.

    Holds no pairing state of its own. Request bodies are fully read
    before the store is touched, and store calls never suspend, so each
    store operation runs as one uninterrupted critical section.
    """

    def __init__(self, store: PairingStore, debug_endpoint: bool = True):
        """Initialize relay server.

        Args:
            store: Pairing store to dispatch to.
            debug_endpoint: Whether to expose /debug.
        """
        self.store = store
        self.debug_endpoint = debug_endpoint
        self.app = web.Application(middlewares=[error_middleware])
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Set up HTTP routes.

        Each pairing route is registered bare and under any path prefix,
        with and without a trailing slash, so only the last non-empty
        segment decides the endpoint.
        """
        self.app.router.add_get("/health", self._handle_health)

        for base in ("", "/{prefix:.+}"):
            for slash in ("", "/"):
                host = f"{base}/host{slash}"
                guest = f"{base}/guest{slash}"
                self.app.router.add_post(host, self._handle_publish_host)
                self.app.router.add_get(host, self._handle_fetch_host)
                self.app.router.add_post(guest, self._handle_publish_guest)
                self.app.router.add_get(guest, self._handle_fetch_guest)
                if self.debug_endpoint:
                    self.app.router.add_get(
                        f"{base}/debug{slash}", self._handle_debug
                    )

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.Response(text="OK")

    async def _handle_publish_host(self, request: web.Request) -> web.Response:
        """Handle host publish.

        Body: {"description": str, "id": str (optional)}
        Response: {"id": str}
        """
        self.store.evict()
        payload = await _read_json_object(request)
        description = _string_field(payload, "description")
        session_id = _string_field(payload, "id") or None

        session_id = self.store.publish_host(description, session_id)
        return web.json_response({"id": session_id})

    async def _handle_fetch_host(self, request: web.Request) -> web.Response:
        """Handle host lookup.

        Query: ?id=<host id>
        Response: {"id": str, "description": str}
        """
        self.store.evict()
        session = self.store.fetch_host(request.query.get("id", ""))
        return web.json_response(
            {"id": session.session_id, "description": session.description}
        )

    async def _handle_publish_guest(self, request: web.Request) -> web.Response:
        """Handle guest publish.

        Body: {"hostId": str, "guestDescription": str}
        Response: {}
        """
        self.store.evict()
        payload = await _read_json_object(request)
        host_id = _string_field(payload, "hostId")
        guest_description = _string_field(payload, "guestDescription")

        self.store.publish_guest(host_id, guest_description)
        return web.json_response({})

    async def _handle_fetch_guest(self, request: web.Request) -> web.Response:
        """Handle guest poll.

        Query: ?hostId=<host id>
        Response: {"guestDescription": str}
        """
        self.store.evict()
        guest_description = self.store.fetch_guest(request.query.get("hostId", ""))
        return web.json_response({"guestDescription": guest_description})

    async def _handle_debug(self, request: web.Request) -> web.Response:
        """Log and return every live session."""
        self.store.evict()
        sessions = []
        for session in self.store.dump():
            logger.info(
                f"host id: {session.session_id}, paired: {session.is_paired}, "
                f"created at: {session.created_at}"
            )
            logger.debug(f"host sdp description: {session.description}")
            if session.is_paired:
                logger.debug(
                    f"guest sdp description: {session.guest_description}"
                )
            sessions.append(session.to_dict())
        return web.json_response({"sessions": sessions})

    async def start(self, host: str, port: int) -> web.AppRunner:
        """Start the relay server.

        Args:
            host: Host to bind to.
            port: Port to bind to.

        Returns:
            App runner (for cleanup).
        """
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, host, port)
        await site.start()
        logger.info(f"Server running at http://{host}:{port}/")
        return runner

    async def serve(self, host: str, port: int) -> None:
        """Run the relay server until cancelled."""
        runner = await self.start(host, port)
        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()
            logger.info("Server stopped")
