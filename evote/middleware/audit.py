"""Audit logging middleware — records every state-changing request to the audit log."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written asynchronously AFTER the response is sent so it
    never adds latency to the request. Failures in audit logging are caught and
    logged; they never raise to the caller.

    Request bodies are not recorded: a ballot body would tie a voter to
    their selections.
    """

    def __init__(self, app, session_factory=None):
        super().__init__(app)
        self._session_factory = session_factory
        self._pending: set[asyncio.Task] = set()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            # Fire-and-forget: don't await here so the response is not delayed
            task = asyncio.create_task(
                self._record(request.method, request.url.path, response.status_code, duration_ms)
            )
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return response

    async def _record(self, method: str, path: str, status_code: int, duration_ms: int) -> None:
        """Persist an audit row. Swallows all errors to avoid cascading failures."""
        try:
            from evote.db.base import async_session_factory
            from evote.services import audit
            from evote.services.audit import AuditService

            factory = self._session_factory or async_session_factory
            async with factory() as session:
                await AuditService(session).record(
                    audit.API_REQUEST,
                    f"{method} {path} → {status_code} ({duration_ms}ms)",
                    metadata={"method": method, "path": path, "status": status_code},
                )
                await session.commit()
        except Exception:  # pragma: no cover
            logger.warning("Request audit failed for %s %s", method, path, exc_info=True)
