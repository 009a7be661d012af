"""Application-level exceptions and FastAPI exception handlers."""


import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class ForbiddenError(AppException):
    def __init__(self, message: str = "Access denied", code: str = "FORBIDDEN"):
        super().__init__(message, status_code=403, code=code)

class ConflictError(AppException):
    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, status_code=409, code=code)

class ValidationError(AppException):
    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, status_code=422, code=code)

# ---------------------------------------------------------------------------
# Ballot validation (rejected before any write)
# ---------------------------------------------------------------------------

class IncompleteBallotError(ValidationError):
    def __init__(self, position: str):
        super().__init__(
            f"No selection made for position '{position}'",
            code="INCOMPLETE_BALLOT",
        )
        self.position = position

class InvalidSelectionError(ValidationError):
    def __init__(self, message: str):
        super().__init__(message, code="INVALID_SELECTION")

# ---------------------------------------------------------------------------
# State conflicts (terminal for the request, never retried)
# ---------------------------------------------------------------------------

class AlreadyVotedError(ConflictError):
    def __init__(self, message: str = "You have already voted"):
        super().__init__(message, code="ALREADY_VOTED")

class NotVerifiedError(ForbiddenError):
    def __init__(self, message: str = "Voter has not been verified"):
        super().__init__(message, code="NOT_VERIFIED")

class EligibilityError(ForbiddenError):
    """The election timeline does not permit the requested action right now."""

    def __init__(self, action: str, reason: str):
        self.action = action
        self.reason = reason
        super().__init__(f"'{action}' is not permitted: {reason}", code=reason)

class VotingClosedError(EligibilityError):
    def __init__(self, reason: str):
        super().__init__("vote", reason)
        self.code = "NOT_ELIGIBLE_WINDOW_CLOSED"

# ---------------------------------------------------------------------------
# Persistence after the claim
# ---------------------------------------------------------------------------

class BallotPersistenceError(AppException):
    """The voter is claimed but the ballot could not be stored.

    The claim stands; the voter is queued for operator reconciliation and
    may complete the ballot through the recovery path.
    """

    def __init__(self, voter_id: str, reconciliation_id: str | None = None):
        self.voter_id = voter_id
        self.reconciliation_id = reconciliation_id
        super().__init__(
            "Your vote could not be recorded. It has been flagged for review.",
            status_code=500,
            code="PERSISTENCE_ERROR",
        )

class SubmissionTimeoutError(AppException):
    def __init__(self, message: str = "Vote submission timed out before it was recorded"):
        super().__init__(message, status_code=504, code="SUBMISSION_TIMEOUT")

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{where}: {first.get('msg', 'invalid request')}" if where else "Invalid request"
        return JSONResponse(status_code=422, content=_error_body("VALIDATION_ERROR", message))

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
