"""API error type and its exception handler.

Routes raise APIError; the handler renders every failure as
``{"message": ..., "alert": ...}`` with the mapped status code.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from resilinked.jobs.errors import Failure

from .logging_config import get_logger

logger = get_logger("errors")


class APIError(Exception):
    """An error response with a user-facing alert."""

    def __init__(
        self,
        status_code: int,
        message: str,
        alert: str | None = None,
        extra: dict | None = None,
        headers: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.alert = alert or message
        self.extra = extra or {}
        self.headers = headers

    def to_dict(self) -> dict:
        return {"message": self.message, "alert": self.alert, **self.extra}

    @classmethod
    def from_failure(cls, failure: Failure) -> "APIError":
        body = failure.to_dict()
        extra = {k: v for k, v in body.items() if k not in ("message", "alert")}
        return cls(failure.status_code, body["message"], body["alert"], extra)


def raise_for_failure(failure: Failure | None) -> None:
    """Raise the APIError for a core failure, if there is one."""
    if failure is None:
        return
    if failure.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"Request failed with {failure.kind.value}: {failure.message}")
    raise APIError.from_failure(failure)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)
