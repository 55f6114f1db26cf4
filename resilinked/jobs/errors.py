"""
Tagged failures returned by the jobs core.

Business outcomes (a guard that does not hold, a missing job, a caller who is
not the owner) are values, not exceptions. Callers translate them to transport
responses through STATUS_CODES.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class FailureKind(str, Enum):
    """Failure taxonomy."""

    VALIDATION = "validation"  # Missing/malformed fields
    PRECONDITION_FAILED = "precondition_failed"  # State machine guard violated
    NOT_FOUND = "not_found"  # Job or identity does not exist
    AUTHORIZATION = "authorization"  # Caller lacks the capability
    CONFLICT = "conflict"  # Concurrent modification detected on write
    STORE = "store"  # Persistence failed


STATUS_CODES = {
    FailureKind.VALIDATION: 422,
    FailureKind.PRECONDITION_FAILED: 400,
    FailureKind.NOT_FOUND: 404,
    FailureKind.AUTHORIZATION: 403,
    FailureKind.CONFLICT: 409,
    FailureKind.STORE: 500,
}


@dataclass(frozen=True)
class Failure:
    """A failed operation.

    ``message`` is short and stable, ``alert`` is the sentence shown to the
    user.
    """

    kind: FailureKind
    message: str
    alert: str = ""
    fields: List[str] = field(default_factory=list)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_dict(self) -> dict:
        data = {"message": self.message, "alert": self.alert or self.message}
        if self.fields:
            data["required"] = list(self.fields)
        return data

    @classmethod
    def validation(cls, message: str, alert: str = "", fields=None) -> "Failure":
        return cls(FailureKind.VALIDATION, message, alert, list(fields or []))

    @classmethod
    def precondition(cls, message: str, alert: str = "") -> "Failure":
        return cls(FailureKind.PRECONDITION_FAILED, message, alert)

    @classmethod
    def not_found(cls, message: str, alert: str = "") -> "Failure":
        return cls(FailureKind.NOT_FOUND, message, alert)

    @classmethod
    def forbidden(cls, message: str, alert: str = "") -> "Failure":
        return cls(FailureKind.AUTHORIZATION, message, alert)

    @classmethod
    def conflict(cls, message: str, alert: str = "") -> "Failure":
        return cls(FailureKind.CONFLICT, message, alert)

    @classmethod
    def store(cls) -> "Failure":
        # Internal details stay in the logs
        return cls(
            FailureKind.STORE,
            "Internal server error",
            "Something went wrong. Please try again.",
        )


JOB_NOT_FOUND = Failure.not_found("Job not found", "This job is no longer available")
USER_NOT_FOUND = Failure.not_found("User not found", "Your account could not be found")
