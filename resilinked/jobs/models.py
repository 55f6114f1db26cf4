"""
Job marketplace data models.

Jobs are stored as single documents. Applicant entries are embedded in the job
in insertion order, each carrying its own status independent of the job's.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from resilinked.utils import parse_datetime


class JobStatus(str, Enum):
    """Job lifecycle status."""

    OPEN = "open"  # Accepting applications
    ASSIGNED = "assigned"  # One applicant accepted, the rest rejected
    CLOSED = "closed"  # Closed by the owner without an assignment


class ApplicantStatus(str, Enum):
    """Status of a single applicant entry."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Valid job state transitions
VALID_JOB_TRANSITIONS: Dict[JobStatus, set] = {
    JobStatus.OPEN: {JobStatus.ASSIGNED, JobStatus.CLOSED},
    JobStatus.ASSIGNED: set(),  # Terminal
    JobStatus.CLOSED: set(),  # Terminal
}

MAX_TITLE_LENGTH = 200


@dataclass
class Applicant:
    """A worker's application, embedded in a Job."""

    user_id: str
    applied_at: Optional[datetime] = None
    status: str = ApplicantStatus.PENDING.value

    def __post_init__(self):
        if not self.user_id:
            raise ValueError("Applicant user_id is required")
        valid = {s.value for s in ApplicantStatus}
        if self.status not in valid:
            raise ValueError(f"Invalid applicant status: {self.status}. Must be one of {valid}")

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicantStatus.PENDING.value

    @property
    def is_accepted(self) -> bool:
        return self.status == ApplicantStatus.ACCEPTED.value

    @property
    def is_rejected(self) -> bool:
        return self.status == ApplicantStatus.REJECTED.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "applied_at": self.applied_at.isoformat() if self.applied_at else None,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Applicant":
        return cls(
            user_id=data["user_id"],
            applied_at=parse_datetime(data.get("applied_at")),
            status=data.get("status", ApplicantStatus.PENDING.value),
        )


@dataclass
class Job:
    """A job posting in a barangay.

    Attributes:
        id: Unique identifier (system generated)
        title: Short title of the job
        posted_by: User ID of the owning employer
        barangay: Locality the job is visible in
        price: Offered pay
        description: Free-text description
        skills_required: Skill labels, compared by exact equality
        location: Optional street-level location
        date_posted: Creation timestamp
        is_open: Whether the job accepts applications
        status: Lifecycle status (JobStatus value)
        applicants: Embedded applicant entries, insertion ordered
        assigned_to: Accepted worker, set only when status is assigned
        version: Optimistic concurrency counter, bumped on every write
    """

    id: str
    title: str
    posted_by: str
    barangay: str
    price: float
    description: str = ""
    skills_required: List[str] = field(default_factory=list)
    location: Optional[str] = None
    date_posted: Optional[datetime] = None
    is_open: bool = True
    status: str = JobStatus.OPEN.value
    applicants: List[Applicant] = field(default_factory=list)
    assigned_to: Optional[str] = None
    version: int = 1

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValueError("Title is required")
        if len(self.title) > MAX_TITLE_LENGTH:
            raise ValueError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
        if not self.posted_by:
            raise ValueError("posted_by is required")
        if not self.barangay:
            raise ValueError("Barangay is required")
        if self.price is None or self.price < 0:
            raise ValueError("Price must not be negative")
        valid = {s.value for s in JobStatus}
        if self.status not in valid:
            raise ValueError(f"Invalid status: {self.status}. Must be one of {valid}")

    @property
    def is_assigned(self) -> bool:
        return self.status == JobStatus.ASSIGNED.value

    @property
    def accepts_applications(self) -> bool:
        return self.is_open and self.status == JobStatus.OPEN.value

    def can_transition_to(self, new_status: JobStatus) -> bool:
        """Check if transition to new_status is valid."""
        return new_status in VALID_JOB_TRANSITIONS.get(JobStatus(self.status), set())

    def find_applicant(self, user_id: str) -> Optional[Applicant]:
        for applicant in self.applicants:
            if applicant.user_id == user_id:
                return applicant
        return None

    def has_applicant(self, user_id: str) -> bool:
        return self.find_applicant(user_id) is not None

    def accepted_applicants(self) -> List[Applicant]:
        return [a for a in self.applicants if a.is_accepted]

    def copy(self) -> "Job":
        """Deep enough copy for transitions: applicant entries are fresh objects."""
        return replace(
            self,
            skills_required=list(self.skills_required),
            applicants=[replace(a) for a in self.applicants],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "skills_required": list(self.skills_required),
            "barangay": self.barangay,
            "location": self.location,
            "posted_by": self.posted_by,
            "price": self.price,
            "date_posted": self.date_posted.isoformat() if self.date_posted else None,
            "is_open": self.is_open,
            "status": self.status,
            "applicants": [a.to_dict() for a in self.applicants],
            "assigned_to": self.assigned_to,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        """Create from dictionary (database row or JSON payload)."""
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description") or "",
            skills_required=list(data.get("skills_required") or []),
            barangay=data["barangay"],
            location=data.get("location"),
            posted_by=data["posted_by"],
            price=float(data["price"]),
            date_posted=parse_datetime(data.get("date_posted")),
            is_open=data.get("is_open", True),
            status=data.get("status", JobStatus.OPEN.value),
            applicants=[
                a if isinstance(a, Applicant) else Applicant.from_dict(a)
                for a in data.get("applicants") or []
            ],
            assigned_to=data.get("assigned_to"),
            version=data.get("version", 1),
        )
