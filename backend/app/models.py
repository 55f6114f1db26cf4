"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from resilinked.jobs.models import Job
from resilinked.notifications.models import Notification

JobStatus = Literal["open", "assigned", "closed"]
ApplicantStatus = Literal["pending", "accepted", "rejected"]
SortField = Literal["date_posted", "price", "applicants"]

# =============================================================================
# Job Models
# =============================================================================


class JobCreate(BaseModel):
    """Request to post a job.

    Required fields are checked by the job service so the caller gets the
    list of missing names back.
    """

    title: str | None = Field(None, max_length=200)
    description: str | None = None
    price: float | None = Field(None, ge=0)
    barangay: str | None = None
    location: str | None = None
    skills_required: list[str] = Field(default_factory=list)

    @field_validator("skills_required", mode="before")
    @classmethod
    def split_skills(cls, v):
        # Forms send "Plumbing, Carpentry"
        if isinstance(v, str):
            return v.split(",")
        return v


class ApplicantResponse(BaseModel):
    """An applicant entry on a job."""

    user_id: str
    applied_at: datetime | None = None
    status: ApplicantStatus


class JobResponse(BaseModel):
    """Job details response."""

    id: str
    title: str
    description: str
    price: float
    barangay: str
    location: str | None = None
    skills_required: list[str]
    posted_by: str
    date_posted: datetime | None = None
    is_open: bool
    status: JobStatus
    applicants: list[ApplicantResponse]
    assigned_to: str | None = None
    version: int


class JobCreatedResponse(BaseModel):
    """Response to a successful job post."""

    message: str
    job: JobResponse
    matches_found: int
    alert: str


class Pagination(BaseModel):
    page: int
    limit: int
    total_pages: int


class JobSearchResponse(BaseModel):
    """A page of search results."""

    jobs: list[JobResponse]
    total: int
    pagination: Pagination


class ApplicantAction(BaseModel):
    """Target worker for assign/reject."""

    user_id: str = Field(..., min_length=1)


class ApplicantStatusUpdate(BaseModel):
    """Request to set one applicant's status."""

    status: ApplicantStatus


# =============================================================================
# Notification Models
# =============================================================================


class NotificationResponse(BaseModel):
    id: str
    recipient: str
    type: str
    title: str | None = None
    message: str
    related_job: str | None = None
    is_read: bool
    created_at: datetime | None = None


class NotificationMeta(BaseModel):
    total: int
    unread_count: int
    pagination: Pagination


class NotificationListResponse(BaseModel):
    """The caller's inbox, newest first."""

    data: list[NotificationResponse]
    meta: NotificationMeta
    alert: str


# =============================================================================
# Helpers
# =============================================================================


def to_job_response(job: Job) -> JobResponse:
    """Convert a core Job to its response model."""
    return JobResponse(
        id=job.id,
        title=job.title,
        description=job.description,
        price=job.price,
        barangay=job.barangay,
        location=job.location,
        skills_required=list(job.skills_required),
        posted_by=job.posted_by,
        date_posted=job.date_posted,
        is_open=job.is_open,
        status=job.status,
        applicants=[
            ApplicantResponse(user_id=a.user_id, applied_at=a.applied_at, status=a.status)
            for a in job.applicants
        ],
        assigned_to=job.assigned_to,
        version=job.version,
    )


def to_notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(**notification.to_dict())


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0
