"""
Jobs storage layer.

Jobs are documents with their applicants embedded. Writes to an existing job
are conditional on the version that was read, so two concurrent transitions on
the same job cannot silently overwrite each other.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Protocol, Sequence, Tuple

from resilinked.jobs.models import Job, JobStatus
from resilinked.utils import utc_now

logger = logging.getLogger(__name__)

SORT_FIELDS = ("date_posted", "price", "applicants")

# update_job error codes
NOT_FOUND = "not_found"
CONFLICT = "conflict"


class JobStorage(Protocol):
    """Protocol for job persistence backends."""

    def save_job(self, job: Job) -> str:
        """Insert a new job. Returns the job ID."""
        ...

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a job by ID."""
        ...

    def update_job(self, job: Job, expected_version: int) -> Tuple[Optional[Job], Optional[str]]:
        """Write a job only if its stored version is still ``expected_version``.

        Returns:
            (updated_job, None) on success, with version incremented.
            (None, "not_found") if the job does not exist.
            (None, "conflict") if another write got there first.
        """
        ...

    def delete_job(self, job_id: str) -> bool:
        """Remove a job. Returns True if something was deleted."""
        ...

    def find_open_jobs(self, barangay: str, skills: Sequence[str]) -> List[Job]:
        """Open jobs in a barangay needing any of ``skills``, newest first."""
        ...

    def list_jobs(
        self,
        open_only: bool = False,
        barangay: Optional[str] = None,
        skills: Optional[Sequence[str]] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        posted_by: Optional[str] = None,
        applicant_id: Optional[str] = None,
        has_applicants: bool = False,
        sort_by: str = "date_posted",
        descending: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Job], int]:
        """List jobs with optional filters. Returns (page, total matching)."""
        ...


def sort_key(sort_by: str):
    """Key function for one of SORT_FIELDS."""
    if sort_by == "price":
        return lambda j: j.price
    if sort_by == "applicants":
        return lambda j: (len(j.applicants), j.date_posted or utc_now())
    return lambda j: j.date_posted or utc_now()


class InMemoryJobStorage:
    """In-memory job storage for testing and local development."""

    def __init__(self):
        """Initialize empty storage."""
        self._jobs: dict[str, Job] = {}

    def save_job(self, job: Job) -> str:
        """Save a new job listing."""
        if job.date_posted is None:
            job.date_posted = utc_now()
        self._jobs[job.id] = job.copy()
        return job.id

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a job by ID (a copy, like a fresh read from a database)."""
        job = self._jobs.get(job_id)
        return job.copy() if job else None

    def update_job(self, job: Job, expected_version: int) -> Tuple[Optional[Job], Optional[str]]:
        """Conditionally replace a job."""
        current = self._jobs.get(job.id)
        if current is None:
            return None, NOT_FOUND
        if current.version != expected_version:
            logger.warning(
                f"Version conflict on job {job.id}: "
                f"expected {expected_version}, found {current.version}"
            )
            return None, CONFLICT

        stored = replace(job.copy(), version=expected_version + 1)
        self._jobs[job.id] = stored
        return stored.copy(), None

    def delete_job(self, job_id: str) -> bool:
        """Delete a job."""
        return self._jobs.pop(job_id, None) is not None

    def find_open_jobs(self, barangay: str, skills: Sequence[str]) -> List[Job]:
        """Open jobs in a barangay overlapping the skills."""
        jobs, _ = self.list_jobs(open_only=True, barangay=barangay, skills=skills)
        return jobs

    def list_jobs(
        self,
        open_only: bool = False,
        barangay: Optional[str] = None,
        skills: Optional[Sequence[str]] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        posted_by: Optional[str] = None,
        applicant_id: Optional[str] = None,
        has_applicants: bool = False,
        sort_by: str = "date_posted",
        descending: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Job], int]:
        """List jobs with optional filters."""
        jobs = list(self._jobs.values())

        # Apply filters
        if open_only:
            jobs = [j for j in jobs if j.is_open and j.status == JobStatus.OPEN.value]
        if barangay is not None:
            jobs = [j for j in jobs if j.barangay == barangay]
        if skills is not None:
            jobs = [j for j in jobs if any(s in j.skills_required for s in skills)]
        if min_price is not None:
            jobs = [j for j in jobs if j.price >= min_price]
        if max_price is not None:
            jobs = [j for j in jobs if j.price <= max_price]
        if start_date is not None:
            jobs = [j for j in jobs if j.date_posted and j.date_posted >= start_date]
        if end_date is not None:
            jobs = [j for j in jobs if j.date_posted and j.date_posted <= end_date]
        if posted_by is not None:
            jobs = [j for j in jobs if j.posted_by == posted_by]
        if applicant_id is not None:
            jobs = [j for j in jobs if j.has_applicant(applicant_id)]
        if has_applicants:
            jobs = [j for j in jobs if j.applicants]

        jobs.sort(key=sort_key(sort_by), reverse=descending)

        total = len(jobs)
        end = None if limit is None else offset + limit
        return [j.copy() for j in jobs[offset:end]], total
