"""Supabase-backed implementations of the resilinked storage protocols.

Jobs are rows in ``jobs`` with the applicant list embedded as a JSON array.
``applicant_count`` is denormalized on every write so PostgREST can filter and
sort by it. Every update of an existing job is conditional on ``version``.
"""

import json
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from supabase import Client

from resilinked.jobs.models import Job, JobStatus
from resilinked.jobs.storage import CONFLICT, NOT_FOUND
from resilinked.notifications.models import Notification
from resilinked.users import WORKER_TYPES, UserProfile

from .logging_config import get_logger

logger = get_logger("storage")

# =============================================================================
# Table Names
# =============================================================================

JOBS_TABLE = "jobs"
USERS_TABLE = "users"
NOTIFICATIONS_TABLE = "notifications"

SORT_COLUMNS = {
    "date_posted": "date_posted",
    "price": "price",
    "applicants": "applicant_count",
}


def job_to_row(job: Job) -> dict:
    """Convert a Job to a jobs table row."""
    row = job.to_dict()
    row["applicant_count"] = len(job.applicants)
    return row


class SupabaseJobStorage:
    """Job storage over a Supabase ``jobs`` table."""

    def __init__(self, db: Client):
        self.db = db

    def save_job(self, job: Job) -> str:
        self.db.table(JOBS_TABLE).insert(job_to_row(job)).execute()
        return job.id

    def get_job(self, job_id: str) -> Optional[Job]:
        result = self.db.table(JOBS_TABLE).select("*").eq("id", job_id).execute()
        return Job.from_dict(result.data[0]) if result.data else None

    def update_job(self, job: Job, expected_version: int) -> Tuple[Optional[Job], Optional[str]]:
        """Atomically update a job with optimistic locking.

        Uses UPDATE ... WHERE version = expected_version so that of two
        concurrent writers only the first one lands.
        """
        data = job_to_row(job)
        data.pop("id")
        data["version"] = expected_version + 1

        result = (
            self.db.table(JOBS_TABLE)
            .update(data)
            .eq("id", job.id)
            .eq("version", expected_version)
            .execute()
        )

        if result.data:
            return Job.from_dict(result.data[0]), None

        # Update didn't match - either job doesn't exist or version changed
        current = self.get_job(job.id)
        if current is None:
            return None, NOT_FOUND

        logger.warning(
            f"Race condition detected on job {job.id}: "
            f"expected version {expected_version}, found {current.version}"
        )
        return None, CONFLICT

    def delete_job(self, job_id: str) -> bool:
        result = self.db.table(JOBS_TABLE).delete().eq("id", job_id).execute()
        return bool(result.data)

    def find_open_jobs(self, barangay: str, skills: Sequence[str]) -> List[Job]:
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
        query = self.db.table(JOBS_TABLE).select("*", count="exact")

        if open_only:
            query = query.eq("is_open", True).eq("status", JobStatus.OPEN.value)
        if barangay is not None:
            query = query.eq("barangay", barangay)
        if skills is not None:
            # Jobs that need ANY of the skills
            query = query.overlaps("skills_required", list(skills))
        if min_price is not None:
            query = query.gte("price", min_price)
        if max_price is not None:
            query = query.lte("price", max_price)
        if start_date is not None:
            query = query.gte("date_posted", start_date.isoformat())
        if end_date is not None:
            query = query.lte("date_posted", end_date.isoformat())
        if posted_by is not None:
            query = query.eq("posted_by", posted_by)
        if applicant_id is not None:
            query = query.filter("applicants", "cs", json.dumps([{"user_id": applicant_id}]))
        if has_applicants:
            query = query.gt("applicant_count", 0)

        column = SORT_COLUMNS.get(sort_by, "date_posted")
        query = query.order(column, desc=descending)
        if column != "date_posted":
            query = query.order("date_posted", desc=True)

        if limit is not None:
            query = query.range(offset, offset + limit - 1)
        elif offset:
            query = query.range(offset, offset + 999)

        result = query.execute()
        return [Job.from_dict(row) for row in result.data or []], result.count or 0


class SupabaseUserDirectory:
    """Read-only view of the ``users`` table."""

    def __init__(self, db: Client):
        self.db = db

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        result = self.db.table(USERS_TABLE).select("*").eq("id", user_id).execute()
        return UserProfile.from_dict(result.data[0]) if result.data else None

    def find_workers(self, barangay: str, skills: Iterable[str]) -> List[UserProfile]:
        result = (
            self.db.table(USERS_TABLE)
            .select("*")
            .eq("barangay", barangay)
            .in_("user_type", sorted(WORKER_TYPES))
            .overlaps("skills", list(skills))
            .execute()
        )
        return [UserProfile.from_dict(row) for row in result.data or []]


class SupabaseNotificationStore:
    """Notification inbox over the ``notifications`` table."""

    def __init__(self, db: Client):
        self.db = db

    def send(self, notification: Notification) -> None:
        self.db.table(NOTIFICATIONS_TABLE).insert(notification.to_dict()).execute()

    def list_for(
        self,
        recipient: str,
        type: Optional[str] = None,
        is_read: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Notification], int, int]:
        query = (
            self.db.table(NOTIFICATIONS_TABLE)
            .select("*", count="exact")
            .eq("recipient", recipient)
        )
        if type is not None:
            query = query.eq("type", type)
        if is_read is not None:
            query = query.eq("is_read", is_read)
        result = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()

        unread = (
            self.db.table(NOTIFICATIONS_TABLE)
            .select("id", count="exact")
            .eq("recipient", recipient)
            .eq("is_read", False)
            .execute()
        )
        items = [Notification.from_dict(row) for row in result.data or []]
        return items, result.count or 0, unread.count or 0

    def mark_read(self, notification_id: str, recipient: str) -> Optional[Notification]:
        result = (
            self.db.table(NOTIFICATIONS_TABLE)
            .update({"is_read": True})
            .eq("id", notification_id)
            .eq("recipient", recipient)
            .eq("is_read", False)
            .execute()
        )
        return Notification.from_dict(result.data[0]) if result.data else None

    def mark_all_read(self, recipient: str) -> int:
        result = (
            self.db.table(NOTIFICATIONS_TABLE)
            .update({"is_read": True})
            .eq("recipient", recipient)
            .eq("is_read", False)
            .execute()
        )
        return len(result.data or [])

    def delete(self, notification_id: str, recipient: str) -> Optional[Notification]:
        result = (
            self.db.table(NOTIFICATIONS_TABLE)
            .delete()
            .eq("id", notification_id)
            .eq("recipient", recipient)
            .execute()
        )
        return Notification.from_dict(result.data[0]) if result.data else None
