"""
Job service.

Orchestrates the job lifecycle: load a job, run a transition, commit it with a
version check, then send the resulting notifications. Every public method
returns a JobResult; store errors are logged here and surface as a generic
store failure.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from resilinked.jobs import lifecycle
from resilinked.jobs.errors import JOB_NOT_FOUND, USER_NOT_FOUND, Failure
from resilinked.jobs.lifecycle import TransitionResult
from resilinked.jobs.matching import DEFAULT_MATCH_LIMIT, find_matching_jobs, rank_workers
from resilinked.jobs.models import Job, JobStatus
from resilinked.jobs.storage import CONFLICT, NOT_FOUND, SORT_FIELDS, JobStorage
from resilinked.notifications.models import Notification, NotificationType
from resilinked.notifications.store import NotificationSink, dispatch
from resilinked.users import Actor, UserDirectory
from resilinked.utils import as_utc, utc_now

logger = logging.getLogger(__name__)

REQUIRED_JOB_FIELDS = ("title", "price", "barangay")


@dataclass
class ServiceConfig:
    """Tunables for the job service."""

    default_match_limit: int = DEFAULT_MATCH_LIMIT
    max_match_limit: int = 50
    popular_limit: int = 10
    search_page_size: int = 10


@dataclass
class JobResult:
    """Result of a service call: a job, a page of jobs, or a failure."""

    job: Optional[Job] = None
    jobs: List[Job] = field(default_factory=list)
    total: int = 0
    matches_found: int = 0
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def failed(cls, failure: Failure) -> "JobResult":
        return cls(failure=failure)


def clean_skills(skills: Optional[Sequence[str]]) -> List[str]:
    """Strip labels, drop blanks and duplicates. Case is preserved."""
    cleaned: List[str] = []
    for skill in skills or []:
        label = str(skill).strip()
        if label and label not in cleaned:
            cleaned.append(label)
    return cleaned


class JobService:
    """Job operations for the marketplace."""

    def __init__(
        self,
        storage: JobStorage,
        users: UserDirectory,
        notifications: NotificationSink,
        config: Optional[ServiceConfig] = None,
    ):
        self.storage = storage
        self.users = users
        self.notifications = notifications
        self.config = config or ServiceConfig()

    # === Internals ===

    def _load(self, job_id: str) -> Tuple[Optional[Job], Optional[Failure]]:
        try:
            job = self.storage.get_job(job_id)
        except Exception:
            logger.exception(f"Failed to load job {job_id}")
            return None, Failure.store()
        if job is None:
            return None, JOB_NOT_FOUND
        return job, None

    def _commit(self, original: Job, result: TransitionResult, action: str) -> JobResult:
        """Persist a successful transition, then dispatch its effects."""
        if not result.ok:
            return JobResult.failed(result.failure)

        try:
            updated, error = self.storage.update_job(result.job, expected_version=original.version)
        except Exception:
            logger.exception(f"Failed to write job {original.id} during {action}")
            return JobResult.failed(Failure.store())

        if error == NOT_FOUND:
            return JobResult.failed(JOB_NOT_FOUND)
        if error == CONFLICT:
            return JobResult.failed(
                Failure.conflict(
                    "Job was modified by another request",
                    "This job was just updated by someone else. Please refresh and try again.",
                )
            )

        logger.info(f"Job {action} | id={original.id} | version={updated.version}")
        dispatch(self.notifications, result.effects)
        return JobResult(job=updated)

    def _list(self, **filters: Any) -> JobResult:
        try:
            jobs, total = self.storage.list_jobs(**filters)
        except Exception:
            logger.exception(f"Failed to list jobs with {filters}")
            return JobResult.failed(Failure.store())
        return JobResult(jobs=jobs, total=total)

    # === Posting ===

    def post_job(self, actor: Actor, fields: Dict[str, Any]) -> JobResult:
        """Create an open job and tell matching workers about it."""
        missing = [name for name in REQUIRED_JOB_FIELDS if fields.get(name) in (None, "")]
        if missing:
            return JobResult.failed(
                Failure.validation(
                    "Missing required fields", "Please fill all required fields", missing
                )
            )

        try:
            job = Job(
                id=str(uuid.uuid4()),
                title=str(fields["title"]).strip(),
                posted_by=actor.user_id,
                barangay=str(fields["barangay"]).strip(),
                price=float(fields["price"]),
                description=fields.get("description") or "",
                skills_required=clean_skills(fields.get("skills_required")),
                location=fields.get("location"),
                date_posted=utc_now(),
            )
        except (TypeError, ValueError) as e:
            return JobResult.failed(Failure.validation(str(e), str(e)))

        try:
            self.storage.save_job(job)
        except Exception:
            logger.exception(f"Failed to save job for {actor.user_id}")
            return JobResult.failed(Failure.store())

        logger.info(f"Job posted | id={job.id} | by={actor.user_id} | barangay={job.barangay}")
        matches = self._announce(job)
        return JobResult(job=job, matches_found=matches)

    def _announce(self, job: Job) -> int:
        """Send job_match notifications. Failures here never undo the post."""
        if not job.skills_required:
            return 0
        try:
            workers = rank_workers(self.users.find_workers(job.barangay, job.skills_required), job)
        except Exception as e:
            logger.warning(f"Worker lookup failed for job {job.id}: {e}")
            return 0

        effects = [
            Notification(
                recipient=w.user_id,
                type=NotificationType.JOB_MATCH.value,
                message=f"New job in your area matching your skills: {job.title}",
                related_job=job.id,
            )
            for w in workers
        ]
        dispatch(self.notifications, effects)
        return len(workers)

    # === Reads ===

    def get_job(self, job_id: str) -> JobResult:
        job, failure = self._load(job_id)
        if failure:
            return JobResult.failed(failure)
        return JobResult(job=job)

    def list_open_jobs(
        self,
        sort_by: str = "date_posted",
        descending: bool = True,
        limit: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> JobResult:
        if sort_by not in SORT_FIELDS:
            sort_by = "date_posted"
        return self._list(
            open_only=True,
            sort_by=sort_by,
            descending=descending,
            limit=limit,
            start_date=as_utc(start_date),
            end_date=as_utc(end_date),
        )

    def search_jobs(
        self,
        skills: Optional[Sequence[str]] = None,
        barangay: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort_by: str = "date_posted",
        descending: bool = True,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> JobResult:
        """Paged search over open jobs."""
        if sort_by not in SORT_FIELDS:
            return JobResult.failed(
                Failure.validation(
                    f"Invalid sort field: {sort_by}",
                    f"Sort must be one of {', '.join(SORT_FIELDS)}",
                    ["sort_by"],
                )
            )
        limit = limit or self.config.search_page_size
        page = max(page, 1)
        return self._list(
            open_only=True,
            skills=clean_skills(skills) or None,
            barangay=barangay or None,
            min_price=min_price,
            max_price=max_price,
            sort_by=sort_by,
            descending=descending,
            limit=limit,
            offset=(page - 1) * limit,
        )

    def popular_jobs(self) -> JobResult:
        """Open jobs with the most applicants, newest first among equals."""
        return self._list(open_only=True, sort_by="applicants", limit=self.config.popular_limit)

    def jobs_posted_by(self, user_id: str) -> JobResult:
        return self._list(posted_by=user_id)

    def jobs_applied_by(self, user_id: str) -> JobResult:
        return self._list(applicant_id=user_id)

    def applications_received(self, user_id: str) -> JobResult:
        return self._list(posted_by=user_id, has_applicants=True)

    def match_jobs(self, user_id: str, limit: Optional[int] = None) -> JobResult:
        """Ranked matches for a worker's stored barangay and skills."""
        if limit is None:
            limit = self.config.default_match_limit
        if limit < 0 or limit > self.config.max_match_limit:
            return JobResult.failed(
                Failure.validation(
                    "Invalid limit",
                    f"Limit must be between 0 and {self.config.max_match_limit}",
                    ["limit"],
                )
            )

        try:
            profile = self.users.get_user(user_id)
            if profile is None:
                return JobResult.failed(USER_NOT_FOUND)
            jobs = find_matching_jobs(self.storage, profile, limit)
        except Exception:
            logger.exception(f"Failed to match jobs for {user_id}")
            return JobResult.failed(Failure.store())

        return JobResult(jobs=jobs, total=len(jobs))

    # === Transitions ===

    def apply(self, job_id: str, user_id: str) -> JobResult:
        try:
            profile = self.users.get_user(user_id)
        except Exception:
            logger.exception(f"Failed to load user {user_id}")
            return JobResult.failed(Failure.store())
        if profile is None:
            return JobResult.failed(USER_NOT_FOUND)

        job, failure = self._load(job_id)
        if failure:
            return JobResult.failed(failure)
        return self._commit(job, lifecycle.apply(job, profile), "applied")

    def cancel_application(self, job_id: str, actor: Actor) -> JobResult:
        job, failure = self._load(job_id)
        if failure:
            return JobResult.failed(failure)
        return self._commit(job, lifecycle.cancel_application(job, actor), "application_cancelled")

    def assign(self, job_id: str, actor: Actor, worker_id: str) -> JobResult:
        job, failure = self._load(job_id)
        if failure:
            return JobResult.failed(failure)
        return self._commit(job, lifecycle.assign(job, actor, worker_id), "assigned")

    def reject(self, job_id: str, actor: Actor, worker_id: str) -> JobResult:
        job, failure = self._load(job_id)
        if failure:
            return JobResult.failed(failure)
        return self._commit(job, lifecycle.reject(job, actor, worker_id), "applicant_rejected")

    def set_applicant_status(
        self, job_id: str, actor: Actor, worker_id: str, status: str
    ) -> JobResult:
        job, failure = self._load(job_id)
        if failure:
            return JobResult.failed(failure)
        result = lifecycle.set_applicant_status(job, actor, worker_id, status)
        return self._commit(job, result, f"applicant_{status}")

    def close(self, job_id: str, actor: Actor) -> JobResult:
        job, failure = self._load(job_id)
        if failure:
            return JobResult.failed(failure)
        return self._commit(job, lifecycle.close(job, actor), JobStatus.CLOSED.value)

    def delete(self, job_id: str, actor: Actor) -> JobResult:
        job, failure = self._load(job_id)
        if failure:
            return JobResult.failed(failure)

        result = lifecycle.authorize_delete(job, actor)
        if not result.ok:
            return JobResult.failed(result.failure)

        try:
            deleted = self.storage.delete_job(job_id)
        except Exception:
            logger.exception(f"Failed to delete job {job_id}")
            return JobResult.failed(Failure.store())
        if not deleted:
            return JobResult.failed(JOB_NOT_FOUND)

        logger.info(f"Job deleted | id={job_id} | by={actor.user_id}")
        return JobResult(job=job)
