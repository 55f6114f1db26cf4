"""
Job application state machine.

Every transition takes a job snapshot and returns a TransitionResult holding
either the new job state plus the notifications to send once it is committed,
or a Failure. Inputs are never mutated and business outcomes never raise.

Job states: open -> assigned | closed. Applicant entries: pending, accepted,
rejected. Owner-gated transitions accept the owning employer or an admin, and
check that before anything else.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from resilinked.jobs.errors import Failure
from resilinked.jobs.models import Applicant, ApplicantStatus, Job, JobStatus
from resilinked.notifications.models import Notification, NotificationType
from resilinked.users import Actor, UserProfile, UserType
from resilinked.utils import utc_now


@dataclass
class TransitionResult:
    """Outcome of a single transition."""

    job: Optional[Job] = None
    effects: List[Notification] = field(default_factory=list)
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _fail(failure: Failure) -> TransitionResult:
    return TransitionResult(failure=failure)


def _notify(recipient: str, type: NotificationType, message: str, job: Job) -> Notification:
    return Notification(recipient=recipient, type=type.value, message=message, related_job=job.id)


def is_owner_or_admin(job: Job, actor: Actor) -> bool:
    return actor.is_admin or job.posted_by == actor.user_id


def _require_owner(job: Job, actor: Actor, alert: str) -> Optional[Failure]:
    if is_owner_or_admin(job, actor):
        return None
    return Failure.forbidden("Not authorized", alert)


def apply(job: Job, applicant: UserProfile) -> TransitionResult:
    """Append a pending applicant entry for a worker."""
    if not applicant.can_apply:
        if applicant.user_type == UserType.EMPLOYER.value:
            return _fail(
                Failure.forbidden(
                    "Employers cannot apply to jobs",
                    "Employers cannot apply to jobs. Use your employer dashboard to find workers instead.",
                )
            )
        return _fail(
            Failure.forbidden(
                "Employee profile required", "You need an employee profile to apply to jobs"
            )
        )

    if job.posted_by == applicant.user_id:
        return _fail(
            Failure.precondition(
                "Cannot apply to own job", "You cannot apply to your own job posting"
            )
        )

    if not job.accepts_applications:
        return _fail(
            Failure.precondition(
                "Job is closed", "This job is no longer accepting applications"
            )
        )

    if job.has_applicant(applicant.user_id):
        return _fail(
            Failure.precondition("Already applied", "You've already applied to this job")
        )

    updated = job.copy()
    updated.applicants.append(Applicant(user_id=applicant.user_id, applied_at=utc_now()))

    effects = [
        _notify(
            job.posted_by,
            NotificationType.JOB_APPLIED,
            f'{applicant.full_name} applied to your job "{job.title}"',
            job,
        ),
        _notify(
            applicant.user_id,
            NotificationType.APPLICATION_SENT,
            f'You applied to "{job.title}"',
            job,
        ),
    ]
    return TransitionResult(job=updated, effects=effects)


def cancel_application(job: Job, actor: Actor) -> TransitionResult:
    """Withdraw the actor's own application unless it was already accepted."""
    entry = job.find_applicant(actor.user_id)
    if entry is None:
        return _fail(
            Failure.precondition("No application found", "You haven't applied to this job")
        )
    if entry.is_accepted:
        return _fail(
            Failure.precondition(
                "Cannot cancel accepted application",
                "Your application has already been accepted and cannot be cancelled",
            )
        )

    updated = job.copy()
    updated.applicants = [a for a in updated.applicants if a.user_id != actor.user_id]

    effects = [
        _notify(
            job.posted_by,
            NotificationType.APPLICATION_CANCELLED,
            f'An applicant cancelled their application for "{job.title}"',
            job,
        ),
        _notify(
            actor.user_id,
            NotificationType.APPLICATION_CANCELLED,
            f'You cancelled your application for "{job.title}"',
            job,
        ),
    ]
    return TransitionResult(job=updated, effects=effects)


def assign(job: Job, actor: Actor, worker_id: str) -> TransitionResult:
    """Accept one applicant, reject all others and close the job."""
    denied = _require_owner(job, actor, "You can only assign workers to your own jobs")
    if denied:
        return _fail(denied)

    if not worker_id:
        return _fail(
            Failure.validation(
                "Missing user_id", "You must provide the applicant's user_id", ["user_id"]
            )
        )

    if not job.can_transition_to(JobStatus.ASSIGNED) or not job.is_open:
        return _fail(
            Failure.precondition(
                f"Cannot assign a worker to a job in status: {job.status}",
                "This job is no longer open",
            )
        )

    entry = job.find_applicant(worker_id)
    if entry is None:
        return _fail(
            Failure.precondition(
                "User didn't apply", "You can only assign workers who applied to this job"
            )
        )
    if entry.is_rejected:
        return _fail(
            Failure.precondition(
                "Application was rejected", "This applicant was already rejected"
            )
        )

    updated = job.copy()
    losers = []
    for a in updated.applicants:
        if a.user_id == worker_id:
            a.status = ApplicantStatus.ACCEPTED.value
        else:
            if a.is_pending:
                losers.append(a.user_id)
            a.status = ApplicantStatus.REJECTED.value
    updated.assigned_to = worker_id
    updated.is_open = False
    updated.status = JobStatus.ASSIGNED.value

    effects = [
        _notify(
            worker_id,
            NotificationType.JOB_ACCEPTED,
            f'You\'ve been assigned to "{job.title}"',
            job,
        )
    ]
    effects.extend(
        _notify(
            user_id,
            NotificationType.APPLICATION_REJECTED,
            f'Your application for "{job.title}" was not selected',
            job,
        )
        for user_id in losers
    )
    return TransitionResult(job=updated, effects=effects)


def reject(job: Job, actor: Actor, worker_id: str) -> TransitionResult:
    """Reject one applicant. The job stays open even if nobody is left pending."""
    denied = _require_owner(job, actor, "You can only manage applications for your own jobs")
    if denied:
        return _fail(denied)

    if not worker_id:
        return _fail(
            Failure.validation(
                "Missing user_id", "You must provide the applicant's user_id", ["user_id"]
            )
        )

    entry = job.find_applicant(worker_id)
    if entry is None:
        return _fail(
            Failure.precondition(
                "Application not found", "This user hasn't applied to this job"
            )
        )
    if entry.is_accepted:
        # assigned_to must keep pointing at exactly one accepted entry
        return _fail(
            Failure.precondition(
                "Cannot reject the assigned worker",
                "This applicant was already assigned to the job",
            )
        )

    updated = job.copy()
    updated.find_applicant(worker_id).status = ApplicantStatus.REJECTED.value

    effects = [
        _notify(
            worker_id,
            NotificationType.APPLICATION_REJECTED,
            f'Your application for "{job.title}" was not selected',
            job,
        )
    ]
    return TransitionResult(job=updated, effects=effects)


def set_applicant_status(job: Job, actor: Actor, worker_id: str, status: str) -> TransitionResult:
    """Move one applicant entry to ``status``.

    accepted behaves like assign and rejected like reject. pending puts a
    rejected entry back in the running, which is only possible while the job
    is still open.
    """
    denied = _require_owner(job, actor, "You can only manage applicants for your own jobs")
    if denied:
        return _fail(denied)

    valid = {s.value for s in ApplicantStatus}
    if status not in valid:
        return _fail(
            Failure.validation(
                "Invalid status", "Status must be pending, accepted, or rejected", ["status"]
            )
        )

    entry = job.find_applicant(worker_id)
    if entry is None:
        return _fail(
            Failure.not_found("Applicant not found", "This user did not apply to this job")
        )

    if status == ApplicantStatus.ACCEPTED.value:
        result = assign(job, actor, worker_id)
    elif status == ApplicantStatus.REJECTED.value:
        result = reject(job, actor, worker_id)
    else:
        if entry.is_accepted or not job.accepts_applications:
            return _fail(
                Failure.precondition(
                    "Cannot reopen application",
                    "Applications can only be reopened while the job is open",
                )
            )
        updated = job.copy()
        updated.find_applicant(worker_id).status = ApplicantStatus.PENDING.value
        result = TransitionResult(job=updated)

    if not result.ok:
        return result

    # The worker always hears about their own status change
    result.effects = [n for n in result.effects if n.recipient != worker_id]
    result.effects.insert(
        0,
        _notify(
            worker_id,
            NotificationType.APPLICATION_UPDATE,
            f'Your application for "{job.title}" has been {status}',
            job,
        ),
    )
    return result


def close(job: Job, actor: Actor) -> TransitionResult:
    """Close an open job without assigning anyone."""
    denied = _require_owner(job, actor, "You can only close your own jobs")
    if denied:
        return _fail(denied)

    if not job.can_transition_to(JobStatus.CLOSED) or not job.is_open:
        return _fail(
            Failure.precondition(
                f"Cannot close job in status: {job.status}", "This job is already closed"
            )
        )

    updated = job.copy()
    updated.is_open = False
    updated.status = JobStatus.CLOSED.value
    return TransitionResult(job=updated)


def authorize_delete(job: Job, actor: Actor) -> TransitionResult:
    """Jobs can be deleted in any state, by the owner or an admin."""
    denied = _require_owner(job, actor, "You can only delete your own jobs")
    if denied:
        return _fail(denied)
    return TransitionResult(job=job)
