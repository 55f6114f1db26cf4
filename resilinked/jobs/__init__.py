"""Jobs marketplace for ResiLinked.

Lets workers find and apply to jobs in their barangay and employers pick one
applicant.

Models:
- Job: A job posting with embedded applicant entries
- Applicant: A worker's application to a job
- JobStatus / ApplicantStatus: Lifecycle statuses

Matching:
- rank_jobs / find_matching_jobs: Skill-overlap ranking within a barangay

Lifecycle:
- apply, cancel_application, assign, reject, set_applicant_status, close

Service:
- JobService: Loads, transitions, commits and notifies
"""

from resilinked.jobs.models import (
    VALID_JOB_TRANSITIONS,
    Applicant,
    ApplicantStatus,
    Job,
    JobStatus,
)
from resilinked.jobs.errors import Failure, FailureKind
from resilinked.jobs.storage import InMemoryJobStorage, JobStorage
from resilinked.jobs.matching import find_matching_jobs, rank_jobs, score_job
from resilinked.jobs.lifecycle import TransitionResult
from resilinked.jobs.service import JobResult, JobService, ServiceConfig

__all__ = [
    # Models
    "Job",
    "Applicant",
    "JobStatus",
    "ApplicantStatus",
    "VALID_JOB_TRANSITIONS",
    # Errors
    "Failure",
    "FailureKind",
    # Storage
    "JobStorage",
    "InMemoryJobStorage",
    # Matching
    "rank_jobs",
    "find_matching_jobs",
    "score_job",
    # Lifecycle
    "TransitionResult",
    # Service
    "JobService",
    "JobResult",
    "ServiceConfig",
]
