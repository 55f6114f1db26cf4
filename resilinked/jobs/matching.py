"""
Skill and barangay based job matching.

A worker sees open jobs in their own barangay that need at least one of their
skills. Jobs are scored by how many required skills the worker has and the
best scored jobs come first. Skill labels are compared exactly (case
sensitive); "Plumbing" and "plumbing" are different skills.
"""

from typing import Iterable, List, Sequence

from resilinked.jobs.models import Job
from resilinked.jobs.storage import JobStorage
from resilinked.users import UserProfile

DEFAULT_MATCH_LIMIT = 10


def score_job(job: Job, skills: Iterable[str]) -> int:
    """Number of the job's required skills present in ``skills``."""
    have = set(skills)
    return sum(1 for skill in set(job.skills_required) if skill in have)


def is_candidate(job: Job, barangay: str, skills: Iterable[str]) -> bool:
    return (
        job.accepts_applications
        and job.barangay == barangay
        and score_job(job, skills) > 0
    )


def rank_jobs(
    jobs: Sequence[Job],
    barangay: str,
    skills: Iterable[str],
    limit: int = DEFAULT_MATCH_LIMIT,
) -> List[Job]:
    """Filter, score and order jobs for a worker.

    Equal scores keep the order the jobs were given in (the sort is stable),
    so the retrieval order decides ties.

    Raises:
        ValueError: If limit is negative
    """
    if limit < 0:
        raise ValueError("limit must not be negative")
    if limit == 0:
        return []

    skills = set(skills)
    scored = [(score_job(job, skills), job) for job in jobs if is_candidate(job, barangay, skills)]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [job for _, job in scored[:limit]]


def find_matching_jobs(
    storage: JobStorage,
    profile: UserProfile,
    limit: int = DEFAULT_MATCH_LIMIT,
) -> List[Job]:
    """Top ``limit`` open jobs for a resolved worker profile.

    One bulk query with the filter pushed to the store, then an in-memory
    score/sort/slice. Returns an empty list when nothing matches.
    """
    if limit < 0:
        raise ValueError("limit must not be negative")
    if limit == 0 or not profile.skills:
        return []
    candidates = storage.find_open_jobs(profile.barangay, profile.skills)
    return rank_jobs(candidates, profile.barangay, profile.skills, limit)


def rank_workers(workers: Sequence[UserProfile], job: Job) -> List[UserProfile]:
    """Workers who would see ``job`` among their matches, best fit first."""
    eligible = [
        w
        for w in workers
        if w.can_apply
        and w.user_id != job.posted_by
        and w.barangay == job.barangay
        and score_job(job, w.skills) > 0
    ]
    eligible.sort(key=lambda w: score_job(job, w.skills), reverse=True)
    return eligible
