"""Job marketplace routes.

Posting, browsing, matching, and the application/assignment lifecycle.
Browsing is public; everything else needs a verified account. The
job service does the work; these handlers translate HTTP to service calls and
service failures to ``{message, alert}`` responses.
"""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Query, Request, status

from ..auth import CurrentUser
from ..database import Jobs
from ..errors import raise_for_failure
from ..logging_config import get_logger
from ..models import (
    ApplicantAction,
    ApplicantStatusUpdate,
    JobCreate,
    JobCreatedResponse,
    JobResponse,
    JobSearchResponse,
    Pagination,
    SortField,
    to_job_response,
    total_pages,
)
from ..rate_limit import limiter

logger = get_logger("routes.jobs")
router = APIRouter(prefix="/jobs", tags=["jobs"])

SortOrder = Literal["asc", "desc"]


def _split(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [s for s in value.split(",") if s.strip()]


# =============================================================================
# Posting and Browsing
# =============================================================================


@router.post("", response_model=JobCreatedResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def create_job(
    request: Request,
    job: JobCreate,
    auth: CurrentUser,
    jobs: Jobs,
):
    """
    Post a new job.

    The job starts open. Workers in the same barangay with at least one of
    the required skills get a job_match notification.
    """
    logger.info(f"POST /jobs | user={auth.user_id} | title={(job.title or '')[:50]}")

    result = jobs.post_job(auth.actor, job.model_dump())
    raise_for_failure(result.failure)

    return JobCreatedResponse(
        message="Job posted successfully",
        job=to_job_response(result.job),
        matches_found=result.matches_found,
        alert=f"Job posted! {result.matches_found} matching worker(s) notified.",
    )


@router.get("", response_model=list[JobResponse])
@limiter.limit("60/minute")
async def list_jobs(
    request: Request,
    jobs: Jobs,
    sort_by: SortField = Query("date_posted"),
    order: SortOrder = Query("desc"),
    limit: int | None = Query(None, ge=1, le=100),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
):
    """List open jobs, newest first unless sorted otherwise."""
    logger.info(f"GET /jobs | sort={sort_by} {order}")

    result = jobs.list_open_jobs(
        sort_by=sort_by,
        descending=order == "desc",
        limit=limit,
        start_date=start_date,
        end_date=end_date,
    )
    raise_for_failure(result.failure)
    return [to_job_response(j) for j in result.jobs]


@router.get("/search", response_model=JobSearchResponse)
@limiter.limit("60/minute")
async def search_jobs(
    request: Request,
    jobs: Jobs,
    skill: str | None = Query(None, description="Comma-separated skill labels"),
    barangay: str | None = Query(None),
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    sort_by: str = Query("date_posted"),
    order: SortOrder = Query("desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """
    Search open jobs.

    Filters:
    - skill: jobs requiring ANY of the listed skills
    - barangay: exact barangay
    - min_price / max_price: inclusive price range
    """
    logger.info(f"GET /jobs/search | skill={skill} | barangay={barangay}")

    result = jobs.search_jobs(
        skills=_split(skill),
        barangay=barangay,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        descending=order == "desc",
        page=page,
        limit=limit,
    )
    raise_for_failure(result.failure)

    return JobSearchResponse(
        jobs=[to_job_response(j) for j in result.jobs],
        total=result.total,
        pagination=Pagination(page=page, limit=limit, total_pages=total_pages(result.total, limit)),
    )


@router.get("/popular", response_model=list[JobResponse])
@limiter.limit("60/minute")
async def popular_jobs(request: Request, jobs: Jobs):
    """Open jobs with the most applicants."""
    logger.info("GET /jobs/popular")

    result = jobs.popular_jobs()
    raise_for_failure(result.failure)
    return [to_job_response(j) for j in result.jobs]


# =============================================================================
# Per-User Views
# =============================================================================


@router.get("/matches", response_model=list[JobResponse])
@router.get("/my-matches", response_model=list[JobResponse], include_in_schema=False)
@limiter.limit("30/minute")
async def my_matches(
    request: Request,
    auth: CurrentUser,
    jobs: Jobs,
    limit: int | None = Query(None),
):
    """
    Open jobs in the caller's barangay ranked by how many of the caller's
    skills they require.
    """
    logger.info(f"GET /jobs/matches | user={auth.user_id} | limit={limit}")

    result = jobs.match_jobs(auth.user_id, limit)
    raise_for_failure(result.failure)

    logger.info(f"Matches | user={auth.user_id} | found={len(result.jobs)}")
    return [to_job_response(j) for j in result.jobs]


@router.get("/mine", response_model=list[JobResponse])
@router.get("/my-jobs", response_model=list[JobResponse], include_in_schema=False)
@limiter.limit("60/minute")
async def my_jobs(request: Request, auth: CurrentUser, jobs: Jobs):
    """Jobs the caller posted."""
    logger.info(f"GET /jobs/mine | user={auth.user_id}")

    result = jobs.jobs_posted_by(auth.user_id)
    raise_for_failure(result.failure)
    return [to_job_response(j) for j in result.jobs]


@router.get("/my-applications", response_model=list[JobResponse])
@limiter.limit("60/minute")
async def my_applications(request: Request, auth: CurrentUser, jobs: Jobs):
    """Jobs the caller has applied to, whatever the application status."""
    logger.info(f"GET /jobs/my-applications | user={auth.user_id}")

    result = jobs.jobs_applied_by(auth.user_id)
    raise_for_failure(result.failure)
    return [to_job_response(j) for j in result.jobs]


@router.get("/my-applications-received", response_model=list[JobResponse])
@limiter.limit("60/minute")
async def applications_received(request: Request, auth: CurrentUser, jobs: Jobs):
    """The caller's posted jobs that have at least one applicant."""
    logger.info(f"GET /jobs/my-applications-received | user={auth.user_id}")

    result = jobs.applications_received(auth.user_id)
    raise_for_failure(result.failure)
    return [to_job_response(j) for j in result.jobs]


# =============================================================================
# Single Job
# =============================================================================


@router.get("/{job_id}", response_model=JobResponse)
@limiter.limit("60/minute")
async def get_job(request: Request, job_id: str, jobs: Jobs):
    """Get details of a specific job."""
    logger.info(f"GET /jobs/{job_id}")

    result = jobs.get_job(job_id)
    raise_for_failure(result.failure)
    return to_job_response(result.job)


@router.post("/{job_id}/apply", response_model=JobResponse)
@limiter.limit("30/minute")
async def apply_to_job(request: Request, job_id: str, auth: CurrentUser, jobs: Jobs):
    """
    Apply to an open job.

    Workers can't apply to their own jobs or apply twice. The poster gets a
    job_applied notification.
    """
    logger.info(f"POST /jobs/{job_id}/apply | user={auth.user_id}")

    result = jobs.apply(job_id, auth.user_id)
    raise_for_failure(result.failure)
    return to_job_response(result.job)


@router.delete("/{job_id}/application", response_model=JobResponse)
@router.delete("/{job_id}/cancel-application", response_model=JobResponse, include_in_schema=False)
@limiter.limit("30/minute")
async def cancel_application(request: Request, job_id: str, auth: CurrentUser, jobs: Jobs):
    """Withdraw the caller's application. Accepted applications can't be withdrawn."""
    logger.info(f"DELETE /jobs/{job_id}/application | user={auth.user_id}")

    result = jobs.cancel_application(job_id, auth.actor)
    raise_for_failure(result.failure)
    return to_job_response(result.job)


@router.post("/{job_id}/assign", response_model=JobResponse)
@limiter.limit("10/minute")
async def assign_worker(
    request: Request,
    job_id: str,
    body: ApplicantAction,
    auth: CurrentUser,
    jobs: Jobs,
):
    """
    Assign an applicant to the job.

    Only the poster (or an admin) can assign. The job leaves the open state
    and every other pending applicant is rejected.
    """
    logger.info(f"POST /jobs/{job_id}/assign | user={auth.user_id} | worker={body.user_id}")

    result = jobs.assign(job_id, auth.actor, body.user_id)
    raise_for_failure(result.failure)
    return to_job_response(result.job)


@router.post("/{job_id}/reject", response_model=JobResponse)
@limiter.limit("30/minute")
async def reject_applicant(
    request: Request,
    job_id: str,
    body: ApplicantAction,
    auth: CurrentUser,
    jobs: Jobs,
):
    """Reject one pending applicant. The job stays open."""
    logger.info(f"POST /jobs/{job_id}/reject | user={auth.user_id} | worker={body.user_id}")

    result = jobs.reject(job_id, auth.actor, body.user_id)
    raise_for_failure(result.failure)
    return to_job_response(result.job)


@router.put("/{job_id}/applicants/{user_id}", response_model=JobResponse)
@limiter.limit("30/minute")
async def update_applicant_status(
    request: Request,
    job_id: str,
    user_id: str,
    body: ApplicantStatusUpdate,
    auth: CurrentUser,
    jobs: Jobs,
):
    """Set a single applicant's status (poster or admin only)."""
    logger.info(
        f"PUT /jobs/{job_id}/applicants/{user_id} | user={auth.user_id} | status={body.status}"
    )

    result = jobs.set_applicant_status(job_id, auth.actor, user_id, body.status)
    raise_for_failure(result.failure)
    return to_job_response(result.job)


@router.put("/{job_id}/close", response_model=JobResponse)
@limiter.limit("10/minute")
async def close_job(request: Request, job_id: str, auth: CurrentUser, jobs: Jobs):
    """Close an open job without assigning anyone."""
    logger.info(f"PUT /jobs/{job_id}/close | user={auth.user_id}")

    result = jobs.close(job_id, auth.actor)
    raise_for_failure(result.failure)
    return to_job_response(result.job)


@router.delete("/{job_id}")
@limiter.limit("10/minute")
async def delete_job(request: Request, job_id: str, auth: CurrentUser, jobs: Jobs):
    """Delete a job (poster or admin only)."""
    logger.info(f"DELETE /jobs/{job_id} | user={auth.user_id}")

    result = jobs.delete(job_id, auth.actor)
    raise_for_failure(result.failure)
    return {"message": "Job deleted", "alert": "Job deleted successfully"}
