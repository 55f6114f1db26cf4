"""
Pytest fixtures and test configuration for ResiLinked core tests.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from resilinked.jobs.models import Job
from resilinked.jobs.service import JobService, ServiceConfig
from resilinked.jobs.storage import InMemoryJobStorage
from resilinked.notifications.store import InMemoryNotificationStore
from resilinked.users import InMemoryUserDirectory, UserProfile

BASE_TIME = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


def make_job(
    posted_by: str = "employer-1",
    barangay: str = "A",
    skills=None,
    minutes: int = 0,
    **kwargs,
) -> Job:
    """Build an open job; ``minutes`` offsets date_posted from BASE_TIME."""
    return Job(
        id=kwargs.pop("id", f"job-{uuid.uuid4().hex[:8]}"),
        title=kwargs.pop("title", "Fix the sink"),
        posted_by=posted_by,
        barangay=barangay,
        price=kwargs.pop("price", 500.0),
        skills_required=list(skills or []),
        date_posted=BASE_TIME + timedelta(minutes=minutes),
        **kwargs,
    )


def make_user(user_id: str, barangay: str = "A", skills=None, user_type: str = "employee") -> UserProfile:
    return UserProfile(
        user_id=user_id,
        barangay=barangay,
        skills=list(skills or []),
        user_type=user_type,
        first_name=user_id.capitalize(),
        is_verified=True,
    )


@pytest.fixture
def storage():
    """Create in-memory job storage."""
    return InMemoryJobStorage()


@pytest.fixture
def notifications():
    """Create an in-memory notification inbox."""
    return InMemoryNotificationStore()


@pytest.fixture
def users():
    """A small barangay: one employer, three workers, one admin."""
    return InMemoryUserDirectory(
        [
            make_user("employer-1", user_type="employer"),
            make_user("worker-1", skills=["Plumbing", "Carpentry"]),
            make_user("worker-2", skills=["Plumbing"]),
            make_user("worker-3", barangay="B", skills=["Plumbing"], user_type="both"),
            make_user("admin-1", user_type="admin"),
        ]
    )


@pytest.fixture
def service(storage, users, notifications):
    """Create a job service wired to in-memory collaborators."""
    return JobService(
        storage=storage,
        users=users,
        notifications=notifications,
        config=ServiceConfig(max_match_limit=50),
    )


@pytest.fixture(name="make_job")
def make_job_fixture():
    """Factory for open jobs."""
    return make_job


@pytest.fixture(name="make_user")
def make_user_fixture():
    """Factory for verified user profiles."""
    return make_user
