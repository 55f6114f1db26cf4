"""Pytest configuration and fixtures."""

import os
import secrets
import sys

import pytest

# Generate a unique test secret for this test run to prevent token forgery
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"

# For unit tests, set mock values ONLY if not running integration tests
if not os.environ.get("RUN_INTEGRATION"):
    os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
    os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
    os.environ.setdefault("JWT_SECRET_KEY", _TEST_JWT_SECRET)
else:
    # For integration tests, load from .env
    from pathlib import Path

    from dotenv import load_dotenv

    env_path = Path(__file__).parent.parent / ".env"

    # Safety check: require explicit confirmation for integration tests
    if not os.environ.get("CONFIRM_INTEGRATION_CREDENTIALS"):
        print(
            "\nWARNING: Integration tests will use REAL credentials from .env.\n"
            "Set CONFIRM_INTEGRATION_CREDENTIALS=yes to proceed.\n",
            file=sys.stderr,
        )
        pytest.exit(
            "Integration tests require CONFIRM_INTEGRATION_CREDENTIALS=yes",
            returncode=1,
        )

    load_dotenv(env_path, override=True)

from app.database import get_job_service, get_notification_store, get_user_directory  # noqa: E402
from app.main import app  # noqa: E402
from app.rate_limit import limiter  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from resilinked.jobs import InMemoryJobStorage, JobService  # noqa: E402
from resilinked.notifications import InMemoryNotificationStore  # noqa: E402
from resilinked.users import InMemoryUserDirectory, UserProfile  # noqa: E402


def _profile(user_id, user_type="employee", barangay="Poblacion", skills=(), verified=True):
    return UserProfile(
        user_id=user_id,
        barangay=barangay,
        skills=list(skills),
        user_type=user_type,
        first_name=user_id.split("_")[-1].capitalize(),
        is_verified=verified,
    )


@pytest.fixture
def users():
    """Users known to the in-memory directory."""
    return InMemoryUserDirectory(
        [
            _profile("usr_TEST_ONLY_employer", user_type="employer"),
            _profile("usr_TEST_ONLY_worker", skills=["Plumbing", "Carpentry"]),
            _profile("usr_TEST_ONLY_helper", user_type="both", skills=["Plumbing"]),
            _profile("usr_TEST_ONLY_admin", user_type="admin"),
            _profile("usr_TEST_ONLY_unverified", verified=False),
        ]
    )


@pytest.fixture
def job_storage():
    return InMemoryJobStorage()


@pytest.fixture
def inbox():
    return InMemoryNotificationStore()


@pytest.fixture
def job_service(job_storage, users, inbox):
    return JobService(storage=job_storage, users=users, notifications=inbox)


@pytest.fixture(autouse=True)
def override_dependencies(monkeypatch, users, inbox, job_service):
    """Route every request at in-memory collaborators and disable rate limits."""
    if os.environ.get("RUN_INTEGRATION"):
        yield
        return

    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_user_directory] = lambda: users
    app.dependency_overrides[get_notification_store] = lambda: inbox
    app.dependency_overrides[get_job_service] = lambda: job_service
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def token_for():
    """Build auth headers for a user id."""
    from app.auth import create_access_token
    from app.config import get_settings

    def _headers(user_id: str) -> dict:
        token = create_access_token(user_id, get_settings())
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def employer_headers(token_for):
    return token_for("usr_TEST_ONLY_employer")


@pytest.fixture
def worker_headers(token_for):
    return token_for("usr_TEST_ONLY_worker")


@pytest.fixture
def auth_headers(worker_headers):
    """Default auth headers (a verified worker)."""
    return worker_headers
