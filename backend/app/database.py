"""Database wiring for Supabase.

The Supabase client is built once per application (stored on ``app.state``)
and handed to the storage adapters through FastAPI dependencies, so tests can
swap any layer with dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Request

from supabase import Client, create_client

from resilinked.jobs import JobService, ServiceConfig
from resilinked.notifications import NotificationStore
from resilinked.users import UserDirectory

from .config import Settings, get_settings
from .storage import SupabaseJobStorage, SupabaseNotificationStore, SupabaseUserDirectory


def create_db_client(settings: Settings) -> Client:
    """Create a Supabase client from settings."""
    # Prefer new secret key, fall back to legacy service_role_key
    api_key = settings.supabase_secret_key or settings.supabase_service_role_key
    if not api_key:
        raise ValueError("Either SUPABASE_SECRET_KEY or SUPABASE_SERVICE_ROLE_KEY must be set")
    return create_client(settings.supabase_url, api_key)


def get_db(request: Request, settings: Annotated[Settings, Depends(get_settings)]) -> Client:
    """FastAPI dependency for the application's Supabase client."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        db = create_db_client(settings)
        request.app.state.db = db
    return db


# Type alias for dependency injection
Database = Annotated[Client, Depends(get_db)]


def get_user_directory(db: Database) -> UserDirectory:
    """FastAPI dependency for user profile lookups."""
    return SupabaseUserDirectory(db)


def get_notification_store(db: Database) -> NotificationStore:
    """FastAPI dependency for the notification inbox."""
    return SupabaseNotificationStore(db)


def get_job_service(
    db: Database,
    settings: Annotated[Settings, Depends(get_settings)],
) -> JobService:
    """FastAPI dependency for the job service."""
    config = ServiceConfig(
        default_match_limit=settings.match_limit_default,
        max_match_limit=settings.match_limit_max,
    )
    return JobService(
        storage=SupabaseJobStorage(db),
        users=SupabaseUserDirectory(db),
        notifications=SupabaseNotificationStore(db),
        config=config,
    )


Users = Annotated[UserDirectory, Depends(get_user_directory)]
Notifications = Annotated[NotificationStore, Depends(get_notification_store)]
Jobs = Annotated[JobService, Depends(get_job_service)]
