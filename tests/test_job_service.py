"""Tests for job service."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from resilinked.jobs import lifecycle
from resilinked.jobs.errors import FailureKind
from resilinked.jobs.service import JobService, ServiceConfig, clean_skills
from resilinked.jobs.storage import InMemoryJobStorage
from resilinked.users import Actor

EMPLOYER = Actor(user_id="employer-1", user_type="employer")


def post(service, **fields):
    payload = {"title": "Fix the sink", "price": 500, "barangay": "A"}
    payload.update(fields)
    return service.post_job(EMPLOYER, payload)


class TestPostJob:
    """Tests for posting a job."""

    def test_post_job_saves_open_job(self, service, storage):
        result = post(service, skills_required=["Plumbing"])

        assert result.ok
        saved = storage.get_job(result.job.id)
        assert saved.status == "open"
        assert saved.posted_by == "employer-1"
        assert saved.date_posted is not None

    def test_missing_fields_listed(self, service):
        result = service.post_job(EMPLOYER, {"title": "Fix", "barangay": ""})

        assert result.failure.kind == FailureKind.VALIDATION
        assert result.failure.fields == ["price", "barangay"]
        assert result.failure.to_dict()["required"] == ["price", "barangay"]

    def test_invalid_price(self, service):
        result = post(service, price=-1)
        assert result.failure.kind == FailureKind.VALIDATION

    def test_skills_cleaned_but_case_kept(self, service):
        result = post(service, skills_required=[" Plumbing ", "", "Plumbing", "carpentry"])
        assert result.job.skills_required == ["Plumbing", "carpentry"]

    def test_matching_workers_notified(self, service, notifications):
        """Only workers in the barangay with a shared skill hear about the job."""
        result = post(service, skills_required=["Plumbing"])

        assert result.matches_found == 2
        recipients = {n.recipient for n in notifications.sent if n.type == "job_match"}
        assert recipients == {"worker-1", "worker-2"}

    def test_worker_lookup_failure_does_not_undo_post(self, storage, notifications):
        users = MagicMock()
        users.find_workers.side_effect = RuntimeError("directory down")
        service = JobService(storage, users, notifications)

        result = post(service, skills_required=["Plumbing"])

        assert result.ok
        assert result.matches_found == 0
        assert storage.get_job(result.job.id) is not None

    def test_store_failure_is_generic(self, users, notifications):
        storage = MagicMock()
        storage.save_job.side_effect = RuntimeError("connection refused at 10.0.0.3")
        service = JobService(storage, users, notifications)

        result = post(service)

        assert result.failure.kind == FailureKind.STORE
        assert "10.0.0.3" not in result.failure.message


class TestMatchJobs:
    """Tests for the worker's match list."""

    def test_matches_use_stored_profile(self, service):
        post(service, title="Plumbing only", skills_required=["Plumbing"])
        both = post(service, title="Both", skills_required=["Plumbing", "Carpentry"])
        post(service, title="Far away", barangay="B", skills_required=["Plumbing"])

        result = service.match_jobs("worker-1")

        assert result.ok
        assert result.jobs[0].id == both.job.id
        assert {j.title for j in result.jobs} == {"Plumbing only", "Both"}

    def test_limit_zero(self, service):
        post(service, skills_required=["Plumbing"])
        result = service.match_jobs("worker-1", limit=0)
        assert result.ok
        assert result.jobs == []

    @pytest.mark.parametrize("limit", [-1, 51])
    def test_limit_out_of_range(self, service, limit):
        result = service.match_jobs("worker-1", limit=limit)
        assert result.failure.kind == FailureKind.VALIDATION

    def test_default_limit_from_config(self, storage, users, notifications):
        service = JobService(storage, users, notifications, ServiceConfig(default_match_limit=2))
        for _ in range(4):
            post(service, skills_required=["Plumbing"])

        assert len(service.match_jobs("worker-2").jobs) == 2

    def test_unknown_user(self, service):
        result = service.match_jobs("ghost")
        assert result.failure.kind == FailureKind.NOT_FOUND


class TestApplicationFlow:
    """Apply, cancel, assign and reject through the service."""

    def test_apply_commits_and_notifies(self, service, storage, notifications):
        job = post(service).job
        result = service.apply(job.id, "worker-1")

        assert result.ok
        assert result.job.version == job.version + 1
        assert storage.get_job(job.id).has_applicant("worker-1")
        types = {(n.recipient, n.type) for n in notifications.sent}
        assert ("employer-1", "job_applied") in types
        assert ("worker-1", "application_sent") in types

    def test_apply_to_missing_job(self, service):
        assert service.apply("nope", "worker-1").failure.kind == FailureKind.NOT_FOUND

    def test_apply_unknown_user(self, service):
        job = post(service).job
        assert service.apply(job.id, "ghost").failure.kind == FailureKind.NOT_FOUND

    def test_employer_cannot_apply(self, service, users, make_user):
        users.add(make_user("employer-2", user_type="employer"))
        job = post(service).job
        result = service.apply(job.id, "employer-2")
        assert result.failure.kind == FailureKind.AUTHORIZATION

    def test_failed_transition_sends_nothing(self, service, notifications):
        job = post(service).job
        service.apply(job.id, "worker-1")
        before = len(notifications.sent)

        result = service.apply(job.id, "worker-1")

        assert result.failure.kind == FailureKind.PRECONDITION_FAILED
        assert len(notifications.sent) == before

    def test_assign_scenario(self, service, storage):
        job = post(service).job
        service.apply(job.id, "worker-1")
        service.apply(job.id, "worker-2")

        result = service.assign(job.id, EMPLOYER, "worker-1")

        assert result.ok
        stored = storage.get_job(job.id)
        assert stored.assigned_to == "worker-1"
        assert {a.user_id: a.status for a in stored.applicants} == {
            "worker-1": "accepted",
            "worker-2": "rejected",
        }

    def test_cancel_application(self, service, storage):
        job = post(service).job
        service.apply(job.id, "worker-1")

        result = service.cancel_application(job.id, Actor("worker-1"))

        assert result.ok
        assert storage.get_job(job.id).applicants == []

    def test_reject_then_close(self, service):
        job = post(service).job
        service.apply(job.id, "worker-1")

        assert service.reject(job.id, EMPLOYER, "worker-1").job.status == "open"
        assert service.close(job.id, EMPLOYER).job.status == "closed"

    def test_set_applicant_status(self, service):
        job = post(service).job
        service.apply(job.id, "worker-1")

        result = service.set_applicant_status(job.id, EMPLOYER, "worker-1", "accepted")

        assert result.job.assigned_to == "worker-1"

    def test_delete(self, service, storage):
        job = post(service).job

        denied = service.delete(job.id, Actor("employer-2", "employer"))
        assert denied.failure.kind == FailureKind.AUTHORIZATION

        assert service.delete(job.id, EMPLOYER).ok
        assert storage.get_job(job.id) is None
        assert service.delete(job.id, EMPLOYER).failure.kind == FailureKind.NOT_FOUND


class TestConcurrency:
    """Optimistic version checks on job writes."""

    def test_concurrent_assign_conflicts(self, service, storage):
        """Two owners' requests read the same version; only one assignment lands."""
        job = post(service).job
        service.apply(job.id, "worker-1")
        service.apply(job.id, "worker-2")

        stale = storage.get_job(job.id)
        assert service.assign(job.id, EMPLOYER, "worker-1").ok

        # Replay the second request against the snapshot it read earlier
        second = lifecycle.assign(stale, EMPLOYER, "worker-2")
        assert second.ok
        outcome = service._commit(stale, second, "assigned")

        assert outcome.failure.kind == FailureKind.CONFLICT
        assert outcome.failure.status_code == 409
        assert storage.get_job(job.id).assigned_to == "worker-1"

    def test_conflicting_write_sends_no_notifications(self, service, storage, notifications):
        job = post(service).job
        service.apply(job.id, "worker-1")
        stale = storage.get_job(job.id)
        service.close(job.id, EMPLOYER)
        before = len(notifications.sent)

        outcome = service._commit(stale, lifecycle.assign(stale, EMPLOYER, "worker-1"), "assigned")

        assert outcome.failure.kind == FailureKind.CONFLICT
        assert len(notifications.sent) == before

    def test_in_memory_update_bumps_version(self, make_job):
        storage = InMemoryJobStorage()
        job = make_job()
        storage.save_job(job)

        updated, error = storage.update_job(job, expected_version=1)
        assert error is None
        assert updated.version == 2

        _, error = storage.update_job(job, expected_version=1)
        assert error == "conflict"

        _, error = storage.update_job(make_job(id="missing"), expected_version=1)
        assert error == "not_found"


class TestNotificationFailures:
    """A failing notification sink never aborts a committed transition."""

    def test_apply_succeeds_when_sink_fails(self, storage, users):
        sink = MagicMock()
        sink.send.side_effect = RuntimeError("sms gateway down")
        service = JobService(storage, users, sink)

        job = service.post_job(
            EMPLOYER, {"title": "Fix", "price": 100, "barangay": "A", "skills_required": ["Plumbing"]}
        ).job
        result = service.apply(job.id, "worker-1")

        assert result.ok
        assert storage.get_job(job.id).has_applicant("worker-1")
        assert sink.send.call_count >= 2


class TestListings:
    """Browse, search and per-user views."""

    def test_list_open_jobs_excludes_closed(self, service):
        keep = post(service).job
        gone = post(service).job
        service.close(gone.id, EMPLOYER)

        result = service.list_open_jobs()
        assert [j.id for j in result.jobs] == [keep.id]

    def test_naive_date_bounds_treated_as_utc(self, service, storage, make_job):
        storage.save_job(make_job(id="early", minutes=0))
        storage.save_job(make_job(id="late", minutes=120))

        result = service.list_open_jobs(
            start_date=datetime(2025, 3, 1, 9, 0), end_date=datetime(2025, 3, 1, 11, 0)
        )

        assert result.ok
        assert [j.id for j in result.jobs] == ["late"]

    def test_search_filters_and_pages(self, service):
        for price in (100, 200, 300, 400):
            post(service, price=price, skills_required=["Plumbing"])
        post(service, price=250, skills_required=["Welding"])

        result = service.search_jobs(
            skills=["Plumbing"], min_price=150, sort_by="price", descending=False, page=1, limit=2
        )

        assert result.total == 3
        assert [j.price for j in result.jobs] == [200, 300]

        page2 = service.search_jobs(
            skills=["Plumbing"], min_price=150, sort_by="price", descending=False, page=2, limit=2
        )
        assert [j.price for j in page2.jobs] == [400]

    def test_search_rejects_unknown_sort(self, service):
        result = service.search_jobs(sort_by="title")
        assert result.failure.kind == FailureKind.VALIDATION
        assert result.failure.fields == ["sort_by"]

    def test_popular_orders_by_applicant_count(self, service):
        quiet = post(service, title="Quiet").job
        busy = post(service, title="Busy").job
        service.apply(busy.id, "worker-1")
        service.apply(busy.id, "worker-2")
        service.apply(quiet.id, "worker-1")

        result = service.popular_jobs()
        assert [j.id for j in result.jobs][:2] == [busy.id, quiet.id]

    def test_per_user_views(self, service):
        applied = post(service, title="Applied").job
        post(service, title="Untouched")
        service.apply(applied.id, "worker-1")

        assert len(service.jobs_posted_by("employer-1").jobs) == 2
        assert [j.id for j in service.jobs_applied_by("worker-1").jobs] == [applied.id]
        assert [j.id for j in service.applications_received("employer-1").jobs] == [applied.id]


def test_clean_skills():
    assert clean_skills([" a", "a", "", "B "]) == ["a", "B"]
    assert clean_skills(None) == []
