"""In-memory repository: conditional session writes and the shared clock."""

from datetime import date, datetime

import pytest

from core.models import Session, SessionStatus
from exceptions.custom_errors import WriteConflictError
from planning.container import build_services
from repository.memory import InMemoryRepository

STAMP = datetime(2030, 3, 4, 12, 0, 0)


def test_update_refused_when_expected_status_changed(repo, make_session):
    make_session("s1", "2025-01-10", status=SessionStatus.CONFIRMED, setup_ids=["east-1"])

    with pytest.raises(WriteConflictError) as excinfo:
        repo.update_session(
            "s1",
            {"min_operators": 3},
            expected={"status": SessionStatus.PENDING_CONFIRMATION},
        )

    assert excinfo.value.field == "status"
    assert excinfo.value.actual == SessionStatus.CONFIRMED
    assert repo.get_session("s1").min_operators == 1


def test_update_refused_when_setup_held_on_same_day(repo, make_session):
    make_session("held", "2025-01-10", setup_ids=["east-1"])
    make_session("s1", "2025-01-10", status=SessionStatus.PENDING_CONFIRMATION)

    with pytest.raises(WriteConflictError) as excinfo:
        repo.update_session("s1", {"setup_ids": ["east-1"], "status": SessionStatus.CONFIRMED})

    assert excinfo.value.field == "setup_ids"
    assert excinfo.value.actual == ["east-1"]
    assert repo.get_session("s1").setup_ids == []


@pytest.mark.parametrize(
    "other_day, other_status",
    [
        ("2025-01-11", SessionStatus.CONFIRMED),
        ("2025-01-10", SessionStatus.CANCELLED),
    ],
)
def test_setup_free_on_other_days_or_after_cancellation(repo, make_session, other_day, other_status):
    make_session("other", other_day, status=other_status, setup_ids=["east-1"])
    make_session("s1", "2025-01-10", status=SessionStatus.PENDING_CONFIRMATION)

    updated = repo.update_session("s1", {"setup_ids": ["east-1"]})

    assert updated.setup_ids == ["east-1"]


def test_rejected_write_publishes_nothing(repo, make_session):
    make_session("held", "2025-01-10", setup_ids=["east-1"])
    make_session("s1", "2025-01-10", status=SessionStatus.PENDING_CONFIRMATION)
    seen = []
    repo.feed.subscribe(seen.append)

    with pytest.raises(WriteConflictError):
        repo.update_session("s1", {"setup_ids": ["east-1"]})

    assert seen == []


def _pending(session_id="s1"):
    return Session(
        id=session_id,
        client_id="client-1",
        region_id="east",
        date=date(2030, 3, 10),
        status=SessionStatus.PENDING_CONFIRMATION,
    )


def test_injected_clock_stamps_repository_writes():
    repo = InMemoryRepository()

    services = build_services(repo, lambda: STAMP)
    created = repo.create_session(_pending())
    applied = repo.apply_to_session("s1", "op1")

    assert created.created_at == STAMP
    assert applied.applied_at == STAMP
    assert services.availability.clock() == STAMP


def test_engines_follow_repository_clock_when_none_injected():
    repo = InMemoryRepository(clock=lambda: STAMP)

    services = build_services(repo)

    assert services.booking.clock is repo.clock
    assert services.risk.clock is repo.clock


def test_build_services_without_repository_uses_given_clock():
    services = build_services(clock=lambda: STAMP)

    assert services.repository.create_session(_pending()).created_at == STAMP
