"""Operator application state machine."""

from core.models import ApplicationStatus, SessionStatus


def test_apply_then_accept(services, repo, make_session):
    """Apply creates a pending application; accepting it staffs the session."""
    make_session("s1", "2025-01-10", setup_ids=["east-1"])

    applied = services.marketplace.apply("op1", "s1")
    assert applied["success"] is True
    assert applied["status"] == "pending"
    assert repo.get_session("s1").operator_ids == []

    accepted = services.marketplace.accept("op1", "s1")
    assert accepted["success"] is True
    assert accepted["status"] == "accepted"
    assert repo.get_session("s1").operator_ids == ["op1"]


def test_apply_requires_confirmed_session(services, make_session):
    make_session("s1", "2025-01-10", status=SessionStatus.PENDING_CONFIRMATION)

    result = services.marketplace.apply("op1", "s1")

    assert result["success"] is False
    assert result["error"] == "INVALID_SESSION_STATUS"


def test_apply_to_hidden_session(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"], visible=False)

    result = services.marketplace.apply("op1", "s1")

    assert result["success"] is False
    assert result["error"] == "SESSION_NOT_VISIBLE"


def test_apply_unknown_operator_or_session(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])

    assert services.marketplace.apply("ghost", "s1")["error"] == "NOT_FOUND"
    assert services.marketplace.apply("op1", "ghost")["error"] == "NOT_FOUND"


def test_apply_twice(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])
    services.marketplace.apply("op1", "s1")

    result = services.marketplace.apply("op1", "s1")

    assert result["success"] is False
    assert result["error"] == "ALREADY_APPLIED"


def test_apply_when_already_accepted_changes_nothing(services, repo, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])
    services.marketplace.apply("op1", "s1")
    services.marketplace.accept("op1", "s1")
    before = repo.get_application("s1", "op1")

    result = services.marketplace.apply("op1", "s1")

    assert result["success"] is False
    assert result["error"] == "ALREADY_ACCEPTED"
    after = repo.get_application("s1", "op1")
    assert after.status == ApplicationStatus.ACCEPTED
    assert after.id == before.id
    assert repo.get_session("s1").operator_ids == ["op1"]


def test_reject_then_reapply(services, repo, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])
    services.marketplace.apply("op1", "s1")
    services.marketplace.accept("op1", "s1")

    rejected = services.marketplace.reject("op1", "s1", reason="double booked")
    assert rejected["status"] == "rejected"
    assert rejected["rejectionReason"] == "double booked"
    assert repo.get_session("s1").operator_ids == []

    again = services.marketplace.apply("op1", "s1")
    assert again["success"] is True
    assert repo.get_application("s1", "op1").status == ApplicationStatus.PENDING
    assert len(repo.list_applications(session_id="s1")) == 1


def test_accept_requires_pending_application(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])

    missing = services.marketplace.accept("op1", "s1")
    assert missing["error"] == "APPLICATION_NOT_FOUND"

    services.marketplace.apply("op1", "s1")
    services.marketplace.reject("op1", "s1")
    result = services.marketplace.accept("op1", "s1")
    assert result["success"] is False
    assert result["error"] == "INVALID_APPLICATION_STATUS"


def test_reject_without_application(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])

    result = services.marketplace.reject("op1", "s1")

    assert result["success"] is False
    assert result["error"] == "APPLICATION_NOT_FOUND"


def test_list_open_sessions(services, make_session, make_operator):
    make_operator("op2")
    make_session("open", "2025-01-10", setup_ids=["east-1"], capacity_max=3)
    make_session("hidden", "2025-01-10", setup_ids=["east-2"], visible=False)
    make_session("pending", "2025-01-11", status=SessionStatus.PENDING_CONFIRMATION)
    make_session("no-setup", "2025-01-12")
    services.marketplace.apply("op1", "open")
    services.marketplace.accept("op1", "open")
    services.marketplace.apply("op2", "open")

    result = services.marketplace.list_open_sessions("east")

    assert [s["id"] for s in result["sessions"]] == ["open"]
    row = result["sessions"][0]
    assert row["openPositions"] == 2
    assert row["pendingApplications"] == 1
    assert row["acceptedApplications"] == 1
    assert result["summary"] == {
        "totalSessions": 1,
        "totalOpenPositions": 2,
        "totalApplications": 2,
    }


def test_operator_applications(services, make_session):
    make_session("s2", "2025-01-12", setup_ids=["east-1"])
    make_session("s1", "2025-01-10", setup_ids=["east-1"])
    services.marketplace.apply("op1", "s2")
    services.marketplace.apply("op1", "s1")
    services.marketplace.reject("op1", "s2")

    result = services.marketplace.operator_applications("op1")

    assert [r["sessionId"] for r in result["applications"]] == ["s1", "s2"]
    assert result["summary"] == {"total": 2, "pending": 1, "accepted": 0, "rejected": 1}


def test_session_marketplace_details(services, make_session, make_operator):
    make_operator("op2")
    make_session("s1", "2025-01-10", setup_ids=["east-1"])
    services.marketplace.apply("op1", "s1")
    services.marketplace.accept("op1", "s1")
    services.marketplace.apply("op2", "s1")

    result = services.marketplace.session_marketplace_details("s1")

    assert result["operators"]["acceptedIds"] == ["op1"]
    assert [a["operatorId"] for a in result["applications"]["pending"]] == ["op2"]
    assert result["applications"]["total"] == 2
