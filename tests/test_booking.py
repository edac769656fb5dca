"""Two-phase booking lifecycle."""

from core.models import SessionStatus


def _create(services, day="2025-01-10", **kwargs):
    params = dict(client_id="client-1", region_id="east", date=day)
    params.update(kwargs)
    return services.booking.create_booking(**params)


def test_create_booking_is_pending_without_setup(services, repo):
    result = _create(services, module_ids=["mod-small", "mod-large"], requested_participants=6)

    assert result["success"] is True
    assert result["status"] == "pending_confirmation"
    assert result["capacityMax"] == 8
    stored = repo.get_session(result["sessionId"])
    assert stored.status == SessionStatus.PENDING_CONFIRMATION
    assert stored.setup_ids == []
    assert stored.capacity_max == 8
    assert stored.requested_participants == 6


def test_default_capacity_without_modules(services):
    result = _create(services, module_ids=[])

    assert result["capacityMax"] == 20


def test_unknown_and_unlimited_modules_fall_back_to_default(services):
    result = _create(services, module_ids=["mod-open", "ghost"])

    assert result["capacityMax"] == 20


def test_capacity_exceeded(services, repo):
    result = _create(services, module_ids=["mod-small"], requested_participants=9)

    assert result["success"] is False
    assert result["error"] == "CAPACITY_EXCEEDED"
    assert result["capacityMax"] == 8
    assert repo.list_sessions() == []


def test_negative_participants_rejected(services):
    result = _create(services, requested_participants=-1)

    assert result["success"] is False
    assert result["error"] == "VALIDATION_FAILED"


def test_missing_fields_rejected(services):
    result = services.booking.create_booking(client_id="", region_id="east", date=None)

    assert result["success"] is False
    assert result["error"] == "VALIDATION_FAILED"
    assert set(result["missingFields"]) == {"clientId", "date"}


def test_no_availability_lists_alternatives(services, make_session):
    make_session("busy", "2025-01-10", setup_ids=["east-1", "east-2"])

    result = _create(services)

    assert result["success"] is False
    assert result["error"] == "NO_AVAILABILITY"
    assert result["availableAlternatives"][:2] == ["2025-01-06", "2025-01-07"]
    assert "2025-01-10" not in result["availableAlternatives"]
    assert len(result["availableAlternatives"]) == 5


def test_confirm_allocates_lowest_free_setup(services, repo, accept_on):
    first = _create(services)["sessionId"]
    second = _create(services)["sessionId"]
    accept_on(first, "op1")
    accept_on(second, "op1")

    one = services.booking.confirm_booking(first)
    two = services.booking.confirm_booking(second)

    assert one["success"] is True
    assert one["allocatedSetupId"] == "east-1"
    assert two["allocatedSetupId"] == "east-2"
    stored = repo.get_session(first)
    assert stored.status == SessionStatus.CONFIRMED
    assert stored.setup_ids == ["east-1"]
    assert stored.confirmed_at is not None


def test_confirm_requires_staffing(services, repo, accept_on):
    session_id = _create(services)["sessionId"]
    repo.update_session(session_id, {"min_operators": 2})
    accept_on(session_id, "op1")

    result = services.booking.confirm_booking(session_id)

    assert result["success"] is False
    assert result["error"] == "STAFFING_INVALID"
    assert result["reasons"] == ["NO_OPERATOR_ASSIGNED"]
    assert repo.get_session(session_id).status == SessionStatus.PENDING_CONFIRMATION


def test_confirm_twice_is_invalid_status(services, accept_on):
    session_id = _create(services)["sessionId"]
    accept_on(session_id, "op1")
    services.booking.confirm_booking(session_id)

    result = services.booking.confirm_booking(session_id)

    assert result["success"] is False
    assert result["error"] == "INVALID_STATUS"
    assert result["status"] == "confirmed"


def test_confirm_unknown_session(services):
    result = services.booking.confirm_booking("ghost")

    assert result["success"] is False
    assert result["error"] == "NOT_FOUND"


def test_confirm_when_setups_taken_meanwhile(services, repo, make_session, accept_on):
    session_id = _create(services)["sessionId"]
    accept_on(session_id, "op1")
    make_session("walk-in", "2025-01-10", setup_ids=["east-1", "east-2"])

    result = services.booking.confirm_booking(session_id)

    assert result["success"] is False
    assert result["error"] == "NO_SETUP_AVAILABLE"
    assert result["availableAlternatives"]
    stored = repo.get_session(session_id)
    assert stored.status == SessionStatus.PENDING_CONFIRMATION
    assert stored.setup_ids == []


def test_cancel_pending_deletes_session(services, repo):
    session_id = _create(services)["sessionId"]

    result = services.booking.cancel_pending_booking(session_id)

    assert result["success"] is True
    assert result["status"] == "cancelled"
    assert repo.get_session(session_id) is None


def test_cancel_missing_session_is_idempotent(services):
    result = services.booking.cancel_pending_booking("ghost")

    assert result["success"] is True
    assert result["alreadyDeleted"] is True


def test_cancel_confirmed_session_refused(services, repo, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])

    result = services.booking.cancel_pending_booking("s1")

    assert result["success"] is False
    assert result["error"] == "INVALID_STATUS"
    assert repo.get_session("s1") is not None


def test_booking_status_includes_setup_names(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-2"])

    result = services.booking.get_booking_status("s1")

    assert result["session"]["setups"] == [{"id": "east-2", "name": "East Two"}]
    assert result["session"]["status"] == "confirmed"


def test_check_availability_is_a_dry_run(services, repo):
    result = services.booking.check_availability(
        "east", "2025-01-10", module_ids=["mod-small"], participant_count=4
    )

    assert result["success"] is True
    assert result["isAvailable"] is True
    assert result["capacityMax"] == 8
    assert result["availableAlternatives"] == []
    assert repo.list_sessions() == []


def test_suggested_dates(services):
    result = services.booking.get_suggested_dates("east", count=2)

    assert result["dates"] == ["2025-01-06", "2025-01-07"]


def _race_during_setup_lookup(services, monkeypatch, rival_session_id):
    """Run a rival confirmation after the setup lookup but before the write."""
    lookup = services.availability.free_setup_ids
    rival = {}

    def lookup_then_rival(day, region_id):
        free = lookup(day, region_id)
        if not rival:
            rival["started"] = True
            rival["result"] = services.booking.confirm_booking(rival_session_id)
        return free

    monkeypatch.setattr(services.availability, "free_setup_ids", lookup_then_rival)
    return rival


def test_concurrent_confirmations_never_share_a_setup(services, repo, monkeypatch, accept_on):
    first = _create(services)["sessionId"]
    second = _create(services)["sessionId"]
    accept_on(first, "op1")
    accept_on(second, "op1")
    rival = _race_during_setup_lookup(services, monkeypatch, second)

    result = services.booking.confirm_booking(first)

    assert rival["result"]["success"] is True
    assert rival["result"]["allocatedSetupId"] == "east-1"
    assert result["success"] is False
    assert result["error"] == "NO_SETUP_AVAILABLE"
    assert result["availableAlternatives"]
    stored = repo.get_session(first)
    assert stored.status == SessionStatus.PENDING_CONFIRMATION
    assert stored.setup_ids == []


def test_concurrent_double_confirm_is_invalid_status(services, repo, monkeypatch, accept_on):
    session_id = _create(services)["sessionId"]
    accept_on(session_id, "op1")
    rival = _race_during_setup_lookup(services, monkeypatch, session_id)

    result = services.booking.confirm_booking(session_id)

    assert rival["result"]["success"] is True
    assert result["success"] is False
    assert result["error"] == "INVALID_STATUS"
    assert result["status"] == "confirmed"
    assert repo.get_session(session_id).setup_ids == ["east-1"]
