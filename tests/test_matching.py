"""Candidate scoring and founder fallback."""

from datetime import date

from core.models import SessionStatus
from planning.matching import FALLBACK_ACTIONS

DAY = date(2025, 1, 10)


def test_scores_rank_region_and_availability(services, make_session, make_operator):
    make_operator("op2", unavailable=["2025-01-10"])
    make_operator("op3", region_id="west")
    make_session("s1", DAY, setup_ids=["east-1"], min_operators=2)

    result = services.matching.suggest_operators("s1")

    assert [(c["operatorId"], c["score"]) for c in result["candidates"]] == [
        ("op1", 100),
        ("op2", 70),
        ("op3", 60),
    ]
    assert result["suggestedCount"] == 3
    assert result["founderFallbackRequired"] is False
    assert result["candidates"][1]["scoring"] == {
        "regionMatch": True,
        "available": False,
        "currentLoad": 0,
        "alreadyApplied": False,
    }


def test_same_day_load_lowers_score(services, make_session, accept_on):
    make_session("busy", DAY, setup_ids=["east-2"])
    accept_on("busy", "op1")
    make_session("s1", DAY, setup_ids=["east-1"])

    candidate = services.matching.suggest_operators("s1")["candidates"][0]

    assert candidate["score"] == 94
    assert candidate["scoring"]["currentLoad"] == 1


def test_load_component_never_negative(services, make_session, accept_on):
    for i in range(6):
        make_session(f"busy-{i}", DAY, region_id="north")
        accept_on(f"busy-{i}", "op1")
    make_session("s1", DAY, setup_ids=["east-1"])

    candidate = services.matching.suggest_operators("s1")["candidates"][0]

    assert candidate["score"] == 70


def test_busy_unavailable_operator_is_not_a_candidate(services, make_session, make_operator, accept_on):
    make_operator("op1", unavailable=["2025-01-10"])
    make_session("other", DAY, setup_ids=["east-2"])
    accept_on("other", "op1")
    make_session("s1", DAY, setup_ids=["east-1"])

    result = services.matching.suggest_operators("s1")

    assert result["candidates"] == []
    assert result["founderFallbackRequired"] is True


def test_applicants_are_flagged(services, make_session):
    make_session("s1", DAY, setup_ids=["east-1"])
    services.marketplace.apply("op1", "s1")

    candidate = services.matching.suggest_operators("s1")["candidates"][0]

    assert candidate["scoring"]["alreadyApplied"] is True


def test_sessions_needing_operators(services, make_session, accept_on):
    make_session("gap-2", "2025-01-12", setup_ids=["east-1"], min_operators=2)
    make_session("gap-1", "2025-01-10", setup_ids=["east-1"])
    make_session("staffed", "2025-01-11", setup_ids=["east-1"])
    make_session("no-setup", "2025-01-11", min_operators=3)
    make_session("pending", "2025-01-11", status=SessionStatus.PENDING_CONFIRMATION)
    accept_on("staffed", "op1")

    result = services.matching.sessions_needing_operators()

    assert [r["id"] for r in result["sessions"]] == ["gap-2", "gap-1"]
    assert result["sessions"][0]["staffingPercent"] == 0


def test_fallback_not_required_when_candidates_exist(services, make_session):
    make_session("s1", DAY, setup_ids=["east-1"])

    result = services.matching.founder_fallback("s1")

    assert result["required"] is False
    assert result["fallbackActions"] == []


def test_fallback_without_any_candidate(services, make_session, accept_on):
    make_session("s1", DAY, setup_ids=["east-1"], min_operators=2)
    accept_on("s1", "op1")

    result = services.matching.founder_fallback("s1")

    assert result["required"] is True
    assert result["reason"] == "NO_OPERATOR_AVAILABLE"
    assert result["fallbackActions"] == FALLBACK_ACTIONS


def test_fallback_without_qualified_candidate(services, make_session, make_operator):
    make_operator("op1", unavailable=["2025-01-10"])
    make_session("s1", DAY, setup_ids=["east-1"])

    result = services.matching.founder_fallback("s1")

    assert result["required"] is True
    assert result["reason"] == "NO_QUALIFIED_OPERATOR"


def test_unknown_session(services):
    assert services.matching.suggest_operators("ghost")["error"] == "NOT_FOUND"
    assert services.matching.founder_fallback(None)["error"] == "VALIDATION_FAILED"
