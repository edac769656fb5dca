"""Availability engine: bookable setups per (date, region)."""

import pytest

from core.models import SessionStatus
from utils.normalize import session_from_record


def test_scenario_two_setups_one_operator(services):
    """Two active setups but one operator: only one setup can be sold."""
    result = services.availability.get_availability("2025-01-10", "east")

    assert result["success"] is True
    assert result["totalSetups"] == 2
    assert result["usedSetups"] == 0
    assert result["freeSetups"] == 2
    assert result["operatorsAvailable"] == 1
    assert result["availableSetups"] == 1
    assert result["isAvailable"] is True


@pytest.mark.parametrize("day", ["2025-01-06", "2025-01-07", "2025-01-08", "2025-01-09"])
def test_available_is_min_of_free_and_operators(services, make_session, make_operator, day):
    make_operator("op2", unavailable=["2025-01-07"])
    make_operator("op3", available=["2025-01-08"])
    make_session("s1", "2025-01-08", setup_ids=["east-1"])
    make_session("s2", "2025-01-09", setup_ids=["east-1", "east-2"])

    result = services.availability.get_availability(day, "east")

    assert result["availableSetups"] == min(result["freeSetups"], result["operatorsAvailable"])
    assert result["availableSetups"] >= 0
    assert result["isAvailable"] == (result["availableSetups"] > 0)


def test_cancelled_sessions_release_their_setups(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"], status=SessionStatus.CANCELLED)
    make_session("s2", "2025-01-10", setup_ids=["east-2"])

    result = services.availability.get_availability("2025-01-10", "east")

    assert result["usedSetups"] == 1
    assert result["details"]["usedBy"] == [
        {"sessionId": "s2", "setupIds": ["east-2"], "status": "confirmed"}
    ]


def test_retired_setups_are_not_counted(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-0"])

    result = services.availability.get_availability("2025-01-10", "east")

    assert result["totalSetups"] == 2
    assert result["usedSetups"] == 0


def test_legacy_single_setup_field_counts_as_used(services, repo):
    repo.create_session(
        session_from_record(
            {
                "id": "legacy",
                "regionId": "east",
                "scheduledDate": "2025-01-10",
                "status": "confirmed",
                "setupId": "east-2",
            }
        )
    )

    result = services.availability.get_availability("2025-01-10", "east")

    assert result["usedSetups"] == 1
    assert result["freeSetups"] == 1


def test_unavailable_and_inactive_operators_are_excluded(services, make_operator):
    make_operator("op1", unavailable=["2025-01-10"])
    make_operator("op-off", active=False)

    result = services.availability.get_availability("2025-01-10", "east")

    assert result["operatorsAvailable"] == 0
    assert result["availableSetups"] == 0
    assert result["isAvailable"] is False


def test_whitelist_limits_operator_to_listed_dates(services, make_operator):
    make_operator("op1", available=["2025-01-11"])

    assert services.availability.get_availability("2025-01-10", "east")["operatorsAvailable"] == 0
    assert services.availability.get_availability("2025-01-11", "east")["operatorsAvailable"] == 1


def test_operators_busy_elsewhere_still_count(services, make_session, accept_on):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])
    accept_on("s1", "op1")

    result = services.availability.get_availability("2025-01-10", "east")

    assert result["operatorsAvailable"] == 1
    assert result["availableSetups"] == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"date": None, "region_id": "east"},
        {"date": "2025-01-10", "region_id": ""},
        {"date": "not-a-date", "region_id": "east"},
    ],
)
def test_invalid_input_is_a_validation_failure(services, kwargs):
    result = services.availability.get_availability(**kwargs)

    assert result["success"] is False
    assert result["error"] == "VALIDATION_FAILED"


def test_is_date_available_respects_required_count(services, make_operator):
    make_operator("op2")

    assert services.availability.is_date_available("2025-01-10", "east", 2) is True
    assert services.availability.is_date_available("2025-01-10", "east", 3) is False
    assert services.availability.is_date_available(None, "east") is False


def test_free_setup_ids_sorted_ascending(services, make_session):
    make_session("s1", "2025-01-10", setup_ids=["east-1"])

    assert services.availability.free_setup_ids("2025-01-10", "east") == ["east-2"]
    assert services.availability.free_setup_ids("2025-01-11", "east") == ["east-1", "east-2"]


def test_first_available_date_skips_full_days(services, make_session):
    make_session("s1", "2025-01-06", setup_ids=["east-1", "east-2"])

    result = services.availability.first_available_date("east")

    assert result["success"] is True
    assert result["firstAvailableDate"] == "2025-01-07"


def test_first_available_date_is_none_without_operators(services):
    result = services.availability.first_available_date("west", days_ahead=10)

    assert result["success"] is True
    assert result["firstAvailableDate"] is None


def test_next_available_dates(services, make_session):
    make_session("s1", "2025-01-07", setup_ids=["east-1", "east-2"])

    result = services.availability.next_available_dates("east", count=3)

    assert result["dates"] == ["2025-01-06", "2025-01-08", "2025-01-09"]
    assert result["count"] == 3


def test_availability_calendar(services, make_session):
    make_session("s1", "2025-01-06", setup_ids=["east-1", "east-2"])

    result = services.availability.availability_calendar("east", days_ahead=3)

    assert result["startDate"] == "2025-01-06"
    assert [d["date"] for d in result["days"]] == ["2025-01-06", "2025-01-07", "2025-01-08"]
    assert result["days"][0]["dayOfWeek"] == "Monday"
    assert result["days"][0]["isAvailable"] is False
    assert result["summary"] == {
        "totalDays": 3,
        "availableDays": 2,
        # 6 slots, 2 sellable
        "utilizationPercentage": 67,
    }


def test_capacity_analysis(services, make_session):
    make_session("s1", "2025-01-06", setup_ids=["east-1", "east-2"])

    result = services.availability.capacity_analysis("east", days_ahead=3)

    assert result["capacity"] == {"totalSetups": 2, "potentialSessionSlots": 6}
    assert result["utilization"]["bookedSessionSlots"] == 2
    assert result["utilization"]["peakDay"]["date"] == "2025-01-06"
    assert result["utilization"]["slowestDay"]["date"] == "2025-01-07"
    assert result["constraints"] == {
        "daysWithoutOperators": 0,
        "daysFullyBooked": 1,
        "daysPartiallyAvailable": 2,
    }


def test_capacity_analysis_requires_region(services):
    result = services.availability.capacity_analysis(None)

    assert result["success"] is False
    assert result["error"] == "VALIDATION_FAILED"


@pytest.mark.parametrize(
    "call",
    [
        lambda a: a.first_available_date("east", days_ahead=366),
        lambda a: a.next_available_dates("east", count=0),
        lambda a: a.next_available_dates("east", max_days_search=10_000),
        lambda a: a.availability_calendar("east", days_ahead=366),
        lambda a: a.capacity_analysis("east", days_ahead=-1),
    ],
)
def test_search_horizon_out_of_range_is_rejected(services, call):
    result = call(services.availability)

    assert result["success"] is False
    assert result["error"] == "VALIDATION_FAILED"


def test_search_horizon_upper_bound_is_inclusive(services):
    result = services.availability.first_available_date("east", days_ahead=365)

    assert result["success"] is True
    assert result["firstAvailableDate"] == "2025-01-06"
