from fastapi import APIRouter, Depends, Query

from api.deps import get_services, respond
from docs.availability.queries import (
    availability_calendar_description,
    availability_day_description,
    availability_first_description,
    availability_next_description,
    capacity_analysis_description,
)
from planning.container import PlanningServices
from utils.constants import (
    CALENDAR_HORIZON_DAYS,
    FIRST_AVAILABLE_HORIZON_DAYS,
    MAX_SEARCH_HORIZON_DAYS,
    NEXT_AVAILABLE_HORIZON_DAYS,
    SUGGESTED_DATES_COUNT,
)

router = APIRouter(prefix="/availability", tags=["Availability"])


@router.get(
    "/{region_id}/next",
    response_model=dict,
    description=availability_next_description,
    summary="Next Available Dates",
)
def next_available(
    region_id: str,
    count: int = Query(SUGGESTED_DATES_COUNT, ge=1, le=MAX_SEARCH_HORIZON_DAYS),
    maxDaysSearch: int = Query(NEXT_AVAILABLE_HORIZON_DAYS, ge=1, le=MAX_SEARCH_HORIZON_DAYS),
    services: PlanningServices = Depends(get_services),
):
    return respond(services.availability.next_available_dates(region_id, count, maxDaysSearch))


@router.get(
    "/{region_id}/first",
    response_model=dict,
    description=availability_first_description,
    summary="First Available Date",
)
def first_available(
    region_id: str,
    daysAhead: int = Query(FIRST_AVAILABLE_HORIZON_DAYS, ge=1, le=MAX_SEARCH_HORIZON_DAYS),
    services: PlanningServices = Depends(get_services),
):
    return respond(services.availability.first_available_date(region_id, daysAhead))


@router.get(
    "/{region_id}/calendar",
    response_model=dict,
    description=availability_calendar_description,
    summary="Availability Calendar",
)
def calendar(
    region_id: str,
    daysAhead: int = Query(CALENDAR_HORIZON_DAYS, ge=1, le=MAX_SEARCH_HORIZON_DAYS),
    services: PlanningServices = Depends(get_services),
):
    return respond(services.availability.availability_calendar(region_id, daysAhead))


@router.get(
    "/{region_id}/capacity",
    response_model=dict,
    description=capacity_analysis_description,
    summary="Capacity Analysis",
)
def capacity(
    region_id: str,
    daysAhead: int = Query(CALENDAR_HORIZON_DAYS, ge=1, le=MAX_SEARCH_HORIZON_DAYS),
    services: PlanningServices = Depends(get_services),
):
    return respond(services.availability.capacity_analysis(region_id, daysAhead))


# declared last so the fixed sub-paths above win over `{date}`
@router.get(
    "/{region_id}/{date}",
    response_model=dict,
    description=availability_day_description,
    summary="Availability For A Day",
)
def availability_for_day(
    region_id: str, date: str, services: PlanningServices = Depends(get_services)
):
    return respond(services.availability.get_availability(date, region_id))
