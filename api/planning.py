from fastapi import APIRouter, Depends

from api.deps import get_services, respond
from docs.planning.projection import (
    candidates_description,
    daily_planning_description,
    monitor_description,
    operator_load_description,
    resync_description,
)
from planning.container import PlanningServices

router = APIRouter(prefix="/planning", tags=["Planning"])


@router.get(
    "/daily/{date}",
    response_model=dict,
    description=daily_planning_description,
    summary="Daily Planning",
)
def daily_planning(date: str, services: PlanningServices = Depends(get_services)):
    return respond(services.projection.daily_planning(date))


@router.get(
    "/operators/{operator_id}/load",
    response_model=dict,
    description=operator_load_description,
    summary="Operator Load",
)
def operator_load(operator_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.projection.operator_load(operator_id))


@router.get(
    "/sessions/{session_id}/candidates",
    response_model=dict,
    description=candidates_description,
    summary="Suggested Operators",
)
def candidates(session_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.matching.suggest_operators(session_id))


@router.get(
    "/sessions/{session_id}/fallback",
    response_model=dict,
    summary="Founder Fallback",
)
def founder_fallback(session_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.matching.founder_fallback(session_id))


@router.get(
    "/monitor",
    response_model=dict,
    description=monitor_description,
    summary="Projection Monitor",
)
def monitor(services: PlanningServices = Depends(get_services)):
    return services.projection.monitor()


@router.post(
    "/resync",
    response_model=dict,
    description=resync_description,
    summary="Resync Projection",
)
def resync(services: PlanningServices = Depends(get_services)):
    services.projection.resync()
    return services.projection.monitor()
