from fastapi import APIRouter, Depends

from api.deps import get_services, respond
from docs.risk.staffing import (
    operator_overload_description,
    risk_sessions_description,
    session_risk_description,
    understaffed_description,
)
from planning.container import PlanningServices

router = APIRouter(prefix="/risk", tags=["Staffing Risk"])


@router.get(
    "/sessions",
    response_model=dict,
    description=risk_sessions_description,
    summary="Sessions At Risk",
)
def risk_sessions(services: PlanningServices = Depends(get_services)):
    return respond(services.risk.risk_sessions())


@router.get(
    "/sessions/{session_id}",
    response_model=dict,
    description=session_risk_description,
    summary="Session Risk",
)
def session_risk(session_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.risk.session_risk(session_id))


@router.get(
    "/operators/{operator_id}/overload",
    response_model=dict,
    description=operator_overload_description,
    summary="Operator Overload",
)
def operator_overload(operator_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.risk.operator_overload(operator_id))


@router.get(
    "/understaffed",
    response_model=dict,
    description=understaffed_description,
    summary="Understaffed Sessions",
)
def understaffed(services: PlanningServices = Depends(get_services)):
    return respond(services.risk.understaffed_sessions())
