from fastapi import APIRouter, Depends

from api.deps import get_services, respond
from docs.marketplace.applications import (
    accept_description,
    apply_description,
    open_sessions_description,
    operator_applications_description,
    reject_description,
    session_details_description,
)
from planning.container import PlanningServices
from schemas.marketplace.applications import ApplicationRequest, RejectionRequest

router = APIRouter(prefix="/marketplace", tags=["Marketplace"])


@router.post(
    "/sessions/{session_id}/apply",
    response_model=dict,
    description=apply_description,
    summary="Apply To Session",
)
def apply(
    session_id: str,
    request: ApplicationRequest,
    services: PlanningServices = Depends(get_services),
):
    return respond(services.marketplace.apply(request.operatorId, session_id))


@router.post(
    "/sessions/{session_id}/accept",
    response_model=dict,
    description=accept_description,
    summary="Accept Operator",
)
def accept(
    session_id: str,
    request: ApplicationRequest,
    services: PlanningServices = Depends(get_services),
):
    return respond(services.marketplace.accept(request.operatorId, session_id))


@router.post(
    "/sessions/{session_id}/reject",
    response_model=dict,
    description=reject_description,
    summary="Reject Operator",
)
def reject(
    session_id: str,
    request: RejectionRequest,
    services: PlanningServices = Depends(get_services),
):
    return respond(services.marketplace.reject(request.operatorId, session_id, request.reason))


@router.get(
    "/sessions/{session_id}",
    response_model=dict,
    description=session_details_description,
    summary="Session Marketplace Details",
)
def session_details(session_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.marketplace.session_marketplace_details(session_id))


@router.get(
    "/operators/{operator_id}/applications",
    response_model=dict,
    description=operator_applications_description,
    summary="Operator Applications",
)
def operator_applications(operator_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.marketplace.operator_applications(operator_id))


@router.get(
    "/{region_id}/open",
    response_model=dict,
    description=open_sessions_description,
    summary="Open Marketplace Sessions",
)
def open_sessions(region_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.marketplace.list_open_sessions(region_id))
