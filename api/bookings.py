from fastapi import APIRouter, Depends

from api.deps import get_services, respond
from docs.booking.lifecycle import (
    booking_status_description,
    cancel_booking_description,
    check_availability_description,
    confirm_booking_description,
    create_booking_description,
    staffing_status_description,
)
from planning.container import PlanningServices
from schemas.booking.requests import CheckAvailabilityRequest, CreateBookingRequest
from utils.results import success

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "",
    response_model=dict,
    description=create_booking_description,
    summary="Create Booking",
)
def create_booking(
    request: CreateBookingRequest, services: PlanningServices = Depends(get_services)
):
    return respond(
        services.booking.create_booking(
            client_id=request.clientId,
            region_id=request.regionId,
            date=request.date,
            module_ids=request.moduleIds,
            requested_participants=request.requestedParticipants,
            offer_id=request.offerId,
        )
    )


@router.post(
    "/check",
    response_model=dict,
    description=check_availability_description,
    summary="Check Booking Availability",
)
def check_availability(
    request: CheckAvailabilityRequest, services: PlanningServices = Depends(get_services)
):
    return respond(
        services.booking.check_availability(
            region_id=request.regionId,
            date=request.date,
            module_ids=request.moduleIds,
            participant_count=request.participantCount,
        )
    )


@router.post(
    "/{session_id}/confirm",
    response_model=dict,
    description=confirm_booking_description,
    summary="Confirm Booking",
)
def confirm_booking(session_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.booking.confirm_booking(session_id))


@router.delete(
    "/{session_id}",
    response_model=dict,
    description=cancel_booking_description,
    summary="Cancel Pending Booking",
)
def cancel_booking(session_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.booking.cancel_pending_booking(session_id))


@router.get(
    "/{session_id}",
    response_model=dict,
    description=booking_status_description,
    summary="Booking Status",
)
def booking_status(session_id: str, services: PlanningServices = Depends(get_services)):
    return respond(services.booking.get_booking_status(session_id))


@router.get(
    "/{session_id}/staffing",
    response_model=dict,
    description=staffing_status_description,
    summary="Staffing Status",
)
def staffing_status(session_id: str, services: PlanningServices = Depends(get_services)):
    status = services.staffing.session_staffing_status(session_id)
    if not status["success"]:
        return respond(status)
    check = services.staffing.can_confirm_session(session_id)
    return success(
        **{k: v for k, v in status.items() if k != "success"},
        canConfirm=check["canConfirm"],
        reasons=check["reasons"],
    )
