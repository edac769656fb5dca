import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from core.models import Session, SessionStatus
from exceptions.custom_errors import (
    InvalidStatusError,
    MissingCollaboratorError,
    NoAvailabilityError,
    NoSetupAvailableError,
    NotFoundError,
    StaffingInvalidError,
    WriteConflictError,
)
from planning.availability import AvailabilityEngine
from planning.capacity import ModuleCapacityService
from planning.staffing import StaffingValidator
from repository.base import PlanningRepository
from utils.constants import SUGGESTED_DATES_COUNT
from utils.date_utils import system_clock
from utils.normalize import session_to_record
from utils.results import as_result, success
from utils.validate import parse_day, require_fields

logger = logging.getLogger(__name__)


class BookingEngine:
    """
    Two-phase session lifecycle: a client requests a date, then the session is
    confirmed once staffed, which is when a setup gets allocated.

        pending_confirmation -> confirmed
        pending_confirmation -> (deleted)

    Confirmed sessions are never cancelled through this engine.
    """

    def __init__(
        self,
        repository: PlanningRepository,
        availability: AvailabilityEngine,
        staffing: StaffingValidator,
        capacity: ModuleCapacityService,
        clock: Callable[[], datetime] = system_clock,
    ):
        for name, collaborator in (
            ("repository", repository),
            ("availability engine", availability),
            ("staffing validator", staffing),
            ("capacity service", capacity),
        ):
            if collaborator is None:
                raise MissingCollaboratorError(f"BookingEngine requires a {name}")
        self.repository = repository
        self.availability = availability
        self.staffing = staffing
        self.capacity = capacity
        self.clock = clock

    def _load(self, session_id: str) -> Session:
        require_fields(sessionId=session_id)
        session = self.repository.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found", sessionId=session_id)
        return session

    def _alternatives(self, region_id: str) -> List[str]:
        return self.availability.suggest_dates(region_id, SUGGESTED_DATES_COUNT)

    @as_result
    def create_booking(
        self,
        client_id: str,
        region_id: str,
        date,
        module_ids: Optional[List[str]] = None,
        requested_participants: int = 0,
        offer_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        require_fields(clientId=client_id, regionId=region_id, date=date)
        day = parse_day(date)

        capacity = self.capacity.validate_participant_count(module_ids, requested_participants)

        if not self.availability.is_date_available(day, region_id, 1):
            raise NoAvailabilityError(
                f"No setups available on {day.isoformat()} in {region_id}",
                date=day.isoformat(),
                regionId=region_id,
                availableAlternatives=self._alternatives(region_id),
            )

        session = self.repository.create_session(
            Session(
                id="",
                client_id=client_id,
                region_id=region_id,
                date=day,
                status=SessionStatus.PENDING_CONFIRMATION,
                setup_ids=[],
                module_ids=list(module_ids or []),
                requested_participants=capacity["participantCount"],
                capacity_max=capacity["capacityMax"],
                offer_id=offer_id,
                created_at=self.clock(),
            )
        )
        logger.info(f"Session {session.id} created for {client_id} on {day} ({region_id})")
        return success(
            sessionId=session.id,
            session=session_to_record(session),
            status=session.status.value,
            capacityMax=capacity["capacityMax"],
            message=f"Session {session.id} created - awaiting confirmation",
        )

    @as_result
    def confirm_booking(self, session_id: str) -> Dict[str, Any]:
        session = self._load(session_id)

        if session.status != SessionStatus.PENDING_CONFIRMATION:
            raise InvalidStatusError(
                f"Session status is {session.status.value}, expected 'pending_confirmation'",
                sessionId=session_id,
                status=session.status.value,
            )

        applications = self.repository.list_applications(session_id=session_id)
        check = self.staffing.can_confirm(session, applications, allocating_setup=True)
        if not check["canConfirm"]:
            raise StaffingInvalidError(
                "Cannot confirm session: staffing requirements not met",
                sessionId=session_id,
                reasons=check["reasons"],
                staffingDetails=check["details"],
            )

        # availability is re-derived here, never reused from booking time
        free_ids = self.availability.free_setup_ids(session.date, session.region_id)
        if not self.availability.is_date_available(session.date, session.region_id, 1) or not free_ids:
            raise NoSetupAvailableError(
                f"No setups available on {session.date.isoformat()} in {session.region_id}",
                sessionId=session_id,
                availableAlternatives=self._alternatives(session.region_id),
            )

        setup_id = free_ids[0]
        try:
            updated = self.repository.update_session(
                session_id,
                {
                    "setup_ids": [setup_id],
                    "status": SessionStatus.CONFIRMED,
                    "confirmed_at": self.clock(),
                },
                expected={"status": SessionStatus.PENDING_CONFIRMATION},
            )
        except WriteConflictError as e:
            # another confirmation committed between the read above and this write
            logger.warning(f"Confirmation of {session_id} lost a race: {e}")
            if e.field == "status":
                raise InvalidStatusError(
                    f"Session status is {e.actual.value}, expected 'pending_confirmation'",
                    sessionId=session_id,
                    status=e.actual.value,
                )
            raise NoSetupAvailableError(
                f"Setup {setup_id} was allocated to another session",
                sessionId=session_id,
                availableAlternatives=self._alternatives(session.region_id),
            )
        if updated is None:
            raise NotFoundError(f"Session {session_id} not found", sessionId=session_id)

        logger.info(f"Session {session_id} confirmed with setup {setup_id}")
        return success(
            sessionId=session_id,
            allocatedSetupId=setup_id,
            session=session_to_record(updated),
            status=updated.status.value,
            message=f"Session {session_id} confirmed - setup {setup_id} allocated",
        )

    @as_result
    def cancel_pending_booking(self, session_id: str) -> Dict[str, Any]:
        require_fields(sessionId=session_id)
        session = self.repository.get_session(session_id)
        if session is None:
            return success(
                sessionId=session_id, alreadyDeleted=True, message="Session already deleted"
            )

        if session.status != SessionStatus.PENDING_CONFIRMATION:
            raise InvalidStatusError(
                f"Cannot cancel session with status '{session.status.value}'",
                sessionId=session_id,
                status=session.status.value,
            )

        self.repository.delete_session(session_id)
        logger.info(f"Pending booking {session_id} cancelled")
        return success(
            sessionId=session_id,
            status=SessionStatus.CANCELLED.value,
            message=f"Pending booking {session_id} cancelled",
        )

    @as_result
    def get_booking_status(self, session_id: str) -> Dict[str, Any]:
        session = self._load(session_id)
        setups = []
        for setup_id in session.setup_ids:
            setup = self.repository.get_setup(setup_id)
            setups.append({"id": setup_id, "name": setup.name if setup else None})
        record = session_to_record(session)
        record["setups"] = setups
        return success(sessionId=session_id, session=record)

    @as_result
    def check_availability(
        self,
        region_id: str,
        date,
        module_ids: Optional[List[str]] = None,
        participant_count: int = 0,
    ) -> Dict[str, Any]:
        """Dry run of `create_booking`: capacity and date checks, nothing written."""
        require_fields(regionId=region_id, date=date)
        day = parse_day(date)
        capacity = self.capacity.validate_participant_count(module_ids, participant_count)
        availability = self.availability.get_availability(day, region_id)
        is_available = availability["isAvailable"]
        return success(
            regionId=region_id,
            date=day.isoformat(),
            isAvailable=is_available,
            capacityMax=capacity["capacityMax"],
            participantCount=capacity["participantCount"],
            availableSetups=availability["availableSetups"],
            availableAlternatives=[] if is_available else self._alternatives(region_id),
        )

    @as_result
    def get_suggested_dates(self, region_id: str, count: int = SUGGESTED_DATES_COUNT) -> Dict[str, Any]:
        require_fields(regionId=region_id)
        dates = self.availability.suggest_dates(region_id, count)
        return success(regionId=region_id, count=len(dates), dates=dates)
