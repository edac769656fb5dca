import logging
from typing import Any, Dict, List, Optional

from core.models import Application, ApplicationStatus, Session, SessionStatus
from exceptions.custom_errors import (
    AlreadyAcceptedError,
    AlreadyAppliedError,
    ApplicationNotFoundError,
    InvalidApplicationStatusError,
    InvalidSessionStatusError,
    MissingCollaboratorError,
    NotFoundError,
    SessionNotVisibleError,
)
from repository.base import PlanningRepository
from utils.date_utils import iso
from utils.results import as_result, success
from utils.validate import require_fields

logger = logging.getLogger(__name__)


def _open_positions(session: Session) -> int:
    return max(0, (session.capacity_max or 0) - len(session.operator_ids))


class MarketplaceEngine:
    """
    Operator application state machine, per (session, operator) pair:

        pending -> accepted
        pending -> rejected
        rejected -> pending     (re-application)

    An accepted operator has to be rejected explicitly before applying again.
    """

    def __init__(self, repository: PlanningRepository):
        if repository is None:
            raise MissingCollaboratorError("MarketplaceEngine requires a repository")
        self.repository = repository

    def _load_session(self, session_id: str) -> Session:
        session = self.repository.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found", sessionId=session_id)
        return session

    # ---- commands ----
    @as_result
    def apply(self, operator_id: str, session_id: str) -> Dict[str, Any]:
        require_fields(operatorId=operator_id, sessionId=session_id)
        context = {"operatorId": operator_id, "sessionId": session_id}

        if self.repository.get_operator(operator_id) is None:
            raise NotFoundError(f"Operator {operator_id} not found", **context)
        session = self._load_session(session_id)

        if session.status != SessionStatus.CONFIRMED:
            raise InvalidSessionStatusError(
                f"Session status is {session.status.value}, must be 'confirmed'", **context
            )
        if not session.marketplace_visible:
            raise SessionNotVisibleError("Session is not visible on marketplace", **context)

        existing = self.repository.get_application(session_id, operator_id)
        # accepted is reported before the generic non-rejected case
        if operator_id in session.operator_ids or (
            existing is not None and existing.status == ApplicationStatus.ACCEPTED
        ):
            raise AlreadyAcceptedError("Operator already assigned to this session", **context)
        if existing is not None and existing.status != ApplicationStatus.REJECTED:
            raise AlreadyAppliedError(
                f"Operator already applied with status: {existing.status.value}",
                applicationId=existing.id,
                **context,
            )

        application = self.repository.apply_to_session(session_id, operator_id)
        logger.info(f"Operator {operator_id} applied to session {session_id}")
        return success(
            applicationId=application.id,
            status=application.status.value,
            appliedAt=iso(application.applied_at),
            message=f"Application {application.id} submitted",
            **context,
        )

    @as_result
    def accept(self, operator_id: str, session_id: str) -> Dict[str, Any]:
        require_fields(operatorId=operator_id, sessionId=session_id)
        context = {"operatorId": operator_id, "sessionId": session_id}

        existing = self.repository.get_application(session_id, operator_id)
        if existing is None:
            raise ApplicationNotFoundError("No application found for this operator", **context)
        if existing.status != ApplicationStatus.PENDING:
            raise InvalidApplicationStatusError(
                f"Application status is {existing.status.value}, must be 'pending'", **context
            )

        application = self.repository.accept_operator(session_id, operator_id)
        if application is None:
            raise ApplicationNotFoundError("No application found for this operator", **context)
        logger.info(f"Operator {operator_id} accepted on session {session_id}")
        return success(
            applicationId=application.id,
            status=application.status.value,
            respondedAt=iso(application.responded_at),
            message=f"Operator {operator_id} accepted",
            **context,
        )

    @as_result
    def reject(self, operator_id: str, session_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        require_fields(operatorId=operator_id, sessionId=session_id)
        context = {"operatorId": operator_id, "sessionId": session_id}

        application = self.repository.reject_operator(session_id, operator_id, reason)
        if application is None:
            raise ApplicationNotFoundError("No application found for this operator", **context)
        logger.info(f"Operator {operator_id} rejected on session {session_id}")
        return success(
            applicationId=application.id,
            status=application.status.value,
            respondedAt=iso(application.responded_at),
            rejectionReason=application.rejection_reason,
            message=f"Operator {operator_id} rejected",
            **context,
        )

    # ---- queries ----
    @as_result
    def list_open_sessions(self, region_id: str) -> Dict[str, Any]:
        require_fields(regionId=region_id)
        sessions = [
            s
            for s in self.repository.list_sessions(region_id=region_id, status=SessionStatus.CONFIRMED)
            if s.marketplace_visible and s.setup_ids
        ]

        enriched = []
        for s in sessions:
            apps = self.repository.list_applications(session_id=s.id)
            enriched.append(
                {
                    "id": s.id,
                    "date": iso(s.date),
                    "regionId": s.region_id,
                    "moduleIds": list(s.module_ids),
                    "capacityMax": s.capacity_max,
                    "requestedParticipants": s.requested_participants,
                    "setupIds": list(s.setup_ids),
                    "status": s.status.value,
                    "createdAt": iso(s.created_at),
                    "openPositions": _open_positions(s),
                    "totalApplications": len(apps),
                    "pendingApplications": _count(apps, ApplicationStatus.PENDING),
                    "acceptedApplications": _count(apps, ApplicationStatus.ACCEPTED),
                    "rejectedApplications": _count(apps, ApplicationStatus.REJECTED),
                    "acceptedOperators": len(s.operator_ids),
                }
            )

        return success(
            regionId=region_id,
            sessions=enriched,
            count=len(enriched),
            summary={
                "totalSessions": len(enriched),
                "totalOpenPositions": sum(s["openPositions"] for s in enriched),
                "totalApplications": sum(s["totalApplications"] for s in enriched),
            },
        )

    @as_result
    def operator_applications(self, operator_id: str) -> Dict[str, Any]:
        require_fields(operatorId=operator_id)
        rows = []
        for app in self.repository.list_applications(operator_id=operator_id):
            session = self.repository.get_session(app.session_id)
            if session is None:
                continue
            rows.append(
                {
                    "applicationId": app.id,
                    "sessionId": session.id,
                    "sessionDate": iso(session.date),
                    "regionId": session.region_id,
                    "moduleIds": list(session.module_ids),
                    "capacityMax": session.capacity_max,
                    "setupIds": list(session.setup_ids),
                    "applicationStatus": app.status.value,
                    "appliedAt": iso(app.applied_at),
                    "respondedAt": iso(app.responded_at),
                    "rejectionReason": app.rejection_reason,
                }
            )
        rows.sort(key=lambda r: (r["sessionDate"], r["sessionId"]))

        return success(
            operatorId=operator_id,
            applications=rows,
            count=len(rows),
            summary={
                "total": len(rows),
                "pending": sum(1 for r in rows if r["applicationStatus"] == "pending"),
                "accepted": sum(1 for r in rows if r["applicationStatus"] == "accepted"),
                "rejected": sum(1 for r in rows if r["applicationStatus"] == "rejected"),
            },
        )

    @as_result
    def session_marketplace_details(self, session_id: str) -> Dict[str, Any]:
        require_fields(sessionId=session_id)
        session = self._load_session(session_id)
        apps = self.repository.list_applications(session_id=session_id)

        return success(
            sessionId=session_id,
            session={
                "id": session.id,
                "date": iso(session.date),
                "regionId": session.region_id,
                "moduleIds": list(session.module_ids),
                "capacityMax": session.capacity_max,
                "requestedParticipants": session.requested_participants,
                "setupIds": list(session.setup_ids),
                "status": session.status.value,
                "marketplaceVisible": session.marketplace_visible,
                "createdAt": iso(session.created_at),
            },
            operators={
                "acceptedCount": len(session.operator_ids),
                "acceptedIds": list(session.operator_ids),
                "openPositions": _open_positions(session),
            },
            applications={
                "total": len(apps),
                "pending": [
                    {
                        "applicationId": a.id,
                        "operatorId": a.operator_id,
                        "operatorName": a.operator_name,
                        "appliedAt": iso(a.applied_at),
                    }
                    for a in apps
                    if a.status == ApplicationStatus.PENDING
                ],
                "accepted": [
                    {
                        "applicationId": a.id,
                        "operatorId": a.operator_id,
                        "operatorName": a.operator_name,
                        "acceptedAt": iso(a.responded_at),
                    }
                    for a in apps
                    if a.status == ApplicationStatus.ACCEPTED
                ],
                "rejected": [
                    {
                        "applicationId": a.id,
                        "operatorId": a.operator_id,
                        "operatorName": a.operator_name,
                        "rejectionReason": a.rejection_reason,
                        "rejectedAt": iso(a.responded_at),
                    }
                    for a in apps
                    if a.status == ApplicationStatus.REJECTED
                ],
            },
        )


def _count(apps: List[Application], status: ApplicationStatus) -> int:
    return sum(1 for a in apps if a.status == status)
