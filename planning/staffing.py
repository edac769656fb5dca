import logging
from typing import Any, Dict, Iterable, Optional

from core.constraint_manager import ConstraintManager
from core.hard_rules import StaffingContext, define_hard_rules
from core.models import ApplicationStatus
from exceptions.custom_errors import MissingCollaboratorError, NotFoundError
from repository.base import PlanningRepository
from utils.constants import DEFAULT_MIN_OPERATORS
from utils.results import as_result, success
from utils.validate import require_fields

logger = logging.getLogger(__name__)


def required_operators(session) -> int:
    value = getattr(session, "min_operators", None)
    return value if value is not None else DEFAULT_MIN_OPERATORS


def accepted_operator_ids(session, applications: Optional[Iterable] = None):
    """Distinct accepted operators; pending applications never count."""
    if applications is None:
        return list(dict.fromkeys(session.operator_ids))
    return list(
        dict.fromkeys(
            a.operator_id for a in applications if a.status == ApplicationStatus.ACCEPTED
        )
    )


class StaffingValidator:
    """
    The confirmation gate.

    `can_confirm` is a pure function of the session and its applications. It is
    the only place confirmation policy lives; the booking engine consults it
    and does not re-implement any of its rules.
    """

    def __init__(self, repository: PlanningRepository):
        if repository is None:
            raise MissingCollaboratorError("StaffingValidator requires a repository")
        self.repository = repository
        self._rules = define_hard_rules()

    def _manager(self, allocating_setup: bool) -> ConstraintManager:
        cm = ConstraintManager()
        cm.add_rule("INVALID_STATUS", self._rules["INVALID_STATUS"])
        # the confirmation step itself assigns the setup
        cm.add_rule(
            "NO_SETUP_ASSIGNED",
            self._rules["NO_SETUP_ASSIGNED"],
            condition=not allocating_setup,
        )
        cm.add_rule("NO_OPERATOR_ASSIGNED", self._rules["NO_OPERATOR_ASSIGNED"])
        return cm

    def can_confirm(
        self, session, applications: Optional[Iterable] = None, allocating_setup: bool = False
    ) -> Dict[str, Any]:
        """
        Decide whether `session` may move to confirmed.

        Args:
            session: A `Session` or projection `SessionView`.
            applications: The session's applications. When omitted, the
                session's accepted `operator_ids` are used.
            allocating_setup: Skip the setup rule because the caller is about
                to assign one as part of the same transition.

        Returns:
            {success, sessionId, canConfirm, reasons, details}
        """
        applications = list(applications) if applications is not None else None
        assigned = accepted_operator_ids(session, applications)
        ctx = StaffingContext(
            status=session.status,
            setup_count=len(session.setup_ids),
            required_operators=required_operators(session),
            assigned_operators=len(assigned),
        )
        failures = self._manager(allocating_setup).failed(ctx)
        pending = (
            sum(1 for a in applications if a.status == ApplicationStatus.PENDING)
            if applications is not None
            else 0
        )
        return success(
            sessionId=session.id,
            canConfirm=not failures,
            reasons=[code for code, _ in failures],
            details={
                "status": session.status.value,
                "setups": ctx.setup_count,
                "operators": ctx.assigned_operators,
                "operatorsRequired": ctx.required_operators,
                "pendingApplications": pending,
                "messages": [message for _, message in failures],
            },
        )

    def validate_staffing(self, session, applications: Optional[Iterable] = None) -> Dict[str, Any]:
        required = required_operators(session)
        assigned = len(accepted_operator_ids(session, applications))
        missing = max(0, required - assigned)
        return success(
            sessionId=session.id,
            isValid=missing == 0,
            requiredOperators=required,
            assignedOperators=assigned,
            missingOperators=missing,
        )

    def staffing_status(self, session, applications: Iterable) -> Dict[str, Any]:
        applications = list(applications)
        assigned = accepted_operator_ids(session, applications)
        required = required_operators(session)
        capacity_max = session.capacity_max or 0
        open_positions = max(0, capacity_max - len(assigned))
        return success(
            sessionId=session.id,
            staffing={
                "requiredOperators": required,
                "assignedOperators": len(assigned),
                "openPositions": open_positions,
                "isFull": len(assigned) >= capacity_max,
                "isStaffed": len(assigned) >= required,
            },
            applications={
                "pending": sum(1 for a in applications if a.status == ApplicationStatus.PENDING),
                "accepted": sum(1 for a in applications if a.status == ApplicationStatus.ACCEPTED),
                "rejected": sum(1 for a in applications if a.status == ApplicationStatus.REJECTED),
                "total": len(applications),
            },
            operators={"assignedIds": assigned, "count": len(assigned)},
            capacity={"max": capacity_max, "used": len(assigned), "available": open_positions},
        )

    # ---- id-based wrappers, loading through the repository ----
    def _load(self, session_id: str):
        require_fields(sessionId=session_id)
        session = self.repository.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found", sessionId=session_id)
        return session, self.repository.list_applications(session_id=session_id)

    @as_result
    def can_confirm_session(self, session_id: str) -> Dict[str, Any]:
        session, applications = self._load(session_id)
        return self.can_confirm(session, applications)

    @as_result
    def validate_session_staffing(self, session_id: str) -> Dict[str, Any]:
        session, applications = self._load(session_id)
        return self.validate_staffing(session, applications)

    @as_result
    def session_staffing_status(self, session_id: str) -> Dict[str, Any]:
        session, applications = self._load(session_id)
        return self.staffing_status(session, applications)

    @as_result
    def pending_applications(self, session_id: str) -> Dict[str, Any]:
        self._load(session_id)
        pending = self.repository.get_pending_applications(session_id)
        return success(
            sessionId=session_id,
            hasPending=bool(pending),
            pendingCount=len(pending),
            pendingApplications=[
                {
                    "applicationId": a.id,
                    "operatorId": a.operator_id,
                    "operatorName": a.operator_name,
                    "appliedAt": a.applied_at.isoformat() if a.applied_at else None,
                }
                for a in pending
            ],
        )
