import logging
import threading
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from core.models import Application, ApplicationStatus, Operator, Session
from core.state import (
    ApplicationRecord,
    OperatorSnapshot,
    PlanningSnapshot,
    PlanningState,
    SessionView,
    SyncMonitor,
    application_recency,
    copy_operator,
    copy_view,
)
from exceptions.custom_errors import (
    MissingCollaboratorError,
    NotFoundError,
    ProjectionStateError,
    ValidationFailedError,
)
from repository.base import PlanningRepository
from repository.feed import ChangeEvent, ChangeFeed
from utils.date_utils import iso, system_clock
from utils.normalize import (
    application_from_record,
    operator_from_record,
    operator_to_record,
    session_from_record,
)
from utils.results import as_result, success
from utils.validate import parse_day, require_fields

logger = logging.getLogger(__name__)


def _is_older(application: Application, stored: ApplicationRecord) -> bool:
    incoming = application_recency(application.applied_at, application.responded_at)
    current = stored.recency
    if incoming is None or current is None:
        return False
    return incoming < current


def view_to_record(view: SessionView) -> Dict[str, Any]:
    return {
        "id": view.id,
        "clientId": view.client_id,
        "regionId": view.region_id,
        "date": iso(view.date),
        "status": view.status.value,
        "setupIds": list(view.setup_ids),
        "marketplaceVisible": view.marketplace_visible,
        "minOperators": view.min_operators,
        "capacityMax": view.capacity_max,
        "operatorIds": list(view.operator_ids),
        "staffingGap": view.staffing_gap,
        "operatorApplications": [
            {
                "operatorId": rec.operator_id,
                "status": rec.status.value,
                "appliedAt": iso(rec.applied_at),
                "respondedAt": iso(rec.responded_at),
                "rejectionReason": rec.rejection_reason,
            }
            for rec in view.applications.values()
        ],
    }


class StateProjection:
    """
    In-memory read model of the planning data, fed by a bulk load and then by
    change events.

    The projection is a cache and never authoritative. Event handlers are
    idempotent and compare against current values, so replaying an event for
    the same entity is harmless. If the projection drifts from the repository
    the only recovery is `resync()`; there is no partial repair.

    Mutations run one at a time under `_lock`. Readers take the lock just long
    enough to copy the bucket they need and compute outside it.
    """

    def __init__(
        self,
        repository: PlanningRepository,
        clock: Callable[[], datetime] = system_clock,
    ):
        if repository is None:
            raise MissingCollaboratorError("StateProjection requires a repository")
        self.repository = repository
        self.clock = clock
        self.state = PlanningState()
        self._monitor = SyncMonitor()
        self._lock = threading.RLock()
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ---- lifecycle ----
    def initialize(self) -> None:
        """Bulk load sessions, applications and operators from the repository."""
        with self._lock:
            self.state.clear()
            self._monitor.sync_status = "initializing"
            for operator in self.repository.list_operators():
                self._upsert_operator(operator)
            for session in self.repository.list_sessions():
                self._upsert_session(session)
            for application in self.repository.list_applications():
                self._upsert_application(application)
            self._refresh_totals()
            self._monitor.sync_status = "synced"
            self._monitor.last_update = self.clock()
        logger.info(
            f"Projection initialised: {self._monitor.total_sessions} sessions, "
            f"{self._monitor.total_assignments} assignments, "
            f"{self._monitor.total_operators} operators"
        )

    def resync(self) -> None:
        """Drop everything and rebuild from the repository."""
        logger.warning("Projection resync requested; rebuilding from repository")
        self.initialize()

    def attach(self, feed: ChangeFeed) -> None:
        if feed is None:
            raise MissingCollaboratorError("StateProjection.attach requires a change feed")
        self.detach()
        self._unsubscribe = feed.subscribe(self.apply_event)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # ---- event dispatch ----
    def apply_event(self, event: ChangeEvent) -> None:
        with self._lock:
            try:
                if event.entity_type == "session":
                    if event.event_type == "delete":
                        self._delete_session(event.payload)
                    else:
                        self._upsert_session(session_from_record(event.payload))
                elif event.entity_type == "application":
                    if event.event_type == "delete":
                        self._delete_application(application_from_record(event.payload))
                    else:
                        self._upsert_application(application_from_record(event.payload))
                elif event.entity_type == "operator":
                    if event.event_type == "delete":
                        self.state.operators_available.pop(str(event.payload.get("id")), None)
                    else:
                        self._upsert_operator(operator_from_record(event.payload))
            except (ValidationFailedError, ValueError) as e:
                self._monitor.dropped_events += 1
                logger.warning(
                    f"Dropped malformed {event.entity_type}/{event.event_type} event: {e}"
                )
                return
            self._monitor.update_count += 1
            self._monitor.last_update = self.clock()
            self._refresh_totals()

    # ---- mutation handlers (caller holds the lock) ----
    def _view(self, session_id: str) -> Optional[SessionView]:
        day = self.state.session_dates.get(session_id)
        if day is None:
            return None
        view = self.state.sessions_by_date.get(day, {}).get(session_id)
        if view is None:
            raise ProjectionStateError(
                f"Session {session_id} indexed on {day} but missing from its bucket"
            )
        return view

    def _upsert_session(self, session: Session) -> None:
        view = self._view(session.id)
        if view is None:
            view = SessionView(
                id=session.id,
                client_id=session.client_id,
                region_id=session.region_id,
                date=session.date,
                status=session.status,
                setup_ids=list(session.setup_ids),
                marketplace_visible=session.marketplace_visible,
                min_operators=session.min_operators,
                capacity_max=session.capacity_max,
            )
            self.state.sessions_by_date.setdefault(session.date, {})[session.id] = view
            self.state.session_dates[session.id] = session.date
            old_setups = []
        else:
            if view.date != session.date:
                logger.warning(
                    f"Session {session.id} date changed {view.date} -> {session.date}; "
                    "ignored until resync"
                )
            old_setups = list(view.setup_ids)
            # accepted operators belong to application events
            view.status = session.status
            view.marketplace_visible = session.marketplace_visible
            view.setup_ids = list(session.setup_ids)

        for setup_id in set(old_setups) | set(view.setup_ids):
            self._sync_setup_mark(setup_id, view.date)

    def _delete_session(self, payload: Dict[str, Any]) -> None:
        session_id = str(payload.get("id"))
        view = self._view(session_id)
        if view is None:
            return
        day = view.date
        bucket = self.state.sessions_by_date[day]
        del bucket[session_id]
        del self.state.session_dates[session_id]
        if not bucket:
            del self.state.sessions_by_date[day]

        for setup_id in view.setup_ids:
            self._sync_setup_mark(setup_id, day)
        for operator_id in view.operator_ids:
            self._sync_operator_mark(operator_id, day)

    def _upsert_application(self, application: Application) -> None:
        view = self._view(application.session_id)
        if view is None:
            self._monitor.dropped_events += 1
            logger.warning(
                f"Application for unknown session {application.session_id} dropped"
            )
            return

        op_id = application.operator_id
        stored = view.applications.get(op_id)
        if stored is not None and _is_older(application, stored):
            logger.debug(
                f"Stale application event for {op_id} on {application.session_id} ignored"
            )
            return

        was_accepted = op_id in view.operator_ids
        is_accepted = application.status == ApplicationStatus.ACCEPTED
        if is_accepted and not was_accepted:
            view.operator_ids.append(op_id)
            self._sync_operator_mark(op_id, view.date)
        elif was_accepted and not is_accepted:
            view.operator_ids.remove(op_id)
            self._sync_operator_mark(op_id, view.date)

        view.applications[op_id] = ApplicationRecord(
            operator_id=op_id,
            status=application.status,
            applied_at=application.applied_at,
            responded_at=application.responded_at,
            rejection_reason=application.rejection_reason,
            application_id=application.id,
        )

    def _delete_application(self, application: Application) -> None:
        view = self._view(application.session_id)
        if view is None:
            return
        op_id = application.operator_id
        stored = view.applications.get(op_id)
        replaced = (
            stored is not None
            and application.id is not None
            and stored.application_id not in (None, application.id)
        )
        if replaced:
            # a re-application already superseded the deleted one
            return
        view.applications.pop(op_id, None)
        if op_id in view.operator_ids:
            view.operator_ids.remove(op_id)
            self._sync_operator_mark(op_id, view.date)

    def _upsert_operator(self, operator: Operator) -> None:
        self.state.operators_available[operator.id] = OperatorSnapshot(
            id=operator.id,
            name=operator.name,
            email=operator.email,
            region_id=operator.region_id,
            active=operator.active,
            unavailable_dates=set(operator.unavailable_dates),
            available_dates=set(operator.available_dates),
        )

    def _sync_operator_mark(self, operator_id: str, day: date) -> None:
        bucket = self.state.sessions_by_date.get(day, {})
        held = any(operator_id in v.operator_ids for v in bucket.values())
        _set_mark(
            self.state.operators_busy, self.state.busy_operators_by_date, operator_id, day, held
        )

    def _sync_setup_mark(self, setup_id: str, day: date) -> None:
        bucket = self.state.sessions_by_date.get(day, {})
        held = any(v.holds_setups and setup_id in v.setup_ids for v in bucket.values())
        _set_mark(self.state.setups_busy, self.state.busy_setups_by_date, setup_id, day, held)

    def _refresh_totals(self) -> None:
        self._monitor.total_sessions = len(self.state.session_dates)
        self._monitor.total_assignments = sum(
            len(v.operator_ids)
            for bucket in self.state.sessions_by_date.values()
            for v in bucket.values()
        )
        self._monitor.total_operators = len(self.state.operators_available)

    # ---- raw read accessors (copies) ----
    def find_session(self, session_id: str) -> Optional[SessionView]:
        with self._lock:
            view = self._view(session_id)
            return copy_view(view) if view is not None else None

    def sessions_on(self, day: date) -> List[SessionView]:
        with self._lock:
            return [copy_view(v) for v in self.state.sessions_by_date.get(day, {}).values()]

    def iter_sessions(self) -> List[SessionView]:
        with self._lock:
            return [
                copy_view(v)
                for day in sorted(self.state.sessions_by_date)
                for v in self.state.sessions_by_date[day].values()
            ]

    def operator(self, operator_id: str) -> Optional[OperatorSnapshot]:
        with self._lock:
            op = self.state.operators_available.get(operator_id)
            return copy_operator(op) if op is not None else None

    def operators(self) -> List[OperatorSnapshot]:
        with self._lock:
            return [copy_operator(o) for o in self.state.operators_available.values()]

    def busy_dates(self, operator_id: str) -> List[date]:
        with self._lock:
            return sorted(self.state.operators_busy.get(operator_id, ()))

    def snapshot(self) -> PlanningSnapshot:
        with self._lock:
            return PlanningSnapshot.from_state(self.state)

    # ---- query surface ----
    def is_setup_available(self, setup_id: str, date) -> bool:
        day = parse_day(date)
        with self._lock:
            return day not in self.state.setups_busy.get(setup_id, ())

    @as_result
    def daily_planning(self, date) -> Dict[str, Any]:
        day = parse_day(date)
        with self._lock:
            views = [copy_view(v) for v in self.state.sessions_by_date.get(day, {}).values()]
            operators_busy = sorted(self.state.busy_operators_by_date.get(day, ()))
            setups_busy = sorted(self.state.busy_setups_by_date.get(day, ()))
        return success(
            date=day.isoformat(),
            sessions=[view_to_record(v) for v in sorted(views, key=lambda v: v.id)],
            operatorsBusy=operators_busy,
            setupsBusy=setups_busy,
        )

    @as_result
    def operator_load(self, operator_id: str) -> Dict[str, Any]:
        require_fields(operatorId=operator_id)
        with self._lock:
            days = sorted(self.state.operators_busy.get(operator_id, ()))
            views = [
                copy_view(v)
                for day in days
                for v in self.state.sessions_by_date.get(day, {}).values()
                if operator_id in v.operator_ids
            ]
        views.sort(key=lambda v: (v.date, v.id))
        return success(
            operatorId=operator_id,
            sessions=[view_to_record(v) for v in views],
            count=len(views),
        )

    @as_result
    def available_operators_for_session(self, session_id: str) -> Dict[str, Any]:
        require_fields(sessionId=session_id)
        with self._lock:
            view = self._view(session_id)
            if view is None:
                raise NotFoundError(f"Session {session_id} not in planning", sessionId=session_id)
            view = copy_view(view)
            roster = [copy_operator(o) for o in self.state.operators_available.values()]
            busy = {o.id: sorted(self.state.operators_busy.get(o.id, ())) for o in roster}

        available = []
        for op in sorted(roster, key=lambda o: o.id):
            if op.id in view.operator_ids or op.id in view.applications:
                continue
            if not op.is_available_on(view.date):
                continue
            record = operator_to_record(op)
            record["busyDates"] = [d.isoformat() for d in busy[op.id]]
            available.append(record)

        return success(sessionId=session_id, operators=available, count=len(available))

    @as_result
    def session_applications(self, session_id: str) -> Dict[str, Any]:
        require_fields(sessionId=session_id)
        with self._lock:
            view = self._view(session_id)
            if view is None:
                raise NotFoundError(f"Session {session_id} not in planning", sessionId=session_id)
            view = copy_view(view)
            roster = {
                op_id: copy_operator(self.state.operators_available[op_id])
                for op_id in view.applications
                if op_id in self.state.operators_available
            }

        rows = []
        for op_id, rec in view.applications.items():
            op = roster.get(op_id)
            row = operator_to_record(op) if op is not None else {"id": op_id}
            row.update(
                {
                    "applicationStatus": rec.status.value,
                    "appliedAt": iso(rec.applied_at),
                    "respondedAt": iso(rec.responded_at),
                    "rejectionReason": rec.rejection_reason,
                }
            )
            rows.append(row)

        return success(sessionId=session_id, applications=rows, count=len(rows))

    def monitor(self) -> Dict[str, Any]:
        with self._lock:
            m = self._monitor
            return success(
                syncStatus=m.sync_status,
                totalSessions=m.total_sessions,
                totalAssignments=m.total_assignments,
                totalOperators=m.total_operators,
                updateCount=m.update_count,
                droppedEvents=m.dropped_events,
                lastUpdate=iso(m.last_update),
                datesCovered=len(self.state.sessions_by_date),
                operatorsInSystem=len(self.state.operators_available),
            )


def _set_mark(forward, inverse, key: str, day: date, held: bool) -> None:
    """Keep `forward[key]` and `inverse[day]` in step."""
    if held:
        forward.setdefault(key, set()).add(day)
        inverse.setdefault(day, set()).add(key)
        return
    days = forward.get(key)
    if days is not None:
        days.discard(day)
        if not days:
            del forward[key]
    keys = inverse.get(day)
    if keys is not None:
        keys.discard(key)
        if not keys:
            del inverse[day]
