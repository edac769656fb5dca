import copy
import logging
import threading
import uuid
from dataclasses import fields
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.models import (
    Application,
    ApplicationStatus,
    Module,
    Operator,
    Session,
    SessionStatus,
    Setup,
)
from exceptions.custom_errors import WriteConflictError
from repository.base import PlanningRepository
from repository.feed import ChangeEvent, ChangeFeed
from utils.date_utils import system_clock
from utils.normalize import application_to_record, operator_to_record, session_to_record

logger = logging.getLogger(__name__)

_SESSION_FIELDS = {f.name for f in fields(Session)}


class InMemoryRepository(PlanningRepository):
    """
    Reference repository kept entirely in process memory.

    Every committed mutation is published on `feed` after the store lock is
    released. Returned objects are copies; mutating them has no effect on the
    store.
    """

    def __init__(
        self,
        feed: Optional[ChangeFeed] = None,
        clock: Callable[[], datetime] = system_clock,
    ):
        self.feed = feed if feed is not None else ChangeFeed()
        self.clock = clock
        self._lock = threading.RLock()
        self._sessions: Dict[str, Session] = {}
        self._operators: Dict[str, Operator] = {}
        self._setups: Dict[str, Setup] = {}
        self._modules: Dict[str, Module] = {}
        self._applications: Dict[Tuple[str, str], Application] = {}

    # ---- seeding ----
    def add_setup(self, setup: Setup) -> Setup:
        with self._lock:
            self._setups[setup.id] = copy.deepcopy(setup)
        return setup

    def add_module(self, module: Module) -> Module:
        with self._lock:
            self._modules[module.id] = copy.deepcopy(module)
        return module

    def upsert_operator(self, operator: Operator) -> Operator:
        with self._lock:
            event_type = "update" if operator.id in self._operators else "insert"
            self._operators[operator.id] = copy.deepcopy(operator)
        self._publish("operator", event_type, operator_to_record(operator))
        return copy.deepcopy(operator)

    def add_application(self, application: Application) -> Application:
        """Store an application as-is, keeping `operator_ids` consistent with it."""
        with self._lock:
            stored = copy.deepcopy(application)
            if stored.id is None:
                stored.id = _new_id("app")
            key = (stored.session_id, stored.operator_id)
            event_type = "update" if key in self._applications else "insert"
            self._applications[key] = stored
            session = self._sessions.get(stored.session_id)
            if session is not None and stored.status == ApplicationStatus.ACCEPTED:
                if stored.operator_id not in session.operator_ids:
                    session.operator_ids.append(stored.operator_id)
        self._publish("application", event_type, application_to_record(stored))
        return copy.deepcopy(stored)

    # ---- sessions ----
    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(session_id)
            return copy.deepcopy(session) if session is not None else None

    def list_sessions(
        self,
        region_id: Optional[str] = None,
        date: Optional[date] = None,
        status: Optional[SessionStatus] = None,
    ) -> List[Session]:
        with self._lock:
            matches = [
                s
                for s in self._sessions.values()
                if (region_id is None or s.region_id == region_id)
                and (date is None or s.date == date)
                and (status is None or s.status == status)
            ]
            return sorted(
                (copy.deepcopy(s) for s in matches), key=lambda s: (s.date, s.id)
            )

    def create_session(self, session: Session) -> Session:
        with self._lock:
            stored = copy.deepcopy(session)
            if not stored.id:
                stored.id = _new_id("sess")
            if stored.created_at is None:
                stored.created_at = self.clock()
            self._sessions[stored.id] = stored
            record = session_to_record(stored)
        self._publish("session", "insert", record)
        return copy.deepcopy(stored)

    def update_session(
        self,
        session_id: str,
        patch: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> Optional[Session]:
        unknown = (set(patch) | set(expected or ())) - _SESSION_FIELDS
        if unknown:
            raise ValueError(f"Unknown session field(s): {', '.join(sorted(unknown))}")
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            for key, value in (expected or {}).items():
                actual = getattr(session, key)
                if actual != value:
                    raise WriteConflictError(
                        f"Session {session_id} {key} is {actual!r}, expected {value!r}",
                        field=key,
                        actual=actual,
                    )
            if "setup_ids" in patch:
                self._check_setups_free(session, patch)
            old = session_to_record(session)
            for key, value in patch.items():
                setattr(session, key, copy.deepcopy(value))
            record = session_to_record(session)
            updated = copy.deepcopy(session)
        self._publish("session", "update", record, old)
        return updated

    def _check_setups_free(self, session: Session, patch: Dict[str, Any]) -> None:
        """Caller holds the lock."""
        if patch.get("status", session.status) == SessionStatus.CANCELLED:
            return
        day = patch.get("date", session.date)
        region_id = patch.get("region_id", session.region_id)
        wanted = set(patch["setup_ids"])
        for other in self._sessions.values():
            if (
                other.id == session.id
                or other.status == SessionStatus.CANCELLED
                or other.date != day
                or other.region_id != region_id
            ):
                continue
            taken = wanted.intersection(other.setup_ids)
            if taken:
                raise WriteConflictError(
                    f"Setup(s) {', '.join(sorted(taken))} already held by session "
                    f"{other.id} on {day}",
                    field="setup_ids",
                    actual=sorted(taken),
                )

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False
            for key in [k for k in self._applications if k[0] == session_id]:
                del self._applications[key]
            record = session_to_record(session)
        self._publish("session", "delete", record)
        return True

    # ---- operators / setups / modules ----
    def get_operator(self, operator_id: str) -> Optional[Operator]:
        with self._lock:
            op = self._operators.get(operator_id)
            return copy.deepcopy(op) if op is not None else None

    def list_operators(self) -> List[Operator]:
        with self._lock:
            return [copy.deepcopy(o) for o in sorted(self._operators.values(), key=lambda o: o.id)]

    def list_operators_by_region(self, region_id: str) -> List[Operator]:
        return [o for o in self.list_operators() if o.region_id == region_id]

    def get_setup(self, setup_id: str) -> Optional[Setup]:
        with self._lock:
            setup = self._setups.get(setup_id)
            return copy.deepcopy(setup) if setup is not None else None

    def list_setups_by_region(self, region_id: str) -> List[Setup]:
        with self._lock:
            return [
                copy.deepcopy(s)
                for s in sorted(self._setups.values(), key=lambda s: s.id)
                if s.region_id == region_id
            ]

    def get_module(self, module_id: str) -> Optional[Module]:
        with self._lock:
            module = self._modules.get(module_id)
            return copy.deepcopy(module) if module is not None else None

    # ---- applications ----
    def get_application(self, session_id: str, operator_id: str) -> Optional[Application]:
        with self._lock:
            app = self._applications.get((session_id, operator_id))
            return copy.deepcopy(app) if app is not None else None

    def list_applications(
        self, session_id: Optional[str] = None, operator_id: Optional[str] = None
    ) -> List[Application]:
        with self._lock:
            return [
                copy.deepcopy(a)
                for a in self._applications.values()
                if (session_id is None or a.session_id == session_id)
                and (operator_id is None or a.operator_id == operator_id)
            ]

    def apply_to_session(self, session_id: str, operator_id: str) -> Application:
        events = []
        with self._lock:
            key = (session_id, operator_id)
            previous = self._applications.pop(key, None)
            if previous is not None:
                events.append(("delete", application_to_record(previous)))
            operator = self._operators.get(operator_id)
            application = Application(
                session_id=session_id,
                operator_id=operator_id,
                status=ApplicationStatus.PENDING,
                applied_at=self.clock(),
                id=_new_id("app"),
                operator_name=operator.name if operator is not None else None,
            )
            self._applications[key] = application
            events.append(("insert", application_to_record(application)))
            created = copy.deepcopy(application)
        for event_type, record in events:
            self._publish("application", event_type, record)
        return created

    def accept_operator(self, session_id: str, operator_id: str) -> Optional[Application]:
        with self._lock:
            application = self._applications.get((session_id, operator_id))
            if application is None:
                return None
            application.status = ApplicationStatus.ACCEPTED
            application.responded_at = self.clock()
            session = self._sessions.get(session_id)
            session_record = None
            if session is not None and operator_id not in session.operator_ids:
                old = session_to_record(session)
                session.operator_ids.append(operator_id)
                session_record = (session_to_record(session), old)
            record = application_to_record(application)
            accepted = copy.deepcopy(application)
        self._publish("application", "update", record)
        if session_record is not None:
            self._publish("session", "update", *session_record)
        return accepted

    def reject_operator(
        self, session_id: str, operator_id: str, reason: Optional[str] = None
    ) -> Optional[Application]:
        with self._lock:
            application = self._applications.get((session_id, operator_id))
            if application is None:
                return None
            application.status = ApplicationStatus.REJECTED
            application.responded_at = self.clock()
            application.rejection_reason = reason
            session = self._sessions.get(session_id)
            session_record = None
            if session is not None and operator_id in session.operator_ids:
                old = session_to_record(session)
                session.operator_ids.remove(operator_id)
                session_record = (session_to_record(session), old)
            record = application_to_record(application)
            rejected = copy.deepcopy(application)
        self._publish("application", "update", record)
        if session_record is not None:
            self._publish("session", "update", *session_record)
        return rejected

    def get_pending_applications(self, session_id: str) -> List[Application]:
        return [
            a
            for a in self.list_applications(session_id=session_id)
            if a.status == ApplicationStatus.PENDING
        ]

    def _publish(self, entity_type: str, event_type: str, payload, old=None) -> None:
        self.feed.publish(ChangeEvent(entity_type, event_type, payload, old))


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
