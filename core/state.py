from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Set, Tuple

from core.models import ApplicationStatus, SessionStatus


def application_recency(applied_at: Optional[datetime], responded_at: Optional[datetime]):
    """
    Ordering key for two versions of the same application, or None when it
    carries no timestamp. A response outranks an application made at the same
    instant.
    """
    stamp = responded_at or applied_at
    if stamp is None:
        return None
    return (stamp, responded_at is not None)


@dataclass
class ApplicationRecord:
    """Denormalised copy of an application, kept on its session view."""

    operator_id: str
    status: ApplicationStatus
    applied_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    application_id: Optional[str] = None

    @property
    def recency(self):
        return application_recency(self.applied_at, self.responded_at)


@dataclass
class SessionView:
    """A session as the projection sees it, with its applications inlined."""

    id: str
    client_id: str
    region_id: str
    date: date
    status: SessionStatus
    setup_ids: List[str] = field(default_factory=list)
    marketplace_visible: bool = True
    min_operators: int = 1
    capacity_max: int = 0
    operator_ids: List[str] = field(default_factory=list)
    """Accepted operators. Owned by application events only."""
    applications: Dict[str, ApplicationRecord] = field(default_factory=dict)
    """Applications keyed by operator id."""

    @property
    def staffing_gap(self) -> int:
        return max(0, self.min_operators - len(self.operator_ids))

    @property
    def holds_setups(self) -> bool:
        return self.status != SessionStatus.CANCELLED


@dataclass
class OperatorSnapshot:
    """Operator roster entry, replaced wholesale on every operator event."""

    id: str
    name: str
    email: Optional[str]
    region_id: str
    active: bool
    unavailable_dates: Set[date] = field(default_factory=set)
    available_dates: Set[date] = field(default_factory=set)

    def is_available_on(self, day: date) -> bool:
        if day in self.unavailable_dates:
            return False
        if self.available_dates:
            return day in self.available_dates
        return True


@dataclass
class PlanningState:
    """
    A dataclass to hold the in-memory planning read model.

    It is a pure cache of the repository. It is rebuilt on initialisation and
    patched by change events; it is never authoritative.
    """

    sessions_by_date: Dict[date, Dict[str, SessionView]] = field(default_factory=dict)
    """Sessions grouped by calendar day, then keyed by session id."""
    operators_busy: Dict[str, Set[date]] = field(default_factory=dict)
    """Dates on which each operator is accepted on at least one session."""
    setups_busy: Dict[str, Set[date]] = field(default_factory=dict)
    """Dates on which each setup is held by a non-cancelled session."""
    operators_available: Dict[str, OperatorSnapshot] = field(default_factory=dict)
    """Operator roster keyed by operator id."""

    # reverse indexes
    session_dates: Dict[str, date] = field(default_factory=dict)
    """Session id to the date bucket holding it."""
    busy_operators_by_date: Dict[date, Set[str]] = field(default_factory=dict)
    """Inverse of `operators_busy`."""
    busy_setups_by_date: Dict[date, Set[str]] = field(default_factory=dict)
    """Inverse of `setups_busy`."""

    def clear(self) -> None:
        self.sessions_by_date.clear()
        self.operators_busy.clear()
        self.setups_busy.clear()
        self.operators_available.clear()
        self.session_dates.clear()
        self.busy_operators_by_date.clear()
        self.busy_setups_by_date.clear()


@dataclass
class SyncMonitor:
    """Counters describing the projection's synchronisation health."""

    sync_status: str = "initializing"
    total_sessions: int = 0
    total_assignments: int = 0
    total_operators: int = 0
    update_count: int = 0
    dropped_events: int = 0
    last_update: Optional[datetime] = None


@dataclass(frozen=True)
class PlanningSnapshot:
    """Read-only view of the planning state, safe to hand to callers."""

    sessions_by_date: Mapping[date, Tuple[SessionView, ...]]
    operators_busy: Mapping[str, Tuple[date, ...]]
    setups_busy: Mapping[str, Tuple[date, ...]]
    operators_available: Mapping[str, OperatorSnapshot]

    @classmethod
    def from_state(cls, state: PlanningState) -> "PlanningSnapshot":
        # views and snapshots are copied so later patches do not leak in
        return cls(
            sessions_by_date=MappingProxyType(
                {
                    day: tuple(copy_view(v) for v in bucket.values())
                    for day, bucket in sorted(state.sessions_by_date.items())
                }
            ),
            operators_busy=MappingProxyType(
                {op: tuple(sorted(days)) for op, days in state.operators_busy.items()}
            ),
            setups_busy=MappingProxyType(
                {sid: tuple(sorted(days)) for sid, days in state.setups_busy.items()}
            ),
            operators_available=MappingProxyType(
                {
                    op_id: copy_operator(op)
                    for op_id, op in state.operators_available.items()
                }
            ),
        )


def copy_view(view: SessionView) -> SessionView:
    return SessionView(
        id=view.id,
        client_id=view.client_id,
        region_id=view.region_id,
        date=view.date,
        status=view.status,
        setup_ids=list(view.setup_ids),
        marketplace_visible=view.marketplace_visible,
        min_operators=view.min_operators,
        capacity_max=view.capacity_max,
        operator_ids=list(view.operator_ids),
        applications={
            op_id: ApplicationRecord(
                operator_id=rec.operator_id,
                status=rec.status,
                applied_at=rec.applied_at,
                responded_at=rec.responded_at,
                rejection_reason=rec.rejection_reason,
                application_id=rec.application_id,
            )
            for op_id, rec in view.applications.items()
        },
    )


def copy_operator(op: OperatorSnapshot) -> OperatorSnapshot:
    return OperatorSnapshot(
        id=op.id,
        name=op.name,
        email=op.email,
        region_id=op.region_id,
        active=op.active,
        unavailable_dates=set(op.unavailable_dates),
        available_dates=set(op.available_dates),
    )
