"""
Canonicalise raw records (seed files, change-feed payloads, API bodies) into
the dataclasses in `core.models`.

Records may arrive in camelCase or snake_case, and older sessions carry a
single `setupId` instead of `setupIds`, or `scheduledDate` instead of `date`.
All of that is resolved here so the planning engines only ever see one shape.
"""

from typing import Any, Dict, Iterable, List, Optional, Set

from core.models import (
    Application,
    ApplicationStatus,
    Module,
    Operator,
    Session,
    SessionStatus,
    Setup,
)
from exceptions.custom_errors import ValidationFailedError
from utils.constants import DEFAULT_MIN_OPERATORS
from utils.date_utils import iso, normalise_date, normalise_datetime

_MISSING = object()


def pick(record: Dict[str, Any], *keys: str, default=None):
    """Return the first present key among `keys` (None counts as absent)."""
    for key in keys:
        value = record.get(key, _MISSING)
        if value is not _MISSING and value is not None:
            return value
    return default


def require(record: Dict[str, Any], *keys: str):
    value = pick(record, *keys, default=_MISSING)
    if value is _MISSING or value == "":
        raise ValidationFailedError(
            f"Missing required field '{keys[0]}'", field=keys[0]
        )
    return value


def setup_ids_of(record: Dict[str, Any]) -> List[str]:
    """Merge the modern `setupIds` array with a legacy single `setupId`."""
    ids = pick(record, "setupIds", "setup_ids", default=[])
    if not isinstance(ids, (list, tuple)):
        ids = []
    merged = [str(s) for s in ids if s]
    legacy = pick(record, "setupId", "setup_id")
    if legacy and str(legacy) not in merged:
        merged.append(str(legacy))
    return merged


def _dates(values: Optional[Iterable]) -> Set:
    return {normalise_date(v) for v in (values or [])}


def _min_operators(record: Dict[str, Any]) -> int:
    requirement = pick(record, "operatorRequirement", "operator_requirement", default={})
    value = pick(record, "minOperators", "min_operators")
    if value is None and isinstance(requirement, dict):
        value = pick(requirement, "minOperators", "min_operators")
    return int(value) if value is not None else DEFAULT_MIN_OPERATORS


def setup_from_record(record: Dict[str, Any]) -> Setup:
    return Setup(
        id=str(require(record, "id")),
        region_id=str(require(record, "regionId", "region_id")),
        name=pick(record, "name"),
        active=pick(record, "active", default=True) is not False,
    )


def operator_from_record(record: Dict[str, Any]) -> Operator:
    return Operator(
        id=str(require(record, "id")),
        region_id=str(require(record, "regionId", "region_id")),
        name=pick(record, "name", default=""),
        email=pick(record, "email"),
        active=pick(record, "active", default=True) is not False,
        unavailable_dates=_dates(pick(record, "unavailableDates", "unavailable_dates")),
        available_dates=_dates(pick(record, "availableDates", "available_dates")),
    )


def module_from_record(record: Dict[str, Any]) -> Module:
    capacity = pick(record, "capacityMax", "capacity_max", "maxParticipants")
    return Module(
        id=str(require(record, "id")),
        name=pick(record, "name", default=""),
        capacity_max=int(capacity) if capacity is not None else None,
    )


def session_from_record(record: Dict[str, Any]) -> Session:
    status = pick(record, "status", default=SessionStatus.PENDING_CONFIRMATION.value)
    try:
        status = SessionStatus(status)
    except ValueError:
        raise ValidationFailedError(f"Unknown session status '{status}'", field="status")

    return Session(
        id=str(require(record, "id")),
        client_id=str(pick(record, "clientId", "client_id", default="")),
        region_id=str(require(record, "regionId", "region_id")),
        date=normalise_date(require(record, "date", "scheduledDate", "scheduled_date")),
        status=status,
        setup_ids=setup_ids_of(record),
        min_operators=_min_operators(record),
        marketplace_visible=pick(
            record, "marketplaceVisible", "marketplace_visible", default=True
        )
        is not False,
        operator_ids=[str(o) for o in pick(record, "operatorIds", "operator_ids", default=[])],
        module_ids=[str(m) for m in pick(record, "moduleIds", "module_ids", default=[])],
        requested_participants=int(
            pick(record, "requestedParticipants", "requested_participants", default=0)
        ),
        capacity_max=int(pick(record, "capacityMax", "capacity_max", default=0)),
        offer_id=pick(record, "offerId", "offer_id"),
        created_at=normalise_datetime(pick(record, "createdAt", "created_at")),
        confirmed_at=normalise_datetime(pick(record, "confirmedAt", "confirmed_at")),
    )


def application_from_record(record: Dict[str, Any]) -> Application:
    status = pick(record, "status", default=ApplicationStatus.PENDING.value)
    try:
        status = ApplicationStatus(status)
    except ValueError:
        raise ValidationFailedError(
            f"Unknown application status '{status}'", field="status"
        )

    return Application(
        session_id=str(require(record, "sessionId", "session_id")),
        operator_id=str(require(record, "operatorId", "operator_id")),
        status=status,
        applied_at=normalise_datetime(pick(record, "appliedAt", "applied_at")),
        responded_at=normalise_datetime(pick(record, "respondedAt", "responded_at")),
        rejection_reason=pick(record, "rejectionReason", "rejection_reason"),
        id=pick(record, "id"),
        operator_name=pick(record, "operatorName", "operator_name"),
    )


# ---- outbound: canonical objects back to camelCase records ----


def session_to_record(session: Session) -> Dict[str, Any]:
    return {
        "id": session.id,
        "clientId": session.client_id,
        "regionId": session.region_id,
        "date": iso(session.date),
        "status": session.status.value,
        "setupIds": list(session.setup_ids),
        "minOperators": session.min_operators,
        "marketplaceVisible": session.marketplace_visible,
        "operatorIds": list(session.operator_ids),
        "moduleIds": list(session.module_ids),
        "requestedParticipants": session.requested_participants,
        "capacityMax": session.capacity_max,
        "offerId": session.offer_id,
        "createdAt": iso(session.created_at),
        "confirmedAt": iso(session.confirmed_at),
    }


def application_to_record(application: Application) -> Dict[str, Any]:
    return {
        "id": application.id,
        "sessionId": application.session_id,
        "operatorId": application.operator_id,
        "operatorName": application.operator_name,
        "status": application.status.value,
        "appliedAt": iso(application.applied_at),
        "respondedAt": iso(application.responded_at),
        "rejectionReason": application.rejection_reason,
    }


def operator_to_record(operator) -> Dict[str, Any]:
    """Works for both `Operator` and the projection's `OperatorSnapshot`."""
    return {
        "id": operator.id,
        "name": operator.name,
        "email": operator.email,
        "regionId": operator.region_id,
        "active": operator.active,
        "unavailableDates": sorted(iso(d) for d in operator.unavailable_dates),
        "availableDates": sorted(iso(d) for d in operator.available_dates),
    }
