from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Set

from utils.constants import DEFAULT_MIN_OPERATORS


class SessionStatus(str, Enum):
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class Setup:
    """A bookable simulator rig, scoped to one region."""

    id: str
    region_id: str
    name: Optional[str] = None
    active: bool = True


@dataclass
class Operator:
    """A field staff member who can work sessions through the marketplace."""

    id: str
    region_id: str
    name: str = ""
    email: Optional[str] = None
    active: bool = True
    unavailable_dates: Set[date] = field(default_factory=set)
    """Dates the operator declared they cannot work."""
    available_dates: Set[date] = field(default_factory=set)
    """Optional whitelist. When non-empty, only these dates are workable."""

    def is_available_on(self, day: date) -> bool:
        """Declared availability only; does not look at the `active` flag."""
        if day in self.unavailable_dates:
            return False
        if self.available_dates:
            return day in self.available_dates
        return True


@dataclass
class Module:
    """A training module; the most restrictive one caps session capacity."""

    id: str
    name: str = ""
    capacity_max: Optional[int] = None


@dataclass
class Session:
    """A client's training event on one calendar day."""

    id: str
    client_id: str
    region_id: str
    date: date
    status: SessionStatus = SessionStatus.PENDING_CONFIRMATION
    setup_ids: List[str] = field(default_factory=list)
    min_operators: int = DEFAULT_MIN_OPERATORS
    marketplace_visible: bool = True
    operator_ids: List[str] = field(default_factory=list)
    """Accepted operators. Derived from applications, never set directly."""
    module_ids: List[str] = field(default_factory=list)
    requested_participants: int = 0
    capacity_max: int = 0
    offer_id: Optional[str] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None


@dataclass
class Application:
    """An operator's request to work a specific session."""

    session_id: str
    operator_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    applied_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    id: Optional[str] = None
    operator_name: Optional[str] = None
