from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional

from core.models import Application, Module, Operator, Session, SessionStatus, Setup


class PlanningRepository(ABC):
    """
    Authoritative store consumed by the booking and marketplace engines.

    Lookups return None (or an empty list) when nothing matches; absence is
    never signalled with an exception. Implementations should publish every
    committed mutation so the in-memory projection can follow along.
    """

    # ---- sessions ----
    @abstractmethod
    def get_session(self, session_id: str) -> Optional[Session]: ...

    @abstractmethod
    def list_sessions(
        self,
        region_id: Optional[str] = None,
        date: Optional[date] = None,
        status: Optional[SessionStatus] = None,
    ) -> List[Session]: ...

    @abstractmethod
    def create_session(self, session: Session) -> Session: ...

    @abstractmethod
    def update_session(
        self,
        session_id: str,
        patch: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> Optional[Session]:
        """
        Apply `patch` (dataclass field names) atomically; None if the session is gone.

        Every `expected` field must still hold its value when the write lands,
        and a patch carrying `setup_ids` must not claim a setup already held by
        another non-cancelled session on the same date and region. Either
        failure raises `WriteConflictError` and leaves the session untouched.
        """

    @abstractmethod
    def delete_session(self, session_id: str) -> bool: ...

    # ---- operators / setups / modules ----
    @abstractmethod
    def get_operator(self, operator_id: str) -> Optional[Operator]: ...

    @abstractmethod
    def list_operators(self) -> List[Operator]: ...

    @abstractmethod
    def list_operators_by_region(self, region_id: str) -> List[Operator]: ...

    @abstractmethod
    def get_setup(self, setup_id: str) -> Optional[Setup]: ...

    @abstractmethod
    def list_setups_by_region(self, region_id: str) -> List[Setup]: ...

    @abstractmethod
    def get_module(self, module_id: str) -> Optional[Module]: ...

    # ---- applications ----
    @abstractmethod
    def get_application(self, session_id: str, operator_id: str) -> Optional[Application]: ...

    @abstractmethod
    def list_applications(
        self, session_id: Optional[str] = None, operator_id: Optional[str] = None
    ) -> List[Application]: ...

    @abstractmethod
    def apply_to_session(self, session_id: str, operator_id: str) -> Application:
        """Insert a pending application, replacing a previously rejected one."""

    @abstractmethod
    def accept_operator(self, session_id: str, operator_id: str) -> Optional[Application]:
        """Flip to accepted and add the operator to the session's accepted set."""

    @abstractmethod
    def reject_operator(
        self, session_id: str, operator_id: str, reason: Optional[str] = None
    ) -> Optional[Application]:
        """Flip to rejected and drop the operator from the session's accepted set."""

    @abstractmethod
    def get_pending_applications(self, session_id: str) -> List[Application]: ...
