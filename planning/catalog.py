import logging
from datetime import date
from typing import List, Optional

from core.models import Operator, Setup
from exceptions.custom_errors import MissingCollaboratorError
from repository.base import PlanningRepository

logger = logging.getLogger(__name__)


class ResourceCatalog:
    """Read accessor for per-region setup inventory and operator roster."""

    def __init__(self, repository: PlanningRepository):
        if repository is None:
            raise MissingCollaboratorError("ResourceCatalog requires a repository")
        self.repository = repository

    def setups_in_region(self, region_id: str, active_only: bool = True) -> List[Setup]:
        setups = self.repository.list_setups_by_region(region_id)
        if active_only:
            setups = [s for s in setups if s.active]
        return sorted(setups, key=lambda s: s.id)

    def active_setup_ids(self, region_id: str) -> List[str]:
        return [s.id for s in self.setups_in_region(region_id)]

    def operators_in_region(self, region_id: str, active_only: bool = True) -> List[Operator]:
        operators = self.repository.list_operators_by_region(region_id)
        if active_only:
            operators = [o for o in operators if o.active]
        return operators

    def available_operators(self, region_id: str, day: date) -> List[Operator]:
        """Active operators of the region whose declared availability covers `day`."""
        return [o for o in self.operators_in_region(region_id) if o.is_available_on(day)]

    def get_operator(self, operator_id: str) -> Optional[Operator]:
        return self.repository.get_operator(operator_id)

    def get_setup(self, setup_id: str) -> Optional[Setup]:
        return self.repository.get_setup(setup_id)
