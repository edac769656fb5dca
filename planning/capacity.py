import logging
from typing import Any, Dict, Iterable, List, Optional

from exceptions.custom_errors import CapacityExceededError, MissingCollaboratorError
from repository.base import PlanningRepository
from utils.constants import DEFAULT_MODULE_CAPACITY
from utils.validate import non_negative_int

logger = logging.getLogger(__name__)


class ModuleCapacityService:
    """
    Session capacity derived from the selected training modules.

    The session capacity is the smallest `capacity_max` among its modules, so
    the most restrictive module wins. Modules without a limit, unknown module
    ids and an empty selection all fall back to `DEFAULT_MODULE_CAPACITY`.
    """

    def __init__(self, repository: PlanningRepository):
        if repository is None:
            raise MissingCollaboratorError("ModuleCapacityService requires a repository")
        self.repository = repository

    def compute_session_capacity(self, module_ids: Optional[Iterable[str]]) -> Dict[str, Any]:
        module_ids = list(module_ids or [])
        details: List[Dict[str, Any]] = []
        capacity_max = None
        limiting_module_id = None

        for module_id in module_ids:
            module = self.repository.get_module(module_id)
            if module is None:
                logger.warning(f"Module {module_id} not found; ignored for capacity")
                continue
            capacity = module.capacity_max or DEFAULT_MODULE_CAPACITY
            details.append(
                {
                    "moduleId": module.id,
                    "moduleName": module.name or "Unknown Module",
                    "capacityMax": capacity,
                    "hasLimit": module.capacity_max is not None,
                }
            )
            if capacity_max is None or capacity < capacity_max:
                capacity_max = capacity
                limiting_module_id = module.id

        if capacity_max is None:
            capacity_max = DEFAULT_MODULE_CAPACITY
            limiting_module_id = None

        return {
            "capacityMax": capacity_max,
            "limitingModuleId": limiting_module_id,
            "moduleCount": len(module_ids),
            "moduleDetails": details,
            "hasRestriction": limiting_module_id is not None,
        }

    def validate_participant_count(
        self, module_ids: Optional[Iterable[str]], participant_count
    ) -> Dict[str, Any]:
        """
        Return the capacity block when `participant_count` fits.

        Raises:
            ValidationFailedError: If the count is not a non-negative integer.
            CapacityExceededError: If the count exceeds the modules' capacity.
        """
        count = non_negative_int(participant_count, "requestedParticipants")
        capacity = self.compute_session_capacity(module_ids)
        if count > capacity["capacityMax"]:
            raise CapacityExceededError(
                f"{count} participants exceeds capacity of {capacity['capacityMax']}",
                capacityMax=capacity["capacityMax"],
                requestedParticipants=count,
                limitingModuleId=capacity["limitingModuleId"],
            )
        return {**capacity, "participantCount": count}
