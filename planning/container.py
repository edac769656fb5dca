import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from planning.availability import AvailabilityEngine
from planning.booking import BookingEngine
from planning.capacity import ModuleCapacityService
from planning.catalog import ResourceCatalog
from planning.marketplace import MarketplaceEngine
from planning.matching import MatchEngine
from planning.projection import StateProjection
from planning.risk import RiskEngine
from planning.staffing import StaffingValidator
from repository.memory import InMemoryRepository
from utils.date_utils import system_clock

logger = logging.getLogger(__name__)


@dataclass
class PlanningServices:
    """Every engine, sharing one repository, one projection and one clock."""

    repository: InMemoryRepository
    catalog: ResourceCatalog
    capacity: ModuleCapacityService
    availability: AvailabilityEngine
    staffing: StaffingValidator
    booking: BookingEngine
    marketplace: MarketplaceEngine
    projection: StateProjection
    matching: MatchEngine
    risk: RiskEngine


def build_services(
    repository: Optional[InMemoryRepository] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> PlanningServices:
    """
    Wire the engines around `repository`.

    Engines and the repository share one clock, so `createdAt`, `appliedAt`
    and `respondedAt` stamps agree with the engines' notion of today. An
    explicit `clock` is handed to the repository as well; without one the
    engines adopt the repository's clock. A missing repository is replaced by
    an empty in-memory one.

    The projection is initialised from the repository and then subscribed to
    its change feed, so later commands flow back into it.
    """
    if repository is None:
        repository = InMemoryRepository(clock=clock or system_clock)
    elif clock is not None and repository.clock is not clock:
        logger.info("Repository clock replaced by the injected planning clock")
        repository.clock = clock
    clock = repository.clock

    catalog = ResourceCatalog(repository)
    capacity = ModuleCapacityService(repository)
    availability = AvailabilityEngine(repository, catalog, clock)
    staffing = StaffingValidator(repository)
    booking = BookingEngine(repository, availability, staffing, capacity, clock)
    marketplace = MarketplaceEngine(repository)

    projection = StateProjection(repository, clock)
    projection.initialize()
    projection.attach(repository.feed)

    matching = MatchEngine(projection)
    risk = RiskEngine(projection, matching, clock)

    return PlanningServices(
        repository=repository,
        catalog=catalog,
        capacity=capacity,
        availability=availability,
        staffing=staffing,
        booking=booking,
        marketplace=marketplace,
        projection=projection,
        matching=matching,
        risk=risk,
    )
