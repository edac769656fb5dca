from repository.base import PlanningRepository
from repository.feed import ChangeEvent, ChangeFeed
from repository.memory import InMemoryRepository

__all__ = ["PlanningRepository", "ChangeEvent", "ChangeFeed", "InMemoryRepository"]
