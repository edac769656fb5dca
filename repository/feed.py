import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

ENTITY_TYPES = ("session", "application", "operator")
EVENT_TYPES = ("insert", "update", "delete")


@dataclass
class ChangeEvent:
    """A committed change in the repository, as seen by the projection."""

    entity_type: str
    """One of `session`, `application`, `operator`."""
    event_type: str
    """One of `insert`, `update`, `delete`."""
    payload: Dict[str, Any] = field(default_factory=dict)
    """The record after the change (the removed record for deletes)."""
    old: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.entity_type not in ENTITY_TYPES:
            raise ValueError(f"Unknown entity type: {self.entity_type}")
        if self.event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {self.event_type}")


class ChangeFeed:
    """Synchronous in-process publish/subscribe channel for `ChangeEvent`s."""

    def __init__(self):
        self._subscribers: List[Callable[[ChangeEvent], None]] = []

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    f"Subscriber failed on {event.entity_type}/{event.event_type}"
                )
                raise
