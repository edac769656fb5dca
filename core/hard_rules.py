from dataclasses import dataclass
from typing import Callable

from core.models import SessionStatus


@dataclass
class StaffingContext:
    """Facts a confirmation rule is evaluated against."""

    status: SessionStatus
    setup_count: int
    required_operators: int
    assigned_operators: int


@dataclass
class HardRule:
    check: Callable[[StaffingContext], bool]
    message: str


def define_hard_rules() -> dict[str, HardRule]:
    """Confirmation rules keyed by the reason code reported when they fail."""
    return {
        "INVALID_STATUS": HardRule(
            lambda ctx: ctx.status == SessionStatus.PENDING_CONFIRMATION,
            "Session must be pending confirmation.",
        ),
        "NO_SETUP_ASSIGNED": HardRule(
            lambda ctx: ctx.setup_count >= 1,
            "At least one setup must be assigned.",
        ),
        "NO_OPERATOR_ASSIGNED": HardRule(
            lambda ctx: ctx.assigned_operators >= ctx.required_operators,
            "Accepted operators do not cover the minimum requirement.",
        ),
        # Add others as needed
    }
