import functools
import logging
from typing import Any, Dict

from exceptions.custom_errors import PlanningError

logger = logging.getLogger(__name__)


def success(**fields) -> Dict[str, Any]:
    return {"success": True, **fields}


def failure(code: str, message: str, **context) -> Dict[str, Any]:
    return {"success": False, "error": code, "message": message, **context}


def from_error(err: PlanningError) -> Dict[str, Any]:
    """Convert a business-rule violation into a structured failure result."""
    return failure(err.code, err.message, **err.context)


def as_result(func):
    """
    Wrap a public engine operation so that any `PlanningError` raised inside it
    comes back as a `{"success": False, ...}` dict instead of propagating.

    Other exceptions (missing collaborators, corrupted projection state) are
    left untouched: those are fatal.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PlanningError as e:
            logger.info(f"{func.__qualname__} rejected: {e.code} {e.message}")
            return from_error(e)

    return wrapper
