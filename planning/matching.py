import logging
from typing import Any, Dict, List

from core.models import SessionStatus
from core.state import SessionView
from exceptions.custom_errors import MissingCollaboratorError, NotFoundError
from planning.projection import StateProjection
from utils.constants import (
    MATCH_AVAILABLE_POINTS,
    MATCH_LOAD_BASE_POINTS,
    MATCH_LOAD_STEP_POINTS,
    MATCH_REGION_POINTS,
    MATCH_SUGGESTED_COUNT,
)
from utils.results import as_result, success
from utils.validate import require_fields

logger = logging.getLogger(__name__)

FALLBACK_ACTIONS = ["NOTIFY_FOUNDERS", "ALLOW_FORCED_ASSIGNMENT", "MARK_FOR_REVIEW"]


def is_understaffed(view: SessionView) -> bool:
    """Confirmed, holding a setup, and short of its minimum operator count."""
    return (
        view.status == SessionStatus.CONFIRMED
        and bool(view.setup_ids)
        and view.staffing_gap > 0
    )


def staffing_ratio(view: SessionView) -> float:
    """Accepted operators as an unrounded percentage of the minimum."""
    if not view.min_operators:
        return 100.0
    return len(view.operator_ids) / view.min_operators * 100


def staffing_percent(view: SessionView) -> int:
    return round(staffing_ratio(view))


class MatchEngine:
    """Read-only candidate scoring over the projection. Never writes anything."""

    def __init__(self, projection: StateProjection):
        if projection is None:
            raise MissingCollaboratorError("MatchEngine requires a state projection")
        self.projection = projection

    def _session(self, session_id: str) -> SessionView:
        require_fields(sessionId=session_id)
        view = self.projection.find_session(session_id)
        if view is None:
            raise NotFoundError(f"Session {session_id} not in planning", sessionId=session_id)
        return view

    def candidates_for(self, view: SessionView) -> List[Dict[str, Any]]:
        """
        Score every operator not already accepted on the session.

        score = region match (+40) + available and active (+30)
                + max(0, 30 - 6 * same-day load)

        An operator is kept when available, or when it has no session that
        day yet. Sorted by score, highest first.
        """
        same_day = self.projection.sessions_on(view.date)
        candidates = []
        for op in self.projection.operators():
            if op.id in view.operator_ids:
                continue
            available = op.active and op.is_available_on(view.date)
            region_match = op.region_id == view.region_id
            current_load = sum(1 for s in same_day if op.id in s.operator_ids)

            score = 0
            if region_match:
                score += MATCH_REGION_POINTS
            if available:
                score += MATCH_AVAILABLE_POINTS
            score += max(0, MATCH_LOAD_BASE_POINTS - MATCH_LOAD_STEP_POINTS * current_load)

            if available or current_load == 0:
                candidates.append(
                    {
                        "operatorId": op.id,
                        "name": op.name,
                        "email": op.email,
                        "regionId": op.region_id,
                        "score": score,
                        "scoring": {
                            "regionMatch": region_match,
                            "available": available,
                            "currentLoad": current_load,
                            "alreadyApplied": op.id in view.applications,
                        },
                    }
                )

        candidates.sort(key=lambda c: (-c["score"], c["operatorId"]))
        return candidates

    @staticmethod
    def needs_fallback(candidates: List[Dict[str, Any]]) -> bool:
        return not candidates or not any(c["scoring"]["available"] for c in candidates)

    @as_result
    def suggest_operators(self, session_id: str) -> Dict[str, Any]:
        view = self._session(session_id)
        candidates = self.candidates_for(view)
        return success(
            sessionId=session_id,
            sessionDate=view.date.isoformat(),
            sessionRegion=view.region_id,
            candidates=candidates,
            suggestedCount=min(MATCH_SUGGESTED_COUNT, len(candidates)),
            founderFallbackRequired=self.needs_fallback(candidates),
        )

    @as_result
    def sessions_needing_operators(self) -> Dict[str, Any]:
        rows = []
        for view in self.projection.iter_sessions():
            if not is_understaffed(view):
                continue
            rows.append(
                {
                    "id": view.id,
                    "clientId": view.client_id,
                    "regionId": view.region_id,
                    "date": view.date.isoformat(),
                    "status": view.status.value,
                    "operatorIds": list(view.operator_ids),
                    "setupIds": list(view.setup_ids),
                    "minOperators": view.min_operators,
                    "staffingGap": view.staffing_gap,
                    "staffingPercent": staffing_percent(view),
                }
            )
        rows.sort(key=lambda r: (-r["staffingGap"], r["date"], r["id"]))
        return success(sessions=rows, count=len(rows))

    @as_result
    def founder_fallback(self, session_id: str) -> Dict[str, Any]:
        view = self._session(session_id)
        result = success(
            sessionId=session_id,
            sessionDate=view.date.isoformat(),
            required=False,
            reason=None,
            fallbackActions=[],
        )
        if not is_understaffed(view):
            return result

        candidates = self.candidates_for(view)
        if not candidates:
            reason = "NO_OPERATOR_AVAILABLE"
        elif not any(c["scoring"]["available"] for c in candidates):
            reason = "NO_QUALIFIED_OPERATOR"
        else:
            return result

        logger.warning(f"Founder fallback required for session {session_id}: {reason}")
        result.update(required=True, reason=reason, fallbackActions=list(FALLBACK_ACTIONS))
        return result
