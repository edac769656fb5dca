import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from core.models import SessionStatus
from core.state import SessionView
from exceptions.custom_errors import MissingCollaboratorError, NotFoundError
from planning.matching import MatchEngine, is_understaffed, staffing_ratio
from planning.projection import StateProjection
from utils.constants import (
    FALLBACK_BASE_PROBABILITY,
    FALLBACK_FEWER_THAN_GAP,
    FALLBACK_GAP_WEIGHT,
    FALLBACK_NEXT_DAY,
    FALLBACK_NO_CANDIDATE,
    FALLBACK_ONE_CANDIDATE,
    FALLBACK_SAME_DAY,
    FALLBACK_WITHIN_THREE_DAYS,
    OVERLOAD_CRITICAL_SESSIONS,
    OVERLOAD_HIGH_SESSIONS,
    OVERLOAD_SESSIONS,
    RISK_CRITICAL_HOURS,
    RISK_HIGH_DAYS,
    RISK_HIGH_STAFFING_PERCENT,
)
from utils.date_utils import days_until, system_clock
from utils.results import as_result, success
from utils.validate import require_fields

logger = logging.getLogger(__name__)

RISK_LEVELS = ("CRITICAL", "HIGH", "MEDIUM", "LOW")
RISK_ORDER = {level: i for i, level in enumerate(RISK_LEVELS)}


def classify(days: int, gap: int, percent: float, available_candidates: int):
    """
    First matching rule wins. `percent` is compared unrounded.

    Returns:
        (level, risk factors, recommended actions)
    """
    hours = days * 24
    if hours < RISK_CRITICAL_HOURS and gap > 0:
        return (
            "CRITICAL",
            [f"Session in {hours} hours with {gap} gap"],
            ["URGENT_FOUNDER_NOTIFICATION", "ALLOW_EMERGENCY_ASSIGNMENT"],
        )
    if days < RISK_HIGH_DAYS and percent < RISK_HIGH_STAFFING_PERCENT:
        return (
            "HIGH",
            [f"{days} days until session", f"Only {round(percent)}% staffed"],
            ["ACCELERATE_APPLICATIONS", "CONTACT_CANDIDATES"],
        )
    if available_candidates == 1 and gap > 0:
        return (
            "MEDIUM",
            ["Only 1 candidate available"],
            ["SECURE_BACKUP_CANDIDATES", "PREPARE_FALLBACK_PLAN"],
        )
    if days < RISK_HIGH_DAYS and gap > 0:
        return (
            "MEDIUM",
            [f"{days} days until session with gap"],
            ["MONITOR_CLOSELY", "PREPARE_FALLBACK_PLAN"],
        )
    if gap == 0:
        return "LOW", ["Fully staffed"], []
    return "LOW", [], []


def fallback_probability(level: str, gap: int, available_candidates: int, days: int) -> int:
    """Additive estimate, clamped to 0..100, that founders will have to step in."""
    probability = FALLBACK_BASE_PROBABILITY.get(level, 0)
    probability += FALLBACK_GAP_WEIGHT * gap

    if available_candidates == 0:
        probability += FALLBACK_NO_CANDIDATE
    elif available_candidates == 1:
        probability += FALLBACK_ONE_CANDIDATE
    elif available_candidates < gap:
        probability += FALLBACK_FEWER_THAN_GAP

    # past dates count as same-day so the estimate never drops as the date nears
    if days <= 0:
        probability += FALLBACK_SAME_DAY
    elif days == 1:
        probability += FALLBACK_NEXT_DAY
    elif days < 3:
        probability += FALLBACK_WITHIN_THREE_DAYS

    return max(0, min(100, probability))


def overload_level(max_load: int) -> str:
    if max_load > OVERLOAD_CRITICAL_SESSIONS:
        return "CRITICAL"
    if max_load > OVERLOAD_HIGH_SESSIONS:
        return "HIGH"
    if max_load > OVERLOAD_SESSIONS:
        return "MEDIUM"
    return "LOW"


class RiskEngine:
    """
    Proactive staffing risk over the projection.

    Only confirmed sessions holding a setup and short of operators get a risk
    record; fully staffed sessions produce none.
    """

    def __init__(
        self,
        projection: StateProjection,
        matcher: MatchEngine,
        clock: Callable[[], datetime] = system_clock,
    ):
        if projection is None:
            raise MissingCollaboratorError("RiskEngine requires a state projection")
        if matcher is None:
            raise MissingCollaboratorError("RiskEngine requires a match engine")
        self.projection = projection
        self.matcher = matcher
        self.clock = clock

    def _today(self) -> date:
        return self.clock().date()

    def session_risk_for(self, view: SessionView) -> Optional[Dict[str, Any]]:
        if not is_understaffed(view):
            return None

        gap = view.staffing_gap
        percent = staffing_ratio(view)
        candidates = self.matcher.candidates_for(view)
        available = sum(1 for c in candidates if c["scoring"]["available"])
        days = days_until(view.date, self._today())

        level, factors, actions = classify(days, gap, percent, available)
        return {
            "sessionId": view.id,
            "clientId": view.client_id,
            "regionId": view.region_id,
            "date": view.date.isoformat(),
            "daysUntil": days,
            "riskLevel": level,
            "staffingGap": gap,
            "staffingPercent": round(percent),
            "candidateCount": len(candidates),
            "availableCandidates": available,
            "fallbackProbability": fallback_probability(level, gap, available, days),
            "riskFactors": factors,
            "recommendedActions": actions,
        }

    @as_result
    def risk_sessions(self) -> Dict[str, Any]:
        risks = []
        for view in self.projection.iter_sessions():
            risk = self.session_risk_for(view)
            if risk is not None:
                risks.append(risk)
        risks.sort(key=lambda r: (RISK_ORDER[r["riskLevel"]], r["daysUntil"], r["sessionId"]))

        summary = {level: 0 for level in RISK_LEVELS}
        for r in risks:
            summary[r["riskLevel"]] += 1
        if summary["CRITICAL"]:
            logger.warning(f"{summary['CRITICAL']} session(s) at CRITICAL staffing risk")
        return success(sessions=risks, count=len(risks), summary=summary)

    @as_result
    def session_risk(self, session_id: str) -> Dict[str, Any]:
        require_fields(sessionId=session_id)
        view = self.projection.find_session(session_id)
        if view is None:
            raise NotFoundError(f"Session {session_id} not in planning", sessionId=session_id)

        risk = self.session_risk_for(view)
        if risk is None:
            return success(sessionId=session_id, riskLevel="LOW", reason="Fully staffed")

        hours = risk["daysUntil"] * 24
        return success(
            **risk,
            timeline={
                "daysUntil": risk["daysUntil"],
                "hoursUntil": hours,
                "minutesUntil": hours * 60,
                "isCriticalWindow": hours < RISK_CRITICAL_HOURS,
            },
        )

    @as_result
    def operator_overload(self, operator_id: str) -> Dict[str, Any]:
        require_fields(operatorId=operator_id)
        operator = self.projection.operator(operator_id)
        if operator is None:
            raise NotFoundError(f"Operator {operator_id} not in planning", operatorId=operator_id)

        by_date: Dict[date, List[SessionView]] = {}
        for day in self.projection.busy_dates(operator_id):
            assigned = [
                s
                for s in self.projection.sessions_on(day)
                if s.status == SessionStatus.CONFIRMED and operator_id in s.operator_ids
            ]
            if assigned:
                by_date[day] = sorted(assigned, key=lambda s: s.id)

        overloads = []
        max_load, max_load_date = 0, None
        for day in sorted(by_date):
            sessions = by_date[day]
            if len(sessions) > OVERLOAD_SESSIONS:
                overloads.append(
                    {
                        "date": day.isoformat(),
                        "sessionCount": len(sessions),
                        "sessions": [{"sessionId": s.id, "clientId": s.client_id} for s in sessions],
                    }
                )
            if len(sessions) > max_load:
                max_load, max_load_date = len(sessions), day

        return success(
            operatorId=operator_id,
            name=operator.name,
            email=operator.email,
            regionId=operator.region_id,
            currentLoad=sum(len(s) for s in by_date.values()),
            isOverloaded=bool(overloads),
            overloadCount=len(overloads),
            overloadSessions=overloads,
            riskLevel=overload_level(max_load),
            busyDates=[d.isoformat() for d in sorted(by_date)],
            maxLoadDate=max_load_date.isoformat() if max_load_date else None,
            maxLoadCount=max_load,
            availabilityStatus="ACTIVE" if operator.active else "INACTIVE",
        )

    def understaffed_sessions(self) -> Dict[str, Any]:
        return self.matcher.sessions_needing_operators()
