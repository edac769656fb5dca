import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

import pandas as pd

from core.models import Session, SessionStatus
from exceptions.custom_errors import MissingCollaboratorError, ValidationFailedError
from planning.catalog import ResourceCatalog
from repository.base import PlanningRepository
from utils.constants import (
    CALENDAR_HORIZON_DAYS,
    FIRST_AVAILABLE_HORIZON_DAYS,
    MAX_SEARCH_HORIZON_DAYS,
    NEXT_AVAILABLE_HORIZON_DAYS,
    SUGGESTED_DATES_COUNT,
)
from utils.date_utils import date_range, system_clock
from utils.results import as_result, success
from utils.validate import parse_day, require_fields

logger = logging.getLogger(__name__)


class AvailabilityEngine:
    """
    How many setups can be sold on a (date, region).

    A setup only counts as sellable when an operator could run it, so the
    bookable figure is `min(freeSetups, operatorsAvailable)`. Operators already
    accepted on another session that day are not subtracted from the pool.
    Nothing here is cached: every call re-derives from the repository.
    """

    def __init__(
        self,
        repository: PlanningRepository,
        catalog: ResourceCatalog,
        clock: Callable[[], datetime] = system_clock,
    ):
        if repository is None:
            raise MissingCollaboratorError("AvailabilityEngine requires a repository")
        if catalog is None:
            raise MissingCollaboratorError("AvailabilityEngine requires a resource catalog")
        self.repository = repository
        self.catalog = catalog
        self.clock = clock

    # ---- core computation ----
    def _compute(
        self, day: date, region_id: str, sessions: Optional[Iterable[Session]] = None
    ) -> Dict[str, Any]:
        active_ids = set(self.catalog.active_setup_ids(region_id))
        if sessions is None:
            sessions = self.repository.list_sessions(region_id=region_id, date=day)

        used_by = []
        used = set()
        for s in sessions:
            if s.status == SessionStatus.CANCELLED or s.region_id != region_id:
                continue
            held = [sid for sid in s.setup_ids if sid in active_ids]
            if held:
                used.update(held)
                used_by.append({"sessionId": s.id, "setupIds": held, "status": s.status.value})

        free_ids = sorted(active_ids - used)
        operators_available = len(self.catalog.available_operators(region_id, day))
        available = min(len(free_ids), operators_available)

        return {
            "date": day.isoformat(),
            "regionId": region_id,
            "totalSetups": len(active_ids),
            "usedSetups": len(used),
            "freeSetups": len(free_ids),
            "freeSetupIds": free_ids,
            "operatorsAvailable": operators_available,
            "availableSetups": max(0, available),
            "isAvailable": available > 0,
            "details": {"usedBy": used_by},
        }

    def _today(self) -> date:
        return self.clock().date()

    @staticmethod
    def _bounded(value: int, field: str) -> int:
        if not isinstance(value, int) or not 1 <= value <= MAX_SEARCH_HORIZON_DAYS:
            raise ValidationFailedError(
                f"'{field}' must be between 1 and {MAX_SEARCH_HORIZON_DAYS}", field=field
            )
        return value

    def _scan(self, region_id: str, count: int, horizon: int) -> List[date]:
        """Bounded linear scan from today for up to `count` bookable dates."""
        found: List[date] = []
        for day in date_range(self._today(), horizon):
            if len(found) >= count:
                break
            if self._compute(day, region_id)["availableSetups"] >= 1:
                found.append(day)
        return found

    # ---- public queries ----
    @as_result
    def get_availability(self, date, region_id: str) -> Dict[str, Any]:
        require_fields(date=date, regionId=region_id)
        day = parse_day(date)
        result = self._compute(day, region_id)
        result.pop("freeSetupIds")
        return success(**result)

    def is_date_available(self, date, region_id: str, required_count: int = 1) -> bool:
        """False for missing or malformed input as well as for full dates."""
        if not date or not region_id:
            return False
        try:
            day = parse_day(date)
        except ValidationFailedError:
            return False
        return self._compute(day, region_id)["availableSetups"] >= required_count

    def free_setup_ids(self, date, region_id: str) -> List[str]:
        """Active region setups not held by a non-cancelled session, lowest id first."""
        return self._compute(parse_day(date), region_id)["freeSetupIds"]

    def suggest_dates(self, region_id: str, count: int = SUGGESTED_DATES_COUNT) -> List[str]:
        return [d.isoformat() for d in self._scan(region_id, count, NEXT_AVAILABLE_HORIZON_DAYS)]

    @as_result
    def first_available_date(
        self, region_id: str, days_ahead: int = FIRST_AVAILABLE_HORIZON_DAYS
    ) -> Dict[str, Any]:
        require_fields(regionId=region_id)
        self._bounded(days_ahead, "daysAhead")
        found = self._scan(region_id, 1, days_ahead)
        return success(
            regionId=region_id,
            daysAhead=days_ahead,
            firstAvailableDate=found[0].isoformat() if found else None,
        )

    @as_result
    def next_available_dates(
        self,
        region_id: str,
        count: int = SUGGESTED_DATES_COUNT,
        max_days_search: int = NEXT_AVAILABLE_HORIZON_DAYS,
    ) -> Dict[str, Any]:
        require_fields(regionId=region_id)
        self._bounded(count, "count")
        self._bounded(max_days_search, "maxDaysSearch")
        found = self._scan(region_id, count, max_days_search)
        return success(
            regionId=region_id,
            count=len(found),
            dates=[d.isoformat() for d in found],
        )

    @as_result
    def availability_calendar(
        self, region_id: str, days_ahead: int = CALENDAR_HORIZON_DAYS
    ) -> Dict[str, Any]:
        require_fields(regionId=region_id)
        self._bounded(days_ahead, "daysAhead")
        return success(**self._calendar(region_id, days_ahead))

    def _calendar(self, region_id: str, days_ahead: int) -> Dict[str, Any]:
        start = self._today()
        sessions_by_day: Dict[date, List[Session]] = {}
        for s in self.repository.list_sessions(region_id=region_id):
            sessions_by_day.setdefault(s.date, []).append(s)

        days = []
        for day in date_range(start, days_ahead):
            a = self._compute(day, region_id, sessions_by_day.get(day, []))
            days.append(
                {
                    "date": a["date"],
                    "dayOfWeek": day.strftime("%A"),
                    "availableSetups": a["availableSetups"],
                    "operatorsAvailable": a["operatorsAvailable"],
                    "isAvailable": a["isAvailable"],
                    "usedSetups": a["usedSetups"],
                }
            )

        total_setups = len(self.catalog.active_setup_ids(region_id))
        slots = days_ahead * total_setups
        sold = sum(d["availableSetups"] for d in days)
        return {
            "regionId": region_id,
            "startDate": start.isoformat(),
            "daysAhead": days_ahead,
            "totalSetups": total_setups,
            "days": days,
            "summary": {
                "totalDays": len(days),
                "availableDays": sum(1 for d in days if d["isAvailable"]),
                "utilizationPercentage": round((slots - sold) / slots * 100) if slots > 0 else 0,
            },
        }

    @as_result
    def capacity_analysis(
        self, region_id: str, days_ahead: int = CALENDAR_HORIZON_DAYS
    ) -> Dict[str, Any]:
        """
        Utilisation and constraint overview for the next `days_ahead` days.

        Returns:
            period, capacity (setups, potential slots), utilization (booked
            slots, percentage, peak and slowest day) and constraints (days with
            no operator, days fully booked, days partially available).
        """
        require_fields(regionId=region_id)
        self._bounded(days_ahead, "daysAhead")
        calendar = self._calendar(region_id, days_ahead)
        total_setups = calendar["totalSetups"]
        df = pd.DataFrame(calendar["days"])

        peak_day = slowest_day = None
        booked = 0
        constraints = {
            "daysWithoutOperators": 0,
            "daysFullyBooked": 0,
            "daysPartiallyAvailable": 0,
        }
        if not df.empty:
            booked = int(df["usedSetups"].sum())
            # idxmax/idxmin return the first occurrence, so ties go to the earliest day
            peak = df.loc[df["usedSetups"].idxmax()]
            slow = df.loc[df["usedSetups"].idxmin()]
            peak_day = {
                "date": peak["date"],
                "usedSetups": int(peak["usedSetups"]),
                "availableSetups": int(peak["availableSetups"]),
            }
            slowest_day = {
                "date": slow["date"],
                "usedSetups": int(slow["usedSetups"]),
                "availableSetups": int(slow["availableSetups"]),
            }
            constraints = {
                "daysWithoutOperators": int((df["operatorsAvailable"] == 0).sum()),
                "daysFullyBooked": int((df["availableSetups"] == 0).sum()),
                "daysPartiallyAvailable": int(
                    ((df["availableSetups"] > 0) & (df["availableSetups"] < total_setups)).sum()
                ),
            }

        return success(
            regionId=region_id,
            period={"days": days_ahead, "startDate": calendar["startDate"]},
            capacity={
                "totalSetups": total_setups,
                "potentialSessionSlots": total_setups * days_ahead,
            },
            utilization={
                "bookedSessionSlots": booked,
                "utilizationPercentage": calendar["summary"]["utilizationPercentage"],
                "peakDay": peak_day,
                "slowestDay": slowest_day,
            },
            constraints=constraints,
        )
