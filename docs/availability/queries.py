availability_day_description = """
Bookable setups for one region on one day.

### Path Parameters

- `region_id` (str): Region identifier, e.g. `east`.
- `date` (str): Calendar day, `YYYY-MM-DD`.

### Response

```json
{
    "success": true,
    "date": "2025-01-10",
    "regionId": "east",
    "totalSetups": 2,
    "usedSetups": 0,
    "freeSetups": 2,
    "operatorsAvailable": 1,
    "availableSetups": 1,
    "isAvailable": true,
    "details": {"usedBy": []}
}
```

- `availableSetups` is `min(freeSetups, operatorsAvailable)`: a free setup
  without an operator able to run it cannot be sold.
- Operators already accepted on another session that day still count as
  available.
"""

availability_next_description = """
Next bookable dates for a region, scanning forward from today.

### Query Parameters

- `count` (int, default 5): How many dates to return.
- `maxDaysSearch` (int, default 180): Scan horizon in days.
"""

availability_first_description = """
First bookable date for a region within `daysAhead` days (default 90).
`firstAvailableDate` is `null` when nothing is free in the window.
"""

availability_calendar_description = """
Day-by-day availability for the next `daysAhead` days (default 90), with a
summary of available days and the utilisation percentage.
"""

capacity_analysis_description = """
Capacity overview for the next `daysAhead` days (default 90).

### Response blocks

- `capacity`: active setups and potential session slots.
- `utilization`: booked slots, utilisation percentage, peak and slowest day.
- `constraints`: days without any operator, days fully booked, days
  partially available.
"""
