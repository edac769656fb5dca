daily_planning_description = """
All sessions on a day as held by the in-memory planning projection, with the
operators and setups busy that day.
"""

operator_load_description = """
Sessions an operator is accepted on, sorted by date.
"""

candidates_description = """
Scored operator candidates for a session.

### Scoring

- +40 when the operator is in the session's region.
- +30 when the operator is active and available that day.
- `max(0, 30 - 6 x load)`, where load is the number of sessions the operator
  already works that day.

`suggestedCount` is capped at 3; the full sorted list is returned.
`founderFallbackRequired` is true when nobody available can be suggested.
"""

monitor_description = """
Synchronisation counters of the planning projection.
"""

resync_description = """
Rebuild the planning projection from the repository. Use when the projection
is suspected to have drifted.
"""
