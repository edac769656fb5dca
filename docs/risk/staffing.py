risk_sessions_description = """
Understaffed confirmed sessions ordered by risk level (CRITICAL first), then
by how soon they happen.

### Levels (first match wins)

1. `CRITICAL`: less than 48 hours away with a staffing gap.
2. `HIGH`: less than 5 days away and under 50% staffed.
3. `MEDIUM`: a single available candidate, or less than 5 days away with a gap.
4. `LOW`: anything else.

Each record carries a `fallbackProbability` (0-100).
"""

session_risk_description = """
Risk record of one session with a `timeline` block. Fully staffed sessions
return `riskLevel: LOW` with reason `Fully staffed`.
"""

operator_overload_description = """
Same-day load of an operator. More than 4 confirmed sessions on one day is an
overload; the risk level escalates to HIGH above 5 and CRITICAL above 6.
"""

understaffed_description = """
Confirmed sessions holding a setup but short of operators, largest gap first.
"""
